"""Meditation preparation pipeline package.

Modules are organised by the order in which a session is prepared:

1. `retrieval` – optional inspiration lines for the prompt.
2. `prompts` – assemble the Bedrock system/user prompts.
3. `script` – call the model and validate the six-phase contract.
4. `narration` – synthesize, upload and sign per-phase audio.
"""

from .narration import NARRATION_CONCURRENCY, synthesize_all, synthesize_one
from .prompts import SYSTEM_PROMPT, build_user_prompt
from .retrieval import rank_chunks, retrieve_inspiration
from .script import build_script_request, generate_script
from .types import NarrationMode, ScriptRequest, StreamedNarration, UploadedNarration

__all__ = [
    "NARRATION_CONCURRENCY",
    "NarrationMode",
    "SYSTEM_PROMPT",
    "ScriptRequest",
    "StreamedNarration",
    "UploadedNarration",
    "build_script_request",
    "build_user_prompt",
    "generate_script",
    "rank_chunks",
    "retrieve_inspiration",
    "synthesize_all",
    "synthesize_one",
]
