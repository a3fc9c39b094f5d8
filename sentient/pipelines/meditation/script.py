"""Script generation stage: one LLM call producing exactly six phases."""

from __future__ import annotations

import logging
from typing import Optional

from sentient.domain.errors import (
    MeditationPipelineError,
    UpstreamUnavailable,
    ValidationError,
)
from sentient.services.llm_client import LlmInvocationError, get_llm_client
from sentient.services.response_contract import (
    MeditationPhase,
    ScriptErr,
    ScriptResult,
    parse_meditation_script,
)
from sentient.telemetry import SCRIPT_FAILURES, SCRIPTS_GENERATED, time_stage

from .prompts import SYSTEM_PROMPT, build_user_prompt
from .retrieval import retrieve_inspiration
from .types import ScriptRequest

logger = logging.getLogger("sentient.services.meditation_pipeline")

_LLM_CLIENT = get_llm_client()


def _truncate(value: str, max_length: int = 500) -> str:
    if len(value) <= max_length:
        return value
    return value[: max_length - 3] + "..."


def build_script_request(
    start: Optional[str],
    destination: Optional[str],
    note: Optional[str] = None,
) -> ScriptRequest:
    """Validate caller input before anything touches the network."""

    start_clean = (start or "").strip()
    destination_clean = (destination or "").strip()
    if not start_clean or not destination_clean:
        raise ValidationError("checked_in_mood and destination_mood are required")
    return ScriptRequest(start=start_clean, destination=destination_clean, note=note)


async def request_script(request: ScriptRequest) -> ScriptResult:
    """Call the model once and return the tagged parse result."""

    if not _LLM_CLIENT.available:
        raise UpstreamUnavailable("Language model is not configured.")

    inspiration = await retrieve_inspiration(request.start, request.destination, request.note)
    user_prompt = build_user_prompt(request, inspiration)

    try:
        with time_stage("script"):
            raw_response = await _LLM_CLIENT.invoke(
                system_prompt=SYSTEM_PROMPT,
                user_prompt=user_prompt,
            )
    except LlmInvocationError as exc:
        logger.exception("Script generation call failed %s -> %s", request.start, request.destination)
        raise MeditationPipelineError(f"Script generation failed: {exc}") from exc

    logger.info(
        "Raw script response %s -> %s: %s",
        request.start,
        request.destination,
        _truncate(raw_response or "", 500),
    )
    return parse_meditation_script(raw_response)


async def generate_script(
    start: Optional[str],
    destination: Optional[str],
    note: Optional[str] = None,
) -> list[MeditationPhase]:
    """Produce the ordered six-phase script or raise the pipeline error."""

    request = build_script_request(start, destination, note)
    result = await request_script(request)
    if isinstance(result, ScriptErr):
        SCRIPT_FAILURES.labels(reason=result.error.code).inc()
        logger.warning(
            "Unusable script %s -> %s (%s): %s",
            request.start,
            request.destination,
            result.error.code,
            _truncate(result.error.raw, 500),
        )
    phases = result.unwrap()
    SCRIPTS_GENERATED.inc()
    return phases


__all__ = ["build_script_request", "generate_script", "request_script"]
