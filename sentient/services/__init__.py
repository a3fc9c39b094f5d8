"""Service layer helpers for external integrations."""

from .aws import create_boto3_client, credentials_available
from .llm_client import BedrockLlmClient, LlmInvocationError, get_llm_client
from .narration_tts import (
    NarrationTtsError,
    NarrationTtsResult,
    NarrationTtsService,
    SpeechNotConfiguredError,
    get_narration_tts_service,
)
from .storage import (
    SignedAsset,
    StorageError,
    StorageNotConfiguredError,
    narration_key,
    store_narration,
)

__all__ = [
    "BedrockLlmClient",
    "LlmInvocationError",
    "get_llm_client",
    "NarrationTtsService",
    "NarrationTtsResult",
    "NarrationTtsError",
    "SpeechNotConfiguredError",
    "get_narration_tts_service",
    "SignedAsset",
    "StorageError",
    "StorageNotConfiguredError",
    "narration_key",
    "store_narration",
    "create_boto3_client",
    "credentials_available",
]
