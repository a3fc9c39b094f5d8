"""Bedrock access for meditation scripts (``converse``) and Titan embeddings."""

from __future__ import annotations

import base64
import binascii
import json
import logging
from typing import Any, Optional

from fastapi.concurrency import run_in_threadpool

from sentient.config.settings import settings
from sentient.services.aws import create_boto3_client

logger = logging.getLogger(__name__)


class LlmInvocationError(RuntimeError):
    """Raised when a Bedrock call fails or returns nothing usable."""


def _api_key_credentials() -> tuple[Optional[str], Optional[str]]:
    """Split ``BEDROCK_API_KEY`` (base64 or plain ``access:secret``) into keys."""

    secret = settings.bedrock.api_key
    if secret is None or not secret.get_secret_value().strip():
        return None, None

    raw = secret.get_secret_value().strip()
    try:
        decoded = base64.b64decode(raw, validate=True).decode("ascii")
    except (binascii.Error, UnicodeDecodeError):
        decoded = raw

    printable = "".join(ch for ch in decoded if ch.isprintable())
    access_key, sep, secret_key = printable.partition(":")
    if not sep:
        logger.warning("BEDROCK_API_KEY is not in access:secret form; using the default chain.")
        return None, None
    return access_key, secret_key


def _joined_text(response: dict[str, Any]) -> str:
    blocks = response.get("output", {}).get("message", {}).get("content", [])
    return "\n".join(block["text"] for block in blocks if block.get("text")).strip()


class BedrockLlmClient:
    """One shared runtime client; every blocking call goes through the threadpool."""

    def __init__(self) -> None:
        bedrock = settings.bedrock
        self._model_id = bedrock.model_id
        self._embedding_model_id = bedrock.embedding_model_id
        self._inference = {
            "maxTokens": bedrock.max_tokens,
            "temperature": bedrock.temperature,
            "topP": bedrock.top_p,
        }

        access_key, secret_key = _api_key_credentials()
        try:
            self._client = create_boto3_client(
                "bedrock-runtime",
                region_name=bedrock.region,
                aws_access_key_id=access_key,
                aws_secret_access_key=secret_key,
            )
        except Exception as exc:  # pragma: no cover - configuration issue
            logger.warning("Could not initialise Bedrock: %s", exc)
            self._client = None

    @property
    def available(self) -> bool:
        return self._client is not None and bool(self._model_id)

    async def invoke(self, *, system_prompt: str, user_prompt: str, **overrides: Any) -> str | None:
        """Send one system+user turn and return the model's text, or None if empty.

        ``overrides`` may replace ``maxTokens``, ``temperature`` or ``topP`` for
        this call only.
        """

        if not self.available:
            return None
        inference = {**self._inference, **overrides}

        def _call() -> dict[str, Any]:
            return self._client.converse(
                modelId=self._model_id,
                system=[{"text": system_prompt}],
                messages=[{"role": "user", "content": [{"text": user_prompt}]}],
                inferenceConfig=inference,
            )

        try:
            response = await run_in_threadpool(_call)
        except Exception as exc:  # pragma: no cover - external dependency
            raise LlmInvocationError(str(exc)) from exc

        if response.get("stopReason") == "max_tokens":
            logger.warning("Bedrock reply truncated at maxTokens=%s", inference["maxTokens"])
        return _joined_text(response) or None

    async def embed(self, text: str) -> list[float]:
        """Return the Titan embedding vector for ``text``."""

        if self._client is None or not self._embedding_model_id:
            raise LlmInvocationError("Bedrock embeddings are not configured.")

        def _call() -> list[float]:
            response = self._client.invoke_model(
                modelId=self._embedding_model_id,
                contentType="application/json",
                accept="application/json",
                body=json.dumps({"inputText": text}),
            )
            payload = json.loads(response["body"].read())
            return [float(value) for value in payload.get("embedding", [])]

        try:
            vector = await run_in_threadpool(_call)
        except Exception as exc:  # pragma: no cover - external dependency
            raise LlmInvocationError(str(exc)) from exc

        if not vector:
            raise LlmInvocationError("Bedrock returned an empty embedding.")
        return vector


_DEFAULT_CLIENT: BedrockLlmClient | None = None


def get_llm_client() -> BedrockLlmClient:
    """Return the process-wide Bedrock client, creating it lazily."""

    global _DEFAULT_CLIENT
    if _DEFAULT_CLIENT is None:
        _DEFAULT_CLIENT = BedrockLlmClient()
    return _DEFAULT_CLIENT


__all__ = ["BedrockLlmClient", "LlmInvocationError", "get_llm_client"]
