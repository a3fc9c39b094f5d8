"""Per-request log line with an encrypted caller descriptor."""

from __future__ import annotations

import base64
import hashlib
import json
import logging
import re
import time
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Optional

from cryptography.fernet import Fernet
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from sentient.config.settings import settings
from sentient.utils import AuthenticationError, decode_access_token

logger = logging.getLogger("sentient.middleware.structured")

_RESET = "\u001b[0m"
_STATUS_COLORS = ((500, "\u001b[31m"), (400, "\u001b[33m"), (200, "\u001b[32m"))
_NEUTRAL = "\u001b[36m"

# Request bodies are not read here, so only path and query ids are logged.
_ENTRY_IN_PATH = re.compile(r"/entries/([0-9a-fA-F-]{36})")


@lru_cache(maxsize=1)
def _cipher() -> Fernet:
    """Fernet key derived from the JWT secret."""

    secret = settings.security.jwt_secret_key.get_secret_value().encode("utf-8")
    return Fernet(base64.urlsafe_b64encode(hashlib.sha256(secret).digest()))


def _bearer_token(request: Request) -> Optional[str]:
    scheme, _, token = request.headers.get("authorization", "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def caller_descriptor(request: Request) -> Optional[dict[str, str]]:
    """Describe a caller with a valid token; the session id is opaque ciphertext."""

    token = _bearer_token(request)
    if token is None:
        return None
    try:
        payload = decode_access_token(token)
    except AuthenticationError:
        return None

    issued = (payload.iat or datetime.now(timezone.utc)).astimezone(timezone.utc)
    details = {
        "fingerprint": hashlib.sha256(f"{payload.sub}:{int(issued.timestamp())}".encode()).hexdigest(),
        "user_id": payload.sub,
        "issued_at": issued.isoformat(),
        "expires_at": payload.exp.astimezone(timezone.utc).isoformat(),
        "user_agent": request.headers.get("user-agent", "")[:256],
    }
    sealed = _cipher().encrypt(json.dumps(details, separators=(",", ":")).encode("utf-8"))
    return {"id": sealed.decode("ascii"), "user_id": payload.sub}


def _colour_for(status_code: int) -> str:
    for floor, colour in _STATUS_COLORS:
        if status_code >= floor:
            return colour
    return _NEUTRAL


def format_line(record: dict[str, Any]) -> str:
    """Render the console line: method, path, status, duration, user and entry."""

    status_code = record.get("status_code") or 0
    fields = ("method", "path", "status_code", "duration_ms", "user_id", "entry_id")
    body = ", ".join(f"{name}={record.get(name) if record.get(name) is not None else '-'}" for name in fields)
    return f"{_colour_for(status_code)}{body}{_RESET}"


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    """Emit one coloured summary line per request and a JSON record at DEBUG."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        started = time.perf_counter()
        entry_match = _ENTRY_IN_PATH.search(request.url.path)
        record: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "method": request.method,
            "path": request.url.path,
            "query": request.url.query or None,
            "client_ip": request.client.host if request.client else None,
            "entry_id": entry_match.group(1) if entry_match else request.query_params.get("entry_id"),
        }
        caller = caller_descriptor(request)
        if caller is not None:
            record["user_id"] = caller["user_id"]
            record["session"] = caller["id"]

        try:
            response = await call_next(request)
        except Exception as exc:
            record.update(status_code=500, error=repr(exc))
            record["duration_ms"] = round((time.perf_counter() - started) * 1000, 2)
            logger.exception(format_line(record))
            raise

        record["status_code"] = response.status_code
        record["duration_ms"] = round((time.perf_counter() - started) * 1000, 2)
        logger.info(format_line(record))
        logger.debug(json.dumps(record, default=str, separators=(",", ":")))
        return response
