"""Shared boto3 client construction for Bedrock, Polly and S3."""

from __future__ import annotations

from typing import Any, Optional

import boto3
from botocore.config import Config

from sentient.config.settings import settings

# "standard" mode retries throttling errors as well as transient 5xx responses.
_CLIENT_CONFIG = Config(
    retries={"max_attempts": 3, "mode": "standard"},
    connect_timeout=5,
    read_timeout=60,
)


def _static_keys(
    access_key: Optional[str], secret_key: Optional[str]
) -> tuple[Optional[str], Optional[str]]:
    if access_key and secret_key:
        return access_key, secret_key
    if settings.s3.access_key and settings.s3.secret_key:
        return settings.s3.access_key, settings.s3.secret_key
    return None, None


def create_boto3_client(
    service_name: str,
    *,
    region_name: str | None = None,
    aws_access_key_id: str | None = None,
    aws_secret_access_key: str | None = None,
) -> Any:
    """Build a client; explicit keys win, then the S3 keys, then the default chain."""

    access_key, secret_key = _static_keys(aws_access_key_id, aws_secret_access_key)
    kwargs: dict[str, Any] = {
        "region_name": region_name or settings.s3.region,
        "config": _CLIENT_CONFIG,
    }
    if access_key:
        kwargs.update(aws_access_key_id=access_key, aws_secret_access_key=secret_key)
    return boto3.client(service_name, **kwargs)


def credentials_available() -> bool:
    """Return True when static keys or the default credential chain resolve."""

    if all(_static_keys(None, None)):
        return True
    return boto3.Session().get_credentials() is not None


__all__ = ["create_boto3_client", "credentials_available"]
