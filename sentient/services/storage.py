"""S3 storage helpers for narration audio."""

from __future__ import annotations

from dataclasses import dataclass

from botocore.exceptions import BotoCoreError, ClientError
from fastapi.concurrency import run_in_threadpool

from sentient.config.settings import settings
from sentient.services.aws import create_boto3_client, credentials_available


class StorageError(RuntimeError):
    """Raised when S3 asset persistence fails."""


class StorageNotConfiguredError(StorageError):
    """Raised before any network call when bucket or credentials are missing."""


@dataclass(frozen=True)
class SignedAsset:
    """Object key plus a time-limited GET URL for it."""

    path: str
    signed_url: str


_s3_client = create_boto3_client("s3", region_name=settings.s3.region)


def narration_key(entry_id: str, phase_number: int) -> str:
    """Object key for a phase's narration; ``phase_number`` is 1-based."""

    prefix = settings.s3.narration_prefix.strip("/")
    return f"{prefix}/{entry_id}/phase-{phase_number}.mp3"


def ensure_storage_configured() -> None:
    if not settings.s3.bucket_name:
        raise StorageNotConfiguredError("S3 bucket name is not configured.")
    if not credentials_available():
        raise StorageNotConfiguredError("Server storage credentials are not configured.")


async def upload_narration_audio(
    entry_id: str,
    phase_number: int,
    audio_bytes: bytes,
    *,
    content_type: str = "audio/mpeg",
) -> str:
    """Upload narration audio, overwriting any previous object at the same key."""

    if not audio_bytes:
        raise StorageError("Audio payload for upload was empty.")
    bucket = settings.s3.bucket_name
    if not bucket:
        raise StorageNotConfiguredError("S3 bucket name is not configured.")

    object_key = narration_key(entry_id, phase_number)
    try:
        await run_in_threadpool(
            _s3_client.put_object,
            Bucket=bucket,
            Key=object_key,
            Body=audio_bytes,
            ContentType=content_type,
        )
    except (BotoCoreError, ClientError) as exc:
        raise StorageError(f"Upload failed: {exc}") from exc

    return object_key


async def sign_object(object_key: str, *, expires_in: int | None = None) -> str:
    """Return a presigned GET URL for ``object_key``."""

    bucket = settings.s3.bucket_name
    ttl = expires_in or settings.s3.signed_url_seconds
    try:
        url = await run_in_threadpool(
            _s3_client.generate_presigned_url,
            "get_object",
            Params={"Bucket": bucket, "Key": object_key},
            ExpiresIn=ttl,
        )
    except (BotoCoreError, ClientError) as exc:
        raise StorageError(f"Signing failed: {exc}") from exc

    if not url:
        raise StorageError("Signing failed: storage returned no URL.")
    return url


async def store_narration(entry_id: str, phase_number: int, audio_bytes: bytes) -> SignedAsset:
    """Upload one phase's narration and mint its signed URL."""

    object_key = await upload_narration_audio(entry_id, phase_number, audio_bytes)
    signed_url = await sign_object(object_key)
    return SignedAsset(path=object_key, signed_url=signed_url)


__all__ = [
    "SignedAsset",
    "StorageError",
    "StorageNotConfiguredError",
    "ensure_storage_configured",
    "narration_key",
    "sign_object",
    "store_narration",
    "upload_narration_audio",
]
