"""Script generation and narration endpoints."""

import logging
from typing import List, Union

from fastapi import APIRouter
from fastapi.responses import Response

from sentient.pipelines.meditation import (
    StreamedNarration,
    generate_script,
    synthesize_all,
    synthesize_one,
)
from sentient.services.response_contract import MeditationPhase
from sentient.views import (
    BatchNarrationRequest,
    BatchNarrationResponse,
    ErrorResponse,
    GenerateRequest,
    NarrationRequest,
    NarrationUploadResponse,
)

router = APIRouter(prefix="/api", tags=["meditation"])

logger = logging.getLogger(__name__)

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
}


@router.post("/generate", response_model=List[MeditationPhase], responses=_ERROR_RESPONSES)
async def generate(request: GenerateRequest) -> List[MeditationPhase]:
    """Generate a six-phase meditation script for the mood transition."""

    return await generate_script(
        request.checked_in_mood,
        request.destination_mood,
        request.note,
    )


@router.post("/tts-batch", responses=_ERROR_RESPONSES)
async def narrate_batch(request: BatchNarrationRequest) -> BatchNarrationResponse:
    """Narrate all six phases and return signed URLs in phase order."""

    urls = await synthesize_all(
        request.entryId,
        [phase.text for phase in request.phases],
        voice=request.voice,
        engine=request.model,
    )
    return BatchNarrationResponse(urls=urls)


@router.post(
    "/tts",
    response_model=None,
    responses={
        200: {"content": {"audio/mpeg": {}}, "model": NarrationUploadResponse},
        **_ERROR_RESPONSES,
    },
)
async def narrate_one(request: NarrationRequest) -> Union[Response, NarrationUploadResponse]:
    """Narrate a single text, streaming MP3 bytes or returning a signed URL."""

    result = await synthesize_one(
        request.text,
        request.as_,
        entry_id=request.entryId,
        phase_index=request.phaseIndex,
        voice=request.voice,
        engine=request.model,
    )
    if isinstance(result, StreamedNarration):
        return Response(
            content=result.audio_bytes,
            media_type=result.media_type,
            headers={"Cache-Control": "no-store"},
        )
    return NarrationUploadResponse(signedUrl=result.signed_url, path=result.path)
