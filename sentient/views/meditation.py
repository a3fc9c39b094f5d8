"""Schemas for script generation and narration endpoints."""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class GenerateRequest(BaseModel):
    """Body of ``POST /api/generate``; presence is checked by the pipeline."""

    checked_in_mood: Optional[str] = Field(None, description="Current emotional state")
    destination_mood: Optional[str] = Field(None, description="Desired emotional state")
    note: Optional[str] = Field(None, description="Free-text context from the check-in")


class PhaseText(BaseModel):
    text: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class BatchNarrationRequest(BaseModel):
    """Body of ``POST /api/tts-batch``."""

    entryId: Optional[str] = Field(None, description="Mood entry the narration belongs to")
    phases: List[PhaseText] = Field(default_factory=list)
    voice: Optional[str] = Field(None, description="Polly voice id")
    model: Optional[str] = Field(None, description="Polly engine name")


class BatchNarrationResponse(BaseModel):
    urls: List[str]


class NarrationRequest(BaseModel):
    """Body of ``POST /api/tts``."""

    text: Optional[str] = None
    as_: Literal["stream", "upload"] = Field("stream", alias="as")
    entryId: Optional[str] = None
    phaseIndex: Optional[int] = Field(None, description="Zero-based phase index for uploads")
    voice: Optional[str] = None
    model: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class NarrationUploadResponse(BaseModel):
    signedUrl: str
    path: str
