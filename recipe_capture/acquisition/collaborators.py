"""Interfaces of the fetch/transcribe/analyze services the pipeline consumes."""

from dataclasses import dataclass, field
from typing import Optional, Protocol

from pydantic import BaseModel, field_validator

from .platforms import Platform


class AudioBlob(BaseModel):
    data: bytes
    mime_type: str = "audio/mpeg"

    @field_validator("data")
    @classmethod
    def _not_empty(cls, v: bytes) -> bytes:
        if not v:
            raise ValueError("audio blob is empty")
        return v


class CaptionFetcher(Protocol):
    async def fetch_caption(self, url: str) -> str:
        """Caption/description text, "" when the post has none. Raises on fetch failure."""
        ...


class AudioFetcher(Protocol):
    async def fetch_audio(self, url: str) -> AudioBlob:
        ...


class Transcriber(Protocol):
    async def transcribe(self, blob: AudioBlob) -> str:
        """Raises TranscriptionError."""
        ...


class FrameAnalyzer(Protocol):
    async def extract_text_from_video_frames(self, url: str) -> str:
        """Best effort; may return ""."""
        ...


@dataclass
class Collaborators:
    caption_fetchers: dict[Platform, CaptionFetcher] = field(default_factory=dict)
    default_caption_fetcher: Optional[CaptionFetcher] = None
    audio_fetcher: Optional[AudioFetcher] = None
    transcriber: Optional[Transcriber] = None
    frame_analyzer: Optional[FrameAnalyzer] = None

    def caption_fetcher_for(self, platform: Platform) -> Optional[CaptionFetcher]:
        return self.caption_fetchers.get(platform, self.default_caption_fetcher)
