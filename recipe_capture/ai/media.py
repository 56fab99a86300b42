"""Gemini-backed transcription and video-frame analysis collaborators."""

import logging
from typing import Optional

from ..core.ai_client import AIClient
from ..core.errors import AIRateLimitError, AIServiceError, TranscriptionError
from ..settings import settings
from .prompts import TRANSCRIBE_PROMPT, VIDEO_ANALYSIS_PROMPT

logger = logging.getLogger("recipe_capture.ai")

SUPPORTED_AUDIO_TYPES = {
    "audio/mpeg", "audio/mp3", "audio/mp4", "audio/m4a", "audio/x-m4a", "audio/aac",
    "audio/wav", "audio/x-wav", "audio/ogg", "audio/webm", "audio/flac",
    "video/mp4", "video/webm",
}


class GeminiTranscriber:
    def __init__(self, ai_client: AIClient, max_bytes: Optional[int] = None):
        self.ai_client = ai_client
        self.max_bytes = max_bytes or settings.max_audio_bytes

    async def transcribe(self, blob) -> str:
        if len(blob.data) > self.max_bytes:
            raise TranscriptionError(
                TranscriptionError.FILE_TOO_LARGE,
                f"Audio is {len(blob.data)} bytes, limit is {self.max_bytes}",
            )
        if blob.mime_type not in SUPPORTED_AUDIO_TYPES:
            raise TranscriptionError(
                TranscriptionError.UNSUPPORTED_FORMAT,
                f"Unsupported audio format: {blob.mime_type}",
            )

        try:
            transcript = await self.ai_client.generate_from_media(
                TRANSCRIBE_PROMPT, data=blob.data, mime_type=blob.mime_type
            )
        except AIRateLimitError as e:
            raise TranscriptionError(TranscriptionError.QUOTA_EXCEEDED, f"Transcription quota exceeded: {e}") from e
        except AIServiceError as e:
            raise TranscriptionError(TranscriptionError.UNKNOWN, f"Transcription failed: {e}") from e

        logger.info(f"Transcribed {len(blob.data)} bytes of audio into {len(transcript)} chars")
        return transcript


class GeminiVideoAnalyzer:
    """Best-effort frame-by-frame description of a video URL."""

    def __init__(self, ai_client: AIClient):
        self.ai_client = ai_client

    async def extract_text_from_video_frames(self, url: str) -> str:
        text = await self.ai_client.generate_from_media(VIDEO_ANALYSIS_PROMPT, uri=url, mime_type="video/mp4")
        logger.info(f"Video analysis returned {len(text)} chars")
        return text
