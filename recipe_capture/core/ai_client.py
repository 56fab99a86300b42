import logging
from typing import Optional, Type, TypeVar
from datetime import datetime, timezone
from pydantic import BaseModel
from google import genai
from google.genai import types
from google.genai import errors as genai_errors

from ..settings import settings
from .errors import AIServiceError, AIRateLimitError

logger = logging.getLogger("recipe_capture.ai")

T = TypeVar("T", bound=BaseModel)


def normalize_model_id(model_string: Optional[str]) -> Optional[str]:
    """
    'model="gemini-2.5-flash"' -> 'gemini-2.5-flash'
    '"gemini-2.5-flash"' -> 'gemini-2.5-flash'
    """
    if not model_string:
        return model_string

    s = model_string.strip()
    if s.lower().startswith("model="):
        s = s[6:]
    return s.strip("\"'").strip()


def is_quota_error(e: BaseException) -> bool:
    if isinstance(e, genai_errors.APIError) and e.code == 429:
        return True
    # bare "429" is not a signal; it shows up in token counts and ids
    text = str(e).lower()
    return "quota" in text or "resource_exhausted" in text


class AIClient:
    """
    Thin async wrapper over the Gemini API.

    generate_text / generate_from_media raise AIServiceError (AIRateLimitError
    for 429/quota) so callers can retry or fall back; generate_structured
    returns None on any failure.
    """

    _instance = None

    def __init__(
        self,
        api_key: Optional[str] = None,
        mode: Optional[str] = None,
        text_model: Optional[str] = None,
        media_model: Optional[str] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.gemini_api_key
        self.mode = mode or settings.ai_mode  # "mock" or "gemini"
        self.text_model = normalize_model_id(text_model or settings.gemini_text_model)
        self.media_model = normalize_model_id(media_model or settings.gemini_media_model)
        self._client: Optional[genai.Client] = None
        self.last_error: Optional[str] = None
        self.last_error_at: Optional[datetime] = None

        if self.mode == "gemini" and self.api_key:
            self._client = genai.Client(api_key=self.api_key)

    @classmethod
    def get_instance(cls):
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def is_available(self) -> bool:
        return self.mode == "gemini" and self._client is not None

    def _record_error(self, e: Exception) -> None:
        self.last_error = f"{e.__class__.__name__}: {str(e)}"
        self.last_error_at = datetime.now(timezone.utc)

    def _wrap_error(self, e: Exception, what: str) -> AIServiceError:
        self._record_error(e)
        if is_quota_error(e):
            logger.warning(f"Gemini {what} rate limited: {e}")
            return AIRateLimitError(str(e))
        logger.error(f"Gemini {what} failed: {e}")
        return AIServiceError(str(e))

    async def generate_text(
        self,
        prompt: str,
        system_instruction: Optional[str] = None,
        json_output: bool = False,
        model: Optional[str] = None,
        temperature: float = 0.0,
    ) -> str:
        """Generate a text (or raw JSON text) completion."""
        if not self.is_available():
            raise AIServiceError(f"AI is not available (mode={self.mode})")

        config = types.GenerateContentConfig(
            response_mime_type="application/json" if json_output else "text/plain",
            system_instruction=system_instruction,
            temperature=temperature,
        )
        try:
            response = await self._client.aio.models.generate_content(
                model=model or self.text_model,
                contents=prompt,
                config=config,
            )
        except Exception as e:
            raise self._wrap_error(e, "text generation") from e

        return (response.text or "").strip()

    async def generate_structured(
        self,
        prompt: str,
        response_model: Type[T],
        model: Optional[str] = None,
        system_instruction: Optional[str] = None,
    ) -> Optional[T]:
        """
        Generate structured JSON output using Gemini (Async).
        Returns None if AI is disabled/unavailable or fails.
        """
        if not self.is_available():
            logger.warning("AI is not available (mode=%s), skipping generation", self.mode)
            return None

        try:
            config = types.GenerateContentConfig(
                response_mime_type="application/json",
                response_schema=response_model,
                system_instruction=system_instruction,
            )
            response = await self._client.aio.models.generate_content(
                model=model or self.text_model,
                contents=prompt,
                config=config,
            )

            if not response.text:
                logger.warning("Gemini returned empty response")
                return None

            return response.parsed

        except Exception as e:
            self._record_error(e)
            logger.error(f"Gemini generation failed: {e}")
            return None

    async def generate_from_media(
        self,
        prompt: str,
        data: Optional[bytes] = None,
        mime_type: Optional[str] = None,
        uri: Optional[str] = None,
        model: Optional[str] = None,
    ) -> str:
        """Prompt the model with inline media bytes or a media URI."""
        if not self.is_available():
            raise AIServiceError(f"AI is not available (mode={self.mode})")

        if data is not None:
            part = types.Part.from_bytes(data=data, mime_type=mime_type or "application/octet-stream")
        elif uri:
            part = types.Part.from_uri(file_uri=uri, mime_type=mime_type or "video/mp4")
        else:
            raise ValueError("generate_from_media needs data or uri")

        try:
            response = await self._client.aio.models.generate_content(
                model=model or self.media_model,
                contents=[part, prompt],
            )
        except Exception as e:
            raise self._wrap_error(e, "media generation") from e

        return (response.text or "").strip()
