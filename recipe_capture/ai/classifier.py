import logging
from typing import Optional

from ..core.ai_client import AIClient
from ..core.retry import RetryPolicy, retry_async
from .prompts import CLASSIFY_PROMPT

logger = logging.getLogger("recipe_capture.ai")


class ContentClassifier:
    """Flags transcripts that are music or otherwise not about cooking."""

    def __init__(self, ai_client: AIClient, retry_policy: Optional[RetryPolicy] = None):
        self.ai_client = ai_client
        self.retry_policy = retry_policy or RetryPolicy()

    async def is_non_cooking(self, text: str) -> bool:
        """
        True for music/lyrics/unrelated speech, False for cooking content.
        Any failure or unexpected answer resolves to False so that a valid
        recipe is never blocked by the classifier.
        """
        if not text or not text.strip():
            return True

        async def _call() -> str:
            return await self.ai_client.generate_text(
                f"Transcript: {text}",
                system_instruction=CLASSIFY_PROMPT,
            )

        try:
            answer = await retry_async(_call, self.retry_policy, label="Music detection")
        except Exception as e:
            logger.warning(f"Music detection failed, assuming cooking content: {e}")
            return False

        verdict = (answer or "").strip().strip(".\"'").lower() == "true"
        logger.info(f"Music detection verdict: {'non-cooking' if verdict else 'cooking'}")
        return verdict
