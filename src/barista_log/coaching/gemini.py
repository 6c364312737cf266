"""Gemini coaching capability."""

import logging
import os

from google import genai
from google.genai import errors, types

from barista_log.coaching.base import BaseCoach
from barista_log.exceptions import (
    AnalysisFailure,
    AuthenticationError,
    CapabilityUnavailableError,
    RateLimitError,
)

DEFAULT_MODEL = "gemini-2.5-flash-lite"


class GeminiCoach(BaseCoach):
    """Gemini text API capability."""

    def __init__(self, api_key: str | None = None, model: str | None = None, *, client=None):
        """Initialize Gemini coach.

        Args:
            api_key: Gemini API key. Falls back to GEMINI_API_KEY env var.
            model: Model name. Falls back to BARISTA_LOG_COACH_MODEL, then the default.
            client: Pre-built client, mainly for tests.

        Without a key or client the coach reports itself unavailable instead
        of raising.
        """
        self.logger = logging.getLogger(__name__)
        self.api_key = api_key or os.environ.get("GEMINI_API_KEY")
        self.model = model or os.environ.get("BARISTA_LOG_COACH_MODEL") or DEFAULT_MODEL
        self.client = client
        if self.client is None and self.api_key:
            self.client = genai.Client(api_key=self.api_key)

    def is_available(self) -> bool:
        return self.client is not None

    def generate(self, instructions: str, prompt: str) -> str:
        """Generate coaching text with Gemini.

        Raises:
            CapabilityUnavailableError: If no API key or client is configured.
            RateLimitError: If API rate limit is exceeded.
            AuthenticationError: If API key is invalid.
            AnalysisFailure: For any other failure or an empty response.
        """
        if self.client is None:
            raise CapabilityUnavailableError(
                "No API key provided. Set GEMINI_API_KEY environment variable "
                "or pass api_key parameter."
            )

        try:
            response = self.client.models.generate_content(
                model=self.model,
                contents=[prompt],
                config=types.GenerateContentConfig(system_instruction=instructions),
            )
        except errors.ClientError as e:
            message = str(e).lower()
            if "rate" in message or "quota" in message:
                raise RateLimitError(f"API rate limit exceeded: {e}") from e
            if "auth" in message or "key" in message:
                raise AuthenticationError(f"Invalid API key: {e}") from e
            raise AnalysisFailure(f"Coaching request rejected: {e}") from e
        except Exception as e:
            self.logger.exception("gemini coaching request failed")
            raise AnalysisFailure(f"Failed to generate coaching: {e}") from e

        text = (getattr(response, "text", None) or "").strip()
        if not text:
            raise AnalysisFailure("Model returned an empty response")
        return text

    def get_metadata(self) -> dict[str, str]:
        return {"provider": "gemini", "model": self.model}
