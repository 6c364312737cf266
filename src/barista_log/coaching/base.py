"""Text-generation capability interface."""

from abc import ABC, abstractmethod

from barista_log.exceptions import CapabilityUnavailableError


class BaseCoach(ABC):
    """Abstract base class for text-generation capabilities."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return whether ``generate`` can be called on this device."""
        pass

    @abstractmethod
    def generate(self, instructions: str, prompt: str) -> str:
        """Generate coaching text.

        Args:
            instructions: Fixed persona and guidance for the model.
            prompt: The shot description built by ``build_prompt``.

        Returns:
            The generated text.

        Raises:
            CapabilityUnavailableError: If called while unavailable.
            AnalysisFailure: If generation fails.
        """
        pass

    def get_metadata(self) -> dict[str, str]:
        """Return capability-specific metadata."""
        return {}


class UnavailableCoach(BaseCoach):
    """Capability used when coaching is not configured."""

    def is_available(self) -> bool:
        return False

    def generate(self, instructions: str, prompt: str) -> str:
        raise CapabilityUnavailableError("No coaching provider is configured.")

    def get_metadata(self) -> dict[str, str]:
        return {"provider": "none"}
