"""Custom exceptions for barista-log."""


class BaristaLogError(Exception):
    """Base exception for barista-log."""

    pass


class ValidationError(BaristaLogError, ValueError):
    """Raised when an entity violates a required-field or range invariant."""

    pass


class ImageError(ValidationError):
    """Raised when image data cannot be read or is invalid."""

    pass


class EntityNotFoundError(BaristaLogError, KeyError):
    """Raised when no entity exists for an identity."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else "entity not found"


class PersistenceError(BaristaLogError):
    """Raised when the underlying storage fails; the operation was not applied."""

    pass


class CapabilityUnavailableError(BaristaLogError):
    """Raised when the text-generation capability is not present or enabled."""

    pass


class AnalysisFailure(BaristaLogError):
    """Raised when the text-generation capability was invoked and failed."""

    pass


class AuthenticationError(AnalysisFailure):
    """Raised when API key is invalid."""

    pass


class RateLimitError(AnalysisFailure):
    """Raised when API rate limit is exceeded."""

    pass
