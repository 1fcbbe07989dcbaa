"""Exceptions raised by the fading core."""


class FadeError(Exception):
    """Base exception for diary fading operations."""
    status_code = 500


class ClassificationFailure(FadeError):
    """The emotion classifier failed or returned something unusable."""


class SettingsUnavailable(FadeError):
    """Fade settings could not be read or created."""


class NotFoundError(FadeError):
    """Entry or plant does not exist or is not owned by the caller."""
    status_code = 404


class ValidationError(FadeError):
    """Bad input on entry creation or settings update."""
    status_code = 400


class PersistenceError(FadeError):
    """The underlying store failed."""
    status_code = 500


class ConcurrentUpdateError(PersistenceError):
    """A conditional write kept losing against concurrent writers."""
    status_code = 409
