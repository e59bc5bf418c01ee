"""Exception hierarchy for the dictation core."""

from typing import Optional


class VocalflowError(Exception):
    pass


class ValidationError(VocalflowError, ValueError):
    """Malformed user input, e.g. an empty dictionary word."""


class ProviderError(VocalflowError):
    """Transcription backend failed.

    Args:
        status_code: HTTP status of the upstream response, None for timeouts
            and connection failures
        message: Upstream error body or failure description
    """

    def __init__(self, status_code: Optional[int], message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"{status_code}: {message}" if status_code is not None else message)


class AudioNotFoundError(VocalflowError, FileNotFoundError):
    """Audio artifact expected on disk is missing."""


class AccessibilityError(VocalflowError):
    """Accessibility query failed or returned an error sentinel."""


class PersistenceError(VocalflowError):
    """Storage collaborator could not persist a change."""
