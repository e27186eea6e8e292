"""Error types raised during a template migration run."""

from typing import Any, Dict, Optional


class MigrationError(Exception):
    """
    Base class for errors that abort a migration run.

    Each subclass carries the HTTP status the API responds with. The
    ``message`` is user-facing; ``details`` holds upstream diagnostics.
    """

    status_code = 500

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the error response body."""
        body: Dict[str, Any] = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class RequestValidationFailed(MigrationError):
    """The request body is missing required fields or is malformed."""

    status_code = 400


class AuthError(MigrationError):
    """Credentials for the source or destination are missing or invalid."""

    status_code = 400


class NotConnectedError(AuthError):
    """The user has no stored credentials for a provider."""


class CredentialLookupError(MigrationError):
    """The credential store could not be read."""

    status_code = 500


class FolderResolutionError(MigrationError):
    """The destination folder could not be found or created."""

    status_code = 400


class UpstreamFetchError(MigrationError):
    """Every source template endpoint failed."""

    status_code = 500


class ItemError(Exception):
    """Failure scoped to a single template; recorded and the run continues."""


class ConversionError(ItemError):
    """A template could not be converted to the destination format."""


class AssetCreationError(ItemError):
    """The destination rejected an asset create call."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
