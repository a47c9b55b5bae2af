"""
Error taxonomy for gpup.

Everything the command line reports as a fatal error derives from GpupError.
"""


class GpupError(Exception):
    """Base exception for gpup errors."""


class ConfigurationError(GpupError):
    """Raised when required settings are missing or invalid."""


class FileDiscoveryError(GpupError):
    """Raised when a path cannot be traversed."""


class NoFilesFoundError(FileDiscoveryError):
    """Raised when the given paths expand to no regular files."""


class AuthenticationError(GpupError):
    """Raised when the OAuth flow is cancelled or the token exchange fails."""


class PhotosApiError(GpupError):
    """Raised when a Photos Library API call fails."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
