class ResumeLensError(Exception):
    """Base error carrying an optional raw detail string for the response body."""

    def __init__(self, message: str, details: str | None = None):
        super().__init__(message)
        self.details = details


class AuthenticationError(ResumeLensError):
    """Raised when provider credentials or a user session are missing or invalid."""


class IntegrationError(ResumeLensError):
    """Raised when an external API call fails."""


class RateLimitError(ResumeLensError):
    """Raised when an external API quota or rate limit is hit."""


class InvalidRequestError(ResumeLensError):
    """Raised when the client sends a malformed or incomplete request."""


class UnsupportedFileError(ResumeLensError):
    """Raised when an uploaded file's format is rejected."""


class PayloadTooLargeError(ResumeLensError):
    """Raised when an upload exceeds the size limit."""
