"""Domain errors raised by services and rendered by the API exception handlers."""


class BlogpressError(Exception):
    """Base class for errors that map onto an HTTP status code."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationFailed(BlogpressError):
    """Request data failed a rule that the request models cannot express."""

    status_code = 400

    def __init__(self, message: str, errors: list[dict[str, str]] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


class AuthenticationError(BlogpressError):
    status_code = 401


class ForbiddenError(BlogpressError):
    status_code = 403


class NotFoundError(BlogpressError):
    status_code = 404


class ConflictError(BlogpressError):
    """Duplicate resource, or the stored document changed under a write."""

    status_code = 409
