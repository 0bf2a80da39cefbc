"""
Application error taxonomy.

Every error carries the HTTP status it maps to, a human-readable message and
an optional machine code. Route handlers never catch these; the exception
handlers registered in ``marketplace.api.errors`` turn them into responses.
"""


class MarketplaceError(Exception):
    status_code: int = 500

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code


class InvalidRequestError(MarketplaceError):
    """A required field is missing or malformed. Raised before any store access."""

    status_code = 400


class UnauthorizedError(MarketplaceError):
    status_code = 401


class ForbiddenError(MarketplaceError):
    status_code = 403


class NotFoundError(MarketplaceError):
    status_code = 404


class ConflictError(MarketplaceError):
    status_code = 409


class UpstreamError(MarketplaceError):
    """A store operation failed; status and code come from the driver when known."""

    def __init__(self, message: str, status_code: int = 500, code: str | None = None) -> None:
        super().__init__(message, code)
        self.status_code = status_code
