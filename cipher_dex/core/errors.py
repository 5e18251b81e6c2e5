"""Domain exceptions raised by the store and the services."""


class DexError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(DexError):
    """Missing or malformed request input."""

    status_code = 400


class NotFoundError(DexError):
    """Pool, transaction or limit order does not exist."""

    status_code = 404


class ConflictError(DexError):
    """Resource already exists (e.g. a pool for the same token pair)."""

    status_code = 400


class SlippageExceededError(DexError):
    """Swap output fell below the caller's minimum."""

    status_code = 400
