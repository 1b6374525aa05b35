"""Domain exceptions for the Spendwise API.

Each exception carries the HTTP status code it maps to; the handler in
``spendwise.main`` turns them into JSON error responses.
"""


class SpendwiseError(Exception):
    """Base exception for all Spendwise errors."""

    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class ValidationError(SpendwiseError):
    """Raised when input validation fails outside of the pydantic schemas."""

    def __init__(self, message: str):
        super().__init__(message, status_code=400)


class AuthenticationError(SpendwiseError):
    """Raised when no valid session accompanies the request."""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message, status_code=401)


class ForbiddenError(SpendwiseError):
    """Raised when a resolved resource belongs to another user."""

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message, status_code=403)


class NotFoundError(SpendwiseError):
    """Raised when a resource is absent or not owned by the caller."""

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, status_code=404)


class StorageError(SpendwiseError):
    """Raised when receipt blob storage fails."""

    def __init__(self, message: str = "Storage operation failed"):
        super().__init__(message, status_code=500)
