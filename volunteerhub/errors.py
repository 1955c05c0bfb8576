"""Custom exception classes for the application."""


class AppError(Exception):
    """Base application error class."""

    code = "internal"

    def __init__(self, message, status_code=400):
        """Initialize the error."""
        super().__init__(message)
        self.status_code = status_code
        self.message = message

    @property
    def callable_status(self):
        """Return the status name used by the callable function wire format."""
        return self.code.upper().replace("-", "_")

    def to_dict(self):
        """Serialize the error for a JSON response."""
        return {"status": "error", "code": self.code, "message": self.message}


class UnauthenticatedError(AppError):
    """Raised when an operation needs a signed-in user and there is none."""

    code = "unauthenticated"

    def __init__(self, message="You must be logged in to perform this action."):
        """Initialize the error."""
        super().__init__(message, 401)


class ValidationError(AppError):
    """Raised when user input fails validation."""

    code = "invalid-argument"

    def __init__(self, message="Validation failed."):
        """Initialize the error."""
        super().__init__(message, 400)


class PermissionDeniedError(AppError):
    """Raised when the caller is not allowed to perform an operation."""

    code = "permission-denied"

    def __init__(self, message="You do not have permission to do that."):
        """Initialize the error."""
        super().__init__(message, 403)


class NotFoundError(AppError):
    """Raised when a resource is not found."""

    code = "not-found"

    def __init__(self, message="Resource not found."):
        """Initialize the error."""
        super().__init__(message, 404)


class DuplicateResourceError(AppError):
    """Raised when trying to create a resource that already exists."""

    code = "conflict"

    def __init__(self, message="Resource already exists."):
        """Initialize the error."""
        super().__init__(message, 409)


class EventFullError(AppError):
    """Raised when an event has reached its participant limit."""

    code = "full"

    def __init__(self, message="Sorry, this event is already full."):
        """Initialize the error."""
        super().__init__(message, 409)


class InternalError(AppError):
    """Raised for unexpected failures; the detail stays in the server log."""

    code = "internal"

    def __init__(self, message="An unexpected error occurred."):
        """Initialize the error."""
        super().__init__(message, 500)
