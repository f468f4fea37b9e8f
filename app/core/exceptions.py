"""Custom application exceptions."""


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = 500):
        """Initialize exception with message and status code."""
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class NotFoundException(AppException):
    """Resource not found exception."""

    def __init__(self, message: str = "Resource not found"):
        """Initialize with 404 status code."""
        super().__init__(message, status_code=404)


class BadRequestException(AppException):
    """Bad request exception."""

    def __init__(self, message: str = "Bad request"):
        """Initialize with 400 status code."""
        super().__init__(message, status_code=400)


class ConflictException(AppException):
    """Conflict exception."""

    def __init__(self, message: str = "Conflict"):
        """Initialize with 409 status code."""
        super().__init__(message, status_code=409)


class InvalidArgumentException(BadRequestException):
    """Malformed identifier passed to a statistics or lookup operation."""

    def __init__(self, message: str = "Invalid argument"):
        """Initialize with 400 status code."""
        super().__init__(message)


class LookupMissing(NotFoundException):
    """A referenced record needed to derive a value does not exist."""

    def __init__(self, message: str = "Referenced record not found"):
        """Initialize with 404 status code."""
        super().__init__(message)


class AggregateUpdateFailed(AppException):
    """
    Persisting a doctor's cached statistics failed.

    Raised inside the statistics hooks and handed to the error reporter.
    The write that triggered the hook is already committed, so this never
    reaches the caller of that write.
    """

    def __init__(
        self,
        message: str = "Doctor statistics update failed",
        doctor_id: str | None = None,
    ):
        """Initialize with 500 status code."""
        self.doctor_id = doctor_id
        super().__init__(message, status_code=500)
