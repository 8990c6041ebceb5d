"""Errors raised by the AnyList client facade."""


class ServiceError(Exception):
    """Raised when a Service call fails.

    Attributes:
        message: the rendered Service diagnostic, prefixed with the failed action
        status_code: HTTP status of the failed response, when there was one
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        return self.message


class AuthError(ServiceError):
    """Raised when a session cannot be established."""


class NotFoundError(ServiceError):
    """Raised when the facade cannot find a referenced record itself."""

    def __init__(self, message: str = "Not found") -> None:
        super().__init__(message)
