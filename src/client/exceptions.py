"""Client-side exceptions."""

from src.exceptions import CalculatorAPIError


class ApiError(CalculatorAPIError):
    """Raised for every failed API call seen by the client.

    Attributes:
        status: HTTP status code, or 0 when no response was received
            (timeout, refused connection, DNS failure).
    """

    def __init__(self, status: int, message: str):
        super().__init__(message=message, code="API_ERROR")
        self.status = status

    @property
    def is_network_error(self) -> bool:
        return self.status == 0

    def __repr__(self) -> str:
        return f"ApiError(status={self.status}, message={self.message!r})"
