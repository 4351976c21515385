"""Custom exceptions for the Calculator API."""


class CalculatorAPIError(Exception):
    """Base exception for all Calculator API errors."""

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)


class InvalidCalculationError(CalculatorAPIError):
    """Raised when a submitted calculation fails arithmetic verification."""

    def __init__(self, message: str):
        super().__init__(message=message, code="INVALID_CALCULATION")


class InvalidCalculationIdError(CalculatorAPIError):
    """Raised when a calculation ID path parameter is not an integer.

    Attributes:
        raw_id: The value received in the path.
    """

    def __init__(self, raw_id: str):
        super().__init__(message="Invalid calculation ID", code="INVALID_ID")
        self.raw_id = raw_id


class CalculationNotFoundError(CalculatorAPIError):
    """Raised when no calculation exists with the requested ID.

    Attributes:
        calculation_id: The ID that was looked up.
    """

    def __init__(self, calculation_id: int):
        super().__init__(message="Calculation not found", code="NOT_FOUND")
        self.calculation_id = calculation_id


class PersistenceError(CalculatorAPIError):
    """Raised when the store fails to execute an operation."""

    def __init__(self, message: str, code: str = "PERSISTENCE_ERROR"):
        super().__init__(message=message, code=code)


class DatabaseUnavailableError(PersistenceError):
    """Raised when the store cannot be reached or no pooled connection is free."""

    def __init__(self, message: str = "Database connection failed"):
        super().__init__(message=message, code="DATABASE_UNAVAILABLE")
