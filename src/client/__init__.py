"""Client module - API accessor and local calculator state."""

from .api import CalculatorClient, handle_response
from .exceptions import ApiError
from .history import CalculationHistory
from .keypad import Keypad


__all__ = [
    "CalculatorClient",
    "handle_response",
    "ApiError",
    "CalculationHistory",
    "Keypad",
]
