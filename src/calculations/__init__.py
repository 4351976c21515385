"""Calculations module - Verified calculation records."""

from .models import Calculation
from .schemas import Operator, CalculationCreate, CalculationRead, ApiResponse
from .validator import VerificationResult, verify_calculation
from .router import router


__all__ = [
    "Calculation",
    "Operator",
    "CalculationCreate",
    "CalculationRead",
    "ApiResponse",
    "VerificationResult",
    "verify_calculation",
    "router",
]
