"""Arithmetic verification of submitted calculations.

The server never trusts a client-computed result: every calculation is
recomputed here before it is allowed near the store.
"""

import operator as _operator
from dataclasses import dataclass
from decimal import Decimal, localcontext
from typing import Callable, Union

# Absorbs float representation error from client-side arithmetic
TOLERANCE = Decimal("0.000001")

_OPERATIONS: dict[str, Callable[[Decimal, Decimal], Decimal]] = {
    "+": _operator.add,
    "-": _operator.sub,
    "*": _operator.mul,
    "/": _operator.truediv,
}

Number = Union[Decimal, int, float, str]


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of verifying a calculation.

    Attributes:
        valid: True when the calculation may be stored.
        error: Description of the failure, None when valid.
        expected: The recomputed result, when it could be computed.
    """

    valid: bool
    error: str | None = None
    expected: Decimal | None = None


def _to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # str() gives the shortest repr, so 0.1 becomes Decimal("0.1")
        return Decimal(str(value))
    return Decimal(value)


def format_number(value: Decimal) -> str:
    """Render a decimal without exponent or trailing zeros (5.000 -> "5")."""
    if not value.is_finite():
        return str(value)
    return format(value.normalize(), "f")


def verify_calculation(
    operand1: Number,
    operator: str,
    operand2: Number,
    result: Number,
) -> VerificationResult:
    """Check that ``result`` equals ``operand1 <operator> operand2``.

    Args:
        operand1: Left operand.
        operator: One of "+", "-", "*", "/".
        operand2: Right operand.
        result: The result submitted by the client.

    Returns:
        VerificationResult; never raises for expected failures.
    """
    left = _to_decimal(operand1)
    right = _to_decimal(operand2)
    submitted = _to_decimal(result)

    if operator == "/" and right == 0:
        return VerificationResult(valid=False, error="Division by zero is not allowed")

    if not (left.is_finite() and right.is_finite()):
        return VerificationResult(valid=False, error="Operands must be finite numbers")

    operation = _OPERATIONS.get(str(operator))
    if operation is None:
        return VerificationResult(valid=False, error="Invalid operator")

    with localcontext() as ctx:
        ctx.prec = 40
        expected = operation(left, right)
        matches = submitted.is_finite() and abs(expected - submitted) <= TOLERANCE

    if not matches:
        return VerificationResult(
            valid=False,
            error=(
                f"Calculation error: {format_number(left)} {operator} "
                f"{format_number(right)} should equal {format_number(expected)}, "
                f"not {format_number(submitted)}"
            ),
            expected=expected,
        )

    return VerificationResult(valid=True, expected=expected)
