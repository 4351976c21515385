"""Keypad state machine for an interactive calculator front end."""

from decimal import Decimal, DivisionByZero, InvalidOperation
from typing import Callable, Optional

from pydantic import ValidationError

from src.calculations.schemas import CalculationCreate, Operator
from src.calculations.validator import format_number

# Display glyphs accepted in place of the ASCII operators
OPERATOR_SYMBOLS = {
    "+": Operator.ADD,
    "-": Operator.SUBTRACT,
    "*": Operator.MULTIPLY,
    "×": Operator.MULTIPLY,
    "/": Operator.DIVIDE,
    "÷": Operator.DIVIDE,
}

ERROR_DISPLAY = "Error"


def parse_operator(symbol: str) -> Operator:
    """Map a keypad symbol to an Operator.

    Raises:
        ValueError: If the symbol is not an operator key.
    """
    try:
        return OPERATOR_SYMBOLS[symbol]
    except KeyError:
        raise ValueError(f"Unknown operator key: {symbol!r}")


class Keypad:
    """Local calculator state: display, pending operand and pending operator.

    Every completed binary operation, whether chained (``2 + 3 +``) or
    finished with ``equals()``, is returned and passed to ``on_calculate``.

    Attributes:
        display: Current display string.
        previous_value: Left operand waiting for its right operand.
        operation: Pending operator.
        waiting_for_operand: True right after an operator or equals key.
        expression: The expression line shown above the display.
    """

    def __init__(
        self,
        on_calculate: Optional[Callable[[CalculationCreate], None]] = None,
        initial_value: str = "0",
    ) -> None:
        self.on_calculate = on_calculate
        self.display = initial_value
        self.previous_value: Optional[Decimal] = None
        self.operation: Optional[Operator] = None
        self.waiting_for_operand = False
        self.expression = ""

    def input_digit(self, digit: str) -> None:
        if len(digit) != 1 or not digit.isdigit():
            raise ValueError(f"Not a digit: {digit!r}")
        if self.waiting_for_operand or self.display == ERROR_DISPLAY:
            self.display = digit
            self.waiting_for_operand = False
        else:
            self.display = digit if self.display == "0" else self.display + digit

    def input_decimal(self) -> None:
        if self.waiting_for_operand or self.display == ERROR_DISPLAY:
            self.display = "0."
            self.waiting_for_operand = False
        elif "." not in self.display:
            self.display += "."

    def backspace(self) -> None:
        shortened = "" if self.display == ERROR_DISPLAY else self.display[:-1]
        # A lone sign is not a number
        self.display = shortened if shortened not in ("", "-") else "0"

    def clear(self) -> None:
        self.display = "0"
        self.previous_value = None
        self.operation = None
        self.waiting_for_operand = False
        self.expression = ""

    def perform_operation(self, symbol: str) -> Optional[CalculationCreate]:
        """Press an operator key.

        Returns:
            The completed calculation when this key finished a chained
            operation, otherwise None.
        """
        next_operation = parse_operator(symbol)
        input_value = self._display_value()
        completed = None

        if self.previous_value is None:
            self.previous_value = input_value
            self.expression = f"{format_number(input_value)} {next_operation}"
        elif self.operation is not None and self.waiting_for_operand:
            # Operator pressed twice: replace it
            self.expression = f"{format_number(self.previous_value)} {next_operation}"
        elif self.operation is not None:
            completed = self._complete(self.previous_value, input_value, self.operation)
            if completed is None:
                return None
            self.previous_value = completed.result
            self.expression = f"{format_number(completed.result)} {next_operation}"

        self.waiting_for_operand = True
        self.operation = next_operation
        return completed

    def equals(self) -> Optional[CalculationCreate]:
        """Press the equals key.

        Returns:
            The completed calculation, or None if nothing was pending.
        """
        if self.operation is None or self.previous_value is None:
            return None

        input_value = self._display_value()
        completed = self._complete(self.previous_value, input_value, self.operation)
        if completed is None:
            return None

        self.expression = (
            f"{format_number(completed.operand1)} {completed.operator} "
            f"{format_number(completed.operand2)} = {format_number(completed.result)}"
        )
        self.operation = None
        self.previous_value = None
        self.waiting_for_operand = True
        return completed

    def _display_value(self) -> Decimal:
        if self.display == ERROR_DISPLAY:
            return Decimal(0)
        return Decimal(self.display)

    def _complete(
        self,
        operand1: Decimal,
        operand2: Decimal,
        operation: Operator,
    ) -> Optional[CalculationCreate]:
        try:
            result = calculate(operand1, operand2, operation)
            calculation = CalculationCreate(
                operand1=operand1,
                operator=operation,
                operand2=operand2,
                result=result,
            )
        except (DivisionByZero, InvalidOperation, ValidationError):
            self.clear()
            self.display = ERROR_DISPLAY
            self.waiting_for_operand = True
            return None

        self.display = format_number(result)
        if self.on_calculate is not None:
            self.on_calculate(calculation)
        return calculation


def calculate(operand1: Decimal, operand2: Decimal, operation: Operator) -> Decimal:
    """Apply an operator.

    Raises:
        DivisionByZero: If dividing by zero.
    """
    if operation == Operator.ADD:
        return operand1 + operand2
    if operation == Operator.SUBTRACT:
        return operand1 - operand2
    if operation == Operator.MULTIPLY:
        return operand1 * operand2
    if operand2 == 0:
        raise DivisionByZero("division by zero")
    return operand1 / operand2
