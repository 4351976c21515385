"""Tests for the keypad state machine."""

from decimal import Decimal

import pytest

from src.calculations.schemas import Operator
from src.calculations.validator import verify_calculation
from src.client.keypad import ERROR_DISPLAY, Keypad, parse_operator


def _press(keypad: Keypad, keys: str):
    """Press a sequence of keys; returns every emitted calculation."""
    emitted = []
    for key in keys:
        if key.isdigit():
            keypad.input_digit(key)
        elif key == ".":
            keypad.input_decimal()
        elif key == "=":
            result = keypad.equals()
            if result is not None:
                emitted.append(result)
        else:
            result = keypad.perform_operation(key)
            if result is not None:
                emitted.append(result)
    return emitted


class TestEntry:
    """Digit entry and editing keys."""

    def test_initial_state(self):
        keypad = Keypad()
        assert keypad.display == "0"
        assert keypad.previous_value is None
        assert keypad.operation is None

    def test_digits_replace_leading_zero(self):
        keypad = Keypad()
        _press(keypad, "007")
        assert keypad.display == "7"

    def test_single_decimal_point(self):
        keypad = Keypad()
        _press(keypad, "1..5.")
        assert keypad.display == "1.5"

    def test_backspace(self):
        keypad = Keypad()
        _press(keypad, "12")
        keypad.backspace()
        assert keypad.display == "1"
        keypad.backspace()
        assert keypad.display == "0"

    def test_clear(self):
        keypad = Keypad()
        _press(keypad, "9+")
        keypad.clear()
        assert keypad.display == "0"
        assert keypad.operation is None
        assert keypad.expression == ""

    def test_rejects_non_digit(self):
        with pytest.raises(ValueError):
            Keypad().input_digit("a")

    def test_parse_operator_symbols(self):
        assert parse_operator("×") == Operator.MULTIPLY
        assert parse_operator("÷") == Operator.DIVIDE
        with pytest.raises(ValueError):
            parse_operator("^")


class TestOperations:
    """Binary operations and emitted calculations."""

    def test_equals_emits_calculation(self):
        received = []
        keypad = Keypad(on_calculate=received.append)

        emitted = _press(keypad, "2+3=")

        assert len(emitted) == 1
        calculation = emitted[0]
        assert calculation.operand1 == Decimal("2")
        assert calculation.operator == Operator.ADD
        assert calculation.operand2 == Decimal("3")
        assert calculation.result == Decimal("5")
        assert received == emitted
        assert keypad.display == "5"
        assert keypad.expression == "2 + 3 = 5"

    def test_chained_operations_emit_each_step(self):
        keypad = Keypad()

        emitted = _press(keypad, "2+3×4=")

        assert [(c.operand1, c.operator, c.operand2, c.result) for c in emitted] == [
            (Decimal("2"), Operator.ADD, Decimal("3"), Decimal("5")),
            (Decimal("5"), Operator.MULTIPLY, Decimal("4"), Decimal("20")),
        ]
        assert keypad.display == "20"

    def test_operator_pressed_twice_replaces_it(self):
        keypad = Keypad()

        emitted = _press(keypad, "8+-3=")

        assert len(emitted) == 1
        assert emitted[0].operator == Operator.SUBTRACT
        assert emitted[0].result == Decimal("5")

    def test_equals_without_pending_operation(self):
        keypad = Keypad()
        _press(keypad, "5")
        assert keypad.equals() is None

    def test_division_by_zero_shows_error(self):
        received = []
        keypad = Keypad(on_calculate=received.append)

        emitted = _press(keypad, "7÷0=")

        assert emitted == []
        assert received == []
        assert keypad.display == ERROR_DISPLAY
        _press(keypad, "4")
        assert keypad.display == "4"

    def test_emitted_calculations_pass_verification(self):
        keypad = Keypad()

        emitted = _press(keypad, "1÷3=") + _press(keypad, "0.1+0.2=")

        for calculation in emitted:
            verification = verify_calculation(
                calculation.operand1,
                calculation.operator,
                calculation.operand2,
                calculation.result,
            )
            assert verification.valid is True

    def test_backspace_on_negative_digit_resets_to_zero(self):
        keypad = Keypad()
        _press(keypad, "2-5=")
        assert keypad.display == "-3"

        keypad.backspace()
        assert keypad.display == "0"

        emitted = _press(keypad, "+4=")
        assert emitted[-1].operand1 == Decimal("0")
        assert emitted[-1].result == Decimal("4")
        assert keypad.display == "4"
