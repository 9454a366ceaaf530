"""
Calculator Engine for ChatCalc
Holds the calculator state machine and the memory register
"""
import logging
import math
import threading
from enum import Enum

import config

logger = logging.getLogger("chatcalc.calculator")


class Operation(Enum):
    NONE = "none"
    ADD = "add"
    SUBTRACT = "subtract"
    MULTIPLY = "multiply"
    DIVIDE = "divide"

    @property
    def symbol(self):
        return _OPERATION_SYMBOLS[self]


_OPERATION_SYMBOLS = {
    Operation.NONE: "",
    Operation.ADD: "+",
    Operation.SUBTRACT: "-",
    Operation.MULTIPLY: "×",
    Operation.DIVIDE: "/",
}


class CalculatorErrorKind(Enum):
    """Error kinds the state machine can degrade into"""
    DIVIDE_BY_ZERO = "Division by zero is not allowed"
    OVERFLOW = "Result is too large to represent"
    INVALID_OPERATION = "Invalid operation"
    INVALID_INPUT = "Invalid input"

    @property
    def display_text(self):
        return f"{config.ERROR_PREFIX}: {self.value}"


def format_number(value):
    """Format a float for the display.

    Whole numbers lose their trailing ".0"; everything else keeps Python's
    shortest round-trip repr, so float(format_number(v)) == v.
    """
    value = float(value)
    if value == 0:
        return "0"
    if value.is_integer() and abs(value) < 1e16:
        return str(int(value))
    return repr(value)


class MemoryRegister:
    """Single scalar memory slot (MS / MR / M+ / M- / MC)"""

    def __init__(self, initial=config.MEMORY_INITIAL_VALUE):
        self._value = float(initial)
        self._lock = threading.Lock()

    def store(self, value):
        with self._lock:
            self._value = float(value)

    def recall(self):
        with self._lock:
            return self._value

    def clear(self):
        with self._lock:
            self._value = 0.0

    def add(self, value):
        with self._lock:
            self._value += float(value)

    def subtract(self, value):
        with self._lock:
            self._value -= float(value)


class CalculatorState:
    def __init__(self, memory=None):
        self.memory = memory if memory is not None else MemoryRegister()
        self.clear()

    # ── Accessors ────────────────────────────────────────────────────────
    def display_value(self):
        """Get the current display string"""
        return self._display

    @property
    def is_error(self):
        return self._error_kind is not None

    @property
    def error_kind(self):
        return self._error_kind

    @property
    def pending_operand(self):
        return self._pending_operand

    @property
    def pending_operation(self):
        return self._pending_operation

    @property
    def is_fresh(self):
        """True when the next digit starts a new number"""
        return self._clear_on_next_input

    # ── Clearing ─────────────────────────────────────────────────────────
    def clear(self):
        """Full reset, memory excluded"""
        self._display = "0"
        self._pending_operand = None
        self._pending_operation = Operation.NONE
        self._clear_on_next_input = True
        self._last_pressed_operation = False
        self._error_kind = None

    def clear_entry(self):
        """Reset only the current entry, keeping the pending operation"""
        self._display = "0"
        self._clear_on_next_input = False
        self._error_kind = None

    # ── Entry ────────────────────────────────────────────────────────────
    def input_digit(self, digit):
        """Add a digit to the current entry"""
        if self.is_error:
            return
        if not isinstance(digit, int) or isinstance(digit, bool) or not 0 <= digit <= 9:
            return

        if self._clear_on_next_input:
            self._display = str(digit)
            self._clear_on_next_input = False
        elif self._display in ("0", "-0"):
            self._display = self._display[:-1] + str(digit)
        elif self._digit_count() < config.MAX_DIGITS:
            self._display += str(digit)

        self._last_pressed_operation = False

    def input_decimal(self):
        """Add a decimal point unless the entry already has one"""
        if self.is_error:
            return

        if self._clear_on_next_input:
            self._display = "0."
            self._clear_on_next_input = False
        elif "." not in self._display:
            self._display += "."

        self._last_pressed_operation = False

    def toggle_sign(self):
        if self.is_error or self._display == "0":
            return
        if self._display.startswith("-"):
            self._display = self._display[1:]
        else:
            self._display = "-" + self._display

    def backspace(self):
        """Remove the last character of the entry"""
        if self.is_error:
            return
        if self._clear_on_next_input:
            # A result is on screen, there is nothing to edit
            self.clear_entry()
            return

        remaining = self._display[:-1]
        if remaining in ("", "-"):
            remaining = "0"
        self._display = remaining

    def load_value(self, value):
        """Show a number that came from outside the keypad (MR, chat)"""
        if self.is_error:
            return
        value = float(value)
        if math.isinf(value):
            self._enter_error(CalculatorErrorKind.OVERFLOW)
            return
        if math.isnan(value):
            self._enter_error(CalculatorErrorKind.INVALID_OPERATION)
            return
        self._display = format_number(value)
        self._clear_on_next_input = True
        self._last_pressed_operation = False

    # ── Operations ───────────────────────────────────────────────────────
    def set_operation(self, operation):
        """Select an operator, committing a pending chained operation first"""
        if operation is Operation.NONE or not isinstance(operation, Operation):
            raise ValueError(f"Not an arithmetic operation: {operation!r}")
        if self.is_error:
            return

        if (self._pending_operation is not Operation.NONE
                and self._pending_operand is not None
                and not self._last_pressed_operation):
            self.calculate()
            if self.is_error:
                return

        value = self._parse_display()
        if value is None:
            return

        self._pending_operand = value
        self._pending_operation = operation
        self._clear_on_next_input = True
        self._last_pressed_operation = True

    def calculate(self):
        """Apply the pending operation to the pending operand and the display"""
        if self.is_error:
            return

        if self._pending_operation is not Operation.NONE and self._pending_operand is not None:
            second = self._parse_display()
            if second is None:
                return
            first = self._pending_operand
            result = self._apply(self._pending_operation, first, second)
            if result is not None:
                logger.debug("%s %s %s = %s", first, self._pending_operation.symbol, second, result)
                self._display = format_number(result)
                self._pending_operand = result

        self._pending_operation = Operation.NONE
        self._clear_on_next_input = True
        self._last_pressed_operation = False

    # ── Memory ───────────────────────────────────────────────────────────
    def memory_store(self, value):
        self.memory.store(value)

    def memory_recall(self):
        return self.memory.recall()

    def memory_clear(self):
        self.memory.clear()

    def memory_add(self, value):
        self.memory.add(value)

    def memory_subtract(self, value):
        self.memory.subtract(value)

    # ── Internals ────────────────────────────────────────────────────────
    def _digit_count(self):
        return sum(1 for ch in self._display if ch.isdigit())

    def _parse_display(self):
        try:
            return float(self._display)
        except ValueError:
            self._enter_error(CalculatorErrorKind.INVALID_INPUT)
            return None

    def _apply(self, operation, first, second):
        if operation is Operation.ADD:
            result = first + second
        elif operation is Operation.SUBTRACT:
            result = first - second
        elif operation is Operation.MULTIPLY:
            result = first * second
        elif second == 0:
            self._enter_error(CalculatorErrorKind.DIVIDE_BY_ZERO)
            return None
        else:
            result = first / second

        if math.isinf(result):
            self._enter_error(CalculatorErrorKind.OVERFLOW)
            return None
        if math.isnan(result):
            self._enter_error(CalculatorErrorKind.INVALID_OPERATION)
            return None
        return result

    def _enter_error(self, kind):
        logger.info("Calculator entered error state: %s", kind.name)
        self._error_kind = kind
        self._display = kind.display_text
        self._pending_operand = None
        self._pending_operation = Operation.NONE
        self._clear_on_next_input = True
        self._last_pressed_operation = False

    def __repr__(self):
        return (f"CalculatorState(display={self._display!r}, "
                f"pending_operand={self._pending_operand!r}, "
                f"pending_operation={self._pending_operation.name}, "
                f"fresh={self._clear_on_next_input}, error={self._error_kind})")
