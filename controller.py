"""
Calculator Controller for ChatCalc
Translates button presses and key events into calculator state calls
"""
import logging
import threading

from calculator import CalculatorState, Operation, format_number
from history_manager import HistoryManager

logger = logging.getLogger("chatcalc.controller")

OPERATOR_BUTTONS = {
    '+': Operation.ADD,
    '-': Operation.SUBTRACT,
    '×': Operation.MULTIPLY,
    '*': Operation.MULTIPLY,
    'x': Operation.MULTIPLY,
    '/': Operation.DIVIDE,
    '÷': Operation.DIVIDE,
}

MEMORY_BUTTONS = ('MS', 'MR', 'M+', 'M-', 'MC')
BACKSPACE_BUTTONS = ('⌫', 'BS')

# Buttons laid out by the desktop GUI, row by row
BUTTON_LAYOUT = [
    ['MC', 'MR', 'MS', 'M+', 'M-'],
    ['C', 'CE', '⌫', '±', '/'],
    ['7', '8', '9', '×'],
    ['4', '5', '6', '-'],
    ['1', '2', '3', '+'],
    ['0', '.', '='],
]


class CalculatorController:
    """The one controller shared by the GUI, the web API and the chat bot"""

    def __init__(self, state=None, history=None):
        self.state = state if state is not None else CalculatorState()
        self.history = history if history is not None else HistoryManager()
        self.lock = threading.RLock()

    def display(self):
        return self.state.display_value()

    def press(self, button):
        """Handle a calculator button press and return the new display"""
        with self.lock:
            if button in '0123456789' and len(button) == 1:
                self.state.input_digit(int(button))
            elif button == '.':
                self.state.input_decimal()
            elif button in OPERATOR_BUTTONS:
                self.state.set_operation(OPERATOR_BUTTONS[button])
            elif button == '=':
                self._equals()
            elif button == 'C':
                self.state.clear()
            elif button == 'CE':
                self.state.clear_entry()
            elif button == '±':
                self.state.toggle_sign()
            elif button in BACKSPACE_BUTTONS:
                self.state.backspace()
            elif button in MEMORY_BUTTONS:
                self._memory_button(button)
            else:
                raise ValueError(f"Unknown calculator button: {button!r}")
            return self.state.display_value()

    def handle_key(self, char, keysym=""):
        """Handle keyboard input; returns None for keys the calculator ignores"""
        button = key_to_button(char, keysym)
        if button is None:
            return None
        return self.press(button)

    def _equals(self):
        state = self.state
        operation = state.pending_operation
        if operation is Operation.NONE:
            state.calculate()
            return

        expression = f"{format_number(state.pending_operand)} {operation.symbol} {state.display_value()}"
        state.calculate()
        if not state.is_error:
            self.history.add_calculation(expression, state.display_value())

    def _memory_button(self, button):
        state = self.state
        if state.is_error:
            logger.debug("Ignoring %s while the display shows an error", button)
            return

        if button == 'MC':
            state.memory_clear()
        elif button == 'MR':
            state.load_value(state.memory_recall())
        else:
            value = float(state.display_value())
            if button == 'MS':
                state.memory_store(value)
            elif button == 'M+':
                state.memory_add(value)
            else:
                state.memory_subtract(value)

    # ── Chat bridge helpers ──────────────────────────────────────────────
    def apply_calculation(self, num1, operation, num2):
        """Run num1 <op> num2 through the state machine; returns the display"""
        with self.lock:
            state = self.state
            state.clear()
            steps = (
                lambda: state.load_value(num1),
                lambda: state.set_operation(operation),
                lambda: state.load_value(num2),
                self._equals,
            )
            for step in steps:
                step()
                if state.is_error:
                    break
            return state.display_value()

    def apply_result(self, value):
        """Show a value computed elsewhere on the display"""
        with self.lock:
            self.state.load_value(value)
            return self.state.display_value()

    def snapshot(self):
        """JSON-friendly view of the calculator for the web API"""
        with self.lock:
            state = self.state
            return {
                'display': state.display_value(),
                'error': state.error_kind.name if state.error_kind else None,
                'pending_operation': state.pending_operation.value,
                'memory': state.memory_recall(),
            }


def key_to_button(char, keysym=""):
    """Map a Tk key event (char, keysym) onto a calculator button"""
    if keysym in ('Return', 'KP_Enter'):
        return '='
    if keysym == 'Escape':
        return 'C'
    if keysym == 'Delete':
        return 'CE'
    if keysym == 'BackSpace':
        return '⌫'

    if char and char in '0123456789.+-':
        return char
    if char == '*':
        return '×'
    if char == '/':
        return '/'
    if char in ('\r', '\n', '='):
        return '='
    return None
