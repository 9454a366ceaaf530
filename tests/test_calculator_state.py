import pytest

from calculator import (
    CalculatorErrorKind,
    CalculatorState,
    MemoryRegister,
    Operation,
    format_number,
)


def enter(state, keys):
    """Feed a compact key string such as '12.5+3=' into the state"""
    ops = {'+': Operation.ADD, '-': Operation.SUBTRACT, '*': Operation.MULTIPLY, '/': Operation.DIVIDE}
    for key in keys:
        if key.isdigit():
            state.input_digit(int(key))
        elif key == '.':
            state.input_decimal()
        elif key in ops:
            state.set_operation(ops[key])
        elif key == '=':
            state.calculate()
        else:
            raise AssertionError(f"bad key {key!r}")
    return state.display_value()


@pytest.fixture
def state():
    return CalculatorState()


def test_initial_state(state):
    assert state.display_value() == "0"
    assert state.pending_operation is Operation.NONE
    assert state.pending_operand is None
    assert state.is_fresh
    assert not state.is_error


def test_digits_concatenate_with_leading_zero_suppressed(state):
    assert enter(state, "0") == "0"
    assert enter(state, "0") == "0"
    assert enter(state, "5") == "5"
    assert enter(state, "30") == "530"


def test_digit_entry_capped_at_max_digits(state):
    enter(state, "1234567890" * 2)
    assert state.display_value() == "123456789012345"


def test_decimal_cap_ignores_point_and_sign(state):
    enter(state, "1.2345678901234")
    enter(state, "56")
    assert state.display_value() == "1.23456789012345"


def test_invalid_digit_ignored(state):
    state.input_digit(12)
    state.input_digit(-1)
    assert state.display_value() == "0"


def test_decimal_entry(state):
    assert enter(state, ".") == "0."
    assert enter(state, "5.") == "0.5"
    assert enter(state, ".") == "0.5"


def test_decimal_after_result_starts_new_number(state):
    enter(state, "2+3=")
    assert enter(state, ".7") == "0.7"


def test_addition_subtraction_multiplication_division(state):
    assert enter(state, "7+2=") == "9"
    state.clear()
    assert enter(state, "7-9=") == "-2"
    state.clear()
    assert enter(state, "6*7=") == "42"
    state.clear()
    assert enter(state, "7/2=") == "3.5"


def test_chained_operations_evaluate_left_to_right(state):
    assert enter(state, "5+3+") == "8"
    assert enter(state, "2=") == "10"

    state.clear()
    assert enter(state, "2+3*4=") == "20"


def test_repeated_operator_replaces_pending_operation(state):
    enter(state, "6+-")
    assert state.pending_operation is Operation.SUBTRACT
    assert state.display_value() == "6"
    assert enter(state, "2=") == "4"


def test_operator_then_equals_applies_once(state):
    enter(state, "5+")
    assert enter(state, "=") == "10"
    assert enter(state, "=") == "10"
    assert state.pending_operation is Operation.NONE


def test_calculate_without_pending_is_noop(state):
    enter(state, "42")
    state.calculate()
    assert state.display_value() == "42"
    state.calculate()
    assert state.display_value() == "42"


def test_digit_after_result_starts_new_number(state):
    enter(state, "2+2=")
    assert enter(state, "7") == "7"


def test_result_can_be_used_as_next_operand(state):
    enter(state, "2+2=")
    assert enter(state, "*3=") == "12"


def test_divide_by_zero_enters_error_state(state):
    enter(state, "8/0=")
    assert state.is_error
    assert state.error_kind is CalculatorErrorKind.DIVIDE_BY_ZERO
    assert state.display_value().startswith("Error")
    assert state.display_value() != "0"


def test_error_state_blocks_input_until_cleared(state):
    enter(state, "8/0=")
    shown = state.display_value()
    enter(state, "5+3")
    state.toggle_sign()
    state.backspace()
    state.input_decimal()
    assert state.display_value() == shown

    state.clear()
    assert state.display_value() == "0"
    assert state.pending_operation is Operation.NONE
    assert not state.is_error
    assert enter(state, "4+4=") == "8"


def test_clear_entry_leaves_error_state(state):
    enter(state, "8/0=")
    state.clear_entry()
    assert not state.is_error
    assert state.display_value() == "0"


def test_overflow_enters_error_state(state):
    state.load_value(1e308)
    state.set_operation(Operation.MULTIPLY)
    state.load_value(10)
    state.calculate()
    assert state.error_kind is CalculatorErrorKind.OVERFLOW


def test_clear_entry_keeps_pending_operation(state):
    enter(state, "5+9")
    state.clear_entry()
    assert state.display_value() == "0"
    assert state.pending_operation is Operation.ADD
    assert enter(state, "3=") == "8"


def test_clear_keeps_memory(state):
    state.memory_store(11)
    enter(state, "5+3")
    state.clear()
    assert state.pending_operand is None
    assert state.memory_recall() == 11


def test_toggle_sign(state):
    state.toggle_sign()
    assert state.display_value() == "0"

    enter(state, "12.5")
    state.toggle_sign()
    assert state.display_value() == "-12.5"
    state.toggle_sign()
    assert state.display_value() == "12.5"


def test_negative_operand(state):
    enter(state, "4")
    state.toggle_sign()
    assert enter(state, "*3=") == "-12"


def test_backspace(state):
    enter(state, "123")
    state.backspace()
    assert state.display_value() == "12"
    state.backspace()
    state.backspace()
    assert state.display_value() == "0"
    state.backspace()
    assert state.display_value() == "0"


def test_backspace_on_lone_sign_resets_to_zero(state):
    enter(state, "7")
    state.toggle_sign()
    state.backspace()
    assert state.display_value() == "0"


def test_backspace_keeps_pending_operation(state):
    enter(state, "9-12")
    state.backspace()
    assert state.pending_operation is Operation.SUBTRACT
    assert state.pending_operand == 9
    assert enter(state, "=") == "8"


def test_backspace_after_result_clears_entry(state):
    enter(state, "9*9=")
    state.backspace()
    assert state.display_value() == "0"


def test_set_operation_rejects_none(state):
    with pytest.raises(ValueError):
        state.set_operation(Operation.NONE)


def test_load_value_marks_fresh(state):
    state.load_value(2.5)
    assert state.display_value() == "2.5"
    assert enter(state, "3") == "3"


def test_load_value_ignored_in_error_state(state):
    shown = enter(state, "8/0=")
    state.load_value(5)
    assert state.display_value() == shown
    assert state.error_kind is CalculatorErrorKind.DIVIDE_BY_ZERO


@pytest.mark.parametrize("value, kind", [
    (float('inf'), CalculatorErrorKind.OVERFLOW),
    (float('-inf'), CalculatorErrorKind.OVERFLOW),
    (float('nan'), CalculatorErrorKind.INVALID_OPERATION),
])
def test_load_non_finite_value_enters_error_state(state, value, kind):
    enter(state, "3+")
    state.load_value(value)
    assert state.error_kind is kind
    assert state.pending_operation is Operation.NONE
    state.load_value(2)
    assert state.is_error


def test_memory_independent_of_arithmetic(state):
    state.memory_store(5)
    assert enter(state, "7+2=") == "9"
    assert state.memory_recall() == 5


def test_shared_memory_register_is_injected():
    memory = MemoryRegister()
    first = CalculatorState(memory)
    second = CalculatorState(memory)
    first.memory_add(3)
    assert second.memory_recall() == 3


def test_display_round_trips_through_inverse_operation(state):
    enter(state, "1/3=")
    shown = state.display_value()
    assert float(shown) == state.pending_operand
    enter(state, "*3=")
    assert float(state.display_value()) == pytest.approx(1.0)

    state.clear()
    enter(state, "0.1+0.2=")
    enter(state, "-0.2=")
    assert float(state.display_value()) == pytest.approx(0.1)


@pytest.mark.parametrize("value, expected", [
    (10.0, "10"),
    (-3.0, "-3"),
    (-0.0, "0"),
    (0.5, "0.5"),
    (0.1 + 0.2, "0.30000000000000004"),
    (1e16, "1e+16"),
])
def test_format_number(value, expected):
    assert format_number(value) == expected
    assert float(format_number(value)) == value


def test_memory_register_operations():
    memory = MemoryRegister()
    assert memory.recall() == 0
    memory.store(10)
    memory.add(2.5)
    memory.subtract(0.5)
    assert memory.recall() == 12
    memory.clear()
    assert memory.recall() == 0


def test_memory_register_updates_are_atomic():
    import threading

    memory = MemoryRegister()

    def bump():
        for _ in range(1000):
            memory.add(1)

    threads = [threading.Thread(target=bump) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert memory.recall() == 8000
