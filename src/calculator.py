"""Four-function calculator as a reducer over :class:`CalculatorState`.

Every transition takes the current state and returns a new one; nothing is
mutated in place. :class:`CalculatorSession` wraps the reducer with
persistence so the widget reopens exactly where it was left.

Arithmetic is plain float arithmetic and results are stringified with
:func:`format_number`, so artifacts such as ``0.1 + 0.2 = 0.30000000000000004``
are shown exactly as computed.
"""

import logging
from typing import Optional, Tuple

from . import db
from .config import DIGIT_KEYS, ERROR_MARKER, OPERATORS
from .models import CalculatorState, FinalizedEntry, PendingEntry
from .type_safety import divide, format_number, parse_number

logger = logging.getLogger('surebet')

# Button labels as printed on the keypad
KEY_ALIASES = {
    "÷": "/",
    "×": "*",
    "−": "-",
    "=": "equals",
    "DEL": "delete",
    "AC": "clear_all",
}


def _apply(left: float, operator: str, right: float) -> float:
    if operator == "+":
        return left + right
    if operator == "-":
        return left - right
    if operator == "*":
        return left * right
    return divide(left, right)


def press_digit(state: CalculatorState, digit: str) -> CalculatorState:
    """Enter a digit or decimal point.

    A shown result (or error) is replaced and its context dropped; otherwise
    the digit is appended, ignoring a second decimal point.
    """
    if digit not in DIGIT_KEYS:
        raise ValueError(f"Not a digit key: {digit!r}")

    if state.is_showing_result:
        return state.model_copy(update={
            "display_buffer": digit,
            "accumulated_value": None,
            "pending_operator": None,
            "is_showing_result": False,
        })

    if digit == "." and "." in state.display_buffer:
        return state

    return state.model_copy(update={"display_buffer": state.display_buffer + digit})


def resolve(state: CalculatorState) -> Tuple[CalculatorState, Optional[str]]:
    """Evaluate the pending operation.

    Returns:
        The new state and the result string, or ``None`` when nothing was
        computed (operation incomplete or division by zero)
    """
    if (
        state.pending_operator is None
        or state.accumulated_value is None
        or state.display_buffer == ""
    ):
        return state, None

    operator = state.pending_operator
    left = parse_number(state.accumulated_value)
    right = parse_number(state.display_buffer)

    if operator == "/" and right == 0:
        logger.info(f"Division by zero: {state.accumulated_value} / {state.display_buffer}")
        entry = FinalizedEntry(
            expression=f"{format_number(left)} {operator} {format_number(right)}",
            result=ERROR_MARKER,
        )
        return state.model_copy(update={
            "display_buffer": ERROR_MARKER,
            "accumulated_value": None,
            "pending_operator": None,
            "history": state.history + (entry,),
            "is_showing_result": True,
        }), None

    result = format_number(_apply(left, operator, right))
    entry = FinalizedEntry(
        expression=f"{state.accumulated_value} {operator} {state.display_buffer}",
        result=result,
    )
    return state.model_copy(update={
        "display_buffer": result,
        "accumulated_value": result,
        "pending_operator": None,
        "history": state.history + (entry,),
        "is_showing_result": True,
    }), result


def press_equals(state: CalculatorState) -> CalculatorState:
    new_state, _ = resolve(state)
    return new_state


def press_operator(state: CalculatorState, operator: str) -> CalculatorState:
    """Choose an operator.

    Handles the first operator of a calculation, chaining (``5 + 2 *``
    resolves ``5 + 2`` first), swapping the pending operator before the
    second operand, and continuing from a shown result.
    """
    if operator not in OPERATORS:
        raise ValueError(f"Unknown operator: {operator!r}")

    buffer = state.display_buffer

    if buffer != "" and not state.is_showing_result:
        if state.accumulated_value is not None and state.pending_operator is not None:
            resolved, result = resolve(state)
            if result is None:
                return resolved
            return resolved.model_copy(update={
                "accumulated_value": result,
                "pending_operator": operator,
                "history": resolved.history + (PendingEntry(operand=result, operator=operator),),
                "display_buffer": "",
                "is_showing_result": False,
            })

        return state.model_copy(update={
            "accumulated_value": buffer,
            "pending_operator": operator,
            "history": state.history + (PendingEntry(operand=buffer, operator=operator),),
            "display_buffer": "",
            "is_showing_result": False,
        })

    if state.accumulated_value is not None:
        operand = buffer if state.is_showing_result and buffer != "" else state.accumulated_value
        entry = PendingEntry(operand=operand, operator=operator)

        if state.history and isinstance(state.history[-1], PendingEntry):
            history = state.history[:-1] + (entry,)
        else:
            history = state.history + (entry,)

        return state.model_copy(update={
            "accumulated_value": operand,
            "pending_operator": operator,
            "history": history,
            "display_buffer": "",
            "is_showing_result": False,
        })

    return state


def press_delete(state: CalculatorState) -> CalculatorState:
    """Backspace; on a shown result it clears the display instead."""
    if state.is_showing_result:
        return state.model_copy(update={"display_buffer": "", "is_showing_result": False})
    return state.model_copy(update={"display_buffer": state.display_buffer[:-1]})


def clear_all() -> CalculatorState:
    return CalculatorState()


def dispatch(state: CalculatorState, event: str, value: Optional[str] = None) -> CalculatorState:
    """Apply one event: ``digit``, ``operator``, ``equals``, ``delete`` or ``clear_all``.

    Raises:
        ValueError: For unknown events or a missing digit/operator value
    """
    if event == "digit":
        if value is None:
            raise ValueError("digit event requires a value")
        return press_digit(state, value)
    if event == "operator":
        if value is None:
            raise ValueError("operator event requires a value")
        return press_operator(state, value)
    if event == "equals":
        return press_equals(state)
    if event == "delete":
        return press_delete(state)
    if event == "clear_all":
        return clear_all()
    raise ValueError(f"Unknown calculator event: {event!r}")


def key_to_event(key: str) -> Tuple[str, Optional[str]]:
    """Map a keypad label such as ``7``, ``.``, ``×``, ``=``, ``DEL`` or ``AC`` to an event."""
    key = KEY_ALIASES.get(key, key)
    if key in DIGIT_KEYS:
        return "digit", key
    if key in OPERATORS:
        return "operator", key
    return key, None


def press_key(state: CalculatorState, key: str) -> CalculatorState:
    event, value = key_to_event(key)
    return dispatch(state, event, value)


def run_keys(keys, state: Optional[CalculatorState] = None) -> CalculatorState:
    """Feed a sequence of keypad labels through the reducer.

    Examples:
        >>> run_keys(["2", "+", "3", "="]).display
        '5'
    """
    state = state if state is not None else CalculatorState()
    for key in keys:
        state = press_key(state, key)
    return state


class CalculatorSession:
    """Calculator widget state backed by the key-value store.

    State is read once on construction and written after every event;
    ``clear_all`` removes the persisted keys.
    """

    def __init__(self):
        db.initialize_db()
        self.state = db.load_calculator_state()

    def dispatch(self, event: str, value: Optional[str] = None) -> CalculatorState:
        self.state = dispatch(self.state, event, value)
        if event == "clear_all":
            db.clear_calculator_state()
        else:
            db.save_calculator_state(self.state)
        return self.state

    def press(self, key: str) -> CalculatorState:
        event, value = key_to_event(key)
        return self.dispatch(event, value)
