"""Key-value persistence for calculator state and saved bets.

Everything is stored as one string value per fixed key. This module provides
a get/set/remove contract on top of a single SQLite table, plus the helpers
that encode calculator state and saved-bet lists into those string values.
"""

import json
import os
import sqlite3
from typing import List, Optional

import pandas as pd
from pydantic import TypeAdapter, ValidationError

from .config import (
    CALCULATOR_HISTORY_KEY,
    CALCULATOR_INPUT_KEY,
    CALCULATOR_KEYS,
    CALCULATOR_OPERATOR_KEY,
    CALCULATOR_PREVIOUS_VALUE_KEY,
    CALCULATOR_RESULT_FLAG_KEY,
    DATABASE_PATH,
    OPERATORS,
    SAVED_BETS_KEYS,
    logger,
)
from .models import CalculatorState, HistoryEntry, SavedBet
from .type_safety import format_number, validate_outcome_count
from .validation import validate_history_entry, validate_saved_bet

_history_adapter = TypeAdapter(HistoryEntry)


def get_connection() -> sqlite3.Connection:
    """Create and return a database connection with row factory enabled.

    Returns:
        SQLite connection object with row_factory configured

    Examples:
        >>> conn = get_connection()
        >>> row = conn.execute("SELECT value FROM kv_store WHERE key = ?", ("calculatorInput",)).fetchone()
        >>> print(row["value"])
    """
    conn = sqlite3.connect(DATABASE_PATH)
    conn.row_factory = sqlite3.Row
    return conn


def initialize_db() -> None:
    """Initialize the key-value table.

    Creates the data directory and the ``kv_store`` table if they don't exist.
    This function is idempotent and safe to call multiple times.

    SQL Operations:
        - CREATE TABLE IF NOT EXISTS kv_store
        - Transaction is committed before closing connection
    """
    directory = os.path.dirname(DATABASE_PATH)
    if directory:
        os.makedirs(directory, exist_ok=True)

    conn = get_connection()
    cursor = conn.cursor()

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS kv_store (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
        )
    """)

    conn.commit()
    conn.close()


def get_item(key: str) -> Optional[str]:
    """Read the value stored under ``key``.

    Returns:
        The stored string, or None if the key (or the table) doesn't exist

    SQL Operations:
        - SELECT value FROM kv_store WHERE key = ?
        - Handles OperationalError if table doesn't exist
    """
    conn = get_connection()

    try:
        row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
    except sqlite3.OperationalError as e:
        logger.error(f"Database operation failed in get_item: {e}", exc_info=True)
        return None
    finally:
        conn.close()

    return row["value"] if row else None


def set_item(key: str, value: str) -> None:
    """Store ``value`` under ``key``, replacing any previous value.

    SQL Operations:
        - INSERT ... ON CONFLICT(key) DO UPDATE
        - Transaction is committed before closing connection
    """
    conn = get_connection()

    conn.execute(
        """
        INSERT INTO kv_store (key, value, updated_at)
        VALUES (?, ?, CURRENT_TIMESTAMP)
        ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
        """,
        (key, value),
    )

    conn.commit()
    conn.close()


def remove_item(key: str) -> bool:
    """Delete ``key``.

    Returns:
        True if a value was removed, False if the key (or table) didn't exist
    """
    conn = get_connection()

    try:
        cursor = conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
        removed = cursor.rowcount > 0
        conn.commit()
    except sqlite3.OperationalError as e:
        logger.error(f"Database operation failed in remove_item: {e}", exc_info=True)
        removed = False
    finally:
        conn.close()

    return removed


def clear_store() -> int:
    """Remove every stored key.

    Returns:
        Number of keys deleted (0 if table doesn't exist)
    """
    conn = get_connection()

    try:
        cursor = conn.execute("DELETE FROM kv_store")
        rows_deleted = cursor.rowcount
        conn.commit()
    except sqlite3.OperationalError as e:
        logger.error(f"Database operation failed in clear_store: {e}", exc_info=True)
        rows_deleted = 0
    finally:
        conn.close()

    return rows_deleted


# ==================== CALCULATOR STATE ====================

def save_calculator_state(state: CalculatorState) -> None:
    """Persist every calculator field under its own key.

    Absent accumulated value or operator are removed rather than stored empty.
    """
    set_item(CALCULATOR_INPUT_KEY, state.display_buffer)
    set_item(
        CALCULATOR_HISTORY_KEY,
        json.dumps([entry.model_dump() for entry in state.history]),
    )

    if state.accumulated_value:
        set_item(CALCULATOR_PREVIOUS_VALUE_KEY, state.accumulated_value)
    else:
        remove_item(CALCULATOR_PREVIOUS_VALUE_KEY)

    if state.pending_operator:
        set_item(CALCULATOR_OPERATOR_KEY, state.pending_operator)
    else:
        remove_item(CALCULATOR_OPERATOR_KEY)

    set_item(CALCULATOR_RESULT_FLAG_KEY, json.dumps(state.is_showing_result))


def _load_history(raw: Optional[str]) -> tuple:
    if not raw:
        return ()

    try:
        entries = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Stored calculator history is not valid JSON, starting with empty history")
        return ()

    if not isinstance(entries, list):
        logger.warning("Stored calculator history is not a list, starting with empty history")
        return ()

    history = []
    for entry in entries:
        if not validate_history_entry(entry):
            continue
        try:
            history.append(_history_adapter.validate_python(entry))
        except ValidationError as e:
            logger.warning(f"Skipping unreadable history entry: {e}")
    return tuple(history)


def load_calculator_state() -> CalculatorState:
    """Restore the calculator from the store, field by field.

    Missing keys fall back to the initial state's values; corrupt values are
    logged and replaced by defaults.
    """
    display_buffer = get_item(CALCULATOR_INPUT_KEY) or ""
    accumulated_value = get_item(CALCULATOR_PREVIOUS_VALUE_KEY) or None

    operator = get_item(CALCULATOR_OPERATOR_KEY) or None
    if operator is not None and operator not in OPERATORS:
        logger.warning(f"Ignoring stored calculator operator: {operator!r}")
        operator = None

    is_showing_result = False
    raw_flag = get_item(CALCULATOR_RESULT_FLAG_KEY)
    if raw_flag:
        try:
            is_showing_result = json.loads(raw_flag) is True
        except json.JSONDecodeError:
            logger.warning(f"Ignoring stored result flag: {raw_flag!r}")

    return CalculatorState(
        display_buffer=display_buffer,
        accumulated_value=accumulated_value,
        pending_operator=operator,
        history=_load_history(get_item(CALCULATOR_HISTORY_KEY)),
        is_showing_result=is_showing_result,
    )


def clear_calculator_state() -> int:
    """Remove every calculator key.

    Returns:
        Number of keys that were present
    """
    return sum(1 for key in CALCULATOR_KEYS if remove_item(key))


# ==================== SAVED BETS ====================

def _saved_bets_key(outcome_count: int) -> str:
    validate_outcome_count(outcome_count)
    return SAVED_BETS_KEYS.get(outcome_count, f"savedBets{outcome_count}Way")


def load_saved_bets(outcome_count: int) -> List[SavedBet]:
    """Read the saved-bet list of an N-way calculator.

    Records that fail validation are skipped with a warning.
    """
    raw = get_item(_saved_bets_key(outcome_count))
    if not raw:
        return []

    try:
        records = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning(f"Saved bets for {outcome_count}-way calculator are not valid JSON")
        return []

    if not isinstance(records, list):
        logger.warning(f"Saved bets for {outcome_count}-way calculator are not a list")
        return []

    bets = []
    for record in records:
        if not validate_saved_bet(record, outcome_count):
            continue
        try:
            bets.append(SavedBet.model_validate(record))
        except ValidationError as e:
            logger.warning(f"Skipping unreadable saved bet: {e}")
    return bets


def store_saved_bets(outcome_count: int, bets: List[SavedBet]) -> None:
    """Replace the saved-bet list of an N-way calculator."""
    set_item(
        _saved_bets_key(outcome_count),
        json.dumps([bet.model_dump() for bet in bets]),
    )


def get_saved_bets_table(outcome_count: int) -> pd.DataFrame:
    """Saved bets of an N-way calculator as a display DataFrame.

    Returns:
        DataFrame with columns: Name, Odds, Stakes, Total Stake, Fixed.
        Returns empty DataFrame if nothing is saved.

    Examples:
        >>> df = get_saved_bets_table(2)
        >>> if not df.empty:
        ...     print(df[['Name', 'Odds']].head())
    """
    columns = ["Name", "Odds", "Stakes", "Total Stake", "Fixed"]

    bets = load_saved_bets(outcome_count)
    if not bets:
        return pd.DataFrame(columns=columns)

    data = []
    for bet in bets:
        odds_parts = []
        for index, odds in enumerate(bet.odds):
            if not odds:
                continue
            odds_type = bet.odds_types[index] if index < len(bet.odds_types) else ""
            odds_parts.append(f"{odds_type or '-'} {odds}")

        data.append({
            "Name": bet.name,
            "Odds": " / ".join(odds_parts),
            "Stakes": " / ".join(format_number(stake) for stake in bet.stakes) or "N/A",
            "Total Stake": bet.total_stake,
            "Fixed": bet.fixed_field,
        })

    return pd.DataFrame(data, columns=columns)
