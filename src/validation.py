"""Input validation for persisted and externally supplied payloads."""

from typing import Any, Dict
import logging
import re

from .config import OPERATORS, STAKE_FIELD_PREFIX, TOTAL_FIELD

logger = logging.getLogger('surebet')

_STAKE_NUMBER = re.compile(r"[1-9][0-9]*")


def validate_history_entry(entry: Dict[str, Any]) -> bool:
    """Validate a persisted calculator history entry.

    Args:
        entry: Decoded JSON object from the history key

    Returns:
        True if the entry can be loaded as a pending or finalized entry

    Validation Rules:
        - Must be a dictionary with a ``kind`` of ``pending`` or ``finalized``
        - pending: string ``operand`` and a known ``operator``
        - finalized: string ``expression`` and ``result``

    Examples:
        >>> validate_history_entry({'kind': 'pending', 'operand': '5', 'operator': '+'})
        True
        >>> validate_history_entry({'kind': 'pending', 'operand': '5', 'operator': '%'})
        False
        >>> validate_history_entry('2 + 3 = 5')
        False
    """
    if not isinstance(entry, dict):
        logger.warning(f"History entry is not a dictionary: {entry!r}")
        return False

    kind = entry.get('kind')

    if kind == 'pending':
        if not isinstance(entry.get('operand'), str):
            logger.warning("Pending history entry missing operand")
            return False
        if entry.get('operator') not in OPERATORS:
            logger.warning(f"Pending history entry has unknown operator: {entry.get('operator')!r}")
            return False
        return True

    if kind == 'finalized':
        for field in ('expression', 'result'):
            if not isinstance(entry.get(field), str):
                logger.warning(f"Finalized history entry missing field: {field}")
                return False
        return True

    logger.warning(f"Unknown history entry kind: {kind!r}")
    return False


def validate_fixed_field_text(value: Any, outcome_count: int) -> bool:
    """Check a ``total`` / ``stakeN`` tag against the market size.

    Examples:
        >>> validate_fixed_field_text('stake2', 2)
        True
        >>> validate_fixed_field_text('stake3', 2)
        False
    """
    if value == TOTAL_FIELD:
        return True

    if not isinstance(value, str) or not value.startswith(STAKE_FIELD_PREFIX):
        return False

    suffix = value[len(STAKE_FIELD_PREFIX):]
    return _STAKE_NUMBER.fullmatch(suffix) is not None and int(suffix) <= outcome_count


def validate_saved_bet(bet: Dict[str, Any], outcome_count: int) -> bool:
    """Validate a saved bet record read back from storage.

    Args:
        bet: Decoded JSON object from a saved-bet list
        outcome_count: Number of outcomes of the calculator the list belongs to

    Returns:
        True if the record can be restored into that calculator

    Validation Rules:
        - Must be a dictionary with a string ``name``
        - ``odds`` must be a list with one entry per outcome
        - ``odds_types`` and ``stakes``, when present, must be lists no longer than ``odds``
        - ``fixed_field`` must name the total or a stake inside the market

    Examples:
        >>> validate_saved_bet({'name': 'A', 'odds': ['2.1', '2.0']}, 2)
        True
        >>> validate_saved_bet({'name': 'A', 'odds': ['2.1']}, 2)
        False
    """
    if not isinstance(bet, dict):
        logger.warning("Saved bet is not a dictionary")
        return False

    if not isinstance(bet.get('name'), str):
        logger.warning("Saved bet missing name")
        return False

    odds = bet.get('odds')
    if not isinstance(odds, list) or len(odds) != outcome_count:
        logger.warning(f"Saved bet '{bet['name']}' does not have {outcome_count} odds")
        return False

    for field in ('odds_types', 'stakes'):
        values = bet.get(field, [])
        if not isinstance(values, list) or len(values) > outcome_count:
            logger.warning(f"Saved bet '{bet['name']}' has malformed {field}")
            return False

    if not validate_fixed_field_text(bet.get('fixed_field', TOTAL_FIELD), outcome_count):
        logger.warning(f"Saved bet '{bet['name']}' has invalid fixed field: {bet.get('fixed_field')!r}")
        return False

    return True
