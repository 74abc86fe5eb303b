"""Tests for src/validation.py module.

Tests cover:
- validate_history_entry()
- validate_fixed_field_text()
- validate_saved_bet()

Each function is tested for:
- Valid inputs (should return True)
- Invalid inputs (should return False and log warnings)
- Edge cases (None, wrong types, out-of-range fields)
"""

import pytest

from src.validation import (
    validate_fixed_field_text,
    validate_history_entry,
    validate_saved_bet,
)


@pytest.mark.unit
class TestValidateHistoryEntry:
    """Tests for validate_history_entry() function."""

    @pytest.mark.parametrize("entry", [
        {'kind': 'pending', 'operand': '5', 'operator': '+'},
        {'kind': 'pending', 'operand': '0.5', 'operator': '/'},
        {'kind': 'finalized', 'expression': '2 + 3', 'result': '5'},
        {'kind': 'finalized', 'expression': '5 / 0', 'result': 'Error'},
    ])
    def test_valid_entries(self, entry):
        assert validate_history_entry(entry) is True

    def test_plain_string_rejected(self, caplog):
        assert validate_history_entry('2 + 3 = 5') is False
        assert "History entry is not a dictionary" in caplog.text

    def test_none_rejected(self, caplog):
        assert validate_history_entry(None) is False
        assert "History entry is not a dictionary" in caplog.text

    def test_unknown_kind(self, caplog):
        assert validate_history_entry({'kind': 'memory', 'value': '5'}) is False
        assert "Unknown history entry kind" in caplog.text

    def test_missing_kind(self, caplog):
        assert validate_history_entry({'operand': '5', 'operator': '+'}) is False
        assert "Unknown history entry kind" in caplog.text

    def test_pending_missing_operand(self, caplog):
        assert validate_history_entry({'kind': 'pending', 'operator': '+'}) is False
        assert "Pending history entry missing operand" in caplog.text

    def test_pending_numeric_operand(self, caplog):
        assert validate_history_entry({'kind': 'pending', 'operand': 5, 'operator': '+'}) is False
        assert "Pending history entry missing operand" in caplog.text

    def test_pending_unknown_operator(self, caplog):
        assert validate_history_entry({'kind': 'pending', 'operand': '5', 'operator': '%'}) is False
        assert "unknown operator" in caplog.text

    @pytest.mark.parametrize("missing", ['expression', 'result'])
    def test_finalized_missing_field(self, missing, caplog):
        entry = {'kind': 'finalized', 'expression': '2 + 3', 'result': '5'}
        del entry[missing]
        assert validate_history_entry(entry) is False
        assert f"Finalized history entry missing field: {missing}" in caplog.text


@pytest.mark.unit
class TestValidateFixedFieldText:
    """Tests for validate_fixed_field_text() function."""

    @pytest.mark.parametrize("value,count", [
        ('total', 2),
        ('stake1', 2),
        ('stake2', 2),
        ('stake3', 3),
        ('stake4', 4),
    ])
    def test_valid(self, value, count):
        assert validate_fixed_field_text(value, count) is True

    @pytest.mark.parametrize("value,count", [
        ('stake3', 2),
        ('stake0', 4),
        ('stake', 2),
        ('stake-1', 2),
        ('stakes1', 2),
        ('stake01', 2),
        ('stake²', 2),
        ('stake٢', 2),
        ('stake 1', 2),
        ('Total', 2),
        ('', 2),
        (None, 2),
        (1, 2),
    ])
    def test_invalid(self, value, count):
        assert validate_fixed_field_text(value, count) is False


@pytest.mark.unit
class TestValidateSavedBet:
    """Tests for validate_saved_bet() function."""

    def test_valid_full_record(self, sample_saved_bet):
        assert validate_saved_bet(sample_saved_bet.model_dump(), 2) is True

    def test_valid_minimal_record(self):
        assert validate_saved_bet({'name': 'A', 'odds': ['2.1', '2.0']}, 2) is True

    def test_valid_three_way(self):
        bet = {
            'name': 'Match',
            'odds': ['2.0', '3.0', '4.0'],
            'odds_types': ['', '', ''],
            'stakes': [60, 40, 30],
            'total_stake': '130',
            'fixed_field': 'stake3',
        }
        assert validate_saved_bet(bet, 3) is True

    def test_not_dict(self, caplog):
        assert validate_saved_bet(['A', ['2.1', '2.0']], 2) is False
        assert "Saved bet is not a dictionary" in caplog.text

    def test_missing_name(self, caplog):
        assert validate_saved_bet({'odds': ['2.1', '2.0']}, 2) is False
        assert "Saved bet missing name" in caplog.text

    def test_wrong_odds_count(self, caplog):
        assert validate_saved_bet({'name': 'A', 'odds': ['2.1']}, 2) is False
        assert "does not have 2 odds" in caplog.text

    def test_three_way_record_in_two_way_list(self, caplog):
        assert validate_saved_bet({'name': 'A', 'odds': ['2.0', '3.0', '4.0']}, 2) is False
        assert "does not have 2 odds" in caplog.text

    def test_odds_not_list(self, caplog):
        assert validate_saved_bet({'name': 'A', 'odds': '2.1 / 2.0'}, 2) is False
        assert "does not have 2 odds" in caplog.text

    def test_too_many_stakes(self, caplog):
        bet = {'name': 'A', 'odds': ['2.1', '2.0'], 'stakes': [1, 2, 3]}
        assert validate_saved_bet(bet, 2) is False
        assert "has malformed stakes" in caplog.text

    def test_odds_types_not_list(self, caplog):
        bet = {'name': 'A', 'odds': ['2.1', '2.0'], 'odds_types': 'Bet365'}
        assert validate_saved_bet(bet, 2) is False
        assert "has malformed odds_types" in caplog.text

    def test_fixed_field_outside_market(self, caplog):
        bet = {'name': 'A', 'odds': ['2.1', '2.0'], 'fixed_field': 'stake4'}
        assert validate_saved_bet(bet, 2) is False
        assert "has invalid fixed field" in caplog.text

    def test_superscript_stake_number(self, caplog):
        bet = {'name': 'A', 'odds': ['2.1', '2.0'], 'fixed_field': 'stake²'}
        assert validate_saved_bet(bet, 2) is False
        assert "has invalid fixed field" in caplog.text
