"""
Shared pytest fixtures for surebet engine tests.

This module provides fixtures for:
- Key-value database (with automatic cleanup)
- Sample odds sets and saved bets
"""

import os
import tempfile
from typing import Generator, List

import pytest

from src.models import SavedBet


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest.fixture
def temp_db() -> Generator[str, None, None]:
    """
    Point the key-value store at a temporary database file.

    Yields:
        Path to temporary database file

    Cleanup:
        Restores the configured path and removes the file after the test
    """
    fd, path = tempfile.mkstemp(suffix='.db')
    os.close(fd)

    import src.config
    original_config_path = src.config.DATABASE_PATH
    src.config.DATABASE_PATH = path

    import src.db
    src.db.DATABASE_PATH = path

    yield path

    src.config.DATABASE_PATH = original_config_path
    src.db.DATABASE_PATH = original_config_path

    try:
        os.unlink(path)
    except OSError:
        pass


@pytest.fixture
def initialized_db(temp_db: str) -> Generator[str, None, None]:
    """
    Provide a database path with the key-value table created.

    Args:
        temp_db: Path to temporary database file

    Yields:
        Database path with initialized schema
    """
    from src import db
    db.initialize_db()

    yield temp_db


# ============================================================================
# Odds Fixtures
# ============================================================================

@pytest.fixture
def arbitrage_odds_2way() -> List[str]:
    """Two-way odds with a positive margin (1/2.1 + 1/2.1 < 1)."""
    return ["2.1", "2.1"]


@pytest.fixture
def balanced_odds_3way() -> List[str]:
    """Three-way odds with a negative margin, as used in the worked examples."""
    return ["2.0", "3.0", "4.0"]


@pytest.fixture
def arbitrage_odds_4way() -> List[str]:
    """Four-way odds with a positive margin (implied probabilities sum to 0.8)."""
    return ["5.0", "5.0", "5.0", "5.0"]


# ============================================================================
# Saved Bet Fixtures
# ============================================================================

@pytest.fixture
def sample_saved_bet() -> SavedBet:
    """A saved 2-way bet as written by the save button."""
    return SavedBet(
        name="Derby",
        odds=["2.1", "2.05"],
        odds_types=["Bet365", ""],
        stakes=[49.0, 51.0],
        total_stake="100",
        fixed_field="total",
    )


@pytest.fixture
def sample_saved_bets(sample_saved_bet: SavedBet) -> List[SavedBet]:
    """Two saved 2-way bets."""
    return [
        sample_saved_bet,
        SavedBet(
            name="Final",
            odds=["1.8", "2.2"],
            odds_types=["", "Pinnacle"],
            stakes=[134.0, 110.0],
            total_stake="244",
            fixed_field="stake2",
        ),
    ]
