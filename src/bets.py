"""Calculator form state, saved bets and share links for the N-way calculators.

:class:`CalculatorInputs` is what a calculator form holds: odds text, odds
type labels, the total stake text, the stake values and which field is fixed.
Saved bets snapshot those inputs under a name; share links carry them in a
query string.
"""

import logging
import math
from typing import List, Mapping, Optional, Tuple
from urllib.parse import urlencode

from pydantic import BaseModel

from . import db
from .config import STAKE_FIELD_PREFIX, TOTAL_FIELD
from .models import SavedBet, SurebetOutcome, SurebetResult, Unparseable
from .surebet import compute_surebet, parse_fixed_field
from .type_safety import format_number, safe_dict_get, to_number, validate_outcome_count

logger = logging.getLogger('surebet')


class CalculatorInputs(BaseModel):
    """Inputs of one N-way calculator form."""

    odds: List[str]
    odds_types: List[str]
    total_stake: str = "0"
    stakes: List[float]
    fixed_field: str = TOTAL_FIELD
    name: str = ""

    @classmethod
    def blank(cls, outcome_count: int) -> "CalculatorInputs":
        validate_outcome_count(outcome_count)
        return cls(
            odds=[""] * outcome_count,
            odds_types=[""] * outcome_count,
            stakes=[0.0] * outcome_count,
        )

    @property
    def outcome_count(self) -> int:
        return len(self.odds)

    def with_odds(self, index: int, value: str) -> "CalculatorInputs":
        odds = list(self.odds)
        odds[index - 1] = value
        return self.model_copy(update={"odds": odds})

    def with_odds_type(self, index: int, value: str) -> "CalculatorInputs":
        odds_types = list(self.odds_types)
        odds_types[index - 1] = value
        return self.model_copy(update={"odds_types": odds_types})

    def with_total_stake(self, value: str) -> "CalculatorInputs":
        """Typing into the total field makes the total the fixed field."""
        return self.model_copy(update={"total_stake": value, "fixed_field": TOTAL_FIELD})

    def with_stake(self, index: int, value: float) -> "CalculatorInputs":
        """Typing into a stake field makes that stake the fixed field."""
        stakes = list(self.stakes)
        stakes[index - 1] = value
        return self.model_copy(update={
            "stakes": stakes,
            "fixed_field": f"{STAKE_FIELD_PREFIX}{index}",
        })

    def with_fixed_field(self, value: str) -> "CalculatorInputs":
        parse_fixed_field(value, self.outcome_count)
        return self.model_copy(update={"fixed_field": value})

    def compute(self, previous: Optional[SurebetResult] = None) -> SurebetOutcome:
        return compute_surebet(
            self.odds,
            parse_fixed_field(self.fixed_field, self.outcome_count),
            self.total_stake,
            self.stakes,
            previous=previous,
        )

    def recompute(
        self, previous: Optional[SurebetResult] = None
    ) -> Tuple["CalculatorInputs", SurebetOutcome]:
        """Compute and write the derived stakes (and total, in stake modes) back.

        Unparseable inputs leave the form untouched.
        """
        outcome = self.compute(previous)
        if isinstance(outcome, Unparseable):
            return self, outcome

        update = {"stakes": list(outcome.result.stakes)}
        if self.fixed_field != TOTAL_FIELD:
            update["total_stake"] = outcome.result.total
        return self.model_copy(update=update), outcome

    def to_saved_bet(self, result: SurebetResult) -> SavedBet:
        """Snapshot the inputs with the stakes and total currently shown."""
        return SavedBet(
            name=self.name,
            odds=list(self.odds),
            odds_types=list(self.odds_types),
            stakes=list(result.stakes),
            total_stake=result.total,
            fixed_field=self.fixed_field,
        )

    def from_saved_bet(self, bet: SavedBet) -> "CalculatorInputs":
        """Load a saved bet into this form; unreadable stakes become 0."""
        count = self.outcome_count
        stakes = [
            0.0 if math.isnan(stake) else stake
            for stake in (list(bet.stakes) + [0.0] * count)[:count]
        ]
        return self.model_copy(update={
            "odds": (list(bet.odds) + [""] * count)[:count],
            "odds_types": (list(bet.odds_types) + [""] * count)[:count],
            "stakes": stakes,
            "total_stake": str(bet.total_stake) or "0",
            "fixed_field": bet.fixed_field,
            "name": bet.name or self.name,
        })


def save_bet(bets: List[SavedBet], bet: SavedBet) -> List[SavedBet]:
    """Add ``bet`` to the list, replacing any bet with the same name.

    A blank name becomes ``Bet <n>`` where n is one more than the current
    list length.
    """
    name = bet.name.strip() or f"Bet {len(bets) + 1}"
    named = bet.model_copy(update={"name": name})
    return [existing for existing in bets if existing.name != name] + [named]


def delete_bet(bets: List[SavedBet], index: int) -> List[SavedBet]:
    if not 0 <= index < len(bets):
        raise IndexError(f"No saved bet at position {index}")
    return bets[:index] + bets[index + 1:]


def bet_label(bet: SavedBet) -> str:
    """Button label for a saved bet, e.g. ``Derby (Bet365 2.1 / - 2.05 / 100)``."""
    odds_parts = []
    for index, odds in enumerate(bet.odds):
        if not odds:
            continue
        odds_type = bet.odds_types[index] if index < len(bet.odds_types) else ""
        odds_parts.append(f"{odds_type or '-'} {odds}")
    return f"{bet.name} ({' / '.join(odds_parts)} / {bet.total_stake})"


def build_share_query(bet: SavedBet) -> str:
    """Query string carrying the odds, odds types, stakes and name of a bet."""
    params = []
    for index, odds in enumerate(bet.odds, start=1):
        if odds != "":
            params.append((f"odds{index}", odds))
    for index, odds_type in enumerate(bet.odds_types, start=1):
        if odds_type != "":
            params.append((f"odds{index}Type", odds_type))
    for index, stake in enumerate(bet.stakes, start=1):
        params.append((f"{STAKE_FIELD_PREFIX}{index}", format_number(stake)))

    name = bet.name.strip()
    if name:
        params.append(("name", name))

    return urlencode(params)


def build_share_url(base_url: str, bet: SavedBet) -> str:
    return f"{base_url}?{build_share_query(bet)}"


def parse_share_params(
    params: Mapping[str, str],
    outcome_count: int,
    inputs: Optional[CalculatorInputs] = None,
) -> CalculatorInputs:
    """Prefill calculator inputs from share-link parameters.

    Odds, stakes and name present in ``params`` overwrite ``inputs``. When any
    stake is given, the lowest-numbered one becomes the fixed field;
    otherwise a given ``totalStake`` fixes the total. Stake values are read
    with :func:`to_number`, so ``"12abc"`` becomes NaN rather than 12.
    """
    inputs = inputs if inputs is not None else CalculatorInputs.blank(outcome_count)
    values = dict(params)

    for index in range(1, outcome_count + 1):
        odds = safe_dict_get(values, f"odds{index}", default="", expected_type=str)
        if odds:
            inputs = inputs.with_odds(index, odds)

    stakes = list(inputs.stakes)
    first_stake = None
    for index in range(1, outcome_count + 1):
        raw = safe_dict_get(values, f"{STAKE_FIELD_PREFIX}{index}", default="", expected_type=str)
        if raw:
            stakes[index - 1] = to_number(raw)
            if first_stake is None:
                first_stake = index

    update = {"stakes": stakes}

    name = safe_dict_get(values, "name", default="", expected_type=str)
    if name:
        update["name"] = name

    if first_stake is not None:
        update["fixed_field"] = f"{STAKE_FIELD_PREFIX}{first_stake}"
    else:
        total = safe_dict_get(values, "totalStake", default="", expected_type=str)
        if total:
            update["total_stake"] = total
            update["fixed_field"] = TOTAL_FIELD

    logger.debug(f"Prefilled {outcome_count}-way calculator from share link: {sorted(values)}")
    return inputs.model_copy(update=update)


class BetStore:
    """Persisted saved-bet list of one N-way calculator."""

    def __init__(self, outcome_count: int):
        self.outcome_count = validate_outcome_count(outcome_count)
        db.initialize_db()
        self.bets = db.load_saved_bets(outcome_count)

    def save(self, bet: SavedBet) -> List[SavedBet]:
        self.bets = save_bet(self.bets, bet)
        db.store_saved_bets(self.outcome_count, self.bets)
        logger.info(f"Saved {self.outcome_count}-way bet '{self.bets[-1].name}'")
        return self.bets

    def delete(self, index: int) -> List[SavedBet]:
        self.bets = delete_bet(self.bets, index)
        db.store_saved_bets(self.outcome_count, self.bets)
        return self.bets

    def labels(self) -> List[str]:
        return [bet_label(bet) for bet in self.bets]

    def table(self):
        return db.get_saved_bets_table(self.outcome_count)
