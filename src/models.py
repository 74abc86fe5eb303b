"""Data models shared by the surebet engine, the calculator and persistence."""

from typing import Annotated, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from .config import STAKE_FIELD_PREFIX, TOTAL_FIELD

Operator = Literal["+", "-", "*", "/"]


class FixedField(BaseModel):
    """Which quantity the user controls directly; every other field is derived."""

    model_config = ConfigDict(frozen=True)

    stake_index: Optional[int] = Field(default=None, ge=1)  # 1-based; None means the total stake is fixed

    @classmethod
    def total(cls) -> "FixedField":
        return cls()

    @classmethod
    def stake(cls, index: int) -> "FixedField":
        if index < 1:
            raise ValueError(f"Stake index must be 1-based, got {index}")
        return cls(stake_index=index)

    @property
    def is_total(self) -> bool:
        return self.stake_index is None

    def __str__(self) -> str:
        if self.is_total:
            return TOTAL_FIELD
        return f"{STAKE_FIELD_PREFIX}{self.stake_index}"


class SurebetResult(BaseModel):
    """Stake distribution and profit figures for one market.

    Values may be NaN or infinite when the odds make the formulas degenerate;
    callers check ``math.isfinite`` before presenting them as an arbitrage.
    """

    model_config = ConfigDict(frozen=True)

    stakes: Tuple[float, ...]
    total: str
    profit: float
    profit_percentage: float

    @classmethod
    def initial(cls, outcome_count: int) -> "SurebetResult":
        return cls(
            stakes=(0.0,) * outcome_count,
            total="0",
            profit=0.0,
            profit_percentage=0.0,
        )


class Computed(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["computed"] = "computed"
    result: SurebetResult


class Unparseable(BaseModel):
    """Odds or total could not be read.

    ``result`` carries the previous stakes and total untouched, with profit
    and profit percentage zeroed.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["unparseable"] = "unparseable"
    result: SurebetResult
    field: str


SurebetOutcome = Annotated[Union[Computed, Unparseable], Field(discriminator="kind")]


class PendingEntry(BaseModel):
    """An operand and operator awaiting the second operand, e.g. ``5 +``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["pending"] = "pending"
    operand: str
    operator: Operator

    def render(self) -> str:
        return f"{self.operand} {self.operator}"


class FinalizedEntry(BaseModel):
    """A resolved calculation, e.g. ``2 + 3 = 5`` or ``5 / 0 = Error``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["finalized"] = "finalized"
    expression: str
    result: str

    def render(self) -> str:
        return f"{self.expression} = {self.result}"


HistoryEntry = Annotated[Union[PendingEntry, FinalizedEntry], Field(discriminator="kind")]


class CalculatorState(BaseModel):
    """Snapshot of the arithmetic calculator after one event."""

    model_config = ConfigDict(frozen=True)

    display_buffer: str = ""
    accumulated_value: Optional[str] = None
    pending_operator: Optional[Operator] = None
    history: Tuple[HistoryEntry, ...] = ()
    is_showing_result: bool = False

    @property
    def display(self) -> str:
        return self.display_buffer or "0"

    @property
    def history_lines(self) -> List[str]:
        return [entry.render() for entry in self.history]

    @property
    def status_line(self) -> str:
        """Line shown above the display: last history entry, else the pending operation."""
        if self.history:
            return self.history[-1].render()
        if self.accumulated_value and self.pending_operator:
            return f"{self.accumulated_value} {self.pending_operator}"
        return ""


class SavedBet(BaseModel):
    """A named snapshot of a surebet calculator's inputs."""

    name: str
    odds: List[str]
    odds_types: List[str] = Field(default_factory=list)
    stakes: List[float] = Field(default_factory=list)
    total_stake: str = "0"
    fixed_field: str = TOTAL_FIELD
