"""Market record, outcome and lifecycle status."""

from __future__ import annotations

from enum import Enum, IntEnum

from pydantic import BaseModel, ConfigDict, Field

from predsettle.errors import InvalidOutcome


class Outcome(IntEnum):
    """One of the two mutually exclusive results of a market."""

    A = 0
    B = 1

    @classmethod
    def parse(cls, value: int | str | Outcome) -> Outcome:
        """Accept an index (0/1), a name (A/B) or an Outcome; anything else is InvalidOutcome."""
        if isinstance(value, Outcome):
            return value
        if isinstance(value, str):
            key = value.strip().upper()
            if key in cls.__members__:
                return cls[key]
            if key.isdigit():
                value = int(key)
            else:
                raise InvalidOutcome(outcome=value)
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidOutcome(outcome=value)
        try:
            return cls(value)
        except ValueError:
            raise InvalidOutcome(outcome=value) from None

    @property
    def other(self) -> Outcome:
        return Outcome.B if self is Outcome.A else Outcome.A


class MarketStatus(str, Enum):
    """Lifecycle: Active -> {Resolved, Cancelled, Disputed}; Disputed -> Cancelled."""

    ACTIVE = "active"
    RESOLVED = "resolved"
    CANCELLED = "cancelled"
    DISPUTED = "disputed"

    @property
    def is_terminal(self) -> bool:
        return self in (MarketStatus.RESOLVED, MarketStatus.CANCELLED)


class Market(BaseModel):
    """Canonical market record: stakes, pool reserves, fees and settlement state."""

    model_config = ConfigDict(ser_json_bytes="base64", val_json_bytes="base64")

    market_id: str
    authority: str  # creator
    oracle: str
    title: str = ""
    description: str = ""
    category: str = ""
    outcome_labels: tuple[str, str] = ("Yes", "No")
    created_at: int
    resolution_deadline: int

    # Betting side
    stake_a: int = Field(0, ge=0)
    stake_b: int = Field(0, ge=0)
    total_bets: int = Field(0, ge=0)

    # Liquidity pool side
    reserve_a: int = Field(0, ge=0)
    reserve_b: int = Field(0, ge=0)
    lp_supply: int = Field(0, ge=0)
    liquidity_providers_count: int = Field(0, ge=0)
    fees_collected: int = Field(0, ge=0)  # withdrawal fees retained by the pool

    # Fees in basis points
    oracle_fee_bps: int = Field(0, ge=0, lt=10_000)
    platform_fee_bps: int = Field(0, ge=0, lt=10_000)
    withdrawal_fee_bps: int = Field(0, ge=0, lt=10_000)

    # Settlement
    status: MarketStatus = MarketStatus.ACTIVE
    winning_outcome: Outcome | None = None
    resolved_at: int | None = None
    oracle_data: bytes = b""
    oracle_fee: int = Field(0, ge=0)
    platform_fee: int = Field(0, ge=0)
    total_payout_pool: int = Field(0, ge=0)
    winning_pool: int = Field(0, ge=0)
    total_claimed: int = Field(0, ge=0)
    total_refunded: int = Field(0, ge=0)

    def stake(self, outcome: Outcome) -> int:
        return self.stake_a if outcome == Outcome.A else self.stake_b

    def reserve(self, outcome: Outcome) -> int:
        return self.reserve_a if outcome == Outcome.A else self.reserve_b

    @property
    def total_stake(self) -> int:
        return self.stake_a + self.stake_b

    @property
    def total_reserves(self) -> int:
        return self.reserve_a + self.reserve_b

    @property
    def total_fee_bps(self) -> int:
        return self.oracle_fee_bps + self.platform_fee_bps

    def label(self, outcome: Outcome) -> str:
        return self.outcome_labels[int(outcome)]
