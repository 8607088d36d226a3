"""Engine parameters derived from Settings."""

from __future__ import annotations

from dataclasses import dataclass

MAX_TITLE_LEN = 200
MAX_DESCRIPTION_LEN = 500
MAX_CATEGORY_LEN = 50


@dataclass(frozen=True)
class EngineConfig:
    """Defaults applied to new markets and limits enforced by the engine."""

    oracle_fee_bps: int = 100
    platform_fee_bps: int = 0
    withdrawal_fee_bps: int = 30
    max_oracle_data_len: int = 256
    min_market_duration_sec: int = 0  # 0 = no bound
    max_market_duration_sec: int = 0  # 0 = no bound
    platform_treasury: str = "treasury"
    paused: bool = False
