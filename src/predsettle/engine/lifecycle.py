"""Market creation guards and the lifecycle state machine."""

from __future__ import annotations

from predsettle.arith import BPS_DENOMINATOR
from predsettle.config.engine import (
    MAX_CATEGORY_LEN,
    MAX_DESCRIPTION_LEN,
    MAX_TITLE_LEN,
    EngineConfig,
)
from predsettle.errors import (
    CreatorIsOracle,
    InvalidFeeRate,
    InvalidMarketDuration,
    InvalidResolutionTime,
    MarketAlreadyResolved,
    MarketCategoryTooLong,
    MarketDescriptionTooLong,
    MarketNotActive,
    MarketTitleTooLong,
    UnauthorizedAuthority,
)
from predsettle.models import Market, MarketStatus

# Allowed transitions. Resolved and Cancelled are terminal.
TRANSITIONS: dict[MarketStatus, frozenset[MarketStatus]] = {
    MarketStatus.ACTIVE: frozenset(
        {MarketStatus.RESOLVED, MarketStatus.CANCELLED, MarketStatus.DISPUTED}
    ),
    MarketStatus.DISPUTED: frozenset({MarketStatus.CANCELLED}),
    MarketStatus.RESOLVED: frozenset(),
    MarketStatus.CANCELLED: frozenset(),
}


def _check_fee(bps: int, name: str) -> None:
    if isinstance(bps, bool) or not isinstance(bps, int) or not 0 <= bps < BPS_DENOMINATOR:
        raise InvalidFeeRate(**{name: bps})


def new_market(
    *,
    market_id: str,
    creator: str,
    oracle: str,
    resolution_deadline: int,
    now: int,
    config: EngineConfig,
    title: str = "",
    description: str = "",
    category: str = "",
    outcome_labels: tuple[str, str] = ("Yes", "No"),
    oracle_fee_bps: int | None = None,
    platform_fee_bps: int | None = None,
    withdrawal_fee_bps: int | None = None,
) -> Market:
    """Validate creation parameters and build an Active market with zeroed stakes and reserves."""
    if creator == oracle:
        raise CreatorIsOracle(creator=creator)
    if resolution_deadline <= now:
        raise InvalidResolutionTime(resolution_deadline=resolution_deadline, now=now)
    duration = resolution_deadline - now
    if config.min_market_duration_sec and duration < config.min_market_duration_sec:
        raise InvalidMarketDuration("Market duration too short", duration=duration)
    if config.max_market_duration_sec and duration > config.max_market_duration_sec:
        raise InvalidMarketDuration("Market duration too long", duration=duration)
    if len(title) > MAX_TITLE_LEN:
        raise MarketTitleTooLong(length=len(title))
    if len(description) > MAX_DESCRIPTION_LEN:
        raise MarketDescriptionTooLong(length=len(description))
    if len(category) > MAX_CATEGORY_LEN:
        raise MarketCategoryTooLong(length=len(category))

    oracle_fee = config.oracle_fee_bps if oracle_fee_bps is None else oracle_fee_bps
    platform_fee = config.platform_fee_bps if platform_fee_bps is None else platform_fee_bps
    withdrawal_fee = config.withdrawal_fee_bps if withdrawal_fee_bps is None else withdrawal_fee_bps
    _check_fee(oracle_fee, "oracle_fee_bps")
    _check_fee(platform_fee, "platform_fee_bps")
    _check_fee(withdrawal_fee, "withdrawal_fee_bps")
    if oracle_fee + platform_fee >= BPS_DENOMINATOR:
        raise InvalidFeeRate(
            "Combined oracle and platform fee must be below 10000 bps",
            oracle_fee_bps=oracle_fee,
            platform_fee_bps=platform_fee,
        )

    return Market(
        market_id=market_id,
        authority=creator,
        oracle=oracle,
        title=title,
        description=description,
        category=category,
        outcome_labels=outcome_labels,
        created_at=now,
        resolution_deadline=resolution_deadline,
        oracle_fee_bps=oracle_fee,
        platform_fee_bps=platform_fee,
        withdrawal_fee_bps=withdrawal_fee,
    )


def require_active(market: Market) -> None:
    """Stakes and reserves may only change while the market is Active."""
    if market.status is not MarketStatus.ACTIVE:
        raise MarketNotActive(market_id=market.market_id, status=market.status.value)


def require_authority(market: Market, caller: str) -> None:
    if caller != market.authority:
        raise UnauthorizedAuthority(market_id=market.market_id, caller=caller)


def transition(market: Market, target: MarketStatus) -> Market:
    """Return a copy of market in the target status, or raise if the move is not allowed."""
    if target not in TRANSITIONS[market.status]:
        if market.status is MarketStatus.RESOLVED:
            raise MarketAlreadyResolved(market_id=market.market_id)
        raise MarketNotActive(
            market_id=market.market_id, status=market.status.value, target=target.value
        )
    return market.model_copy(update={"status": target})
