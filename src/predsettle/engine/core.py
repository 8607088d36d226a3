"""SettlementEngine - the public operation surface over store, ledger, clock and event sink.

Every operation runs as one atomic unit: guards and record updates are computed
first, value transfers follow, records are written last, all inside the store
and ledger transactions. Any exception rolls the whole unit back. Events are
appended only after commit.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import ExitStack, contextmanager
from typing import Any

import structlog

from predsettle.arith import BPS_DENOMINATOR, mul_div_floor
from predsettle.config.engine import EngineConfig
from predsettle.engine import bets, lifecycle, payout, pool, resolution
from predsettle.engine.ports import (
    Clock,
    EventSink,
    MemoryEventSink,
    PauseGate,
    StaticPauseGate,
    SystemClock,
)
from predsettle.errors import (
    InsufficientFunds,
    InsufficientVaultFunds,
    InvariantViolation,
    MarketAlreadyExists,
    MarketNotFound,
    MarketPaused,
    MissingCaller,
    SettlementError,
)
from predsettle.ledger import (
    POOL_SEED,
    VAULT_SEED,
    InsufficientBalance,
    ValueLedger,
    pool_account,
)
from predsettle.models import (
    BetPlaced,
    LiquidityAdded,
    LiquidityPosition,
    LiquidityRemoved,
    Market,
    MarketCancelled,
    MarketCreated,
    MarketDisputed,
    MarketEvent,
    MarketResolved,
    MarketStatus,
    Outcome,
    Position,
    RefundClaimed,
    WinningsClaimed,
)
from predsettle.storage import (
    RecordExists,
    RecordStore,
    liquidity_key,
    market_key,
    position_key,
)

log = structlog.get_logger(__name__)


def vault_account(market_id: str) -> str:
    """Ledger account holding a market's bet stakes."""
    return pool_account(VAULT_SEED, market_id)


def liquidity_account(market_id: str) -> str:
    """Ledger account holding a market's liquidity pool."""
    return pool_account(POOL_SEED, market_id)


class SettlementEngine:
    """Market lifecycle, liquidity pool, bets, resolution and claims."""

    def __init__(
        self,
        store: RecordStore,
        ledger: ValueLedger,
        *,
        clock: Clock | None = None,
        events: EventSink | None = None,
        config: EngineConfig | None = None,
        pause_gate: PauseGate | None = None,
    ) -> None:
        self._store = store
        self._ledger = ledger
        self._clock = clock or SystemClock()
        self._events = events if events is not None else MemoryEventSink()
        self.config = config or EngineConfig()
        self._gate = pause_gate or StaticPauseGate(self.config.paused)
        self._signer = ledger.issue_signer()

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------

    @contextmanager
    def _atomic(self, op: str, **context: Any) -> Iterator[None]:
        try:
            with ExitStack() as stack:
                stack.enter_context(self._store.transaction())
                if self._ledger is not self._store:
                    stack.enter_context(self._ledger.transaction())
                yield
        except InvariantViolation as e:
            log.critical("invariant_violation", op=op, code=e.code, **{**context, **e.context})
            raise
        except SettlementError as e:
            log.info("operation_rejected", op=op, code=e.code, reason=str(e), **context)
            raise

    def _emit(self, event: MarketEvent) -> None:
        # Append-only side channel; a failing sink must not undo a committed operation.
        try:
            self._events.append(event)
        except Exception:
            log.exception("event_sink_failed", kind=event.kind, market_id=event.market_id)

    def _check_gate(self, market_id: str) -> None:
        if self._gate.is_paused(market_id):
            raise MarketPaused(market_id=market_id)

    def _load_market(self, market_id: str) -> Market:
        market = self._store.get(market_key(market_id))
        if market is None:
            raise MarketNotFound(market_id=market_id)
        return market

    def _save(self, key: str, record: Any, existed: bool) -> None:
        if existed:
            self._store.put(key, record)
        else:
            self._store.create(key, record)

    def _collect(self, payer: str, account: str, amount: int) -> None:
        """Move caller funds into a pool account."""
        try:
            self._ledger.transfer(payer, account, amount)
        except InsufficientBalance as e:
            raise InsufficientFunds(account=payer, balance=e.balance, amount=amount) from e

    def _disburse(self, seed: str, market_id: str, recipient: str, amount: int) -> None:
        """Move funds out of a pool account under its derived authority."""
        authority = self._signer.authority(seed, market_id)
        try:
            self._ledger.transfer(authority.account, recipient, amount, authority=authority)
        except InsufficientBalance as e:
            raise InsufficientVaultFunds(
                account=authority.account, balance=e.balance, amount=amount
            ) from e

    @staticmethod
    def _require_identity(caller: str) -> None:
        if not caller:
            raise MissingCaller()

    # ------------------------------------------------------------------
    # Market lifecycle
    # ------------------------------------------------------------------

    def create_market(
        self,
        caller: str,
        market_id: str,
        *,
        oracle: str,
        resolution_deadline: int,
        title: str = "",
        description: str = "",
        category: str = "",
        outcome_labels: tuple[str, str] = ("Yes", "No"),
        oracle_fee_bps: int | None = None,
        platform_fee_bps: int | None = None,
        withdrawal_fee_bps: int | None = None,
        initial_liquidity: int = 0,
    ) -> Market:
        """Create an Active market. initial_liquidity seeds the pool from the creator."""
        pending: list[MarketEvent] = []
        with self._atomic("create_market", market_id=market_id, caller=caller):
            self._require_identity(caller)
            self._check_gate(market_id)
            now = self._clock.now()
            market = lifecycle.new_market(
                market_id=market_id,
                creator=caller,
                oracle=oracle,
                resolution_deadline=resolution_deadline,
                now=now,
                config=self.config,
                title=title,
                description=description,
                category=category,
                outcome_labels=outcome_labels,
                oracle_fee_bps=oracle_fee_bps,
                platform_fee_bps=platform_fee_bps,
                withdrawal_fee_bps=withdrawal_fee_bps,
            )
            try:
                self._store.create(market_key(market_id), market)
            except RecordExists as e:
                raise MarketAlreadyExists(market_id=market_id) from e
            pending.append(
                MarketCreated(
                    market_id=market_id,
                    timestamp=now,
                    authority=caller,
                    oracle=oracle,
                    title=title,
                    resolution_deadline=resolution_deadline,
                    created_at=now,
                )
            )
            if initial_liquidity:
                market, _, event = self._add_liquidity(market, caller, initial_liquidity, now)
                pending.append(event)

        log.info("market_created", market_id=market_id, authority=caller, oracle=oracle)
        for event in pending:
            self._emit(event)
        return market

    def cancel_market(self, caller: str, market_id: str) -> Market:
        """Administrative cancel (authority only). Bettors may then claim refunds."""
        with self._atomic("cancel_market", market_id=market_id, caller=caller):
            self._require_identity(caller)
            self._check_gate(market_id)
            market = self._load_market(market_id)
            lifecycle.require_authority(market, caller)
            market = lifecycle.transition(market, MarketStatus.CANCELLED)
            self._store.put(market_key(market_id), market)
            now = self._clock.now()
        log.info("market_cancelled", market_id=market_id)
        self._emit(MarketCancelled(market_id=market_id, timestamp=now, authority=caller))
        return market

    def dispute_market(self, caller: str, market_id: str) -> Market:
        """Freeze an Active market pending review (authority only)."""
        with self._atomic("dispute_market", market_id=market_id, caller=caller):
            self._require_identity(caller)
            self._check_gate(market_id)
            market = self._load_market(market_id)
            lifecycle.require_authority(market, caller)
            market = lifecycle.transition(market, MarketStatus.DISPUTED)
            self._store.put(market_key(market_id), market)
            now = self._clock.now()
        log.info("market_disputed", market_id=market_id)
        self._emit(MarketDisputed(market_id=market_id, timestamp=now, authority=caller))
        return market

    # ------------------------------------------------------------------
    # Liquidity pool
    # ------------------------------------------------------------------

    def _add_liquidity(
        self, market: Market, provider: str, amount: int, now: int
    ) -> tuple[Market, LiquidityPosition, LiquidityAdded]:
        key = liquidity_key(market.market_id, provider)
        existing = self._store.get(key)
        pool_balance = self._ledger.balance(liquidity_account(market.market_id))
        market = pool.sync_reserves(market, pool_balance)
        market, position, deposit = pool.apply_deposit(market, existing, provider, amount, now)
        self._collect(provider, liquidity_account(market.market_id), amount)
        self._save(key, position, existing is not None)
        self._store.put(market_key(market.market_id), market)
        event = LiquidityAdded(
            market_id=market.market_id,
            timestamp=now,
            provider=provider,
            amount=amount,
            amount_a=deposit.amount_a,
            amount_b=deposit.amount_b,
            lp_shares_minted=deposit.lp_shares,
        )
        return market, position, event

    def add_liquidity(self, caller: str, market_id: str, amount: int) -> LiquidityPosition:
        """Deposit into the pool at the current reserve ratio; mints LP shares."""
        with self._atomic("add_liquidity", market_id=market_id, caller=caller, amount=amount):
            self._require_identity(caller)
            self._check_gate(market_id)
            market = self._load_market(market_id)
            _, position, event = self._add_liquidity(market, caller, amount, self._clock.now())
        log.info(
            "liquidity_added",
            market_id=market_id,
            provider=caller,
            amount=amount,
            lp_shares=event.lp_shares_minted,
        )
        self._emit(event)
        return position

    def remove_liquidity(self, caller: str, market_id: str, lp_shares: int) -> int:
        """Burn LP shares for a proportional share of the pool balance, net of fee. Returns net."""
        with self._atomic("remove_liquidity", market_id=market_id, caller=caller, lp_shares=lp_shares):
            self._require_identity(caller)
            self._check_gate(market_id)
            market = self._load_market(market_id)
            now = self._clock.now()
            key = liquidity_key(market_id, caller)
            existing = self._store.get(key)
            pool_balance = self._ledger.balance(liquidity_account(market_id))
            market = pool.sync_reserves(market, pool_balance)
            market, position, w = pool.apply_withdrawal(market, existing, lp_shares, pool_balance, now)
            if w.net:
                self._disburse(POOL_SEED, market_id, caller, w.net)
            self._store.put(key, position)
            self._store.put(market_key(market_id), market)
        log.info(
            "liquidity_removed",
            market_id=market_id,
            provider=caller,
            lp_shares=lp_shares,
            net=w.net,
            fee=w.fee,
        )
        self._emit(
            LiquidityRemoved(
                market_id=market_id,
                timestamp=now,
                provider=caller,
                lp_shares=lp_shares,
                withdrawal_amount=w.net,
                fee_amount=w.fee,
            )
        )
        return w.net

    # ------------------------------------------------------------------
    # Bets
    # ------------------------------------------------------------------

    def place_bet(
        self, caller: str, market_id: str, outcome: int | str | Outcome, amount: int
    ) -> Position:
        """Stake amount on outcome. The caller's funds move to the market vault."""
        with self._atomic("place_bet", market_id=market_id, caller=caller, amount=amount):
            self._require_identity(caller)
            self._check_gate(market_id)
            market = self._load_market(market_id)
            now = self._clock.now()
            key = position_key(market_id, caller)
            existing = self._store.get(key)
            market, position = bets.apply_bet(market, existing, caller, outcome, amount, now)
            self._collect(caller, vault_account(market_id), amount)
            self._save(key, position, existing is not None)
            self._store.put(market_key(market_id), market)
        log.info(
            "bet_placed",
            market_id=market_id,
            bettor=caller,
            outcome=position.outcome.name,
            amount=amount,
        )
        self._emit(
            BetPlaced(
                market_id=market_id,
                timestamp=now,
                bettor=caller,
                outcome=position.outcome,
                amount=amount,
            )
        )
        return position

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve(
        self,
        caller: str,
        market_id: str,
        outcome: int | str | Outcome,
        oracle_data: bytes,
    ) -> Market:
        """Oracle finalizes the outcome; oracle and platform fees leave the vault."""
        with self._atomic("resolve", market_id=market_id, caller=caller):
            self._require_identity(caller)
            self._check_gate(market_id)
            market = self._load_market(market_id)
            now = self._clock.now()
            market, res = resolution.resolve_market(
                market, caller, outcome, oracle_data, now, self.config.max_oracle_data_len
            )
            if res.oracle_fee > 0:
                self._disburse(VAULT_SEED, market_id, market.oracle, res.oracle_fee)
            if res.platform_fee > 0:
                self._disburse(VAULT_SEED, market_id, self.config.platform_treasury, res.platform_fee)
            self._store.put(market_key(market_id), market)
        log.info(
            "market_resolved",
            market_id=market_id,
            outcome=res.outcome.name,
            total_pool=res.total_pool,
            oracle_fee=res.oracle_fee,
            payout_pool=res.total_payout_pool,
        )
        self._emit(
            MarketResolved(
                market_id=market_id,
                timestamp=now,
                outcome=res.outcome,
                winning_pool=res.winning_pool,
                losing_pool=res.losing_pool,
                oracle_fee=res.oracle_fee,
                platform_fee=res.platform_fee,
                total_payout_pool=res.total_payout_pool,
            )
        )
        return market

    # ------------------------------------------------------------------
    # Claims
    # ------------------------------------------------------------------

    def claim_winnings(self, caller: str, market_id: str) -> int:
        """Pay a winning position its proportional share of the payout pool, exactly once."""
        with self._atomic("claim_winnings", market_id=market_id, caller=caller):
            self._require_identity(caller)
            self._check_gate(market_id)
            market = self._load_market(market_id)
            now = self._clock.now()
            key = position_key(market_id, caller)
            market, position, winnings = payout.settle_claim(market, self._store.get(key), now)
            self._disburse(VAULT_SEED, market_id, caller, winnings)
            self._store.put(key, position)
            self._store.put(market_key(market_id), market)
        log.info("winnings_claimed", market_id=market_id, user=caller, amount=winnings)
        self._emit(
            WinningsClaimed(
                market_id=market_id,
                timestamp=now,
                user=caller,
                amount=winnings,
                outcome=position.outcome,
            )
        )
        return winnings

    def claim_refund(self, caller: str, market_id: str) -> int:
        """Return a position's full stake from a cancelled market, exactly once."""
        with self._atomic("claim_refund", market_id=market_id, caller=caller):
            self._require_identity(caller)
            self._check_gate(market_id)
            market = self._load_market(market_id)
            now = self._clock.now()
            key = position_key(market_id, caller)
            market, position, refund = payout.settle_refund(market, self._store.get(key), now)
            self._disburse(VAULT_SEED, market_id, caller, refund)
            self._store.put(key, position)
            self._store.put(market_key(market_id), market)
        log.info("refund_claimed", market_id=market_id, user=caller, amount=refund)
        self._emit(RefundClaimed(market_id=market_id, timestamp=now, user=caller, amount=refund))
        return refund

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_market(self, market_id: str) -> Market:
        return self._load_market(market_id)

    def get_position(self, market_id: str, owner: str) -> Position | None:
        return self._store.get(position_key(market_id, owner))

    def get_liquidity_position(self, market_id: str, owner: str) -> LiquidityPosition | None:
        return self._store.get(liquidity_key(market_id, owner))

    def vault_balance(self, market_id: str) -> int:
        return self._ledger.balance(vault_account(market_id))

    def pool_balance(self, market_id: str) -> int:
        return self._ledger.balance(liquidity_account(market_id))

    def quote_winnings(self, market_id: str, owner: str) -> int:
        position = self.get_position(market_id, owner)
        if position is None:
            return 0
        return payout.quote_winnings(self._load_market(market_id), position)


def implied_odds(market: Market) -> tuple[int, int]:
    """Stake-weighted probability of each outcome in basis points; 50/50 when empty."""
    total = market.stake_a + market.stake_b
    if total == 0:
        return BPS_DENOMINATOR // 2, BPS_DENOMINATOR // 2
    odds_a = mul_div_floor(market.stake_a, BPS_DENOMINATOR, total)
    return odds_a, BPS_DENOMINATOR - odds_a
