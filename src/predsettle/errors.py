"""Settlement error taxonomy. Every failure surfaces with a specific kind."""

from __future__ import annotations

from typing import Any


class SettlementError(Exception):
    """Base for all engine errors. `code` is stable and machine-readable."""

    code = "settlement_error"
    message = "Settlement operation failed"

    def __init__(self, message: str | None = None, **context: Any) -> None:
        self.context = context
        super().__init__(message or self.message)

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": str(self), **self.context}


# Validation errors: malformed input


class ValidationError(SettlementError):
    code = "validation_error"
    message = "Invalid input"


class InvalidAmount(ValidationError):
    code = "invalid_amount"
    message = "Amount must be greater than zero"


class InvalidOutcome(ValidationError):
    code = "invalid_outcome"
    message = "Invalid market outcome"


class InvalidOracleData(ValidationError):
    code = "invalid_oracle_data"
    message = "Oracle evidence must be non-empty and within the size limit"


class InvalidFeeRate(ValidationError):
    code = "invalid_fee_rate"
    message = "Fee rate must be in [0, 10000) basis points"


class InvalidResolutionTime(ValidationError):
    code = "invalid_resolution_time"
    message = "Resolution deadline must be in the future"


class InvalidMarketDuration(ValidationError):
    code = "invalid_market_duration"
    message = "Market duration outside the configured bounds"


class InvalidIdentifier(ValidationError):
    code = "invalid_identifier"
    message = "Identifiers must be non-empty and must not contain '/'"


class MarketTitleTooLong(ValidationError):
    code = "market_title_too_long"
    message = "Market title too long"


class MarketDescriptionTooLong(ValidationError):
    code = "market_description_too_long"
    message = "Market description too long"


class MarketCategoryTooLong(ValidationError):
    code = "market_category_too_long"
    message = "Market category too long"


# State errors: operation invalid for the current lifecycle state


class StateError(SettlementError):
    code = "state_error"
    message = "Operation not valid in the current market state"


class MarketNotActive(StateError):
    code = "market_not_active"
    message = "Market is not active"


class MarketAlreadyResolved(StateError):
    code = "market_already_resolved"
    message = "Market has already been resolved"


class MarketNotExpired(StateError):
    code = "market_not_expired"
    message = "Market resolution time has not passed"


class MarketExpired(StateError):
    code = "market_expired"
    message = "Cannot bet on an expired market"


class MarketNotResolved(StateError):
    code = "market_not_resolved"
    message = "Market is not resolved"


class MarketNotCancelled(StateError):
    code = "market_not_cancelled"
    message = "Market is not cancelled"


class MarketPaused(StateError):
    code = "market_paused"
    message = "Market paused by admin"


class MarketAlreadyExists(StateError):
    code = "market_already_exists"
    message = "A market with this identifier already exists"


class MarketNotFound(StateError):
    code = "market_not_found"
    message = "Market not found"


class PositionNotFound(StateError):
    code = "position_not_found"
    message = "Caller has no position in this market"


# Authorization errors


class AuthorizationError(SettlementError):
    code = "authorization_error"
    message = "Caller is not authorized"


class MissingCaller(AuthorizationError):
    code = "missing_caller"
    message = "Caller identity is required"


class InvalidOracle(AuthorizationError):
    code = "invalid_oracle"
    message = "Caller is not the market oracle"


class CreatorIsOracle(AuthorizationError):
    code = "creator_is_oracle"
    message = "Market creator cannot act as the market oracle"


class UnauthorizedAuthority(AuthorizationError):
    code = "unauthorized_authority"
    message = "Caller is not the market authority"


# Arithmetic errors: never saturated or wrapped


class ArithmeticFault(SettlementError):
    code = "arithmetic_error"
    message = "Arithmetic error"


class MathOverflow(ArithmeticFault):
    code = "math_overflow"
    message = "Arithmetic overflow"


class MathUnderflow(ArithmeticFault):
    code = "math_underflow"
    message = "Arithmetic underflow"


class DivisionByZero(ArithmeticFault):
    code = "division_by_zero"
    message = "Division by zero"


# Economic errors


class EconomicError(SettlementError):
    code = "economic_error"
    message = "Economic precondition not met"


class InsufficientFunds(EconomicError):
    code = "insufficient_funds"
    message = "Insufficient balance for this operation"


class InsufficientLiquidity(EconomicError):
    code = "insufficient_liquidity"
    message = "Insufficient liquidity shares"


class InsufficientPoolBalance(EconomicError):
    code = "insufficient_pool_balance"
    message = "Pool balance cannot cover the withdrawal"


class OutcomeMismatch(EconomicError):
    code = "outcome_mismatch"
    message = "Position is bound to a different outcome"


class NotAWinner(EconomicError):
    code = "not_a_winner"
    message = "Position did not bet on the winning outcome"


class NoWinnings(EconomicError):
    code = "no_winnings"
    message = "No winnings to claim"


class AlreadyClaimed(EconomicError):
    code = "already_claimed"
    message = "Winnings already claimed"


# Fatal accounting breaches


class InvariantViolation(SettlementError):
    code = "invariant_violation"
    message = "Accounting invariant violated"


class InsufficientVaultFunds(InvariantViolation):
    code = "insufficient_vault_funds"
    message = "Payout exceeds the available pooled balance"
