"""Exception types for the pool engine.

Every failure is local, synchronous and non-retryable: the operation that
raised is discarded in full and the caller decides whether to resubmit.
"""

from __future__ import annotations


class PoolError(Exception):
    """Base class for all pool engine failures."""

    code = "pool_error"


class Unauthorized(PoolError):
    """Caller lacks the privilege the operation requires."""

    code = "unauthorized"


class OperationDisabled(PoolError):
    """Status bit is off, pool creation is disabled, or the pool is not open yet."""

    code = "operation_disabled"


class ZeroTradeAmount(PoolError):
    """The curve or share math produced a degenerate (zero) amount."""

    code = "zero_trade_amount"


class ArithmeticOverflow(PoolError):
    """A checked operation exceeded its storage width."""

    code = "arithmetic_overflow"


class ArithmeticUnderflow(PoolError):
    """A checked subtraction went below zero."""

    code = "arithmetic_underflow"


class SlippageExceeded(PoolError):
    """A computed amount violates the caller-supplied bound."""

    code = "slippage_exceeded"


class InvalidAssetForPool(PoolError):
    """Supplied asset does not match the pool configuration."""

    code = "invalid_asset_for_pool"


class UnsupportedAssetKind(PoolError):
    """Asset kind or extension set is not allowed in pools."""

    code = "unsupported_asset_kind"


class InvalidActivationTime(PoolError):
    """Requested open time is beyond the configured look-ahead window."""

    code = "invalid_activation_time"


class InvariantViolation(PoolError):
    """Post-trade constant product fell below the pre-trade value."""

    code = "invariant_violation"

    def __init__(self, constant_before: int, constant_after: int) -> None:
        self.constant_before = constant_before
        self.constant_after = constant_after
        super().__init__(f"invariant violation: constant_after ({constant_after}) < constant_before ({constant_before})")
