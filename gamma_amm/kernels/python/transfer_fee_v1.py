"""
Transfer-fee kernel for assets that withhold a fee on every transfer.

The fee is charged on the amount leaving the sender:

    fee = min(ceil(amount * fee_bps / 10_000), max_fee)

so the recipient receives `amount - fee`. The inverse direction answers the
question the pool asks most often: how much must be sent so that exactly
`net` arrives.
"""

from __future__ import annotations


BPS_DENOM = 10_000


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


def _check_params(fee_bps: int, max_fee: int) -> None:
    _require_int("fee_bps", fee_bps)
    _require_int("max_fee", max_fee)
    if not (0 <= fee_bps <= BPS_DENOM):
        raise ValueError(f"fee_bps must be in [0, {BPS_DENOM}]: {fee_bps}")
    if max_fee < 0:
        raise ValueError(f"max_fee must be non-negative: {max_fee}")


def calculate_fee(*, amount: int, fee_bps: int, max_fee: int) -> int:
    """Fee withheld when `amount` is sent."""
    _require_int("amount", amount)
    _check_params(fee_bps, max_fee)
    if amount < 0:
        raise ValueError("amount must be non-negative")
    if fee_bps == 0 or amount == 0:
        return 0
    raw = (amount * fee_bps + BPS_DENOM - 1) // BPS_DENOM
    return min(raw, max_fee)


def calculate_pre_fee_amount(*, post_fee_amount: int, fee_bps: int, max_fee: int) -> int:
    """Gross amount to send so that `post_fee_amount` is received."""
    _require_int("post_fee_amount", post_fee_amount)
    _check_params(fee_bps, max_fee)
    if post_fee_amount < 0:
        raise ValueError("post_fee_amount must be non-negative")
    if fee_bps == 0 or post_fee_amount == 0:
        return post_fee_amount
    if fee_bps == BPS_DENOM:
        return post_fee_amount + max_fee

    denominator = BPS_DENOM - fee_bps
    raw_pre_fee = (post_fee_amount * BPS_DENOM + denominator - 1) // denominator
    if raw_pre_fee - post_fee_amount >= max_fee:
        return post_fee_amount + max_fee
    return raw_pre_fee


def calculate_inverse_fee(*, post_fee_amount: int, fee_bps: int, max_fee: int) -> int:
    """Overhead that must be added to `post_fee_amount` so it arrives in full."""
    pre = calculate_pre_fee_amount(post_fee_amount=post_fee_amount, fee_bps=fee_bps, max_fee=max_fee)
    return calculate_fee(amount=pre, fee_bps=fee_bps, max_fee=max_fee)
