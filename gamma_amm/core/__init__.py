"""
Core pool algorithms
"""

from .curve import SwapResult, TradeDirection, resolve_direction
from .dynamic_fee import DynamicFee, dynamic_fee_rate, observed_volatility_bps
from .errors import (
    ArithmeticOverflow,
    ArithmeticUnderflow,
    InvalidActivationTime,
    InvalidAssetForPool,
    InvariantViolation,
    OperationDisabled,
    PoolError,
    SlippageExceeded,
    Unauthorized,
    UnsupportedAssetKind,
    ZeroTradeAmount,
)
from .events import LpChangeEvent, LpChangeKind, SwapEvent
from .fees import FeeSplit, ReferralInfo, ReferralRebate, PARTNER_FEE_SHARE_SCALE, split_dynamic_fee
from .liquidity import InitializeResult, LiquidityResult, deposit, initialize_pool, withdraw
from .oracle import ObservationState, PriceSnapshot, init_observation_state, is_fresh, record_observation
from .rewards import calculate_rewards
from .swap import OracleUpdate, SwapContext, SwapOutcome, swap_base_input, swap_base_output
from .transfers import PlannedTransfer, TransferQuotes, vault_account

__all__ = [
    "SwapResult",
    "TradeDirection",
    "resolve_direction",
    "DynamicFee",
    "dynamic_fee_rate",
    "observed_volatility_bps",
    "ArithmeticOverflow",
    "ArithmeticUnderflow",
    "InvalidActivationTime",
    "InvalidAssetForPool",
    "InvariantViolation",
    "OperationDisabled",
    "PoolError",
    "SlippageExceeded",
    "Unauthorized",
    "UnsupportedAssetKind",
    "ZeroTradeAmount",
    "LpChangeEvent",
    "LpChangeKind",
    "SwapEvent",
    "FeeSplit",
    "ReferralInfo",
    "ReferralRebate",
    "PARTNER_FEE_SHARE_SCALE",
    "split_dynamic_fee",
    "InitializeResult",
    "LiquidityResult",
    "deposit",
    "initialize_pool",
    "withdraw",
    "ObservationState",
    "PriceSnapshot",
    "init_observation_state",
    "is_fresh",
    "record_observation",
    "calculate_rewards",
    "OracleUpdate",
    "SwapContext",
    "SwapOutcome",
    "swap_base_input",
    "swap_base_output",
    "PlannedTransfer",
    "TransferQuotes",
    "vault_account",
]
