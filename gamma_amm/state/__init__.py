"""
State records for the pool engine
"""

from .assets import AssetExtension, AssetInfo, AssetKind, TransferFeeConfig, is_supported_asset
from .config import AmmConfig, load_amm_config
from .participants import ParticipantLiquidity
from .pools import LOCK_LP_AMOUNT, PartnerRecord, PoolLedger, PoolStatus, compute_pool_id
from .rewards import ParticipantReward, RewardSchedule, compute_schedule_id
from .volatility import VolatilityTiers

__all__ = [
    "AssetExtension",
    "AssetInfo",
    "AssetKind",
    "TransferFeeConfig",
    "is_supported_asset",
    "AmmConfig",
    "load_amm_config",
    "ParticipantLiquidity",
    "LOCK_LP_AMOUNT",
    "PartnerRecord",
    "PoolLedger",
    "PoolStatus",
    "compute_pool_id",
    "ParticipantReward",
    "RewardSchedule",
    "compute_schedule_id",
    "VolatilityTiers",
]
