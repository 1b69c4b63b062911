"""
Asset descriptors: kind, extensions and intrinsic transfer fees.

An asset is supported by the pool engine when it is a plain (STANDARD) asset,
or an EXTENDED asset whose extensions are all on the allow-list below.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, unique
from typing import FrozenSet, Optional

from .amounts import AssetId, U64_MAX


@unique
class AssetKind(Enum):
    STANDARD = "STANDARD"
    EXTENDED = "EXTENDED"


@unique
class AssetExtension(Enum):
    TRANSFER_FEE = "TRANSFER_FEE"
    METADATA_POINTER = "METADATA_POINTER"
    TOKEN_METADATA = "TOKEN_METADATA"
    INTEREST_BEARING = "INTEREST_BEARING"
    PERMANENT_DELEGATE = "PERMANENT_DELEGATE"
    NON_TRANSFERABLE = "NON_TRANSFERABLE"
    TRANSFER_HOOK = "TRANSFER_HOOK"
    CONFIDENTIAL_TRANSFER = "CONFIDENTIAL_TRANSFER"


SUPPORTED_EXTENSIONS: FrozenSet[AssetExtension] = frozenset(
    {
        AssetExtension.TRANSFER_FEE,
        AssetExtension.METADATA_POINTER,
        AssetExtension.TOKEN_METADATA,
        AssetExtension.INTEREST_BEARING,
    }
)


@dataclass(frozen=True)
class TransferFeeConfig:
    """Intrinsic transfer fee: `min(ceil(amount * fee_bps / 10_000), max_fee)`."""

    fee_bps: int = 0
    max_fee: int = 0

    def __post_init__(self) -> None:
        for name, v in (("fee_bps", self.fee_bps), ("max_fee", self.max_fee)):
            if not isinstance(v, int) or isinstance(v, bool):
                raise TypeError(f"{name} must be an int")
        if not (0 <= self.fee_bps <= 10_000):
            raise ValueError(f"fee_bps must be in [0, 10000]: {self.fee_bps}")
        if not (0 <= self.max_fee <= U64_MAX):
            raise ValueError(f"max_fee must be a u64: {self.max_fee}")


@dataclass(frozen=True)
class AssetInfo:
    asset_id: AssetId
    decimals: int = 9
    kind: AssetKind = AssetKind.STANDARD
    extensions: FrozenSet[AssetExtension] = field(default_factory=frozenset)
    transfer_fee: Optional[TransferFeeConfig] = None

    def __post_init__(self) -> None:
        if not isinstance(self.asset_id, str) or not self.asset_id:
            raise ValueError("asset_id must be a non-empty string")
        if not isinstance(self.decimals, int) or isinstance(self.decimals, bool) or not (0 <= self.decimals <= 255):
            raise ValueError(f"decimals must be in [0, 255]: {self.decimals}")
        object.__setattr__(self, "extensions", frozenset(self.extensions))
        if self.kind is AssetKind.STANDARD and self.extensions:
            raise ValueError("STANDARD assets cannot carry extensions")
        has_fee_ext = AssetExtension.TRANSFER_FEE in self.extensions
        if has_fee_ext != (self.transfer_fee is not None):
            raise ValueError("transfer_fee must be set iff the TRANSFER_FEE extension is present")

    @property
    def fee_config(self) -> TransferFeeConfig:
        """Transfer fee parameters (zero fee when the asset has none)."""
        return self.transfer_fee if self.transfer_fee is not None else TransferFeeConfig()


def is_supported_asset(info: AssetInfo) -> bool:
    """Return True if the pool engine can hold this asset."""
    if info.kind is AssetKind.STANDARD:
        return True
    return info.extensions <= SUPPORTED_EXTENSIONS
