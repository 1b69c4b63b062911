"""
AMM configuration shared by every pool created under it.

Configs are plain frozen records; they can be built in code or loaded from a
YAML document:

    config_id: default
    trade_fee_rate: 2500          # per-million
    protocol_fee_rate: 120000     # share of the trade fee, per-million
    fund_fee_rate: 40000
    max_open_time: 2592000
    volatility:
      t1_bps: 3000
      t2_bps: 6000
      t3_bps: 8000
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, FrozenSet, Mapping, Optional, Tuple, Union

import yaml

from .amounts import AssetId, ParticipantId, U64_MAX, require_width
from .pools import MAX_PARTNERS, PartnerId
from .volatility import VolatilityTiers


FEE_RATE_DENOMINATOR = 1_000_000
BPS_DENOM = 10_000

NATIVE_ASSET = "0x" + "00" * 32
NATIVE_DECIMALS = 9


@dataclass(frozen=True)
class AmmConfig:
    config_id: str = "default"
    trade_fee_rate: int = 2_500
    protocol_fee_rate: int = 120_000
    fund_fee_rate: int = 40_000
    create_pool_fee: int = 0
    create_pool_fee_receiver: Optional[ParticipantId] = None
    native_asset: AssetId = NATIVE_ASSET
    max_open_time: int = 30 * 24 * 3600
    disable_create_pool: bool = False
    referral_project: Optional[str] = None
    max_referral_share_bps: int = 2_000
    volatility: VolatilityTiers = field(default_factory=VolatilityTiers)
    volatility_window_seconds: int = 3_600
    oracle_max_staleness_seconds: int = 3_600
    partner_ids: Tuple[PartnerId, ...] = ()
    reward_operator: Optional[ParticipantId] = None
    registered_segmenters: FrozenSet[ParticipantId] = frozenset()

    def __post_init__(self) -> None:
        if not isinstance(self.config_id, str) or not self.config_id:
            raise ValueError("config_id must be a non-empty string")
        for name, rate in (
            ("trade_fee_rate", self.trade_fee_rate),
            ("protocol_fee_rate", self.protocol_fee_rate),
            ("fund_fee_rate", self.fund_fee_rate),
        ):
            if not isinstance(rate, int) or isinstance(rate, bool):
                raise TypeError(f"{name} must be an int")
            if not (0 <= rate < FEE_RATE_DENOMINATOR):
                raise ValueError(f"{name} must be in [0, {FEE_RATE_DENOMINATOR}): {rate}")
        if self.protocol_fee_rate + self.fund_fee_rate > FEE_RATE_DENOMINATOR:
            raise ValueError("protocol_fee_rate + fund_fee_rate must not exceed the fee denominator")
        require_width(
            (
                ("create_pool_fee", self.create_pool_fee),
                ("max_open_time", self.max_open_time),
                ("volatility_window_seconds", self.volatility_window_seconds),
                ("oracle_max_staleness_seconds", self.oracle_max_staleness_seconds),
            ),
            U64_MAX,
        )
        if not (0 <= self.max_referral_share_bps <= BPS_DENOM):
            raise ValueError(f"max_referral_share_bps must be in [0, {BPS_DENOM}]: {self.max_referral_share_bps}")
        if self.create_pool_fee > 0 and not self.create_pool_fee_receiver:
            raise ValueError("create_pool_fee_receiver is required when create_pool_fee is set")
        object.__setattr__(self, "partner_ids", tuple(self.partner_ids))
        if len(self.partner_ids) > MAX_PARTNERS:
            raise ValueError(f"at most {MAX_PARTNERS} partner ids: {len(self.partner_ids)}")
        if len(set(self.partner_ids)) != len(self.partner_ids):
            raise ValueError("partner ids must be unique")
        object.__setattr__(self, "registered_segmenters", frozenset(self.registered_segmenters))
        if not isinstance(self.volatility, VolatilityTiers):
            raise TypeError("volatility must be a VolatilityTiers")

    def is_segmenter(self, caller: Optional[ParticipantId]) -> bool:
        return caller is not None and caller in self.registered_segmenters


_FIELD_NAMES = frozenset(f.name for f in fields(AmmConfig))


def amm_config_from_mapping(obj: Mapping[str, Any]) -> AmmConfig:
    """Build an AmmConfig from a decoded YAML/JSON mapping (unknown keys are rejected)."""
    if not isinstance(obj, Mapping):
        raise TypeError("config must be a mapping")
    unknown = sorted(set(obj) - _FIELD_NAMES)
    if unknown:
        raise ValueError(f"unknown config keys: {', '.join(unknown)}")

    kwargs = dict(obj)
    vol = kwargs.get("volatility")
    if vol is not None:
        if not isinstance(vol, Mapping):
            raise TypeError("volatility must be a mapping")
        kwargs["volatility"] = VolatilityTiers(**vol)
    if "partner_ids" in kwargs:
        kwargs["partner_ids"] = tuple(kwargs["partner_ids"] or ())
    if "registered_segmenters" in kwargs:
        kwargs["registered_segmenters"] = frozenset(kwargs["registered_segmenters"] or ())
    return AmmConfig(**kwargs)


def amm_config_to_mapping(config: AmmConfig) -> dict[str, Any]:
    """Inverse of `amm_config_from_mapping` (plain YAML-safe values)."""
    out: dict[str, Any] = {}
    for f in fields(AmmConfig):
        value = getattr(config, f.name)
        if isinstance(value, VolatilityTiers):
            value = {"t1_bps": value.t1_bps, "t2_bps": value.t2_bps, "t3_bps": value.t3_bps}
        elif isinstance(value, tuple):
            value = list(value)
        elif isinstance(value, frozenset):
            value = sorted(value)
        out[f.name] = value
    return out


def load_amm_config(path: Union[str, Path]) -> AmmConfig:
    """Load an AmmConfig from a YAML file."""
    obj = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    if obj is None:
        obj = {}
    return amm_config_from_mapping(obj)


def dump_amm_config(config: AmmConfig) -> str:
    return yaml.safe_dump(amm_config_to_mapping(config), sort_keys=True)
