from __future__ import annotations

from pathlib import Path

import pytest

from gamma_amm.state.config import (
    AmmConfig,
    amm_config_from_mapping,
    dump_amm_config,
    load_amm_config,
)
from gamma_amm.state.volatility import VolatilityTiers


def test_defaults() -> None:
    config = AmmConfig()
    assert config.trade_fee_rate == 2_500
    assert config.volatility == VolatilityTiers()
    assert not config.is_segmenter("anyone")


def test_rejects_rate_at_denominator() -> None:
    with pytest.raises(ValueError, match="trade_fee_rate"):
        AmmConfig(trade_fee_rate=1_000_000)


def test_create_pool_fee_requires_receiver() -> None:
    with pytest.raises(ValueError, match="create_pool_fee_receiver"):
        AmmConfig(create_pool_fee=10)


def test_from_mapping_rejects_unknown_keys() -> None:
    with pytest.raises(ValueError, match="unknown config keys: bogus"):
        amm_config_from_mapping({"bogus": 1})


def test_yaml_round_trip(tmp_path: Path) -> None:
    config = AmmConfig(
        config_id="fast",
        trade_fee_rate=3_000,
        referral_project="gamma",
        volatility=VolatilityTiers(t1_bps=1000, t2_bps=2000, t3_bps=3000),
        partner_ids=(1, 2),
        registered_segmenters=frozenset({"seg"}),
        reward_operator="operator",
    )
    path = tmp_path / "config.yaml"
    path.write_text(dump_amm_config(config), encoding="utf-8")
    assert load_amm_config(path) == config


def test_load_yaml_document(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(
        "config_id: default\n"
        "trade_fee_rate: 2500\n"
        "volatility:\n"
        "  t1_bps: 100\n"
        "  t2_bps: 200\n"
        "  t3_bps: 300\n",
        encoding="utf-8",
    )
    config = load_amm_config(path)
    assert config.volatility.tier_for(250) == 2


def test_empty_yaml_gives_defaults(tmp_path: Path) -> None:
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert load_amm_config(path) == AmmConfig()
