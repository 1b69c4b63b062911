from __future__ import annotations

import pytest

from gamma_amm.core.curve import TradeDirection
from gamma_amm.core.errors import ArithmeticUnderflow
from gamma_amm.core.fees import (
    FeeSplit,
    ReferralInfo,
    apply_referral_rebate,
    attribute_partner_fees,
    partner_fee,
    referral_amount,
    resolve_referral,
    split_dynamic_fee,
)
from gamma_amm.state.config import AmmConfig
from gamma_amm.state.pools import PartnerRecord


def test_split_conserves_dynamic_fee() -> None:
    split = split_dynamic_fee(250, 30, 10)
    assert split == FeeSplit(protocol_fee=30, fund_fee=10, lp_fee=210)
    assert split.total == 250


def test_split_rejects_oversized_portions() -> None:
    with pytest.raises(ArithmeticUnderflow):
        split_dynamic_fee(10, 8, 3)


def test_referral_amount_floors() -> None:
    assert referral_amount(30, 2_000) == (6, 24)
    assert referral_amount(4, 2_000) == (0, 4)


def test_resolve_referral_clamps_share() -> None:
    config = AmmConfig(referral_project="gamma", max_referral_share_bps=1_000)
    info = ReferralInfo(referrer="ref", asset="0xaa", share_bps=9_000)
    resolved = resolve_referral(config, "0xaa", info)
    assert resolved is not None and resolved.share_bps == 1_000
    assert resolve_referral(config, "0xbb", info) is None
    assert resolve_referral(config, "0xaa", ReferralInfo("ref", "0xaa", 500, project="other")) is None
    assert resolve_referral(AmmConfig(), "0xaa", info) is None


def test_apply_referral_rebate() -> None:
    split = FeeSplit(protocol_fee=30, fund_fee=10, lp_fee=210)
    info = ReferralInfo(referrer="ref", asset="0xaa", share_bps=2_000)
    rebate = apply_referral_rebate(split, info, lambda amount: 0)
    assert rebate is not None
    assert (rebate.amount, rebate.protocol_fee_after, rebate.fund_fee_after) == (8, 24, 8)
    assert apply_referral_rebate(split, info, lambda amount: amount) is None
    assert apply_referral_rebate(split, None, lambda amount: 0) is None


def test_partner_fee_guards_zero_supply() -> None:
    assert partner_fee(500, 0, 1_000) == 0
    assert partner_fee(1, 3, 1_000) == 333


def test_attribute_partner_fees_uses_input_side_counter() -> None:
    partners = (PartnerRecord(partner_id=1, linked_shares=250), PartnerRecord(partner_id=2))
    updated = attribute_partner_fees(partners, 1_000, 100, TradeDirection.ONE_FOR_ZERO)
    assert updated[0].cumulative_fee_share1 == 25
    assert updated[0].cumulative_fee_share0 == 0
    assert updated[1].cumulative_fee_share1 == 0
