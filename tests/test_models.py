"""Tests for Pydantic data models."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from defi_intel.core.models import (
    ChainSummary,
    PositionKind,
    ProtocolSummary,
    RankedOpportunity,
    RiskLevel,
    TokenBalance,
    TokenInfo,
    WalletScanReport,
    YieldRanking,
)
from tests.conftest import make_opportunity, make_position


def test_token_info_is_frozen(usdc):
    """Test TokenInfo cannot be mutated."""
    with pytest.raises(ValidationError):
        usdc.symbol = "USDT"


def test_token_info_rejects_negative_decimals():
    """Test decimals must be non-negative."""
    with pytest.raises(ValidationError):
        TokenInfo(symbol="X", name="X", decimals=-1, address="0x", chain_id="ethereum")


def test_token_balance_from_raw(usdc):
    """Test formatted amount is derived from the raw integer."""
    balance = TokenBalance.from_raw(usdc, 2_500_000)

    assert balance.balance_raw == "2500000"
    assert balance.balance_formatted == "2.5"
    assert balance.amount == Decimal("2.5")
    assert balance.balance_usd is None


def test_risk_level_order():
    """Test risk tiers are totally ordered."""
    assert RiskLevel.LOW.rank < RiskLevel.MEDIUM.rank < RiskLevel.HIGH.rank
    assert RiskLevel("high") is RiskLevel.HIGH


def test_position_kind_values():
    """Test position kinds use the tool-facing names."""
    assert PositionKind.LENDING_SUPPLY == "lending-supply"
    assert PositionKind.LIQUIDITY == "lp"


def test_position_payload_formats_usd():
    """Test positions render USD as strings."""
    payload = make_position("Aave V3", "base", "40").to_payload()

    assert payload["total_value_usd"] == "$40.00"
    assert payload["kind"] == "token"
    assert payload["assets"][0]["balance_usd"] == "$40.00"


def test_wallet_scan_report_payload():
    """Test the scan report payload shape."""
    report = WalletScanReport(
        address="0xabc",
        total_value_usd=Decimal("160"),
        protocols_scanned=["Native Tokens"],
        chains_scanned=["ethereum", "base"],
        by_protocol={"Native Tokens": ProtocolSummary(total_usd=Decimal("160"), position_count=2)},
        by_chain={"base": ChainSummary(name="Base", total_usd=Decimal("40"), position_count=1)},
    )
    payload = report.to_payload()

    assert payload["totalValueUsd"] == "$160.00"
    assert payload["summary"]["byProtocol"]["Native Tokens"] == {"totalUsd": "$160.00", "positionCount": 2}
    assert payload["summary"]["byChain"]["base"] == {"name": "Base", "totalUsd": "$40.00", "positionCount": 1}
    assert payload["positions"] == []


def test_yield_ranking_payload():
    """Test ranking payload with best opportunity first."""
    ranked = RankedOpportunity(
        opportunity=make_opportunity("Aave V3", "base", "4").model_copy(update={"tvl": Decimal("125000000")}),
        gas_cost_usd=Decimal("2"),
        bridge_cost_usd=Decimal("3"),
        gross_yield_usd=Decimal("400"),
        net_yield_usd=Decimal("395"),
        net_apy=Decimal("3.95"),
        execution_steps=["Approve USDC for Aave V3 on base"],
    )
    ranking = YieldRanking(
        token="USDC",
        amount=Decimal("10000"),
        time_horizon_days=365,
        risk_tolerance=RiskLevel.MEDIUM,
        opportunities=[ranked],
    )
    payload = ranking.to_payload()

    assert ranking.best is ranked
    assert ranked.total_entry_cost_usd == Decimal("5")
    assert payload["currentChainId"] == "not specified"
    assert payload["opportunitiesFound"] == 1
    best = payload["bestOpportunity"]
    assert best["grossApy"] == "4.00%"
    assert best["netApy"] == "3.95%"
    assert best["totalEntryCostUsd"] == "$5.00"
    assert best["tvl"] == "$125.0M"


def test_empty_ranking_has_no_best():
    """Test an empty ranking reports no best opportunity."""
    ranking = YieldRanking(token="USDC", amount=Decimal("1"), time_horizon_days=30, risk_tolerance=RiskLevel.LOW)

    assert ranking.best is None
    assert ranking.to_payload()["bestOpportunity"] is None
