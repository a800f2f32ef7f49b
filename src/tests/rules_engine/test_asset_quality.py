from decimal import Decimal

from reserveguard.rules_engine.config import STRICT_POLICY_CONFIG
from reserveguard.rules_engine.models import ComplianceStatus
from reserveguard.rules_engine.rules.asset_quality import AssetQualityRule


def test_asset_quality_safe_portfolio_passes(make_asset, make_reserves, make_ctx):
    assets = [make_asset(percentage=70.0), make_asset(percentage=30.0, risk_level="RISKY")]
    res = AssetQualityRule().evaluate(make_ctx(reserves=make_reserves(assets=assets)))
    assert res.status == ComplianceStatus.GREEN
    assert res.value == 0
    assert "100.0%" in res.message


def test_asset_quality_any_restricted_holding_is_red(make_asset, make_reserves, make_ctx):
    assets = [
        make_asset(percentage=55.0),
        make_asset(percentage=40.0),
        make_asset(percentage=5.0, risk_level="RESTRICTED", name="Shadow Fund", symbol="SHDW"),
    ]
    res = AssetQualityRule().evaluate(make_ctx(reserves=make_reserves(assets=assets)))
    assert res.status == ComplianceStatus.RED
    assert res.value == Decimal(1)
    assert res.threshold == Decimal(0)
    assert "1 restricted holding" in res.message
    assert "Shadow Fund" not in res.message
    assert "SHDW" not in res.message


def test_asset_quality_tiny_restricted_share_still_red(make_asset, make_reserves, make_ctx):
    assets = [make_asset(percentage=99.99), make_asset(percentage=0.01, risk_level="RESTRICTED")]
    res = AssetQualityRule().evaluate(make_ctx(reserves=make_reserves(assets=assets)))
    assert res.status == ComplianceStatus.RED


def test_asset_quality_risky_cap_under_strict_policy(make_asset, make_reserves, make_ctx):
    over = [make_asset(percentage=65.0), make_asset(percentage=35.0, risk_level="RISKY")]
    at_cap = [make_asset(percentage=70.0), make_asset(percentage=30.0, risk_level="RISKY")]

    res_over = AssetQualityRule().evaluate(
        make_ctx(reserves=make_reserves(assets=over), policy=STRICT_POLICY_CONFIG)
    )
    res_cap = AssetQualityRule().evaluate(
        make_ctx(reserves=make_reserves(assets=at_cap), policy=STRICT_POLICY_CONFIG)
    )

    assert res_over.status == ComplianceStatus.RED
    assert res_over.value == Decimal("35.0")
    assert res_cap.status == ComplianceStatus.GREEN


def test_asset_quality_empty_portfolio_has_no_restricted_holdings(make_reserves, make_ctx):
    res = AssetQualityRule().evaluate(make_ctx(reserves=make_reserves(assets=[])))
    assert res.status == ComplianceStatus.GREEN
