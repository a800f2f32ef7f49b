from decimal import Decimal

import pytest

from reserveguard.rules_engine.config import STRICT_POLICY_CONFIG
from reserveguard.rules_engine.models import ComplianceStatus
from reserveguard.rules_engine.rules.asset_concentration import ConcentrationRule


@pytest.mark.parametrize(
    "largest,expected",
    [
        (40.0, ComplianceStatus.GREEN),
        (60.0, ComplianceStatus.GREEN),
        (60.01, ComplianceStatus.YELLOW),
        (75.0, ComplianceStatus.YELLOW),
        (75.01, ComplianceStatus.RED),
        (100.0, ComplianceStatus.RED),
    ],
)
def test_concentration_tiers(make_asset, make_reserves, make_ctx, largest, expected):
    assets = [make_asset(percentage=largest)]
    remaining = round(100 - largest, 2)
    while remaining > 0:
        share = min(largest, remaining)
        assets.append(make_asset(percentage=share))
        remaining = round(remaining - share, 2)
    assert max(a.percentage for a in assets) == largest
    res = ConcentrationRule().evaluate(make_ctx(reserves=make_reserves(assets=assets)))
    assert res.status == expected
    assert res.value == Decimal(str(largest))


def test_concentration_empty_portfolio_is_red(make_reserves, make_ctx):
    res = ConcentrationRule().evaluate(make_ctx(reserves=make_reserves(assets=[])))
    assert res.status == ComplianceStatus.RED
    assert res.value == 0
    assert res.message == "No assets in reserve portfolio."


def test_concentration_strict_policy_never_fails(make_asset, make_reserves, make_ctx):
    assets = [make_asset(percentage=95.0), make_asset(percentage=5.0)]
    res = ConcentrationRule().evaluate(
        make_ctx(reserves=make_reserves(assets=assets), policy=STRICT_POLICY_CONFIG)
    )
    assert res.status == ComplianceStatus.YELLOW
