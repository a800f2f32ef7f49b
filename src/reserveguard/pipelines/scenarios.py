"""Named demo scenarios, built relative to a reference time.

Figures are in USD. `policy` names the preset each scenario was written
against: `at_risk` expects the flat 75% concentration cutoff of the strict
preset, under which 78% concentration is a warning rather than a breach.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Dict, List, Tuple

from ..rules_engine.models import Asset, AssetRiskLevel, LiabilityData, ReserveData, ensure_utc

# (id, name, symbol, risk level, percentage)
_Holding = Tuple[str, str, str, AssetRiskLevel, float]


@dataclass(frozen=True)
class Scenario:
    name: str
    description: str
    reserves_total: Decimal
    liabilities_total: Decimal
    attestation_age_hours: float
    holdings: Tuple[_Holding, ...]
    policy: str = "default"


SCENARIOS: Dict[str, Scenario] = {
    s.name: s
    for s in (
        Scenario(
            name="healthy",
            description="Well collateralized, fresh proof, diversified holdings.",
            reserves_total=Decimal("105000000"),
            liabilities_total=Decimal("100000000"),
            attestation_age_hours=2,
            holdings=(
                ("tbill-3m", "US Treasury Bills (3M)", "TBILL", AssetRiskLevel.SAFE, 50.0),
                ("cash-usd", "Cash Deposits", "USD", AssetRiskLevel.SAFE, 35.0),
                ("corp-ig", "Investment Grade Corporate Bonds", "CORP", AssetRiskLevel.RISKY, 15.0),
            ),
        ),
        Scenario(
            name="at_risk",
            description="Thin reserve buffer, ageing proof, concentrated holdings.",
            reserves_total=Decimal("101000000"),
            liabilities_total=Decimal("100000000"),
            attestation_age_hours=10,
            holdings=(
                ("tbill-3m", "US Treasury Bills (3M)", "TBILL", AssetRiskLevel.SAFE, 78.0),
                ("cash-usd", "Cash Deposits", "USD", AssetRiskLevel.SAFE, 22.0),
            ),
            policy="strict",
        ),
        Scenario(
            name="non_compliant",
            description="Undercollateralized, stale proof, restricted holding present.",
            reserves_total=Decimal("95000000"),
            liabilities_total=Decimal("100000000"),
            attestation_age_hours=30,
            holdings=(
                ("tbill-3m", "US Treasury Bills (3M)", "TBILL", AssetRiskLevel.SAFE, 55.0),
                ("cash-usd", "Cash Deposits", "USD", AssetRiskLevel.SAFE, 40.0),
                ("otc-token", "Unlisted Affiliate Token", "AFFX", AssetRiskLevel.RESTRICTED, 5.0),
            ),
        ),
        Scenario(
            name="stale_proof",
            description="Healthy reserves behind an attestation older than a day.",
            reserves_total=Decimal("105000000"),
            liabilities_total=Decimal("100000000"),
            attestation_age_hours=36,
            holdings=(
                ("tbill-3m", "US Treasury Bills (3M)", "TBILL", AssetRiskLevel.SAFE, 55.0),
                ("cash-usd", "Cash Deposits", "USD", AssetRiskLevel.SAFE, 45.0),
            ),
        ),
        Scenario(
            name="concentrated",
            description="Healthy ratio and proof, but one holding dominates.",
            reserves_total=Decimal("110000000"),
            liabilities_total=Decimal("100000000"),
            attestation_age_hours=1,
            holdings=(
                ("tbill-3m", "US Treasury Bills (3M)", "TBILL", AssetRiskLevel.SAFE, 80.0),
                ("cash-usd", "Cash Deposits", "USD", AssetRiskLevel.SAFE, 20.0),
            ),
        ),
    )
}


def build_scenario(name: str, *, now: datetime) -> Tuple[ReserveData, LiabilityData]:
    try:
        scenario = SCENARIOS[name]
    except KeyError:
        raise ValueError(f"Unknown scenario '{name}' (expected one of {sorted(SCENARIOS)}).") from None

    now = ensure_utc(now)
    assets: List[Asset] = [
        Asset(
            id=asset_id,
            name=asset_name,
            symbol=symbol,
            value=(scenario.reserves_total * Decimal(str(pct)) / 100).quantize(Decimal("0.01")),
            risk_level=risk,
            percentage=pct,
        )
        for asset_id, asset_name, symbol, risk, pct in scenario.holdings
    ]
    reserves = ReserveData(
        total_value=scenario.reserves_total,
        assets=assets,
        attestation_timestamp=now - timedelta(hours=scenario.attestation_age_hours),
        attestation_hash=f"0x{scenario.name}-attestation",
        source=f"scenario:{scenario.name}",
    )
    liabilities = LiabilityData(
        total_value=scenario.liabilities_total,
        circulating_supply=scenario.liabilities_total,
        timestamp=now,
        source=f"scenario:{scenario.name}",
    )
    return reserves, liabilities
