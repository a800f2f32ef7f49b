from datetime import datetime, timedelta, timezone

import pytest

from reserveguard.rules_engine.config import DEFAULT_POLICY_CONFIG
from reserveguard.rules_engine.context import RuleContext
from reserveguard.rules_engine.models import Asset, LiabilityData, ReserveData


@pytest.fixture
def now() -> datetime:
    return datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_asset():
    counter = {"n": 0}

    def _make(*, percentage: float, risk_level: str = "SAFE", value=None, name=None, symbol=None) -> Asset:
        counter["n"] += 1
        n = counter["n"]
        return Asset(
            id=f"asset-{n}",
            name=name or f"Holding {n}",
            symbol=symbol or f"H{n}",
            value=value if value is not None else str(percentage * 1_000_000),
            risk_level=risk_level,
            percentage=percentage,
        )

    return _make


@pytest.fixture
def make_reserves(now, make_asset):
    def _make(*, total_value="105000000", assets=None, age_hours: float = 2, attested_at=None) -> ReserveData:
        if assets is None:
            assets = [make_asset(percentage=50.0), make_asset(percentage=50.0)]
        return ReserveData(
            total_value=total_value,
            assets=assets,
            attestation_timestamp=attested_at or now - timedelta(hours=age_hours),
            attestation_hash="0xattestation",
            source="fixture",
        )

    return _make


@pytest.fixture
def make_liabilities(now):
    def _make(*, total_value="100000000", circulating_supply=None) -> LiabilityData:
        return LiabilityData(
            total_value=total_value,
            circulating_supply=circulating_supply if circulating_supply is not None else total_value,
            timestamp=now,
            source="fixture",
        )

    return _make


@pytest.fixture
def make_ctx(now, make_reserves, make_liabilities):
    def _make(*, reserves=None, liabilities=None, policy=None, at=None) -> RuleContext:
        return RuleContext(
            reserves=reserves or make_reserves(),
            liabilities=liabilities or make_liabilities(),
            policy=policy or DEFAULT_POLICY_CONFIG,
            now=at or now,
        )

    return _make


@pytest.fixture
def reserves_payload(now):
    """Raw camelCase JSON as delivered by the fetch layer."""
    return {
        "totalValue": 105000000,
        "assets": [
            {
                "id": "zt-1",
                "name": "Zephyr Treasury Fund",
                "symbol": "ZTFQ",
                "value": 63000000,
                "riskLevel": "SAFE",
                "percentage": 60,
            },
            {
                "id": "kb-2",
                "name": "Kestrel Bond Ladder",
                "symbol": "KBLX",
                "value": 42000000,
                "riskLevel": "RISKY",
                "percentage": 40,
            },
        ],
        "attestationTimestamp": (now - timedelta(hours=3)).isoformat(),
        "attestationHash": "0xfeedbeef",
        "source": "custodian-feed",
    }


@pytest.fixture
def liabilities_payload(now):
    return {
        "totalValue": 100000000,
        "circulatingSupply": 100000000,
        "timestamp": now.isoformat(),
        "source": "issuer-ledger",
    }
