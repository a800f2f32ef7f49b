from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_EVEN, Decimal

from .config import PolicyConfig
from .models import LiabilityData, ReserveData, ensure_utc

# Ratios are compared at this precision so float noise such as
# 1.0000000000000002 cannot flip a boundary verdict.
RATIO_QUANTUM = Decimal("1e-10")


@dataclass(frozen=True)
class RuleContext:
    reserves: ReserveData
    liabilities: LiabilityData
    policy: PolicyConfig
    now: datetime

    def __post_init__(self) -> None:
        object.__setattr__(self, "now", ensure_utc(self.now))

    def attestation_age_hours(self) -> float:
        age = (self.now - self.reserves.attestation_timestamp).total_seconds() / 3600
        # Future-dated attestations count as zero age.
        return max(0.0, age)


def quantize_ratio(value: Decimal) -> Decimal:
    return value.quantize(RATIO_QUANTUM, rounding=ROUND_HALF_EVEN)


def to_decimal(value: float) -> Decimal:
    return Decimal(str(value))
