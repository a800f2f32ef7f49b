from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from ..hashing import is_sha256_hex


class ComplianceStatus(str, Enum):
    GREEN = "GREEN"
    YELLOW = "YELLOW"
    RED = "RED"


class ControlType(str, Enum):
    RESERVE_RATIO = "RESERVE_RATIO"
    PROOF_FRESHNESS = "PROOF_FRESHNESS"
    ASSET_QUALITY = "ASSET_QUALITY"
    ASSET_CONCENTRATION = "ASSET_CONCENTRATION"


# Evidence commitments are built over controls in this order.
CONTROL_ORDER: tuple[ControlType, ...] = (
    ControlType.RESERVE_RATIO,
    ControlType.PROOF_FRESHNESS,
    ControlType.ASSET_QUALITY,
    ControlType.ASSET_CONCENTRATION,
)


class AssetRiskLevel(str, Enum):
    SAFE = "SAFE"
    RISKY = "RISKY"
    RESTRICTED = "RESTRICTED"


def ensure_utc(value: datetime) -> datetime:
    # Naive timestamps from upstream feeds are read as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class CamelModel(BaseModel):
    """Snake_case attributes, camelCase JSON; both accepted on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FrozenCamelModel(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class Asset(FrozenCamelModel):
    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    symbol: str = Field(min_length=1, max_length=20)
    value: Decimal = Field(ge=0)
    risk_level: AssetRiskLevel
    percentage: float = Field(ge=0, le=100)


class ReserveData(FrozenCamelModel):
    total_value: Decimal = Field(ge=0)
    assets: List[Asset] = Field(default_factory=list)
    attestation_timestamp: datetime
    attestation_hash: str = Field(min_length=1)
    source: str = Field(min_length=1)

    @field_validator("attestation_timestamp")
    @classmethod
    def _utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)


class LiabilityData(FrozenCamelModel):
    total_value: Decimal = Field(ge=0)
    circulating_supply: Decimal = Field(ge=0)
    timestamp: datetime
    source: str = Field(min_length=1)

    @field_validator("timestamp")
    @classmethod
    def _utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)


class ControlResult(FrozenCamelModel):
    control_type: ControlType
    status: ComplianceStatus
    # Infinity is a legal reserve ratio when liabilities are zero.
    value: Optional[Decimal] = Field(default=None, allow_inf_nan=True)
    threshold: Optional[Decimal] = None
    message: str = ""
    timestamp: datetime


class ControlSummary(FrozenCamelModel):
    type: ControlType
    status: ComplianceStatus


class ComplianceResult(FrozenCamelModel):
    overall_status: ComplianceStatus
    controls: tuple[ControlResult, ...]
    policy_version: str
    evaluation_timestamp: datetime
    evidence_hash: str

    @field_validator("evidence_hash")
    @classmethod
    def _hex_digest(cls, value: str) -> str:
        if not is_sha256_hex(value):
            raise ValueError("evidence_hash must be 64 lowercase hex characters")
        return value

    @model_validator(mode="after")
    def _fixed_control_order(self) -> "ComplianceResult":
        order = tuple(c.control_type for c in self.controls)
        if order != CONTROL_ORDER:
            raise ValueError(f"controls must be exactly {[c.value for c in CONTROL_ORDER]}")
        return self

    def control(self, control_type: ControlType) -> ControlResult:
        for res in self.controls:
            if res.control_type == control_type:
                return res
        raise KeyError(control_type)

    def control_summary(self) -> List[ControlSummary]:
        return [ControlSummary(type=c.control_type, status=c.status) for c in self.controls]


class EvaluationRecord(FrozenCamelModel):
    """Engine history entry. Holds digests and statuses only."""

    evaluation_id: str
    timestamp: datetime
    input_hash: str
    evidence_hash: str
    policy_version: str
    overall_status: ComplianceStatus
    control_summary: tuple[ControlSummary, ...] = ()


@dataclass(frozen=True)
class StatusOrdering:
    order: Dict[ComplianceStatus, int]

    @classmethod
    def default(cls) -> "StatusOrdering":
        # Higher wins.
        return cls(
            order={
                ComplianceStatus.RED: 30,
                ComplianceStatus.YELLOW: 20,
                ComplianceStatus.GREEN: 10,
            }
        )

    def worst(self, statuses: List[ComplianceStatus]) -> ComplianceStatus:
        if not statuses:
            raise ValueError("cannot aggregate an empty set of statuses")
        return max(statuses, key=lambda s: self.order[s])
