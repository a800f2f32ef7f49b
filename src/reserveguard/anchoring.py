"""
On-chain anchor boundary.

The core hands a submission adapter exactly five values. ABI encoding and the
transaction itself belong to the adapter.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

from .rules_engine.models import ComplianceResult, ComplianceStatus

STATUS_CODES: Dict[ComplianceStatus, int] = {
    ComplianceStatus.GREEN: 0,
    ComplianceStatus.YELLOW: 1,
    ComplianceStatus.RED: 2,
}


@dataclass(frozen=True)
class OnChainReport:
    status: int
    evidence_hash: bytes
    policy_version: str
    evaluation_timestamp: int
    control_count: int

    def __post_init__(self) -> None:
        if len(self.evidence_hash) != 32:
            raise ValueError("evidence_hash must be exactly 32 bytes")
        if self.status not in STATUS_CODES.values():
            raise ValueError(f"unknown status code {self.status}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "evidenceHash": "0x" + self.evidence_hash.hex(),
            "policyVersion": self.policy_version,
            "evaluationTimestamp": self.evaluation_timestamp,
            "controlCount": self.control_count,
        }


def build_onchain_report(result: ComplianceResult) -> OnChainReport:
    return OnChainReport(
        status=STATUS_CODES[result.overall_status],
        evidence_hash=bytes.fromhex(result.evidence_hash)[:32],
        policy_version=result.policy_version,
        evaluation_timestamp=int(result.evaluation_timestamp.timestamp()),
        control_count=len(result.controls),
    )


__all__ = ["STATUS_CODES", "OnChainReport", "build_onchain_report"]
