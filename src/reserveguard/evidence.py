"""
Evidence commitment builder.

The evidence hash is the publishable proof of what was evaluated and with what
outcome. It is computed over:

    {reserveCommitment, liabilityCommitment, controlStatuses,
     evaluationTimestamp, policyVersion}

where the two commitments are themselves SHA-256 digests of the canonical JSON
of the raw snapshots. Raw figures, asset names and percentages never enter the
payload; only digests, statuses and metadata do.

Limitation: the commitments are unsalted. Anyone who already knows the inputs,
or can enumerate a small input space, can recompute them. Privacy rests on the
full raw snapshots staying secret, not on cryptographic hiding.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Iterable, List

from pydantic import BaseModel

from .hashing import content_hash
from .rules_engine.models import ControlResult, ControlSummary, FrozenCamelModel, ensure_utc


class EvidencePayload(FrozenCamelModel):
    reserve_commitment: str
    liability_commitment: str
    control_statuses: tuple[ControlSummary, ...]
    evaluation_timestamp: str
    policy_version: str

    def canonical_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


def commit(model: BaseModel) -> str:
    """One-way digest of a structured snapshot."""
    return content_hash(model.model_dump(mode="json", by_alias=True))


def format_timestamp(value: datetime) -> str:
    return ensure_utc(value).isoformat()


def build_evidence(
    *,
    reserves: BaseModel,
    liabilities: BaseModel,
    controls: Iterable[ControlResult],
    evaluation_timestamp: datetime,
    policy_version: str,
) -> EvidencePayload:
    statuses: List[ControlSummary] = [
        ControlSummary(type=c.control_type, status=c.status) for c in controls
    ]
    return EvidencePayload(
        reserve_commitment=commit(reserves),
        liability_commitment=commit(liabilities),
        control_statuses=tuple(statuses),
        evaluation_timestamp=format_timestamp(evaluation_timestamp),
        policy_version=policy_version,
    )


def evidence_hash(payload: EvidencePayload) -> str:
    return content_hash(payload.canonical_dict())


def input_hash(reserves: BaseModel, liabilities: BaseModel) -> str:
    return content_hash({"reserves": commit(reserves), "liabilities": commit(liabilities)})


__all__ = [
    "EvidencePayload",
    "commit",
    "format_timestamp",
    "build_evidence",
    "evidence_hash",
    "input_hash",
]
