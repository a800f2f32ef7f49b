"""
Advisory reasoning boundary.

Adapters turn a finished `ComplianceResult` into explanatory text. They are
advisory only: the result is frozen and nothing they return feeds back into
statuses or the evidence hash. `explain_safely` wraps any adapter so a fault
degrades to a clearly labelled low-confidence fallback instead of an error.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Dict, List, Optional, Protocol, Tuple

from .errors import format_error_for_logging
from .logging_config import audit_log
from .rules_engine.models import ComplianceResult, ComplianceStatus, ControlResult, ControlType

FALLBACK_LABEL = "[FALLBACK: advisory reasoning unavailable]"

SEVERITY_LABELS: Dict[ComplianceStatus, str] = {
    ComplianceStatus.GREEN: "INFO",
    ComplianceStatus.YELLOW: "WARNING",
    ComplianceStatus.RED: "CRITICAL",
}

OVERALL_LABELS: Dict[ComplianceStatus, str] = {
    ComplianceStatus.GREEN: "COMPLIANT",
    ComplianceStatus.YELLOW: "AT RISK",
    ComplianceStatus.RED: "NON-COMPLIANT",
}


@dataclass(frozen=True)
class ControlAnalysis:
    control_type: ControlType
    status: ComplianceStatus
    finding: str
    impact: str
    severity: str


@dataclass(frozen=True)
class Reasoning:
    summary: str
    control_analysis: Tuple[ControlAnalysis, ...]
    remediation: Tuple[str, ...] = ()
    confidence: str = "HIGH"
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def render(self) -> str:
        lines = [self.summary, "", "--- Control Analysis ---"]
        for a in self.control_analysis:
            lines.append(f"[{a.severity}] {a.control_type.value}: {a.finding}")
        if self.remediation:
            lines.extend(["", "--- Recommended Actions ---"])
            lines.extend(f"{i}. {r}" for i, r in enumerate(self.remediation, start=1))
        return "\n".join(lines)


class ReasoningAdapter(Protocol):
    def explain(self, result: ComplianceResult) -> Reasoning:
        ...


@dataclass(frozen=True)
class _Template:
    finding: Dict[ComplianceStatus, Callable[[Optional[Decimal]], str]]
    impact: Dict[ComplianceStatus, str]
    remediation: Dict[ComplianceStatus, Tuple[str, ...]]


def _pct(value: Optional[Decimal], scale: int = 1) -> str:
    if value is None or not value.is_finite():
        return "n/a"
    return f"{value * scale:.1f}%"


def _hours(value: Optional[Decimal]) -> str:
    return "n/a" if value is None else f"{value:.1f} hours"


_TEMPLATES: Dict[ControlType, _Template] = {
    ControlType.RESERVE_RATIO: _Template(
        finding={
            ComplianceStatus.GREEN: lambda v: f"Reserve ratio at {_pct(v, 100)} indicates full collateralization with a safety buffer.",
            ComplianceStatus.YELLOW: lambda v: f"Reserve ratio at {_pct(v, 100)} meets minimum collateralization but the safety margin is thin.",
            ComplianceStatus.RED: lambda v: f"Reserve ratio at {_pct(v, 100)} indicates undercollateralization.",
        },
        impact={
            ComplianceStatus.GREEN: "Token holders are fully protected by verifiable reserves.",
            ComplianceStatus.YELLOW: "Token holders face marginally elevated risk due to thin reserve coverage.",
            ComplianceStatus.RED: "Reserves do not cover outstanding liabilities.",
        },
        remediation={
            ComplianceStatus.YELLOW: (
                "Increase the reserve buffer to restore the safety margin.",
                "Consider pausing new issuance until the ratio is restored.",
            ),
            ComplianceStatus.RED: (
                "Inject additional reserves to restore collateralization.",
                "Halt new issuance immediately.",
                "Notify compliance officers and open an incident.",
            ),
        },
    ),
    ControlType.PROOF_FRESHNESS: _Template(
        finding={
            ComplianceStatus.GREEN: lambda v: f"Attestation proof is {_hours(v)} old, within the freshness window.",
            ComplianceStatus.YELLOW: lambda v: f"Attestation proof is {_hours(v)} old and approaching the staleness limit.",
            ComplianceStatus.RED: lambda v: f"Attestation proof is {_hours(v)} old and stale.",
        },
        impact={
            ComplianceStatus.GREEN: "Reserve data is current.",
            ComplianceStatus.YELLOW: "Confidence in the current reserve state is reduced.",
            ComplianceStatus.RED: "Reserve data should not be relied on for compliance decisions.",
        },
        remediation={
            ComplianceStatus.YELLOW: (
                "Request an updated attestation from the reserve custodian.",
                "Verify the attestation pipeline is operational.",
            ),
            ComplianceStatus.RED: (
                "Obtain a fresh attestation immediately.",
                "Investigate the attestation pipeline failure.",
            ),
        },
    ),
    ControlType.ASSET_QUALITY: _Template(
        finding={
            ComplianceStatus.GREEN: lambda v: "All reserve assets meet quality requirements.",
            ComplianceStatus.YELLOW: lambda v: "Asset composition shows an elevated risk profile.",
            ComplianceStatus.RED: lambda v: "Reserve composition contains restricted or excessively risky holdings.",
        },
        impact={
            ComplianceStatus.GREEN: "The reserve portfolio is composed of acceptable assets.",
            ComplianceStatus.YELLOW: "Reserve portfolio quality is marginal.",
            ComplianceStatus.RED: "Reserve portfolio quality fails policy requirements for backing assets.",
        },
        remediation={
            ComplianceStatus.RED: (
                "Remove restricted assets from the reserve portfolio.",
                "Document remediation steps for the audit trail.",
            ),
        },
    ),
    ControlType.ASSET_CONCENTRATION: _Template(
        finding={
            ComplianceStatus.GREEN: lambda v: f"Largest single-asset share is {_pct(v)}; the portfolio is diversified.",
            ComplianceStatus.YELLOW: lambda v: f"Largest single-asset share is {_pct(v)}, above the diversification target.",
            ComplianceStatus.RED: lambda v: f"Largest single-asset share is {_pct(v)}; concentration is critical.",
        },
        impact={
            ComplianceStatus.GREEN: "Diversification limits single-point-of-failure risk.",
            ComplianceStatus.YELLOW: "Over-concentration adds correlated risk if the dominant asset devalues.",
            ComplianceStatus.RED: "A single asset failure could impair the whole reserve.",
        },
        remediation={
            ComplianceStatus.YELLOW: ("Diversify the reserve portfolio to reduce single-asset concentration.",),
            ComplianceStatus.RED: (
                "Rebalance the reserve portfolio immediately.",
                "Establish automated allocation limits.",
            ),
        },
    ),
}

_uncovered = set(ControlType) - set(_TEMPLATES)
if _uncovered:
    raise RuntimeError(f"Advisory templates missing for control types: {sorted(c.value for c in _uncovered)}")


class TemplateReasoner:
    """Deterministic, template-driven explanations."""

    def __init__(self, *, include_remediation: bool = True, max_length: int = 2000):
        self.include_remediation = include_remediation
        self.max_length = max_length

    def _analyze(self, control: ControlResult) -> ControlAnalysis:
        template = _TEMPLATES[control.control_type]
        return ControlAnalysis(
            control_type=control.control_type,
            status=control.status,
            finding=template.finding[control.status](control.value),
            impact=template.impact[control.status],
            severity=SEVERITY_LABELS[control.status],
        )

    def explain(self, result: ComplianceResult) -> Reasoning:
        analyses = tuple(self._analyze(c) for c in result.controls)
        flagged = [a for a in analyses if a.status != ComplianceStatus.GREEN]
        label = OVERALL_LABELS[result.overall_status]

        if not flagged:
            summary = (
                f"Assessment: {label}. All {len(analyses)} compliance controls passed "
                f"(policy {result.policy_version})."
            )
        else:
            issues = ", ".join(
                f"{a.control_type.value.replace('_', ' ').lower()} ({a.status.value})" for a in flagged
            )
            summary = (
                f"Assessment: {label}. {len(flagged)} of {len(analyses)} controls flagged: {issues}. "
                f"Worst-of aggregation yields overall {result.overall_status.value} "
                f"(policy {result.policy_version})."
            )
        if len(summary) > self.max_length:
            summary = summary[: self.max_length - 3] + "..."

        remediation: List[str] = []
        if self.include_remediation:
            for a in flagged:
                for step in _TEMPLATES[a.control_type].remediation.get(a.status, ()):
                    if step not in remediation:
                        remediation.append(step)

        return Reasoning(
            summary=summary,
            control_analysis=analyses,
            remediation=tuple(remediation),
            confidence="HIGH",
        )


def fallback_reasoning(result: ComplianceResult) -> Reasoning:
    return Reasoning(
        summary=(
            f"{FALLBACK_LABEL} Compliance status: {result.overall_status.value}. "
            f"{len(result.controls)} controls evaluated."
        ),
        control_analysis=tuple(
            ControlAnalysis(
                control_type=c.control_type,
                status=c.status,
                finding=c.message,
                impact="Detailed impact analysis unavailable.",
                severity=SEVERITY_LABELS[c.status],
            )
            for c in result.controls
        ),
        confidence="LOW",
    )


def explain_safely(adapter: Optional[ReasoningAdapter], result: ComplianceResult) -> Reasoning:
    """Run an adapter; any failure degrades to `fallback_reasoning`."""
    if adapter is None:
        return fallback_reasoning(result)
    try:
        reasoning = adapter.explain(result)
        if not isinstance(reasoning, Reasoning):
            raise TypeError(f"adapter returned {type(reasoning).__name__}, expected Reasoning")
        return reasoning
    except Exception as exc:
        audit_log.advisory_fallback(format_error_for_logging(exc))
        return fallback_reasoning(result)


__all__ = [
    "FALLBACK_LABEL",
    "ControlAnalysis",
    "Reasoning",
    "ReasoningAdapter",
    "TemplateReasoner",
    "fallback_reasoning",
    "explain_safely",
]
