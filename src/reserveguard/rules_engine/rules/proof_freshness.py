from __future__ import annotations

from ..config import ProofFreshnessConfig
from ..context import RuleContext, to_decimal
from ..models import ComplianceStatus, ControlResult, ControlType
from ..registry import register_rule
from ..rule import Rule


@register_rule
class ProofFreshnessRule(Rule):
    rule_id = ControlType.PROOF_FRESHNESS.value
    rule_title = "Reserve attestation is recent"
    control_type = ControlType.PROOF_FRESHNESS
    config_model = ProofFreshnessConfig

    def evaluate(self, ctx: RuleContext) -> ControlResult:
        cfg = ctx.policy.proof_freshness
        age_hours = ctx.attestation_age_hours()

        if age_hours <= cfg.green_max_age_hours:
            status = ComplianceStatus.GREEN
            threshold = cfg.green_max_age_hours
            message = (
                f"Proof attestation is {age_hours:.1f} hours old, within the "
                f"{cfg.green_max_age_hours:g}-hour freshness window."
            )
        elif age_hours <= cfg.yellow_max_age_hours:
            # Exactly at the yellow ceiling still passes as YELLOW.
            status = ComplianceStatus.YELLOW
            threshold = cfg.yellow_max_age_hours
            message = (
                f"Proof attestation is {age_hours:.1f} hours old, approaching the "
                f"{cfg.yellow_max_age_hours:g}-hour maximum."
            )
        else:
            status = ComplianceStatus.RED
            threshold = cfg.yellow_max_age_hours
            message = (
                f"STALE: Proof attestation is {age_hours:.1f} hours old, exceeding the "
                f"{cfg.yellow_max_age_hours:g}-hour maximum."
            )

        return self.result(
            ctx,
            status=status,
            value=to_decimal(round(age_hours, 6)),
            threshold=to_decimal(threshold),
            message=message,
        )
