from __future__ import annotations

from decimal import Decimal

from ..config import AssetQualityConfig
from ..context import RuleContext, to_decimal
from ..models import AssetRiskLevel, ComplianceStatus, ControlResult, ControlType
from ..registry import register_rule
from ..rule import Rule


@register_rule
class AssetQualityRule(Rule):
    """Restricted holdings are a structural breach: RED, never YELLOW.

    Messages report counts and percentages only; asset names and symbols stay
    out of the published result.
    """

    rule_id = ControlType.ASSET_QUALITY.value
    rule_title = "Reserves hold no restricted assets"
    control_type = ControlType.ASSET_QUALITY
    config_model = AssetQualityConfig

    def evaluate(self, ctx: RuleContext) -> ControlResult:
        cfg = ctx.policy.asset_quality
        restricted_levels = set(cfg.restricted_risk_levels)
        assets = ctx.reserves.assets

        restricted = [a for a in assets if a.risk_level in restricted_levels]
        permitted = [a for a in assets if a.risk_level not in restricted_levels]
        safe_pct = sum(a.percentage for a in permitted)
        risky_pct = sum(a.percentage for a in permitted if a.risk_level == AssetRiskLevel.RISKY)

        if restricted:
            return self.result(
                ctx,
                status=ComplianceStatus.RED,
                value=Decimal(len(restricted)),
                threshold=Decimal(0),
                message=f"VIOLATION: {len(restricted)} restricted holding(s) detected in reserves.",
            )

        if cfg.max_risky_percentage is not None and risky_pct > cfg.max_risky_percentage:
            return self.result(
                ctx,
                status=ComplianceStatus.RED,
                value=to_decimal(round(risky_pct, 6)),
                threshold=to_decimal(cfg.max_risky_percentage),
                message=(
                    f"VIOLATION: risky holdings make up {risky_pct:.1f}% of reserves, "
                    f"above the {cfg.max_risky_percentage:g}% cap."
                ),
            )

        return self.result(
            ctx,
            status=ComplianceStatus.GREEN,
            value=Decimal(0),
            threshold=Decimal(0),
            message=f"Asset quality compliant. No restricted assets detected. Safe holdings: {safe_pct:.1f}%.",
        )
