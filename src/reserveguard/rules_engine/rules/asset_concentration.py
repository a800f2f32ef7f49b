from __future__ import annotations

from decimal import Decimal

from ..config import AssetConcentrationConfig
from ..context import RuleContext, to_decimal
from ..models import ComplianceStatus, ControlResult, ControlType
from ..registry import register_rule
from ..rule import Rule


@register_rule
class ConcentrationRule(Rule):
    rule_id = ControlType.ASSET_CONCENTRATION.value
    rule_title = "No single asset dominates the reserve portfolio"
    control_type = ControlType.ASSET_CONCENTRATION
    config_model = AssetConcentrationConfig

    def evaluate(self, ctx: RuleContext) -> ControlResult:
        cfg = ctx.policy.asset_concentration
        assets = ctx.reserves.assets

        if not assets:
            # No diversification information; treated conservatively.
            return self.result(
                ctx,
                status=ComplianceStatus.RED,
                value=Decimal(0),
                threshold=to_decimal(cfg.yellow_max_percentage),
                message="No assets in reserve portfolio.",
            )

        max_pct = max(a.percentage for a in assets)

        if max_pct <= cfg.green_max_percentage:
            status = ComplianceStatus.GREEN
            threshold = cfg.green_max_percentage
            message = f"Portfolio diversification adequate. Highest single-asset concentration: {max_pct:.1f}%."
        elif max_pct <= cfg.yellow_max_percentage:
            status = ComplianceStatus.YELLOW
            threshold = cfg.yellow_max_percentage
            message = (
                f"Concentration warning: one asset represents {max_pct:.1f}% of reserves "
                f"(threshold: {cfg.green_max_percentage:g}%)."
            )
        else:
            status = ComplianceStatus.RED
            threshold = cfg.yellow_max_percentage
            message = (
                f"Concentration breach: one asset represents {max_pct:.1f}% of reserves "
                f"(maximum: {cfg.yellow_max_percentage:g}%)."
            )

        return self.result(
            ctx,
            status=status,
            value=to_decimal(max_pct),
            threshold=to_decimal(threshold),
            message=message,
        )
