from __future__ import annotations

from decimal import Decimal, localcontext

from ..config import ReserveRatioConfig
from ..context import RuleContext, quantize_ratio
from ..models import ComplianceStatus, ControlResult, ControlType
from ..registry import register_rule
from ..rule import Rule


@register_rule
class ReserveRatioRule(Rule):
    rule_id = ControlType.RESERVE_RATIO.value
    rule_title = "Reserves cover outstanding liabilities"
    control_type = ControlType.RESERVE_RATIO
    config_model = ReserveRatioConfig

    def evaluate(self, ctx: RuleContext) -> ControlResult:
        cfg = ctx.policy.reserve_ratio
        liabilities = ctx.liabilities.total_value

        if liabilities == 0:
            # A zero-liability issuer is trivially over-collateralized.
            return self.result(
                ctx,
                status=ComplianceStatus.GREEN,
                value=Decimal("Infinity"),
                threshold=cfg.green_threshold,
                message="No liabilities reported; reserve ratio is infinite.",
            )

        with localcontext() as dctx:
            dctx.prec = 60
            raw = ctx.reserves.total_value / liabilities
            # Quantizing needs room for every integer digit plus the ten decimals.
            dctx.prec = max(60, raw.adjusted() + 12)
            ratio = quantize_ratio(raw)

        pct = f"{ratio * 100:.2f}%"
        if ratio >= cfg.green_threshold:
            status = ComplianceStatus.GREEN
            threshold = cfg.green_threshold
            message = f"Reserve ratio of {pct} meets the {cfg.green_threshold * 100:.0f}% threshold."
        elif ratio >= cfg.yellow_threshold:
            status = ComplianceStatus.YELLOW
            threshold = cfg.yellow_threshold
            message = f"Reserve ratio of {pct} is below optimal but at or above the minimum threshold."
        else:
            status = ComplianceStatus.RED
            threshold = cfg.yellow_threshold
            message = (
                f"CRITICAL: Reserve ratio of {pct} is below the {cfg.yellow_threshold * 100:.0f}% minimum. "
                "Reserves are undercollateralized."
            )

        return self.result(ctx, status=status, value=ratio, threshold=threshold, message=message)
