from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from ..errors import EvaluationError
from .context import RuleContext
from .models import CONTROL_ORDER, ComplianceStatus, ControlResult, StatusOrdering
from .registry import registry

logger = logging.getLogger(__name__)


def aggregate_status(
    controls: Iterable[ControlResult],
    ordering: Optional[StatusOrdering] = None,
) -> ComplianceStatus:
    """Worst-of reduction: RED > YELLOW > GREEN."""
    statuses = [c.status for c in controls]
    if not statuses:
        raise EvaluationError("Cannot aggregate an empty set of control results.")
    return (ordering or StatusOrdering.default()).worst(statuses)


class RulesRunner:
    def __init__(self, rules: Optional[Iterable] = None):
        self._rules = list(rules) if rules is not None else registry.create_all()

    @property
    def rules(self) -> list:
        return list(self._rules)

    def run(self, ctx: RuleContext) -> List[ControlResult]:
        """Evaluate every rule; any fault aborts the whole run."""
        results: List[ControlResult] = []
        for rule in self._rules:
            control_type = getattr(rule, "control_type", None)
            try:
                result = rule.evaluate(ctx)
            except EvaluationError:
                raise
            except Exception as exc:
                label = control_type.value if control_type is not None else rule.rule_id
                logger.error("Rule %s failed: %s", label, type(exc).__name__)
                raise EvaluationError(f"Rule {label} failed: {exc}", control_type=label) from exc
            if not isinstance(result, ControlResult) or result.control_type != control_type:
                raise EvaluationError(
                    f"Rule {rule.rule_id} returned an unexpected result.",
                    control_type=control_type.value if control_type is not None else None,
                )
            results.append(result)

        produced = tuple(r.control_type for r in results)
        if produced != CONTROL_ORDER:
            raise EvaluationError(f"Expected controls {[c.value for c in CONTROL_ORDER]}, got {[c.value for c in produced]}.")
        return results
