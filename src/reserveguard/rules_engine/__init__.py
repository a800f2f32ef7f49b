"""Reserve compliance rules engine.

This package contains only domain logic:
- Rule inputs are a reserve snapshot, a liability snapshot, a policy and "now".
- No network fetches, scheduling or chain submission live here.
"""

from .config import (
    DEFAULT_POLICY_CONFIG,
    POLICY_PRESETS,
    STRICT_POLICY_CONFIG,
    PolicyConfig,
    load_policy_config,
)
from .context import RuleContext
from .models import (
    CONTROL_ORDER,
    Asset,
    AssetRiskLevel,
    ComplianceResult,
    ComplianceStatus,
    ControlResult,
    ControlSummary,
    ControlType,
    EvaluationRecord,
    LiabilityData,
    ReserveData,
    StatusOrdering,
)
from .runner import RulesRunner, aggregate_status

# Import built-in rules so they self-register with the global registry.
from . import rules as _builtin_rules  # noqa: F401
