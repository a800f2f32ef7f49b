from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path
from typing import Any, List, Mapping, Optional, Union

from pydantic import Field, ValidationError as PydanticValidationError, model_validator

from ..errors import ValidationError
from .models import AssetRiskLevel, FrozenCamelModel

POLICY_VERSION_PATTERN = r"^\d+\.\d+\.\d+$"


class ReserveRatioConfig(FrozenCamelModel):
    # ratio >= green -> GREEN; yellow <= ratio < green -> YELLOW; ratio < yellow -> RED.
    green_threshold: Decimal = Field(default=Decimal("1.02"), gt=0)
    yellow_threshold: Decimal = Field(default=Decimal("1.00"), gt=0)

    @model_validator(mode="after")
    def _ordered(self) -> "ReserveRatioConfig":
        if self.yellow_threshold > self.green_threshold:
            raise ValueError("yellow_threshold must not exceed green_threshold")
        return self


class ProofFreshnessConfig(FrozenCamelModel):
    # age <= green -> GREEN; age <= yellow -> YELLOW; older -> RED.
    green_max_age_hours: float = Field(default=12.0, gt=0)
    yellow_max_age_hours: float = Field(default=24.0, gt=0)

    @model_validator(mode="after")
    def _ordered(self) -> "ProofFreshnessConfig":
        if self.green_max_age_hours > self.yellow_max_age_hours:
            raise ValueError("green_max_age_hours must not exceed yellow_max_age_hours")
        return self


class AssetQualityConfig(FrozenCamelModel):
    restricted_risk_levels: List[AssetRiskLevel] = Field(
        default_factory=lambda: [AssetRiskLevel.RESTRICTED]
    )
    # Optional cap on the summed percentage of RISKY holdings. Unset means the rule
    # only looks for restricted holdings.
    max_risky_percentage: Optional[float] = Field(default=None, ge=0, le=100)


class AssetConcentrationConfig(FrozenCamelModel):
    # Boundary values belong to the lower-severity tier.
    green_max_percentage: float = Field(default=60.0, ge=0, le=100)
    yellow_max_percentage: float = Field(default=75.0, ge=0, le=100)

    @model_validator(mode="after")
    def _ordered(self) -> "AssetConcentrationConfig":
        if self.green_max_percentage > self.yellow_max_percentage:
            raise ValueError("green_max_percentage must not exceed yellow_max_percentage")
        return self


class PolicyConfig(FrozenCamelModel):
    """Versioned bundle of thresholds for all four controls.

    Rules read their typed section directly (`ctx.policy.reserve_ratio`, ...).
    """

    version: str = Field(default="1.0.0", pattern=POLICY_VERSION_PATTERN)
    reserve_ratio: ReserveRatioConfig = Field(default_factory=ReserveRatioConfig)
    proof_freshness: ProofFreshnessConfig = Field(default_factory=ProofFreshnessConfig)
    asset_quality: AssetQualityConfig = Field(default_factory=AssetQualityConfig)
    asset_concentration: AssetConcentrationConfig = Field(default_factory=AssetConcentrationConfig)

    def with_version(self, version: str) -> "PolicyConfig":
        return validate_policy_config({**self.model_dump(mode="json"), "version": version})


# The two threshold sets below disagree on freshness, asset quality and
# concentration semantics. Both are kept so a deployer picks one explicitly.
DEFAULT_POLICY_CONFIG = PolicyConfig()

STRICT_POLICY_CONFIG = PolicyConfig(
    version="1.1.0",
    proof_freshness=ProofFreshnessConfig(green_max_age_hours=6.0, yellow_max_age_hours=24.0),
    asset_quality=AssetQualityConfig(max_risky_percentage=30.0),
    # Flat cutoff: anything over 75% is a warning, never a failure.
    asset_concentration=AssetConcentrationConfig(green_max_percentage=75.0, yellow_max_percentage=100.0),
)

POLICY_PRESETS = {
    "default": DEFAULT_POLICY_CONFIG,
    "strict": STRICT_POLICY_CONFIG,
}


def _format_errors(exc: PydanticValidationError) -> List[str]:
    return [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()]


def validate_policy_config(raw: Union[PolicyConfig, Mapping[str, Any]]) -> PolicyConfig:
    if isinstance(raw, PolicyConfig):
        return raw
    try:
        return PolicyConfig.model_validate(raw)
    except PydanticValidationError as exc:
        raise ValidationError(_format_errors(exc)) from exc


def _read_policy_file(path: Path) -> Mapping[str, Any]:
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() in (".yaml", ".yml"):
        import yaml

        data = yaml.safe_load(text)
    else:
        data = json.loads(text)
    if not isinstance(data, dict):
        raise ValidationError([f"{path}: policy file must contain a mapping"])
    return data


def load_policy_config(source: Union[None, str, Path, PolicyConfig, Mapping[str, Any]] = None) -> PolicyConfig:
    """Resolve a policy from a preset name, a JSON/YAML file, or a mapping."""
    if source is None:
        return DEFAULT_POLICY_CONFIG
    if isinstance(source, (PolicyConfig, Mapping)):
        return validate_policy_config(source)
    name = str(source).strip()
    if name.lower() in POLICY_PRESETS:
        return POLICY_PRESETS[name.lower()]
    path = Path(name)
    if not path.exists():
        raise ValidationError(
            [f"unknown policy '{name}' (expected one of {sorted(POLICY_PRESETS)} or a file path)"]
        )
    return validate_policy_config(_read_policy_file(path))


__all__ = [
    "POLICY_VERSION_PATTERN",
    "ReserveRatioConfig",
    "ProofFreshnessConfig",
    "AssetQualityConfig",
    "AssetConcentrationConfig",
    "PolicyConfig",
    "DEFAULT_POLICY_CONFIG",
    "STRICT_POLICY_CONFIG",
    "POLICY_PRESETS",
    "validate_policy_config",
    "load_policy_config",
]
