"""Input validation for the compliance engine.

Everything is checked before the first rule runs; a single bad field aborts the
evaluation with `ValidationError`.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional, Tuple, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError as PydanticValidationError

from .errors import ValidationError
from .rules_engine.config import PolicyConfig, validate_policy_config
from .rules_engine.models import LiabilityData, ReserveData

M = TypeVar("M", bound=BaseModel)


def _format(prefix: str, exc: PydanticValidationError) -> List[str]:
    errors = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in (prefix, *err["loc"]))
        errors.append(f"{loc}: {err['msg']}")
    return errors


def _coerce(prefix: str, model: Type[M], raw: Union[M, Mapping[str, Any]], errors: List[str]) -> Optional[M]:
    if isinstance(raw, model):
        return raw
    if not isinstance(raw, Mapping):
        errors.append(f"{prefix}: expected an object, got {type(raw).__name__}")
        return None
    try:
        return model.model_validate(raw)
    except PydanticValidationError as exc:
        errors.extend(_format(prefix, exc))
        return None


def validate_reserve_data(raw: Union[ReserveData, Mapping[str, Any]]) -> ReserveData:
    errors: List[str] = []
    data = _coerce("reserves", ReserveData, raw, errors)
    if data is None:
        raise ValidationError(errors)
    return data


def validate_liability_data(raw: Union[LiabilityData, Mapping[str, Any]]) -> LiabilityData:
    errors: List[str] = []
    data = _coerce("liabilities", LiabilityData, raw, errors)
    if data is None:
        raise ValidationError(errors)
    return data


def validate_evaluation_input(
    reserves: Union[ReserveData, Mapping[str, Any]],
    liabilities: Union[LiabilityData, Mapping[str, Any]],
    policy: Union[PolicyConfig, Mapping[str, Any]],
) -> Tuple[ReserveData, LiabilityData, PolicyConfig]:
    """Validate all three inputs, collecting every error before raising."""
    errors: List[str] = []
    reserve_data = _coerce("reserves", ReserveData, reserves, errors)
    liability_data = _coerce("liabilities", LiabilityData, liabilities, errors)
    policy_config: Optional[PolicyConfig] = None
    try:
        policy_config = validate_policy_config(policy)
    except ValidationError as exc:
        errors.extend(f"policy.{e}" for e in exc.errors)
    if errors or reserve_data is None or liability_data is None or policy_config is None:
        raise ValidationError(errors)
    return reserve_data, liability_data, policy_config


__all__ = [
    "validate_reserve_data",
    "validate_liability_data",
    "validate_evaluation_input",
]
