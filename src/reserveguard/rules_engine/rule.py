from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Optional, Type

from pydantic import BaseModel

from .context import RuleContext
from .models import ComplianceStatus, ControlResult, ControlType


class Rule(ABC):
    rule_id: str
    rule_title: str
    control_type: ControlType
    config_model: Type[BaseModel]

    def __init__(self):
        if not getattr(self, "rule_id", None):
            raise ValueError("Rule must define rule_id")
        if getattr(self, "control_type", None) is None:
            raise ValueError("Rule must define control_type")

    @abstractmethod
    def evaluate(self, ctx: RuleContext) -> ControlResult:  # pragma: no cover
        raise NotImplementedError

    def result(
        self,
        ctx: RuleContext,
        *,
        status: ComplianceStatus,
        message: str,
        value: Optional[Decimal] = None,
        threshold: Optional[Decimal] = None,
    ) -> ControlResult:
        return ControlResult(
            control_type=self.control_type,
            status=status,
            value=value,
            threshold=threshold,
            message=message,
            timestamp=ctx.now,
        )
