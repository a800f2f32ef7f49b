"""
Error types for the compliance core.

Validation and evaluation faults abort an evaluation outright; a half-built
result is never returned. Audit-chain problems are reported by the ledger as
data, not raised.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional


class ReserveGuardError(Exception):
    """Base class for all errors raised by the compliance core."""

    code = "RESERVEGUARD_ERROR"

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": type(self).__name__,
            "code": self.code,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
        }


class ValidationError(ReserveGuardError):
    """Malformed or out-of-range input; raised before any rule runs."""

    code = "VALIDATION_ERROR"

    def __init__(self, errors: Iterable[str]):
        self.errors: List[str] = list(errors)
        super().__init__(f"Validation failed: {', '.join(self.errors)}")

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload["errors"] = list(self.errors)
        return payload


class ConfigurationError(ReserveGuardError):
    code = "CONFIGURATION_ERROR"


class AuditLedgerError(ReserveGuardError):
    """The ledger cannot accept new entries."""

    code = "AUDIT_LEDGER_ERROR"


class EvaluationError(ReserveGuardError):
    """Unexpected fault inside a rule. Aborts the whole evaluation."""

    code = "EVALUATION_ERROR"

    def __init__(self, message: str, control_type: Optional[str] = None):
        super().__init__(message)
        self.control_type = control_type

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload["control_type"] = self.control_type
        return payload


def format_error_for_logging(error: BaseException) -> Dict[str, Any]:
    if isinstance(error, ReserveGuardError):
        return error.to_dict()
    return {
        "name": type(error).__name__,
        "message": str(error),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


__all__ = [
    "ReserveGuardError",
    "ValidationError",
    "ConfigurationError",
    "EvaluationError",
    "AuditLedgerError",
    "format_error_for_logging",
]
