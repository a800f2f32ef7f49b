"""
Logging configuration for ReserveGuard.

Structured JSON logging for the compliance audit trail. Audit events carry
statuses, hashes, ids and policy versions only; raw reserve or liability
figures are never passed to a logger.
"""

import json
import logging
import sys
import time
from typing import Any, Dict, Optional


class StructuredFormatter(logging.Formatter):
    """One JSON object per log line."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(record.created)),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        extra_fields = getattr(record, "extra_fields", None)
        if extra_fields:
            log_data.update(extra_fields)

        return json.dumps(log_data, default=str)


class ComplianceAuditLogger:
    """Emits the structured audit events of the compliance core."""

    def __init__(self, name: str = "reserveguard.audit"):
        self._logger = logging.getLogger(name)

    def _log(self, level: int, event_type: str, message: str, **fields: Any) -> None:
        self._logger.log(
            level,
            "%s: %s",
            event_type,
            message,
            extra={"extra_fields": {"event_type": event_type, **fields}},
        )

    def evaluation_completed(
        self,
        evaluation_id: str,
        overall_status: str,
        policy_version: str,
        evidence_hash: str,
    ) -> None:
        level = logging.INFO if overall_status == "GREEN" else logging.WARNING
        self._log(
            level,
            "EVALUATION_COMPLETED",
            f"Compliance evaluation completed with status {overall_status}",
            evaluation_id=evaluation_id,
            overall_status=overall_status,
            policy_version=policy_version,
            evidence_hash=evidence_hash,
        )

    def evaluation_failed(self, error: Dict[str, Any]) -> None:
        self._log(
            logging.ERROR,
            "EVALUATION_FAILED",
            f"Compliance evaluation aborted: {error.get('code', error.get('name'))}",
            error=error,
        )

    def ledger_appended(self, entry_id: int, evaluation_id: str, entry_hash: str) -> None:
        self._log(
            logging.DEBUG,
            "LEDGER_APPENDED",
            f"Audit entry {entry_id} recorded",
            entry_id=entry_id,
            evaluation_id=evaluation_id,
            entry_hash=entry_hash,
        )

    def chain_verification_failed(self, broken_at: Optional[int], reason: Optional[str]) -> None:
        self._log(
            logging.ERROR,
            "CHAIN_VERIFICATION_FAILED",
            f"Audit chain broken at entry {broken_at}",
            broken_at=broken_at,
            reason=reason,
        )

    def advisory_fallback(self, error: Dict[str, Any]) -> None:
        self._log(
            logging.WARNING,
            "ADVISORY_FALLBACK",
            "Advisory reasoning failed; using low-confidence fallback",
            error=error,
        )


def configure_logging(
    level: str = "INFO",
    json_format: bool = True,
    log_file: Optional[str] = None,
) -> None:
    """
    Configure logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSON formatting (recommended for production)
        log_file: Optional file path for log output
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if json_format:
        formatter: logging.Formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    # stderr keeps stdout free for command output.
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


# Global audit logger instance
audit_log = ComplianceAuditLogger()
