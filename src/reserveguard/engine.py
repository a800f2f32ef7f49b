"""
Compliance engine.

Orchestrates validation -> rules -> worst-of aggregation -> evidence hash and
returns a frozen `ComplianceResult`. An evaluation either fully succeeds or
raises; there is no best-effort mode with skipped controls.
"""

from __future__ import annotations

import threading
import uuid
from collections import deque
from datetime import datetime, timezone
from typing import Any, Deque, List, Mapping, Optional, Union

from .audit import AuditLedger
from .errors import ReserveGuardError, format_error_for_logging
from .evidence import build_evidence, evidence_hash, input_hash
from .logging_config import audit_log
from .rules_engine.config import DEFAULT_POLICY_CONFIG, PolicyConfig, validate_policy_config
from .rules_engine.context import RuleContext
from .rules_engine.models import (
    ComplianceResult,
    EvaluationRecord,
    LiabilityData,
    ReserveData,
    ensure_utc,
)
from .rules_engine.runner import RulesRunner, aggregate_status
from .validation import validate_evaluation_input

DEFAULT_HISTORY_LIMIT = 1000


class ComplianceEngine:
    def __init__(
        self,
        policy: Union[PolicyConfig, Mapping[str, Any], None] = None,
        *,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
        ledger: Optional[AuditLedger] = None,
        runner: Optional[RulesRunner] = None,
    ):
        if history_limit < 1:
            raise ValueError("history_limit must be at least 1")
        self._policy = validate_policy_config(policy) if policy is not None else DEFAULT_POLICY_CONFIG
        self._runner = runner or RulesRunner()
        self._ledger = ledger
        self._history: Deque[EvaluationRecord] = deque(maxlen=history_limit)
        self._lock = threading.Lock()

    @property
    def policy(self) -> PolicyConfig:
        return self._policy

    @property
    def ledger(self) -> Optional[AuditLedger]:
        return self._ledger

    def update_policy(self, policy: Union[PolicyConfig, Mapping[str, Any]]) -> PolicyConfig:
        """Swap the policy for later evaluations. Past results are untouched."""
        validated = validate_policy_config(policy)
        with self._lock:
            self._policy = validated
        return validated

    def evaluate(
        self,
        reserves: Union[ReserveData, Mapping[str, Any]],
        liabilities: Union[LiabilityData, Mapping[str, Any]],
        *,
        policy: Union[PolicyConfig, Mapping[str, Any], None] = None,
        now: Optional[datetime] = None,
    ) -> ComplianceResult:
        """Evaluate one snapshot pair.

        `policy` overrides the engine policy for this call only. `now` is the
        reference time for proof freshness and the evaluation timestamp; with
        a fixed `now` the result, evidence hash included, is deterministic.
        """
        try:
            reserve_data, liability_data, policy_config = validate_evaluation_input(
                reserves, liabilities, policy if policy is not None else self._policy
            )
            evaluated_at = ensure_utc(now) if now is not None else datetime.now(timezone.utc)
            ctx = RuleContext(
                reserves=reserve_data,
                liabilities=liability_data,
                policy=policy_config,
                now=evaluated_at,
            )
            controls = self._runner.run(ctx)
            overall = aggregate_status(controls)
            payload = build_evidence(
                reserves=reserve_data,
                liabilities=liability_data,
                controls=controls,
                evaluation_timestamp=evaluated_at,
                policy_version=policy_config.version,
            )
            result = ComplianceResult(
                overall_status=overall,
                controls=tuple(controls),
                policy_version=policy_config.version,
                evaluation_timestamp=evaluated_at,
                evidence_hash=evidence_hash(payload),
            )
        except ReserveGuardError as exc:
            audit_log.evaluation_failed(format_error_for_logging(exc))
            raise

        record = EvaluationRecord(
            evaluation_id=str(uuid.uuid4()),
            timestamp=evaluated_at,
            input_hash=input_hash(reserve_data, liability_data),
            evidence_hash=result.evidence_hash,
            policy_version=result.policy_version,
            overall_status=result.overall_status,
            control_summary=tuple(result.control_summary()),
        )
        if self._ledger is not None:
            try:
                self._ledger.record(record.evaluation_id, result)
            except Exception as exc:
                audit_log.evaluation_failed(format_error_for_logging(exc))
                raise
        # History never holds an evaluation the ledger rejected.
        with self._lock:
            self._history.append(record)

        audit_log.evaluation_completed(
            record.evaluation_id,
            result.overall_status.value,
            result.policy_version,
            result.evidence_hash,
        )
        return result

    def history(self) -> List[EvaluationRecord]:
        with self._lock:
            return list(self._history)

    def last_record(self) -> Optional[EvaluationRecord]:
        with self._lock:
            return self._history[-1] if self._history else None


__all__ = ["ComplianceEngine", "DEFAULT_HISTORY_LIMIT"]
