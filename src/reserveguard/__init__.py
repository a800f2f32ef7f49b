"""
ReserveGuard: compliance decision core for reserve-backed asset issuers.

Evaluates four fixed controls (reserve ratio, proof freshness, asset quality,
asset concentration), reduces them worst-of to one status, commits to the
inputs with a privacy-preserving evidence hash, and records every verdict in a
hash-chained audit ledger.

Usage:
    from reserveguard import AuditLedger, ComplianceEngine

    engine = ComplianceEngine(ledger=AuditLedger())
    result = engine.evaluate(reserves, liabilities, now=now)
    result.overall_status, result.evidence_hash
    engine.ledger.verify_chain()
"""

__version__ = "0.1.0"

from .anchoring import OnChainReport, build_onchain_report
from .audit import (
    AuditEntry,
    AuditLedger,
    ChainVerification,
    InMemoryAuditStore,
    JsonlAuditStore,
    verify_entries,
)
from .engine import ComplianceEngine
from .errors import AuditLedgerError, ConfigurationError, EvaluationError, ReserveGuardError, ValidationError
from .hashing import GENESIS_HASH
from .rules_engine import (
    CONTROL_ORDER,
    DEFAULT_POLICY_CONFIG,
    POLICY_PRESETS,
    STRICT_POLICY_CONFIG,
    Asset,
    AssetRiskLevel,
    ComplianceResult,
    ComplianceStatus,
    ControlResult,
    ControlType,
    LiabilityData,
    PolicyConfig,
    ReserveData,
    aggregate_status,
    load_policy_config,
)

__all__ = [
    "__version__",
    "OnChainReport",
    "build_onchain_report",
    "AuditEntry",
    "AuditLedger",
    "ChainVerification",
    "InMemoryAuditStore",
    "JsonlAuditStore",
    "verify_entries",
    "ComplianceEngine",
    "AuditLedgerError",
    "ConfigurationError",
    "EvaluationError",
    "ReserveGuardError",
    "ValidationError",
    "GENESIS_HASH",
    "CONTROL_ORDER",
    "DEFAULT_POLICY_CONFIG",
    "POLICY_PRESETS",
    "STRICT_POLICY_CONFIG",
    "Asset",
    "AssetRiskLevel",
    "ComplianceResult",
    "ComplianceStatus",
    "ControlResult",
    "ControlType",
    "LiabilityData",
    "PolicyConfig",
    "ReserveData",
    "aggregate_status",
    "load_policy_config",
]
