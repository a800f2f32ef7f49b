"""
Tamper-evident audit ledger.

An append-only, hash-chained log of evaluation summaries. Each entry stores
statuses, digests and metadata only, plus the hash of the previous entry, so
editing any recorded entry breaks the chain from that point on.

    entry_hash = sha256(canonical(content) || previous_hash)

The first entry links to GENESIS_HASH (64 zeros). There is no update or delete
operation.
"""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence

from pydantic import Field, ValidationError as PydanticValidationError

from .errors import AuditLedgerError
from .evidence import format_timestamp
from .hashing import GENESIS_HASH, canonicalize, sha256_hex
from .logging_config import audit_log
from .rules_engine.models import (
    ComplianceResult,
    ComplianceStatus,
    ControlSummary,
    FrozenCamelModel,
)

logger = logging.getLogger(__name__)


class AuditEntry(FrozenCamelModel):
    entry_id: int = Field(ge=0)
    timestamp: str
    evaluation_id: str
    overall_status: ComplianceStatus
    control_summary: tuple[ControlSummary, ...]
    policy_version: str
    evidence_hash: str
    entry_hash: str
    previous_hash: str

    def content(self) -> Dict[str, Any]:
        """Hashed fields, i.e. everything except the entry's own hash."""
        data = self.model_dump(mode="json", by_alias=True)
        data.pop("entryHash")
        return data

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


def compute_entry_hash(content: Dict[str, Any], previous_hash: str) -> str:
    return sha256_hex(canonicalize(content) + previous_hash.encode("ascii"))


@dataclass(frozen=True)
class ChainVerification:
    valid: bool
    broken_at: Optional[int] = None
    reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"valid": self.valid}
        if not self.valid:
            payload["brokenAt"] = self.broken_at
            payload["reason"] = self.reason
        return payload


def verify_entries(entries: Sequence[AuditEntry]) -> ChainVerification:
    """Walk from genesis; report the first broken link or content hash."""
    prev_hash = GENESIS_HASH
    for index, entry in enumerate(entries):
        if entry.previous_hash != prev_hash:
            return ChainVerification(
                valid=False,
                broken_at=index,
                reason=(
                    f"Chain broken at entry {index}: expected previousHash {prev_hash[:16]}..., "
                    f"got {entry.previous_hash[:16]}..."
                ),
            )
        if entry.entry_id != index:
            return ChainVerification(
                valid=False,
                broken_at=index,
                reason=f"Entry {index} has out-of-sequence entryId {entry.entry_id}",
            )
        expected = compute_entry_hash(entry.content(), entry.previous_hash)
        if entry.entry_hash != expected:
            return ChainVerification(
                valid=False,
                broken_at=index,
                reason=f"Entry {index} hash mismatch: content has been tampered with",
            )
        prev_hash = entry.entry_hash
    return ChainVerification(valid=True)


class AuditStore(Protocol):
    def append(self, entry: AuditEntry) -> None:
        ...

    def entries(self) -> List[AuditEntry]:
        ...

    def __len__(self) -> int:
        ...


class InMemoryAuditStore:
    def __init__(self, entries: Optional[Iterable[AuditEntry]] = None):
        self._entries: List[AuditEntry] = list(entries or [])

    def append(self, entry: AuditEntry) -> None:
        self._entries.append(entry)

    def entries(self) -> List[AuditEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


class JsonlAuditStore:
    """Append-only JSONL file, one entry per line.

    Loading stops at the first row that does not parse as an `AuditEntry`.
    That position is kept in `load_failure` so verification can report it.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.load_failure: Optional[ChainVerification] = None
        self._entries: List[AuditEntry] = self._load()

    def _load(self) -> List[AuditEntry]:
        if not self.path.exists():
            return []
        loaded: List[AuditEntry] = []
        with self.path.open("r", encoding="utf-8") as fh:
            for line in fh:
                line = line.strip()
                if not line:
                    continue
                try:
                    loaded.append(AuditEntry.model_validate(json.loads(line)))
                except (json.JSONDecodeError, PydanticValidationError) as exc:
                    index = len(loaded)
                    self.load_failure = ChainVerification(
                        valid=False,
                        broken_at=index,
                        reason=f"Entry {index} is unreadable: {type(exc).__name__}",
                    )
                    logger.error("Ledger %s: entry %d could not be parsed", self.path, index)
                    break
        return loaded

    def append(self, entry: AuditEntry) -> None:
        with self.path.open("a", encoding="utf-8") as fh:
            fh.write(json.dumps(entry.to_dict(), ensure_ascii=False) + "\n")
        self._entries.append(entry)

    def entries(self) -> List[AuditEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


class AuditLedger:
    """Hash-chained ledger over an `AuditStore`.

    `record()` is serialized by a lock so entry ids and previous-hash links are
    assigned atomically even when evaluations run on several threads.
    """

    def __init__(self, store: Optional[AuditStore] = None):
        self._store: AuditStore = store if store is not None else InMemoryAuditStore()
        self._lock = threading.Lock()
        existing = self._store.entries()
        self._head = existing[-1].entry_hash if existing else GENESIS_HASH

    @property
    def head(self) -> str:
        return self._head

    @property
    def store(self) -> AuditStore:
        return self._store

    def __len__(self) -> int:
        return len(self._store)

    def _load_failure(self) -> Optional[ChainVerification]:
        return getattr(self._store, "load_failure", None)

    def _verify(self) -> ChainVerification:
        verification = verify_entries(self._store.entries())
        failure = self._load_failure()
        if verification.valid and failure is not None:
            return failure
        return verification

    def record(self, evaluation_id: str, result: ComplianceResult) -> AuditEntry:
        failure = self._load_failure()
        if failure is not None:
            # A damaged ledger is read-only.
            raise AuditLedgerError(f"Refusing to append to a damaged ledger: {failure.reason}")
        with self._lock:
            entry_id = len(self._store)
            previous_hash = self._head
            content = {
                "entryId": entry_id,
                "timestamp": format_timestamp(datetime.now(timezone.utc)),
                "evaluationId": evaluation_id,
                "overallStatus": result.overall_status.value,
                "controlSummary": [s.model_dump(mode="json", by_alias=True) for s in result.control_summary()],
                "policyVersion": result.policy_version,
                "evidenceHash": result.evidence_hash,
                "previousHash": previous_hash,
            }
            entry_hash = compute_entry_hash(content, previous_hash)
            entry = AuditEntry.model_validate({**content, "entryHash": entry_hash})
            self._store.append(entry)
            self._head = entry_hash

        audit_log.ledger_appended(entry.entry_id, evaluation_id, entry_hash)
        return entry

    def entries(self) -> List[AuditEntry]:
        return self._store.entries()

    def verify_chain(self) -> ChainVerification:
        verification = self._verify()
        if not verification.valid:
            audit_log.chain_verification_failed(verification.broken_at, verification.reason)
        return verification

    def export_json(self) -> Dict[str, Any]:
        verification = self._verify()
        bundle: Dict[str, Any] = {
            "exportedAt": format_timestamp(datetime.now(timezone.utc)),
            "chainValid": verification.valid,
        }
        if not verification.valid:
            bundle["brokenAt"] = verification.broken_at
            bundle["reason"] = verification.reason
        bundle["entries"] = [e.to_dict() for e in self._store.entries()]
        return bundle

    def export_json_str(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.export_json(), indent=indent, ensure_ascii=False)


def load_exported_entries(bundle: Dict[str, Any]) -> List[AuditEntry]:
    return [AuditEntry.model_validate(raw) for raw in bundle.get("entries", [])]


__all__ = [
    "AuditEntry",
    "AuditLedger",
    "AuditStore",
    "ChainVerification",
    "InMemoryAuditStore",
    "JsonlAuditStore",
    "compute_entry_hash",
    "load_exported_entries",
    "verify_entries",
]
