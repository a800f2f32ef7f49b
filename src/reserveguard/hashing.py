"""
Canonical JSON and SHA-256 helpers.

Every digest in the project (input commitments, evidence hashes, ledger entry
hashes) goes through these two functions, so a verifier only needs to
reproduce sorted-key, compact-separator JSON and SHA-256 over its UTF-8 bytes.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any, Union

GENESIS_HASH = "0" * 64


def canonicalize(obj: Any) -> bytes:
    """Canonical JSON serialization (sorted keys, no whitespace)."""
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def sha256_hex(data: Union[bytes, str]) -> str:
    """SHA-256 hash as 64 lowercase hex characters."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return hashlib.sha256(data).hexdigest()


def content_hash(obj: Any) -> str:
    return sha256_hex(canonicalize(obj))


def is_sha256_hex(value: str) -> bool:
    if len(value) != 64:
        return False
    return all(ch in "0123456789abcdef" for ch in value)


__all__ = ["GENESIS_HASH", "canonicalize", "sha256_hex", "content_hash", "is_sha256_hex"]
