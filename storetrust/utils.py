"""
storetrust.utils
----------------
Small helpers for time, encoding, hashing and recipient list checksums.
Checksums must be deterministic so the same list always yields the same marker.
"""

from __future__ import annotations
import base64, hashlib
from datetime import datetime, timezone
from typing import Iterable


def utcnow() -> datetime:
    return datetime.now(timezone.utc)

def sha256(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()

def recipients_checksum(fingerprints: Iterable[str]) -> str:
    # order-insensitive: computed over the sorted set
    body = "\n".join(sorted(set(fingerprints)))
    return sha256(body.encode("utf-8"))

def normalize_fingerprint(value: str) -> str:
    value = value.strip()
    if value[:2].lower() == "0x":
        value = value[2:]
    return value.upper()

def b64e(b: bytes) -> str:
    return base64.b64encode(b).decode("ascii")

def b64d(s: str) -> bytes:
    return base64.b64decode(s.encode("ascii"))
