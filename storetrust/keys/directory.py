from __future__ import annotations
from datetime import datetime, timezone
from typing import Dict, List, Optional, Union
import json, os

from storetrust.errors import KeyLookupError
from storetrust.keys.crypto import (
    compute_key_fingerprint, x25519_generate, x25519_public_from_private, x25519_validate_public,
)
from storetrust.keys.models import KeyInfo
from storetrust.logger import get_logger
from storetrust.utils import b64d, b64e, normalize_fingerprint

log = get_logger("storetrust.keys")

KeyRef = Union[KeyInfo, str]


class KeyDirectory:
    """Interface for key lookup. Result order of the find_* calls is authoritative."""
    def find_public_keys(self, query: Optional[str] = None) -> List[KeyInfo]: ...
    def find_private_keys(self, query: str) -> List[KeyInfo]: ...
    def fingerprint(self, key: KeyRef) -> str: ...
    def format_key(self, key: KeyRef) -> str: ...
    def expiration_date(self, key: KeyRef) -> Optional[datetime]: ...
    def display_name(self, key: KeyRef) -> str: ...
    def identity_file(self) -> str: ...


class LocalKeyDirectory(KeyDirectory):
    """In-memory keyring of X25519 keys, kept in insertion order."""

    def __init__(self, identity_file: str = ".recipients"):
        self._identity_file = identity_file
        self.keys: Dict[str, KeyInfo] = {}
        self._secrets: Dict[str, bytes] = {}

    # --- keyring management ---

    def generate_key(self, name: str, email: str = "", expires_at: Optional[datetime] = None) -> KeyInfo:
        priv, pub = x25519_generate()
        info = self._insert(pub, name, email, expires_at)
        self._secrets[info.fingerprint] = priv
        info.private = True
        return info

    def import_public_key(self, pubkey_b64: str, name: str, email: str = "",
                          expires_at: Optional[datetime] = None) -> KeyInfo:
        try:
            pub = x25519_validate_public(b64d(pubkey_b64))
        except ValueError as e:
            raise KeyLookupError(f"invalid public key for '{name}': {e}") from e
        return self._insert(pub, name, email, expires_at)

    def import_private_key(self, priv_raw: bytes, name: str, email: str = "",
                           expires_at: Optional[datetime] = None) -> KeyInfo:
        info = self._insert(x25519_public_from_private(priv_raw), name, email, expires_at)
        self._secrets[info.fingerprint] = priv_raw
        info.private = True
        return info

    def _insert(self, pub: bytes, name: str, email: str, expires_at: Optional[datetime]) -> KeyInfo:
        fpr = compute_key_fingerprint(pub)
        if expires_at is not None and expires_at.tzinfo is None:
            # naive timestamps are taken as UTC
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        info = KeyInfo(fingerprint=fpr, name=name, email=email, expires_at=expires_at,
                       pubkey_b64=b64e(pub))
        self.keys[fpr] = info
        log.debug(f"[KEYS] imported {fpr} ({info.uid})")
        return info

    # --- lookups ---

    @staticmethod
    def _matches(info: KeyInfo, query: str) -> bool:
        q = query.strip()
        if not q:
            return True
        fpr = normalize_fingerprint(q)
        if len(fpr) >= 8 and info.fingerprint.endswith(fpr):
            return True
        q = q.lower()
        if info.email and q.strip("<>") == info.email.lower():
            return True
        return q in info.uid.lower()

    def find_public_keys(self, query: Optional[str] = None) -> List[KeyInfo]:
        if query is None:
            return list(self.keys.values())
        return [k for k in self.keys.values() if self._matches(k, query)]

    def find_private_keys(self, query: str) -> List[KeyInfo]:
        return [k for k in self.find_public_keys(query) if k.fingerprint in self._secrets]

    def _lookup(self, key: KeyRef) -> KeyInfo:
        if isinstance(key, KeyInfo):
            return key
        info = self.keys.get(normalize_fingerprint(key))
        if info is None:
            raise KeyLookupError(f"key '{key}' not found")
        return info

    def fingerprint(self, key: KeyRef) -> str:
        if isinstance(key, KeyInfo):
            return key.fingerprint
        return normalize_fingerprint(key)

    def format_key(self, key: KeyRef) -> str:
        try:
            info = self._lookup(key)
        except KeyLookupError:
            return self.fingerprint(key)
        return f"0x{info.fingerprint} - {info.uid}"

    def expiration_date(self, key: KeyRef) -> Optional[datetime]:
        return self._lookup(key).expires_at

    def display_name(self, key: KeyRef) -> str:
        try:
            return self._lookup(key).name
        except KeyLookupError:
            return ""

    def identity_file(self) -> str:
        return self._identity_file


def load_keyring(path: Optional[str], identity_file: str = ".recipients") -> LocalKeyDirectory:
    """
    Load a keyring from a JSON file:

        {"keys": [{"name": "...", "email": "...", "pubkey_b64": "...",
                   "secret_b64": "...", "expires_at": "2027-01-01T00:00:00+00:00"}]}

    secret_b64 is optional and marks the operator's own keys.
    A missing file yields an empty keyring.
    """
    keys = LocalKeyDirectory(identity_file=identity_file)
    if not path or not os.path.exists(path):
        return keys
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f) or {}
    for entry in data.get("keys", []):
        expires_at = entry.get("expires_at")
        expires_at = datetime.fromisoformat(expires_at) if expires_at else None
        if entry.get("secret_b64"):
            keys.import_private_key(b64d(entry["secret_b64"]), entry.get("name", ""),
                                    entry.get("email", ""), expires_at)
        else:
            keys.import_public_key(entry["pubkey_b64"], entry.get("name", ""),
                                   entry.get("email", ""), expires_at)
    return keys
