"""
storetrust.keys.crypto
----------------------
Key material helpers for the bundled key directory:

- X25519 key pairs: recipients decrypt with the private half
- Fingerprints: stable hex identifiers derived from the raw public key

Encryption of secrets themselves lives with the store backend, not here.
"""

from __future__ import annotations
from typing import Tuple
from cryptography.hazmat.primitives.asymmetric import x25519
import hashlib

FINGERPRINT_LEN = 40


def x25519_generate() -> Tuple[bytes, bytes]:
    sk = x25519.X25519PrivateKey.generate()
    pk = sk.public_key()
    return sk.private_bytes_raw(), pk.public_bytes_raw()

def x25519_public_from_private(priv_raw: bytes) -> bytes:
    sk = x25519.X25519PrivateKey.from_private_bytes(priv_raw)
    return sk.public_key().public_bytes_raw()

def x25519_validate_public(pub_raw: bytes) -> bytes:
    # Raises ValueError for anything that is not a 32 byte X25519 public key
    return x25519.X25519PublicKey.from_public_bytes(pub_raw).public_bytes_raw()

def compute_key_fingerprint(pub_raw: bytes) -> str:
    """
    Compute a stable fingerprint for an X25519 public key.

    - Input: raw 32 byte public key
    - Output: upper-case hex SHA256 digest truncated to 40 chars,
      the same width operators know from OpenPGP fingerprints
    """
    digest = hashlib.sha256(pub_raw).hexdigest().upper()
    return digest[:FINGERPRINT_LEN]
