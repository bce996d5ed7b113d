# storetrust/keys/models.py
from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class KeyInfo:
    """
    Directory-level representation of one key identity.

    expires_at of None means the key never expires.
    """
    fingerprint: str
    name: str = ""
    email: str = ""
    expires_at: Optional[datetime] = None
    private: bool = False   # operator holds the private half
    pubkey_b64: str = ""

    @property
    def uid(self) -> str:
        if self.email:
            return f"{self.name} <{self.email}>".strip()
        return self.name
