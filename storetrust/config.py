"""
storetrust.config
-----------------
Runtime configuration, including the recipient checksum mapping.

Checksums are held per (alias, identity file) and are owned by a single
TrustConfig instance that is handed to every store node and the reconciler.
When a config file path is set, every checksum update is written back to it.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Optional
import json, os

from storetrust.errors import StorageFailure
from storetrust.logger import get_logger

log = get_logger("storetrust.config")

DEFAULT_WARN_THRESHOLD_HOURS = 7 * 24


@dataclass
class TrustConfig:
    storage_provider: str = "sqlite"
    sqlite_path: str = "db/storetrust.db"
    keyring_path: Optional[str] = None
    default_warn_threshold_hours: int = DEFAULT_WARN_THRESHOLD_HOURS
    recipient_hashes: Dict[str, Dict[str, str]] = field(default_factory=dict)
    path: Optional[str] = None

    def get_recipient_hash(self, alias: str, id_file: str) -> str:
        return self.recipient_hashes.get(alias, {}).get(id_file, "")

    def set_recipient_hash(self, alias: str, id_file: str, value: str) -> None:
        hashes = {k: dict(v) for k, v in self.recipient_hashes.items()}
        hashes.setdefault(alias, {})[id_file] = value
        # file first: the in-memory mapping only moves once the checksum is on disk
        if self.path:
            self._write(hashes)
        self.recipient_hashes = hashes

    def to_dict(self, recipient_hashes=None) -> dict:
        return {
            "storage_provider": self.storage_provider,
            "sqlite_path": self.sqlite_path,
            "keyring_path": self.keyring_path,
            "default_warn_threshold_hours": self.default_warn_threshold_hours,
            "recipient_hashes": self.recipient_hashes if recipient_hashes is None else recipient_hashes,
        }

    def save(self) -> None:
        if not self.path:
            raise ValueError("config has no path to save to")
        self._write(self.recipient_hashes)

    def _write(self, recipient_hashes) -> None:
        tmp = self.path + ".tmp"
        try:
            os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(self.to_dict(recipient_hashes), f, indent=2, sort_keys=True)
            os.replace(tmp, self.path)
        except OSError as e:
            log.error(f"[CONFIG] failed to write {self.path}: {e}")
            raise StorageFailure(f"failed to write config {self.path}: {e}") from e
        log.debug(f"[CONFIG] saved {self.path}")


def _read_file(path: str) -> dict:
    if not os.path.exists(path):
        return {}
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"config file {path} must contain a JSON object")
    return data


def _first_set(*values):
    return next(v for v in values if v is not None and v != "")


def load_config(config: dict | None = None) -> TrustConfig:
    """
    Build the runtime configuration.

    Precedence: explicit dict > environment > config file > defaults.
    """
    config = config or {}
    path = config.get("path") or os.getenv("STORETRUST_CONFIG")
    data = _read_file(path) if path else {}

    provider = (config.get("provider")
                or os.getenv("STORETRUST_STORAGE_PROVIDER")
                or data.get("storage_provider")
                or "sqlite")
    if provider not in ("sqlite", "memory"):
        raise ValueError(f"Unknown storage provider: {provider}")

    sqlite_path = (config.get("sqlite_path")
                   or os.getenv("STORETRUST_DB_PATH")
                   or data.get("sqlite_path")
                   or "db/storetrust.db")

    keyring_path = (config.get("keyring_path")
                    or os.getenv("STORETRUST_KEYRING")
                    or data.get("keyring_path"))

    # 0 is a valid threshold, only missing values fall through
    threshold = _first_set(config.get("warn_threshold_hours"),
                           os.getenv("STORETRUST_WARN_THRESHOLD_HOURS"),
                           data.get("default_warn_threshold_hours"),
                           DEFAULT_WARN_THRESHOLD_HOURS)

    hashes = data.get("recipient_hashes") or {}
    hashes.update(config.get("recipient_hashes") or {})

    return TrustConfig(
        storage_provider=provider,
        sqlite_path=sqlite_path,
        keyring_path=keyring_path,
        default_warn_threshold_hours=int(threshold),
        recipient_hashes={k: dict(v) for k, v in hashes.items()},
        path=path,
    )
