import json

import pytest

from storetrust.config import DEFAULT_WARN_THRESHOLD_HOURS, load_config


def test_defaults(monkeypatch):
    for var in ("STORETRUST_CONFIG", "STORETRUST_STORAGE_PROVIDER", "STORETRUST_DB_PATH",
                "STORETRUST_KEYRING", "STORETRUST_WARN_THRESHOLD_HOURS"):
        monkeypatch.delenv(var, raising=False)
    cfg = load_config()
    assert cfg.storage_provider == "sqlite"
    assert cfg.default_warn_threshold_hours == DEFAULT_WARN_THRESHOLD_HOURS
    assert cfg.get_recipient_hash("", ".recipients") == ""


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("STORETRUST_STORAGE_PROVIDER", "memory")
    monkeypatch.setenv("STORETRUST_WARN_THRESHOLD_HOURS", "12")
    cfg = load_config()
    assert cfg.storage_provider == "memory"
    assert cfg.default_warn_threshold_hours == 12


def test_unknown_provider():
    with pytest.raises(ValueError):
        load_config({"provider": "etcd"})


def test_recipient_hashes_are_saved(tmp_path, monkeypatch):
    monkeypatch.delenv("STORETRUST_STORAGE_PROVIDER", raising=False)
    path = str(tmp_path / "cfg" / "config.json")
    cfg = load_config({"path": path})
    cfg.set_recipient_hash("teamA", ".recipients", "abc")

    with open(path) as f:
        assert json.load(f)["recipient_hashes"] == {"teamA": {".recipients": "abc"}}
    assert load_config({"path": path}).get_recipient_hash("teamA", ".recipients") == "abc"


def test_zero_threshold_is_kept(monkeypatch):
    monkeypatch.delenv("STORETRUST_WARN_THRESHOLD_HOURS", raising=False)
    assert load_config({"warn_threshold_hours": 0}).default_warn_threshold_hours == 0
    monkeypatch.setenv("STORETRUST_WARN_THRESHOLD_HOURS", "0")
    assert load_config().default_warn_threshold_hours == 0


def test_unwritable_config_leaves_hashes_untouched(tmp_path):
    from storetrust.errors import StorageFailure

    blocker = tmp_path / "blocker"
    blocker.write_text("")
    cfg = load_config({"path": str(blocker / "config.json"), "provider": "memory"})
    with pytest.raises(StorageFailure):
        cfg.set_recipient_hash("", ".recipients", "abc")
    assert cfg.get_recipient_hash("", ".recipients") == ""
