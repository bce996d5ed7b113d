import json

import pytest

from storetrust.errors import KeyLookupError
from storetrust.keys import LocalKeyDirectory, load_keyring
from storetrust.keys.crypto import compute_key_fingerprint, x25519_generate, x25519_public_from_private
from storetrust.utils import b64e, recipients_checksum


def test_fingerprint_is_stable_and_openpgp_width():
    priv, pub = x25519_generate()
    assert x25519_public_from_private(priv) == pub
    fpr = compute_key_fingerprint(pub)
    assert fpr == compute_key_fingerprint(pub)
    assert len(fpr) == 40
    assert fpr == fpr.upper()


def test_lookup_by_email_name_and_short_id(keys):
    alice = keys.generate_key("Alice Liddell", "alice@example.com")
    keys.generate_key("Bob", "bob@example.com")

    assert keys.find_public_keys("alice@example.com") == [alice]
    assert keys.find_public_keys("<ALICE@example.com>") == [alice]
    assert keys.find_public_keys("liddell") == [alice]
    assert keys.find_public_keys(alice.fingerprint[-16:]) == [alice]
    assert keys.find_public_keys("0x" + alice.fingerprint.lower()) == [alice]
    assert keys.find_public_keys("carol@example.com") == []
    assert len(keys.find_public_keys()) == 2


def test_private_keys_only_for_held_secrets(keys):
    me = keys.generate_key("Me", "me@example.com")
    other = LocalKeyDirectory().generate_key("Other", "other@example.com")
    keys.import_public_key(other.pubkey_b64, "Other copy")

    assert keys.find_private_keys("me@example.com") == [me]
    assert keys.find_private_keys("other copy") == []


def test_format_and_names(keys):
    k = keys.generate_key("Alice", "alice@example.com")
    assert keys.format_key(k.fingerprint) == f"0x{k.fingerprint} - Alice <alice@example.com>"
    assert keys.format_key("unknown") == "UNKNOWN"
    assert keys.display_name(k.fingerprint) == "Alice"
    assert keys.display_name("ABCDEF") == ""
    with pytest.raises(KeyLookupError):
        keys.expiration_date("ABCDEF")


def test_import_rejects_garbage(keys):
    with pytest.raises(KeyLookupError):
        keys.import_public_key(b64e(b"short"), "Broken")


def test_load_keyring_from_file(tmp_path):
    source = LocalKeyDirectory()
    pub_only = source.generate_key("Pub", "pub@example.com")
    priv, _ = x25519_generate()
    path = tmp_path / "keyring.json"
    path.write_text(json.dumps({"keys": [
        {"name": "Pub", "email": "pub@example.com", "pubkey_b64": pub_only.pubkey_b64,
         "expires_at": "2030-01-01T00:00:00"},
        {"name": "Me", "secret_b64": b64e(priv)},
    ]}))

    keys = load_keyring(str(path))

    found = keys.find_public_keys()
    assert [k.name for k in found] == ["Pub", "Me"]
    assert found[0].fingerprint == pub_only.fingerprint
    assert found[0].expires_at.tzinfo is not None
    assert [k.name for k in keys.find_private_keys("me")] == ["Me"]


def test_load_keyring_missing_file_is_empty(tmp_path):
    assert load_keyring(str(tmp_path / "nope.json")).find_public_keys() == []


def test_checksum_ignores_order():
    assert recipients_checksum(["A", "B"]) == recipients_checksum(["B", "A"])
    assert recipients_checksum(["A"]) != recipients_checksum(["A", "B"])


def test_naive_expiration_is_taken_as_utc(tree, keys):
    import io
    from datetime import datetime, timedelta, timezone
    from storetrust.errors import KeysExpiring
    from storetrust.expiration import audit_recipients

    naive = datetime.now(timezone.utc).replace(tzinfo=None) - timedelta(days=1)
    k = keys.generate_key("Old", expires_at=naive)
    assert k.expires_at.tzinfo is timezone.utc
    tree.get_node("").set_recipients([k.fingerprint])

    out = io.StringIO()
    with pytest.raises(KeysExpiring):
        audit_recipients(tree.get_node(""), timedelta(days=1), stdout=out)
    assert "expired at" in out.getvalue()
