import pytest

from storetrust.errors import KeyLookupError, NoMatchingKey
from storetrust.keys import KeyInfo
from storetrust.resolver import resolve_recipient


class BrokenDirectory:
    def find_public_keys(self, query=None):
        raise KeyLookupError("keyring unavailable")

    def fingerprint(self, key):
        return key.fingerprint


def test_first_match_wins(keys):
    first = keys.generate_key("Team Lead", "lead@example.com")
    keys.generate_key("Team Member", "member@example.com")
    assert resolve_recipient("team", keys) == first.fingerprint


def test_alias_resolves_to_fingerprint(keys):
    k = keys.generate_key("Alice", "alice@example.com")
    assert resolve_recipient("alice@example.com", keys) == k.fingerprint


def test_no_match_is_an_error(keys):
    with pytest.raises(NoMatchingKey) as exc:
        resolve_recipient("alice@example.com", keys)
    assert exc.value.query == "alice@example.com"


def test_no_match_unverified_trusts_input(keys):
    assert resolve_recipient(" 0xCAFEBABE ", keys, allow_unverified=True) == "0xCAFEBABE"


def test_lookup_failure(caplog):
    with pytest.raises(NoMatchingKey):
        resolve_recipient("alice", BrokenDirectory())
    assert "failed to list public key" in caplog.text
    assert resolve_recipient("alice", BrokenDirectory(), allow_unverified=True) == "alice"


def test_resolver_does_not_rank_matches():
    class Ordered:
        def find_public_keys(self, query=None):
            return [KeyInfo("BBBB", "untrusted"), KeyInfo("AAAA", "ultimate")]

        def fingerprint(self, key):
            return key.fingerprint

    assert resolve_recipient("x", Ordered()) == "BBBB"
