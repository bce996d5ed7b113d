import io
from datetime import datetime, timedelta, timezone

import pytest

from storetrust.errors import KeyLookupError, KeysExpiring
from storetrust.expiration import audit_recipients, evaluate_expiration

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)
WEEK = timedelta(days=7)


@pytest.mark.parametrize("threshold", [timedelta(0), timedelta(hours=1), WEEK, timedelta(days=3650)])
def test_never_expiring_key_never_warns(threshold):
    assert evaluate_expiration(None, threshold, NOW) == ("", False)


@pytest.mark.parametrize("expiration", [NOW, NOW - timedelta(seconds=1), NOW - timedelta(days=400)])
def test_expired_key_warns(expiration):
    msg, warn = evaluate_expiration(expiration, WEEK, NOW)
    assert warn
    assert msg.startswith("expired at ")
    assert str(expiration) in msg


def test_expiring_key_rounds_hours_down():
    expiration = NOW + timedelta(hours=47, minutes=59)
    msg, warn = evaluate_expiration(expiration, WEEK, NOW)
    assert warn
    assert msg == f"expiring in ~47h at {expiration}"


def test_expiring_within_the_hour():
    msg, warn = evaluate_expiration(NOW + timedelta(minutes=30), WEEK, NOW)
    assert warn
    assert msg.startswith("expiring in ~0h at ")


@pytest.mark.parametrize("offset", [WEEK, WEEK + timedelta(seconds=1), timedelta(days=365)])
def test_key_beyond_threshold_does_not_warn(offset):
    assert evaluate_expiration(NOW + offset, WEEK, NOW) == ("", False)


def test_audit_prints_warned_keys_and_fails(tree, keys):
    fine = keys.generate_key("Fine", "fine@example.com")
    old = keys.generate_key("Old", "old@example.com", expires_at=NOW - timedelta(days=1))
    soon = keys.generate_key("Soon", "soon@example.com", expires_at=NOW + timedelta(hours=5))
    node = tree.get_node("")
    node.set_recipients([fine.fingerprint, old.fingerprint, soon.fingerprint])

    out = io.StringIO()
    with pytest.raises(KeysExpiring) as exc:
        audit_recipients(node, WEEK, now=NOW, stdout=out)

    assert exc.value.count == 2
    lines = out.getvalue().splitlines()
    assert lines[0].startswith(f"0x{old.fingerprint} (Old) expired at")
    assert lines[1].startswith(f"0x{soon.fingerprint} (Soon) expiring in ~5h")


def test_audit_passes_when_nothing_expires(tree, keys):
    k = keys.generate_key("Fine")
    node = tree.get_node("")
    node.set_recipients([k.fingerprint])
    out = io.StringIO()
    audit_recipients(node, WEEK, now=NOW, stdout=out)
    assert out.getvalue() == ""


def test_audit_aborts_on_unknown_key(tree, keys):
    expired = keys.generate_key("Old", expires_at=NOW - timedelta(days=1))
    node = tree.get_node("")
    node.set_recipients(["DEADBEEF" * 5, expired.fingerprint])
    out = io.StringIO()
    with pytest.raises(KeyLookupError):
        audit_recipients(node, WEEK, now=NOW, stdout=out)
    # the lookup failure stops the audit before later keys are looked at
    assert out.getvalue() == ""
