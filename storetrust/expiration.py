"""
storetrust.expiration
---------------------
Key expiration checks for the recipients of a store node.
"""

from __future__ import annotations
from datetime import datetime, timedelta
from typing import Optional, TextIO, Tuple
import sys

from storetrust.errors import KeysExpiring
from storetrust.logger import get_logger
from storetrust.utils import utcnow

log = get_logger("storetrust.expiration")


def evaluate_expiration(expiration: Optional[datetime], warn_threshold: timedelta,
                        now: datetime) -> Tuple[str, bool]:
    # some keys are set to be valid forever
    if expiration is None:
        return "", False
    if now >= expiration:
        return f"expired at {expiration}", True
    if expiration < now + warn_threshold:
        hours = (expiration - now) // timedelta(hours=1)
        return f"expiring in ~{hours}h at {expiration}", True
    return "", False


def audit_recipients(node, warn_threshold: timedelta, now: Optional[datetime] = None,
                     stdout: Optional[TextIO] = None) -> None:
    """
    Print one line per expired or expiring recipient key of ``node``.

    Raises KeysExpiring when at least one key warned. A key whose expiration
    cannot be read aborts the audit (KeyLookupError propagates).
    """
    stdout = stdout or sys.stdout
    now = now or utcnow()
    keys = node.keys
    warned = []
    for recipient in node.list_recipients():
        expiration = keys.expiration_date(recipient)
        notice, warn = evaluate_expiration(expiration, warn_threshold, now)
        if not warn:
            continue
        line = f"0x{recipient} ({keys.display_name(recipient)}) {notice}"
        stdout.write(line + "\n")
        warned.append(recipient)
    if warned:
        log.warning(f"[EXPIRY] {len(warned)} key(s) expired/expiring")
        raise KeysExpiring(len(warned))
