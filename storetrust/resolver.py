from __future__ import annotations

from storetrust.errors import KeyLookupError, NoMatchingKey
from storetrust.keys.directory import KeyDirectory
from storetrust.logger import get_logger

log = get_logger("storetrust.resolver")


def resolve_recipient(query: str, keys: KeyDirectory, allow_unverified: bool = False) -> str:
    """
    Canonicalize an operator supplied key reference (alias, email, short id)
    to a fingerprint.

    The first key returned by the directory wins; there is no further ranking.
    With allow_unverified the reference itself is trusted when nothing matches.
    """
    try:
        found = keys.find_public_keys(query)
    except KeyLookupError as e:
        log.warning(f"[RESOLVE] failed to list public key '{query}': {e}")
        if not allow_unverified:
            raise NoMatchingKey(query) from e
        found = []

    if not found:
        if not allow_unverified:
            raise NoMatchingKey(query)
        log.warning(f"[RESOLVE] no key for '{query}', using it unverified")
        return query.strip()

    if len(found) > 1:
        log.info(f"[RESOLVE] '{query}' matched {len(found)} keys, using the first")
    return keys.fingerprint(found[0])
