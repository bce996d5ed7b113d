from __future__ import annotations
from typing import List, Optional

from storetrust.logger import get_logger

log = get_logger("storetrust.errors")

# Stable exit code categories surfaced by the CLI
EXIT_OK = 0
EXIT_UNKNOWN = 1
EXIT_ABORTED = 2
EXIT_LIST = 10
EXIT_RECIPIENTS = 17


class StoreTrustError(Exception):
    """Base class for storetrust errors."""


class UserAborted(StoreTrustError):
    """Raised when the operator declines or escapes a prompt."""

    def __init__(self, message: str = "user aborted"):
        super().__init__(message)


class KeyLookupError(StoreTrustError):
    """Raised when the key directory cannot answer a query."""


class NoMatchingKey(StoreTrustError):
    """Raised when a candidate recipient matches no known key."""

    def __init__(self, query: str):
        super().__init__(f"no matching valid key found for '{query}'")
        self.query = query


class NoKeyMutated(StoreTrustError):
    """Raised when an add/remove batch finished without a single commit."""

    def __init__(self, direction: str = "added"):
        super().__init__(f"no key {direction}")
        self.direction = direction


class ChecksumDrifted(StoreTrustError):
    """Raised when a recipient list no longer matches its recorded checksum.

    The freshly read list is attached when the raising node has it; None means
    the caller has to read the list itself.
    """

    def __init__(self, alias: str, recipients: Optional[List[str]] = None):
        super().__init__(f"recipient checksum changed for store '{alias or '<root>'}'")
        self.alias = alias
        self.recipients = list(recipients) if recipients is not None else None


class StorageFailure(StoreTrustError):
    """Raised when persisting or reading recipients fails for reasons other than drift."""


class RecipientAlreadyPresent(StorageFailure):
    """Raised when adding a recipient that is already trusted."""


class RecipientNotPresent(StorageFailure):
    """Raised when removing a recipient that is not trusted."""


class NodeNotFound(StoreTrustError):
    """Raised when a store alias does not resolve to a mounted node."""

    def __init__(self, alias: str):
        super().__init__(f"store '{alias}' is not mounted")
        self.alias = alias


class KeysExpiring(StoreTrustError):
    """Aggregate failure of the expiration audit."""

    def __init__(self, count: int):
        super().__init__("key(s) expired/expiring")
        self.count = count


class ExitError(StoreTrustError):
    """User-visible failure carrying a stable exit code category."""

    def __init__(self, code: int, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.cause = cause


def exit_error(code: int, cause: Optional[BaseException], fmt: str, *args) -> ExitError:
    msg = fmt % args if args else fmt
    if code == EXIT_ABORTED:
        log.info(f"aborted: {msg}")
    else:
        log.error(f"exit={code} {msg}")
    return ExitError(code, msg, cause)
