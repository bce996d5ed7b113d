"""
storetrust.store.tree
---------------------
Store tree interfaces and the node behaviour shared by all providers.

A node reads its recipient list from the backend, verifies it against the
checksum recorded in TrustConfig and records a fresh checksum after every
successful write. Providers only implement raw list persistence.
"""

from __future__ import annotations
from typing import Callable, Iterable, List, Optional

from storetrust.config import TrustConfig
from storetrust.errors import (
    ChecksumDrifted, RecipientAlreadyPresent, RecipientNotPresent, StorageFailure, UserAborted,
)
from storetrust.keys.directory import KeyDirectory
from storetrust.logger import get_logger
from storetrust.utils import recipients_checksum

log = get_logger("storetrust.store")

ROOT_ALIAS = ""
ROOT_LABEL = "<root>"

KeyFactory = Callable[[str], Optional[KeyDirectory]]


def by_path_len(aliases: Iterable[str]) -> List[str]:
    # Shorter paths first so a parent mount is handled before anything nested below it
    return sorted(aliases, key=lambda a: (len(a), a))


def display_alias(alias: str) -> str:
    return alias or ROOT_LABEL


class StoreNode:
    # Interface
    alias: str
    keys: KeyDirectory
    def list_recipients(self) -> List[str]: ...
    def get_recipients(self) -> List[str]: ...
    def set_recipients(self, recipients: List[str]) -> None: ...
    def add_recipient(self, fingerprint: str, no_confirm: bool = False) -> None: ...
    def remove_recipient(self, fingerprint: str, no_confirm: bool = False) -> None: ...
    def key_directory_identity_file(self) -> str: ...


class StoreTree:
    # Interface
    def list_mount_points(self) -> List[str]: ...
    def get_node(self, alias: str) -> StoreNode: ...
    def add_mount(self, alias: str, keys: KeyDirectory) -> StoreNode: ...


class BaseStoreNode(StoreNode):
    def __init__(self, alias: str, keys: KeyDirectory, config: TrustConfig, prompter=None):
        self.alias = alias
        self.keys = keys
        self.config = config
        self.prompter = prompter

    # provider hooks
    def _load(self) -> List[str]:
        raise NotImplementedError

    def _save(self, recipients: List[str]) -> None:
        raise NotImplementedError

    def key_directory_identity_file(self) -> str:
        return self.keys.identity_file()

    def list_recipients(self) -> List[str]:
        """Raw list, without checksum verification."""
        return self._load()

    def checksum(self, recipients: List[str]) -> str:
        return recipients_checksum(recipients)

    def get_recipients(self) -> List[str]:
        recipients = self._load()
        recorded = self.config.get_recipient_hash(self.alias, self.key_directory_identity_file())
        if recorded and recorded != self.checksum(recipients):
            log.warning(f"[STORE] checksum drift detected for {display_alias(self.alias)}")
            raise ChecksumDrifted(self.alias, recipients)
        return recipients

    def set_recipients(self, recipients: List[str]) -> None:
        recipients = list(dict.fromkeys(recipients))
        previous = self._load()
        self._save(recipients)
        try:
            self.config.set_recipient_hash(self.alias, self.key_directory_identity_file(), self.checksum(recipients))
        except StorageFailure:
            # list and checksum move together or not at all
            self._save(previous)
            raise
        log.info(f"[STORE] {display_alias(self.alias)} now trusts {len(recipients)} recipient(s)")

    def _confirm(self, prompt: str, no_confirm: bool) -> None:
        if no_confirm or self.prompter is None:
            return
        if not self.prompter.confirm(prompt):
            raise UserAborted()

    def add_recipient(self, fingerprint: str, no_confirm: bool = False) -> None:
        recipients = self.get_recipients()
        if fingerprint in recipients:
            raise RecipientAlreadyPresent(f"recipient {fingerprint} already in store {display_alias(self.alias)}")
        self._confirm(f"Add {fingerprint} to {display_alias(self.alias)}?", no_confirm)
        self.set_recipients(recipients + [fingerprint])

    def remove_recipient(self, fingerprint: str, no_confirm: bool = False) -> None:
        recipients = self.get_recipients()
        if fingerprint not in recipients:
            raise RecipientNotPresent(f"recipient {fingerprint} not in store {display_alias(self.alias)}")
        self._confirm(f"Remove {fingerprint} from {display_alias(self.alias)}?", no_confirm)
        self.set_recipients([r for r in recipients if r != fingerprint])
