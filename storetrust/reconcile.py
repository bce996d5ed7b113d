"""
storetrust.reconcile
--------------------
Re-establishes trust in recipient lists after checksum drift.

Nodes are visited by ascending alias length, root first. A node is offered
to the operator when its list drifted from the recorded checksum or when no
checksum was recorded yet. The whole list is confirmed at once; declining
leaves the node untouched so it is offered again on the next run.
"""

from __future__ import annotations
from typing import Optional, TextIO
import sys

from storetrust.config import TrustConfig
from storetrust.errors import ChecksumDrifted, NodeNotFound, UserAborted
from storetrust.logger import get_logger
from storetrust.store.tree import ROOT_ALIAS, StoreTree, by_path_len, display_alias
from storetrust.ui import Prompter

log = get_logger("storetrust.reconcile")


class TrustReconciler:
    def __init__(self, store_tree: StoreTree, config: TrustConfig, prompter: Prompter,
                 stdout: Optional[TextIO] = None):
        self.tree = store_tree
        self.config = config
        self.prompter = prompter
        self.stdout = stdout or sys.stdout

    def _print(self, msg: str = "") -> None:
        self.stdout.write(msg + "\n")

    def aliases(self):
        mounts = [a for a in self.tree.list_mount_points() if a != ROOT_ALIAS]
        return by_path_len(mounts + [ROOT_ALIAS])

    def reconcile(self) -> int:
        changed = 0
        for alias in self.aliases():
            try:
                node = self.tree.get_node(alias)
            except NodeNotFound:
                log.debug(f"[RECONCILE] skipping unresolved store {alias!r}")
                continue

            try:
                recipients = node.get_recipients()
            except ChecksumDrifted as e:
                recipients = e.recipients if e.recipients is not None else node.list_recipients()
            else:
                if self.config.get_recipient_hash(alias, node.key_directory_identity_file()):
                    continue

            label = display_alias(alias)
            self._print(f"Please confirm Recipients for {label}:")
            for r in recipients:
                self._print(f"- {node.keys.format_key(r)}")

            try:
                trusted = self.prompter.confirm(f"Do you trust these recipients for {label}?")
            except UserAborted:
                log.info(f"[RECONCILE] prompt aborted for {label}")
                trusted = False
            if not trusted:
                log.info(f"[RECONCILE] recipients of {label} not confirmed")
                continue

            node.set_recipients(recipients)
            self._print()
            changed += 1

        if changed > 0:
            self._print(f"Updated {changed} stores")
        else:
            self._print("Nothing to do")
        return changed
