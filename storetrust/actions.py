"""
storetrust.actions
------------------
Recipient commands as exposed to the command line.

Each command returns EXIT_OK or raises ExitError with a stable exit code
category; the CLI turns that into a message and a process exit code.
"""

from __future__ import annotations
from datetime import timedelta
from typing import Optional, Sequence, TextIO
import sys

from storetrust.config import TrustConfig
from storetrust.errors import (
    EXIT_ABORTED, EXIT_LIST, EXIT_OK, EXIT_RECIPIENTS, EXIT_UNKNOWN,
    ChecksumDrifted, KeyLookupError, KeysExpiring, NoKeyMutated, NodeNotFound, StorageFailure,
    StoreTrustError, UserAborted, exit_error,
)
from storetrust.expiration import audit_recipients
from storetrust.listing import all_recipients, recipients_tree
from storetrust.reconcile import TrustReconciler
from storetrust.store.tree import StoreTree
from storetrust.ui import Prompter
from storetrust.workflow import ADD, REMOVE, RecipientWorkflow


class Action:
    def __init__(self, store_tree: StoreTree, config: TrustConfig, prompter: Prompter,
                 stdout: Optional[TextIO] = None):
        self.store = store_tree
        self.cfg = config
        self.prompter = prompter
        self.stdout = stdout or sys.stdout

    def _print(self, msg: str = "") -> None:
        self.stdout.write(msg + "\n")

    def print_recipients(self) -> int:
        self._print("Hint: run 'sync' to import any missing public keys")
        try:
            tree = recipients_tree(self.store, include_names=True)
        except StoreTrustError as e:
            raise exit_error(EXIT_LIST, e, "failed to list recipients: %s", e)
        self._print(tree)
        return EXIT_OK

    def complete_recipients(self) -> None:
        try:
            recipients = all_recipients(self.store)
        except StoreTrustError as e:
            self._print(str(e))
            return
        for r in recipients:
            self._print(r)

    def print_expiration(self, store: str = "", warn_threshold: Optional[timedelta] = None) -> int:
        if warn_threshold is None:
            warn_threshold = timedelta(hours=self.cfg.default_warn_threshold_hours)
        try:
            node = self.store.get_node(store)
            audit_recipients(node, warn_threshold, stdout=self.stdout)
        except NodeNotFound as e:
            raise exit_error(EXIT_UNKNOWN, e, "no key directory for store '%s'", store)
        except KeysExpiring as e:
            raise exit_error(EXIT_UNKNOWN, e, "%s", e)
        except KeyLookupError as e:
            raise exit_error(EXIT_UNKNOWN, e, "failed to read key expiration: %s", e)
        except StorageFailure as e:
            raise exit_error(EXIT_RECIPIENTS, e, "failed to read recipients: %s", e)
        return EXIT_OK

    def _run_mutation(self, direction: str, store, force, ids) -> int:
        workflow = RecipientWorkflow(self.store, self.prompter, stdout=self.stdout)
        verb = "add" if direction == ADD else "remove"
        try:
            if direction == ADD:
                workflow.add_recipients(store=store, force=force, ids=ids)
            else:
                workflow.remove_recipients(store=store, force=force, ids=ids)
        except UserAborted as e:
            raise exit_error(EXIT_ABORTED, e, "user aborted")
        except NoKeyMutated as e:
            raise exit_error(EXIT_UNKNOWN, e, "%s", e)
        except NodeNotFound as e:
            raise exit_error(EXIT_RECIPIENTS, e, "%s", e)
        except (StorageFailure, ChecksumDrifted) as e:
            raise exit_error(EXIT_RECIPIENTS, e, "failed to %s recipient: %s", verb, e)
        return EXIT_OK

    def add_recipients(self, store: Optional[str] = None, force: bool = False,
                       ids: Sequence[str] = ()) -> int:
        return self._run_mutation(ADD, store, force, ids)

    def remove_recipients(self, store: Optional[str] = None, force: bool = False,
                          ids: Sequence[str] = ()) -> int:
        return self._run_mutation(REMOVE, store, force, ids)

    def update_recipients(self) -> int:
        reconciler = TrustReconciler(self.store, self.cfg, self.prompter, stdout=self.stdout)
        try:
            reconciler.reconcile()
        except StorageFailure as e:
            raise exit_error(EXIT_RECIPIENTS, e, "failed to update recipients: %s", e)
        except StoreTrustError as e:
            raise exit_error(EXIT_UNKNOWN, e, "failed to update recipients: %s", e)
        return EXIT_OK
