"""
storetrust.workflow
-------------------
Confirm-then-commit add and remove of store recipients.

Every candidate is handled on its own: a candidate that does not resolve,
is declined or whose prompt is aborted is skipped and the batch goes on.
Storage failures end the batch at once. A batch without a single commit
fails with NoKeyMutated.
"""

from __future__ import annotations
from typing import List, Optional, Sequence, TextIO
import sys

from storetrust.errors import KeyLookupError, NoKeyMutated, NoMatchingKey, UserAborted
from storetrust.logger import get_logger
from storetrust.resolver import resolve_recipient
from storetrust.store.tree import ROOT_ALIAS, StoreNode, StoreTree, by_path_len, display_alias
from storetrust.ui import Prompter, SelectAction

log = get_logger("storetrust.workflow")

ADD = "added"
REMOVE = "removed"

REMOVAL_WARNING = """


@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@
@   WARNING: REMOVING A USER WILL NOT REVOKE ACCESS FROM OLD REVISIONS!  @
@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@@
THE USER %s WILL STILL BE ABLE TO ACCESS ANY OLD COPY OF THE STORE AND
ANY OLD REVISION THEY HAD ACCESS TO.

ANY CREDENTIALS THIS USER HAD ACCESS TO NEED TO BE CONSIDERED COMPROMISED
AND SHOULD BE REVOKED.

This feature is only meant for revoking access to any added or changed
credentials.

"""


class RecipientWorkflow:
    def __init__(self, store_tree: StoreTree, prompter: Prompter, stdout: Optional[TextIO] = None):
        self.tree = store_tree
        self.prompter = prompter
        self.stdout = stdout or sys.stdout

    def _print(self, msg: str = "") -> None:
        self.stdout.write(msg + "\n")

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------
    def select_store(self) -> str:
        aliases = [ROOT_ALIAS] + [a for a in by_path_len(self.tree.list_mount_points()) if a != ROOT_ALIAS]
        if len(aliases) == 1:
            return ROOT_ALIAS
        act, sel = self.prompter.select_one(
            "Select store -",
            "Pick the store to change, abort to quit",
            [display_alias(a) for a in aliases],
        )
        if act == SelectAction.ABORT:
            raise UserAborted()
        return aliases[sel]

    def select_for_add(self, node: StoreNode) -> List[str]:
        keys = node.keys
        try:
            found = keys.find_public_keys()
        except KeyLookupError as e:
            log.warning(f"[WORKFLOW] failed to list public keys: {e}")
            found = []
        if not found:
            return []
        act, sel = self.prompter.select_one(
            "Add Recipient -",
            "Pick the recipient to add, abort to quit",
            [keys.format_key(k) for k in found],
        )
        if act == SelectAction.ABORT:
            raise UserAborted()
        return [keys.fingerprint(found[sel])]

    def select_for_removal(self, node: StoreNode) -> List[str]:
        ids = node.list_recipients()
        if not ids:
            return []
        act, sel = self.prompter.select_one(
            "Remove recipient -",
            "Pick the recipient to remove, abort to quit",
            [node.keys.format_key(i) for i in ids],
        )
        if act == SelectAction.ABORT:
            raise UserAborted()
        return [ids[sel]]

    # ------------------------------------------------------------------
    # Batch
    # ------------------------------------------------------------------
    def add_recipients(self, store: Optional[str] = None, force: bool = False,
                       ids: Sequence[str] = ()) -> int:
        return self._mutate(ADD, store, force, ids)

    def remove_recipients(self, store: Optional[str] = None, force: bool = False,
                          ids: Sequence[str] = ()) -> int:
        return self._mutate(REMOVE, store, force, ids)

    def _mutate(self, direction: str, store: Optional[str], force: bool, ids: Sequence[str]) -> int:
        if store is None:
            store = self.select_store()
        node = self.tree.get_node(store)

        candidates = list(ids)
        if not candidates:
            if direction == ADD:
                candidates = self.select_for_add(node)
            else:
                candidates = self.select_for_removal(node)

        done = 0
        for candidate in candidates:
            try:
                committed = self._mutate_one(direction, node, candidate, force)
            except UserAborted:
                log.info(f"[WORKFLOW] prompt aborted for '{candidate}'")
                continue
            if committed:
                done += 1

        if done < 1:
            raise NoKeyMutated(direction)

        verb = "Added" if direction == ADD else "Removed"
        self._print(f"\n{verb} {done} recipients")
        self._print("You need to run 'sync' to push these changes")
        return done

    def _is_own_key(self, node: StoreNode, candidate: str) -> bool:
        try:
            return len(node.keys.find_private_keys(candidate)) > 0
        except KeyLookupError as e:
            log.debug(f"[WORKFLOW] private key lookup failed for '{candidate}': {e}")
            return False

    def _warn_unmatched(self, candidate: str) -> None:
        log.warning(f"[WORKFLOW] no matching valid key for '{candidate}'")
        self._print(f"Warning: No matching valid key found for '{candidate}'.")
        self._print("If the key is not in the key directory yet, import it first.")
        self._print("To trust it without verification, re-run with --force.")

    def _mutate_one(self, direction: str, node: StoreNode, candidate: str, force: bool) -> bool:
        label = display_alias(node.alias)

        if direction == REMOVE and self._is_own_key(node, candidate):
            if not self.prompter.confirm(f"Do you want to remove yourself ({candidate}) from the recipients?"):
                log.debug(f"[WORKFLOW] self removal declined for '{candidate}'")
                return False

        try:
            fpr = resolve_recipient(candidate, node.keys, allow_unverified=force)
        except NoMatchingKey:
            self._warn_unmatched(candidate)
            return False

        formatted = node.keys.format_key(fpr)
        if direction == ADD:
            prompt = f"Do you want to add '{formatted}' as a recipient to the store '{label}'?"
        else:
            prompt = f"Do you want to remove '{formatted}' from the recipients of the store '{label}'?"
        if not self.prompter.confirm(prompt):
            log.debug(f"[WORKFLOW] '{candidate}' declined")
            return False

        # already confirmed above, the storage layer must not ask again
        if direction == ADD:
            node.add_recipient(fpr, no_confirm=True)
        else:
            node.remove_recipient(fpr, no_confirm=True)
            self.stdout.write(REMOVAL_WARNING % candidate)
        log.info(f"[WORKFLOW] {direction} {fpr} store={label}")
        return True
