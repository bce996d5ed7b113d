from __future__ import annotations
from typing import List, Optional
import sqlite3, os

from storetrust.config import TrustConfig
from storetrust.errors import NodeNotFound, StorageFailure
from storetrust.keys.directory import KeyDirectory
from storetrust.logger import get_logger
from storetrust.store.tree import ROOT_ALIAS, BaseStoreNode, KeyFactory, StoreTree

log = get_logger("storetrust.store.sqlite")


class SQLiteStoreNode(BaseStoreNode):
    def __init__(self, tree: "SQLiteStoreTree", alias: str, keys: KeyDirectory):
        super().__init__(alias, keys, tree.config, tree.prompter)
        self.tree = tree

    def _load(self) -> List[str]:
        try:
            cur = self.tree.db.execute(
                "SELECT fingerprint FROM recipients WHERE alias=? ORDER BY position", (self.alias,)
            )
            return [row[0] for row in cur.fetchall()]
        except sqlite3.Error as e:
            raise StorageFailure(f"failed to read recipients of '{self.alias}': {e}") from e

    def _save(self, recipients: List[str]) -> None:
        try:
            # connection as context manager: one transaction, rolled back on error
            with self.tree.db:
                self.tree.db.execute("DELETE FROM recipients WHERE alias=?", (self.alias,))
                self.tree.db.executemany(
                    "INSERT INTO recipients(alias,position,fingerprint) VALUES(?,?,?)",
                    [(self.alias, i, fpr) for i, fpr in enumerate(recipients)],
                )
        except sqlite3.Error as e:
            log.error(f"[SQLITE] write failed alias={self.alias!r}: {e}")
            raise StorageFailure(f"failed to write recipients of '{self.alias}': {e}") from e


class SQLiteStoreTree(StoreTree):
    def __init__(self, path: str, config: TrustConfig, key_factory: KeyFactory, prompter=None):
        # If no directory, default to current working directory
        dir_path = os.path.dirname(path) or "."
        self.path = path
        self.config = config
        self.key_factory = key_factory
        self.prompter = prompter
        self._keys = {}
        try:
            os.makedirs(dir_path, exist_ok=True)
            self.db = sqlite3.connect(path, check_same_thread=False)
            self._init()
        except (sqlite3.Error, OSError) as e:
            log.error(f"[SQLITE] cannot open {path}: {e}")
            raise StorageFailure(f"cannot open store database {path}: {e}") from e

    def _init(self) -> None:
        c = self.db.cursor()
        c.execute("""CREATE TABLE IF NOT EXISTS mounts(
            alias TEXT PRIMARY KEY
        )""")
        c.execute("""CREATE TABLE IF NOT EXISTS recipients(
            alias TEXT NOT NULL,
            position INTEGER NOT NULL,
            fingerprint TEXT NOT NULL,
            PRIMARY KEY(alias, fingerprint)
        )""")
        c.execute("INSERT OR IGNORE INTO mounts(alias) VALUES(?)", (ROOT_ALIAS,))
        self.db.commit()

    def list_mount_points(self) -> List[str]:
        try:
            cur = self.db.execute("SELECT alias FROM mounts WHERE alias != ? ORDER BY alias", (ROOT_ALIAS,))
            return [row[0] for row in cur.fetchall()]
        except sqlite3.Error as e:
            raise StorageFailure(f"failed to list mount points: {e}") from e

    def add_mount(self, alias: str, keys: KeyDirectory) -> SQLiteStoreNode:
        try:
            with self.db:
                self.db.execute("INSERT OR IGNORE INTO mounts(alias) VALUES(?)", (alias,))
        except sqlite3.Error as e:
            raise StorageFailure(f"failed to mount '{alias}': {e}") from e
        self._keys[alias] = keys
        return self.get_node(alias)

    def _keys_for(self, alias: str) -> Optional[KeyDirectory]:
        if alias not in self._keys:
            self._keys[alias] = self.key_factory(alias)
        return self._keys[alias]

    def get_node(self, alias: str) -> SQLiteStoreNode:
        try:
            row = self.db.execute("SELECT 1 FROM mounts WHERE alias=?", (alias,)).fetchone()
        except sqlite3.Error as e:
            raise StorageFailure(f"failed to look up store '{alias}': {e}") from e
        keys = self._keys_for(alias) if row else None
        if keys is None:
            raise NodeNotFound(alias)
        return SQLiteStoreNode(self, alias, keys)

    def close(self):
        self.db.close()
