from typing import Dict, List, Optional
from storetrust.config import TrustConfig
from storetrust.errors import NodeNotFound
from storetrust.keys.directory import KeyDirectory
from storetrust.store.tree import ROOT_ALIAS, BaseStoreNode, StoreTree


class InMemoryStoreNode(BaseStoreNode):
    def __init__(self, tree: "InMemoryStoreTree", alias: str, keys: KeyDirectory):
        super().__init__(alias, keys, tree.config, tree.prompter)
        self.tree = tree

    def _load(self) -> List[str]:
        return list(self.tree.recipients.get(self.alias, []))

    def _save(self, recipients: List[str]) -> None:
        self.tree.recipients[self.alias] = list(recipients)


class InMemoryStoreTree(StoreTree):
    def __init__(self, config: TrustConfig, root_keys: KeyDirectory, prompter=None):
        self.config = config
        self.prompter = prompter
        self.recipients: Dict[str, List[str]] = {}
        self.keys: Dict[str, Optional[KeyDirectory]] = {ROOT_ALIAS: root_keys}

    def list_mount_points(self) -> List[str]:
        return [a for a in self.keys if a != ROOT_ALIAS]

    def add_mount(self, alias: str, keys: KeyDirectory):
        self.keys[alias] = keys
        return self.get_node(alias)

    def detach(self, alias: str):
        # mount point stays listed but no longer resolves
        self.keys[alias] = None

    def get_node(self, alias: str):
        keys = self.keys.get(alias)
        if keys is None:
            raise NodeNotFound(alias)
        return InMemoryStoreNode(self, alias, keys)
