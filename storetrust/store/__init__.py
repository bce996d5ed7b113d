# storetrust/store/__init__.py

from .tree import StoreTree, StoreNode, BaseStoreNode, by_path_len, display_alias, ROOT_ALIAS, ROOT_LABEL
from .providers.memory_provider import InMemoryStoreTree
from .providers.sqlite_provider import SQLiteStoreTree
from storetrust.config import TrustConfig


def load_store_tree(config: TrustConfig, key_factory, prompter=None) -> StoreTree:
    """
    Factory resolver for selecting the store backend.

    For now:
        - sqlite (default)
        - memory
    """
    if config.storage_provider == "memory":
        return InMemoryStoreTree(config, key_factory(ROOT_ALIAS), prompter=prompter)

    if config.storage_provider == "sqlite":
        return SQLiteStoreTree(config.sqlite_path, config, key_factory, prompter=prompter)

    raise ValueError(f"Unknown storage provider: {config.storage_provider}")


__all__ = [
    "StoreTree",
    "StoreNode",
    "BaseStoreNode",
    "InMemoryStoreTree",
    "SQLiteStoreTree",
    "by_path_len",
    "display_alias",
    "load_store_tree",
    "ROOT_ALIAS",
    "ROOT_LABEL",
]
