from __future__ import annotations
from typing import List

from storetrust.errors import NodeNotFound
from storetrust.logger import get_logger
from storetrust.store.tree import ROOT_ALIAS, StoreTree, by_path_len

log = get_logger("storetrust.listing")


def recipients_tree(store_tree: StoreTree, include_names: bool = True) -> str:
    """Render the recipients of the root store and every mount as a text tree."""
    root = store_tree.get_node(ROOT_ALIAS)
    fmt = root.keys.format_key if include_names else root.keys.fingerprint
    lines = ["Store (root)"]
    lines += [f"- {fmt(r)}" for r in root.list_recipients()]

    for alias in by_path_len(store_tree.list_mount_points()):
        try:
            node = store_tree.get_node(alias)
        except NodeNotFound:
            log.debug(f"[LISTING] {alias} is not mounted")
            continue
        fmt = node.keys.format_key if include_names else node.keys.fingerprint
        lines.append(f"└── {alias} (mount)")
        lines += [f"    - {fmt(r)}" for r in node.list_recipients()]
    return "\n".join(lines)


def all_recipients(store_tree: StoreTree) -> List[str]:
    """Every trusted fingerprint across all stores, first occurrence order."""
    seen = []
    for alias in [ROOT_ALIAS] + by_path_len(store_tree.list_mount_points()):
        try:
            node = store_tree.get_node(alias)
        except NodeNotFound:
            continue
        seen += [r for r in node.list_recipients() if r not in seen]
    return seen
