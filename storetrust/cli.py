from __future__ import annotations

import argparse
import os
import sys
from datetime import timedelta

from .actions import Action
from .config import load_config
from .errors import EXIT_RECIPIENTS, EXIT_UNKNOWN, ExitError, StorageFailure, StoreTrustError, exit_error
from .keys.directory import load_keyring
from .store import load_store_tree
from .ui import ConsolePrompter

DEFAULT_CONFIG_PATH = os.path.join("~", ".config", "storetrust", "config.json")


def build_action(args: argparse.Namespace) -> Action:
    path = args.config or os.getenv("STORETRUST_CONFIG") or os.path.expanduser(DEFAULT_CONFIG_PATH)
    cfg = load_config({"path": path})
    keys = load_keyring(cfg.keyring_path)
    prompter = ConsolePrompter()
    # every mount shares the operator's keyring
    try:
        tree = load_store_tree(cfg, lambda alias: keys, prompter=prompter)
    except StorageFailure as e:
        raise exit_error(EXIT_RECIPIENTS, e, "failed to open store: %s", e)
    return Action(tree, cfg, prompter)


def cmd_print(args: argparse.Namespace) -> int:
    return build_action(args).print_recipients()


def cmd_expiration(args: argparse.Namespace) -> int:
    threshold = timedelta(hours=args.warn_threshold) if args.warn_threshold is not None else None
    return build_action(args).print_expiration(store=args.store, warn_threshold=threshold)


def cmd_add(args: argparse.Namespace) -> int:
    return build_action(args).add_recipients(store=args.store, force=args.force, ids=args.ids)


def cmd_remove(args: argparse.Namespace) -> int:
    return build_action(args).remove_recipients(store=args.store, force=args.force, ids=args.ids)


def cmd_update(args: argparse.Namespace) -> int:
    return build_action(args).update_recipients()


def cmd_complete(args: argparse.Namespace) -> int:
    build_action(args).complete_recipients()
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="storetrust")
    p.add_argument("--config", default=None, help="Path to the JSON config file")
    sub = p.add_subparsers(dest="cmd", required=True)

    sp = sub.add_parser("print", help="Print the recipients of every store")
    sp.set_defaults(func=cmd_print)

    sp = sub.add_parser("expiration", help="Print recipients whose key expired or expires soon")
    sp.add_argument("--store", default="")
    sp.add_argument("--warn-threshold", type=int, default=None, help="Warning threshold in hours")
    sp.set_defaults(func=cmd_expiration)

    sp = sub.add_parser("add", help="Add recipients to a store")
    sp.add_argument("--store", default=None)
    sp.add_argument("--force", action="store_true", help="Trust keys that cannot be verified")
    sp.add_argument("ids", nargs="*")
    sp.set_defaults(func=cmd_add)

    sp = sub.add_parser("remove", help="Remove recipients from a store")
    sp.add_argument("--store", default=None)
    sp.add_argument("--force", action="store_true", help="Remove keys that cannot be verified")
    sp.add_argument("ids", nargs="*")
    sp.set_defaults(func=cmd_remove)

    sp = sub.add_parser("update", help="Confirm changed recipient lists")
    sp.set_defaults(func=cmd_update)

    sp = sub.add_parser("complete", help="List recipients for shell completion")
    sp.set_defaults(func=cmd_complete)

    return p


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return int(args.func(args))
    except ExitError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return e.code
    except StorageFailure as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_RECIPIENTS
    except (StoreTrustError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_UNKNOWN


if __name__ == "__main__":
    raise SystemExit(main())
