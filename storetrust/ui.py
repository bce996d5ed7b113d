"""
storetrust.ui
-------------
Operator interaction capability injected into every workflow.

Workflows block on these calls; nothing is committed before they return.
"""

from __future__ import annotations
from enum import Enum
from typing import List, Tuple
import sys

from storetrust.errors import UserAborted


class SelectAction(str, Enum):
    ACCEPT = "accept"
    SHOW = "show"
    ABORT = "abort"


class Prompter:
    # Interface
    def confirm(self, prompt: str) -> bool: ...
    def select_one(self, title: str, help: str, choices: List[str]) -> Tuple[SelectAction, int]: ...


class ConsolePrompter(Prompter):
    """Line based prompter on stdin/stdout. EOF and Ctrl-C count as abort."""

    def __init__(self, stdin=None, stdout=None):
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout

    def _read(self, prompt: str) -> str:
        self.stdout.write(prompt)
        self.stdout.flush()
        try:
            line = self.stdin.readline()
        except KeyboardInterrupt:
            raise UserAborted()
        if not line:
            raise UserAborted()
        return line.strip()

    def confirm(self, prompt: str) -> bool:
        while True:
            answer = self._read(f"{prompt} [y/N] ").lower()
            if answer in ("y", "yes"):
                return True
            if answer in ("", "n", "no"):
                return False

    def select_one(self, title: str, help: str, choices: List[str]) -> Tuple[SelectAction, int]:
        self.stdout.write(f"{title}\n")
        for i, choice in enumerate(choices):
            self.stdout.write(f"  [{i}] {choice}\n")
        self.stdout.write(f"{help}\n")
        while True:
            try:
                answer = self._read("Selection (q to quit): ")
            except UserAborted:
                return SelectAction.ABORT, 0
            if answer.lower() in ("q", "quit"):
                return SelectAction.ABORT, 0
            if answer.isdigit() and int(answer) < len(choices):
                return SelectAction.ACCEPT, int(answer)
