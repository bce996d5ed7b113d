import io
import pytest

from storetrust.config import TrustConfig
from storetrust.keys import LocalKeyDirectory
from storetrust.store import InMemoryStoreTree
from storetrust.ui import SelectAction


class FakePrompter:
    """Scripted operator: answers confirmations in order, records every prompt."""

    def __init__(self, answers=None, default=True, selection=(SelectAction.ACCEPT, 0)):
        self.answers = list(answers or [])
        self.default = default
        self.selection = selection
        self.prompts = []
        self.selections = []

    def confirm(self, prompt):
        self.prompts.append(prompt)
        if self.answers:
            answer = self.answers.pop(0)
            if isinstance(answer, BaseException):
                raise answer
            return answer
        return self.default

    def select_one(self, title, help, choices):
        self.selections.append((title, list(choices)))
        if isinstance(self.selection, list):
            return self.selection.pop(0)
        return self.selection


@pytest.fixture
def config():
    return TrustConfig(storage_provider="memory")


@pytest.fixture
def keys():
    return LocalKeyDirectory()


@pytest.fixture
def prompter():
    return FakePrompter()


@pytest.fixture
def tree(config, keys):
    return InMemoryStoreTree(config, keys)


@pytest.fixture
def out():
    return io.StringIO()
