# storetrust/keys/__init__.py

from .models import KeyInfo
from .directory import KeyDirectory, LocalKeyDirectory, load_keyring

__all__ = [
    "KeyInfo",
    "KeyDirectory",
    "LocalKeyDirectory",
    "load_keyring",
]
