"""
Vault backends for granola_import.

Provides the abstract Vault interface plus filesystem and in-memory implementations.
"""

from granola_import.core.vault.base import Vault, join_path, normalize_path
from granola_import.core.vault.factory import VaultFactory
from granola_import.core.vault.filesystem import FileSystemVault
from granola_import.core.vault.memory import InMemoryVault

__all__ = [
    "Vault",
    "FileSystemVault",
    "InMemoryVault",
    "VaultFactory",
    "join_path",
    "normalize_path",
]
