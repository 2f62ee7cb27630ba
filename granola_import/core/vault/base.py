"""
Base interface for vault storage.

The vault is the authoritative store for notes: existence and collision
checks always go through it. Paths are vault-relative with forward slashes.
"""

from abc import ABC, abstractmethod
from pathlib import PurePosixPath

from granola_import.models.vault import FileRef
from granola_import.utils.exceptions import VaultError

BACKUP_MARKER = ".backup-"


def normalize_path(path: str) -> str:
    """
    Normalize a vault-relative path.

    Backslashes become slashes, empty and ``.`` segments are dropped.

    Raises:
        VaultError: If the path escapes the vault root
    """
    parts = [part for part in path.replace("\\", "/").split("/") if part not in ("", ".")]
    if ".." in parts:
        raise VaultError(f"Path escapes the vault: {path}", context={"path": path})
    return "/".join(parts)


def join_path(folder: str, filename: str) -> str:
    """Join a folder and a filename into a normalized vault path."""
    return normalize_path(f"{folder}/{filename}" if folder else filename)


def parent_folder(path: str) -> str:
    parent = str(PurePosixPath(path).parent)
    return "" if parent == "." else parent


def is_backup_path(path: str) -> bool:
    """Whether a path names a backup written before a note was overwritten."""
    return BACKUP_MARKER in PurePosixPath(path).name


class Vault(ABC):
    """Abstract base class for vault implementations."""

    @abstractmethod
    async def create(self, path: str, content: str) -> FileRef:
        """
        Create a new file.

        Args:
            path: Vault-relative path
            content: File content

        Returns:
            Reference to the created file

        Raises:
            VaultError: If the file already exists, its folder is missing or the write fails
        """
        pass

    @abstractmethod
    async def modify(self, file: FileRef, content: str) -> None:
        """
        Replace the content of an existing file.

        Raises:
            NotFoundError: If the file doesn't exist
            VaultError: If the write fails
        """
        pass

    @abstractmethod
    async def read(self, file: FileRef) -> str:
        """
        Read a file's content.

        Raises:
            NotFoundError: If the file doesn't exist
            VaultError: If the read fails
        """
        pass

    @abstractmethod
    def get_file_by_path(self, path: str) -> FileRef | None:
        """Look up a file, returning None if nothing exists at ``path``."""
        pass

    @abstractmethod
    def list_markdown_files(self) -> list[FileRef]:
        """
        List every Markdown file in the vault.

        Raises:
            VaultError: If the vault cannot be enumerated
        """
        pass

    @abstractmethod
    def folder_exists(self, path: str) -> bool:
        """Check whether a folder exists. The root always exists."""
        pass

    @abstractmethod
    async def create_folder(self, path: str) -> None:
        """Create a folder and any missing parents."""
        pass
