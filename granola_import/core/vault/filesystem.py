"""
Filesystem vault.

Stores notes as files below a root directory. Blocking file I/O runs in a
worker thread so the import loop stays responsive.
"""

import asyncio
from pathlib import Path

from granola_import.core.vault.base import Vault, normalize_path, parent_folder
from granola_import.models.vault import FileRef
from granola_import.utils.exceptions import NotFoundError, VaultError
from granola_import.utils.logger import get_logger

# Folders the host application keeps its own state in
IGNORED_FOLDERS = frozenset({".obsidian", ".trash", ".git"})


class FileSystemVault(Vault):
    """Vault backed by a directory on disk."""

    def __init__(self, root: str | Path, encoding: str = "utf-8", logger=None):
        """
        Initialize vault.

        Args:
            root: Vault root directory (must exist)
            encoding: Text encoding for notes
            logger: Logger to use (defaults to the module logger)
        """
        self.root = Path(root).expanduser().resolve()
        self.encoding = encoding
        self.logger = logger or get_logger(__name__)

    def _resolve(self, path: str) -> Path:
        return self.root / normalize_path(path)

    def _write(self, target: Path, content: str, exclusive: bool) -> None:
        mode = "x" if exclusive else "w"
        with open(target, mode, encoding=self.encoding, newline="") as f:
            f.write(content)

    async def create(self, path: str, content: str) -> FileRef:
        path = normalize_path(path)
        target = self._resolve(path)
        if not target.parent.is_dir():
            raise VaultError(
                f"Folder does not exist: {parent_folder(path)}", context={"path": path}
            )
        try:
            await asyncio.to_thread(self._write, target, content, True)
        except FileExistsError as e:
            raise VaultError(f"File already exists: {path}", context={"path": path}) from e
        except OSError as e:
            raise VaultError(f"Failed to create file {path}: {e}", context={"path": path}) from e

        self.logger.debug(f"Created {path}")
        return FileRef(path=path)

    async def modify(self, file: FileRef, content: str) -> None:
        target = self._resolve(file.path)
        if not target.is_file():
            raise NotFoundError(f"File not found: {file.path}", context={"path": file.path})
        try:
            await asyncio.to_thread(self._write, target, content, False)
        except OSError as e:
            raise VaultError(
                f"Failed to write file {file.path}: {e}", context={"path": file.path}
            ) from e

        self.logger.debug(f"Modified {file.path}")

    async def read(self, file: FileRef) -> str:
        target = self._resolve(file.path)
        if not target.is_file():
            raise NotFoundError(f"File not found: {file.path}", context={"path": file.path})
        try:
            return await asyncio.to_thread(target.read_text, encoding=self.encoding)
        except (OSError, UnicodeDecodeError) as e:
            raise VaultError(
                f"Failed to read file {file.path}: {e}", context={"path": file.path}
            ) from e

    def get_file_by_path(self, path: str) -> FileRef | None:
        path = normalize_path(path)
        return FileRef(path=path) if path and self._resolve(path).is_file() else None

    def list_markdown_files(self) -> list[FileRef]:
        if not self.root.is_dir():
            raise VaultError(f"Vault root is not a directory: {self.root}")
        try:
            files = []
            for candidate in self.root.rglob("*.md"):
                relative = candidate.relative_to(self.root)
                if any(part in IGNORED_FOLDERS for part in relative.parts):
                    continue
                if candidate.is_file():
                    files.append(FileRef(path=relative.as_posix()))
        except OSError as e:
            raise VaultError(f"Failed to list vault files: {e}") from e
        return sorted(files, key=lambda ref: ref.path)

    def folder_exists(self, path: str) -> bool:
        return self._resolve(path).is_dir()

    async def create_folder(self, path: str) -> None:
        try:
            await asyncio.to_thread(self._resolve(path).mkdir, parents=True, exist_ok=True)
        except OSError as e:
            raise VaultError(f"Failed to create folder {path}: {e}", context={"path": path}) from e
