"""In-memory vault, used for dry runs and tests."""

from granola_import.core.vault.base import Vault, normalize_path, parent_folder
from granola_import.models.vault import FileRef
from granola_import.utils.exceptions import NotFoundError, VaultError


class InMemoryVault(Vault):
    """Dict-backed vault keeping files and folders in memory."""

    def __init__(self, files: dict[str, str] | None = None):
        """
        Initialize vault.

        Args:
            files: Optional initial files as {path: content}; folders are implied
        """
        self.files: dict[str, str] = {}
        self.folders: set[str] = set()
        for path, content in (files or {}).items():
            path = normalize_path(path)
            self._add_folders(parent_folder(path))
            self.files[path] = content

    def _add_folders(self, path: str) -> None:
        parts = [part for part in path.split("/") if part]
        for index in range(1, len(parts) + 1):
            self.folders.add("/".join(parts[:index]))

    async def create(self, path: str, content: str) -> FileRef:
        path = normalize_path(path)
        if path in self.files:
            raise VaultError(f"File already exists: {path}", context={"path": path})
        if not self.folder_exists(parent_folder(path)):
            raise VaultError(
                f"Folder does not exist: {parent_folder(path)}", context={"path": path}
            )
        self.files[path] = content
        return FileRef(path=path)

    async def modify(self, file: FileRef, content: str) -> None:
        if file.path not in self.files:
            raise NotFoundError(f"File not found: {file.path}", context={"path": file.path})
        self.files[file.path] = content

    async def read(self, file: FileRef) -> str:
        if file.path not in self.files:
            raise NotFoundError(f"File not found: {file.path}", context={"path": file.path})
        return self.files[file.path]

    def get_file_by_path(self, path: str) -> FileRef | None:
        path = normalize_path(path)
        return FileRef(path=path) if path in self.files else None

    def list_markdown_files(self) -> list[FileRef]:
        return [FileRef(path=path) for path in sorted(self.files) if path.endswith(".md")]

    def folder_exists(self, path: str) -> bool:
        path = normalize_path(path)
        return path == "" or path in self.folders

    async def create_folder(self, path: str) -> None:
        self._add_folders(normalize_path(path))
