"""Vault file reference model."""

from pathlib import PurePosixPath

from pydantic import BaseModel, ConfigDict


class FileRef(BaseModel):
    """
    Reference to a file inside the vault.

    Paths are vault-relative and always use forward slashes.
    """

    model_config = ConfigDict(frozen=True)

    path: str

    @property
    def name(self) -> str:
        """File name including extension."""
        return PurePosixPath(self.path).name

    @property
    def basename(self) -> str:
        """File name without extension."""
        return PurePosixPath(self.path).stem

    @property
    def extension(self) -> str:
        """Extension without the leading dot."""
        return PurePosixPath(self.path).suffix.lstrip(".")

    @property
    def parent(self) -> str:
        """Parent folder path, empty string for the vault root."""
        parent = str(PurePosixPath(self.path).parent)
        return "" if parent == "." else parent
