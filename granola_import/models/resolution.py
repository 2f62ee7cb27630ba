"""
Conflict resolution models.

A ConflictResolution is the answer of the external resolver for a single
conflicted document. It is a tagged union discriminated by ``action``.
"""

from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, Field


class MergeStrategy(str, Enum):
    APPEND = "append"
    PREPEND = "prepend"


class SkipResolution(BaseModel):
    """Leave the existing file untouched."""

    action: Literal["skip"] = "skip"
    reason: str = "Skipped by user"


class OverwriteResolution(BaseModel):
    """Replace the existing file, optionally backing it up first."""

    action: Literal["overwrite"] = "overwrite"
    create_backup: bool = True


class MergeResolution(BaseModel):
    """Combine the existing body with the new one, keeping existing frontmatter."""

    action: Literal["merge"] = "merge"
    strategy: MergeStrategy = MergeStrategy.APPEND


class RenameResolution(BaseModel):
    """Write the new note to a different path."""

    action: Literal["rename"] = "rename"
    new_filename: str


class ViewDiffResolution(BaseModel):
    """Request to show a diff. Not a terminal decision for the importer."""

    action: Literal["view-diff"] = "view-diff"


ConflictResolution = Annotated[
    SkipResolution | OverwriteResolution | MergeResolution | RenameResolution | ViewDiffResolution,
    Field(discriminator="action"),
]
