"""
Duplicate detection models.

The detector assigns every incoming document an ImportClassification that
tells the orchestrator whether it is new, changed, unchanged or in conflict
with something already in the vault.
"""

from enum import Enum

from pydantic import BaseModel, Field

from granola_import.models.vault import FileRef


class ImportStatus(str, Enum):
    """Relationship between an incoming document and the vault."""

    NEW = "NEW"  # Not in the vault yet
    UPDATED = "UPDATED"  # Imported before, remote copy changed since
    EXISTS = "EXISTS"  # Imported before, unchanged
    CONFLICT = "CONFLICT"  # Local edits or an unrelated file in the way


class ImportClassification(BaseModel):
    """Verdict of the duplicate detector for a single document."""

    status: ImportStatus
    reason: str = ""
    requires_user_choice: bool = False
    existing_file: FileRef | None = None


class TrackedNote(BaseModel):
    """Index entry for a previously imported note found in the vault."""

    granola_id: str
    updated: str | None = None
    file: FileRef
    locally_modified: bool = False


class DetectorStatistics(BaseModel):
    """Summary of the detector's index."""

    total_granola_documents: int = 0
    oldest_import: str | None = None
    newest_import: str | None = None
    documents_with_conflicts: int = 0
