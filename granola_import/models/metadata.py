"""
Document display metadata models.

Derived, cached view of a source document used for selection, filtering
and sorting before an import run.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from granola_import.models.classification import ImportClassification, ImportStatus


class DocumentDisplayMetadata(BaseModel):
    """Display fields derived from a source document and its classification."""

    id: str
    title: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
    created_date: str = Field(default="", description="Human readable creation date")
    updated_date: str = Field(default="", description="Human readable update date")
    created_ago: str = ""
    updated_ago: str = ""
    word_count: int = 0
    reading_time: int = Field(default=1, description="Estimated reading time in minutes")
    preview: str = ""
    is_empty: bool = False
    import_status: ImportClassification
    selected: bool = False
    visible: bool = True

    @property
    def status(self) -> ImportStatus:
        return self.import_status.status


class DocumentFilter(BaseModel):
    """Filter criteria for the document list. Unset fields match everything."""

    search_text: str | None = None
    status_filter: list[ImportStatus] | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None
    min_word_count: int | None = None
    max_word_count: int | None = None


class SortField(str, Enum):
    """Sortable metadata fields."""

    TITLE = "title"
    CREATED = "created"
    UPDATED = "updated"
    WORD_COUNT = "word_count"
    STATUS = "status"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class DocumentSort(BaseModel):
    """Sort options for the document list."""

    field: SortField = SortField.UPDATED
    direction: SortDirection = SortDirection.DESC


class CollectionStats(BaseModel):
    """Counts over a metadata collection."""

    total: int = 0
    visible: int = 0
    selected: int = Field(default=0, description="Selected and visible")
    by_status: dict[ImportStatus, int] = Field(
        default_factory=lambda: {status: 0 for status in ImportStatus}
    )
    total_word_count: int = 0
    average_word_count: int = 0
    total_reading_time: int = 0
