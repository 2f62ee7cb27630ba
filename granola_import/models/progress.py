"""
Import progress models.

Run-scoped state of the selective import orchestrator: overall batch
counters, per-document progress, options and failure records.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from granola_import.models.document import SourceDocument
from granola_import.models.metadata import DocumentDisplayMetadata
from granola_import.models.vault import FileRef


class ImportStrategy(str, Enum):
    """What to do when the target file already exists."""

    SKIP = "skip"
    UPDATE = "update"
    CREATE_NEW = "create_new"


class DocumentImportStatus(str, Enum):
    """Per-document state machine: pending -> importing -> terminal."""

    PENDING = "pending"
    IMPORTING = "importing"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"
    EMPTY = "empty"


TERMINAL_STATUSES = frozenset(
    {
        DocumentImportStatus.COMPLETED,
        DocumentImportStatus.FAILED,
        DocumentImportStatus.SKIPPED,
        DocumentImportStatus.EMPTY,
    }
)


class ErrorCategory(str, Enum):
    """Coarse classification of per-document failures."""

    VALIDATION = "validation"
    CONVERSION = "conversion"
    FILESYSTEM = "filesystem"
    PERMISSION = "permission"
    NETWORK = "network"
    UNKNOWN = "unknown"


class SkipReason(str, Enum):
    """Why a document was skipped, used for the import summary."""

    ALREADY_EXISTS = "already_exists"
    USER_CANCELLED = "user_cancelled"
    EMPTY_DOCUMENT = "empty_document"
    FILENAME_COLLISION = "filename_collision"
    OTHER = "other"


class ImportOptions(BaseModel):
    """Options for a single import run."""

    strategy: ImportStrategy = ImportStrategy.SKIP
    default_folder: str = ""
    create_folders: bool = True
    skip_empty_documents: bool = True
    create_backups: bool = False
    stop_on_error: bool = False
    delay_between_imports: float = Field(default=0.0, ge=0.0, description="Seconds between documents")


class DocumentProgress(BaseModel):
    """Progress of a single document within a run."""

    id: str
    title: str
    status: DocumentImportStatus = DocumentImportStatus.PENDING
    progress: int = Field(default=0, ge=0, le=100)
    message: str = "Waiting to start..."
    error: str | None = None
    error_category: ErrorCategory | None = None
    skip_reason: SkipReason | None = None
    file: FileRef | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None


class ImportProgress(BaseModel):
    """Overall progress of an import run."""

    total: int = 0
    completed: int = 0
    failed: int = 0
    skipped: int = 0
    empty: int = 0
    percentage: int = 0
    message: str = ""
    is_running: bool = False
    is_cancelled: bool = False
    start_time: datetime | None = None
    end_time: datetime | None = None
    processing_rate: float = Field(default=0.0, description="Documents per second")
    estimated_completion: datetime | None = None

    @property
    def processed(self) -> int:
        return self.completed + self.failed + self.skipped + self.empty


class FailedDocument(BaseModel):
    """Snapshot of a failed document kept for retries."""

    document: SourceDocument
    metadata: DocumentDisplayMetadata
    error: str
    error_category: ErrorCategory
    user_message: str


class ImportSummary(BaseModel):
    """Grouped view of a finished run."""

    total: int = 0
    completed: int = 0
    failed: int = 0
    skipped: int = 0
    empty: int = 0
    failures_by_category: dict[ErrorCategory, list[str]] = Field(default_factory=dict)
    skips_by_reason: dict[SkipReason, list[str]] = Field(default_factory=dict)
