"""
Data models for granola_import.

Core models:
- RichTextNode, Mark: Rich-text tree received from Granola
- SourceDocument, LastViewedPanel: A Granola document and its content variants
- ConvertedNote, NoteFrontmatter, DocumentValidation: Converter output
- ContentPriority, DatePrefixFormat, ContentSourceKind: Converter options
- FileRef: Vault file reference
- ImportStatus, ImportClassification, TrackedNote, DetectorStatistics: Duplicate detection
- DocumentDisplayMetadata, DocumentFilter, DocumentSort: Selection metadata
- ConflictResolution and its variants: Resolver answers
- ImportOptions, ImportProgress, DocumentProgress, FailedDocument: Import runs
"""

from granola_import.models.classification import (
    DetectorStatistics,
    ImportClassification,
    ImportStatus,
    TrackedNote,
)
from granola_import.models.document import LastViewedPanel, SourceDocument
from granola_import.models.metadata import (
    CollectionStats,
    DocumentDisplayMetadata,
    DocumentFilter,
    DocumentSort,
    SortDirection,
    SortField,
)
from granola_import.models.note import (
    GRANOLA_SOURCE,
    ContentPriority,
    ContentSourceKind,
    ConvertedNote,
    DatePrefixFormat,
    DocumentValidation,
    NoteFrontmatter,
)
from granola_import.models.progress import (
    DocumentImportStatus,
    DocumentProgress,
    ErrorCategory,
    FailedDocument,
    ImportOptions,
    ImportProgress,
    ImportStrategy,
    ImportSummary,
    SkipReason,
)
from granola_import.models.resolution import (
    ConflictResolution,
    MergeResolution,
    MergeStrategy,
    OverwriteResolution,
    RenameResolution,
    SkipResolution,
    ViewDiffResolution,
)
from granola_import.models.rich_text import Mark, RichTextNode, is_valid_doc
from granola_import.models.vault import FileRef

__all__ = [
    # Rich text
    "RichTextNode",
    "Mark",
    "is_valid_doc",
    # Documents
    "SourceDocument",
    "LastViewedPanel",
    # Converter
    "ConvertedNote",
    "NoteFrontmatter",
    "DocumentValidation",
    "ContentPriority",
    "ContentSourceKind",
    "DatePrefixFormat",
    "GRANOLA_SOURCE",
    # Vault
    "FileRef",
    # Detection
    "ImportStatus",
    "ImportClassification",
    "TrackedNote",
    "DetectorStatistics",
    # Metadata
    "DocumentDisplayMetadata",
    "DocumentFilter",
    "DocumentSort",
    "SortField",
    "SortDirection",
    "CollectionStats",
    # Resolution
    "ConflictResolution",
    "SkipResolution",
    "OverwriteResolution",
    "MergeResolution",
    "MergeStrategy",
    "RenameResolution",
    "ViewDiffResolution",
    # Progress
    "ImportStrategy",
    "ImportOptions",
    "ImportProgress",
    "ImportSummary",
    "DocumentProgress",
    "DocumentImportStatus",
    "ErrorCategory",
    "SkipReason",
    "FailedDocument",
]
