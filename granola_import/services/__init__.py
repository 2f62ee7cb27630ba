"""
Services for granola_import.

High-level business logic services:
- DuplicateDetector: Classifies documents against notes already in the vault
- DocumentMetadataService: Display metadata, selection, filtering and sorting
- SelectiveImportManager: Sequential import batches with progress and conflict handling
"""

from granola_import.services.document_metadata import DocumentMetadataService
from granola_import.services.duplicate_detector import DuplicateDetector
from granola_import.services.import_manager import SelectiveImportManager

__all__ = [
    "DuplicateDetector",
    "DocumentMetadataService",
    "SelectiveImportManager",
]
