"""Shared fixtures for granola_import tests.

Documents are built from plain dicts the way the Granola API returns them;
vault tests use the in-memory backend unless they need a real directory.
"""

import pytest

from granola_import.config import ContentConfig, DetectorConfig
from granola_import.core.converter import MarkdownConverter
from granola_import.core.vault import InMemoryVault
from granola_import.models import ImportClassification, ImportStatus, SourceDocument
from granola_import.services import (
    DocumentMetadataService,
    DuplicateDetector,
    SelectiveImportManager,
)
from tests.builders import doc_tree, heading, make_document, paragraph, text

# Fixtures


@pytest.fixture
def vault() -> InMemoryVault:
    """Empty in-memory vault."""
    return InMemoryVault()


@pytest.fixture
def content_config() -> ContentConfig:
    """Content options with enhanced frontmatter, needed for re-detection."""
    return ContentConfig(include_enhanced_frontmatter=True)


@pytest.fixture
def converter(content_config) -> MarkdownConverter:
    """Converter writing enhanced frontmatter."""
    return MarkdownConverter(content=content_config)


@pytest.fixture
def detector(vault, content_config) -> DuplicateDetector:
    """Duplicate detector over the in-memory vault."""
    return DuplicateDetector(vault, content=content_config, detector=DetectorConfig())


@pytest.fixture
def metadata_service() -> DocumentMetadataService:
    """Metadata service with default options."""
    return DocumentMetadataService()


@pytest.fixture
def import_manager(vault, converter) -> SelectiveImportManager:
    """Import manager without a conflict resolver."""
    return SelectiveImportManager(vault, converter)


@pytest.fixture
def new_status() -> ImportClassification:
    return ImportClassification(status=ImportStatus.NEW, reason="New document")


@pytest.fixture
def sample_document() -> SourceDocument:
    """Document with a small rich-text body."""
    return make_document(
        notes=doc_tree(
            heading(2, "Agenda"),
            paragraph(text("Discuss the "), text("roadmap", "strong"), text(".")),
        )
    )
