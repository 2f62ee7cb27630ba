"""
Duplicate Detector - Classifies incoming documents against the vault.

Handles:
- Scanning the vault for notes previously written by the importer
- Rebuilding document identity and version from their frontmatter
- Detecting local edits with a configurable heuristic
- Detecting filename collisions with unrelated files
"""

import asyncio
import re
from dataclasses import dataclass, field

from granola_import.config import ContentConfig, DetectorConfig
from granola_import.core.converter.filename import filename_for_document, legacy_filename
from granola_import.core.converter.frontmatter import parse_granola_frontmatter, split_frontmatter
from granola_import.core.vault.base import Vault, is_backup_path
from granola_import.models.classification import (
    DetectorStatistics,
    ImportClassification,
    ImportStatus,
    TrackedNote,
)
from granola_import.models.document import SourceDocument
from granola_import.models.vault import FileRef
from granola_import.utils.exceptions import ConfigurationError, DetectorError
from granola_import.utils.logger import get_logger
from granola_import.utils.text import count_words, parse_timestamp, same_timestamp


@dataclass
class _VaultIndex:
    """Snapshot of the vault, replaced as a whole on every scan."""

    by_id: dict[str, TrackedNote] = field(default_factory=dict)
    by_path: dict[str, TrackedNote] = field(default_factory=dict)
    files_by_name: dict[str, list[FileRef]] = field(default_factory=dict)


def _prefer(current: TrackedNote, candidate: TrackedNote) -> TrackedNote:
    """
    Pick the note that tracks a document when several files carry its id.

    The most recently updated copy wins; on a tie the shorter path, which is
    the unsuffixed name written first.
    """

    def rank(note: TrackedNote):
        updated = parse_timestamp(note.updated)
        return (
            updated is not None,
            updated.timestamp() if updated else 0.0,
            -len(note.file.path),
        )

    return candidate if rank(candidate) > rank(current) else current

class DuplicateDetector:
    """
    Detects whether Granola documents already exist in the vault.

    The vault is scanned once on initialize(); refresh() forces a new scan.
    Classification never touches the vault, it only reads the index built by
    the last scan.
    """

    def __init__(
        self,
        vault: Vault,
        content: ContentConfig | None = None,
        detector: DetectorConfig | None = None,
        ignored_markup: list[str] | None = None,
        logger=None,
    ):
        """
        Initialize detector.

        Args:
            vault: Vault to scan
            content: Filename options, used to compute expected filenames
            detector: Local modification heuristic
            ignored_markup: Literal strings the importer writes itself (e.g. a task tag)
                that must not count as local edits
            logger: Logger to use (defaults to the module logger)
        """
        self.vault = vault
        self.content = content or ContentConfig()
        self.ignored_markup = [markup for markup in (ignored_markup or []) if markup]
        self.logger = logger or get_logger(__name__)
        self._set_detector_config(detector or DetectorConfig())

        self._index = _VaultIndex()
        self._initialized = False
        self._lock = asyncio.Lock()

    def _set_detector_config(self, detector: DetectorConfig) -> None:
        try:
            self._patterns = [
                re.compile(pattern, re.MULTILINE)
                for pattern in (*detector.markup_patterns, *detector.section_patterns)
            ]
        except re.error as e:
            raise ConfigurationError(f"Invalid modification pattern: {e}") from e
        self.detector = detector

    def update_settings(
        self, content: ContentConfig | None = None, detector: DetectorConfig | None = None
    ) -> None:
        """Replace options; the existing index is kept until the next refresh."""
        if content is not None:
            self.content = content
        if detector is not None:
            self._set_detector_config(detector)

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    # Scanning

    async def initialize(self) -> None:
        """
        Scan the vault once. Further calls are no-ops until refresh().

        Raises:
            DetectorError: If the vault cannot be enumerated
        """
        async with self._lock:
            if self._initialized:
                return
            self._index = await self._scan()
            self._initialized = True

    async def refresh(self) -> None:
        """Discard the index and rescan the vault."""
        async with self._lock:
            self._initialized = False
            self._index = await self._scan()
            self._initialized = True

    async def _scan(self) -> _VaultIndex:
        try:
            files = self.vault.list_markdown_files()
        except Exception as e:
            raise DetectorError(f"Failed to initialize duplicate detector: {e}") from e

        index = _VaultIndex()
        for file in files:
            index.files_by_name.setdefault(file.name, []).append(file)
            if is_backup_path(file.path):
                continue
            try:
                tracked = await self._read_tracked_note(file)
            except Exception as e:
                self.logger.warning(f"Skipping unreadable file {file.path}: {e}")
                continue
            if tracked is None:
                continue

            index.by_path[file.path] = tracked
            current = index.by_id.get(tracked.granola_id)
            if current is not None:
                kept = _prefer(current, tracked)
                self.logger.warning(
                    f"Document {tracked.granola_id} found in {file.path} and "
                    f"{current.file.path}, tracking {kept.file.path}"
                )
                tracked = kept
            index.by_id[tracked.granola_id] = tracked

        self.logger.info(
            f"Duplicate detector indexed {len(index.by_id)} Granola notes "
            f"out of {len(files)} Markdown files"
        )
        return index

    async def _read_tracked_note(self, file: FileRef) -> TrackedNote | None:
        content = await self.vault.read(file)
        record = parse_granola_frontmatter(content)
        if not record or not record.get("id"):
            return None

        _, body = split_frontmatter(content)
        updated = record.get("updated")
        return TrackedNote(
            granola_id=str(record["id"]),
            updated=str(updated) if updated is not None else None,
            file=file,
            locally_modified=self.is_locally_modified(body),
        )

    # Heuristics

    def is_locally_modified(self, body: str) -> bool:
        """
        Check a note body for signs of editing inside the vault.

        Markup the importer never produces (wiki-links, embeds, hashtags,
        comments, query blocks, block references), an added notes section or
        a body longer than the word threshold all count as edits.
        """
        if not self.detector.check_modifications:
            return False

        for markup in self.ignored_markup:
            body = body.replace(markup, "")
        if any(pattern.search(body) for pattern in self._patterns):
            return True
        return count_words(body) > self.detector.word_count_threshold

    # Classification

    async def check_document(self, doc: SourceDocument) -> ImportClassification:
        """
        Classify a document against the vault index.

        Args:
            doc: Incoming document

        Returns:
            ImportClassification (NEW, UPDATED, EXISTS or CONFLICT)
        """
        if not self._initialized:
            await self.initialize()
        return self._classify(doc, self._index)

    async def check_documents(
        self, docs: list[SourceDocument]
    ) -> dict[str, ImportClassification]:
        """Classify several documents against the same index snapshot."""
        if not self._initialized:
            await self.initialize()
        index = self._index
        return {doc.id: self._classify(doc, index) for doc in docs}

    def _classify(self, doc: SourceDocument, index: _VaultIndex) -> ImportClassification:
        tracked = index.by_id.get(doc.id)
        if tracked is None:
            return self._classify_untracked(doc, index)

        if tracked.locally_modified:
            return ImportClassification(
                status=ImportStatus.CONFLICT,
                reason=f"Local modifications detected in {tracked.file.path}",
                requires_user_choice=True,
                existing_file=tracked.file,
            )

        if tracked.updated is not None and same_timestamp(tracked.updated, doc.updated_at):
            return ImportClassification(
                status=ImportStatus.EXISTS,
                reason="Document unchanged since last import",
                existing_file=tracked.file,
            )

        return ImportClassification(
            status=ImportStatus.UPDATED,
            reason=f"Document updated in Granola ({tracked.updated or 'unknown'} -> {doc.updated_at})",
            existing_file=tracked.file,
        )

    def _candidate_filenames(self, doc: SourceDocument) -> list[str]:
        names = [
            filename_for_document(doc, self.content),
            legacy_filename(doc.title, doc.id, self.content.max_filename_length),
        ]
        return list(dict.fromkeys(names))

    def _classify_untracked(self, doc: SourceDocument, index: _VaultIndex) -> ImportClassification:
        for name in self._candidate_filenames(doc):
            for file in index.files_by_name.get(name, []):
                owner = index.by_path.get(file.path)
                if owner is None:
                    return ImportClassification(
                        status=ImportStatus.CONFLICT,
                        reason=f"File already exists: {file.path}",
                        requires_user_choice=True,
                        existing_file=file,
                    )
                if owner.granola_id != doc.id:
                    return ImportClassification(
                        status=ImportStatus.CONFLICT,
                        reason=(
                            f"Filename conflict: {file.path} belongs to Granola document "
                            f"{owner.granola_id}"
                        ),
                        requires_user_choice=True,
                        existing_file=file,
                    )

        return ImportClassification(status=ImportStatus.NEW, reason="New document")

    # Statistics

    def get_tracked_notes(self) -> list[TrackedNote]:
        return list(self._index.by_id.values())

    def get_statistics(self) -> DetectorStatistics:
        """Counts and date range of the current index."""
        tracked = self.get_tracked_notes()
        dated = [
            (parse_timestamp(note.updated), note.updated)
            for note in tracked
            if note.updated and parse_timestamp(note.updated) is not None
        ]
        dated.sort(key=lambda item: item[0].timestamp())

        return DetectorStatistics(
            total_granola_documents=len(tracked),
            oldest_import=dated[0][1] if dated else None,
            newest_import=dated[-1][1] if dated else None,
            documents_with_conflicts=sum(1 for note in tracked if note.locally_modified),
        )
