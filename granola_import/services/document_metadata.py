"""
Document Metadata Service - Display metadata for document selection.

Derives dates, previews, word counts and the empty-document flag from a
source document plus its detector classification, and supports in-place
selection, filtering and sorting of the resulting list.
"""

from datetime import UTC, datetime

from granola_import.config import MetadataConfig
from granola_import.models.classification import ImportClassification, ImportStatus
from granola_import.models.document import SourceDocument
from granola_import.models.metadata import (
    CollectionStats,
    DocumentDisplayMetadata,
    DocumentFilter,
    DocumentSort,
    SortDirection,
    SortField,
)
from granola_import.utils.logger import get_logger
from granola_import.utils.text import (
    count_words,
    extract_plain_text,
    extract_text_from_content,
    parse_timestamp,
    same_timestamp,
    strip_markdown,
)

STATUS_ORDER = {
    ImportStatus.NEW: 0,
    ImportStatus.UPDATED: 1,
    ImportStatus.CONFLICT: 2,
    ImportStatus.EXISTS: 3,
}
NO_CONTENT_PREVIEW = "No content available"


def format_display_date(moment: datetime | None, raw: str) -> str:
    """Format as ``Jan 5, 2024, 09:30 AM``; unparseable input is returned as is."""
    if moment is None:
        return raw
    return f"{moment:%b} {moment.day}, {moment.year}, {moment:%I:%M %p}"


def time_ago(moment: datetime | None, now: datetime | None = None) -> str:
    """Relative time such as ``3 days ago`` or ``Just now``."""
    if moment is None:
        return "Unknown"
    if now is None:
        now = datetime.now(UTC) if moment.tzinfo else datetime.now()

    seconds = (now - moment).total_seconds()
    days, hours, minutes = int(seconds // 86400), int(seconds // 3600), int(seconds // 60)
    if days > 0:
        return f"{days} day{'' if days == 1 else 's'} ago"
    if hours > 0:
        return f"{hours} hour{'' if hours == 1 else 's'} ago"
    if minutes > 0:
        return f"{minutes} minute{'' if minutes == 1 else 's'} ago"
    return "Just now"


def has_extractable_content(doc: SourceDocument) -> bool:
    """True when any content field holds non-whitespace text."""
    panel = doc.last_viewed_panel.content if doc.last_viewed_panel else None
    return any(
        (
            extract_text_from_content(panel),
            (doc.notes_plain or "").strip(),
            (doc.notes_markdown or "").strip(),
            extract_plain_text(doc.notes),
        )
    )


def is_empty_document(doc: SourceDocument) -> bool:
    """
    Empty means never edited after creation and without any content.

    Content always wins: a document with text is never empty, whatever its
    timestamps say.
    """
    if has_extractable_content(doc):
        return False
    return same_timestamp(doc.created_at, doc.updated_at)


class DocumentMetadataService:
    """
    Builds and manipulates DocumentDisplayMetadata.

    Metadata is cached by document id; an entry is reused as long as the
    document's ``updated_at`` hasn't changed.
    """

    def __init__(
        self,
        config: MetadataConfig | None = None,
        skip_empty_documents: bool = True,
        logger=None,
    ):
        """
        Initialize metadata service.

        Args:
            config: Preview and reading time options
            skip_empty_documents: Drop empty documents from bulk extraction
                and never preselect them
            logger: Logger to use (defaults to the module logger)
        """
        self.config = config or MetadataConfig()
        self.skip_empty_documents = skip_empty_documents
        self.logger = logger or get_logger(__name__)
        self._cache: dict[str, tuple[str, DocumentDisplayMetadata]] = {}

    def update_settings(
        self, config: MetadataConfig | None = None, skip_empty_documents: bool | None = None
    ) -> None:
        """Apply new options and invalidate the cache."""
        if config is not None:
            self.config = config
        if skip_empty_documents is not None:
            self.skip_empty_documents = skip_empty_documents
        self.clear_cache()

    def clear_cache(self) -> None:
        self._cache.clear()

    # Extraction

    def extract_metadata(
        self, doc: SourceDocument, classification: ImportClassification
    ) -> DocumentDisplayMetadata:
        """
        Derive display metadata for a document.

        Args:
            doc: Source document
            classification: Current detector classification

        Returns:
            Cached metadata when the document and classification are
            unchanged; otherwise a fresh entry, which replaces the cached one
        """
        cached = self._cache.get(doc.id)
        if cached is not None and cached[0] == doc.updated_at:
            metadata = cached[1]
            if metadata.import_status == classification:
                return metadata
            metadata = metadata.model_copy(update={"import_status": classification})
        else:
            metadata = self._build(doc, classification)

        self._cache[doc.id] = (doc.updated_at, metadata)
        return metadata

    def _build(
        self, doc: SourceDocument, classification: ImportClassification
    ) -> DocumentDisplayMetadata:
        created = parse_timestamp(doc.created_at)
        updated = parse_timestamp(doc.updated_at)
        word_count = self.estimate_word_count(doc)
        is_empty = is_empty_document(doc)

        return DocumentDisplayMetadata(
            id=doc.id,
            title=doc.display_title or "Untitled Document",
            created_at=created,
            updated_at=updated,
            created_date=format_display_date(created, doc.created_at),
            updated_date=format_display_date(updated, doc.updated_at),
            created_ago=time_ago(created),
            updated_ago=time_ago(updated),
            word_count=word_count,
            reading_time=max(1, -(-word_count // self.config.words_per_minute)),
            preview=self.generate_preview(doc),
            is_empty=is_empty,
            import_status=classification,
            selected=self._default_selected(classification, is_empty),
        )

    def _default_selected(self, classification: ImportClassification, is_empty: bool) -> bool:
        if is_empty and self.skip_empty_documents:
            return False
        return classification.status in (ImportStatus.NEW, ImportStatus.UPDATED)

    def extract_bulk_metadata(
        self,
        docs: list[SourceDocument],
        classifications: dict[str, ImportClassification],
    ) -> list[DocumentDisplayMetadata]:
        """
        Derive metadata for many documents.

        Documents without a classification are treated as NEW. Empty documents
        are left out when empty-document skipping is enabled.
        """
        results = []
        for doc in docs:
            classification = classifications.get(doc.id) or ImportClassification(
                status=ImportStatus.NEW, reason="Status not determined"
            )
            metadata = self.extract_metadata(doc, classification)
            if metadata.is_empty and self.skip_empty_documents:
                self.logger.debug(f"Leaving out empty document {doc.id}")
                continue
            results.append(metadata)
        return results

    def _truncate(self, text: str) -> str:
        text = " ".join(text.split())
        limit = self.config.preview_length
        return text[:limit] + "..." if len(text) > limit else text

    def generate_preview(self, doc: SourceDocument) -> str:
        """Short preview from plain text, Markdown, then the rich-text trees."""
        if doc.notes_plain and doc.notes_plain.strip():
            return self._truncate(doc.notes_plain)
        if doc.notes_markdown and doc.notes_markdown.strip():
            return self._truncate(strip_markdown(doc.notes_markdown))

        panel = doc.last_viewed_panel.content if doc.last_viewed_panel else None
        text = extract_plain_text(doc.notes) or extract_text_from_content(panel)
        return self._truncate(text) if text else NO_CONTENT_PREVIEW

    @staticmethod
    def estimate_word_count(doc: SourceDocument) -> int:
        if doc.notes_plain and doc.notes_plain.strip():
            return count_words(doc.notes_plain)
        if doc.notes_markdown and doc.notes_markdown.strip():
            return count_words(strip_markdown(doc.notes_markdown))
        panel = doc.last_viewed_panel.content if doc.last_viewed_panel else None
        return count_words(extract_plain_text(doc.notes) or extract_text_from_content(panel))

    # Selection, filtering, sorting

    @staticmethod
    def update_selection(
        items: list[DocumentDisplayMetadata], selected_ids: list[str] | set[str]
    ) -> list[DocumentDisplayMetadata]:
        """Select exactly the given ids, in place."""
        wanted = set(selected_ids)
        for item in items:
            item.selected = item.id in wanted
        return items

    @staticmethod
    def apply_filter(
        items: list[DocumentDisplayMetadata], criteria: DocumentFilter
    ) -> list[DocumentDisplayMetadata]:
        """Set ``visible`` on every item according to the filter, in place."""
        search = (criteria.search_text or "").strip().lower()

        for item in items:
            visible = True
            if search and search not in f"{item.title} {item.preview}".lower():
                visible = False
            if criteria.status_filter and item.status not in criteria.status_filter:
                visible = False
            if criteria.date_from or criteria.date_to:
                moment = item.updated_at or item.created_at
                if moment is None:
                    visible = False
                else:
                    if criteria.date_from and _naive(moment) < _naive(criteria.date_from):
                        visible = False
                    if criteria.date_to and _naive(moment) > _naive(criteria.date_to):
                        visible = False
            if criteria.min_word_count is not None and item.word_count < criteria.min_word_count:
                visible = False
            if criteria.max_word_count is not None and item.word_count > criteria.max_word_count:
                visible = False
            item.visible = visible
        return items

    @staticmethod
    def apply_sorting(
        items: list[DocumentDisplayMetadata], sort: DocumentSort
    ) -> list[DocumentDisplayMetadata]:
        """Sort the list in place; documents without a date sort first ascending."""
        keys = {
            SortField.TITLE: lambda item: item.title.lower(),
            SortField.CREATED: lambda item: _sortable(item.created_at),
            SortField.UPDATED: lambda item: _sortable(item.updated_at),
            SortField.WORD_COUNT: lambda item: item.word_count,
            SortField.STATUS: lambda item: STATUS_ORDER[item.status],
        }
        items.sort(key=keys[sort.field], reverse=sort.direction == SortDirection.DESC)
        return items

    @staticmethod
    def get_collection_stats(items: list[DocumentDisplayMetadata]) -> CollectionStats:
        stats = CollectionStats(
            total=len(items),
            visible=sum(1 for item in items if item.visible),
            selected=sum(1 for item in items if item.selected and item.visible),
            total_word_count=sum(item.word_count for item in items),
            total_reading_time=sum(item.reading_time for item in items),
        )
        for item in items:
            stats.by_status[item.status] += 1
        if items:
            stats.average_word_count = round(stats.total_word_count / len(items))
        return stats


def _naive(moment: datetime) -> datetime:
    """Drop tzinfo after converting to UTC so mixed values compare."""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(UTC).replace(tzinfo=None)


def _sortable(moment: datetime | None) -> float:
    return _naive(moment).timestamp() if moment else float("-inf")
