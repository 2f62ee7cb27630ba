"""
Selective Import Manager - Runs an import batch over selected documents.

Handles:
- Sequential conversion and vault writes with per-document progress
- Conflict resolution through an external resolver
- Skip / update / create-new strategies for filename collisions
- Cooperative cancellation, stop-on-error and retry of failed documents
- Error categorization with user-facing messages
"""

import asyncio
import re
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime, timedelta

from granola_import.core.converter.converter import MarkdownConverter
from granola_import.core.converter.frontmatter import split_frontmatter
from granola_import.core.vault.base import (
    BACKUP_MARKER,
    Vault,
    join_path,
    normalize_path,
    parent_folder,
)
from granola_import.models.classification import ImportStatus
from granola_import.models.document import SourceDocument
from granola_import.models.metadata import DocumentDisplayMetadata
from granola_import.models.note import ConvertedNote
from granola_import.models.progress import (
    TERMINAL_STATUSES,
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
)
from granola_import.models.vault import FileRef
from granola_import.utils.exceptions import ConflictResolutionError, ImportInProgressError
from granola_import.utils.logger import get_logger

ConflictResolver = Callable[
    [SourceDocument, DocumentDisplayMetadata, FileRef | None], Awaitable[ConflictResolution]
]
ProgressCallback = Callable[[ImportProgress], None]
DocumentProgressCallback = Callable[[DocumentProgress], None]

MERGE_SEPARATOR = "\n\n---\n\n"
CANCELLED_MESSAGE = "Import cancelled"
COLLISION_REASONS = ("File already exists", "Filename conflict")

# Checked in order; the first category with a matching keyword wins
ERROR_KEYWORDS: list[tuple[ErrorCategory, tuple[str, ...]]] = [
    (ErrorCategory.PERMISSION, ("permission", "access denied", "eacces", "eperm", "read-only")),
    (
        ErrorCategory.NETWORK,
        ("network", "timeout", "timed out", "connection", "econn", "fetch", "rate limit"),
    ),
    (ErrorCategory.VALIDATION, ("validation", "invalid", "malformed", "missing required")),
    (ErrorCategory.CONVERSION, ("convert", "conversion", "parse", "render")),
    (
        ErrorCategory.FILESYSTEM,
        ("file", "folder", "directory", "path", "enoent", "eexist", "disk", "vault", "write"),
    ),
]

USER_MESSAGES: dict[ErrorCategory, str] = {
    ErrorCategory.VALIDATION: "The document has an unexpected format and could not be imported.",
    ErrorCategory.CONVERSION: "The document content could not be converted to Markdown.",
    ErrorCategory.FILESYSTEM: "The note could not be written to the vault.",
    ErrorCategory.PERMISSION: "Permission denied while writing to the vault.",
    ErrorCategory.NETWORK: "A network problem interrupted the import. Try again later.",
    ErrorCategory.UNKNOWN: "An unexpected error occurred while importing the document.",
}


def categorize_error(error: BaseException) -> ErrorCategory:
    """Classify an error by keywords in its type name and message."""
    text = f"{type(error).__name__}: {error}".lower()
    for category, keywords in ERROR_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return category
    return ErrorCategory.UNKNOWN


def user_message(category: ErrorCategory) -> str:
    return USER_MESSAGES[category]


def backup_path(file: FileRef, now: datetime | None = None) -> str:
    """``{folder}/{basename}.backup-{timestamp}.md`` next to the original file."""
    stamp = re.sub(r"[:.]", "-", (now or datetime.now(UTC)).isoformat())
    return join_path(file.parent, f"{file.basename}{BACKUP_MARKER}{stamp}.md")


def merge_contents(existing: str, incoming: str, strategy: MergeStrategy) -> str:
    """
    Merge two notes, keeping the existing frontmatter.

    Bodies are joined with a horizontal rule; ``append`` puts the incoming
    body after the existing one, ``prepend`` before it.
    """
    existing_block, existing_body = split_frontmatter(existing)
    _, incoming_body = split_frontmatter(incoming)

    if strategy == MergeStrategy.PREPEND:
        body = incoming_body.rstrip() + MERGE_SEPARATOR + existing_body.lstrip()
    else:
        body = existing_body.rstrip() + MERGE_SEPARATOR + incoming_body.lstrip()
    return f"{existing_block}\n{body}" if existing_block else body


class SelectiveImportManager:
    """
    Imports a user-selected subset of documents into the vault.

    One batch runs at a time. Documents are processed sequentially; the only
    suspension points are vault I/O and the conflict resolver.
    """

    def __init__(
        self,
        vault: Vault,
        converter: MarkdownConverter,
        resolver: ConflictResolver | None = None,
        logger=None,
    ):
        """
        Initialize import manager.

        Args:
            vault: Vault notes are written to
            converter: Converter for source documents
            resolver: Async callable deciding how to handle conflicts
            logger: Logger to use (defaults to the module logger)
        """
        self.vault = vault
        self.converter = converter
        self.resolver = resolver
        self.logger = logger or get_logger(__name__)

        self._progress = ImportProgress()
        self._documents: dict[str, DocumentProgress] = {}
        self._failed: list[FailedDocument] = []
        self._is_running = False
        self._is_cancelled = False
        self._on_progress: ProgressCallback | None = None
        self._on_document_progress: DocumentProgressCallback | None = None

    # State accessors

    @property
    def is_running(self) -> bool:
        return self._is_running

    def get_progress(self) -> ImportProgress:
        return self._progress.model_copy()

    def get_document_progress(self, document_id: str) -> DocumentProgress | None:
        progress = self._documents.get(document_id)
        return progress.model_copy() if progress else None

    def get_all_document_progress(self) -> list[DocumentProgress]:
        return [progress.model_copy() for progress in self._documents.values()]

    def get_failed_documents(self) -> list[FailedDocument]:
        return [failed.model_copy(deep=True) for failed in self._failed]

    def reset(self) -> None:
        """Forget the last run. Not allowed while a batch is running."""
        if self._is_running:
            raise ImportInProgressError("Cannot reset while an import is in progress")
        self._progress = ImportProgress()
        self._documents = {}
        self._failed = []
        self._is_cancelled = False

    # Batch control

    async def import_documents(
        self,
        selected: list[DocumentDisplayMetadata],
        documents: list[SourceDocument],
        options: ImportOptions | None = None,
        on_progress: ProgressCallback | None = None,
        on_document_progress: DocumentProgressCallback | None = None,
    ) -> ImportProgress:
        """
        Import the selected documents.

        Args:
            selected: Metadata of the documents offered for import; only
                entries with ``selected = True`` are imported
            documents: Source documents, matched to metadata by id
            options: Run options
            on_progress: Called with a batch progress snapshot at every transition
            on_document_progress: Called with a document progress snapshot at
                every transition

        Returns:
            Final batch progress

        Raises:
            ImportInProgressError: If another batch is running
        """
        if self._is_running:
            raise ImportInProgressError("Import already in progress")

        options = options or ImportOptions()
        by_id = {doc.id: doc for doc in documents}
        queue = [
            (metadata, by_id[metadata.id])
            for metadata in selected
            if metadata.selected and metadata.id in by_id
        ]

        self._is_running = True
        self._is_cancelled = False
        self._on_progress = on_progress
        self._on_document_progress = on_document_progress
        self._failed = []
        self._documents = {
            doc.id: DocumentProgress(id=doc.id, title=metadata.title) for metadata, doc in queue
        }
        self._progress = ImportProgress(
            total=len(queue),
            is_running=True,
            start_time=datetime.now(UTC),
            message=f"Starting import of {len(queue)} documents",
        )
        self.logger.info(f"Starting import of {len(queue)} selected documents")
        self._emit_progress()

        try:
            for index, (metadata, doc) in enumerate(queue):
                if self._is_cancelled:
                    self._finish_document(
                        doc.id,
                        DocumentImportStatus.SKIPPED,
                        CANCELLED_MESSAGE,
                        skip_reason=SkipReason.USER_CANCELLED,
                    )
                    continue

                await self._import_one(doc, metadata, options)

                if (
                    options.delay_between_imports > 0
                    and index < len(queue) - 1
                    and not self._is_cancelled
                ):
                    await asyncio.sleep(options.delay_between_imports)
        finally:
            self._is_running = False
            self._finalize()

        return self.get_progress()

    def cancel(self) -> None:
        """
        Request cancellation.

        The document in flight completes; every document still queued is
        marked skipped.
        """
        if not self._is_running or self._is_cancelled:
            return
        self._is_cancelled = True
        self._progress.is_cancelled = True
        self._progress.message = "Cancelling import..."
        self.logger.info("Import cancellation requested")
        self._emit_progress()

    async def retry_failed_imports(self, options: ImportOptions | None = None) -> ImportProgress:
        """
        Import the documents that failed in the last run again.

        The failure list is restored if the new run cannot start.
        """
        snapshot = self._failed
        if not snapshot:
            return self.get_progress()

        documents = [failed.document.model_copy(deep=True) for failed in snapshot]
        metadata = [
            failed.metadata.model_copy(update={"selected": True}, deep=True) for failed in snapshot
        ]
        self.logger.info(f"Retrying {len(snapshot)} failed documents")

        try:
            return await self.import_documents(
                metadata,
                documents,
                options,
                on_progress=self._on_progress,
                on_document_progress=self._on_document_progress,
            )
        except Exception:
            if not self._failed:
                self._failed = snapshot
            raise

    # Per-document processing

    async def _import_one(
        self, doc: SourceDocument, metadata: DocumentDisplayMetadata, options: ImportOptions
    ) -> None:
        progress = self._documents[doc.id]
        progress.start_time = datetime.now(UTC)
        status = metadata.import_status

        try:
            if options.skip_empty_documents and metadata.is_empty:
                self._finish_document(
                    doc.id,
                    DocumentImportStatus.SKIPPED,
                    "Skipped empty document",
                    skip_reason=SkipReason.EMPTY_DOCUMENT,
                )
                return

            if status.status == ImportStatus.EXISTS and options.strategy == ImportStrategy.SKIP:
                self._finish_document(
                    doc.id,
                    DocumentImportStatus.SKIPPED,
                    "Document already exists",
                    skip_reason=SkipReason.ALREADY_EXISTS,
                    file=status.existing_file,
                )
                return

            self._update_document(
                doc.id, DocumentImportStatus.IMPORTING, 10, "Converting to Markdown..."
            )
            note = self.converter.convert(doc)

            if note.is_empty and options.skip_empty_documents:
                self._finish_document(
                    doc.id, DocumentImportStatus.EMPTY, "Document has no content to import"
                )
                return

            if status.requires_user_choice or status.status == ImportStatus.CONFLICT:
                await self._resolve_conflict(doc, metadata, note, options)
            else:
                await self._write_with_strategy(doc, metadata, note, options)

        except Exception as e:
            self._record_failure(doc, metadata, e)
            if options.stop_on_error:
                self.logger.warning("Stopping import after failure (stop_on_error)")
                self.cancel()

    async def _resolve_conflict(
        self,
        doc: SourceDocument,
        metadata: DocumentDisplayMetadata,
        note: ConvertedNote,
        options: ImportOptions,
    ) -> None:
        if self.resolver is None:
            raise ConflictResolutionError(
                f"No conflict resolver configured for {doc.id}",
                context={"document_id": doc.id},
            )

        self._update_document(doc.id, DocumentImportStatus.IMPORTING, 40, "Resolving conflict...")
        existing = metadata.import_status.existing_file
        resolution = await self.resolver(doc, metadata, existing)

        if isinstance(resolution, SkipResolution):
            collision = metadata.import_status.reason.startswith(COLLISION_REASONS)
            self._finish_document(
                doc.id,
                DocumentImportStatus.SKIPPED,
                resolution.reason,
                skip_reason=SkipReason.FILENAME_COLLISION if collision else SkipReason.OTHER,
                file=existing,
            )
            return

        self._update_document(doc.id, DocumentImportStatus.IMPORTING, 70, "Writing to vault...")
        target = existing or self.vault.get_file_by_path(self._target_path(note, options))

        if isinstance(resolution, OverwriteResolution):
            if target is None:
                file = await self._create(self._target_path(note, options), note.content, options)
            else:
                if resolution.create_backup:
                    await self._backup(target)
                await self.vault.modify(target, note.content)
                file = target
        elif isinstance(resolution, MergeResolution):
            if target is None:
                file = await self._create(self._target_path(note, options), note.content, options)
            else:
                existing_content = await self.vault.read(target)
                await self.vault.modify(
                    target, merge_contents(existing_content, note.content, resolution.strategy)
                )
                file = target
        elif isinstance(resolution, RenameResolution):
            path = normalize_path(resolution.new_filename)
            if not path.endswith(".md"):
                path += ".md"
            file = await self._create(path, note.content, options)
        else:
            raise ConflictResolutionError(
                f"Unknown resolution action: {getattr(resolution, 'action', resolution)}",
                context={"document_id": doc.id},
            )

        self._finish_document(
            doc.id, DocumentImportStatus.COMPLETED, "Import completed successfully", file=file
        )

    async def _write_with_strategy(
        self,
        doc: SourceDocument,
        metadata: DocumentDisplayMetadata,
        note: ConvertedNote,
        options: ImportOptions,
    ) -> None:
        self._update_document(doc.id, DocumentImportStatus.IMPORTING, 70, "Writing to vault...")

        status = metadata.import_status
        path = self._target_path(note, options)
        existing = None
        if status.status in (ImportStatus.UPDATED, ImportStatus.EXISTS) and status.existing_file:
            existing = self.vault.get_file_by_path(status.existing_file.path)
        if existing is None:
            existing = self.vault.get_file_by_path(path)

        if existing is None:
            file = await self._create(path, note.content, options)
        elif options.strategy == ImportStrategy.SKIP:
            self._finish_document(
                doc.id,
                DocumentImportStatus.SKIPPED,
                "Document already exists",
                skip_reason=SkipReason.ALREADY_EXISTS,
                file=existing,
            )
            return
        elif options.strategy == ImportStrategy.UPDATE:
            if options.create_backups:
                await self._backup(existing)
            await self.vault.modify(existing, note.content)
            file = existing
        else:
            file = await self._create(self._unique_path(path), note.content, options)

        self._finish_document(
            doc.id, DocumentImportStatus.COMPLETED, "Import completed successfully", file=file
        )

    # Vault helpers

    @staticmethod
    def _target_path(note: ConvertedNote, options: ImportOptions) -> str:
        return join_path(options.default_folder, note.filename)

    def _unique_path(self, path: str) -> str:
        stem = path[: -len(".md")] if path.endswith(".md") else path
        counter = 1
        while self.vault.get_file_by_path(f"{stem}-{counter}.md") is not None:
            counter += 1
        return f"{stem}-{counter}.md"

    async def _create(self, path: str, content: str, options: ImportOptions) -> FileRef:
        folder = parent_folder(path)
        if folder and options.create_folders and not self.vault.folder_exists(folder):
            await self.vault.create_folder(folder)
        return await self.vault.create(path, content)

    async def _backup(self, file: FileRef) -> FileRef:
        content = await self.vault.read(file)
        backup = await self.vault.create(backup_path(file), content)
        self.logger.info(f"Backed up {file.path} to {backup.path}")
        return backup

    # Progress bookkeeping

    def _update_document(
        self, document_id: str, status: DocumentImportStatus, progress: int, message: str
    ) -> None:
        document = self._documents[document_id]
        document.status = status
        document.progress = progress
        document.message = message
        self._emit_document(document)

    def _finish_document(
        self,
        document_id: str,
        status: DocumentImportStatus,
        message: str,
        skip_reason: SkipReason | None = None,
        file: FileRef | None = None,
        error: str | None = None,
        category: ErrorCategory | None = None,
    ) -> None:
        document = self._documents[document_id]
        document.status = status
        document.progress = 100
        document.message = message
        document.skip_reason = skip_reason
        document.file = file
        document.error = error
        document.error_category = category
        document.end_time = datetime.now(UTC)

        counters = {
            DocumentImportStatus.COMPLETED: "completed",
            DocumentImportStatus.FAILED: "failed",
            DocumentImportStatus.SKIPPED: "skipped",
            DocumentImportStatus.EMPTY: "empty",
        }
        field_name = counters[status]
        setattr(self._progress, field_name, getattr(self._progress, field_name) + 1)
        self._update_rates()

        if status == DocumentImportStatus.COMPLETED:
            self.logger.info(f"Imported {document_id} to {file.path if file else '?'}")
        else:
            self.logger.debug(f"Document {document_id} finished as {status.value}: {message}")

        self._emit_document(document)
        self._emit_progress()

    def _record_failure(
        self, doc: SourceDocument, metadata: DocumentDisplayMetadata, error: Exception
    ) -> None:
        category = categorize_error(error)
        message = user_message(category)
        self.logger.error(
            f"Failed to import document {doc.id} ({category.value}): {error}",
        )
        self._failed.append(
            FailedDocument(
                document=doc.model_copy(deep=True),
                metadata=metadata.model_copy(deep=True),
                error=str(error),
                error_category=category,
                user_message=message,
            )
        )
        self._finish_document(
            doc.id,
            DocumentImportStatus.FAILED,
            message,
            error=str(error),
            category=category,
        )

    def _update_rates(self) -> None:
        progress = self._progress
        processed = progress.processed
        progress.percentage = round(processed / progress.total * 100) if progress.total else 100
        progress.message = f"Processed {processed} of {progress.total} documents"

        if progress.start_time is None or processed == 0:
            return
        elapsed = (datetime.now(UTC) - progress.start_time).total_seconds()
        if elapsed <= 0:
            return
        progress.processing_rate = processed / elapsed
        remaining = progress.total - processed
        progress.estimated_completion = datetime.now(UTC) + timedelta(
            seconds=remaining / progress.processing_rate
        )

    def _finalize(self) -> None:
        progress = self._progress

        # Documents the loop never reached stay visible as skipped
        for document in self._documents.values():
            if document.status not in TERMINAL_STATUSES:
                document.status = DocumentImportStatus.SKIPPED
                document.message = CANCELLED_MESSAGE
                document.skip_reason = SkipReason.USER_CANCELLED
                progress.skipped += 1

        progress.is_running = False
        progress.is_cancelled = self._is_cancelled
        progress.end_time = datetime.now(UTC)
        progress.percentage = (
            round(progress.processed / progress.total * 100) if progress.total else 100
        )
        progress.estimated_completion = None

        if self._is_cancelled:
            progress.message = (
                f"Import cancelled: {progress.completed} successful, "
                f"{progress.failed} failed, {progress.skipped} skipped"
            )
        else:
            progress.message = (
                f"Import completed: {progress.completed} successful, "
                f"{progress.failed} failed, {progress.skipped} skipped"
            )

        self.logger.info(progress.message)
        self._emit_progress()

    def _emit_progress(self) -> None:
        if self._on_progress is None:
            return
        try:
            self._on_progress(self._progress.model_copy())
        except Exception as e:
            self.logger.warning(f"Progress callback failed: {e}")

    def _emit_document(self, document: DocumentProgress) -> None:
        if self._on_document_progress is None:
            return
        try:
            self._on_document_progress(document.model_copy())
        except Exception as e:
            self.logger.warning(f"Document progress callback failed: {e}")

    # Reporting

    def get_import_summary(self) -> ImportSummary:
        """Group the last run's failures by category and skips by reason."""
        summary = ImportSummary(
            total=self._progress.total,
            completed=self._progress.completed,
            failed=self._progress.failed,
            skipped=self._progress.skipped,
            empty=self._progress.empty,
        )
        for document in self._documents.values():
            if document.status == DocumentImportStatus.FAILED:
                category = document.error_category or ErrorCategory.UNKNOWN
                summary.failures_by_category.setdefault(category, []).append(document.id)
            elif document.status == DocumentImportStatus.SKIPPED:
                reason = document.skip_reason or SkipReason.OTHER
                summary.skips_by_reason.setdefault(reason, []).append(document.id)
        return summary
