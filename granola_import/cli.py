"""
Command line entry point.

Reads a JSON export of Granola documents, classifies them against a vault
and optionally imports them.

Usage:
    granola-import export.json --vault ~/Notes                  # Show classification
    granola-import export.json --vault ~/Notes --import         # Import NEW/UPDATED
    granola-import export.json --vault ~/Notes --import --strategy update --on-conflict overwrite
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from granola_import.config import Config
from granola_import.core.converter import MarkdownConverter
from granola_import.core.vault import VaultFactory
from granola_import.models import (
    ConflictResolution,
    DocumentDisplayMetadata,
    FileRef,
    ImportProgress,
    ImportStatus,
    ImportStrategy,
    MergeResolution,
    OverwriteResolution,
    SkipResolution,
    SourceDocument,
)
from granola_import.services import (
    DocumentMetadataService,
    DuplicateDetector,
    SelectiveImportManager,
)
from granola_import.utils import GranolaImportError, ValidationError, get_logger, setup_logging

logger = get_logger(__name__)

CONFLICT_CHOICES = {
    "skip": lambda: SkipResolution(reason="Conflict skipped (non-interactive)"),
    "overwrite": lambda: OverwriteResolution(create_backup=True),
    "merge": lambda: MergeResolution(),
}


def load_documents(path: Path) -> list[SourceDocument]:
    """
    Load documents from a JSON file.

    Accepts a list of documents or an API response of the form ``{"docs": [...]}``.

    Raises:
        ValidationError: If the file is not valid JSON or a document is malformed
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ValidationError(f"Cannot read documents from {path}: {e}") from e

    raw_docs = data.get("docs", []) if isinstance(data, dict) else data
    if not isinstance(raw_docs, list):
        raise ValidationError(f"Invalid document export in {path}: expected a list")

    try:
        return [SourceDocument.model_validate(raw) for raw in raw_docs]
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid document in {path}: {e}") from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="granola-import", description="Import Granola notes into a Markdown vault"
    )
    parser.add_argument("export", type=Path, help="JSON file with Granola documents")
    parser.add_argument("--vault", help="Vault root directory (overrides config)")
    parser.add_argument("--config", type=Path, help="YAML configuration file")
    parser.add_argument("--import", dest="do_import", action="store_true", help="Run the import")
    parser.add_argument(
        "--strategy",
        choices=[strategy.value for strategy in ImportStrategy],
        help="What to do when the target file exists",
    )
    parser.add_argument(
        "--on-conflict",
        choices=sorted(CONFLICT_CHOICES),
        default="skip",
        help="Resolution applied to conflicts (default: skip)",
    )
    parser.add_argument("--folder", help="Vault folder for new notes")
    parser.add_argument("--log-level", help="Log level (overrides config)")
    return parser


def print_classification(items: list[DocumentDisplayMetadata]) -> None:
    for item in items:
        marker = "x" if item.selected else " "
        print(f"[{marker}] {item.status.value:<8} {item.title}  ({item.import_status.reason})")


def print_progress(progress: ImportProgress) -> None:
    if progress.total:
        print(f"\r{progress.percentage:3d}% {progress.message}", end="", file=sys.stderr)


async def run(args: argparse.Namespace) -> int:
    config = Config.from_env_or_yaml(args.config)
    if args.vault:
        config.vault.path = args.vault
    if args.strategy:
        config.importer.strategy = ImportStrategy(args.strategy)
    if args.folder is not None:
        config.importer.default_folder = args.folder
    if args.log_level:
        config.logging.level = args.log_level
    setup_logging(**config.logging.model_dump())

    vault = VaultFactory.create(config.vault)
    converter = MarkdownConverter.from_config(config)
    ignored = [config.action_items.task_tag_name] if config.action_items.add_task_tag else []
    detector = DuplicateDetector(
        vault, content=config.content, detector=config.detector, ignored_markup=ignored
    )
    metadata_service = DocumentMetadataService(
        config.metadata, skip_empty_documents=config.importer.skip_empty_documents
    )

    documents = load_documents(args.export)
    classifications = await detector.check_documents(documents)
    items = metadata_service.extract_bulk_metadata(documents, classifications)
    print_classification(items)

    if not args.do_import:
        return 0

    make_resolution = CONFLICT_CHOICES[args.on_conflict]
    if args.on_conflict != "skip":
        for item in items:
            if item.status == ImportStatus.CONFLICT:
                item.selected = True

    async def resolve(
        document: SourceDocument, metadata: DocumentDisplayMetadata, existing: FileRef | None
    ) -> ConflictResolution:
        return make_resolution()

    manager = SelectiveImportManager(vault, converter, resolver=resolve)
    progress = await manager.import_documents(
        items, documents, config.importer.to_options(), on_progress=print_progress
    )
    print(file=sys.stderr)
    print(progress.message)

    for failed in manager.get_failed_documents():
        print(f"  failed: {failed.metadata.title}: {failed.user_message} ({failed.error})")
    return 1 if progress.failed else 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return asyncio.run(run(args))
    except GranolaImportError as e:
        logger.error(f"Import failed: {e.message}")
        print(f"Error: {e.message}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
