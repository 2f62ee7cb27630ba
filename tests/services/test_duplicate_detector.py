"""
Tests for DuplicateDetector.

Notes are written with the real converter so classification is exercised
against the exact frontmatter the importer produces.
"""

import pytest

from granola_import.config import DetectorConfig
from granola_import.core.vault import InMemoryVault
from granola_import.models import FileRef, ImportStatus
from granola_import.services import DuplicateDetector
from granola_import.utils.exceptions import ConfigurationError, DetectorError, VaultError
from tests.builders import make_document


async def write_note(vault, converter, doc, extra_body: str = "") -> str:
    note = converter.convert(doc)
    await vault.create(note.filename, note.content + extra_body)
    return note.filename


class UnlistableVault(InMemoryVault):
    """Vault whose listing always fails."""

    def list_markdown_files(self):
        raise VaultError("permission denied")


class PartiallyReadableVault(InMemoryVault):
    """Vault that fails to read one specific file."""

    def __init__(self, broken: str, files: dict[str, str]):
        super().__init__(files)
        self.broken = broken

    async def read(self, file: FileRef) -> str:
        if file.path == self.broken:
            raise VaultError("read failed")
        return await super().read(file)


@pytest.mark.unit
class TestClassification:
    """Test NEW / EXISTS / UPDATED / CONFLICT verdicts."""

    async def test_new_document(self, detector, sample_document):
        result = await detector.check_document(sample_document)

        assert result.status == ImportStatus.NEW
        assert not result.requires_user_choice

    async def test_reimport_of_unchanged_document(self, vault, converter, detector, sample_document):
        """Test a note written by the converter is recognized as unchanged."""
        filename = await write_note(vault, converter, sample_document)

        result = await detector.check_document(sample_document)

        assert result.status == ImportStatus.EXISTS
        assert result.existing_file == FileRef(path=filename)

    async def test_equivalent_timestamp_formats_match(self, vault, converter, detector, sample_document):
        """Test timestamps are compared as instants."""
        await write_note(vault, converter, sample_document)
        same_instant = sample_document.model_copy(update={"updated_at": "2024-01-02T09:30:00.000Z"})

        result = await detector.check_document(same_instant)

        assert result.status == ImportStatus.EXISTS

    async def test_updated_document(self, vault, converter, detector, sample_document):
        await write_note(vault, converter, sample_document)
        newer = sample_document.model_copy(update={"updated_at": "2024-02-01T00:00:00Z"})

        result = await detector.check_document(newer)

        assert result.status == ImportStatus.UPDATED
        assert result.existing_file.path == "2024-01-01 - Weekly Sync.md"

    async def test_local_modification_is_a_conflict(self, vault, converter, detector, sample_document):
        """Test an edited note is never silently overwritten."""
        await write_note(vault, converter, sample_document, "\n\nSee [[Project Plan]]")

        result = await detector.check_document(sample_document)

        assert result.status == ImportStatus.CONFLICT
        assert result.requires_user_choice
        assert "Local modifications detected" in result.reason

    async def test_unrelated_file_with_same_name(self, vault, detector):
        """Test a non-Granola file at the computed filename."""
        await vault.create("2024-01-01 - Test.md", "# My own note\n")
        first = make_document(doc_id="a", title="Test")
        second = make_document(doc_id="b", title="Test")

        results = await detector.check_documents([first, second])

        for result in results.values():
            assert result.status == ImportStatus.CONFLICT
            assert "File already exists" in result.reason
            assert result.existing_file.path == "2024-01-01 - Test.md"

    async def test_filename_owned_by_another_document(self, vault, converter, detector):
        await write_note(vault, converter, make_document(doc_id="other", title="Weekly Sync"))

        result = await detector.check_document(make_document(doc_id="doc-1", title="Weekly Sync"))

        assert result.status == ImportStatus.CONFLICT
        assert "Filename conflict" in result.reason
        assert "other" in result.reason

    async def test_legacy_filename_collision(self, vault, detector, sample_document):
        """Test files named without a date prefix are also checked."""
        await vault.create("Weekly Sync.md", "hand written")

        result = await detector.check_document(sample_document)

        assert result.status == ImportStatus.CONFLICT

    async def test_note_without_updated_is_updated(self, vault, detector, sample_document):
        await vault.create("imported.md", "---\nid: doc-1\nsource: Granola\n---\n\nBody")

        result = await detector.check_document(sample_document)

        assert result.status == ImportStatus.UPDATED


@pytest.mark.unit
class TestVaultScan:
    """Test index building and error handling."""

    async def test_malformed_frontmatter_is_untracked(self, vault, detector, sample_document):
        await vault.create("broken.md", "---\nid: doc-1\nsource: Granola\nno closing delimiter")

        result = await detector.check_document(sample_document)

        assert result.status == ImportStatus.NEW
        assert detector.get_tracked_notes() == []

    async def test_unreadable_file_is_skipped(self, converter, sample_document):
        note = converter.convert(sample_document)
        vault = PartiallyReadableVault("bad.md", {"bad.md": "x", note.filename: note.content})
        detector = DuplicateDetector(vault)

        await detector.initialize()

        assert [tracked.granola_id for tracked in detector.get_tracked_notes()] == ["doc-1"]

    async def test_listing_failure_raises(self, sample_document):
        detector = DuplicateDetector(UnlistableVault())

        with pytest.raises(DetectorError) as exc_info:
            await detector.check_document(sample_document)

        assert str(exc_info.value).startswith("Failed to initialize duplicate detector")
        assert not detector.is_initialized

    async def test_initialize_is_idempotent_until_refresh(
        self, vault, converter, detector, sample_document
    ):
        """Test the index is a snapshot until refresh()."""
        await detector.initialize()
        await write_note(vault, converter, sample_document)
        await detector.initialize()

        assert (await detector.check_document(sample_document)).status == ImportStatus.NEW

        await detector.refresh()

        assert (await detector.check_document(sample_document)).status == ImportStatus.EXISTS

    async def test_statistics(self, vault, converter, detector):
        await write_note(
            vault, converter, make_document(doc_id="a", title="A", updated_at="2024-03-01T00:00:00Z")
        )
        await write_note(
            vault,
            converter,
            make_document(doc_id="b", title="B", updated_at="2024-01-15T00:00:00Z"),
            "\n\n## My Notes\n",
        )
        await detector.initialize()

        stats = detector.get_statistics()

        assert stats.total_granola_documents == 2
        assert stats.oldest_import == "2024-01-15T00:00:00Z"
        assert stats.newest_import == "2024-03-01T00:00:00Z"
        assert stats.documents_with_conflicts == 1

    async def test_backup_files_are_not_tracked(self, vault, converter, detector, sample_document):
        """Test backups carrying the note's frontmatter don't replace the note."""
        note = converter.convert(sample_document)
        await vault.create("2024-01-01 - Weekly Sync.backup-2024-02-01T00-00-00.md", note.content)
        newer = sample_document.model_copy(update={"updated_at": "2024-02-01T00:00:00Z"})
        await write_note(vault, converter, newer)

        result = await detector.check_document(newer)

        assert result.status == ImportStatus.EXISTS
        assert result.existing_file.path == "2024-01-01 - Weekly Sync.md"
        assert len(detector.get_tracked_notes()) == 1

    async def test_duplicate_ids_track_newest_copy(self, vault, converter, detector, sample_document):
        """Test the most recently updated file wins regardless of listing order."""
        newer = sample_document.model_copy(update={"updated_at": "2024-02-01T00:00:00Z"})
        await vault.create("2024-01-01 - Weekly Sync-1.md", converter.convert(newer).content)
        await write_note(vault, converter, sample_document)

        result = await detector.check_document(newer)

        assert result.status == ImportStatus.EXISTS
        assert result.existing_file.path == "2024-01-01 - Weekly Sync-1.md"

    async def test_duplicate_ids_with_same_version_track_shorter_path(
        self, vault, converter, detector, sample_document
    ):
        note = converter.convert(sample_document)
        await vault.create("2024-01-01 - Weekly Sync-1.md", note.content)
        await vault.create(note.filename, note.content)

        result = await detector.check_document(sample_document)

        assert result.existing_file.path == note.filename


@pytest.mark.unit
class TestModificationHeuristic:
    """Test the local-edit heuristic."""

    @pytest.mark.parametrize(
        "body",
        [
            "See [[Other]]",
            "![[diagram.png]]",
            "Tagged #followup here",
            "%% private %%",
            "```dataview\nLIST\n```",
            "A paragraph ^block-1",
            "## My Notes",
        ],
    )
    def test_vault_markup_counts_as_edit(self, detector, body):
        assert detector.is_locally_modified(body)

    @pytest.mark.parametrize(
        "body",
        [
            "## Agenda\n\nDiscuss the **roadmap**.",
            "See [docs](https://example.com/page#section)",
            "Issue &#35;12 and C# code",
        ],
    )
    def test_importer_output_is_not_an_edit(self, detector, body):
        assert not detector.is_locally_modified(body)

    def test_word_count_threshold(self, vault):
        detector = DuplicateDetector(vault, detector=DetectorConfig(word_count_threshold=5))

        assert detector.is_locally_modified("one two three four five six")
        assert not detector.is_locally_modified("one two three")

    def test_ignored_markup(self, vault):
        """Test the importer's own task tag is not treated as an edit."""
        detector = DuplicateDetector(vault, ignored_markup=["#tasks"])

        assert not detector.is_locally_modified("- [ ] Ship\n\n#tasks")
        assert detector.is_locally_modified("- [ ] Ship\n\n#later")

    def test_checks_can_be_disabled(self, vault):
        detector = DuplicateDetector(vault, detector=DetectorConfig(check_modifications=False))

        assert not detector.is_locally_modified("See [[Other]]")

    def test_invalid_pattern_is_rejected(self, vault):
        with pytest.raises(ConfigurationError):
            DuplicateDetector(vault, detector=DetectorConfig(markup_patterns=["[unclosed"]))
