"""
Tests for granola_import model classes.

Test Organization:
1. Source models: RichTextNode, SourceDocument
2. Converter output: ConvertedNote, NoteFrontmatter
3. Resolver answers: ConflictResolution union
4. Run state: ImportProgress, CollectionStats
"""

import pytest
from pydantic import TypeAdapter, ValidationError

from granola_import.models import (
    CollectionStats,
    ConflictResolution,
    ConvertedNote,
    DocumentDisplayMetadata,
    ImportClassification,
    ImportProgress,
    ImportStatus,
    MergeResolution,
    MergeStrategy,
    NoteFrontmatter,
    RichTextNode,
    SkipResolution,
    SourceDocument,
)
from granola_import.models.rich_text import is_valid_doc
from tests.builders import doc_tree, paragraph, text


class TestRichTextNode:
    """Tests for the rich-text tree model."""

    def test_nested_parsing(self):
        """Test a tree parses recursively with marks."""
        node = RichTextNode.model_validate(doc_tree(paragraph(text("x", "strong"))))

        leaf = node.children[0].children[0]
        assert leaf.text == "x"
        assert leaf.mark_types() == {"strong"}

    def test_leaf_has_no_children(self):
        assert RichTextNode(type="text", text="x").children == []

    def test_unknown_keys_are_kept(self):
        node = RichTextNode.model_validate({"type": "mention", "custom": 1})

        assert node.model_extra == {"custom": 1}

    def test_is_valid_doc(self):
        assert is_valid_doc(RichTextNode.model_validate(doc_tree(paragraph())))
        assert not is_valid_doc(RichTextNode(type="doc", content=[]))
        assert not is_valid_doc(RichTextNode(type="paragraph", content=[]))
        assert not is_valid_doc("doc")


class TestSourceDocument:
    """Tests for SourceDocument."""

    def test_minimal(self):
        doc = SourceDocument(id="d", created_at="2024-01-01", updated_at="2024-01-01")

        assert doc.notes is None
        assert doc.display_title == ""

    def test_empty_id_rejected(self):
        with pytest.raises(ValidationError):
            SourceDocument(id="", created_at="2024-01-01", updated_at="2024-01-01")

    def test_panel_variants(self):
        """Test the panel accepts a tree or HTML markup."""
        tree = SourceDocument.model_validate(
            {
                "id": "d",
                "created_at": "x",
                "updated_at": "x",
                "last_viewed_panel": {"content": doc_tree(paragraph(text("a")))},
            }
        )
        markup = SourceDocument.model_validate(
            {
                "id": "d",
                "created_at": "x",
                "updated_at": "x",
                "last_viewed_panel": {"content": "<p>a</p>"},
            }
        )

        assert isinstance(tree.last_viewed_panel.content, RichTextNode)
        assert markup.last_viewed_panel.content == "<p>a</p>"

    def test_extra_fields_preserved(self):
        doc = SourceDocument.model_validate(
            {"id": "d", "created_at": "x", "updated_at": "x", "workspace_id": "w"}
        )

        assert doc.model_dump()["workspace_id"] == "w"


class TestConvertedNote:
    """Tests for converter output models."""

    def test_frozen(self):
        note = ConvertedNote(
            filename="a.md", content="---\n---\n", frontmatter=NoteFrontmatter(created="x")
        )

        with pytest.raises(ValidationError):
            note.filename = "b.md"

    def test_frontmatter_source_constant(self):
        assert NoteFrontmatter(created="x").source == "Granola"


class TestConflictResolution:
    """Tests for the resolver answer union."""

    def test_discriminated_parsing(self):
        adapter = TypeAdapter(ConflictResolution)

        assert isinstance(adapter.validate_python({"action": "skip"}), SkipResolution)
        merge = adapter.validate_python({"action": "merge", "strategy": "prepend"})
        assert isinstance(merge, MergeResolution)
        assert merge.strategy == MergeStrategy.PREPEND

    def test_unknown_action_rejected(self):
        with pytest.raises(ValidationError):
            TypeAdapter(ConflictResolution).validate_python({"action": "explode"})


class TestRunState:
    """Tests for progress and statistics models."""

    def test_processed(self):
        progress = ImportProgress(total=5, completed=1, failed=1, skipped=1, empty=1)

        assert progress.processed == 4

    def test_metadata_status(self):
        metadata = DocumentDisplayMetadata(
            id="d",
            title="T",
            import_status=ImportClassification(status=ImportStatus.UPDATED),
        )

        assert metadata.status == ImportStatus.UPDATED

    def test_collection_stats_counts_every_status(self):
        assert CollectionStats().by_status == {status: 0 for status in ImportStatus}
