"""
Markdown converter.

Turns a Granola SourceDocument into a ConvertedNote: picks the best content
representation, renders it to Markdown, builds frontmatter and a filename.
"""

from granola_import.config import ActionItemsConfig, AttendeeTagsConfig, Config, ContentConfig
from granola_import.core.converter.attendees import attendee_tags
from granola_import.core.converter.content_sources import (
    ContentSource,
    available_sources,
    document_sources,
    select_sources,
)
from granola_import.core.converter.filename import filename_for_document
from granola_import.core.converter.frontmatter import render_frontmatter
from granola_import.core.converter.nodes import render_tree
from granola_import.core.converter.tasks import convert_action_items
from granola_import.models.document import SourceDocument
from granola_import.models.note import (
    ContentSourceKind,
    ConvertedNote,
    DocumentValidation,
    NoteFrontmatter,
)
from granola_import.models.rich_text import RichTextNode
from granola_import.utils.exceptions import ConversionError
from granola_import.utils.html import decode_html_entities, html_to_markdown, looks_like_html
from granola_import.utils.logger import get_logger
from granola_import.utils.text import extract_text_from_content, parse_timestamp, same_timestamp

GRANOLA_URL_TEMPLATE = "https://notes.granola.ai/d/{id}"


class MarkdownConverter:
    """
    Converts Granola documents to Markdown notes.

    Conversion never fails on malformed rich text: broken nodes are replaced
    by inline error markers and a document without any content gets a
    placeholder body that still names it.
    """

    def __init__(
        self,
        content: ContentConfig | None = None,
        action_items: ActionItemsConfig | None = None,
        attendee_tags: AttendeeTagsConfig | None = None,
        logger=None,
    ):
        """
        Initialize converter.

        Args:
            content: Content selection, frontmatter and filename options
            action_items: Action item to task conversion options
            attendee_tags: Attendee tag options
            logger: Logger to use (defaults to the module logger)
        """
        self.content = content or ContentConfig()
        self.action_items = action_items or ActionItemsConfig()
        self.attendee_tags = attendee_tags or AttendeeTagsConfig()
        self.logger = logger or get_logger(__name__)

    @classmethod
    def from_config(cls, config: Config, logger=None) -> "MarkdownConverter":
        """Create a converter from the main configuration."""
        return cls(
            content=config.content,
            action_items=config.action_items,
            attendee_tags=config.attendee_tags,
            logger=logger,
        )

    def update_settings(
        self,
        content: ContentConfig | None = None,
        action_items: ActionItemsConfig | None = None,
        attendee_tags: AttendeeTagsConfig | None = None,
    ) -> None:
        """Replace any of the option groups used for later conversions."""
        if content is not None:
            self.content = content
        if action_items is not None:
            self.action_items = action_items
        if attendee_tags is not None:
            self.attendee_tags = attendee_tags

    # Public API

    def convert(self, doc: SourceDocument) -> ConvertedNote:
        """
        Convert a document to a note.

        Args:
            doc: Source document

        Returns:
            ConvertedNote with filename, full content and frontmatter

        Raises:
            ConversionError: If an unexpected failure escapes the renderers
        """
        try:
            body, source = self.render_body(doc)
            is_empty = source == ContentSourceKind.PLACEHOLDER and same_timestamp(
                doc.created_at, doc.updated_at
            )
            if source != ContentSourceKind.PLACEHOLDER:
                body = convert_action_items(body, self.action_items)

            frontmatter = self.build_frontmatter(doc)
            content = f"{render_frontmatter(frontmatter)}\n{body}"
            filename = self.generate_filename(doc)
        except ConversionError:
            raise
        except Exception as e:
            raise ConversionError(
                f"Failed to convert document {doc.id}: {e}",
                context={"document_id": doc.id},
            ) from e

        self.logger.debug(f"Converted document {doc.id} from {source.value} content to {filename}")
        return ConvertedNote(
            filename=filename,
            content=content,
            frontmatter=frontmatter,
            body=body,
            content_source=source,
            is_empty=is_empty,
        )

    def render_body(self, doc: SourceDocument) -> tuple[str, ContentSourceKind]:
        """
        Render the Markdown body from the first source that yields text.

        Returns:
            (body, kind of the source used); PLACEHOLDER when nothing did
        """
        for source in select_sources(doc, self.content.content_priority):
            markdown = self._render_source(doc, source)
            if markdown:
                return markdown, source.kind
            self.logger.debug(
                f"Content source {source.kind.value} of document {doc.id} rendered empty, "
                "trying next source"
            )

        self.logger.warning(f"No extractable content in document {doc.id}, using placeholder")
        return self.placeholder_body(doc), ContentSourceKind.PLACEHOLDER

    def build_frontmatter(self, doc: SourceDocument) -> NoteFrontmatter:
        """Frontmatter for a document according to the current options."""
        enhanced = self.content.include_enhanced_frontmatter
        tags = attendee_tags(doc.people, self.attendee_tags)
        return NoteFrontmatter(
            id=doc.id if enhanced else None,
            title=decode_html_entities(doc.title or "Untitled") if enhanced else None,
            created=doc.created_at,
            updated=doc.updated_at if enhanced else None,
            granola_url=(
                GRANOLA_URL_TEMPLATE.format(id=doc.id) if self.content.include_granola_url else None
            ),
            tags=[tag.lstrip("#") for tag in tags] or None,
        )

    def generate_filename(self, doc: SourceDocument) -> str:
        """Filename for a document according to the current options."""
        return filename_for_document(doc, self.content)

    def validate_document(self, doc: SourceDocument) -> DocumentValidation:
        """Report usable content sources and structural warnings."""
        result = DocumentValidation(available_content_sources=available_sources(doc))

        if not doc.created_at:
            result.warnings.append("Document missing created_at timestamp")
        elif parse_timestamp(doc.created_at) is None:
            result.warnings.append(f"Invalid created_at date format: {doc.created_at}")

        for source in document_sources(doc).values():
            if source.is_usable and extract_text_from_content(source.value):
                result.is_empty = False
                break

        if not result.available_content_sources:
            result.warnings.append("No valid content sources detected in document")
        return result

    @staticmethod
    def placeholder_body(doc: SourceDocument) -> str:
        title = doc.display_title or "Untitled"
        return (
            f"# {title}\n\n"
            "*This document appears to have no extractable content. "
            "It may be empty or still being processed in Granola.*\n\n"
            f"- Document ID: {doc.id}\n"
            f"- Created: {doc.created_at}\n"
            f"- Updated: {doc.updated_at}"
        )

    # Internals

    def _render_source(self, doc: SourceDocument, source: ContentSource) -> str:
        if isinstance(source.value, RichTextNode):
            result = render_tree(source.value)
            if result.errors:
                self.logger.warning(
                    f"Recovered {len(result.errors)} node error(s) in document {doc.id}: "
                    f"{'; '.join(result.errors)}"
                )
            return result.markdown

        text = source.value or ""
        if source.kind == ContentSourceKind.PANEL and looks_like_html(text):
            return html_to_markdown(text)
        return text.strip()
