"""
Configuration for granola_import.

Supports loading from:
1. Environment variables (highest priority)
2. YAML config file
3. Default values (fallback)
"""

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

from granola_import.models.note import ContentPriority, DatePrefixFormat
from granola_import.models.progress import ImportOptions, ImportStrategy


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    log_to_file: bool = False
    log_dir: str = "logs"
    file_rotation: str = "10 MB"
    file_retention: str = "7 days"
    compression: str = "zip"
    serialize: bool = True


class ContentConfig(BaseModel):
    """Markdown conversion configuration."""

    content_priority: ContentPriority = ContentPriority.PANEL_FIRST
    date_prefix_format: DatePrefixFormat = DatePrefixFormat.ISO
    include_enhanced_frontmatter: bool = False
    include_granola_url: bool = False
    max_filename_length: int = Field(default=100, ge=10)
    use_custom_filename_template: bool = False
    filename_template: str = "{created_date} - {title}"


class ImporterConfig(BaseModel):
    """Import run defaults."""

    default_folder: str = ""
    strategy: ImportStrategy = ImportStrategy.SKIP
    create_folders: bool = True
    skip_empty_documents: bool = True
    create_backups: bool = False
    stop_on_error: bool = False
    delay_between_imports: float = 0.0

    def to_options(self) -> ImportOptions:
        """Build run options from these defaults."""
        return ImportOptions(**self.model_dump())


class ActionItemsConfig(BaseModel):
    """Conversion of action item bullets into Markdown tasks."""

    convert_to_tasks: bool = False
    add_task_tag: bool = False
    task_tag_name: str = "#tasks"


class AttendeeTagsConfig(BaseModel):
    """Attendee tag generation."""

    enabled: bool = False
    tag_template: str = "person/{name}"  # {name}, {email}, {domain}, {company}
    my_name: str = ""
    exclude_my_name: bool = False
    include_host: bool = False


class DetectorConfig(BaseModel):
    """
    Local-modification heuristic used by the duplicate detector.

    A tracked note whose body matches any markup or section pattern, or whose
    word count exceeds the threshold, is treated as locally edited.
    """

    markup_patterns: list[str] = Field(
        default_factory=lambda: [
            r"\[\[[^\]\n]+\]\]",  # wiki-links
            r"!\[\[[^\]\n]+\]\]",  # embeds
            r"(?<![\w/#&(])#[A-Za-z][\w/-]*",  # hashtags
            r"(?s)%%.*?%%",  # inline comments
            r"```dataview",  # query blocks
            r"(?:^|\s)\^[A-Za-z0-9-]+$",  # block references
        ]
    )
    section_patterns: list[str] = Field(
        default_factory=lambda: [
            r"^#{2,}\s+(?:My\s+)?Notes?\s*$",
        ]
    )
    word_count_threshold: int = 2000
    check_modifications: bool = True


class MetadataConfig(BaseModel):
    """Document metadata derivation."""

    preview_length: int = 150
    words_per_minute: int = 200


class VaultConfig(BaseModel):
    """Vault backend configuration."""

    backend: str = "filesystem"  # filesystem, memory
    path: str = "."


class Config(BaseModel):
    """Main configuration."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    content: ContentConfig = Field(default_factory=ContentConfig)
    importer: ImporterConfig = Field(default_factory=ImporterConfig)
    action_items: ActionItemsConfig = Field(default_factory=ActionItemsConfig)
    attendee_tags: AttendeeTagsConfig = Field(default_factory=AttendeeTagsConfig)
    detector: DetectorConfig = Field(default_factory=DetectorConfig)
    metadata: MetadataConfig = Field(default_factory=MetadataConfig)
    vault: VaultConfig = Field(default_factory=VaultConfig)

    @classmethod
    def from_env(cls, env_file: str | Path | None = None) -> "Config":
        """
        Load configuration from environment variables.

        Priority: .env file -> system environment variables -> defaults

        Args:
            env_file: Optional path to .env file (default: .env in working directory)

        Returns:
            Config instance

        Environment variables:
            GRANOLA_VAULT_PATH: Root folder of the vault
            GRANOLA_VAULT_BACKEND: Vault backend (filesystem, memory)
            GRANOLA_CONTENT_PRIORITY: panel_first, notes_first, panel_only, notes_only
            GRANOLA_DATE_PREFIX_FORMAT: iso, us, eu, dot, none
            GRANOLA_ENHANCED_FRONTMATTER: Emit id/title/updated in frontmatter
            GRANOLA_INCLUDE_GRANOLA_URL: Emit granola_url in frontmatter
            GRANOLA_MAX_FILENAME_LENGTH: Maximum filename length
            GRANOLA_DEFAULT_FOLDER: Folder new notes are written to
            GRANOLA_IMPORT_STRATEGY: skip, update, create_new
            GRANOLA_SKIP_EMPTY_DOCUMENTS: Skip documents without content
            GRANOLA_CREATE_BACKUPS: Back up files before overwriting
            GRANOLA_STOP_ON_ERROR: Cancel the batch on first failure
            GRANOLA_CONVERT_ACTION_ITEMS: Convert action items to tasks
            GRANOLA_ATTENDEE_TAGS: Generate attendee tags
            GRANOLA_MY_NAME: Own name, excluded from attendee tags
            GRANOLA_WORD_COUNT_THRESHOLD: Local modification word threshold
            GRANOLA_LOG_LEVEL: Log level
        """
        # Load .env file if provided or exists
        if env_file:
            load_dotenv(env_file)
        elif Path(".env").exists():
            load_dotenv()

        def get_env(key: str, default: Any = None) -> Any:
            """Get environment variable with type conversion."""
            value = os.getenv(key)
            if value is None:
                return default
            # If value is empty string, return default
            if value == "":
                return default
            # Convert boolean strings
            if isinstance(default, bool):
                return str(value).lower() in ("true", "1", "yes")
            # Convert numeric strings
            if isinstance(default, int):
                return int(value)
            if isinstance(default, float):
                return float(value)
            return value

        return cls(
            content=ContentConfig(
                content_priority=get_env("GRANOLA_CONTENT_PRIORITY", "panel_first"),
                date_prefix_format=get_env("GRANOLA_DATE_PREFIX_FORMAT", "iso"),
                include_enhanced_frontmatter=get_env("GRANOLA_ENHANCED_FRONTMATTER", False),
                include_granola_url=get_env("GRANOLA_INCLUDE_GRANOLA_URL", False),
                max_filename_length=get_env("GRANOLA_MAX_FILENAME_LENGTH", 100),
                use_custom_filename_template=get_env("GRANOLA_USE_FILENAME_TEMPLATE", False),
                filename_template=get_env("GRANOLA_FILENAME_TEMPLATE", "{created_date} - {title}"),
            ),
            importer=ImporterConfig(
                default_folder=get_env("GRANOLA_DEFAULT_FOLDER", ""),
                strategy=get_env("GRANOLA_IMPORT_STRATEGY", "skip"),
                create_folders=get_env("GRANOLA_CREATE_FOLDERS", True),
                skip_empty_documents=get_env("GRANOLA_SKIP_EMPTY_DOCUMENTS", True),
                create_backups=get_env("GRANOLA_CREATE_BACKUPS", False),
                stop_on_error=get_env("GRANOLA_STOP_ON_ERROR", False),
                delay_between_imports=get_env("GRANOLA_DELAY_BETWEEN_IMPORTS", 0.0),
            ),
            action_items=ActionItemsConfig(
                convert_to_tasks=get_env("GRANOLA_CONVERT_ACTION_ITEMS", False),
                add_task_tag=get_env("GRANOLA_ADD_TASK_TAG", False),
                task_tag_name=get_env("GRANOLA_TASK_TAG_NAME", "#tasks"),
            ),
            attendee_tags=AttendeeTagsConfig(
                enabled=get_env("GRANOLA_ATTENDEE_TAGS", False),
                tag_template=get_env("GRANOLA_ATTENDEE_TAG_TEMPLATE", "person/{name}"),
                my_name=get_env("GRANOLA_MY_NAME", ""),
                exclude_my_name=get_env("GRANOLA_EXCLUDE_MY_NAME", False),
                include_host=get_env("GRANOLA_INCLUDE_HOST", False),
            ),
            detector=DetectorConfig(
                word_count_threshold=get_env("GRANOLA_WORD_COUNT_THRESHOLD", 2000),
                check_modifications=get_env("GRANOLA_CHECK_MODIFICATIONS", True),
            ),
            metadata=MetadataConfig(
                preview_length=get_env("GRANOLA_PREVIEW_LENGTH", 150),
                words_per_minute=get_env("GRANOLA_WORDS_PER_MINUTE", 200),
            ),
            vault=VaultConfig(
                backend=get_env("GRANOLA_VAULT_BACKEND", "filesystem"),
                path=get_env("GRANOLA_VAULT_PATH", "."),
            ),
            logging=LoggingConfig(
                level=get_env("GRANOLA_LOG_LEVEL", "INFO"),
                log_to_file=get_env("GRANOLA_LOG_TO_FILE", False),
                log_dir=get_env("GRANOLA_LOG_DIR", "logs"),
                file_rotation=get_env("GRANOLA_LOG_FILE_ROTATION", "10 MB"),
                file_retention=get_env("GRANOLA_LOG_FILE_RETENTION", "7 days"),
                compression=get_env("GRANOLA_LOG_COMPRESSION", "zip"),
                serialize=get_env("GRANOLA_LOG_SERIALIZE", True),
            ),
        )

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> "Config":
        """
        Load configuration from YAML file.

        Args:
            yaml_path: Path to YAML configuration file

        Returns:
            Config instance

        Raises:
            FileNotFoundError: If YAML file doesn't exist
            yaml.YAMLError: If YAML is invalid
        """
        yaml_path = Path(yaml_path)
        if not yaml_path.exists():
            raise FileNotFoundError(f"Config file not found: {yaml_path}")

        with open(yaml_path) as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)

    @classmethod
    def from_env_or_yaml(
        cls, yaml_path: str | Path | None = None, env_file: str | Path | None = None
    ) -> "Config":
        """
        Load configuration with priority: env vars > YAML > defaults.

        Args:
            yaml_path: Optional path to YAML config
            env_file: Optional path to .env file

        Returns:
            Config instance
        """
        if yaml_path and Path(yaml_path).exists():
            with open(yaml_path) as f:
                config_dict = yaml.safe_load(f) or {}
        else:
            config_dict = {}

        env_config = cls.from_env(env_file)

        final_dict = {**config_dict}

        # Sections changed by env vars replace the YAML section
        default = cls()
        for section in (
            "content",
            "importer",
            "action_items",
            "attendee_tags",
            "metadata",
            "vault",
            "logging",
        ):
            env_section = getattr(env_config, section)
            if env_section != getattr(default, section):
                final_dict[section] = env_section.model_dump()

        if env_config.detector != default.detector:
            detector = {**config_dict.get("detector", {})}
            detector["word_count_threshold"] = env_config.detector.word_count_threshold
            detector["check_modifications"] = env_config.detector.check_modifications
            final_dict["detector"] = detector

        return cls(**final_dict) if final_dict else env_config

