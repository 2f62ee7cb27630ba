"""
Tests for configuration management.

Tests config loading from:
1. Environment variables
2. YAML files
3. Combined (env overrides YAML)
"""

import os

import pytest
import yaml

from granola_import.config import Config, ContentConfig, DetectorConfig, ImporterConfig
from granola_import.models import ContentPriority, DatePrefixFormat, ImportStrategy


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every GRANOLA_ variable so tests see only what they set."""
    for key in list(os.environ.keys()):
        if key.startswith("GRANOLA_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(os.path.dirname(__file__))
    return monkeypatch


class TestConfigDefaults:
    """Test default configuration values."""

    def test_default_config_creation(self):
        """Test creating config with defaults."""
        config = Config()

        # Content defaults
        assert config.content.content_priority == ContentPriority.PANEL_FIRST
        assert config.content.date_prefix_format == DatePrefixFormat.ISO
        assert config.content.include_enhanced_frontmatter is False
        assert config.content.max_filename_length == 100

        # Importer defaults
        assert config.importer.strategy == ImportStrategy.SKIP
        assert config.importer.skip_empty_documents is True
        assert config.importer.stop_on_error is False

        # Detector defaults
        assert config.detector.word_count_threshold == 2000
        assert config.detector.check_modifications is True
        assert len(config.detector.markup_patterns) == 6

        # Vault defaults
        assert config.vault.backend == "filesystem"

    def test_importer_to_options(self):
        """Test run options are built from importer defaults."""
        options = ImporterConfig(
            default_folder="Granola", strategy="update", delay_between_imports=0.5
        ).to_options()

        assert options.default_folder == "Granola"
        assert options.strategy == ImportStrategy.UPDATE
        assert options.delay_between_imports == 0.5

    def test_filename_length_lower_bound(self):
        """Test unreasonably short filename limits are rejected."""
        with pytest.raises(ValueError):
            ContentConfig(max_filename_length=3)


class TestConfigFromEnv:
    """Test loading configuration from environment variables."""

    def test_from_env_basic(self, clean_env):
        """Test loading basic config from environment."""
        clean_env.setenv("GRANOLA_VAULT_PATH", "/tmp/vault")
        clean_env.setenv("GRANOLA_CONTENT_PRIORITY", "notes_first")
        clean_env.setenv("GRANOLA_DATE_PREFIX_FORMAT", "eu")
        clean_env.setenv("GRANOLA_IMPORT_STRATEGY", "create_new")

        config = Config.from_env()

        assert config.vault.path == "/tmp/vault"
        assert config.content.content_priority == ContentPriority.NOTES_FIRST
        assert config.content.date_prefix_format == DatePrefixFormat.EU
        assert config.importer.strategy == ImportStrategy.CREATE_NEW

    def test_from_env_with_numbers(self, clean_env):
        """Test loading numeric values from environment."""
        clean_env.setenv("GRANOLA_MAX_FILENAME_LENGTH", "80")
        clean_env.setenv("GRANOLA_WORD_COUNT_THRESHOLD", "500")
        clean_env.setenv("GRANOLA_DELAY_BETWEEN_IMPORTS", "0.25")

        config = Config.from_env()

        assert config.content.max_filename_length == 80
        assert config.detector.word_count_threshold == 500
        assert config.importer.delay_between_imports == 0.25

    def test_from_env_with_booleans(self, clean_env):
        """Test loading boolean values from environment."""
        clean_env.setenv("GRANOLA_ENHANCED_FRONTMATTER", "true")
        clean_env.setenv("GRANOLA_SKIP_EMPTY_DOCUMENTS", "0")
        clean_env.setenv("GRANOLA_ATTENDEE_TAGS", "yes")

        config = Config.from_env()

        assert config.content.include_enhanced_frontmatter is True
        assert config.importer.skip_empty_documents is False
        assert config.attendee_tags.enabled is True

    def test_from_env_with_dotenv_file(self, clean_env, tmp_path):
        """Test loading from .env file."""
        env_file = tmp_path / ".env.test"
        env_file.write_text(
            """
GRANOLA_VAULT_BACKEND=memory
GRANOLA_MY_NAME=Ada Lovelace
GRANOLA_LOG_LEVEL=DEBUG
"""
        )

        config = Config.from_env(env_file=str(env_file))

        assert config.vault.backend == "memory"
        assert config.attendee_tags.my_name == "Ada Lovelace"
        assert config.logging.level == "DEBUG"

    def test_empty_env_vars_use_defaults(self, clean_env):
        """Test empty values fall back to defaults."""
        clean_env.setenv("GRANOLA_MAX_FILENAME_LENGTH", "")
        clean_env.setenv("GRANOLA_DATE_PREFIX_FORMAT", "")

        config = Config.from_env()

        assert config.content.max_filename_length == 100
        assert config.content.date_prefix_format == DatePrefixFormat.ISO

    def test_invalid_enum_value(self, clean_env):
        """Test unknown option values are rejected."""
        clean_env.setenv("GRANOLA_IMPORT_STRATEGY", "sometimes")

        with pytest.raises(ValueError):
            Config.from_env()


class TestConfigFromYAML:
    """Test loading configuration from YAML files."""

    def test_from_yaml_basic(self, tmp_path):
        """Test loading config from YAML file."""
        yaml_file = tmp_path / "config.yaml"
        config_data = {
            "content": {"date_prefix_format": "dot", "include_granola_url": True},
            "importer": {"default_folder": "Meetings", "create_backups": True},
            "detector": {
                "markup_patterns": [r"\[\[.+?\]\]"],
                "word_count_threshold": 5000,
            },
        }
        yaml_file.write_text(yaml.dump(config_data))

        config = Config.from_yaml(str(yaml_file))

        assert config.content.date_prefix_format == DatePrefixFormat.DOT
        assert config.content.include_granola_url is True
        assert config.importer.default_folder == "Meetings"
        assert config.importer.create_backups is True
        assert config.detector.markup_patterns == [r"\[\[.+?\]\]"]
        assert config.detector.word_count_threshold == 5000
        # Untouched sections keep defaults
        assert config.vault.backend == "filesystem"

    def test_from_yaml_empty_file(self, tmp_path):
        """Test an empty YAML file gives defaults."""
        yaml_file = tmp_path / "empty.yaml"
        yaml_file.write_text("")

        assert Config.from_yaml(yaml_file) == Config()

    def test_from_yaml_file_not_found(self):
        """Test loading from non-existent file."""
        with pytest.raises(FileNotFoundError):
            Config.from_yaml("/nonexistent/config.yaml")

    def test_from_yaml_invalid_yaml(self, tmp_path):
        """Test loading invalid YAML file."""
        yaml_file = tmp_path / "bad.yaml"
        yaml_file.write_text("invalid: yaml: content: [")

        with pytest.raises(yaml.YAMLError):
            Config.from_yaml(str(yaml_file))


class TestConfigFromEnvOrYAML:
    """Test combined loading (env overrides YAML)."""

    def test_env_overrides_yaml(self, tmp_path, clean_env):
        """Test that environment variables override YAML values."""
        yaml_file = tmp_path / "config.yaml"
        config_data = {
            "vault": {"path": "/from/yaml"},
            "importer": {"default_folder": "Granola"},
        }
        yaml_file.write_text(yaml.dump(config_data))

        clean_env.setenv("GRANOLA_VAULT_PATH", "/from/env")

        config = Config.from_env_or_yaml(yaml_path=str(yaml_file))

        # Environment should win
        assert config.vault.path == "/from/env"
        # YAML value preserved where no env override
        assert config.importer.default_folder == "Granola"

    def test_detector_env_keeps_yaml_patterns(self, tmp_path, clean_env):
        """Test detector env overrides don't discard YAML patterns."""
        yaml_file = tmp_path / "config.yaml"
        yaml_file.write_text(yaml.dump({"detector": {"markup_patterns": ["TODO"]}}))
        clean_env.setenv("GRANOLA_WORD_COUNT_THRESHOLD", "50")

        config = Config.from_env_or_yaml(yaml_path=str(yaml_file))

        assert config.detector.markup_patterns == ["TODO"]
        assert config.detector.word_count_threshold == 50

    def test_env_only_when_no_yaml(self, clean_env):
        """Test environment values used when no YAML file."""
        clean_env.setenv("GRANOLA_DEFAULT_FOLDER", "Inbox")

        config = Config.from_env_or_yaml(yaml_path="/nonexistent.yaml")

        assert config.importer.default_folder == "Inbox"

    def test_defaults_when_no_yaml_or_env(self, clean_env):
        """Test defaults used when neither YAML nor env vars."""
        config = Config.from_env_or_yaml(yaml_path="/nonexistent.yaml")

        assert config == Config()


class TestConfigEdgeCases:
    """Test edge cases."""

    def test_multiple_config_instances_independent(self):
        """Test that config instances don't share mutable defaults."""
        first = Config()
        second = Config()

        first.detector.markup_patterns.append("extra")

        assert "extra" not in second.detector.markup_patterns
        assert DetectorConfig().markup_patterns == second.detector.markup_patterns
