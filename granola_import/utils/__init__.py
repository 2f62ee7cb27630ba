"""Utility modules for granola_import."""

from granola_import.utils.exceptions import (
    ConfigurationError,
    ConflictResolutionError,
    ConversionError,
    DetectorError,
    GranolaImportError,
    ImportInProgressError,
    NotFoundError,
    ValidationError,
    VaultError,
)
from granola_import.utils.logger import get_logger, setup_logging

__all__ = [
    # Logging
    "get_logger",
    "setup_logging",
    # Exceptions
    "GranolaImportError",
    "ValidationError",
    "ConversionError",
    "VaultError",
    "NotFoundError",
    "DetectorError",
    "ImportInProgressError",
    "ConflictResolutionError",
    "ConfigurationError",
]
