"""
Custom exception hierarchy for granola_import.

All exceptions inherit from GranolaImportError so callers embedding the
importer can catch a single type at their boundary.
"""


class GranolaImportError(Exception):
    """
    Base exception for all importer errors.
    All custom exceptions should inherit from this class.
    """

    def __init__(self, message: str, context: dict | None = None):
        """
        Initialize importer error.
        Args:
            message: Error message
            context: Optional context dictionary with additional error details
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}


class ValidationError(GranolaImportError):
    """
    Validation errors.
    Raised when a source document has an invalid or malformed shape.
    """

    pass


class ConversionError(GranolaImportError):
    """
    Conversion errors.
    Raised when a document cannot be converted to Markdown.
    """

    pass


class VaultError(GranolaImportError):
    """
    Vault operation errors.
    Raised when reading or writing a vault file fails.
    """

    pass


class NotFoundError(VaultError):
    """
    Resource not found errors.
    Raised when a referenced vault file doesn't exist.
    """

    pass


class DetectorError(GranolaImportError):
    """
    Duplicate detector errors.
    Raised when the vault cannot be scanned at all.
    """

    pass


class ImportInProgressError(GranolaImportError):
    """
    Raised when an import is started while another batch is still running.
    """

    pass


class ConflictResolutionError(GranolaImportError):
    """
    Conflict resolution errors.
    Raised when a conflict cannot be resolved (no resolver, unknown action).
    """

    pass


class ConfigurationError(GranolaImportError):
    """
    Configuration errors.
    Raised when configuration is invalid or missing required values.
    """

    pass
