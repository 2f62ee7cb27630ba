"""
Factory for creating vault backends.
"""

from granola_import.config import VaultConfig
from granola_import.core.vault.base import Vault
from granola_import.core.vault.filesystem import FileSystemVault
from granola_import.core.vault.memory import InMemoryVault
from granola_import.utils.exceptions import ConfigurationError


class VaultFactory:
    """Factory for creating vault backends from configuration."""

    @staticmethod
    def create(config: VaultConfig, logger=None) -> Vault:
        """
        Create vault from configuration.

        Args:
            config: Vault configuration
            logger: Logger passed to backends that log

        Returns:
            Vault instance

        Raises:
            ConfigurationError: If backend is not supported
        """
        if config.backend == "filesystem":
            return FileSystemVault(root=config.path, logger=logger)
        elif config.backend == "memory":
            return InMemoryVault()
        else:
            raise ConfigurationError(f"Unknown vault backend: {config.backend}")
