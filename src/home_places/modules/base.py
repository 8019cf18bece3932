"""
Base classes for home-places modules.

Modules are plug-ins that react to host events.
"""

from abc import ABC, abstractmethod
from typing import Dict


class AdapterModule(ABC):
    """
    Base class for adapter modules.

    A module:
    - Receives host callbacks from the Event Bus
    - Reads and writes state through the HostAdapter
    - Owns a versioned configuration dict
    """

    @property
    @abstractmethod
    def id(self) -> str:
        """Unique identifier for this module type."""
        pass

    @property
    @abstractmethod
    def CURRENT_CONFIG_VERSION(self) -> int:
        """Current configuration version for this module."""
        pass

    @abstractmethod
    def attach(self, bus, host) -> None:
        """
        Attach the module to the host.

        Register event subscriptions and capture references to bus and host.

        Args:
            bus: EventBus instance
            host: HostAdapter instance
        """
        pass

    @abstractmethod
    def default_config(self) -> Dict:
        """
        Get default configuration for this module.

        Returns:
            Default configuration dict
        """
        pass

    def migrate_config(self, config: Dict) -> Dict:
        """
        Migrate configuration to current version.

        Default implementation returns config unchanged.
        Override to handle version upgrades.

        Args:
            config: Configuration dict (potentially older version)

        Returns:
            Migrated configuration dict
        """
        return config
