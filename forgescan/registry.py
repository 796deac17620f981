"""Registry of configured forges."""

import logging
import threading
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING

from forgescan.config import Config, ForgeConfig

if TYPE_CHECKING:
    from forgescan.clients.base import ForgeClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ForgeSnapshot:
    """Read-only view of the registry taken at the start of a discovery run."""

    clients: Mapping[str, "ForgeClient"]
    configs: Mapping[str, ForgeConfig]


class ForgeManager:
    """
    Map from forge name to its configuration and client.

    Reads return copies, so a discovery run is unaffected by forges added or
    removed while it is in flight.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._clients: dict[str, "ForgeClient"] = {}
        self._configs: dict[str, ForgeConfig] = {}

    @classmethod
    def from_config(cls, config: Config) -> "ForgeManager":
        """Create a client for every configured forge and register it."""
        from forgescan.clients import create_client

        manager = cls()
        for forge_config in config.forges:
            manager.add_forge(forge_config, create_client(forge_config, filtering=config.filtering))
        return manager

    def add_forge(self, config: ForgeConfig, client: "ForgeClient") -> None:
        """Register (or replace) a forge under ``config.name``."""
        with self._lock:
            if config.name in self._clients:
                logger.info(f"Replacing registered forge {config.name}")
            self._configs[config.name] = config
            self._clients[config.name] = client

    def remove_forge(self, name: str) -> bool:
        """Unregister a forge; returns False if it was not registered."""
        with self._lock:
            self._configs.pop(name, None)
            return self._clients.pop(name, None) is not None

    def get_forge(self, name: str) -> "ForgeClient | None":
        with self._lock:
            return self._clients.get(name)

    def get_all_forges(self) -> dict[str, "ForgeClient"]:
        with self._lock:
            return dict(self._clients)

    def get_forge_configs(self) -> dict[str, ForgeConfig]:
        with self._lock:
            return dict(self._configs)

    def snapshot(self) -> ForgeSnapshot:
        """Consistent copy of clients and configs."""
        with self._lock:
            return ForgeSnapshot(
                clients=MappingProxyType(dict(self._clients)),
                configs=MappingProxyType(dict(self._configs)),
            )

    def __len__(self) -> int:
        with self._lock:
            return len(self._clients)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._clients
