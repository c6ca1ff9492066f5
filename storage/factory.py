"""
Store Factory - Create the configured storage backend
=====================================================

Maps backend names from the configuration to store classes so the
rest of the application only deals with BaseStore.
"""

from datetime import datetime
from typing import Callable, Dict, Optional, Type

from core.exceptions import ConfigError, DatabaseError
from core.logging import get_logger
from .base import BaseStore
from .memory import MemoryStore
from .sqlite import SQLiteStore

logger = get_logger("storage.factory")


# Registry of available backends
BACKENDS: Dict[str, Type[BaseStore]] = {
    "sqlite": SQLiteStore,
    "memory": MemoryStore,
}


def create_store(
    config,
    clock: Optional[Callable[[], datetime]] = None
) -> BaseStore:
    """
    Create the store selected by `config.storage.backend`.

    Args:
        config: Main application Config object
        clock: Optional clock used for record timestamps

    Returns:
        Ready-to-use store

    Raises:
        ConfigError: If the backend is not registered
        DatabaseError: If the backend cannot be opened
    """
    backend = config.storage.backend.lower()

    if backend not in BACKENDS:
        raise ConfigError(
            f"Unknown storage backend: {backend}",
            details={"available_backends": ", ".join(BACKENDS)}
        )

    logger.info(f"Creating {backend} store")

    if backend == "sqlite":
        try:
            return SQLiteStore(config.database_path, clock=clock)
        except OSError as e:
            raise DatabaseError(
                f"Failed to open sqlite store: {e}",
                details={"path": config.database_path}
            )

    return BACKENDS[backend](clock=clock)
