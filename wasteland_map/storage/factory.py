"""
Backend Factory for Wasteland Map.

Creates the storage backend selected by configuration. This is the only
place that knows which implementation is in use; everything else talks
to the MapStorage protocol.
"""

import logging
from pathlib import Path
from typing import Optional, TYPE_CHECKING

from sqlalchemy.engine import make_url

from wasteland_map.config import ServerConfig, get_default_database_url, load_server_config
from wasteland_map.storage.memory_backend import MemoryBackend
from wasteland_map.storage.sample_data import seed_sample_data
from wasteland_map.storage.sql_backend import SqlBackend

if TYPE_CHECKING:
    from wasteland_map.storage.protocol import MapStorage

logger = logging.getLogger(__name__)

BACKEND_TYPES = ("memory", "sql")


def ensure_sqlite_dir(database_url: str) -> None:
    """Create the parent directory of a SQLite database file if needed."""
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite" or not url.database or url.database == ":memory:":
        return
    Path(url.database).parent.mkdir(parents=True, exist_ok=True)


def get_backend_type(config: Optional[ServerConfig] = None) -> str:
    """
    Get the configured storage backend type.

    Returns:
        'memory' or 'sql'
    """
    config = config or load_server_config()
    if config.backend not in BACKEND_TYPES:
        raise ValueError(
            f"Unknown storage backend '{config.backend}'. Expected one of: {', '.join(BACKEND_TYPES)}"
        )
    return config.backend


def create_backend(
    config: Optional[ServerConfig] = None,
    force_backend: Optional[str] = None,
) -> "MapStorage":
    """
    Create a storage backend instance.

    Args:
        config: Server configuration (loaded from the environment if omitted)
        force_backend: Override the configured backend type

    Returns:
        MapStorage instance (MemoryBackend or SqlBackend)
    """
    config = config or load_server_config()
    backend_type = force_backend or get_backend_type(config)

    if backend_type == "memory":
        backend = MemoryBackend(initial_admin_code=config.initial_admin_code)
    elif backend_type == "sql":
        database_url = config.database_url or get_default_database_url()
        ensure_sqlite_dir(database_url)
        backend = SqlBackend(database_url=database_url, initial_admin_code=config.initial_admin_code)
    else:
        raise ValueError(f"Unknown storage backend '{backend_type}'")

    if config.seed_sample_data:
        seed_sample_data(backend)

    logger.info(f"Using {backend.backend_type} storage backend")
    return backend
