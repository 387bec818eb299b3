"""
Storage backend abstraction for Wasteland Map.

Supports multiple storage backends:
- MemoryBackend: In-process dicts (tests, demos)
- SqlBackend: Relational database via SQLAlchemy (default)
"""

from wasteland_map.storage.protocol import MapStorage
from wasteland_map.storage.memory_backend import MemoryBackend
from wasteland_map.storage.sql_backend import SqlBackend
from wasteland_map.storage.factory import create_backend, get_backend_type
from wasteland_map.storage.sample_data import seed_sample_data

__all__ = [
    'MapStorage',
    'MemoryBackend',
    'SqlBackend',
    'create_backend',
    'get_backend_type',
    'seed_sample_data',
]
