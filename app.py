"""
Main NiceGUI application for Wasteland Map.

Builds the storage backend from the environment, mounts the JSON API on
NiceGUI's FastAPI app and serves the public map page at '/'.
"""

import logging
import sys

from nicegui import app, ui

from wasteland_map.api_routes import install_api
from wasteland_map.config import load_server_config
from wasteland_map.map_manager import MapManager
from wasteland_map.public_page import create_public_page
from wasteland_map.storage import create_backend

config = load_server_config()

logging.basicConfig(
    level=getattr(logging, config.log_level, logging.INFO),
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)
logger = logging.getLogger("wasteland_map")

manager = MapManager(create_backend(config))
install_api(app, manager)
create_public_page(manager)

logger.info(f"Wasteland Map ready ({manager.storage.backend_type} backend)")


if __name__ in {"__main__", "__mp_main__"}:
    ui.run(
        title=manager.get_settings()['app_name'],
        port=config.port,
        reload=not getattr(sys, 'frozen', False),
        storage_secret=config.storage_secret,
    )
