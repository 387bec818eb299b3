"""
Configuration management for Wasteland Map.

Two sources, mirroring how the app is deployed:
- Environment variables (optionally from a .env file) select the storage
  backend, database URL, session secret and initial admin code.
- config.json next to the app stores the user-editable app name and version.

The admin code itself is NOT stored here; it lives in the MapState record.
"""

import json
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

APP_NAME = "Wasteland Blues"
APP_VERSION = "Interactive Wasteland Navigator v2.281"
DEFAULT_ADMIN_CODE = "HOUSE-ALWAYS-WINS"

DEFAULT_BACKEND = "sql"
DEFAULT_PORT = 5000


def get_app_dir() -> Path:
    """Project root in development, the executable's directory when frozen."""
    if getattr(sys, 'frozen', False):
        return Path(sys.executable).parent
    return Path(__file__).parent.parent


def get_config_path() -> Path:
    return get_app_dir() / "config.json"


def get_default_database_url() -> str:
    """SQLite file under db/ next to the app, used when DATABASE_URL is unset."""
    return f"sqlite:///{get_app_dir() / 'db' / 'wasteland.db'}"


@dataclass(frozen=True)
class ServerConfig:
    """Startup configuration resolved from the environment."""
    backend: str = DEFAULT_BACKEND
    database_url: Optional[str] = None
    seed_sample_data: bool = False
    initial_admin_code: str = DEFAULT_ADMIN_CODE
    storage_secret: str = "wasteland_secret_key"
    port: int = DEFAULT_PORT
    log_level: str = "INFO"


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_server_config(dotenv: bool = True) -> ServerConfig:
    """
    Build the ServerConfig from environment variables.

    Recognised variables:
    - WASTELAND_BACKEND: 'sql' (default) or 'memory'
    - DATABASE_URL: SQLAlchemy URL for the sql backend
    - WASTELAND_SEED_SAMPLE_DATA: seed the memory backend (default on for memory)
    - WASTELAND_ADMIN_CODE: admin code used when MapState is first created
    - WASTELAND_STORAGE_SECRET: secret for the session cookie
    - WASTELAND_PORT, WASTELAND_LOG_LEVEL
    """
    if dotenv:
        load_dotenv()

    backend = os.environ.get("WASTELAND_BACKEND", DEFAULT_BACKEND).strip().lower()
    port_raw = os.environ.get("WASTELAND_PORT")
    try:
        port = int(port_raw) if port_raw else DEFAULT_PORT
    except ValueError:
        logger.warning(f"Invalid WASTELAND_PORT '{port_raw}', using {DEFAULT_PORT}")
        port = DEFAULT_PORT

    return ServerConfig(
        backend=backend,
        database_url=os.environ.get("DATABASE_URL") or get_default_database_url(),
        seed_sample_data=_env_flag("WASTELAND_SEED_SAMPLE_DATA", backend == "memory"),
        initial_admin_code=os.environ.get("WASTELAND_ADMIN_CODE") or DEFAULT_ADMIN_CODE,
        storage_secret=os.environ.get("WASTELAND_STORAGE_SECRET", "wasteland_secret_key"),
        port=port,
        log_level=os.environ.get("WASTELAND_LOG_LEVEL", "INFO").upper(),
    )


# --- App settings (config.json) ---

def load_config(config_path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """Load configuration from config.json."""
    path = Path(config_path) if config_path else get_config_path()
    if path.exists():
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning(f"Failed to load config from {path}: {e}")
            return {}
    return {}


def save_config(config: Dict[str, Any], config_path: Optional[Union[str, Path]] = None) -> None:
    """Save configuration to config.json."""
    path = Path(config_path) if config_path else get_config_path()
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(config, f, indent=2, ensure_ascii=False)


def get_app_settings(config_path: Optional[Union[str, Path]] = None) -> Dict[str, str]:
    """
    Get the public app settings.

    Returns:
        Dict with 'app_name' and 'version', falling back to the defaults.
    """
    config = load_config(config_path)
    return {
        "app_name": config.get("app_name") or APP_NAME,
        "version": config.get("version") or APP_VERSION,
    }


def set_app_settings(
    app_name: Optional[str] = None,
    version: Optional[str] = None,
    config_path: Optional[Union[str, Path]] = None,
) -> Dict[str, str]:
    """Persist app name and/or version. Returns the resulting settings."""
    config = load_config(config_path)
    if app_name is not None:
        config["app_name"] = app_name
    if version is not None:
        config["version"] = version
    save_config(config, config_path)
    return get_app_settings(config_path)
