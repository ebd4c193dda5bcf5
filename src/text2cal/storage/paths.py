"""Per-user directories for configuration, drafts and local calendars."""

import logging
import os
import sys
from pathlib import Path

APP_NAME = "Text2Cal"

logger = logging.getLogger(__name__)


def get_user_config_dir() -> Path:
    """Return a per-user config directory that works across platforms.

    Returns:
        Path to the user's config directory for this application.
    """
    if sys.platform.startswith("win"):
        base_str = os.environ.get("APPDATA") or os.environ.get("LOCALAPPDATA")
        base = Path(base_str) if base_str else (Path.home() / "AppData" / "Roaming")
        return base / APP_NAME

    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_NAME

    # Linux and other Unix-like systems
    base_str = os.environ.get("XDG_CONFIG_HOME")
    base = Path(base_str) if base_str else (Path.home() / ".config")
    return base / APP_NAME


def get_user_data_dir() -> Path:
    """Return a per-user data directory (XDG data home on Linux)."""
    if sys.platform.startswith("win") or sys.platform == "darwin":
        return get_user_config_dir()

    base_str = os.environ.get("XDG_DATA_HOME")
    base = Path(base_str) if base_str else (Path.home() / ".local" / "share")
    return base / APP_NAME


def get_env_file_path() -> Path:
    """Get managed .env path under the user config directory."""
    return get_user_config_dir() / ".env"


def harden_file_permissions(path: Path) -> None:
    """Best-effort: restrict permissions to the current user on POSIX.

    Args:
        path: Path to the file to secure.
    """
    if os.name != "posix":
        return
    try:
        path.chmod(0o600)
    except OSError as e:
        logger.warning("Could not tighten permissions on %s: %s", path, e)


def ensure_private_dir(path: Path) -> None:
    """Create ``path`` (and parents) readable only by the current user."""
    path.mkdir(parents=True, exist_ok=True, mode=0o700)
    if os.name != "posix":
        return
    try:
        path.chmod(0o700)
    except OSError as e:
        logger.warning("Could not tighten permissions on %s: %s", path, e)
