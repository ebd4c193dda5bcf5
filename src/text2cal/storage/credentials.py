"""Gemini API key lookup and storage.

Lookup order: environment variables, the OS keyring, then the per-user
``.env`` file. Saving writes to the keyring and always keeps a copy in the
``.env`` file.
"""

import logging
import os
from pathlib import Path
from typing import Optional, Tuple

import keyring
from dotenv import dotenv_values, set_key

from text2cal.config.constants import (
    KEYRING_ACCOUNT_NAME,
    KEYRING_SERVICE_NAME,
    PREFERRED_ENV_VAR,
    PRIMARY_ENV_VAR,
)
from text2cal.storage.paths import ensure_private_dir, get_env_file_path, harden_file_permissions

logger = logging.getLogger(__name__)


def mask_key(key: Optional[str]) -> str:
    """Mask an API key for safe logging, keeping the first and last four characters."""
    if not key:
        return "<empty>"
    if len(key) <= 8:
        return "***"
    return f"{key[:4]}...{key[-4:]}"


def _clean(key: Optional[str]) -> Optional[str]:
    if not key:
        return None
    return str(key).strip().strip("'\"").strip() or None


def load_from_keyring() -> Optional[str]:
    try:
        return keyring.get_password(KEYRING_SERVICE_NAME, KEYRING_ACCOUNT_NAME)
    except Exception as e:
        # No usable backend on headless systems
        logger.warning("Keyring lookup failed: %s", e)
        return None


def load_from_env_file(path: Path) -> Optional[str]:
    if not path.exists():
        return None
    # Parse without mutating os.environ (avoids leaking secrets to child processes).
    values = dotenv_values(path)
    return _clean(values.get(PREFERRED_ENV_VAR) or values.get(PRIMARY_ENV_VAR))


def get_api_key_source(env_file: Optional[Path] = None) -> Tuple[Optional[str], str]:
    """Find the API key and describe where it came from.

    Args:
        env_file: The dotenv file to check last (default: per-user ``.env``).

    Returns:
        Tuple of (api_key or None, source_description).
    """
    for var in (PREFERRED_ENV_VAR, PRIMARY_ENV_VAR):
        env_key = _clean(os.environ.get(var))
        if env_key:
            return env_key, f"Environment Variable ({var})"

    keyring_key = _clean(load_from_keyring())
    if keyring_key:
        return keyring_key, "OS Keyring"

    path = env_file or get_env_file_path()
    file_key = load_from_env_file(path)
    if file_key:
        return file_key, f"User Config: {path}"

    return None, "No API Key Found"


def load_api_key(env_file: Optional[Path] = None) -> Optional[str]:
    """Return the Gemini API key, or None if none is configured."""
    key, source = get_api_key_source(env_file)
    if key:
        logger.debug("Using API key %s from %s", mask_key(key), source)
    return key


def save_api_key(api_key: str, env_file: Optional[Path] = None) -> bool:
    """Save the API key to the keyring and the per-user ``.env`` file.

    Args:
        api_key: The API key to save.
        env_file: Target dotenv file (default: per-user ``.env``).

    Returns:
        True if at least the file copy was written.
    """
    api_key = _clean(api_key) or ""
    if not api_key:
        return False

    try:
        keyring.set_password(KEYRING_SERVICE_NAME, KEYRING_ACCOUNT_NAME, api_key)
        logger.info("API key saved to keyring successfully")
    except Exception as e:
        logger.warning("Keyring unavailable, using file storage instead: %s", e)

    path = env_file or get_env_file_path()
    try:
        ensure_private_dir(path.parent)
        path.touch(mode=0o600, exist_ok=True)
        harden_file_permissions(path)
        set_key(str(path), PRIMARY_ENV_VAR, api_key)
    except OSError as e:
        logger.error("Failed to save API key: %s", e)
        return False
    return True
