"""Local persistence: per-user paths, API key storage and the recoverable draft.

``text2cal.storage.draft_store`` is imported directly by its users.
"""

from text2cal.storage.paths import (
    get_user_config_dir,
    get_user_data_dir,
    get_env_file_path,
)
from text2cal.storage.credentials import (
    load_api_key,
    save_api_key,
    get_api_key_source,
    mask_key,
)

__all__ = [
    "get_user_config_dir",
    "get_user_data_dir",
    "get_env_file_path",
    "load_api_key",
    "save_api_key",
    "get_api_key_source",
    "mask_key",
]
