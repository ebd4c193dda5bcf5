"""Configuration module for text2cal."""

from text2cal.config.constants import (
    KEYRING_SERVICE_NAME,
    KEYRING_ACCOUNT_NAME,
    PREFERRED_ENV_VAR,
    PRIMARY_ENV_VAR,
    ENV_PREFIX,
    DRAFT_STORAGE_KEY,
    ICS_PRODID,
)
from text2cal.config.settings import DEFAULT_CONFIG, Configuration

__all__ = [
    "DEFAULT_CONFIG",
    "Configuration",
    "KEYRING_SERVICE_NAME",
    "KEYRING_ACCOUNT_NAME",
    "PREFERRED_ENV_VAR",
    "PRIMARY_ENV_VAR",
    "ENV_PREFIX",
    "DRAFT_STORAGE_KEY",
    "ICS_PRODID",
]
