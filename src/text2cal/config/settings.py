"""Runtime configuration for text2cal.

Settings are an explicit value handed to the orchestrator and workflow at
construction time. ``Configuration.from_env`` reads ``TEXT2CAL_*`` variables
from the process environment first, then from the per-user ``.env`` file.
"""

import logging
import os
from dataclasses import dataclass, field, replace
from datetime import timedelta, tzinfo
from pathlib import Path
from typing import Callable, Dict, Mapping, Optional

from dotenv import dotenv_values

from text2cal.config.constants import (
    CALENDAR_DIR_NAME,
    DRAFT_FILE_NAME,
    ENV_PREFIX,
)
from text2cal.storage.paths import get_env_file_path, get_user_config_dir, get_user_data_dir

logger = logging.getLogger(__name__)


def _default_calendar_root() -> Path:
    return get_user_data_dir() / CALENDAR_DIR_NAME


def _default_draft_path() -> Path:
    return get_user_config_dir() / DRAFT_FILE_NAME


@dataclass(frozen=True)
class Configuration:
    """Settings consumed by the parse orchestrator, the workflow and the adapters."""

    default_duration_minutes: int = 60
    timezone_override: Optional[str] = None
    undo_window_seconds: float = 10.0
    parse_timeout_seconds: float = 30.0
    save_timeout_seconds: float = 10.0
    max_input_length: int = 500

    # Generator adapter
    model_name: str = "gemini-1.5-flash"
    temperature: float = 0.2
    max_output_tokens: int = 1024

    # Local adapters
    calendar_root: Path = field(default_factory=_default_calendar_root)
    draft_path: Path = field(default_factory=_default_draft_path)

    @property
    def default_duration(self) -> timedelta:
        return timedelta(minutes=self.default_duration_minutes)

    def timezone(self) -> tzinfo:
        """Resolve the override, or the system zone when no override is set."""
        from text2cal.core.timezone_utils import resolve_timezone

        tz, _ = resolve_timezone(self.timezone_override)
        return tz

    def with_overrides(self, **changes) -> "Configuration":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    @classmethod
    def from_env(
        cls,
        env_file: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "Configuration":
        """Build a configuration from environment variables and a ``.env`` file.

        Args:
            env_file: Path to a dotenv file (default: per-user config ``.env``).
            environ: Mapping that takes precedence over the file (default: ``os.environ``).

        Returns:
            A Configuration; unparseable values keep their defaults.
        """
        values: Dict[str, str] = {}
        path = env_file if env_file is not None else get_env_file_path()
        if path.exists():
            # Parse without mutating os.environ
            values.update({k: v for k, v in dotenv_values(path).items() if v is not None})
        source = os.environ if environ is None else environ
        values.update({k: v for k, v in source.items() if k.startswith(ENV_PREFIX)})

        changes = {}
        for name, converter in _FIELD_CONVERTERS.items():
            raw = values.get(ENV_PREFIX + name.upper())
            if raw is None or str(raw).strip() == "":
                continue
            try:
                changes[name] = converter(str(raw).strip())
            except ValueError as e:
                logger.warning("Ignoring invalid %s%s=%r: %s", ENV_PREFIX, name.upper(), raw, e)

        return cls(**changes)


def _positive_int(raw: str) -> int:
    value = int(raw)
    if value <= 0:
        raise ValueError("must be a positive integer")
    return value


def _positive_float(raw: str) -> float:
    value = float(raw)
    if value <= 0:
        raise ValueError("must be positive")
    return value


_FIELD_CONVERTERS: Dict[str, Callable[[str], object]] = {
    "default_duration_minutes": _positive_int,
    "timezone_override": str,
    "undo_window_seconds": _positive_float,
    "parse_timeout_seconds": _positive_float,
    "save_timeout_seconds": _positive_float,
    "max_input_length": _positive_int,
    "model_name": str,
    "temperature": float,
    "max_output_tokens": _positive_int,
    "calendar_root": lambda raw: Path(raw).expanduser(),
    "draft_path": lambda raw: Path(raw).expanduser(),
}

DEFAULT_CONFIG = Configuration()
