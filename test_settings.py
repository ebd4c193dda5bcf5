from datetime import timedelta
from pathlib import Path

import pytz

from text2cal.config.settings import Configuration
from text2cal.core.timezone_utils import resolve_timezone, timezone_name


def test_defaults():
    config = Configuration()
    assert config.default_duration == timedelta(minutes=60)
    assert config.undo_window_seconds == 10
    assert config.parse_timeout_seconds == 30
    assert config.save_timeout_seconds == 10
    assert config.max_input_length == 500
    assert config.timezone_override is None


def test_from_env_reads_dotenv_file(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text(
        "TEXT2CAL_DEFAULT_DURATION_MINUTES=45\n"
        "TEXT2CAL_TIMEZONE_OVERRIDE=Asia/Tokyo\n"
        "TEXT2CAL_CALENDAR_ROOT=/tmp/cals\n"
    )

    config = Configuration.from_env(env_file=env_file, environ={})

    assert config.default_duration == timedelta(minutes=45)
    assert config.timezone_override == "Asia/Tokyo"
    assert config.calendar_root == Path("/tmp/cals")


def test_environment_overrides_file(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("TEXT2CAL_UNDO_WINDOW_SECONDS=5\n")

    config = Configuration.from_env(
        env_file=env_file,
        environ={"TEXT2CAL_UNDO_WINDOW_SECONDS": "2.5", "UNRELATED": "x"},
    )

    assert config.undo_window_seconds == 2.5


def test_invalid_values_keep_defaults(tmp_path):
    config = Configuration.from_env(
        env_file=tmp_path / "missing.env",
        environ={
            "TEXT2CAL_MAX_INPUT_LENGTH": "lots",
            "TEXT2CAL_PARSE_TIMEOUT_SECONDS": "-1",
            "TEXT2CAL_SAVE_TIMEOUT_SECONDS": "",
        },
    )

    assert config.max_input_length == 500
    assert config.parse_timeout_seconds == 30
    assert config.save_timeout_seconds == 10


def test_with_overrides_returns_copy():
    config = Configuration()
    changed = config.with_overrides(max_input_length=100)

    assert changed.max_input_length == 100
    assert config.max_input_length == 500


def test_timezone_override_is_resolved():
    config = Configuration(timezone_override="JST")
    assert timezone_name(config.timezone()) == "Asia/Tokyo"


def test_resolve_timezone_handles_names_and_abbreviations():
    assert resolve_timezone("UTC") == (pytz.utc, None)
    assert timezone_name(resolve_timezone("est")[0]) == "America/New_York"
    assert timezone_name(resolve_timezone("Europe/Paris")[0]) == "Europe/Paris"


def test_unknown_timezone_falls_back_to_utc_with_warning():
    tz, warning = resolve_timezone("Mars/Olympus_Mons")
    assert tz is pytz.utc
    assert "Mars/Olympus_Mons" in warning
