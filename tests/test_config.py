"""
Tests for configuration loading.
"""

from datetime import time

import pytest

from slotscheduler.config import AppConfig, BusinessHoursConfig
from slotscheduler.domain.models import BusinessHours


def test_defaults():
    config = AppConfig()

    assert config.business_hours.get_start_time() == time(9, 0)
    assert config.business_hours.get_end_time() == time(17, 0)
    assert config.defaults.duration_minutes == 30
    assert config.store_url is None


def test_load_from_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "timezone: Europe/Berlin\n"
        "business_hours:\n"
        "  start: '08:30'\n"
        "  end: '16:00'\n"
        "data_file: data/meetings.json\n"
        "log_level: info\n",
        encoding="utf-8",
    )

    config = AppConfig.load_from_yaml(path)

    assert config.timezone == "Europe/Berlin"
    assert config.log_level == "INFO"
    assert config.data_file == tmp_path / "data" / "meetings.json"
    assert BusinessHours.from_config(config.business_hours) == BusinessHours(
        start_of_day=time(8, 30), end_of_day=time(16, 0)
    )


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        AppConfig.load_from_yaml(tmp_path / "nope.yaml")


def test_explicit_missing_file_raises_in_load(tmp_path):
    with pytest.raises(FileNotFoundError):
        AppConfig.load(tmp_path / "nope.yaml")


def test_non_mapping_yaml_is_rejected(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ValueError, match="mapping"):
        AppConfig.load_from_yaml(path)


@pytest.mark.parametrize(
    "start, end",
    [("17:00", "09:00"), ("09:00", "09:00"), ("9am", "17:00"), ("25:00", "26:00")],
)
def test_invalid_business_hours(start, end):
    with pytest.raises(ValueError):
        BusinessHoursConfig(start=start, end=end)


def test_duration_default_must_be_in_range():
    with pytest.raises(ValueError):
        AppConfig(defaults={"duration_minutes": 481})


def test_unknown_log_level():
    with pytest.raises(ValueError):
        AppConfig(log_level="chatty")
