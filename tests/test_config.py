from pathlib import Path

import pytest

from expense_tracker.config import Settings


def test_defaults_without_environment():
    settings = Settings.from_env({})
    assert settings.alert_threshold == 80
    assert settings.chart_days == 7
    assert settings.currency == "$"
    assert settings.log_level == "INFO"
    assert settings.seed_file.name == "seed.json"


def test_environment_overrides():
    settings = Settings.from_env(
        {
            "EXPENSE_TRACKER_DATA_FILE": "/tmp/mine.json",
            "EXPENSE_TRACKER_ALERT_THRESHOLD": "90",
            "EXPENSE_TRACKER_CHART_DAYS": "14",
            "EXPENSE_TRACKER_CURRENCY": "€",
            "EXPENSE_TRACKER_LOG_LEVEL": "debug",
        }
    )
    assert settings.data_file == Path("/tmp/mine.json")
    assert settings.alert_threshold == 90.0
    assert settings.chart_days == 14
    assert settings.currency == "€"
    assert settings.log_level == "DEBUG"


def test_bad_number_names_the_variable():
    with pytest.raises(ValueError, match="EXPENSE_TRACKER_CHART_DAYS"):
        Settings.from_env({"EXPENSE_TRACKER_CHART_DAYS": "a week"})
