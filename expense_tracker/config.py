"""Runtime settings, read from environment variables.

Every value has a default so the dashboard starts with no configuration at
all; set ``EXPENSE_TRACKER_*`` variables to override.
"""
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

ENV_PREFIX = "EXPENSE_TRACKER_"


def _env_number(env: Mapping[str, str], name: str, default, kind=float):
    raw = env.get(ENV_PREFIX + name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return kind(raw)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}{name} must be a number, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    data_file: Path = _PROJECT_ROOT / "data" / "expenses.json"
    seed_file: Path = _PROJECT_ROOT / "data" / "seed.json"
    alert_threshold: float = 80
    chart_days: int = 7
    currency: str = "$"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if env is None else env
        defaults = cls()
        return cls(
            data_file=Path(env.get(ENV_PREFIX + "DATA_FILE", defaults.data_file)),
            seed_file=Path(env.get(ENV_PREFIX + "SEED_FILE", defaults.seed_file)),
            alert_threshold=_env_number(env, "ALERT_THRESHOLD", defaults.alert_threshold),
            chart_days=_env_number(env, "CHART_DAYS", defaults.chart_days, int),
            currency=env.get(ENV_PREFIX + "CURRENCY", defaults.currency),
            log_level=env.get(ENV_PREFIX + "LOG_LEVEL", defaults.log_level).upper(),
        )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
