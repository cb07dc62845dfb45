# src/dcreport/config.py

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, replace
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

log = logging.getLogger(__name__)

_DEFAULT_CONFIG_FILE = "config.json"

# per-user override, merged over the packaged defaults
USER_CONFIG_PATH = Path.home() / ".dcreport_config.json"


class ConfigError(ValueError):
    """Raised when a configuration value cannot be interpreted."""


@dataclass(frozen=True)
class AppConfig:
    """
    Settings for DC calculation and the entry form suggestions.

    - dc_rate: share of the gross fee paid out as DC (0.3 by default)
    - referrer_suggestions: referring doctors offered by the entry form
    - investigation_suggestions: test names offered by the entry form
    - referrer_rates: per-referrer rate, falls back to dc_rate
    """
    dc_rate: float = 0.3
    referrer_suggestions: Tuple[str, ...] = ()
    investigation_suggestions: Tuple[str, ...] = ()
    referrer_rates: Dict[str, float] = field(default_factory=dict)

    def rate_for(self, referrer: str) -> float:
        return self.referrer_rates.get(referrer, self.dc_rate)


def _coerce_rate(value: Any, key: str) -> float:
    if isinstance(value, bool):
        raise ConfigError(f"{key} must be a number, got {value!r}")
    try:
        rate = float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{key} must be a number, got {value!r}") from None
    if rate < 0:
        raise ConfigError(f"{key} must not be negative, got {rate}")
    return rate


def _coerce_names(value: Any, key: str) -> Tuple[str, ...]:
    if not isinstance(value, list):
        raise ConfigError(f"{key} must be a list of strings")
    return tuple(str(v).strip() for v in value if str(v).strip())


def config_from_dict(raw: Dict[str, Any], base: Optional[AppConfig] = None) -> AppConfig:
    """
    Build an AppConfig from a parsed JSON object.

    When base is given only the keys present in raw replace its values.
    Unknown keys are ignored.
    """
    if not isinstance(raw, dict):
        raise ConfigError("configuration must be a JSON object")

    cfg = base or AppConfig()
    changes: Dict[str, Any] = {}

    if "dc_rate" in raw:
        changes["dc_rate"] = _coerce_rate(raw["dc_rate"], "dc_rate")
    if "referrer_suggestions" in raw:
        changes["referrer_suggestions"] = _coerce_names(
            raw["referrer_suggestions"], "referrer_suggestions"
        )
    if "investigation_suggestions" in raw:
        changes["investigation_suggestions"] = _coerce_names(
            raw["investigation_suggestions"], "investigation_suggestions"
        )
    if "referrer_rates" in raw:
        rates = raw["referrer_rates"]
        if not isinstance(rates, dict):
            raise ConfigError("referrer_rates must be an object")
        changes["referrer_rates"] = {
            str(name): _coerce_rate(rate, f"referrer_rates[{name!r}]")
            for name, rate in rates.items()
        }

    return replace(cfg, **changes)


@lru_cache(maxsize=None)
def default_config() -> AppConfig:
    """Settings bundled with the package (dcreport/data/config.json)."""
    with resources.files("dcreport.data").joinpath(_DEFAULT_CONFIG_FILE).open(
        "r", encoding="utf-8"
    ) as f:
        raw = json.load(f)
    return config_from_dict(raw)


def load_config(path: Optional[Path] = None) -> AppConfig:
    """
    Packaged defaults merged with an override file.

    - explicit path: unreadable or invalid content raises ConfigError
    - no path: ~/.dcreport_config.json is used when present. A broken
      file is logged and the defaults are returned.
    """
    base = default_config()

    if path is not None:
        try:
            raw = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"cannot read configuration {path}: {e}") from e
        return config_from_dict(raw, base)

    if not USER_CONFIG_PATH.exists():
        return base

    try:
        raw = json.loads(USER_CONFIG_PATH.read_text(encoding="utf-8"))
        return config_from_dict(raw, base)
    except (OSError, json.JSONDecodeError, ConfigError) as e:
        log.warning("Ignoring broken user configuration %s: %s", USER_CONFIG_PATH, e)
        return base
