from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from dcreport import config as config_module
from dcreport.config import AppConfig, ConfigError, config_from_dict, default_config, load_config


def test_packaged_defaults() -> None:
    cfg = default_config()
    assert cfg.dc_rate == pytest.approx(0.3)
    assert "Dr. A. K. Sinha" in cfg.referrer_suggestions
    assert "USG WHOLE ABDOMEN" in cfg.investigation_suggestions
    assert cfg.referrer_rates == {}


def test_rate_for_falls_back_to_default() -> None:
    cfg = AppConfig(dc_rate=0.3, referrer_rates={"Dr. Y": 0.2})
    assert cfg.rate_for("Dr. Y") == 0.2
    assert cfg.rate_for("Dr. Z") == 0.3


def test_override_only_replaces_given_keys() -> None:
    base = AppConfig(dc_rate=0.3, referrer_suggestions=("A",), investigation_suggestions=("CBC",))
    cfg = config_from_dict({"dc_rate": "0.25"}, base)
    assert cfg.dc_rate == 0.25
    assert cfg.referrer_suggestions == ("A",)
    assert cfg.investigation_suggestions == ("CBC",)


@pytest.mark.parametrize(
    "raw",
    [
        {"dc_rate": "lots"},
        {"dc_rate": -0.1},
        {"dc_rate": True},
        {"referrer_suggestions": "Dr. A"},
        {"referrer_rates": []},
        {"referrer_rates": {"Dr. A": "x"}},
    ],
)
def test_invalid_values_raise(raw: dict) -> None:
    with pytest.raises(ConfigError):
        config_from_dict(raw)


def test_explicit_file(tmp_path: Path) -> None:
    path = tmp_path / "cfg.json"
    path.write_text(json.dumps({"dc_rate": 0.35, "referrer_rates": {"Dr. A": 0.1}}), encoding="utf-8")
    cfg = load_config(path)
    assert cfg.dc_rate == 0.35
    assert cfg.rate_for("Dr. A") == 0.1
    # suggestions still come from the packaged defaults
    assert cfg.referrer_suggestions == default_config().referrer_suggestions


def test_explicit_broken_file_raises(tmp_path: Path) -> None:
    path = tmp_path / "cfg.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(path)
    with pytest.raises(ConfigError):
        load_config(tmp_path / "missing.json")


def test_broken_user_file_is_ignored(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    caplog: pytest.LogCaptureFixture,
) -> None:
    user_file = tmp_path / ".dcreport_config.json"
    user_file.write_text("[1, 2", encoding="utf-8")
    monkeypatch.setattr(config_module, "USER_CONFIG_PATH", user_file)

    with caplog.at_level(logging.WARNING):
        cfg = load_config()

    assert cfg == default_config()
    assert "Ignoring broken user configuration" in caplog.text


def test_user_file_is_merged(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    user_file = tmp_path / ".dcreport_config.json"
    user_file.write_text(json.dumps({"dc_rate": 0.2}), encoding="utf-8")
    monkeypatch.setattr(config_module, "USER_CONFIG_PATH", user_file)
    assert load_config().dc_rate == 0.2
