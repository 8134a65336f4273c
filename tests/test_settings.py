from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from emailbuilder.core.settings import DEFAULTS, SettingsManager, app_data_dir


def test_defaults_are_written(tmp_path: Path) -> None:
    settings = SettingsManager(tmp_path)
    stored = json.loads((tmp_path / "settings.json").read_text(encoding="utf-8"))
    assert stored == DEFAULTS
    assert settings.max_upload_bytes == 5 * 1024 * 1024
    assert settings.templates_path == tmp_path / "templates.json"
    assert settings.uploads_dir == tmp_path / "uploads"


def test_values_persist(tmp_path: Path) -> None:
    SettingsManager(tmp_path).set("base_url", "https://mail.example.com")
    assert SettingsManager(tmp_path).base_url == "https://mail.example.com"


def test_environment_overrides_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    settings = SettingsManager(tmp_path)
    monkeypatch.setenv("EMAILBUILDER_BASE_URL", "http://cdn.local")
    monkeypatch.setenv("EMAILBUILDER_LOG_LEVEL", "debug")
    assert settings.base_url == "http://cdn.local"
    assert settings.log_level == "DEBUG"


def test_unreadable_file_falls_back_to_defaults(tmp_path: Path) -> None:
    (tmp_path / "settings.json").write_text("[broken", encoding="utf-8")
    settings = SettingsManager(tmp_path)
    assert settings.uploads_url_prefix == "/uploads"


def test_bad_upload_limit_uses_default(tmp_path: Path) -> None:
    settings = SettingsManager(tmp_path)
    settings.set("max_upload_bytes", "lots")
    assert settings.max_upload_bytes == 5 * 1024 * 1024


def test_app_data_dir_honours_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EMAILBUILDER_HOME", str(tmp_path / "home"))
    assert app_data_dir() == tmp_path / "home"
    assert (tmp_path / "home").is_dir()
