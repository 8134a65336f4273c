"""Application settings and data locations."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Dict, Optional

from loguru import logger

from .uploads import MAX_UPLOAD_SIZE

APP_NAME = "EmailBuilder"

DEFAULTS: Dict[str, str] = {
    "base_url": "http://localhost:5000",
    "uploads_url_prefix": "/uploads",
    "max_upload_bytes": str(MAX_UPLOAD_SIZE),
    "log_level": "INFO",
}

# Environment variables win over the settings file.
ENV_OVERRIDES: Dict[str, str] = {
    "base_url": "EMAILBUILDER_BASE_URL",
    "log_level": "EMAILBUILDER_LOG_LEVEL",
}


def app_data_dir() -> Path:
    """Return the directory holding settings, saved templates and uploads."""
    override = os.getenv("EMAILBUILDER_HOME")
    if override:
        target = Path(override)
    elif os.name == "nt":
        target = Path(os.getenv("LOCALAPPDATA", Path.home())) / APP_NAME
    else:
        target = Path.home() / ".local" / "share" / APP_NAME
    target.mkdir(parents=True, exist_ok=True)
    return target


class SettingsManager:
    """Very small settings helper storing JSON data."""

    def __init__(self, data_dir: Optional[Path] = None) -> None:
        self.data_dir = Path(data_dir) if data_dir is not None else app_data_dir()
        self.path = self.data_dir / "settings.json"
        self._settings: Dict[str, str] = {}
        self.load()

    def load(self) -> None:
        changed = False
        if self.path.exists():
            try:
                loaded = json.loads(self.path.read_text(encoding="utf-8"))
            except (OSError, ValueError) as exc:
                logger.warning(f"Ignoring unreadable settings file {self.path}: {exc}")
                loaded = {}
            self._settings = (
                {str(k): str(v) for k, v in loaded.items()}
                if isinstance(loaded, dict) else {}
            )
        else:
            self._settings = {}

        for key, value in DEFAULTS.items():
            if self._settings.get(key, "") == "":
                self._settings[key] = value
                changed = True

        if changed:
            try:
                self.save()
            except OSError as exc:
                logger.warning(f"Could not write settings file {self.path}: {exc}")

    def save(self) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps(self._settings, indent=2),
            encoding="utf-8")

    def get(self, key: str, default: str = "") -> str:
        env_name = ENV_OVERRIDES.get(key)
        if env_name and os.getenv(env_name):
            return os.environ[env_name]
        return self._settings.get(key, default)

    def set(self, key: str, value: str) -> None:
        self._settings[key] = value
        self.save()

    @property
    def base_url(self) -> str:
        return self.get("base_url", DEFAULTS["base_url"])

    @property
    def uploads_url_prefix(self) -> str:
        return self.get("uploads_url_prefix", DEFAULTS["uploads_url_prefix"])

    @property
    def max_upload_bytes(self) -> int:
        try:
            return int(self.get("max_upload_bytes", DEFAULTS["max_upload_bytes"]))
        except ValueError:
            return MAX_UPLOAD_SIZE

    @property
    def log_level(self) -> str:
        return self.get("log_level", DEFAULTS["log_level"]).upper()

    @property
    def templates_path(self) -> Path:
        return self.data_dir / "templates.json"

    @property
    def uploads_dir(self) -> Path:
        return self.data_dir / "uploads"
