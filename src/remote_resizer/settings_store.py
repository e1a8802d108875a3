"""ユーザー設定（接続先・表示設定・前回のフォルダ）の永続化ストア。"""

from __future__ import annotations

import json
import math
import os
from pathlib import Path
from typing import Any, Mapping, Optional

from loguru import logger

from .targets import OUTPUT_FORMATS

SCHEMA_VERSION = 1
API_URL_ENV = "REMOTE_RESIZER_API_URL"
_SETTINGS_FILENAME = "settings.json"
_APP_DIR_NAME = "RemoteResizer"


def default_settings() -> dict[str, Any]:
    """設定のデフォルト値を返す。"""
    return {
        "schema_version": SCHEMA_VERSION,
        "api_url": "http://127.0.0.1:8000",
        "request_timeout": 60.0,
        "notification_seconds": 3.0,
        "output_format": "jpeg",
        "appearance_mode": "system",
        "window_geometry": "900x760",
        "last_input_dir": "",
        "last_output_dir": "",
    }


_POSITIVE_NUMBER_KEYS = ("request_timeout", "notification_seconds")
_CHOICES: dict[str, tuple[str, ...]] = {
    "output_format": OUTPUT_FORMATS,
    "appearance_mode": ("system", "light", "dark"),
}


def _normalize_settings(values: Mapping[str, Any]) -> dict[str, Any]:
    """型や値が不正な既知の項目はデフォルト値に戻す。"""
    defaults = default_settings()
    normalized: dict[str, Any] = {}
    for key, value in values.items():
        if key not in defaults or key == "schema_version":
            normalized[key] = value
            continue
        if key in _POSITIVE_NUMBER_KEYS:
            valid = (
                isinstance(value, (int, float))
                and not isinstance(value, bool)
                and math.isfinite(value)
                and value > 0
            )
            if valid:
                value = float(value)
        elif key in _CHOICES:
            valid = value in _CHOICES[key]
        elif key == "api_url":
            valid = isinstance(value, str) and bool(value.strip())
        else:
            valid = isinstance(value, str)

        if valid:
            normalized[key] = value
        else:
            logger.warning(f"設定値が不正なためデフォルトを使います: {key}={value!r}")
            normalized[key] = defaults[key]
    return normalized


class SettingsStore:
    """設定のロード/保存を行う。"""

    def __init__(
        self,
        settings_path: Optional[Path] = None,
        *,
        env: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.settings_path = settings_path or self._build_default_settings_path()
        self._env = os.environ if env is None else env
        self._file_api_url: Optional[str] = None
        self._env_api_url: Optional[str] = None

    def load(self) -> dict[str, Any]:
        """設定を読み込む。環境変数の接続先があれば優先する。"""
        settings = default_settings()

        loaded = self._read_json(self.settings_path)
        if loaded is not None:
            settings.update(_normalize_settings(loaded))
            settings["schema_version"] = SCHEMA_VERSION

        # 環境変数の接続先はこのプロセス限り。保存時はファイルの値に戻す
        self._file_api_url = settings["api_url"]
        api_url = self._env.get(API_URL_ENV, "").strip()
        self._env_api_url = api_url or None
        if api_url:
            settings["api_url"] = api_url

        return settings

    def save(self, settings: Mapping[str, Any]) -> None:
        """設定を保存する。"""
        payload = default_settings()
        payload.update(_normalize_settings(settings))
        payload["schema_version"] = SCHEMA_VERSION
        if self._env_api_url is not None and payload["api_url"] == self._env_api_url:
            payload["api_url"] = self._file_api_url

        self.settings_path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.settings_path.with_suffix(f"{self.settings_path.suffix}.tmp")
        with tmp_path.open("w", encoding="utf-8") as fh:
            json.dump(payload, fh, ensure_ascii=False, indent=2)
        tmp_path.replace(self.settings_path)

    @staticmethod
    def _read_json(path: Path) -> Optional[dict[str, Any]]:
        if not path.exists():
            return None
        try:
            with path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError) as exc:
            logger.warning(f"設定ファイルを読み込めません: {path} ({exc})")
            return None
        if not isinstance(data, dict):
            return None
        return data

    @staticmethod
    def _build_default_settings_path() -> Path:
        if os.name == "nt":
            app_data = os.environ.get("APPDATA")
            if app_data:
                return Path(app_data) / _APP_DIR_NAME / _SETTINGS_FILENAME
            return Path.home() / ".remoteresizer" / _SETTINGS_FILENAME

        config_home = os.environ.get("XDG_CONFIG_HOME")
        if config_home:
            return Path(config_home) / "remoteresizer" / _SETTINGS_FILENAME
        return Path.home() / ".config" / "remoteresizer" / _SETTINGS_FILENAME
