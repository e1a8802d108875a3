"""ランタイムログの保存先・保持ポリシーと loguru の出力先設定。"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Mapping, Optional

from loguru import logger

DEFAULT_RETENTION_DAYS = 30
DEFAULT_MAX_FILES = 100
APP_NAME = "RemoteResizer"
_RUN_LOG_PREFIX = "run_"
_RUN_LOG_SUFFIX = ".log"
_RUN_ID_FORMAT = "%Y%m%d_%H%M%S"

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}:{function}</cyan>: <white>{message}</white>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}: {message}"


@dataclass(frozen=True)
class RunLogArtifacts:
    run_id: str
    log_dir: Path
    run_log_path: Path


def get_default_log_dir(
    app_name: str = APP_NAME,
    *,
    os_name: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
    home: Optional[Path] = None,
) -> Path:
    """OSごとの標準ログディレクトリを返す。"""
    resolved_os_name = os_name or os.name
    resolved_env = os.environ if env is None else env
    resolved_home = home or Path.home()
    app_dir_name = app_name.strip().replace(" ", "")
    app_dir_name_lc = app_dir_name.lower()

    if resolved_os_name == "nt":
        local_app_data = resolved_env.get("LOCALAPPDATA") or resolved_env.get("APPDATA")
        if local_app_data:
            return Path(local_app_data) / app_dir_name / "logs"
        return resolved_home / f".{app_dir_name_lc}" / "logs"

    state_home = resolved_env.get("XDG_STATE_HOME")
    if state_home:
        return Path(state_home) / app_dir_name_lc / "logs"

    return resolved_home / ".local" / "state" / app_dir_name_lc / "logs"


def create_run_log_artifacts(
    app_name: str = APP_NAME,
    *,
    retention_days: int = DEFAULT_RETENTION_DAYS,
    max_files: int = DEFAULT_MAX_FILES,
    now: Optional[datetime] = None,
) -> RunLogArtifacts:
    """実行ごとのログファイルパスを作成して返す。"""
    now_dt = now or datetime.now()
    run_id = now_dt.strftime(_RUN_ID_FORMAT)
    log_dir = get_default_log_dir(app_name=app_name)
    log_dir.mkdir(parents=True, exist_ok=True)
    prune_run_logs(log_dir, retention_days=retention_days, max_files=max_files, now=now_dt)
    return RunLogArtifacts(
        run_id=run_id,
        log_dir=log_dir,
        run_log_path=log_dir / f"{_RUN_LOG_PREFIX}{run_id}{_RUN_LOG_SUFFIX}",
    )


def setup_logging(
    run_log_path: Optional[Path] = None,
    *,
    console_level: str = "INFO",
    file_level: str = "DEBUG",
) -> None:
    """loguru の出力先をコンソールと実行ログファイルに設定する。"""
    logger.remove()  # デフォルト設定を削除
    logger.add(sys.stderr, format=CONSOLE_FORMAT, colorize=True, level=console_level)
    if run_log_path is not None:
        logger.add(run_log_path, format=FILE_FORMAT, level=file_level, encoding="utf-8")


def prune_run_logs(
    log_dir: Path,
    *,
    retention_days: int = DEFAULT_RETENTION_DAYS,
    max_files: int = DEFAULT_MAX_FILES,
    now: Optional[datetime] = None,
) -> list[Path]:
    """保持日数・保持件数を超える実行ログを削除する。"""
    now_dt = now or datetime.now()
    cutoff = now_dt - timedelta(days=max(0, retention_days))

    removed: list[Path] = []
    for path in _list_run_logs(log_dir):
        try:
            modified_at = datetime.fromtimestamp(path.stat().st_mtime)
        except OSError:
            continue
        if modified_at < cutoff and _safe_unlink(path):
            removed.append(path)

    remaining = _list_run_logs(log_dir)
    if max_files > 0 and len(remaining) > max_files:
        for path in remaining[: len(remaining) - max_files]:
            if _safe_unlink(path):
                removed.append(path)

    return removed


def _list_run_logs(log_dir: Path) -> list[Path]:
    try:
        files = [path for path in log_dir.iterdir() if _is_run_log(path)]
    except OSError:
        return []
    return sorted(files, key=lambda p: p.stat().st_mtime)


def _is_run_log(path: Path) -> bool:
    name = path.name
    if not path.is_file() or not name.startswith(_RUN_LOG_PREFIX) or not name.endswith(_RUN_LOG_SUFFIX):
        return False
    run_id = name[len(_RUN_LOG_PREFIX) : -len(_RUN_LOG_SUFFIX)]
    try:
        datetime.strptime(run_id, _RUN_ID_FORMAT)
    except ValueError:
        return False
    return True


def _safe_unlink(path: Path) -> bool:
    try:
        path.unlink(missing_ok=True)
    except OSError:
        return False
    return True
