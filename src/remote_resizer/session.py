"""
表示層からの操作を受け付けるセッション

選択ストア → 検証 → 送信 → 通知 の流れをまとめ、
表示層は このクラスの操作と各ストアの bind() だけを使う。
"""
from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional, Union

from loguru import logger

from .downloads import save_image_ref
from .errors import DownloadError, UnsupportedImageError, ValidationFailure
from .notifications import NotificationManager
from .request_validator import ValidationResult, validate
from .resize_service import ImageRef, RemoteResizeService
from .selection_store import CustomField, SelectedFile, SelectionStore
from .submission import SubmissionOrchestrator, SubmissionState
from .targets import DEFAULT_OUTPUT_FORMAT, OutputFormat, PresetName

UNSUPPORTED_FILE_MESSAGE = "Please choose an image file."
DOWNLOAD_FAILED_MESSAGE = "Download failed. Check the log for details."


class ResizeSession:
    """1画面分の状態と操作"""

    def __init__(
        self,
        service: RemoteResizeService,
        *,
        notifications: Optional[NotificationManager] = None,
        output_format: OutputFormat = DEFAULT_OUTPUT_FORMAT,
    ) -> None:
        self.selection = SelectionStore(output_format=output_format)
        self.notifications = notifications or NotificationManager()
        self.submission = SubmissionOrchestrator(service, on_failure=self._on_submission_failed)

    # ------------------------------------------------------------------
    # 選択操作
    # ------------------------------------------------------------------
    def pick_file(self, path: Union[str, Path]) -> Optional[SelectedFile]:
        try:
            handle = SelectedFile.from_path(path)
        except (UnsupportedImageError, OSError) as exc:
            logger.warning(f"File rejected: {path} ({exc})")
            self.notifications.notify(UNSUPPORTED_FILE_MESSAGE, "error")
            return None
        self.selection.set_file(handle)
        return handle

    def toggle_preset(self, name: PresetName) -> None:
        self.selection.toggle_preset(name)

    def edit_custom_size(self, index: int, field_name: CustomField, value: str) -> None:
        self.selection.set_custom_field(index, field_name, value)

    def add_custom_row(self) -> None:
        self.selection.add_custom_row()

    def remove_custom_row(self, index: int) -> None:
        self.selection.remove_custom_row(index)

    def set_format(self, fmt: OutputFormat) -> None:
        self.selection.set_format(fmt)

    # ------------------------------------------------------------------
    # 送信・通知・保存
    # ------------------------------------------------------------------
    def submit(self) -> Optional[asyncio.Task]:
        """現在の選択を検証して送信する。検証に失敗したら通知のみ。"""
        if self.submission.is_submitting:
            logger.debug("Submit intent ignored while submitting")
            return None

        result: ValidationResult = validate(self.selection.snapshot())
        if result.request is None:
            failure = result.failure or ValidationFailure.NO_TARGETS_SPECIFIED
            logger.info(f"Validation failed: {failure.value}")
            self.notifications.notify(failure.message, "error")
            return None

        return self.submission.submit(result.request)

    def dismiss_notification(self) -> None:
        self.notifications.dismiss()

    async def download(self, ref: ImageRef, destination_dir: Union[str, Path]) -> Optional[Path]:
        try:
            saved = await save_image_ref(ref, Path(destination_dir))
        except DownloadError as exc:
            logger.error(f"Download failed for {ref.filename}: {exc}")
            self.notifications.notify(DOWNLOAD_FAILED_MESSAGE, "error")
            return None
        self.notifications.notify(f"Saved {saved.name}", "info")
        return saved

    def _on_submission_failed(self, state: SubmissionState) -> None:
        self.notifications.notify(state.reason or "", "error")
