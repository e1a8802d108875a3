"""
選択状態のスナップショットを送信可能なリクエストへ検証する
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .errors import ValidationFailure
from .selection_store import SelectedFile, SelectionSnapshot
from .targets import OutputFormat, TargetSet, format_mime_type


@dataclass(frozen=True)
class ResizeRequest:
    """送信1回分の内容。対象が空のものは作らない。"""
    file: SelectedFile
    output_format: OutputFormat
    targets: TargetSet

    def __post_init__(self) -> None:
        if not self.targets:
            raise ValueError("リサイズ対象が空です")

    @property
    def format_mime_type(self) -> str:
        return format_mime_type(self.output_format)


@dataclass(frozen=True)
class ValidationResult:
    request: Optional[ResizeRequest] = None
    failure: Optional[ValidationFailure] = None

    @property
    def ok(self) -> bool:
        return self.request is not None

    def __bool__(self) -> bool:
        return self.ok


def validate(snapshot: SelectionSnapshot) -> ValidationResult:
    """スナップショットを検証する。

    カスタムサイズのうち幅・高さのどちらかが正の数値にならない行は
    エラーにせず除外する。
    """
    if snapshot.file is None:
        return ValidationResult(failure=ValidationFailure.NO_FILE_SELECTED)

    targets = snapshot.target_set()
    if not targets:
        return ValidationResult(failure=ValidationFailure.NO_TARGETS_SPECIFIED)

    return ValidationResult(
        request=ResizeRequest(
            file=snapshot.file,
            output_format=snapshot.output_format,
            targets=targets,
        )
    )
