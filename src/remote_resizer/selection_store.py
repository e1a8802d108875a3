"""選択中のファイル・プリセット・カスタムサイズ・出力形式を保持するストア。

検証は行わない。入力途中の空文字や数値でない文字列もそのまま保持し、
判定は request_validator に任せる。
"""

from __future__ import annotations

import io
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Literal, Optional, Tuple, Union

from loguru import logger
from PIL import Image, UnidentifiedImageError

from .errors import UnsupportedImageError
from .observable import Observable
from .targets import (
    DEFAULT_OUTPUT_FORMAT,
    OUTPUT_FORMATS,
    PRESET_NAMES,
    OutputFormat,
    PresetName,
    TargetSet,
    parse_dimension,
)

CustomField = Literal["width", "height"]
_CUSTOM_FIELDS = ("width", "height")


@dataclass(frozen=True)
class SelectedFile:
    """ユーザーが選んだ画像1枚分のハンドル"""
    name: str
    data: bytes = field(repr=False)
    content_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.data)

    @classmethod
    def from_bytes(cls, name: str, data: bytes) -> "SelectedFile":
        """バイト列を画像として識別してハンドルを作る。"""
        try:
            with Image.open(io.BytesIO(data)) as image:
                image_format = image.format
        except Image.DecompressionBombError as exc:
            # 画素の展開はリモート側。巨大画像は拡張子から形式を決める
            image_format = Image.registered_extensions().get(Path(name).suffix.lower())
            if image_format is None:
                raise UnsupportedImageError(f"画像として読み込めません: {name}") from exc
            logger.warning(f"Large image accepted without pixel check: {name} ({exc})")
        except (UnidentifiedImageError, OSError) as exc:
            raise UnsupportedImageError(f"画像として読み込めません: {name}") from exc

        content_type = Image.MIME.get(image_format or "", "application/octet-stream")
        return cls(name=name, data=data, content_type=content_type)

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "SelectedFile":
        file_path = Path(path)
        return cls.from_bytes(file_path.name, file_path.read_bytes())


@dataclass(frozen=True)
class CustomSizeRow:
    """編集中のカスタムサイズ1行。値はテキストのまま持つ。"""
    width: str = ""
    height: str = ""

    def parse(self) -> Optional[Tuple[int, int]]:
        width = parse_dimension(self.width)
        height = parse_dimension(self.height)
        if width is None or height is None:
            return None
        return width, height


@dataclass(frozen=True)
class SelectionSnapshot:
    file: Optional[SelectedFile] = None
    presets: Tuple[PresetName, ...] = ()
    custom_sizes: Tuple[CustomSizeRow, ...] = (CustomSizeRow(),)
    output_format: OutputFormat = DEFAULT_OUTPUT_FORMAT

    def valid_custom_sizes(self) -> Tuple[Tuple[int, int], ...]:
        """変換できた行のみ返す。不正な行は黙って除外する。"""
        parsed = (row.parse() for row in self.custom_sizes)
        return tuple(size for size in parsed if size is not None)

    def target_set(self) -> TargetSet:
        return TargetSet.build(self.presets, self.valid_custom_sizes())


class SelectionStore(Observable):
    """ユーザー操作で更新される選択状態"""

    def __init__(self, output_format: OutputFormat = DEFAULT_OUTPUT_FORMAT) -> None:
        super().__init__()
        _check_format(output_format)
        self._snapshot = SelectionSnapshot(output_format=output_format)

    def snapshot(self) -> SelectionSnapshot:
        return self._snapshot

    # ------------------------------------------------------------------
    # 変更操作
    # ------------------------------------------------------------------
    def set_file(self, handle: SelectedFile) -> None:
        logger.debug(f"File selected: {handle.name} ({handle.size} bytes, {handle.content_type})")
        self._replace(file=handle)

    def clear_file(self) -> None:
        self._replace(file=None)

    def toggle_preset(self, name: PresetName) -> None:
        if name not in PRESET_NAMES:
            raise ValueError(f"未知のプリセットです: {name}")
        presets = self._snapshot.presets
        if name in presets:
            updated = tuple(p for p in presets if p != name)
        else:
            updated = presets + (name,)
        self._replace(presets=updated)

    def set_format(self, fmt: OutputFormat) -> None:
        _check_format(fmt)
        self._replace(output_format=fmt)

    def set_custom_field(self, index: int, field_name: CustomField, text: str) -> None:
        if field_name not in _CUSTOM_FIELDS:
            raise ValueError(f"未知の項目です: {field_name}")
        rows = list(self._snapshot.custom_sizes)
        if not 0 <= index < len(rows):
            return
        rows[index] = replace(rows[index], **{field_name: text})
        self._replace(custom_sizes=tuple(rows))

    def add_custom_row(self) -> None:
        self._replace(custom_sizes=self._snapshot.custom_sizes + (CustomSizeRow(),))

    def remove_custom_row(self, index: int) -> None:
        rows = self._snapshot.custom_sizes
        # 最低1行は常に残す
        if len(rows) <= 1 or not 0 <= index < len(rows):
            return
        self._replace(custom_sizes=rows[:index] + rows[index + 1:])

    def _replace(self, **changes) -> None:
        updated = replace(self._snapshot, **changes)
        if updated == self._snapshot:
            return
        self._snapshot = updated
        self._notify("snapshot", updated)


def _check_format(fmt: str) -> None:
    if fmt not in OUTPUT_FORMATS:
        raise ValueError(f"サポートされていない出力形式です: {fmt}")
