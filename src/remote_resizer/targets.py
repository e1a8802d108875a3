"""
リサイズ対象（プリセット・カスタムサイズ）のデータモデル
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Literal, Optional, Tuple, Union

PresetName = Literal["thumbnail", "medium", "large"]
OutputFormat = Literal["jpeg", "png"]

PRESET_NAMES: Tuple[PresetName, ...] = ("thumbnail", "medium", "large")
OUTPUT_FORMATS: Tuple[OutputFormat, ...] = ("jpeg", "png")
DEFAULT_OUTPUT_FORMAT: OutputFormat = "jpeg"

_FORMAT_MIME_TYPES: Dict[str, str] = {
    "jpeg": "image/jpeg",
    "png": "image/png",
}

_FORMAT_LABELS: Dict[str, str] = {
    "jpeg": "JPG / JPEG",
    "png": "PNG",
}


def format_mime_type(output_format: str) -> str:
    """出力形式をサービスへ送るMIMEタイプに変換"""
    try:
        return _FORMAT_MIME_TYPES[output_format]
    except KeyError:
        raise ValueError(f"サポートされていない出力形式です: {output_format}") from None


def format_label(output_format: str) -> str:
    return _FORMAT_LABELS.get(output_format, output_format.upper())


def is_preset_name(value: str) -> bool:
    return value in PRESET_NAMES


def parse_dimension(text: object) -> Optional[int]:
    """入力テキストを正の整数に変換する。変換できなければ None。"""
    if isinstance(text, bool):
        return None
    if isinstance(text, (int, float)):
        value = float(text)
    else:
        stripped = str(text).strip()
        if not stripped or "_" in stripped:
            return None
        try:
            value = float(stripped)
        except ValueError:
            return None

    # NaN / 無限大は除外
    if not math.isfinite(value):
        return None

    dimension = int(value)
    if dimension <= 0:
        return None
    return dimension


@dataclass(frozen=True)
class PresetTarget:
    """サービス側で寸法が決まる名前付きプリセット"""
    name: PresetName
    kind: Literal["preset"] = "preset"

    @property
    def label(self) -> str:
        return self.name


@dataclass(frozen=True)
class CustomTarget:
    """幅×高さを明示したカスタムサイズ"""
    width: int
    height: int
    kind: Literal["custom"] = "custom"

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError("幅と高さは正の整数である必要があります")

    @property
    def label(self) -> str:
        return f"{self.width}x{self.height}"

    def to_dict(self) -> Dict[str, int]:
        return {"width": self.width, "height": self.height}


Target = Union[PresetTarget, CustomTarget]


class TargetSet:
    """リサイズ対象の集合。重複を除き、挿入順を保持する。"""

    def __init__(self, targets: Iterable[Target] = ()) -> None:
        self._targets: Dict[Target, None] = {}
        for target in targets:
            self._targets[target] = None

    @classmethod
    def build(cls, presets: Iterable[str], custom_sizes: Iterable[Tuple[int, int]]) -> "TargetSet":
        targets: List[Target] = [PresetTarget(name) for name in presets]  # type: ignore[arg-type]
        targets.extend(CustomTarget(width, height) for width, height in custom_sizes)
        return cls(targets)

    @property
    def presets(self) -> Tuple[PresetTarget, ...]:
        return tuple(t for t in self._targets if isinstance(t, PresetTarget))

    @property
    def custom_sizes(self) -> Tuple[CustomTarget, ...]:
        return tuple(t for t in self._targets if isinstance(t, CustomTarget))

    def preset_names(self) -> List[str]:
        return [t.name for t in self.presets]

    def custom_size_dicts(self) -> List[Dict[str, int]]:
        return [t.to_dict() for t in self.custom_sizes]

    def __iter__(self) -> Iterator[Target]:
        return iter(self._targets)

    def __len__(self) -> int:
        return len(self._targets)

    def __contains__(self, item: object) -> bool:
        return item in self._targets

    def __bool__(self) -> bool:
        return bool(self._targets)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TargetSet):
            return NotImplemented
        return set(self._targets) == set(other._targets)

    def __hash__(self) -> int:
        return hash(frozenset(self._targets))

    def __repr__(self) -> str:
        return f"TargetSet({list(self._targets)!r})"
