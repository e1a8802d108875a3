"""
観察可能な状態コンテナ

各ストアは状態を自分で持ち、変更時に _notify() で購読者へ新しい値を渡す。
表示層は bind() で購読する。
"""
from __future__ import annotations

import threading
from typing import Any, Callable, Dict, List

from loguru import logger

Callback = Callable[[Any], None]


class Observable:
    """名前付きの変更通知を持つクラス"""

    def __init__(self) -> None:
        self._observers: Dict[str, List[Callback]] = {}
        self._lock = threading.Lock()

    def bind(self, property_name: str, callback: Callback) -> None:
        """プロパティの変更を監視"""
        with self._lock:
            observers = self._observers.setdefault(property_name, [])
            if callback not in observers:
                observers.append(callback)

    def _notify(self, property_name: str, value: Any) -> None:
        """購読者へ新しい値を渡す。1つの購読者の失敗で他を止めない。"""
        with self._lock:
            observers = list(self._observers.get(property_name, ()))

        for callback in observers:
            try:
                callback(value)
            except Exception:
                logger.exception(f"Observer callback error: property={property_name}")
