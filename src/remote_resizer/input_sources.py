"""Input source helpers (drag-and-drop payload parsing) for the GUI."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Callable, List, Optional, Sequence
from urllib.parse import unquote, urlparse

from loguru import logger


def normalize_dropped_path_text(value: str) -> str:
    text = value.strip()
    if not text:
        return ""
    if text.startswith("file://"):
        parsed = urlparse(text)
        if parsed.scheme == "file":
            normalized = unquote(parsed.path or "")
            if parsed.netloc and parsed.netloc.lower() != "localhost":
                normalized = f"//{parsed.netloc}{normalized}"
            if os.name == "nt" and len(normalized) >= 3 and normalized[0] == "/" and normalized[2] == ":":
                normalized = normalized[1:]
            if normalized:
                text = normalized
    return text


def parse_drop_paths(raw_data: Any, splitlist: Optional[Callable[[str], Sequence[str]]] = None) -> List[Path]:
    """Turn a tkinterdnd2 <<Drop>> payload into a list of paths."""
    data = str(raw_data or "").strip()
    if not data:
        return []
    if splitlist is not None:
        raw_items = [str(item) for item in splitlist(data)]
    else:
        raw_items = [data]

    expanded_items: List[str] = []
    for item in raw_items:
        if "\n" in item:
            expanded_items.extend(line for line in item.splitlines() if line.strip())
        else:
            expanded_items.append(item)

    paths: List[Path] = []
    seen: set[str] = set()
    for item in expanded_items:
        text = item.strip()
        if text.startswith("{") and text.endswith("}"):
            text = text[1:-1]
        text = normalize_dropped_path_text(text.strip().strip('"'))
        if text and text not in seen:
            seen.add(text)
            paths.append(Path(text))
    return paths


def first_dropped_file(paths: Sequence[Path]) -> Optional[Path]:
    """Only one image is accepted; the first regular file wins."""
    for path in paths:
        if path.is_file():
            if len(paths) > 1:
                logger.info(f"{len(paths)} items dropped, using {path.name}")
            return path
    return None
