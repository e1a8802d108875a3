"""Pure text builders for GUI labels."""

from __future__ import annotations

from typing import Optional, Sequence

from .selection_store import SelectedFile
from .submission import SubmissionState


def build_preset_summary_text(presets: Sequence[str]) -> str:
    """Build the label shown on the preset dropdown."""
    if not presets:
        return "Select presets..."
    return ", ".join(p[:1].upper() + p[1:] for p in presets)


def build_selected_file_text(selected: Optional[SelectedFile]) -> str:
    if selected is None:
        return "Drag & drop an image here, or click to select"
    return f"Selected File: {selected.name} ({build_file_size_text(selected.size)})"


def build_submit_button_text(*, is_submitting: bool) -> str:
    return "Processing..." if is_submitting else "Upload & Resize"


def build_file_size_text(size_bytes: int) -> str:
    if size_bytes < 1024:
        return f"{size_bytes} B"
    if size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    return f"{size_bytes / (1024 * 1024):.1f} MB"


def build_result_summary_text(state: SubmissionState) -> str:
    """Build the heading shown above the result list."""
    if state.is_submitting:
        return "Uploading..."
    if state.is_failed:
        return state.reason or ""
    if state.is_succeeded and state.result is not None:
        count = len(state.result.variants)
        noun = "image" if count == 1 else "images"
        return f"Results: original + {count} resized {noun}"
    return ""
