from remote_resizer.errors import GENERIC_SUBMISSION_MESSAGE, SubmissionTransportFailure
from remote_resizer.resize_service import ResultSet
from remote_resizer.selection_store import SelectedFile
from remote_resizer.submission import SubmissionState
from remote_resizer.text_presenter import (
    build_file_size_text,
    build_preset_summary_text,
    build_result_summary_text,
    build_selected_file_text,
    build_submit_button_text,
)

from conftest import make_reply


def test_build_preset_summary_text() -> None:
    assert build_preset_summary_text([]) == "Select presets..."
    assert build_preset_summary_text(["thumbnail", "medium"]) == "Thumbnail, Medium"


def test_build_selected_file_text() -> None:
    assert build_selected_file_text(None) == "Drag & drop an image here, or click to select"
    selected = SelectedFile(name="cat.png", data=b"x" * 2048, content_type="image/png")
    assert build_selected_file_text(selected) == "Selected File: cat.png (2.0 KB)"


def test_build_submit_button_text() -> None:
    assert build_submit_button_text(is_submitting=True) == "Processing..."
    assert build_submit_button_text(is_submitting=False) == "Upload & Resize"


def test_build_file_size_text() -> None:
    assert build_file_size_text(512) == "512 B"
    assert build_file_size_text(1536) == "1.5 KB"
    assert build_file_size_text(3 * 1024 * 1024) == "3.0 MB"


def test_build_result_summary_text() -> None:
    assert build_result_summary_text(SubmissionState.idle()) == ""
    assert build_result_summary_text(SubmissionState.submitting()) == "Uploading..."
    failed = SubmissionState.failed(SubmissionTransportFailure("down"))
    assert build_result_summary_text(failed) == GENERIC_SUBMISSION_MESSAGE

    one = SubmissionState.succeeded(ResultSet.from_reply(make_reply(["large"])))
    two = SubmissionState.succeeded(ResultSet.from_reply(make_reply(["large", "medium"])))
    assert build_result_summary_text(one) == "Results: original + 1 resized image"
    assert build_result_summary_text(two) == "Results: original + 2 resized images"
