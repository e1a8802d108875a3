from __future__ import annotations

from pathlib import Path

from remote_resizer.input_sources import first_dropped_file, normalize_dropped_path_text, parse_drop_paths


def test_normalize_dropped_path_text_keeps_plain_path() -> None:
    value = "/tmp/example.jpg"
    assert normalize_dropped_path_text(value) == value


def test_normalize_dropped_path_text_decodes_file_uri() -> None:
    assert normalize_dropped_path_text("file:///tmp/a%20b.jpg") == "/tmp/a b.jpg"


def test_normalize_dropped_path_text_supports_unc_file_uri() -> None:
    assert normalize_dropped_path_text("file://server/share/sample.png") == "//server/share/sample.png"


def test_parse_drop_paths_handles_braced_items_and_duplicates() -> None:
    raw = "{/tmp/my photo.png} /tmp/b.jpg /tmp/b.jpg"
    splitlist = lambda data: ["{/tmp/my photo.png}", "/tmp/b.jpg", "/tmp/b.jpg"]  # noqa: E731

    assert parse_drop_paths(raw, splitlist) == [Path("/tmp/my photo.png"), Path("/tmp/b.jpg")]


def test_parse_drop_paths_splits_newlines_without_tk() -> None:
    raw = "file:///tmp/a.png\nfile:///tmp/b.png\n"
    assert parse_drop_paths(raw) == [Path("/tmp/a.png"), Path("/tmp/b.png")]
    assert parse_drop_paths("") == []
    assert parse_drop_paths(None) == []


def test_first_dropped_file_skips_directories(tmp_path: Path) -> None:
    folder = tmp_path / "folder"
    folder.mkdir()
    image = tmp_path / "a.png"
    image.write_bytes(b"x")

    assert first_dropped_file([folder, image, tmp_path / "missing.png"]) == image
    assert first_dropped_file([folder]) is None
