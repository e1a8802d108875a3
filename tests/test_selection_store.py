from __future__ import annotations

from pathlib import Path

import pytest
from PIL import Image

from remote_resizer.errors import UnsupportedImageError
from remote_resizer.selection_store import CustomSizeRow, SelectedFile, SelectionStore
from remote_resizer.targets import PRESET_NAMES

from conftest import make_png_bytes


@pytest.mark.parametrize("name", PRESET_NAMES)
def test_toggle_preset_twice_restores_selection(name: str) -> None:
    store = SelectionStore()
    store.toggle_preset("large")
    before = store.snapshot().presets

    store.toggle_preset(name)
    store.toggle_preset(name)

    assert set(store.snapshot().presets) == set(before)


def test_toggle_preset_keeps_insertion_order() -> None:
    store = SelectionStore()
    store.toggle_preset("medium")
    store.toggle_preset("thumbnail")
    store.toggle_preset("large")
    store.toggle_preset("thumbnail")

    assert store.snapshot().presets == ("medium", "large")


def test_toggle_unknown_preset_raises() -> None:
    with pytest.raises(ValueError):
        SelectionStore().toggle_preset("huge")  # type: ignore[arg-type]


def test_remove_custom_row_never_drops_below_one() -> None:
    store = SelectionStore()
    store.add_custom_row()
    store.add_custom_row()

    for index in (0, 5, 0, 0, 0, -1, 0):
        store.remove_custom_row(index)
        assert len(store.snapshot().custom_sizes) >= 1

    assert len(store.snapshot().custom_sizes) == 1


def test_remove_custom_row_removes_only_target_row() -> None:
    store = SelectionStore()
    store.set_custom_field(0, "width", "1")
    store.add_custom_row()
    store.set_custom_field(1, "width", "2")
    store.add_custom_row()
    store.set_custom_field(2, "width", "3")

    store.remove_custom_row(1)

    assert [row.width for row in store.snapshot().custom_sizes] == ["1", "3"]


def test_set_custom_field_updates_one_field_only() -> None:
    store = SelectionStore()
    store.add_custom_row()
    store.set_custom_field(1, "width", "640")
    store.set_custom_field(1, "height", "abc")

    assert store.snapshot().custom_sizes == (CustomSizeRow(), CustomSizeRow("640", "abc"))


def test_set_custom_field_out_of_range_is_noop() -> None:
    store = SelectionStore()
    before = store.snapshot()

    store.set_custom_field(3, "width", "10")
    store.set_custom_field(-1, "height", "10")

    assert store.snapshot() is before


def test_set_custom_field_rejects_unknown_field() -> None:
    with pytest.raises(ValueError):
        SelectionStore().set_custom_field(0, "depth", "1")  # type: ignore[arg-type]


def test_format_defaults_to_jpeg_and_can_change() -> None:
    store = SelectionStore()
    assert store.snapshot().output_format == "jpeg"

    store.set_format("png")
    assert store.snapshot().output_format == "png"

    with pytest.raises(ValueError):
        store.set_format("gif")  # type: ignore[arg-type]


def test_observers_receive_snapshot_on_change() -> None:
    store = SelectionStore()
    received = []
    store.bind("snapshot", received.append)

    store.toggle_preset("thumbnail")
    store.set_format("jpeg")  # 変化なし
    store.remove_custom_row(0)  # 変化なし

    assert len(received) == 1
    assert received[0].presets == ("thumbnail",)


def test_set_file_replaces_previous_handle(selected_png: SelectedFile) -> None:
    store = SelectionStore()
    store.set_file(selected_png)
    other = SelectedFile(name="other.png", data=b"x", content_type="image/png")
    store.set_file(other)

    assert store.snapshot().file is other
    store.clear_file()
    assert store.snapshot().file is None


def test_selected_file_from_path_detects_content_type(sample_png: Path, sample_jpeg: Path) -> None:
    png = SelectedFile.from_path(sample_png)
    jpeg = SelectedFile.from_path(sample_jpeg)

    assert png.name == "photo.png"
    assert png.content_type == "image/png"
    assert png.data == sample_png.read_bytes()
    assert jpeg.content_type == "image/jpeg"


def test_selected_file_rejects_non_image(tmp_path: Path) -> None:
    path = tmp_path / "notes.txt"
    path.write_text("not an image", encoding="utf-8")

    with pytest.raises(UnsupportedImageError):
        SelectedFile.from_path(path)


def test_selected_file_accepts_image_over_pixel_limit(monkeypatch) -> None:
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)
    data = make_png_bytes(size=(40, 40))

    selected = SelectedFile.from_bytes("panorama.png", data)

    assert selected.content_type == "image/png"
    assert selected.data == data


def test_selected_file_over_pixel_limit_needs_known_extension(monkeypatch) -> None:
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)

    with pytest.raises(UnsupportedImageError):
        SelectedFile.from_bytes("panorama.bin", make_png_bytes(size=(40, 40)))
