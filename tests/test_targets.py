from __future__ import annotations

import pytest

from remote_resizer.targets import (
    CustomTarget,
    PresetTarget,
    TargetSet,
    format_label,
    format_mime_type,
    parse_dimension,
)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("3", 3),
        (" 640 ", 640),
        ("12.7", 12),
        ("1e3", 1000),
        ("", None),
        ("   ", None),
        ("abc", None),
        ("0", None),
        ("-5", None),
        ("0.5", None),
        ("nan", None),
        ("inf", None),
        ("1_000", None),
        ("0x10", None),
    ],
)
def test_parse_dimension(text: str, expected) -> None:
    assert parse_dimension(text) == expected


def test_custom_target_rejects_non_positive() -> None:
    with pytest.raises(ValueError):
        CustomTarget(0, 10)


def test_target_set_dedupes_and_keeps_order() -> None:
    targets = TargetSet.build(["medium", "thumbnail"], [(10, 10), (3, 4), (10, 10)])

    assert len(targets) == 4
    assert targets.preset_names() == ["medium", "thumbnail"]
    assert targets.custom_size_dicts() == [{"width": 10, "height": 10}, {"width": 3, "height": 4}]
    assert PresetTarget("medium") in targets
    assert CustomTarget(3, 4) in targets


def test_target_set_equality_ignores_order() -> None:
    assert TargetSet.build(["large"], [(1, 2)]) == TargetSet([CustomTarget(1, 2), PresetTarget("large")])
    assert not TargetSet()


def test_format_helpers() -> None:
    assert format_mime_type("jpeg") == "image/jpeg"
    assert format_mime_type("png") == "image/png"
    assert format_label("jpeg") == "JPG / JPEG"
    with pytest.raises(ValueError):
        format_mime_type("gif")
