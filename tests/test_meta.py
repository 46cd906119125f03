import json
from pathlib import Path

import pytest

from sfmview.meta import MetaValidationError, load_node_meta, parse_node_meta


def _record(**overrides):
    data = {
        "rotation": [0.1, 0.2, 0.3],
        "orientation": 6,
        "width": 3000,
        "height": 4000,
        "cfocal": 0.85,
        "atomic_scale": 1.0,
        "gpano": {
            "CroppedAreaLeftPixels": 0,
            "CroppedAreaTopPixels": 500,
            "CroppedAreaImageWidthPixels": 8000,
            "CroppedAreaImageHeightPixels": 3000,
            "FullPanoWidthPixels": 8000,
            "FullPanoHeightPixels": 4000,
        },
    }
    data.update(overrides)
    return data


def test_parse_node_meta_ok():
    m = parse_node_meta(_record())
    assert m.rotation == (0.1, 0.2, 0.3)
    assert m.orientation == 6
    assert m.focal == 0.85
    assert m.translation is None
    assert m.gpano.cropped_area_top == 500
    assert m.gpano.full_pano_width == 8000


def test_parse_node_meta_keeps_missing_scalars_as_none():
    m = parse_node_meta({"rotation": [0, 0, 0], "width": None, "translation": [1, 2, 3]})
    assert m.width is None
    assert m.orientation is None
    assert m.gpano is None
    assert m.translation == (1.0, 2.0, 3.0)


def test_parse_node_meta_accepts_non_positive_values():
    m = parse_node_meta(_record(width=0, cfocal=-1.0, gpano=None))
    assert m.width == 0
    assert m.focal == -1.0


def test_parse_node_meta_rejects_missing_rotation():
    data = _record()
    del data["rotation"]
    with pytest.raises(MetaValidationError):
        parse_node_meta(data)


@pytest.mark.parametrize(
    "overrides",
    [
        {"rotation": [0.0, 0.0]},
        {"rotation": [0.0, float("nan"), 0.0]},
        {"translation": "1,2,3"},
        {"orientation": 1.5},
        {"width": "4000"},
        {"cfocal": True},
    ],
)
def test_parse_node_meta_rejects_malformed_fields(overrides):
    with pytest.raises(MetaValidationError):
        parse_node_meta(_record(**overrides))


@pytest.mark.parametrize(
    "gpano_overrides",
    [
        {"CroppedAreaLeftPixels": 100},
        {"CroppedAreaTopPixels": -1},
        {"FullPanoHeightPixels": 0},
        {"CroppedAreaImageWidthPixels": 0},
    ],
)
def test_parse_node_meta_rejects_crop_outside_panorama(gpano_overrides):
    data = _record()
    data["gpano"].update(gpano_overrides)
    with pytest.raises(MetaValidationError):
        parse_node_meta(data)


def test_parse_node_meta_rejects_incomplete_gpano():
    data = _record()
    del data["gpano"]["FullPanoWidthPixels"]
    with pytest.raises(MetaValidationError, match="FullPanoWidthPixels"):
        parse_node_meta(data)


def test_load_node_meta(tmp_path: Path) -> None:
    p = tmp_path / "node.json"
    p.write_text(json.dumps(_record()), encoding="utf-8")
    m = load_node_meta(p)
    assert m.width == 3000
    assert m.gpano is not None
