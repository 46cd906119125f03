from __future__ import annotations

import numpy as np
import pytest

from sfmview.core.orientation import basic_to_sfm, normalize_geometry, sfm_to_basic


def test_rotated_orientation_swaps_canonical_size():
    g = normalize_geometry(3000, 4000, 6)
    assert g.raw_width == 3000
    assert g.raw_height == 4000
    assert g.width == 4000
    assert g.height == 3000
    assert g.basic_aspect == pytest.approx(4000 / 3000)


def test_upright_orientation_keeps_size():
    g = normalize_geometry(4000, 3000, 3)
    assert (g.width, g.height) == (4000, 3000)
    assert g.basic_aspect == pytest.approx(4 / 3)


def test_missing_dimensions_fall_back_to_decoded_image():
    g = normalize_geometry(None, -1, 1, image_size=(640, 480))
    assert (g.raw_width, g.raw_height) == (640, 480)

    # decoded size is given as displayed; stored frame is swapped for 6/8
    g = normalize_geometry(0, None, 8, image_size=(480, 640))
    assert (g.raw_width, g.raw_height) == (640, 480)
    assert (g.width, g.height) == (480, 640)


def test_defaults_without_image():
    g = normalize_geometry(None, None, None)
    assert g.orientation == 1
    assert (g.width, g.height) == (4, 3)


@pytest.mark.parametrize("orientation", [None, 0, -3, 2, 5, 7])
def test_unsupported_orientation_becomes_1(orientation):
    assert normalize_geometry(100, 50, orientation).orientation == 1


@pytest.mark.parametrize("orientation", [1, 3, 6, 8])
def test_basic_sfm_roundtrip(orientation):
    g = normalize_geometry(4000, 3000, orientation)
    rng = np.random.default_rng(orientation)
    basic = rng.uniform(0.0, 1.0, size=(500, 2))
    back = sfm_to_basic(g, basic_to_sfm(g, basic))
    assert np.max(np.abs(back - basic)) < 1e-12


@pytest.mark.parametrize("orientation", [1, 3, 6, 8])
def test_basic_center_is_sfm_origin(orientation):
    g = normalize_geometry(4000, 3000, orientation)
    assert np.allclose(basic_to_sfm(g, [0.5, 0.5]), [0.0, 0.0])


def test_basic_to_sfm_corners():
    g = normalize_geometry(4000, 3000, 1)
    assert np.allclose(basic_to_sfm(g, [1.0, 1.0]), [0.5, 0.375])
    assert np.allclose(basic_to_sfm(g, [0.0, 0.0]), [-0.5, -0.375])

    # orientation 6: basic top-left is the stored bottom-left
    g6 = normalize_geometry(4000, 3000, 6)
    assert np.allclose(basic_to_sfm(g6, [0.0, 0.0]), [-0.5, 0.375])


def test_basic_to_sfm_rejects_bad_shape():
    g = normalize_geometry(4, 3, 1)
    with pytest.raises(ValueError):
        basic_to_sfm(g, [0.1, 0.2, 0.3])
