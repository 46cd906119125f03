from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

logger = logging.getLogger(__name__)

ORIENTATIONS = (1, 3, 6, 8)
DEFAULT_IMAGE_SIZE = (4, 3)


def positive_or(value: float | None, fallback: float) -> float:
    """Return `value` when it is a positive number, else `fallback`."""
    if value is not None and value > 0:
        return value
    return fallback


@dataclass(frozen=True)
class ImageGeometry:
    """
    Orientation-normalized image dimensions.

    raw_width/raw_height describe the stored image (the frame SfM coordinates live in).
    width/height are the canonical ("basic") dimensions, swapped for orientation 6/8.
    """

    orientation: int
    raw_width: float
    raw_height: float

    @property
    def rotated(self) -> bool:
        return self.orientation in (6, 8)

    @property
    def width(self) -> float:
        return self.raw_height if self.rotated else self.raw_width

    @property
    def height(self) -> float:
        return self.raw_width if self.rotated else self.raw_height

    @property
    def basic_aspect(self) -> float:
        return self.width / self.height

    @property
    def size(self) -> float:
        return max(self.raw_width, self.raw_height)


def normalize_orientation(orientation: int | None) -> int:
    if orientation in ORIENTATIONS:
        return int(orientation)
    if orientation is not None:
        logger.debug("unsupported orientation %r, using 1", orientation)
    return 1


def normalize_geometry(
    width: float | None,
    height: float | None,
    orientation: int | None,
    image_size: tuple[float, float] | None = None,
) -> ImageGeometry:
    """
    Resolve declared dimensions and orientation into an ImageGeometry.

    `image_size` is the decoded image (w, h) as displayed; it is only used for
    declared dimensions that are missing or non-positive.
    """
    o = normalize_orientation(orientation)
    img_w, img_h = image_size if image_size is not None else DEFAULT_IMAGE_SIZE
    if o in (6, 8):
        img_w, img_h = img_h, img_w

    raw_w = positive_or(width, img_w)
    raw_h = positive_or(height, img_h)
    if raw_w != width or raw_h != height:
        logger.debug("image size fallback: declared=(%r, %r) used=(%r, %r)", width, height, raw_w, raw_h)
    return ImageGeometry(orientation=o, raw_width=float(raw_w), raw_height=float(raw_h))


def _rotate_basic(orientation: int, x: np.ndarray, y: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    if orientation == 3:
        return 1.0 - x, 1.0 - y
    if orientation == 6:
        return y, 1.0 - x
    if orientation == 8:
        return 1.0 - y, x
    return x, y


def _unrotate_basic(orientation: int, x: np.ndarray, y: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    if orientation == 3:
        return 1.0 - x, 1.0 - y
    if orientation == 6:
        return 1.0 - y, x
    if orientation == 8:
        return y, 1.0 - x
    return x, y


def basic_to_sfm(geometry: ImageGeometry, basic: np.ndarray) -> np.ndarray:
    """
    Basic coordinates (...,2) in [0,1]^2 -> SfM coordinates (...,2).

    SfM coordinates are centered on the stored image and scaled by its larger side.
    """
    basic = np.asarray(basic, dtype=np.float64)
    if basic.shape[-1] != 2:
        raise ValueError("basic coordinates must have shape (...,2)")
    rx, ry = _rotate_basic(geometry.orientation, basic[..., 0], basic[..., 1])

    w, h, s = geometry.raw_width, geometry.raw_height, geometry.size
    sfm_x = rx * w / s - w / s / 2.0
    sfm_y = ry * h / s - h / s / 2.0
    return np.stack([sfm_x, sfm_y], axis=-1)


def sfm_to_basic(geometry: ImageGeometry, sfm: np.ndarray) -> np.ndarray:
    """Inverse of `basic_to_sfm`."""
    sfm = np.asarray(sfm, dtype=np.float64)
    if sfm.shape[-1] != 2:
        raise ValueError("SfM coordinates must have shape (...,2)")

    w, h, s = geometry.raw_width, geometry.raw_height, geometry.size
    rx = (sfm[..., 0] + w / s / 2.0) / w * s
    ry = (sfm[..., 1] + h / s / 2.0) / h * s
    bx, by = _unrotate_basic(geometry.orientation, rx, ry)
    return np.stack([bx, by], axis=-1)
