from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class PanoramaCrop:
    """
    Gpano crop metadata: where the captured image sits inside the full
    equirectangular panorama (all values in full-panorama pixels).
    """

    cropped_area_left: float
    cropped_area_top: float
    cropped_area_width: float
    cropped_area_height: float
    full_pano_width: float
    full_pano_height: float

    @property
    def size(self) -> float:
        return max(self.cropped_area_width, self.cropped_area_height)


@dataclass(frozen=True)
class Rectilinear:
    focal: float


@dataclass(frozen=True)
class FullPanorama:
    pass


@dataclass(frozen=True)
class CroppedPanorama:
    crop: PanoramaCrop


ProjectionRegime = Union[Rectilinear, FullPanorama, CroppedPanorama]


def is_full_panorama(crop: PanoramaCrop | None) -> bool:
    return (
        crop is not None
        and crop.cropped_area_left == 0
        and crop.cropped_area_top == 0
        and crop.cropped_area_width == crop.full_pano_width
        and crop.cropped_area_height == crop.full_pano_height
    )


def is_cropped_panorama(crop: PanoramaCrop | None) -> bool:
    return crop is not None and not is_full_panorama(crop)


def classify_projection(crop: PanoramaCrop | None, focal: float) -> ProjectionRegime:
    if is_full_panorama(crop):
        return FullPanorama()
    if crop is not None:
        return CroppedPanorama(crop=crop)
    return Rectilinear(focal=float(focal))
