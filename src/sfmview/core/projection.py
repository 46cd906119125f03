from __future__ import annotations

import numpy as np

from sfmview.core.panorama import CroppedPanorama, FullPanorama, ProjectionRegime, Rectilinear

TWO_PI = 2.0 * np.pi


def _spherical_to_bearing(lon: np.ndarray, lat: np.ndarray) -> np.ndarray:
    cos_lat = np.cos(lat)
    return np.stack([cos_lat * np.sin(lon), -np.sin(lat), cos_lat * np.cos(lon)], axis=-1)


def _bearing_to_spherical(bearing: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    x = bearing[..., 0]
    y = bearing[..., 1]
    z = bearing[..., 2]
    lon = np.arctan2(x, z)
    lat = np.arctan2(-y, np.sqrt(x * x + z * z))
    return lon, lat


def pixel_to_bearing(regime: ProjectionRegime, pixel: np.ndarray) -> np.ndarray:
    """
    SfM pixel coordinates (...,2) -> camera-space bearings (...,3).

    Bearings are unit length for every regime.
    """
    pixel = np.asarray(pixel, dtype=np.float64)
    if pixel.shape[-1] != 2:
        raise ValueError("pixel must have shape (...,2)")
    px = pixel[..., 0]
    py = pixel[..., 1]

    if isinstance(regime, FullPanorama):
        return _spherical_to_bearing(px * TWO_PI, -py * TWO_PI)

    if isinstance(regime, CroppedPanorama):
        c = regime.crop
        size = c.size
        full_x = px * size + c.cropped_area_width / 2.0 + c.cropped_area_left
        full_y = py * size + c.cropped_area_height / 2.0 + c.cropped_area_top
        lon = TWO_PI * (full_x / c.full_pano_width - 0.5)
        lat = -np.pi * (full_y / c.full_pano_height - 0.5)
        return _spherical_to_bearing(lon, lat)

    if isinstance(regime, Rectilinear):
        v = np.stack([px, py, np.full_like(px, regime.focal)], axis=-1)
        return v / np.linalg.norm(v, axis=-1, keepdims=True)

    raise TypeError(f"unknown projection regime: {regime!r}")


def bearing_to_pixel(regime: ProjectionRegime, bearing: np.ndarray) -> np.ndarray:
    """
    Camera-space bearings (...,3) -> SfM pixel coordinates (...,2).

    Panorama regimes only use the bearing direction; the rectilinear regime divides by
    z, so points behind the camera (z <= 0) map to mirrored or infinite pixels.
    """
    bearing = np.asarray(bearing, dtype=np.float64)
    if bearing.shape[-1] != 3:
        raise ValueError("bearing must have shape (...,3)")

    if isinstance(regime, FullPanorama):
        lon, lat = _bearing_to_spherical(bearing)
        return np.stack([lon / TWO_PI, -lat / TWO_PI], axis=-1)

    if isinstance(regime, CroppedPanorama):
        c = regime.crop
        lon, lat = _bearing_to_spherical(bearing)
        full_x = (lon / TWO_PI + 0.5) * c.full_pano_width
        full_y = (-lat / np.pi + 0.5) * c.full_pano_height
        size = c.size
        return np.stack(
            [
                (full_x - c.cropped_area_left - c.cropped_area_width / 2.0) / size,
                (full_y - c.cropped_area_top - c.cropped_area_height / 2.0) / size,
            ],
            axis=-1,
        )

    if isinstance(regime, Rectilinear):
        f = regime.focal
        with np.errstate(divide="ignore", invalid="ignore"):
            return np.stack([bearing[..., 0] * f / bearing[..., 2], bearing[..., 1] * f / bearing[..., 2]], axis=-1)

    raise TypeError(f"unknown projection regime: {regime!r}")
