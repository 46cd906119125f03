from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import cached_property

import numpy as np

from sfmview.core import panorama
from sfmview.core.extrinsics import InvalidPoseError, build_rt, build_srt
from sfmview.core.matrix import apply_homogeneous, apply_linear, invert_matrix
from sfmview.core.orientation import ImageGeometry, basic_to_sfm, normalize_geometry, positive_or, sfm_to_basic
from sfmview.core.panorama import PanoramaCrop, ProjectionRegime, classify_projection
from sfmview.core.projection import bearing_to_pixel, pixel_to_bearing
from sfmview.meta import NodeMeta

logger = logging.getLogger(__name__)


def _normalized_to_texture(orientation: int, w: float, h: float) -> np.ndarray:
    if orientation == 3:
        rows = [[-w, 0, 0, 0.5], [0, h, 0, 0.5]]
    elif orientation == 6:
        rows = [[0, -h, 0, 0.5], [-w, 0, 0, 0.5]]
    elif orientation == 8:
        rows = [[0, h, 0, 0.5], [w, 0, 0, 0.5]]
    else:
        rows = [[w, 0, 0, 0.5], [0, -h, 0, 0.5]]
    return np.array(rows + [[0, 0, 1, 0], [0, 0, 0, 1]], dtype=np.float64)


@dataclass(frozen=True, eq=False)
class Transform:
    """
    Coordinate transformations and projections for one image.

    Conventions:
    - rt maps world -> camera: X_cam = R X_world + t
    - SfM coordinates are centered on the stored image, unit = larger image side
    - basic coordinates are [0,1]^2 in the orientation-corrected image

    Build instances with `Transform.create` or `Transform.from_meta`. Instances compare
    by identity; compare `geometry`, `gpano` and the matrices to test equivalence.
    """

    geometry: ImageGeometry
    focal: float
    scale: float
    gpano: PanoramaCrop | None
    regime: ProjectionRegime
    rotation: np.ndarray  # (3,)
    translation: np.ndarray  # (3,)
    rt: np.ndarray  # (4,4)
    srt: np.ndarray  # (4,4)

    @classmethod
    def create(
        cls,
        *,
        rotation,
        translation,
        width: float | None = None,
        height: float | None = None,
        orientation: int | None = None,
        focal: float | None = None,
        scale: float | None = None,
        gpano: PanoramaCrop | None = None,
        image_size: tuple[float, float] | None = None,
    ) -> "Transform":
        geometry = normalize_geometry(width, height, orientation, image_size=image_size)
        f = float(positive_or(focal, 1.0))
        s = float(positive_or(scale, 0.0))
        if f != focal:
            logger.debug("focal fallback: declared=%r used=%r", focal, f)

        rt = build_rt(rotation, translation)
        srt = build_srt(rt, s)
        regime = classify_projection(gpano, f)
        logger.debug("transform regime=%s orientation=%d", type(regime).__name__, geometry.orientation)

        rotation = np.array(rotation, dtype=np.float64).reshape(3)
        translation = np.array(translation, dtype=np.float64).reshape(3)
        rotation.setflags(write=False)
        translation.setflags(write=False)
        return cls(
            geometry=geometry,
            focal=f,
            scale=s,
            gpano=gpano,
            regime=regime,
            rotation=rotation,
            translation=translation,
            rt=rt,
            srt=srt,
        )

    @classmethod
    def from_meta(
        cls,
        meta: NodeMeta,
        *,
        translation=None,
        image_size: tuple[float, float] | None = None,
    ) -> "Transform":
        """
        Build from parsed node metadata.

        `translation` overrides the one carried by the metadata (it is usually computed
        by an external alignment step); one of the two is required.
        """
        if translation is None:
            translation = meta.translation
        if translation is None:
            raise InvalidPoseError("translation is required")
        return cls.create(
            rotation=meta.rotation,
            translation=translation,
            width=meta.width,
            height=meta.height,
            orientation=meta.orientation,
            focal=meta.focal,
            scale=meta.atomic_scale,
            gpano=meta.gpano,
            image_size=image_size,
        )

    @property
    def orientation(self) -> int:
        return self.geometry.orientation

    @property
    def width(self) -> float:
        return self.geometry.width

    @property
    def height(self) -> float:
        return self.geometry.height

    @property
    def basic_aspect(self) -> float:
        return self.geometry.basic_aspect

    @property
    def is_full_panorama(self) -> bool:
        return panorama.is_full_panorama(self.gpano)

    @property
    def is_cropped_panorama(self) -> bool:
        return panorama.is_cropped_panorama(self.gpano)

    @cached_property
    def rt_inverse(self) -> np.ndarray:
        """camera -> world. Raises NonInvertibleTransformError if rt is singular."""
        inv = invert_matrix(self.rt)
        inv.setflags(write=False)
        return inv

    # Projections

    def project_sfm(self, point) -> np.ndarray:
        """World points (...,3) -> SfM coordinates (...,2)."""
        cam = apply_linear(self.rt, point)
        return bearing_to_pixel(self.regime, cam)

    def unproject_sfm(self, pixel, distance) -> np.ndarray:
        """SfM coordinates (...,2) -> world points (...,3) at `distance` from the camera center."""
        bearing = pixel_to_bearing(self.regime, pixel)
        distance = np.asarray(distance, dtype=np.float64)
        return apply_homogeneous(self.rt_inverse, bearing * distance[..., None])

    def project_basic(self, point) -> np.ndarray:
        """World points (...,3) -> basic coordinates (...,2)."""
        return sfm_to_basic(self.geometry, self.project_sfm(point))

    def unproject_basic(self, pixel, distance) -> np.ndarray:
        """Basic coordinates (...,2) -> world points (...,3)."""
        return self.unproject_sfm(basic_to_sfm(self.geometry, pixel), distance)

    def pixel_to_vertex(self, x, y, depth) -> np.ndarray:
        """
        Back-project SfM coordinates at camera-space `depth` with the pinhole model.

        This ignores the panorama regime and always uses rectilinear math; it is meant
        for lightweight preview meshes.
        """
        x = np.asarray(x, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64)
        depth = np.asarray(depth, dtype=np.float64)
        x, y, depth = np.broadcast_arrays(x, y, depth)
        cam = np.stack([x / self.focal * depth, y / self.focal * depth, depth], axis=-1)
        return apply_homogeneous(self.rt_inverse, cam)

    # Renderer helpers

    def projector_matrix(self) -> np.ndarray:
        """
        4x4 matrix projecting homogeneous world points to texture coordinates.

        After dehomogenization (divide by w) the first two components are (u, v) with
        u = basic x and v = 1 - basic y, for the rectilinear model.
        """
        g = self.geometry
        w = g.size / g.raw_width
        h = g.size / g.raw_height
        projector = _normalized_to_texture(g.orientation, w, h)
        f = self.focal
        projection = np.array(
            [[f, 0, 0, 0], [0, f, 0, 0], [0, 0, 0, 0], [0, 0, 1, 0]],
            dtype=np.float64,
        )
        return projector @ projection @ self.rt

    def up_vector(self) -> np.ndarray:
        """Orientation-adjusted up vector in world coordinates (unit length)."""
        R = self.rt[:3, :3]
        o = self.orientation
        if o == 3:
            return R[1, :].copy()
        if o == 6:
            return -R[0, :]
        if o == 8:
            return R[0, :].copy()
        return -R[1, :]
