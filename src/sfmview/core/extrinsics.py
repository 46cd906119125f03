from __future__ import annotations

import numpy as np

from sfmview.core.matrix import frozen_matrix


class InvalidPoseError(ValueError):
    pass


def _as_vec3(v, name: str) -> np.ndarray:
    try:
        out = np.asarray(v, dtype=np.float64).reshape(3)
    except (TypeError, ValueError) as exc:
        raise InvalidPoseError(f"{name} must be a 3-vector") from exc
    if not np.all(np.isfinite(out)):
        raise InvalidPoseError(f"{name} must be finite")
    return out


def rotation_matrix(rotation) -> np.ndarray:
    """
    3x3 rotation matrix from an axis-angle vector (direction = axis, norm = angle in rad).

    A zero vector is the identity rotation.
    """
    from scipy.spatial.transform import Rotation as R  # type: ignore

    rvec = _as_vec3(rotation, "rotation")
    return R.from_rotvec(rvec).as_matrix()


def axis_angle_rotation(axis, angle: float) -> np.ndarray:
    """
    3x3 rotation matrix from an explicit axis (any length) and angle (rad).

    The axis is only needed when the angle is non-zero; a zero-length axis with a
    non-zero angle has no defined rotation.
    """
    axis = _as_vec3(axis, "axis")
    angle = float(angle)
    if not np.isfinite(angle):
        raise InvalidPoseError("angle must be finite")
    if angle == 0.0:
        return np.eye(3, dtype=np.float64)
    norm = float(np.linalg.norm(axis))
    if norm < 1e-15:
        raise InvalidPoseError("zero-length rotation axis with non-zero angle")
    return rotation_matrix(axis / norm * angle)


def build_rt(rotation, translation) -> np.ndarray:
    """
    Extrinsic camera matrix [R | t] (4x4, world -> camera), read-only.
    """
    Rm = rotation_matrix(rotation)
    t = _as_vec3(translation, "translation")
    rt = np.eye(4, dtype=np.float64)
    rt[:3, :3] = Rm
    rt[:3, 3] = t
    return frozen_matrix(rt)


def build_srt(rt: np.ndarray, scale: float) -> np.ndarray:
    """
    Scaled extrinsic matrix s * [R | t].

    The translation column is scaled by s, then the linear block is scaled uniformly
    by s; the homogeneous row stays (0, 0, 0, 1).
    """
    s = float(scale)
    srt = np.array(rt, dtype=np.float64).reshape(4, 4)
    srt[:3, 3] *= s
    srt[:3, :3] *= s
    return frozen_matrix(srt)
