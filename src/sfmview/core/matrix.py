from __future__ import annotations

import numpy as np


class NonInvertibleTransformError(ValueError):
    pass


def frozen_matrix(m: np.ndarray, shape: tuple[int, ...] = (4, 4)) -> np.ndarray:
    """Return a float64 copy of `m` with the given shape, marked read-only."""
    out = np.array(m, dtype=np.float64).reshape(shape)
    out.setflags(write=False)
    return out


def invert_matrix(m: np.ndarray, *, rcond: float = 1e-12) -> np.ndarray:
    """
    Invert a square homogeneous matrix.

    Raises NonInvertibleTransformError for non-finite or (numerically) singular input
    instead of returning a matrix full of inf/nan.
    """
    m = np.asarray(m, dtype=np.float64)
    if m.ndim != 2 or m.shape[0] != m.shape[1]:
        raise ValueError("matrix must be square")
    if not np.all(np.isfinite(m)):
        raise NonInvertibleTransformError("matrix has non-finite entries")

    with np.errstate(divide="ignore", invalid="ignore"):
        cond = float(np.linalg.cond(m))
    if not np.isfinite(cond) or cond * rcond >= 1.0:
        raise NonInvertibleTransformError(f"matrix is singular (cond={cond:.3e})")
    return np.linalg.inv(m)


def apply_homogeneous(m: np.ndarray, points: np.ndarray) -> np.ndarray:
    """
    Apply a 4x4 matrix to 3D points (...,3) and return the dehomogenized result (...,3).
    """
    points = np.asarray(points, dtype=np.float64)
    if points.shape[-1] != 3:
        raise ValueError("points must have shape (...,3)")
    xyz = points @ m[:3, :3].T + m[:3, 3]
    w = np.asarray(points @ m[3, :3] + m[3, 3])
    return xyz / w[..., None]


def apply_linear(m: np.ndarray, points: np.ndarray) -> np.ndarray:
    """Apply the affine part of a 4x4 matrix to (...,3) points (w assumed 1)."""
    points = np.asarray(points, dtype=np.float64)
    if points.shape[-1] != 3:
        raise ValueError("points must have shape (...,3)")
    return points @ m[:3, :3].T + m[:3, 3]
