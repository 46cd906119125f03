from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import numpy as np

from sfmview.api.transform import Transform
from sfmview.meta import gpano_to_dict, parse_gpano

SCHEMA_VERSION = "sfmview.transform.v0"


def _to_float_vector(x: Any, size: int) -> np.ndarray:
    x = np.asarray(x, dtype=np.float64)
    x = x.reshape(size)
    if not np.all(np.isfinite(x)):
        raise ValueError("non-finite values")
    return x


def transform_to_dict(transform: Transform) -> dict[str, Any]:
    g = transform.geometry
    return {
        "schema_version": SCHEMA_VERSION,
        "image": {
            "orientation": int(g.orientation),
            "width_px": float(g.raw_width),
            "height_px": float(g.raw_height),
        },
        "camera": {"focal": float(transform.focal), "atomic_scale": float(transform.scale)},
        "pose": {
            "rotation": np.asarray(transform.rotation, dtype=np.float64).reshape(3).tolist(),
            "translation": np.asarray(transform.translation, dtype=np.float64).reshape(3).tolist(),
        },
        "gpano": gpano_to_dict(transform.gpano) if transform.gpano is not None else None,
    }


def transform_from_dict(meta: dict[str, Any]) -> Transform:
    if str(meta.get("schema_version")) != SCHEMA_VERSION:
        raise ValueError("unsupported transform schema")

    image = meta["image"]
    camera = meta["camera"]
    pose = meta["pose"]
    gpano = meta.get("gpano")

    return Transform.create(
        rotation=_to_float_vector(pose["rotation"], 3),
        translation=_to_float_vector(pose["translation"], 3),
        width=float(image["width_px"]),
        height=float(image["height_px"]),
        orientation=int(image["orientation"]),
        focal=float(camera["focal"]),
        scale=float(camera["atomic_scale"]),
        gpano=parse_gpano(gpano) if gpano is not None else None,
    )


def save_transform(path: Path, transform: Transform) -> Path:
    """
    Save the (normalized) construction inputs of a Transform as JSON.

    Derived matrices are not stored; they are rebuilt on load.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(transform_to_dict(transform), indent=2, sort_keys=True), encoding="utf-8")
    return path


def load_transform(path: Path) -> Transform:
    meta = json.loads(Path(path).read_text(encoding="utf-8"))
    return transform_from_dict(meta)
