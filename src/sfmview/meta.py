from __future__ import annotations

import json
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from sfmview.core.panorama import PanoramaCrop


class MetaValidationError(ValueError):
    pass


GPANO_KEYS = (
    "CroppedAreaLeftPixels",
    "CroppedAreaTopPixels",
    "CroppedAreaImageWidthPixels",
    "CroppedAreaImageHeightPixels",
    "FullPanoWidthPixels",
    "FullPanoHeightPixels",
)


@dataclass(frozen=True)
class NodeMeta:
    """
    Per-image metadata as served by the upstream API.

    Scalars are None when missing; non-positive values are kept as-is and resolved to
    defaults when the Transform is built.
    """

    rotation: tuple[float, float, float]
    orientation: int | None = None
    width: float | None = None
    height: float | None = None
    focal: float | None = None
    atomic_scale: float | None = None
    gpano: PanoramaCrop | None = None
    translation: tuple[float, float, float] | None = None


def _require(cond: bool, msg: str) -> None:
    if not cond:
        raise MetaValidationError(msg)


def _is_number(x: Any) -> bool:
    return isinstance(x, (int, float)) and not isinstance(x, bool)


def _optional_number(data: dict[str, Any], key: str) -> float | None:
    value = data.get(key)
    if value is None:
        return None
    _require(_is_number(value), f"{key} must be a number")
    return value


def _vec3(value: Any, key: str) -> tuple[float, float, float]:
    _require(isinstance(value, (list, tuple)) and len(value) == 3, f"{key} must be [x,y,z]")
    _require(all(_is_number(v) and math.isfinite(v) for v in value), f"{key} values must be finite numbers")
    return float(value[0]), float(value[1]), float(value[2])


def parse_gpano(gpano: dict[str, Any]) -> PanoramaCrop:
    _require(isinstance(gpano, dict), "gpano must be an object")
    missing = [k for k in GPANO_KEYS if k not in gpano]
    _require(not missing, f"gpano is missing {', '.join(missing)}")
    _require(all(_is_number(gpano[k]) for k in GPANO_KEYS), "gpano values must be numbers")

    left = float(gpano["CroppedAreaLeftPixels"])
    top = float(gpano["CroppedAreaTopPixels"])
    cw = float(gpano["CroppedAreaImageWidthPixels"])
    ch = float(gpano["CroppedAreaImageHeightPixels"])
    fw = float(gpano["FullPanoWidthPixels"])
    fh = float(gpano["FullPanoHeightPixels"])

    _require(fw > 0 and fh > 0, "gpano full panorama size must be > 0")
    _require(cw > 0 and ch > 0, "gpano cropped area size must be > 0")
    _require(left >= 0 and top >= 0, "gpano cropped area origin must be >= 0")
    _require(left + cw <= fw and top + ch <= fh, "gpano cropped area must lie within the full panorama")

    return PanoramaCrop(
        cropped_area_left=left,
        cropped_area_top=top,
        cropped_area_width=cw,
        cropped_area_height=ch,
        full_pano_width=fw,
        full_pano_height=fh,
    )


def gpano_to_dict(crop: PanoramaCrop) -> dict[str, float]:
    return {
        "CroppedAreaLeftPixels": crop.cropped_area_left,
        "CroppedAreaTopPixels": crop.cropped_area_top,
        "CroppedAreaImageWidthPixels": crop.cropped_area_width,
        "CroppedAreaImageHeightPixels": crop.cropped_area_height,
        "FullPanoWidthPixels": crop.full_pano_width,
        "FullPanoHeightPixels": crop.full_pano_height,
    }


def load_node_meta(path: Path) -> NodeMeta:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return parse_node_meta(data)


def parse_node_meta(data: dict[str, Any]) -> NodeMeta:
    _require(isinstance(data, dict), "node metadata must be an object")
    _require("rotation" in data, "rotation is required")
    rotation = _vec3(data["rotation"], "rotation")

    translation = data.get("translation")
    if translation is not None:
        translation = _vec3(translation, "translation")

    orientation = _optional_number(data, "orientation")
    if orientation is not None:
        _require(float(orientation).is_integer(), "orientation must be an integer")
        orientation = int(orientation)

    gpano = data.get("gpano")

    return NodeMeta(
        rotation=rotation,
        orientation=orientation,
        width=_optional_number(data, "width"),
        height=_optional_number(data, "height"),
        focal=_optional_number(data, "cfocal"),
        atomic_scale=_optional_number(data, "atomic_scale"),
        gpano=parse_gpano(gpano) if gpano is not None else None,
        translation=translation,
    )
