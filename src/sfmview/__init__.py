from sfmview import meta
from sfmview.api import Transform, load_transform, save_transform
from sfmview.core.extrinsics import InvalidPoseError
from sfmview.core.matrix import NonInvertibleTransformError
from sfmview.core.panorama import CroppedPanorama, FullPanorama, PanoramaCrop, Rectilinear
from sfmview.meta import MetaValidationError, NodeMeta, load_node_meta, parse_node_meta

__all__ = [
    "meta",
    "Transform",
    "load_transform",
    "save_transform",
    "InvalidPoseError",
    "NonInvertibleTransformError",
    "MetaValidationError",
    "NodeMeta",
    "load_node_meta",
    "parse_node_meta",
    "PanoramaCrop",
    "Rectilinear",
    "FullPanorama",
    "CroppedPanorama",
]
