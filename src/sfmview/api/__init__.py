from sfmview.api.model_io import load_transform, save_transform
from sfmview.api.transform import Transform

__all__ = [
    "Transform",
    "load_transform",
    "save_transform",
]
