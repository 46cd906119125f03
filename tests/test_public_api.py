from __future__ import annotations


def test_public_api_exports() -> None:
    import sfmview as sv

    assert hasattr(sv, "Transform")
    assert hasattr(sv, "load_transform")
    assert hasattr(sv, "save_transform")
    assert hasattr(sv, "parse_node_meta")
    assert issubclass(sv.InvalidPoseError, ValueError)
    assert issubclass(sv.NonInvertibleTransformError, ValueError)
    assert issubclass(sv.MetaValidationError, ValueError)
