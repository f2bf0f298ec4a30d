"""Scene module for scene management and ray-scene queries.

Components:
    intersection: Ordered shape table and nearest-hit search
    manager: Unified scene manager coordinating shapes and materials
    default_scene: The built-in demo scene

Scene data is organized for parallel access from every tile:
    - Structure-of-Arrays layout for shapes and materials
    - Populated before a render, read-only while it runs
"""

from .default_scene import (
    BACKGROUND_COLOR,
    DEFAULT_FIELD_OF_VIEW,
    DefaultSceneParams,
    create_default_camera,
    create_default_scene,
)
from .intersection import (
    MAX_SHAPES,
    SceneHitRecord,
    ShapeKind,
    add_plane,
    add_sphere,
    clear_scene,
    get_shape_count,
    intersect_scene,
)
from .manager import (
    MAX_MATERIALS,
    MaterialInfo,
    MaterialType,
    SceneConfig,
    SceneManager,
    ShapeInfo,
    get_material_albedo,
    get_material_param,
    get_material_type,
    load_scene,
    material_albedos,
    material_params,
    material_types,
    num_materials,
)

__all__ = [
    # Intersection module
    "SceneHitRecord",
    "ShapeKind",
    "add_sphere",
    "add_plane",
    "clear_scene",
    "get_shape_count",
    "intersect_scene",
    "MAX_SHAPES",
    # Manager module
    "SceneManager",
    "MaterialType",
    "MaterialInfo",
    "ShapeInfo",
    "SceneConfig",
    "MAX_MATERIALS",
    "get_material_type",
    "get_material_albedo",
    "get_material_param",
    "load_scene",
    "material_types",
    "material_albedos",
    "material_params",
    "num_materials",
    # Default scene module
    "create_default_scene",
    "create_default_camera",
    "DefaultSceneParams",
    "BACKGROUND_COLOR",
    "DEFAULT_FIELD_OF_VIEW",
]
