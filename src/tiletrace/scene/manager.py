"""Unified scene manager coordinating shapes and materials.

This module provides the high-level scene building API. Materials live in a
single tagged table (Taichi fields) indexed by material id:

    material_types[id]     MaterialType tag
    material_albedos[id]   albedo (Lambertian, Metal); unused for Dielectric
    material_params[id]    fuzz (Metal) or refractive index (Dielectric)

Shapes live in the shape table of ``tiletrace.scene.intersection``. The
SceneManager keeps a Python-side mirror of both tables so a scene can be
inspected and serialized to/from JSON.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from tiletrace.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> mat_id = scene.add_lambertian_material(albedo=(0.8, 0.3, 0.3))
    >>> scene.add_sphere(center=(0, 0, 3), radius=0.5, material_id=mat_id)
"""

import json
import logging
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import Any

import taichi as ti
import taichi.math as tm

from tiletrace.core.ray import normalize_tuple
from tiletrace.materials.dielectric import check_refractive_index
from tiletrace.materials.lambertian import check_albedo
from tiletrace.materials.metal import check_metal_params
from tiletrace.scene.intersection import (
    MAX_SHAPES,
    ShapeKind,
    add_plane,
    add_sphere,
    clear_scene,
    get_shape_count,
)

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3


class MaterialType(IntEnum):
    """Enumeration of supported material types.

    Used for material dispatch in the path tracer to determine which
    scattering function to call.
    """

    LAMBERTIAN = 0
    METAL = 1
    DIELECTRIC = 2


# Maximum number of materials across all types
MAX_MATERIALS = 256

material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
material_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS)
material_params = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def clear_materials() -> None:
    """Clear the material table."""
    num_materials[None] = 0


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """Get the material type for a given material ID.

    Returns:
        The material type as an integer (see MaterialType enum), or -1 for
        invalid material IDs.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_types[material_id]
    return result


@ti.func
def get_material_albedo(material_id: ti.i32) -> vec3:
    """Get the albedo of a Lambertian or Metal material."""
    return material_albedos[material_id]


@ti.func
def get_material_param(material_id: ti.i32) -> ti.f32:
    """Get the scalar parameter (fuzz or refractive index) of a material."""
    return material_params[material_id]


@dataclass
class MaterialInfo:
    """Information about a registered material.

    Attributes:
        material_id: The material ID.
        material_type: The type of material (Lambertian, Metal, Dielectric).
        params: The material parameters as provided during creation.
    """

    material_id: int
    material_type: MaterialType
    params: dict[str, Any]


@dataclass
class ShapeInfo:
    """Information about a shape in the scene.

    Attributes:
        shape_index: The index in the shape table.
        kind: SPHERE or PLANE.
        params: The shape parameters as provided during creation
            (center/radius or normal/offset).
        material_id: The material ID assigned to the shape.
    """

    shape_index: int
    kind: ShapeKind
    params: dict[str, Any]
    material_id: int


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        materials: List of material configurations, in material id order.
        shapes: List of shape configurations, in scan order.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    shapes: list[dict[str, Any]] = field(default_factory=list)


def _as_vec3(values: Any, name: str) -> tuple[float, float, float]:
    if len(values) != 3:
        raise ValueError(f"{name} must have 3 components, got {values!r}")
    return (float(values[0]), float(values[1]), float(values[2]))


class SceneManager:
    """Unified scene manager coordinating shapes and materials.

    The scene is a fixed ordered collection of shapes, populated before a
    render and read-only while it runs. Every shape references a material
    by id.

    Attributes:
        materials: List of MaterialInfo for all registered materials.
        shapes: List of ShapeInfo for all shapes, in scan order.

    Example:
        >>> scene = SceneManager()
        >>> red = scene.add_lambertian_material(albedo=(0.8, 0.1, 0.1))
        >>> gold = scene.add_metal_material(albedo=(0.8, 0.6, 0.2), fuzz=0.3)
        >>> glass = scene.add_dielectric_material(refractive_index=1.5)
        >>> scene.add_sphere((0, 0, 3), 0.5, red)
        >>> scene.add_sphere((1, 0, 3), 0.5, gold)
        >>> scene.add_sphere((-1, 0, 3), 0.5, glass)
        >>> scene.add_plane((0, 1, 0), -0.5, red)
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.materials: list[MaterialInfo] = []
        self.shapes: list[ShapeInfo] = []
        self._clear_all()

    def _clear_all(self) -> None:
        clear_scene()
        clear_materials()
        self.materials.clear()
        self.shapes.clear()

    def clear(self) -> None:
        """Clear the entire scene (shapes and materials)."""
        self._clear_all()

    # =========================================================================
    # Material Management
    # =========================================================================

    def _register_material(
        self,
        material_type: MaterialType,
        albedo: tuple[float, float, float],
        param: float,
        params: dict[str, Any],
    ) -> int:
        material_id = num_materials[None]
        if material_id >= MAX_MATERIALS:
            raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

        material_types[material_id] = int(material_type)
        material_albedos[material_id] = vec3(albedo[0], albedo[1], albedo[2])
        material_params[material_id] = param
        num_materials[None] = material_id + 1

        self.materials.append(
            MaterialInfo(material_id=material_id, material_type=material_type, params=params)
        )
        logger.debug("Added %s material %d: %s", material_type.name.lower(), material_id, params)
        return material_id

    def add_lambertian_material(self, albedo: tuple[float, float, float]) -> int:
        """Add a Lambertian (diffuse) material to the scene.

        Args:
            albedo: The diffuse reflectance color as (R, G, B), each in [0, 1].

        Returns:
            The material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If any albedo component is outside [0, 1].
        """
        check_albedo(albedo)
        return self._register_material(
            MaterialType.LAMBERTIAN, albedo, 0.0, {"albedo": tuple(albedo)}
        )

    def add_metal_material(self, albedo: tuple[float, float, float], fuzz: float = 0.0) -> int:
        """Add a metal (specular reflective) material to the scene.

        Args:
            albedo: The reflective color as (R, G, B), each in [0, 1].
            fuzz: The reflection perturbation in [0, 1]. Default is 0
                (perfect mirror).

        Returns:
            The material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If any albedo component or the fuzz is outside [0, 1].
        """
        check_metal_params(albedo, fuzz)
        return self._register_material(
            MaterialType.METAL, albedo, fuzz, {"albedo": tuple(albedo), "fuzz": fuzz}
        )

    def add_dielectric_material(self, refractive_index: float = 1.5) -> int:
        """Add a dielectric (glass/water) material to the scene.

        Args:
            refractive_index: Index of refraction. Default is 1.5 (glass).

        Returns:
            The material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If the refractive index is not positive.
        """
        check_refractive_index(refractive_index)
        return self._register_material(
            MaterialType.DIELECTRIC,
            (1.0, 1.0, 1.0),
            refractive_index,
            {"refractive_index": refractive_index},
        )

    def get_material_count(self) -> int:
        """Get the total number of registered materials."""
        return int(num_materials[None])

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        """Get information about a material, or None for an unknown ID."""
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    def _check_material_id(self, material_id: int) -> None:
        if material_id < 0 or material_id >= num_materials[None]:
            raise ValueError(f"Invalid material_id: {material_id}")

    # =========================================================================
    # Shape Management
    # =========================================================================

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material_id: int,
    ) -> int:
        """Add a sphere to the scene.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The radius of the sphere (positive).
            material_id: The material ID to assign to the sphere.

        Returns:
            The index of the added shape.

        Raises:
            RuntimeError: If the maximum number of shapes is exceeded.
            ValueError: If material_id is invalid or the radius is not positive.
        """
        self._check_material_id(material_id)
        shape_index = add_sphere(center, radius, material_id)
        self.shapes.append(
            ShapeInfo(
                shape_index=shape_index,
                kind=ShapeKind.SPHERE,
                params={"center": tuple(center), "radius": radius},
                material_id=material_id,
            )
        )
        return shape_index

    def add_plane(
        self,
        normal: tuple[float, float, float],
        offset: float,
        material_id: int,
    ) -> int:
        """Add an infinite plane dot(p, normal) = offset to the scene.

        Args:
            normal: The plane normal as (x, y, z); normalized on insertion.
            offset: Signed distance from the origin along the normal.
            material_id: The material ID to assign to the plane.

        Returns:
            The index of the added shape.

        Raises:
            RuntimeError: If the maximum number of shapes is exceeded.
            ValueError: If material_id is invalid or the normal is zero.
        """
        self._check_material_id(material_id)
        shape_index = add_plane(normal, offset, material_id)
        self.shapes.append(
            ShapeInfo(
                shape_index=shape_index,
                kind=ShapeKind.PLANE,
                params={"normal": normalize_tuple(normal), "offset": offset},
                material_id=material_id,
            )
        )
        return shape_index

    # =========================================================================
    # Convenience Methods (add shape with material in one call)
    # =========================================================================

    def add_lambertian_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        albedo: tuple[float, float, float],
    ) -> tuple[int, int]:
        """Add a diffuse sphere. Returns (shape_index, material_id)."""
        material_id = self.add_lambertian_material(albedo)
        return self.add_sphere(center, radius, material_id), material_id

    def add_metal_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        albedo: tuple[float, float, float],
        fuzz: float = 0.0,
    ) -> tuple[int, int]:
        """Add a metal sphere. Returns (shape_index, material_id)."""
        material_id = self.add_metal_material(albedo, fuzz)
        return self.add_sphere(center, radius, material_id), material_id

    def add_dielectric_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        refractive_index: float = 1.5,
    ) -> tuple[int, int]:
        """Add a glass-like sphere. Returns (shape_index, material_id)."""
        material_id = self.add_dielectric_material(refractive_index)
        return self.add_sphere(center, radius, material_id), material_id

    def get_shape_count(self) -> int:
        """Get the number of shapes in the scene."""
        return get_shape_count()

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object."""
        config = SceneConfig()

        for mat in self.materials:
            mat_config: dict[str, Any] = {"type": mat.material_type.name.lower()}
            for key, value in mat.params.items():
                mat_config[key] = list(value) if isinstance(value, tuple) else value
            config.materials.append(mat_config)

        for shape in self.shapes:
            shape_config: dict[str, Any] = {"type": shape.kind.name.lower()}
            for key, value in shape.params.items():
                shape_config[key] = list(value) if isinstance(value, tuple) else value
            shape_config["material_id"] = shape.material_id
            config.shapes.append(shape_config)

        return config

    def from_config(self, config: SceneConfig) -> None:
        """Load a scene from a configuration object.

        Clears the current scene and loads the configuration.

        Raises:
            ValueError: If the configuration contains invalid data.
        """
        self.clear()

        # Materials first, shapes reference them by id
        for mat_config in config.materials:
            mat_type = str(mat_config.get("type", "")).lower()
            if mat_type == "lambertian":
                albedo = _as_vec3(mat_config.get("albedo", [0.5, 0.5, 0.5]), "albedo")
                self.add_lambertian_material(albedo)
            elif mat_type == "metal":
                albedo = _as_vec3(mat_config.get("albedo", [0.8, 0.8, 0.8]), "albedo")
                self.add_metal_material(albedo, float(mat_config.get("fuzz", 0.0)))
            elif mat_type == "dielectric":
                self.add_dielectric_material(float(mat_config.get("refractive_index", 1.5)))
            else:
                raise ValueError(f"Unknown material type: {mat_type}")

        for shape_config in config.shapes:
            shape_type = str(shape_config.get("type", "")).lower()
            material_id = int(shape_config.get("material_id", 0))
            if shape_type == "sphere":
                center = _as_vec3(shape_config.get("center", [0.0, 0.0, 0.0]), "center")
                self.add_sphere(center, float(shape_config.get("radius", 1.0)), material_id)
            elif shape_type == "plane":
                normal = _as_vec3(shape_config.get("normal", [0.0, 1.0, 0.0]), "normal")
                self.add_plane(normal, float(shape_config.get("offset", 0.0)), material_id)
            else:
                raise ValueError(f"Unknown shape type: {shape_type}")

        logger.info(
            "Loaded scene with %d materials and %d shapes",
            len(self.materials),
            len(self.shapes),
        )

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        config = self.to_config()
        return {"materials": config.materials, "shapes": config.shapes}

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary with 'materials' and 'shapes' keys."""
        config = SceneConfig(
            materials=data.get("materials", []),
            shapes=data.get("shapes", []),
        )
        self.from_config(config)

    def save(self, path: str | Path) -> None:
        """Write the scene to a JSON file.

        Raises:
            OSError: If the file cannot be written.
        """
        Path(path).write_text(json.dumps(self.to_dict(), indent=2), encoding="utf-8")
        logger.info("Saved scene to %s", path)

    # =========================================================================
    # Capacity Information
    # =========================================================================

    @staticmethod
    def get_max_shapes() -> int:
        """Get the maximum number of shapes supported."""
        return MAX_SHAPES

    @staticmethod
    def get_max_materials() -> int:
        """Get the maximum number of materials supported."""
        return MAX_MATERIALS


def load_scene(path: str | Path) -> SceneManager:
    """Build a SceneManager from a JSON scene file.

    The file holds an object with a "materials" list and a "shapes" list;
    see SceneManager.to_dict for the layout.

    Raises:
        OSError: If the file cannot be read.
        json.JSONDecodeError: If the file is not valid JSON.
        ValueError: If the scene description is invalid.
    """
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    scene = SceneManager()
    scene.from_dict(data)
    return scene
