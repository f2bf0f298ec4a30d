"""Scene-level primitive intersection testing.

Shapes are stored in a single ordered table, in Taichi fields. Each entry
is a tagged variant: ``shape_kinds[i]`` says whether the entry is a sphere
or a plane, and the remaining columns are interpreted accordingly:

    kind     shape_vectors[i]   shape_scalars[i]
    SPHERE   center             radius
    PLANE    unit normal        signed offset along the normal

``intersect_scene`` scans the table linearly in insertion order and keeps
the nearest accepted hit, which it returns together with the shape's
material id. There is no acceleration structure.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from tiletrace.scene.intersection import add_sphere, add_plane, clear_scene
    >>> clear_scene()
    >>> add_sphere((0, 0, 3), 0.5, material_id=0)
    >>> add_plane((0, 1, 0), -1.0, material_id=1)
    >>> # Use intersect_scene within a Taichi kernel
"""

from enum import IntEnum

import taichi as ti
import taichi.math as tm

from tiletrace.core.ray import normalize_tuple
from tiletrace.geometry.plane import Plane, hit_plane
from tiletrace.geometry.sphere import HitRecord, Sphere, hit_sphere

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


class ShapeKind(IntEnum):
    """Tag of an entry in the shape table."""

    SPHERE = 0
    PLANE = 1


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection with material information.

    Attributes:
        hit: Whether the ray intersected any shape (1 if hit, 0 if miss).
        t: The parameter value along the ray where intersection occurred.
        point: The 3D point where the ray intersected the surface.
        normal: The outward surface normal at the intersection (unit length).
        material_id: The material ID of the hit shape. -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    material_id: ti.i32


# Maximum number of shapes supported in the scene
MAX_SHAPES = 1024

# Shape storage: Structure of Arrays layout
shape_kinds = ti.field(dtype=ti.i32, shape=MAX_SHAPES)
shape_vectors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SHAPES)
shape_scalars = ti.field(dtype=ti.f32, shape=MAX_SHAPES)
shape_material_ids = ti.field(dtype=ti.i32, shape=MAX_SHAPES)
num_shapes = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Remove all shapes from the scene.

    Resets the shape count to zero. Stale field data is overwritten as new
    shapes are added.
    """
    num_shapes[None] = 0


def _add_shape(kind: ShapeKind, vector: tuple[float, float, float], scalar: float, material_id: int) -> int:
    idx = num_shapes[None]
    if idx >= MAX_SHAPES:
        raise RuntimeError(f"Maximum number of shapes ({MAX_SHAPES}) exceeded")
    shape_kinds[idx] = int(kind)
    shape_vectors[idx] = vec3(vector[0], vector[1], vector[2])
    shape_scalars[idx] = scalar
    shape_material_ids[idx] = material_id
    num_shapes[None] = idx + 1
    return idx


def add_sphere(center: tuple[float, float, float], radius: float, material_id: int = 0) -> int:
    """Add a sphere to the scene.

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere.
        material_id: The material ID to associate with this sphere.

    Returns:
        The index of the added shape.

    Raises:
        ValueError: If the radius is not positive.
        RuntimeError: If the maximum number of shapes is exceeded.
    """
    if radius <= 0.0:
        raise ValueError(f"Sphere radius must be positive, got {radius}")
    return _add_shape(ShapeKind.SPHERE, center, radius, material_id)


def add_plane(normal: tuple[float, float, float], offset: float, material_id: int = 0) -> int:
    """Add an infinite plane dot(p, normal) = offset to the scene.

    The normal is normalized before it is stored; the offset is interpreted
    along the normalized direction.

    Args:
        normal: The plane normal (any non-zero length).
        offset: Signed distance of the plane from the origin along the normal.
        material_id: The material ID to associate with this plane.

    Returns:
        The index of the added shape.

    Raises:
        ValueError: If the normal has zero length.
        RuntimeError: If the maximum number of shapes is exceeded.
    """
    unit_normal = normalize_tuple(normal, name="plane normal")
    return _add_shape(ShapeKind.PLANE, unit_normal, offset, material_id)


def get_shape_count() -> int:
    """Get the number of shapes in the scene."""
    return int(num_shapes[None])


@ti.func
def _make_miss_record() -> SceneHitRecord:
    """Create a SceneHitRecord indicating no intersection."""
    return SceneHitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        material_id=-1,
    )


@ti.func
def _intersect_shape(i: ti.i32, ray_origin: vec3, ray_direction: vec3) -> HitRecord:
    """Dispatch the intersection test for shape i on its kind."""
    rec = HitRecord(hit=0, t=0.0, point=vec3(0.0, 0.0, 0.0), normal=vec3(0.0, 0.0, 0.0))
    kind = shape_kinds[i]
    if kind == int(ShapeKind.SPHERE):
        sphere = Sphere(center=shape_vectors[i], radius=shape_scalars[i])
        rec = hit_sphere(ray_origin, ray_direction, sphere)
    elif kind == int(ShapeKind.PLANE):
        plane = Plane(normal=shape_vectors[i], offset=shape_scalars[i])
        rec = hit_plane(ray_origin, ray_direction, plane)
    return rec


@ti.func
def intersect_scene(ray_origin: vec3, ray_direction: vec3) -> SceneHitRecord:
    """Find the nearest intersection of a ray with the scene.

    Scans every shape in insertion order and keeps the accepted hit with the
    smallest t. On ties the earlier shape wins.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray (normalized).

    Returns:
        A SceneHitRecord for the closest intersection, or a miss record
        (hit == 0) if the ray escapes the scene.
    """
    result = _make_miss_record()

    n = num_shapes[None]
    for i in range(n):
        rec = _intersect_shape(i, ray_origin, ray_direction)
        if rec.hit == 1 and (result.hit == 0 or rec.t < result.t):
            result = SceneHitRecord(
                hit=1,
                t=rec.t,
                point=rec.point,
                normal=rec.normal,
                material_id=shape_material_ids[i],
            )

    return result
