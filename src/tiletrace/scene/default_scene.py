"""Built-in demo scene.

Five shapes in front of a camera at the origin looking down +Z:

- A red fuzzy-metal sphere up and to the right
- A blue diffuse ground plane at y = -1
- A green diffuse sphere resting low in the middle
- A yellow diffuse sphere up and to the left
- A glass sphere in the middle, above the green one

under a flat pale-blue sky. The default field of view matches a 16:9 image
whose vertical extent at unit distance spans [-1, 1].

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from tiletrace.scene.default_scene import create_default_scene
    >>> from tiletrace.camera.pinhole import setup_camera
    >>>
    >>> scene, camera = create_default_scene()
    >>> setup_camera(camera, 1280, 720)
"""

from dataclasses import dataclass

from tiletrace.camera.pinhole import PinholeCamera
from tiletrace.config import DEFAULT_BACKGROUND, DEFAULT_FIELD_OF_VIEW
from tiletrace.scene.manager import SceneManager

# =============================================================================
# Scene Constants
# =============================================================================

BACKGROUND_COLOR = DEFAULT_BACKGROUND

RED_ALBEDO = (1.0, 0.0, 0.0)
RED_FUZZ = 0.5
BLUE_ALBEDO = (0.0, 0.0, 1.0)
GREEN_ALBEDO = (0.0, 1.0, 0.0)
YELLOW_ALBEDO = (1.0, 1.0, 0.0)
GLASS_REFRACTIVE_INDEX = 1.5

SPHERE_RADIUS = 0.5
GROUND_OFFSET = -1.0


@dataclass
class DefaultSceneParams:
    """Parameters for customizing the demo scene.

    Attributes:
        field_of_view: Horizontal field of view in degrees.
        glass_refractive_index: Index of refraction of the glass sphere.
        metal_fuzz: Fuzz of the red metal sphere, in [0, 1].
    """

    field_of_view: float = DEFAULT_FIELD_OF_VIEW
    glass_refractive_index: float = GLASS_REFRACTIVE_INDEX
    metal_fuzz: float = RED_FUZZ


def create_default_camera(field_of_view: float = DEFAULT_FIELD_OF_VIEW) -> PinholeCamera:
    """Camera at the origin looking down +Z with +Y up."""
    return PinholeCamera(
        position=(0.0, 0.0, 0.0),
        target=(0.0, 0.0, 1.0),
        up=(0.0, 1.0, 0.0),
        field_of_view=field_of_view,
    )


def create_default_scene(
    params: DefaultSceneParams | None = None,
) -> tuple[SceneManager, PinholeCamera]:
    """Create the built-in demo scene.

    Shapes are added in a fixed order, which also fixes how ties between
    equally distant hits resolve.

    Args:
        params: Optional DefaultSceneParams. If None, uses the defaults.

    Returns:
        A tuple of (SceneManager, PinholeCamera).

    Example:
        >>> scene, camera = create_default_scene()
        >>> scene.get_shape_count()
        5
    """
    if params is None:
        params = DefaultSceneParams()

    scene = SceneManager()

    red_metal = scene.add_metal_material(albedo=RED_ALBEDO, fuzz=params.metal_fuzz)
    blue = scene.add_lambertian_material(albedo=BLUE_ALBEDO)
    green = scene.add_lambertian_material(albedo=GREEN_ALBEDO)
    yellow = scene.add_lambertian_material(albedo=YELLOW_ALBEDO)
    glass = scene.add_dielectric_material(refractive_index=params.glass_refractive_index)

    scene.add_sphere(center=(1.0, 1.0, 3.0), radius=SPHERE_RADIUS, material_id=red_metal)
    scene.add_plane(normal=(0.0, 1.0, 0.0), offset=GROUND_OFFSET, material_id=blue)
    scene.add_sphere(center=(0.0, -1.0, 2.0), radius=SPHERE_RADIUS, material_id=green)
    scene.add_sphere(center=(-3.0, 2.0, 2.0), radius=SPHERE_RADIUS, material_id=yellow)
    scene.add_sphere(center=(0.0, 1.0, 2.0), radius=SPHERE_RADIUS, material_id=glass)

    return scene, create_default_camera(params.field_of_view)
