"""Reference demo scene.

A small scene exercising every feature of the tracer:

- A red matte sphere at (0, 0, 3) with unit radius, straight ahead of the
  camera
- A mirror sphere to its left, showing the red sphere and the floor
- A grey floor plane touching the bottom of both spheres
- A white point light at (3, -5, 2), above and to the right (image rows
  grow toward +y, so negative y is up)
- A dim white ambient light

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from yars.scene.demo import create_demo_scene
    >>> from yars.camera.camera import setup_camera
    >>>
    >>> scene, builder = create_demo_scene()
    >>> setup_camera(builder.build())
"""

import logging

from yars.camera.camera import CameraBuilder
from yars.scene.manager import SceneManager

logger = logging.getLogger(__name__)

# Height of the floor plane; +y points down in camera space
FLOOR_Y = 1.0

LIGHT_POSITION = (3.0, -5.0, 2.0)


def create_demo_scene(
    width: int = 800,
    height: int = 600,
    fov: float = 90.0,
) -> tuple[SceneManager, CameraBuilder]:
    """Create the demo scene and a camera looking at it.

    The camera sits at the origin looking down +Z.

    Args:
        width: Canvas width in pixels.
        height: Canvas height in pixels.
        fov: Vertical field of view in degrees.

    Returns:
        Tuple of (scene, camera_builder).
    """
    scene = SceneManager()

    red = scene.add_plain_material((1.0, 0.0, 0.0))
    floor = scene.add_phong_material(
        ambient=(0.1, 0.1, 0.1),
        diffuse=(0.5, 0.5, 0.5),
        specular=(0.0, 0.0, 0.0),
        reflectivity=(0.15, 0.15, 0.15),
        shine=1.0,
    )
    mirror = scene.add_phong_material(
        ambient=(0.02, 0.02, 0.02),
        diffuse=(0.1, 0.1, 0.1),
        specular=(0.6, 0.6, 0.6),
        reflectivity=(0.8, 0.8, 0.8),
        shine=60.0,
    )

    scene.add_sphere(center=(0.0, 0.0, 3.0), radius=1.0, material_id=red)
    scene.add_sphere(center=(-1.8, FLOOR_Y - 0.75, 4.0), radius=0.75, material_id=mirror)

    # u x v = (0, -1, 0): the floor faces the light
    scene.add_plane(
        direction_u=(1.0, 0.0, 0.0),
        direction_v=(0.0, 0.0, 1.0),
        anchor=(0.0, FLOOR_Y, 0.0),
        material_id=floor,
    )

    scene.add_light(position=LIGHT_POSITION, colour=(1.0, 1.0, 1.0))
    scene.set_ambient_light((1.0, 1.0, 1.0))

    logger.debug("Demo scene created with %d shapes", scene.get_shape_count())

    return scene, CameraBuilder(width, height, fov)
