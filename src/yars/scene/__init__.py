"""Scene module for shapes, lights and scene management.

Components:
    intersection: Ordered shape table and the closest-hit engine
    lights: Ambient and point lights with shadow-ray visibility
    manager: Scene manager coordinating materials, shapes and lights
    demo: The reference demo scene

Scene data lives in Taichi fields using a Structure-of-Arrays layout, so
the whole scene is read-only shared state during a render.
"""

from .demo import create_demo_scene
from .intersection import (
    MAX_PLANES,
    MAX_SHAPES,
    MAX_SPHERES,
    SELF_INTERSECTION_TOLERANCE,
    ShadeCell,
    ShapeType,
    add_plane,
    add_sphere,
    clear_scene,
    get_plane_count,
    get_shape_count,
    get_sphere_count,
    trace_ray,
)
from .lights import (
    MAX_LIGHTS,
    add_light,
    clear_lights,
    get_ambient_light,
    get_light_count,
    illuminates,
    set_ambient_light,
    validate_light_colour,
)
from .manager import (
    LightInfo,
    MaterialInfo,
    PlaneInfo,
    SceneConfig,
    SceneManager,
    SphereInfo,
)

__all__ = [
    # Intersection module
    "ShadeCell",
    "ShapeType",
    "add_sphere",
    "add_plane",
    "clear_scene",
    "get_shape_count",
    "get_sphere_count",
    "get_plane_count",
    "trace_ray",
    "MAX_SHAPES",
    "MAX_SPHERES",
    "MAX_PLANES",
    "SELF_INTERSECTION_TOLERANCE",
    # Lights module
    "add_light",
    "clear_lights",
    "set_ambient_light",
    "get_ambient_light",
    "get_light_count",
    "illuminates",
    "validate_light_colour",
    "MAX_LIGHTS",
    # Manager module
    "SceneManager",
    "MaterialInfo",
    "SphereInfo",
    "PlaneInfo",
    "LightInfo",
    "SceneConfig",
    # Demo scene
    "create_demo_scene",
]
