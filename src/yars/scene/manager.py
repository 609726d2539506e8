"""Scene manager coordinating materials, shapes and lights.

This module provides the high-level scene API. It wraps the field-backed
registries (Phong materials, the ordered shape table, point lights) with
host-side bookkeeping so a scene can be inspected, validated and
serialized without reading fields back.

The SceneManager maintains:
- The material list; a material ID is the index of a Phong material
- Sphere and plane records in insertion order
- Point lights and the ambient light colour
- Scene serialization to and from JSON-friendly dictionaries

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from yars.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> red = scene.add_plain_material((1.0, 0.0, 0.0))
    >>> scene.add_sphere(center=(0.0, 0.0, 3.0), radius=1.0, material_id=red)
    >>> scene.add_light(position=(3.0, -5.0, 2.0), colour=(1.0, 1.0, 1.0))
    >>> scene.trace_to_depth(2, (0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from yars.geometry.plane import orthonormal_span
from yars.materials.phong import (
    MAX_PHONG_MATERIALS,
    PhongParams,
    add_phong_material,
    clear_phong_materials,
    plain_material,
    validate_phong_params,
)
from yars.scene.intersection import (
    MAX_PLANES,
    MAX_SHAPES,
    MAX_SPHERES,
    add_plane,
    add_sphere,
    clear_scene,
    get_plane_count,
    get_shape_count,
    get_sphere_count,
)
from yars.scene.lights import (
    MAX_LIGHTS,
    add_light,
    clear_lights,
    get_ambient_light,
    get_light_count,
    set_ambient_light,
    validate_light_colour,
)

logger = logging.getLogger(__name__)

Vector3 = tuple[float, float, float]

# Top-level keys accepted by from_dict()
CONFIG_KEYS = ("materials", "shapes", "lights", "ambient")


@dataclass
class MaterialInfo:
    """Information about a registered material.

    Attributes:
        material_id: The material ID (index in the Phong registry).
        params: The material parameters as provided during creation.
    """

    material_id: int
    params: PhongParams


@dataclass
class SphereInfo:
    """Information about a sphere in the scene.

    Attributes:
        shape_index: The position of the sphere in the ordered shape table.
        center: The center of the sphere.
        radius: The radius of the sphere.
        material_id: The material ID assigned to the sphere.
    """

    shape_index: int
    center: Vector3
    radius: float
    material_id: int


@dataclass
class PlaneInfo:
    """Information about a plane in the scene.

    Attributes:
        shape_index: The position of the plane in the ordered shape table.
        direction_u: The first spanning direction as given.
        direction_v: The second spanning direction as given.
        anchor: A point on the plane.
        normal: The unit normal derived from the spanning directions.
        material_id: The material ID assigned to the plane.
    """

    shape_index: int
    direction_u: Vector3
    direction_v: Vector3
    anchor: Vector3
    normal: Vector3
    material_id: int


@dataclass
class LightInfo:
    """Information about a point light.

    Attributes:
        light_index: The index in the light storage arrays.
        position: The light position.
        colour: The light colour.
    """

    light_index: int
    position: Vector3
    colour: Vector3


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        materials: List of material configurations.
        shapes: List of shape configurations in shape-table order. Each
            entry has a "type" of "sphere" or "plane".
        lights: List of point light configurations.
        ambient: The ambient light colour.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    shapes: list[dict[str, Any]] = field(default_factory=list)
    lights: list[dict[str, Any]] = field(default_factory=list)
    ambient: list[float] = field(default_factory=lambda: [0.0, 0.0, 0.0])


def _as_vector3(value: Any, name: str) -> Vector3:
    """Convert a config entry to a 3-tuple of floats."""
    try:
        x, y, z = value
        return (float(x), float(y), float(z))
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{name} must be a list of 3 numbers, got {value!r}") from exc


def _as_number(value: Any, name: str, kind: type = float) -> Any:
    try:
        return kind(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{name} must be a number, got {value!r}") from exc


def _require(entry: dict[str, Any], key: str, kind: str) -> Any:
    if not isinstance(entry, dict):
        raise ValueError(f"{kind} entry must be a mapping, got {entry!r}")
    if key not in entry:
        raise ValueError(f"{kind} entry is missing required key '{key}': {entry!r}")
    return entry[key]


@dataclass
class _ParsedScene:
    """A validated, normalized scene configuration ready to register."""

    materials: list[PhongParams]
    shapes: list[tuple[str, dict[str, Any]]]
    lights: list[tuple[Vector3, Vector3]]
    ambient: Vector3


def _parse_shape(entry: dict[str, Any], num_materials: int) -> tuple[str, dict[str, Any]]:
    shape_type = _require(entry, "type", "Shape")
    material_id = _as_number(entry.get("material_id", 0), "material_id", int)
    if not 0 <= material_id < num_materials:
        raise ValueError(f"Invalid material_id: {material_id}")

    if shape_type == "sphere":
        center = _as_vector3(_require(entry, "center", "Sphere"), "center")
        radius = _as_number(_require(entry, "radius", "Sphere"), "radius")
        if radius <= 0.0:
            raise ValueError(f"Sphere radius must be positive, got {radius}")
        return "sphere", {"center": center, "radius": radius, "material_id": material_id}

    if shape_type == "plane":
        direction_u = _as_vector3(_require(entry, "direction_u", "Plane"), "direction_u")
        direction_v = _as_vector3(_require(entry, "direction_v", "Plane"), "direction_v")
        orthonormal_span(direction_u, direction_v)
        return "plane", {
            "direction_u": direction_u,
            "direction_v": direction_v,
            "anchor": _as_vector3(entry.get("anchor", [0.0, 0.0, 0.0]), "anchor"),
            "material_id": material_id,
        }

    raise ValueError(f"Unknown shape type {shape_type!r}, expected 'sphere' or 'plane'")


def _parse_config(config: SceneConfig) -> _ParsedScene:
    """Validate a whole configuration without touching any registry.

    Raises:
        ValueError: If any entry is invalid.
        RuntimeError: If the configuration exceeds a capacity limit.
    """
    materials = []
    for entry in config.materials:
        params = PhongParams(
            ambient=_as_vector3(_require(entry, "ambient", "Material"), "ambient"),
            diffuse=_as_vector3(_require(entry, "diffuse", "Material"), "diffuse"),
            specular=_as_vector3(_require(entry, "specular", "Material"), "specular"),
            reflectivity=_as_vector3(entry.get("reflectivity", [0.0, 0.0, 0.0]), "reflectivity"),
            shine=_as_number(entry.get("shine", 1.0), "shine"),
        )
        validate_phong_params(**params.as_kwargs())
        materials.append(params)

    shapes = [_parse_shape(entry, len(materials)) for entry in config.shapes]

    lights = []
    for entry in config.lights:
        position = _as_vector3(_require(entry, "position", "Light"), "position")
        colour = _as_vector3(entry.get("colour", [1.0, 1.0, 1.0]), "colour")
        validate_light_colour("Light colour", colour)
        lights.append((position, colour))

    ambient = _as_vector3(config.ambient, "ambient")
    validate_light_colour("Ambient light colour", ambient)

    num_spheres = sum(1 for shape_type, _ in shapes if shape_type == "sphere")
    limits = (
        ("materials", len(materials), MAX_PHONG_MATERIALS),
        ("shapes", len(shapes), MAX_SHAPES),
        ("spheres", num_spheres, MAX_SPHERES),
        ("planes", len(shapes) - num_spheres, MAX_PLANES),
        ("lights", len(lights), MAX_LIGHTS),
    )
    for name, count, limit in limits:
        if count > limit:
            raise RuntimeError(f"Scene has {count} {name}, maximum is {limit}")

    return _ParsedScene(materials=materials, shapes=shapes, lights=lights, ambient=ambient)


class SceneManager:
    """Scene manager coordinating materials, shapes and lights.

    Creating a SceneManager clears the global registries, so only one
    scene is live at a time.

    Attributes:
        materials: List of MaterialInfo for all registered materials.
        spheres: List of SphereInfo for all spheres in the scene.
        planes: List of PlaneInfo for all planes in the scene.
        lights: List of LightInfo for all point lights in the scene.

    Example:
        >>> scene = SceneManager()
        >>> mirror = scene.add_phong_material(
        ...     ambient=(0.0, 0.0, 0.0),
        ...     diffuse=(0.1, 0.1, 0.1),
        ...     specular=(0.5, 0.5, 0.5),
        ...     reflectivity=(0.8, 0.8, 0.8),
        ...     shine=50.0,
        ... )
        >>> scene.add_sphere((1.5, 0.0, 4.0), 0.75, mirror)
        >>> scene.add_plane((1.0, 0.0, 0.0), (0.0, 0.0, 1.0), (0.0, 1.0, 0.0), mirror)
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.materials: list[MaterialInfo] = []
        self.spheres: list[SphereInfo] = []
        self.planes: list[PlaneInfo] = []
        self.lights: list[LightInfo] = []
        self._clear_all()

    def _clear_all(self) -> None:
        """Clear all scene data including Taichi fields."""
        clear_scene()
        clear_phong_materials()
        clear_lights()
        self.materials.clear()
        self.spheres.clear()
        self.planes.clear()
        self.lights.clear()

    def clear(self) -> None:
        """Clear the entire scene (shapes, materials and lights)."""
        self._clear_all()
        logger.debug("Scene cleared")

    def _check_material_id(self, material_id: int) -> None:
        if not 0 <= material_id < len(self.materials):
            raise ValueError(f"Invalid material_id: {material_id}")

    # =========================================================================
    # Material Management
    # =========================================================================

    def add_phong_material(
        self,
        ambient: Vector3,
        diffuse: Vector3,
        specular: Vector3,
        reflectivity: Vector3 = (0.0, 0.0, 0.0),
        shine: float = 1.0,
    ) -> int:
        """Add a Phong material to the scene.

        Args:
            ambient: Ambient reflectivity as (R, G, B).
            diffuse: Diffuse reflectivity as (R, G, B).
            specular: Specular reflectivity as (R, G, B).
            reflectivity: Mirror reflectivity as (R, G, B).
            shine: Specular exponent.

        Returns:
            The material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If any reflectivity component is outside [0, 1] or
                shine is negative.
        """
        params = PhongParams(
            ambient=tuple(ambient),
            diffuse=tuple(diffuse),
            specular=tuple(specular),
            reflectivity=tuple(reflectivity),
            shine=shine,
        )
        material_id = add_phong_material(**params.as_kwargs())
        self.materials.append(MaterialInfo(material_id=material_id, params=params))

        logger.debug("Added material %d: %s", material_id, params)
        return material_id

    def add_plain_material(self, colour: Vector3) -> int:
        """Add the default matte material for a base colour.

        See yars.materials.phong.plain_material().
        """
        return self.add_phong_material(**plain_material(colour).as_kwargs())

    def get_material_count(self) -> int:
        """Get the total number of materials in the scene."""
        return len(self.materials)

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        """Get information about a material by ID.

        Returns:
            MaterialInfo for the material, or None if not found.
        """
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    # =========================================================================
    # Shape Management
    # =========================================================================

    def add_sphere(
        self,
        center: Sequence[float],
        radius: float,
        material_id: int,
    ) -> int:
        """Add a sphere to the scene.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The radius of the sphere (must be positive).
            material_id: The material ID to assign to the sphere.

        Returns:
            The shape index of the added sphere.

        Raises:
            RuntimeError: If the maximum number of spheres is exceeded.
            ValueError: If material_id is invalid or radius is not positive.
        """
        self._check_material_id(material_id)

        center_tuple = (float(center[0]), float(center[1]), float(center[2]))
        shape_index = add_sphere(center_tuple, radius, material_id)

        self.spheres.append(
            SphereInfo(
                shape_index=shape_index,
                center=center_tuple,
                radius=float(radius),
                material_id=material_id,
            )
        )

        logger.debug("Added sphere %d at %s, r=%g", shape_index, center_tuple, radius)
        return shape_index

    def add_plane(
        self,
        direction_u: Sequence[float],
        direction_v: Sequence[float],
        anchor: Sequence[float],
        material_id: int,
    ) -> int:
        """Add a plane spanned by two directions through an anchor point.

        The directions are orthonormalized; the plane's normal is u x v, so
        the order of the directions selects which side faces out.

        Args:
            direction_u: First in-plane direction.
            direction_v: Second in-plane direction, not parallel to the first.
            anchor: A point on the plane.
            material_id: The material ID to assign to the plane.

        Returns:
            The shape index of the added plane.

        Raises:
            RuntimeError: If the maximum number of planes is exceeded.
            ValueError: If material_id is invalid or the directions are
                degenerate.
        """
        self._check_material_id(material_id)

        _, _, normal = orthonormal_span(direction_u, direction_v)
        anchor_tuple = (float(anchor[0]), float(anchor[1]), float(anchor[2]))
        shape_index = add_plane(normal, anchor_tuple, material_id)

        self.planes.append(
            PlaneInfo(
                shape_index=shape_index,
                direction_u=tuple(float(c) for c in direction_u),
                direction_v=tuple(float(c) for c in direction_v),
                anchor=anchor_tuple,
                normal=normal,
                material_id=material_id,
            )
        )

        logger.debug("Added plane %d through %s, n=%s", shape_index, anchor_tuple, normal)
        return shape_index

    # =========================================================================
    # Light Management
    # =========================================================================

    def set_ambient_light(self, colour: Sequence[float]) -> None:
        """Set the ambient light colour.

        Raises:
            ValueError: If any component is negative.
        """
        set_ambient_light(colour)
        logger.debug("Ambient light set to %s", tuple(colour))

    def add_light(self, position: Sequence[float], colour: Sequence[float]) -> int:
        """Add a point light to the scene.

        Args:
            position: The light position as (x, y, z).
            colour: The light colour as (R, G, B).

        Returns:
            The index of the added light.

        Raises:
            RuntimeError: If the maximum number of lights is exceeded.
            ValueError: If any colour component is negative.
        """
        position_tuple = (float(position[0]), float(position[1]), float(position[2]))
        colour_tuple = (float(colour[0]), float(colour[1]), float(colour[2]))
        light_index = add_light(position_tuple, colour_tuple)

        self.lights.append(
            LightInfo(light_index=light_index, position=position_tuple, colour=colour_tuple)
        )

        logger.debug("Added light %d at %s", light_index, position_tuple)
        return light_index

    def get_ambient_light(self) -> Vector3:
        return get_ambient_light()

    # =========================================================================
    # Scene Queries
    # =========================================================================

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the scene."""
        return get_sphere_count()

    def get_plane_count(self) -> int:
        """Get the number of planes in the scene."""
        return get_plane_count()

    def get_shape_count(self) -> int:
        """Get the total number of shapes in the scene."""
        return get_shape_count()

    def get_light_count(self) -> int:
        """Get the number of point lights in the scene."""
        return get_light_count()

    def trace_to_depth(
        self,
        max_depth: int,
        origin: Sequence[float],
        direction: Sequence[float],
    ) -> Vector3 | None:
        """Trace one ray through this scene.

        See yars.core.integrator.trace_to_depth().
        """
        from yars.core.integrator import trace_to_depth

        return trace_to_depth(max_depth, origin, direction)

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object.

        Shapes are listed in shape-table order, so a reloaded scene breaks
        ties between equally distant hits the same way.

        Returns:
            A SceneConfig containing all materials, shapes and lights.
        """
        config = SceneConfig()

        for mat in self.materials:
            config.materials.append(
                {
                    "ambient": list(mat.params.ambient),
                    "diffuse": list(mat.params.diffuse),
                    "specular": list(mat.params.specular),
                    "reflectivity": list(mat.params.reflectivity),
                    "shine": mat.params.shine,
                }
            )

        shapes: list[SphereInfo | PlaneInfo] = [*self.spheres, *self.planes]
        for shape in sorted(shapes, key=lambda s: s.shape_index):
            if isinstance(shape, SphereInfo):
                config.shapes.append(
                    {
                        "type": "sphere",
                        "center": list(shape.center),
                        "radius": shape.radius,
                        "material_id": shape.material_id,
                    }
                )
            else:
                config.shapes.append(
                    {
                        "type": "plane",
                        "direction_u": list(shape.direction_u),
                        "direction_v": list(shape.direction_v),
                        "anchor": list(shape.anchor),
                        "material_id": shape.material_id,
                    }
                )

        for light in self.lights:
            config.lights.append(
                {
                    "position": list(light.position),
                    "colour": list(light.colour),
                }
            )

        config.ambient = list(self.get_ambient_light())
        return config

    def from_config(self, config: SceneConfig) -> None:
        """Load a scene from a configuration object.

        The whole configuration is validated first. Only then is the
        current scene cleared and the new one registered, so a failed load
        leaves the current scene untouched. Shapes are added in the order
        given, which fixes how ties between equally distant hits are broken.

        Args:
            config: The scene configuration to load.

        Raises:
            ValueError: If the configuration contains invalid data.
            RuntimeError: If the configuration exceeds a capacity limit.
        """
        parsed = _parse_config(config)

        self.clear()

        for params in parsed.materials:
            self.add_phong_material(**params.as_kwargs())

        for shape_type, shape_args in parsed.shapes:
            if shape_type == "sphere":
                self.add_sphere(**shape_args)
            else:
                self.add_plane(**shape_args)

        for position, colour in parsed.lights:
            self.add_light(position, colour)

        self.set_ambient_light(parsed.ambient)

        logger.debug(
            "Loaded scene: %d materials, %d shapes, %d lights",
            len(self.materials),
            self.get_shape_count(),
            len(self.lights),
        )

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization).

        Returns:
            A dictionary representation of the scene.
        """
        config = self.to_config()
        return {
            "materials": config.materials,
            "shapes": config.shapes,
            "lights": config.lights,
            "ambient": config.ambient,
        }

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary.

        Args:
            data: Dictionary with any of the keys 'materials', 'shapes',
                'lights' and 'ambient'.

        Raises:
            ValueError: If data has unknown keys or invalid entries.
            RuntimeError: If the scene exceeds a capacity limit.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Scene data must be a mapping, got {type(data).__name__}")
        unknown = set(data) - set(CONFIG_KEYS)
        if unknown:
            raise ValueError(f"Unknown scene keys: {sorted(unknown)}")

        config = SceneConfig(
            materials=data.get("materials", []),
            shapes=data.get("shapes", []),
            lights=data.get("lights", []),
            ambient=data.get("ambient", [0.0, 0.0, 0.0]),
        )
        self.from_config(config)

    # =========================================================================
    # Capacity Information
    # =========================================================================

    @staticmethod
    def get_max_spheres() -> int:
        """Get the maximum number of spheres supported."""
        return MAX_SPHERES

    @staticmethod
    def get_max_planes() -> int:
        """Get the maximum number of planes supported."""
        return MAX_PLANES

    @staticmethod
    def get_max_materials() -> int:
        """Get the maximum number of materials supported."""
        return MAX_PHONG_MATERIALS

    @staticmethod
    def get_max_lights() -> int:
        """Get the maximum number of point lights supported."""
        return MAX_LIGHTS
