"""Taichi-based Whitted-style ray tracer.

This package renders scenes of spheres and planes lit by point lights,
with Phong shading, hard shadows and depth-bounded mirror reflections:
- Closest-hit search over an ordered shape table
- Phong local illumination with saturating colour arithmetic
- Recursive mirror reflection up to a fixed depth budget
- A rotatable pinhole camera and PNG export

Subpackages:
    core: Vector utilities, rotations, shading and the recursive tracer
    geometry: Sphere and plane primitives with their intersection routines
    materials: Phong material model and registry
    scene: Shape table, lights, scene manager and the demo scene
    camera: Camera builder and primary ray generation
    preview: PNG export and Matplotlib preview

Modules that declare Taichi fields must be imported after ti.init().
"""

__version__ = "0.1.0"
