"""Tiled parallel Monte Carlo path tracer built on Taichi.

This package renders still images of small scenes made of spheres and
infinite planes, with support for:
- Diffuse (Lambertian), fuzzy metal and dielectric (glass) materials
- Jittered multi-sample antialiasing
- Tiled rendering with one parallel worker and one private random stream per tile
- PNG output with optional gamma encoding

Subpackages:
    core: Vector utilities, sampling, the integrator and the tile scheduler
    geometry: Shape primitives and intersection algorithms
    materials: Material scattering models
    scene: Scene management and ray-scene queries
    camera: Camera models with ray generation
    preview: Image output utilities

Modules that declare Taichi fields must be imported after ti.init().
"""

__version__ = "0.1.0"
