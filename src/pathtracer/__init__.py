"""Taichi-based Monte Carlo path tracer.

Renders spheres and planes with diffuse, reflective and dielectric materials
under a sky gradient, writing PPM or PNG images.

Subpackages:
    core: Vectors, random streams, rays, colour, integrator and render loop
    geometry: Sphere and plane primitives
    materials: Diffuse, reflective and dielectric interactions
    scene: Surface table, scene manager and ready-made scenes
    camera: Axis-aligned camera with ray generation
    output: PPM and PNG export
    utilities: Logging setup

Modules:
    config: Render settings, camera configuration and scene files
    backend: Taichi runtime initialisation
"""

__version__ = "0.1.0"
