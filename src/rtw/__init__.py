"""Taichi-based offline path tracer for sphere scenes.

This package renders scenes of spheres with diffuse, metallic and glass
materials by Monte Carlo path tracing, with support for:
- Thin-lens camera with optional defocus blur
- Explicitly seeded per-sample random streams (reproducible renders)
- Batched sample accumulation with progress callbacks
- Gamma-2 PNG/PPM output

Subpackages:
    core: Vector math, rays, random streams, path integrator and frame driver
    geometry: Sphere primitive and hit records
    materials: Lambertian, metal and dielectric scattering
    scene: Sphere list, background gradient, scene manager and presets
    camera: Thin-lens camera with ray generation
    preview: Tone mapping, image export and Matplotlib preview
"""

__version__ = "0.1.0"
