"""Taichi-based Whitted ray tracer with Phong shading.

This package renders a scene of transformed primitives lit by a single point
light. Every per-ray computation runs inside Taichi kernels; scene setup,
transforms and image export happen on the host with NumPy.

Subpackages:
    core: Tuples, matrices, rays, the shared tolerance, canvas and render loop
    geometry: Sphere, plane, cube and cylinder primitives
    materials: Phong materials, patterns and the lighting model
    scene: Light, shape store, intersections, world and scene loading
    camera: Perspective camera with per-pixel ray generation
    preview: Canvas export to PPM and PNG

Note:
    Modules that declare Taichi fields must be imported after ``ti.init()``.
    Subpackages therefore do not import their modules eagerly.
"""

__version__ = "0.1.0"
