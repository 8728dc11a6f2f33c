"""Core rendering module.

Components:
    epsilon: Shared floating-point tolerance
    tuples: Host-side points, vectors and colors (NumPy)
    matrix: 4x4 affine transforms, inversion and composition
    ray: Ray dataclass and Taichi vector utilities
    canvas: Output pixel grid
    integrator: Whitted render loop over the camera and world

Modules are imported directly, e.g. ``from raytracer.core.matrix import
translation``, so that no Taichi field is declared before ``ti.init()``.
"""
