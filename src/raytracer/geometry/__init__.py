"""Geometry module for shape primitives.

Components:
    sphere: Unit sphere at the origin
    plane: The xz-plane
    cube: Axis-aligned cube spanning [-1, 1] on every axis
    cylinder: Unit-radius cylinder about the y axis, optionally truncated and capped
    shape: Tagged shape record, world-space dispatch and the host Shape class

Every primitive intersects in its own local space and reports up to four
``t`` values as ``(count, ts)``.
"""
