"""Camera module for primary ray generation.

Components:
    camera: Field-of-view camera with a view transform
"""
