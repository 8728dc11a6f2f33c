"""Scene module: light, shape store, world orchestration and scene files.

Components:
    light: The single point light
    intersection: Shape store, nearest-hit queries and prepared computations
    world: World container with color_at, shade_hit and is_shadowed
    presets: Default test world and a showcase scene
    loader: JSON scene description parser
"""
