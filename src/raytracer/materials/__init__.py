"""Materials module: Phong surface parameters and procedural patterns.

Components:
    pattern: Solid, stripe, gradient, ring and checkers patterns
    material: Material registry and the Phong lighting function
"""
