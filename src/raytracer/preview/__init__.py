"""Preview module for rendered output.

Components:
    export: Canvas quantization and PPM/PNG export
"""
