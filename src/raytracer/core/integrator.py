"""Whitted render loop: one ray per pixel, shaded by the world.

Every pixel of the canvas gets ``color_at(ray_for_pixel(x, y))``. Pixels
are independent of each other, so the render kernel runs in parallel over
a band of rows; the world and camera are only read while it runs.

Rendering proceeds band by band so that callers can report progress. The
result is the same for any band size.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raytracer.core.integrator import render
    >>> from raytracer.scene.presets import create_showcase_scene
    >>>
    >>> camera, world = create_showcase_scene(320, 180)
    >>> canvas = render(camera, world)
"""

import logging
import time
from collections.abc import Callable, Generator

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from raytracer.camera.camera import Camera, ray_for_pixel, setup_camera
from raytracer.core.canvas import Canvas
from raytracer.core.tuples import Color, color
from raytracer.scene.world import MAX_REFLECTION_DEPTH, World, color_at

logger = logging.getLogger(__name__)

vec3 = tm.vec3

# Type alias for progress callback
# Callback receives (rows_done, total_rows)
ProgressCallback = Callable[[int, int], None]

# Rows per kernel launch when the caller does not choose
DEFAULT_ROWS_PER_BATCH = 32

# =============================================================================
# Render Target
# =============================================================================

# The buffer is allocated once at the largest supported size
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Active region of the buffer
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Color buffer indexed [x, y] with y = 0 the top row
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Set once setup_render_target has run
_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Set the active image size and clear the color buffer.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the color buffer to black."""
    _color_buffer.fill(0.0)


def reset_render_target() -> None:
    """Clear the buffer and mark the render target as not set up."""
    clear_render_target()
    _render_target_initialized[None] = 0


def get_image_dimensions() -> tuple[int, int]:
    """Active (width, height) of the render target."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Raise RuntimeError unless setup_render_target has been called."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("No render target; call setup_render_target() or render() first")


def get_image_numpy() -> npt.NDArray[np.float64]:
    """Get the rendered image as a (height, width, 3) float64 array.

    Values are returned exactly as shaded, without clamping.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    image = _color_buffer.to_numpy()[:width, :height, :]

    # (width, height, 3) -> (height, width, 3)
    return np.transpose(image, (1, 0, 2)).astype(np.float64)


# =============================================================================
# Kernels
# =============================================================================


@ti.kernel
def _render_rows(y0: ti.i32, rows: ti.i32, width: ti.i32, remaining: ti.i32):
    """Shade every pixel in rows [y0, y0 + rows)."""
    for x, dy in ti.ndrange(width, rows):
        y = y0 + dy
        _color_buffer[x, y] = color_at(ray_for_pixel(x, y), remaining)


_pixel_result = ti.Vector.field(3, dtype=ti.f32, shape=())


@ti.kernel
def _render_single_pixel(px: ti.i32, py: ti.i32, remaining: ti.i32):
    """Shade one pixel into _pixel_result (used for testing and debugging)."""
    # Single-iteration outer loop keeps the scene loops serial
    for _ in range(1):
        _pixel_result[None] = color_at(ray_for_pixel(px, py), remaining)


# =============================================================================
# Rendering
# =============================================================================


def _prepare(camera: Camera, world: World) -> None:
    world.upload()
    setup_camera(camera)
    setup_render_target(camera.hsize, camera.vsize)


def iter_render(
    camera: Camera,
    world: World,
    *,
    remaining: int = MAX_REFLECTION_DEPTH,
    rows_per_batch: int | None = None,
) -> Generator[tuple[int, int], None, None]:
    """Render band by band, yielding progress after each band.

    Yields:
        Tuple of (rows_done, total_rows).
    """
    _prepare(camera, world)
    remaining = max(0, min(int(remaining), MAX_REFLECTION_DEPTH))
    band = rows_per_batch if rows_per_batch is not None else DEFAULT_ROWS_PER_BATCH
    if band <= 0:
        raise ValueError(f"rows_per_batch must be positive, got {band}")

    width, height = camera.hsize, camera.vsize
    y = 0
    while y < height:
        rows = min(band, height - y)
        _render_rows(y, rows, width, remaining)
        y += rows
        yield (y, height)


def render(
    camera: Camera,
    world: World,
    *,
    remaining: int = MAX_REFLECTION_DEPTH,
    rows_per_batch: int | None = None,
    callback: ProgressCallback | None = None,
) -> Canvas:
    """Render the world as seen by the camera.

    Args:
        camera: Camera supplying canvas size and per-pixel rays.
        world: The scene to shade.
        remaining: Reflection depth for every primary ray.
        rows_per_batch: Rows per kernel launch.
        callback: Optional function called after each band with
            (rows_done, total_rows).

    Returns:
        A Canvas of camera.hsize x camera.vsize unclamped colors.
    """
    logger.info("Rendering %dx%d with %d shapes", camera.hsize, camera.vsize, len(world.shapes))
    start = time.perf_counter()

    for rows_done, total_rows in iter_render(camera, world, remaining=remaining, rows_per_batch=rows_per_batch):
        if callback is not None:
            callback(rows_done, total_rows)

    canvas = Canvas.from_array(get_image_numpy())
    logger.info("Render finished in %.2fs", time.perf_counter() - start)
    return canvas


def render_pixel(
    camera: Camera,
    world: World,
    px: int,
    py: int,
    *,
    remaining: int = MAX_REFLECTION_DEPTH,
) -> Color:
    """Render a single pixel without touching the render target."""
    world.upload()
    setup_camera(camera)
    _render_single_pixel(px, py, max(0, min(int(remaining), MAX_REFLECTION_DEPTH)))
    c = _pixel_result[None]
    return color(float(c[0]), float(c[1]), float(c[2]))
