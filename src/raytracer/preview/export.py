"""Image export utilities for rendered canvases.

The renderer leaves colors unclamped. Export is where they are clamped to
[0, 1], optionally gamma encoded, and quantized to 8 bits.

Supported formats:
    - PPM (plain "P3" text, lines wrapped at 70 characters)
    - PNG (8-bit RGB via Pillow)

Example:
    >>> from raytracer.preview.export import save_canvas
    >>> save_canvas(canvas, "output.png")
    >>> save_canvas(canvas, "output.ppm")
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from raytracer.core.canvas import Canvas

# Maximum PPM line length
PPM_LINE_WIDTH = 70

# Largest value of an 8-bit channel
MAX_COLOR_VALUE = 255


def apply_gamma(image: npt.NDArray[np.float64], gamma: float = 1.0) -> npt.NDArray[np.float64]:
    """Clamp to [0, 1] and apply gamma encoding (out = in^(1/gamma)).

    A gamma of 1.0 leaves clamped values unchanged.
    """
    if gamma <= 0.0:
        raise ValueError(f"Gamma must be positive, got {gamma}")

    # Clamp to [0, 1] before gamma to avoid NaN from negative values
    image = np.clip(np.nan_to_num(image, nan=0.0), 0.0, 1.0)
    if gamma == 1.0:
        return image
    return np.power(image, 1.0 / gamma)


def canvas_to_uint8(canvas: Canvas, *, gamma: float = 1.0) -> npt.NDArray[np.uint8]:
    """Convert a canvas to an 8-bit (height, width, 3) array.

    Each channel is clamped to [0, 1], gamma encoded, scaled by 255 and
    rounded to the nearest integer.
    """
    processed = apply_gamma(canvas.pixels, gamma)
    return np.rint(processed * MAX_COLOR_VALUE).astype(np.uint8)


def canvas_to_ppm(canvas: Canvas, *, gamma: float = 1.0) -> str:
    """Serialize a canvas as plain PPM.

    The header is ``P3``, the dimensions, and the maximum color value. Each
    pixel row starts a new line; long rows are wrapped so that no line
    exceeds 70 characters. The text ends with a newline.
    """
    data = canvas_to_uint8(canvas, gamma=gamma)
    lines = ["P3", f"{canvas.width} {canvas.height}", str(MAX_COLOR_VALUE)]

    for row in data:
        current = ""
        for value in row.reshape(-1):
            token = str(int(value))
            if not current:
                current = token
            elif len(current) + 1 + len(token) > PPM_LINE_WIDTH:
                lines.append(current)
                current = token
            else:
                current = f"{current} {token}"
        lines.append(current)

    return "\n".join(lines) + "\n"


def save_ppm(canvas: Canvas, filepath: str | Path, *, gamma: float = 1.0) -> None:
    """Save a canvas as a plain PPM file."""
    Path(filepath).write_text(canvas_to_ppm(canvas, gamma=gamma), encoding="ascii")


def save_png(canvas: Canvas, filepath: str | Path, *, gamma: float = 1.0) -> None:
    """Save a canvas as an 8-bit RGB PNG file."""
    image_uint8 = canvas_to_uint8(canvas, gamma=gamma)

    # Save using Pillow
    pil_image = PILImage.fromarray(image_uint8)
    pil_image.save(str(filepath))


def save_canvas(canvas: Canvas, filepath: str | Path, *, gamma: float = 1.0) -> None:
    """Save a canvas, choosing the format from the file extension.

    Raises:
        ValueError: If the extension is neither .ppm nor .png.
    """
    suffix = Path(filepath).suffix.lower()
    if suffix == ".ppm":
        save_ppm(canvas, filepath, gamma=gamma)
    elif suffix == ".png":
        save_png(canvas, filepath, gamma=gamma)
    else:
        raise ValueError(f"Unsupported image format {suffix!r}; use .ppm or .png")


def compute_rmse(image_a: npt.NDArray[np.floating], image_b: npt.NDArray[np.floating]) -> float:
    """Compute root mean squared error between two images.

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
