"""
Save the display as a PNG, the same way discovered ROMs get their screenshots.
"""

from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image

from .config import color_to_rgb


def render_image(display: np.ndarray, scale: int = 8,
                 fg_color: int = 0xFFFFFFFF, bg_color: int = 0x00000000) -> Image.Image:
    """Scale up a (height, width) on/off grid into an RGB image"""
    if scale <= 0:
        raise ValueError(f"scale must be positive, got {scale}")

    lit = np.asarray(display, dtype=bool)
    scaled = np.repeat(np.repeat(lit, scale, axis=0), scale, axis=1)

    pixels = np.empty(scaled.shape + (3,), dtype=np.uint8)
    pixels[:] = color_to_rgb(bg_color)
    pixels[scaled] = color_to_rgb(fg_color)
    return Image.fromarray(pixels)


def save_screenshot(display: np.ndarray, path: Union[str, Path], scale: int = 8,
                    fg_color: int = 0xFFFFFFFF, bg_color: int = 0x00000000) -> Path:
    path = Path(path)
    if path.parent and not path.parent.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
    render_image(display, scale, fg_color, bg_color).save(path)
    return path
