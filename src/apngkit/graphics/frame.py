import numpy as np

from apngkit.graphics.image import Raster

TRANSPARENT = 0


def blank_canvas(width: int, height: int) -> Raster:
    return np.full((height, width, 4), TRANSPARENT, dtype=np.uint8)


def clear_region(canvas: Raster, x: int, y: int, width: int, height: int) -> None:
    # slicing clips the region to the canvas
    canvas[y : y + height, x : x + width] = TRANSPARENT


def paste_region(canvas: Raster, image: Raster, x: int, y: int) -> None:
    """Overwrite canvas pixels with `image` placed at (x, y), alpha included."""
    height, width = canvas.shape[:2]
    right = min(x + image.shape[1], width)
    bottom = min(y + image.shape[0], height)
    if right <= x or bottom <= y:
        return
    canvas[y:bottom, x:right] = image[: bottom - y, : right - x]
