import math

MAX_OUTPUT_WIDTH = 1920
MAX_OUTPUT_HEIGHT = 1080


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def fit_dimensions(
    width: int,
    height: int,
    max_width: int = MAX_OUTPUT_WIDTH,
    max_height: int = MAX_OUTPUT_HEIGHT,
) -> tuple[int, int]:
    """Target size for a raster under a bounding box.

    Images already inside the box keep their size. Otherwise the width is
    clamped first and the height re-clamped second, rounding only at the end;
    this two-step clamp can drift from the exact aspect ratio by a pixel and is
    kept as-is for output compatibility.
    """
    if width <= max_width and height <= max_height:
        return width, height

    w, h = float(width), float(height)
    if w > max_width:
        h = h * max_width / w
        w = float(max_width)
    if h > max_height:
        w = w * max_height / h
        h = float(max_height)
    return max(1, round_half_up(w)), max(1, round_half_up(h))
