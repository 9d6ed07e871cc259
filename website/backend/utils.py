import math
import re

import numpy as np

from constants import FALLBACK_RAMP, FALLBACK_RAMP_FLOOR, NEUTRAL_GRAY
from models import ColorScale

HEX_RE = re.compile(r"^#([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


def hex_to_rgb(hex_color) -> np.ndarray | None:
    """Parse '#rgb' or '#rrggbb' into an (r, g, b) array, None if malformed."""
    if not isinstance(hex_color, str):
        return None
    match = HEX_RE.match(hex_color.strip())
    if not match:
        return None
    digits = match.group(1)
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    return np.array([int(digits[i:i + 2], 16) for i in (0, 2, 4)], dtype=float)


def rgb_to_hex(rgb) -> str:
    channels = np.clip(np.floor(np.asarray(rgb, dtype=float) + 0.5), 0, 255).astype(int)
    return "#" + "".join(f"{int(c):02x}" for c in channels)


def interpolate_hex_colors(color1: str | None, color2: str | None, ratio: float) -> str:
    rgb1 = hex_to_rgb(color1)
    rgb2 = hex_to_rgb(color2)
    if rgb1 is None and rgb2 is None:
        return NEUTRAL_GRAY
    if rgb1 is None:
        return color2
    if rgb2 is None:
        return color1

    return rgb_to_hex(rgb1 + (rgb2 - rgb1) * ratio)


def first_valid_color(colors) -> str:
    for color in colors:
        if hex_to_rgb(color) is not None:
            return color
    return NEUTRAL_GRAY


def fallback_color(value: float) -> str:
    for threshold, color in FALLBACK_RAMP:
        if value > threshold:
            return color
    return FALLBACK_RAMP_FLOOR


def _scale_parts(scale):
    if scale is None:
        return None, None
    if isinstance(scale, ColorScale):
        return scale.colors, scale.domain
    if isinstance(scale, dict):
        try:
            domain = [float(d) for d in scale.get("domain") or []]
        except (TypeError, ValueError):
            return None, None
        colors = scale.get("colors")
        if not isinstance(colors, list):
            return None, None
        return colors, domain
    return None, None


def color_for(scale, value: float) -> str:
    """Map a scalar onto a piecewise-linear color scale.

    ``scale`` may be a ColorScale, a plain dict with ``colors`` and ``domain``,
    or None. Missing or empty scales use the fixed five-bucket ramp. Values
    outside the domain take the end colors, or the nearest valid color when an
    end color is malformed. Never raises.
    """
    try:
        value = float(value)
    except (TypeError, ValueError):
        return NEUTRAL_GRAY
    if math.isnan(value):
        return NEUTRAL_GRAY

    colors, domain = _scale_parts(scale)
    if not colors or not domain:
        return fallback_color(value)

    last = len(domain) - 1
    if value <= domain[0]:
        return first_valid_color(colors[:last + 1])
    if value >= domain[last]:
        return first_valid_color(reversed(colors[:last + 1]))

    for i in range(last):
        lo, hi = domain[i], domain[i + 1]
        if lo <= value <= hi:
            ratio = (value - lo) / (hi - lo) if hi > lo else 0.0
            c1 = colors[i] if i < len(colors) else None
            c2 = colors[i + 1] if i + 1 < len(colors) else None
            return interpolate_hex_colors(c1, c2, ratio)

    return NEUTRAL_GRAY


def contrast_color(hex_color: str) -> str:
    """Black or white text, whichever reads better on ``hex_color``."""
    rgb = hex_to_rgb(hex_color)
    if rgb is None:
        return "#ffffff"
    brightness = float(np.dot(rgb, [0.299, 0.587, 0.114])) / 255
    return "#000000" if brightness > 0.5 else "#ffffff"


def format_number(num: float, precision: int = 1) -> str:
    if num >= 1_000_000:
        return f"{num / 1_000_000:.{precision}f}M"
    if num >= 1000:
        return f"{num / 1000:.{precision}f}K"
    return f"{num:,}"


def calculate_percentile(value: float, values: list[float]) -> int:
    """Position of the first element >= value in the sorted list, as a percentage."""
    if not values:
        return 0
    ordered = np.sort(np.asarray(values, dtype=float))
    index = int(np.searchsorted(ordered, value, side="left"))
    return round(index / len(ordered) * 100)
