"""
Color palette and distinct color suggestions

When the color picker opens, the editor pre-selects a color that is easy to
tell apart from the colors already on the grid:

1. The first preset not yet in use (compared case-insensitively)
2. Once every preset is taken, the midpoint hue of the widest gap between the
   hues already in use, at a fixed saturation and lightness

Also provides the hex input filter used while the user types a color.
"""

from __future__ import annotations

import colorsys
import math
import re
from collections.abc import Iterable

PRESET_COLORS: tuple[str, ...] = (
    "#3B82F6",  # blue
    "#10B981",  # green
    "#F59E0B",  # amber
    "#EF4444",  # red
    "#8B5CF6",  # purple
    "#EC4899",  # pink
    "#06B6D4",  # cyan
    "#F97316",  # orange
)

GENERATED_SATURATION = 0.7
GENERATED_LIGHTNESS = 0.5

HEX_COLOR_RE = re.compile(r"^#[0-9A-F]{6}$")
_PARTIAL_HEX_RE = re.compile(r"^#[0-9A-Fa-f]{0,6}$")
_FULL_HEX_INPUT_RE = re.compile(r"^#?([0-9A-Fa-f]{6})$")


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def is_hex_color(value: object) -> bool:
    return isinstance(value, str) and bool(HEX_COLOR_RE.fullmatch(value))


def normalize_hex(value: str | None) -> str | None:
    """Return the canonical #RRGGBB form of a complete color, or None."""
    if not isinstance(value, str):
        return None
    match = _FULL_HEX_INPUT_RE.fullmatch(value.strip())
    if not match:
        return None
    return f"#{match.group(1).upper()}"


def accept_hex_input(value: str) -> str | None:
    """Filter a hex field edit while typing.

    Adds a missing leading '#', then accepts up to six hex digits. Returns the
    upper-cased text to show, or None when the edit should be ignored.
    """
    text = value if value.startswith("#") else f"#{value}"
    if not _PARTIAL_HEX_RE.fullmatch(text):
        return None
    return text.upper()


def hex_to_rgb(value: str) -> tuple[int, int, int]:
    color = normalize_hex(value)
    if color is None:
        raise ValueError(f"Not a hex color: {value!r}")
    return int(color[1:3], 16), int(color[3:5], 16), int(color[5:7], 16)


def hue_of(value: str) -> int:
    """Hue of a hex color in whole degrees (0-359)."""
    red, green, blue = hex_to_rgb(value)
    hue, _lightness, _saturation = colorsys.rgb_to_hls(red / 255, green / 255, blue / 255)
    return _round_half_up(hue * 360) % 360


def hsl_to_hex(hue: float, saturation: float, lightness: float) -> str:
    red, green, blue = colorsys.hls_to_rgb((hue % 360) / 360, lightness, saturation)
    channels = (_round_half_up(channel * 255) for channel in (red, green, blue))
    return "#" + "".join(f"{channel:02X}" for channel in channels)


def widest_gap_hue(hues: Iterable[float]) -> float:
    """Midpoint of the widest circular gap between hues.

    The first widest gap in ascending order wins ties. A single hue yields the
    opposite side of the wheel; no hues yields 0.
    """
    ordered = sorted(hues)
    if not ordered:
        return 0.0

    best_gap = 0.0
    best_hue = 0.0
    for position, hue in enumerate(ordered):
        if position + 1 < len(ordered):
            gap = ordered[position + 1] - hue
        else:
            gap = 360 - hue + ordered[0]
        if gap > best_gap:
            best_gap = gap
            best_hue = (hue + gap / 2) % 360
    return best_hue


def suggest_color(used_colors: Iterable[str]) -> str:
    """Pick the color to pre-select for a new annotation."""
    used = {color.upper() for color in used_colors if isinstance(color, str)}
    for preset in PRESET_COLORS:
        if preset not in used:
            return preset

    hues = [hue_of(color) for color in sorted(used) if normalize_hex(color)]
    hue = widest_gap_hue(hues)
    return hsl_to_hex(hue, GENERATED_SATURATION, GENERATED_LIGHTNESS)
