"""
Color helpers for restaurant and menu theming.
"""

from shared.config.constants import DefaultColors
from shared.utils.validators import validate_hex_color

BLACK = "#000000"
WHITE = "#ffffff"


def hex_to_rgb(hex_color: str) -> tuple[int, int, int]:
    """
    Convert "#RRGGBB" (or shorthand "#RGB") to an (r, g, b) tuple.

    Raises:
        ValueError: If the value is not a hex color
    """
    value = validate_hex_color(hex_color)
    digits = value[1:]
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)


def relative_luminance(hex_color: str) -> float:
    """Perceived brightness in [0, 1] using the 0.299/0.587/0.114 weights."""
    r, g, b = hex_to_rgb(hex_color)
    return (0.299 * r + 0.587 * g + 0.114 * b) / 255


def get_contrast_color(hex_color: str) -> str:
    """Text color readable on top of hex_color: black on light, white on dark."""
    return BLACK if relative_luminance(hex_color) > 0.5 else WHITE


def resolve_brand_colors(primary: str | None, secondary: str | None) -> dict[str, str]:
    """Brand palette with defaults applied and matching foreground colors."""
    primary = primary or DefaultColors.PRIMARY
    secondary = secondary or DefaultColors.SECONDARY
    return {
        "primary_color": primary,
        "secondary_color": secondary,
        "primary_foreground": get_contrast_color(primary),
        "secondary_foreground": get_contrast_color(secondary),
    }
