"""
Glyph palettes and colour schemes.

A glyph palette is a run of characters ordered from lightest to densest
apparent ink.  A colour scheme pairs a text colour with a background:
  - text:       Glyph colour (RGB); per-cell opacity is applied on top
  - background: Canvas fill colour (RGB)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Tuple

RGB = Tuple[int, int, int]
RGBA = Tuple[int, int, int, int]


# ── Glyph palettes ────────────────────────────────────────────────────────

GLYPH_PALETTES: Dict[str, str] = {
    "classic": ".+xXoO",
    "dots": ".:oO0@",
    "blocks": "░▒▓█",
    "hash": ".-=+*#%@",
    "binary": "01",
}

DEFAULT_PALETTE = "classic"


def get_palette(name: str) -> str:
    if name not in GLYPH_PALETTES:
        available = ", ".join(sorted(GLYPH_PALETTES.keys()))
        raise KeyError(f"Unknown palette '{name}'. Available: {available}")
    return GLYPH_PALETTES[name]


def list_palettes() -> List[str]:
    return sorted(GLYPH_PALETTES.keys())


# ── Colour schemes ────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ColorScheme:
    """Immutable text-on-background colour scheme."""
    name: str
    text: RGB
    background: RGB

    @property
    def text_hex(self) -> str:
        return to_hex(self.text)

    @property
    def background_hex(self) -> str:
        return to_hex(self.background)


SCHEMES: Dict[str, ColorScheme] = {
    "mono": ColorScheme(
        name="Mono Grey",
        text=(153, 153, 153), background=(42, 42, 42),
    ),
    "lava": ColorScheme(
        name="Lava",
        text=(255, 120, 40), background=(30, 8, 5),
    ),
    "ocean": ColorScheme(
        name="Ocean",
        text=(80, 180, 255), background=(5, 12, 30),
    ),
    "matrix": ColorScheme(
        name="Matrix",
        text=(60, 255, 90), background=(0, 12, 0),
    ),
    "paper": ColorScheme(
        name="Paper",
        text=(40, 40, 40), background=(240, 236, 225),
    ),
    "amber": ColorScheme(
        name="Amber Terminal",
        text=(255, 176, 0), background=(16, 10, 0),
    ),
}

DEFAULT_SCHEME = "mono"


def get_scheme(name: str) -> ColorScheme:
    if name not in SCHEMES:
        available = ", ".join(sorted(SCHEMES.keys()))
        raise KeyError(f"Unknown scheme '{name}'. Available: {available}")
    return SCHEMES[name]


def list_schemes() -> List[str]:
    return sorted(SCHEMES.keys())


def create_custom_scheme(name: str, text: str, background: str) -> ColorScheme:
    """Build a scheme from ``#rrggbb`` strings."""
    return ColorScheme(name=name, text=parse_hex(text), background=parse_hex(background))


def recolor(scheme: ColorScheme, role: str, rgb: RGB, name: str = "Custom") -> ColorScheme:
    """Copy of *scheme* with its ``"text"`` or ``"background"`` colour replaced."""
    if role not in ("text", "background"):
        raise ValueError(f"Unknown colour role {role!r}")
    text = rgb if role == "text" else scheme.text
    background = rgb if role == "background" else scheme.background
    return create_custom_scheme(name, to_hex(text), to_hex(background))


# ── Colour helpers ────────────────────────────────────────────────────────

def parse_hex(value: str) -> RGB:
    """``'#rrggbb'`` (or ``'rrggbb'``) → ``(r, g, b)``."""
    s = value.strip().lstrip("#")
    if len(s) != 6:
        raise ValueError(f"Expected a #rrggbb colour, got {value!r}")
    try:
        return int(s[0:2], 16), int(s[2:4], 16), int(s[4:6], 16)
    except ValueError:
        raise ValueError(f"Expected a #rrggbb colour, got {value!r}") from None


def to_hex(rgb: RGB) -> str:
    return "#{:02x}{:02x}{:02x}".format(*rgb)


def with_opacity(rgb: RGB, opacity: float) -> RGBA:
    """Attach an 8-bit alpha channel for an opacity in ``[0, 1]``."""
    alpha = int(round(max(0.0, min(1.0, opacity)) * 255))
    return rgb[0], rgb[1], rgb[2], alpha
