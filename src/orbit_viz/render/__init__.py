"""Rendering helpers for the orbital view."""

from .assets import (
    AssetLibrary,
    get_text_surface,
    hex_to_rgb,
    load_font,
)
from .draw import (
    draw_glow,
    draw_home_marker,
    draw_indicator,
    draw_polyline,
    draw_starfield,
    generate_starfield,
)
from .projection import Projection
from .renderer import SceneRenderer, draw_fps, draw_status

__all__ = [
    "AssetLibrary",
    "Projection",
    "SceneRenderer",
    "draw_fps",
    "draw_glow",
    "draw_home_marker",
    "draw_indicator",
    "draw_polyline",
    "draw_starfield",
    "draw_status",
    "generate_starfield",
    "get_text_surface",
    "hex_to_rgb",
    "load_font",
]
