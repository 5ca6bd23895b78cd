"""Text overlays: models, drawtext rendering, style presets and fonts."""

from video_editor.text.fonts import FONTS, get_font_path, get_font_with_fallback, is_font_available
from video_editor.text.models import (
    AnimationConfig,
    BackgroundConfig,
    CustomPosition,
    FontConfig,
    GradientColor,
    ShadowConfig,
    StrokeConfig,
    TextElement,
    TextLayer,
    TextStyle,
    TextStylePreset,
)
from video_editor.text.presets import ALL_PRESETS, get_preset
from video_editor.text.render import (
    color_to_ffmpeg,
    create_static_text,
    create_text_element,
    create_text_layer,
    create_timed_text,
    escape_text_for_ffmpeg,
    generate_drawtext_filter,
    generate_text_layer_node,
    position_to_ffmpeg,
    unescape_text_for_ffmpeg,
)

__all__ = [
    "ALL_PRESETS",
    "AnimationConfig",
    "BackgroundConfig",
    "CustomPosition",
    "FONTS",
    "FontConfig",
    "GradientColor",
    "ShadowConfig",
    "StrokeConfig",
    "TextElement",
    "TextLayer",
    "TextStyle",
    "TextStylePreset",
    "color_to_ffmpeg",
    "create_static_text",
    "create_text_element",
    "create_text_layer",
    "create_timed_text",
    "escape_text_for_ffmpeg",
    "generate_drawtext_filter",
    "generate_text_layer_node",
    "get_font_path",
    "get_font_with_fallback",
    "get_preset",
    "is_font_available",
    "position_to_ffmpeg",
    "unescape_text_for_ffmpeg",
]
