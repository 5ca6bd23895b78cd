"""Ready-made text styles for titles, hooks, captions, lower thirds and CTAs."""

from __future__ import annotations

from video_editor.text.models import (
    BackgroundConfig,
    FontConfig,
    ShadowConfig,
    StrokeConfig,
    TextStyle,
    TextStylePreset,
)

PRESET_CATEGORIES = ("title", "hook", "subtitle", "caption", "lower-third", "cta")


def create_style(
    family: str,
    size: int,
    color: str,
    weight: str = "bold",
    line_height: float = 1.2,
    letter_spacing: float = 0,
    stroke: StrokeConfig | None = None,
    shadow: ShadowConfig | None = None,
    background: BackgroundConfig | None = None,
    transform: str | None = None,
    opacity: float | None = None,
) -> TextStyle:
    return TextStyle(
        font=FontConfig(
            family=family,
            size=size,
            weight=weight,
            line_height=line_height,
            letter_spacing=letter_spacing,
        ),
        color=color,
        stroke=stroke,
        shadow=shadow,
        background=background,
        transform=transform,
        opacity=opacity,
    )


def _preset(name, category, description, position, style) -> TextStylePreset:
    return TextStylePreset(
        name=name,
        category=category,
        style=style,
        default_position=position,
        description=description,
    )


# ------------------------------------------------------------------
# Titles
# ------------------------------------------------------------------

TITLE_PRESETS: dict[str, TextStylePreset] = {
    "title-impact": _preset(
        "Impact Title", "title", "Bold, attention-grabbing title with thick stroke", "middle-center",
        create_style(
            "Impact", 96, "#FFFFFF", weight="regular",
            stroke=StrokeConfig("#000000", 4),
            shadow=ShadowConfig("rgba(0,0,0,0.8)", 4, 4),
            transform="uppercase",
        ),
    ),
    "title-modern": _preset(
        "Modern Title", "title", "Clean, modern title with subtle shadow", "middle-center",
        create_style(
            "Montserrat", 80, "#FFFFFF",
            shadow=ShadowConfig("rgba(0,0,0,0.5)", 2, 2, blur=4),
        ),
    ),
    "title-neon": _preset(
        "Neon Title", "title", "Neon glow effect for attention-grabbing titles", "middle-center",
        create_style(
            "Bebas Neue", 100, "#00FFFF", weight="regular",
            stroke=StrokeConfig("#FF00FF", 3),
            shadow=ShadowConfig("#00FFFF", 0, 0, blur=20),
            transform="uppercase",
        ),
    ),
    "title-comic": _preset(
        "Comic Title", "title", "Fun, playful comic book style", "middle-center",
        create_style(
            "Bangers", 90, "#FFFF00", weight="regular", letter_spacing=2,
            stroke=StrokeConfig("#FF0000", 4),
            shadow=ShadowConfig("#000000", 6, 6),
            transform="uppercase",
        ),
    ),
    "title-minimal": _preset(
        "Minimal Title", "title", "Clean, minimalist style", "middle-center",
        create_style(
            "Inter", 72, "#FFFFFF", weight="light", letter_spacing=4, transform="uppercase",
        ),
    ),
    "title-cinematic": _preset(
        "Cinematic Title", "title", "Movie trailer style title", "middle-center",
        create_style(
            "Oswald", 88, "#FFFFFF", letter_spacing=8,
            stroke=StrokeConfig("#000000", 2),
            transform="uppercase",
        ),
    ),
}

# ------------------------------------------------------------------
# Hooks (opening lines)
# ------------------------------------------------------------------

HOOK_PRESETS: dict[str, TextStylePreset] = {
    "hook-tiktok": _preset(
        "TikTok Hook", "hook", "Bold, centered hook text like popular TikToks", "middle-center",
        create_style(
            "Arial Black", 72, "#FFFFFF", weight="regular",
            stroke=StrokeConfig("#000000", 4),
            transform="uppercase",
        ),
    ),
    "hook-youtube": _preset(
        "YouTube Hook", "hook", "YouTube thumbnail style text", "bottom-center",
        create_style(
            "Anton", 80, "#FFFF00", weight="regular",
            stroke=StrokeConfig("#000000", 5),
            shadow=ShadowConfig("#000000", 4, 4),
            transform="uppercase",
        ),
    ),
    "hook-urgent": _preset(
        "Urgent Hook", "hook", "Breaking news / urgent style", "top-center",
        create_style(
            "Roboto", 56, "#FFFFFF", weight="black",
            background=BackgroundConfig("#FF0000", (24, 12), border_radius=4),
            transform="uppercase",
        ),
    ),
    "hook-question": _preset(
        "Question Hook", "hook", "Engaging question style", "middle-center",
        create_style("Poppins", 64, "#FFFFFF", stroke=StrokeConfig("#000000", 3)),
    ),
    "hook-highlight": _preset(
        "Highlight Hook", "hook", "Highlighted key phrase", "middle-center",
        create_style(
            "Montserrat", 60, "#000000", weight="extrabold",
            background=BackgroundConfig("#FFFF00", (16, 8), border_radius=4),
            transform="uppercase",
        ),
    ),
}

# ------------------------------------------------------------------
# Subtitles and captions
# ------------------------------------------------------------------

SUBTITLE_TEXT_PRESETS: dict[str, TextStylePreset] = {
    "subtitle-classic": _preset(
        "Classic Subtitle", "subtitle", "Traditional white text with black outline", "bottom-center",
        create_style("Arial", 48, "#FFFFFF", stroke=StrokeConfig("#000000", 2)),
    ),
    "subtitle-tiktok": _preset(
        "TikTok Caption", "caption", "Bold centered captions like TikTok", "middle-center",
        create_style(
            "Arial Black", 56, "#FFFFFF", weight="regular",
            stroke=StrokeConfig("#000000", 3),
            transform="uppercase",
        ),
    ),
    "subtitle-netflix": _preset(
        "Netflix Style", "subtitle", "Clean Netflix-style subtitles", "bottom-center",
        create_style(
            "Open Sans", 44, "#FFFFFF", weight="semibold",
            shadow=ShadowConfig("rgba(0,0,0,0.8)", 2, 2, blur=4),
        ),
    ),
    "subtitle-boxed": _preset(
        "Boxed Subtitle", "subtitle", "Text with semi-transparent background", "bottom-center",
        create_style(
            "Roboto", 42, "#FFFFFF", weight="medium",
            background=BackgroundConfig("rgba(0,0,0,0.7)", (16, 8), border_radius=4),
        ),
    ),
    "subtitle-karaoke": _preset(
        "Karaoke Style", "caption", "Word-by-word highlight style", "bottom-center",
        create_style(
            "Poppins", 52, "#FFFFFF",
            background=BackgroundConfig("rgba(0,0,0,0.6)", (12, 8), border_radius=8),
        ),
    ),
    "subtitle-mrbeast": _preset(
        "MrBeast Style", "caption", "Bold highlighted words like MrBeast videos", "middle-center",
        create_style(
            "Impact", 64, "#FFFF00", weight="regular",
            stroke=StrokeConfig("#000000", 4),
            background=BackgroundConfig("#000000", (8, 4)),
            transform="uppercase",
        ),
    ),
}

# ------------------------------------------------------------------
# Lower thirds and calls to action
# ------------------------------------------------------------------

LOWER_THIRD_PRESETS: dict[str, TextStylePreset] = {
    "lower-third-news": _preset(
        "News Lower Third", "lower-third", "Professional news broadcast style", "bottom-left",
        create_style(
            "Roboto", 36, "#FFFFFF",
            background=BackgroundConfig(
                "#1a1a1a", (20, 12), border_color="#FF0000", border_width=3,
            ),
        ),
    ),
    "lower-third-modern": _preset(
        "Modern Lower Third", "lower-third", "Clean modern style name tag", "bottom-left",
        create_style(
            "Inter", 32, "#FFFFFF", weight="semibold",
            background=BackgroundConfig("rgba(0,0,0,0.8)", (24, 16), border_radius=8),
        ),
    ),
    "lower-third-minimal": _preset(
        "Minimal Lower Third", "lower-third", "Simple text with underline accent", "bottom-left",
        create_style(
            "Montserrat", 28, "#FFFFFF", weight="medium",
            shadow=ShadowConfig("rgba(0,0,0,0.6)", 1, 1),
        ),
    ),
}

CTA_PRESETS: dict[str, TextStylePreset] = {
    "cta-subscribe": _preset(
        "Subscribe CTA", "cta", "YouTube subscribe button style", "bottom-right",
        create_style(
            "Roboto", 32, "#FFFFFF",
            background=BackgroundConfig("#FF0000", (20, 10), border_radius=4),
            transform="uppercase",
        ),
    ),
    "cta-swipe": _preset(
        "Swipe Up CTA", "cta", "Instagram swipe up style", "bottom-center",
        create_style("Poppins", 28, "#FFFFFF", weight="semibold", stroke=StrokeConfig("#000000", 1)),
    ),
    "cta-link": _preset(
        "Link CTA", "cta", "Link in bio style", "bottom-center",
        create_style(
            "Inter", 26, "#FFFFFF", weight="medium",
            background=BackgroundConfig("rgba(0,0,0,0.7)", (16, 8), border_radius=20),
        ),
    ),
}

ALL_PRESETS: dict[str, TextStylePreset] = {
    **TITLE_PRESETS,
    **HOOK_PRESETS,
    **SUBTITLE_TEXT_PRESETS,
    **LOWER_THIRD_PRESETS,
    **CTA_PRESETS,
}


def get_preset(name: str) -> TextStylePreset | None:
    return ALL_PRESETS.get(name)


def get_presets_by_category(category: str) -> list[TextStylePreset]:
    return [p for p in ALL_PRESETS.values() if p.category == category]


def get_preset_names() -> list[str]:
    return list(ALL_PRESETS)


def get_preset_categories() -> list[str]:
    return list(PRESET_CATEGORIES)
