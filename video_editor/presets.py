"""Presets, defaults and lookup helpers.

Pure data: nothing here touches the filesystem or raises for unknown keys.
Lookups return ``None`` and predicates return ``False``; callers decide
whether that is fatal.
"""

from __future__ import annotations

from dataclasses import dataclass

from video_editor.models import OutputConfig, SubtitleStyle, Transition

ASPECT_RATIOS = ("9:16", "16:9", "1:1", "4:5")
RESOLUTIONS = ("720p", "1080p", "4k")
VIDEO_FORMATS = ("mp4", "webm", "mov")
QUALITIES = ("draft", "normal", "high", "best")

# Base (horizontal) dimensions for each resolution
RESOLUTION_MAP: dict[str, tuple[int, int]] = {
    "720p": (1280, 720),
    "1080p": (1920, 1080),
    "4k": (3840, 2160),
}


@dataclass(frozen=True)
class Dimensions:
    width: int
    height: int


def get_dimensions(aspect_ratio: str, resolution: str) -> Dimensions:
    """Map an aspect ratio and resolution to pixel dimensions.

    The same base resolution is reinterpreted per aspect: 1080p is 1920x1080
    horizontally, 1080x1920 vertically, 1080x1080 square and 864x1080 portrait.
    """
    width, height = RESOLUTION_MAP.get(resolution, RESOLUTION_MAP["1080p"])
    if aspect_ratio == "9:16":
        return Dimensions(width=height, height=width)
    if aspect_ratio == "16:9":
        return Dimensions(width=width, height=height)
    if aspect_ratio == "1:1":
        return Dimensions(width=height, height=height)
    if aspect_ratio == "4:5":
        return Dimensions(width=round(height * 4 / 5), height=height)
    return Dimensions(width=width, height=height)


# ------------------------------------------------------------------
# Platforms
# ------------------------------------------------------------------

@dataclass(frozen=True)
class PlatformPreset:
    aspect_ratio: str
    resolution: str
    fps: int
    max_duration: int | None  # seconds, None = no limit
    video_bitrate: str
    audio_bitrate: str


PLATFORM_PRESETS: dict[str, PlatformPreset] = {
    "tiktok": PlatformPreset("9:16", "1080p", 30, 180, "8M", "192k"),
    "reels": PlatformPreset("9:16", "1080p", 30, 90, "8M", "192k"),
    "shorts": PlatformPreset("9:16", "1080p", 30, 60, "8M", "192k"),
    "youtube": PlatformPreset("16:9", "1080p", 30, None, "10M", "256k"),
    "instagram_feed": PlatformPreset("4:5", "1080p", 30, 60, "6M", "192k"),
}


def get_platform_preset(platform: str) -> PlatformPreset | None:
    return PLATFORM_PRESETS.get(platform)


def get_output_config_for_platform(platform: str, output_path: str) -> OutputConfig | None:
    """Build the output settings a platform expects, or ``None`` if unknown."""
    preset = PLATFORM_PRESETS.get(platform)
    if preset is None:
        return None
    return OutputConfig(
        path=output_path,
        format="mp4",
        aspect_ratio=preset.aspect_ratio,
        resolution=preset.resolution,
        fps=preset.fps,
        video_bitrate=preset.video_bitrate,
        audio_bitrate=preset.audio_bitrate,
        quality="high",
    )


# ------------------------------------------------------------------
# Quality
# ------------------------------------------------------------------

@dataclass(frozen=True)
class QualityPreset:
    video_bitrate: str
    audio_bitrate: str
    fps: int


QUALITY_PRESETS: dict[str, QualityPreset] = {
    "draft": QualityPreset("2M", "128k", 24),
    "normal": QualityPreset("5M", "192k", 30),
    "high": QualityPreset("8M", "256k", 30),
    "best": QualityPreset("15M", "320k", 60),
}

CRF_BY_QUALITY: dict[str, str] = {
    "draft": "28",
    "normal": "23",
    "high": "20",
    "best": "18",
}


def get_crf(quality: str) -> str:
    return CRF_BY_QUALITY.get(quality, CRF_BY_QUALITY["high"])


# ------------------------------------------------------------------
# Subtitle styles
# ------------------------------------------------------------------

SUBTITLE_PRESETS: dict[str, SubtitleStyle] = {
    # Classic white text with black outline
    "classic": SubtitleStyle(
        font_family="Arial",
        font_size=48,
        font_color="#FFFFFF",
        font_weight="bold",
        stroke_color="#000000",
        stroke_width=2,
        position_y=0.85,
        align="center",
        animation="none",
    ),
    "tiktok": SubtitleStyle(
        font_family="Arial Black",
        font_size=56,
        font_color="#FFFFFF",
        font_weight="bolder",
        stroke_color="#000000",
        stroke_width=3,
        position_y=0.5,
        align="center",
        text_transform="uppercase",
        animation="pop",
    ),
    "highlight": SubtitleStyle(
        font_family="Impact",
        font_size=64,
        font_color="#FFFF00",
        background_color="#000000",
        background_padding=8,
        background_radius=4,
        font_weight="bold",
        position_y=0.5,
        align="center",
        animation="highlight",
    ),
    "minimal": SubtitleStyle(
        font_family="Helvetica Neue",
        font_size=42,
        font_color="#FFFFFF",
        font_weight="normal",
        position_y=0.9,
        align="center",
        animation="fade",
    ),
    "neon": SubtitleStyle(
        font_family="Arial Black",
        font_size=52,
        font_color="#00FFFF",
        stroke_color="#FF00FF",
        stroke_width=2,
        font_weight="bold",
        position_y=0.5,
        align="center",
        animation="pop",
    ),
    "karaoke": SubtitleStyle(
        font_family="Arial",
        font_size=48,
        font_color="#FFFFFF",
        background_color="rgba(0, 0, 0, 0.7)",
        background_padding=12,
        background_radius=8,
        font_weight="bold",
        position_y=0.85,
        align="center",
        animation="highlight",
    ),
}


def get_subtitle_preset(name: str) -> SubtitleStyle | None:
    return SUBTITLE_PRESETS.get(name)


# ------------------------------------------------------------------
# Transitions
# ------------------------------------------------------------------

TRANSITION_PRESETS: dict[str, Transition] = {
    "none": Transition(type="none", duration=0),
    "quickFade": Transition(type="fade", duration=0.3, easing="easeInOut"),
    "crossfade": Transition(type="crossfade", duration=0.5, easing="easeInOut"),
    "slideLeft": Transition(type="slideLeft", duration=0.4, easing="easeOut"),
    "glitch": Transition(type="glitch", duration=0.2, easing="linear"),
    "flash": Transition(type="flash", duration=0.15, easing="linear"),
    "zoomIn": Transition(type="zoomIn", duration=0.4, easing="easeOut"),
}


def get_transition_preset(name: str) -> Transition | None:
    return TRANSITION_PRESETS.get(name)


AVAILABLE_TRANSITIONS = (
    "none",
    "fade",
    "crossfade",
    "slideLeft",
    "slideRight",
    "slideUp",
    "slideDown",
    "zoomIn",
    "zoomOut",
    "wipeLeft",
    "wipeRight",
    "wipeUp",
    "wipeDown",
    "blur",
    "pixelize",
    "rotate",
    "flip",
    "glitch",
    "flash",
    "shake",
)


# ------------------------------------------------------------------
# Defaults
# ------------------------------------------------------------------

@dataclass(frozen=True)
class Defaults:
    format: str = "mp4"
    aspect_ratio: str = "9:16"
    resolution: str = "1080p"
    fps: int = 30
    quality: str = "high"
    audio_bitrate: str = "192k"
    transition: Transition = TRANSITION_PRESETS["quickFade"]
    subtitle_style: SubtitleStyle = SUBTITLE_PRESETS["tiktok"]
    volume: float = 1.0
    music_volume: float = 0.3
    audio_fade_duration: float = 1.0


DEFAULTS = Defaults()


# ------------------------------------------------------------------
# Validation predicates
# ------------------------------------------------------------------

def is_valid_aspect_ratio(value: str) -> bool:
    return value in ASPECT_RATIOS


def is_valid_resolution(value: str) -> bool:
    return value in RESOLUTIONS


def is_valid_transition_type(value: str) -> bool:
    return value in AVAILABLE_TRANSITIONS


def is_valid_platform(value: str) -> bool:
    return value in PLATFORM_PRESETS


def is_valid_quality(value: str) -> bool:
    return value in QUALITIES


def is_valid_format(value: str) -> bool:
    return value in VIDEO_FORMATS


def get_file_extension(video_format: str) -> str:
    return f".{video_format}"
