"""Data models for text overlays, titles and captions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

# Preset positions: "<vertical>-<horizontal>"
POSITION_PRESETS = (
    "top-left",
    "top-center",
    "top-right",
    "middle-left",
    "middle-center",
    "middle-right",
    "bottom-left",
    "bottom-center",
    "bottom-right",
)

FONT_WEIGHTS = (
    "thin",
    "extralight",
    "light",
    "regular",
    "medium",
    "semibold",
    "bold",
    "extrabold",
    "black",
)

TEXT_ANIMATIONS = ("none", "fade-in", "fade-out")


@dataclass(frozen=True)
class CustomPosition:
    """Explicit anchor point.

    ``x`` and ``y`` are pixels, or percentage strings like ``"50%"`` that are
    resolved against the frame size by ffmpeg at render time.
    """
    x: float | str
    y: float | str
    align_x: str = "left"  # left | center | right
    align_y: str = "top"  # top | middle | bottom


TextPosition = Union[str, CustomPosition]


@dataclass(frozen=True)
class FontConfig:
    family: str
    size: int
    weight: str = "regular"
    line_height: float = 1.0  # multiplier, 1.0 = normal
    letter_spacing: float = 0
    path: str | None = None  # local font file, when one has been resolved


@dataclass(frozen=True)
class GradientColor:
    """Gradient fill. drawtext cannot paint gradients, so the first color is used."""
    direction: str
    colors: tuple[str, ...]


@dataclass(frozen=True)
class StrokeConfig:
    color: str
    width: int


@dataclass(frozen=True)
class ShadowConfig:
    color: str
    offset_x: int
    offset_y: int
    blur: int = 0


@dataclass(frozen=True)
class BackgroundConfig:
    color: str
    padding: int | tuple[int, int]  # uniform, or (x, y)
    border_radius: int = 0
    border_color: str | None = None
    border_width: int = 0


@dataclass(frozen=True)
class AnimationConfig:
    type: str  # none | fade-in | fade-out
    duration: float
    delay: float = 0.0
    easing: str = "linear"


@dataclass(frozen=True)
class TextStyle:
    font: FontConfig
    color: str | GradientColor
    stroke: StrokeConfig | None = None
    shadow: ShadowConfig | None = None
    background: BackgroundConfig | None = None
    transform: str | None = None  # none | uppercase | lowercase | capitalize
    opacity: float | None = None


@dataclass(frozen=True)
class TextElement:
    """A single piece of text drawn onto the video."""
    id: str
    text: str
    position: TextPosition
    style: TextStyle
    start_time: float | None = None
    end_time: float | None = None
    animation_in: AnimationConfig | None = None
    animation_out: AnimationConfig | None = None
    z_index: int = 0


@dataclass(frozen=True)
class TextLayer:
    """Elements drawn onto one video stream, lowest ``z_index`` first."""
    id: str
    elements: tuple[TextElement, ...] = ()


@dataclass(frozen=True)
class TextStylePreset:
    name: str
    category: str  # title | subtitle | caption | hook | cta | lower-third
    style: TextStyle
    default_position: TextPosition = "middle-center"
    description: str = ""


@dataclass(frozen=True)
class FontMetadata:
    family: str
    display_name: str
    category: str  # sans-serif | serif | display | handwriting | monospace
    weights: tuple[str, ...] = ("regular",)
    google_fonts_url: str | None = None
    recommended_for: tuple[str, ...] = field(default_factory=tuple)
