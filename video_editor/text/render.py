"""Render text elements as ffmpeg ``drawtext`` filters.

Positions compile to expressions over ``w``, ``h``, ``text_w`` and
``text_h``, so one compiled filter works at any output resolution.
"""

from __future__ import annotations

import logging
import re
import uuid
from pathlib import Path
from typing import Iterable, Sequence

from video_editor.errors import EditValidationError
from video_editor.filtergraph import Filter, FilterNode, easing_expr, fmt, node
from video_editor.text.fonts import get_font_path
from video_editor.text.models import (
    AnimationConfig,
    GradientColor,
    TextElement,
    TextLayer,
    TextPosition,
    TextStyle,
)

logger = logging.getLogger(__name__)

EDGE_PADDING = 40
# drawtext has no "forever"; used when an element has a start but no end
OPEN_END = 999999

_RGBA_RE = re.compile(r"rgba\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*,\s*([\d.]+)\s*\)")
_RGB_RE = re.compile(r"rgb\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*\)")
_UNESCAPE_RE = re.compile(r"'\\''|\\\\|\\:|\\\[|\\\]|%%")
_UNESCAPES = {
    "'\\''": "'",
    "\\\\": "\\",
    "\\:": ":",
    "\\[": "[",
    "\\]": "]",
    "%%": "%",
}

_LEFT, _CENTER_X, _RIGHT = str(EDGE_PADDING), "(w-text_w)/2", f"w-text_w-{EDGE_PADDING}"
_TOP, _MIDDLE_Y, _BOTTOM = str(EDGE_PADDING), "(h-text_h)/2", f"h-text_h-{EDGE_PADDING}"

PRESET_POSITIONS: dict[str, tuple[str, str]] = {
    "top-left": (_LEFT, _TOP),
    "top-center": (_CENTER_X, _TOP),
    "top-right": (_RIGHT, _TOP),
    "middle-left": (_LEFT, _MIDDLE_Y),
    "middle-center": (_CENTER_X, _MIDDLE_Y),
    "middle-right": (_RIGHT, _MIDDLE_Y),
    "bottom-left": (_LEFT, _BOTTOM),
    "bottom-center": (_CENTER_X, _BOTTOM),
    "bottom-right": (_RIGHT, _BOTTOM),
}


# ------------------------------------------------------------------
# Positions and colors
# ------------------------------------------------------------------

def _coordinate(value: float | str, axis: str) -> str:
    if isinstance(value, str) and value.strip().endswith("%"):
        return f"{axis}*{fmt(float(value.strip()[:-1]) / 100)}"
    return fmt(value)


def position_to_ffmpeg(position: TextPosition) -> tuple[str, str]:
    """Return ``(x, y)`` drawtext expressions for a preset or custom position."""
    if isinstance(position, str):
        try:
            return PRESET_POSITIONS[position]
        except KeyError:
            raise EditValidationError(f"Unknown text position: {position}") from None

    x = _coordinate(position.x, "w")
    y = _coordinate(position.y, "h")

    if position.align_x == "center":
        x = f"{x}-text_w/2"
    elif position.align_x == "right":
        x = f"{x}-text_w"

    if position.align_y == "middle":
        y = f"{y}-text_h/2"
    elif position.align_y == "bottom":
        y = f"{y}-text_h"

    return x, y


def color_to_ffmpeg(color: str | GradientColor) -> str:
    """Normalise ``#hex``, ``rgb()`` and ``rgba()`` to ``0xRRGGBB[AA]``.

    Named colors (``white``, ``black@0.5``) pass through unchanged. Gradients
    use their first color.
    """
    if isinstance(color, GradientColor):
        color = color.colors[0]

    match = _RGBA_RE.fullmatch(color.strip())
    if match:
        r, g, b = (int(v) for v in match.groups()[:3])
        alpha = round(float(match.group(4)) * 255)
        return f"0x{r:02X}{g:02X}{b:02X}{alpha:02X}"

    match = _RGB_RE.fullmatch(color.strip())
    if match:
        r, g, b = (int(v) for v in match.groups())
        return f"0x{r:02X}{g:02X}{b:02X}"

    if color.startswith("#"):
        hex_part = color[1:]
        if len(hex_part) == 3:
            hex_part = "".join(c * 2 for c in hex_part)
        return f"0x{hex_part}"

    return color


# ------------------------------------------------------------------
# Text content
# ------------------------------------------------------------------

def escape_text_for_ffmpeg(text: str) -> str:
    """Escape text for use inside ``drawtext=text='...'``.

    Backslashes go first so the backslashes added by later steps are not
    doubled again.
    """
    return (
        text.replace("\\", "\\\\")
        .replace("'", "'\\''")
        .replace(":", "\\:")
        .replace("[", "\\[")
        .replace("]", "\\]")
        .replace("%", "%%")
    )


def unescape_text_for_ffmpeg(escaped: str) -> str:
    """Inverse of :func:`escape_text_for_ffmpeg`, in a single left-to-right pass."""
    return _UNESCAPE_RE.sub(lambda m: _UNESCAPES[m.group(0)], escaped)


def apply_text_transform(text: str, transform: str | None) -> str:
    if transform == "uppercase":
        return text.upper()
    if transform == "lowercase":
        return text.lower()
    if transform == "capitalize":
        return re.sub(r"(^|\s)(\S)", lambda m: m.group(1) + m.group(2).upper(), text)
    return text


def wrap_text(text: str, max_chars_per_line: int) -> str:
    """Greedy word wrap; a word longer than the limit gets its own line."""
    lines: list[str] = []
    current = ""
    for word in text.split():
        if current and len(current) + 1 + len(word) > max_chars_per_line:
            lines.append(current)
            current = word
        else:
            current = f"{current} {word}" if current else word
    if current:
        lines.append(current)
    return "\n".join(lines)


def calculate_font_size(
    text: str,
    max_width: int,
    base_font_size: int,
    min_font_size: int = 24,
) -> int:
    """Shrink ``base_font_size`` until the longest line roughly fits ``max_width``.

    Assumes an average glyph is 0.6 em wide.
    """
    longest = max((len(line) for line in text.split("\n")), default=0)
    estimated = longest * base_font_size * 0.6
    if estimated <= max_width:
        return base_font_size
    return max(min_font_size, int(max_width / estimated * base_font_size))


# ------------------------------------------------------------------
# drawtext
# ------------------------------------------------------------------

def _fade_factors(element: TextElement) -> list[str]:
    factors = []
    anim_in = element.animation_in
    if anim_in is not None and anim_in.type == "fade-in" and anim_in.duration > 0:
        start = (element.start_time or 0) + anim_in.delay
        progress = f"clip((t-{fmt(start)})/{fmt(anim_in.duration)},0,1)"
        factors.append(easing_expr(anim_in.easing, progress))

    anim_out = element.animation_out
    if (
        anim_out is not None
        and anim_out.type == "fade-out"
        and anim_out.duration > 0
        and element.end_time is not None
    ):
        end = element.end_time - anim_out.delay
        progress = f"clip(({fmt(end)}-t)/{fmt(anim_out.duration)},0,1)"
        factors.append(easing_expr(anim_out.easing, progress))
    return factors


def generate_drawtext_filter(element: TextElement, fonts_dir: str | Path | None = None) -> Filter:
    """Compile one element into a ``drawtext`` filter."""
    style = element.style
    font = style.font
    text = apply_text_transform(element.text, style.transform)

    options: dict[str, str | float | int] = {
        "text": f"'{escape_text_for_ffmpeg(text)}'",
        "font": f"'{font.family}'",
        "fontsize": font.size,
    }

    font_path = font.path or get_font_path(font.family, font.weight, fonts_dir)
    if font_path:
        options["fontfile"] = f"'{font_path}'"

    options["fontcolor"] = color_to_ffmpeg(style.color)
    options["x"], options["y"] = position_to_ffmpeg(element.position)

    if style.stroke:
        options["borderw"] = style.stroke.width
        options["bordercolor"] = color_to_ffmpeg(style.stroke.color)

    if style.shadow:
        options["shadowcolor"] = color_to_ffmpeg(style.shadow.color)
        options["shadowx"] = style.shadow.offset_x
        options["shadowy"] = style.shadow.offset_y

    if style.background:
        padding = style.background.padding
        if isinstance(padding, tuple):
            padding = round((padding[0] + padding[1]) / 2)
        options["box"] = 1
        options["boxcolor"] = color_to_ffmpeg(style.background.color)
        options["boxborderw"] = padding

    if font.line_height and font.line_height != 1:
        options["line_spacing"] = round((font.line_height - 1) * font.size)

    if element.start_time is not None or element.end_time is not None:
        start = element.start_time or 0
        end = element.end_time if element.end_time is not None else OPEN_END
        options["enable"] = f"'gte(t,{fmt(start)})*lt(t,{fmt(end)})'"

    factors = _fade_factors(element)
    if style.opacity is not None and style.opacity != 1:
        factors.append(fmt(style.opacity))
    if factors:
        options["alpha"] = f"'{'*'.join(factors)}'"

    return Filter.of("drawtext", **options)


def sort_elements(elements: Iterable[TextElement]) -> list[TextElement]:
    """Lowest ``z_index`` first; ties keep their given order."""
    return sorted(elements, key=lambda e: e.z_index)


def generate_text_layer_node(
    layer: TextLayer,
    input_label: str,
    fonts_dir: str | Path | None = None,
) -> FilterNode | None:
    """One node drawing every element of ``layer`` onto ``input_label``.

    Returns ``None`` for an empty layer. The output label is ``text_<id>``.
    """
    if not layer.elements:
        return None
    filters = [generate_drawtext_filter(e, fonts_dir) for e in sort_elements(layer.elements)]
    return node(input_label, filters, f"text_{layer.id}")


def generate_all_text_nodes(
    layers: Sequence[TextLayer],
    input_label: str,
    fonts_dir: str | Path | None = None,
) -> tuple[list[FilterNode], str]:
    """Chain layers in order; returns the nodes and the final video label."""
    nodes: list[FilterNode] = []
    current = input_label
    for layer in layers:
        fragment = generate_text_layer_node(layer, current, fonts_dir)
        if fragment is None:
            continue
        nodes.append(fragment)
        current = fragment.outputs[0]
    return nodes, current


# ------------------------------------------------------------------
# Factories
# ------------------------------------------------------------------

def create_text_element(
    text: str,
    style: TextStyle,
    position: TextPosition = "middle-center",
    *,
    id: str | None = None,
    start_time: float | None = None,
    end_time: float | None = None,
    z_index: int = 0,
    animation_in: AnimationConfig | None = None,
    animation_out: AnimationConfig | None = None,
) -> TextElement:
    return TextElement(
        id=id or f"text-{uuid.uuid4().hex[:8]}",
        text=text,
        position=position,
        style=style,
        start_time=start_time,
        end_time=end_time,
        animation_in=animation_in,
        animation_out=animation_out,
        z_index=z_index,
    )


def create_text_layer(id: str, elements: Iterable[TextElement]) -> TextLayer:
    return TextLayer(id=id, elements=tuple(elements))


def create_static_text(text: str, position: TextPosition, style: TextStyle) -> TextElement:
    """Text shown for the whole video."""
    return create_text_element(text, style, position)


def create_timed_text(
    text: str,
    start_time: float,
    end_time: float,
    position: TextPosition,
    style: TextStyle,
) -> TextElement:
    return create_text_element(text, style, position, start_time=start_time, end_time=end_time)