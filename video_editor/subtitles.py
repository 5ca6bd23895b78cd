"""Subtitle parsing, generation and burn-in.

Handles SRT (``HH:MM:SS,mmm``, numbered cues) and WebVTT
(``[HH:]MM:SS.mmm``, ``WEBVTT`` header, inline tags). Malformed cues are
skipped so one bad cue does not lose the whole file.
"""

from __future__ import annotations

import html
import logging
import re
from dataclasses import fields, replace
from pathlib import Path
from typing import Iterable, Sequence

from video_editor.errors import EditValidationError
from video_editor.filtergraph import Filter, FilterNode, fmt, node
from video_editor.models import (
    SrtCue,
    SubtitleConfig,
    SubtitleEntry,
    SubtitleStyle,
    WordTimestamp,
)
from video_editor.presets import DEFAULTS, SUBTITLE_PRESETS
from video_editor.text.render import (
    EDGE_PADDING,
    apply_text_transform,
    color_to_ffmpeg,
    escape_text_for_ffmpeg,
)

logger = logging.getLogger(__name__)

_SRT_TS_RE = re.compile(r"^(\d+):(\d{2}):(\d{2})[,.](\d{1,3})$")
_VTT_TS_RE = re.compile(r"^(?:(\d+):)?(\d{2}):(\d{2})\.(\d{1,3})$")
_SRT_CUE_RE = re.compile(
    r"(\d{2,}:\d{2}:\d{2}[,.]\d{3})\s*-->\s*(\d{2,}:\d{2}:\d{2}[,.]\d{3})"
)
_VTT_CUE_RE = re.compile(
    r"((?:\d{2,}:)?\d{2}:\d{2}\.\d{3})\s*-->\s*((?:\d{2,}:)?\d{2}:\d{2}\.\d{3})"
)
_BLOCK_SPLIT_RE = re.compile(r"\r?\n[ \t]*\r?\n")
_TAG_RE = re.compile(r"<[^>]*>")

DEFAULT_FONT_SIZE = 48
DEFAULT_POSITION_Y = 0.85
DEFAULT_BOX_PADDING = 10
# Longest fade used by the "fade" animation
FADE_SECONDS = 0.2


# ------------------------------------------------------------------
# Timestamps
# ------------------------------------------------------------------

def _to_seconds(hours: str | None, minutes: str, seconds: str, millis: str) -> float:
    total_ms = (
        int(hours or 0) * 3_600_000
        + int(minutes) * 60_000
        + int(seconds) * 1000
        + int(millis.ljust(3, "0"))
    )
    return total_ms / 1000


def parse_srt_timestamp(timestamp: str) -> float:
    """``"00:01:02,345"`` -> ``62.345``. Raises ``ValueError`` when malformed."""
    match = _SRT_TS_RE.match(timestamp.strip())
    if not match:
        raise ValueError(f"Invalid timestamp format: {timestamp}")
    return _to_seconds(*match.groups())


def parse_vtt_timestamp(timestamp: str) -> float:
    """``"01:02.345"`` or ``"00:01:02.345"`` -> ``62.345``."""
    match = _VTT_TS_RE.match(timestamp.strip())
    if not match:
        raise ValueError(f"Invalid timestamp format: {timestamp}")
    return _to_seconds(*match.groups())


def _split_ms(total_seconds: float) -> tuple[int, int, int, int]:
    # Round the total first so 59.9996 becomes 01:00.000, not 00:59.1000
    total_ms = max(0, round(total_seconds * 1000))
    hours, rest = divmod(total_ms, 3_600_000)
    minutes, rest = divmod(rest, 60_000)
    seconds, millis = divmod(rest, 1000)
    return hours, minutes, seconds, millis


def seconds_to_srt_timestamp(total_seconds: float) -> str:
    h, m, s, ms = _split_ms(total_seconds)
    return f"{h:02d}:{m:02d}:{s:02d},{ms:03d}"


def seconds_to_vtt_timestamp(total_seconds: float) -> str:
    h, m, s, ms = _split_ms(total_seconds)
    return f"{h:02d}:{m:02d}:{s:02d}.{ms:03d}"


# ------------------------------------------------------------------
# SRT / VTT
# ------------------------------------------------------------------

def _blocks(content: str) -> list[list[str]]:
    return [
        [line.strip() for line in block.splitlines()]
        for block in _BLOCK_SPLIT_RE.split(content.strip())
        if block.strip()
    ]


def parse_srt(content: str) -> list[SrtCue]:
    cues: list[SrtCue] = []
    for lines in _blocks(content):
        ts_index = next((i for i, line in enumerate(lines) if "-->" in line), None)
        if ts_index is None:
            logger.debug("Skipping SRT block without timing line: %r", lines[0])
            continue

        match = _SRT_CUE_RE.search(lines[ts_index])
        if not match:
            logger.debug("Skipping malformed SRT timing line: %r", lines[ts_index])
            continue

        index = len(cues) + 1
        if ts_index > 0 and lines[ts_index - 1].isdigit():
            index = int(lines[ts_index - 1])

        cues.append(
            SrtCue(
                index=index,
                start_time=parse_srt_timestamp(match.group(1)),
                end_time=parse_srt_timestamp(match.group(2)),
                text="\n".join(line for line in lines[ts_index + 1:] if line),
            )
        )
    return cues


def generate_srt(cues: Iterable[SrtCue]) -> str:
    blocks = [
        f"{i}\n{seconds_to_srt_timestamp(cue.start_time)} --> "
        f"{seconds_to_srt_timestamp(cue.end_time)}\n{cue.text}"
        for i, cue in enumerate(cues, start=1)
    ]
    return "\n\n".join(blocks) + "\n"


def _clean_vtt_line(line: str) -> str:
    return html.unescape(_TAG_RE.sub("", line).replace("&nbsp;", " ")).strip()


def parse_vtt(content: str) -> list[SrtCue]:
    """Parse WebVTT cues, dropping the header, NOTE/STYLE blocks and inline tags."""
    cues: list[SrtCue] = []
    for lines in _blocks(content):
        ts_index = next((i for i, line in enumerate(lines) if "-->" in line), None)
        if ts_index is None:
            continue

        match = _VTT_CUE_RE.search(lines[ts_index])
        if not match:
            logger.debug("Skipping malformed VTT timing line: %r", lines[ts_index])
            continue

        text_lines = [_clean_vtt_line(line) for line in lines[ts_index + 1:]]
        text_lines = [line for line in text_lines if line]
        if not text_lines:
            continue

        cues.append(
            SrtCue(
                index=len(cues) + 1,
                start_time=parse_vtt_timestamp(match.group(1)),
                end_time=parse_vtt_timestamp(match.group(2)),
                text="\n".join(text_lines),
            )
        )
    return cues


def generate_vtt(cues: Iterable[SrtCue]) -> str:
    blocks = [
        f"{seconds_to_vtt_timestamp(cue.start_time)} --> "
        f"{seconds_to_vtt_timestamp(cue.end_time)}\n{html.escape(cue.text, quote=False)}"
        for cue in cues
    ]
    return "WEBVTT\n\n" + "\n\n".join(blocks) + "\n"


def srt_cues_to_entries(cues: Iterable[SrtCue]) -> list[SubtitleEntry]:
    return [
        SubtitleEntry(
            id=f"cue-{cue.index}",
            start_time=cue.start_time,
            end_time=cue.end_time,
            text=cue.text,
        )
        for cue in cues
    ]


def entries_to_srt_cues(entries: Iterable[SubtitleEntry]) -> list[SrtCue]:
    return [
        SrtCue(index=i, start_time=e.start_time, end_time=e.end_time, text=e.text)
        for i, e in enumerate(entries, start=1)
    ]


def is_vtt(content: str) -> bool:
    return content.lstrip("\ufeff").lstrip().startswith("WEBVTT")


def parse_subtitle_file(content: str) -> list[SubtitleEntry]:
    """Parse SRT or WebVTT, detected from the ``WEBVTT`` header."""
    if is_vtt(content):
        return srt_cues_to_entries(parse_vtt(content))
    return srt_cues_to_entries(parse_srt(content))


def load_subtitle_file(path: str | Path) -> list[SubtitleEntry]:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Subtitle file not found: {path}")
    return parse_subtitle_file(path.read_text(encoding="utf-8"))


# ------------------------------------------------------------------
# Word timing
# ------------------------------------------------------------------

def split_into_words(entries: Iterable[SubtitleEntry]) -> list[WordTimestamp]:
    """Spread each entry's duration evenly over its words.

    This is an approximation for when real per-word timestamps are not
    available.
    """
    words: list[WordTimestamp] = []
    for entry in entries:
        parts = entry.text.split()
        if not parts:
            continue
        step = (entry.end_time - entry.start_time) / len(parts)
        for i, word in enumerate(parts):
            words.append(
                WordTimestamp(
                    word=word,
                    start=entry.start_time + i * step,
                    end=entry.start_time + (i + 1) * step,
                )
            )
    return words


def group_words_into_lines(
    words: Sequence[WordTimestamp],
    max_chars_per_line: int = 40,
) -> list[SubtitleEntry]:
    """Pack words into lines of at most ``max_chars_per_line`` characters.

    Words are never split; a single word longer than the limit gets a line
    of its own. Each line spans from its first word's start to its last
    word's end.
    """
    entries: list[SubtitleEntry] = []
    line: list[WordTimestamp] = []
    length = 0

    def flush() -> None:
        entries.append(
            SubtitleEntry(
                id=f"entry-{len(entries) + 1}",
                start_time=line[0].start,
                end_time=line[-1].end,
                text=" ".join(w.word for w in line),
            )
        )

    for word in words:
        added = len(word.word) + (1 if line else 0)
        if line and length + added > max_chars_per_line:
            flush()
            line, length = [], 0
            added = len(word.word)
        line.append(word)
        length += added

    if line:
        flush()
    return entries


def words_to_entries(words: Iterable[WordTimestamp]) -> list[SubtitleEntry]:
    return [
        SubtitleEntry(id=f"word-{i}", start_time=w.start, end_time=w.end, text=w.word)
        for i, w in enumerate(words, start=1)
    ]


# ------------------------------------------------------------------
# Configs and timing transforms
# ------------------------------------------------------------------

def merge_styles(base: SubtitleStyle, overrides: SubtitleStyle | None) -> SubtitleStyle:
    """Overlay every field ``overrides`` sets on top of ``base``."""
    if overrides is None:
        return base
    changes = {
        f.name: getattr(overrides, f.name)
        for f in fields(SubtitleStyle)
        if getattr(overrides, f.name) is not None
    }
    return replace(base, **changes)


def create_subtitle_config(
    entries: Iterable[SubtitleEntry],
    preset: str | None = None,
    style: SubtitleStyle | None = None,
    word_by_word: bool = False,
) -> SubtitleConfig:
    if preset is None:
        base = DEFAULTS.subtitle_style
    else:
        base = SUBTITLE_PRESETS.get(preset)
        if base is None:
            raise EditValidationError(f"Unknown subtitle preset: {preset}")
    return SubtitleConfig(
        entries=tuple(entries),
        style=merge_styles(base, style),
        word_by_word=word_by_word,
    )


def create_subtitle_config_from_srt(
    content: str,
    preset: str | None = None,
    style: SubtitleStyle | None = None,
    word_by_word: bool = False,
) -> SubtitleConfig:
    return create_subtitle_config(parse_subtitle_file(content), preset, style, word_by_word)


def offset_subtitles(entries: Iterable[SubtitleEntry], offset_seconds: float) -> list[SubtitleEntry]:
    """Shift every entry, clamping at zero."""
    return [
        replace(
            e,
            start_time=max(0.0, e.start_time + offset_seconds),
            end_time=max(0.0, e.end_time + offset_seconds),
        )
        for e in entries
    ]


def scale_subtitles(entries: Iterable[SubtitleEntry], factor: float) -> list[SubtitleEntry]:
    return [replace(e, start_time=e.start_time * factor, end_time=e.end_time * factor) for e in entries]


def merge_subtitles(entries: Sequence[SubtitleEntry], max_gap_seconds: float = 0.1) -> list[SubtitleEntry]:
    """Join consecutive entries separated by at most ``max_gap_seconds``."""
    if not entries:
        return []
    merged: list[SubtitleEntry] = []
    current = entries[0]
    for nxt in entries[1:]:
        if nxt.start_time - current.end_time <= max_gap_seconds:
            current = replace(current, end_time=nxt.end_time, text=f"{current.text} {nxt.text}")
        else:
            merged.append(current)
            current = nxt
    merged.append(current)
    return merged


# ------------------------------------------------------------------
# ASS styles
# ------------------------------------------------------------------

def ass_color(hex_color: str) -> str:
    """``#RRGGBB`` -> ``&H00BBGGRR``; anything else maps to white."""
    clean = hex_color.lstrip("#")
    if len(clean) == 6:
        r, g, b = clean[0:2], clean[2:4], clean[4:6]
        return f"&H00{b}{g}{r}"
    return "&H00FFFFFF"


def generate_ass_style(name: str, style: SubtitleStyle) -> str:
    """One ``Style:`` line for an ASS ``[V4+ Styles]`` section."""
    bold = -1 if style.font_weight in ("bold", "bolder") else 0
    # 8 = top center, 2 = bottom center
    alignment = 8 if style.position_y is not None and style.position_y < 0.5 else 2
    return (
        f"Style: {name},{style.font_family or 'Arial'},{style.font_size or DEFAULT_FONT_SIZE},"
        f"{ass_color(style.font_color or '#FFFFFF')},&H000000FF,"
        f"{ass_color(style.stroke_color or '#000000')},&H80000000,"
        f"{bold},0,0,0,100,100,0,0,1,{style.stroke_width or 2},0,{alignment},10,10,10,1"
    )


# ------------------------------------------------------------------
# Burn-in
# ------------------------------------------------------------------

def _x_expr(align: str | None) -> str:
    if align == "left":
        return str(EDGE_PADDING)
    if align == "right":
        return f"w-text_w-{EDGE_PADDING}"
    return "(w-text_w)/2"


def subtitle_drawtext(entry: SubtitleEntry, style: SubtitleStyle) -> Filter:
    """A ``drawtext`` shown only while ``entry`` is active."""
    text = apply_text_transform(entry.text, style.text_transform)
    start, end = fmt(entry.start_time), fmt(entry.end_time)

    options: dict[str, str | float | int] = {
        "text": f"'{escape_text_for_ffmpeg(text)}'",
        "fontsize": style.font_size or DEFAULT_FONT_SIZE,
        "fontcolor": color_to_ffmpeg(style.font_color or "#FFFFFF"),
    }
    if style.font_family:
        options["font"] = f"'{style.font_family}'"

    options["x"] = _x_expr(style.align)
    pos_y = style.position_y if style.position_y is not None else DEFAULT_POSITION_Y
    options["y"] = f"h*{fmt(pos_y)}"

    if style.stroke_color and style.stroke_width:
        options["borderw"] = style.stroke_width
        options["bordercolor"] = color_to_ffmpeg(style.stroke_color)

    if style.background_color:
        options["box"] = 1
        options["boxcolor"] = color_to_ffmpeg(style.background_color)
        options["boxborderw"] = style.background_padding or DEFAULT_BOX_PADDING

    options["enable"] = f"'gte(t,{start})*lt(t,{end})'"

    if style.animation == "fade":
        fade = fmt(min(FADE_SECONDS, (entry.end_time - entry.start_time) / 2) or FADE_SECONDS)
        options["alpha"] = f"'min(clip((t-{start})/{fade},0,1),clip(({end}-t)/{fade},0,1))'"

    return Filter.of("drawtext", **options)


def burn_in_entries(config: SubtitleConfig) -> list[SubtitleEntry]:
    """Entries actually drawn: one per word when ``word_by_word`` is set."""
    if config.word_by_word:
        return words_to_entries(split_into_words(config.entries))
    return list(config.entries)


def subtitle_burn_in_node(
    config: SubtitleConfig,
    input_label: str,
    output_label: str = "subv",
) -> FilterNode | None:
    """Chain one ``drawtext`` per entry; ``None`` when there is nothing to draw."""
    entries = [e for e in burn_in_entries(config) if e.text.strip()]
    if not entries:
        return None
    return node(input_label, [subtitle_drawtext(e, config.style) for e in entries], output_label)
