"""Data models for the video editing toolkit.

All edit models are frozen: transforms build new values with
``dataclasses.replace`` instead of mutating in place.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from video_editor.text.models import TextLayer


@dataclass(frozen=True)
class Clip:
    """A source video with an optional trim window."""
    id: str
    source: str
    start_time: float | None = None  # seconds into the source
    end_time: float | None = None
    duration: float | None = None
    volume: float = 1.0  # 0-2
    muted: bool = False

    @property
    def has_trims(self) -> bool:
        return self.start_time is not None and self.end_time is not None


@dataclass(frozen=True)
class CutSegment:
    """A time range of one source to keep or drop."""
    start_time: float
    end_time: float
    action: str = "keep"  # keep | remove


@dataclass(frozen=True)
class CutConfig:
    source: Clip
    segments: tuple[CutSegment, ...] = ()


@dataclass(frozen=True)
class Transition:
    """A transition between two adjacent clips."""
    type: str
    duration: float
    easing: str = "easeInOut"  # linear | easeIn | easeOut | easeInOut


@dataclass(frozen=True)
class AudioTrack:
    """An extra audio source laid over the output timeline.

    ``start_at`` positions the track in the output; ``trim_start`` and
    ``trim_end`` select a window of the source file itself.
    """
    id: str
    source: str
    start_at: float = 0.0
    trim_start: float | None = None
    trim_end: float | None = None
    volume: float = 1.0
    fade_in: float = 0.0
    fade_out: float = 0.0
    loop: bool = False
    role: str = "other"  # music | voiceover | sfx | other


@dataclass(frozen=True)
class SubtitleEntry:
    id: str
    start_time: float
    end_time: float
    text: str


@dataclass(frozen=True)
class SubtitleStyle:
    """Burn-in styling for subtitles. Unset fields fall back to renderer defaults."""
    font_family: str | None = None
    font_size: int | None = None
    font_color: str | None = None
    background_color: str | None = None
    background_padding: int | None = None
    background_radius: int | None = None
    font_weight: str | None = None  # normal | bold | bolder
    stroke_color: str | None = None
    stroke_width: int | None = None
    position_y: float | None = None  # 0 = top, 1 = bottom
    align: str | None = None  # left | center | right
    text_transform: str | None = None  # none | uppercase | lowercase | capitalize
    animation: str | None = None  # none | fade | pop | typewriter | highlight | bounce


@dataclass(frozen=True)
class SubtitleConfig:
    entries: tuple[SubtitleEntry, ...]
    style: SubtitleStyle
    word_by_word: bool = False


@dataclass(frozen=True)
class SrtCue:
    """Raw cue as read from a subtitle file. ``index`` is 1-based."""
    index: int
    start_time: float
    end_time: float
    text: str


@dataclass(frozen=True)
class WordTimestamp:
    """A word with its timing information."""
    word: str
    start: float  # seconds
    end: float  # seconds


@dataclass(frozen=True)
class OutputConfig:
    """Output file settings."""
    path: str
    format: str = "mp4"  # mp4 | webm | mov
    aspect_ratio: str = "9:16"
    resolution: str = "1080p"
    fps: int = 30
    video_bitrate: str | None = None  # e.g. "8M"
    audio_bitrate: str | None = None  # e.g. "192k"
    quality: str = "high"  # draft | normal | high | best


@dataclass(frozen=True)
class PipelineConfig:
    """Fully resolved edit: one entry in ``transitions`` per adjacent clip pair."""
    clips: tuple[Clip, ...]
    transitions: tuple[Transition, ...]
    output: OutputConfig
    audio_tracks: tuple[AudioTrack, ...] = ()
    subtitles: SubtitleConfig | None = None
    text_layers: tuple[TextLayer, ...] = ()
    ducking: bool = False


@dataclass
class EditResult:
    """Outcome of one render."""
    success: bool
    output_path: str | None = None
    duration: float | None = None  # seconds of output media
    file_size: int | None = None  # bytes
    processing_time: int | None = None  # milliseconds
    error: str | None = None


@dataclass
class ProgressInfo:
    """Progress event for long renders."""
    stage: str  # preparing | processing | encoding | finalizing
    percent: int
    frame: int | None = None
    total_frames: int | None = None
    eta: int | None = None  # seconds


ProgressCallback = Callable[[ProgressInfo], None]


@dataclass
class ValidationResult:
    """Result of a validation pass; ``errors`` is empty when ``valid``."""
    valid: bool
    errors: list[str] = field(default_factory=list)
