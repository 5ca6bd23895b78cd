"""Clip trimming, cutting and segment extraction.

Clips are immutable; every transform here returns new clips. Filter helpers
emit trim fragments whose timestamps are reset to zero, which concatenation
and cross-fade offsets depend on.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field, replace
from typing import Iterable

from video_editor.errors import EditValidationError
from video_editor.filtergraph import Filter, FilterNode, node
from video_editor.models import Clip, CutConfig, CutSegment, ValidationResult

logger = logging.getLogger(__name__)

TimeRange = tuple[float, float]


def _new_clip_id() -> str:
    return f"clip-{uuid.uuid4().hex[:8]}"


# ------------------------------------------------------------------
# Clip creation
# ------------------------------------------------------------------

def create_video_clip(
    source: str,
    *,
    id: str | None = None,
    start_time: float | None = None,
    end_time: float | None = None,
    duration: float | None = None,
    volume: float = 1.0,
    muted: bool = False,
) -> Clip:
    """Create a clip, generating an id when none is given."""
    return Clip(
        id=id or _new_clip_id(),
        source=source,
        start_time=start_time,
        end_time=end_time,
        duration=duration,
        volume=volume,
        muted=muted,
    )


def trim_clip(
    source: str,
    start_time: float,
    end_time: float,
    *,
    id: str | None = None,
    volume: float = 1.0,
    muted: bool = False,
) -> Clip:
    """Create a clip covering ``[start_time, end_time]`` of ``source``.

    An empty or inverted window is not rejected here; :func:`validate_clip`
    reports it so batch callers can collect every problem at once.
    """
    return create_video_clip(
        source,
        id=id,
        start_time=start_time,
        end_time=end_time,
        duration=end_time - start_time,
        volume=volume,
        muted=muted,
    )


def split_into_clips(
    source: str,
    timestamps: Iterable[TimeRange],
    *,
    volume: float = 1.0,
    muted: bool = False,
) -> list[Clip]:
    """Create one clip per ``(start, end)`` pair of the same source."""
    return [
        trim_clip(source, start, end, id=f"clip-{i + 1}", volume=volume, muted=muted)
        for i, (start, end) in enumerate(timestamps)
    ]


def batch_create_clips(
    sources: Iterable[str],
    *,
    start_time: float | None = None,
    duration: float | None = None,
    volume: float = 1.0,
    muted: bool = False,
) -> list[Clip]:
    """Create clips from many sources with the same optional trim."""
    end_time = None
    if start_time is not None and duration is not None:
        end_time = start_time + duration
    return [
        create_video_clip(
            source,
            id=f"clip-{i + 1}",
            start_time=start_time,
            end_time=end_time,
            duration=duration,
            volume=volume,
            muted=muted,
        )
        for i, source in enumerate(sources)
    ]


# ------------------------------------------------------------------
# Cut segments
# ------------------------------------------------------------------

def create_keep_segments(source: str, keep_ranges: Iterable[TimeRange]) -> CutConfig:
    segments = tuple(CutSegment(start, end, "keep") for start, end in keep_ranges)
    return CutConfig(source=create_video_clip(source), segments=segments)


def create_remove_segments(
    source: str,
    remove_ranges: Iterable[TimeRange],
    total_duration: float,
) -> CutConfig:
    """Turn ranges to drop into the complementary ranges to keep.

    Overlapping or unsorted remove ranges are fine; the complement is taken
    against ``[0, total_duration]``.
    """
    keep: list[CutSegment] = []
    current = 0.0
    for start, end in sorted(remove_ranges):
        if current < start:
            keep.append(CutSegment(current, min(start, total_duration), "keep"))
        current = max(current, end)

    if current < total_duration:
        keep.append(CutSegment(current, total_duration, "keep"))

    return CutConfig(source=create_video_clip(source), segments=tuple(keep))


def cut_config_to_clips(config: CutConfig) -> list[Clip]:
    """Turn each ``keep`` segment into a clip of the source."""
    kept = [s for s in config.segments if s.action == "keep"]
    return [
        create_video_clip(
            config.source.source,
            id=f"{config.source.id}-segment-{i + 1}",
            start_time=segment.start_time,
            end_time=segment.end_time,
            duration=segment.end_time - segment.start_time,
            volume=config.source.volume,
            muted=config.source.muted,
        )
        for i, segment in enumerate(kept)
    ]


# ------------------------------------------------------------------
# Clip manipulation
# ------------------------------------------------------------------

def extend_clip(clip: Clip, additional_seconds: float) -> Clip:
    current_end = clip.end_time
    if current_end is None:
        current_end = (clip.start_time or 0) + (clip.duration or 0)
    return replace(
        clip,
        end_time=current_end + additional_seconds,
        duration=get_clip_duration(clip) + additional_seconds,
    )


def shorten_clip(clip: Clip, reduce_by_seconds: float) -> Clip:
    """Pull the end in, never below 0.1s of content."""
    new_duration = max(0.1, get_clip_duration(clip) - reduce_by_seconds)
    return replace(
        clip,
        end_time=(clip.start_time or 0) + new_duration,
        duration=new_duration,
    )


def shift_clip(clip: Clip, offset_seconds: float) -> Clip:
    """Slide the trim window by ``offset_seconds``, clamped at the source start."""
    new_start = max(0.0, (clip.start_time or 0) + offset_seconds)
    duration = get_clip_duration(clip)
    return replace(clip, start_time=new_start, end_time=new_start + duration)


def split_clip_at(clip: Clip, split_time: float) -> tuple[Clip, Clip]:
    """Split a clip in two at ``split_time`` (source time).

    Raises:
        EditValidationError: If the split point is not strictly inside the clip.
    """
    start = clip.start_time or 0
    end = clip.end_time if clip.end_time is not None else start + (clip.duration or 0)

    if split_time <= start or split_time >= end:
        raise EditValidationError(
            f"Split time {split_time} is outside clip range [{start}, {end}]"
        )

    before = create_video_clip(
        clip.source,
        id=f"{clip.id}-a",
        start_time=start,
        end_time=split_time,
        duration=split_time - start,
        volume=clip.volume,
        muted=clip.muted,
    )
    after = create_video_clip(
        clip.source,
        id=f"{clip.id}-b",
        start_time=split_time,
        end_time=end,
        duration=end - split_time,
        volume=clip.volume,
        muted=clip.muted,
    )
    return before, after


# ------------------------------------------------------------------
# Duration and validation
# ------------------------------------------------------------------

def get_clip_duration(clip: Clip) -> float:
    """Effective duration of a clip in seconds, 0 if unknown.

    A trim window defines the duration whenever both ends are set; an
    explicit ``duration`` is used otherwise.
    """
    if clip.has_trims:
        return clip.end_time - clip.start_time
    if clip.duration is not None:
        return clip.duration
    return 0.0


def calculate_total_duration(clips: Iterable[Clip]) -> float:
    return sum(get_clip_duration(c) for c in clips)


def validate_clip(clip: Clip) -> ValidationResult:
    errors: list[str] = []

    if clip.start_time is not None and clip.start_time < 0:
        errors.append("Start time cannot be negative")

    if clip.has_trims and clip.end_time <= clip.start_time:
        errors.append("End time must be greater than start time")

    if clip.duration is not None and clip.duration <= 0:
        errors.append("Duration must be positive")

    if clip.volume < 0 or clip.volume > 2:
        errors.append("Volume should be between 0 and 2")

    return ValidationResult(valid=not errors, errors=errors)


@dataclass
class ClipsValidation:
    """Per-clip validation errors, keyed by clip id."""
    valid: bool
    errors: dict[str, list[str]] = field(default_factory=dict)

    def summary(self) -> str:
        return "; ".join(
            f"{clip_id}: {', '.join(problems)}" for clip_id, problems in self.errors.items()
        )


def validate_clips(clips: Iterable[Clip]) -> ClipsValidation:
    """Validate every clip and collect all problems instead of stopping at the first."""
    errors: dict[str, list[str]] = {}
    for clip in clips:
        result = validate_clip(clip)
        if not result.valid:
            errors[clip.id] = result.errors
    return ClipsValidation(valid=not errors, errors=errors)


# ------------------------------------------------------------------
# Batch operations
# ------------------------------------------------------------------

def reorder_clips(clips: list[Clip], new_order: list[int]) -> list[Clip]:
    """Return ``clips`` rearranged so position i holds ``clips[new_order[i]]``."""
    if len(new_order) != len(clips):
        raise EditValidationError("New order must have the same length as the clip list")
    for index in new_order:
        if index < 0 or index >= len(clips):
            raise EditValidationError(f"Invalid index {index} in new order")
    return [clips[i] for i in new_order]


def remove_clip_at(clips: list[Clip], index: int) -> list[Clip]:
    if index < 0 or index >= len(clips):
        raise EditValidationError(f"Invalid index {index}")
    return clips[:index] + clips[index + 1:]


def insert_clip_at(clips: list[Clip], clip: Clip, index: int) -> list[Clip]:
    """Insert before ``index``; ``index == len(clips)`` appends."""
    if index < 0 or index > len(clips):
        raise EditValidationError(f"Invalid index {index}")
    return clips[:index] + [clip] + clips[index:]


# ------------------------------------------------------------------
# FFmpeg filter generation
# ------------------------------------------------------------------

def video_trim_filters(start_time: float, end_time: float) -> list[Filter]:
    return [
        Filter.of("trim", start=start_time, end=end_time),
        Filter.of("setpts", "PTS-STARTPTS"),
    ]


def audio_trim_filters(start_time: float, end_time: float) -> list[Filter]:
    return [
        Filter.of("atrim", start=start_time, end=end_time),
        Filter.of("asetpts", "PTS-STARTPTS"),
    ]


def clip_volume_filters(clip: Clip) -> list[Filter]:
    """Mute wins over volume; unity volume adds nothing."""
    if clip.muted:
        return [Filter.of("volume", 0)]
    if clip.volume != 1:
        return [Filter.of("volume", clip.volume)]
    return []


def clip_video_filters(clip: Clip) -> list[Filter]:
    if clip.has_trims:
        return video_trim_filters(clip.start_time, clip.end_time)
    return []


def clip_audio_filters(clip: Clip) -> list[Filter]:
    filters = audio_trim_filters(clip.start_time, clip.end_time) if clip.has_trims else []
    return filters + clip_volume_filters(clip)


@dataclass(frozen=True)
class ClipFilter:
    """Graph fragments for one clip input."""
    video_nodes: tuple[FilterNode, ...]
    audio_nodes: tuple[FilterNode, ...]
    video_label: str
    audio_label: str

    @property
    def nodes(self) -> tuple[FilterNode, ...]:
        return self.video_nodes + self.audio_nodes


def generate_clip_filter(clip: Clip, input_index: int) -> ClipFilter:
    """Build trim and volume fragments for input ``input_index``.

    Video goes to ``v<i>`` and audio to ``a<i>``. When a volume or mute stage
    follows the trim it reads an intermediate ``a<i>_pre`` label.
    """
    video_label = f"v{input_index}"
    audio_label = f"a{input_index}"
    video_in = f"{input_index}:v"
    audio_in = f"{input_index}:a"

    video_chain = clip_video_filters(clip) or [Filter("copy")]
    video_nodes = (node(video_in, video_chain, video_label),)

    volume_chain = clip_volume_filters(clip)
    trim_chain = audio_trim_filters(clip.start_time, clip.end_time) if clip.has_trims else []

    if not volume_chain:
        audio_nodes = (node(audio_in, trim_chain or [Filter("acopy")], audio_label),)
    else:
        pre_label = f"{audio_label}_pre"
        audio_nodes = (
            node(audio_in, trim_chain or [Filter("acopy")], pre_label),
            node(pre_label, volume_chain, audio_label),
        )

    return ClipFilter(
        video_nodes=video_nodes,
        audio_nodes=audio_nodes,
        video_label=video_label,
        audio_label=audio_label,
    )
