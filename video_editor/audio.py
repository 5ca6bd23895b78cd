"""Audio tracks: factories, timing math and filter chains.

A track is compiled into one linear chain in a fixed order: source trim,
loop, volume, delay to ``start_at``, fades, and a final trim to the output
length. Tracks are then mixed with ``amix`` next to the clips' own audio.
"""

from __future__ import annotations

import logging
import math
import uuid
from dataclasses import dataclass, replace
from typing import Iterable, Sequence

from video_editor.cuts import get_clip_duration
from video_editor.errors import EditValidationError
from video_editor.filtergraph import Filter, FilterGraph, FilterNode, fmt, node
from video_editor.models import AudioTrack, Clip
from video_editor.presets import DEFAULTS

logger = logging.getLogger(__name__)

AUDIO_ROLES = ("music", "voiceover", "sfx", "other")

# Assumed source length when a looping track has no trim_end
DEFAULT_LOOP_WINDOW = 300.0
# Stand-in for "until the end of the source" in atrim
OPEN_TRIM_END = 999999

DUCKING_COMPRESSOR = Filter.of(
    "sidechaincompress", threshold=0.02, ratio=6, attack=200, release=1000,
)


def infer_role(track_id: str) -> str:
    """Guess a role from the older id naming scheme (``background-music``, ``sfx-1``)."""
    lowered = track_id.lower()
    if "voiceover" in lowered:
        return "voiceover"
    if "sfx" in lowered:
        return "sfx"
    if "music" in lowered:
        return "music"
    return "other"


# ------------------------------------------------------------------
# Track factories
# ------------------------------------------------------------------

def create_audio_track(
    source: str,
    *,
    id: str | None = None,
    start_at: float = 0.0,
    trim_start: float | None = None,
    trim_end: float | None = None,
    volume: float = DEFAULTS.music_volume,
    fade_in: float = DEFAULTS.audio_fade_duration,
    fade_out: float = DEFAULTS.audio_fade_duration,
    loop: bool = False,
    role: str | None = None,
) -> AudioTrack:
    track_id = id or f"audio-{uuid.uuid4().hex[:8]}"
    if role is not None and role not in AUDIO_ROLES:
        raise EditValidationError(f"Unknown audio role: {role}")
    return AudioTrack(
        id=track_id,
        source=source,
        start_at=start_at,
        trim_start=trim_start,
        trim_end=trim_end,
        volume=volume,
        fade_in=fade_in,
        fade_out=fade_out,
        loop=loop,
        role=role or infer_role(track_id),
    )


def create_background_music(
    source: str,
    volume: float = 0.3,
    fade_in: float = 2.0,
    fade_out: float = 3.0,
    loop: bool = True,
) -> AudioTrack:
    """Quiet, looping music with long fades."""
    return create_audio_track(
        source,
        id="background-music",
        volume=volume,
        fade_in=fade_in,
        fade_out=fade_out,
        loop=loop,
        role="music",
    )


def create_voiceover(
    source: str,
    start_at: float = 0.0,
    volume: float = 1.0,
    trim_start: float | None = None,
    trim_end: float | None = None,
) -> AudioTrack:
    # Short fades only to avoid clicks
    return create_audio_track(
        source,
        id="voiceover",
        start_at=start_at,
        trim_start=trim_start,
        trim_end=trim_end,
        volume=volume,
        fade_in=0.1,
        fade_out=0.1,
        role="voiceover",
    )


def create_sound_effect(
    source: str,
    start_at: float,
    volume: float = 0.8,
    id: str | None = None,
) -> AudioTrack:
    return create_audio_track(
        source,
        id=id or f"sfx-{uuid.uuid4().hex[:8]}",
        start_at=start_at,
        volume=volume,
        fade_in=0,
        fade_out=0,
        role="sfx",
    )


# ------------------------------------------------------------------
# Timing
# ------------------------------------------------------------------

def calculate_required_music_duration(clips: Iterable[Clip], transition_overlap: float = 0) -> float:
    return sum(get_clip_duration(c) for c in clips) - transition_overlap


def fit_audio_to_video(track: AudioTrack, video_duration: float) -> AudioTrack:
    """Make sure a track that ends before the video fades out instead of cutting."""
    if track.trim_end is not None and track.trim_end < video_duration:
        return replace(track, fade_out=max(track.fade_out, 1.0))
    return track


@dataclass(frozen=True)
class DuckingRange:
    start_time: float
    end_time: float
    target_volume: float


def calculate_ducking_ranges(
    voiceover: AudioTrack,
    voiceover_duration: float,
    duck_amount: float = 0.3,
) -> list[DuckingRange]:
    """Timeline range where music should sit at ``duck_amount`` under a voiceover."""
    trim_start = voiceover.trim_start or 0
    trim_end = voiceover.trim_end if voiceover.trim_end is not None else voiceover_duration
    return [
        DuckingRange(
            start_time=voiceover.start_at,
            end_time=voiceover.start_at + (trim_end - trim_start),
            target_volume=duck_amount,
        )
    ]


def estimate_track_duration(track: AudioTrack) -> float | None:
    """Length of the trim window, ``None`` when the source length is needed."""
    if track.trim_start is not None and track.trim_end is not None:
        return track.trim_end - track.trim_start
    return None


def calculate_loop_count(total_duration: float, window: float) -> int:
    """Repetitions needed to cover ``total_duration``, with one spare."""
    if window <= 0:
        window = DEFAULT_LOOP_WINDOW
    return math.ceil(total_duration / window) + 1


def loop_window(track: AudioTrack) -> float:
    end = track.trim_end if track.trim_end is not None else DEFAULT_LOOP_WINDOW
    return end - (track.trim_start or 0)


@dataclass(frozen=True)
class AudioConflict:
    has_conflict: bool
    message: str | None = None


def detect_audio_conflicts(tracks: Sequence[AudioTrack]) -> AudioConflict:
    voiceovers = [t for t in tracks if t.role == "voiceover"]
    if len(voiceovers) > 1:
        return AudioConflict(True, "Multiple voiceover tracks detected. Consider merging them.")

    sfx = [t for t in tracks if t.role == "sfx"]
    for i, first in enumerate(sfx):
        for second in sfx[i + 1:]:
            if first.start_at == second.start_at:
                return AudioConflict(
                    True,
                    f'Sound effects "{first.id}" and "{second.id}" start at the same time.',
                )
    return AudioConflict(False)


def db_to_linear(db: float) -> float:
    return 10 ** (db / 20)


def linear_to_db(linear: float) -> float:
    return 20 * math.log10(linear)


def normalize_volume(value: float, minimum: float, maximum: float) -> float:
    """Map ``value`` from ``[minimum, maximum]`` onto ``[0, 1]``, clamped."""
    return max(0.0, min(1.0, (value - minimum) / (maximum - minimum)))


# ------------------------------------------------------------------
# Filter generation
# ------------------------------------------------------------------

def fade_filters(fade_in: float, fade_out: float, total_duration: float, start_at: float = 0) -> list[Filter]:
    filters = []
    if fade_in > 0:
        filters.append(Filter.of("afade", t="in", st=start_at, d=fade_in))
    if fade_out > 0:
        filters.append(
            Filter.of("afade", t="out", st=max(0.0, total_duration - fade_out), d=fade_out)
        )
    return filters


def delay_filter(seconds: float) -> Filter:
    # Same delay on both stereo channels
    ms = fmt(seconds * 1000)
    return Filter.of("adelay", f"{ms}|{ms}")


def audio_track_nodes(
    track: AudioTrack,
    input_index: int,
    total_duration: float,
    output_label: str,
) -> list[FilterNode]:
    """Compile one track into chained nodes ending at ``output_label``.

    Intermediate labels are ``a_<input>_<step>``. Looping happens before the
    delay so every repetition starts from the track's own time zero.

    A ``total_duration`` of 0 means the video length is unknown: looping
    tracks repeat indefinitely and there is no fade-out or final trim, so the
    mix has to be cut to the video (see :func:`audio_mix_node`).
    """
    known = total_duration > 0
    groups: list[list[Filter]] = []

    if track.trim_start is not None or track.trim_end is not None:
        groups.append([
            Filter.of(
                "atrim",
                start=track.trim_start or 0,
                end=track.trim_end if track.trim_end is not None else OPEN_TRIM_END,
            ),
            Filter.of("asetpts", "PTS-STARTPTS"),
        ])

    if track.loop:
        loops = calculate_loop_count(total_duration, loop_window(track)) if known else -1
        groups.append([Filter.of("aloop", loop=loops, size="2e+09")])

    if track.volume != 1:
        groups.append([Filter.of("volume", track.volume)])

    if track.start_at > 0:
        groups.append([delay_filter(track.start_at)])

    fades = fade_filters(track.fade_in, track.fade_out if known else 0, total_duration, track.start_at)
    if fades:
        groups.append(fades)

    if known:
        # Never let a track outlast the video
        groups.append([Filter.of("atrim", 0, total_duration)])
    elif not groups:
        groups.append([Filter("anull")])

    nodes: list[FilterNode] = []
    current = f"{input_index}:a"
    for step, group in enumerate(groups, start=1):
        label = output_label if step == len(groups) else f"a_{input_index}_{step}"
        nodes.append(node(current, group, label))
        current = label
    return nodes


def audio_mix_node(
    input_labels: Sequence[str],
    output_label: str,
    normalize: bool = False,
    duration: str = "longest",
) -> FilterNode:
    """Mix ``input_labels``; ``duration="first"`` ends the mix with the first input."""
    if not input_labels:
        raise EditValidationError("Audio mix needs at least one input")
    if len(input_labels) == 1:
        return node(input_labels[0], Filter("acopy"), output_label)
    return node(
        input_labels,
        Filter.of("amix", inputs=len(input_labels), duration=duration, normalize=int(normalize)),
        output_label,
    )


def ducking_node(music_label: str, voice_label: str, output_label: str) -> FilterNode:
    """Compress music whenever the voice signal is present."""
    return node([music_label, voice_label], DUCKING_COMPRESSOR, output_label)


def add_audio_tracks(
    graph: FilterGraph,
    tracks: Sequence[AudioTrack],
    first_input_index: int,
    total_duration: float,
    ducking: bool = False,
) -> list[str]:
    """Compile every track into ``graph`` and return the labels to mix.

    With ``ducking`` on and both a voiceover and music present, the voiceover
    is split so one copy is mixed and the others key a compressor on each
    music track.
    """
    labels: list[str] = []
    for i, track in enumerate(tracks):
        label = f"track{i}"
        graph.extend(audio_track_nodes(track, first_input_index + i, total_duration, label))
        labels.append(label)

    voice = next((i for i, t in enumerate(tracks) if t.role == "voiceover"), None)
    music = [i for i, t in enumerate(tracks) if t.role == "music"]
    if not ducking or voice is None or not music:
        return labels

    voice_label = labels[voice]
    keys = [f"{voice_label}_key{k}" for k in range(len(music))]
    mixed_voice = f"{voice_label}_mix"
    graph.add(voice_label, Filter.of("asplit", len(keys) + 1), [mixed_voice] + keys)
    labels[voice] = mixed_voice

    for key, index in zip(keys, music):
        ducked = f"{labels[index]}_ducked"
        graph.add_node(ducking_node(labels[index], key, ducked))
        labels[index] = ducked

    logger.debug("Ducking %d music track(s) under %s", len(music), tracks[voice].id)
    return labels
