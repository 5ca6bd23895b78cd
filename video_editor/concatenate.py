"""Join clips into one stream with hard cuts or cross-fades.

Every clip is first normalised to the output size, frame rate and pixel
format (letterboxed, never cropped) so that ``concat`` and ``xfade`` always
see matching streams. Pairs are then merged left to right; the final pair
writes the ``outv`` / ``outa`` labels.
"""

from __future__ import annotations

import logging
import shlex
from dataclasses import dataclass, field
from typing import Sequence

from video_editor.cuts import clip_audio_filters, clip_video_filters, get_clip_duration
from video_editor.errors import EditValidationError
from video_editor.filtergraph import Filter, FilterGraph, FilterNode, node
from video_editor.models import Clip, OutputConfig, Transition
from video_editor.presets import DEFAULTS, Dimensions, get_crf, get_dimensions
from video_editor.transitions import create_transition, is_hard_cut, xfade_name_for

logger = logging.getLogger(__name__)

VIDEO_OUT = "outv"
AUDIO_OUT = "outa"

AUDIO_FORMAT = Filter.of(
    "aformat", sample_fmts="fltp", sample_rates=44100, channel_layouts="stereo",
)


@dataclass(frozen=True)
class ConcatConfig:
    clips: tuple[Clip, ...]
    transitions: tuple[Transition, ...]
    output: OutputConfig
    default_transition: Transition = DEFAULTS.transition


@dataclass
class ConcatResult:
    """Compiled concatenation: graph text plus the argv pieces around it."""
    filter_complex: str
    inputs: list[str]
    output_args: list[str]
    estimated_duration: float
    offsets: list[float] = field(default_factory=list)
    video_label: str = VIDEO_OUT
    audio_label: str = AUDIO_OUT


@dataclass
class ChainResult:
    video_label: str
    audio_label: str
    duration: float
    offsets: list[float]  # start of each cross-fade, hard cuts excluded


def build_concat_config(
    clips: Sequence[Clip],
    transitions: Sequence[Transition] | None = None,
    default_transition: Transition | None = None,
    output: OutputConfig | None = None,
) -> ConcatConfig:
    """Pair every adjacent clip with a transition, filling gaps with the default."""
    default = default_transition or DEFAULTS.transition
    given = list(transitions or [])
    count = max(0, len(clips) - 1)
    filled = [given[i] if i < len(given) else default for i in range(count)]
    return ConcatConfig(
        clips=tuple(clips),
        transitions=tuple(filled),
        output=output or OutputConfig(path="./output.mp4"),
        default_transition=default,
    )


def calculate_output_duration(config: ConcatConfig) -> float:
    """Sum of clip durations minus the overlap of every cross-fade."""
    total = sum(get_clip_duration(c) for c in config.clips)
    overlap = sum(t.duration for t in config.transitions if not is_hard_cut(t))
    return total - overlap


# ------------------------------------------------------------------
# Filter fragments
# ------------------------------------------------------------------

def scale_filters(dims: Dimensions, fps: int = 30) -> list[Filter]:
    """Fit inside ``dims`` keeping aspect, pad the rest black, fix fps and pix_fmt."""
    return [
        Filter.of("scale", dims.width, dims.height, force_original_aspect_ratio="decrease"),
        Filter.of("pad", dims.width, dims.height, "(ow-iw)/2", "(oh-ih)/2", "black"),
        Filter.of("setsar", 1),
        Filter.of("fps", fps),
        Filter.of("format", "yuv420p"),
    ]


def clip_processing_nodes(clip: Clip, index: int, dims: Dimensions, fps: int) -> list[FilterNode]:
    """Normalised video ``v<i>`` and audio ``a<i>`` for input ``index``."""
    return [
        node(f"{index}:v", clip_video_filters(clip) + scale_filters(dims, fps), f"v{index}"),
        node(f"{index}:a", clip_audio_filters(clip) + [AUDIO_FORMAT], f"a{index}"),
    ]


def xfade_node(
    first: str,
    second: str,
    transition: Transition,
    offset: float,
    output: str,
) -> FilterNode:
    """Video merge of two labels; hard cuts become a two-input ``concat``."""
    if is_hard_cut(transition):
        return node([first, second], Filter.of("concat", n=2, v=1, a=0), output)
    return node(
        [first, second],
        Filter.of(
            "xfade",
            transition=xfade_name_for(transition),
            duration=transition.duration,
            offset=offset,
        ),
        output,
    )


def acrossfade_node(first: str, second: str, duration: float, output: str) -> FilterNode:
    if duration <= 0:
        return node([first, second], Filter.of("concat", n=2, v=0, a=1), output)
    return node(
        [first, second],
        Filter.of("acrossfade", d=duration, c1="tri", c2="tri"),
        output,
    )


def add_concat_chain(
    graph: FilterGraph,
    clip_durations: Sequence[float],
    transitions: Sequence[Transition],
    video_out: str = VIDEO_OUT,
    audio_out: str = AUDIO_OUT,
) -> ChainResult:
    """Merge ``v0..vN`` / ``a0..aN`` pairwise into ``video_out`` / ``audio_out``.

    ``running`` is the length of everything merged so far. A cross-fade
    starts ``duration`` seconds before its end, and the merged stream grows
    by the next clip minus the overlap.
    """
    count = len(clip_durations)
    if count == 0:
        raise EditValidationError("At least one clip is required")

    if count == 1:
        graph.add("v0", Filter("copy"), video_out)
        graph.add("a0", Filter("acopy"), audio_out)
        return ChainResult(video_out, audio_out, clip_durations[0], [])

    current_video, current_audio = "v0", "a0"
    running = clip_durations[0]
    offsets: list[float] = []

    for i in range(count - 1):
        transition = transitions[i] if i < len(transitions) else create_transition("none")
        last = i == count - 2
        out_video = video_out if last else f"xv{i}"
        out_audio = audio_out if last else f"xa{i}"

        if is_hard_cut(transition):
            overlap = 0.0
            offset = running
        else:
            overlap = transition.duration
            offset = max(0.0, running - overlap)
            offsets.append(offset)

        graph.add_node(xfade_node(current_video, f"v{i + 1}", transition, offset, out_video))
        graph.add_node(acrossfade_node(current_audio, f"a{i + 1}", overlap, out_audio))

        current_video, current_audio = out_video, out_audio
        running = running - overlap + clip_durations[i + 1]

    return ChainResult(current_video, current_audio, running, offsets)


# ------------------------------------------------------------------
# Compilation
# ------------------------------------------------------------------

def output_args(output: OutputConfig) -> list[str]:
    """Encoder, bitrate and container flags placed after the ``-map`` options."""
    args = ["-c:v", "libx264", "-preset", "medium", "-crf", get_crf(output.quality)]
    if output.video_bitrate:
        args += ["-b:v", output.video_bitrate]
    args += ["-c:a", "aac", "-b:a", output.audio_bitrate or DEFAULTS.audio_bitrate]
    args += ["-movflags", "+faststart", "-y"]
    return args


def generate_concat_filter_complex(config: ConcatConfig) -> ConcatResult:
    if not config.clips:
        raise EditValidationError("At least one clip is required")

    output = config.output
    dims = get_dimensions(output.aspect_ratio, output.resolution)
    graph = FilterGraph()
    inputs: list[str] = []

    for i, clip in enumerate(config.clips):
        inputs += ["-i", clip.source]
        graph.extend(clip_processing_nodes(clip, i, dims, output.fps))

    durations = [get_clip_duration(c) for c in config.clips]
    chain = add_concat_chain(graph, durations, config.transitions)

    return ConcatResult(
        filter_complex=graph.serialize(),
        inputs=inputs,
        output_args=output_args(output),
        estimated_duration=chain.duration,
        offsets=chain.offsets,
        video_label=chain.video_label,
        audio_label=chain.audio_label,
    )


def generate_concat_command(config: ConcatConfig, binary: str = "ffmpeg") -> list[str]:
    result = generate_concat_filter_complex(config)
    return [
        binary,
        *result.inputs,
        "-filter_complex", result.filter_complex,
        "-map", f"[{result.video_label}]",
        "-map", f"[{result.audio_label}]",
        *result.output_args,
        config.output.path,
    ]


def command_to_string(argv: Sequence[str]) -> str:
    """Shell-quoted form of an argv, for logs and copy-paste."""
    return shlex.join(argv)


# ------------------------------------------------------------------
# Convenience configs
# ------------------------------------------------------------------

def _clips_from_paths(sources: Sequence[str]) -> list[Clip]:
    return [Clip(id=f"clip-{i}", source=source) for i, source in enumerate(sources)]


def simple_concat_config(
    sources: Sequence[str],
    output_path: str,
    aspect_ratio: str = DEFAULTS.aspect_ratio,
    resolution: str = DEFAULTS.resolution,
) -> ConcatConfig:
    """Hard cuts between every clip."""
    return build_concat_config(
        _clips_from_paths(sources),
        default_transition=create_transition("none"),
        output=OutputConfig(path=output_path, aspect_ratio=aspect_ratio, resolution=resolution),
    )


def uniform_transition_config(
    sources: Sequence[str],
    output_path: str,
    transition: Transition,
    aspect_ratio: str = DEFAULTS.aspect_ratio,
    resolution: str = DEFAULTS.resolution,
) -> ConcatConfig:
    return build_concat_config(
        _clips_from_paths(sources),
        default_transition=transition,
        output=OutputConfig(path=output_path, aspect_ratio=aspect_ratio, resolution=resolution),
    )


SHORT_FORM_STYLES = ("none", "quick", "flashy")


def short_form_concat_config(
    sources: Sequence[str],
    output_path: str,
    transition_style: str = "quick",
) -> ConcatConfig:
    """Vertical 1080p at 30 fps with a style-dependent transition."""
    if transition_style == "none":
        transition = create_transition("none")
    elif transition_style == "flashy":
        transition = create_transition("flash", 0.15)
    else:
        transition = create_transition("fade", 0.2)

    return build_concat_config(
        _clips_from_paths(sources),
        default_transition=transition,
        output=OutputConfig(
            path=output_path, aspect_ratio="9:16", resolution="1080p", fps=30, quality="high",
        ),
    )
