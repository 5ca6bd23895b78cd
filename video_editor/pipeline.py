"""Edit pipeline: build a config, compile it to one ffmpeg call, run it.

Typical use::

    config = (
        create_pipeline()
        .add_clips_from_paths(["a.mp4", "b.mp4"])
        .set_all_transitions(create_transition("fade", 0.5))
        .add_background_music("music.mp3")
        .set_output_for_platform("tiktok", "out/final.mp4")
        .build()
    )
    result = render(config)

``build()`` returns a fully resolved :class:`PipelineConfig`;
:func:`compile_pipeline` turns it into an argv without side effects and
:func:`execute_pipeline` spawns the process and reports progress.
"""

from __future__ import annotations

import asyncio
import logging
import re
import subprocess
import time
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Sequence

from video_editor.audio import (
    add_audio_tracks,
    audio_mix_node,
    create_background_music,
    create_voiceover,
)
from video_editor.concatenate import (
    add_concat_chain,
    clip_processing_nodes,
    command_to_string,
    output_args,
)
from video_editor.cuts import create_video_clip, get_clip_duration, validate_clips
from video_editor.errors import EditValidationError, VideoEditorError
from video_editor.filtergraph import FilterGraph
from video_editor.models import (
    AudioTrack,
    Clip,
    EditResult,
    OutputConfig,
    PipelineConfig,
    ProgressCallback,
    ProgressInfo,
    SubtitleConfig,
    SubtitleStyle,
    Transition,
)
from video_editor.presets import (
    DEFAULTS,
    get_dimensions,
    get_output_config_for_platform,
    is_valid_aspect_ratio,
    is_valid_quality,
    is_valid_resolution,
)
from video_editor.progress import ProgressSource, StderrTimeProgress
from video_editor.subtitles import create_subtitle_config_from_srt, subtitle_burn_in_node
from video_editor.text.models import TextLayer
from video_editor.text.render import generate_all_text_nodes
from video_editor.transitions import auto_adjust_transitions, create_transition

logger = logging.getLogger(__name__)

MIX_OUT = "mixa"
# ffmpeg's stderr kept in memory while running; only the end is reported
_STDERR_KEEP_CHARS = 8000
ERROR_TAIL_CHARS = 500
_READ_SIZE = 4096
_VERSION_RE = re.compile(r"ffmpeg version (\S+)")


# ------------------------------------------------------------------
# Resolution
# ------------------------------------------------------------------

def resolve_config(
    config: PipelineConfig,
    default_transition: Transition | None = None,
) -> PipelineConfig:
    """Single pass turning a partial config into one ready to compile.

    Missing transitions are filled with ``default_transition``, extra ones
    dropped, and every transition is shortened to fit its neighbours.
    """
    if not config.clips:
        raise EditValidationError("Pipeline requires at least one clip")
    if not config.output.path:
        raise EditValidationError("Output path is required")

    default = default_transition or DEFAULTS.transition
    needed = len(config.clips) - 1
    transitions = list(config.transitions[:needed])
    missing = needed - len(transitions)
    if missing > 0:
        logger.info("Filling %d missing transition(s) with '%s'", missing, default.type)
        transitions += [default] * missing

    durations = [get_clip_duration(c) for c in config.clips]
    return replace(config, transitions=tuple(auto_adjust_transitions(durations, transitions)))


class PipelineBuilder:
    """Fluent accumulator for a :class:`PipelineConfig`.

    Every setter returns the builder. Nothing is validated beyond argument
    shape until :meth:`build`.
    """

    def __init__(self) -> None:
        self._clips: list[Clip] = []
        self._transitions: list[Transition | None] = []
        self._default_transition: Transition = DEFAULTS.transition
        self._audio_tracks: list[AudioTrack] = []
        self._subtitles: SubtitleConfig | None = None
        self._text_layers: list[TextLayer] = []
        self._output = OutputConfig(path="")
        self._ducking = False

    # -- clips --

    def add_clip(self, clip: Clip) -> PipelineBuilder:
        self._clips.append(clip)
        return self

    def add_clips(self, clips: Sequence[Clip]) -> PipelineBuilder:
        self._clips.extend(clips)
        return self

    def add_clips_from_paths(self, sources: Sequence[str]) -> PipelineBuilder:
        offset = len(self._clips)
        for i, source in enumerate(sources):
            self._clips.append(create_video_clip(source, id=f"clip-{offset + i}"))
        return self

    # -- transitions --

    def set_transition(self, index: int, transition: Transition) -> PipelineBuilder:
        """Transition between clip ``index`` and ``index + 1``."""
        if index < 0:
            raise EditValidationError(f"Transition index must be non-negative, got {index}")
        while len(self._transitions) <= index:
            self._transitions.append(None)
        self._transitions[index] = transition
        return self

    def set_all_transitions(self, transition: Transition) -> PipelineBuilder:
        self._transitions = [transition] * max(0, len(self._clips) - 1)
        return self

    def set_transitions(self, transitions: Sequence[Transition]) -> PipelineBuilder:
        self._transitions = list(transitions)
        return self

    def set_default_transition(self, transition: Transition) -> PipelineBuilder:
        self._default_transition = transition
        return self

    # -- audio --

    def add_audio_track(self, track: AudioTrack) -> PipelineBuilder:
        self._audio_tracks.append(track)
        return self

    def add_background_music(
        self,
        source: str,
        volume: float = DEFAULTS.music_volume,
        fade_in: float = 2.0,
        fade_out: float = 3.0,
        loop: bool = True,
    ) -> PipelineBuilder:
        return self.add_audio_track(
            create_background_music(source, volume=volume, fade_in=fade_in, fade_out=fade_out, loop=loop)
        )

    def add_voiceover(self, source: str, start_at: float = 0.0, volume: float = 1.0) -> PipelineBuilder:
        return self.add_audio_track(create_voiceover(source, start_at=start_at, volume=volume))

    def enable_ducking(self, enabled: bool = True) -> PipelineBuilder:
        self._ducking = enabled
        return self

    # -- overlays --

    def set_subtitles(self, subtitles: SubtitleConfig | None) -> PipelineBuilder:
        self._subtitles = subtitles
        return self

    def set_subtitles_from_srt(
        self,
        content: str,
        preset: str | None = None,
        style: SubtitleStyle | None = None,
        word_by_word: bool = False,
    ) -> PipelineBuilder:
        self._subtitles = create_subtitle_config_from_srt(content, preset, style, word_by_word)
        return self

    def add_text_layer(self, layer: TextLayer) -> PipelineBuilder:
        self._text_layers.append(layer)
        return self

    # -- output --

    def set_output(self, path: str, **options) -> PipelineBuilder:
        """Output path plus any :class:`OutputConfig` field (``quality="best"``)."""
        self._output = replace(self._output, path=path, **options)
        return self

    def set_output_for_platform(self, platform: str, path: str) -> PipelineBuilder:
        output = get_output_config_for_platform(platform, path)
        if output is None:
            raise EditValidationError(f"Unknown platform: {platform}")
        self._output = output
        return self

    def set_aspect_ratio(self, aspect_ratio: str) -> PipelineBuilder:
        if not is_valid_aspect_ratio(aspect_ratio):
            raise EditValidationError(f"Unknown aspect ratio: {aspect_ratio}")
        self._output = replace(self._output, aspect_ratio=aspect_ratio)
        return self

    def set_resolution(self, resolution: str) -> PipelineBuilder:
        if not is_valid_resolution(resolution):
            raise EditValidationError(f"Unknown resolution: {resolution}")
        self._output = replace(self._output, resolution=resolution)
        return self

    def set_quality(self, quality: str) -> PipelineBuilder:
        if not is_valid_quality(quality):
            raise EditValidationError(f"Unknown quality: {quality}")
        self._output = replace(self._output, quality=quality)
        return self

    def set_fps(self, fps: int) -> PipelineBuilder:
        if fps <= 0:
            raise EditValidationError(f"FPS must be positive, got {fps}")
        self._output = replace(self._output, fps=fps)
        return self

    # -- result --

    def build(self) -> PipelineConfig:
        """Validate and resolve everything collected so far.

        Raises:
            EditValidationError: No clips were added or no output path was set.
        """
        transitions = tuple(t or self._default_transition for t in self._transitions)
        config = PipelineConfig(
            clips=tuple(self._clips),
            transitions=transitions,
            output=self._output,
            audio_tracks=tuple(self._audio_tracks),
            subtitles=self._subtitles,
            text_layers=tuple(self._text_layers),
            ducking=self._ducking,
        )
        return resolve_config(config, self._default_transition)


def create_pipeline() -> PipelineBuilder:
    return PipelineBuilder()


# ------------------------------------------------------------------
# Compilation
# ------------------------------------------------------------------

@dataclass
class CompiledCommand:
    argv: list[str]
    filter_complex: str
    estimated_duration: float
    video_label: str
    audio_label: str


def compile_pipeline(
    config: PipelineConfig,
    binary: str = "ffmpeg",
    fonts_dir: str | Path | None = None,
) -> CompiledCommand:
    """Turn a resolved config into a single ffmpeg invocation.

    Stages run in a fixed order because each reads labels the previous one
    wrote: clip normalisation, the concat/cross-fade chain, extra audio
    tracks (inputs after the clips), the audio mix, subtitle burn-in, then
    text layers.
    """
    if not config.clips:
        raise EditValidationError("Pipeline requires at least one clip")

    output = config.output
    dims = get_dimensions(output.aspect_ratio, output.resolution)
    graph = FilterGraph()

    inputs: list[str] = []
    for clip in config.clips:
        inputs += ["-i", clip.source]
    for track in config.audio_tracks:
        inputs += ["-i", track.source]

    for i, clip in enumerate(config.clips):
        graph.extend(clip_processing_nodes(clip, i, dims, output.fps))

    durations = [get_clip_duration(c) for c in config.clips]
    chain = add_concat_chain(graph, durations, config.transitions)
    video_label, audio_label = chain.video_label, chain.audio_label

    if config.audio_tracks:
        track_labels = add_audio_tracks(
            graph, config.audio_tracks, len(config.clips), chain.duration, config.ducking,
        )
        # Unknown length: the clips' own audio decides where the mix ends
        mix_duration = "longest" if chain.duration > 0 else "first"
        graph.add_node(audio_mix_node([audio_label, *track_labels], MIX_OUT, duration=mix_duration))
        audio_label = MIX_OUT

    if config.subtitles is not None:
        burn_in = subtitle_burn_in_node(config.subtitles, video_label)
        if burn_in is not None:
            graph.add_node(burn_in)
            video_label = burn_in.outputs[0]

    text_nodes, video_label = generate_all_text_nodes(config.text_layers, video_label, fonts_dir)
    graph.extend(text_nodes)

    filter_complex = graph.serialize()
    argv = [
        binary,
        *inputs,
        "-filter_complex", filter_complex,
        "-map", f"[{video_label}]",
        "-map", f"[{audio_label}]",
        *output_args(output),
        output.path,
    ]
    return CompiledCommand(
        argv=argv,
        filter_complex=filter_complex,
        estimated_duration=chain.duration,
        video_label=video_label,
        audio_label=audio_label,
    )


def generate_pipeline_command(config: PipelineConfig, binary: str = "ffmpeg") -> list[str]:
    return compile_pipeline(config, binary).argv


# ------------------------------------------------------------------
# Execution
# ------------------------------------------------------------------

def _elapsed_ms(started: float) -> int:
    return round((time.monotonic() - started) * 1000)


async def _kill(process: asyncio.subprocess.Process, reader: asyncio.Future) -> None:
    if process.returncode is None:
        try:
            process.kill()
        except ProcessLookupError:
            logger.debug("Process %s exited before kill", process.pid)
    # The reader finishes once the killed process closes stderr
    await reader


async def run_command(
    argv: Sequence[str],
    *,
    output_path: str,
    estimated_duration: float,
    on_progress: ProgressCallback | None = None,
    progress_source: ProgressSource | None = None,
    cancel_event: asyncio.Event | None = None,
    timeout: float | None = None,
) -> EditResult:
    """Run one ffmpeg argv to completion and describe the outcome.

    Never raises for an expected failure: a missing binary, a non-zero exit,
    cancellation, timeout and an unreadable output file all come back as
    ``EditResult(success=False)``. 100% progress is only reported after a
    clean exit and a successful stat of ``output_path``.
    """
    started = time.monotonic()
    source = progress_source or StderrTimeProgress(estimated_duration)

    def failure(message: str) -> EditResult:
        return EditResult(success=False, error=message, processing_time=_elapsed_ms(started))

    try:
        process = await asyncio.create_subprocess_exec(
            *argv,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        logger.warning("Could not start %s: %s", argv[0], e)
        return failure(f"Failed to start {argv[0]}: {e}")

    stderr_tail = ""

    async def read_stderr() -> int:
        nonlocal stderr_tail
        while True:
            chunk = await process.stderr.read(_READ_SIZE)
            if not chunk:
                break
            text = chunk.decode("utf-8", errors="replace")
            stderr_tail = (stderr_tail + text)[-_STDERR_KEEP_CHARS:]
            info = source.feed(text)
            if info is not None and on_progress is not None:
                on_progress(info)
        return await process.wait()

    reader = asyncio.ensure_future(read_stderr())
    waiting: set[asyncio.Future] = {reader}
    cancelled = None
    if cancel_event is not None:
        cancelled = asyncio.ensure_future(cancel_event.wait())
        waiting.add(cancelled)

    try:
        done, _ = await asyncio.wait(waiting, timeout=timeout, return_when=asyncio.FIRST_COMPLETED)
    finally:
        if cancelled is not None and not cancelled.done():
            cancelled.cancel()

    if reader not in done:
        reason = "cancelled" if cancelled is not None and cancelled in done else f"timed out after {timeout}s"
        await _kill(process, reader)
        logger.warning("FFmpeg %s", reason)
        return failure(f"FFmpeg {reason}")

    returncode = reader.result()
    if returncode != 0:
        detail = stderr_tail[-ERROR_TAIL_CHARS:]
        logger.warning("FFmpeg exited with code %d", returncode)
        return failure(f"FFmpeg exited with code {returncode}: {detail}")

    try:
        file_size = Path(output_path).stat().st_size
    except OSError as e:
        return failure(f"Output file not readable: {e}")

    if on_progress is not None:
        on_progress(source.complete())

    return EditResult(
        success=True,
        output_path=str(output_path),
        duration=estimated_duration,
        file_size=file_size,
        processing_time=_elapsed_ms(started),
    )


async def execute_pipeline(
    config: PipelineConfig,
    on_progress: ProgressCallback | None = None,
    *,
    binary: str = "ffmpeg",
    fonts_dir: str | Path | None = None,
    progress_source: ProgressSource | None = None,
    cancel_event: asyncio.Event | None = None,
    timeout: float | None = None,
) -> EditResult:
    """Validate, compile and render ``config``.

    Returns a failure result instead of raising for invalid clips, an output
    directory that cannot be created, compile errors and every runtime
    failure :func:`run_command` reports.
    """
    started = time.monotonic()

    def failure(message: str) -> EditResult:
        return EditResult(success=False, error=message, processing_time=_elapsed_ms(started))

    if not config.clips:
        return failure("Pipeline requires at least one clip")
    validation = validate_clips(config.clips)
    if not validation.valid:
        return failure(f"Invalid clips: {validation.summary()}")

    output_path = Path(config.output.path)
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        return failure(f"Cannot create output directory {output_path.parent}: {e}")

    if on_progress is not None:
        on_progress(ProgressInfo(stage="preparing", percent=0))

    try:
        compiled = compile_pipeline(config, binary, fonts_dir)
    except VideoEditorError as e:
        return failure(str(e))

    logger.debug("FFmpeg command: %s", command_to_string(compiled.argv))
    logger.info(
        "Rendering %s (%d clips, ~%.1fs)",
        output_path, len(config.clips), compiled.estimated_duration,
    )

    result = await run_command(
        compiled.argv,
        output_path=str(output_path),
        estimated_duration=compiled.estimated_duration,
        on_progress=on_progress,
        progress_source=progress_source or StderrTimeProgress(compiled.estimated_duration, config.output.fps),
        cancel_event=cancel_event,
        timeout=timeout,
    )
    result.processing_time = _elapsed_ms(started)

    if result.success:
        logger.info(
            "Rendered %s: %.1f MB in %.1fs",
            output_path, (result.file_size or 0) / 1024 / 1024, result.processing_time / 1000,
        )
    return result


def render(config: PipelineConfig, on_progress: ProgressCallback | None = None, **kwargs) -> EditResult:
    """Blocking wrapper around :func:`execute_pipeline`."""
    return asyncio.run(execute_pipeline(config, on_progress, **kwargs))


def check_ffmpeg_available(binary: str = "ffmpeg") -> bool:
    return get_ffmpeg_version(binary) is not None


def get_ffmpeg_version(binary: str = "ffmpeg") -> str | None:
    """Version string from ``ffmpeg -version``; ``None`` if it cannot be run."""
    try:
        result = subprocess.run(
            [binary, "-version"], capture_output=True, text=True, timeout=10,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.debug("%s -version failed: %s", binary, e)
        return None
    if result.returncode != 0:
        return None
    match = _VERSION_RE.search(result.stdout)
    return match.group(1) if match else "unknown"


# ------------------------------------------------------------------
# Shortcuts
# ------------------------------------------------------------------

async def create_short_form_video(
    sources: Sequence[str],
    output_path: str,
    *,
    transition_style: str = "quick",
    music: str | None = None,
    srt_content: str | None = None,
    subtitle_preset: str = "tiktok",
    on_progress: ProgressCallback | None = None,
    binary: str = "ffmpeg",
) -> EditResult:
    """TikTok-shaped render of ``sources`` with optional music and captions.

    ``transition_style`` is ``quick`` (0.3s fade), ``flashy`` (0.15s flash)
    or ``none``. Clips built from bare paths have no known length, so the
    transitions collapse to hard cuts and the music loops until the clips'
    audio ends.
    """
    if transition_style == "flashy":
        transition = create_transition("flash", 0.15)
    elif transition_style == "none":
        transition = create_transition("none")
    else:
        transition = create_transition("fade", 0.3)

    builder = (
        create_pipeline()
        .add_clips_from_paths(sources)
        .set_default_transition(transition)
        .set_output_for_platform("tiktok", output_path)
    )
    if music:
        builder.add_background_music(music)
    if srt_content:
        builder.set_subtitles_from_srt(srt_content, preset=subtitle_preset)

    try:
        config = builder.build()
    except EditValidationError as e:
        return EditResult(success=False, error=str(e), processing_time=0)
    return await execute_pipeline(config, on_progress, binary=binary)


async def concatenate_videos(
    sources: Sequence[str],
    output_path: str,
    transition: Transition | None = None,
    on_progress: ProgressCallback | None = None,
    binary: str = "ffmpeg",
) -> EditResult:
    """Join ``sources`` with one transition type (hard cuts by default)."""
    builder = (
        create_pipeline()
        .add_clips_from_paths(sources)
        .set_default_transition(transition or create_transition("none"))
        .set_output(output_path)
    )
    try:
        config = builder.build()
    except EditValidationError as e:
        return EditResult(success=False, error=str(e), processing_time=0)
    return await execute_pipeline(config, on_progress, binary=binary)

