"""Project YAML parser.

Loads an edit description and builds a resolved PipelineConfig.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import yaml

from video_editor.audio import create_audio_track
from video_editor.models import Clip, OutputConfig, PipelineConfig, SubtitleStyle, Transition
from video_editor.pipeline import resolve_config
from video_editor.presets import get_output_config_for_platform, get_transition_preset
from video_editor.subtitles import create_subtitle_config, load_subtitle_file
from video_editor.text.models import AnimationConfig, CustomPosition, TextLayer
from video_editor.text.presets import get_preset
from video_editor.text.render import create_text_element
from video_editor.transitions import create_transition

_OUTPUT_KEYS = ("format", "aspect_ratio", "resolution", "fps", "video_bitrate", "audio_bitrate", "quality")
_STYLE_KEYS = {f for f in SubtitleStyle.__dataclass_fields__}


def load_project(path: str | Path) -> PipelineConfig:
    """Load an edit from a YAML file.

    Expected YAML structure::

        output:
          path: out/final.mp4
          platform: tiktok          # optional, fills the fields below
          quality: high
        clips:
          - source: intro.mp4
            start: 0
            end: 3
          - source: main.mp4
            duration: 8
            volume: 0.8
        transitions:
          - quickFade               # preset name
          - {type: slideLeft, duration: 0.4}
        default_transition: quickFade
        audio:
          - source: music.mp3
            role: music
            volume: 0.3
            loop: true
        ducking: true
        subtitles:
          file: captions.srt
          preset: tiktok
          style: {font_size: 56}
        text_layers:
          - id: hook
            elements:
              - text: "Wait for it"
                preset: hook-tiktok
                position: top-center
                start: 0
                end: 2.5

    Relative media paths are resolved against the project file's directory.

    Raises:
        FileNotFoundError: If the project or a subtitle file does not exist.
        ValueError: If required fields are missing or malformed.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Project file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    if not isinstance(raw, dict):
        raise ValueError(f"Project file must be a YAML mapping, got {type(raw).__name__}")

    base = path.resolve().parent
    return parse_project(raw, base)


def parse_project(raw: dict, base_dir: str | Path = ".") -> PipelineConfig:
    """Build a resolved config from an already-loaded project mapping."""
    base = Path(base_dir)

    def media(value) -> str:
        if not value:
            raise ValueError("Media entries must have a 'source'")
        p = Path(str(value))
        return str(p if p.is_absolute() else base / p)

    # -- Clips --
    raw_clips = raw.get("clips") or []
    if not isinstance(raw_clips, list) or not raw_clips:
        raise ValueError("Project must list at least one clip under 'clips'")

    clips: list[Clip] = []
    for i, clip_data in enumerate(raw_clips):
        if isinstance(clip_data, str):
            clip_data = {"source": clip_data}
        if not isinstance(clip_data, dict):
            raise ValueError(f"Clip {i} must be a mapping or a path")
        clips.append(Clip(
            id=str(clip_data.get("id", f"clip-{i}")),
            source=media(clip_data.get("source")),
            start_time=_number(clip_data.get("start"), f"clips[{i}].start"),
            end_time=_number(clip_data.get("end"), f"clips[{i}].end"),
            duration=_number(clip_data.get("duration"), f"clips[{i}].duration"),
            volume=_number(clip_data.get("volume", 1.0), f"clips[{i}].volume"),
            muted=bool(clip_data.get("muted", False)),
        ))

    # -- Transitions --
    transitions = [_transition(t) for t in raw.get("transitions") or []]
    default_transition = None
    if raw.get("default_transition") is not None:
        default_transition = _transition(raw["default_transition"])

    # -- Audio --
    tracks = []
    for i, track_data in enumerate(raw.get("audio") or []):
        if not isinstance(track_data, dict):
            raise ValueError(f"Audio track {i} must be a mapping")
        options = {
            key: track_data[key]
            for key in ("start_at", "trim_start", "trim_end", "volume", "fade_in", "fade_out", "loop", "role")
            if key in track_data
        }
        tracks.append(create_audio_track(
            media(track_data.get("source")),
            id=str(track_data.get("id", f"audio-{i}")),
            **options,
        ))

    # -- Subtitles --
    subtitles = None
    sub_data = raw.get("subtitles")
    if sub_data:
        if not isinstance(sub_data, dict) or "file" not in sub_data:
            raise ValueError("'subtitles' must be a mapping with a 'file' key")
        style_data = sub_data.get("style") or {}
        unknown = set(style_data) - _STYLE_KEYS
        if unknown:
            raise ValueError(f"Unknown subtitle style field(s): {', '.join(sorted(unknown))}")
        subtitles = create_subtitle_config(
            load_subtitle_file(media(sub_data["file"])),
            preset=sub_data.get("preset"),
            style=SubtitleStyle(**style_data) if style_data else None,
            word_by_word=bool(sub_data.get("word_by_word", False)),
        )

    # -- Text layers --
    layers = [_text_layer(layer, i) for i, layer in enumerate(raw.get("text_layers") or [])]

    config = PipelineConfig(
        clips=tuple(clips),
        transitions=tuple(transitions),
        output=_output(raw.get("output"), base),
        audio_tracks=tuple(tracks),
        subtitles=subtitles,
        text_layers=tuple(layers),
        ducking=bool(raw.get("ducking", False)),
    )
    return resolve_config(config, default_transition)


def _number(value, field_name: str) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{field_name} must be a number, got {value!r}") from None


def _transition(data) -> Transition:
    if isinstance(data, str):
        preset = get_transition_preset(data)
        return preset if preset is not None else create_transition(data)
    if not isinstance(data, dict) or "type" not in data:
        raise ValueError(f"Transition must be a preset name or a mapping with 'type', got {data!r}")
    return create_transition(
        data["type"],
        _number(data.get("duration"), "transition.duration"),
        data.get("easing", "easeInOut"),
    )


def _output(data, base: Path) -> OutputConfig:
    if not isinstance(data, dict) or not data.get("path"):
        raise ValueError("Project must set 'output.path'")
    out_path = Path(str(data["path"]))
    if not out_path.is_absolute():
        out_path = base / out_path

    output = OutputConfig(path=str(out_path))
    platform = data.get("platform")
    if platform:
        output = get_output_config_for_platform(platform, str(out_path))
        if output is None:
            raise ValueError(f"Unknown platform: {platform}")

    overrides = {key: data[key] for key in _OUTPUT_KEYS if key in data}
    if "fps" in overrides:
        overrides["fps"] = int(overrides["fps"])
    return replace(output, **overrides)


def _position(value):
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, dict) and "x" in value and "y" in value:
        return CustomPosition(
            x=value["x"],
            y=value["y"],
            align_x=value.get("align_x", "left"),
            align_y=value.get("align_y", "top"),
        )
    raise ValueError(f"Text position must be a preset name or {{x, y}}, got {value!r}")


def _text_layer(data, index: int) -> TextLayer:
    if not isinstance(data, dict):
        raise ValueError(f"Text layer {index} must be a mapping")
    layer_id = str(data.get("id", f"layer{index}"))

    elements = []
    for j, elem in enumerate(data.get("elements") or []):
        if not isinstance(elem, dict) or not elem.get("text"):
            raise ValueError(f"Text element {j} in layer '{layer_id}' needs 'text'")
        preset_name = elem.get("preset", "title-modern")
        preset = get_preset(preset_name)
        if preset is None:
            raise ValueError(f"Unknown text preset: {preset_name}")

        style = preset.style
        if "color" in elem:
            style = replace(style, color=elem["color"])
        if "size" in elem:
            style = replace(style, font=replace(style.font, size=int(elem["size"])))

        animation_in = animation_out = None
        if elem.get("fade_in"):
            animation_in = AnimationConfig("fade-in", float(elem["fade_in"]))
        if elem.get("fade_out"):
            animation_out = AnimationConfig("fade-out", float(elem["fade_out"]))

        elements.append(create_text_element(
            str(elem["text"]),
            style,
            _position(elem.get("position")) or preset.default_position,
            id=str(elem.get("id", f"{layer_id}-{j}")),
            start_time=_number(elem.get("start"), "text.start"),
            end_time=_number(elem.get("end"), "text.end"),
            z_index=int(elem.get("z_index", 0)),
            animation_in=animation_in,
            animation_out=animation_out,
        ))

    return TextLayer(id=layer_id, elements=tuple(elements))
