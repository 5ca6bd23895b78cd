"""Tests for the concatenation and cross-fade compiler."""

import random

import pytest

from video_editor.concatenate import (
    add_concat_chain,
    build_concat_config,
    calculate_output_duration,
    generate_concat_command,
    generate_concat_filter_complex,
    output_args,
    short_form_concat_config,
    simple_concat_config,
)
from video_editor.errors import EditValidationError
from video_editor.filtergraph import Filter, FilterGraph
from video_editor.models import Clip, OutputConfig, Transition
from video_editor.transitions import auto_adjust_transitions


def _chain_graph(count):
    graph = FilterGraph()
    for i in range(count):
        graph.add(f"{i}:v", Filter("null"), f"v{i}")
        graph.add(f"{i}:a", Filter("anull"), f"a{i}")
    return graph


class TestScenarios:
    def test_two_clips_hard_cut(self, two_clips, output):
        config = build_concat_config(two_clips, [Transition("none", 0)], output=output)
        result = generate_concat_filter_complex(config)

        assert result.estimated_duration == 6.0
        assert result.filter_complex.count("concat=n=2:v=1:a=0") == 1
        assert result.filter_complex.count("concat=n=2:v=0:a=1") == 1
        assert "xfade" not in result.filter_complex
        assert result.offsets == []

    def test_two_clips_fade(self, two_clips, output):
        config = build_concat_config(two_clips, [Transition("fade", 0.5)], output=output)
        result = generate_concat_filter_complex(config)

        assert result.estimated_duration == 5.5
        assert "[v0][v1]xfade=transition=fade:duration=0.5:offset=2.5[outv]" in result.filter_complex
        assert "[a0][a1]acrossfade=d=0.5:c1=tri:c2=tri[outa]" in result.filter_complex
        assert result.offsets == [2.5]

    def test_single_clip_copies(self, output):
        config = build_concat_config([Clip(id="c", source="a.mp4", duration=4)], output=output)
        result = generate_concat_filter_complex(config)
        assert "[v0]copy[outv]" in result.filter_complex
        assert "[a0]acopy[outa]" in result.filter_complex
        assert result.estimated_duration == 4

    def test_no_clips(self, output):
        with pytest.raises(EditValidationError):
            generate_concat_filter_complex(build_concat_config([], output=output))


class TestConfig:
    def test_gap_fill_with_default(self):
        clips = [Clip(id=str(i), source=f"{i}.mp4", duration=3) for i in range(4)]
        default = Transition("flash", 0.15)
        config = build_concat_config(clips, [Transition("fade", 0.5)], default_transition=default)
        assert config.transitions == (Transition("fade", 0.5), default, default)
        assert calculate_output_duration(config) == pytest.approx(12 - 0.8)

    def test_simple_concat_uses_hard_cuts(self):
        config = simple_concat_config(["a.mp4", "b.mp4", "c.mp4"], "out.mp4")
        assert [t.type for t in config.transitions] == ["none", "none"]
        assert [c.id for c in config.clips] == ["clip-0", "clip-1", "clip-2"]

    @pytest.mark.parametrize("style, kind, duration", [
        ("none", "none", 0), ("quick", "fade", 0.2), ("flashy", "flash", 0.15),
    ])
    def test_short_form_styles(self, style, kind, duration):
        config = short_form_concat_config(["a.mp4", "b.mp4"], "out.mp4", style)
        assert config.transitions[0].type == kind
        assert config.transitions[0].duration == duration
        assert config.output.aspect_ratio == "9:16"


class TestChainProperties:
    @pytest.mark.parametrize("seed", range(10))
    def test_duration_conservation(self, seed):
        rng = random.Random(seed)
        count = rng.randint(2, 7)
        durations = [rng.choice([1, 2.5, 3, 4.75, 8]) for _ in range(count)]
        transitions = [
            Transition("none", 0) if rng.random() < 0.4 else Transition("fade", rng.choice([0.2, 0.5]))
            for _ in range(count - 1)
        ]
        chain = add_concat_chain(_chain_graph(count), durations, transitions)

        overlap = sum(t.duration for t in transitions if t.type != "none")
        assert chain.duration == pytest.approx(sum(durations) - overlap)

    @pytest.mark.parametrize("seed", range(10))
    def test_cross_fades_never_overlap(self, seed):
        rng = random.Random(seed)
        count = rng.randint(3, 8)
        durations = [rng.uniform(0.5, 6) for _ in range(count)]
        requested = [Transition("crossfade", rng.uniform(0.1, 4)) for _ in range(count - 1)]
        transitions = auto_adjust_transitions(durations, requested)

        chain = add_concat_chain(_chain_graph(count), durations, transitions)

        assert len(chain.offsets) == count - 1
        for i in range(len(chain.offsets) - 1):
            assert chain.offsets[i + 1] >= chain.offsets[i] + transitions[i].duration - 1e-9

    def test_labels_written_once(self):
        graph = _chain_graph(5)
        add_concat_chain(graph, [3] * 5, [Transition("fade", 0.5)] * 4)
        assert len(graph.labels) == len(set(graph.labels))
        assert graph.labels[-2:] == ["outv", "outa"]


class TestCommand:
    def test_argument_vector_shape(self, two_clips):
        output = OutputConfig(path="final.mp4", quality="best")
        config = build_concat_config(two_clips, [Transition("fade", 0.5)], output=output)
        argv = generate_concat_command(config, binary="/opt/ffmpeg")

        assert argv[:5] == ["/opt/ffmpeg", "-i", "a.mp4", "-i", "b.mp4"]
        assert argv[5] == "-filter_complex"
        assert argv[7:11] == ["-map", "[outv]", "-map", "[outa]"]
        assert argv[-1] == "final.mp4"
        assert argv[argv.index("-crf") + 1] == "18"

    def test_output_args(self):
        args = output_args(OutputConfig(path="x.mp4", quality="draft", video_bitrate="8M"))
        assert args == [
            "-c:v", "libx264", "-preset", "medium", "-crf", "28", "-b:v", "8M",
            "-c:a", "aac", "-b:a", "192k", "-movflags", "+faststart", "-y",
        ]

    def test_clips_are_letterboxed(self, two_clips, output):
        result = generate_concat_filter_complex(build_concat_config(two_clips, output=output))
        assert (
            "[0:v]scale=1080:1920:force_original_aspect_ratio=decrease,"
            "pad=1080:1920:(ow-iw)/2:(oh-ih)/2:black,setsar=1,fps=30,format=yuv420p[v0]"
        ) in result.filter_complex
        assert "[1:a]aformat=sample_fmts=fltp:sample_rates=44100:channel_layouts=stereo[a1]" in result.filter_complex
