"""Tests for output, platform, quality and transition presets."""

import pytest

from video_editor.presets import (
    DEFAULTS,
    get_crf,
    get_dimensions,
    get_file_extension,
    get_output_config_for_platform,
    get_subtitle_preset,
    get_transition_preset,
    is_valid_aspect_ratio,
    is_valid_platform,
    is_valid_transition_type,
)


@pytest.mark.parametrize("aspect, resolution, expected", [
    ("9:16", "1080p", (1080, 1920)),
    ("16:9", "1080p", (1920, 1080)),
    ("1:1", "1080p", (1080, 1080)),
    ("4:5", "1080p", (864, 1080)),
    ("9:16", "720p", (720, 1280)),
    ("16:9", "4k", (3840, 2160)),
])
def test_dimensions(aspect, resolution, expected):
    dims = get_dimensions(aspect, resolution)
    assert (dims.width, dims.height) == expected


@pytest.mark.parametrize("quality, crf", [
    ("draft", "28"), ("normal", "23"), ("high", "20"), ("best", "18"), ("unknown", "20"),
])
def test_crf_by_quality(quality, crf):
    assert get_crf(quality) == crf


def test_platform_output():
    output = get_output_config_for_platform("youtube", "out.mp4")
    assert output.aspect_ratio == "16:9"
    assert output.video_bitrate == "10M"
    assert output.audio_bitrate == "256k"
    assert output.quality == "high"
    assert get_output_config_for_platform("myspace", "out.mp4") is None


def test_defaults():
    assert DEFAULTS.transition.type == "fade"
    assert DEFAULTS.transition.duration == 0.3
    assert DEFAULTS.subtitle_style == get_subtitle_preset("tiktok")
    assert DEFAULTS.music_volume == 0.3


def test_predicates():
    assert is_valid_aspect_ratio("4:5")
    assert not is_valid_aspect_ratio("21:9")
    assert is_valid_platform("reels")
    assert is_valid_transition_type("shake")
    assert not is_valid_transition_type("spin")
    assert get_file_extension("webm") == ".webm"


def test_transition_presets():
    assert get_transition_preset("flash").duration == 0.15
    assert get_transition_preset("none").duration == 0
    assert get_transition_preset("missing") is None
