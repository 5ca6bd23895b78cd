"""Tests for clip creation, trimming, validation and clip filters."""

import pytest

from video_editor.cuts import (
    batch_create_clips,
    calculate_total_duration,
    create_remove_segments,
    cut_config_to_clips,
    extend_clip,
    generate_clip_filter,
    get_clip_duration,
    insert_clip_at,
    remove_clip_at,
    reorder_clips,
    shift_clip,
    shorten_clip,
    split_clip_at,
    split_into_clips,
    trim_clip,
    validate_clip,
    validate_clips,
)
from video_editor.errors import EditValidationError
from video_editor.models import Clip


class TestCreation:
    def test_trim_clip_sets_duration(self):
        clip = trim_clip("a.mp4", 2, 5.5)
        assert clip.duration == 3.5
        assert clip.id.startswith("clip-")

    def test_split_into_clips_numbers_ids(self):
        clips = split_into_clips("a.mp4", [(0, 2), (4, 7)])
        assert [c.id for c in clips] == ["clip-1", "clip-2"]
        assert [get_clip_duration(c) for c in clips] == [2, 3]

    def test_batch_create_with_window(self):
        clips = batch_create_clips(["a.mp4", "b.mp4"], start_time=1, duration=2)
        assert all(c.end_time == 3 for c in clips)

    def test_remove_segments_take_complement(self):
        config = create_remove_segments("a.mp4", [(8, 9), (2, 4), (3, 5)], 10)
        kept = [(s.start_time, s.end_time) for s in config.segments]
        assert kept == [(0.0, 2), (5, 8), (9, 10)]

        clips = cut_config_to_clips(config)
        assert len(clips) == 3
        assert clips[1].id.endswith("-segment-2")
        assert calculate_total_duration(clips) == 6


class TestDuration:
    def test_trims_take_priority(self):
        clip = Clip(id="c", source="a.mp4", start_time=1, end_time=4, duration=10)
        assert get_clip_duration(clip) == 3

    def test_duration_without_trims(self):
        assert get_clip_duration(Clip(id="c", source="a.mp4", duration=7)) == 7

    def test_unknown_duration(self):
        assert get_clip_duration(Clip(id="c", source="a.mp4")) == 0.0


class TestTransforms:
    def test_extend(self):
        clip = extend_clip(trim_clip("a.mp4", 0, 3), 2)
        assert clip.end_time == 5
        assert get_clip_duration(clip) == 5

    def test_shorten_has_floor(self):
        clip = shorten_clip(trim_clip("a.mp4", 1, 3), 10)
        assert clip.duration == pytest.approx(0.1)
        assert clip.end_time == pytest.approx(1.1)

    def test_shift_clamps_at_zero(self):
        clip = shift_clip(trim_clip("a.mp4", 1, 3), -5)
        assert (clip.start_time, clip.end_time) == (0.0, 2)

    def test_split(self):
        before, after = split_clip_at(trim_clip("a.mp4", 0, 10, id="x"), 4)
        assert (before.id, after.id) == ("x-a", "x-b")
        assert before.end_time == after.start_time == 4
        assert get_clip_duration(before) + get_clip_duration(after) == 10

    @pytest.mark.parametrize("at", [0, 10, 12, -1])
    def test_split_outside_clip(self, at):
        with pytest.raises(EditValidationError):
            split_clip_at(trim_clip("a.mp4", 0, 10), at)


class TestValidation:
    def test_valid_clip(self):
        assert validate_clip(trim_clip("a.mp4", 0, 3)).valid

    def test_collects_every_problem(self):
        clip = Clip(id="bad", source="a.mp4", start_time=-1, end_time=-2, duration=0, volume=3)
        result = validate_clip(clip)
        assert not result.valid
        assert result.errors == [
            "Start time cannot be negative",
            "End time must be greater than start time",
            "Duration must be positive",
            "Volume should be between 0 and 2",
        ]

    def test_validate_clips_keys_by_id(self):
        clips = [trim_clip("a.mp4", 0, 3, id="ok"), Clip(id="loud", source="b.mp4", volume=5)]
        result = validate_clips(clips)
        assert not result.valid
        assert list(result.errors) == ["loud"]
        assert "loud: Volume should be between 0 and 2" == result.summary()


class TestBatchOperations:
    @pytest.fixture
    def clips(self):
        return [Clip(id=name, source=f"{name}.mp4") for name in "abc"]

    def test_reorder(self, clips):
        assert [c.id for c in reorder_clips(clips, [2, 0, 1])] == ["c", "a", "b"]

    def test_reorder_bad_index(self, clips):
        with pytest.raises(EditValidationError):
            reorder_clips(clips, [0, 1, 3])

    def test_remove_and_insert(self, clips):
        assert [c.id for c in remove_clip_at(clips, 1)] == ["a", "c"]
        new = Clip(id="n", source="n.mp4")
        assert [c.id for c in insert_clip_at(clips, new, 3)] == ["a", "b", "c", "n"]

    @pytest.mark.parametrize("index", [-1, 3])
    def test_remove_out_of_range(self, clips, index):
        with pytest.raises(EditValidationError):
            remove_clip_at(clips, index)


class TestClipFilter:
    def test_untrimmed_clip_copies(self):
        result = generate_clip_filter(Clip(id="c", source="a.mp4"), 2)
        assert [n.render() for n in result.nodes] == ["[2:v]copy[v2]", "[2:a]acopy[a2]"]

    def test_trim_and_volume(self):
        clip = trim_clip("a.mp4", 1, 4, volume=0.5)
        result = generate_clip_filter(clip, 0)
        assert [n.render() for n in result.nodes] == [
            "[0:v]trim=start=1:end=4,setpts=PTS-STARTPTS[v0]",
            "[0:a]atrim=start=1:end=4,asetpts=PTS-STARTPTS[a0_pre]",
            "[a0_pre]volume=0.5[a0]",
        ]

    def test_mute_wins(self):
        clip = Clip(id="c", source="a.mp4", volume=1.5, muted=True)
        result = generate_clip_filter(clip, 1)
        assert result.audio_nodes[-1].render() == "[a1_pre]volume=0[a1]"
