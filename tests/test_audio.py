"""Tests for audio track factories, timing helpers and filter generation."""

import pytest

from video_editor.audio import (
    add_audio_tracks,
    audio_mix_node,
    audio_track_nodes,
    calculate_ducking_ranges,
    calculate_loop_count,
    create_audio_track,
    create_background_music,
    create_sound_effect,
    create_voiceover,
    db_to_linear,
    detect_audio_conflicts,
    fit_audio_to_video,
    infer_role,
    linear_to_db,
    loop_window,
    normalize_volume,
)
from video_editor.errors import EditValidationError
from video_editor.filtergraph import FilterGraph
from video_editor.models import AudioTrack


class TestFactories:
    def test_background_music(self):
        track = create_background_music("music.mp3")
        assert track.role == "music"
        assert track.loop
        assert (track.volume, track.fade_in, track.fade_out) == (0.3, 2.0, 3.0)

    def test_voiceover_has_short_fades(self):
        track = create_voiceover("vo.wav", start_at=1.5)
        assert track.role == "voiceover"
        assert (track.fade_in, track.fade_out) == (0.1, 0.1)

    def test_sound_effect(self):
        track = create_sound_effect("whoosh.wav", 4)
        assert track.role == "sfx"
        assert track.id.startswith("sfx-")

    def test_role_inferred_from_id(self):
        assert create_audio_track("x.mp3", id="intro-voiceover").role == "voiceover"
        assert create_audio_track("x.mp3", id="sfx-3").role == "sfx"
        assert create_audio_track("x.mp3", id="ambience").role == "other"

    def test_explicit_role_wins(self):
        assert create_audio_track("x.mp3", id="sfx-3", role="music").role == "music"

    def test_unknown_role(self):
        with pytest.raises(EditValidationError):
            create_audio_track("x.mp3", role="dialogue")

    @pytest.mark.parametrize("track_id, role", [
        ("background-music", "music"), ("VoiceOver-1", "voiceover"), ("crowd", "other"),
    ])
    def test_infer_role(self, track_id, role):
        assert infer_role(track_id) == role


class TestTiming:
    def test_loop_count_for_trimmed_track(self):
        track = AudioTrack(id="m", source="m.mp3", trim_start=0, trim_end=4, loop=True)
        assert loop_window(track) == 4
        assert calculate_loop_count(15, loop_window(track)) == 5

    def test_loop_count_without_window(self):
        assert calculate_loop_count(600, 0) == 3

    def test_fit_audio_adds_fade_out(self):
        track = AudioTrack(id="m", source="m.mp3", trim_end=5)
        assert fit_audio_to_video(track, 10).fade_out == 1.0
        assert fit_audio_to_video(track, 4) is track

    def test_ducking_range(self):
        vo = AudioTrack(id="vo", source="vo.wav", start_at=2, trim_start=1, trim_end=4)
        (rng,) = calculate_ducking_ranges(vo, 30)
        assert (rng.start_time, rng.end_time, rng.target_volume) == (2, 5, 0.3)

    def test_conflicts(self):
        sfx = [create_sound_effect("a.wav", 3, id="a"), create_sound_effect("b.wav", 3, id="b")]
        conflict = detect_audio_conflicts(sfx)
        assert conflict.has_conflict
        assert '"a" and "b"' in conflict.message
        assert not detect_audio_conflicts([create_voiceover("vo.wav")]).has_conflict

    def test_volume_math(self):
        assert db_to_linear(0) == 1
        assert linear_to_db(10) == pytest.approx(20)
        assert normalize_volume(15, 10, 20) == 0.5
        assert normalize_volume(30, 10, 20) == 1.0


class TestFilters:
    def test_looping_music_chain(self):
        track = AudioTrack(
            id="m", source="m.mp3", trim_start=0, trim_end=4, loop=True,
            volume=0.3, fade_in=2, fade_out=3,
        )
        nodes = audio_track_nodes(track, 2, 15, "track0")
        assert [n.render() for n in nodes] == [
            "[2:a]atrim=start=0:end=4,asetpts=PTS-STARTPTS[a_2_1]",
            "[a_2_1]aloop=loop=5:size=2e+09[a_2_2]",
            "[a_2_2]volume=0.3[a_2_3]",
            "[a_2_3]afade=t=in:st=0:d=2,afade=t=out:st=12:d=3[a_2_4]",
            "[a_2_4]atrim=0:15[track0]",
        ]

    def test_delayed_effect(self):
        track = create_sound_effect("hit.wav", 2.5, volume=1.0, id="hit")
        nodes = audio_track_nodes(track, 1, 10, "track1")
        assert [n.render() for n in nodes] == [
            "[1:a]adelay=2500|2500[a_1_1]",
            "[a_1_1]atrim=0:10[track1]",
        ]

    def test_unknown_length_loops_without_trim(self):
        nodes = audio_track_nodes(create_background_music("m.mp3"), 2, 0, "track0")
        assert [n.render() for n in nodes] == [
            "[2:a]aloop=loop=-1:size=2e+09[a_2_1]",
            "[a_2_1]volume=0.3[a_2_2]",
            "[a_2_2]afade=t=in:st=0:d=2[track0]",
        ]

    def test_unknown_length_plain_track(self):
        track = AudioTrack(id="vo", source="vo.wav")
        assert [n.render() for n in audio_track_nodes(track, 1, 0, "track0")] == ["[1:a]anull[track0]"]

    def test_mix_until_first_input(self):
        assert audio_mix_node(["outa", "track0"], "mixa", duration="first").render() == (
            "[outa][track0]amix=inputs=2:duration=first:normalize=0[mixa]"
        )

    def test_mix(self):
        assert audio_mix_node(["x"], "out").render() == "[x]acopy[out]"
        assert audio_mix_node(["x", "y", "z"], "out").render() == (
            "[x][y][z]amix=inputs=3:duration=longest:normalize=0[out]"
        )
        with pytest.raises(EditValidationError):
            audio_mix_node([], "out")

    def test_ducking_splits_voiceover(self):
        tracks = [create_background_music("m.mp3"), create_voiceover("vo.wav")]
        graph = FilterGraph()
        labels = add_audio_tracks(graph, tracks, 2, 10, ducking=True)

        assert labels == ["track0_ducked", "track1_mix"]
        text = graph.serialize()
        assert "[track1]asplit=2[track1_mix][track1_key0]" in text
        assert (
            "[track0][track1_key0]sidechaincompress=threshold=0.02:ratio=6:attack=200:release=1000"
            "[track0_ducked]"
        ) in text

    def test_no_ducking_without_voiceover(self):
        graph = FilterGraph()
        labels = add_audio_tracks(graph, [create_background_music("m.mp3")], 1, 10, ducking=True)
        assert labels == ["track0"]
        assert "sidechaincompress" not in graph.serialize()
