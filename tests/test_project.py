"""Tests for project YAML loading."""

import textwrap

import pytest

from video_editor.project import load_project, parse_project

PROJECT_YAML = """
output:
  path: out/final.mp4
  platform: tiktok
  quality: best
clips:
  - source: intro.mp4
    start: 0
    end: 3
  - id: main
    source: main.mp4
    duration: 8
    volume: 0.8
  - {source: outro.mp4, duration: 4}
transitions:
  - quickFade
  - {type: slideLeft, duration: 0.4}
audio:
  - source: music.mp3
    role: music
    volume: 0.3
    loop: true
  - source: vo.wav
    role: voiceover
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
        fade_in: 0.3
"""


@pytest.fixture
def project_dir(tmp_path, sample_srt):
    (tmp_path / "captions.srt").write_text(sample_srt, encoding="utf-8")
    (tmp_path / "project.yaml").write_text(PROJECT_YAML, encoding="utf-8")
    return tmp_path


class TestLoadProject:
    def test_full_project(self, project_dir):
        config = load_project(project_dir / "project.yaml")

        assert [c.id for c in config.clips] == ["clip-0", "main", "clip-2"]
        assert config.clips[0].source == str(project_dir / "intro.mp4")
        assert (config.clips[0].start_time, config.clips[0].end_time) == (0.0, 3.0)
        assert config.clips[1].volume == 0.8

        assert [t.type for t in config.transitions] == ["fade", "slideLeft"]
        assert config.transitions[1].duration == 0.4

        assert [t.role for t in config.audio_tracks] == ["music", "voiceover"]
        assert config.audio_tracks[0].loop
        assert config.ducking

        assert len(config.subtitles.entries) == 4
        assert config.subtitles.style.font_size == 56

        element = config.text_layers[0].elements[0]
        assert element.text == "Wait for it"
        assert element.animation_in.duration == 0.3

        assert config.output.path == str(project_dir / "out" / "final.mp4")
        assert config.output.video_bitrate == "8M"
        assert config.output.quality == "best"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_project(tmp_path / "nope.yaml")

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a.mp4\n- b.mp4\n")
        with pytest.raises(ValueError, match="mapping"):
            load_project(path)

    def test_missing_subtitle_file(self, tmp_path):
        path = tmp_path / "p.yaml"
        path.write_text(textwrap.dedent("""
            output: {path: x.mp4}
            clips: [a.mp4]
            subtitles: {file: missing.srt}
        """))
        with pytest.raises(FileNotFoundError):
            load_project(path)


class TestParseProject:
    def _base(self, **extra):
        raw = {"output": {"path": "x.mp4"}, "clips": [{"source": "a.mp4", "duration": 4}]}
        raw.update(extra)
        return raw

    def test_default_transition_fills_gaps(self):
        raw = self._base(clips=["a.mp4", "b.mp4", "c.mp4"], default_transition="flash")
        config = parse_project(raw, "/media")
        assert [t.type for t in config.transitions] == ["flash", "flash"]
        assert config.clips[2].source == "/media/c.mp4"

    @pytest.mark.parametrize(
        "raw, message",
        [
            ({"output": {"path": "x.mp4"}}, "at least one clip"),
            ({"clips": ["a.mp4"]}, "output.path"),
            ({"clips": ["a.mp4"], "output": {"path": "x.mp4", "platform": "vine"}}, "Unknown platform"),
            ({"clips": [{"source": "a.mp4", "start": "soon"}], "output": {"path": "x.mp4"}}, "must be a number"),
            ({"clips": [{"start": 1}], "output": {"path": "x.mp4"}}, "source"),
            ({"clips": ["a.mp4", "b.mp4"], "transitions": [{"duration": 1}], "output": {"path": "x.mp4"}}, "type"),
        ],
    )
    def test_invalid_projects(self, raw, message):
        with pytest.raises(ValueError, match=message):
            parse_project(raw)

    def test_unknown_subtitle_style_key(self, tmp_path, sample_srt):
        (tmp_path / "c.srt").write_text(sample_srt)
        raw = self._base(subtitles={"file": "c.srt", "style": {"glow": 3}})
        with pytest.raises(ValueError, match="glow"):
            parse_project(raw, tmp_path)

    def test_unknown_text_preset(self):
        raw = self._base(text_layers=[{"id": "t", "elements": [{"text": "hi", "preset": "sparkle"}]}])
        with pytest.raises(ValueError, match="sparkle"):
            parse_project(raw)

    def test_custom_text_position(self):
        raw = self._base(text_layers=[{
            "elements": [{"text": "hi", "position": {"x": "50%", "y": 100, "align_x": "center"}}],
        }])
        element = parse_project(raw).text_layers[0].elements[0]
        assert element.position.x == "50%"
        assert element.position.align_x == "center"
        assert element.id == "layer0-0"
