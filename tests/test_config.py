"""Tests for runtime settings loading."""

from pathlib import Path

import pytest

from video_editor.config import (
    get_ffmpeg_binary,
    get_ffmpeg_timeout,
    get_fonts_dir,
    get_project_root,
    load_config,
    resolve_path,
)


def test_default_file_is_optional(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert load_config() == {}


def test_explicit_file_must_exist(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "missing.yaml"))


def test_load(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("ffmpeg:\n  binary: /opt/ffmpeg/bin/ffmpeg\n  timeout: 90\nfonts_dir: fonts\n")
    config = load_config(str(path))

    assert get_ffmpeg_binary(config) == "/opt/ffmpeg/bin/ffmpeg"
    assert get_ffmpeg_timeout(config) == 90.0
    assert get_fonts_dir(config, str(path)) == tmp_path.resolve() / "fonts"
    assert get_project_root(str(path)) == tmp_path.resolve()


def test_empty_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("")
    assert load_config(str(path)) == {}


def test_not_a_mapping(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- just\n- a list\n")
    with pytest.raises(ValueError):
        load_config(str(path))


def test_defaults():
    assert get_ffmpeg_binary({}) == "ffmpeg"
    assert get_ffmpeg_timeout({}) is None
    assert get_fonts_dir({}) is None


@pytest.mark.parametrize("timeout", ["soon", 0, -5])
def test_bad_timeout(timeout):
    with pytest.raises(ValueError):
        get_ffmpeg_timeout({"ffmpeg": {"timeout": timeout}})


def test_resolve_absolute_path_unchanged(tmp_path):
    config = {"paths": {"fonts": "/usr/share/fonts"}}
    assert resolve_path(config, "paths.fonts", str(tmp_path / "c.yaml")) == Path("/usr/share/fonts")
    assert resolve_path(config, "paths.missing") is None
