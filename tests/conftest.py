"""Shared fixtures for the video editor tests."""

import sys

import pytest

from video_editor.models import Clip, OutputConfig

SAMPLE_SRT = """1
00:00:00,000 --> 00:00:03,000
Welcome to Content Cat!

2
00:00:03,000 --> 00:00:06,000
Create amazing short-form videos

3
00:00:06,000 --> 00:00:09,000
With AI-powered editing

4
00:00:09,000 --> 00:00:12,000
Let's get started!
"""


@pytest.fixture
def sample_srt():
    return SAMPLE_SRT


@pytest.fixture
def two_clips():
    return (
        Clip(id="clip-0", source="a.mp4", duration=3),
        Clip(id="clip-1", source="b.mp4", duration=3),
    )


@pytest.fixture
def output(tmp_path):
    return OutputConfig(path=str(tmp_path / "out" / "final.mp4"))


FAKE_FFMPEG = """#!{python}
import sys

if "-version" in sys.argv:
    print("ffmpeg version 6.1.1 Copyright (c) 2000-2023 the FFmpeg developers")
    sys.exit(0)

sys.stderr.write("frame=   30 fps=30 q=28.0 size=  256kB time=00:00:01.00 bitrate=2097.2kbits/s\\n")
sys.stderr.flush()
with open(sys.argv[-1], "wb") as f:
    f.write(b"rendered")
"""


@pytest.fixture
def fake_ffmpeg(tmp_path):
    """Executable standing in for ffmpeg: writes the last argv entry and exits 0."""
    path = tmp_path / "bin" / "ffmpeg"
    path.parent.mkdir()
    path.write_text(FAKE_FFMPEG.format(python=sys.executable))
    path.chmod(0o755)
    return str(path)
