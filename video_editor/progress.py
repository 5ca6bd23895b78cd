"""Progress reporting for running renders.

The orchestrator only talks to a :class:`ProgressSource`. The default
implementation scrapes ``time=HH:MM:SS`` markers from ffmpeg's stderr;
another source (e.g. one fed by ``-progress pipe:1``) can be dropped in
without touching the orchestrator.
"""

from __future__ import annotations

import re
import time
from typing import Callable, Protocol

from video_editor.models import ProgressInfo

_TIME_RE = re.compile(r"time=(\d{2}):(\d{2}):(\d{2})")
_FRAME_RE = re.compile(r"frame=\s*(\d+)")
# Enough to hold a status line split across two reads
_CARRY_CHARS = 160
# 100% is only reported once the process has exited cleanly
MAX_RUNNING_PERCENT = 99


class ProgressSource(Protocol):
    def feed(self, chunk: str) -> ProgressInfo | None:
        """Consume diagnostic output; return an event when progress moved."""
        ...

    def complete(self) -> ProgressInfo:
        """Final event, emitted only after confirmed success."""
        ...


class StderrTimeProgress:
    """Progress from the ``time=`` field of ffmpeg's status line."""

    def __init__(
        self,
        total_duration: float,
        fps: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.total_duration = total_duration
        self.total_frames = round(total_duration * fps) if fps else None
        self._clock = clock
        self._started = clock()
        self._carry = ""
        self.last: ProgressInfo | None = None

    def percent_for(self, seconds: float) -> int:
        if self.total_duration <= 0:
            return 0
        return min(MAX_RUNNING_PERCENT, round(seconds / self.total_duration * 100))

    def feed(self, chunk: str) -> ProgressInfo | None:
        text = self._carry + chunk
        matches = list(_TIME_RE.finditer(text))
        if not matches:
            self._carry = text[-_CARRY_CHARS:]
            return None

        last = matches[-1]
        hours, minutes, seconds = (int(g) for g in last.groups())
        current = hours * 3600 + minutes * 60 + seconds
        percent = self.percent_for(current)

        frame = None
        frames = _FRAME_RE.findall(text[: last.start()])
        if frames:
            frame = int(frames[-1])

        eta = None
        if percent > 0:
            elapsed = self._clock() - self._started
            eta = round((100 - percent) / percent * elapsed)

        self._carry = text[last.end():][-_CARRY_CHARS:]
        self.last = ProgressInfo(
            stage="processing",
            percent=percent,
            frame=frame,
            total_frames=self.total_frames,
            eta=eta,
        )
        return self.last

    def complete(self) -> ProgressInfo:
        self.last = ProgressInfo(stage="finalizing", percent=100, total_frames=self.total_frames)
        return self.last
