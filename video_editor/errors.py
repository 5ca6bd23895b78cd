"""Exceptions raised by the video editor."""

from __future__ import annotations


class VideoEditorError(Exception):
    """Base class for every error the editor raises on purpose."""


class EditValidationError(VideoEditorError, ValueError):
    """Raised when an edit description is unusable as given.

    Empty clip lists, a missing output path, out-of-range clip indices and
    split points outside a clip all end up here, before any subprocess exists.
    """


class FilterGraphError(VideoEditorError):
    """Raised when a filter graph would be wired incorrectly."""

    def __init__(self, message: str, label: str | None = None):
        self.label = label
        super().__init__(message)
