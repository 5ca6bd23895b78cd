"""Compile video edits into single ffmpeg invocations and run them."""

from video_editor.errors import EditValidationError, FilterGraphError, VideoEditorError
from video_editor.models import (
    AudioTrack,
    Clip,
    EditResult,
    OutputConfig,
    PipelineConfig,
    ProgressInfo,
    SubtitleConfig,
    SubtitleEntry,
    SubtitleStyle,
    Transition,
)
from video_editor.pipeline import (
    CompiledCommand,
    PipelineBuilder,
    compile_pipeline,
    create_pipeline,
    execute_pipeline,
    render,
)
from video_editor.transitions import create_transition

__version__ = "0.1.0"

__all__ = [
    "AudioTrack",
    "Clip",
    "CompiledCommand",
    "EditResult",
    "EditValidationError",
    "FilterGraphError",
    "OutputConfig",
    "PipelineBuilder",
    "PipelineConfig",
    "ProgressInfo",
    "SubtitleConfig",
    "SubtitleEntry",
    "SubtitleStyle",
    "Transition",
    "VideoEditorError",
    "compile_pipeline",
    "create_pipeline",
    "create_transition",
    "execute_pipeline",
    "render",
]
