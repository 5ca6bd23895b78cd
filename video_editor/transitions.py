"""Transition catalog and duration rules.

Every transition except ``none`` compiles to one ffmpeg ``xfade`` primitive.
Durations are clamped to the catalog bounds on creation and shrunk to fit
short neighbouring clips by :func:`auto_adjust_transitions`.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from typing import Iterable, Sequence

from video_editor.errors import EditValidationError
from video_editor.filtergraph import easing_expr
from video_editor.models import Transition
from video_editor.presets import TRANSITION_PRESETS

logger = logging.getLogger(__name__)

CATEGORIES = ("basic", "directional", "zoom", "wipe", "creative", "shortform")

# Share of the shorter neighbouring clip a transition may occupy
MAX_CLIP_SHARE = 0.5
# Over-long transitions are shrunk to this fraction of the allowed maximum
ADJUST_FACTOR = 0.8


@dataclass(frozen=True)
class TransitionDefinition:
    type: str
    name: str
    description: str
    default_duration: float
    min_duration: float
    max_duration: float
    category: str
    xfade_name: str | None = None

    @property
    def uses_xfade(self) -> bool:
        return self.xfade_name is not None


def _define(type_, name, description, default, lo, hi, category, xfade=None):
    return TransitionDefinition(type_, name, description, default, lo, hi, category, xfade)


TRANSITION_DEFINITIONS: dict[str, TransitionDefinition] = {
    d.type: d
    for d in (
        _define("none", "None", "Direct cut, no transition effect", 0, 0, 0, "basic"),
        _define("fade", "Fade", "Fade to black between clips", 0.5, 0.1, 2, "basic", "fade"),
        _define("crossfade", "Crossfade", "Dissolve from one clip to another",
                0.5, 0.1, 2, "basic", "dissolve"),
        _define("slideLeft", "Slide Left", "New clip slides in from the right",
                0.4, 0.1, 1.5, "directional", "slideleft"),
        _define("slideRight", "Slide Right", "New clip slides in from the left",
                0.4, 0.1, 1.5, "directional", "slideright"),
        _define("slideUp", "Slide Up", "New clip slides in from the bottom",
                0.4, 0.1, 1.5, "directional", "slideup"),
        _define("slideDown", "Slide Down", "New clip slides in from the top",
                0.4, 0.1, 1.5, "directional", "slidedown"),
        _define("zoomIn", "Zoom In", "Zoom into the next clip", 0.4, 0.1, 1.5, "zoom", "smoothup"),
        _define("zoomOut", "Zoom Out", "Zoom out to reveal next clip",
                0.4, 0.1, 1.5, "zoom", "smoothdown"),
        _define("wipeLeft", "Wipe Left", "Wipe transition moving left",
                0.5, 0.1, 2, "wipe", "wipeleft"),
        _define("wipeRight", "Wipe Right", "Wipe transition moving right",
                0.5, 0.1, 2, "wipe", "wiperight"),
        _define("wipeUp", "Wipe Up", "Wipe transition moving up", 0.5, 0.1, 2, "wipe", "wipeup"),
        _define("wipeDown", "Wipe Down", "Wipe transition moving down",
                0.5, 0.1, 2, "wipe", "wipedown"),
        _define("blur", "Blur", "Blur out then in", 0.5, 0.2, 1.5, "creative", "fadeblack"),
        _define("pixelize", "Pixelize", "Pixelation transition effect",
                0.4, 0.2, 1.5, "creative", "pixelize"),
        _define("rotate", "Rotate", "Rotate to next clip", 0.5, 0.2, 1.5, "creative", "horzopen"),
        _define("flip", "Flip", "Flip transition between clips",
                0.4, 0.2, 1.5, "creative", "vertopen"),
        _define("glitch", "Glitch", "Glitchy digital transition (TikTok style)",
                0.2, 0.1, 0.5, "shortform", "diagtl"),
        _define("flash", "Flash", "Quick white flash between clips",
                0.15, 0.05, 0.5, "shortform", "fadewhite"),
        _define("shake", "Shake", "Camera shake effect on cut",
                0.2, 0.1, 0.5, "shortform", "diagbr"),
    )
}


def get_transition_definition(transition_type: str) -> TransitionDefinition | None:
    return TRANSITION_DEFINITIONS.get(transition_type)


def get_transitions_by_category(category: str) -> list[TransitionDefinition]:
    return [d for d in TRANSITION_DEFINITIONS.values() if d.category == category]


def get_transition_categories() -> list[str]:
    return list(CATEGORIES)


def xfade_name_for(transition: Transition) -> str | None:
    """The xfade primitive a transition compiles to, ``None`` for a hard cut."""
    definition = TRANSITION_DEFINITIONS.get(transition.type)
    if definition is None:
        return "fade"
    return definition.xfade_name


def is_hard_cut(transition: Transition) -> bool:
    return transition.duration <= 0 or xfade_name_for(transition) is None


# ------------------------------------------------------------------
# Creation
# ------------------------------------------------------------------

def create_transition(
    transition_type: str,
    duration: float | None = None,
    easing: str = "easeInOut",
) -> Transition:
    """Create a transition with its duration clamped to the catalog bounds.

    Raises:
        EditValidationError: If ``transition_type`` is not in the catalog.
    """
    definition = TRANSITION_DEFINITIONS.get(transition_type)
    if definition is None:
        raise EditValidationError(f"Unknown transition type: {transition_type}")

    value = definition.default_duration if duration is None else duration
    value = max(definition.min_duration, min(definition.max_duration, value))
    return Transition(type=transition_type, duration=value, easing=easing)


def get_random_transition(
    categories: Iterable[str] | None = None,
    exclude_types: Iterable[str] | None = None,
    duration: float | None = None,
    rng: random.Random | None = None,
) -> Transition:
    """Pick any transition except ``none``, optionally filtered.

    Pass a seeded ``rng`` for reproducible picks.
    """
    available = [d for d in TRANSITION_DEFINITIONS.values() if d.type != "none"]
    if categories:
        wanted = set(categories)
        available = [d for d in available if d.category in wanted]
    if exclude_types:
        excluded = set(exclude_types)
        available = [d for d in available if d.type not in excluded]
    if not available:
        raise EditValidationError("No transitions match the given filters")

    choice = (rng or random).choice(available)
    return create_transition(choice.type, duration)


def get_short_form_transitions() -> list[Transition]:
    """Transitions that suit fast-paced vertical video."""
    return [
        TRANSITION_PRESETS["quickFade"],
        TRANSITION_PRESETS["flash"],
        TRANSITION_PRESETS["glitch"],
        create_transition("slideUp", 0.3),
        create_transition("zoomIn", 0.3),
    ]


# ------------------------------------------------------------------
# Expressions and timing
# ------------------------------------------------------------------

def generate_easing_expr(easing: str, progress_var: str = "P") -> str:
    return easing_expr(easing, progress_var)


def calculate_transition_overlap(transitions: Iterable[Transition]) -> float:
    """Seconds removed from the output by overlapping transitions."""
    return sum(t.duration for t in transitions if not is_hard_cut(t))


@dataclass(frozen=True)
class TransitionCheck:
    valid: bool
    max_duration: float
    message: str | None = None


def validate_transition_duration(
    transition: Transition,
    clip1_duration: float,
    clip2_duration: float,
) -> TransitionCheck:
    max_allowed = min(clip1_duration, clip2_duration) * MAX_CLIP_SHARE
    if transition.duration > max_allowed:
        return TransitionCheck(
            valid=False,
            max_duration=max_allowed,
            message=(
                f"Transition duration ({transition.duration}s) exceeds maximum "
                f"allowed ({max_allowed:.2f}s) based on clip durations"
            ),
        )
    return TransitionCheck(valid=True, max_duration=max_allowed)


def auto_adjust_transitions(
    clip_durations: Sequence[float],
    transitions: Sequence[Transition],
) -> list[Transition]:
    """Shrink transitions that would eat more than half of a neighbouring clip.

    Offending durations become 80% of the allowed maximum, so the result never
    exceeds half of the shorter clip. Nothing is rejected.
    """
    adjusted: list[Transition] = []
    for i, transition in enumerate(transitions):
        left = clip_durations[i] if i < len(clip_durations) else 0
        right = clip_durations[i + 1] if i + 1 < len(clip_durations) else 0
        check = validate_transition_duration(transition, left, right)
        if check.valid:
            adjusted.append(transition)
            continue
        new_duration = max(0.0, check.max_duration * ADJUST_FACTOR)
        logger.info(
            "Transition %d (%s) shortened from %.2fs to %.2fs",
            i, transition.type, transition.duration, new_duration,
        )
        adjusted.append(replace(transition, duration=new_duration))
    return adjusted
