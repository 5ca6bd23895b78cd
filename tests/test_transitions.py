"""Tests for the transition catalog and duration adjustment."""

import random

import pytest

from video_editor.errors import EditValidationError
from video_editor.models import Transition
from video_editor.transitions import (
    TRANSITION_DEFINITIONS,
    auto_adjust_transitions,
    calculate_transition_overlap,
    create_transition,
    get_random_transition,
    get_transitions_by_category,
    is_hard_cut,
    validate_transition_duration,
    xfade_name_for,
)


class TestCatalog:
    def test_twenty_definitions(self):
        assert len(TRANSITION_DEFINITIONS) == 20

    def test_none_is_the_only_hard_cut(self):
        hard = [d.type for d in TRANSITION_DEFINITIONS.values() if not d.uses_xfade]
        assert hard == ["none"]

    def test_by_category(self):
        types = {d.type for d in get_transitions_by_category("shortform")}
        assert types == {"glitch", "flash", "shake"}

    @pytest.mark.parametrize("kind, xfade", [
        ("crossfade", "dissolve"),
        ("zoomIn", "smoothup"),
        ("flash", "fadewhite"),
        ("blur", "fadeblack"),
    ])
    def test_xfade_names(self, kind, xfade):
        assert xfade_name_for(Transition(kind, 0.5)) == xfade

    def test_unknown_type_falls_back_to_fade(self):
        assert xfade_name_for(Transition("spin", 0.5)) == "fade"


class TestCreation:
    def test_default_duration(self):
        assert create_transition("slideLeft").duration == 0.4

    def test_clamped_to_bounds(self):
        assert create_transition("fade", 10).duration == 2
        assert create_transition("flash", 0.01).duration == 0.05

    def test_unknown_type(self):
        with pytest.raises(EditValidationError):
            create_transition("spin")

    def test_random_is_seedable(self):
        first = get_random_transition(rng=random.Random(7))
        second = get_random_transition(rng=random.Random(7))
        assert first == second
        assert first.type != "none"

    def test_random_respects_filters(self):
        rng = random.Random(1)
        for _ in range(20):
            t = get_random_transition(categories=["wipe"], exclude_types=["wipeUp"], rng=rng)
            assert t.type in {"wipeLeft", "wipeRight", "wipeDown"}

    def test_random_with_nothing_left(self):
        with pytest.raises(EditValidationError):
            get_random_transition(categories=["shortform"], exclude_types=["glitch", "flash", "shake"])


class TestTiming:
    def test_hard_cuts(self):
        assert is_hard_cut(Transition("none", 0))
        assert is_hard_cut(Transition("fade", 0))
        assert not is_hard_cut(Transition("fade", 0.5))

    def test_overlap_ignores_hard_cuts(self):
        transitions = [Transition("fade", 0.5), Transition("none", 0.7), Transition("flash", 0.15)]
        assert calculate_transition_overlap(transitions) == pytest.approx(0.65)

    def test_validate_duration(self):
        check = validate_transition_duration(Transition("fade", 2), 3, 5)
        assert not check.valid
        assert check.max_duration == 1.5
        assert "exceeds maximum" in check.message

    def test_auto_adjust_shrinks_to_eighty_percent(self):
        adjusted = auto_adjust_transitions([2, 10], [Transition("fade", 2)])
        assert adjusted[0].duration == pytest.approx(0.8)

    def test_auto_adjust_keeps_valid(self):
        transition = Transition("fade", 0.5)
        assert auto_adjust_transitions([3, 3], [transition]) == [transition]

    @pytest.mark.parametrize("requested", [0.5, 3, 50, 1e9])
    @pytest.mark.parametrize("left, right", [(1, 1), (0.4, 12), (7, 2.5), (60, 60)])
    def test_auto_adjust_never_exceeds_half_the_shorter_clip(self, requested, left, right):
        adjusted = auto_adjust_transitions([left, right], [Transition("fade", requested)])
        assert adjusted[0].duration <= 0.5 * min(left, right)
