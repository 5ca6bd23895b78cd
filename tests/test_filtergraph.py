"""Tests for the typed filter graph builder."""

import pytest

from video_editor.errors import FilterGraphError
from video_editor.filtergraph import Filter, FilterGraph, easing_expr, fmt, is_stream_specifier, node


class TestFormatting:
    @pytest.mark.parametrize("value, expected", [
        (3, "3"),
        (2.5, "2.5"),
        (3.0, "3"),
        (0.1 + 0.2, "0.3"),
        (-0.0, "0"),
        (True, "1"),
        ("PTS-STARTPTS", "PTS-STARTPTS"),
    ])
    def test_fmt(self, value, expected):
        assert fmt(value) == expected

    def test_filter_keeps_option_order(self):
        f = Filter.of("xfade", transition="fade", duration=0.5, offset=2.5)
        assert f.render() == "xfade=transition=fade:duration=0.5:offset=2.5"

    def test_positional_before_options(self):
        f = Filter.of("scale", 1080, 1920, force_original_aspect_ratio="decrease")
        assert f.render() == "scale=1080:1920:force_original_aspect_ratio=decrease"

    def test_bare_filter(self):
        assert Filter("copy").render() == "copy"

    def test_node_render(self):
        n = node(["v0", "v1"], Filter.of("concat", n=2, v=1, a=0), "outv")
        assert n.render() == "[v0][v1]concat=n=2:v=1:a=0[outv]"

    def test_node_requires_filter(self):
        with pytest.raises(FilterGraphError):
            node("0:v", [], "v0")


class TestStreamSpecifiers:
    @pytest.mark.parametrize("label", ["0:v", "12:a", "3:a:0", "1:s"])
    def test_input_streams(self, label):
        assert is_stream_specifier(label)

    @pytest.mark.parametrize("label", ["v0", "outv", "a_1_2", "0v"])
    def test_named_labels(self, label):
        assert not is_stream_specifier(label)


class TestFilterGraph:
    def test_serialize_joins_with_semicolon_newline(self):
        graph = FilterGraph()
        graph.add("0:v", Filter.of("scale", 1080, 1920), "v0")
        graph.add("v0", Filter("copy"), "outv")
        assert graph.serialize() == "[0:v]scale=1080:1920[v0];\n[v0]copy[outv]"
        assert len(graph) == 2
        assert graph.labels == ["v0", "outv"]

    def test_second_writer_rejected(self):
        graph = FilterGraph()
        graph.add("0:v", Filter("copy"), "v0")
        with pytest.raises(FilterGraphError) as exc_info:
            graph.add("1:v", Filter("copy"), "v0")
        assert exc_info.value.label == "v0"
        assert len(graph) == 1

    def test_unknown_input_rejected(self):
        graph = FilterGraph()
        with pytest.raises(FilterGraphError):
            graph.add("missing", Filter("copy"), "out")

    def test_stream_specifier_cannot_be_written(self):
        graph = FilterGraph()
        with pytest.raises(FilterGraphError):
            graph.add("0:v", Filter("copy"), "1:v")

    def test_label_can_be_read_many_times(self):
        graph = FilterGraph()
        graph.add("0:a", Filter("acopy"), "a0")
        graph.add("a0", Filter("acopy"), "x")
        graph.add("a0", Filter("acopy"), "y")
        assert graph.has_label("x") and graph.has_label("y")


def test_easing_expressions():
    assert easing_expr("linear") == "P"
    assert easing_expr("easeIn", "t") == "t*t"
    assert easing_expr("easeOut") == "1-(1-P)*(1-P)"
    assert easing_expr("easeInOut").startswith("if(lt(P,0.5)")
