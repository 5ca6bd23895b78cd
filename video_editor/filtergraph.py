"""Typed builder for FFmpeg filter graphs.

Fragments are built as nodes with explicit input labels, an ordered chain
of filters and explicit output labels. The graph only becomes the textual
``-filter_complex`` argument in :meth:`FilterGraph.serialize`, and it refuses
to let two nodes write the same label.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable

from video_editor.errors import FilterGraphError

# Input stream specifiers such as ``0:v`` or ``3:a:0`` are readable without a writer.
_STREAM_SPEC_RE = re.compile(r"^\d+:[vas](?::\d+)?$")

GRAPH_SEPARATOR = ";\n"


def fmt(value: float | int | str) -> str:
    """Render a number the way ffmpeg options are written (``3``, ``2.5``, ``0.3``)."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return str(int(value))
    if isinstance(value, int):
        return str(value)
    text = f"{value:.6f}".rstrip("0").rstrip(".")
    if text in ("", "-0"):
        return "0"
    return text


def is_stream_specifier(label: str) -> bool:
    return bool(_STREAM_SPEC_RE.match(label))


@dataclass(frozen=True)
class Filter:
    """One filter inside a chain, e.g. ``trim=start=1:end=4``."""
    name: str
    args: tuple[str, ...] = ()

    @classmethod
    def of(cls, name: str, *positional: float | int | str, **options: float | int | str) -> Filter:
        """Build a filter from positional values followed by ``key=value`` options.

        Option order is preserved, so the rendered string is stable.
        """
        args = [fmt(v) for v in positional]
        args.extend(f"{key}={fmt(val)}" for key, val in options.items())
        return cls(name=name, args=tuple(args))

    def render(self) -> str:
        if not self.args:
            return self.name
        return f"{self.name}={':'.join(self.args)}"


@dataclass(frozen=True)
class FilterNode:
    """A chain of filters reading ``inputs`` and writing ``outputs``."""
    inputs: tuple[str, ...]
    filters: tuple[Filter, ...]
    outputs: tuple[str, ...]

    def render(self) -> str:
        ins = "".join(f"[{label}]" for label in self.inputs)
        outs = "".join(f"[{label}]" for label in self.outputs)
        chain = ",".join(f.render() for f in self.filters)
        return f"{ins}{chain}{outs}"


def node(
    inputs: str | Iterable[str],
    filters: Filter | Iterable[Filter],
    outputs: str | Iterable[str],
) -> FilterNode:
    """Convenience constructor accepting single labels or filters."""
    ins = (inputs,) if isinstance(inputs, str) else tuple(inputs)
    chain = (filters,) if isinstance(filters, Filter) else tuple(filters)
    outs = (outputs,) if isinstance(outputs, str) else tuple(outputs)
    if not chain:
        raise FilterGraphError("A filter node needs at least one filter")
    return FilterNode(inputs=ins, filters=chain, outputs=outs)


class FilterGraph:
    """Ordered collection of nodes with single-writer labels.

    Usage::

        graph = FilterGraph()
        graph.add("0:v", Filter.of("scale", 1080, 1920), "v0")
        graph.add("v0", Filter("copy"), "outv")
        graph.serialize()  # '[0:v]scale=1080:1920[v0];\\n[v0]copy[outv]'
    """

    def __init__(self) -> None:
        self._nodes: list[FilterNode] = []
        self._written: dict[str, int] = {}

    def add(
        self,
        inputs: str | Iterable[str],
        filters: Filter | Iterable[Filter],
        outputs: str | Iterable[str],
    ) -> FilterNode:
        return self.add_node(node(inputs, filters, outputs))

    def add_node(self, fragment: FilterNode) -> FilterNode:
        for label in fragment.inputs:
            if not is_stream_specifier(label) and label not in self._written:
                raise FilterGraphError(
                    f"Label [{label}] is read before any node writes it", label=label,
                )
        for label in fragment.outputs:
            if is_stream_specifier(label):
                raise FilterGraphError(
                    f"Label [{label}] is an input stream and cannot be written", label=label,
                )
            if label in self._written:
                raise FilterGraphError(
                    f"Label [{label}] is already written by node {self._written[label]}",
                    label=label,
                )
        index = len(self._nodes)
        for label in fragment.outputs:
            self._written[label] = index
        self._nodes.append(fragment)
        return fragment

    def extend(self, fragments: Iterable[FilterNode]) -> None:
        for fragment in fragments:
            self.add_node(fragment)

    def has_label(self, label: str) -> bool:
        return label in self._written

    @property
    def nodes(self) -> list[FilterNode]:
        return list(self._nodes)

    @property
    def labels(self) -> list[str]:
        """Labels in the order they were written."""
        return list(self._written)

    def __len__(self) -> int:
        return len(self._nodes)

    def serialize(self) -> str:
        return GRAPH_SEPARATOR.join(fragment.render() for fragment in self._nodes)


def easing_expr(easing: str, progress: str = "P") -> str:
    """Expression mapping linear progress in ``[0, 1]`` onto an eased curve."""
    p = progress
    if easing == "easeIn":
        return f"{p}*{p}"
    if easing == "easeOut":
        return f"1-(1-{p})*(1-{p})"
    if easing == "easeInOut":
        return f"if(lt({p},0.5),2*{p}*{p},1-pow(-2*{p}+2,2)/2)"
    return p
