"""Immutable layout primitives for rendered feeds."""

from __future__ import annotations

import textwrap
from dataclasses import dataclass
from typing import Iterator, Union

from twooter_cli.content import ImageBlob


@dataclass(frozen=True)
class Heading:
    text: str


@dataclass(frozen=True)
class Line:
    text: str


@dataclass(frozen=True)
class ImageNode:
    blob: ImageBlob


@dataclass(frozen=True)
class Padding:
    pass


@dataclass(frozen=True)
class Indent:
    child: "LayoutNode"


@dataclass(frozen=True)
class Section:
    children: tuple["LayoutNode", ...] = ()
    kind: str = ""


LayoutNode = Union[Heading, Indent, Line, ImageNode, Padding, Section]


def word_wrap(text: str, width: int = 70) -> str:
    """Fill each paragraph of ``text`` to ``width`` columns.

    Existing newlines are kept as paragraph breaks; words longer than
    ``width`` are split.
    """

    if width <= 0:
        return text
    lines: list[str] = []
    for paragraph in text.split("\n"):
        lines.extend(textwrap.wrap(paragraph, width=width, break_long_words=True) or [""])
    return "\n".join(lines)


def walk(node: LayoutNode) -> Iterator[LayoutNode]:
    """Yield ``node`` and its descendants depth-first, parents before children."""

    yield node
    if isinstance(node, Indent):
        yield from walk(node.child)
    elif isinstance(node, Section):
        for child in node.children:
            yield from walk(child)
