"""Plain-text presentation of a layout tree."""

from __future__ import annotations

from typing import TextIO

from twooter_cli.layout import Heading, ImageNode, Indent, LayoutNode, Line, Padding, Section


def _image_placeholder(node: ImageNode) -> str:
    return f"[image/{node.blob.format} {len(node.blob.data)} bytes]"


def render_lines(node: LayoutNode, indent: int = 2, _depth: int = 0) -> list[str]:
    prefix = " " * (indent * _depth)
    if isinstance(node, Heading):
        return [f"{prefix}== {node.text} =="]
    if isinstance(node, Line):
        return [f"{prefix}{line}" if line else "" for line in node.text.split("\n")]
    if isinstance(node, ImageNode):
        return [prefix + _image_placeholder(node)]
    if isinstance(node, Padding):
        return [""]
    if isinstance(node, Indent):
        return render_lines(node.child, indent, _depth + 1)
    if isinstance(node, Section):
        lines: list[str] = []
        for child in node.children:
            lines.extend(render_lines(child, indent, _depth))
        return lines
    raise TypeError(f"unsupported layout node: {type(node).__name__}")


def draw(node: LayoutNode, stream: TextIO, indent: int = 2) -> None:
    for line in render_lines(node, indent):
        stream.write(line + "\n")
