from __future__ import annotations

from typing import Iterable

from twooter_cli.content import ContentValue, FormattedMessage, MessageRecord, PlainText, classify_safely
from twooter_cli.errors import MalformedContent
from twooter_cli.layout import Heading, ImageNode, Indent, LayoutNode, Line, Padding, Section, word_wrap

DEFAULT_WIDTH = 70
MESSAGE_KIND = "twooter-message"


def render_content(value: ContentValue | MalformedContent, width: int = DEFAULT_WIDTH) -> LayoutNode:
    """Expand one message body; images come first, then text, then the agent line."""

    if isinstance(value, PlainText):
        return Line(word_wrap(value.text, width))
    if isinstance(value, FormattedMessage):
        children: list[LayoutNode] = []
        for blob in value.images:
            children.extend((ImageNode(blob), Padding()))
        if value.text is not None:
            children.append(Line(word_wrap(value.text, width)))
        if value.agent is not None:
            children.extend((Line(f"Agent: {value.agent}"), Padding()))
        return Section(tuple(children))
    if isinstance(value, MalformedContent):
        return Line(f"[unreadable message: {value.reason}]")
    raise TypeError(f"unsupported content value: {type(value).__name__}")


def render_message(record: MessageRecord, width: int = DEFAULT_WIDTH) -> Section:
    content = render_content(classify_safely(record.raw_content), width)
    return Section((Heading(record.author), Indent(content)), kind=MESSAGE_KIND)


def render_feed(records: Iterable[MessageRecord], width: int = DEFAULT_WIDTH) -> Section:
    """Render every record in order with one ``Padding`` between consecutive units."""

    children: list[LayoutNode] = []
    for record in records:
        if children:
            children.append(Padding())
        children.append(render_message(record, width))
    return Section(tuple(children))
