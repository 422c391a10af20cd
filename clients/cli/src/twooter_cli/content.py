"""Classify raw message strings into plain text or formatted payloads.

Formatted messages travel inside the ``message`` field as

    data:twooter/formatted;json,<url-encoded JSON>

where the JSON object carries optional ``agent``, ``images`` and ``text``.
Each entry of ``images`` is itself a ``data:image/<fmt>;base64,<payload>``
URI. Image entries that do not decode are dropped; a payload whose JSON does
not parse makes the whole message malformed.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
import re
import urllib.parse
from dataclasses import dataclass
from typing import Iterable, Optional, Union

from twooter_cli.errors import MalformedContent

logger = logging.getLogger(__name__)

FORMATTED_MIME = "twooter/formatted"
_FORMATTED_RE = re.compile(r"\Adata:twooter/formatted;json,(.*)\Z", flags=re.DOTALL)
_IMAGE_RE = re.compile(r"\Adata:image/([^;,]+);base64,(.*)\Z", flags=re.DOTALL)


@dataclass(frozen=True)
class MessageRecord:
    author: str
    raw_content: str


@dataclass(frozen=True)
class ImageBlob:
    format: str
    data: bytes

    def __repr__(self) -> str:
        return f"ImageBlob(format={self.format!r}, {len(self.data)} bytes)"


@dataclass(frozen=True)
class PlainText:
    text: str


@dataclass(frozen=True)
class FormattedMessage:
    agent: Optional[str] = None
    images: tuple[ImageBlob, ...] = ()
    text: Optional[str] = None


ContentValue = Union[PlainText, FormattedMessage]


def decode_image(uri: str) -> ImageBlob | None:
    """Decode a base64 image data URI, or return ``None`` if it is not one."""

    match = _IMAGE_RE.match(uri.strip())
    if match is None:
        return None
    try:
        data = base64.b64decode(re.sub(r"\s+", "", match.group(2)), validate=True)
    except (binascii.Error, ValueError):
        return None
    return ImageBlob(format=match.group(1), data=data)


def _optional_str(payload: dict, key: str, raw: str) -> Optional[str]:
    value = payload.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise MalformedContent(raw, f"{key} must be a string")
    return value


def _parse_formatted(raw: str, encoded: str) -> FormattedMessage:
    try:
        payload = json.loads(urllib.parse.unquote(encoded))
    except ValueError as exc:
        raise MalformedContent(raw, f"invalid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise MalformedContent(raw, "payload must be a JSON object")

    entries = payload.get("images")
    if entries is None:
        entries = []
    if not isinstance(entries, list):
        raise MalformedContent(raw, "images must be a list")
    images = []
    for entry in entries:
        blob = decode_image(entry) if isinstance(entry, str) else None
        if blob is None:
            logger.debug("dropping image entry that is not a base64 image data URI")
            continue
        images.append(blob)

    return FormattedMessage(
        agent=_optional_str(payload, "agent", raw),
        images=tuple(images),
        text=_optional_str(payload, "text", raw),
    )


def classify(raw: str) -> ContentValue:
    """Classify ``raw``; raises ``MalformedContent`` for broken formatted payloads."""

    match = _FORMATTED_RE.match(raw)
    if match is not None:
        return _parse_formatted(raw, match.group(1))
    return PlainText(raw)


def classify_safely(raw: str) -> ContentValue | MalformedContent:
    """Like ``classify`` but returns the error in place of the content value."""

    try:
        return classify(raw)
    except MalformedContent as exc:
        logger.warning("unreadable message content: %s", exc.reason)
        return exc


def encode_image(data: bytes, fmt: str = "png") -> str:
    return f"data:image/{fmt};base64,{base64.b64encode(data).decode('ascii')}"


def encode_formatted(
    agent: Optional[str] = None,
    images: Iterable[ImageBlob | str] = (),
    text: Optional[str] = None,
) -> str:
    """Build a formatted message string; images may be blobs or data URIs."""

    payload: dict = {}
    if agent is not None:
        payload["agent"] = agent
    uris = [encode_image(item.data, item.format) if isinstance(item, ImageBlob) else item for item in images]
    if uris:
        payload["images"] = uris
    if text is not None:
        payload["text"] = text
    encoded = urllib.parse.quote(json.dumps(payload, separators=(",", ":")), safe="")
    return f"data:{FORMATTED_MIME};json,{encoded}"
