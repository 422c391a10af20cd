"""Keep issued credentials out of logs and CLI error output."""

from __future__ import annotations

import re
from typing import Any, Iterable, Mapping

from twooter_cli.errors import TransportFailure

MASK = "[REDACTED]"
CREDENTIAL_FIELDS = frozenset({"token"})
MIN_SECRET_LEN = 4

_TOKEN_FIELD_RE = re.compile(r'("token"\s*:\s*")([^"]*)(")')


def redact_fields(body: Mapping[str, Any]) -> dict[str, Any]:
    """Copy a request body with its credential fields masked."""

    return {key: MASK if key in CREDENTIAL_FIELDS else value for key, value in body.items()}


def mask_secrets(text: str, known: Iterable[str] = ()) -> str:
    """Mask JSON ``"token"`` values in ``text`` and every occurrence of ``known``."""

    masked = _TOKEN_FIELD_RE.sub(lambda match: f"{match.group(1)}{MASK}{match.group(3)}", text)
    for secret in known:
        if secret and len(secret) >= MIN_SECRET_LEN:
            masked = masked.replace(secret, MASK)
    return masked


def redact_failure(failure: TransportFailure, known: Iterable[str] = ()) -> str:
    """Describe ``failure`` for the user, including the response body when present."""

    text = str(failure)
    if failure.body and failure.body.strip():
        text = f"{text}: {failure.body.strip()}"
    return mask_secrets(text, known)
