from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from twooter_cli.errors import BadResponse, TransportFailure

if TYPE_CHECKING:
    from twooter_cli.pipeline import TwooterApi

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClientSession:
    """A registered display name and the credential the service issued for it."""

    name: str
    credential: str = field(repr=False)


def _clean_token(raw: str) -> str:
    return raw.strip().strip('"').strip()


async def register(api: "TwooterApi", name: str) -> ClientSession:
    """Register ``name`` and return a session stamped with the issued token."""

    raw = await api.register_name(name)
    token = _clean_token(str(raw))
    if not token:
        raise BadResponse(TransportFailure(message="registerName returned an empty token", body=str(raw)))
    logger.info("registered name %r", name)
    return ClientSession(name=name, credential=token)
