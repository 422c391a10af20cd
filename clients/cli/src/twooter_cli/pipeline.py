"""Layered request builders and the endpoint calls of the twooter service."""

from __future__ import annotations

import asyncio
import enum
import json
import logging
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Mapping, Optional

from twooter_cli import __version__
from twooter_cli.bridge import FailureCallback, SuccessCallback, bridge
from twooter_cli.content import MessageRecord
from twooter_cli.errors import BadResponse, MissingCredential, TransportFailure
from twooter_cli.redact import redact_fields
from twooter_cli.session import ClientSession

if TYPE_CHECKING:
    from twooter_cli.transport import Transport

logger = logging.getLogger(__name__)

USER_AGENT = f"twooter-cli/{__version__}"
FIXED_HEADERS = {
    "User-Agent": USER_AGENT,
    "Content-Type": "application/json",
}


class ResponseParser(enum.Enum):
    RAW_TEXT = "raw_text"
    JSON = "json"


@dataclass(frozen=True)
class RequestOptions:
    body: Optional[Mapping[str, Any]] = None
    parser: Optional[ResponseParser] = None
    headers: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class RequestDescriptor:
    endpoint: str
    method: str
    headers: Mapping[str, str]
    body: Optional[bytes]
    parser: ResponseParser


def _serialize_body(body: Optional[Mapping[str, Any]]) -> Optional[bytes]:
    if body is None:
        return None
    return json.dumps(dict(body), separators=(",", ":")).encode("utf-8")


def build_request(endpoint: str, options: RequestOptions | None = None) -> RequestDescriptor:
    """Build a POST descriptor; the parser defaults to raw text only when unset."""

    options = options or RequestOptions()
    if options.body is not None:
        logger.debug("building %s request: %s", endpoint, redact_fields(options.body))
    headers = {**dict(options.headers), **FIXED_HEADERS}
    return RequestDescriptor(
        endpoint=endpoint,
        method="POST",
        headers=MappingProxyType(headers),
        body=_serialize_body(options.body),
        parser=options.parser if options.parser is not None else ResponseParser.RAW_TEXT,
    )


def build_json_request(endpoint: str, options: RequestOptions | None = None) -> RequestDescriptor:
    """Same as ``build_request`` but always decodes the response as JSON."""

    options = replace(options or RequestOptions(), parser=ResponseParser.JSON)
    return build_request(endpoint, options)


def endpoint_url(base_url: str, endpoint: str) -> str:
    return f"{base_url.rstrip('/')}/{endpoint}"


def parse_response(parser: ResponseParser, text: str) -> Any:
    if parser is ResponseParser.JSON:
        return json.loads(text)
    return text


class TwooterApi:
    """Endpoint calls; each returns the future produced by the async bridge."""

    def __init__(self, base_url: str, transport: "Transport") -> None:
        self.base_url = base_url
        self.transport = transport

    def dispatch(self, descriptor: RequestDescriptor) -> asyncio.Future:
        url = endpoint_url(self.base_url, descriptor.endpoint)

        def invoke(on_success: SuccessCallback, on_failure: FailureCallback) -> None:
            def parse_then_succeed(text: Any) -> None:
                try:
                    value = parse_response(descriptor.parser, text)
                except (TypeError, ValueError) as exc:
                    on_failure(
                        TransportFailure(
                            message=f"could not decode {descriptor.endpoint} response: {exc}",
                            body=str(text),
                        )
                    )
                    return
                on_success(value)

            self.transport.send(
                url,
                descriptor.method,
                descriptor.headers,
                descriptor.body,
                parse_then_succeed,
                on_failure,
            )

        return bridge(invoke)

    def register_name(self, name: str) -> asyncio.Future:
        return self.dispatch(build_request("registerName", RequestOptions(body={"name": name})))

    def refresh_name(self, session: ClientSession | None) -> asyncio.Future:
        session = _require_session(session, "refreshName")
        body = {"name": session.name, "token": session.credential}
        return self.dispatch(build_request("refreshName", RequestOptions(body=body)))

    def post_message(self, session: ClientSession | None, message: str) -> asyncio.Future:
        session = _require_session(session, "postMessage")
        body = {"token": session.credential, "name": session.name, "message": message}
        return self.dispatch(build_request("postMessage", RequestOptions(body=body)))

    def get_messages(self) -> asyncio.Future:
        return self.dispatch(build_json_request("messages"))


def _require_session(session: ClientSession | None, endpoint: str) -> ClientSession:
    if session is None or not session.credential:
        raise MissingCredential(endpoint)
    return session


async def fetch_feed(api: TwooterApi) -> list[MessageRecord]:
    """Fetch the feed and keep server order; entries that are not objects are skipped."""

    payload = await api.get_messages()
    if not isinstance(payload, list):
        raise BadResponse(TransportFailure(message=f"messages response was {type(payload).__name__}, not a list"))
    records: list[MessageRecord] = []
    for entry in payload:
        if not isinstance(entry, dict):
            logger.debug("skipping feed entry of type %s", type(entry).__name__)
            continue
        records.append(
            MessageRecord(
                author=str(entry.get("name") or ""),
                raw_content=str(entry.get("message") or ""),
            )
        )
    return records
