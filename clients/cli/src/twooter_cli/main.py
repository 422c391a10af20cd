"""Command line entry point for the twooter client."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Callable, TextIO

from twooter_cli import config
from twooter_cli.content import ImageBlob, encode_formatted
from twooter_cli.errors import BadResponse, MissingCredential
from twooter_cli.pipeline import TwooterApi, fetch_feed
from twooter_cli.redact import redact_failure
from twooter_cli.render import DEFAULT_WIDTH, render_feed
from twooter_cli.session import ClientSession, register
from twooter_cli.sink import draw
from twooter_cli.transport import AiohttpTransport, Transport

EXIT_BAD_RESPONSE = 1
EXIT_MISSING_CREDENTIAL = 2
EXIT_BAD_INPUT = 3

_IMAGE_FORMATS = {".png": "png", ".jpg": "jpeg", ".jpeg": "jpeg", ".gif": "gif", ".webp": "webp"}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="twooter", description="Post to and read a twooter feed")
    parser.add_argument("--api-url", default=None, help=f"service base URL (env {config.API_URL_ENV})")
    parser.add_argument("--timeout", type=float, default=10.0, help="request timeout in seconds")
    parser.add_argument("--verbose", action="store_true", help="log requests to stderr")
    sub = parser.add_subparsers(dest="command", required=True)

    register_cmd = sub.add_parser("register", help="register a display name and print its token")
    register_cmd.add_argument("name")

    for command, help_text in (("refresh", "keep a registered name alive"), ("post", "post a message")):
        cmd = sub.add_parser(command, help=help_text)
        cmd.add_argument("--name", required=True)
        cmd.add_argument("--token", default="", help="credential printed by 'register'")
        if command == "post":
            cmd.add_argument("--agent", default=None, help="attribute the post to an agent")
            cmd.add_argument("--image", action="append", default=[], help="attach an image file")
            cmd.add_argument("text", nargs="?", default=None)

    feed_cmd = sub.add_parser("feed", help="show the most recent messages")
    feed_cmd.add_argument("--width", type=int, default=DEFAULT_WIDTH)
    return parser


def _session_from_args(args: argparse.Namespace) -> ClientSession | None:
    if not args.token:
        return None
    return ClientSession(name=args.name, credential=args.token)


def _load_image(path: str) -> ImageBlob:
    image_path = Path(path).expanduser()
    fmt = _IMAGE_FORMATS.get(image_path.suffix.lower(), image_path.suffix.lstrip(".").lower() or "png")
    return ImageBlob(format=fmt, data=image_path.read_bytes())


def compose_message(text: str | None, agent: str | None = None, images: list[ImageBlob] | None = None) -> str:
    """Plain text goes out as-is; agents or images need the formatted encoding."""

    if agent is None and not images:
        return text or ""
    return encode_formatted(agent=agent, images=images or (), text=text)


async def _run(args: argparse.Namespace, transport: Transport, write: Callable[[str], None], stream: TextIO) -> int:
    api = TwooterApi(config.resolve_api_url(args.api_url), transport)
    if args.command == "register":
        session = await register(api, args.name)
        write(session.credential)
    elif args.command == "refresh":
        await api.refresh_name(_session_from_args(args))
        write(f"refreshed {args.name}")
    elif args.command == "post":
        message = compose_message(args.text, args.agent, args.images)
        await api.post_message(_session_from_args(args), message)
        write(f"posted as {args.name}")
    elif args.command == "feed":
        records = await fetch_feed(api)
        draw(render_feed(records, args.width), stream)
    return 0


async def _run_with_transport(args: argparse.Namespace, transport: Transport | None, write, stream) -> int:
    if transport is not None:
        return await _run(args, transport, write, stream)
    async with AiohttpTransport(timeout_s=args.timeout) as owned:
        return await _run(args, owned, write, stream)


def main(argv: list[str] | None = None, output: TextIO | None = None, transport: Transport | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    config.configure_logging(args.verbose)

    stream = output or sys.stdout

    if args.command == "post":
        try:
            args.images = [_load_image(path) for path in args.image]
        except OSError as exc:
            sys.stderr.write(f"error: cannot read image {exc.filename or ''}: {exc.strerror or exc}\n")
            return EXIT_BAD_INPUT

    def write(text: str) -> None:
        stream.write(text + "\n")

    try:
        return asyncio.run(_run_with_transport(args, transport, write, stream))
    except BadResponse as exc:
        known = [getattr(args, "token", "") or ""]
        sys.stderr.write(f"error: bad response: {redact_failure(exc.failure, known)}\n")
        return EXIT_BAD_RESPONSE
    except MissingCredential as exc:
        sys.stderr.write(f"error: {exc}\n")
        return EXIT_MISSING_CREDENTIAL


if __name__ == "__main__":  # pragma: no cover - convenience execution
    raise SystemExit(main())
