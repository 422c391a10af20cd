from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TransportFailure:
    """Opaque error info reported by a transport adapter."""

    message: str
    status: int | None = None
    body: str | None = None

    def __str__(self) -> str:
        if self.status is not None:
            return f"HTTP {self.status}: {self.message}"
        return self.message


class TwooterError(Exception):
    pass


class BadResponse(TwooterError):
    def __init__(self, failure: TransportFailure):
        self.failure = failure
        super().__init__(f"bad response: {failure}")


class MalformedContent(TwooterError):
    def __init__(self, raw: str, reason: str):
        self.raw = raw
        self.reason = reason
        super().__init__(f"malformed message content: {reason}")


class MissingCredential(TwooterError):
    def __init__(self, endpoint: str):
        self.endpoint = endpoint
        super().__init__(f"{endpoint} requires a registered name; register first")
