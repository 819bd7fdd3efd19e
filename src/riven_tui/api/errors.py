"""Exception hierarchy for talking to the Riven API."""

from __future__ import annotations


class RivenError(Exception):
    """Base class for every failure surfaced by the gateway or stream client."""


class TransportError(RivenError):
    """The request never produced a response (refused, timeout, DNS)."""

    def __init__(self, message: str, url: str | None = None):
        super().__init__(message)
        self.url = url


class ApiError(RivenError):
    """The service answered with a non-success status code."""

    def __init__(self, status_code: int, body: str = "", url: str | None = None):
        self.status_code = status_code
        self.body = body.strip()
        self.url = url
        detail = f": {self.body}" if self.body else ""
        super().__init__(f"API error (status {status_code}){detail}")


class DecodeError(RivenError):
    """The response body was not the JSON shape we expected."""


class StreamError(RivenError):
    """The event stream could not be opened or was interrupted."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
