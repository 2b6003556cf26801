"""Blocking HTTP transport with ordered failover across candidate URLs."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Iterator, List, Optional, Sequence, Tuple

import requests

from .errors import describe_error

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 15

Headers = Tuple[Tuple[str, str], ...]


@dataclass(frozen=True)
class FailoverRequest:
    """One logical request, satisfied by the first candidate that answers."""

    method: str
    candidates: Tuple[str, ...]
    body: Optional[bytes] = None
    timeout: Optional[float] = None


@dataclass(frozen=True)
class Response:
    url: str
    status: int
    headers: Headers = ()
    body: bytes = b""

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


@dataclass(frozen=True)
class Failure:
    url: str
    error: BaseException

    def describe(self) -> str:
        return describe_error(self.error)


@dataclass(frozen=True)
class Outcome:
    """Result of a failover request.

    ``response`` is the first successful answer in candidate order, or
    ``None`` when every candidate failed. ``failures`` lists the candidates
    that failed before it (all of them when ``response`` is ``None``).
    """

    response: Optional[Response] = None
    failures: Tuple[Failure, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return self.response is not None


def lookup_header(headers: Headers, name: str) -> List[str]:
    """Return every value of header ``name``, matched case-insensitively."""

    wanted = name.lower()
    return [value for key, value in headers if key.lower() == wanted]


class HttpTransport:
    """Issues :class:`FailoverRequest` objects through a ``requests.Session``."""

    def __init__(self, session: Optional[requests.Session] = None, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.session = session or requests.Session()
        self.timeout = timeout

    def request(self, req: FailoverRequest) -> Outcome:
        if not req.candidates:
            raise ValueError("FailoverRequest needs at least one candidate URL")
        timeout = req.timeout if req.timeout is not None else self.timeout
        failures: List[Failure] = []
        for url in req.candidates:
            try:
                resp = self.session.request(req.method, url, data=req.body, timeout=timeout)
                resp.raise_for_status()
                if not 200 <= resp.status_code < 300:
                    raise requests.HTTPError(f"Unexpected status {resp.status_code} for url: {url}", response=resp)
            except requests.RequestException as exc:
                logger.debug("%s %s failed: %s", req.method, url, describe_error(exc))
                failures.append(Failure(url=url, error=exc))
                continue
            response = Response(
                url=url,
                status=resp.status_code,
                headers=tuple(resp.headers.items()),
                body=resp.content or b"",
            )
            return Outcome(response=response, failures=tuple(failures))
        return Outcome(response=None, failures=tuple(failures))

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "HttpTransport":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


@contextmanager
def transport_scope(transport: Optional[HttpTransport] = None) -> Iterator[HttpTransport]:
    """Yield ``transport``, or a fresh one that is closed on exit."""

    if transport is not None:
        yield transport
        return
    with HttpTransport() as owned:
        yield owned


def single(method: str, url: str, body: Optional[bytes] = None, timeout: Optional[float] = None) -> FailoverRequest:
    return FailoverRequest(method=method, candidates=(url,), body=body, timeout=timeout)


def failover(method: str, urls: Sequence[str], timeout: Optional[float] = None) -> FailoverRequest:
    return FailoverRequest(method=method, candidates=tuple(urls), timeout=timeout)
