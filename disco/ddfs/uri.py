"""URI records and the client-side normalization rules for blob addresses."""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Optional
from urllib.parse import urlsplit, urlunsplit

from .config import Config
from .errors import InvalidURIError

# Schemes that name a resource relative to the node that owns it. Those are
# reached through the master's HTTP port.
NODE_RELATIVE_SCHEMES = frozenset({"dir", "disco"})
TAG_SCHEME = "tag"

_FORBIDDEN_CHARS = re.compile(r"[\s\x00-\x1f\x7f]")


@dataclass(frozen=True)
class Authority:
    host: str
    port: Optional[int] = None
    userinfo: Optional[str] = None


@dataclass(frozen=True)
class Uri:
    """A parsed URI. Absent components are ``None``, never empty strings."""

    scheme: Optional[str] = None
    authority: Optional[Authority] = None
    path: Optional[str] = None
    query: Optional[str] = None
    fragment: Optional[str] = None

    def __str__(self) -> str:
        return uri_to_string(self)


def _parse_authority(netloc: str, port: Optional[int]) -> Authority:
    userinfo, _, hostport = netloc.rpartition("@")
    if hostport.startswith("["):
        host = hostport[: hostport.index("]") + 1]
    else:
        host = hostport.partition(":")[0]
    return Authority(host=host, port=port, userinfo=userinfo or None)


def parse_uri(text: str) -> Uri:
    """Parse ``text`` into a :class:`Uri`, raising ``InvalidURIError`` on bad syntax."""

    if _FORBIDDEN_CHARS.search(text):
        raise InvalidURIError(text, "contains whitespace or control characters")
    try:
        parts = urlsplit(text)
        port = parts.port
    except ValueError as exc:
        raise InvalidURIError(text, str(exc)) from exc
    return Uri(
        scheme=parts.scheme or None,
        authority=_parse_authority(parts.netloc, port) if parts.netloc else None,
        path=parts.path or None,
        query=parts.query or None,
        fragment=parts.fragment or None,
    )


def authority_to_string(authority: Authority) -> str:
    text = authority.host
    if authority.userinfo:
        text = f"{authority.userinfo}@{text}"
    if authority.port is not None:
        text = f"{text}:{authority.port}"
    return text


def uri_to_string(uri: Uri) -> str:
    if uri.scheme and uri.authority is None and uri.path and not uri.path.startswith("/"):
        # Relative path: urlunsplit would add "//" and root it for netloc schemes.
        text = f"{uri.scheme}:{uri.path}"
        if uri.query is not None:
            text = f"{text}?{uri.query}"
        if uri.fragment is not None:
            text = f"{text}#{uri.fragment}"
        return text
    netloc = authority_to_string(uri.authority) if uri.authority else ""
    return urlunsplit((uri.scheme or "", netloc, uri.path or "", uri.query or "", uri.fragment or ""))


def normalize(cfg: Config, uri: Uri) -> Uri:
    """Rewrite ``uri`` into an address the client can dereference.

    A bare path is a local file. ``dir://`` and ``disco://`` addresses are
    served over HTTP on the master's port by the node named in the
    authority. Anything else is already concrete and is returned as is.
    """

    if uri.scheme is None:
        return replace(uri, scheme="file")
    if uri.scheme in NODE_RELATIVE_SCHEMES:
        authority = uri.authority
        if authority is not None:
            authority = replace(authority, port=cfg.master_port)
        return replace(uri, scheme="http", authority=authority)
    return uri


def is_tag_uri(uri: Uri) -> bool:
    return uri.scheme == TAG_SCHEME


def tag_name_of(uri: Uri) -> str:
    """Return the tag name carried in the path of a ``tag:`` URI.

    Only call this once :func:`is_tag_uri` holds. A URI without a path is a
    programming error and raises ``ValueError``.
    """

    if uri.path is None:
        raise ValueError(f"URI {uri_to_string(uri)!r} has no path to take a tag name from")
    return uri.path
