"""Typed errors raised while resolving tags and submitting jobs."""

from __future__ import annotations

import requests


def describe_error(error: BaseException) -> str:
    """Render a transport error as a short human readable string."""

    if isinstance(error, requests.HTTPError) and error.response is not None:
        resp = error.response
        return f"HTTP {resp.status_code} {resp.reason or ''}".rstrip() + f" for {resp.url}"
    text = str(error)
    return text or error.__class__.__name__


class DDFSError(RuntimeError):
    """Base class for every expected DDFS client failure."""


class TagRetrievalError(DDFSError):
    """Raised when the tag document could not be fetched from the master."""

    def __init__(self, tag_name: str, error: BaseException) -> None:
        self.tag_name = tag_name
        self.error = error
        super().__init__(f"Failed to retrieve tag '{tag_name}': {describe_error(error)}")


class InvalidJSONError(DDFSError):
    """Raised when a tag payload is not syntactically valid JSON."""

    def __init__(self, error: ValueError) -> None:
        self.error = error
        super().__init__(f"Invalid JSON: {error}")


class UnexpectedJSONError(DDFSError):
    """Raised when valid JSON does not have the shape of a tag document."""


class InvalidURIError(DDFSError):
    def __init__(self, text: str, reason: str) -> None:
        self.text = text
        self.reason = reason
        super().__init__(f"Invalid URI {text!r}: {reason}")


class SubmitError(DDFSError):
    """Raised when a job package could not be delivered to the master."""

    def __init__(self, url: str, error: BaseException) -> None:
        self.url = url
        self.error = error
        super().__init__(f"Job submission to {url} failed: {describe_error(error)}")
