"""Client-side DDFS tag resolution, blob lookup and Disco job submission."""

from __future__ import annotations

from .blobs import blob_size, tag_blob_sizes  # noqa: F401
from .config import Config, default_config, resolve_config  # noqa: F401
from .errors import (  # noqa: F401
    DDFSError,
    InvalidJSONError,
    InvalidURIError,
    SubmitError,
    TagRetrievalError,
    UnexpectedJSONError,
)
from .jobs import submit_jobpack  # noqa: F401
from .schemas import BlobSet, SubmitResponse, Tag  # noqa: F401
from .tags import expand_inputs, resolve_tag, tag_of_json  # noqa: F401
from .transport import FailoverRequest, HttpTransport, Outcome  # noqa: F401
from .uri import Authority, Uri, is_tag_uri, normalize, parse_uri, tag_name_of, uri_to_string  # noqa: F401

__all__ = [
    "Authority",
    "BlobSet",
    "Config",
    "DDFSError",
    "FailoverRequest",
    "HttpTransport",
    "InvalidJSONError",
    "InvalidURIError",
    "Outcome",
    "SubmitError",
    "SubmitResponse",
    "Tag",
    "TagRetrievalError",
    "UnexpectedJSONError",
    "blob_size",
    "default_config",
    "expand_inputs",
    "is_tag_uri",
    "normalize",
    "parse_uri",
    "resolve_config",
    "resolve_tag",
    "submit_jobpack",
    "tag_blob_sizes",
    "tag_name_of",
    "tag_of_json",
    "uri_to_string",
]
