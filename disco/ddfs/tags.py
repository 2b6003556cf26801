"""Tag resolution: fetch a tag document from the master and decode it."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterable, List, Optional

from .config import Config, resolve_config
from .errors import InvalidJSONError, TagRetrievalError, UnexpectedJSONError
from .schemas import BlobSet, Tag
from .transport import HttpTransport, single, transport_scope
from .uri import Uri, is_tag_uri, parse_uri, tag_name_of

logger = logging.getLogger(__name__)


def url_for_tag(cfg: Config, tag_name: str) -> str:
    # The name is inserted verbatim; no escaping.
    return f"http://{cfg.master_host}:{cfg.master_port}/ddfs/tag/{tag_name}"


def tag_payload_of_name(
    tag_name: str,
    cfg: Optional[Config] = None,
    transport: Optional[HttpTransport] = None,
) -> str:
    """GET the raw tag document, raising ``TagRetrievalError`` on failure."""

    url = url_for_tag(resolve_config(cfg), tag_name)
    with transport_scope(transport) as http:
        outcome = http.request(single("GET", url))
    if outcome.response is None:
        failure = outcome.failures[0]
        raise TagRetrievalError(tag_name, failure.error)
    return outcome.response.text


def tag_json_of_payload(payload: str) -> Any:
    try:
        return json.loads(payload)
    except ValueError as exc:
        raise InvalidJSONError(exc) from exc


def _field(obj: Dict[str, Any], name: str, kind: type, kind_name: str) -> Any:
    if name not in obj:
        raise UnexpectedJSONError(f"tag object is missing field '{name}'")
    value = obj[name]
    if not isinstance(value, kind):
        raise UnexpectedJSONError(
            f"field '{name}' must be {kind_name}, got {type(value).__name__}"
        )
    return value


def _blobset_of_json(index: int, group: Any) -> BlobSet:
    if not isinstance(group, list):
        raise UnexpectedJSONError(f"urls[{index}] must be an array, got {type(group).__name__}")
    if not group:
        raise UnexpectedJSONError(f"urls[{index}] is empty")
    blobs: List[Uri] = []
    for pos, item in enumerate(group):
        if not isinstance(item, str):
            raise UnexpectedJSONError(
                f"urls[{index}][{pos}] must be a string, got {type(item).__name__}"
            )
        blobs.append(parse_uri(item))
    return tuple(blobs)


def tag_of_json(value: Any) -> Tag:
    """Decode a tag document into a :class:`Tag`.

    Attributes present in the document are not decoded; the returned tag
    always has an empty attribute list.
    """

    if not isinstance(value, dict):
        raise UnexpectedJSONError(f"tag document must be an object, got {type(value).__name__}")
    tag_id = _field(value, "id", str, "a string")
    last_modified = _field(value, "last-modified", str, "a string")
    urls = _field(value, "urls", list, "an array")
    groups = tuple(_blobset_of_json(i, group) for i, group in enumerate(urls))
    return Tag(id=tag_id, last_modified=last_modified, attributes=(), replica_groups=groups)


def resolve_tag(
    tag_name: str,
    cfg: Optional[Config] = None,
    transport: Optional[HttpTransport] = None,
) -> Tag:
    """Fetch, parse and decode the tag called ``tag_name``."""

    payload = tag_payload_of_name(tag_name, cfg=cfg, transport=transport)
    return tag_of_json(tag_json_of_payload(payload))


def expand_inputs(
    uris: Iterable[Uri],
    cfg: Optional[Config] = None,
    transport: Optional[HttpTransport] = None,
) -> List[BlobSet]:
    """Turn job inputs into blob sets, replacing ``tag:`` inputs by their blobs."""

    cfg = resolve_config(cfg)
    blobsets: List[BlobSet] = []
    with transport_scope(transport) as http:
        for uri in uris:
            if is_tag_uri(uri):
                tag = resolve_tag(tag_name_of(uri), cfg=cfg, transport=http)
                logger.debug("Tag %s expanded to %d blob(s)", tag.id, len(tag.replica_groups))
                blobsets.extend(tag.replica_groups)
            else:
                blobsets.append((uri,))
    return blobsets
