"""Blob size lookup across replicas."""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from .config import Config, resolve_config
from .schemas import BlobSet
from .tags import resolve_tag
from .transport import HttpTransport, failover, lookup_header, transport_scope
from .uri import normalize, uri_to_string

logger = logging.getLogger(__name__)


def blob_size(
    blobset: BlobSet,
    cfg: Optional[Config] = None,
    transport: Optional[HttpTransport] = None,
) -> Optional[int]:
    """Return the size of a blob in bytes, or ``None`` when it cannot be found.

    All replicas go out as one failover HEAD request, in preference order.
    Failures are logged and never raised: callers treat a missing size as a
    normal outcome.
    """

    cfg = resolve_config(cfg)
    urls = [uri_to_string(normalize(cfg, uri)) for uri in blobset]
    if not urls:
        logger.debug("Empty blob set, size unknown")
        return None
    with transport_scope(transport) as http:
        outcome = http.request(failover("HEAD", urls))
    if outcome.response is None:
        for failed in outcome.failures:
            logger.warning("Retrieval of %s failed: %s", failed.url, failed.describe())
        return None

    values = lookup_header(outcome.response.headers, "Content-Length")
    if not values:
        logger.warning("No content-length found in: %s", ", ".join(urls))
        return None
    length = ", ".join(values)
    logger.debug("Attempting to convert content-length: %s", length)
    if not (length.isascii() and length.isdigit()):
        logger.warning("Error converting content-length from: %s", ", ".join(urls))
        return None
    return int(length)


def tag_blob_sizes(
    tag_name: str,
    cfg: Optional[Config] = None,
    transport: Optional[HttpTransport] = None,
) -> List[Tuple[BlobSet, Optional[int]]]:
    """Resolve a tag and look up the size of each of its blobs."""

    cfg = resolve_config(cfg)
    with transport_scope(transport) as http:
        tag = resolve_tag(tag_name, cfg=cfg, transport=http)
        return [(group, blob_size(group, cfg=cfg, transport=http)) for group in tag.replica_groups]
