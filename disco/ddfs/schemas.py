"""Record types shared by the tag resolver, blob locator and job client."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

from .uri import Uri, uri_to_string

# Replicas of one blob, in preference order.
BlobSet = Tuple[Uri, ...]
Attribute = Tuple[str, str]


@dataclass(frozen=True)
class Tag:
    """A named, versioned pointer to groups of replicated blobs.

    Later entries of ``replica_groups`` are other blobs of the same tag, not
    alternatives to earlier ones.
    """

    id: str
    last_modified: str
    attributes: Tuple[Attribute, ...] = ()
    replica_groups: Tuple[BlobSet, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        urls: List[List[str]] = [[uri_to_string(u) for u in group] for group in self.replica_groups]
        return {
            "id": self.id,
            "last-modified": self.last_modified,
            "attributes": [list(pair) for pair in self.attributes],
            "urls": urls,
        }


@dataclass(frozen=True)
class SubmitResponse:
    """Answer of the master to a job submission.

    ``status`` is ``"ok"`` (``value`` is the job id), ``"error"`` (``value`` is
    the master's message) or ``"unknown"`` (``value`` is the raw body).
    """

    status: str
    value: str

    @property
    def ok(self) -> bool:
        return self.status == "ok"
