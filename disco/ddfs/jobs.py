"""Submission of pre-built job packages to the Disco master."""

from __future__ import annotations

import json
import logging
from typing import Optional

from .config import Config, resolve_config
from .errors import SubmitError
from .schemas import SubmitResponse
from .transport import HttpTransport, single, transport_scope

logger = logging.getLogger(__name__)

SUBMIT_STATUSES = {"ok", "error"}


def url_for_job_submit(cfg: Config) -> str:
    return f"http://{cfg.master_host}:{cfg.master_port}/disco/job/new"


def parse_submit_response(text: str) -> SubmitResponse:
    """Decode ``["ok", job_id]`` or ``["error", message]``.

    The body is free-form status text as far as the client is concerned, so
    anything else comes back as an ``"unknown"`` response carrying ``text``.
    """

    try:
        value = json.loads(text)
    except ValueError:
        logger.debug("Submit response is not JSON: %r", text)
        return SubmitResponse("unknown", text)
    if (
        isinstance(value, list)
        and len(value) == 2
        and isinstance(value[0], str)
        and value[0] in SUBMIT_STATUSES
        and isinstance(value[1], str)
    ):
        return SubmitResponse(value[0], value[1])
    return SubmitResponse("unknown", text)


def submit_jobpack(
    payload: bytes,
    cfg: Optional[Config] = None,
    timeout: Optional[float] = None,
    transport: Optional[HttpTransport] = None,
) -> SubmitResponse:
    """POST an opaque job package and return the master's answer.

    Raises ``SubmitError`` when the request itself fails.
    """

    url = url_for_job_submit(resolve_config(cfg))
    with transport_scope(transport) as http:
        outcome = http.request(single("POST", url, body=payload, timeout=timeout))
    if outcome.response is None:
        raise SubmitError(url, outcome.failures[0].error)
    response = parse_submit_response(outcome.response.text)
    if response.status == "ok":
        logger.info("Submitted job %s", response.value)
    elif response.status == "error":
        logger.warning("Master rejected job: %s", response.value)
    return response
