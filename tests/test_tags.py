"""Tests for tag decoding, tag resolution and input expansion."""

from __future__ import annotations

import json
import sys
import unittest
from pathlib import Path
from unittest.mock import MagicMock

import requests


ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from disco.ddfs.config import Config
from disco.ddfs.errors import InvalidJSONError, InvalidURIError, TagRetrievalError, UnexpectedJSONError
from disco.ddfs.schemas import Tag
from disco.ddfs.tags import expand_inputs, resolve_tag, tag_of_json, url_for_tag
from disco.ddfs.transport import Failure, HttpTransport, Outcome, Response
from disco.ddfs.uri import parse_uri


CFG = Config(master_host="master", master_port=8989)

SAMPLE_TAG = {
    "id": "t1",
    "last-modified": "now",
    "urls": [["http://a/1", "http://b/1"], ["http://c/2"]],
}


class _ScriptedTransport:
    def __init__(self, *outcomes: Outcome) -> None:
        self.outcomes = list(outcomes)
        self.requests = []

    def request(self, req):
        self.requests.append(req)
        return self.outcomes.pop(0)


def _ok(body: str, url: str = "http://master:8989/ddfs/tag/t1") -> Outcome:
    return Outcome(response=Response(url=url, status=200, body=body.encode("utf-8")))


def _http_response(status: int, body: bytes = b"", reason: str = "", url: str = "") -> requests.Response:
    resp = requests.Response()
    resp.status_code = status
    resp.reason = reason
    resp._content = body
    resp.url = url
    return resp


class TagDecoderTests(unittest.TestCase):
    def test_decodes_replica_groups_in_order(self) -> None:
        tag = tag_of_json(SAMPLE_TAG)
        self.assertEqual(tag.id, "t1")
        self.assertEqual(tag.last_modified, "now")
        self.assertEqual(len(tag.replica_groups), 2)
        self.assertEqual(
            tag.replica_groups[0],
            (parse_uri("http://a/1"), parse_uri("http://b/1")),
        )
        self.assertEqual(tag.replica_groups[1], (parse_uri("http://c/2"),))
        self.assertEqual(tag.attributes, ())

    def test_attributes_in_payload_are_not_decoded(self) -> None:
        payload = dict(SAMPLE_TAG, attributes={"owner": "alice"})
        self.assertEqual(tag_of_json(payload).attributes, ())

    def test_missing_urls_is_unexpected_json(self) -> None:
        payload = {"id": "t1", "last-modified": "now"}
        with self.assertRaises(UnexpectedJSONError) as ctx:
            tag_of_json(payload)
        self.assertIn("urls", str(ctx.exception))

    def test_mistyped_fields_are_unexpected_json(self) -> None:
        bad_payloads = [
            [],
            "t1",
            dict(SAMPLE_TAG, id=1),
            dict(SAMPLE_TAG, **{"last-modified": None}),
            dict(SAMPLE_TAG, urls="http://a/1"),
            dict(SAMPLE_TAG, urls=["http://a/1"]),
            dict(SAMPLE_TAG, urls=[["http://a/1", 7]]),
        ]
        for payload in bad_payloads:
            with self.assertRaises(UnexpectedJSONError, msg=repr(payload)):
                tag_of_json(payload)

    def test_malformed_uri_is_invalid_uri(self) -> None:
        payload = dict(SAMPLE_TAG, urls=[["http://a/1"], ["http://b:notaport/2"]])
        with self.assertRaises(InvalidURIError):
            tag_of_json(payload)

    def test_empty_replica_group_is_unexpected_json(self) -> None:
        payload = dict(SAMPLE_TAG, urls=[["http://a/1"], []])
        with self.assertRaises(UnexpectedJSONError) as ctx:
            tag_of_json(payload)
        self.assertIn("urls[1] is empty", str(ctx.exception))

    def test_empty_urls_gives_empty_tag(self) -> None:
        tag = tag_of_json(dict(SAMPLE_TAG, urls=[]))
        self.assertEqual(tag, Tag(id="t1", last_modified="now"))


class TagResolverTests(unittest.TestCase):
    def test_url_inserts_name_verbatim(self) -> None:
        self.assertEqual(url_for_tag(CFG, "data:a b/c"), "http://master:8989/ddfs/tag/data:a b/c")

    def test_resolves_tag_through_single_get(self) -> None:
        transport = _ScriptedTransport(_ok(json.dumps(SAMPLE_TAG)))
        tag = resolve_tag("t1", cfg=CFG, transport=transport)
        self.assertEqual(tag.id, "t1")
        (req,) = transport.requests
        self.assertEqual(req.method, "GET")
        self.assertEqual(req.candidates, ("http://master:8989/ddfs/tag/t1",))

    def test_non_json_payload_is_invalid_json(self) -> None:
        transport = _ScriptedTransport(_ok("<html>not json</html>"))
        with self.assertRaises(InvalidJSONError):
            resolve_tag("t1", cfg=CFG, transport=transport)

    def test_transport_failure_is_retrieval_failure(self) -> None:
        error = requests.ConnectionError("connection refused")
        url = "http://master:8989/ddfs/tag/t1"
        transport = _ScriptedTransport(Outcome(failures=(Failure(url=url, error=error),)))
        with self.assertRaises(TagRetrievalError) as ctx:
            resolve_tag("t1", cfg=CFG, transport=transport)
        self.assertEqual(ctx.exception.tag_name, "t1")
        self.assertIs(ctx.exception.error, error)

    def test_http_404_surfaces_as_retrieval_failure(self) -> None:
        session = MagicMock()
        session.request.return_value = _http_response(
            404, b"unknown tag", reason="Not Found", url="http://master:8989/ddfs/tag/mytag"
        )
        transport = HttpTransport(session=session)
        with self.assertRaises(TagRetrievalError) as ctx:
            resolve_tag("mytag", cfg=CFG, transport=transport)
        err = ctx.exception
        self.assertEqual(err.tag_name, "mytag")
        self.assertIsInstance(err.error, requests.HTTPError)
        self.assertEqual(err.error.response.status_code, 404)
        self.assertIn("HTTP 404 Not Found", str(err))
        self.assertIn("mytag", str(err))

    def test_redirect_status_is_retrieval_failure(self) -> None:
        session = MagicMock()
        session.request.return_value = _http_response(
            302, json.dumps(SAMPLE_TAG).encode(), reason="Found", url="http://master:8989/ddfs/tag/t1"
        )
        with self.assertRaises(TagRetrievalError) as ctx:
            resolve_tag("t1", cfg=CFG, transport=HttpTransport(session=session))
        self.assertEqual(ctx.exception.error.response.status_code, 302)


class ExpandInputsTests(unittest.TestCase):
    def test_tag_inputs_expand_to_their_blob_sets(self) -> None:
        transport = _ScriptedTransport(_ok(json.dumps(SAMPLE_TAG)))
        inputs = [parse_uri("http://x/0"), parse_uri("tag:t1"), parse_uri("/local/file")]
        blobsets = expand_inputs(inputs, cfg=CFG, transport=transport)
        self.assertEqual(
            blobsets,
            [
                (parse_uri("http://x/0"),),
                (parse_uri("http://a/1"), parse_uri("http://b/1")),
                (parse_uri("http://c/2"),),
                (parse_uri("/local/file"),),
            ],
        )
        self.assertEqual(transport.requests[0].candidates, ("http://master:8989/ddfs/tag/t1",))

    def test_resolution_errors_propagate(self) -> None:
        url = "http://master:8989/ddfs/tag/gone"
        transport = _ScriptedTransport(Outcome(failures=(Failure(url=url, error=requests.Timeout("slow")),)))
        with self.assertRaises(TagRetrievalError):
            expand_inputs([parse_uri("tag:gone")], cfg=CFG, transport=transport)


if __name__ == "__main__":
    unittest.main()
