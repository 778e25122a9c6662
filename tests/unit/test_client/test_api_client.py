"""Unit tests for the requests-based API client."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
import requests

from thoughtgraph.client import api


def _response(status_code: int, body: dict) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = body
    if status_code >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status_code} error")
    return resp


def test_base_url_from_env(monkeypatch):
    monkeypatch.setenv("THOUGHTGRAPH_API_URL", "http://graph.local:9000/")
    assert api.get_base_url() == "http://graph.local:9000"

    monkeypatch.delenv("THOUGHTGRAPH_API_URL")
    assert api.get_base_url() == "http://localhost:3000"


def test_send_thought_returns_failure_payload(monkeypatch):
    monkeypatch.delenv("THOUGHTGRAPH_API_URL", raising=False)
    failed = {"error": "Invalid thoughtNumber: must be a positive integer", "status": "failed"}

    with patch("thoughtgraph.client.api.requests.post", return_value=_response(422, failed)) as post:
        assert api.send_thought({"thought": "x"}) == failed

    post.assert_called_once_with("http://localhost:3000/api/v1/thoughts", json={"thought": "x"}, timeout=30)


def test_send_thought_raises_on_server_error():
    with patch("thoughtgraph.client.api.requests.post", return_value=_response(500, {})):
        with pytest.raises(requests.HTTPError):
            api.send_thought({"thought": "x"})


def test_export_graph_passes_format():
    resp = _response(200, {})
    resp.content = b"<graphml/>"

    with patch("thoughtgraph.client.api.requests.get", return_value=resp) as get:
        assert api.export_graph("graphml") == b"<graphml/>"

    assert get.call_args.kwargs["params"] == {"format": "graphml"}
