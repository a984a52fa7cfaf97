"""Tests for the HTTP API."""

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from lxml import etree

from samples import MALFORMED_OPML, SAMPLE_OPML
from opml2cxl.api.app import create_app
from opml2cxl.writer import CMAP_NS

NS = {"c": CMAP_NS}


@pytest.fixture
def client(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> TestClient:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("OPML2CXL_ENV_FILE", raising=False)
    return TestClient(create_app())


def test_health(client: TestClient) -> None:
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_convert_returns_cxl(client: TestClient) -> None:
    resp = client.post("/convert", content=SAMPLE_OPML, params={"linking_phrase": "has"})

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("application/xml")
    root = etree.fromstring(resp.content)
    assert len(root.findall("c:map/c:concept-list/c:concept", NS)) == 4
    phrases = root.findall("c:map/c:linking-phrase-list/c:linking-phrase", NS)
    assert {p.get("label") for p in phrases} == {"has"}


def test_convert_rejects_malformed_body(client: TestClient) -> None:
    resp = client.post("/convert", content=MALFORMED_OPML)
    assert resp.status_code == 422
    assert "not well-formed" in resp.json()["detail"]


def test_convert_rejects_control_character_phrase(client: TestClient) -> None:
    resp = client.post("/convert", content=SAMPLE_OPML, params={"linking_phrase": "is\x0bpart"})

    assert resp.status_code == 422
    assert "linking phrase" in resp.json()["detail"]


def test_convert_empty_body_is_rejected(client: TestClient) -> None:
    resp = client.post("/convert", content=b"")
    assert resp.status_code == 422
