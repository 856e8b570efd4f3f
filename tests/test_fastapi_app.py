from __future__ import annotations

import base64

import pytest
from fastapi.testclient import TestClient

import openai_async_image.serve.fastapi_app as app_mod
from conftest import ImmediateLoader
from openai_async_image.common.errors import NoImagesReturned
from openai_async_image.common.templates import json_template
from openai_async_image.view.async_image import OpenAIAsyncImage


def _use_preview(monkeypatch: pytest.MonkeyPatch, loader: ImmediateLoader) -> OpenAIAsyncImage:
    preview = OpenAIAsyncImage(prompt="cat", loader=loader, tpl=json_template)
    monkeypatch.setattr(app_mod, "preview", preview)
    return preview


def test_health_ok(monkeypatch: pytest.MonkeyPatch) -> None:
    _use_preview(monkeypatch, ImmediateLoader())
    client = TestClient(app_mod.app)
    r = client.get("/health")
    assert r.status_code == 200
    data = r.json()
    assert data.get("status") == "ok"
    assert data.get("size") == "256x256"


def test_attach_and_prompt_change(monkeypatch: pytest.MonkeyPatch) -> None:
    loader = ImmediateLoader()
    preview = _use_preview(monkeypatch, loader)

    with TestClient(app_mod.app) as client:
        assert preview.attached
        r = client.get("/image", params={"wait": "true"})
        assert r.status_code == 200
        data = r.json()
        assert data["state"] == "loaded"
        assert base64.b64decode(data["image_b64"]) == b"cat"

        r = client.put("/prompt", json={"prompt": "dog"})
        assert r.status_code == 200
        r = client.get("/image", params={"wait": "true"})
        assert base64.b64decode(r.json()["image_b64"]) == b"dog"

        r = client.get("/image.png")
        assert r.status_code == 200
        assert r.content == b"dog"
        assert r.headers["content-type"] == "image/png"

    assert not preview.attached
    assert loader.calls == ["cat", "dog"]


def test_prompt_is_validated(monkeypatch: pytest.MonkeyPatch) -> None:
    _use_preview(monkeypatch, ImmediateLoader())
    with TestClient(app_mod.app) as client:
        r = client.put("/prompt", json={"prompt": ""})
        assert r.status_code == 422


def test_failed_image_is_bad_gateway(monkeypatch: pytest.MonkeyPatch) -> None:
    _use_preview(monkeypatch, ImmediateLoader(error=NoImagesReturned()))
    with TestClient(app_mod.app) as client:
        r = client.get("/image", params={"wait": "true"})
        assert r.json() == {
            "state": "failed",
            "error": "The response did not contain any images.",
            "error_type": "NoImagesReturned",
        }
        r = client.get("/image.png")
        assert r.status_code == 502
