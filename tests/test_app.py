import pytest

import app as preview
from marko_media.config import MediaOptions


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setattr(preview, "options", MediaOptions(controls=True))
    preview.app.config["TESTING"] = True
    with preview.app.test_client() as client:
        yield client


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.get_json() == {"status": "ok"}


def test_render_plain_text(client):
    response = client.post("/render", data="![Song](/song.mp3)", content_type="text/plain")
    assert response.status_code == 200
    assert response.mimetype == "text/html"
    assert response.get_data(as_text=True).startswith('<p><audio controls=""><source src="/song.mp3" />')


def test_render_json_with_references(client):
    response = client.post("/render", json={
        "markdown": "![Theme][theme]",
        "references": {"theme": {"sources": [{"href": "/theme.ogg", "type": "audio/ogg"}]}},
    })
    assert response.status_code == 200
    assert '<source src="/theme.ogg" type="audio/ogg" />' in response.get_data(as_text=True)


@pytest.mark.parametrize(
    "body",
    [
        ["not", "an", "object"],
        {"text": "![a](/a.png)"},
        {"markdown": 5},
        {"markdown": "![a][a]", "references": {"a": {"title": "no source"}}},
        {"markdown": "![a][a]", "references": ["a"]},
    ],
)
def test_render_bad_json(client, body):
    response = client.post("/render", json=body)
    assert response.status_code == 400
    assert "error" in response.get_json()


def test_render_invalid_json(client):
    response = client.post("/render", data="{markdown", content_type="application/json")
    assert response.status_code == 400


def test_not_found(client):
    response = client.get("/nothing-here")
    assert response.status_code == 404
    assert "error" in response.get_json()


def test_render_requires_post(client):
    assert client.get("/render").status_code == 405
