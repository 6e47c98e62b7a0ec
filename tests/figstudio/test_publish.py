import pytest
import requests

import figstudio
import figstudio.plot as Plot
import figstudio.publish as publish_module
from figstudio.errors import (
    AuthenticationError,
    ConfigurationError,
    NetworkError,
    PublishError,
)
from figstudio.publish import HostedFigure, fetch_figure, publish
from figstudio.util import CONFIG


class FakeResponse:
    def __init__(self, status_code=201, body=None, text=""):
        self.status_code = status_code
        self._body = body
        self.text = text
        self.reason = "Reason"

    def json(self):
        if self._body is None:
            raise ValueError("No JSON object could be decoded")
        return self._body


@pytest.fixture
def credentials(monkeypatch):
    monkeypatch.setitem(CONFIG, "username", "alice")
    monkeypatch.setitem(CONFIG, "api_key", "secret-key")
    monkeypatch.setitem(CONFIG, "domain", "https://plots.example.com/")


@pytest.fixture
def calls(monkeypatch):
    """Record outgoing requests and answer with the queued responses."""
    recorded = []
    responses = []

    def fake_request(method, url, timeout=None, **kwargs):
        recorded.append({"method": method, "url": url, "timeout": timeout, **kwargs})
        response = responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    monkeypatch.setattr(publish_module.requests, "request", fake_request)
    return recorded, responses


def chart():
    return Plot.chart(x=[1, 2, 3], y=[3, 1, 2]) + Plot.title("Hosted")


def test_publish_posts_figure(credentials, calls):
    recorded, responses = calls
    responses.append(
        FakeResponse(
            201,
            {
                "file": {
                    "web_url": "https://plots.example.com/~alice/1/",
                    "fid": "alice:1",
                    "filename": "demo",
                }
            },
        )
    )

    hosted = publish(chart(), filename="demo")

    assert hosted == HostedFigure("https://plots.example.com/~alice/1/", "alice:1", "demo")
    assert str(hosted) == hosted.url
    (call,) = recorded
    assert call["method"] == "POST"
    assert call["url"] == "https://plots.example.com/v2/plots"
    assert call["timeout"] == CONFIG["timeout"]
    assert call["auth"] == ("alice", "secret-key")
    assert call["headers"]["plotly-client-platform"].endswith(figstudio.__version__)
    payload = call["json"]
    assert payload["filename"] == "demo"
    assert payload["world_readable"] is True
    assert payload["fileopt"] == "overwrite"
    assert payload["figure"] == chart().to_figure()


def test_publish_from_item_method(credentials, calls):
    recorded, responses = calls
    responses.append(FakeResponse(200, {"file": {"web_url": "https://x/1", "fid": "a:1"}}))
    hosted = chart().publish(sharing="private", fileopt="new", timeout=5)
    assert hosted.url == "https://x/1"
    assert hosted.filename is None
    assert recorded[0]["json"]["world_readable"] is False
    assert recorded[0]["json"]["fileopt"] == "new"
    assert "filename" not in recorded[0]["json"]
    assert recorded[0]["timeout"] == 5


def test_publish_secret_appends_share_key(credentials, calls):
    recorded, responses = calls
    responses.append(
        FakeResponse(201, {"file": {"web_url": "https://x/1", "fid": "a:1", "share_key": "abc"}})
    )
    hosted = publish(chart(), sharing="secret")
    assert hosted.url == "https://x/1?share_key=abc"
    assert recorded[0]["json"]["share_key_enabled"] is True
    assert recorded[0]["json"]["world_readable"] is False


def test_publish_accepts_figure_dicts(credentials, calls):
    recorded, responses = calls
    responses.append(FakeResponse(201, {"file": {"web_url": "https://x/1", "fid": "a:1"}}))
    publish({"data": [], "layout": {}}, username="bob", api_key="k", domain="https://other")
    assert recorded[0]["url"] == "https://other/v2/plots"
    assert recorded[0]["auth"] == ("bob", "k")


def test_publish_requires_credentials(monkeypatch, calls):
    recorded, _ = calls
    monkeypatch.setitem(CONFIG, "username", None)
    monkeypatch.setitem(CONFIG, "api_key", None)
    with pytest.raises(AuthenticationError):
        publish(chart())
    assert recorded == []


def test_publish_validates_arguments(credentials, calls):
    recorded, _ = calls
    with pytest.raises(ConfigurationError):
        publish(chart(), sharing="friends")
    with pytest.raises(ConfigurationError):
        publish(chart(), fileopt="append")
    assert recorded == []


def test_refused_credentials(credentials, calls):
    _, responses = calls
    responses.append(FakeResponse(401, {"errors": [{"message": "Invalid API key"}]}))
    with pytest.raises(AuthenticationError) as exc:
        publish(chart())
    assert exc.value.status_code == 401
    assert "Invalid API key" in str(exc.value)
    assert isinstance(exc.value, PublishError)


def test_server_error(credentials, calls):
    _, responses = calls
    responses.append(FakeResponse(500, None, text="Internal Server Error"))
    with pytest.raises(PublishError) as exc:
        publish(chart())
    assert exc.value.status_code == 500
    assert exc.value.context["status_code"] == 500
    assert not isinstance(exc.value, AuthenticationError)


def test_malformed_response(credentials, calls):
    _, responses = calls
    responses.append(FakeResponse(201, None, text="<html>"))
    with pytest.raises(PublishError):
        publish(chart())

    responses.append(FakeResponse(201, {"file": {}}))
    with pytest.raises(PublishError):
        publish(chart())


def test_timeout(credentials, calls):
    recorded, responses = calls
    responses.append(requests.exceptions.Timeout("slow"))
    with pytest.raises(NetworkError) as exc:
        publish(chart(), timeout=0.1)
    assert "timed out" in str(exc.value)
    assert len(recorded) == 1


def test_connection_error_is_not_retried(credentials, calls):
    recorded, responses = calls
    responses.append(requests.exceptions.ConnectionError("refused"))
    with pytest.raises(NetworkError):
        publish(chart())
    assert len(recorded) == 1


def test_fetch_figure(credentials, calls):
    recorded, responses = calls
    responses.append(FakeResponse(200, {"data": [{"type": "bar"}], "layout": {"width": 10}}))
    fig = fetch_figure("alice:1")
    assert fig == {"data": [{"type": "bar"}], "layout": {"width": 10}}
    assert recorded[0]["method"] == "GET"
    assert recorded[0]["url"] == "https://plots.example.com/v2/plots/alice:1/content"
    assert recorded[0]["params"] == {"inline_data": "true"}

    responses.append(FakeResponse(200, {"detail": "nope"}))
    with pytest.raises(PublishError):
        fetch_figure("alice:1")
