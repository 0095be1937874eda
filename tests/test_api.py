from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

import importlib.util
import io
import json

import pytest

from core.http import IntakeHttpRequest


def _load(name):
    spec = importlib.util.spec_from_file_location(f"vercel_{name}", ROOT / "api" / f"{name}.py")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def index(monkeypatch):
    module = _load("index")
    monkeypatch.setattr(module, "load_dotenv_files", lambda: None)
    cached = module.get_intake_handler
    cached.cache_clear()
    yield module
    cached.cache_clear()


@pytest.fixture
def ping():
    return _load("ping")


def test_ping_reports_route_and_method(ping):
    response = ping.ping({"method": "HEAD", "path": "/api/ping"})

    assert response["statusCode"] == 200
    assert json.loads(response["body"]) == {"ok": True, "route": "/api/ping", "method": "HEAD"}


def test_dispatch_builds_handler_from_environment(index, monkeypatch):
    monkeypatch.setenv("HCAPTCHA_SECRET", "hc")
    monkeypatch.setenv("INTAKE_TEST_MODE", "1")

    response = index.dispatch({"method": "GET", "path": "/api/astrology-intake"})

    assert response["statusCode"] == 200
    assert json.loads(response["body"])["ok"] is True
    assert index.get_intake_handler() is index.get_intake_handler()


def test_dispatch_reports_startup_failure_as_json(index, monkeypatch):
    monkeypatch.delenv("HCAPTCHA_SECRET", raising=False)

    response = index.dispatch({"method": "POST", "path": "/", "headers": {"Origin": "https://a.example"}})

    assert response["statusCode"] == 500
    assert json.loads(response["body"]) == {"ok": False, "error": "Server error."}
    assert response["headers"]["Access-Control-Allow-Origin"] == "https://a.example"


@pytest.mark.parametrize("method, status", [("GET", 200), ("OPTIONS", 204)])
def test_preflight_and_health_answer_without_configuration(index, monkeypatch, method, status):
    monkeypatch.delenv("HCAPTCHA_SECRET", raising=False)

    response = index.dispatch({"method": method, "path": "/api/astrology-intake"})

    assert response["statusCode"] == status
    assert response["headers"]["Access-Control-Allow-Origin"] == "*"


def test_patched_handler_is_restored_after_test(index, monkeypatch, make_handler):
    monkeypatch.setattr(index, "get_intake_handler", lambda: make_handler())

    assert index.dispatch({"method": "DELETE", "path": "/"})["statusCode"] == 405


def test_dispatch_posts_dict_event_through_pipeline(index, monkeypatch, make_handler, valid_fields, mailer):
    monkeypatch.setattr(index, "get_intake_handler", lambda: make_handler())

    event = {
        "method": "POST",
        "path": "/api/astrology-intake",
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(valid_fields),
    }
    response = index.dispatch(event)

    assert response["statusCode"] == 200
    assert len(mailer.sent) == 1


def test_dispatch_accepts_pre_parsed_body(index, monkeypatch, make_handler, valid_fields, mailer):
    monkeypatch.setattr(index, "get_intake_handler", lambda: make_handler())

    response = index.dispatch({"method": "POST", "path": "/", "body": valid_fields})

    assert response["statusCode"] == 200
    assert len(mailer.sent) == 1


class FakeHandlerRequest:
    """Just enough of BaseHTTPRequestHandler for the request adapter."""

    def __init__(self, command, path, headers, body=b""):
        self.command = command
        self.path = path
        self.headers = headers
        self.rfile = io.BytesIO(body)


def test_request_adapter_reads_handler_style_requests(valid_fields):
    body = json.dumps(valid_fields).encode()
    fake = FakeHandlerRequest(
        "POST",
        "/apps/reading?shop=s.myshopify.com&signature=abc",
        {"Content-Type": "application/json", "Content-Length": str(len(body)), "X-Forwarded-For": "203.0.113.7, 10.0.0.1"},
        body,
    )
    req = IntakeHttpRequest.from_event(fake)

    assert req.method == "POST"
    assert req.path == "/apps/reading"
    assert req.query == [("shop", "s.myshopify.com"), ("signature", "abc")]
    assert req.content_type == "application/json"
    assert req.remote_ip == "203.0.113.7"
    assert req.body == body


def test_request_adapter_handles_base64_dict_events():
    import base64

    event = {
        "httpMethod": "post",
        "path": "/x",
        "queryStringParameters": {"shop": "s.myshopify.com", "ids": ["1", "2"]},
        "body": base64.b64encode(b"q=hi").decode(),
        "isBase64Encoded": True,
    }
    req = IntakeHttpRequest.from_event(event)

    assert req.method == "POST"
    assert req.body == b"q=hi"
    assert req.query_value("ids") == "1,2"


def _serve(handler_cls, command, headers=None):
    """Run one request through a Vercel handler class without a socket."""
    h = handler_cls.__new__(handler_cls)
    h.command = command
    h.path = "/api/astrology-intake"
    h.request_version = "HTTP/1.1"
    h.requestline = f"{command} {h.path} HTTP/1.1"
    h.client_address = ("127.0.0.1", 0)
    h.headers = headers or {}
    h.rfile = io.BytesIO(b"")
    h.wfile = io.BytesIO()
    getattr(h, f"do_{command}")()
    return h.wfile.getvalue()


def test_head_gets_method_not_allowed_with_cors(index, monkeypatch, make_handler):
    monkeypatch.setattr(index, "get_intake_handler", lambda: make_handler())

    raw = _serve(index.handler, "HEAD", {"Origin": "https://shop.example"})
    head, _, body = raw.partition(b"\r\n\r\n")

    assert head.split(b" ", 2)[1] == b"405"
    assert b"Access-Control-Allow-Origin: https://shop.example" in head
    assert body == b""


@pytest.mark.parametrize("command", ["HEAD", "PUT", "DELETE"])
def test_ping_handler_answers_every_method(ping, command):
    raw = _serve(ping.handler, command)
    head, _, body = raw.partition(b"\r\n\r\n")

    assert head.split(b" ", 2)[1] == b"200"
    if command == "HEAD":
        assert body == b""
    else:
        assert json.loads(body)["method"] == command
