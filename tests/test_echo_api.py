import asyncio
import json
import logging
from datetime import datetime

from echo_app.main import create_app

ECHO_FIELDS = {"method", "url", "headers", "body", "time"}


def _parse_time(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def test_get_with_query_and_header(client):
    response = client.get("/hello?x=1", headers={"X-Test": "abc"})

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/json"
    payload = response.json()
    assert set(payload) == ECHO_FIELDS
    assert payload["method"] == "GET"
    assert payload["url"] == "/hello?x=1"
    assert payload["headers"]["x-test"] == "abc"
    assert payload["body"] == ""


def test_post_body_is_echoed_verbatim(client):
    response = client.post("/submit", content=b'{"a":1}', headers={"Content-Type": "application/json"})

    payload = response.json()
    assert payload["method"] == "POST"
    assert payload["url"] == "/submit"
    assert payload["body"] == '{"a":1}'
    assert payload["headers"]["content-type"] == "application/json"


def test_response_is_pretty_printed_in_field_order(client):
    response = client.put("/items/7", content=b"hello")

    text = response.text
    assert text.startswith('{\n  "method": "PUT"')
    assert list(json.loads(text)) == ["method", "url", "headers", "body", "time"]


def test_every_standard_method_is_echoed(client):
    for method in ("GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "TRACE", "CONNECT"):
        response = client.request(method, "/anything")
        assert response.status_code == 200
        assert response.json()["method"] == method


def test_head_gets_json_content_type(client):
    response = client.head("/anything")

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/json"


def _call_asgi(method: str, path: str = "/", body: bytes = b""):
    """Drive the app with a hand-built scope; httpx would upper-case the method."""

    app = create_app()
    messages = []
    pending = [{"type": "http.request", "body": body, "more_body": False}]

    async def receive():
        if pending:
            return pending.pop(0)
        return {"type": "http.disconnect"}

    async def send(message):
        messages.append(message)

    scope = {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": method,
        "scheme": "http",
        "path": path,
        "raw_path": path.encode("latin-1"),
        "query_string": b"",
        "root_path": "",
        "headers": [(b"host", b"testserver")],
        "client": ("127.0.0.1", 50000),
        "server": ("testserver", 80),
    }
    asyncio.run(app(scope, receive, send))

    start = next(message for message in messages if message["type"] == "http.response.start")
    payload = b"".join(message.get("body", b"") for message in messages if message["type"] == "http.response.body")
    headers = {name.decode("latin-1"): value.decode("latin-1") for name, value in start["headers"]}
    return start["status"], headers, payload


def test_lower_case_method_is_preserved():
    status, headers, payload = _call_asgi("get", "/hello")

    assert status == 200
    assert headers["content-type"] == "application/json"
    assert json.loads(payload)["method"] == "get"


def test_extension_method_is_echoed():
    status, _, payload = _call_asgi("PROPFIND", "/dav/file.txt", body=b"<propfind/>")

    assert status == 200
    record = json.loads(payload)
    assert record["method"] == "PROPFIND"
    assert record["url"] == "/dav/file.txt"
    assert record["body"] == "<propfind/>"


def test_head_through_asgi_is_answered():
    status, headers, _ = _call_asgi("HEAD", "/anything")

    assert status == 200
    assert headers["content-type"] == "application/json"


def test_root_and_docs_paths_are_echoed(client):
    for path in ("/", "/docs", "/openapi.json", "/health"):
        response = client.get(path)
        assert response.status_code == 200
        assert response.json()["url"] == path


def test_url_is_not_normalized(client):
    response = client.get("/a%20b/c?q=hello%20world&empty=")

    assert response.json()["url"] == "/a%20b/c?q=hello%20world&empty="


def test_repeated_headers_become_a_list(client):
    response = client.get("/", headers=[("X-Dup", "one"), ("X-Dup", "two")])

    assert response.json()["headers"]["x-dup"] == ["one", "two"]


def test_non_utf8_body_is_replaced(client):
    response = client.post("/bin", content=b"ok\xff")

    assert response.json()["body"] == "ok\ufffd"


def test_time_is_iso8601_and_non_decreasing(client):
    first = client.get("/one").json()["time"]
    second = client.get("/two").json()["time"]

    assert first.endswith("Z")
    assert _parse_time(first) <= _parse_time(second)


def test_request_is_logged(client, caplog):
    caplog.set_level(logging.INFO, logger="echo_app")

    client.post("/logged", content=b"payload")

    messages = [record.getMessage() for record in caplog.records if record.name.startswith("echo_app")]
    assert any(message.startswith("--- request ---\n") and '"url": "/logged"' in message for message in messages)


def test_echo_route_is_undocumented_catch_all():
    from echo_app.api.echo import AnyMethodRoute, router

    (route,) = router.routes
    assert isinstance(route, AnyMethodRoute)
    assert route.include_in_schema is False
    assert route.summary is None
    assert any(isinstance(app_route, AnyMethodRoute) for app_route in create_app().routes)
