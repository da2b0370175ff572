from __future__ import annotations

import json
import socket
import threading
from collections.abc import Iterator
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest

from pdfrecog.core.errors import HttpRequestError, RecognitionRequestError
from pdfrecog.domain.models.recognition import ExtractedDocument, ExtractedPage
from pdfrecog.infrastructure.http.connectivity import ConnectivityProbe
from pdfrecog.infrastructure.http.json_http import request_json
from pdfrecog.infrastructure.http.recognition_client import RecognitionClient


class _Handler(BaseHTTPRequestHandler):
    def do_POST(self) -> None:
        length = int(self.headers.get("Content-Length") or 0)
        body = self.rfile.read(length) if length else b""
        self.server.requests.append(  # type: ignore[attr-defined]
            {
                "method": self.command,
                "path": self.path,
                "headers": {key.lower(): value for key, value in self.headers.items()},
                "body": json.loads(body) if body else None,
            }
        )
        status, payload = self.server.response  # type: ignore[attr-defined]
        raw = payload if isinstance(payload, bytes) else json.dumps(payload).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(raw)))
        self.end_headers()
        self.wfile.write(raw)

    do_GET = do_POST

    def do_HEAD(self) -> None:
        self.send_response(self.server.head_status)  # type: ignore[attr-defined]
        self.send_header("Content-Length", "0")
        self.end_headers()

    def log_message(self, format: str, *args: object) -> None:
        return


@pytest.fixture
def server(monkeypatch: pytest.MonkeyPatch) -> Iterator[ThreadingHTTPServer]:
    for name in ("http_proxy", "HTTP_PROXY", "https_proxy", "HTTPS_PROXY", "all_proxy", "ALL_PROXY"):
        monkeypatch.delenv(name, raising=False)
    httpd = ThreadingHTTPServer(("127.0.0.1", 0), _Handler)
    httpd.requests = []  # type: ignore[attr-defined]
    httpd.response = (200, {})  # type: ignore[attr-defined]
    httpd.head_status = 200  # type: ignore[attr-defined]
    thread = threading.Thread(target=httpd.serve_forever, daemon=True)
    thread.start()
    yield httpd
    httpd.shutdown()
    httpd.server_close()


def _url(httpd: ThreadingHTTPServer, path: str = "/recognize") -> str:
    return f"http://127.0.0.1:{httpd.server_address[1]}{path}"


def _document() -> ExtractedDocument:
    return ExtractedDocument(
        pages=[ExtractedPage(width=612, height=792, text="A Study of Things")],
        total_pages=12,
        metadata={"Title": "draft.dvi"},
    )


def test_query_posts_document_and_parses_candidate(server: ThreadingHTTPServer) -> None:
    server.response = (  # type: ignore[attr-defined]
        200,
        {
            "title": "A Study of Things",
            "doi": "10.1000/things",
            "authors": [{"firstName": "Grace", "lastName": "Hopper"}],
            "year": 1952,
            "ISSN": "0000-0001",
            "type": "journal-article",
        },
    )

    result = RecognitionClient(_url(server)).query(_document())

    assert result is not None
    assert result.title == "A Study of Things"
    assert result.doi == "10.1000/things"
    assert result.year == "1952"
    assert result.issn == "0000-0001"
    assert [(a.first_name, a.last_name) for a in result.authors] == [("Grace", "Hopper")]

    request = server.requests[0]  # type: ignore[attr-defined]
    assert request["method"] == "POST"
    assert request["path"] == "/recognize"
    assert request["headers"]["content-type"] == "application/json"
    assert "authorization" not in request["headers"]
    assert request["body"] == {
        "totalPages": 12,
        "metadata": {"Title": "draft.dvi"},
        "pages": [[612, 792, "A Study of Things"]],
    }


@pytest.mark.parametrize("payload", [b"null", b"", {}])
def test_empty_response_means_no_result(server: ThreadingHTTPServer, payload: object) -> None:
    server.response = (200, payload)  # type: ignore[attr-defined]

    assert RecognitionClient(_url(server)).query(_document()) is None


@pytest.mark.parametrize("response", [(500, {"error": "boom"}), (201, {"title": "x"}), (200, b"<html>")])
def test_transport_status_and_parse_failures_are_request_errors(
    server: ThreadingHTTPServer,
    response: tuple[int, object],
) -> None:
    server.response = response  # type: ignore[attr-defined]

    with pytest.raises(RecognitionRequestError, match="Request error"):
        RecognitionClient(_url(server)).query(_document())


def test_request_json_reports_status(server: ThreadingHTTPServer) -> None:
    server.response = (404, {"message": "not found"})  # type: ignore[attr-defined]

    with pytest.raises(HttpRequestError) as excinfo:
        request_json(_url(server, "/works/10.1/x"))

    assert excinfo.value.status == 404
    assert server.requests[0]["method"] == "GET"  # type: ignore[attr-defined]


def _closed_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


def test_connectivity_probe_treats_any_http_answer_as_online(server: ThreadingHTTPServer) -> None:
    probe = ConnectivityProbe(_url(server), timeout_seconds=2.0)
    assert probe.is_offline() is False

    server.head_status = 503  # type: ignore[attr-defined]
    assert probe.is_offline() is False


def test_connectivity_probe_reports_offline_when_unreachable(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("http_proxy", "HTTP_PROXY", "all_proxy", "ALL_PROXY"):
        monkeypatch.delenv(name, raising=False)
    probe = ConnectivityProbe(f"http://127.0.0.1:{_closed_port()}/recognize", timeout_seconds=1.0)

    assert probe.is_offline() is True


def test_unreachable_recognizer_is_a_request_error(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("http_proxy", "HTTP_PROXY", "all_proxy", "ALL_PROXY"):
        monkeypatch.delenv(name, raising=False)
    client = RecognitionClient(f"http://127.0.0.1:{_closed_port()}/recognize", timeout_seconds=1.0)

    with pytest.raises(RecognitionRequestError):
        client.query(_document())
