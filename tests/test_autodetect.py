import json
import threading
from contextlib import contextmanager
from http.server import BaseHTTPRequestHandler, HTTPServer

import pytest

from otelop.autodetect import AutoDetect, Platform


@contextmanager
def _serve(status, body=None):
    class Handler(BaseHTTPRequestHandler):
        def do_GET(self):
            payload = json.dumps(body).encode("utf-8") if body is not None else b""
            self.send_response(status)
            self.send_header("Content-Type", "application/json")
            self.send_header("Content-Length", str(len(payload)))
            self.end_headers()
            self.wfile.write(payload)

        def log_message(self, *args):
            pass

    server = HTTPServer(("127.0.0.1", 0), Handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield f"http://127.0.0.1:{server.server_address[1]}"
    finally:
        server.shutdown()
        server.server_close()
        thread.join()


@pytest.mark.parametrize(
    ("body", "expected"),
    [
        ({"kind": "APIGroupList", "groups": None}, Platform.KUBERNETES),
        ({"kind": "APIGroupList", "groups": []}, Platform.KUBERNETES),
        (
            {"kind": "APIGroupList", "groups": [{"name": "route.openshift.io"}]},
            Platform.OPENSHIFT,
        ),
        (
            {"kind": "APIGroupList", "groups": [{"name": "apps"}, {"name": "batch"}]},
            Platform.KUBERNETES,
        ),
    ],
)
def test_detect_platform_based_on_available_api_groups(body, expected):
    with _serve(200, body) as url:
        detector = AutoDetect(url)
        assert detector.platform() is expected


def test_error_on_server_failure():
    with _serve(500) as url:
        detector = AutoDetect(url)
        with pytest.raises(OSError):
            detector.platform()


def test_trailing_slash_is_ignored():
    with _serve(200, {"groups": [{"name": "route.openshift.io"}]}) as url:
        assert AutoDetect(url + "/").platform() is Platform.OPENSHIFT