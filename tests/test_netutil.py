import ipaddress
import json
import socket
import threading
from http.server import BaseHTTPRequestHandler, HTTPServer

import pytest

from mediaconf.netutil import external_auth, ip_equal_or_in_range
from mediaconf.params import parse_ips_or_cidrs


def test_ip_equal():
    entries = parse_ips_or_cidrs(["192.168.1.5"])
    assert ip_equal_or_in_range("192.168.1.5", entries) is True
    assert ip_equal_or_in_range("192.168.1.6", entries) is False


def test_ip_in_network():
    entries = parse_ips_or_cidrs(["10.0.0.0/8"])
    assert ip_equal_or_in_range(ipaddress.ip_address("10.20.30.40"), entries) is True
    assert ip_equal_or_in_range("11.0.0.1", entries) is False


def test_ipv4_mapped_matches():
    entries = parse_ips_or_cidrs(["127.0.0.1", "172.16.0.0/12"])
    assert ip_equal_or_in_range("::ffff:127.0.0.1", entries) is True
    assert ip_equal_or_in_range("::ffff:172.17.0.1", entries) is True


def test_ipv6_entries():
    entries = parse_ips_or_cidrs(["fd00::/8"])
    assert ip_equal_or_in_range("fd12::1", entries) is True
    assert ip_equal_or_in_range("10.0.0.1", entries) is False


def test_invalid_or_missing_ip_matches_nothing():
    entries = parse_ips_or_cidrs(["0.0.0.0/0"])
    assert ip_equal_or_in_range("not-an-ip", entries) is False
    assert ip_equal_or_in_range(None, entries) is False
    assert ip_equal_or_in_range("1.2.3.4", []) is False


@pytest.fixture
def auth_server():
    state = {"status": 200, "bodies": [], "content_types": []}

    class Handler(BaseHTTPRequestHandler):
        def do_POST(self):
            length = int(self.headers.get("Content-Length") or 0)
            state["bodies"].append(self.rfile.read(length))
            state["content_types"].append(self.headers.get("Content-Type"))
            self.send_response(state["status"])
            self.send_header("Content-Length", "0")
            self.end_headers()

        def log_message(self, *args):
            pass

    server = HTTPServer(("127.0.0.1", 0), Handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    state["url"] = f"http://127.0.0.1:{server.server_address[1]}/auth"
    yield state
    server.shutdown()
    server.server_close()
    thread.join()


def test_external_auth_sends_request(auth_server):
    password = "password"
    external_auth(auth_server["url"], "1.2.3.4", "user", password, "mypath", True, "a=b")
    body = json.loads(auth_server["bodies"][0])
    assert body == {
        "ip": "1.2.3.4",
        "user": "user",
        "password": password,
        "path": "mypath",
        "action": "publish",
        "query": "a=b",
    }
    assert list(body) == ["ip", "user", "password", "path", "action", "query"]
    assert auth_server["content_types"] == ["application/json"]


def test_external_auth_read_action(auth_server):
    auth_server["status"] = 204
    external_auth(auth_server["url"], "5.6.7.8", "", "", "cam", False, "")
    assert json.loads(auth_server["bodies"][0])["action"] == "read"


@pytest.mark.parametrize("status", [401, 403, 500])
def test_external_auth_bad_status(auth_server, status):
    auth_server["status"] = status
    with pytest.raises(PermissionError, match=f"bad status code: {status}"):
        external_auth(auth_server["url"], "1.2.3.4", "", "", "cam", False, "")


def test_external_auth_unreachable():
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        port = sock.getsockname()[1]
    with pytest.raises(OSError):
        external_auth(f"http://127.0.0.1:{port}/auth", "1.2.3.4", "", "", "cam", False, "")