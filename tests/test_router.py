import json
import logging

import pytest

from core.core import Core, Route, RouteKind, body_etag
from core.envelope import SECURITY_HEADERS, Request, ResponseEnvelope, json_response
from core.settings import Settings
from modules import build_core
from modules.base import BaseModule

from conftest import make_cert


def get(core, path, query=None, headers=None):
    return core.dispatch(Request("GET", path, query or {}, headers or {}))


def body(envelope):
    return json.loads(envelope.body)


class EchoModule(BaseModule):
    name = "echo"

    def build_routes(self):
        self.register_route("GET", "/echo", lambda request: json_response({"path": request.path}))
        self.register_route("GET", "/echo/", lambda request: json_response({"prefix": True}), RouteKind.PREFIX)
        self.register_route("GET", "/boom", self.boom)

    def boom(self, request):
        raise RuntimeError("secret detail")


@pytest.fixture
def echo_core():
    return Core([EchoModule()], settings=Settings(allowed_origin="https://example.org"))


def test_route_table_lookup_order(echo_core):
    assert body(get(echo_core, "/echo")) == {"path": "/echo"}
    assert body(get(echo_core, "/echo/deep/path")) == {"prefix": True}
    assert echo_core.resolve("GET", "/elsewhere") is None
    assert get(echo_core, "/elsewhere").status_code == 404


def test_duplicate_registration_rejected(echo_core):
    with pytest.raises(ValueError):
        echo_core.register_module(EchoModule())
    with pytest.raises(ValueError):
        echo_core.add_route(Route("GET", "/echo", lambda request: None))


def test_unexpected_error_becomes_generic_500(echo_core, caplog):
    with caplog.at_level(logging.ERROR, logger="certopedia.router"):
        envelope = get(echo_core, "/boom")
    assert envelope.status_code == 500
    payload = body(envelope)
    assert payload["error"] == "Internal Server Error"
    assert payload["message"] == "An unexpected error occurred"
    assert "secret detail" not in envelope.body
    assert "secret detail" in caplog.text


def test_every_response_carries_security_and_cors_headers(echo_core):
    for envelope in (get(echo_core, "/echo"), get(echo_core, "/boom"), get(echo_core, "/nope")):
        for name, value in SECURITY_HEADERS.items():
            assert envelope.headers[name] == value
        assert envelope.headers["Access-Control-Allow-Origin"] == "https://example.org"


def test_handler_headers_win_over_defaults():
    module = EchoModule()
    core = Core([module])
    module_route = Route(
        "GET",
        "/framed",
        lambda request: ResponseEnvelope(headers={"X-Frame-Options": "SAMEORIGIN"}, body="ok"),
    )
    core.add_route(module_route)
    assert get(core, "/framed").headers["X-Frame-Options"] == "SAMEORIGIN"


def test_options_short_circuits_on_any_path(core):
    for path in ("/", "/api/certs", "/no/such/thing"):
        envelope = core.dispatch(Request("OPTIONS", path))
        assert envelope.status_code == 200
        assert envelope.body == ""
        assert "Content-Type" not in envelope.headers
        assert "Cache-Control" not in envelope.headers
        assert envelope.headers["Access-Control-Max-Age"] == "86400"


@pytest.mark.parametrize("method", ["POST", "PUT", "DELETE", "patch"])
def test_other_methods_are_405(core, method):
    envelope = core.dispatch(Request(method, "/api/certs"))
    assert envelope.status_code == 405
    assert body(envelope) == {
        "error": "Method Not Allowed",
        "message": f"HTTP method {method.upper()} is not supported",
    }


def test_certs_listing(core):
    envelope = get(core, "/api/certs", {"sector": "Government", "country": "canada"})
    assert envelope.status_code == 200
    assert envelope.headers["Content-Type"] == "application/json"
    assert envelope.headers["Cache-Control"] == "public, max-age=300"
    payload = body(envelope)
    assert payload["success"] is True
    assert payload["total"] == 1
    assert payload["data"][0]["country"] == "Canada"
    assert payload["filters"] == {"sector": "Government", "country": "canada"}


@pytest.mark.parametrize("path", ["/api", "/api/", "/api/certs"])
def test_api_root_aliases_list_certs(core, path):
    assert body(get(core, path))["total"] == 4


def test_government_example(tmp_path, asset_root):
    data = tmp_path / "two.json"
    data.write_text(
        json.dumps([make_cert("Canada", "CCCS", sector="Government"), make_cert("Japan", "JPCERT")]),
        encoding="utf-8",
    )
    core = build_core(Settings(static_root=asset_root, data_file=data))
    payload = body(get(core, "/api/certs", {"sector": "Government"}))
    assert payload["total"] == 1
    assert [cert["country"] for cert in payload["data"]] == ["Canada"]


def test_stats_countries_sectors(core):
    assert body(get(core, "/api/stats"))["data"]["totalCountries"] == 3
    countries = body(get(core, "/api/countries"))["data"]
    assert [item["name"] for item in countries] == ["Canada", "Germany", "Japan"]
    sectors = body(get(core, "/api/sectors"))["data"]
    assert sectors[0] == {
        "name": "Government",
        "count": 3,
        "certs": [
            {"name": "CCCS", "country": "Canada"},
            {"name": "CERT-Bund", "country": "Germany"},
            {"name": "NISC", "country": "Japan"},
        ],
    }


def test_health(core, monkeypatch):
    envelope = get(core, "/api/health")
    assert envelope.headers["Cache-Control"] == "no-cache"
    payload = body(envelope)
    assert payload["success"] is True
    assert payload["status"] == "healthy"
    assert payload["version"] == "1.0"
    assert payload["dataStatus"]["certsLoaded"] == 4
    assert payload["dataStatus"]["lastUpdate"] == 1719748800000
    assert payload["checks"]["dataFile"]["status"] == "ok"
    assert payload["checks"]["memory"]["rssMb"] >= 0


def test_unknown_api_path_is_json_404(core):
    envelope = get(core, "/api/unknown")
    assert envelope.status_code == 404
    assert body(envelope) == {"error": "Not Found", "message": "API endpoint /unknown not found"}
    assert get(core, "/api/certs/").status_code == 404


def test_static_paths_go_to_resolver(core):
    envelope = get(core, "/img/logo.png")
    assert envelope.is_binary is True
    assert envelope.headers["Cache-Control"] == "public, max-age=31536000, immutable"
    fallback = get(core, "/some/client/route")
    assert fallback.status_code == 200
    assert fallback.headers["Cache-Control"] == "no-cache, no-store, must-revalidate"
    assert fallback.headers["Access-Control-Allow-Origin"] == "https://cert.danieloo.com"


def test_data_unavailable_is_500_and_recovers(core, data_file, certs, caplog):
    data_file.unlink()
    envelope = get(core, "/api/stats")
    assert envelope.status_code == 500
    assert body(envelope) == {"error": "Data Unavailable", "message": "CERT data could not be loaded"}
    # Static content is unaffected.
    assert get(core, "/").status_code == 200

    data_file.write_text(json.dumps(certs), encoding="utf-8")
    assert get(core, "/api/stats").status_code == 200


def test_etag_and_conditional_get(core):
    first = get(core, "/api/countries")
    etag = first.headers["ETag"]
    assert etag == body_etag(first.body)
    second = get(core, "/api/countries", headers={"if-none-match": etag})
    assert second.status_code == 304
    assert second.body == ""
    assert second.headers["ETag"] == etag
    assert "Content-Type" not in second.headers


def test_html_responses_have_no_etag(core):
    assert "ETag" not in get(core, "/").headers
