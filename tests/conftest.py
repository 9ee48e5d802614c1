import json

import pytest

from core.cache import TTLCache
from core.settings import Settings
from modules import build_core


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_cert(country, name, sector="National", pgp=None, **overrides):
    cert = {
        "country": country,
        "name": name,
        "fullName": f"{name} Computer Emergency Response Team",
        "website": f"https://{name.lower()}.example",
        "emergencyContact": "+1 555 0100",
        "email": f"incident@{name.lower()}.example",
        "established": 2005,
        "description": f"National incident response for {country}.",
        "sector": sector,
        "verified": True,
        "lastUpdated": "2024-01-15",
        "pgpKey": pgp or {"available": False},
    }
    cert.update(overrides)
    return cert


@pytest.fixture
def certs():
    return [
        make_cert("Canada", "CCCS", sector="Government", lastUpdated="2024-03-01"),
        make_cert(
            "Germany",
            "CERT-Bund",
            sector="Government",
            pgp={"available": True, "keyId": "0x1234ABCD", "fingerprint": "AAAA BBBB"},
        ),
        make_cert("Japan", "JPCERT", pgp={"available": True, "keyId": "0xBEEF"}, lastUpdated="2024-06-30T12:00:00Z"),
        make_cert("Japan", "NISC", sector="Government"),
    ]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def data_file(tmp_path, certs):
    path = tmp_path / "data" / "certs.json"
    path.parent.mkdir()
    path.write_text(json.dumps(certs), encoding="utf-8")
    return path


@pytest.fixture
def asset_root(tmp_path):
    root = tmp_path / "dist"
    (root / "css").mkdir(parents=True)
    (root / "img").mkdir()
    (root / "index.html").write_text("<html><title>CERTopedia</title></html>", encoding="utf-8")
    (root / "css" / "style.css").write_text("body { color: #222; }", encoding="utf-8")
    (root / "img" / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\n\x00\x01\x02")
    (root / "data.json").write_text('{"ok": true}', encoding="utf-8")
    (root / "font.bin").write_bytes(b"\x00\xff")
    return root


@pytest.fixture
def settings(data_file, asset_root):
    return Settings(static_root=asset_root, data_file=data_file)


@pytest.fixture
def core(settings):
    return build_core(settings)


@pytest.fixture
def static_cache(clock):
    return TTLCache(300, clock=clock, name="static")


@pytest.fixture
def data_cache(clock):
    return TTLCache(600, clock=clock, name="dataset")
