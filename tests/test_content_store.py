import json
import logging

import pytest

from core.errors import DataUnavailableError, DatasetValidationError
from modules.content_store import DATASET_KEY, ContentStore

from conftest import make_cert


def test_records_are_loaded_and_cached(data_file, data_cache, clock, certs):
    store = ContentStore(data_file, data_cache)
    first = store.records()
    assert [record.country for record in first] == ["Canada", "Germany", "Japan", "Japan"]

    data_file.write_text(json.dumps(certs[:1]), encoding="utf-8")
    clock.advance(599)
    assert store.records() is first

    clock.advance(1)
    refreshed = store.records()
    assert len(refreshed) == 1
    assert len(first) == 4


def test_missing_file_is_data_unavailable_and_retried(tmp_path, data_cache, certs):
    path = tmp_path / "certs.json"
    store = ContentStore(path, data_cache)
    with pytest.raises(DataUnavailableError):
        store.records()
    assert data_cache.get(DATASET_KEY) is None

    path.write_text(json.dumps(certs), encoding="utf-8")
    assert len(store.records()) == 4


@pytest.mark.parametrize("content", ["{not json", '{"country": "Canada"}', "[]"])
def test_unusable_files_raise(tmp_path, data_cache, content):
    path = tmp_path / "certs.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(DataUnavailableError):
        ContentStore(path, data_cache).records()


def test_strict_store_fails_closed(tmp_path, data_cache, certs, caplog):
    path = tmp_path / "certs.json"
    certs[1]["verified"] = False
    path.write_text(json.dumps(certs), encoding="utf-8")
    store = ContentStore(path, data_cache)
    with caplog.at_level(logging.WARNING, logger="certopedia.data"):
        with pytest.raises(DatasetValidationError) as excinfo:
            store.records()
    assert [item.field for item in excinfo.value.violations] == ["verified"]
    assert "dataset_validation_failed" in caplog.text


def test_lenient_store_serves_valid_records(tmp_path, data_cache, certs):
    path = tmp_path / "certs.json"
    certs[1]["sector"] = "Military"
    certs.append(make_cert("Austria", "CERT.at"))
    path.write_text(json.dumps(certs), encoding="utf-8")
    snapshot = ContentStore(path, data_cache, strict=False).snapshot()
    # Germany is dropped; Austria is out of order but valid on its own.
    assert [record.name for record in snapshot.records] == ["CCCS", "JPCERT", "NISC", "CERT.at"]
    assert {item.field for item in snapshot.violations} == {"sector", "country"}


def test_file_status(data_file, data_cache, tmp_path):
    status = ContentStore(data_file, data_cache).file_status()
    assert status["status"] == "ok"
    assert status["size"] == data_file.stat().st_size
    assert status["lastModified"].endswith("Z")

    missing = ContentStore(tmp_path / "nope.json", data_cache).file_status()
    assert missing["status"] == "error"
