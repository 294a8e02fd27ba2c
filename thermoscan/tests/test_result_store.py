"""
Tests for the key-value stores, the result store and the image store.
"""

from datetime import datetime, timezone

from thermoscan.infrastructure.constants.pipeline_constants import HISTORY_STORAGE_KEY
from thermoscan.infrastructure.persistence.image_store import ImageStore
from thermoscan.infrastructure.persistence.key_value_store import InMemoryKeyValueStore
from thermoscan.infrastructure.persistence.result_store import ResultStore
from thermoscan.models import KeyValueEntry
from thermoscan.schemas import AnalysisRecord, Enrichment, Hotspot


def _record(record_id, classification="Suspicious"):
    hotspots = []
    if classification == "Suspicious":
        hotspots = [Hotspot(x=30.0, y=60.0, radius=15.0, intensity=0.75)]
    return AnalysisRecord(
        id=record_id,
        created_at=datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc),
        source_image_ref=f"img-{record_id}",
        classification=classification,
        confidence=0.9,
        hotspots=hotspots,
        enrichment=Enrichment(summary="s", recommendation="r"),
    )


class FailingStore(InMemoryKeyValueStore):
    """Store whose writes always fail."""

    def set(self, key, value):
        return False


def test_load_missing_key_yields_empty_log(kv_store):
    assert ResultStore(kv_store).load() == []


def test_append_prepends_and_persists(kv_store):
    store = ResultStore(kv_store)
    store.load()

    store.append(_record("001"))
    store.append(_record("002", classification="Normal"))

    reloaded = ResultStore(kv_store).load()
    assert [record.id for record in reloaded] == ["002", "001"]
    assert reloaded[0].hotspots == []
    assert reloaded[1] == _record("001")


def test_append_replaces_record_with_same_id(kv_store):
    store = ResultStore(kv_store)
    store.append(_record("001"))
    store.append(_record("001", classification="Normal"))

    assert len(store.records) == 1
    assert store.records[0].classification == "Normal"


def test_remove_persists(kv_store):
    store = ResultStore(kv_store)
    store.append(_record("001"))
    store.append(_record("002"))

    store.remove("001")

    assert [record.id for record in ResultStore(kv_store).load()] == ["002"]
    assert store.get("001") is None
    assert store.get("002").id == "002"


def test_remove_unknown_id_is_noop(kv_store):
    store = ResultStore(kv_store)
    store.append(_record("001"))

    assert [record.id for record in store.remove("999")] == ["001"]


def test_corrupted_value_yields_empty_log(kv_store):
    kv_store.set_raw(HISTORY_STORAGE_KEY, "{not json")

    assert ResultStore(kv_store).load() == []


def test_wrong_shape_yields_empty_log(kv_store):
    kv_store.set(HISTORY_STORAGE_KEY, {"records": "nope"})

    assert ResultStore(kv_store).load() == []


def test_duplicate_ids_are_dropped_on_load(kv_store):
    store = ResultStore(kv_store)
    store.append(_record("001"))
    payload = kv_store.get(HISTORY_STORAGE_KEY, [])
    kv_store.set(HISTORY_STORAGE_KEY, payload + payload)

    assert len(ResultStore(kv_store).load()) == 1


def test_write_failure_keeps_memory_authoritative():
    store = ResultStore(FailingStore())

    store.append(_record("001"))

    assert [record.id for record in store.records] == ["001"]


def test_sql_store_round_trip(sql_store):
    assert sql_store.get("missing", "fallback") == "fallback"

    assert sql_store.set("key", {"a": [1, 2]})
    assert sql_store.get("key", None) == {"a": [1, 2]}

    assert sql_store.set("key", ["updated"])
    assert sql_store.get("key", None) == ["updated"]

    assert sql_store.delete("key")
    assert sql_store.get("key", None) is None


def test_sql_store_rejects_unserializable_value(sql_store):
    assert sql_store.set("key", {"value": object()}) is False
    assert sql_store.get("key", "default") == "default"


def test_sql_store_unparseable_row_reads_as_default(sql_store):
    with sql_store._session_factory() as session:
        session.add(KeyValueEntry(key=HISTORY_STORAGE_KEY, value="[{broken"))
        session.commit()

    assert sql_store.get(HISTORY_STORAGE_KEY, []) == []
    assert ResultStore(sql_store).load() == []


def test_result_store_over_sql_store(sql_store):
    store = ResultStore(sql_store)
    store.append(_record("001"))

    assert ResultStore(sql_store).load() == [_record("001")]


def test_image_store_round_trip(kv_store):
    images = ImageStore(kv_store)

    ref = images.save(b"\x89PNG raw bytes")

    assert images.load(ref) == b"\x89PNG raw bytes"
    images.delete(ref)
    assert images.load(ref) is None


def test_image_store_rejects_invalid_base64(kv_store):
    kv_store.set("image:broken", "***")

    assert ImageStore(kv_store).load("broken") is None
