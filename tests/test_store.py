import pytest

from folddb.store import AppendOnlyStore, StoreEntry
from folddb.values import FieldValue


def _entry(fold_id, field_name, number, version=0):
    return StoreEntry(
        fold_id=fold_id,
        field_name=field_name,
        value=FieldValue.integer(number),
        writer_id="owner",
        version=version,
    )


def test_versions_increase_per_field():
    store = AppendOnlyStore()
    versions = [store.append(_entry("f", "val", n)) for n in (10, 20, 30)]
    assert versions == [0, 1, 2]


def test_versions_independent_per_field():
    store = AppendOnlyStore()
    store.append(_entry("f", "a", 1))
    store.append(_entry("f", "a", 2))
    assert store.append(_entry("f", "b", 3)) == 0
    assert store.append(_entry("g", "a", 4)) == 0


def test_current_is_last_write():
    store = AppendOnlyStore()
    for n in (10, 20, 30):
        store.append(_entry("f", "val", n))
    assert store.get_current("f", "val").value == FieldValue.integer(30)


def test_current_missing_is_none():
    assert AppendOnlyStore().get_current("f", "val") is None


def test_history_in_write_order():
    store = AppendOnlyStore()
    for n in (72, 150, 72):
        store.append(_entry("f", "bpm", n))
    history = store.get_history("f", "bpm")
    assert [e.value for e in history] == [FieldValue.integer(n) for n in (72, 150, 72)]
    assert [e.version for e in history] == list(range(len(history)))


def test_history_empty_for_unknown_field():
    assert AppendOnlyStore().get_history("none", "none") == ()


def test_get_version():
    store = AppendOnlyStore()
    store.append(_entry("f", "val", 1))
    store.append(_entry("f", "val", 2))
    assert store.get_version("f", "val", 0).value == FieldValue.integer(1)
    assert store.get_version("f", "val", 99) is None


def test_negative_version_rejected():
    store = AppendOnlyStore()
    store.append(_entry("f", "val", 1))
    with pytest.raises(ValueError):
        store.get_version("f", "val", -1)


def test_version_assigned_by_store_not_caller():
    store = AppendOnlyStore()
    original = _entry("f", "val", 5, version=99)
    assigned = store.append(original)
    assert store.get_current("f", "val").version == assigned
    assert original.version == 99


def test_total_entries_counts_all_fields():
    store = AppendOnlyStore()
    store.append(_entry("f", "a", 1))
    store.append(_entry("f", "a", 2))
    store.append(_entry("g", "b", 3))
    assert store.total_entries() == len(store.get_history("f", "a")) + len(
        store.get_history("g", "b")
    )
    assert AppendOnlyStore().total_entries() == 0


def test_entry_timestamp_is_timezone_aware():
    entry = _entry("f", "a", 1)
    assert entry.timestamp.utcoffset() is not None
    assert entry.timestamp.utcoffset().total_seconds() == 0