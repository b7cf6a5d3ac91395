import pytest
from sqlalchemy import delete, text
from sqlalchemy.exc import IntegrityError

from app.core.exceptions import EntryNotFoundError, StoreError
from app.db.models import Entry
from app.db.session import EntryStore


def test_seed_entry_is_returned_after_initialize(store):
    assert store.lookup_name_by_id(0) == "Datadog"


@pytest.mark.parametrize("entry_id", [1, -1, 42])
def test_unknown_entry_raises_not_found(store, entry_id):
    with pytest.raises(EntryNotFoundError) as exc_info:
        store.lookup_name_by_id(entry_id)

    assert exc_info.value.entry_id == entry_id


def test_initialize_seeds_exactly_one_row(store):
    with store.session() as db:
        rows = db.query(Entry).all()

    assert [(row.id, row.name) for row in rows] == [(0, "Datadog")]


def test_second_initialize_fails_on_seed_insert(store):
    with pytest.raises(IntegrityError):
        store.initialize()


def test_broken_table_surfaces_store_error(store):
    with store.session() as db:
        db.execute(text("DROP TABLE entries"))
        db.commit()

    with pytest.raises(StoreError) as exc_info:
        store.lookup_name_by_id(0)

    assert not isinstance(exc_info.value, EntryNotFoundError)


def test_lock_is_released_after_failed_lookup(store):
    with store.session() as db:
        db.execute(delete(Entry))
        db.commit()

    with pytest.raises(EntryNotFoundError):
        store.lookup_name_by_id(0)

    assert store._lock.acquire(blocking=False)
    store._lock.release()


def test_session_holds_the_store_lock(store):
    with store.session():
        assert not store._lock.acquire(blocking=False)

    assert store._lock.acquire(blocking=False)
    store._lock.release()


def test_separate_stores_do_not_share_data():
    first = EntryStore()
    second = EntryStore()
    first.initialize()
    try:
        with pytest.raises(StoreError):
            second.lookup_name_by_id(0)
    finally:
        first.dispose()
        second.dispose()
