from datetime import datetime

import pytest

from app import storage as storage_module

from app.models import Source
from app.seed import SEED_PAGES, seed_initial_content
from app.session_manager import get_chat_history, get_or_create_session, save_message
from app.storage import DatabaseStorage, MemoryStorage


@pytest.fixture(params=["memory", "database"])
def store(request, tmp_path):
    if request.param == "memory":
        yield MemoryStorage()
    else:
        s = DatabaseStorage(f"sqlite:///{tmp_path / 'test.db'}")
        yield s
        s.close()


def test_save_content_keeps_one_row_per_url(store):
    first = store.save_content("https://campus.example/fees", "Fees", "Old fee table")
    second = store.save_content("https://campus.example/fees", "Fees 2024", "New fee table")

    assert second.id == first.id
    assert second.scraped_at >= first.scraped_at
    assert len(store.list_content()) == 1
    stored = store.get_content("https://campus.example/fees")
    assert stored.title == "Fees 2024"
    assert stored.content == "New fee table"


def test_get_content_unknown_url(store):
    assert store.get_content("https://campus.example/nope") is None


def test_messages_are_ordered_and_keep_sources(store):
    session = store.create_session()
    store.add_message(session.id, "user", "Where is the library?")
    store.add_message(
        session.id, "assistant", "Near the main gate.",
        [Source(title="Facilities", url="https://campus.example/facilities")],
    )

    messages = store.get_session_messages(session.id)
    assert [m.role for m in messages] == ["user", "assistant"]
    assert messages[0].sources is None
    assert messages[1].sources == [Source(title="Facilities", url="https://campus.example/facilities")]


def test_adding_a_message_bumps_session_updated_at(store):
    session = store.create_session()
    store.add_message(session.id, "user", "hello there")
    assert store.get_session(session.id).updated_at >= session.updated_at


def test_sessions_are_isolated(store):
    a = store.create_session()
    b = store.create_session()
    store.add_message(a.id, "user", "question for a")
    assert store.get_session_messages(b.id) == []
    assert store.get_session_messages("unknown") == []


def test_get_or_create_session(store):
    created = get_or_create_session(store, None)
    assert store.get_session(created) is not None
    assert get_or_create_session(store, created) == created

    replacement = get_or_create_session(store, "not-a-real-session")
    assert replacement != "not-a-real-session"
    assert store.get_session(replacement) is not None


def test_chat_history_returns_api_messages(store):
    session_id = get_or_create_session(store, None)
    save_message(store, session_id, "user", "What courses are offered?")
    save_message(store, session_id, "assistant", "B.Tech and M.Tech.")

    history = get_chat_history(store, session_id)
    assert [m.content for m in history] == ["What courses are offered?", "B.Tech and M.Tech."]
    assert all(m.sources is None for m in history)


def test_seed_fills_empty_store_once(store):
    assert seed_initial_content(store) == len(SEED_PAGES)
    assert seed_initial_content(store) == 0
    assert len(store.list_content()) == len(SEED_PAGES)


class FrozenDatetime(datetime):
    @classmethod
    def utcnow(cls):
        return datetime(2024, 1, 1, 12, 0, 0)


def test_messages_in_the_same_clock_tick_keep_insertion_order(tmp_path, monkeypatch):
    db_store = DatabaseStorage(f"sqlite:///{tmp_path / 'tick.db'}")
    monkeypatch.setattr(storage_module, "datetime", FrozenDatetime)
    try:
        session = db_store.create_session()
        db_store.add_message(session.id, "user", "Where is the library?")
        db_store.add_message(session.id, "assistant", "Near the main gate.")
        db_store.add_message(session.id, "user", "Opening hours?")

        messages = db_store.get_session_messages(session.id)
        assert [m.role for m in messages] == ["user", "assistant", "user"]
        assert messages[0].timestamp < messages[1].timestamp < messages[2].timestamp
    finally:
        db_store.close()


def test_concurrent_insert_of_same_url_updates_existing_row(tmp_path, monkeypatch):
    db_store = DatabaseStorage(f"sqlite:///{tmp_path / 'race.db'}")
    try:
        first = db_store.save_content("https://campus.example/fees", "Fees", "Old fee table")
        # The lookup misses, as when another request commits the URL in between
        monkeypatch.setattr(db_store, "_find_content", lambda db, url: None)

        second = db_store.save_content("https://campus.example/fees", "Fees 2024", "New fee table")

        assert second.id == first.id
        assert second.title == "Fees 2024"
        assert len(db_store.list_content()) == 1
        assert db_store.get_content("https://campus.example/fees").content == "New fee table"
    finally:
        db_store.close()
