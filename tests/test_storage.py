"""
Tests for message storage backends and backend selection.
"""

import os
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from pymongo.errors import ServerSelectionTimeoutError

from mailhog_server.errors import BackendUnavailableError, FatalConfigError
from mailhog_server.storage import factory, mongodb
from mailhog_server.storage.base import Storage
from mailhog_server.storage.factory import StorageKind, create_storage, parse_storage_kind
from mailhog_server.storage.maildir import MaildirStorage
from mailhog_server.storage.memory import InMemoryStorage
from mailhog_server.storage.models import Message, SearchKind
from mailhog_server.storage.mongodb import MongoStorage


def make_message(index: int, sender: str = "alice@example.com", to: str = "bob@example.com") -> Message:
    raw = (
        f"From: {sender}\r\n"
        f"To: {to}\r\n"
        f"Subject: Message {index}\r\n"
        "\r\n"
        f"Body number {index}\r\n"
    )
    return Message(id=f"msg-{index}@mailhog.example", sender=sender, recipients=[to], raw=raw)


def store_in_order(storage: Storage, messages: list[Message]) -> None:
    """Store messages oldest first, spacing maildir mtimes so order is stable."""
    for offset, message in enumerate(messages):
        storage.store(message)
        if isinstance(storage, MaildirStorage):
            stamp = 1_700_000_000 + offset
            os.utime(storage.path / message.id, (stamp, stamp))


@pytest.fixture(params=["memory", "maildir"])
def storage(request: pytest.FixtureRequest, tmp_path: Path) -> Storage:
    """Each local storage backend."""
    if request.param == "memory":
        return InMemoryStorage()
    return MaildirStorage(tmp_path / "maildir")


class TestMessage:
    """Message model."""

    def test_new_scopes_id_to_hostname(self) -> None:
        message = Message.new("Subject: hi\r\n\r\nbody", hostname="mx.test")

        assert message.id.endswith("@mx.test")
        assert Message.new("x", hostname="mx.test").id != message.id

    def test_headers_parsed(self) -> None:
        headers = make_message(1).headers

        assert headers["Subject"] == ["Message 1"]
        assert headers["From"] == ["alice@example.com"]

    def test_size_counts_bytes(self) -> None:
        assert Message(id="x", raw="héllo").size == 6

    @pytest.mark.parametrize(
        ("kind", "query", "expected"),
        [
            (SearchKind.FROM, "ALICE", True),
            (SearchKind.FROM, "bob", False),
            (SearchKind.TO, "bob@", True),
            (SearchKind.CONTAINING, "number 1", True),
            (SearchKind.CONTAINING, "missing", False),
        ],
    )
    def test_matches(self, kind: SearchKind, query: str, expected: bool) -> None:
        assert make_message(1).matches(kind, query) is expected


class TestLocalStorage:
    """Behaviour shared by the memory and maildir backends."""

    def test_store_and_load(self, storage: Storage) -> None:
        message = make_message(1)

        assert storage.store(message) == message.id
        loaded = storage.load(message.id)

        assert loaded is not None
        assert loaded.raw == message.raw
        assert loaded.sender == "alice@example.com"
        assert loaded.recipients == ["bob@example.com"]

    def test_load_missing(self, storage: Storage) -> None:
        assert storage.load("nope@mailhog.example") is None

    def test_list_newest_first(self, storage: Storage) -> None:
        store_in_order(storage, [make_message(i) for i in range(5)])

        ids = [m.id for m in storage.list_messages(0, 3)]

        assert ids == ["msg-4@mailhog.example", "msg-3@mailhog.example", "msg-2@mailhog.example"]
        assert [m.id for m in storage.list_messages(3, 10)] == [
            "msg-1@mailhog.example",
            "msg-0@mailhog.example",
        ]

    def test_count(self, storage: Storage) -> None:
        store_in_order(storage, [make_message(i) for i in range(3)])

        assert storage.count() == 3

    def test_search_from(self, storage: Storage) -> None:
        store_in_order(
            storage,
            [make_message(0), make_message(1, sender="carol@example.com"), make_message(2)],
        )

        page, total = storage.search(SearchKind.FROM, "Carol")

        assert total == 1
        assert [m.id for m in page] == ["msg-1@mailhog.example"]

    def test_search_to_paginates(self, storage: Storage) -> None:
        store_in_order(storage, [make_message(i) for i in range(4)])

        page, total = storage.search(SearchKind.TO, "bob", start=1, limit=2)

        assert total == 4
        assert [m.id for m in page] == ["msg-2@mailhog.example", "msg-1@mailhog.example"]

    def test_search_containing(self, storage: Storage) -> None:
        store_in_order(storage, [make_message(i) for i in range(3)])

        page, total = storage.search(SearchKind.CONTAINING, "body number 2")

        assert total == 1
        assert page[0].id == "msg-2@mailhog.example"

    def test_delete_one(self, storage: Storage) -> None:
        store_in_order(storage, [make_message(1), make_message(2)])

        assert storage.delete_one("msg-1@mailhog.example") is True
        assert storage.delete_one("msg-1@mailhog.example") is False
        assert storage.load("msg-1@mailhog.example") is None
        assert storage.count() == 1

    def test_delete_all(self, storage: Storage) -> None:
        store_in_order(storage, [make_message(i) for i in range(3)])

        storage.delete_all()

        assert storage.count() == 0
        assert storage.list_messages() == []


class TestMaildirStorage:
    """Directory-backed storage specifics."""

    def test_directory_created_on_first_write(self, tmp_path: Path) -> None:
        path = tmp_path / "maildir"
        storage = MaildirStorage(path)

        assert not path.exists()
        assert storage.count() == 0

        storage.store(make_message(1))

        assert (path / "msg-1@mailhog.example").is_file()

    def test_file_holds_raw_message(self, tmp_path: Path) -> None:
        storage = MaildirStorage(tmp_path)
        message = make_message(1)

        storage.store(message)

        assert (tmp_path / message.id).read_bytes() == message.raw.encode("utf-8")

    def test_recipients_recovered_from_cc(self, tmp_path: Path) -> None:
        storage = MaildirStorage(tmp_path)
        raw = "From: a@x.test\r\nTo: b@x.test\r\nCc: Carol <c@x.test>\r\n\r\nhi\r\n"

        storage.store(Message(id="cc@x.test", raw=raw))
        loaded = storage.load("cc@x.test")

        assert loaded is not None
        assert loaded.recipients == ["b@x.test", "c@x.test"]

    @pytest.mark.parametrize("bad_id", ["../escape", ".hidden", ""])
    def test_unsafe_ids_rejected(self, tmp_path: Path, bad_id: str) -> None:
        storage = MaildirStorage(tmp_path / "maildir")

        with pytest.raises(ValueError):
            storage.store(Message(id=bad_id, raw="x"))
        assert storage.load(bad_id) is None
        assert storage.delete_one(bad_id) is False


class TestMongoStorage:
    """MongoDB storage with a stubbed client."""

    def test_unreachable_server_raises(self) -> None:
        client = MagicMock()
        client.admin.command.side_effect = ServerSelectionTimeoutError("no servers")

        with pytest.raises(BackendUnavailableError, match="127.0.0.1:27017"):
            MongoStorage("127.0.0.1:27017", "mailhog", "messages", client=client)
        client.close.assert_not_called()

    def test_failed_ping_closes_owned_client(self, monkeypatch: pytest.MonkeyPatch) -> None:
        client_cls = MagicMock()
        client_cls.return_value.admin.command.side_effect = ServerSelectionTimeoutError("no servers")
        monkeypatch.setattr(mongodb, "MongoClient", client_cls)

        with pytest.raises(BackendUnavailableError):
            MongoStorage("127.0.0.1:27017", "mailhog", "messages", timeout_ms=100)

        client_cls.assert_called_once_with("127.0.0.1:27017", serverSelectionTimeoutMS=100, tz_aware=True)
        client_cls.return_value.close.assert_called_once()

    @pytest.mark.parametrize("uri", ["127.0.0.1:99999", "127.0.0.1:notaport"])
    def test_malformed_uri_raises(self, uri: str) -> None:
        with pytest.raises(BackendUnavailableError, match=uri):
            MongoStorage(uri, "mailhog", "messages", timeout_ms=100)

    def test_connects_and_indexes(self) -> None:
        client = MagicMock()

        MongoStorage("127.0.0.1:27017", "mailhog", "messages", client=client)

        client.admin.command.assert_called_once_with("ping")
        client["mailhog"]["messages"].create_index.assert_called_once()

    def test_store_upserts_by_id(self) -> None:
        client = MagicMock()
        storage = MongoStorage("127.0.0.1:27017", "mailhog", "messages", client=client)
        message = make_message(1)

        storage.store(message)

        collection = client["mailhog"]["messages"]
        filter_, document = collection.replace_one.call_args.args
        assert filter_ == {"_id": message.id}
        assert document["_id"] == message.id
        assert "id" not in document
        assert collection.replace_one.call_args.kwargs == {"upsert": True}

    def test_search_escapes_query(self) -> None:
        client = MagicMock()
        collection = client["mailhog"]["messages"]
        collection.find.return_value.sort.return_value.skip.return_value.limit.return_value = []
        collection.count_documents.return_value = 0
        storage = MongoStorage("127.0.0.1:27017", "mailhog", "messages", client=client)

        page, total = storage.search(SearchKind.FROM, "a.b+c")

        assert (page, total) == ([], 0)
        criteria = collection.count_documents.call_args.args[0]
        assert criteria == {"sender": {"$regex": r"a\.b\+c", "$options": "i"}}


class TestStorageFactory:
    """Backend selection."""

    def test_parse_known_kinds(self) -> None:
        assert parse_storage_kind("memory") == StorageKind.MEMORY
        assert parse_storage_kind("maildir") == StorageKind.MAILDIR
        assert parse_storage_kind("mongodb") == StorageKind.MONGODB

    def test_parse_unknown_kind(self) -> None:
        with pytest.raises(FatalConfigError, match="Invalid storage type bogus"):
            parse_storage_kind("bogus")

    @pytest.mark.parametrize("kind", ["memory", "maildir"])
    def test_local_kinds_not_substituted(self, make_settings, kind: str) -> None:
        selection = create_storage(kind, make_settings())

        assert selection.kind.value == kind
        assert not selection.substituted
        assert selection.event is None

    def test_unavailable_mongo_substituted(
        self, make_settings, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def unreachable(*args, **kwargs):
            raise BackendUnavailableError("MongoDB at 127.0.0.1:27017 unavailable: timed out")

        monkeypatch.setattr(factory, "MongoStorage", unreachable)

        selection = create_storage("mongodb", make_settings())

        assert selection.substituted
        assert selection.kind == StorageKind.MEMORY
        assert selection.requested == StorageKind.MONGODB
        assert isinstance(selection.storage, InMemoryStorage)
        assert selection.event is not None
        assert selection.event.kind == "storage_fallback"
        assert "reverting to in-memory storage" in selection.event.detail

    def test_mongo_settings_passed_through(
        self, make_settings, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        calls: list[tuple] = []

        def fake_mongo(uri, db, collection, timeout_ms):
            calls.append((uri, db, collection, timeout_ms))
            return InMemoryStorage()

        monkeypatch.setattr(factory, "MongoStorage", fake_mongo)

        selection = create_storage(
            "mongodb",
            make_settings(mongo_uri="db.test:27017", mongo_db="mh", mongo_coll="mail", mongo_timeout_ms=500),
        )

        assert calls == [("db.test:27017", "mh", "mail", 500)]
        assert selection.kind == StorageKind.MONGODB
        assert not selection.substituted
