from datetime import date

import pytest

from suite_api import readers, writers
from suite_api.store import InMemoryStore, Query, StoreError


class FailingStore(InMemoryStore):
    """Every table operation fails the way a remote store would."""

    def select(self, query):
        raise StoreError("connection refused", 503)

    def insert(self, table, values):
        raise StoreError("connection refused", 503)

    def update(self, table, values, eq):
        raise StoreError("connection refused", 503)

    def delete(self, table, eq):
        raise StoreError("connection refused", 503)


@pytest.fixture
def store():
    return InMemoryStore()


class TestReaders:
    def test_list_tasks_returns_only_that_users_rows(self, store):
        store.seed(
            "tasks",
            [
                {"title": "mine", "user_id": "u1", "created_at": "2025-01-01T00:00:00"},
                {"title": "theirs", "user_id": "u2", "created_at": "2025-01-02T00:00:00"},
                {"title": "mine too", "user_id": "u1", "created_at": "2025-01-03T00:00:00"},
            ],
        )
        result = readers.list_tasks(store, "u1")
        assert result.ok
        assert [t["title"] for t in result.data] == ["mine too", "mine"]
        assert all(t["user_id"] == "u1" for t in result.data)

    def test_list_tasks_filters_and_cap(self, store):
        store.seed(
            "tasks",
            [
                {"title": f"t{i}", "user_id": "u1", "status": "todo" if i % 2 else "completed",
                 "created_at": f"2025-01-01T00:00:{i:02d}"}
                for i in range(60)
            ],
        )
        assert len(readers.list_tasks(store, "u1").data) == readers.TASK_LIMIT
        completed = readers.list_tasks(store, "u1", status="completed", limit=100).data
        assert len(completed) == 30
        assert all(t["status"] == "completed" for t in completed)

    def test_time_entries_since_and_order(self, store):
        store.seed(
            "time_entries",
            [
                {"user_id": "u1", "date": "2025-03-01", "time_spent": 30},
                {"user_id": "u1", "date": "2025-03-05", "time_spent": 45},
                {"user_id": "u2", "date": "2025-03-06", "time_spent": 15},
            ],
        )
        rows = readers.list_time_entries(store, since=date(2025, 3, 2)).data
        assert [r["date"] for r in rows] == ["2025-03-06", "2025-03-05"]
        mine = readers.list_time_entries(store, user_id="u1", columns="time_spent").data
        assert mine == [{"time_spent": 45}, {"time_spent": 30}]

    def test_knowledge_pages_only_published_and_live(self, store):
        store.seed(
            "knowledge_pages",
            [
                {"title": "live", "is_published": True, "is_archived": False, "updated_at": "2025-01-01"},
                {"title": "draft", "is_published": False, "is_archived": False, "updated_at": "2025-01-02"},
                {"title": "old", "is_published": True, "is_archived": True, "updated_at": "2025-01-03"},
            ],
        )
        assert [p["title"] for p in readers.list_knowledge_pages(store).data] == ["live"]

    def test_message_authors_single_batched_query(self, store):
        store.seed(
            "messages",
            [
                {"channel_id": "c1", "user_id": "a", "content": "hi"},
                {"channel_id": "c2", "user_id": "b", "content": "yo"},
                {"channel_id": "c3", "user_id": "c", "content": "ignored"},
            ],
        )
        rows = readers.list_message_authors(store, ["c1", "c2"]).data
        assert sorted((r["channel_id"], r["user_id"]) for r in rows) == [("c1", "a"), ("c2", "b")]
        assert readers.list_message_authors(store, []).data == []

    def test_list_files_filters(self, store):
        store.seed(
            "files",
            [
                {"name": "a.pdf", "user_id": "u1", "project_id": "p1", "file_type": "pdf",
                 "is_archived": False, "created_at": "2025-01-01"},
                {"name": "b.png", "user_id": "u1", "project_id": "p1", "file_type": "image",
                 "is_archived": False, "created_at": "2025-01-02"},
                {"name": "c.pdf", "user_id": "u1", "project_id": "p2", "file_type": "pdf",
                 "is_archived": True, "created_at": "2025-01-03"},
                {"name": "d.pdf", "user_id": "u2", "project_id": "p1", "file_type": "pdf",
                 "is_archived": False, "created_at": "2025-01-04"},
            ],
        )

        def names(**filters):
            return [f["name"] for f in readers.list_files(store, "u1", **filters).unwrap()]

        assert names() == ["c.pdf", "b.png", "a.pdf"]
        assert names(project_id="p1") == ["b.png", "a.pdf"]
        assert names(file_type="pdf") == ["c.pdf", "a.pdf"]
        assert names(is_archived=False) == ["b.png", "a.pdf"]
        assert names(is_archived=True) == ["c.pdf"]

    def test_list_tickets_scoped_to_submitter(self, store):
        store.seed(
            "tickets",
            [
                {"subject": "old", "submitted_by": "u1", "user_id": "u2", "created_at": "2025-01-01"},
                {"subject": "new", "submitted_by": "u1", "created_at": "2025-01-02"},
                {"subject": "other", "submitted_by": "u2", "user_id": "u1", "created_at": "2025-01-03"},
            ],
        )
        assert [t["subject"] for t in readers.list_tickets(store, "u1").unwrap()] == ["new", "old"]

    @pytest.mark.parametrize(
        "reader, table, key",
        [
            (readers.list_projects, "projects", "user_id"),
            (readers.list_notifications, "notifications", "user_id"),
            (readers.list_team_members, "team_members", "user_id"),
            (readers.list_client_notes, "client_notes", "client_id"),
        ],
    )
    def test_scoped_newest_first(self, store, reader, table, key):
        store.seed(
            table,
            [
                {"id": "first", key: "k1", "created_at": "2025-01-01"},
                {"id": "foreign", key: "k2", "created_at": "2025-01-02"},
                {"id": "second", key: "k1", "created_at": "2025-01-03"},
            ],
        )
        assert [r["id"] for r in reader(store, "k1").unwrap()] == ["second", "first"]

    def test_get_returns_none_when_missing(self, store):
        result = readers.get_task(store, "nope")
        assert result.ok
        assert result.data is None

    def test_failure_is_returned_not_raised(self):
        result = readers.list_tasks(FailingStore(), "u1")
        assert result.data is None
        assert isinstance(result.error, StoreError)
        assert result.error.message == "connection refused"
        with pytest.raises(StoreError):
            result.unwrap()


class TestWriters:
    @pytest.mark.parametrize(
        "create, update, delete, table, values",
        [
            (writers.create_task, writers.update_task, writers.delete_task, "tasks", {"title": "T"}),
            (writers.create_project, writers.update_project, writers.delete_project, "projects", {"name": "P"}),
            (writers.create_client, writers.update_client, writers.delete_client, "clients", {"name": "C"}),
            (writers.create_resource, writers.update_resource, writers.delete_resource, "resources", {"name": "R"}),
            (writers.create_risk, writers.update_risk, writers.delete_risk, "risks", {"description": "D"}),
            (writers.create_ticket, writers.update_ticket, writers.delete_ticket, "tickets", {"subject": "S"}),
            (
                writers.create_file_record,
                writers.update_file_record,
                writers.delete_file_record,
                "files",
                {"name": "a.pdf"},
            ),
            (
                writers.create_client_note,
                writers.update_client_note,
                writers.delete_client_note,
                "client_notes",
                {"client_id": "c1", "content": "call back"},
            ),
            (
                writers.create_time_entry,
                writers.update_time_entry,
                writers.delete_time_entry,
                "time_entries",
                {"time_spent": 30},
            ),
        ],
    )
    def test_create_update_delete(self, store, create, update, delete, table, values):
        created = create(store, values).unwrap()
        assert created["id"]

        updated = update(store, created["id"], {"note": "changed"}).unwrap()
        assert updated["note"] == "changed"
        assert store.rows(table)[0]["note"] == "changed"

        assert delete(store, created["id"]).unwrap() is True
        assert store.rows(table) == []
        assert delete(store, created["id"]).unwrap() is False

    def test_update_missing_row_gives_none(self, store):
        assert writers.update_task(store, "missing", {"title": "x"}).unwrap() is None

    def test_time_entry_never_negative(self, store):
        entry = writers.create_time_entry(store, {"user_id": "u1", "time_spent": -15}).unwrap()
        assert entry["time_spent"] == 0

    def test_archive_is_soft(self, store):
        page = writers.create_knowledge_page(store, {"title": "p", "is_archived": False}).unwrap()
        writers.archive_knowledge_page(store, page["id"])
        assert store.rows("knowledge_pages")[0]["is_archived"] is True

    def test_archive_file_keeps_the_row(self, store):
        record = writers.create_file_record(store, {"name": "a.pdf", "user_id": "u1", "is_archived": False}).unwrap()

        archived = writers.archive_file(store, record["id"]).unwrap()

        assert archived["is_archived"] is True
        assert [f["name"] for f in readers.list_files(store, "u1", is_archived=True).unwrap()] == ["a.pdf"]
        assert writers.archive_file(store, "missing").unwrap() is None

    def test_delete_message(self, store):
        message = writers.send_message(store, "c1", "u1", "oops").unwrap()
        assert writers.delete_message(store, message["id"]).unwrap() is True
        assert readers.list_messages(store, "c1").unwrap() == []

    def test_notification_read_and_profile_update(self, store):
        store.seed("notifications", [{"id": "n1", "user_id": "u1", "read": False}])
        store.seed("profiles", [{"id": "u1", "full_name": "Ada"}])

        assert writers.mark_notification_read(store, "n1").unwrap()["read"] is True
        assert writers.update_profile(store, "u1", {"full_name": "Ada L."}).unwrap()["full_name"] == "Ada L."

    def test_send_message_defaults_type(self, store):
        channel = writers.create_channel(store, {"id": "c1", "name": "general"}).unwrap()
        assert readers.list_channels(store).unwrap() == [channel]

        message = writers.send_message(store, "c1", "u1", "hello").unwrap()
        assert message["type"] == "text"
        assert message["user_id"] == "u1"

    def test_failure_is_returned_not_raised(self):
        result = writers.create_task(FailingStore(), {"title": "T"})
        assert result.data is None
        assert result.error.message == "connection refused"


class TestInMemoryStore:
    def test_duplicate_id_is_a_store_error(self, store):
        store.insert("tasks", {"id": "t1"})
        with pytest.raises(StoreError) as exc:
            store.insert("tasks", {"id": "t1"})
        assert exc.value.status_code == 409

    def test_none_filter_matches_null(self, store):
        store.seed("resources", [{"id": 1, "current_project_id": None}, {"id": 2, "current_project_id": "p"}])
        rows = store.select(Query("resources", eq={"current_project_id": None}))
        assert [r["id"] for r in rows] == [1]
