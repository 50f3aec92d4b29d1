"""
Tests for audit logging: entry building, both storage backends, queries
and the registry observer.
"""

import re
from datetime import datetime, timedelta, timezone

import pytest

from inscribe.audit import (
    AuditLogger,
    FileAuditStorage,
    SQLiteAuditStorage,
    build_entry,
    file_history,
    recent_activity,
    session_activity,
    truncate_content,
    warning_entries,
)
from inscribe.audit.storage import TRUNCATION_MARKER
from inscribe.exceptions import PatternNotFoundError
from inscribe.registry import DispatchContext, EffectRegistry
from inscribe.schemas import WriteArgs


T0 = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _entry(key="write", path="/p/src/a.clj", status="ok", session_id=None, ts=T0, hints=None):
    entry = build_entry(
        key,
        {"path": path, "content": "x"},
        {"path": path, "status": status, "hints": hints or []},
        session_id=session_id,
    )
    return entry.model_copy(update={"ts": ts})


@pytest.fixture(params=["file", "sqlite"])
def storage(request, tmp_path):
    if request.param == "file":
        return FileAuditStorage(tmp_path / "audit" / "audit.jsonl")
    return SQLiteAuditStorage(tmp_path / "audit" / "audit.db")


class TestBuildEntry:
    """Tests for entry construction."""

    def test_truncate_content(self):
        assert truncate_content("abc", 5) == "abc"
        assert truncate_content("abcdef", 3) == "abc" + TRUNCATION_MARKER
        assert truncate_content(None, 3) is None

    def test_long_content_is_truncated(self):
        entry = build_entry("write", {"path": "/p/f", "content": "x" * 2000}, {"status": "ok"})

        assert entry.effect_args["content"] == "x" * 1000 + TRUNCATION_MARKER
        assert entry.file_path == "/p/f"
        assert entry.status == "ok"

    def test_model_arguments_and_results(self, facade, temp_project):
        path = str(temp_project / "src" / "app" / "core.clj")
        args = WriteArgs(path=path, content="(ns app.core)\n")
        result = facade.write(args.path, args.content)

        entry = build_entry("write", args, result, content_limit=5, session_id="s-1")

        assert entry.effect_args["content"] == "(ns a" + TRUNCATION_MARKER
        assert entry.result["module"] == {"identifiers": ["app.core"], "kind": "clojure"}
        assert entry.file_path == path
        assert entry.session_id == "s-1"
        assert entry.hints == []
        assert entry.ts.tzinfo is not None

    def test_regex_arguments_become_text(self):
        entry = build_entry("replace", {"path": "/p/f", "find": re.compile(r"a+"), "replacement": "b"}, None)
        assert entry.effect_args["find"] == "a+"
        assert entry.status == "unknown"

    def test_bare_path_argument(self):
        entry = build_entry("read-meta", "/p/src/a.clj", {"exists": False})
        assert entry.file_path == "/p/src/a.clj"


class TestStorage:
    """Behaviour shared by the JSON-lines and SQLite backends."""

    def test_empty_storage(self, storage):
        assert storage.query() == []

    def test_append_and_query_round_trip(self, storage):
        entry = _entry(session_id="s-1")
        storage.append(entry)

        [stored] = storage.query()

        assert stored.id == entry.id
        assert stored.ts == T0
        assert stored.effect_key == "write"
        assert stored.effect_args == {"path": "/p/src/a.clj", "content": "x"}
        assert stored.session_id == "s-1"

    def test_newest_first_and_limit(self, storage):
        for minutes in (0, 10, 5):
            storage.append(_entry(path=f"/p/{minutes}.clj", ts=T0 + timedelta(minutes=minutes)))

        entries = storage.query(limit=2)

        assert [e.file_path for e in entries] == ["/p/10.clj", "/p/5.clj"]

    def test_filters(self, storage):
        storage.append(_entry(key="write", session_id="a", status="created"))
        storage.append(_entry(key="replace", session_id="b", path="/p/test/x.clj"))
        storage.append(_entry(key="append", session_id="a", ts=T0 + timedelta(hours=2)))

        assert len(storage.query(session_id="a")) == 2
        assert [e.effect_key for e in storage.query(effect_key="replace")] == ["replace"]
        assert [e.status for e in storage.query(status="created")] == ["created"]
        assert len(storage.query(since=T0 + timedelta(hours=1))) == 1
        assert len(storage.query(until=T0 + timedelta(hours=1))) == 2

    def test_file_path_is_prefix_match(self, storage):
        storage.append(_entry(path="/p/src/app/core.clj"))
        storage.append(_entry(path="/p/src/app/util.clj"))
        storage.append(_entry(path="/p/test/app/core_test.clj"))
        storage.append(_entry(path="/p/src_other/x.clj"))

        assert len(storage.query(file_path="/p/src/app/")) == 2
        assert len(storage.query(file_path="/p/src/app/core.clj")) == 1

    def test_clear_before(self, storage):
        storage.append(_entry(ts=T0))
        storage.append(_entry(ts=T0 + timedelta(days=2)))

        removed = storage.clear(before=T0 + timedelta(days=1))

        assert removed == 1
        assert len(storage.query()) == 1

    def test_clear_all(self, storage):
        storage.append(_entry())
        storage.append(_entry())

        assert storage.clear(all=True) == 2
        assert storage.query() == []

    def test_clear_without_selection(self, storage):
        storage.append(_entry())
        assert storage.clear() == 0
        assert len(storage.query()) == 1


class TestFileStorage:
    def test_requires_path(self):
        with pytest.raises(ValueError):
            FileAuditStorage("")

    def test_one_json_object_per_line(self, tmp_path):
        storage = FileAuditStorage(tmp_path / "audit.jsonl")
        storage.append(_entry())
        storage.append(_entry())

        lines = (tmp_path / "audit.jsonl").read_text().splitlines()
        assert len(lines) == 2
        assert all(line.startswith("{") for line in lines)

    def test_malformed_lines_are_skipped(self, tmp_path):
        log = tmp_path / "audit.jsonl"
        storage = FileAuditStorage(log)
        storage.append(_entry())
        with open(log, "a") as f:
            f.write("{not json\n\n")
        storage.append(_entry())

        assert len(storage.query()) == 2


class TestQueries:
    """Tests for the query helpers."""

    def test_recent_activity(self, storage):
        now = datetime.now(timezone.utc)
        storage.append(_entry(ts=now - timedelta(hours=1)))
        storage.append(_entry(ts=now - timedelta(hours=30)))

        assert len(recent_activity(storage, hours=24)) == 1
        assert len(recent_activity(storage, hours=48)) == 2

    def test_session_activity(self, storage):
        storage.append(_entry(session_id="agent-1"))
        storage.append(_entry(session_id="agent-2"))

        assert [e.session_id for e in session_activity(storage, "agent-1")] == ["agent-1"]

    def test_file_history(self, storage):
        storage.append(_entry(path="/p/src/a.clj"))
        storage.append(_entry(path="/p/src/b.clj"))

        assert [e.file_path for e in file_history(storage, "/p/src/b.clj")] == ["/p/src/b.clj"]

    def test_warning_entries(self, storage):
        now = datetime.now(timezone.utc)
        storage.append(_entry(ts=now, hints=[{"type": "threshold", "message": "too long"}]))
        storage.append(_entry(ts=now))

        warned = warning_entries(storage)

        assert len(warned) == 1
        assert warned[0].hints[0]["type"] == "threshold"


class TestAuditLogger:
    """The observer wired into the registry."""

    def test_records_file_effects_only(self, config, tmp_path):
        storage = FileAuditStorage(tmp_path / "audit.jsonl")
        registry = EffectRegistry(config, observers=[AuditLogger(storage, session_id="s-9")])
        ctx = DispatchContext()

        registry.dispatch([
            ("write", {"path": "src/app/core.clj", "content": "(ns app.core)\n"}),
            ("read-meta", "src/app/core.clj"),
            ("clear-pending", {"all": True}),
        ], ctx)

        entries = storage.query()
        assert sorted(e.effect_key for e in entries) == ["read-meta", "write"]
        assert all(e.session_id == "s-9" for e in entries)

        [write] = storage.query(effect_key="write")
        assert write.status == "ok"
        assert write.file_path == "src/app/core.clj"
        assert write.result["loc"]["after"] == 1

    def test_effect_filter(self, config, tmp_path):
        storage = SQLiteAuditStorage(tmp_path / "audit.db")
        only_writes = AuditLogger(storage, effect_filter=lambda key, args: key == "write")
        registry = EffectRegistry(config, observers=[only_writes])

        registry.invoke("write", {"path": "src/app/core.clj", "content": "(ns app.core)\n"})
        registry.invoke("append", {"path": "src/app/core.clj", "content": ";; x\n"})

        assert [e.effect_key for e in storage.query()] == ["write"]

    def test_failed_effect_is_not_recorded(self, config, tmp_path):
        storage = FileAuditStorage(tmp_path / "audit.jsonl")
        registry = EffectRegistry(config, observers=[AuditLogger(storage)])

        with pytest.raises(PatternNotFoundError):
            registry.invoke("insert", {"path": "src/app/core.clj", "content": "x", "at": {"after": "nope"}})

        assert storage.query() == []
