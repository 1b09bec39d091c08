from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from functools import lru_cache
from threading import RLock
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from .settings import get_settings

Row = Dict[str, Any]


class StoreError(Exception):
    """An error reported by the remote store. The message is passed on unchanged."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


@dataclass(frozen=True)
class Query:
    """
    A single filtered read against one table.

    Only exact equality is supported, plus membership (used to batch lookups)
    and one lower-bound range predicate. A value of None in `eq` means IS NULL.
    """
    table: str
    columns: str = "*"
    eq: Mapping[str, Any] = field(default_factory=dict)
    in_: Mapping[str, Sequence[Any]] = field(default_factory=dict)
    gte: Mapping[str, Any] = field(default_factory=dict)
    sort: Optional[str] = None  # "col" ascending, "-col" descending
    limit: Optional[int] = None

    def sort_field(self) -> Tuple[Optional[str], bool]:
        """Return (column, descending) for the declared sort, or (None, False)."""
        if not self.sort:
            return None, False
        s = self.sort.strip()
        descending = s.startswith("-")
        return (s[1:] if descending else s), descending


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class QueryResult:
    """
    Outcome of one reader or writer call: either `data` or `error` is set.

    Callers must check `error` explicitly. A missing row and a failed request
    are not told apart.
    """
    data: Any = None
    error: Optional[StoreError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Any:
        """Return `data`, raising the carried StoreError if there is one."""
        if self.error is not None:
            raise self.error
        return self.data


# PUBLIC_INTERFACE
class StoreClient(ABC):
    """Abstract contract for the hosted store: table CRUD, auth and object storage."""

    @abstractmethod
    def select(self, query: Query) -> List[Row]:
        """Return the rows matching `query`, ordered and capped as declared."""

    @abstractmethod
    def insert(self, table: str, values: Mapping[str, Any]) -> Row:
        """Insert one row and return it as stored."""

    @abstractmethod
    def update(self, table: str, values: Mapping[str, Any], eq: Mapping[str, Any]) -> List[Row]:
        """
        Apply `values` to every row matching all `eq` filters.
        Returns the updated rows; an empty list means nothing matched.
        """

    @abstractmethod
    def delete(self, table: str, eq: Mapping[str, Any]) -> int:
        """Delete rows matching `eq` and return how many were removed."""

    @abstractmethod
    def count(self, table: str, eq: Mapping[str, Any]) -> int:
        """Return the number of rows matching `eq`."""

    @abstractmethod
    def get_user(self, token: str) -> Optional[Row]:
        """Return the user owning the bearer `token`, or None if the session is invalid."""

    @abstractmethod
    def upload(self, bucket: str, path: str, content: bytes, content_type: str) -> str:
        """Store an object and return its public URL."""

    def close(self) -> None:
        """Release any held connections."""


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _norm(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def _matches(row: Row, eq: Mapping[str, Any], in_: Mapping[str, Sequence[Any]], gte: Mapping[str, Any]) -> bool:
    for key, expected in eq.items():
        if _norm(row.get(key)) != _norm(expected):
            return False
    for key, allowed in in_.items():
        if _norm(row.get(key)) not in {_norm(v) for v in allowed}:
            return False
    for key, bound in gte.items():
        value = row.get(key)
        if value is None or _norm(value) < _norm(bound):
            return False
    return True


def _project(row: Row, columns: str) -> Row:
    if not columns or columns.strip() == "*":
        return row.copy()
    names = [c.strip() for c in columns.split(",") if c.strip()]
    return {name: row.get(name) for name in names}


class InMemoryStore(StoreClient):
    """
    Thread-safe in-memory store suitable for testing and the default runtime.

    All mutations take the same lock, so a guarded `update` behaves as an
    atomic compare-and-swap.
    """

    def __init__(self, public_url: str = "http://localhost:54321") -> None:
        self._lock = RLock()
        self._tables: Dict[str, Dict[Any, Row]] = {}
        self._sessions: Dict[str, Row] = {}
        self._objects: Dict[Tuple[str, str], Tuple[bytes, str]] = {}
        self._public_url = public_url.rstrip("/")

    def _table(self, name: str) -> Dict[Any, Row]:
        return self._tables.setdefault(name, {})

    def select(self, query: Query) -> List[Row]:
        with self._lock:
            rows = [
                r for r in self._table(query.table).values()
                if _matches(r, query.eq, query.in_, query.gte)
            ]

            field_name, descending = query.sort_field()
            if field_name:
                # Postgres ordering: NULLS LAST ascending, NULLS FIRST descending
                rows = sorted(
                    rows,
                    key=lambda r: (r.get(field_name) is None, _norm(r.get(field_name))),
                    reverse=descending,
                )

            if query.limit is not None:
                rows = rows[: max(query.limit, 0)]

            return [_project(r, query.columns) for r in rows]

    def insert(self, table: str, values: Mapping[str, Any]) -> Row:
        row: Row = dict(values)
        row.setdefault("id", str(uuid.uuid4()))
        row.setdefault("created_at", _now_iso())
        with self._lock:
            rows = self._table(table)
            if row["id"] in rows:
                raise StoreError(
                    f'duplicate key value violates unique constraint "{table}_pkey"', 409
                )
            rows[row["id"]] = row
            return row.copy()

    def update(self, table: str, values: Mapping[str, Any], eq: Mapping[str, Any]) -> List[Row]:
        with self._lock:
            updated = []
            for row in self._table(table).values():
                if _matches(row, eq, {}, {}):
                    row.update(values)
                    updated.append(row.copy())
            return updated

    def delete(self, table: str, eq: Mapping[str, Any]) -> int:
        with self._lock:
            rows = self._table(table)
            doomed = [key for key, row in rows.items() if _matches(row, eq, {}, {})]
            for key in doomed:
                del rows[key]
            return len(doomed)

    def count(self, table: str, eq: Mapping[str, Any]) -> int:
        with self._lock:
            return sum(1 for r in self._table(table).values() if _matches(r, eq, {}, {}))

    def get_user(self, token: str) -> Optional[Row]:
        with self._lock:
            user = self._sessions.get(token)
            return None if user is None else user.copy()

    def upload(self, bucket: str, path: str, content: bytes, content_type: str) -> str:
        with self._lock:
            self._objects[(bucket, path)] = (content, content_type)
        return f"{self._public_url}/storage/v1/object/public/{bucket}/{path}"

    # Helpers for seeding and inspecting the fake

    def add_session(self, token: str, user: Mapping[str, Any]) -> None:
        with self._lock:
            self._sessions[token] = dict(user)

    def seed(self, table: str, rows: Sequence[Mapping[str, Any]]) -> List[Row]:
        return [self.insert(table, r) for r in rows]

    def rows(self, table: str) -> List[Row]:
        with self._lock:
            return [r.copy() for r in self._table(table).values()]

    def get_object(self, bucket: str, path: str) -> Optional[Tuple[bytes, str]]:
        with self._lock:
            return self._objects.get((bucket, path))


@lru_cache(maxsize=1)
def _shared_memory_store() -> InMemoryStore:
    return InMemoryStore()


# PUBLIC_INTERFACE
def get_store() -> Iterator[StoreClient]:
    """
    FastAPI dependency yielding the configured store handle.
    - memory: one process-wide InMemoryStore
    - rest: a RestStore bound to STORE_URL, closed when the request ends
    """
    settings = get_settings()
    if settings.store_backend == "rest":
        from .rest_store import RestStore

        store = RestStore.from_settings(settings)
        try:
            yield store
        finally:
            store.close()
        return
    yield _shared_memory_store()
