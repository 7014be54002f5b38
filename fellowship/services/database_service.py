"""TinyDB document store

Implements the document-store contract the rest of the service is written
against: get / query / create / upsert / update / delete, an atomic counter
increment, atomic single-document mutation, transactions and change
subscriptions.

TinyDB is not safe for several processes sharing one file. Within a process
every operation is serialised by a re-entrant lock, which is what makes
``increment_field``, ``mutate`` and ``transaction`` atomic.
"""

import copy
import logging
import threading
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional

from tinydb import TinyDB, Query
from tinydb.storages import MemoryStorage

from fellowship.config import IN_MEMORY_DATABASE
from fellowship.errors import ConflictError, NotFoundError

logger = logging.getLogger(__name__)

# Collection names
USERS = "users"
ACCOUNTS = "accounts"
FAMILIES = "families"
POSTS = "posts"
MEDIA = "media"
NOTIFICATIONS = "notifications"
FAMILY_REQUESTS = "family_requests"
ADMIN_REQUESTS = "admin_requests"
CONFIG = "config"

Document = Dict[str, Any]
SnapshotCallback = Callable[[List[Document]], None]


def generate_id() -> str:
    return str(uuid.uuid4())


def timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def _condition(filters: Dict[str, Any]):
    """Build an AND-ed equality query from a field -> value mapping"""
    cond = None
    for field, value in filters.items():
        clause = Query()[field] == value
        cond = clause if cond is None else (cond & clause)
    return cond


class _Subscription:
    def __init__(self, collection: str, filters: Dict[str, Any], callback: SnapshotCallback):
        self.collection = collection
        self.filters = filters
        self.callback = callback


class Store:
    """Document store over TinyDB, one table per collection"""

    def __init__(self, database_path: str):
        self.database_path = database_path
        self.db: Optional[TinyDB] = None
        self._lock = threading.RLock()
        self._tx_depth = 0
        self._pending: set = set()
        self._tables_seen: set = set()
        self._subscriptions: Dict[str, _Subscription] = {}

    def initialize(self):
        """Open the database (idempotent)"""
        if self.db is not None:
            return
        if self.database_path == IN_MEMORY_DATABASE:
            self.db = TinyDB(storage=MemoryStorage)
            logger.info("Database connected: in-memory")
        else:
            path = Path(self.database_path)
            path.parent.mkdir(parents=True, exist_ok=True)
            self.db = TinyDB(str(path))
            logger.info(f"Database connected: {path}")

    def close(self):
        if self.db is not None:
            self.db.close()
            self.db = None
            logger.info("Database closed")

    def _table(self, collection: str):
        self.initialize()
        self._tables_seen.add(collection)
        return self.db.table(collection)

    # =========================================================================
    # Reads
    # =========================================================================

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        with self._lock:
            doc = self._table(collection).get(Query().id == doc_id)
            return copy.deepcopy(dict(doc)) if doc is not None else None

    def query(self, collection: str, field: str = None, value: Any = None, **filters) -> List[Document]:
        """Documents whose fields equal the given values.

        ``query("users", "family_id", fid)`` and
        ``query("users", family_id=fid, role="admin")`` are both accepted.
        """
        if field is not None:
            filters[field] = value
        with self._lock:
            table = self._table(collection)
            docs = table.search(_condition(filters)) if filters else table.all()
            return [copy.deepcopy(dict(doc)) for doc in docs]

    def all(self, collection: str) -> List[Document]:
        return self.query(collection)

    # =========================================================================
    # Writes
    # =========================================================================

    def create(self, collection: str, data: Document) -> str:
        """Insert a new document and return its id"""
        doc = copy.deepcopy(data)
        doc_id = doc.get("id") or generate_id()
        doc["id"] = doc_id
        with self._lock:
            table = self._table(collection)
            if table.contains(Query().id == doc_id):
                raise ConflictError(f"{collection} document '{doc_id}' already exists")
            table.insert(doc)
        self._notify(collection)
        return doc_id

    def upsert(self, collection: str, doc_id: str, data: Document, merge: bool = True):
        """Write a document under a known id, merging into or replacing any existing one"""
        doc = copy.deepcopy(data)
        doc["id"] = doc_id
        with self._lock:
            table = self._table(collection)
            cond = Query().id == doc_id
            if table.contains(cond):
                if merge:
                    table.update(doc, cond)
                else:
                    table.remove(cond)
                    table.insert(doc)
            else:
                table.insert(doc)
        self._notify(collection)

    def update(self, collection: str, doc_id: str, fields: Document):
        """Merge fields into an existing document"""
        with self._lock:
            updated = self._table(collection).update(copy.deepcopy(fields), Query().id == doc_id)
            if not updated:
                raise NotFoundError(collection, doc_id)
        self._notify(collection)

    def delete(self, collection: str, doc_id: str) -> bool:
        with self._lock:
            removed = self._table(collection).remove(Query().id == doc_id)
        if removed:
            self._notify(collection)
        return bool(removed)

    def increment_field(self, collection: str, doc_id: str, field: str, delta: int):
        """Atomically add ``delta`` to a numeric field (missing counts as 0)"""

        def transform(doc):
            doc[field] = (doc.get(field) or 0) + delta

        with self._lock:
            updated = self._table(collection).update(transform, Query().id == doc_id)
            if not updated:
                raise NotFoundError(collection, doc_id)
        self._notify(collection)

    def mutate(self, collection: str, doc_id: str, fn: Callable[[Document], None]) -> Document:
        """Atomically apply ``fn`` to a copy of the document and store the result.

        Returns the stored document. ``fn`` mutates its argument in place.
        """
        with self._lock:
            table = self._table(collection)
            cond = Query().id == doc_id
            current = table.get(cond)
            if current is None:
                raise NotFoundError(collection, doc_id)
            doc = copy.deepcopy(dict(current))
            fn(doc)
            doc["id"] = doc_id
            table.remove(cond)
            table.insert(doc)
        self._notify(collection)
        return copy.deepcopy(doc)

    # =========================================================================
    # Transactions
    # =========================================================================

    @contextmanager
    def transaction(self) -> Iterator["Store"]:
        """Commit every write in the block together, or none of them.

        Nested blocks join the outermost one. Change notifications are held
        back until the outermost block commits and dropped on rollback.
        """
        with self._lock:
            self.initialize()
            outermost = self._tx_depth == 0
            snapshot = copy.deepcopy(self.db.storage.read() or {}) if outermost else None
            self._tx_depth += 1
            try:
                yield self
            except BaseException:
                self._tx_depth -= 1
                if outermost:
                    self._restore(snapshot)
                    self._pending.clear()
                    logger.warning("Transaction rolled back")
                raise
            self._tx_depth -= 1
            pending = set()
            if outermost:
                pending, self._pending = self._pending, set()

        for collection in pending:
            self._dispatch(collection)

    def _restore(self, snapshot: dict):
        self.db.storage.write(snapshot)
        for name in self._tables_seen:
            self.db.table(name).clear_cache()

    # =========================================================================
    # Change subscriptions
    # =========================================================================

    def subscribe(
        self,
        collection: str,
        filters: Optional[Dict[str, Any]],
        callback: SnapshotCallback
    ) -> Callable[[], None]:
        """Call ``callback`` with the matching documents now and after every change.

        Returns a function that cancels the subscription.
        """
        token = generate_id()
        subscription = _Subscription(collection, dict(filters or {}), callback)
        with self._lock:
            self._subscriptions[token] = subscription
        self._deliver(subscription)

        def unsubscribe():
            with self._lock:
                self._subscriptions.pop(token, None)

        return unsubscribe

    @property
    def subscription_count(self) -> int:
        return len(self._subscriptions)

    def _notify(self, collection: str):
        with self._lock:
            if self._tx_depth:
                self._pending.add(collection)
                return
        self._dispatch(collection)

    def _dispatch(self, collection: str):
        with self._lock:
            targets = [s for s in self._subscriptions.values() if s.collection == collection]
        for subscription in targets:
            self._deliver(subscription)

    def _deliver(self, subscription: _Subscription):
        docs = self.query(subscription.collection, **subscription.filters)
        try:
            subscription.callback(docs)
        except Exception as e:
            logger.warning(f"Subscriber on '{subscription.collection}' failed: {e}", exc_info=True)
