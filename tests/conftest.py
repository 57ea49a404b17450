import os
import re
import copy
import uuid
from collections import defaultdict
from datetime import datetime, timedelta, timezone

import pytest
from pymongo.errors import PyMongoError

# config.py refuses to import without a signing secret
os.environ.setdefault("JWT_SECRET", "comment-service-test-signing-secret-0001")

from services.comment_service import CommentService
from services.sensitive_filter import SensitiveFilter


def _matches(record, query):
    for field, cond in query.items():
        value = record.get(field)
        if isinstance(cond, dict) and "$regex" in cond:
            flags = re.IGNORECASE if "i" in cond.get("$options", "") else 0
            if not isinstance(value, str) or not re.search(cond["$regex"], value, flags):
                return False
        elif value != cond:
            return False
    return True


class InMemoryGateway:
    """Gateway double holding collections as lists of dicts."""

    def __init__(self):
        self.collections = defaultdict(list)
        self.calls = []
        self.failing = set()

    def _enter(self, op):
        self.calls.append(op)
        if op in self.failing:
            raise PyMongoError(f"{op} failed")

    async def insert(self, collection, record):
        self._enter("insert")
        record = copy.deepcopy(record)
        record.setdefault("id", None)
        if not record["id"]:
            record["id"] = uuid.uuid4().hex
        self.collections[collection].append(record)
        return record["id"]

    async def find_by_id(self, collection, record_id):
        self._enter("find_by_id")
        for record in self.collections[collection]:
            if record["id"] == record_id:
                return copy.deepcopy(record)
        return None

    async def find(self, collection, query, sort=None, skip=0, limit=0):
        self._enter("find")
        rows = [copy.deepcopy(r) for r in self.collections[collection] if _matches(r, query)]
        for field, direction in reversed(list(sort or [])):
            rows.sort(key=lambda r: r.get(field) or "", reverse=direction < 0)
        rows = rows[skip:]
        return rows[:limit] if limit else rows

    async def count(self, collection, query):
        self._enter("count")
        return sum(1 for r in self.collections[collection] if _matches(r, query))

    async def update_first(self, collection, query, update):
        self._enter("update_first")
        for record in self.collections[collection]:
            if _matches(record, query):
                record.update(update.get("$set", {}))
                return 1
        return 0

    async def remove(self, collection, query):
        self._enter("remove")
        keep = [r for r in self.collections[collection] if not _matches(r, query)]
        removed = len(self.collections[collection]) - len(keep)
        self.collections[collection][:] = keep
        return removed

    async def estimated_count(self, collection):
        self._enter("estimated_count")
        return len(self.collections[collection])


class TickingClock:
    """Returns a timestamp one second later on every call."""

    def __init__(self):
        self.current = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self):
        self.current += timedelta(seconds=1)
        return self.current.isoformat()


@pytest.fixture
def gateway():
    return InMemoryGateway()


@pytest.fixture
def word_filter():
    return SensitiveFilter.from_words(["damn", "stupid", "free money"])


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def service(gateway, word_filter, clock):
    return CommentService(gateway, word_filter, clock=clock)


@pytest.fixture
def stored(gateway):
    """Comments currently persisted in the default collection."""
    return gateway.collections["comments"]
