# tests/conftest.py

from types import SimpleNamespace

import pytest
from bson import ObjectId
from pymongo.errors import ServerSelectionTimeoutError

from taskboard.app import create_app


class FakeCursor:
    def __init__(self, docs):
        self.docs = list(docs)

    def sort(self, key, direction=1):
        self.docs.sort(key=lambda d: d.get(key), reverse=direction < 0)
        return self

    def __iter__(self):
        return iter(self.docs)


class FakeCollection:
    """
    In-memory stand-in for a pymongo Collection.

    Supports the handful of calls the task service makes. Set ``fail_with``
    to an exception instance to make every call raise it.
    """

    def __init__(self):
        self.docs = []
        self.fail_with = None
        self.bulk_calls = []

    def _check(self):
        if self.fail_with is not None:
            raise self.fail_with

    def _match(self, doc, flt):
        return all(doc.get(k) == v for k, v in flt.items())

    def find(self, flt):
        self._check()
        return FakeCursor(dict(d) for d in self.docs if self._match(d, flt))

    def insert_one(self, doc):
        self._check()
        doc = dict(doc)
        doc.setdefault("_id", ObjectId())
        self.docs.append(doc)
        return SimpleNamespace(inserted_id=doc["_id"])

    def _apply_set(self, flt, update):
        for doc in self.docs:
            if self._match(doc, flt):
                fields = update["$set"]
                changed = any(doc.get(k) != v for k, v in fields.items())
                doc.update(fields)
                return 1, int(changed)
        return 0, 0

    def update_one(self, flt, update):
        self._check()
        matched, modified = self._apply_set(flt, update)
        return SimpleNamespace(matched_count=matched, modified_count=modified)

    def delete_one(self, flt):
        self._check()
        for i, doc in enumerate(self.docs):
            if self._match(doc, flt):
                del self.docs[i]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)

    def bulk_write(self, ops):
        self._check()
        self.bulk_calls.append(ops)
        matched = modified = 0
        for op in ops:
            m, n = self._apply_set(op._filter, op._doc)
            matched += m
            modified += n
        return SimpleNamespace(matched_count=matched, modified_count=modified)


class FakeGateway:
    def __init__(self, collection):
        self.collection = collection
        self.connect_calls = 0
        self.connected = False
        self.fail = False

    def connect(self):
        self.connect_calls += 1
        if self.fail:
            raise ServerSelectionTimeoutError("no servers available")
        self.connected = True
        return {"Tasks": self.collection}


@pytest.fixture()
def collection():
    return FakeCollection()


@pytest.fixture()
def gateway(collection):
    return FakeGateway(collection)


@pytest.fixture()
def app(gateway):
    return create_app({"TESTING": True, "TASKS_COLLECTION": "Tasks"}, gateway=gateway)


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def add_task(collection):
    """Insert a task document directly and return its ObjectId."""

    def _add(**fields):
        doc = {"userId": "u1", "title": "Task", "category": "todo", "order": 0}
        doc.update(fields)
        return collection.insert_one(doc).inserted_id

    return _add
