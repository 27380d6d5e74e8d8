"""MongoDB access for the Taskboard API.

A single :class:`StorageGateway` owns the process-wide ``MongoClient``. It is
created by the app factory, stored in ``app.extensions`` and handed to the
services that need a database handle.
"""
import logging
import threading

from bson import ObjectId
from bson.errors import InvalidId
from flask import current_app
from pymongo import MongoClient
from pymongo.errors import PyMongoError
from pymongo.server_api import ServerApi

logger = logging.getLogger(__name__)

EXTENSION_KEY = "storage_gateway"


class StorageError(Exception):
    """Raised when the document store cannot serve a request."""


class StorageConnectionError(StorageError):
    """Raised when the initial connection to the document store fails."""


class StorageGateway:
    """Lazily connects to MongoDB and caches the database handle."""

    def __init__(self, uri, db_name, timeout_ms=5000, client_factory=MongoClient):
        self.uri = uri
        self.db_name = db_name
        self.timeout_ms = timeout_ms
        self._client_factory = client_factory
        self._client = None
        self._db = None
        self._lock = threading.Lock()

    @property
    def connected(self):
        return self._db is not None

    def connect(self):
        """Return the database handle, connecting on first use."""
        if self._db is not None:
            return self._db

        with self._lock:
            if self._db is not None:
                return self._db

            client = None
            try:
                # Bad URIs and unresolvable SRV hosts fail in the constructor.
                client = self._client_factory(
                    self.uri,
                    server_api=ServerApi("1", strict=True, deprecation_errors=True),
                    serverSelectionTimeoutMS=self.timeout_ms,
                )
                # MongoClient connects in the background; ping to surface failures now.
                client.admin.command("ping")
            except PyMongoError as exc:
                if client is not None:
                    client.close()
                logger.error("MongoDB connection failed: %s", exc)
                raise StorageConnectionError(f"MongoDB connection failed: {exc}") from exc

            self._client = client
            self._db = client[self.db_name]
            logger.info("Connected to MongoDB database %r", self.db_name)
            return self._db

    def close(self):
        with self._lock:
            if self._client is not None:
                self._client.close()
            self._client = None
            self._db = None


def init_app(app, gateway=None):
    """Attach a storage gateway to ``app`` and return it."""
    if gateway is None:
        gateway = StorageGateway(
            app.config["MONGO_URI"],
            app.config["MONGO_DB_NAME"],
            timeout_ms=app.config.get("MONGO_TIMEOUT_MS", 5000),
        )
    app.extensions[EXTENSION_KEY] = gateway
    return gateway


def get_gateway():
    return current_app.extensions[EXTENSION_KEY]


def get_db():
    """Database handle for the current app, connecting on first use."""
    return get_gateway().connect()


def is_valid_object_id(value):
    return isinstance(value, (str, ObjectId)) and ObjectId.is_valid(value)


def to_object_id(value):
    """Convert ``value`` to an ObjectId, raising ``InvalidId`` when malformed."""
    if isinstance(value, ObjectId):
        return value
    if not isinstance(value, str):
        raise InvalidId(f"{value!r} is not a valid ObjectId")
    return ObjectId(value)


def serialize_doc(doc):
    """Return a JSON-friendly copy of a Mongo document."""
    if doc is None:
        return None
    out = {}
    for key, value in doc.items():
        out[key] = str(value) if isinstance(value, ObjectId) else value
    return out
