"""Task data access over the ``Tasks`` collection.

Every method returns an :class:`Ok` or a tagged :class:`Err`; store faults
never escape as exceptions.
"""
import functools
import logging

from bson.errors import InvalidId
from pymongo import ASCENDING, UpdateOne
from pymongo.errors import PyMongoError

from taskboard.models.task_model import ReorderItem, Task, strip_id_fields
from taskboard.services.result import Err, ErrorKind, Ok
from taskboard.utils.db import StorageError, to_object_id

logger = logging.getLogger(__name__)

INVALID_ID = "Invalid task ID"
NOT_FOUND = "Task not found"


def _storage_boundary(method):
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except (PyMongoError, StorageError) as exc:
            logger.exception("%s failed: %s", method.__name__, exc)
            return Err(ErrorKind.STORAGE, "Internal server error")

    return wrapper


class TaskService:
    def __init__(self, gateway, collection_name="Tasks"):
        self.gateway = gateway
        self.collection_name = collection_name

    @property
    def collection(self):
        return self.gateway.connect()[self.collection_name]

    @_storage_boundary
    def list_tasks(self, user_id):
        """Tasks owned by ``user_id``, ascending by ``order``."""
        cursor = self.collection.find({"userId": user_id}).sort("order", ASCENDING)
        return Ok([Task.from_document(doc) for doc in cursor])

    @_storage_boundary
    def create_task(self, task):
        """Insert ``task`` as given and return the new identifier."""
        res = self.collection.insert_one(strip_id_fields(task))
        logger.debug("Created task %s for user %s", res.inserted_id, task.get("userId"))
        return Ok(res.inserted_id)

    @_storage_boundary
    def update_task(self, task_id, fields):
        """Partially update a task.

        ``Ok(True)`` when the document changed, ``Ok(False)`` when it matched
        but the payload equalled the stored values, ``NOT_FOUND`` when no
        document has this identifier.
        """
        try:
            oid = to_object_id(task_id)
        except InvalidId:
            return Err(ErrorKind.VALIDATION, INVALID_ID)

        updates = strip_id_fields(fields)
        if not updates:
            return Err(ErrorKind.VALIDATION, "No valid fields to update")

        res = self.collection.update_one({"_id": oid}, {"$set": updates})
        if res.matched_count == 0:
            return Err(ErrorKind.NOT_FOUND, NOT_FOUND)
        return Ok(res.modified_count == 1)

    @_storage_boundary
    def delete_task(self, task_id):
        try:
            oid = to_object_id(task_id)
        except InvalidId:
            return Err(ErrorKind.VALIDATION, INVALID_ID)

        res = self.collection.delete_one({"_id": oid})
        if res.deleted_count != 1:
            return Err(ErrorKind.NOT_FOUND, NOT_FOUND)
        return Ok(True)

    @_storage_boundary
    def reorder_tasks(self, entries):
        """Set ``order`` on each listed task in one bulk write.

        Succeeds when at least one document was modified; the write is not
        atomic, so a store fault can leave it partially applied.
        """
        try:
            items = [ReorderItem.from_payload(entry) for entry in entries]
            ops = [
                UpdateOne({"_id": to_object_id(item.id)}, {"$set": {"order": item.order}})
                for item in items
            ]
        except (ValueError, InvalidId) as exc:
            return Err(ErrorKind.VALIDATION, "Invalid tasks data", {"error": str(exc)})
        if not ops:
            return Err(ErrorKind.VALIDATION, "Invalid tasks data")

        res = self.collection.bulk_write(ops)
        if res.modified_count < len(ops):
            logger.warning(
                "Reorder modified %d of %d tasks (matched %d)",
                res.modified_count,
                len(ops),
                res.matched_count,
            )
        return Ok(res.modified_count > 0)
