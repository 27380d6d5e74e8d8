from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

REQUIRED_FIELDS = ("userId", "title", "category", "order")
# Identifier keys clients may send; the store assigns ``_id`` itself.
ID_FIELDS = ("_id", "id")
# Placeholder for a required field the stored document does not have
MISSING = object()


@dataclass
class Task:
    user_id: str
    title: str
    category: str
    order: float
    # Any user-defined fields, persisted verbatim
    extra: Dict[str, Any] = field(default_factory=dict)
    id: Optional[str] = None

    @classmethod
    def from_document(cls, doc):
        known = {"_id", *REQUIRED_FIELDS}
        return cls(
            id=str(doc["_id"]) if doc.get("_id") is not None else None,
            user_id=doc.get("userId", MISSING),
            title=doc.get("title", MISSING),
            category=doc.get("category", MISSING),
            order=doc.get("order", MISSING),
            extra={k: v for k, v in doc.items() if k not in known},
        )

    def to_dict(self):
        out = {}
        if self.id is not None:
            out["_id"] = self.id
        fields = {
            "userId": self.user_id,
            "title": self.title,
            "category": self.category,
            "order": self.order,
        }
        out.update((k, v) for k, v in fields.items() if v is not MISSING)
        out.update(self.extra)
        return out


@dataclass(frozen=True)
class ReorderItem:
    id: str
    order: Any

    @classmethod
    def from_payload(cls, entry):
        """Build an item from ``{"_id": ..., "order": ...}``; ``id`` is accepted too."""
        if not isinstance(entry, dict):
            raise ValueError("reorder entry must be an object")
        task_id = entry.get("_id", entry.get("id"))
        if task_id is None:
            raise ValueError("reorder entry is missing its _id")
        if entry.get("order") is None:
            raise ValueError("reorder entry is missing its order")
        return cls(id=task_id, order=entry["order"])


def missing_fields(payload) -> List[str]:
    """Names of required create fields absent from ``payload``.

    ``userId``, ``title`` and ``category`` must be truthy; ``order`` only has to
    be present, so 0 is valid.
    """
    missing = []
    for name in REQUIRED_FIELDS:
        value = payload.get(name)
        if name == "order":
            if value is None:
                missing.append(name)
        elif not value:
            missing.append(name)
    return missing


def strip_id_fields(payload):
    return {k: v for k, v in payload.items() if k not in ID_FIELDS}
