"""Translation between the client-facing task shape and the stored shape.

Tasks have three reserved fields, ``priority``, ``dueDate`` and ``tags``, that
clients may send either top-level or nested inside ``extras``. Stored rows may
likewise carry them in the table columns, inside the ``extras`` JSON, or both.

Everything written through this module ends up in one layout: reserved values
in their columns, ``extras`` holding only custom keys. Everything read through
it comes back in the same layout no matter how the row was written.

Precedence, both directions: a top-level value beats the same key in ``extras``.
"""

from collections.abc import Mapping
from datetime import date
from typing import Any, Dict, Optional, Tuple

from sqlmodel import SQLModel

from ..models import Task, TaskPriority, TaskStatus
from ..schemas.task import TaskRead, parse_due_date

RESERVED_FIELDS = ("priority", "due_date", "tags")

# Keys a reserved value may be stored under inside ``extras``, most specific first.
EXTRAS_KEYS = {
    "priority": ("priority",),
    "due_date": ("dueDate", "due_date"),
    "tags": ("tags",),
}
_ALL_EXTRAS_KEYS = frozenset(k for keys in EXTRAS_KEYS.values() for k in keys)

# Keys a reserved value may arrive under at the top level of a client mapping.
_TOP_LEVEL_KEYS = {
    "priority": ("priority",),
    "due_date": ("due_date", "dueDate"),
    "tags": ("tags",),
}


def _coerce_priority(value: Any) -> str:
    if isinstance(value, TaskPriority):
        return value.value
    if isinstance(value, str):
        try:
            return TaskPriority(value.strip().lower()).value
        except ValueError:
            pass
    return TaskPriority.MEDIUM.value


def _coerce_status(value: Any) -> str:
    if isinstance(value, TaskStatus):
        return value.value
    try:
        return TaskStatus(value).value
    except ValueError:
        return TaskStatus.PENDING.value


def _coerce_due_date(value: Any) -> Optional[date]:
    try:
        return parse_due_date(value)
    except (TypeError, ValueError):
        return None


def _coerce_tags(value: Any) -> list:
    if not isinstance(value, (list, tuple)):
        return []
    return [t if isinstance(t, str) else str(t) for t in value if t is not None]


_COERCE = {
    "priority": _coerce_priority,
    "due_date": _coerce_due_date,
    "tags": _coerce_tags,
}

_DEFAULTS = {
    "priority": lambda: TaskPriority.MEDIUM.value,
    "due_date": lambda: None,
    "tags": list,
}


def split_extras(extras: Any) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """Separate reserved values from custom keys in an ``extras`` mapping.

    Returns:
        (reserved, custom): reserved values keyed by field name, and every
        other key untouched. Non-mapping input counts as empty.
    """
    if not isinstance(extras, Mapping):
        return {}, {}

    reserved: Dict[str, Any] = {}
    for name, keys in EXTRAS_KEYS.items():
        for key in keys:
            if key in extras:
                reserved[name] = extras[key]
                break

    custom = {k: v for k, v in extras.items() if k not in _ALL_EXTRAS_KEYS}
    return reserved, custom


def _is_set(name: str, value: Any) -> bool:
    # an explicit null due date clears it; a null priority or tags means "not given"
    return value is not None or name == "due_date"


def _explicit_value(name: str, fields: Mapping, nested: Mapping) -> Tuple[bool, Any]:
    """Find a caller-supplied reserved value, top-level first."""
    if name in fields and _is_set(name, fields[name]):
        return True, fields[name]
    if name in nested and _is_set(name, nested[name]):
        return True, nested[name]
    return False, None


def build_record(fields: Mapping[str, Any]) -> Dict[str, Any]:
    """Turn validated create fields into the column values of a new task.

    Args:
        fields: Validated payload; only keys the caller sent, plus
            ``title``, ``description`` and ``status``

    Returns:
        Column values with every reserved field present
    """
    nested, custom = split_extras(fields.get("extras"))
    record = {
        "title": fields["title"],
        "description": fields.get("description") or "",
        "status": _coerce_status(fields.get("status", TaskStatus.PENDING)),
        "extras": custom,
    }
    for name in RESERVED_FIELDS:
        found, value = _explicit_value(name, fields, nested)
        record[name] = _COERCE[name](value) if found else _DEFAULTS[name]()
    return record


def merge_update(task: Task, fields: Mapping[str, Any]) -> Dict[str, Any]:
    """Compute the column values of ``task`` after a partial update.

    Absent fields keep their stored value. Custom ``extras`` keys are merged
    shallowly into the stored ones. The result is always in the canonical
    layout, so a row written by an older client is upgraded by its first update.
    """
    current = canonicalize(task)
    nested, custom = split_extras(fields.get("extras"))

    changes: Dict[str, Any] = {}
    if "title" in fields:
        changes["title"] = fields["title"]
    if "description" in fields:
        changes["description"] = fields["description"] or ""
    if "status" in fields:
        changes["status"] = _coerce_status(fields["status"])

    for name in RESERVED_FIELDS:
        found, value = _explicit_value(name, fields, nested)
        changes[name] = _COERCE[name](value) if found else current[name]

    changes["extras"] = {**current["extras"], **custom}
    return changes


def _top_level_value(name: str, data: Mapping) -> Any:
    for key in _TOP_LEVEL_KEYS[name]:
        value = data.get(key)
        if value is not None and value != "":
            return value
    return None


def canonicalize(record: Any) -> Dict[str, Any]:
    """Read a stored row, or a client task mapping, into the canonical shape.

    A null column means "not stored top-level", so the value is looked up in
    ``extras`` next and defaulted last. Unreadable legacy values are replaced
    by their defaults rather than passed on.
    """
    data = record.model_dump() if isinstance(record, SQLModel) else dict(record)
    nested, custom = split_extras(data.get("extras"))

    view = {k: data[k] for k in ("id", "owner_id", "created_at", "updated_at") if k in data}
    view.update(
        title=data.get("title") or "",
        description=data.get("description") or "",
        status=_coerce_status(data.get("status")),
        extras=custom,
    )
    for name in RESERVED_FIELDS:
        value = _top_level_value(name, data)
        if value is None:
            value = nested.get(name)
        view[name] = _COERCE[name](value) if value is not None else _DEFAULTS[name]()
    return view


def to_response(task: Task) -> TaskRead:
    return TaskRead.model_validate(canonicalize(task))
