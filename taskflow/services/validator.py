"""Request validation for task mutations.

Wraps the pydantic payload models so callers get a single domain
``ValidationError`` naming the first violated constraint, and a plain dict of
the fields the caller actually sent.
"""

from typing import Any, Dict, Type

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..errors import ValidationError
from ..schemas.task import TaskCreate, TaskUpdate


def describe_error(err: Dict[str, Any], skip: int = 0) -> str:
    """Human-readable message for one pydantic error.

    ``skip`` drops leading location segments, e.g. FastAPI's "body".
    """
    if err["type"] == "value_error" and "error" in err.get("ctx", {}):
        msg = str(err["ctx"]["error"])
    else:
        msg = err["msg"]
    loc = ".".join(str(part) for part in err["loc"][skip:])
    return f"{loc}: {msg}" if loc else msg


def first_error_message(exc: PydanticValidationError) -> str:
    return describe_error(exc.errors()[0])


def _validate(model: Type[BaseModel], payload: Any) -> BaseModel:
    try:
        return model.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError(first_error_message(e)) from e


def validate_create(payload: Any) -> Dict[str, Any]:
    """Validate a create payload.

    Returns:
        The fields the caller sent, plus ``title``, ``description`` and
        ``status`` with their defaults applied

    Raises:
        ValidationError: On the first violated constraint
    """
    task = _validate(TaskCreate, payload)
    fields = task.model_dump(exclude_unset=True)
    fields.update(title=task.title, description=task.description, status=task.status)
    return fields


def validate_update(payload: Any) -> Dict[str, Any]:
    """Validate an update payload.

    Returns:
        Only the fields the caller sent

    Raises:
        ValidationError: On the first violated constraint, or if no
            recognized field is present
    """
    task = _validate(TaskUpdate, payload)
    return task.model_dump(exclude_unset=True)
