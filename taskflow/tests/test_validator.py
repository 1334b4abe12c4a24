"""Unit tests for task request validation."""

from datetime import date

import pytest

from taskflow.errors import ValidationError
from taskflow.models import TaskPriority, TaskStatus
from taskflow.services.validator import validate_create, validate_update


def test_create_minimal():
    """Test that a title alone is a valid create payload."""
    fields = validate_create({"title": "Buy milk"})

    assert fields["title"] == "Buy milk"
    assert fields["description"] == ""
    assert fields["status"] is TaskStatus.PENDING
    assert "priority" not in fields
    assert "tags" not in fields


def test_create_title_is_trimmed():
    assert validate_create({"title": "  Padded  "})["title"] == "Padded"


@pytest.mark.parametrize("payload, message", [
    ({}, "title: Field required"),
    ({"title": "   "}, "title must not be empty"),
    ({"title": "x" * 256}, "title"),
    ({"title": "ok", "description": "d" * 1001}, "description"),
    ({"title": "ok", "status": "finished"}, "status"),
    ({"title": "ok", "priority": "urgent"}, "priority"),
    ({"title": "ok", "tags": "work"}, "tags"),
    ({"title": "ok", "tags": ["work", 3]}, "tags"),
    ({"title": "ok", "extras": ["not", "a", "map"]}, "extras"),
    ({"title": "ok", "extras": "text"}, "extras"),
    ({"title": "ok", "dueDate": "not a date"}, "dueDate"),
    ({"title": "ok", "extras": {"priority": "urgent"}}, "extras.priority"),
    ({"title": "ok", "extras": {"tags": "work"}}, "extras.tags"),
    ({"title": "ok", "extras": {"dueDate": "tomorrow"}}, "extras.dueDate"),
])
def test_create_rejections(payload, message):
    """Test that each violated constraint is named in the error."""
    with pytest.raises(ValidationError) as exc_info:
        validate_create(payload)
    assert message in exc_info.value.message


def test_create_title_at_limit_is_accepted():
    assert validate_create({"title": "x" * 255})["title"] == "x" * 255


def test_create_non_object_payload_rejected():
    with pytest.raises(ValidationError):
        validate_create(["title"])


def test_create_nested_values_are_coerced():
    fields = validate_create({
        "title": "Nested",
        "extras": {"priority": "high", "dueDate": "2025-01-31", "category": "x"},
    })

    assert fields["extras"]["priority"] is TaskPriority.HIGH
    assert fields["extras"]["dueDate"] == date(2025, 1, 31)
    assert fields["extras"]["category"] == "x"


def test_create_accepts_datetime_due_date():
    fields = validate_create({"title": "ok", "dueDate": "2025-01-31T10:00:00Z"})
    assert fields["due_date"] == date(2025, 1, 31)


def test_create_empty_due_date_is_none():
    fields = validate_create({"title": "ok", "dueDate": ""})
    assert fields["due_date"] is None


def test_create_extras_values_are_not_type_checked():
    fields = validate_create({"title": "ok", "extras": {"n": 1, "flag": True, "deep": {"a": [1]}}})
    assert fields["extras"] == {"n": 1, "flag": True, "deep": {"a": [1]}}


def test_update_returns_only_sent_fields():
    fields = validate_update({"tags": ["a"], "unknown": 1})
    assert fields == {"tags": ["a"]}


@pytest.mark.parametrize("payload", [
    {}, {"unknown": "field"}, {"id": "x", "ownerId": "y"}, {"extras": {}}, {"extras": None},
])
def test_update_without_recognized_fields_rejected(payload):
    """Test that an update with nothing to change is an error, not a no-op."""
    with pytest.raises(ValidationError) as exc_info:
        validate_update(payload)
    assert "No valid fields to update" in exc_info.value.message


@pytest.mark.parametrize("name", ["title", "status", "priority"])
def test_update_null_required_fields_rejected(name):
    with pytest.raises(ValidationError) as exc_info:
        validate_update({name: None})
    assert f"{name} may not be null" in exc_info.value.message


def test_update_validates_values():
    with pytest.raises(ValidationError):
        validate_update({"status": "archived"})


def test_update_due_date_by_snake_case_name():
    assert validate_update({"due_date": "2025-02-02"}) == {"due_date": date(2025, 2, 2)}


def test_validation_error_kind():
    with pytest.raises(ValidationError) as exc_info:
        validate_create({})
    assert exc_info.value.kind == "validation_error"
    assert exc_info.value.status_code == 400


def test_update_with_extras_and_another_field_accepted():
    fields = validate_update({"extras": {}, "title": "New"})
    assert fields == {"extras": {}, "title": "New"}
