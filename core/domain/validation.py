"""
Input validation rules applied before a record is accepted.

Each rule takes a partial candidate (a mapping of field name to raw value) and
returns None when valid, or the reason of the first violated check. Checks run
in a fixed order so the reported reason is deterministic.

Metric ranges use "present and valid" semantics: a field that is absent or
None is not checked here.
"""

from collections.abc import Mapping
from enum import Enum
from numbers import Real
from typing import Any

from core.domain.models import BloodType, ProviderRole
from core.domain.timestamps import parse_date

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100
AGE_RANGE = (16, 60)

# (field, low, high, reason); bounds are inclusive
METRIC_RANGES: tuple[tuple[str, float, float, str], ...] = (
    ("blood_pressure_systolic", 70, 190, "Invalid systolic blood pressure range"),
    ("blood_pressure_diastolic", 40, 120, "Invalid diastolic blood pressure range"),
    ("blood_sugar", 30, 500, "Invalid blood sugar range"),
)

_BLOOD_TYPES = frozenset(b.value for b in BloodType)
_ROLES = frozenset(r.value for r in ProviderRole)


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def _enum_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def _name_error(name: Any) -> str | None:
    if not isinstance(name, str) or len(name.strip()) < NAME_MIN_LENGTH:
        return f"Name must be at least {NAME_MIN_LENGTH} characters long"
    if len(name.strip()) > NAME_MAX_LENGTH:
        return f"Name must be at most {NAME_MAX_LENGTH} characters long"
    return None


def is_valid_date(value: Any) -> bool:
    try:
        parse_date(value)
    except (TypeError, ValueError):
        return False
    return True


def validate_profile(candidate: Mapping[str, Any]) -> str | None:
    """Check name, age, blood type and due date, in that order."""
    if error := _name_error(candidate.get("name")):
        return error

    age = candidate.get("age")
    low, high = AGE_RANGE
    if not _is_number(age) or not low <= age <= high or age != int(age):
        return f"Age must be between {low} and {high}"

    if _enum_value(candidate.get("blood_type")) not in _BLOOD_TYPES:
        return "Invalid blood type"

    if not is_valid_date(candidate.get("due_date")):
        return "Due date must be a valid date"

    return None


def validate_health_metrics(candidate: Mapping[str, Any]) -> str | None:
    for field, low, high, reason in METRIC_RANGES:
        value = candidate.get(field)
        if value is None:
            continue
        if not _is_number(value) or not low <= value <= high:
            return reason
    return None


def validate_provider(candidate: Mapping[str, Any]) -> str | None:
    if error := _name_error(candidate.get("name")):
        return error
    required = (("specialization", "Specialization"), ("license_number", "License number"))
    for field, label in required:
        value = candidate.get(field)
        if not isinstance(value, str) or not value.strip():
            return f"{label} is required"
    role = candidate.get("role")
    if role is not None and _enum_value(role) not in _ROLES:
        return "Invalid provider role"
    return None


def validate_visit(candidate: Mapping[str, Any]) -> str | None:
    visit_type = candidate.get("visit_type")
    if not isinstance(visit_type, str) or not visit_type.strip():
        return "Visit type is required"
    if not is_valid_date(candidate.get("scheduled_date")):
        return "Scheduled date must be a valid date"
    next_visit = candidate.get("next_visit_date")
    if next_visit is not None and not is_valid_date(next_visit):
        return "Next visit date must be a valid date"
    return None
