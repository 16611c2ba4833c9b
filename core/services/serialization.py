"""
Display serialization for stored records.

Nanosecond timestamps become ISO-8601 strings; everything else is dumped as
JSON-compatible values. A failure here means a stored record is corrupt, so it
is logged in full and surfaced as an opaque InternalError.
"""

from typing import Any

import structlog

from core.domain.errors import InternalError
from core.domain.models import (
    HealthAlert,
    HealthcareProvider,
    HealthMetrics,
    MaternalProfile,
    PrenatalVisit,
    Record,
)
from core.domain.timestamps import display_time

logger = structlog.get_logger(__name__)

TIMESTAMP_FIELDS: dict[type[Record], tuple[str, ...]] = {
    MaternalProfile: ("due_date", "created_at", "last_updated"),
    HealthcareProvider: ("last_updated",),
    HealthMetrics: ("recorded_at",),
    PrenatalVisit: ("scheduled_date", "next_visit_date"),
    HealthAlert: ("created_at", "resolved_at"),
}


def serialize_record(record: Record) -> dict[str, Any]:
    kind = type(record).__name__
    try:
        data = record.model_dump(mode="json")
        for field in TIMESTAMP_FIELDS.get(type(record), ()):
            value = getattr(record, field)
            data[field] = display_time(value) if value is not None else None
        if isinstance(record, MaternalProfile):
            data["allergies"] = sorted(record.allergies)
    except (OverflowError, ValueError, TypeError) as e:
        logger.exception("record_serialization_failed", record_type=kind, record_id=record.id)
        raise InternalError(f"Failed to serialize {kind} data") from e
    return data


def serialize_profile(profile: MaternalProfile) -> dict[str, Any]:
    return serialize_record(profile)


def serialize_metrics(metrics: HealthMetrics) -> dict[str, Any]:
    return serialize_record(metrics)


def serialize_visit(visit: PrenatalVisit) -> dict[str, Any]:
    return serialize_record(visit)


def serialize_alert(alert: HealthAlert) -> dict[str, Any]:
    return serialize_record(alert)
