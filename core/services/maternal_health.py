"""
Maternal health service: the entry point used by outer layers (HTTP, CLI).

Every inbound record goes through the same pipeline:
1. Validate the candidate with the rules in `core.domain.validation`
2. Check referenced entities exist and are in a usable state
3. Write to the record store
4. For metrics: assess risk and raise an alert on a high-risk verdict

Expected failures come back as `Result.err(...)` and never touch the store.
Each operation holds the write locks of the collections it mutates, so a
metrics write and the alert it triggers are one critical section.
"""

from collections.abc import Callable, Iterable, Mapping
from typing import Any, TypeVar

import pydantic
import structlog

from core.config import AppConfig, RiskThresholdConfig
from core.domain.errors import (
    MaternalHealthError,
    NotFoundError,
    PreconditionError,
    ValidationError,
)
from core.domain.models import (
    HealthAlert,
    HealthcareProvider,
    HealthMetrics,
    MaternalProfile,
    PrenatalVisit,
    Record,
    RiskLevel,
    RiskVerdict,
    Trimester,
)
from core.domain.timestamps import SystemClock, new_id, store_date_string
from core.domain.validation import (
    is_valid_date,
    validate_health_metrics,
    validate_profile,
    validate_provider,
    validate_visit,
)
from core.services.alerting import AlertLifecycleManager, AlertResult
from core.services.record_store import RecordStore
from core.services.result import Result
from core.services.risk_assessment import RiskAssessmentEngine

logger = structlog.get_logger(__name__)

RecordT = TypeVar("RecordT", bound=Record)


def _build(model: type[RecordT], **fields: Any) -> Result[RecordT, MaternalHealthError]:
    """Construct a record, turning model validation failures into ValidationError."""
    try:
        return Result.ok(model(**fields))
    except pydantic.ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or model.__name__
        return Result.err(ValidationError(f"Invalid {field}: {first['msg']}"))


class MaternalHealthService:
    """
    Records profiles, providers, metrics and visits, and drives alerting.

    Collaborators are injected: the record store, a nanosecond clock and an
    identifier factory. Nothing here is a process-wide singleton.
    """

    def __init__(
        self,
        store: RecordStore | None = None,
        clock: Callable[[], int] | None = None,
        id_factory: Callable[[], str] = new_id,
        thresholds: RiskThresholdConfig | None = None,
    ) -> None:
        self.store = store or RecordStore()
        self.clock = clock or SystemClock()
        self.id_factory = id_factory
        self.risk_engine = RiskAssessmentEngine(thresholds)
        self.alerts = AlertLifecycleManager(self.store, self.clock, self.id_factory)
        self.logger = logger.bind(component="maternal_health_service")

    @classmethod
    def from_config(
        cls, config: AppConfig, store: RecordStore | None = None
    ) -> "MaternalHealthService":
        return cls(store=store, thresholds=config.risk)

    # Providers

    def register_provider(
        self, data: Mapping[str, Any]
    ) -> Result[HealthcareProvider, MaternalHealthError]:
        if reason := validate_provider(data):
            return self._reject("register_provider", ValidationError(reason))

        result = _build(
            HealthcareProvider,
            id=self.id_factory(),
            name=data["name"].strip(),
            specialization=data["specialization"],
            license_number=data["license_number"],
            contact_info=data.get("contact_info", ""),
            facility_id=data.get("facility_id", ""),
            is_active=data.get("is_active", True),
            role=data.get("role", "provider"),
            last_updated=self.clock(),
        )
        if result.is_err():
            return self._reject("register_provider", result.unwrap_err())

        provider = result.unwrap()
        self.store.providers.insert(provider.id, provider)
        self.logger.info("provider_registered", provider_id=provider.id, role=provider.role.value)
        return result

    def deactivate_provider(
        self, provider_id: str
    ) -> Result[HealthcareProvider, MaternalHealthError]:
        with self.store.providers.write_lock():
            provider = self.store.providers.get(provider_id)
            if provider is None:
                return self._reject(
                    "deactivate_provider", NotFoundError("Healthcare provider not found")
                )
            updated = provider.model_copy(update={"is_active": False, "last_updated": self.clock()})
            self.store.providers.insert(provider_id, updated)

        self.logger.info("provider_deactivated", provider_id=provider_id)
        return Result.ok(updated)

    def get_provider(self, provider_id: str) -> Result[HealthcareProvider, MaternalHealthError]:
        provider = self.store.providers.get(provider_id)
        if provider is None:
            return Result.err(NotFoundError("Healthcare provider not found"))
        return Result.ok(provider)

    # Profiles

    def create_profile(
        self, data: Mapping[str, Any]
    ) -> Result[MaternalProfile, MaternalHealthError]:
        """
        Create a maternal profile assigned to an active primary-care provider.

        Defaults: first trimester, LOW risk, empty history and allergies.
        """
        if reason := validate_profile(data):
            return self._reject("create_profile", ValidationError(reason))

        with self.store.profiles.write_lock():
            provider_check = self._usable_provider(
                data.get("primary_care_provider_id"),
                "Selected healthcare provider is not active",
            )
            if provider_check.is_err():
                return self._reject("create_profile", provider_check.unwrap_err())

            now = self.clock()
            result = _build(
                MaternalProfile,
                id=self.id_factory(),
                name=data["name"].strip(),
                age=data["age"],
                blood_type=data["blood_type"],
                emergency_contact=data.get("emergency_contact", ""),
                due_date=store_date_string(data["due_date"]),
                current_trimester=data.get("current_trimester", Trimester.FIRST),
                risk_level=data.get("risk_level", RiskLevel.LOW),
                primary_care_provider_id=provider_check.unwrap().id,
                medical_history=tuple(data.get("medical_history", ())),
                allergies=frozenset(data.get("allergies", ())),
                is_high_risk_pregnancy=data.get("is_high_risk_pregnancy", False),
                created_at=now,
                last_updated=now,
            )
            if result.is_err():
                return self._reject("create_profile", result.unwrap_err())

            profile = result.unwrap()
            self.store.profiles.insert(profile.id, profile)

        self.logger.info(
            "profile_created",
            profile_id=profile.id,
            provider_id=profile.primary_care_provider_id,
        )
        return result

    def get_profile(self, profile_id: str) -> Result[MaternalProfile, MaternalHealthError]:
        profile = self.store.profiles.get(profile_id)
        if profile is None:
            return Result.err(NotFoundError("Maternal profile not found"))
        return Result.ok(profile)

    def update_profile_status(
        self,
        profile_id: str,
        risk_level: RiskLevel | str | None = None,
        current_trimester: Trimester | str | None = None,
        is_high_risk_pregnancy: bool | None = None,
        medical_history_entry: str | None = None,
        allergies: Iterable[str] | None = None,
    ) -> Result[MaternalProfile, MaternalHealthError]:
        """Apply clinician-driven changes to a profile; omitted arguments are kept."""
        with self.store.profiles.write_lock():
            profile = self.store.profiles.get(profile_id)
            if profile is None:
                return self._reject(
                    "update_profile_status", NotFoundError("Maternal profile not found")
                )

            fields = profile.model_dump()
            if risk_level is not None:
                fields["risk_level"] = risk_level
            if current_trimester is not None:
                fields["current_trimester"] = current_trimester
            if is_high_risk_pregnancy is not None:
                fields["is_high_risk_pregnancy"] = is_high_risk_pregnancy
            if medical_history_entry is not None:
                if not medical_history_entry.strip():
                    return self._reject(
                        "update_profile_status",
                        ValidationError("Medical history entry must not be blank"),
                    )
                fields["medical_history"] = (*profile.medical_history, medical_history_entry)
            if allergies is not None:
                fields["allergies"] = profile.allergies | frozenset(allergies)
            fields["last_updated"] = self.clock()

            result = _build(MaternalProfile, **fields)
            if result.is_err():
                return self._reject("update_profile_status", result.unwrap_err())
            self.store.profiles.insert(profile_id, result.unwrap())

        self.logger.info("profile_updated", profile_id=profile_id)
        return result

    # Metrics

    def record_metrics(self, data: Mapping[str, Any]) -> Result[HealthMetrics, MaternalHealthError]:
        """
        Record a metrics reading and assess it.

        A high-risk verdict flags the reading for review and raises exactly
        one new alert against the owning profile.
        """
        if reason := validate_health_metrics(data):
            return self._reject("record_metrics", ValidationError(reason))

        profile_id = data.get("maternal_profile_id")
        if not isinstance(profile_id, str) or self.store.profiles.get(profile_id) is None:
            return self._reject("record_metrics", NotFoundError("Maternal profile not found"))

        provider_check = self._usable_provider(
            data.get("recorded_by_id"), "Recording healthcare provider is not active"
        )
        if provider_check.is_err():
            return self._reject("record_metrics", provider_check.unwrap_err())

        with self.store.metrics.write_lock(), self.store.alerts.write_lock():
            result = _build(
                HealthMetrics,
                id=self.id_factory(),
                maternal_profile_id=profile_id,
                recorded_at=self.clock(),
                weight=data.get("weight"),
                blood_pressure_systolic=data.get("blood_pressure_systolic"),
                blood_pressure_diastolic=data.get("blood_pressure_diastolic"),
                blood_sugar=data.get("blood_sugar"),
                hemoglobin_levels=data.get("hemoglobin_levels"),
                fetal_heart_rate=data.get("fetal_heart_rate"),
                notes=data.get("notes", ""),
                recorded_by_id=provider_check.unwrap().id,
            )
            if result.is_err():
                return self._reject("record_metrics", result.unwrap_err())

            metrics = result.unwrap()
            verdict = self.risk_engine.assess(metrics)
            if verdict is RiskVerdict.HIGH_RISK:
                metrics = metrics.model_copy(update={"is_flagged_for_review": True})

            self.store.metrics.insert(metrics.id, metrics)
            if verdict is RiskVerdict.HIGH_RISK:
                self.alerts.create_high_risk_alert(metrics)

        self.logger.info(
            "metrics_recorded",
            metrics_id=metrics.id,
            maternal_profile_id=profile_id,
            verdict=verdict.value,
        )
        return Result.ok(metrics)

    def metrics_for_profile(self, profile_id: str) -> list[HealthMetrics]:
        """Readings for one profile, oldest first."""
        readings = [m for m in self.store.metrics.scan() if m.maternal_profile_id == profile_id]
        return sorted(readings, key=lambda m: m.recorded_at)

    # Visits

    def schedule_visit(self, data: Mapping[str, Any]) -> Result[PrenatalVisit, MaternalHealthError]:
        if reason := validate_visit(data):
            return self._reject("schedule_visit", ValidationError(reason))

        profile_id = data.get("maternal_profile_id")
        if not isinstance(profile_id, str) or self.store.profiles.get(profile_id) is None:
            return self._reject("schedule_visit", NotFoundError("Maternal profile not found"))

        provider_check = self._usable_provider(
            data.get("provider_id"), "Selected healthcare provider is not active"
        )
        if provider_check.is_err():
            return self._reject("schedule_visit", provider_check.unwrap_err())

        next_visit = data.get("next_visit_date")
        result = _build(
            PrenatalVisit,
            id=self.id_factory(),
            maternal_profile_id=profile_id,
            provider_id=provider_check.unwrap().id,
            scheduled_date=store_date_string(data["scheduled_date"]),
            visit_type=data["visit_type"].strip(),
            next_visit_date=store_date_string(next_visit) if next_visit is not None else None,
        )
        if result.is_err():
            return self._reject("schedule_visit", result.unwrap_err())

        visit = result.unwrap()
        self.store.visits.insert(visit.id, visit)
        self.logger.info("visit_scheduled", visit_id=visit.id, maternal_profile_id=profile_id)
        return result

    def complete_visit(
        self,
        visit_id: str,
        findings: str = "",
        recommendations: str = "",
        prescriptions: Iterable[str] = (),
        follow_up_required: bool = False,
        next_visit_date: str | None = None,
    ) -> Result[PrenatalVisit, MaternalHealthError]:
        if next_visit_date is not None and not is_valid_date(next_visit_date):
            return self._reject(
                "complete_visit", ValidationError("Next visit date must be a valid date")
            )

        with self.store.visits.write_lock():
            visit_check = self._open_visit(visit_id)
            if visit_check.is_err():
                return self._reject("complete_visit", visit_check.unwrap_err())

            visit = visit_check.unwrap()
            completed = visit.model_copy(
                update={
                    "completed": True,
                    "findings": findings,
                    "recommendations": recommendations,
                    "prescriptions": (*visit.prescriptions, *prescriptions),
                    "follow_up_required": follow_up_required,
                    "next_visit_date": (
                        store_date_string(next_visit_date)
                        if next_visit_date is not None
                        else visit.next_visit_date
                    ),
                }
            )
            self.store.visits.insert(visit_id, completed)

        self.logger.info(
            "visit_completed", visit_id=visit_id, follow_up_required=follow_up_required
        )
        return Result.ok(completed)

    def cancel_visit(
        self, visit_id: str, reason: str
    ) -> Result[PrenatalVisit, MaternalHealthError]:
        if not isinstance(reason, str) or not reason.strip():
            return self._reject("cancel_visit", ValidationError("Cancellation reason is required"))

        with self.store.visits.write_lock():
            visit_check = self._open_visit(visit_id)
            if visit_check.is_err():
                return self._reject("cancel_visit", visit_check.unwrap_err())

            cancelled = visit_check.unwrap().model_copy(
                update={"cancellation_reason": reason.strip()}
            )
            self.store.visits.insert(visit_id, cancelled)

        self.logger.info("visit_cancelled", visit_id=visit_id)
        return Result.ok(cancelled)

    def visits_for_profile(self, profile_id: str) -> list[PrenatalVisit]:
        visits = [v for v in self.store.visits.scan() if v.maternal_profile_id == profile_id]
        return sorted(visits, key=lambda v: v.scheduled_date)

    # Alerts

    def escalate_alert(self, alert_id: str) -> AlertResult:
        return self.alerts.escalate_alert(alert_id)

    def resolve_alert(self, alert_id: str, notes: str | None = None) -> AlertResult:
        return self.alerts.resolve_alert(alert_id, notes)

    def alerts_for_profile(
        self, profile_id: str, include_resolved: bool = False
    ) -> list[HealthAlert]:
        return self.alerts.alerts_for_profile(profile_id, include_resolved)

    # Helpers

    def _usable_provider(
        self, provider_id: Any, inactive_reason: str
    ) -> Result[HealthcareProvider, MaternalHealthError]:
        provider = self.store.providers.get(provider_id) if isinstance(provider_id, str) else None
        if provider is None:
            return Result.err(NotFoundError("Healthcare provider not found"))
        if not provider.is_active:
            return Result.err(PreconditionError(inactive_reason))
        return Result.ok(provider)

    def _open_visit(self, visit_id: str) -> Result[PrenatalVisit, MaternalHealthError]:
        visit = self.store.visits.get(visit_id)
        if visit is None:
            return Result.err(NotFoundError("Prenatal visit not found"))
        if visit.completed:
            return Result.err(PreconditionError("Visit is already completed"))
        if visit.is_cancelled:
            return Result.err(PreconditionError("Visit is already cancelled"))
        return Result.ok(visit)

    def _reject(
        self, operation: str, error: MaternalHealthError
    ) -> Result[Any, MaternalHealthError]:
        self.logger.warning(
            "operation_rejected", operation=operation, code=error.code, reason=error.reason
        )
        return Result.err(error)
