"""Tests for the alert lifecycle: creation, escalation and resolution."""

import pytest

from core.domain.errors import NotFoundError, PreconditionError
from core.domain.models import HealthMetrics, RiskLevel
from core.services.alerting import (
    HIGH_RISK_ACTION,
    HIGH_RISK_DESCRIPTION,
    AlertLifecycleManager,
)
from core.services.record_store import RecordStore


@pytest.fixture
def manager(store: RecordStore, clock) -> AlertLifecycleManager:
    ids = iter(f"alert-{i}" for i in range(1, 100))
    return AlertLifecycleManager(store, clock, id_factory=lambda: next(ids))


@pytest.fixture
def flagged_metrics() -> HealthMetrics:
    return HealthMetrics(
        id="metrics-1",
        maternal_profile_id="profile-1",
        recorded_at=0,
        weight=70.0,
        blood_pressure_systolic=150,
        blood_pressure_diastolic=80,
        blood_sugar=95,
        hemoglobin_levels=12,
        recorded_by_id="provider-7",
        is_flagged_for_review=True,
    )


class TestCreateHighRiskAlert:
    def test_alert_fields(
        self, manager: AlertLifecycleManager, flagged_metrics: HealthMetrics
    ) -> None:
        alert = manager.create_high_risk_alert(flagged_metrics)

        assert alert.severity is RiskLevel.HIGH
        assert alert.description == HIGH_RISK_DESCRIPTION
        assert alert.recommended_action == HIGH_RISK_ACTION
        assert alert.resolved is False
        assert alert.resolved_at is None
        assert alert.escalation_level == 1
        assert alert.provider_id == "provider-7"
        assert alert.maternal_profile_id == "profile-1"

    def test_alert_is_stored(
        self, manager: AlertLifecycleManager, store: RecordStore, flagged_metrics: HealthMetrics
    ) -> None:
        alert = manager.create_high_risk_alert(flagged_metrics)
        assert store.alerts.get(alert.id) == alert

    def test_repeated_breaches_are_not_coalesced(
        self, manager: AlertLifecycleManager, flagged_metrics: HealthMetrics
    ) -> None:
        manager.create_high_risk_alert(flagged_metrics)
        manager.create_high_risk_alert(flagged_metrics)

        assert len(manager.alerts_for_profile("profile-1")) == 2


class TestEscalation:
    def test_escalates_one_level_at_a_time(
        self, manager: AlertLifecycleManager, flagged_metrics: HealthMetrics
    ) -> None:
        alert = manager.create_high_risk_alert(flagged_metrics)

        assert manager.escalate_alert(alert.id).unwrap().escalation_level == 2
        assert manager.escalate_alert(alert.id).unwrap().escalation_level == 3

    def test_cannot_escalate_past_level_three(
        self, manager: AlertLifecycleManager, flagged_metrics: HealthMetrics
    ) -> None:
        alert = manager.create_high_risk_alert(flagged_metrics)
        manager.escalate_alert(alert.id)
        manager.escalate_alert(alert.id)

        result = manager.escalate_alert(alert.id)

        assert isinstance(result.unwrap_err(), PreconditionError)
        assert manager.get_alert(alert.id).unwrap().escalation_level == 3

    def test_cannot_escalate_resolved_alert(
        self, manager: AlertLifecycleManager, flagged_metrics: HealthMetrics
    ) -> None:
        alert = manager.create_high_risk_alert(flagged_metrics)
        manager.resolve_alert(alert.id)

        result = manager.escalate_alert(alert.id)

        assert result.unwrap_err().reason == "Alert is already resolved"

    def test_unknown_alert(self, manager: AlertLifecycleManager) -> None:
        assert isinstance(manager.escalate_alert("missing").unwrap_err(), NotFoundError)


class TestResolution:
    def test_resolve_open_alert(
        self, manager: AlertLifecycleManager, flagged_metrics: HealthMetrics
    ) -> None:
        alert = manager.create_high_risk_alert(flagged_metrics)

        resolved = manager.resolve_alert(alert.id, "reviewed, stable").unwrap()

        assert resolved.resolved is True
        assert resolved.resolved_at is not None
        assert resolved.resolved_at > alert.created_at
        assert resolved.resolution_notes == "reviewed, stable"
        assert not resolved.is_open

    def test_resolving_twice_is_rejected_and_keeps_original(
        self, manager: AlertLifecycleManager, flagged_metrics: HealthMetrics
    ) -> None:
        alert = manager.create_high_risk_alert(flagged_metrics)
        first = manager.resolve_alert(alert.id, "reviewed, stable").unwrap()

        second = manager.resolve_alert(alert.id, "again")

        assert isinstance(second.unwrap_err(), PreconditionError)
        assert manager.get_alert(alert.id).unwrap() == first

    def test_resolve_unknown_alert(self, manager: AlertLifecycleManager) -> None:
        result = manager.resolve_alert("missing", "notes")
        assert result.unwrap_err().reason == "Health alert not found"

    def test_resolved_alerts_hidden_unless_requested(
        self, manager: AlertLifecycleManager, flagged_metrics: HealthMetrics
    ) -> None:
        first = manager.create_high_risk_alert(flagged_metrics)
        second = manager.create_high_risk_alert(flagged_metrics)
        manager.resolve_alert(first.id)

        assert [a.id for a in manager.alerts_for_profile("profile-1")] == [second.id]
        assert len(manager.alerts_for_profile("profile-1", include_resolved=True)) == 2

    def test_open_alerts_ordered_by_escalation(
        self, manager: AlertLifecycleManager, flagged_metrics: HealthMetrics
    ) -> None:
        first = manager.create_high_risk_alert(flagged_metrics)
        second = manager.create_high_risk_alert(flagged_metrics)
        manager.escalate_alert(second.id)

        assert [a.id for a in manager.open_alerts()] == [second.id, first.id]
