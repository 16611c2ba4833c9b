"""
Alert lifecycle: creation, escalation and resolution of health alerts.

States: Open (resolved=False) -> Resolved (terminal). Escalation raises the
level of an Open alert one step at a time, up to MAX_ESCALATION_LEVEL.
Automatic creation always starts at level 1 and never coalesces with other
open alerts for the same profile.
"""

from collections.abc import Callable

import structlog

from core.domain.errors import MaternalHealthError, NotFoundError, PreconditionError
from core.domain.models import HealthAlert, HealthMetrics, RiskLevel
from core.domain.timestamps import SystemClock, new_id
from core.services.record_store import RecordStore
from core.services.result import Result

logger = structlog.get_logger(__name__)

HIGH_RISK_DESCRIPTION = "Abnormal health metrics detected"
HIGH_RISK_ACTION = "Immediate medical review required"
MAX_ESCALATION_LEVEL = 3

AlertResult = Result[HealthAlert, MaternalHealthError]


class AlertLifecycleManager:
    """Creates and transitions alerts stored in the alert collection."""

    def __init__(
        self,
        store: RecordStore,
        clock: Callable[[], int] | None = None,
        id_factory: Callable[[], str] = new_id,
    ) -> None:
        self.store = store
        self.clock = clock or SystemClock()
        self.id_factory = id_factory
        self.logger = logger.bind(component="alert_manager")

    def create_high_risk_alert(self, metrics: HealthMetrics) -> HealthAlert:
        """Raise a HIGH alert for a flagged reading, owned by its recorder."""
        alert = HealthAlert(
            id=self.id_factory(),
            maternal_profile_id=metrics.maternal_profile_id,
            created_at=self.clock(),
            severity=RiskLevel.HIGH,
            description=HIGH_RISK_DESCRIPTION,
            recommended_action=HIGH_RISK_ACTION,
            resolved=False,
            resolved_at=None,
            provider_id=metrics.recorded_by_id,
            escalation_level=1,
        )
        self.store.alerts.insert(alert.id, alert)

        self.logger.info(
            "alert_created",
            alert_id=alert.id,
            maternal_profile_id=alert.maternal_profile_id,
            metrics_id=metrics.id,
            severity=alert.severity.value,
        )
        return alert

    def get_alert(self, alert_id: str) -> AlertResult:
        alert = self.store.alerts.get(alert_id)
        if alert is None:
            return Result.err(NotFoundError("Health alert not found"))
        return Result.ok(alert)

    def escalate_alert(self, alert_id: str) -> AlertResult:
        with self.store.alerts.write_lock():
            alert = self.store.alerts.get(alert_id)
            if alert is None:
                return self._reject(alert_id, NotFoundError("Health alert not found"))
            if not alert.is_open:
                return self._reject(alert_id, PreconditionError("Alert is already resolved"))
            if alert.escalation_level >= MAX_ESCALATION_LEVEL:
                return self._reject(
                    alert_id, PreconditionError("Alert is already at maximum escalation level")
                )

            escalated = alert.model_copy(update={"escalation_level": alert.escalation_level + 1})
            self.store.alerts.insert(alert_id, escalated)

        self.logger.info(
            "alert_escalated", alert_id=alert_id, escalation_level=escalated.escalation_level
        )
        return Result.ok(escalated)

    def resolve_alert(self, alert_id: str, notes: str | None = None) -> AlertResult:
        """
        Move an Open alert to Resolved.

        Resolving an already-resolved alert is rejected and leaves the stored
        alert (including its original resolved_at) untouched.
        """
        with self.store.alerts.write_lock():
            alert = self.store.alerts.get(alert_id)
            if alert is None:
                return self._reject(alert_id, NotFoundError("Health alert not found"))
            if not alert.is_open:
                return self._reject(alert_id, PreconditionError("Alert is already resolved"))

            resolved = alert.model_copy(
                update={
                    "resolved": True,
                    "resolved_at": self.clock(),
                    "resolution_notes": notes,
                }
            )
            self.store.alerts.insert(alert_id, resolved)

        self.logger.info("alert_resolved", alert_id=alert_id, has_notes=notes is not None)
        return Result.ok(resolved)

    def alerts_for_profile(
        self, profile_id: str, include_resolved: bool = False
    ) -> list[HealthAlert]:
        """Alerts for one profile, oldest first."""
        alerts = [
            a
            for a in self.store.alerts.scan()
            if a.maternal_profile_id == profile_id and (include_resolved or a.is_open)
        ]
        return sorted(alerts, key=lambda a: a.created_at)

    def open_alerts(self) -> list[HealthAlert]:
        """All open alerts, most urgent first."""
        alerts = [a for a in self.store.alerts.scan() if a.is_open]
        return sorted(alerts, key=lambda a: (-a.escalation_level, a.created_at))

    def _reject(self, alert_id: str, error: MaternalHealthError) -> AlertResult:
        self.logger.warning("alert_transition_rejected", alert_id=alert_id, reason=error.reason)
        return Result.err(error)
