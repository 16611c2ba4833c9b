"""
Threshold-based risk assessment for recorded health metrics.

A reading is high-risk when ANY single threshold is breached:
- systolic BP >= 140 mmHg
- diastolic BP >= 90 mmHg
- blood sugar > 140 mg/dL
- hemoglobin < 9 g/dL

Conditions are OR-combined; one breach is enough. Each reading is assessed
once, when it is recorded, and never re-evaluated if thresholds change later.
"""

import structlog

from core.config import RiskThresholdConfig
from core.domain.models import HealthMetrics, RiskVerdict

logger = structlog.get_logger(__name__)


class RiskAssessmentEngine:
    """Pure, deterministic evaluator; holds no state besides its thresholds."""

    def __init__(self, thresholds: RiskThresholdConfig | None = None) -> None:
        self.thresholds = thresholds or RiskThresholdConfig()
        self.logger = logger.bind(component="risk_assessment")

    def breaches(self, metrics: HealthMetrics) -> list[str]:
        """Names of every breached threshold, in a fixed order."""
        t = self.thresholds
        checks = (
            ("systolic_bp", metrics.blood_pressure_systolic >= t.systolic_bp),
            ("diastolic_bp", metrics.blood_pressure_diastolic >= t.diastolic_bp),
            ("blood_sugar", metrics.blood_sugar > t.blood_sugar),
            ("hemoglobin", metrics.hemoglobin_levels < t.hemoglobin),
        )
        return [name for name, breached in checks if breached]

    def assess(self, metrics: HealthMetrics) -> RiskVerdict:
        breached = self.breaches(metrics)
        if not breached:
            return RiskVerdict.NORMAL

        self.logger.info(
            "high_risk_metrics_detected",
            metrics_id=metrics.id,
            maternal_profile_id=metrics.maternal_profile_id,
            breaches=breached,
        )
        return RiskVerdict.HIGH_RISK
