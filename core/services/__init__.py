"""
Core services for the application.

This package contains the record store, risk assessment engine, alert
lifecycle manager and the service facade that ties them together.
"""

from .alerting import AlertLifecycleManager
from .maternal_health import MaternalHealthService
from .record_store import Collection, RecordStore
from .result import Result
from .risk_assessment import RiskAssessmentEngine

__all__ = [
    "AlertLifecycleManager",
    "Collection",
    "MaternalHealthService",
    "RecordStore",
    "Result",
    "RiskAssessmentEngine",
]
