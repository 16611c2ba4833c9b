"""
Domain models for maternal health tracking.

These models represent the core clinical records and are framework-agnostic.
They use Pydantic for validation; records are immutable and every update
produces a new copy that replaces the stored one.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class RiskLevel(str, Enum):
    """Severity classification shared by profiles and alerts."""

    LOW = "LOW"  # Regular monitoring
    MEDIUM = "MEDIUM"  # Increased monitoring
    HIGH = "HIGH"  # Immediate medical attention


class Trimester(str, Enum):
    """Pregnancy stage."""

    FIRST = "FIRST"
    SECOND = "SECOND"
    THIRD = "THIRD"


class BloodType(str, Enum):
    A_POSITIVE = "A+"
    A_NEGATIVE = "A-"
    B_POSITIVE = "B+"
    B_NEGATIVE = "B-"
    AB_POSITIVE = "AB+"
    AB_NEGATIVE = "AB-"
    O_POSITIVE = "O+"
    O_NEGATIVE = "O-"


class ProviderRole(str, Enum):
    """Authorization category of a provider (not a security boundary)."""

    ADMIN = "admin"
    PROVIDER = "provider"


class RiskVerdict(str, Enum):
    """Outcome of assessing a single metrics reading."""

    NORMAL = "normal"
    HIGH_RISK = "high-risk"


class Record(BaseModel):
    """Base for every stored record: immutable, keyed by an opaque id."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    id: str


class HealthcareProvider(Record):
    name: str
    specialization: str
    license_number: str
    contact_info: str = ""
    facility_id: str = ""
    is_active: bool = True
    role: ProviderRole = ProviderRole.PROVIDER
    last_updated: int


class MaternalProfile(Record):
    name: str
    age: int = Field(ge=16, le=60)
    blood_type: BloodType
    emergency_contact: str = ""
    due_date: int = Field(description="Nanoseconds since the epoch")
    current_trimester: Trimester = Trimester.FIRST
    risk_level: RiskLevel = RiskLevel.LOW
    primary_care_provider_id: str
    medical_history: tuple[str, ...] = ()
    allergies: frozenset[str] = frozenset()
    is_high_risk_pregnancy: bool = False
    created_at: int
    last_updated: int


class HealthMetrics(Record):
    """A single set of vital-sign measurements for one profile."""

    maternal_profile_id: str
    recorded_at: int
    weight: float = Field(gt=0)
    blood_pressure_systolic: float
    blood_pressure_diastolic: float
    blood_sugar: float
    hemoglobin_levels: float
    fetal_heart_rate: float | None = None
    notes: str = ""
    recorded_by_id: str
    is_flagged_for_review: bool = False


class PrenatalVisit(Record):
    maternal_profile_id: str
    provider_id: str
    scheduled_date: int
    completed: bool = False
    visit_type: str
    findings: str = ""
    recommendations: str = ""
    next_visit_date: int | None = None
    prescriptions: tuple[str, ...] = ()
    follow_up_required: bool = False
    cancellation_reason: str | None = None

    @property
    def is_cancelled(self) -> bool:
        return self.cancellation_reason is not None


class HealthAlert(Record):
    """
    Alert raised against a profile.

    Open while `resolved` is False; Resolved is terminal and carries
    `resolved_at` plus optional notes.
    """

    maternal_profile_id: str
    created_at: int
    severity: RiskLevel
    description: str
    recommended_action: str
    resolved: bool = False
    resolved_at: int | None = None
    provider_id: str
    resolution_notes: str | None = None
    escalation_level: int = Field(default=1, ge=1, le=3)

    @property
    def is_open(self) -> bool:
        return not self.resolved
