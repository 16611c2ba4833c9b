"""
End-to-end walk through the maternal health pipeline.

This script exercises:
1. Configuration loading and logging setup
2. Provider registration and profile creation
3. Metrics recording with automatic risk assessment
4. Alert escalation and resolution
5. Rejected inputs and their error reasons

Run with: uv run python demo_system.py
"""

from rich.console import Console
from rich.panel import Panel

from core.config import configure_logging, get_config
from core.services.maternal_health import MaternalHealthService
from core.services.reporting import build_alert_table, print_config_summary
from core.services.serialization import serialize_metrics, serialize_profile

console = Console()


def main() -> None:
    config = get_config()
    configure_logging(config.logging)
    print_config_summary(config, console)

    service = MaternalHealthService.from_config(config)

    provider = service.register_provider(
        {
            "name": "Dr. Amara Osei",
            "specialization": "Obstetrics",
            "license_number": "OB-20931",
            "facility_id": "clinic-north",
        }
    ).unwrap()

    rejected = service.create_profile(
        {
            "name": "Jane Doe",
            "age": 15,
            "blood_type": "O+",
            "due_date": "2025-09-01",
            "primary_care_provider_id": provider.id,
        }
    )
    console.print(f"[yellow]Rejected profile:[/yellow] {rejected.unwrap_err().reason}")

    profile = service.create_profile(
        {
            "name": "Jane Doe",
            "age": 28,
            "blood_type": "O+",
            "due_date": "2025-09-01",
            "primary_care_provider_id": provider.id,
            "allergies": ["penicillin"],
        }
    ).unwrap()
    console.print(Panel(str(serialize_profile(profile)), title="Profile created"))

    readings = [
        {"blood_pressure_systolic": 120, "blood_pressure_diastolic": 80, "blood_sugar": 95},
        {"blood_pressure_systolic": 150, "blood_pressure_diastolic": 80, "blood_sugar": 95},
        {"blood_pressure_systolic": 118, "blood_pressure_diastolic": 76, "blood_sugar": 160},
    ]
    for reading in readings:
        metrics = service.record_metrics(
            {
                **reading,
                "maternal_profile_id": profile.id,
                "recorded_by_id": provider.id,
                "weight": 68.5,
                "hemoglobin_levels": 12.0,
            }
        ).unwrap()
        flagged = serialize_metrics(metrics)["is_flagged_for_review"]
        console.print(f"Recorded metrics {metrics.id[:8]} flagged={flagged}")

    open_alerts = service.alerts_for_profile(profile.id)
    service.escalate_alert(open_alerts[0].id)
    service.resolve_alert(open_alerts[-1].id, "reviewed, stable")

    console.print(
        build_alert_table(
            service.alerts_for_profile(profile.id, include_resolved=True),
            title="Alerts for Jane Doe",
        )
    )


if __name__ == "__main__":
    main()
