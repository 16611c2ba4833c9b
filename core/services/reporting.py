"""
Console reporting for clinicians and operators.

Renders open alerts and the active configuration with rich. Timestamps go
through the display layer so the console shows the same strings as any
serialized record.
"""

from collections.abc import Iterable

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from core.config import AppConfig
from core.domain.models import HealthAlert
from core.domain.timestamps import display_time

ESCALATION_STYLES = {1: "yellow", 2: "dark_orange", 3: "bold red"}


def build_alert_table(alerts: Iterable[HealthAlert], title: str = "Open Health Alerts") -> Table:
    table = Table(title=title)
    table.add_column("Alert", style="cyan", no_wrap=True)
    table.add_column("Profile", no_wrap=True)
    table.add_column("Created")
    table.add_column("Severity")
    table.add_column("Level", justify="right")
    table.add_column("Status")
    table.add_column("Recommended Action")

    for alert in alerts:
        style = ESCALATION_STYLES.get(alert.escalation_level, "")
        table.add_row(
            alert.id[:8],
            alert.maternal_profile_id[:8],
            display_time(alert.created_at),
            alert.severity.value,
            str(alert.escalation_level),
            "open" if alert.is_open else "resolved",
            alert.recommended_action,
            style=style if alert.is_open else "dim",
        )
    return table


def print_config_summary(config: AppConfig, console: Console | None = None) -> None:
    """Print configuration summary for debugging."""
    console = console or Console()
    risk = config.risk
    body = "\n".join(
        [
            f"Environment: {config.environment}",
            f"Debug Mode: {config.debug}",
            f"Log Level: {config.logging.level} ({config.logging.format})",
            "",
            f"Systolic BP threshold: >= {risk.systolic_bp:g} mmHg",
            f"Diastolic BP threshold: >= {risk.diastolic_bp:g} mmHg",
            f"Blood sugar threshold: > {risk.blood_sugar:g} mg/dL",
            f"Hemoglobin threshold: < {risk.hemoglobin:g} g/dL",
        ]
    )
    console.print(Panel(body, title="Configuration Summary"))
