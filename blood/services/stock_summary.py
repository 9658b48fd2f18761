"""Read-only stock figures for the FAQ assistant and dashboards."""

from __future__ import annotations

from typing import Dict

from blood.models import InventoryBag


def available_units_by_type() -> Dict[str, int]:
    return InventoryBag.objects.available_units_by_type()


def stock_summary_text() -> str:
    """Plain-text answer used when someone asks the assistant about current stock."""

    if not InventoryBag.objects.exists():
        return (
            "I could not find any blood stock records in the system right now.\n"
            "Please check the Inventory module on the dashboard or contact an administrator."
        )

    by_type = available_units_by_type()
    if not by_type:
        return (
            "There is currently no SAFE blood marked as AVAILABLE in the inventory.\n"
            "Please check the Inventory module or contact the blood bank for the latest details."
        )

    lines = ["Here is a summary of current SAFE blood stock marked as AVAILABLE in the system:"]
    for blood_type, units in by_type.items():
        lines.append(f"• {blood_type}: {units} unit{'s' if units != 1 else ''}")
    return "\n".join(lines)
