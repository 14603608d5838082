"""
PagerDuty V3 webhook adapter.

Responders set the provisioning parameters as incident custom fields.
An invocation is produced when an incident is triggered and whenever its
custom field values change. Triggered events carry no field values, so the
worker reads them from the incident with ``fetch_incident_parameters``.
"""

from __future__ import annotations

from typing import Any

import structlog

from computeforge.clients.pagerduty import PagerDutyClient
from computeforge.triggers.models import Invocation, TriggerSource, stringify

logger = structlog.get_logger()

ACTIONABLE_EVENT_TYPES = frozenset(
    {
        "incident.triggered",
        "incident.custom_field_values.updated",
    }
)


def parse_incident_event(payload: dict[str, Any]) -> Invocation | None:
    event = payload.get("event") or {}
    event_type = event.get("event_type")
    if event_type not in ACTIONABLE_EVENT_TYPES:
        logger.info("incident_event_ignored", event_type=event_type)
        return None

    data = event.get("data") or {}
    incident_id = (data.get("incident") or {}).get("id") or data.get("id")
    if not incident_id:
        logger.info("incident_event_ignored", event_type=event_type, reason="missing_incident")
        return None

    values = _field_values(data.get("custom_fields") or [])
    agent = (event.get("agent") or {}).get("summary")

    fields: dict[str, Any] = {
        "source": TriggerSource.incident,
        "parameters": stringify(values),
        "requested_by": agent,
        "reply": {"incident_id": incident_id, "event_type": event_type},
    }
    if event.get("id"):
        fields["invocation_id"] = event["id"]
    return Invocation(**fields)


async def fetch_incident_parameters(client: PagerDutyClient, invocation: Invocation) -> dict[str, str]:
    """Current custom field values of the incident behind ``invocation``."""
    incident_id = invocation.reply["incident_id"]
    logger.info("incident_fields_fetching", incident_id=incident_id)
    fields = await client.custom_field_values(incident_id)
    return stringify(_field_values(fields))


def _field_values(fields: list[dict[str, Any]]) -> dict[str, Any]:
    return {f["name"]: f.get("value") for f in fields if f.get("name")}
