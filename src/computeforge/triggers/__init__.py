"""Trigger adapters: turn webhooks and direct calls into invocations."""

from computeforge.triggers.incident import fetch_incident_parameters, parse_incident_event
from computeforge.triggers.manual import manual_invocation
from computeforge.triggers.models import Invocation, TriggerSource, merge_defaults
from computeforge.triggers.vcs import fetch_parameters, parse_push_event

__all__ = [
    "Invocation",
    "TriggerSource",
    "fetch_incident_parameters",
    "fetch_parameters",
    "manual_invocation",
    "merge_defaults",
    "parse_incident_event",
    "parse_push_event",
]
