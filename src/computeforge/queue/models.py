from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from typing import Any

from computeforge.triggers.models import Invocation

PROVISION_JOB = "compute.provision"


@dataclass(slots=True)
class JobMessage:
    job_id: str
    job_type: str
    payload: dict[str, Any] = field(default_factory=dict)
    requested_by: str | None = None

    @classmethod
    def for_invocation(cls, invocation: Invocation) -> JobMessage:
        return cls(
            job_id=invocation.invocation_id,
            job_type=PROVISION_JOB,
            payload={"invocation": invocation.to_payload()},
            requested_by=invocation.requested_by,
        )

    def to_message_body(self) -> str:
        data = asdict(self)
        return json.dumps({k: v for k, v in data.items() if v is not None}, separators=(",", ":"))
