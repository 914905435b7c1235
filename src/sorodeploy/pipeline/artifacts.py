"""Dataclasses describing pipeline outputs."""
from __future__ import annotations

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any


@dataclass(slots=True)
class DeploymentSummary:
    contract_id: str
    deployer_address: str
    identity_name: str
    network_name: str
    network_display_name: str
    explorer_url: str
    artifact_path: Path | None = None
    record_path: Path | None = None
    optimized: bool = False

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        for key in ("artifact_path", "record_path"):
            if payload[key] is not None:
                payload[key] = str(payload[key])
        return payload
