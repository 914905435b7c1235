"""Shared runtime context for pipeline stages."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ..config.models import AppConfig
from ..workspace import Workspace

PIPELINE_FIELDS = (
    "signing_identity_address",
    "artifact_path",
    "remote_identifier",
    "target_network_name",
)


@dataclass
class PipelineContext:
    config: AppConfig
    workspace: Workspace
    target_network_name: str
    signing_identity_address: str | None = None
    artifact_path: Path | None = None
    remote_identifier: str | None = None
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("sorodeploy.pipeline"))
    diagnostics: dict[str, Any] = field(default_factory=dict)

    def is_populated(self, name: str) -> bool:
        value = getattr(self, name)
        return value is not None and value != ""

    def assign(self, name: str, value: Any) -> None:
        if name not in PIPELINE_FIELDS or name == "target_network_name":
            msg = f"{name!r} is not a stage output field"
            raise ValueError(msg)
        setattr(self, name, value)

    def record_diagnostic(self, stage: str, payload: Any) -> None:
        self.diagnostics.setdefault("stages", {})[stage] = payload

    def snapshot(self) -> dict[str, Any]:
        values = {name: getattr(self, name) for name in PIPELINE_FIELDS}
        return {name: str(value) if isinstance(value, Path) else value for name, value in values.items()}
