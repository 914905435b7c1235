"""Workspace management utilities."""
from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .config.models import AppConfig


@dataclass(slots=True)
class Workspace:
    """Resolves the repository-relative paths a deployment run touches."""

    root: Path
    project_dir: Path
    record_path: Path
    metadata_dir: Path

    @classmethod
    def create(cls, *, root: Path, config: AppConfig) -> "Workspace":
        root = root.resolve()
        return cls(
            root=root,
            project_dir=root / config.build.project_dir,
            record_path=root / config.output.record_path,
            metadata_dir=root / config.output.metadata_dir,
        )

    def write_json(self, path: Path, data: Any) -> None:
        path.write_text(json.dumps(data, indent=2, ensure_ascii=False, default=str))

    def save_metadata(self, filename: str, payload: Any) -> Path:
        self.metadata_dir.mkdir(parents=True, exist_ok=True)
        path = self.metadata_dir / filename
        self.write_json(path, payload)
        return path
