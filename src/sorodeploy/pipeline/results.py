"""Tagged outcomes returned by every pipeline stage."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True, slots=True)
class Success:
    payload: Any = None
    detail: str | None = None


@dataclass(frozen=True, slots=True)
class SoftFailure:
    """A non-essential stage failed; the pipeline keeps its previous state."""

    warning: str
    output: str | None = None


@dataclass(frozen=True, slots=True)
class HardFailure:
    """The pipeline must stop after this stage."""

    error: str
    output: str | None = None


StageResult = Union[Success, SoftFailure, HardFailure]
