"""Custom exception types used across the deployment pipeline."""
from __future__ import annotations


class SorodeployError(Exception):
    """Base exception for sorodeploy-specific errors."""


class ConfigurationError(SorodeployError):
    """Raised when a configuration file cannot be parsed or validated."""


class PipelineStageError(SorodeployError):
    """Raised when a pipeline stage fails irrecoverably."""

    def __init__(self, stage: str, message: str, *, output: str | None = None) -> None:
        super().__init__(f"Stage '{stage}' failed: {message}")
        self.stage = stage
        self.message = message
        self.output = output
