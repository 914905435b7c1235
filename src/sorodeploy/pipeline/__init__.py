"""Pipeline package exports."""
from .results import HardFailure, SoftFailure, StageResult, Success
from .runner import PipelineResult, PipelineRunner, StageRecord

__all__ = [
    "HardFailure",
    "PipelineResult",
    "PipelineRunner",
    "SoftFailure",
    "StageRecord",
    "StageResult",
    "Success",
]
