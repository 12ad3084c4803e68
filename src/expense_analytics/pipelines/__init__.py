"""Pipeline orchestration modules."""

from .base import BasePipeline, PipelineResult, PipelineStatus
from .reports import ReportPipeline, ReportResult

__all__ = [
    "BasePipeline",
    "PipelineResult",
    "PipelineStatus",
    "ReportPipeline",
    "ReportResult",
]
