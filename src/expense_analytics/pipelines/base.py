"""
Step-based pipeline runner.

A pipeline is an ordered list of named steps sharing one context dict.
Steps report their own outcome: a step result whose ``status`` is FAILED
is counted and the run moves on, while an exception escaping a step ends
the run.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Optional

from ..logging import get_logger


logger = get_logger("pipelines")


class PipelineStatus(Enum):
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass
class PipelineResult:
    """Summary of one pipeline run."""

    status: PipelineStatus
    started_at: datetime
    completed_at: Optional[datetime] = None
    steps_succeeded: int = 0
    steps_failed: int = 0
    failed_steps: list[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.completed_at and self.started_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration_seconds": self.duration_seconds,
            "steps_succeeded": self.steps_succeeded,
            "steps_failed": self.steps_failed,
            "failed_steps": list(self.failed_steps),
            "error": self.error,
        }


@dataclass
class PipelineStep:
    name: str
    func: Callable[[dict[str, Any]], Any]


def _step_failed(step_result: Any) -> bool:
    return getattr(step_result, "status", None) == PipelineStatus.FAILED


class BasePipeline(ABC):
    """Runs registered steps in order over a shared context."""

    def __init__(self, name: str):
        self.name = name
        self._steps: list[PipelineStep] = []
        self._context: dict[str, Any] = {}

    def add_step(self, name: str, func: Callable[[dict[str, Any]], Any]) -> "BasePipeline":
        if any(step.name == name for step in self._steps):
            raise ValueError(f"Duplicate step name: {name}")
        self._steps.append(PipelineStep(name=name, func=func))
        return self

    @property
    def step_names(self) -> list[str]:
        return [step.name for step in self._steps]

    @property
    def results(self) -> dict[str, Any]:
        """Step results from the last run, keyed by step name."""
        return self._context.get("results", {})

    def run(self) -> PipelineResult:
        """Execute every step; see the module docstring for failure handling."""
        outcome = PipelineResult(status=PipelineStatus.RUNNING, started_at=datetime.now())
        self._context = {"results": {}}

        try:
            for step in self._steps:
                logger.info(f"[{self.name}] step: {step.name}")
                step_result = step.func(self._context)
                self._context["results"][step.name] = step_result

                if _step_failed(step_result):
                    outcome.steps_failed += 1
                    outcome.failed_steps.append(step.name)
                    logger.warning(f"[{self.name}] step failed: {step.name}")
                else:
                    outcome.steps_succeeded += 1

            outcome.status = (
                PipelineStatus.FAILED if outcome.steps_failed else PipelineStatus.SUCCESS
            )

        except Exception as e:
            logger.exception(f"[{self.name}] aborted: {e}")
            outcome.status = PipelineStatus.FAILED
            outcome.error = str(e)

        finally:
            outcome.completed_at = datetime.now()

        return outcome

    @abstractmethod
    def build(self) -> "BasePipeline":
        """Register the pipeline's steps."""
