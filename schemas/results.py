"""
Result and report models returned by reconciliation components.
"""

from pydantic import BaseModel, Field
from typing import List, Optional, Set
from datetime import datetime
import enum

from models.base import RunStatus


class ProvisionStatus(str, enum.Enum):
    """Outcome of a create-if-absent table call"""
    CREATED = "created"
    ALREADY_EXISTS = "already_exists"


class ProvisionResult(BaseModel):
    table_name: str
    status: ProvisionStatus


class LinkReport(BaseModel):
    """
    Purchase order linking outcome.

    A re-run without new data reports linked=0: links made by earlier runs
    are counted as already_linked, never as new.
    """
    linked: int = 0
    already_linked: int = 0
    unmatched: int = 0

    @property
    def changed(self) -> bool:
        return self.linked > 0


class ReplaceResult(BaseModel):
    """Outcome of regenerating a derived table (or a scope of it)"""
    count: int = 0
    removed: int = 0
    changed: bool = False

    def merge(self, other: "ReplaceResult") -> "ReplaceResult":
        return ReplaceResult(
            count=self.count + other.count,
            removed=self.removed + other.removed,
            changed=self.changed or other.changed,
        )


class SyncResult(BaseModel):
    """Outcome of rebuilding the work-center registry"""
    work_centers: Set[str] = Field(default_factory=set)
    removed: int = 0
    changed: bool = False


class StepOutcome(str, enum.Enum):
    SUCCESS = "Success"
    NO_CHANGE = "No change"
    FAILED = "Failed"
    SKIPPED = "Skipped"


class StepResult(BaseModel):
    """Pass/fail record of one reconciliation step"""
    name: str
    ok: bool
    outcome: StepOutcome
    detail: Optional[str] = None

    @property
    def summary(self) -> str:
        return f"{self.name}: {self.outcome.value}"


class ReconciliationReport(BaseModel):
    """Aggregate per-step report returned by run_all()"""
    run_id: str
    started_at: datetime = Field(default_factory=datetime.utcnow)
    completed_at: Optional[datetime] = None
    steps: List[StepResult] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(step.ok for step in self.steps)

    @property
    def status(self) -> RunStatus:
        if not self.steps or self.ok:
            return RunStatus.SUCCESS
        if any(step.ok for step in self.steps):
            return RunStatus.PARTIAL
        return RunStatus.FAILED

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.completed_at is None:
            return None
        return (self.completed_at - self.started_at).total_seconds()

    def step(self, name: str) -> Optional[StepResult]:
        for step in self.steps:
            if step.name == name:
                return step
        return None

    def summary_lines(self) -> List[str]:
        return [step.summary for step in self.steps]
