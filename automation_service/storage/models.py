"""
Data models for suites, test cases and run results.

Defines Pydantic models for stored suite definitions and for the
per-run records the orchestrator maintains.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class RunStatus(Enum):
    """Run lifecycle status."""

    PENDING = "pending"
    RUNNING = "running"
    PASSED = "passed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (RunStatus.PASSED, RunStatus.FAILED)

    def can_transition_to(self, other: "RunStatus") -> bool:
        """Status only moves forward: pending -> running -> passed | failed."""
        if self == other:
            return True
        return other in _TRANSITIONS[self]


_TRANSITIONS = {
    RunStatus.PENDING: {RunStatus.RUNNING, RunStatus.PASSED, RunStatus.FAILED},
    RunStatus.RUNNING: {RunStatus.PASSED, RunStatus.FAILED},
    RunStatus.PASSED: set(),
    RunStatus.FAILED: set(),
}


class TestCase(BaseModel):
    """A named, ordered list of raw steps embedded in a suite."""

    __test__ = False

    model_config = ConfigDict(extra="ignore")

    id: str = Field(default_factory=new_id, description="Test case identifier")
    name: str = Field("", description="Test case name")
    steps: List[str] = Field(default_factory=list, description="Raw step strings")
    expected_result: str = Field("", description="Expected result description")
    active: bool = Field(True, description="Inactive cases are skipped")

    @field_validator("steps", mode="before")
    @classmethod
    def coerce_steps(cls, v):
        if v is None:
            return []
        return [str(step) if step is not None else "" for step in v]


class TestSuite(BaseModel):
    """A named, ordered collection of test cases targeting one environment."""

    __test__ = False

    model_config = ConfigDict(extra="ignore")

    id: str = Field(default_factory=new_id, description="Suite identifier")
    name: str = Field(..., description="Suite name")
    description: str = Field("", description="Suite description")
    test_cases: List[TestCase] = Field(
        default_factory=list, description="Test cases in execution order"
    )
    environment: str = Field("dev", description="Default target environment")
    created_by: str = Field("system", description="Creator")
    created_at: datetime = Field(default_factory=utcnow, description="Creation time")
    updated_at: datetime = Field(default_factory=utcnow, description="Last update time")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("Suite name cannot be empty")
        return v

    @property
    def active_test_cases(self) -> List[TestCase]:
        return [case for case in self.test_cases if case.active]

    @property
    def step_count(self) -> int:
        return sum(len(case.steps) for case in self.active_test_cases)


class RunResult(BaseModel):
    """One execution attempt of a suite with its status and log trail."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(default_factory=new_id, description="Run identifier")
    suite_id: str = Field(..., description="Owning suite identifier")
    status: RunStatus = Field(RunStatus.PENDING, description="Run status")
    start_time: datetime = Field(default_factory=utcnow, description="Start time")
    end_time: Optional[datetime] = Field(None, description="End time once finalized")
    logs: List[str] = Field(default_factory=list, description="Ordered log lines")

    @property
    def is_finished(self) -> bool:
        return self.status.is_terminal

    @property
    def duration(self) -> Optional[float]:
        """Run duration in seconds, once the run has ended."""
        if self.end_time is None:
            return None
        return (self.end_time - self.start_time).total_seconds()

    def to_summary(self) -> dict:
        """Create a summary dictionary for logging."""
        return {
            "run_id": self.id,
            "suite_id": self.suite_id,
            "status": self.status.value,
            "duration": self.duration,
            "log_lines": len(self.logs),
        }


class WebhookRegistration(BaseModel):
    """An acknowledged webhook registration."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., description="Registration identifier")
    url: str = Field(..., description="Callback URL")
    event_types: List[str] = Field(..., description="Subscribed event types")
    created_at: datetime = Field(default_factory=utcnow, description="Creation time")
