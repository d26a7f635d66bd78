"""
Run record store.

Holds suites and run results. ``RunRecordStore`` is the interface the
orchestrator and service depend on; ``InMemoryRunRecordStore`` keeps
everything in process memory for the lifetime of the process.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional, TypeVar, Union

from ..core.exceptions import InvalidStatusTransition
from .models import RunResult, RunStatus, TestSuite, new_id, utcnow


T = TypeVar("T")

DEFAULT_PAGE_SIZE = 20

# Fields that never change once a record exists
_IMMUTABLE_SUITE_FIELDS = {"id", "created_at"}
_IMMUTABLE_RUN_FIELDS = {"id", "suite_id", "logs"}


def paginate(items: List[T], page: int = 1, size: int = DEFAULT_PAGE_SIZE) -> List[T]:
    """Return the 1-based ``page`` of ``size`` items."""
    page = max(int(page), 1)
    size = max(int(size), 0)
    start = (page - 1) * size
    return items[start:start + size]


class RunRecordStore(ABC):
    """Storage operations required for suites and run results."""

    @abstractmethod
    def list_suites(self, page: int = 1, size: int = DEFAULT_PAGE_SIZE) -> List[TestSuite]:
        ...

    @abstractmethod
    def create_suite(self, data: Union[TestSuite, Mapping[str, Any]]) -> TestSuite:
        ...

    @abstractmethod
    def get_suite(self, suite_id: str) -> Optional[TestSuite]:
        ...

    @abstractmethod
    def update_suite(self, suite_id: str, partial: Mapping[str, Any]) -> Optional[TestSuite]:
        ...

    @abstractmethod
    def delete_suite(self, suite_id: str) -> bool:
        ...

    @abstractmethod
    def create_run(self, suite_id: str, status: RunStatus = RunStatus.PENDING) -> RunResult:
        ...

    @abstractmethod
    def update_run(self, run_id: str, partial: Mapping[str, Any]) -> Optional[RunResult]:
        ...

    @abstractmethod
    def append_log(self, run_id: str, *lines: str) -> Optional[RunResult]:
        ...

    @abstractmethod
    def get_run(self, run_id: str) -> Optional[RunResult]:
        ...

    @abstractmethod
    def list_runs(
        self,
        suite_id: Optional[str] = None,
        status: Optional[Union[RunStatus, str]] = None,
        page: int = 1,
        size: int = DEFAULT_PAGE_SIZE,
    ) -> List[RunResult]:
        ...


class InMemoryRunRecordStore(RunRecordStore):
    """
    Process-local store backed by insertion-ordered dictionaries.

    Every operation runs under one re-entrant lock, so read-modify-write
    updates on a record are never interleaved and log appends for a run
    keep their order. Returned records are deep copies.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._suites: Dict[str, TestSuite] = {}
        self._runs: Dict[str, RunResult] = {}
        self._lock = threading.RLock()
        self.logger = logger or logging.getLogger(__name__)

    # Suites

    def list_suites(self, page: int = 1, size: int = DEFAULT_PAGE_SIZE) -> List[TestSuite]:
        with self._lock:
            suites = list(self._suites.values())
            return [suite.model_copy(deep=True) for suite in paginate(suites, page, size)]

    def create_suite(self, data: Union[TestSuite, Mapping[str, Any]]) -> TestSuite:
        if isinstance(data, TestSuite):
            data = data.model_dump()
        payload = dict(data)
        if not payload.get("id"):
            payload["id"] = new_id()
        now = utcnow()
        payload["created_at"] = now
        payload["updated_at"] = now
        suite = TestSuite.model_validate(payload)

        with self._lock:
            self._suites[suite.id] = suite
        self.logger.debug(f"Suite created: {suite.id}")
        return suite.model_copy(deep=True)

    def get_suite(self, suite_id: str) -> Optional[TestSuite]:
        with self._lock:
            suite = self._suites.get(suite_id)
            return suite.model_copy(deep=True) if suite else None

    def update_suite(self, suite_id: str, partial: Mapping[str, Any]) -> Optional[TestSuite]:
        with self._lock:
            existing = self._suites.get(suite_id)
            if existing is None:
                return None
            changes = {
                key: value
                for key, value in dict(partial).items()
                if key not in _IMMUTABLE_SUITE_FIELDS
            }
            merged = {**existing.model_dump(), **changes, "updated_at": utcnow()}
            updated = TestSuite.model_validate(merged)
            self._suites[suite_id] = updated
            return updated.model_copy(deep=True)

    def delete_suite(self, suite_id: str) -> bool:
        with self._lock:
            return self._suites.pop(suite_id, None) is not None

    # Runs

    def create_run(self, suite_id: str, status: RunStatus = RunStatus.PENDING) -> RunResult:
        run = RunResult(suite_id=suite_id, status=RunStatus(status))
        with self._lock:
            self._runs[run.id] = run
        self.logger.debug(f"Run created: {run.id} for suite {suite_id}")
        return run.model_copy(deep=True)

    def update_run(self, run_id: str, partial: Mapping[str, Any]) -> Optional[RunResult]:
        with self._lock:
            existing = self._runs.get(run_id)
            if existing is None:
                return None
            changes = {
                key: value
                for key, value in dict(partial).items()
                if key not in _IMMUTABLE_RUN_FIELDS
            }
            if "status" in changes:
                requested = RunStatus(changes["status"])
                if not existing.status.can_transition_to(requested):
                    raise InvalidStatusTransition(
                        run_id, existing.status.value, requested.value
                    )
                changes["status"] = requested
            updated = existing.model_copy(update=changes)
            self._runs[run_id] = RunResult.model_validate(updated.model_dump())
            return self._runs[run_id].model_copy(deep=True)

    def append_log(self, run_id: str, *lines: str) -> Optional[RunResult]:
        with self._lock:
            existing = self._runs.get(run_id)
            if existing is None:
                return None
            existing.logs.extend(lines)
            return existing.model_copy(deep=True)

    def get_run(self, run_id: str) -> Optional[RunResult]:
        with self._lock:
            run = self._runs.get(run_id)
            return run.model_copy(deep=True) if run else None

    def list_runs(
        self,
        suite_id: Optional[str] = None,
        status: Optional[Union[RunStatus, str]] = None,
        page: int = 1,
        size: int = DEFAULT_PAGE_SIZE,
    ) -> List[RunResult]:
        wanted = None
        if status:
            wanted = status.value if isinstance(status, RunStatus) else str(status)
        with self._lock:
            runs = [
                run
                for run in self._runs.values()
                if (not suite_id or run.suite_id == suite_id)
                and (wanted is None or run.status.value == wanted)
            ]
            return [run.model_copy(deep=True) for run in paginate(runs, page, size)]
