"""
Test Automation Service facade.

Bundles the store, orchestrator and report generator behind the operations
an outer surface (HTTP routes, CLI) needs: suite CRUD, triggering runs,
querying results and logs, reports and webhook registration. Callers are
assumed to be authenticated already.
"""

import time
from typing import Any, Dict, List, Mapping, Optional

from .core.config import Config
from .core.exceptions import RunNotFound, SuiteNotFound, ValidationError
from .core.logging_config import get_logger
from .execution.orchestrator import SuiteOrchestrator
from .reporting.generator import ReportGenerator
from .storage.models import RunResult, TestSuite, WebhookRegistration
from .storage.store import InMemoryRunRecordStore, RunRecordStore


class TestAutomationService:
    """Entry point for managing suites and their runs."""

    __test__ = False

    def __init__(
        self,
        config: Optional[Config] = None,
        store: Optional[RunRecordStore] = None,
        orchestrator: Optional[SuiteOrchestrator] = None,
        reports: Optional[ReportGenerator] = None,
    ):
        self.config = config or Config.from_env()
        self.store = store or InMemoryRunRecordStore()
        self.orchestrator = orchestrator or SuiteOrchestrator(self.config, self.store)
        self.reports = reports or ReportGenerator(self.config.report_base_url)
        self.logger = get_logger("automation_service.service")
        self._webhooks: List[WebhookRegistration] = []

    # Suites

    def list_suites(self, page: int = 1, size: int = 20) -> List[TestSuite]:
        return self.store.list_suites(page, size)

    def create_suite(self, payload: Mapping[str, Any]) -> TestSuite:
        """
        Create a suite from a payload.

        Raises:
            ValidationError: If ``name`` is missing or ``test_cases`` is not a list
        """
        payload = dict(payload or {})
        violations = []
        if not payload.get("name"):
            violations.append("name is required")
        if not isinstance(payload.get("test_cases"), list):
            violations.append("test_cases must be a list")
        if violations:
            raise ValidationError(
                "name and test_cases required",
                validation_type="suite",
                violations=violations,
            )

        try:
            suite = self.store.create_suite(payload)
        except ValueError as e:
            raise ValidationError(
                f"Invalid suite: {e}", validation_type="suite", violations=[str(e)]
            ) from e

        self.logger.info(
            f"Suite created: {suite.name}",
            extra={"metadata": {"suite_id": suite.id, "test_cases": len(suite.test_cases)}},
        )
        return suite

    def get_suite(self, suite_id: str) -> TestSuite:
        suite = self.store.get_suite(suite_id)
        if suite is None:
            raise SuiteNotFound(suite_id)
        return suite

    def update_suite(self, suite_id: str, partial: Mapping[str, Any]) -> TestSuite:
        try:
            suite = self.store.update_suite(suite_id, partial or {})
        except ValueError as e:
            raise ValidationError(
                f"Invalid suite: {e}", validation_type="suite", violations=[str(e)]
            ) from e
        if suite is None:
            raise SuiteNotFound(suite_id)
        return suite

    def delete_suite(self, suite_id: str) -> None:
        if not self.store.delete_suite(suite_id):
            raise SuiteNotFound(suite_id)

    # Runs

    async def execute(self, suite_id: str, environment: str) -> Dict[str, str]:
        """
        Trigger execution of a suite without waiting for it.

        Raises:
            ValidationError: If ``suite_id`` or ``environment`` is missing
            SuiteNotFound: If the suite does not exist
        """
        if not suite_id or not environment:
            raise ValidationError(
                "suite_id and environment required",
                validation_type="execution",
                violations=[
                    name
                    for name, value in (("suite_id", suite_id), ("environment", environment))
                    if not value
                ],
            )
        run_id = await self.orchestrator.execute_suite(suite_id, environment)
        return {"message": "Execution started", "result_id": run_id}

    def list_results(
        self,
        suite_id: Optional[str] = None,
        status: Optional[str] = None,
        page: int = 1,
        size: int = 20,
    ) -> List[RunResult]:
        return self.store.list_runs(suite_id=suite_id, status=status, page=page, size=size)

    def get_result(self, run_id: str) -> RunResult:
        run = self.store.get_run(run_id)
        if run is None:
            raise RunNotFound(run_id)
        return run

    def get_logs(self, run_id: str) -> List[str]:
        return self.get_result(run_id).logs

    def get_report(self, run_id: str) -> Dict[str, str]:
        run = self.get_result(run_id)
        return {"report_url": self.reports.report_url(run.id)}

    def render_report(self, run_id: str) -> str:
        run = self.get_result(run_id)
        return self.reports.render(run, self.store.get_suite(run.suite_id))

    # Webhooks

    def register_webhook(self, payload: Mapping[str, Any]) -> WebhookRegistration:
        """
        Acknowledge a webhook registration.

        Registrations are kept in memory only; lifecycle events are still
        delivered through the notification gateway.
        """
        payload = dict(payload or {})
        if not payload.get("url") or not isinstance(payload.get("event_types"), list):
            raise ValidationError(
                "url and event_types required",
                validation_type="webhook",
                violations=["url and event_types required"],
            )
        registration = WebhookRegistration(
            id=f"webhook-{int(time.time() * 1000)}-{len(self._webhooks) + 1}",
            url=payload["url"],
            event_types=payload["event_types"],
        )
        self._webhooks.append(registration)
        return registration

    @property
    def webhooks(self) -> List[WebhookRegistration]:
        return list(self._webhooks)
