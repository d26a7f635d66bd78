"""
Suite execution orchestrator.

Owns the run state machine. A call to ``execute_suite`` creates the run
record and returns its id straight away; the run itself proceeds in a
background task that sets up the environment, acquires a browser session,
interprets every step in order, tears everything down and finalizes the
run before notifying external observers.
"""

import asyncio
import logging
import time
from typing import Any, Coroutine, Dict, Optional, Set

from ..browser.session import BrowserSession, PlaywrightSessionProvider
from ..core.config import Config
from ..core.exceptions import (
    EnvironmentSetupError,
    SessionAcquisitionError,
    StepFailure,
    SuiteNotFound,
)
from ..core.logging_config import get_logger, log_performance
from ..notifications.gateway import NotificationGateway
from ..steps.interpreter import StepInterpreter
from ..storage.models import RunStatus, TestSuite, utcnow
from ..storage.store import RunRecordStore
from .environment import EnvironmentContext, EnvironmentProvisioner


class SuiteOrchestrator:
    """
    Runs stored suites against exclusive browser sessions.

    Each run gets its own session and its own run record. Session
    acquisition is gated by a semaphore sized by
    ``config.max_concurrent_sessions``; runs beyond that wait for a slot.
    The first failing step aborts the rest of the suite.
    """

    def __init__(
        self,
        config: Config,
        store: RunRecordStore,
        session_provider: Optional[Any] = None,
        gateway: Optional[NotificationGateway] = None,
        environment: Optional[EnvironmentProvisioner] = None,
        interpreter: Optional[StepInterpreter] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            config: Service configuration
            store: Suite and run record store
            session_provider: Object with ``async build(endpoint, browser_kind)``
            gateway: Notification gateway for lifecycle events
            environment: Environment provisioner
            interpreter: Step interpreter
        """
        self.config = config
        self.store = store
        self.gateway = gateway or NotificationGateway.from_config(config)
        self.session_provider = session_provider or PlaywrightSessionProvider(
            headless=config.headless
        )
        self.environment = environment or EnvironmentProvisioner(self.gateway)
        self.interpreter = interpreter or StepInterpreter(
            timeout_ms=config.step_timeout_ms
        )
        self.logger = get_logger(__name__)

        self._session_slots = asyncio.Semaphore(max(1, config.max_concurrent_sessions))
        self._run_tasks: Dict[str, asyncio.Task] = {}
        self._background: Set[asyncio.Task] = set()

    @property
    def active_runs(self) -> int:
        """Number of runs that have not finished yet."""
        return len(self._run_tasks)

    async def execute_suite(
        self,
        suite_id: str,
        environment: Optional[str] = None,
        base_url: Optional[str] = None,
    ) -> str:
        """
        Start executing a stored suite.

        Returns once the run record exists; completion is observed by
        polling the run record.

        Args:
            suite_id: Identifier of the suite to run
            environment: Target environment, defaults to the suite's own
            base_url: Base URL for relative navigation, defaults to config

        Returns:
            Identifier of the created run

        Raises:
            SuiteNotFound: If the suite does not exist; no run is created
        """
        suite = self.store.get_suite(suite_id)
        if suite is None:
            raise SuiteNotFound(suite_id)

        run = self.store.create_run(suite_id, RunStatus.RUNNING)
        env_name = environment or suite.environment

        task = asyncio.create_task(
            self._execute(suite, run.id, env_name, base_url or self.config.base_url),
            name=f"run-{run.id}",
        )
        self._run_tasks[run.id] = task
        task.add_done_callback(lambda _t, run_id=run.id: self._run_tasks.pop(run_id, None))

        self.logger.info(
            f"Execution started: {suite.name}",
            extra={"metadata": {"suite_id": suite_id, "run_id": run.id, "environment": env_name}},
        )
        return run.id

    async def wait_for_run(self, run_id: str) -> None:
        """Wait until the given run has been finalized."""
        task = self._run_tasks.get(run_id)
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)

    async def wait_idle(self) -> None:
        """Wait for every in-flight run and pending notification dispatch."""
        while self._run_tasks or self._background:
            pending = list(self._run_tasks.values()) + list(self._background)
            await asyncio.gather(*pending, return_exceptions=True)

    async def _execute(
        self, suite: TestSuite, run_id: str, env_name: str, base_url: str
    ) -> None:
        logger = get_logger(__name__, run_id=run_id, suite_id=suite.id)
        started = time.time()

        try:
            error = await self._run_suite(suite, run_id, env_name, base_url, logger)
        except Exception as e:
            # Nothing ran against a session; record the cause as a fatal line
            logger.error(
                f"Suite orchestration error: {e}",
                extra={"metadata": {"error_type": e.__class__.__name__}},
            )
            self.store.append_log(run_id, f"FATAL: {e}")
            self._finalize(run_id, RunStatus.FAILED)
            self._dispatch(
                self._report_outcome(
                    suite.id, run_id, RunStatus.FAILED, str(e), "Suite orchestration error"
                )
            )
            return

        status = RunStatus.FAILED if error is not None else RunStatus.PASSED
        self._finalize(run_id, status)
        log_performance(
            logger,
            f"suite_run_{suite.id}",
            time.time() - started,
            status=status.value,
            environment=env_name,
        )
        message = "Suite passed" if status == RunStatus.PASSED else "Suite failed"
        self._dispatch(self._report_outcome(suite.id, run_id, status, error, message))

    async def _run_suite(
        self,
        suite: TestSuite,
        run_id: str,
        env_name: str,
        base_url: str,
        logger: logging.Logger,
    ) -> Optional[str]:
        """Run setup, steps and teardown; return the step error, if any."""
        try:
            env_context = await self.environment.setup(env_name)
        except Exception as e:
            raise EnvironmentSetupError(
                f"Environment setup failed: {e}", environment=env_name
            ) from e

        async with self._session_slots:
            # No session means nothing to close or tear down
            session = await self._acquire_session(logger)
            try:
                return await self._run_test_cases(
                    session, suite, run_id, base_url, logger
                )
            finally:
                await self._close_session(session, logger)
                await self._teardown(env_context, logger)

    async def _acquire_session(self, logger: logging.Logger) -> BrowserSession:
        endpoint = self.config.browser_endpoint
        browser = self.config.default_browser
        try:
            session = await self.session_provider.build(endpoint, browser)
        except SessionAcquisitionError:
            raise
        except Exception as e:
            raise SessionAcquisitionError(
                f"Failed to acquire browser session: {e}",
                endpoint=endpoint,
                browser=browser,
            ) from e
        logger.debug("Browser session acquired")
        return session

    async def _run_test_cases(
        self,
        session: BrowserSession,
        suite: TestSuite,
        run_id: str,
        base_url: str,
        logger: logging.Logger,
    ) -> Optional[str]:
        for case in suite.test_cases:
            if not case.active:
                logger.debug(f"Skipping inactive test case: {case.name}")
                continue

            for raw_step in case.steps:
                if not raw_step:
                    continue
                try:
                    line = await self.interpreter.execute(session, base_url, raw_step)
                except StepFailure as failure:
                    self.store.append_log(
                        run_id, f'ERROR in step "{failure.step}": {failure.message}'
                    )
                    logger.warning(
                        f"Step failed in test case {case.name}: {failure.message}",
                        extra={"metadata": failure.to_dict()},
                    )
                    return failure.message
                self.store.append_log(run_id, line)

        return None

    async def _close_session(self, session: BrowserSession, logger: logging.Logger) -> None:
        try:
            await session.close()
        except Exception as e:
            logger.warning(f"Browser session close failed: {e}")

    async def _teardown(self, context: EnvironmentContext, logger: logging.Logger) -> None:
        try:
            await self.environment.teardown(context)
        except Exception as e:
            logger.warning(f"Environment teardown failed: {e}")

    def _finalize(self, run_id: str, status: RunStatus) -> None:
        self.store.update_run(run_id, {"status": status, "end_time": utcnow()})

    def _dispatch(self, coro: Coroutine) -> None:
        task = asyncio.create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _report_outcome(
        self,
        suite_id: str,
        run_id: str,
        status: RunStatus,
        error: Optional[str],
        message: str,
    ) -> None:
        payload: Dict[str, Any] = {"suiteId": suite_id, "resultId": run_id}
        if error is not None:
            payload["error"] = error
        event_type = "suite_passed" if status == RunStatus.PASSED else "suite_failed"
        level = "INFO" if status == RunStatus.PASSED else "ERROR"

        try:
            await self.gateway.notify_event(event_type, payload)
            await self.gateway.send_log(level, message, payload)
        except Exception as e:
            self.logger.warning(f"Outcome dispatch failed for run {run_id}: {e}")
