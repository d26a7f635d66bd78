"""
Unit tests for the TestAutomationService facade.
"""

import pytest

from automation_service.core.exceptions import (
    RunNotFound,
    SuiteNotFound,
    ValidationError,
)
from automation_service.reporting.generator import ReportGenerator
from automation_service.service import TestAutomationService
from automation_service.storage.models import RunStatus


@pytest.fixture
def service(temp_config, store, orchestrator):
    return TestAutomationService(
        config=temp_config,
        store=store,
        orchestrator=orchestrator,
        reports=ReportGenerator(temp_config.report_base_url),
    )


class TestSuiteOperations:
    """Test cases for suite CRUD through the facade."""

    def test_create_and_get(self, service, login_suite_data):
        suite = service.create_suite(login_suite_data)

        assert service.get_suite(suite.id) == suite
        assert service.list_suites() == [suite]

    @pytest.mark.parametrize(
        "payload",
        [
            {"test_cases": []},
            {"name": "", "test_cases": []},
            {"name": "Login"},
            {"name": "Login", "test_cases": "navigate:/"},
            {},
        ],
    )
    def test_create_requires_name_and_test_cases(self, service, payload):
        with pytest.raises(ValidationError) as exc_info:
            service.create_suite(payload)

        assert exc_info.value.message == "name and test_cases required"
        assert exc_info.value.error_code == "VALIDATION_FAILED"

    def test_create_rejects_invalid_model(self, service):
        with pytest.raises(ValidationError) as exc_info:
            service.create_suite({"name": "   ", "test_cases": []})

        assert exc_info.value.message.startswith("Invalid suite")

    def test_missing_suite(self, service):
        with pytest.raises(SuiteNotFound) as exc_info:
            service.get_suite("nope")
        assert exc_info.value.message == "Suite not found"

        with pytest.raises(SuiteNotFound):
            service.update_suite("nope", {"name": "x"})
        with pytest.raises(SuiteNotFound):
            service.delete_suite("nope")

    def test_update_and_delete(self, service, login_suite_data):
        suite = service.create_suite(login_suite_data)

        updated = service.update_suite(suite.id, {"environment": "prod"})
        assert updated.environment == "prod"

        service.delete_suite(suite.id)
        with pytest.raises(SuiteNotFound):
            service.get_suite(suite.id)


@pytest.mark.asyncio
class TestRunOperations:
    """Test cases for triggering runs and reading results."""

    async def test_execute_requires_suite_and_environment(self, service):
        with pytest.raises(ValidationError) as exc_info:
            await service.execute("", "dev")
        assert exc_info.value.violations == ["suite_id"]

        with pytest.raises(ValidationError) as exc_info:
            await service.execute("suite-1", "")
        assert exc_info.value.message == "suite_id and environment required"

    async def test_execute_unknown_suite(self, service):
        with pytest.raises(SuiteNotFound):
            await service.execute("missing", "dev")

    async def test_execute_and_read_result(self, service, login_suite_data):
        suite = service.create_suite(login_suite_data)

        response = await service.execute(suite.id, "staging")
        await service.orchestrator.wait_idle()

        assert response["message"] == "Execution started"
        run = service.get_result(response["result_id"])
        assert run.suite_id == suite.id
        assert run.status == RunStatus.FAILED
        assert service.get_logs(run.id) == run.logs
        assert service.list_results(suite_id=suite.id, status="failed") == [run]

    async def test_report_link_and_render(self, service):
        suite = service.create_suite({"name": "Smoke", "test_cases": []})
        response = await service.execute(suite.id, "dev")
        await service.orchestrator.wait_idle()
        run_id = response["result_id"]

        assert service.get_report(run_id) == {
            "report_url": f"http://reports.test/reports/{run_id}"
        }
        rendered = service.render_report(run_id)
        assert "Suite:    Smoke" in rendered
        assert "Status:   PASSED" in rendered

    async def test_missing_result(self, service):
        with pytest.raises(RunNotFound) as exc_info:
            service.get_result("nope")
        assert exc_info.value.message == "Result not found"

        with pytest.raises(RunNotFound):
            service.get_logs("nope")
        with pytest.raises(RunNotFound):
            service.get_report("nope")


class TestWebhooks:
    """Test cases for webhook registration."""

    def test_register(self, service):
        registration = service.register_webhook(
            {"url": "http://hooks.test/cb", "event_types": ["suite_failed"]}
        )

        assert registration.id.startswith("webhook-")
        assert registration.url == "http://hooks.test/cb"
        assert registration.event_types == ["suite_failed"]
        assert service.webhooks == [registration]

    def test_ids_are_unique(self, service):
        payload = {"url": "http://hooks.test/cb", "event_types": []}

        first = service.register_webhook(payload)
        second = service.register_webhook(payload)

        assert first.id != second.id

    @pytest.mark.parametrize(
        "payload",
        [{"event_types": ["x"]}, {"url": "http://hooks.test"}, {"url": "u", "event_types": "x"}],
    )
    def test_register_requires_url_and_event_types(self, service, payload):
        with pytest.raises(ValidationError):
            service.register_webhook(payload)
