"""
Base exception classes for the Test Automation Service.

Provides a hierarchy of exceptions for the errors that can occur while
storing suites, interpreting steps and orchestrating suite runs.
"""

from typing import Optional, Dict, Any, List


class AutomationServiceError(Exception):
    """Base exception class for all Test Automation Service errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for structured logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "context": self.context,
        }


class SuiteNotFound(AutomationServiceError):
    """Raised when a suite identifier does not resolve to a stored suite."""

    def __init__(self, suite_id: str):
        super().__init__("Suite not found", "SUITE_NOT_FOUND")
        self.suite_id = suite_id
        self.context.update({"suite_id": suite_id})


class RunNotFound(AutomationServiceError):
    """Raised when a run identifier does not resolve to a stored run."""

    def __init__(self, run_id: str):
        super().__init__("Result not found", "RUN_NOT_FOUND")
        self.run_id = run_id
        self.context.update({"run_id": run_id})


class ElementNotFound(AutomationServiceError):
    """Raised when an element does not appear within the wait timeout."""

    def __init__(self, locator: str, timeout_ms: Optional[int] = None):
        if timeout_ms is None:
            message = f"Element not found: {locator}"
        else:
            message = f"Element not found within {timeout_ms}ms: {locator}"
        super().__init__(message, "ELEMENT_NOT_FOUND")
        self.locator = locator
        self.timeout_ms = timeout_ms
        self.context.update({"locator": locator, "timeout_ms": timeout_ms})


class AssertionFailed(AutomationServiceError):
    """Raised when expected text is missing from the page body."""

    def __init__(self, expected: str):
        super().__init__(f"Expected text not found: {expected}", "ASSERTION_FAILED")
        self.expected = expected
        self.context.update({"expected": expected})


class StepFailure(AutomationServiceError):
    """Raised when a single step fails; wraps the underlying cause."""

    def __init__(self, step: str, cause: BaseException):
        super().__init__(str(cause) or cause.__class__.__name__, "STEP_FAILED")
        self.step = step
        self.cause = cause
        self.context.update(
            {
                "step": step,
                "cause_type": cause.__class__.__name__,
            }
        )


class EnvironmentSetupError(AutomationServiceError):
    """Raised when environment provisioning fails before a run starts."""

    def __init__(self, message: str, environment: Optional[str] = None):
        super().__init__(message, "ENVIRONMENT_ERROR")
        self.environment = environment
        self.context.update({"environment": environment})


class SessionAcquisitionError(AutomationServiceError):
    """Raised when a remote browser session cannot be built."""

    def __init__(
        self,
        message: str,
        endpoint: Optional[str] = None,
        browser: Optional[str] = None,
    ):
        super().__init__(message, "SESSION_ACQUISITION_FAILED")
        self.endpoint = endpoint
        self.browser = browser
        self.context.update({"endpoint": endpoint, "browser": browser})


class DeliveryError(AutomationServiceError):
    """Raised inside the notification gateway when a delivery fails."""

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status: Optional[int] = None,
    ):
        super().__init__(message, "DELIVERY_FAILED")
        self.url = url
        self.status = status
        self.context.update({"url": url, "status": status})


class ValidationError(AutomationServiceError):
    """Raised when validation fails."""

    def __init__(
        self,
        message: str,
        validation_type: Optional[str] = None,
        violations: Optional[List[str]] = None,
    ):
        super().__init__(message, "VALIDATION_FAILED")
        self.validation_type = validation_type
        self.violations = violations or []
        self.context.update(
            {
                "validation_type": validation_type,
                "violations": violations,
            }
        )


class InvalidStatusTransition(AutomationServiceError):
    """Raised when a run status update would move backwards."""

    def __init__(self, run_id: str, current: str, requested: str):
        super().__init__(
            f"Run {run_id} cannot move from {current} to {requested}",
            "INVALID_STATUS_TRANSITION",
        )
        self.run_id = run_id
        self.current = current
        self.requested = requested
        self.context.update(
            {"run_id": run_id, "current": current, "requested": requested}
        )
