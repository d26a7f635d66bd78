"""Core components for the Test Automation Service."""

from .config import Config
from .exceptions import (
    AutomationServiceError,
    SuiteNotFound,
    RunNotFound,
    StepFailure,
    ElementNotFound,
    AssertionFailed,
    EnvironmentSetupError,
    SessionAcquisitionError,
    DeliveryError,
    ValidationError,
    InvalidStatusTransition,
)
from .logging_config import setup_logging, get_logger

__all__ = [
    "Config",
    "AutomationServiceError",
    "SuiteNotFound",
    "RunNotFound",
    "StepFailure",
    "ElementNotFound",
    "AssertionFailed",
    "EnvironmentSetupError",
    "SessionAcquisitionError",
    "DeliveryError",
    "ValidationError",
    "InvalidStatusTransition",
    "setup_logging",
    "get_logger",
]
