"""
Test Automation Service - UI suite execution against remote browsers

Stores suite definitions, interprets a small textual step language against
browser sessions, and tracks the status and logs of every run.
"""

__version__ = "0.1.0"
__author__ = "Test Automation Team"

from .core.config import Config
from .core.exceptions import AutomationServiceError
from .core.logging_config import setup_logging
from .execution.orchestrator import SuiteOrchestrator
from .service import TestAutomationService

__all__ = [
    "Config",
    "AutomationServiceError",
    "setup_logging",
    "SuiteOrchestrator",
    "TestAutomationService",
]
