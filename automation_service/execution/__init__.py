"""
Suite execution components.

This module provides the suite orchestrator and the environment
provisioning it runs around each suite.
"""

from .environment import EnvironmentContext, EnvironmentProvisioner
from .orchestrator import SuiteOrchestrator

__all__ = [
    "EnvironmentContext",
    "EnvironmentProvisioner",
    "SuiteOrchestrator",
]
