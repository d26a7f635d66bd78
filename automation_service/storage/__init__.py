"""Suite and run records plus the store that holds them."""

from .models import (
    RunResult,
    RunStatus,
    TestCase,
    TestSuite,
    WebhookRegistration,
)
from .store import InMemoryRunRecordStore, RunRecordStore, paginate

__all__ = [
    "RunResult",
    "RunStatus",
    "TestCase",
    "TestSuite",
    "WebhookRegistration",
    "InMemoryRunRecordStore",
    "RunRecordStore",
    "paginate",
]
