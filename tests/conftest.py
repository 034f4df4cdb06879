"""
Shared fixtures: an isolated LoggingContext wired to a fake Error Reporting client.
"""

import os
import subprocess
import sys
import textwrap
import threading
from pathlib import Path

import pytest

from unalogger import LoggingContext, set_default_context
from unalogger.config import Settings

SRC_DIR = Path(__file__).resolve().parents[1] / "src"


class FakeReportingClient:
    """Stands in for google.cloud.error_reporting.Client."""

    def __init__(self, project=None, service=None, version=None, **kwargs):
        self.project = project
        self.service = service
        self.version = version
        self.reports = []
        self.fail_with = None
        self.block = None
        self.closed = False
        self._lock = threading.Lock()

    def report(self, message, http_context=None, user=None):
        if self.block is not None:
            self.block.wait(5)
        if self.fail_with is not None:
            raise self.fail_with
        with self._lock:
            self.reports.append({"message": message, "http_context": http_context, "user": user})

    def close(self):
        self.closed = True


class FakeClientFactory:
    """Records every client it builds."""

    def __init__(self):
        self.clients = []
        self.error = None

    def __call__(self, **kwargs):
        if self.error is not None:
            raise self.error
        client = FakeReportingClient(**kwargs)
        self.clients.append(client)
        return client

    @property
    def last(self) -> FakeReportingClient:
        return self.clients[-1]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep host UNA_* variables out of the tests."""
    for name in (
        "UNA_LOG_LEVEL",
        "UNA_LOG_FORMAT",
        "UNA_LOG_FILE_PATH",
        "UNA_ERROR_REPORTING_PROJECT_ID",
        "UNA_ERROR_REPORTING_SERVICE",
        "UNA_ERROR_REPORTING_VERSION",
        "UNA_ERROR_REPORTING_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def client_factory():
    return FakeClientFactory()


@pytest.fixture
def context(client_factory):
    """Fresh context per test, installed as the default context."""
    ctx = LoggingContext(Settings(), client_factory=client_factory)
    set_default_context(ctx)
    yield ctx
    if ctx.client is not None and not ctx.client.closed:
        ctx.close_client()
    set_default_context(None)


@pytest.fixture
def run_python():
    """Run a snippet in a fresh interpreter with the package importable."""

    def run(code: str, env: dict | None = None, timeout: float = 30) -> subprocess.CompletedProcess:
        full_env = {**os.environ, **(env or {})}
        full_env["PYTHONPATH"] = os.pathsep.join(p for p in (str(SRC_DIR), os.environ.get("PYTHONPATH")) if p)
        return subprocess.run(
            [sys.executable, "-c", textwrap.dedent(code)],
            capture_output=True,
            text=True,
            timeout=timeout,
            env=full_env,
        )

    return run
