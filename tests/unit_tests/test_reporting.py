"""
ErrorReportClient tests: construction, sync/async delivery and deadlines.
"""

import threading
import time

import pytest
from google.auth.exceptions import DefaultCredentialsError

from unalogger import InitError, ReportContext, ReportSubmissionError, ServiceIdentity
from unalogger.reporting import ErrorReportClient, format_error

IDENTITY = ServiceIdentity("hepp", "test", "v1.0")


@pytest.fixture
def client(client_factory):
    c = ErrorReportClient(IDENTITY, timeout=1.0, client_factory=client_factory)
    yield c
    c.close()


class TestConstruction:
    def test_identity_passed_to_factory(self, client, client_factory):
        fake = client_factory.last
        assert (fake.project, fake.service, fake.version) == ("hepp", "test", "v1.0")
        assert client.identity is IDENTITY

    def test_credentials_error_becomes_init_error(self, client_factory):
        client_factory.error = DefaultCredentialsError("no credentials")

        with pytest.raises(InitError) as exc_info:
            ErrorReportClient(IDENTITY, client_factory=client_factory)

        assert exc_info.value.code == "INIT_FAILED"
        assert exc_info.value.details["project_id"] == "hepp"
        assert isinstance(exc_info.value.__cause__, DefaultCredentialsError)


class TestSubmitSync:
    def test_delivers_with_context(self, client, client_factory):
        ctx = ReportContext(user="alice")

        client.submit_sync(RuntimeError("WOOT"), ctx)

        (report,) = client_factory.last.reports
        assert report["message"] == "WOOT"
        assert report["user"] == "alice"

    def test_failure_raises_submission_error(self, client, client_factory):
        client_factory.last.fail_with = ConnectionError("unreachable")

        with pytest.raises(ReportSubmissionError, match="unreachable"):
            client.submit_sync(RuntimeError("WOOT"))

    def test_deadline(self, client, client_factory):
        release = threading.Event()
        client_factory.last.block = release
        try:
            with pytest.raises(ReportSubmissionError, match="timed out"):
                client.submit_sync(RuntimeError("slow"), timeout=0.05)
        finally:
            release.set()

    def test_timed_out_report_does_not_delay_exit(self, run_python):
        result = run_python(
            """
            import time

            from unalogger import LoggingContext, RepanickedError, ServiceIdentity

            class HangingClient:
                def __init__(self, **kwargs):
                    pass

                def report(self, message, http_context=None, user=None):
                    time.sleep(60)

            started = time.monotonic()
            ctx = LoggingContext(client_factory=HangingClient)
            ctx.init_error_reporting(ServiceIdentity("hepp", "test", "v1.0"))
            try:
                with ctx.report_panics():
                    raise RuntimeError("WOOT")
            except RepanickedError:
                print(f"repanicked after {time.monotonic() - started:.1f}", flush=True)
            """,
            env={"UNA_ERROR_REPORTING_TIMEOUT": "0.2"},
            timeout=15,
        )

        assert result.returncode == 0
        assert "repanicked after" in result.stdout
        assert "timed out" in result.stderr

    def test_after_close(self, client):
        client.close()

        with pytest.raises(ReportSubmissionError, match="closed"):
            client.submit_sync(RuntimeError("late"))


class TestSubmitAsync:
    def test_returns_future(self, client, client_factory):
        future = client.submit_async("plain message")

        future.result(timeout=1)
        assert client_factory.last.reports[0]["message"] == "plain message"

    def test_failure_goes_to_callback(self, client_factory):
        failures = []
        c = ErrorReportClient(IDENTITY, client_factory=client_factory, on_failure=failures.append)
        client_factory.last.fail_with = ConnectionError("unreachable")

        c.submit_async(RuntimeError("lost"))
        c.close()

        (failure,) = failures
        assert isinstance(failure, ReportSubmissionError)
        assert failure.details["report"] == "lost"

    def test_after_close_is_noop(self, client, client_factory):
        client.close()

        assert client.submit_async("late") is None
        assert client_factory.last.reports == []

    def test_close_drains_queue(self, client_factory):
        c = ErrorReportClient(IDENTITY, client_factory=client_factory)
        for i in range(5):
            c.submit_async(f"report {i}")

        c.close()

        assert len(client_factory.last.reports) == 5
        assert client_factory.last.closed


class TestFormatError:
    def test_plain_value(self):
        assert format_error(42) == "42"

    def test_unraised_exception(self):
        assert format_error(ValueError("bad")) == "bad"

    def test_raised_exception_includes_traceback(self):
        try:
            raise ValueError("bad")
        except ValueError as exc:
            text = format_error(exc)

        assert text.startswith("Traceback (most recent call last):")
        assert text.rstrip().endswith("ValueError: bad")


def test_close_wait_is_bounded(client_factory):
    c = ErrorReportClient(IDENTITY, timeout=0.1, client_factory=client_factory)
    release = threading.Event()
    client_factory.last.block = release
    try:
        c.submit_async("stuck")

        started = time.monotonic()
        c.close()

        assert time.monotonic() - started < 2
        assert c.closed
        assert client_factory.last.closed
    finally:
        release.set()
