import socket

import httplib2
import pytest
from googleapiclient.errors import HttpError

from drivegate.sdk.exceptions import RemoteOperationError, RetryExhaustedError
from drivegate.sdk.retry import RetryPolicy, is_transient


def http_error(status_code):
    return HttpError(httplib2.Response({"status": status_code}), b"")


def _raising(error):
    def call():
        raise error
    return call


class TestIsTransient:

    @pytest.mark.parametrize("code", [408, 429, 500, 502, 503, 504])
    def test_transient_status_codes(self, code):
        assert is_transient(http_error(code))

    @pytest.mark.parametrize("code", [400, 401, 403, 404])
    def test_client_errors_are_not_transient(self, code):
        assert not is_transient(http_error(code))

    def test_network_errors_are_transient(self):
        assert is_transient(ConnectionResetError())
        assert is_transient(socket.timeout())

    def test_other_errors_are_not_transient(self):
        assert not is_transient(ValueError("bad"))


class TestRetryPolicy:

    def test_success_needs_no_sleep(self):
        sleeps = []
        policy = RetryPolicy(sleep=sleeps.append)

        assert policy.call("list", lambda: "ok") == "ok"
        assert sleeps == []

    def test_retries_until_success(self):
        sleeps = []
        outcomes = [ConnectionError("reset"), http_error(503), "done"]

        def flaky():
            outcome = outcomes.pop(0)
            if isinstance(outcome, Exception):
                raise outcome
            return outcome

        policy = RetryPolicy(max_attempts=3, sleep=sleeps.append)

        assert policy.call("list", flaky) == "done"
        assert len(sleeps) == 2

    def test_exhaustion_raises_distinct_error(self):
        policy = RetryPolicy(max_attempts=2, sleep=lambda d: None)

        with pytest.raises(RetryExhaustedError) as exc:
            policy.call("update", _raising(http_error(500)))

        assert exc.value.attempts == 2
        assert exc.value.action == "update"
        assert isinstance(exc.value, RemoteOperationError)
        assert "after 2 attempts" in str(exc.value)

    def test_non_transient_error_fails_immediately(self):
        sleeps = []
        policy = RetryPolicy(sleep=sleeps.append)

        with pytest.raises(RemoteOperationError) as exc:
            policy.call("delete", _raising(http_error(404)))

        assert not isinstance(exc.value, RetryExhaustedError)
        assert isinstance(exc.value.cause, HttpError)
        assert sleeps == []

    def test_delays_are_jittered_and_capped(self):
        sleeps = []
        policy = RetryPolicy(max_attempts=8, base_delay=1.0, max_delay=3.0, sleep=sleeps.append)

        with pytest.raises(RetryExhaustedError):
            policy.call("list", _raising(ConnectionError("reset")))

        assert len(sleeps) == 7
        assert all(0 <= delay <= 3.0 for delay in sleeps)

    def test_remote_operation_error_passes_through_unwrapped(self):
        inner = RemoteOperationError("grant", ValueError("denied"))
        policy = RetryPolicy(sleep=lambda d: None)

        with pytest.raises(RemoteOperationError) as exc:
            policy.call("create", _raising(inner))

        assert exc.value is inner

    def test_from_config(self):
        policy = RetryPolicy.from_config({"retry": {"max_attempts": 5, "base_delay": 0.1, "max_delay": 2}})

        assert policy.max_attempts == 5
        assert policy.base_delay == 0.1
        assert policy.max_delay == 2.0

    def test_rejects_zero_attempts(self):
        with pytest.raises(ValueError):
            RetryPolicy(max_attempts=0)
