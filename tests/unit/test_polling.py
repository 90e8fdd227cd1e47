"""Unit tests for the bounded polling helper."""

from __future__ import annotations

import logging

import pytest

from nifi_provider.errors import ConvergenceTimeout, ReadFailed
from nifi_provider.polling import poll


class TestPoll:
    """Tests for poll()."""

    def test_returns_true_on_first_success_without_sleeping(self) -> None:
        """Verify an immediately satisfied check does not sleep."""
        sleeps: list[float] = []
        assert poll(lambda: True, attempts=5, interval=3, description="x", sleep=sleeps.append)
        assert sleeps == []

    def test_sleeps_between_attempts_only(self) -> None:
        """Verify the interval is slept between attempts but not after the last one."""
        sleeps: list[float] = []
        results = iter([False, False, True])
        assert poll(lambda: next(results), attempts=5, interval=3, description="x",
                    sleep=sleeps.append)
        assert sleeps == [3, 3]

    def test_exhaustion_is_logged_not_raised(self, caplog: pytest.LogCaptureFixture) -> None:
        """Verify exhaustion returns False and logs a warning by default."""
        calls = []
        sleeps: list[float] = []

        def check() -> bool:
            calls.append(1)
            return False

        with caplog.at_level(logging.WARNING):
            result = poll(check, attempts=5, interval=3, description="port p1 RUNNING",
                          sleep=sleeps.append)

        assert result is False
        assert len(calls) == 5
        assert len(sleeps) == 4
        assert "port p1 RUNNING" in caplog.text

    def test_fatal_exhaustion_raises(self) -> None:
        """Verify fatal=True turns exhaustion into ConvergenceTimeout."""
        with pytest.raises(ConvergenceTimeout):
            poll(lambda: False, attempts=2, interval=0, description="x", fatal=True,
                 sleep=lambda s: None)

    def test_nifi_errors_count_as_failed_attempts(self) -> None:
        """Verify a NiFiError raised by the check is retried rather than propagated."""
        outcomes = iter([ReadFailed("port", "p1", 500), True])

        def check() -> bool:
            outcome = next(outcomes)
            if isinstance(outcome, Exception):
                raise outcome
            return outcome

        assert poll(check, attempts=3, interval=0, description="x", sleep=lambda s: None)

    def test_other_errors_propagate(self) -> None:
        """Verify programming errors in the check are not swallowed."""
        def check() -> bool:
            raise KeyError("state")

        with pytest.raises(KeyError):
            poll(check, attempts=3, interval=0, description="x", sleep=lambda s: None)
