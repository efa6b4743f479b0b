"""Tests for yt_playlist_audio/core/retry.py"""

import unittest

from yt_playlist_audio.core.errors import FetchError, RetryExhaustedError
from yt_playlist_audio.core.models import WorkItem
from yt_playlist_audio.core.retry import RetryPolicy, attempt_with_retry


def _flaky(failures: int):
    """Processor that fails ``failures`` times, then succeeds. Records every call."""
    calls: list[WorkItem] = []

    def processor(item: WorkItem) -> None:
        calls.append(item)
        if len(calls) <= failures:
            raise FetchError(f"boom {len(calls)}")

    return processor, calls


class TestAttemptWithRetry(unittest.TestCase):
    def setUp(self) -> None:
        self.item = WorkItem(name="Song", attribution="Artist", fetch_id="dQw4w9WgXcQ")
        self.sleeps: list[float] = []

    def _run(self, processor, policy: RetryPolicy) -> None:
        attempt_with_retry(self.item, processor, policy, sleep=self.sleeps.append)

    def test_success_first_try(self) -> None:
        processor, calls = _flaky(0)
        self._run(processor, RetryPolicy(max_attempts=3, delay=2.0))
        self.assertEqual(len(calls), 1)
        self.assertEqual(self.sleeps, [])

    def test_recovers_before_budget_runs_out(self) -> None:
        for failures in (1, 2):
            with self.subTest(failures=failures):
                self.sleeps.clear()
                processor, calls = _flaky(failures)
                self._run(processor, RetryPolicy(max_attempts=3, delay=2.0))
                self.assertEqual(len(calls), failures + 1)
                self.assertEqual(self.sleeps, [2.0] * failures)

    def test_exhaustion_raises_once_with_last_cause(self) -> None:
        processor, calls = _flaky(100)
        with self.assertRaises(RetryExhaustedError) as cm:
            self._run(processor, RetryPolicy(max_attempts=3, delay=2.0))

        self.assertEqual(len(calls), 3)
        self.assertEqual(cm.exception.attempts, 3)
        self.assertIsInstance(cm.exception.cause, FetchError)
        self.assertEqual(str(cm.exception.cause), "boom 3")
        self.assertIs(cm.exception.__cause__, cm.exception.cause)
        self.assertIn("failed after 3 attempts", str(cm.exception))
        # No wait after the final attempt.
        self.assertEqual(self.sleeps, [2.0, 2.0])

    def test_single_attempt_policy(self) -> None:
        processor, calls = _flaky(1)
        with self.assertRaises(RetryExhaustedError) as cm:
            self._run(processor, RetryPolicy(max_attempts=1, delay=2.0))
        self.assertEqual(len(calls), 1)
        self.assertEqual(cm.exception.attempts, 1)
        self.assertEqual(self.sleeps, [])

    def test_zero_delay_does_not_sleep(self) -> None:
        processor, calls = _flaky(2)
        self._run(processor, RetryPolicy(max_attempts=3, delay=0.0))
        self.assertEqual(len(calls), 3)
        self.assertEqual(self.sleeps, [])

    def test_backoff_doubles_delay(self) -> None:
        processor, _ = _flaky(100)
        with self.assertRaises(RetryExhaustedError):
            self._run(processor, RetryPolicy(max_attempts=4, delay=1.0, backoff=True, backoff_max=3.0))
        self.assertEqual(self.sleeps, [1.0, 2.0, 3.0])

    def test_logs_each_failed_attempt(self) -> None:
        processor, _ = _flaky(100)
        with self.assertLogs("yt_playlist_audio.core.retry", level="WARNING") as cm:
            with self.assertRaises(RetryExhaustedError):
                self._run(processor, RetryPolicy(max_attempts=3, delay=0.0))
        self.assertEqual(len(cm.records), 3)
        self.assertIn("Attempt 1/3 failed for Song", cm.records[0].getMessage())


class TestRetryPolicy(unittest.TestCase):
    def test_defaults(self) -> None:
        policy = RetryPolicy()
        self.assertEqual(policy.max_attempts, 3)
        self.assertEqual(policy.delay, 2.0)
        self.assertFalse(policy.backoff)

    def test_invalid_attempts(self) -> None:
        with self.assertRaises(ValueError):
            RetryPolicy(max_attempts=0)

    def test_negative_delay_is_clamped(self) -> None:
        self.assertEqual(RetryPolicy(delay=-1.0).wait_seconds(1), 0.0)


if __name__ == "__main__":
    unittest.main()
