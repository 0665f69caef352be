"""
Tests for standin bounded waiting and the atomic counter
"""

import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from standin.common import ONE_SECOND, AtomicCounter, WaitFor, is_true_before


class TestIsTrueBefore:
    """Test polling with a deadline."""

    def test_immediately_true(self):
        """Test a true condition returns without sleeping."""
        start = time.monotonic()
        assert is_true_before(lambda: True, 1.0)
        assert time.monotonic() - start < 0.1

    def test_becomes_true_before_timeout(self):
        """Test a condition flipping after 50ms within a 200ms timeout."""
        flag = threading.Event()
        timer = threading.Timer(0.05, flag.set)
        timer.start()
        try:
            assert is_true_before(flag.is_set, 0.2, poll_interval=0.01)
        finally:
            timer.cancel()

    def test_times_out(self):
        """Test a false condition returns False after roughly the timeout."""
        start = time.monotonic()
        assert not is_true_before(lambda: False, 0.1, poll_interval=0.02)
        elapsed = time.monotonic() - start
        assert 0.09 <= elapsed < 0.5

    def test_last_check_lands_on_deadline(self):
        """Test the final sleep is shortened to the remaining time."""
        start = time.monotonic()
        assert not is_true_before(lambda: False, 0.05, poll_interval=10)
        assert time.monotonic() - start < 1.0

    def test_exception_yields_false(self):
        """Test a raising condition is treated as not satisfied."""
        def boom():
            raise RuntimeError('boom')

        assert not is_true_before(boom, 1.0)

    def test_zero_timeout_checks_once(self):
        """Test a zero timeout still evaluates the condition."""
        calls = []
        assert not is_true_before(lambda: calls.append(1), 0)
        assert calls == [1]


class TestWaitFor:
    """Test timeout values."""

    def test_units(self):
        """Test unit conversion."""
        assert WaitFor.at_most(250, 'milliseconds').seconds == pytest.approx(0.25)
        assert WaitFor.at_most(2).seconds == 2
        assert WaitFor.at_most(1, 'minutes').seconds == 60

    def test_of(self):
        """Test normalization of timeout inputs."""
        assert WaitFor.of(None) is ONE_SECOND
        assert WaitFor.of(0.5).seconds == 0.5
        wait = WaitFor(3)
        assert WaitFor.of(wait) is wait

    @pytest.mark.parametrize('value,unit', [(1, 'hours'), (-1, 'seconds')])
    def test_invalid(self, value, unit):
        """Test unknown units and negative values."""
        with pytest.raises(ValueError):
            WaitFor.at_most(value, unit)


class TestAtomicCounter:
    """Test the lock-protected counter."""

    def test_increment(self):
        """Test increment semantics."""
        counter = AtomicCounter()
        assert counter.get_and_increment() == 0
        assert counter.increment_and_get() == 2
        assert int(counter) == 2
        assert counter.value == 2

    def test_concurrent_increments(self):
        """Test no increments are lost across 50+ threads."""
        counter = AtomicCounter()
        with ThreadPoolExecutor(max_workers=64) as pool:
            results = list(pool.map(lambda _: counter.increment_and_get(), range(500)))

        assert counter.value == 500
        assert sorted(results) == list(range(1, 501))
