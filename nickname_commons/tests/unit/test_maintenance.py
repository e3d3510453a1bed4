"""
Unit tests for periodic cleanup, debouncing and performance monitoring
"""
import asyncio
from unittest.mock import patch

import pytest

from nickname_commons.cache import Cache
from nickname_commons.debounce import DebounceCoordinator
from nickname_commons.maintenance import PeriodicCleanup
from nickname_commons.performance import PerformanceMonitor
from nickname_commons.rate_limiter import RateLimiter


class TestPeriodicCleanup:
    """Test cases for PeriodicCleanup"""

    def test_run_once_sweeps_every_target(self, fake_clock):
        cache = Cache(ttl=1.0, clock=fake_clock)
        limiter = RateLimiter(5, 1.0, clock=fake_clock)
        cache.set('a', 1)
        limiter.try_request('k')
        fake_clock.advance(2.0)

        removed = PeriodicCleanup({'cache': cache, 'limiter': limiter}).run_once()

        assert removed == {'cache': 1, 'limiter': 1}

    @pytest.mark.asyncio
    async def test_nothing_runs_before_start(self, fake_clock):
        cache = Cache(ttl=0, clock=fake_clock)
        cache.set('a', 1)
        fake_clock.advance(1.0)
        PeriodicCleanup({'cache': cache}, interval=0.01)

        await asyncio.sleep(0.05)

        assert len(cache) == 1

    @pytest.mark.asyncio
    async def test_start_and_stop(self, fake_clock):
        cache = Cache(ttl=0, clock=fake_clock)
        cleanup = PeriodicCleanup({'cache': cache}, interval=0.01)

        cleanup.start()
        cleanup.start()
        assert cleanup.running is True

        cache.set('a', 1)
        fake_clock.advance(1.0)
        await asyncio.sleep(0.05)
        assert len(cache) == 0

        await cleanup.stop()
        assert cleanup.running is False

        cache.set('b', 1)
        fake_clock.advance(1.0)
        await asyncio.sleep(0.05)
        assert len(cache) == 1

    @pytest.mark.asyncio
    async def test_failing_sweep_keeps_task_running(self):
        class Flaky:
            def __init__(self):
                self.calls = 0

            def cleanup(self):
                self.calls += 1
                if self.calls == 1:
                    raise RuntimeError('sweep failed')
                return 0

        target = Flaky()
        cleanup = PeriodicCleanup({'flaky': target}, interval=0.01)

        with patch('nickname_commons.maintenance.logger') as mock_logger:
            cleanup.start()
            await asyncio.sleep(0.05)
            assert cleanup.running is True
            await cleanup.stop()

        assert target.calls > 1
        mock_logger.error.assert_called_once()
        assert isinstance(mock_logger.error.call_args.kwargs['error'], RuntimeError)

    @pytest.mark.asyncio
    async def test_stop_without_start(self):
        cleanup = PeriodicCleanup({})

        await cleanup.stop()

        assert cleanup.running is False


class TestDebounceCoordinator:
    """Test cases for DebounceCoordinator"""

    @pytest.mark.asyncio
    async def test_fires_once_with_last_value(self):
        received = []

        async def callback(value):
            received.append(value)

        debouncer = DebounceCoordinator(callback, delay=0.02)
        for value in ('j', 'jo', 'joh'):
            debouncer.push(value)
            await asyncio.sleep(0.005)

        assert debouncer.pending is True
        await asyncio.sleep(0.05)
        await debouncer.drain()

        assert received == ['joh']
        assert debouncer.pending is False

    @pytest.mark.asyncio
    async def test_cancel_stops_pending_timer(self):
        received = []

        async def callback(value):
            received.append(value)

        debouncer = DebounceCoordinator(callback, delay=0.01)
        debouncer.push('john')
        debouncer.cancel()
        await asyncio.sleep(0.03)

        assert received == []

    @pytest.mark.asyncio
    async def test_failing_callback_is_logged(self):
        async def callback(value):
            raise RuntimeError('lookup failed')

        debouncer = DebounceCoordinator(callback, delay=0)
        debouncer.push('john')
        await asyncio.sleep(0.01)
        await debouncer.drain()

        assert debouncer.pending is False


class TestPerformanceMonitor:
    """Test cases for PerformanceMonitor"""

    @pytest.mark.asyncio
    async def test_measure_records_success_and_failure(self, fake_clock):
        monitor = PerformanceMonitor(clock=fake_clock)

        async def ok():
            fake_clock.advance(0.05)
            return 'profile'

        async def broken():
            fake_clock.advance(0.15)
            raise ConnectionError('down')

        assert await monitor.measure('find', ok) == 'profile'
        with pytest.raises(ConnectionError):
            await monitor.measure('find', broken)

        stats = monitor.get_stats('find')
        assert stats['count'] == 2
        assert stats['average'] == pytest.approx(0.1)
        assert stats['min'] == pytest.approx(0.05)
        assert stats['max'] == pytest.approx(0.15)
        assert stats['success_rate'] == 0.5

    def test_slow_operations_are_flagged(self):
        monitor = PerformanceMonitor(slow_threshold=0.2)

        with patch('nickname_commons.performance.logger') as mock_logger:
            monitor.record('find', 0.1)
            monitor.record('find', 0.3)

        mock_logger.warning.assert_called_once()

    def test_keeps_only_recent_metrics(self):
        monitor = PerformanceMonitor(max_metrics=3)
        for duration in (0.01, 0.02, 0.03, 0.04):
            monitor.record('find', duration)

        assert [metric.duration for metric in monitor.get_metrics()] == [0.02, 0.03, 0.04]

    def test_report_and_clear(self):
        monitor = PerformanceMonitor()
        monitor.record('find', 0.01)
        monitor.record('update', 0.02, success=False)

        report = monitor.report()
        assert sorted(report) == ['find', 'update']
        assert report['update']['success_rate'] == 0.0

        monitor.clear()
        assert monitor.get_stats() == {}
