"""
Unit tests for the sliding-window rate limiter
"""
import pytest

from nickname_commons.constants import ErrorConstants
from nickname_commons.exceptions import RateLimitError
from nickname_commons.rate_limiter import RateLimiter, with_rate_limit


class TestRateLimiter:
    """Test cases for RateLimiter"""

    @pytest.fixture
    def limiter(self, fake_clock):
        return RateLimiter(max_requests=5, window_seconds=1.0, name='test', clock=fake_clock)

    def test_admits_up_to_limit_then_rejects(self, limiter, fake_clock):
        for _ in range(5):
            assert limiter.try_request('availability:john') is True
            fake_clock.advance(0.1)

        with pytest.raises(RateLimitError) as exc_info:
            limiter.try_request('availability:john')

        error = exc_info.value
        assert error.message == ErrorConstants.RATE_LIMIT_EXCEEDED
        assert error.retryable is False
        # Oldest request was 0.5s ago
        assert error.retry_after == pytest.approx(0.5)
        assert 0 < error.retry_after <= 1.0

    def test_rejected_requests_do_not_count(self, limiter, fake_clock):
        for _ in range(5):
            limiter.try_request('k')
        for _ in range(3):
            with pytest.raises(RateLimitError):
                limiter.try_request('k')

        fake_clock.advance(1.0)
        assert limiter.get_remaining_requests('k') == 5

    def test_window_recovers_after_full_window(self, limiter, fake_clock):
        for _ in range(5):
            limiter.try_request('k')

        fake_clock.advance(0.5)
        with pytest.raises(RateLimitError):
            limiter.try_request('k')

        # Exactly one window after the first request
        fake_clock.advance(0.5)
        assert limiter.try_request('k') is True

    def test_keys_are_independent(self, limiter):
        for _ in range(5):
            limiter.try_request('a')

        assert limiter.try_request('b') is True

    def test_remaining_requests(self, limiter, fake_clock):
        assert limiter.get_remaining_requests('k') == 5
        limiter.try_request('k')
        limiter.try_request('k')

        assert limiter.get_remaining_requests('k') == 3

        fake_clock.advance(1.0)
        assert limiter.get_remaining_requests('k') == 5

    def test_retry_after(self, limiter, fake_clock):
        assert limiter.get_retry_after('k') == 0.0

        limiter.try_request('k')
        fake_clock.advance(0.25)

        assert limiter.get_retry_after('k') == pytest.approx(0.75)

        fake_clock.advance(0.75)
        assert limiter.get_retry_after('k') == 0.0

    def test_reset_and_clear(self, limiter):
        for _ in range(5):
            limiter.try_request('a')
            limiter.try_request('b')

        limiter.reset('a')
        assert limiter.try_request('a') is True

        limiter.clear()
        assert len(limiter) == 0

    def test_cleanup_forgets_idle_keys(self, limiter, fake_clock):
        limiter.try_request('idle')
        fake_clock.advance(0.5)
        limiter.try_request('busy')
        fake_clock.advance(0.6)

        assert limiter.cleanup() == 1
        assert len(limiter) == 1
        assert limiter.get_remaining_requests('busy') == 4

    def test_custom_message(self, fake_clock):
        limiter = RateLimiter(1, 60.0, message='slow down', clock=fake_clock)
        limiter.try_request('k')

        with pytest.raises(RateLimitError, match='slow down'):
            limiter.try_request('k')

    def test_max_requests_must_be_positive(self):
        with pytest.raises(ValueError):
            RateLimiter(0, 1.0)


class TestWithRateLimit:
    """Test cases for with_rate_limit"""

    @pytest.mark.asyncio
    async def test_rejected_calls_never_run(self, fake_clock):
        limiter = RateLimiter(2, 1.0, clock=fake_clock)
        calls = []

        async def search(nickname):
            calls.append(nickname)
            return nickname

        limited = with_rate_limit(search, limiter, key_func=lambda nickname: f'profile:{nickname}')

        assert await limited('john') == 'john'
        assert await limited('john') == 'john'
        with pytest.raises(RateLimitError):
            await limited('john')

        assert calls == ['john', 'john']
        assert limited.limiter is limiter
