"""Unit tests for the inbound rate limiter"""

import threading

from animeflix_gateway.rate_limit_manager import InboundRateLimiter


class FakeClock:
    """Manually advanced clock"""

    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class TestInboundRateLimiter:
    """Test suite for InboundRateLimiter class"""

    def test_allows_up_to_limit(self):
        limiter = InboundRateLimiter(max_requests=3, window_seconds=60, clock=FakeClock())
        assert [limiter.acquire('1.2.3.4')[0] for _ in range(4)] == [True, True, True, False]

    def test_retry_after_counts_down(self):
        clock = FakeClock()
        limiter = InboundRateLimiter(max_requests=1, window_seconds=60, clock=clock)
        limiter.acquire('1.2.3.4')
        clock.now = 15.0
        allowed, retry_after = limiter.acquire('1.2.3.4')
        assert not allowed
        assert retry_after == 45.0

    def test_window_resets(self):
        clock = FakeClock()
        limiter = InboundRateLimiter(max_requests=1, window_seconds=60, clock=clock)
        assert limiter.acquire('1.2.3.4')[0]
        assert not limiter.acquire('1.2.3.4')[0]
        clock.now = 60.0
        assert limiter.acquire('1.2.3.4') == (True, 0.0)

    def test_clients_are_independent(self):
        limiter = InboundRateLimiter(max_requests=1, window_seconds=60, clock=FakeClock())
        assert limiter.acquire('1.1.1.1')[0]
        assert limiter.acquire('2.2.2.2')[0]
        assert not limiter.acquire('1.1.1.1')[0]

    def test_get_all_rate_limits_and_clear(self):
        clock = FakeClock()
        limiter = InboundRateLimiter(max_requests=5, window_seconds=60, clock=clock)
        limiter.acquire('1.1.1.1')
        limiter.acquire('1.1.1.1')
        clock.now = 10.0
        assert limiter.get_all_rate_limits() == {
            '1.1.1.1': {'count': 2, 'remaining_seconds': 50.0}
        }
        limiter.clear_all()
        assert limiter.get_all_rate_limits() == {}

    def test_concurrent_acquire_never_exceeds_limit(self):
        limiter = InboundRateLimiter(max_requests=50, window_seconds=60)
        allowed = []
        lock = threading.Lock()

        def worker():
            for _ in range(20):
                ok, _ = limiter.acquire('9.9.9.9')
                with lock:
                    allowed.append(ok)

        threads = [threading.Thread(target=worker) for _ in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert allowed.count(True) == 50
