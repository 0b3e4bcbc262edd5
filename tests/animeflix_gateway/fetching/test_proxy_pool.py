"""Unit tests for fetching.proxy_pool module"""

import threading
from collections import Counter

import pytest
from animeflix_gateway.fetching import ProxyPool, RelayTarget, build_request_url


def make_pool(size):
    return ProxyPool(
        [RelayTarget('Direct', '')] +
        [RelayTarget(f'Relay{i}', f'https://relay{i}.example/?u=') for i in range(1, size)]
    )


class TestProxyPool:
    """Test suite for ProxyPool class"""

    def test_empty_pool_rejected(self):
        with pytest.raises(ValueError):
            ProxyPool([])

    def test_rotation_order_wraps_around(self):
        pool = make_pool(3)
        names = [pool.next().name for _ in range(7)]
        assert names == ['Direct', 'Relay1', 'Relay2',
                         'Direct', 'Relay1', 'Relay2', 'Direct']

    def test_rotation_is_fair(self):
        """N calls on K relays return each relay floor(N/K) or ceil(N/K) times"""
        pool = make_pool(4)
        counts = Counter(pool.next().name for _ in range(10))
        assert sorted(counts.values()) == [2, 2, 3, 3]

    def test_rotation_continues_from_last_returned(self):
        pool = make_pool(3)
        pool.next()
        pool.next()
        assert pool.next().name == 'Relay2'
        assert pool.next().name == 'Direct'

    def test_single_relay_pool(self):
        pool = ProxyPool([RelayTarget('Direct')])
        assert [pool.next().name for _ in range(3)] == ['Direct'] * 3

    def test_from_config(self):
        pool = ProxyPool.from_config([
            {'name': 'Direct', 'url': ''},
            {'name': 'AllOrigins', 'url': 'https://api.allorigins.win/raw?url='},
            {'name': 'NoUrl'},
        ])
        assert pool.size() == 3
        assert len(pool) == 3
        assert pool.names() == ['Direct', 'AllOrigins', 'NoUrl']
        assert pool.next().is_direct
        assert not pool.next().is_direct
        assert pool.next().url_prefix == ''

    def test_concurrent_next_advances_once_per_call(self):
        """Every concurrent call advances the cursor by exactly one step"""
        pool = make_pool(5)
        results = []
        results_lock = threading.Lock()

        def worker():
            picked = [pool.next().name for _ in range(100)]
            with results_lock:
                results.extend(picked)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        # 800 calls on 5 relays: exactly 160 each, and the cursor is back at 0
        assert Counter(results) == {name: 160 for name in pool.names()}
        assert pool.next().name == 'Direct'


class TestBuildRequestUrl:
    """Test suite for build_request_url"""

    def test_direct_relay_keeps_url(self):
        url = 'https://www.sankavollerei.com/anime/anime/one-piece?x=1'
        assert build_request_url(RelayTarget('Direct', ''), url) == url

    def test_relay_prefix_with_encoded_url(self):
        relay = RelayTarget('AllOrigins', 'https://api.allorigins.win/raw?url=')
        url = 'https://www.sankavollerei.com/anime/search/one piece?page=2&sort=new'
        assert build_request_url(relay, url) == (
            'https://api.allorigins.win/raw?url='
            'https%3A%2F%2Fwww.sankavollerei.com%2Fanime%2Fsearch%2Fone%20piece'
            '%3Fpage%3D2%26sort%3Dnew'
        )

    def test_component_safe_characters_untouched(self):
        relay = RelayTarget('CorsProxy', 'https://corsproxy.io/?')
        url = "https://host/a-b_c.d!e~f*g'h(i)"
        assert build_request_url(relay, url) == (
            "https://corsproxy.io/?https%3A%2F%2Fhost%2Fa-b_c.d!e~f*g'h(i)"
        )

    def test_non_ascii_is_utf8_encoded(self):
        relay = RelayTarget('CodeTabs', 'https://api.codetabs.com/v1/proxy?quest=')
        assert build_request_url(relay, 'https://host/ä') == (
            'https://api.codetabs.com/v1/proxy?quest=https%3A%2F%2Fhost%2F%C3%A4'
        )
