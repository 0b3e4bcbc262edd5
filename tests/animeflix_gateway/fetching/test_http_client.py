"""Unit tests for fetching.http_client module"""

from unittest.mock import Mock

import pytest
import requests
from animeflix_gateway.fetching import HttpClientManager, TransportError
from animeflix_gateway.fetching.constants import DEFAULT_HEADERS, UPSTREAM_TIMEOUT


def make_response(status_code=200, payload=None, json_error=None):
    response = Mock()
    response.status_code = status_code
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = payload
    return response


class TestHttpClientManager:
    """Test suite for HttpClientManager class"""

    @pytest.fixture
    def session(self):
        return Mock(spec=requests.Session)

    @pytest.fixture
    def client(self, session):
        return HttpClientManager(session=session)

    def test_sends_fixed_headers_and_timeout(self, client, session):
        session.get.return_value = make_response(payload={'ok': True})

        assert client.get_json('https://host/anime/schedule', 'Direct') == {'ok': True}

        session.get.assert_called_once_with(
            'https://host/anime/schedule',
            timeout=UPSTREAM_TIMEOUT,
            headers=DEFAULT_HEADERS
        )
        headers = session.get.call_args.kwargs['headers']
        assert headers['Accept'] == 'application/json'
        assert headers['Accept-Language'] == 'en-US,en;q=0.9'
        assert headers['Referer'] == 'https://www.sankavollerei.com/'
        assert 'Mozilla/5.0' in headers['User-Agent']

    def test_network_error_becomes_transport_error(self, client, session):
        session.get.side_effect = requests.exceptions.ConnectionError('connection refused')

        with pytest.raises(TransportError) as exc_info:
            client.get_json('https://host/x', 'CorsProxy')

        assert 'connection refused' in str(exc_info.value)
        assert exc_info.value.relay_name == 'CorsProxy'
        assert exc_info.value.status_code is None

    def test_timeout_becomes_transport_error(self, client, session):
        session.get.side_effect = requests.exceptions.Timeout('read timed out')

        with pytest.raises(TransportError):
            client.get_json('https://host/x')

    @pytest.mark.parametrize('status', [204, 301, 403, 404, 429, 500, 503])
    def test_non_200_status_is_failure(self, client, session, status):
        session.get.return_value = make_response(status_code=status, payload={})

        with pytest.raises(TransportError) as exc_info:
            client.get_json('https://host/x')

        assert exc_info.value.status_code == status
        assert str(status) in str(exc_info.value)

    def test_invalid_json_is_failure(self, client, session):
        session.get.return_value = make_response(json_error=ValueError('Expecting value'))

        with pytest.raises(TransportError) as exc_info:
            client.get_json('https://host/x')

        assert 'Invalid JSON' in str(exc_info.value)

    def test_stats(self, client, session):
        session.get.side_effect = [
            make_response(payload=[1]),
            make_response(status_code=500),
        ]
        client.get_json('https://host/a')
        with pytest.raises(TransportError):
            client.get_json('https://host/b')

        stats = client.get_stats()
        assert stats['requests_made'] == 1
        assert stats['requests_failed'] == 1
        assert stats['success_rate'] == 50

        client.reset_stats()
        assert client.get_stats()['requests_made'] == 0
