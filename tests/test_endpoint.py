"""Tests de l'endpoint sécurisé plugin-reporter/v1."""

from unittest.mock import patch

import pytest
import responses

from .helpers import ENDPOINT, SECRET


class TestAuthentication:
    """Vérification du secret partagé."""

    def test_status_with_valid_key(self, client):
        response = client.get('/plugin-reporter/v1/status', headers={'X-Reporter-Key': SECRET})

        assert response.status_code == 200
        data = response.get_json()
        assert data['active'] is True
        assert data['plugin'] == 'plugin-reporter'
        assert data['site_url'] == 'https://site.example.test'
        assert 'checked_at' in data

    def test_missing_header_is_denied_without_detail(self, client):
        response = client.get('/plugin-reporter/v1/status')

        assert response.status_code == 401
        assert response.data == b''

    @pytest.mark.parametrize("key", ["", "wrong", "s3cr3", "s3cr3tX", "S3CR3T"])
    def test_wrong_key_is_denied(self, client, key):
        response = client.get('/plugin-reporter/v1/status', headers={'X-Reporter-Key': key})

        assert response.status_code == 401
        assert response.data == b''

    def test_no_configured_secret_fails_closed(self, client, config):
        config.set('reporter', 'secret', '')

        response = client.get('/plugin-reporter/v1/status', headers={'X-Reporter-Key': ''})
        assert response.status_code == 401

        response = client.post('/plugin-reporter/v1/send', headers={'X-Reporter-Key': 'anything'})
        assert response.status_code == 401

    def test_comparison_uses_constant_time_primitive(self, client):
        with patch('plugin_reporter.web.endpoint.hmac.compare_digest', return_value=False) as compare:
            response = client.get('/plugin-reporter/v1/status', headers={'X-Reporter-Key': 'xxxxxx'})

        assert response.status_code == 401
        compare.assert_called_once_with(SECRET.encode('utf-8'), b'xxxxxx')

    def test_denied_send_never_reaches_network(self, client, service):
        with patch.object(service.reporter.session, 'post') as post:
            client.post('/plugin-reporter/v1/send', headers={'X-Reporter-Key': 'wrong'})

        post.assert_not_called()


class TestStatus:
    """Sonde de vie."""

    def test_status_never_collects(self, client, service):
        with patch.object(service.collector, 'collect', wraps=service.collector.collect) as collect:
            for _ in range(2):
                response = client.get('/plugin-reporter/v1/status', headers={'X-Reporter-Key': SECRET})
                assert response.status_code == 200

        assert collect.call_count == 0


class TestSend:
    """Envoi déclenché à distance."""

    @responses.activate
    def test_send_reports_plugin_count(self, client):
        responses.add(responses.POST, ENDPOINT, status=200)

        response = client.post('/plugin-reporter/v1/send', headers={'X-Reporter-Key': SECRET})

        assert response.status_code == 200
        data = response.get_json()
        assert data['status'] == 'ok'
        assert data['plugin_count'] == 3
        assert len(data['sent_at']) == len('2024-01-01 00:00:00')
        assert len(responses.calls) == 1

    @responses.activate
    def test_send_failure_is_generic(self, client):
        responses.add(responses.POST, ENDPOINT, body="secret stack trace", status=500)

        response = client.post('/plugin-reporter/v1/send', headers={'X-Reporter-Key': SECRET})

        assert response.status_code == 502
        assert response.get_json() == {'status': 'error', 'plugin_count': 3}
        assert b'stack trace' not in response.data
