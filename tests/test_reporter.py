"""Tests du cycle d'envoi de l'inventaire."""

import json
from unittest.mock import MagicMock

import requests
import responses

from plugin_reporter.core.collector import InventoryCollector
from plugin_reporter.core.config import DEFAULT_ENDPOINT
from plugin_reporter.core.models import ReportOutcome, ReportTrigger
from plugin_reporter.core.reporter import Reporter

from .helpers import ENDPOINT, SECRET


def _reporter(config, logger, host, session=None):
    return Reporter(config, logger, InventoryCollector(config, logger, host), session=session)


class TestReport:
    """Classification du résultat d'un envoi."""

    @responses.activate
    def test_success(self, config, logger, host):
        responses.add(responses.POST, ENDPOINT, json={"message": "ok"}, status=201)

        result = _reporter(config, logger, host).report(ReportTrigger.MANUAL)

        assert result.outcome == ReportOutcome.SUCCESS
        assert result.status_code == 201
        assert result.item_count == 3
        assert result.trigger == ReportTrigger.MANUAL
        assert result.message == "Test successful! Response code: 201. Sent 3 plugins."

    @responses.activate
    def test_request_is_authenticated_json(self, config, logger, host):
        responses.add(responses.POST, ENDPOINT, status=200)

        _reporter(config, logger, host).report()

        request = responses.calls[0].request
        assert request.headers["Authorization"] == f"Bearer {SECRET}"
        assert request.headers["Content-Type"] == "application/json"
        body = json.loads(request.body)
        assert body["site_url"] == "https://site.example.test"
        assert [p["slug"] for p in body["plugins"]] == ["akismet", "hello", "wordpress-seo"]

    @responses.activate
    def test_http_500_is_http_error(self, config, logger, host):
        responses.add(responses.POST, ENDPOINT, body="Internal Server Error", status=500)

        result = _reporter(config, logger, host).report(ReportTrigger.SCHEDULED)

        assert result.outcome == ReportOutcome.HTTP_ERROR
        assert result.status_code == 500
        assert result.item_count == 3
        assert "Internal Server Error" in result.message

    @responses.activate
    def test_http_error_body_is_truncated(self, config, logger, host):
        responses.add(responses.POST, ENDPOINT, body="x" * 5000, status=400)

        result = _reporter(config, logger, host).report()

        assert result.message.endswith("Response: " + "x" * 200)
        assert "x" * 201 not in result.message

    @responses.activate
    def test_connection_error_is_transport_error(self, config, logger, host):
        responses.add(responses.POST, ENDPOINT, body=requests.exceptions.ConnectionError("refused"))

        result = _reporter(config, logger, host).report()

        assert result.outcome == ReportOutcome.TRANSPORT_ERROR
        assert result.status_code is None
        assert result.message.startswith("Test failed:")

    @responses.activate
    def test_timeout_is_transport_error(self, config, logger, host):
        responses.add(responses.POST, ENDPOINT, body=requests.exceptions.ReadTimeout())

        result = _reporter(config, logger, host).report()

        assert result.outcome == ReportOutcome.TRANSPORT_ERROR

    @responses.activate
    def test_empty_endpoint_uses_default(self, config, logger, host):
        config.set('reporter', 'endpoint', '')
        responses.add(responses.POST, DEFAULT_ENDPOINT, status=200)

        result = _reporter(config, logger, host).report()

        assert result.success
        assert responses.calls[0].request.url == DEFAULT_ENDPOINT


class TestTransportOptions:
    """Options passées à la requête sortante."""

    def test_timeout_and_tls_verification(self, config, logger, host):
        session = MagicMock()
        session.post.return_value = MagicMock(status_code=200, text="")

        _reporter(config, logger, host, session=session).report()

        kwargs = session.post.call_args.kwargs
        assert kwargs["url"] == ENDPOINT
        assert kwargs["timeout"] == 20
        assert kwargs["verify"] is False

    def test_single_call_without_retry(self, config, logger, host):
        session = MagicMock()
        session.post.side_effect = requests.exceptions.ConnectionError("down")

        _reporter(config, logger, host, session=session).report()

        assert session.post.call_count == 1


class TestStats:
    """Statistiques d'envoi."""

    @responses.activate
    def test_stats_track_failures(self, config, logger, host):
        responses.add(responses.POST, ENDPOINT, status=503)
        reporter = _reporter(config, logger, host)

        reporter.report()
        stats = reporter.get_stats()

        assert stats["total_attempts"] == 1
        assert stats["total_failures"] == 1
        assert stats["last_successful_send"] is None
        assert stats["last_result"]["outcome"] == "http_error"

    def test_collector_crash_is_reported(self, config, logger, host):
        collector = MagicMock()
        collector.collect.side_effect = RuntimeError("boom")
        session = MagicMock()

        result = Reporter(config, logger, collector, session=session).report()

        assert result.outcome == ReportOutcome.TRANSPORT_ERROR
        assert result.item_count == 0
        session.post.assert_not_called()
