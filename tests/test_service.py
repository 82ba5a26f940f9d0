"""Tests du service, du routeur de déclencheurs et de la ligne de commande."""

import json

import pytest
import responses

from plugin_reporter.core import hooks
from plugin_reporter.core.config import ReporterConfig
from plugin_reporter.core.models import MessageSeverity, ReportOutcome
from plugin_reporter.main import main

from .helpers import ENDPOINT


class TestHookRouter:
    """Table des déclencheurs nommés."""

    def test_dispatch_calls_registered_handler(self):
        router = hooks.HookRouter()
        router.register('ping', lambda value: value * 2)

        assert router.dispatch('ping', 21) == 42
        assert 'ping' in router

    def test_unknown_trigger(self):
        with pytest.raises(hooks.UnknownTriggerError):
            hooks.HookRouter().dispatch('missing')

    def test_duplicate_registration_is_refused(self):
        router = hooks.HookRouter()
        router.register('ping', lambda: None)

        with pytest.raises(ValueError):
            router.register('ping', lambda: None)

    def test_frozen_router_refuses_registration(self):
        router = hooks.HookRouter()
        router.freeze()

        with pytest.raises(RuntimeError):
            router.register('ping', lambda: None)


class TestService:
    """Assemblage des composants."""

    def test_all_triggers_are_registered(self, service):
        assert service.router.triggers() == sorted([
            hooks.SCHEDULED_TICK,
            hooks.LIFECYCLE_ENABLE,
            hooks.LIFECYCLE_DISABLE,
            hooks.REMOTE_SEND,
            hooks.MANUAL_TEST,
        ])

    def test_lifecycle_events_arm_and_disarm(self, service):
        service.enable()
        service.enable()
        assert service.scheduler.is_armed

        service.disable()
        assert not service.scheduler.is_armed

    @responses.activate
    def test_scheduled_tick_reports_without_message(self, service):
        responses.add(responses.POST, ENDPOINT, status=500)
        service.enable()

        service.scheduler.run_pending()

        assert len(responses.calls) == 1
        assert service.reporter.last_result.outcome == ReportOutcome.HTTP_ERROR
        assert service.messages.pop() is None

    @responses.activate
    def test_manual_test_writes_deferred_message(self, service):
        responses.add(responses.POST, ENDPOINT, status=200)

        result = service.run_manual_test()

        message = service.messages.pop()
        assert result.success
        assert message.severity == MessageSeverity.SUCCESS
        assert message.text == result.message

    def test_status(self, service):
        status = service.get_status()

        assert status['running'] is False
        assert status['scheduler']['armed'] is False
        assert status['collector'] == {'status': 'no_collection_yet'}


class TestCommandLine:
    """Modes de la ligne de commande."""

    def _write_config(self, tmp_path, host_manifest=''):
        path = tmp_path / 'config.ini'
        config = ReporterConfig.in_memory({
            'reporter': {'endpoint': ENDPOINT, 'secret': 's3cr3t'},
            'host': {'manifest': str(host_manifest)},
            'logging': {'log_file': ''},
        })
        config.config_file = str(path)
        config.save()
        return path

    def test_create_config(self, tmp_path):
        path = tmp_path / 'created.ini'

        assert main(['--create-config', '--config', str(path)]) == 0
        assert path.exists()

    def test_validate_config(self, tmp_path):
        path = self._write_config(tmp_path)

        assert main(['--config', str(path), '--validate-config']) == 0

    def test_collect_writes_payload(self, tmp_path):
        manifest = tmp_path / 'manifest.json'
        manifest.write_text(json.dumps({
            'site_url': 'https://example.org',
            'plugins': {'hello.php': {'name': 'Hello Dolly', 'version': '1.7.2'}},
        }), encoding='utf-8')
        output = tmp_path / 'inventory.json'
        path = self._write_config(tmp_path, manifest)

        assert main(['--config', str(path), '--mode', 'collect', '--output', str(output)]) == 0

        data = json.loads(output.read_text(encoding='utf-8'))
        assert data['site_url'] == 'https://example.org'
        assert data['plugins'][0]['slug'] == 'hello'

    @responses.activate
    def test_report_mode_exit_code(self, tmp_path):
        responses.add(responses.POST, ENDPOINT, status=500)
        path = self._write_config(tmp_path)

        assert main(['--config', str(path), '--mode', 'report']) == 1
