"""Tests du planificateur des envois."""

from datetime import datetime, timedelta
from unittest.mock import MagicMock

from plugin_reporter.core.scheduler import JOB_TAG, ReportScheduler


def _scheduler(config, logger, callback=None):
    return ReportScheduler(config, logger, callback or MagicMock())


class TestArming:
    """Armement et désarmement de l'envoi récurrent."""

    def test_starts_disarmed(self, config, logger):
        scheduler = _scheduler(config, logger)

        assert not scheduler.is_armed
        assert scheduler.next_run() is None

    def test_enable_twice_creates_one_job(self, config, logger):
        scheduler = _scheduler(config, logger)

        assert scheduler.enable() is True
        assert scheduler.enable() is False

        assert len(scheduler._scheduler.get_jobs(JOB_TAG)) == 1
        assert scheduler.is_armed

    def test_disable_clears_pending_job(self, config, logger):
        scheduler = _scheduler(config, logger)
        scheduler.enable()

        scheduler.disable()

        assert not scheduler.is_armed
        assert scheduler.get_status()["next_run"] is None

    def test_enable_after_disable_rearms(self, config, logger):
        scheduler = _scheduler(config, logger)
        scheduler.enable()
        scheduler.disable()

        assert scheduler.enable() is True
        assert scheduler.is_armed


class TestFiring:
    """Exécution des échéances."""

    def test_first_run_is_immediate(self, config, logger):
        callback = MagicMock()
        scheduler = _scheduler(config, logger, callback)
        scheduler.enable()

        scheduler.run_pending()

        callback.assert_called_once_with()

    def test_next_run_is_one_period_later(self, config, logger):
        scheduler = _scheduler(config, logger)
        scheduler.enable()
        before = datetime.now()

        scheduler.run_pending()

        next_run = scheduler.next_run()
        assert next_run >= before + timedelta(hours=24) - timedelta(seconds=5)

    def test_callback_error_keeps_schedule(self, config, logger):
        callback = MagicMock(side_effect=RuntimeError("boom"))
        scheduler = _scheduler(config, logger, callback)
        scheduler.enable()

        scheduler.run_pending()

        assert callback.call_count == 1
        assert scheduler.is_armed

    def test_disarmed_never_fires(self, config, logger):
        callback = MagicMock()
        scheduler = _scheduler(config, logger, callback)

        scheduler.run_pending()

        callback.assert_not_called()


class TestLoop:
    """Boucle d'arrière-plan."""

    def test_start_and_stop(self, config, logger):
        config.set('schedule', 'poll_seconds', 1)
        scheduler = _scheduler(config, logger)

        scheduler.start()
        assert scheduler.is_running
        scheduler.stop()

        assert not scheduler.is_running
        assert not scheduler.scheduler_thread.is_alive()
