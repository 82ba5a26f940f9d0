"""
Module de planification des envois d'inventaire

Ce module gère :
- L'armement et le désarmement de l'envoi récurrent (activation/désactivation)
- L'exécution des tâches en arrière-plan
- La prochaine exécution prévue
"""

import threading
from datetime import datetime
from typing import Callable, Optional

import schedule

JOB_TAG = 'plugin_reporter_send'


class ReportScheduler:
    """
    Planificateur des cycles d'inventaire

    Deux états : armé (une tâche étiquetée JOB_TAG est en attente) ou
    désarmé. Utilise une instance privée de schedule.Scheduler pour ne pas
    partager la file globale du module schedule.
    """

    def __init__(self, config, logger, report_callback: Callable[[], None]):
        """
        Initialise le planificateur

        Args:
            config: Instance de ReporterConfig
            logger: Instance de ReporterLogger
            report_callback: Fonction appelée à chaque échéance
        """
        self.config = config
        self.logger = logger.get_logger()
        self.report_callback = report_callback

        schedule_config = config.get_schedule_config()
        self.interval_hours = max(1, schedule_config['interval_hours'])
        self.poll_seconds = max(1, schedule_config['poll_seconds'])

        self._scheduler = schedule.Scheduler()
        self._lock = threading.RLock()

        # Boucle d'arrière-plan
        self.is_running = False
        self.scheduler_thread = None
        self.stop_event = threading.Event()

        self.logger.info("ReportScheduler initialisé")

    @property
    def is_armed(self) -> bool:
        with self._lock:
            return bool(self._scheduler.get_jobs(JOB_TAG))

    def enable(self) -> bool:
        """
        Arme l'envoi récurrent s'il ne l'est pas déjà

        La première échéance est immédiate (prochain passage de la boucle).

        Returns:
            bool: True si une tâche a été créée, False si déjà armé
        """
        with self._lock:
            if self._scheduler.get_jobs(JOB_TAG):
                self.logger.debug("Envoi récurrent déjà planifié")
                return False

            job = self._scheduler.every(self.interval_hours).hours.do(self._scheduled_report)
            job.tag(JOB_TAG)
            job.next_run = datetime.now()

        self.logger.info(f"Envoi récurrent planifié toutes les {self.interval_hours}h")
        return True

    def disable(self):
        """Supprime toute échéance en attente"""
        with self._lock:
            self._scheduler.clear(JOB_TAG)
        self.logger.info("Envoi récurrent désactivé")

    def next_run(self) -> Optional[datetime]:
        with self._lock:
            jobs = self._scheduler.get_jobs(JOB_TAG)
            if not jobs:
                return None
            return min(job.next_run for job in jobs)

    def run_pending(self):
        """Exécute les échéances arrivées à terme (un passage de boucle)"""
        # Sans verrou : un envoi peut durer jusqu'au timeout HTTP
        self._scheduler.run_pending()

    def _scheduled_report(self):
        """
        Méthode appelée à chaque échéance

        Une erreur est journalisée sans interrompre la planification.
        """
        self.logger.info("=== Envoi d'inventaire planifié déclenché ===")

        try:
            self.report_callback()
        except Exception:
            self.logger.exception("Erreur lors de l'envoi planifié")

    def start(self):
        """
        Démarre la boucle de planification dans un thread dédié
        """
        if self.is_running:
            self.logger.warning("Scheduler déjà en cours d'exécution")
            return

        self.is_running = True
        self.stop_event.clear()

        self.scheduler_thread = threading.Thread(
            target=self._scheduler_loop,
            name="ReportScheduler",
            daemon=True
        )
        self.scheduler_thread.start()

        self.logger.info("Scheduler démarré")
        next_run = self.next_run()
        if next_run:
            self.logger.info(f"Prochain envoi: {next_run}")

    def stop(self):
        """
        Arrête la boucle de planification

        Les échéances restent armées ; seul disable() les supprime.
        """
        if not self.is_running:
            return

        self.logger.info("Arrêt du scheduler...")
        self.is_running = False
        self.stop_event.set()

        if self.scheduler_thread and self.scheduler_thread.is_alive():
            self.scheduler_thread.join(timeout=5)

        self.logger.info("Scheduler arrêté")

    def _scheduler_loop(self):
        self.logger.debug("Boucle du scheduler démarrée")

        while not self.stop_event.is_set():
            try:
                self.run_pending()
            except Exception:
                self.logger.exception("Erreur dans la boucle du scheduler")

            self.stop_event.wait(timeout=self.poll_seconds)

        self.logger.debug("Boucle du scheduler terminée")

    def get_status(self) -> dict:
        """
        Retourne le statut actuel du scheduler

        Returns:
            dict: Informations sur l'état du scheduler
        """
        next_run = self.next_run()
        return {
            'is_running': self.is_running,
            'armed': next_run is not None,
            'interval_hours': self.interval_hours,
            'next_run': next_run.isoformat() if next_run else None,
        }
