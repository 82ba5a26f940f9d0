"""
Module d'envoi de l'inventaire au collecteur distant

Ce module gère un cycle d'inventaire complet :
- Collecte via InventoryCollector
- Sérialisation JSON canonique
- Envoi authentifié par le secret partagé
- Classification du résultat (succès, erreur transport, erreur HTTP)

Aucune nouvelle tentative : un envoi planifié en échec est remplacé
par le cycle suivant.
"""

import threading
from datetime import datetime
from typing import Any, Dict, Optional

import requests
import urllib3

from .. import __version__
from .models import ReportOutcome, ReportResult, ReportTrigger

# La vérification TLS est désactivée : la confiance repose sur le secret partagé
urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

MAX_BODY_EXCERPT = 200


class Reporter:
    """
    Orchestrateur d'un cycle d'inventaire

    report() ne lève jamais d'exception pour un échec de livraison ;
    le résultat est toujours décrit par un ReportResult.
    """

    def __init__(self, config, logger, collector, session: Optional[requests.Session] = None):
        """
        Initialise le reporter

        Args:
            config: Instance de ReporterConfig
            logger: Instance de ReporterLogger
            collector: Instance de InventoryCollector
            session: Session requests (optionnelle)
        """
        self.config = config
        self.logger = logger.get_logger()
        self.collector = collector
        self.session = session or requests.Session()

        # Statistiques de communication
        self._lock = threading.Lock()
        self.last_successful_send = None
        self.last_result = None
        self.send_attempts = 0
        self.send_failures = 0

        self.logger.info("Reporter initialisé")
        self.logger.info(f"Endpoint: {self.config.get_endpoint()}")

    def _build_headers(self, secret: str) -> Dict[str, str]:
        return {
            'Content-Type': 'application/json',
            'Accept': 'application/json',
            'Authorization': f'Bearer {secret}',
            'User-Agent': f'PluginReporter/{__version__}',
        }

    def report(self, trigger: ReportTrigger = ReportTrigger.SCHEDULED) -> ReportResult:
        """
        Exécute un cycle collecte -> sérialisation -> envoi

        Args:
            trigger: Origine du cycle (planifié, manuel, distant)

        Returns:
            ReportResult: Résultat classifié du cycle
        """
        reporter_config = self.config.get_reporter_config()
        endpoint = reporter_config['endpoint']
        self.logger.info(f"=== Cycle d'inventaire ({trigger.value}) vers {endpoint} ===")

        try:
            payload = self.collector.collect()
        except Exception as e:
            self.logger.exception("Erreur inattendue lors de la collecte")
            return self._record(ReportResult(
                outcome=ReportOutcome.TRANSPORT_ERROR,
                message=f"Test failed: {e}",
                item_count=0,
                trigger=trigger,
            ))

        body = payload.serialize()
        item_count = payload.item_count
        self.logger.debug(f"Taille des données: {len(body)} bytes")

        try:
            response = self.session.post(
                url=endpoint,
                data=body.encode('utf-8'),
                headers=self._build_headers(reporter_config['secret']),
                timeout=reporter_config['timeout'],
                verify=reporter_config['verify_ssl'],
            )

        except requests.exceptions.Timeout:
            error_msg = f"Timeout lors de l'envoi (>{reporter_config['timeout']}s)"
            self.logger.error(error_msg)
            return self._record(ReportResult(
                outcome=ReportOutcome.TRANSPORT_ERROR,
                message=f"Test failed: {error_msg}",
                item_count=item_count,
                trigger=trigger,
            ))

        except requests.exceptions.RequestException as e:
            self.logger.error(f"Erreur de connexion: {e}")
            return self._record(ReportResult(
                outcome=ReportOutcome.TRANSPORT_ERROR,
                message=f"Test failed: {e}",
                item_count=item_count,
                trigger=trigger,
            ))

        status_code = response.status_code
        if 200 <= status_code < 300:
            self.logger.info(f"Inventaire envoyé avec succès (HTTP {status_code}, {item_count} plugins)")
            return self._record(ReportResult(
                outcome=ReportOutcome.SUCCESS,
                status_code=status_code,
                message=f"Test successful! Response code: {status_code}. Sent {item_count} plugins.",
                item_count=item_count,
                trigger=trigger,
            ))

        excerpt = response.text[:MAX_BODY_EXCERPT]
        self.logger.error(f"Erreur serveur HTTP {status_code}: {excerpt}")
        return self._record(ReportResult(
            outcome=ReportOutcome.HTTP_ERROR,
            status_code=status_code,
            message=f"Test failed with status code: {status_code}. Response: {excerpt}",
            item_count=item_count,
            trigger=trigger,
        ))

    def _record(self, result: ReportResult) -> ReportResult:
        with self._lock:
            self.send_attempts += 1
            self.last_result = result
            if result.success:
                self.last_successful_send = result.timestamp
            else:
                self.send_failures += 1
        return result

    def get_stats(self) -> Dict[str, Any]:
        """
        Retourne les statistiques de communication

        Returns:
            dict: Statistiques d'envoi
        """
        with self._lock:
            return {
                'last_successful_send': self.last_successful_send.isoformat() if self.last_successful_send else None,
                'total_attempts': self.send_attempts,
                'total_failures': self.send_failures,
                'last_result': self.last_result.to_dict() if self.last_result else None,
                'endpoint': self.config.get_endpoint(),
            }


def format_sent_at(moment: datetime) -> str:
    """Horodatage au format 'YYYY-MM-DD HH:MM:SS' (heure locale)"""
    return moment.strftime('%Y-%m-%d %H:%M:%S')
