"""
Endpoint sécurisé interrogé par le collecteur distant

Deux verbes sous le namespace plugin-reporter/v1 :
- send : déclenche un cycle d'inventaire et renvoie le nombre de plugins
- status : sonde de vie, sans collecte

Les deux sont protégés par le secret partagé, comparé en temps constant.
"""

import hmac
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

from .. import __version__
from ..core import hooks
from ..core.errors import AuthenticationError, ConfigurationMissingError
from ..core.reporter import format_sent_at

API_NAMESPACE = 'plugin-reporter/v1'
AUTH_HEADER = 'X-Reporter-Key'
PLUGIN_ID = 'plugin-reporter'
PLUGIN_NAME = 'Plugin Reporter'


def secrets_match(expected: str, presented: str) -> bool:
    """Comparaison en temps constant sur les octets UTF-8"""
    return hmac.compare_digest(expected.encode('utf-8'), presented.encode('utf-8'))


class SecureEndpoint:
    """
    Logique des deux verbes de l'endpoint sécurisé

    Les vues Flask appellent authenticate() puis send() ou status() ; aucune
    réponse d'échec ne précise quelle vérification a échoué.
    """

    def __init__(self, config, logger, router, collector):
        """
        Args:
            config: Instance de ReporterConfig
            logger: Instance de ReporterLogger
            router: HookRouter portant le déclencheur remote_send
            collector: InventoryCollector (identifiant du site uniquement)
        """
        self.config = config
        self.logger = logger.get_logger()
        self.router = router
        self.collector = collector

    def authenticate(self, presented: Optional[str]):
        """
        Vérifie la clé présentée contre le secret configuré

        Raises:
            ConfigurationMissingError: aucun secret configuré
            AuthenticationError: clé absente ou différente
        """
        expected = self.config.get_secret()
        if not expected:
            raise ConfigurationMissingError("secret partagé non configuré")
        if not presented:
            raise AuthenticationError("clé absente")
        if not secrets_match(expected, presented):
            raise AuthenticationError("clé invalide")

    def send(self) -> Tuple[Dict[str, Any], int]:
        """
        Exécute un cycle d'inventaire déclenché à distance

        Returns:
            tuple: (corps JSON, code HTTP)
        """
        result = self.router.dispatch(hooks.REMOTE_SEND)

        if not result.success:
            self.logger.warning(f"Envoi distant en échec: {result.outcome.value}")
            return {
                'status': 'error',
                'plugin_count': result.item_count,
            }, 502

        return {
            'status': 'ok',
            'sent_at': format_sent_at(result.timestamp),
            'plugin_count': result.item_count,
        }, 200

    def status(self) -> Tuple[Dict[str, Any], int]:
        """
        Sonde de vie : ne déclenche ni collecte ni envoi

        Returns:
            tuple: (corps JSON, code HTTP)
        """
        return {
            'active': True,
            'plugin': PLUGIN_ID,
            'name': PLUGIN_NAME,
            'version': __version__,
            'site_url': self.collector.get_site_identifier(),
            'checked_at': format_sent_at(datetime.now()),
        }, 200
