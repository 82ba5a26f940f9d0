"""
Module collecteur de l'inventaire des plugins

Ce module construit l'inventaire envoyé au collecteur distant :
- Énumération des plugins installés sur l'hôte
- Croisement avec les plugins actifs et en mise à jour automatique
- Croisement avec l'index des mises à jour disponibles
- Dégradation vers des valeurs sûres si une source est indisponible
"""

import os
import time
from datetime import datetime
from typing import Any, Callable, Dict

from .models import InventoryItem, InventoryPayload, PluginStatus


def plugin_slug(plugin_file: str) -> str:
    """
    Dérive le slug d'un plugin depuis son fichier principal

    "akismet/akismet.php" -> "akismet", "hello.php" -> "hello"
    """
    directory = os.path.dirname(plugin_file)
    if directory and directory != '.':
        return directory
    return os.path.splitext(os.path.basename(plugin_file))[0]


class InventoryCollector:
    """
    Collecteur d'inventaire

    Sans effet de bord ni accès réseau : le résultat ne dépend que de
    l'état courant de l'hôte.
    """

    def __init__(self, config, logger, host):
        """
        Initialise le collecteur

        Args:
            config: Instance de ReporterConfig
            logger: Instance de ReporterLogger
            host: Adaptateur HostEnvironment
        """
        self.config = config
        self.logger = logger.get_logger()
        self.host = host

        # Statistiques de la dernière collecte
        self._last_collection_time = None
        self._last_item_count = 0
        self._last_duration = 0.0
        self.collection_errors = []

        self.logger.info("InventoryCollector initialisé")

    def _safe_execute(self, func: Callable[[], Any], error_message: str, default_value=None):
        """
        Exécute une lecture de l'hôte avec dégradation en cas d'erreur

        Args:
            func: Lecture à exécuter
            error_message: Message de log en cas d'échec
            default_value: Valeur retournée en cas d'échec

        Returns:
            Résultat de la lecture ou default_value
        """
        try:
            result = func()
        except Exception as e:
            error_details = f"{error_message}: {e}"
            self.collection_errors.append(error_details)
            self.logger.warning(error_details)
            return default_value

        if result is None:
            # Source inconnue de l'hôte : même traitement qu'un échec
            error_details = f"{error_message}: aucune valeur"
            self.collection_errors.append(error_details)
            self.logger.warning(error_details)
            return default_value
        return result

    def collect(self) -> InventoryPayload:
        """
        Construit l'inventaire complet des plugins

        Returns:
            InventoryPayload: Inventaire ordonné comme l'hôte liste ses plugins
        """
        start_time = time.time()
        self.collection_errors = []
        self.logger.debug("Début de collecte de l'inventaire des plugins")

        # Toutes les sources d'un cycle proviennent du même état de l'hôte
        host = self._safe_execute(self.host.snapshot, "Lecture de l'état de l'hôte impossible", self.host)

        plugins = self._safe_execute(host.get_plugins, "Liste des plugins indisponible", {})
        active = self._safe_execute(host.get_active_plugins, "Plugins actifs indisponibles", set())
        auto_update = self._safe_execute(
            host.get_auto_update_plugins, "Mises à jour automatiques indisponibles", set()
        )
        updates = self._safe_execute(
            host.get_available_updates, "Index des mises à jour indisponible", {}
        )

        items = []
        for plugin_file, data in plugins.items():
            items.append(InventoryItem(
                slug=plugin_slug(plugin_file),
                title=data.get('name', ''),
                version=data.get('version', ''),
                status=PluginStatus.ACTIVE if plugin_file in active else PluginStatus.INACTIVE,
                auto_update=plugin_file in auto_update,
                available_update=updates.get(plugin_file) or None,
            ))

        payload = InventoryPayload(
            site_identifier=self._get_site_identifier(host),
            platform_version=self._safe_execute(
                host.get_platform_version, "Version de la plateforme indisponible", ''
            ) or 'unknown',
            items=items,
        )

        self._last_duration = round(time.time() - start_time, 3)
        self._last_collection_time = datetime.now()
        self._last_item_count = len(items)

        self.logger.info(f"Collecte terminée: {len(items)} plugins en {self._last_duration:.3f}s")
        if self.collection_errors:
            self.logger.warning(f"Collecte avec {len(self.collection_errors)} source(s) dégradée(s)")

        return payload

    def _get_site_identifier(self, host=None) -> str:
        """URL du site selon l'hôte, sinon l'option reporter.site_url"""
        host = host or self.host
        site_url = self._safe_execute(host.get_site_url, "URL du site indisponible", '')
        return site_url or self.config.get('reporter', 'site_url', '') or ''

    def get_site_identifier(self) -> str:
        """
        Identifiant du site sans collecte complète

        Utilisé par la sonde de statut qui ne doit pas énumérer les plugins.
        """
        return self._get_site_identifier()

    def get_collection_stats(self) -> Dict[str, Any]:
        """
        Retourne les statistiques de la dernière collecte

        Returns:
            dict: Statistiques de collecte
        """
        if not self._last_collection_time:
            return {'status': 'no_collection_yet'}

        return {
            'status': 'degraded' if self.collection_errors else 'success',
            'last_collection_time': self._last_collection_time.isoformat(),
            'collection_duration': self._last_duration,
            'plugins_count': self._last_item_count,
            'errors': list(self.collection_errors),
        }
