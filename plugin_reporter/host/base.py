"""
Interface d'accès à l'état des plugins de l'application hôte

Chaque source peut échouer indépendamment (fichier absent, index des
mises à jour non encore calculé...) ; InventoryCollector dégrade alors
le champ concerné au lieu d'abandonner la collecte.
"""

from abc import ABC, abstractmethod
from typing import Dict, Set


class HostEnvironment(ABC):
    """
    Classe de base abstraite pour les adaptateurs d'hôte

    Les plugins sont identifiés par leur fichier principal relatif au
    répertoire des plugins (ex: "akismet/akismet.php").
    """

    def snapshot(self) -> 'HostEnvironment':
        """
        Vue figée de l'état de l'hôte pour un cycle de collecte

        Par défaut l'adaptateur lui-même ; les adaptateurs adossés à un
        fichier le lisent une seule fois.
        """
        return self

    @abstractmethod
    def get_plugins(self) -> Dict[str, Dict[str, str]]:
        """
        Liste les plugins installés, dans l'ordre de l'hôte

        Returns:
            dict: fichier du plugin -> {'name': ..., 'version': ...}
        """

    @abstractmethod
    def get_active_plugins(self) -> Set[str]:
        """Fichiers des plugins actifs"""

    @abstractmethod
    def get_auto_update_plugins(self) -> Set[str]:
        """Fichiers des plugins en mise à jour automatique"""

    @abstractmethod
    def get_available_updates(self) -> Dict[str, str]:
        """
        Index des mises à jour disponibles

        Returns:
            dict: fichier du plugin -> nouvelle version
        """

    @abstractmethod
    def get_site_url(self) -> str:
        """URL stable identifiant le site hôte"""

    @abstractmethod
    def get_platform_version(self) -> str:
        """Version de l'application hôte"""
