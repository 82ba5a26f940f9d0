"""
Module de configuration du reporter de plugins

Ce module gère la configuration persistante, incluant :
- Lecture du fichier INI
- Valeurs par défaut
- Validation des paramètres
- Accès groupés pour le reporter, le planificateur et le contrôle d'accès
"""

import os
import sys
import configparser
from typing import Dict, Any, Optional, List

from .models import AccessPolicy

DEFAULT_ENDPOINT = 'https://plugin-reporter.kobaltdigital.nl/api/data'
DEFAULT_ALLOWED_DOMAINS = 'kobaltdigital.nl,alkmaarsch.nl'


class ReporterConfig:
    """
    Gestionnaire de configuration du reporter

    Sans fichier de configuration (config_file=None et aucun fichier trouvé),
    l'instance fonctionne entièrement en mémoire.
    """

    def __init__(self, config_file: Optional[str] = None, load: bool = True):
        """
        Initialise la configuration

        Args:
            config_file: Chemin vers le fichier de configuration (optionnel)
            load: Charger le fichier s'il existe
        """
        self.config = configparser.ConfigParser()
        self.config_file = config_file or self._get_default_config_path()

        self._set_defaults()

        if load:
            self._load_config()

    @classmethod
    def in_memory(cls, overrides: Optional[Dict[str, Dict[str, Any]]] = None) -> 'ReporterConfig':
        """
        Crée une configuration non persistée

        Args:
            overrides: Valeurs par section, ex: {'reporter': {'secret': 'x'}}

        Returns:
            ReporterConfig: Configuration initialisée avec les défauts
        """
        instance = cls(config_file=os.devnull, load=False)
        for section, options in (overrides or {}).items():
            for option, value in options.items():
                instance.set(section, option, value)
        return instance

    def _get_default_config_path(self) -> str:
        """
        Détermine le chemin par défaut du fichier de configuration selon la plateforme

        Returns:
            str: Chemin vers le fichier de configuration
        """
        if sys.platform == "win32":
            return os.path.join(
                os.environ.get("PROGRAMDATA", "C:\\ProgramData"),
                "PluginReporter",
                "config.ini"
            )
        return "/etc/plugin-reporter/config.ini"

    def _set_defaults(self):
        """
        Définit les valeurs de configuration par défaut

        Un endpoint vide signifie "utiliser DEFAULT_ENDPOINT".
        """
        self.config.add_section('reporter')
        self.config.set('reporter', 'endpoint', '')
        self.config.set('reporter', 'secret', '')
        self.config.set('reporter', 'timeout', '20')
        self.config.set('reporter', 'verify_ssl', 'false')
        self.config.set('reporter', 'site_url', '')

        self.config.add_section('schedule')
        self.config.set('schedule', 'enabled', 'true')
        self.config.set('schedule', 'interval_hours', '24')
        self.config.set('schedule', 'poll_seconds', '60')

        self.config.add_section('access')
        self.config.set('access', 'allowed_domains', DEFAULT_ALLOWED_DOMAINS)
        self.config.set('access', 'hide_restricted_menus', 'true')
        self.config.set('access', 'restricted_menus', '')
        self.config.set('access', 'theme', 'default')

        self.config.add_section('host')
        self.config.set('host', 'manifest', '')

        self.config.add_section('web_interface')
        self.config.set('web_interface', 'enabled', 'true')
        self.config.set('web_interface', 'port', '18744')
        self.config.set('web_interface', 'host', '127.0.0.1')
        self.config.set('web_interface', 'secret_key', '')

        self.config.add_section('logging')
        self.config.set('logging', 'log_level', 'INFO')
        self.config.set('logging', 'log_file', self._get_default_log_path())
        self.config.set('logging', 'max_log_size', '10485760')  # 10MB
        self.config.set('logging', 'backup_count', '5')

    def _get_default_log_path(self) -> str:
        if sys.platform == "win32":
            return os.path.join(
                os.environ.get("PROGRAMDATA", "C:\\ProgramData"),
                "PluginReporter",
                "logs",
                "reporter.log"
            )
        return "/var/log/plugin-reporter/reporter.log"

    def _load_config(self):
        """
        Charge la configuration depuis le fichier

        Si le fichier n'existe pas, utilise les valeurs par défaut.
        En cas d'erreur de lecture, continue avec les défauts.
        """
        try:
            if os.path.exists(self.config_file):
                self.config.read(self.config_file, encoding='utf-8')
                print(f"Configuration chargée depuis: {self.config_file}")
            else:
                print(f"Fichier de configuration non trouvé: {self.config_file}")
                print("Utilisation des valeurs par défaut")

        except configparser.Error as e:
            print(f"Erreur lors du chargement de la configuration: {e}")
            print("Utilisation des valeurs par défaut")

    def get(self, section: str, option: str, fallback: Any = None) -> str:
        """
        Récupère une valeur de configuration

        Args:
            section: Nom de la section
            option: Nom de l'option
            fallback: Valeur par défaut si non trouvée

        Returns:
            str: Valeur de configuration
        """
        return self.config.get(section, option, fallback=fallback)

    def getboolean(self, section: str, option: str, fallback: bool = False) -> bool:
        return self.config.getboolean(section, option, fallback=fallback)

    def getint(self, section: str, option: str, fallback: int = 0) -> int:
        return self.config.getint(section, option, fallback=fallback)

    def getlist(self, section: str, option: str) -> List[str]:
        """
        Récupère une option CSV sous forme de liste

        Returns:
            list: Valeurs non vides, espaces retirés
        """
        raw = self.get(section, option, '') or ''
        return [value.strip() for value in raw.split(',') if value.strip()]

    def set(self, section: str, option: str, value: Any):
        """
        Définit une valeur de configuration

        Args:
            section: Nom de la section
            option: Nom de l'option
            value: Nouvelle valeur
        """
        if not self.config.has_section(section):
            self.config.add_section(section)
        if isinstance(value, bool):
            value = 'true' if value else 'false'
        self.config.set(section, option, str(value))

    def save(self):
        """
        Sauvegarde la configuration dans le fichier

        Crée les dossiers parents si nécessaire.
        """
        if self.config_file == os.devnull:
            return

        config_dir = os.path.dirname(self.config_file)
        if config_dir and not os.path.exists(config_dir):
            os.makedirs(config_dir, exist_ok=True)

        with open(self.config_file, 'w', encoding='utf-8') as f:
            self.config.write(f)

        print(f"Configuration sauvegardée dans: {self.config_file}")

    def get_endpoint(self) -> str:
        """Endpoint configuré, ou l'endpoint par défaut si l'option est vide"""
        endpoint = (self.get('reporter', 'endpoint', '') or '').strip()
        return endpoint if endpoint else DEFAULT_ENDPOINT

    def get_secret(self) -> str:
        return (self.get('reporter', 'secret', '') or '').strip()

    def get_reporter_config(self) -> Dict[str, Any]:
        """
        Récupère la configuration complète du reporter

        Returns:
            dict: Configuration reporter
        """
        return {
            'endpoint': self.get_endpoint(),
            'secret': self.get_secret(),
            'timeout': self.getint('reporter', 'timeout', 20),
            'verify_ssl': self.getboolean('reporter', 'verify_ssl', False),
            'site_url': self.get('reporter', 'site_url', ''),
        }

    def get_schedule_config(self) -> Dict[str, Any]:
        return {
            'enabled': self.getboolean('schedule', 'enabled', True),
            'interval_hours': self.getint('schedule', 'interval_hours', 24),
            'poll_seconds': self.getint('schedule', 'poll_seconds', 60),
        }

    def get_access_config(self) -> Dict[str, Any]:
        return {
            'allowed_domains': self.getlist('access', 'allowed_domains'),
            'hide_restricted_menus': self.getboolean('access', 'hide_restricted_menus', True),
            'restricted_menus': self.getlist('access', 'restricted_menus'),
            'theme': self.get('access', 'theme', 'default'),
        }

    def get_access_policy(self) -> AccessPolicy:
        """
        Construit la politique d'accès depuis l'option allowed_domains

        Returns:
            AccessPolicy: Politique relue à chaque appel
        """
        return AccessPolicy.from_csv(self.get('access', 'allowed_domains', ''))

    def get_web_config(self) -> Dict[str, Any]:
        """
        Récupère la configuration complète de l'interface web

        Returns:
            dict: Configuration interface web
        """
        return {
            'enabled': self.getboolean('web_interface', 'enabled', True),
            'port': self.getint('web_interface', 'port', 18744),
            'host': self.get('web_interface', 'host', '127.0.0.1'),
            'secret_key': self.get('web_interface', 'secret_key', ''),
        }

    def validate(self) -> bool:
        """
        Valide la configuration courante

        Returns:
            bool: True si la configuration est valide, False sinon
        """
        errors = []

        endpoint = self.get_endpoint()
        if not endpoint.startswith(('http://', 'https://')):
            errors.append("URL d'endpoint invalide")

        if not self.get_secret():
            errors.append("Secret partagé non configuré")

        timeout = self.getint('reporter', 'timeout', 20)
        if not (1 <= timeout <= 300):
            errors.append("Timeout invalide (doit être entre 1 et 300 secondes)")

        if self.getint('schedule', 'interval_hours', 24) < 1:
            errors.append("Intervalle de planification invalide")

        log_level = self.get('logging', 'log_level')
        if log_level not in ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']:
            errors.append("Niveau de log invalide")

        web_port = self.getint('web_interface', 'port')
        if not (1 <= web_port <= 65535):
            errors.append("Port interface web invalide (doit être entre 1 et 65535)")

        if errors:
            for error in errors:
                print(f"Erreur de configuration: {error}")
            return False

        return True


def create_default_config(config_path: str) -> ReporterConfig:
    """
    Crée un fichier de configuration par défaut

    Args:
        config_path: Chemin où créer le fichier de configuration

    Returns:
        ReporterConfig: Instance de configuration créée
    """
    config = ReporterConfig(config_path)
    config.save()
    return config
