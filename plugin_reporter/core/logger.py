"""
Module de logging du reporter de plugins

Ce module fournit un système de logging centralisé avec :
- Rotation automatique des logs
- Sortie console
- Masquage du secret partagé
"""

import os
import sys
import logging
import logging.handlers


LOGGER_NAME = 'PluginReporter'


class ReporterLogger:
    """
    Gestionnaire de logging du reporter

    Configure une seule fois le logger 'PluginReporter' ; les composants
    récupèrent l'instance via get_logger().
    """

    def __init__(self, config=None):
        """
        Initialise le système de logging

        Args:
            config: Instance de ReporterConfig pour récupérer les paramètres de log
        """
        self.config = config
        self.logger = logging.getLogger(LOGGER_NAME)

        # Éviter la duplication si déjà configuré
        if not self.logger.handlers:
            self._setup_logging()

    def _setup_logging(self):
        """
        Configure le niveau, le format, la rotation fichier et la console
        """
        if self.config:
            log_level_str = self.config.get('logging', 'log_level', 'INFO')
            log_file = self.config.get('logging', 'log_file', '')
            max_size = self.config.getint('logging', 'max_log_size', 10485760)
            backup_count = self.config.getint('logging', 'backup_count', 5)
        else:
            log_level_str = 'INFO'
            log_file = self._get_default_log_file()
            max_size = 10485760
            backup_count = 5

        log_level = getattr(logging, log_level_str.upper(), logging.INFO)
        self.logger.setLevel(log_level)

        formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        if log_file:
            try:
                log_dir = os.path.dirname(log_file)
                if log_dir and not os.path.exists(log_dir):
                    os.makedirs(log_dir, exist_ok=True)

                file_handler = logging.handlers.RotatingFileHandler(
                    filename=log_file,
                    maxBytes=max_size,
                    backupCount=backup_count,
                    encoding='utf-8'
                )
                file_handler.setLevel(log_level)
                file_handler.setFormatter(formatter)
                self.logger.addHandler(file_handler)

            except OSError as e:
                print(f"Erreur lors de la configuration du logging fichier: {e}")

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(logging.Formatter(fmt='%(levelname)s - %(message)s'))
        self.logger.addHandler(console_handler)

        self.logger.info("Système de logging initialisé")
        if self.config:
            self.logger.info(f"Niveau de log: {log_level_str}")
            self.logger.info(f"Fichier de log: {log_file or 'aucun'}")

    def _get_default_log_file(self) -> str:
        if sys.platform == "win32":
            return os.path.join(os.environ.get("TEMP", "C:\\temp"), "plugin-reporter.log")
        return "/tmp/plugin-reporter.log"

    def get_logger(self) -> logging.Logger:
        """
        Retourne l'instance du logger

        Returns:
            logging.Logger: Instance du logger configuré
        """
        return self.logger

    def log_config_info(self, config):
        """
        Log la configuration (sans le secret complet)

        Args:
            config: Instance de ReporterConfig
        """
        self.logger.info("=== Configuration du reporter ===")

        for key, value in config.get_reporter_config().items():
            if key == 'secret':
                # Ne pas logger le secret complet
                preview = value[:8] + "..." if len(value) > 8 else ("***" if value else "Non configuré")
                self.logger.info(f"Reporter.{key}: {preview}")
            else:
                self.logger.info(f"Reporter.{key}: {value}")

        for key, value in config.get_schedule_config().items():
            self.logger.info(f"Schedule.{key}: {value}")

        for key, value in config.get_access_config().items():
            self.logger.info(f"Access.{key}: {value}")

        self.logger.info("=== Fin configuration ===")
