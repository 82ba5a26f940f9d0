"""
Point d'entrée principal du Plugin Reporter

Ce module assemble les composants et peut être exécuté :
- En mode service (planificateur + interface web)
- En mode interface web seule
- En mode envoi unique
- En mode collecte unique
"""

import sys
import json
import signal
import argparse
import threading

from .core.config import ReporterConfig, create_default_config
from .core.logger import ReporterLogger
from .core.collector import InventoryCollector
from .core.reporter import Reporter
from .core.scheduler import ReportScheduler
from .core.messages import MessageChannel
from .core.models import DeferredMessage, MessageSeverity, ReportTrigger
from .core import hooks
from .access.gate import AccessGate
from .host import ManifestHost, StaticHost


class PluginReporterService:
    """
    Service principal du reporter

    Construit tous les composants à partir d'une configuration injectée et
    enregistre une fois pour toutes les handlers des déclencheurs nommés.
    """

    def __init__(self, config=None, host=None, session=None):
        """
        Initialise le service

        Args:
            config: Instance de ReporterConfig (défaut: fichier par défaut)
            host: Adaptateur HostEnvironment (défaut: manifeste configuré)
            session: Session requests pour les envois (optionnelle)
        """
        self.config = config or ReporterConfig()

        self.logger = ReporterLogger(self.config)
        self.app_logger = self.logger.get_logger()
        self.logger.log_config_info(self.config)

        self.host = host or self._build_host()
        self.collector = InventoryCollector(self.config, self.logger, self.host)
        self.reporter = Reporter(self.config, self.logger, self.collector, session=session)
        self.messages = MessageChannel()
        self.gate = AccessGate(self.config, self.logger)

        self.router = hooks.HookRouter()
        self.scheduler = ReportScheduler(
            self.config,
            self.logger,
            lambda: self.router.dispatch(hooks.SCHEDULED_TICK)
        )
        self._register_hooks()

        self.web_app = None
        self.running = False
        self.shutdown_event = threading.Event()

        self.app_logger.info("Plugin Reporter initialisé")

    def _build_host(self):
        manifest = self.config.get('host', 'manifest', '')
        if manifest:
            return ManifestHost(manifest)

        self.app_logger.warning("Aucun manifeste d'hôte configuré, inventaire vide")
        return StaticHost(site_url=self.config.get('reporter', 'site_url', ''))

    def _register_hooks(self):
        self.router.register(hooks.SCHEDULED_TICK, self._on_scheduled_tick)
        self.router.register(hooks.LIFECYCLE_ENABLE, self.scheduler.enable)
        self.router.register(hooks.LIFECYCLE_DISABLE, self.scheduler.disable)
        self.router.register(hooks.REMOTE_SEND, lambda: self.reporter.report(ReportTrigger.REMOTE))
        self.router.register(hooks.MANUAL_TEST, self.run_manual_test)
        self.router.freeze()

    def _on_scheduled_tick(self):
        result = self.reporter.report(ReportTrigger.SCHEDULED)
        if not result.success:
            # Pas de nouvelle tentative : le cycle suivant remplace celui-ci
            self.app_logger.warning(f"Envoi planifié en échec: {result.message}")
        return result

    def run_manual_test(self):
        """
        Envoi de test : le résultat est déposé dans le canal de messages

        Returns:
            ReportResult: Résultat de l'envoi
        """
        result = self.reporter.report(ReportTrigger.MANUAL)
        severity = MessageSeverity.SUCCESS if result.success else MessageSeverity.ERROR
        self.messages.put(DeferredMessage(text=result.message, severity=severity))
        return result

    def enable(self):
        """Événement d'activation : arme l'envoi quotidien"""
        return self.router.dispatch(hooks.LIFECYCLE_ENABLE)

    def disable(self):
        """Événement de désactivation : supprime les échéances"""
        return self.router.dispatch(hooks.LIFECYCLE_DISABLE)

    def create_web_app(self):
        from .web.app import ReporterWebApp

        if not self.web_app:
            self.web_app = ReporterWebApp(self)
        return self.web_app

    def start_web_interface(self):
        """
        Démarre l'interface web dans un thread dédié
        """
        web_config = self.config.get_web_config()
        if not web_config['enabled']:
            self.app_logger.info("Interface web désactivée dans la configuration")
            return

        web_app = self.create_web_app()
        web_thread = threading.Thread(
            target=web_app.run,
            args=(web_config['host'], web_config['port']),
            daemon=True,
            name="WebInterface"
        )
        web_thread.start()

    def run_service_mode(self):
        """
        Lance le reporter en mode service

        Arme l'envoi quotidien, démarre la boucle de planification et
        l'interface web, puis attend un signal d'arrêt.
        """
        self.app_logger.info("Démarrage du Plugin Reporter en mode service")

        try:
            self._setup_signal_handlers()

            if self.config.get_schedule_config()['enabled']:
                self.enable()
            self.scheduler.start()
            self.start_web_interface()

            self.running = True
            self.app_logger.info("Plugin Reporter démarré")

            while self.running and not self.shutdown_event.is_set():
                self.shutdown_event.wait(timeout=1.0)

        except KeyboardInterrupt:
            self.app_logger.info("Interruption clavier détectée")
        finally:
            self.shutdown()

    def run_web_only_mode(self, debug=False):
        web_config = self.config.get_web_config()
        self.create_web_app().run(web_config['host'], web_config['port'], debug=debug)

    def _setup_signal_handlers(self):
        def signal_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            self.app_logger.info(f"Signal {signal_name} reçu - Arrêt en cours...")
            self.running = False
            self.shutdown_event.set()

        if hasattr(signal, 'SIGTERM'):
            signal.signal(signal.SIGTERM, signal_handler)
        if hasattr(signal, 'SIGINT'):
            signal.signal(signal.SIGINT, signal_handler)

    def shutdown(self):
        """
        Arrête proprement le planificateur

        Les échéances sont supprimées comme lors d'une désactivation.
        """
        self.app_logger.info("Arrêt du Plugin Reporter...")
        self.running = False
        self.shutdown_event.set()

        self.scheduler.stop()
        self.disable()

        self.app_logger.info("Plugin Reporter arrêté")

    def get_status(self):
        """
        Retourne le statut des composants

        Returns:
            dict: Statut du service
        """
        return {
            'running': self.running,
            'scheduler': self.scheduler.get_status(),
            'collector': self.collector.get_collection_stats(),
            'reporter': self.reporter.get_stats(),
            'config': {
                'file': self.config.config_file,
                'valid': self.config.validate(),
            },
        }


def main(argv=None):
    """
    Point d'entrée avec gestion des arguments de ligne de commande
    """
    parser = argparse.ArgumentParser(
        description='Plugin Reporter - Inventaire des plugins envoyé au collecteur distant'
    )

    parser.add_argument('--config', '-c', type=str, help='Chemin vers le fichier de configuration')
    parser.add_argument(
        '--mode', '-m',
        choices=['service', 'web', 'report', 'collect'],
        default='service',
        help='Mode de fonctionnement'
    )
    parser.add_argument('--create-config', action='store_true', help='Crée un fichier de configuration par défaut')
    parser.add_argument('--validate-config', action='store_true', help='Valide la configuration actuelle')
    parser.add_argument('--status', action='store_true', help='Affiche le statut du reporter')
    parser.add_argument('--output', '-o', type=str, help="Fichier de sortie de l'inventaire (mode collect)")

    args = parser.parse_args(argv)

    if args.create_config:
        if not args.config:
            print("❌ --config est requis avec --create-config")
            return 1
        try:
            create_default_config(args.config)
        except OSError as e:
            print(f"❌ Erreur création configuration: {e}")
            return 1
        print(f"✅ Configuration par défaut créée: {args.config}")
        return 0

    config = ReporterConfig(args.config)

    if args.validate_config:
        if config.validate():
            print("✅ Configuration valide")
            return 0
        print("❌ Configuration invalide")
        return 1

    service = PluginReporterService(config)

    if args.status:
        status = service.get_status()
        print(f"Config File: {status['config']['file']}")
        print(f"Config Valid: {'✅' if status['config']['valid'] else '❌'}")
        print(f"Endpoint: {status['reporter']['endpoint']}")
        return 0

    try:
        if args.mode == 'service':
            service.run_service_mode()

        elif args.mode == 'web':
            service.run_web_only_mode()

        elif args.mode == 'report':
            result = service.reporter.report(ReportTrigger.MANUAL)
            print(("✅ " if result.success else "❌ ") + result.message)
            return 0 if result.success else 1

        elif args.mode == 'collect':
            payload = service.collector.collect()
            if args.output:
                with open(args.output, 'w', encoding='utf-8') as f:
                    json.dump(payload.to_dict(), f, indent=2, ensure_ascii=False)
                print(f"✅ Données sauvegardées dans: {args.output}")
            else:
                print(json.dumps(payload.to_dict(), indent=2, ensure_ascii=False))

        return 0

    except KeyboardInterrupt:
        print("\n🛑 Arrêt demandé par l'utilisateur")
        return 0


if __name__ == '__main__':
    sys.exit(main())
