"""
Application Flask du reporter de plugins

Cette application expose :
- L'endpoint sécurisé plugin-reporter/v1 (send, status)
- La page de réglages et l'envoi de test, réservés aux administrateurs
  dont le domaine email est autorisé
"""

import hmac
import logging
import secrets

from flask import Flask, Blueprint, jsonify, redirect, request, session, url_for, abort

from .. import __version__
from ..core import hooks
from ..core.errors import AuthenticationError
from ..core.models import Identity
from .endpoint import API_NAMESPACE, AUTH_HEADER, PLUGIN_NAME, SecureEndpoint

CSRF_SESSION_KEY = 'plugin_reporter_csrf'
CSRF_FIELD = 'plugin_reporter_test_nonce'
USER_SESSION_KEY = 'user'


def current_identity() -> Identity:
    """
    Identité fournie par l'environnement appelant

    L'application hôte place {'email': ..., 'is_admin': ...} dans la session.
    """
    user = session.get(USER_SESSION_KEY) or {}
    return Identity(
        email=str(user.get('email', '') or ''),
        is_admin=bool(user.get('is_admin', False)),
    )


def get_csrf_token() -> str:
    token = session.get(CSRF_SESSION_KEY)
    if not token:
        token = secrets.token_urlsafe(32)
        session[CSRF_SESSION_KEY] = token
    return token


def csrf_token_valid(presented) -> bool:
    expected = session.get(CSRF_SESSION_KEY)
    if not expected or not presented:
        return False
    return hmac.compare_digest(str(expected).encode('utf-8'), str(presented).encode('utf-8'))


def _form_value(name: str, default=None):
    data = request.get_json(silent=True)
    if isinstance(data, dict) and name in data:
        return data.get(name)
    return request.form.get(name, default)


class ReporterWebApp:
    """
    Application web Flask du reporter

    Les composants (configuration, reporter, planificateur...) sont fournis
    par le service ; l'application ne construit rien elle-même.
    """

    def __init__(self, service):
        """
        Initialise l'application web

        Args:
            service: Instance de PluginReporterService
        """
        self.service = service
        self.config = service.config
        self.app_logger = service.logger.get_logger()

        self.endpoint = SecureEndpoint(
            self.config,
            service.logger,
            service.router,
            service.collector
        )

        self.app = Flask(__name__)
        self.app.secret_key = self.config.get_web_config()['secret_key'] or secrets.token_hex(32)

        # Désactiver les logs Flask pour éviter la pollution
        logging.getLogger('werkzeug').setLevel(logging.ERROR)

        self._register_routes()

        self.app_logger.info("Interface web initialisée")

    def _register_routes(self):
        """
        Enregistre les routes de l'API et de l'administration
        """
        api = Blueprint('plugin_reporter_api', __name__, url_prefix='/' + API_NAMESPACE)
        admin = Blueprint('plugin_reporter_admin', __name__, url_prefix='/admin/plugin-reporter')

        @api.errorhandler(AuthenticationError)
        def api_denied(error):
            # Aucun détail : ne pas indiquer quelle vérification a échoué
            self.app_logger.warning(f"Requête API refusée: {error.__class__.__name__}")
            return '', 401

        @api.route('/send', methods=['POST'])
        def api_send():
            """Déclenche un cycle d'inventaire à la demande du collecteur"""
            self.endpoint.authenticate(request.headers.get(AUTH_HEADER))
            try:
                body, status_code = self.endpoint.send()
            except Exception as e:
                self.app_logger.error(f"Erreur API send: {e}")
                return jsonify({'status': 'error'}), 500
            return jsonify(body), status_code

        @api.route('/status', methods=['GET'])
        def api_status():
            """Sonde de vie, sans collecte"""
            self.endpoint.authenticate(request.headers.get(AUTH_HEADER))
            body, status_code = self.endpoint.status()
            return jsonify(body), status_code

        @admin.before_request
        def admin_guard():
            if self.service.gate.is_permitted(current_identity()):
                return None
            if request.method != 'GET':
                # Action refusée avant tout appel réseau
                self.app_logger.warning("Action d'administration refusée: domaine non autorisé")
                abort(403)
            # Page bloquée : retour vers la page sûre
            return redirect(url_for('index'))

        @admin.route('', methods=['GET'])
        def settings_page():
            """Vue de réglages ; consomme le message différé du dernier test"""
            message = self.service.messages.pop()
            next_run = self.service.scheduler.next_run()

            return jsonify({
                'name': PLUGIN_NAME,
                'endpoint': self.config.get_endpoint(),
                'secret_configured': bool(self.config.get_secret()),
                'next_scheduled_run': next_run.isoformat() if next_run else 'Not scheduled',
                'theme': self.config.get('access', 'theme', 'default'),
                'message': message.to_dict() if message else None,
                'csrf_token': get_csrf_token(),
                'collector_stats': self.service.collector.get_collection_stats(),
                'reporter_stats': self.service.reporter.get_stats(),
            })

        @admin.route('/test', methods=['POST'])
        def run_test_post():
            """Envoi de test manuel, résultat transmis après redirection"""
            identity = current_identity()
            if not csrf_token_valid(_form_value(CSRF_FIELD)):
                self.app_logger.warning("Envoi de test refusé: jeton invalide")
                abort(403)
            if not identity.is_admin:
                self.app_logger.warning("Envoi de test refusé: droits insuffisants")
                abort(403)

            self.service.router.dispatch(hooks.MANUAL_TEST)
            return redirect(url_for('plugin_reporter_admin.settings_page'), code=303)

        @admin.route('/settings', methods=['POST'])
        def save_settings():
            """Enregistre l'endpoint et le secret partagé"""
            identity = current_identity()
            if not csrf_token_valid(_form_value(CSRF_FIELD)) or not identity.is_admin:
                abort(403)

            endpoint = str(_form_value('endpoint', '') or '').strip()
            secret = str(_form_value('secret', '') or '').strip()

            if endpoint and not endpoint.startswith(('http://', 'https://')):
                return jsonify({
                    'success': False,
                    'message': 'URL invalide - doit commencer par http:// ou https://'
                }), 400

            try:
                self.config.set('reporter', 'endpoint', endpoint)
                self.config.set('reporter', 'secret', secret)
                self.config.save()
            except OSError as e:
                self.app_logger.error(f"Erreur sauvegarde configuration: {e}")
                return jsonify({
                    'success': False,
                    'message': f'Erreur: {e}'
                }), 500

            self.app_logger.info(f"Configuration du reporter mise à jour: {self.config.get_endpoint()}")
            return jsonify({
                'success': True,
                'message': 'Configuration sauvegardée avec succès'
            })

        @self.app.route('/')
        def index():
            """Page sûre vers laquelle les accès refusés sont redirigés"""
            return jsonify({'name': PLUGIN_NAME, 'version': __version__})

        self.app.register_blueprint(api)
        self.app.register_blueprint(admin)

    def run(self, host='127.0.0.1', port=18744, debug=False):
        """
        Lance l'application Flask

        Args:
            host: Adresse d'écoute
            port: Port d'écoute
            debug: Mode debug Flask
        """
        self.app_logger.info(f"Démarrage interface web sur http://{host}:{port}")
        self.app.run(
            host=host,
            port=port,
            debug=debug,
            threaded=True,
            use_reloader=False
        )

