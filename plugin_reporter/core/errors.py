"""
Exceptions du reporter de plugins

Les erreurs de transport et HTTP ne sont jamais levées : elles sont
classées dans ReportResult.outcome. Seules les erreurs d'authentification
et de configuration remontent sous forme d'exceptions.
"""


class ReporterError(Exception):
    """Exception de base du package"""


class AuthenticationError(ReporterError):
    """Clé absente ou invalide (auth_denied)"""


class ConfigurationMissingError(AuthenticationError):
    """Aucun secret partagé configuré (config_missing)"""


class CollectionError(ReporterError):
    """Source d'inventaire de l'hôte indisponible"""
