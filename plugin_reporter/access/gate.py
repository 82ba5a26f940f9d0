"""
Contrôle d'accès aux surfaces d'administration restreintes

is_permitted() est une fonction pure ; AccessGate y ajoute la lecture de
la politique depuis la configuration et les actions de filtrage des
appelants (menus, groupes de champs).
"""

from typing import Iterable, List, Mapping, Any

from ..core.models import AccessPolicy, Identity


def normalize_domain(domain: str) -> str:
    return domain.strip().lstrip('@').strip().lower()


def is_permitted(identity: Identity, policy: AccessPolicy) -> bool:
    """
    Indique si l'identité appartient à un domaine autorisé

    Le test est un suffixe "@domaine" sur l'email brut, sensible à la
    casse : "x@notkobaltdigital.nl" ne correspond pas à "kobaltdigital.nl".

    Args:
        identity: Identité de l'utilisateur courant
        policy: Domaines autorisés

    Returns:
        bool: True si autorisé
    """
    email = identity.email or ''
    if not email:
        return False

    for domain in policy.allowed_domains:
        domain = normalize_domain(domain)
        if domain and email.endswith('@' + domain):
            return True
    return False


class AccessGate:
    """
    Évalue l'identité courante contre la politique configurée

    La politique est relue depuis la configuration à chaque évaluation.
    """

    def __init__(self, config, logger):
        self.config = config
        self.logger = logger.get_logger()

    def policy(self) -> AccessPolicy:
        return self.config.get_access_policy()

    def is_permitted(self, identity: Identity) -> bool:
        permitted = is_permitted(identity, self.policy())
        if not permitted:
            self.logger.debug("Accès restreint refusé pour l'identité courante")
        return permitted

    def filter_menu(self, entries: Iterable[Mapping[str, Any]], identity: Identity) -> List[Mapping[str, Any]]:
        """
        Retire les entrées de menu restreintes pour une identité non autorisée

        Args:
            entries: Entrées de menu, chacune avec une clé 'slug'
            identity: Identité courante

        Returns:
            list: Entrées visibles
        """
        entries = list(entries)
        access_config = self.config.get_access_config()
        if not access_config['hide_restricted_menus'] or self.is_permitted(identity):
            return entries

        restricted = set(access_config['restricted_menus'])
        return [entry for entry in entries if entry.get('slug') not in restricted]

    def visible_field_groups(self, groups: Iterable[Mapping[str, Any]], identity: Identity) -> List[Mapping[str, Any]]:
        """
        Supprime les groupes de champs marqués 'restricted' pour une identité non autorisée
        """
        groups = list(groups)
        if self.is_permitted(identity):
            return groups
        return [group for group in groups if not group.get('restricted')]
