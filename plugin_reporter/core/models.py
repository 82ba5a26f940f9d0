"""
Modèles de données du reporter de plugins

Ce module définit les structures échangées entre les composants :
- InventoryItem / InventoryPayload : inventaire envoyé au collecteur distant
- ReportResult : résultat d'un cycle d'envoi
- Identity / AccessPolicy : données de contrôle d'accès
- DeferredMessage : message transmis au travers d'une redirection
"""

import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional


class PluginStatus(Enum):
    """Statut d'un plugin sur l'hôte"""
    ACTIVE = "active"
    INACTIVE = "inactive"


class ReportOutcome(Enum):
    """Issue d'un cycle d'inventaire"""
    SUCCESS = "success"
    TRANSPORT_ERROR = "transport_error"
    HTTP_ERROR = "http_error"


class ReportTrigger(Enum):
    """Origine d'un cycle d'inventaire"""
    SCHEDULED = "scheduled"
    MANUAL = "manual"
    REMOTE = "remote"


class MessageSeverity(Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class InventoryItem:
    """
    Un plugin installé sur l'hôte

    available_update vaut None quand aucune mise à jour n'est connue.
    """
    slug: str
    title: str
    version: str
    status: PluginStatus = PluginStatus.INACTIVE
    auto_update: bool = False
    available_update: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'slug': self.slug,
            'title': self.title,
            'version': self.version,
            'status': self.status.value,
            'auto_update': self.auto_update,
            # Le collecteur attend false quand il n'y a pas de mise à jour
            'update': self.available_update if self.available_update else False,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'InventoryItem':
        update = data.get('update')
        return cls(
            slug=str(data['slug']),
            title=str(data.get('title', '')),
            version=str(data.get('version', '')),
            status=PluginStatus(data.get('status', PluginStatus.INACTIVE.value)),
            auto_update=bool(data.get('auto_update', False)),
            available_update=str(update) if update else None,
        )


@dataclass(frozen=True)
class InventoryPayload:
    """
    Inventaire complet d'un site, construit à chaque cycle

    L'ordre des items est conservé à la sérialisation.
    """
    site_identifier: str
    platform_version: str
    items: List[InventoryItem] = field(default_factory=list)

    @property
    def item_count(self) -> int:
        return len(self.items)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'site_url': self.site_identifier,
            'platform_version': self.platform_version,
            'plugins': [item.to_dict() for item in self.items],
        }

    def serialize(self) -> str:
        """
        Sérialise l'inventaire en JSON canonique

        Returns:
            str: Corps JSON (clés triées, séparateurs compacts)
        """
        return json.dumps(self.to_dict(), sort_keys=True, separators=(',', ':'), ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'InventoryPayload':
        return cls(
            site_identifier=str(data.get('site_url', '')),
            platform_version=str(data.get('platform_version', '')),
            items=[InventoryItem.from_dict(raw) for raw in data.get('plugins', [])],
        )

    @classmethod
    def deserialize(cls, body: str) -> 'InventoryPayload':
        return cls.from_dict(json.loads(body))


@dataclass(frozen=True)
class ReportResult:
    """Résultat structuré d'un cycle d'inventaire"""
    outcome: ReportOutcome
    message: str
    item_count: int
    status_code: Optional[int] = None
    trigger: ReportTrigger = ReportTrigger.SCHEDULED
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def success(self) -> bool:
        return self.outcome == ReportOutcome.SUCCESS

    def to_dict(self) -> Dict[str, Any]:
        return {
            'outcome': self.outcome.value,
            'status_code': self.status_code,
            'message': self.message,
            'item_count': self.item_count,
            'trigger': self.trigger.value,
            'timestamp': self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class Identity:
    """Identité de l'utilisateur courant, fournie par l'environnement appelant"""
    email: str = ''
    is_admin: bool = False


@dataclass(frozen=True)
class AccessPolicy:
    """Liste des domaines email autorisés (minuscules, sans '@')"""
    allowed_domains: FrozenSet[str] = frozenset()

    @classmethod
    def from_csv(cls, value: Optional[str]) -> 'AccessPolicy':
        """
        Construit une politique depuis une liste CSV de domaines

        Args:
            value: Ex: "@kobaltdigital.nl, alkmaarsch.nl"

        Returns:
            AccessPolicy: Politique normalisée
        """
        domains = set()
        for raw in (value or '').split(','):
            domain = raw.strip().lstrip('@').strip().lower()
            if domain:
                domains.add(domain)
        return cls(allowed_domains=frozenset(domains))


@dataclass(frozen=True)
class DeferredMessage:
    text: str
    severity: MessageSeverity = MessageSeverity.SUCCESS

    def to_dict(self) -> Dict[str, Any]:
        return {'text': self.text, 'severity': self.severity.value}
