"""
Adaptateurs d'hôte basés sur un manifeste JSON

L'application hôte écrit l'état de ses plugins dans un fichier JSON :

{
  "site_url": "https://example.org",
  "platform_version": "6.4.2",
  "plugins": {
    "akismet/akismet.php": {"name": "Akismet Anti-spam", "version": "5.3"},
    "hello.php": {"name": "Hello Dolly", "version": "1.7.2"}
  },
  "active_plugins": ["akismet/akismet.php"],
  "auto_update_plugins": [],
  "update_plugins": {"akismet/akismet.php": "5.3.1"}
}

L'index des mises à jour peut aussi être maintenu dans un fichier séparé
(même format que la clé "update_plugins").
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Set

from ..core.errors import CollectionError
from .base import HostEnvironment


def _parse_plugins(raw: Any) -> Dict[str, Dict[str, str]]:
    if not isinstance(raw, dict):
        raise CollectionError("clé 'plugins' absente ou invalide")

    plugins = {}
    for plugin_file, data in raw.items():
        data = data if isinstance(data, dict) else {}
        plugins[str(plugin_file)] = {
            'name': str(data.get('name', plugin_file)),
            'version': str(data.get('version', '')),
        }
    return plugins


def _parse_updates(raw: Any) -> Dict[str, str]:
    if not isinstance(raw, dict):
        raise CollectionError("index des mises à jour invalide")

    updates = {}
    for plugin_file, new_version in raw.items():
        # Format WordPress : {"new_version": "..."} ou version directe
        if isinstance(new_version, dict):
            new_version = new_version.get('new_version')
        if new_version:
            updates[str(plugin_file)] = str(new_version)
    return updates


class ManifestHost(HostEnvironment):
    """
    Lit l'état des plugins depuis le manifeste

    Aucun cache entre les cycles : snapshot() lit le fichier une fois et
    chaque cycle reflète l'état courant du fichier.
    """

    def __init__(self, manifest_path, updates_path=None):
        """
        Args:
            manifest_path: Chemin du manifeste JSON écrit par l'hôte
            updates_path: Index séparé des mises à jour (optionnel)
        """
        self.manifest_path = Path(manifest_path)
        self.updates_path = Path(updates_path) if updates_path else None

    def _read_json(self, path: Path) -> Dict[str, Any]:
        try:
            data = json.loads(path.read_text(encoding='utf-8'))
        except (OSError, ValueError) as e:
            raise CollectionError(f"lecture impossible de {path}: {e}") from e

        if not isinstance(data, dict):
            raise CollectionError(f"{path} ne contient pas un objet JSON")
        return data

    def _manifest(self) -> Dict[str, Any]:
        return self._read_json(self.manifest_path)

    def snapshot(self) -> 'StaticHost':
        """
        Lit le manifeste (et l'index séparé) une seule fois

        Raises:
            CollectionError: Manifeste illisible
        """
        manifest = self._manifest()

        if self.updates_path:
            try:
                update_plugins = self._read_json(self.updates_path)
            except CollectionError:
                update_plugins = None
        else:
            update_plugins = manifest.get('update_plugins')

        return StaticHost(
            plugins=manifest.get('plugins'),
            active_plugins={str(p) for p in manifest.get('active_plugins') or []},
            auto_update_plugins={str(p) for p in manifest.get('auto_update_plugins') or []},
            update_plugins=update_plugins,
            site_url=str(manifest.get('site_url', '')),
            platform_version=str(manifest.get('platform_version', '')),
        )

    def get_plugins(self) -> Dict[str, Dict[str, str]]:
        return _parse_plugins(self._manifest().get('plugins'))

    def get_active_plugins(self) -> Set[str]:
        return {str(p) for p in self._manifest().get('active_plugins') or []}

    def get_auto_update_plugins(self) -> Set[str]:
        return {str(p) for p in self._manifest().get('auto_update_plugins') or []}

    def get_available_updates(self) -> Dict[str, str]:
        if self.updates_path:
            return _parse_updates(self._read_json(self.updates_path))

        raw = self._manifest().get('update_plugins')
        if raw is None:
            raise CollectionError("index des mises à jour non disponible")
        return _parse_updates(raw)

    def get_site_url(self) -> str:
        return str(self._manifest().get('site_url', ''))

    def get_platform_version(self) -> str:
        return str(self._manifest().get('platform_version', ''))


@dataclass
class StaticHost(HostEnvironment):
    """
    Hôte en mémoire

    Utile pour les tests et pour les hôtes qui construisent l'état eux-mêmes.
    Un index des mises à jour à None simule une source indisponible.
    """

    plugins: Dict[str, Dict[str, str]] = field(default_factory=dict)
    active_plugins: Set[str] = field(default_factory=set)
    auto_update_plugins: Set[str] = field(default_factory=set)
    update_plugins: Optional[Dict[str, str]] = field(default_factory=dict)
    site_url: str = ''
    platform_version: str = ''

    def get_plugins(self) -> Dict[str, Dict[str, str]]:
        return _parse_plugins(self.plugins)

    def get_active_plugins(self) -> Set[str]:
        return set(self.active_plugins)

    def get_auto_update_plugins(self) -> Set[str]:
        return set(self.auto_update_plugins)

    def get_available_updates(self) -> Dict[str, str]:
        if self.update_plugins is None:
            raise CollectionError("index des mises à jour non disponible")
        return _parse_updates(self.update_plugins)

    def get_site_url(self) -> str:
        return self.site_url

    def get_platform_version(self) -> str:
        return self.platform_version
