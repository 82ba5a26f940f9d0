"""
Package des adaptateurs d'hôte

Fournit l'accès à l'état des plugins de l'application hôte :
- Interface commune (HostEnvironment)
- Manifeste JSON écrit par l'hôte (ManifestHost)
- Hôte en mémoire (StaticHost)
"""

from .base import HostEnvironment
from .manifest import ManifestHost, StaticHost

__all__ = ['HostEnvironment', 'ManifestHost', 'StaticHost']
