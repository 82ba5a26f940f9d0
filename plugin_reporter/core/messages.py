"""
Canal de messages différés

Transmet le résultat d'un envoi de test au travers d'une redirection :
l'écriture précède la redirection, la page de réglages lit puis supprime
le message au rendu suivant.
"""

import threading
import time
from typing import Callable, Dict, Optional, Tuple

from .models import DeferredMessage

DEFAULT_MESSAGE_KEY = 'plugin_reporter_test'
DEFAULT_TTL_SECONDS = 30


class MessageChannel:
    """
    Messages à lecture unique, un emplacement par clé, avec expiration

    Une seconde écriture sur la même clé remplace la première.
    """

    def __init__(self, ttl_seconds: float = DEFAULT_TTL_SECONDS,
                 clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._slots: Dict[str, Tuple[DeferredMessage, float]] = {}
        self._lock = threading.Lock()

    def put(self, message: DeferredMessage, key: str = DEFAULT_MESSAGE_KEY):
        with self._lock:
            self._evict_expired()
            self._slots[key] = (message, self._clock() + self.ttl_seconds)

    def pop(self, key: str = DEFAULT_MESSAGE_KEY) -> Optional[DeferredMessage]:
        """
        Lit et supprime le message d'une clé

        Returns:
            DeferredMessage ou None si absent ou expiré
        """
        with self._lock:
            self._evict_expired()
            entry = self._slots.pop(key, None)
        return entry[0] if entry else None

    def peek(self, key: str = DEFAULT_MESSAGE_KEY) -> Optional[DeferredMessage]:
        with self._lock:
            self._evict_expired()
            entry = self._slots.get(key)
        return entry[0] if entry else None

    def __len__(self) -> int:
        with self._lock:
            self._evict_expired()
            return len(self._slots)

    def _evict_expired(self):
        now = self._clock()
        expired = [key for key, (_, expires_at) in self._slots.items() if expires_at <= now]
        for key in expired:
            del self._slots[key]
