"""
Routeur des déclencheurs nommés

Les handlers sont enregistrés une fois, au démarrage du service, puis
appelés par nom (échéance planifiée, activation, requête entrante...).
"""

from typing import Any, Callable, Dict, List

SCHEDULED_TICK = 'scheduled_tick'
LIFECYCLE_ENABLE = 'lifecycle_enable'
LIFECYCLE_DISABLE = 'lifecycle_disable'
REMOTE_SEND = 'remote_send'
MANUAL_TEST = 'manual_test'


class UnknownTriggerError(KeyError):
    """Aucun handler enregistré pour ce déclencheur"""


class HookRouter:
    """
    Table déclencheur -> handler

    Un déclencheur n'a qu'un handler. Une fois figé, le routeur refuse
    toute nouvelle inscription.
    """

    def __init__(self):
        self._handlers: Dict[str, Callable[..., Any]] = {}
        self._frozen = False

    def register(self, trigger: str, handler: Callable[..., Any]):
        if self._frozen:
            raise RuntimeError(f"routeur figé, impossible d'enregistrer '{trigger}'")
        if trigger in self._handlers:
            raise ValueError(f"handler déjà enregistré pour '{trigger}'")
        self._handlers[trigger] = handler

    def freeze(self):
        self._frozen = True

    def dispatch(self, trigger: str, *args, **kwargs) -> Any:
        """
        Appelle le handler d'un déclencheur

        Raises:
            UnknownTriggerError: si aucun handler n'est enregistré
        """
        try:
            handler = self._handlers[trigger]
        except KeyError:
            raise UnknownTriggerError(trigger) from None
        return handler(*args, **kwargs)

    def triggers(self) -> List[str]:
        return sorted(self._handlers)

    def __contains__(self, trigger: str) -> bool:
        return trigger in self._handlers
