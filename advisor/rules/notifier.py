# advisor/rules/notifier.py
# Aviso por flanco: sólo se notifica cuando cambia la acción.
import logging

from advisor.types import NotificationEvent

logger = logging.getLogger(__name__)


class NotificationDebouncer:
    """
    Guarda la última acción notificada. Empieza en None (sin estado), distinto
    de cualquier ActionState, para que el primer frame pueda avisar.

    Un solo dueño: el pipeline la usa desde un único loop secuencial. Si se
    procesaran frames en paralelo habría que serializar maybe_notify.
    """

    def __init__(self, lang="ko-KR"):
        self.lang = lang
        self.last_action = None

    def maybe_notify(self, action, advisory):
        if action == self.last_action:
            return None
        self.last_action = action
        event = NotificationEvent(text=advisory, lang=self.lang)
        logger.info("Cambio de acción -> %s (%r, %s)", action.value, advisory, self.lang)
        return event

    def reset(self):
        self.last_action = None
