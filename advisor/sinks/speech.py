# advisor/sinks/speech.py
# Salidas de notificación: voz (pyttsx3) o sólo log.
import logging
import queue
import threading

import pyttsx3

logger = logging.getLogger(__name__)

# Texto hablado por idioma; si no hay traducción se habla el aviso tal cual
MESSAGES = {
    "ko-KR": {
        "stop": "정지하십시오",
        "proceed slowly": "서행하십시오",
    },
}


def localize(text, lang):
    return MESSAGES.get(lang, {}).get(text, text)


class LoggingSink:
    """Sink sin audio: deja la notificación en el log."""

    def notify(self, event):
        logger.info("Aviso [%s]: %s", event.lang, localize(event.text, event.lang))


class SpeechSink:
    """
    Voz con pyttsx3 en un hilo propio (runAndWait bloquea).

    Un aviso nuevo descarta el que esté pendiente en la cola; el que ya se
    está pronunciando termina.
    """

    def __init__(self, rate=150, volume=1.0, voice=None):
        self._queue = queue.Queue()
        self.engine = pyttsx3.init()
        self.engine.setProperty("rate", rate)
        self.engine.setProperty("volume", volume)
        if voice:
            self.engine.setProperty("voice", voice)
        self._worker = threading.Thread(target=self._run, name="speech", daemon=True)
        self._worker.start()

    def notify(self, event):
        while True:
            try:
                self._queue.get_nowait()
            except queue.Empty:
                break
        self._queue.put(localize(event.text, event.lang))

    def close(self):
        self._queue.put(None)
        self._worker.join(timeout=2.0)

    def _run(self):
        while True:
            text = self._queue.get()
            if text is None:
                break
            try:
                self.engine.say(text)
                self.engine.runAndWait()
            except RuntimeError as e:
                logger.warning("Falló la síntesis de voz: %s", e)
