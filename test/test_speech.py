# test/test_speech.py
import logging
import threading

import pytest

pytest.importorskip("pyttsx3")

from advisor.sinks import speech
from advisor.sinks.speech import LoggingSink, localize
from advisor.types import NotificationEvent


def test_localize_korean_advisories():
    assert localize("stop", "ko-KR") == "정지하십시오"
    assert localize("proceed slowly", "ko-KR") == "서행하십시오"


def test_localize_falls_back_to_text():
    assert localize("stop", "en-US") == "stop"


def test_logging_sink_logs_localized_text(caplog):
    with caplog.at_level(logging.INFO, logger="advisor.sinks.speech"):
        LoggingSink().notify(NotificationEvent(text="stop", lang="ko-KR"))
    assert "정지하십시오" in caplog.text


class _BlockingEngine:
    """Motor falso: el primer runAndWait queda bloqueado hasta `release`."""

    def __init__(self):
        self.spoken = []
        self.speaking = threading.Event()
        self.release = threading.Event()

    def setProperty(self, name, value):
        pass

    def say(self, text):
        self.spoken.append(text)

    def runAndWait(self):
        if len(self.spoken) == 1:
            self.speaking.set()
            self.release.wait(timeout=2.0)


def test_speech_sink_drops_pending_utterances(monkeypatch):
    engine = _BlockingEngine()
    monkeypatch.setattr(speech.pyttsx3, "init", lambda: engine)
    sink = speech.SpeechSink()

    sink.notify(NotificationEvent(text="one", lang="en-US"))
    assert engine.speaking.wait(timeout=2.0)
    sink.notify(NotificationEvent(text="two", lang="en-US"))
    sink.notify(NotificationEvent(text="three", lang="en-US"))
    engine.release.set()
    sink.close()

    assert engine.spoken == ["one", "three"]


def test_speech_sink_speaks_korean(monkeypatch):
    engine = _BlockingEngine()
    engine.release.set()
    monkeypatch.setattr(speech.pyttsx3, "init", lambda: engine)
    sink = speech.SpeechSink()
    sink.notify(NotificationEvent(text="stop", lang="ko-KR"))
    sink.close()
    assert engine.spoken == ["정지하십시오"]
