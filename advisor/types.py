# advisor/types.py
# Tipos del pipeline por frame (antes eran dicts; ahora dataclasses para que
# las reglas y los tests no dependan de llaves sueltas).
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Protocol, Tuple

BBox = Tuple[float, float, float, float]   # (x, y, w, h) en píxeles del frame


@dataclass(frozen=True)
class Detection:
    label: str
    bbox: BBox
    score: float


class Category(str, Enum):
    HAZARD = "hazard"
    TRAFFIC_LIGHT = "traffic_light"
    OTHER = "other"


class ActionState(str, Enum):
    STOP = "STOP"
    PROCEED_SLOWLY = "PROCEED_SLOWLY"


ADVISORIES = {
    ActionState.STOP: "stop",
    ActionState.PROCEED_SLOWLY: "proceed slowly",
}


@dataclass(frozen=True)
class Decision:
    action: ActionState
    advisory: str


@dataclass(frozen=True)
class NotificationEvent:
    text: str
    lang: str


@dataclass
class FrameSignals:
    """Agregado de un solo frame. Se crea vacío y se descarta al terminar."""
    stop_detected: bool = False
    green_light: bool = False
    red_or_yellow_light: bool = False
    nearest_stop_distance: Optional[float] = None
    descriptors: List[str] = field(default_factory=list)
    boxes: List[Tuple[BBox, str]] = field(default_factory=list)
    bands: List[Tuple[BBox, str]] = field(default_factory=list)


@dataclass(frozen=True)
class FrameReport:
    descriptors: Tuple[str, ...]
    distance_text: str
    decision: Decision
    notification: Optional[NotificationEvent]
    boxes: Tuple[Tuple[BBox, str], ...] = ()
    bands: Tuple[Tuple[BBox, str], ...] = ()

    @property
    def action_text(self) -> str:
        return self.decision.action.value


class Detector(Protocol):
    def infer(self, frame) -> List[Detection]: ...          # bloqueante (modo batch)

    async def detect(self, frame) -> List[Detection]: ...   # loop en vivo


class NotificationSink(Protocol):
    def notify(self, event: NotificationEvent) -> None: ...
