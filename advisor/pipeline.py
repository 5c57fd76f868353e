# -----------------------------------------------------------------------------
# Orquesta el ciclo por frame del asistente de conducción:
#   1) Obtener frame (archivo o cámara)
#   2) Detección (colaborador externo, puede suspender)
#   3) Por cada detección: distancia (peligros) o color (semáforos) -> señales
#   4) Decisión STOP / PROCEED_SLOWLY a partir de las señales del frame
#   5) Aviso sólo si la acción cambió respecto al último aviso
#   6) Overlays / HUD y siguiente frame
# Los pasos 3-5 son síncronos (process_frame); sólo 1 y 2 esperan I/O.
# -----------------------------------------------------------------------------

import asyncio
import logging
import os
import time

import pandas as pd
import yaml

from advisor.rules.decision import decide
from advisor.rules.interpreter import DetectionInterpreter
from advisor.rules.notifier import NotificationDebouncer
from advisor.types import Detector, FrameReport, FrameSignals, NotificationSink
from advisor.utils.color import FramePixels
from advisor.utils.drawing import draw_report
from advisor.utils.geometry import format_meters
from advisor.utils.video_io import open_video_reader, open_video_writer, release_safely

logger = logging.getLogger(__name__)


def load_config(path):
    with open(path, 'r', encoding='utf-8') as f:
        cfg = yaml.safe_load(f) or {}
    if "include" in cfg:
        # include relativo a la carpeta del archivo de escena, no al cwd
        base_path = os.path.join(os.path.dirname(os.path.abspath(path)), cfg["include"])
        with open(base_path, 'r', encoding='utf-8') as f:
            base = yaml.safe_load(f) or {}
        base.update({k: v for k, v in cfg.items() if k != "include"})
        cfg = base
    return cfg


class FramePipeline:
    def __init__(self, detector: Detector, interpreter=None, debouncer=None,
                 sink: NotificationSink | None = None,
                 frame_interval=0.0, debug_bands=False):
        self.detector = detector
        self.interpreter = interpreter or DetectionInterpreter()
        # Único estado que sobrevive entre frames: la última acción avisada
        self.debouncer = debouncer or NotificationDebouncer()
        self.sink = sink
        self.frame_interval = frame_interval
        self.debug_bands = debug_bands
        self.cfg = {}

    @classmethod
    def from_config(cls, scene_config_path, yolo_imgsz=None, yolo_conf=None, speech=None):
        from advisor.detectors.yolo_detector import YoloDetector
        from advisor.sinks.speech import LoggingSink, SpeechSink
        from advisor.utils.model_io import resolve_model_path

        cfg = load_config(scene_config_path)
        ycfg = cfg.setdefault("yolo", {})
        # Overrides de la UI / CLI
        if yolo_imgsz: ycfg["imgsz"] = yolo_imgsz
        if yolo_conf:  ycfg["conf"] = yolo_conf

        detector = YoloDetector(
            model_path=resolve_model_path(cfg.get("models", {}) or {}),
            imgsz=ycfg.get("imgsz", 640),
            conf=ycfg.get("conf", 0.35),
            device=ycfg.get("device"),
        )

        ncfg = cfg.get("notification", {}) or {}
        use_speech = ncfg.get("speech", True) if speech is None else speech
        sink = SpeechSink(rate=ncfg.get("rate", 150)) if use_speech else LoggingSink()

        pipe = cls(
            detector,
            interpreter=DetectionInterpreter.from_config(cfg),
            debouncer=NotificationDebouncer(lang=ncfg.get("lang", "ko-KR")),
            sink=sink,
            frame_interval=float((cfg.get("loop") or {}).get("frame_interval", 0.0)),
            debug_bands=bool((cfg.get("traffic_light", {}) or {}).get("debug_bands", False)),
        )
        pipe.cfg = cfg
        return pipe

    def process_frame(self, frame, detections):
        """
        Paso síncrono (nunca suspende): interpreta todas las detecciones,
        decide la acción, aplica el debounce y entrega el aviso al sink.
        """
        pixels = FramePixels(frame)
        signals = FrameSignals()
        for det in detections:
            # Un error en una detección no aborta el resto del frame
            try:
                self.interpreter.interpret(det, pixels, signals)
            except Exception:
                logger.exception("Error interpretando la detección %r; se omite", det)

        decision = decide(signals)
        event = self.debouncer.maybe_notify(decision.action, decision.advisory)
        if event is not None and self.sink is not None:
            self.sink.notify(event)

        distance_text = "-"
        if signals.nearest_stop_distance is not None:
            distance_text = f"{format_meters(signals.nearest_stop_distance)} m"

        return FrameReport(
            descriptors=tuple(signals.descriptors),
            distance_text=distance_text,
            decision=decision,
            notification=event,
            boxes=tuple(signals.boxes),
            bands=tuple(signals.bands),
        )

    async def step(self, frame):
        detections = await self.detector.detect(frame)
        return self.process_frame(frame, detections)

    async def run(self, source, presenter=None, max_frames=None):
        """
        Loop en vivo: un frame se procesa completo antes de pedir el siguiente.
        Termina al acabar el stream o al llegar a max_frames. Devuelve los
        frames procesados.
        """
        n = 0
        while max_frames is None or n < max_frames:
            frame = await source.read()
            if frame is None:
                break
            report = await self.step(frame)
            n += 1
            if presenter is not None:
                presenter(frame, report)
            # Cede el control al scheduler antes del siguiente frame
            await asyncio.sleep(self.frame_interval)
        return n

    def process_video(self, in_path, out_path):
        """
        Analiza un video grabado y produce:
          - Video anotado (cajas, franjas opcionales y HUD con la acción).
          - DataFrame con los avisos emitidos (tiempo_seg, frame, accion, texto, idioma).
        """
        t0 = time.perf_counter()
        cap, w, h, fps = open_video_reader(in_path)
        writer, out_path_final = open_video_writer(out_path, fps, (w, h))

        rows = []
        frame_idx = 0
        try:
            while True:
                ok, frame = cap.read()
                if not ok: break
                frame_idx += 1

                detections = self.detector.infer(frame)
                report = self.process_frame(frame, detections)
                if report.notification is not None:
                    rows.append({
                        "tiempo_seg": round(frame_idx / fps, 3),
                        "frame": frame_idx,
                        "accion": report.action_text,
                        "texto": report.notification.text,
                        "idioma": report.notification.lang,
                        "objetos": ", ".join(report.descriptors),
                        "distancia": report.distance_text,
                    })

                draw_report(frame, report, show_bands=self.debug_bands)
                writer.write(frame)

            processing_seconds = max(0.0, time.perf_counter() - t0)
            return {
                "notifications_df": pd.DataFrame(rows, columns=[
                    "tiempo_seg", "frame", "accion", "texto", "idioma", "objetos", "distancia"]),
                "out_path_final": out_path_final,
                "frames": frame_idx,
                "processing_seconds": processing_seconds,
                "processing_fps": (frame_idx / processing_seconds) if processing_seconds > 0 else 0.0,
            }
        finally:
            release_safely(cap, writer)
