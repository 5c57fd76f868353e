# advisor/rules/interpreter.py
# Interpreta cada detección: calcula distancia o color según la categoría de la
# etiqueta y acumula descriptores + señales en el FrameSignals del frame.
from advisor.types import Category
from advisor.utils.color import EXPAND_SCALE, classify_traffic_light
from advisor.utils.geometry import FOV_DEG, REAL_WIDTH_M, estimate_distance, format_meters

HAZARD_LABELS = ("person", "cat", "dog", "horse", "sheep", "cow")
TRAFFIC_LIGHT_LABEL = "traffic light"
COLOR_CODES = {"red": "R", "yellow": "Y", "green": "G"}


class DetectionInterpreter:
    def __init__(self, min_score=0.5, stop_distance_m=5.0, hazard_labels=HAZARD_LABELS,
                 traffic_light_label=TRAFFIC_LIGHT_LABEL, fov_deg=FOV_DEG,
                 real_width_m=REAL_WIDTH_M, expand_scale=EXPAND_SCALE):
        self.min_score = float(min_score)
        self.stop_distance_m = float(stop_distance_m)
        self.hazard_labels = frozenset(hazard_labels)
        self.traffic_light_label = traffic_light_label
        self.fov_deg = float(fov_deg)
        self.real_width_m = float(real_width_m)
        self.expand_scale = float(expand_scale)

    @classmethod
    def from_config(cls, cfg):
        pcfg = cfg.get("perception", {}) or {}
        tcfg = cfg.get("traffic_light", {}) or {}
        return cls(
            min_score=pcfg.get("min_score", 0.5),
            stop_distance_m=pcfg.get("stop_distance_m", 5.0),
            hazard_labels=pcfg.get("hazard_labels", HAZARD_LABELS),
            traffic_light_label=pcfg.get("traffic_light_label", TRAFFIC_LIGHT_LABEL),
            fov_deg=pcfg.get("fov_deg", FOV_DEG),
            real_width_m=pcfg.get("real_width_m", REAL_WIDTH_M),
            expand_scale=tcfg.get("expand_scale", EXPAND_SCALE),
        )

    def categorize(self, label):
        # Comparación exacta, sensible a mayúsculas
        if label in self.hazard_labels:
            return Category.HAZARD
        if label == self.traffic_light_label:
            return Category.TRAFFIC_LIGHT
        return Category.OTHER

    def distance(self, det, frame_width):
        return estimate_distance(det.bbox, frame_width, self.fov_deg, self.real_width_m)

    def interpret(self, det, pixels, signals):
        """
        Actualiza `signals` con una detección. Devuelve True si la detección
        se tuvo en cuenta (score >= min_score).
        """
        if det.score < self.min_score:
            return False

        category = self.categorize(det.label)
        if category is Category.TRAFFIC_LIGHT:
            color = classify_traffic_light(det.bbox, pixels, self.expand_scale, bands_out=signals.bands)
            if color == "green":
                signals.green_light = True
            else:
                signals.red_or_yellow_light = True
            signals.descriptors.append(f"{det.label} - {COLOR_CODES[color]}")
        elif category is Category.HAZARD:
            d = self.distance(det, pixels.width)
            # Gana el primer peligro cercano en orden del detector, no el más cercano
            if d is not None and d <= self.stop_distance_m and not signals.stop_detected:
                signals.stop_detected = True
                signals.nearest_stop_distance = d
            signals.descriptors.append(_describe(det.label, d))
        else:
            signals.descriptors.append(_describe(det.label, self.distance(det, pixels.width)))

        signals.boxes.append((det.bbox, det.label))
        return True


def _describe(label, distance):
    return f"{label} (-)" if distance is None else f"{label} ({format_meters(distance)}m)"
