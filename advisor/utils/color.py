# advisor/utils/color.py
# Color del semáforo por votación de píxeles HSV en tres franjas del bbox.
# Las franjas tienen rol fijo (semáforo vertical): arriba=rojo, medio=amarillo,
# abajo=verde, pero el voto es por tono, así que cualquier franja puede sumar
# a cualquier color.
import logging

import cv2
import numpy as np

from advisor.utils.geometry import expand_bbox, split_bands

logger = logging.getLogger(__name__)

COLORS = ("red", "yellow", "green")
EXPAND_SCALE = 1.5
MIN_VALUE = 0.2   # píxeles más oscuros no cuentan como luz encendida


class PixelReadError(ValueError):
    """La región pedida no se puede leer (vacía o fuera del frame)."""


class FramePixels:
    """Acceso de lectura a los píxeles de un frame BGR de OpenCV."""

    def __init__(self, frame):
        self.frame = frame
        self.height, self.width = frame.shape[:2]

    def read(self, x, y, w, h):
        """Devuelve los píxeles RGB (h, w, 3) de la región pedida."""
        x, y, w, h = int(x), int(y), int(w), int(h)
        if w <= 0 or h <= 0:
            raise PixelReadError(f"región vacía: {(x, y, w, h)}")
        if x < 0 or y < 0 or x + w > self.width or y + h > self.height:
            raise PixelReadError(f"región fuera del frame {self.width}x{self.height}: {(x, y, w, h)}")
        crop = self.frame[y:y + h, x:x + w]
        if crop.ndim != 3 or crop.shape[2] < 3:
            raise PixelReadError(f"formato de píxel no soportado: {crop.shape}")
        try:
            return cv2.cvtColor(np.ascontiguousarray(crop[:, :, :3]), cv2.COLOR_BGR2RGB)
        except cv2.error as e:
            raise PixelReadError(f"OpenCV no pudo leer la región {(x, y, w, h)}: {e}") from e


def rgb_to_hsv(rgb):
    """
    RGB uint8 (..., 3) -> (h en grados [0,360), s [0,1], v [0,1]).

    Fórmula max/min estándar. Se calcula aparte de cv2.cvtColor porque OpenCV
    usa h en [0,180] y los umbrales de abajo están en grados.
    """
    rgb = np.asarray(rgb, dtype=np.float64) / 255.0
    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]
    mx = rgb.max(axis=-1)
    mn = rgb.min(axis=-1)
    d = mx - mn
    v = mx
    s = np.where(mx > 0, d / np.where(mx > 0, mx, 1.0), 0.0)

    safe_d = np.where(d > 0, d, 1.0)
    h_r = (g - b) / safe_d + np.where(g < b, 6.0, 0.0)
    h_g = (b - r) / safe_d + 2.0
    h_b = (r - g) / safe_d + 4.0
    # mismo orden de prioridad que un switch sobre el máximo: r, luego g, luego b
    h = np.where(mx == r, h_r, np.where(mx == g, h_g, h_b))
    h = np.where(d == 0, 0.0, h) / 6.0
    return h * 360.0, s, v


def vote_colors(rgb):
    """Cuenta píxeles rojo/amarillo/verde. Cada píxel vota a lo sumo una vez."""
    h, s, v = rgb_to_hsv(rgb)
    lit = v >= MIN_VALUE
    red = lit & ((h >= 340) | (h <= 20)) & (s > 0.5) & (v > 0.3)
    yellow = lit & ~red & (h >= 20) & (h <= 70) & (s > 0.5) & (v > 0.3)
    green = lit & ~red & ~yellow & (h >= 70) & (h <= 160) & (s > 0.3) & (v > 0.2)
    return {
        "red": int(red.sum()),
        "yellow": int(yellow.sum()),
        "green": int(green.sum()),
    }


def dominant_color(counts):
    """Color con más votos; rojo gana los empates."""
    best, best_count = "red", counts.get("red", 0)
    for c in ("yellow", "green"):
        if counts.get(c, 0) > best_count:
            best, best_count = c, counts[c]
    return best


def classify_traffic_light(bbox, pixels, scale=EXPAND_SCALE, bands_out=None):
    """
    Clasifica el semáforo del bbox como 'red', 'yellow' o 'green'.

    - Amplía el bbox (scale) alrededor del centro: el detector suele cortar el foco.
    - Divide en tres franjas y suma los votos de las tres.
    - Una franja ilegible aporta 0 votos; nunca aborta la clasificación.
    Si se pasa `bands_out` (lista), se agregan las franjas escaneadas para depuración.
    """
    box = expand_bbox(bbox, scale, pixels.width, pixels.height)
    counts = dict.fromkeys(COLORS, 0)
    for band, color in zip(split_bands(box), COLORS):
        if band[2] <= 0 or band[3] <= 0:
            continue
        try:
            rgb = pixels.read(*band)
        except (PixelReadError, OSError, cv2.error) as e:
            logger.warning("No se pudo leer la franja %s del semáforo: %s", color, e)
            continue
        for c, n in vote_colors(rgb).items():
            counts[c] += n
        if bands_out is not None:
            bands_out.append((band, color))
    return dominant_color(counts)
