# advisor/utils/geometry.py
# Geometría de cajas (x, y, w, h): distancia monocular y regiones del semáforo.
import math

FOV_DEG = 60.0        # campo de visión horizontal supuesto
REAL_WIDTH_M = 0.5    # ancho real supuesto para cualquier objeto


def estimate_distance(bbox, frame_width, fov_deg=FOV_DEG, real_width_m=REAL_WIDTH_M):
    """
    Distancia en metros con modelo pinhole:
        d = (W_real * ancho_frame) / (2 * tan(FOV/2) * ancho_bbox)

    Es una aproximación gruesa (todo objeto "mide" real_width_m), sirve como
    señal cerca/lejos, no como medición calibrada.
    Retorna None (desconocida) si el ancho del bbox es <= 0.
    """
    bbox_w = bbox[2]
    if bbox_w <= 0:
        return None
    fov = math.radians(fov_deg)
    distance = (real_width_m * frame_width) / (2 * math.tan(fov / 2) * bbox_w)
    return round(distance, 2)


def format_meters(distance):
    """0.92 -> '0.92', 5.0 -> '5', 1.50 -> '1.5'."""
    return f"{distance:.2f}".rstrip("0").rstrip(".")


def expand_bbox(bbox, scale, frame_w, frame_h):
    """Escala el bbox alrededor de su centro y lo recorta a los bordes del frame."""
    x, y, w, h = bbox
    cx, cy = x + w / 2.0, y + h / 2.0
    w, h = w * scale, h * scale
    x = max(0, math.floor(cx - w / 2.0))
    y = max(0, math.floor(cy - h / 2.0))
    w = min(frame_w - x, math.floor(w))
    h = min(frame_h - y, math.floor(h))
    return x, y, w, h


def split_bands(box):
    """Tres franjas horizontales de igual alto: superior, media, inferior."""
    x, y, w, h = box
    third = h // 3
    return [
        (x, y, w, third),
        (x, y + third, w, third),
        (x, y + 2 * third, w, third),
    ]
