"""Descarga de pesos del detector a disco si faltan, con una URL configurable.

Uso:
    ensure_local_model("models/yolo/yolo11n.pt", url)

No añade dependencias externas (usa urllib). Crea carpetas si no existen.
"""

import logging
import os
import urllib.request

logger = logging.getLogger(__name__)


def _makedirs(path: str) -> None:
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)


def ensure_local_model(dst_path: str, url: str | None) -> bool:
    """Si `dst_path` no existe y se entrega `url`, descarga el archivo.

    Devuelve True si el archivo existe tras la operación (descargado o ya estaba).
    Lanza excepción si la descarga falla para que el caller pueda manejarla.
    """
    if not dst_path:
        return False
    if os.path.exists(dst_path):
        return True
    if not url:
        return False
    _makedirs(dst_path)
    logger.info("Descargando modelo desde %s -> %s", url, dst_path)
    urllib.request.urlretrieve(url, dst_path)
    ok = os.path.exists(dst_path) and os.path.getsize(dst_path) > 0
    logger.info("Descarga %s: %s", "OK" if ok else "FALLÓ", dst_path)
    return ok


def resolve_model_path(cfg_models: dict) -> str:
    """Ruta de pesos del detector: config > env YOLO_MODEL_PATH > default.

    Si falta en disco y hay URL (config o env YOLO_MODEL_URL) se descarga.
    Sin archivo ni URL lanza FileNotFoundError.
    """
    path = cfg_models.get("yolo_path") or os.environ.get("YOLO_MODEL_PATH") or "models/yolo/yolo11n.pt"
    url = cfg_models.get("yolo_url") or os.environ.get("YOLO_MODEL_URL")
    if not ensure_local_model(path, url):
        raise FileNotFoundError(
            f"No se encontró el modelo del detector: {path}.\n"
            "Ejecuta scripts/download_models.py o configura YOLO_MODEL_URL."
        )
    return path
