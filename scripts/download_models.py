#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Descarga los pesos del detector genérico (COCO) que usa el asistente.
- models/yolo/yolo11n.pt -> Ultralytics YOLO11 nano. Incluye las clases
  person, cat, dog, horse, sheep, cow y traffic light.

Fuentes:
- YOLO11 docs y pesos (Ultralytics): https://docs.ultralytics.com/models/yolo11/
- Ultralytics assets releases: https://github.com/ultralytics/assets/releases
"""

import hashlib
import logging
import sys
import urllib.request
from pathlib import Path

logger = logging.getLogger("download_models")

PROJECT_ROOT = Path(__file__).resolve().parents[1]
YOLO_DIR = PROJECT_ROOT / "models" / "yolo"

FILES = [
    {
        "name": "yolo11n.pt",
        "dest": YOLO_DIR / "yolo11n.pt",
        "sha256": "0ebbc80d4a7680d14987a577cd21342b65ecfd94632bd9a8da63ae6417644ee1",
        "urls": [
            "https://huggingface.co/Ultralytics/YOLO11/resolve/main/yolo11n.pt?download=true",
            "https://github.com/ultralytics/assets/releases/download/v8.3.0/yolo11n.pt",
        ],
    },
]

CHUNK = 1 << 20  # 1 MiB


def sha256sum(path: Path) -> str:
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(CHUNK), b""):
            h.update(chunk)
    return h.hexdigest()


def download_with_resume(url: str, dest: Path):
    """Descarga a <dest>.part (reanudando si existe) y renombra al terminar."""
    tmp = dest.with_suffix(f"{dest.suffix}.part")
    existing = tmp.stat().st_size if tmp.exists() else 0

    req = urllib.request.Request(url)
    if existing > 0:
        req.add_header("Range", f"bytes={existing}-")

    try:
        with urllib.request.urlopen(req, timeout=90) as resp:
            mode = "ab" if existing > 0 and resp.getcode() == 206 else "wb"
            with open(tmp, mode) as out:
                while chunk := resp.read(CHUNK):
                    out.write(chunk)
    except OSError as e:
        return False, f"{e}"

    tmp.rename(dest)
    return True, None


def ensure_file(file_def) -> bool:
    dest = file_def["dest"]
    dest.parent.mkdir(parents=True, exist_ok=True)
    if dest.exists():
        if sha256sum(dest) == file_def["sha256"]:
            logger.info("%s ya existe (SHA256 OK)", dest)
            return True
        logger.warning("%s hash inválido; re-descargando...", dest)
        dest.unlink(missing_ok=True)

    for i, url in enumerate(file_def["urls"], 1):
        logger.info("Descargando %s (intento %d/%d): %s", file_def["name"], i, len(file_def["urls"]), url)
        ok, err = download_with_resume(url, dest)
        if not ok:
            logger.warning("Error: %s", err)
            continue

        calc = sha256sum(dest)
        if calc != file_def["sha256"]:
            logger.warning("Hash incorrecto (esperado %s, obtenido %s). Probando otro mirror…",
                           file_def["sha256"], calc)
            dest.unlink(missing_ok=True)
            continue

        logger.info("Guardado en %s", dest)
        return True

    logger.error("No se pudo descargar %s", file_def["name"])
    return False


def main():
    logging.basicConfig(level=logging.INFO, format="[%(name)s] %(levelname)s %(message)s")
    if not all([ensure_file(f) for f in FILES]):
        sys.exit(1)


if __name__ == "__main__":
    main()
