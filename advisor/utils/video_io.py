# advisor/utils/video_io.py
# Fuente de frames (archivo o cámara) y escritor de video anotado con
# fallbacks de códecs. En Windows, H.264 (avc1) puede requerir la DLL de OpenH264.
import asyncio
import logging
import os
import platform

import cv2

logger = logging.getLogger(__name__)

# (fourcc, contenedor) en orden de preferencia
WRITER_CODECS = [
    ("avc1", ".mp4"),   # HTML5-friendly, requiere OpenH264 en Windows
    ("mp4v", ".mp4"),
    ("VP80", ".webm"),
    ("MJPG", ".avi"),
    ("XVID", ".avi"),
]


class VideoSource:
    """
    Frames BGR desde un archivo o un índice de cámara.

    `read()` es async: la lectura (que puede esperar a la cámara) corre en un
    hilo y el loop queda libre. Devuelve None al terminar el stream.
    """

    def __init__(self, source, width=640, height=480):
        self.source = source
        self.cap = cv2.VideoCapture(source)
        if not self.cap.isOpened():
            raise RuntimeError(f"No se pudo abrir la fuente de video: {source}")
        if isinstance(source, int):
            self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, width)
            self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
        self.width = int(self.cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        self.height = int(self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        self.fps = self.cap.get(cv2.CAP_PROP_FPS) or 25.0  # fallback si FPS=0

    def read_blocking(self):
        ok, frame = self.cap.read()
        return frame if ok else None

    async def read(self):
        return await asyncio.to_thread(self.read_blocking)

    def release(self):
        self.cap.release()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.release()


def open_video_reader(path):
    cap = cv2.VideoCapture(path)
    if not cap.isOpened():
        raise RuntimeError(f"No se pudo abrir el video: {path}")
    w = int(cap.get(cv2.CAP_PROP_FRAME_WIDTH))
    h = int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
    fps = cap.get(cv2.CAP_PROP_FPS) or 25.0
    return cap, w, h, fps


def _try_writer(out_path, fps, size, fourcc_str, container_ext):
    """
    Intenta construir un VideoWriter con el FOURCC indicado y devuelve
    (writer, out_path_final). Si falla, `writer.isOpened()` será False.
    La extensión de out_path se fuerza a la del contenedor.
    """
    base, _ = os.path.splitext(out_path)
    out = f"{base}{container_ext}"
    fourcc = cv2.VideoWriter_fourcc(*fourcc_str)
    writer = cv2.VideoWriter(out, fourcc, fps, size)

    if writer.isOpened():
        logger.info("Writer OK -> fourcc=%s container=%s path=%s", fourcc_str, container_ext, out)
    else:
        logger.info("Writer FAIL -> fourcc=%s container=%s path=%s", fourcc_str, container_ext, out)
        if platform.system() == 'Windows' and fourcc_str == 'avc1':
            logger.warning("H.264 en Windows requiere la DLL de OpenH264 en el PATH.")
    return writer, out


def open_video_writer(out_path, fps, size):
    """
    Abre un VideoWriter probando los códecs de WRITER_CODECS en orden.
    Devuelve (writer, out_path_final); la extensión final depende del códec.
    """
    out_dir = os.path.dirname(out_path)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    for fourcc_str, ext in WRITER_CODECS:
        writer, final_path = _try_writer(out_path, fps, size, fourcc_str, ext)
        if writer.isOpened():
            return writer, final_path
        writer.release()

    tried = "/".join(c for c, _ in WRITER_CODECS)
    raise RuntimeError(f"No se pudo abrir un VideoWriter (probado: {tried}).")


def release_safely(cap=None, writer=None):
    try:
        if cap is not None: cap.release()
    finally:
        if writer is not None: writer.release()
