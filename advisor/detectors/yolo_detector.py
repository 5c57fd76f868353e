import asyncio
import logging

from ultralytics import YOLO
import torch

from advisor.types import Detection

logger = logging.getLogger(__name__)


class YoloDetector:
    """Detector COCO (personas, animales, semáforos...) con YOLO Ultralytics.

    - Selecciona GPU automáticamente si está disponible (torch.cuda.is_available()).
    - Las cajas se devuelven en (x, y, w, h) y sin filtrar por score: el umbral
      de 0.5 lo aplica el intérprete.
    """
    def __init__(self, model_path="models/yolo/yolo11n.pt", imgsz=640, conf=0.35, device=None):
        self.model = YOLO(model_path)
        self.imgsz = imgsz
        self.conf = conf

        if device is None:
            device = 'cuda' if torch.cuda.is_available() else 'cpu'
        self.device = device

        if self.device == 'cuda':
            try:
                dev_name = torch.cuda.get_device_name(0)
            except RuntimeError:
                dev_name = 'CUDA'
            logger.info("Usando GPU: %s", dev_name)
        else:
            logger.info("Usando CPU para inferencia")

    def infer(self, frame):
        """Inferencia bloqueante sobre un frame BGR -> lista de Detection."""
        dev_arg = 0 if str(self.device).startswith('cuda') else 'cpu'
        res = self.model.predict(
            frame, imgsz=self.imgsz, conf=self.conf, device=dev_arg, stream=False, verbose=False
        )[0]
        dets = []
        if res.boxes is None:
            return dets
        names = getattr(res, 'names', None) or getattr(self.model, 'names', None) or {}
        for b, c, cls in zip(res.boxes.xyxy.cpu().numpy(),
                             res.boxes.conf.cpu().numpy(),
                             res.boxes.cls.cpu().numpy()):
            x1, y1, x2, y2 = (float(v) for v in b)
            label = names.get(int(cls), str(int(cls)))
            dets.append(Detection(label=label, bbox=(x1, y1, x2 - x1, y2 - y1), score=float(c)))
        return dets

    async def detect(self, frame):
        # El loop queda suspendido (no bloqueado) mientras corre el modelo
        return await asyncio.to_thread(self.infer, frame)
