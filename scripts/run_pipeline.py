#!/usr/bin/env python
"""Ejecución por CLI del asistente: video grabado o cámara en vivo.

Uso:
  python scripts/run_pipeline.py --input data/samples/video.mp4 \
      --output data/output/annotated_videos/resultado.mp4

  python scripts/run_pipeline.py --camera 0 --scene app/config/scenes/webcam.yaml

Env vars opcionales (pesos del detector):
  YOLO_MODEL_URL, YOLO_MODEL_PATH
"""

import argparse
import asyncio
import logging
import os

import cv2

from advisor.pipeline import FramePipeline
from advisor.utils.drawing import draw_report
from advisor.utils.video_io import VideoSource


def _show(window, show_bands):
    def presenter(frame, report):
        cv2.imshow(window, draw_report(frame, report, show_bands=show_bands))
        cv2.waitKey(1)
    return presenter


def run_live(pipe, camera_index, max_frames=None):
    ccfg = pipe.cfg.get("camera", {}) or {}
    with VideoSource(camera_index, ccfg.get("width", 640), ccfg.get("height", 480)) as source:
        try:
            return asyncio.run(pipe.run(source, _show("Asistente", pipe.debug_bands), max_frames))
        except KeyboardInterrupt:
            return None
        finally:
            cv2.destroyAllWindows()
            close = getattr(pipe.sink, "close", None)
            if close is not None:
                close()


def default_output(cfg):
    out_dir = (cfg.get("video", {}) or {}).get("output_dir", "data/output")
    return os.path.join(out_dir, "annotated_videos", "resultado.mp4")


def main():
    p = argparse.ArgumentParser()
    src = p.add_mutually_exclusive_group()
    src.add_argument('--input', help='Ruta del video de entrada')
    src.add_argument('--camera', type=int,
                     help='Índice de cámara para modo en vivo (default: camera.index de la escena)')
    p.add_argument('--output', default=None,
                   help='Ruta del video anotado (sólo con --input; default: <video.output_dir>/annotated_videos/resultado.mp4)')
    p.add_argument('--scene', default='app/config/default.yaml')
    p.add_argument('--no-speech', action='store_true', help='Avisos sólo en el log')
    p.add_argument('--max-frames', type=int, default=None)
    p.add_argument('--debug', action='store_true')
    args = p.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s %(message)s",
    )

    # Sin --input, modo en vivo sobre la cámara de la escena
    speech = False if args.no_speech else None
    pipe = FramePipeline.from_config(args.scene, speech=speech)
    if args.input is None:
        camera = args.camera
        if camera is None:
            camera = int((pipe.cfg.get("camera", {}) or {}).get("index", 0))
        n = run_live(pipe, camera, args.max_frames)
        print('Frames procesados:', n)
        return

    res = pipe.process_video(args.input, args.output or default_output(pipe.cfg))
    df = res.get('notifications_df')
    print('OK. Salida:', res.get('out_path_final'))
    print('Frames:', res.get('frames'), f"({res.get('processing_fps', 0.0):.1f} fps)")
    print('Avisos emitidos:', 0 if df is None else len(df))


if __name__ == '__main__':
    main()
