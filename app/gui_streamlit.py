# app/gui_streamlit.py
# -----------------------------------------------------------------------------
# GUI con Streamlit para revisar el asistente de conducción sobre un video grabado
#
# - SOLO procesa al hacer clic en "Analizar video"; el resto de interacciones
#   no reprocesan.
# - Rutas ABSOLUTAS ancladas al root del repo.
# - Escribe el video anotado en data/output/annotated_videos/resultado.mp4.
# - Muestra los avisos emitidos (cambios de acción) en una tabla en español.
# -----------------------------------------------------------------------------

from __future__ import annotations

import hashlib
import os
import tempfile
from pathlib import Path
from typing import Tuple

import pandas as pd
import streamlit as st

from advisor.pipeline import FramePipeline


ROOT = Path(__file__).resolve().parents[1]

def P(*parts: str) -> str:
    """Une partes de ruta relativas al ROOT del repo. Ej: P("data", "output")."""
    return str(ROOT.joinpath(*parts))


def _init_session() -> None:
    defaults = {
        "uploaded_video_hash": None,     # hash del contenido (evita reprocesos accidentales)
        "processed": False,
        "out_video_path": None,
        "notifications_df": pd.DataFrame(),
        "stats": {},
        "params": {"imgsz": 640, "conf": 0.35},
    }
    for k, v in defaults.items():
        if k not in st.session_state:
            st.session_state[k] = v


def _save_uploaded_video(uploaded_file) -> Tuple[str, str]:
    """Guarda el archivo subido a un temporal y devuelve (path_abs, md5)."""
    data = uploaded_file.read()
    md5 = hashlib.md5(data).hexdigest()
    with tempfile.NamedTemporaryFile(delete=False, suffix=".mp4") as tmp:
        tmp.write(data)
        return tmp.name, md5


def _build_df_view_es(df: pd.DataFrame) -> pd.DataFrame:
    """Tabla visible: acciones legibles y encabezados en español."""
    if df.empty:
        return df
    map_acciones = {"STOP": "Detenerse", "PROCEED_SLOWLY": "Avanzar despacio"}
    df = df.copy()
    df["accion"] = df["accion"].map(lambda x: map_acciones.get(str(x), str(x)))
    df.rename(columns={
        "tiempo_seg": "Tiempo (seg)",
        "frame": "Frame",
        "accion": "Acción",
        "texto": "Aviso",
        "idioma": "Idioma",
        "objetos": "Objetos detectados",
        "distancia": "Distancia estimada",
    }, inplace=True)
    return df


st.set_page_config(page_title="Driving Advisory", layout="wide")
st.title("Asistente de Conducción: Detenerse / Avanzar despacio")

_init_session()

col1, col2 = st.columns(2)
imgsz = col1.slider(
    "Tamaño de imagen YOLO (imgsz)", 416, 960, st.session_state["params"]["imgsz"], 32
)
conf = col2.slider(
    "Confianza mínima detección", 0.1, 0.9, st.session_state["params"]["conf"], 0.05
)

video_file = st.file_uploader("Sube un video (MP4/MOV/AVI)", type=["mp4", "mov", "avi"])
run_clicked = st.button("Analizar video", type="primary", use_container_width=True)
scene_cfg = P("app", "config", "scenes", "recorded_video.yaml")

if run_clicked:
    if not video_file:
        st.warning("Primero sube un video para analizar.")
    else:
        in_path, md5 = _save_uploaded_video(video_file)
        st.session_state["uploaded_video_hash"] = md5
        st.session_state["params"]["imgsz"] = imgsz
        st.session_state["params"]["conf"] = conf

        out_dir = P("data", "output", "annotated_videos")
        os.makedirs(out_dir, exist_ok=True)
        out_path = os.path.join(out_dir, "resultado.mp4")

        pipe = FramePipeline.from_config(scene_cfg, yolo_imgsz=imgsz, yolo_conf=conf, speech=False)
        with st.spinner("Procesando video..."):
            res = pipe.process_video(in_path, out_path)

        st.session_state["processed"] = True
        st.session_state["out_video_path"] = res.get("out_path_final", out_path)
        st.session_state["notifications_df"] = res["notifications_df"]
        st.session_state["stats"] = {
            "frames": res["frames"],
            "fps": res["processing_fps"],
        }

if st.session_state["processed"]:
    out_path = st.session_state["out_video_path"]
    if out_path and os.path.exists(out_path) and os.path.getsize(out_path) > 0:
        st.success("¡Análisis completado! Reproduciendo salida…")
        st.video(out_path)
    else:
        st.info("No se encontró el video anotado. Vuelve a ejecutar el análisis.")

    stats = st.session_state["stats"]
    m1, m2 = st.columns(2)
    m1.metric("Frames procesados", stats.get("frames", 0))
    m2.metric("FPS de procesamiento", f"{stats.get('fps', 0.0):.1f}")

    df = st.session_state["notifications_df"]
    st.subheader("Avisos emitidos")
    st.dataframe(_build_df_view_es(df), use_container_width=True)

    if not df.empty:
        st.download_button(
            "Descargar avisos.csv",
            data=df.to_csv(index=False).encode("utf-8"),
            file_name="avisos.csv",
            mime="text/csv",
            use_container_width=True,
        )
else:
    st.info("Sube un video y presiona **Analizar video** para iniciar el procesamiento.")
