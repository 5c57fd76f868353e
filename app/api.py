# app/api.py
# API mínima para analizar un video desde ruta (despliegue opcional)
from fastapi import FastAPI
from pydantic import BaseModel
from advisor.pipeline import FramePipeline

app = FastAPI(title="Driving Advisory API")

class ProcessRequest(BaseModel):
    input_path: str
    output_path: str
    scene_config: str = "app/config/scenes/recorded_video.yaml"

@app.post("/process")
def process(req: ProcessRequest):
    pipe = FramePipeline.from_config(req.scene_config, speech=False)
    res = pipe.process_video(req.input_path, req.output_path)
    df = res["notifications_df"]
    return {
        "ok": True,
        "frames": res["frames"],
        "notifications_count": len(df),
        "notifications": df.to_dict(orient="records"),
        "out_path_final": res["out_path_final"],
    }
