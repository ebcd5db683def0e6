import logging
import os
import tempfile
import uuid
from typing import Optional

from fastapi import FastAPI, File, HTTPException, UploadFile, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from comparator import compare_videos
from config import CORS_ORIGINS, LOG_LEVEL
from errors import (
    ComputeBudgetExceededError,
    ExtractorUnavailableError,
    InvalidInputError,
    VideoNotFoundError,
)
from models import (
    Client,
    ComparisonConfig,
    CompareVideosRequest,
    PoseFrame,
    ScoringResult,
    Video,
    VideoMetadata,
)
from pose_extractor import extract_poses
from presets import COMPARISON_PRESETS
from store import VideoStore

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Video Parser API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# In-memory video store
store = VideoStore()


@app.get("/api/health")
def health():
    return {"status": "ok"}


@app.get("/pose/clients", response_model=list[Client])
def list_clients():
    return store.list_clients()


@app.get("/pose/videos", response_model=list[VideoMetadata])
def list_videos():
    return store.list_videos()


@app.get("/pose/latest/{client_id}", response_model=PoseFrame)
def get_latest_pose(client_id: str):
    frame = store.latest_pose(client_id)
    if frame is None:
        raise HTTPException(status_code=404, detail="No pose data available for this client")
    return frame


@app.get("/pose/video/{video_id}", response_model=Video)
def get_video(video_id: str):
    try:
        return store.get_video(video_id)
    except VideoNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@app.get("/pose/presets", response_model=dict[str, ComparisonConfig])
def list_presets():
    return {preset.value: cfg for preset, cfg in COMPARISON_PRESETS.items()}


@app.post("/pose/compare", response_model=ScoringResult)
def compare(request: CompareVideosRequest):
    try:
        return compare_videos(store, request)
    except VideoNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ComputeBudgetExceededError as e:
        raise HTTPException(status_code=413, detail=str(e))


@app.post("/pose/videos/upload", response_model=VideoMetadata)
def upload_video(video: UploadFile = File(...)):
    # Save upload to a temp file for OpenCV
    tmp_dir = tempfile.mkdtemp()
    path = os.path.join(tmp_dir, f"upload_{os.path.basename(video.filename or 'video')}")
    try:
        with open(path, "wb") as f:
            f.write(video.file.read())
        frames, fps = extract_poses(path)
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (ExtractorUnavailableError, RuntimeError) as e:
        logger.error("Pose extraction unavailable: %s", e)
        raise HTTPException(status_code=503, detail=f"Pose extraction unavailable: {e}")
    finally:
        try:
            os.remove(path)
            os.rmdir(tmp_dir)
        except OSError:
            logger.warning("Could not clean up %s", tmp_dir)

    stored = store.add_video(frames)
    logger.info("Stored uploaded video %s (%d frames at %.1f fps)", stored.id, len(frames), fps)
    return VideoMetadata(
        id=stored.id,
        start_time=stored.start_time,
        end_time=stored.end_time,
        frame_count=len(stored.frames),
        duration=stored.duration,
    )


@app.websocket("/pose/stream")
async def stream(websocket: WebSocket, clientId: Optional[str] = None):
    client_id = clientId or str(uuid.uuid4())
    await websocket.accept()
    video = store.connect(client_id)
    await websocket.send_json({"type": "connected", "clientId": client_id, "videoId": video.id})
    try:
        while True:
            message = await websocket.receive_text()
            try:
                store.append_frame(client_id, PoseFrame.model_validate_json(message), video)
            except (ValidationError, InvalidInputError) as e:
                logger.debug("Rejected frame from %s: %s", client_id, e)
                await websocket.send_json({"type": "error", "message": str(e)})
    except WebSocketDisconnect:
        pass
    finally:
        store.disconnect(client_id, video)
