import logging
import os

from config import MODEL_PATH
from errors import ExtractorUnavailableError, InvalidInputError
from models import Landmark, PoseFrame

logger = logging.getLogger(__name__)


def extract_poses(video_path: str, model_path: str = MODEL_PATH) -> tuple[list[PoseFrame], float]:
    """Extract pose landmarks from every frame of a video file.

    Landmarks are kept as MediaPipe reports them; normalization happens at
    comparison time. Frames without a detected person are skipped.

    Returns (list of PoseFrame, fps).
    """
    try:
        import cv2
        import mediapipe as mp
    except ImportError as e:
        raise ExtractorUnavailableError(f"Pose extraction needs the extract extra: {e}") from e
    if not os.path.exists(model_path):
        raise ExtractorUnavailableError(f"Pose landmarker model not found: {model_path}")

    PoseLandmarker = mp.tasks.vision.PoseLandmarker
    PoseLandmarkerOptions = mp.tasks.vision.PoseLandmarkerOptions
    RunningMode = mp.tasks.vision.RunningMode
    BaseOptions = mp.tasks.BaseOptions

    cap = cv2.VideoCapture(video_path)
    if not cap.isOpened():
        raise InvalidInputError(f"Cannot open video: {video_path}")

    fps = cap.get(cv2.CAP_PROP_FPS) or 30.0
    frame_poses: list[PoseFrame] = []

    options = PoseLandmarkerOptions(
        base_options=BaseOptions(model_asset_path=model_path),
        running_mode=RunningMode.VIDEO,
        num_poses=1,
        min_pose_detection_confidence=0.5,
        min_tracking_confidence=0.5,
    )

    try:
        with PoseLandmarker.create_from_options(options) as landmarker:
            frame_num = 0
            while True:
                ret, frame = cap.read()
                if not ret:
                    break

                rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
                mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb)
                timestamp_ms = frame_num * 1000.0 / fps

                result = landmarker.detect_for_video(mp_image, int(timestamp_ms))

                if result.pose_landmarks:
                    frame_poses.append(
                        PoseFrame(
                            timestamp=timestamp_ms,
                            landmarks=_to_landmarks(result.pose_landmarks[0]),
                        )
                    )

                frame_num += 1
    finally:
        cap.release()

    logger.info("Extracted %d/%d frames with a pose from %s", len(frame_poses), frame_num, video_path)
    if not frame_poses:
        raise InvalidInputError("No person detected in video")
    return frame_poses, fps


def _to_landmarks(raw_landmarks) -> list[Landmark]:
    # MediaPipe Tasks API: NormalizedLandmark with x, y, z, visibility, presence
    return [
        Landmark(
            x=lm.x,
            y=lm.y,
            z=lm.z,
            visibility=getattr(lm, "visibility", None),
            presence=getattr(lm, "presence", None),
        )
        for lm in raw_landmarks
    ]
