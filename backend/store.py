import logging
import threading
import time
import uuid
from datetime import datetime, timezone
from typing import Optional

from aggregator import sequence_duration
from errors import InvalidInputError, VideoNotFoundError
from models import Client, PoseFrame, Video, VideoMetadata

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class VideoStore:
    """In-memory store of recorded videos and the clients streaming into them.

    Each connected client owns one open video whose id is the client id; it
    is sealed (endTime and duration set) when the client disconnects. A
    reconnect under the same client id seals the previous recording and
    replaces it. Uploaded videos get their own uuid.

    `connect` returns the recording itself, which doubles as the handle for
    that connection: `append_frame` and `disconnect` called with a stale
    handle leave the newer recording alone.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._videos: dict[str, Video] = {}
        self._clients: dict[str, Client] = {}
        self._open: dict[str, Video] = {}  # client_id -> recording in progress
        self._latest: dict[str, PoseFrame] = {}

    def connect(self, client_id: str) -> Video:
        with self._lock:
            previous = self._open.pop(client_id, None)
            if previous is not None:
                self._seal(previous)
                logger.info("Client %s reconnected, replacing its recording", client_id)
            video = Video(id=client_id, start_time=_now())
            self._videos[video.id] = video
            self._open[client_id] = video
            self._clients[client_id] = Client(client_id=client_id)
        logger.info("Client %s connected, recording video %s", client_id, video.id)
        return video

    def _current(self, client_id: str, handle: Optional[Video]) -> Optional[Video]:
        video = self._open.get(client_id)
        if handle is not None and video is not handle:
            return None
        return video

    def append_frame(self, client_id: str, frame: PoseFrame, handle: Optional[Video] = None) -> None:
        with self._lock:
            video = self._current(client_id, handle)
            if video is None:
                raise InvalidInputError(f"Client {client_id} has no open video")
            frames = video.frames
            if frames and frame.timestamp < frames[-1].timestamp:
                raise InvalidInputError(
                    f"Timestamp {frame.timestamp} is earlier than previous {frames[-1].timestamp}"
                )
            frames.append(frame)
            self._latest[client_id] = frame
            self._clients[client_id].last_seen_at = time.time() * 1000

    def disconnect(self, client_id: str, handle: Optional[Video] = None) -> Optional[Video]:
        """Seal the client's open recording; a stale handle is a no-op."""
        with self._lock:
            video = self._current(client_id, handle)
            if video is not None:
                del self._open[client_id]
                self._clients.pop(client_id, None)
                self._seal(video)
        if video is not None:
            logger.info(
                "Client %s disconnected, sealed video %s (%d frames)",
                client_id, video.id, len(video.frames),
            )
        return video

    def add_video(self, frames: list[PoseFrame]) -> Video:
        """Store a complete recording, e.g. one extracted from an uploaded file."""
        video = Video(id=str(uuid.uuid4()), start_time=_now(), frames=list(frames))
        with self._lock:
            self._videos[video.id] = video
            return self._seal(video)

    def _seal(self, video: Video) -> Video:
        video.end_time = _now()
        video.duration = sequence_duration(video.frames)
        return video

    def get_video(self, video_id: str) -> Video:
        with self._lock:
            video = self._videos.get(video_id)
            if video is None:
                raise VideoNotFoundError(video_id)
            return video.model_copy(update={"frames": list(video.frames)})

    def list_videos(self) -> list[VideoMetadata]:
        with self._lock:
            return [
                VideoMetadata(
                    id=v.id,
                    start_time=v.start_time,
                    end_time=v.end_time,
                    frame_count=len(v.frames),
                    duration=v.duration,
                )
                for v in self._videos.values()
            ]

    def list_clients(self) -> list[Client]:
        with self._lock:
            return [c.model_copy() for c in self._clients.values()]

    def latest_pose(self, client_id: str) -> Optional[PoseFrame]:
        with self._lock:
            return self._latest.get(client_id)
