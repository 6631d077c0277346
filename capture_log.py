import json
import logging
from typing import Dict, List, Optional, Sequence

from geometry import resolve_coordinate
from landmark_types import FrameDetections, PoseSnapshot, Snapshot

logger = logging.getLogger(__name__)

NOT_ON_SCREEN = "Not on screen"


def serialize_snapshot(snapshot: Snapshot, paths: Sequence[str] = ()) -> str:
    if isinstance(snapshot, PoseSnapshot):
        payload = [
            {
                "part": kp.name,
                "score": round(kp.score, 4),
                "position": {"x": round(kp.x, 2), "y": round(kp.y, 2)},
            }
            for kp in snapshot.keypoints.values()
        ]
        return json.dumps(payload)

    values: Dict[str, Optional[float]] = {}
    for path in paths:
        value = resolve_coordinate(snapshot, path)
        values[path] = None if value is None else round(value, 2)
    return json.dumps(values)


class CaptureLog:
    """Append-only list of captured landmark values, newest last."""

    def __init__(self):
        self._entries: List[str] = []

    def capture(self, detections: Optional[FrameDetections], paths: Sequence[str] = ()) -> str:
        snapshot = detections.first() if detections is not None else None
        if snapshot is None:
            entry = NOT_ON_SCREEN
        else:
            entry = serialize_snapshot(snapshot, paths)
        self._entries.append(entry)
        logger.info("Captured entry %d", len(self._entries))
        return entry

    def clear(self) -> None:
        logger.info("Cleared %d captured entries", len(self._entries))
        self._entries.clear()

    def entries(self) -> List[str]:
        return list(self._entries)

    def latest(self) -> Optional[str]:
        return self._entries[-1] if self._entries else None

    def __len__(self) -> int:
        return len(self._entries)
