import logging
import math
from typing import Dict, Iterable, Optional, Tuple

import numpy as np

from landmark_types import FaceSnapshot, Keypoint, PoseSnapshot, Snapshot

logger = logging.getLogger(__name__)

_AXES = {"x": 0, "y": 1, "z": 2}


def _to_number(value) -> Optional[float]:
    # bool is an int subclass but never a coordinate.
    if isinstance(value, (bool, np.bool_)):
        return None
    if not isinstance(value, (int, float, np.integer, np.floating)):
        return None
    value = float(value)
    if not math.isfinite(value):
        return None
    return value


def _point_axis(points, index: int, axis: str) -> Optional[float]:
    if axis not in _AXES:
        return None
    points = np.asarray(points)
    if points.ndim != 2 or not 0 <= index < points.shape[0]:
        return None
    column = _AXES[axis]
    if column >= points.shape[1]:
        return None
    value = points[index, column]
    if isinstance(value, np.generic):
        value = value.item()
    return _to_number(value)


def resolve_coordinate(snapshot: Snapshot, path: str, min_score: float = 0.0) -> Optional[float]:
    """Look up one coordinate by dotted path.

    Supported paths:
      mesh.<index>.<x|y|z>
      local_mesh.<index>.<x|y|z>   (face-crop space, see build_local_mesh)
      annotations.<group>.<point>.<x|y|z>
      keypoints.<name>.<x|y>

    Returns None for anything missing, non-numeric, or (for keypoints) scored
    below ``min_score``.
    """
    parts = path.split(".")
    try:
        if parts[0] == "mesh" and len(parts) == 3 and isinstance(snapshot, FaceSnapshot):
            return _point_axis(snapshot.mesh, int(parts[1]), parts[2])
        if parts[0] == "local_mesh" and len(parts) == 3 and isinstance(snapshot, FaceSnapshot):
            return _point_axis(snapshot.local_mesh, int(parts[1]), parts[2])
        if parts[0] == "annotations" and len(parts) == 4 and isinstance(snapshot, FaceSnapshot):
            group = snapshot.annotations.get(parts[1])
            if group is None:
                return None
            return _point_axis(group, int(parts[2]), parts[3])
        if parts[0] == "keypoints" and len(parts) == 3 and isinstance(snapshot, PoseSnapshot):
            keypoint = snapshot.keypoints.get(parts[1])
            if keypoint is None or keypoint.score < min_score:
                return None
            if parts[2] == "x":
                return _to_number(keypoint.x)
            if parts[2] == "y":
                return _to_number(keypoint.y)
            return None
    except ValueError:
        logger.debug("Malformed coordinate path %r", path)
        return None
    return None


def bounding_box(keypoints: Iterable[Keypoint], min_score: float = 0.0) -> Optional[Tuple[float, float, float, float]]:
    xs = []
    ys = []
    for kp in keypoints:
        if kp.score < min_score:
            continue
        xs.append(kp.x)
        ys.append(kp.y)
    if not xs:
        return None
    return min(xs), min(ys), max(xs), max(ys)


def mirror_x(x: float, width: int) -> float:
    return float(width) - x


def confident_keypoints(pose: PoseSnapshot, min_score: float) -> Dict[str, Keypoint]:
    return {name: kp for name, kp in pose.keypoints.items() if kp.score >= min_score}
