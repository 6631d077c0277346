from typing import Dict, Optional, Tuple

import numpy as np

from face_annotations import MESH_POINT_COUNT, build_annotations
from landmark_types import POSE_KEYPOINT_NAMES, FaceSnapshot, FrameDetections, Keypoint, PoseSnapshot

IMAGE_SIZE = (600, 500)

# Matches none of the pose activity rules.
NORMAL_POSE: Dict[str, Tuple[float, float]] = {
    "nose": (300, 200),
    "left_eye": (280, 200),
    "right_eye": (320, 200),
    "left_ear": (250, 200),
    "right_ear": (350, 200),
    "left_shoulder": (200, 300),
    "right_shoulder": (450, 300),
    "left_elbow": (150, 400),
    "right_elbow": (450, 400),
    "left_wrist": (60, 450),
    "right_wrist": (550, 450),
    "left_hip": (220, 600),
    "right_hip": (380, 600),
    "left_knee": (220, 700),
    "right_knee": (380, 700),
    "left_ankle": (220, 800),
    "right_ankle": (380, 800),
}


def make_pose(scores: Optional[Dict[str, float]] = None, **overrides) -> PoseSnapshot:
    scores = scores or {}
    positions = dict(NORMAL_POSE)
    positions.update(overrides)
    keypoints = {
        name: Keypoint(name, float(positions[name][0]), float(positions[name][1]), scores.get(name, 0.9))
        for name in POSE_KEYPOINT_NAMES
    }
    return PoseSnapshot(timestamp=0.0, image_size=IMAGE_SIZE, keypoints=keypoints, score=0.9)


# Frontal face in pixels of a 500x500 frame: cheek edges 140 apart, forehead
# to chin 185 tall, every other point at the centre.
FRONTAL_FACE: Dict[int, Tuple[float, float, float]] = {
    10: (250.0, 160.0, -5.0),
    152: (250.0, 345.0, -5.0),
    234: (180.0, 250.0, 0.0),
    454: (320.0, 250.0, 0.0),
}


def make_mesh(points: Optional[Dict[int, Tuple[float, float, float]]] = None) -> np.ndarray:
    mesh = np.full((MESH_POINT_COUNT, 3), (250.0, 250.0, 0.0), dtype=np.float64)
    for idx, value in FRONTAL_FACE.items():
        mesh[idx] = value
    for idx, value in (points or {}).items():
        mesh[idx] = value
    return mesh


def make_face(points: Optional[Dict[int, Tuple[float, float, float]]] = None, annotations=None) -> FaceSnapshot:
    mesh = make_mesh(points)
    if annotations is None:
        annotations = build_annotations(mesh)
    return FaceSnapshot(timestamp=0.0, image_size=(500, 500), mesh=mesh, annotations=annotations)


def detections(*subjects, timestamp: float = 0.0, image_size=IMAGE_SIZE) -> FrameDetections:
    return FrameDetections(timestamp, image_size, tuple(subjects))


class FakeSource:
    """Replays a list of FrameDetections, repeating the last one."""

    def __init__(self, frames, triangulation=None):
        self.frames = list(frames)
        self.calls = 0
        self.closed = False
        if triangulation is not None:
            self.triangulation = triangulation

    def process(self, frame, timestamp):
        idx = min(self.calls, len(self.frames) - 1)
        self.calls += 1
        result = self.frames[idx]
        if isinstance(result, Exception):
            raise result
        return result

    def close(self):
        self.closed = True
