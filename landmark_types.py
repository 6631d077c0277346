from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

import numpy as np

from face_annotations import build_local_mesh


def _read_only(points) -> np.ndarray:
    copy = np.array(points)
    copy.setflags(write=False)
    return copy


@dataclass(frozen=True)
class Keypoint:
    name: str
    x: float
    y: float
    score: float


@dataclass(frozen=True)
class PoseSnapshot:
    timestamp: float
    image_size: Tuple[int, int]
    keypoints: Dict[str, Keypoint]
    score: float


@dataclass(frozen=True)
class FaceSnapshot:
    timestamp: float
    image_size: Tuple[int, int]
    mesh: np.ndarray
    annotations: Dict[str, np.ndarray]
    # Mesh in face-crop space; derived from ``mesh`` when not given.
    local_mesh: Optional[np.ndarray] = None

    def __post_init__(self):
        # Read-only copies; the caller's arrays stay writable.
        mesh = _read_only(self.mesh)
        object.__setattr__(self, "mesh", mesh)
        object.__setattr__(self, "annotations", {name: _read_only(p) for name, p in self.annotations.items()})
        local = build_local_mesh(mesh) if self.local_mesh is None else self.local_mesh
        object.__setattr__(self, "local_mesh", _read_only(local))


Snapshot = Union[FaceSnapshot, PoseSnapshot]


@dataclass(frozen=True)
class FrameDetections:
    timestamp: float
    image_size: Tuple[int, int]
    subjects: Tuple[Snapshot, ...] = ()

    @property
    def found(self) -> bool:
        return len(self.subjects) > 0

    def first(self) -> Optional[Snapshot]:
        return self.subjects[0] if self.subjects else None


@dataclass
class ClassificationResult:
    label: str
    matched_rule: Optional[str] = None
    votes: Dict[str, int] = field(default_factory=dict)
    counter: int = 0


# 17-point COCO keypoint order used by the pose classifier.
POSE_KEYPOINT_NAMES: List[str] = [
    "nose",
    "left_eye",
    "right_eye",
    "left_ear",
    "right_ear",
    "left_shoulder",
    "right_shoulder",
    "left_elbow",
    "right_elbow",
    "left_wrist",
    "right_wrist",
    "left_hip",
    "right_hip",
    "left_knee",
    "right_knee",
    "left_ankle",
    "right_ankle",
]
