from typing import Iterable, Optional, Tuple

import cv2

from config import RenderState
from face_annotations import EYE_MARKER_INDICES
from geometry import bounding_box
from landmark_types import FaceSnapshot, PoseSnapshot

MESH_COLOR = (219, 238, 50)  # BGR for #32EEDB
SKELETON_COLOR = (0, 255, 0)
KEYPOINT_COLOR = (0, 255, 255)
BOX_COLOR = (255, 0, 0)

# Keypoint pairs forming the upper and lower body skeleton.
SKELETON_PAIRS = [
    ("left_hip", "left_shoulder"),
    ("left_elbow", "left_shoulder"),
    ("left_elbow", "left_wrist"),
    ("left_hip", "left_knee"),
    ("left_knee", "left_ankle"),
    ("right_hip", "right_shoulder"),
    ("right_elbow", "right_shoulder"),
    ("right_elbow", "right_wrist"),
    ("right_hip", "right_knee"),
    ("right_knee", "right_ankle"),
    ("left_shoulder", "right_shoulder"),
    ("left_hip", "right_hip"),
]


def _to_pixel(x: float, y: float) -> Tuple[int, int]:
    return int(round(x)), int(round(y))


def draw_face(
    frame,
    face: FaceSnapshot,
    state: RenderState,
    triangulation: Optional[Iterable[Tuple[int, int]]] = None,
) -> None:
    mesh = face.mesh
    count = len(mesh)
    if state.triangulate_mesh and triangulation:
        for a, b in triangulation:
            if a >= count or b >= count:
                continue
            cv2.line(frame, _to_pixel(mesh[a][0], mesh[a][1]), _to_pixel(mesh[b][0], mesh[b][1]), MESH_COLOR, 1)
    elif state.show_points:
        for point in mesh:
            cv2.circle(frame, _to_pixel(point[0], point[1]), 1, MESH_COLOR, -1)

    if state.show_eye_markers:
        for idx in EYE_MARKER_INDICES:
            if idx < count:
                cv2.circle(frame, _to_pixel(mesh[idx][0], mesh[idx][1]), 2, MESH_COLOR, -1)


def draw_pose(frame, pose: PoseSnapshot, state: RenderState, min_part_confidence: float = 0.1) -> None:
    kps = pose.keypoints

    if state.show_skeleton:
        for name_a, name_b in SKELETON_PAIRS:
            a = kps.get(name_a)
            b = kps.get(name_b)
            if a is None or b is None:
                continue
            if a.score < min_part_confidence or b.score < min_part_confidence:
                continue
            cv2.line(frame, _to_pixel(a.x, a.y), _to_pixel(b.x, b.y), SKELETON_COLOR, 2)

    if state.show_points:
        for kp in kps.values():
            if kp.score < min_part_confidence:
                continue
            cv2.circle(frame, _to_pixel(kp.x, kp.y), 3, KEYPOINT_COLOR, -1)

    if state.show_bounding_box:
        box = bounding_box(kps.values(), min_part_confidence)
        if box is not None:
            min_x, min_y, max_x, max_y = box
            cv2.rectangle(frame, _to_pixel(min_x, min_y), _to_pixel(max_x, max_y), BOX_COLOR, 1)
