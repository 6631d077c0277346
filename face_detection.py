import logging
from typing import FrozenSet, List, Tuple

import cv2
import mediapipe as mp
import numpy as np

from face_annotations import build_annotations
from landmark_types import FaceSnapshot, FrameDetections

logger = logging.getLogger(__name__)


class FaceMeshDetector:
    def __init__(
        self,
        max_faces: int = 1,
        min_detection_confidence: float = 0.5,
        min_tracking_confidence: float = 0.5,
    ):
        self.max_faces = max_faces
        self._mp_face_mesh = mp.solutions.face_mesh
        # refine_landmarks stays off so the mesh keeps its 468 points.
        self._face_mesh = self._mp_face_mesh.FaceMesh(
            static_image_mode=False,
            max_num_faces=max_faces,
            refine_landmarks=False,
            min_detection_confidence=min_detection_confidence,
            min_tracking_confidence=min_tracking_confidence,
        )

    @property
    def triangulation(self) -> FrozenSet[Tuple[int, int]]:
        return self._mp_face_mesh.FACEMESH_TESSELATION

    def process(self, frame_bgr, timestamp: float) -> FrameDetections:
        height, width = frame_bgr.shape[:2]
        frame_rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)
        results = self._face_mesh.process(frame_rgb)

        if not results.multi_face_landmarks:
            return FrameDetections(timestamp, (width, height))

        faces: List[FaceSnapshot] = []
        for face_landmarks in results.multi_face_landmarks:
            # z shares the x scale in MediaPipe's normalized output.
            mesh = np.array(
                [(lm.x * width, lm.y * height, lm.z * width) for lm in face_landmarks.landmark],
                dtype=np.float64,
            )
            faces.append(
                FaceSnapshot(
                    timestamp=timestamp,
                    image_size=(width, height),
                    mesh=mesh,
                    annotations=build_annotations(mesh),
                )
            )
        return FrameDetections(timestamp, (width, height), tuple(faces))

    def close(self) -> None:
        self._face_mesh.close()
