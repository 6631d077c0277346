import logging
from typing import Dict

import cv2
import mediapipe as mp

from geometry import mirror_x
from landmark_types import POSE_KEYPOINT_NAMES, FrameDetections, Keypoint, PoseSnapshot

logger = logging.getLogger(__name__)


class PoseDetector:
    """MediaPipe Pose reduced to the 17 COCO keypoints, in pixels.

    MediaPipe tracks a single person, so a frame yields zero or one subject.
    """

    def __init__(
        self,
        min_detection_confidence: float = 0.5,
        min_tracking_confidence: float = 0.5,
        min_pose_confidence: float = 0.15,
        flip_horizontal: bool = True,
    ):
        self.min_pose_confidence = min_pose_confidence
        self.flip_horizontal = flip_horizontal
        self._mp_pose = mp.solutions.pose
        self._pose = self._mp_pose.Pose(
            static_image_mode=False,
            model_complexity=1,
            smooth_landmarks=True,
            min_detection_confidence=min_detection_confidence,
            min_tracking_confidence=min_tracking_confidence,
        )
        landmark_names = {lm.name.lower(): lm for lm in self._mp_pose.PoseLandmark}
        self._landmark_index = {name: landmark_names[name] for name in POSE_KEYPOINT_NAMES}

    def process(self, frame_bgr, timestamp: float) -> FrameDetections:
        height, width = frame_bgr.shape[:2]
        frame_rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)
        results = self._pose.process(frame_rgb)

        if results.pose_landmarks is None:
            return FrameDetections(timestamp, (width, height))

        keypoints: Dict[str, Keypoint] = {}
        for name, idx in self._landmark_index.items():
            lm = results.pose_landmarks.landmark[idx]
            x = lm.x * width
            if self.flip_horizontal:
                x = mirror_x(x, width)
            keypoints[name] = Keypoint(name, x, lm.y * height, float(lm.visibility))

        score = sum(kp.score for kp in keypoints.values()) / len(keypoints)
        if score < self.min_pose_confidence:
            logger.debug("Pose score %.2f below %.2f, skipped", score, self.min_pose_confidence)
            return FrameDetections(timestamp, (width, height))

        pose = PoseSnapshot(timestamp=timestamp, image_size=(width, height), keypoints=keypoints, score=score)
        return FrameDetections(timestamp, (width, height), (pose,))

    def close(self) -> None:
        self._pose.close()
