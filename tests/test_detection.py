import enum
import unittest
from types import SimpleNamespace
from unittest import mock

import numpy as np

from landmark_types import POSE_KEYPOINT_NAMES

# Stand-in for mediapipe's landmark enum, restricted to the names read here.
FakePoseLandmark = enum.IntEnum("PoseLandmark", {n.upper(): i for i, n in enumerate(POSE_KEYPOINT_NAMES)})


def landmark(x, y, z=0.0, visibility=1.0):
    return SimpleNamespace(x=x, y=y, z=z, visibility=visibility)


class TestFaceMeshDetector(unittest.TestCase):
    def setUp(self):
        patcher = mock.patch("face_detection.mp")
        self.mp = patcher.start()
        self.addCleanup(patcher.stop)
        from face_detection import FaceMeshDetector

        self.detector = FaceMeshDetector()
        self.model = self.mp.solutions.face_mesh.FaceMesh.return_value
        self.frame = np.zeros((500, 600, 3), dtype=np.uint8)

    def test_no_face(self):
        self.model.process.return_value = SimpleNamespace(multi_face_landmarks=None)
        result = self.detector.process(self.frame, 1.0)
        self.assertFalse(result.found)
        self.assertEqual(result.image_size, (600, 500))

    def test_mesh_is_scaled_to_pixels(self):
        points = [landmark(0.5, 0.5, 0.1)] * 468
        self.model.process.return_value = SimpleNamespace(
            multi_face_landmarks=[SimpleNamespace(landmark=points)]
        )
        face = self.detector.process(self.frame, 2.0).first()
        np.testing.assert_allclose(face.mesh[0], [300.0, 250.0, 60.0])
        self.assertIn("noseTip", face.annotations)
        self.assertEqual(face.timestamp, 2.0)


class TestPoseDetector(unittest.TestCase):
    def setUp(self):
        patcher = mock.patch("pose_detection.mp")
        self.mp = patcher.start()
        self.addCleanup(patcher.stop)
        self.mp.solutions.pose.PoseLandmark = FakePoseLandmark
        self.model = self.mp.solutions.pose.Pose.return_value
        self.frame = np.zeros((500, 600, 3), dtype=np.uint8)

    def detector(self, **kwargs):
        from pose_detection import PoseDetector

        return PoseDetector(**kwargs)

    def results(self, visibility=0.9):
        landmarks = [landmark(0.25, 0.5, visibility=visibility) for _ in POSE_KEYPOINT_NAMES]
        return SimpleNamespace(pose_landmarks=SimpleNamespace(landmark=landmarks))

    def test_keypoints_are_mirrored(self):
        self.model.process.return_value = self.results()
        pose = self.detector().process(self.frame, 0.0).first()
        self.assertEqual(set(pose.keypoints), set(POSE_KEYPOINT_NAMES))
        self.assertAlmostEqual(pose.keypoints["nose"].x, 450.0)
        self.assertAlmostEqual(pose.keypoints["nose"].y, 250.0)

    def test_unmirrored(self):
        self.model.process.return_value = self.results()
        pose = self.detector(flip_horizontal=False).process(self.frame, 0.0).first()
        self.assertAlmostEqual(pose.keypoints["nose"].x, 150.0)

    def test_low_pose_score_is_dropped(self):
        self.model.process.return_value = self.results(visibility=0.05)
        result = self.detector(min_pose_confidence=0.15).process(self.frame, 0.0)
        self.assertFalse(result.found)

    def test_no_pose(self):
        self.model.process.return_value = SimpleNamespace(pose_landmarks=None)
        self.assertFalse(self.detector().process(self.frame, 0.0).found)


if __name__ == "__main__":
    unittest.main()
