import unittest

import numpy as np

from face_annotations import LOCAL_MESH_SIZE, build_annotations, build_local_mesh
from geometry import bounding_box, mirror_x, resolve_coordinate
from landmark_types import FaceSnapshot, Keypoint
from tests.helpers import make_face, make_mesh, make_pose


class TestResolveCoordinate(unittest.TestCase):
    def test_mesh_path(self):
        face = make_face({10: (1.0, 2.0, 3.0)})
        self.assertEqual(resolve_coordinate(face, "mesh.10.x"), 1.0)
        self.assertEqual(resolve_coordinate(face, "mesh.10.z"), 3.0)

    def test_local_mesh_path(self):
        face = make_face()
        # Cheek edge 70px left of a 231.25px crop centre.
        self.assertAlmostEqual(resolve_coordinate(face, "local_mesh.234.x"), 96.0 - 70.0 * 192.0 / 231.25)
        self.assertIsNone(resolve_coordinate(face, "local_mesh.9999.x"))

    def test_annotation_path(self):
        face = make_face({1: (250.0, 260.0, -5.0)})
        self.assertEqual(resolve_coordinate(face, "annotations.noseTip.0.y"), 260.0)

    def test_keypoint_path(self):
        pose = make_pose(left_wrist=(160, 300))
        self.assertEqual(resolve_coordinate(pose, "keypoints.left_wrist.x"), 160.0)

    def test_missing_pieces_resolve_to_none(self):
        face = make_face()
        self.assertIsNone(resolve_coordinate(face, "mesh.9999.x"))
        self.assertIsNone(resolve_coordinate(face, "mesh.10.w"))
        self.assertIsNone(resolve_coordinate(face, "annotations.tail.0.x"))
        self.assertIsNone(resolve_coordinate(face, "annotations.noseTip.3.x"))
        self.assertIsNone(resolve_coordinate(face, "mesh.ten.x"))
        self.assertIsNone(resolve_coordinate(face, "keypoints.nose.x"))
        self.assertIsNone(resolve_coordinate(make_pose(), "mesh.10.x"))

    def test_non_numeric_values_resolve_to_none(self):
        annotations = {
            "noseTip": np.array([["left", "up", "far"]], dtype=object),
            "rightCheek": np.array([[np.nan, 1.0, 1.0]]),
        }
        face = make_face(annotations=annotations)
        self.assertIsNone(resolve_coordinate(face, "annotations.noseTip.0.x"))
        self.assertIsNone(resolve_coordinate(face, "annotations.rightCheek.0.x"))

    def test_low_score_keypoint(self):
        pose = make_pose(scores={"nose": 0.2})
        self.assertIsNone(resolve_coordinate(pose, "keypoints.nose.x", min_score=0.5))
        self.assertEqual(resolve_coordinate(pose, "keypoints.nose.x", min_score=0.1), 300.0)



class TestLocalMesh(unittest.TestCase):
    def test_crop_is_centred_on_the_face(self):
        local = build_local_mesh(make_mesh())
        self.assertAlmostEqual(local[:, 0].min() + local[:, 0].max(), LOCAL_MESH_SIZE)
        self.assertAlmostEqual(local[:, 1].min() + local[:, 1].max(), LOCAL_MESH_SIZE)

    def test_independent_of_face_size_and_position(self):
        mesh = make_mesh()
        moved = mesh * 0.4 + (90.0, -30.0, 0.0)
        np.testing.assert_allclose(build_local_mesh(moved), build_local_mesh(mesh))

    def test_degenerate_mesh(self):
        flat = np.ones((5, 3))
        local = build_local_mesh(flat)
        self.assertTrue(np.all(np.isfinite(local)))
        self.assertEqual(build_local_mesh(np.zeros((0, 3))).shape, (0, 3))


class TestFaceSnapshotArrays(unittest.TestCase):
    def test_caller_arrays_stay_writable(self):
        mesh = make_mesh()
        annotations = build_annotations(mesh)
        face = FaceSnapshot(timestamp=0.0, image_size=(500, 500), mesh=mesh, annotations=annotations)

        mesh[10] = (0.0, 0.0, 0.0)
        annotations["noseTip"][0] = (1.0, 1.0, 1.0)
        self.assertEqual(face.mesh[10][1], 160.0)
        self.assertEqual(face.annotations["noseTip"][0][0], 250.0)

    def test_snapshot_arrays_are_read_only(self):
        face = make_face()
        for points in (face.mesh, face.local_mesh, face.annotations["noseTip"]):
            with self.assertRaises(ValueError):
                points[0, 0] = 1.0

class TestHelpers(unittest.TestCase):
    def test_bounding_box_skips_low_scores(self):
        kps = [Keypoint("a", 10, 20, 0.9), Keypoint("b", 50, 5, 0.9), Keypoint("c", 500, 500, 0.01)]
        self.assertEqual(bounding_box(kps, min_score=0.1), (10, 5, 50, 20))

    def test_bounding_box_empty(self):
        self.assertIsNone(bounding_box([]))

    def test_mirror_x(self):
        self.assertEqual(mirror_x(100.0, 600), 500.0)


if __name__ == "__main__":
    unittest.main()
