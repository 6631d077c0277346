import threading
import unittest
from unittest import mock

import numpy as np

import session
from camera import CameraFrame, CameraUnavailableError
from capture_log import NOT_ON_SCREEN
from classifiers import FOCUSED, NOT_FOCUSED
from config import ConfigError, DemoConfig
from point_cloud import PointCloudView
from tests.helpers import FakeSource, detections, make_face, make_pose


def blank_frame():
    return np.zeros((500, 600, 3), dtype=np.uint8)


class FakeCamera:
    def __init__(self, failures=0):
        self.failures = failures
        self.reads = 0

    def read(self):
        self.reads += 1
        if self.failures:
            self.failures -= 1
            return CameraFrame(None, 0.0, False)
        return CameraFrame(blank_frame(), float(self.reads), True)


class TestProcessFrame(unittest.TestCase):
    def test_face_status_follows_classifier(self):
        turned = make_face({454: (270.0, 250.0, 0.0)})
        source = FakeSource([detections(make_face()), detections(turned)])
        context = session.init(DemoConfig(mode="face"), source=source)

        session.process_frame(context, blank_frame(), 1.0)
        self.assertEqual(context.status, FOCUSED)
        session.process_frame(context, blank_frame(), 2.0)
        self.assertEqual(context.status, NOT_FOCUSED)

    def test_zero_subjects_keep_status_and_log(self):
        source = FakeSource([detections(make_pose(left_eye=(280, 300))), detections()])
        context = session.init(DemoConfig(mode="pose"), source=source)
        session.capture(context)

        session.process_frame(context, blank_frame(), 1.0)
        self.assertEqual(context.status, "looking Down")
        entries = context.capture_log.entries()

        canvas = session.process_frame(context, blank_frame(), 2.0)
        self.assertEqual(context.status, "looking Down")
        self.assertEqual(context.capture_log.entries(), entries)
        self.assertEqual(canvas.shape, (500, 600, 3))

    def test_capture_without_subject(self):
        context = session.init(DemoConfig(mode="pose"), source=FakeSource([detections()]))
        session.process_frame(context, blank_frame(), 1.0)
        self.assertEqual(session.capture(context), NOT_ON_SCREEN)
        session.clear_captures(context)
        self.assertEqual(len(context.capture_log), 0)

    def test_face_capture_uses_consulted_paths(self):
        context = session.init(DemoConfig(mode="face"), source=FakeSource([detections(make_face())]))
        session.process_frame(context, blank_frame(), 1.0)
        entry = session.capture(context)
        self.assertIn("local_mesh.454.x", entry)
        self.assertIn("local_mesh.152.z", entry)

    def test_contexts_do_not_share_state(self):
        phone = detections(make_pose(left_wrist=(160, 300)))
        first = session.init(DemoConfig(mode="pose"), source=FakeSource([phone]))
        second = session.init(DemoConfig(mode="pose"), source=FakeSource([phone]))
        for _ in range(5):
            session.process_frame(first, blank_frame())
        session.process_frame(second, blank_frame())
        self.assertEqual(first.classifier.counter, 5)
        self.assertEqual(second.classifier.counter, 1)
        session.capture(first)
        self.assertEqual(len(second.capture_log), 0)

    def test_render_state_is_a_copy(self):
        config = DemoConfig(mode="face")
        context = session.init(config, source=FakeSource([detections()]))
        context.render.triangulate_mesh = False
        self.assertTrue(config.render.triangulate_mesh)

    def test_overlay_is_drawn(self):
        config = DemoConfig(mode="pose")
        context = session.init(config, source=FakeSource([detections(make_pose())]))
        canvas = session.process_frame(context, blank_frame(), 1.0)
        self.assertGreater(int(canvas.sum()), 0)

    def test_point_cloud_created_once_and_updated(self):
        config = DemoConfig(mode="face")
        config.render.render_point_cloud = True
        first = make_face({10: (1.0, 2.0, 3.0)})
        second = make_face({10: (4.0, 5.0, 6.0)})
        view = PointCloudView(interactive=False)
        self.addCleanup(view.close)
        context = session.init(config, source=FakeSource([detections(first), detections(second)]), point_cloud=view)

        session.process_frame(context, blank_frame(), 1.0)
        self.assertTrue(view.initialized)
        session.process_frame(context, blank_frame(), 2.0)
        self.assertIs(context.point_cloud, view)
        np.testing.assert_allclose(view.data()[10], [-4.0, -5.0, -6.0])

    def test_inference_error_propagates(self):
        context = session.init(DemoConfig(mode="face"), source=FakeSource([RuntimeError("model failed")]))
        with self.assertRaises(RuntimeError):
            session.process_frame(context, blank_frame(), 1.0)

    def test_preset_must_match_mode(self):
        with self.assertRaises(ConfigError):
            session.init(DemoConfig(mode="pose", preset="face_mesh_bounds"), source=FakeSource([detections()]))
        with self.assertRaises(ConfigError):
            session.init(DemoConfig(mode="face", preset="no_such_preset"), source=FakeSource([detections()]))



class TestOpenCamera(unittest.TestCase):
    def open_with(self, mode):
        with mock.patch("session.CameraStream") as stream_cls:
            stream_cls.return_value.open.return_value = True
            camera = session.open_camera(DemoConfig(mode=mode))
        self.assertIs(camera, stream_cls.return_value)
        return stream_cls.call_args.kwargs

    def test_face_mode_uses_square_frames(self):
        kwargs = self.open_with("face")
        self.assertEqual((kwargs["width"], kwargs["height"]), (500, 500))

    def test_pose_mode_uses_wide_frames(self):
        kwargs = self.open_with("pose")
        self.assertEqual((kwargs["width"], kwargs["height"]), (600, 500))

    def test_unavailable_camera(self):
        with mock.patch("session.CameraStream") as stream_cls:
            stream_cls.return_value.open.return_value = False
            with self.assertRaises(CameraUnavailableError):
                session.open_camera(DemoConfig())

class TestRunLoop(unittest.TestCase):
    def test_stops_when_cancelled(self):
        context = session.init(DemoConfig(mode="pose"), source=FakeSource([detections(make_pose())]))
        cancel = threading.Event()
        seen = []

        def on_frame(canvas, ctx):
            seen.append(ctx.status)
            if len(seen) == 3:
                cancel.set()

        processed = session.run_loop(context, FakeCamera(), cancel, on_frame=on_frame)
        self.assertEqual(processed, 3)
        self.assertEqual(seen, ["Normal"] * 3)

    def test_camera_failures_are_skipped(self):
        context = session.init(DemoConfig(mode="pose"), source=FakeSource([detections(make_pose())]))
        camera = FakeCamera(failures=2)
        processed = session.run_loop(context, camera, threading.Event(), max_frames=4)
        self.assertEqual(processed, 4)
        self.assertEqual(camera.reads, 6)

    def test_cancelled_before_start(self):
        source = FakeSource([detections(make_pose())])
        context = session.init(DemoConfig(mode="pose"), source=source)
        cancel = threading.Event()
        cancel.set()
        self.assertEqual(session.run_loop(context, FakeCamera(), cancel), 0)
        self.assertEqual(source.calls, 0)

    def test_inference_error_ends_loop(self):
        source = FakeSource([detections(make_pose()), RuntimeError("model failed")])
        context = session.init(DemoConfig(mode="pose"), source=source)
        with self.assertRaises(RuntimeError):
            session.run_loop(context, FakeCamera(), threading.Event())
        self.assertEqual(source.calls, 2)

    def test_close_releases_source(self):
        source = FakeSource([detections()])
        context = session.init(DemoConfig(mode="pose"), source=source)
        session.close(context)
        self.assertTrue(source.closed)


if __name__ == "__main__":
    unittest.main()
