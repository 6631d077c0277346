"""Frame-by-frame processing shared by the OpenCV and Qt front ends.

Each ``FrameContext`` owns everything that changes between frames (the
classifier's debounce counter, the capture log, the point cloud view, the
last status) so two contexts never share state.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional, Tuple

import cv2
import numpy as np

from camera import CameraStream, CameraUnavailableError
from capture_log import CaptureLog
from classifier_registry import build_classifier, default_preset, get_entry
from classifiers.base import ClassifierBase
from config import ConfigError, DemoConfig, RenderState
from landmark_types import ClassificationResult, FaceSnapshot, FrameDetections, PoseSnapshot
from point_cloud import PointCloudView
from visualization import draw_face, draw_pose

logger = logging.getLogger(__name__)


@dataclass
class FrameContext:
    config: DemoConfig
    source: object
    classifier: ClassifierBase
    render: RenderState
    capture_log: CaptureLog = field(default_factory=CaptureLog)
    triangulation: Optional[Iterable[Tuple[int, int]]] = None
    point_cloud: Optional[PointCloudView] = None
    status: Optional[str] = None
    last_result: Optional[ClassificationResult] = None
    last_detections: Optional[FrameDetections] = None
    frame_count: int = 0


def _build_source(config: DemoConfig):
    if config.mode == "pose":
        from pose_detection import PoseDetector

        return PoseDetector(
            min_pose_confidence=config.pose.min_pose_confidence,
            flip_horizontal=config.pose.flip_horizontal,
        )
    from face_detection import FaceMeshDetector

    return FaceMeshDetector(
        max_faces=config.face.max_faces,
        min_detection_confidence=config.face.min_detection_confidence,
        min_tracking_confidence=config.face.min_tracking_confidence,
    )


def init(config: DemoConfig, source=None, point_cloud: Optional[PointCloudView] = None) -> FrameContext:
    """Create a fresh context; ``source`` defaults to the MediaPipe detector for the mode."""
    preset = config.preset or default_preset(config.mode)
    try:
        entry = get_entry(preset)
    except KeyError as e:
        raise ConfigError(str(e)) from e
    if entry.mode != config.mode:
        raise ConfigError(f"Preset {preset!r} is for {entry.mode} mode, not {config.mode}")
    classifier = build_classifier(
        preset,
        policy=config.policy,
        debounce_frames=config.pose.debounce_frames,
        min_part_confidence=config.pose.min_part_confidence,
    )
    if source is None:
        source = _build_source(config)
    logger.info("Session ready: mode=%s preset=%s policy=%s", config.mode, preset, classifier.table.policy)
    return FrameContext(
        config=config,
        source=source,
        classifier=classifier,
        render=RenderState(**vars(config.render)),
        triangulation=getattr(source, "triangulation", None),
        point_cloud=point_cloud,
    )


def process_frame(context: FrameContext, frame: np.ndarray, timestamp: Optional[float] = None) -> np.ndarray:
    """Run one iteration and return the mirrored canvas to display.

    Inference errors propagate to the caller.
    """
    if timestamp is None:
        timestamp = time.time()
    context.frame_count += 1

    detections: FrameDetections = context.source.process(frame, timestamp)
    context.last_detections = detections

    canvas = frame.copy() if context.render.show_video else np.zeros_like(frame)
    if context.config.mode == "pose":
        # Pose keypoints already come mirrored; flip the video to match.
        canvas = cv2.flip(canvas, 1)

    if detections.found:
        subject = detections.first()
        result = context.classifier.classify(subject)
        context.last_result = result
        if result.label != context.status:
            logger.debug("Status %r -> %r", context.status, result.label)
        context.status = result.label
        _render(context, canvas, detections)

    if context.config.mode == "face":
        canvas = cv2.flip(canvas, 1)
    return canvas


def _render(context: FrameContext, canvas: np.ndarray, detections: FrameDetections) -> None:
    state = context.render
    for subject in detections.subjects:
        if isinstance(subject, FaceSnapshot):
            draw_face(canvas, subject, state, context.triangulation)
        elif isinstance(subject, PoseSnapshot):
            draw_pose(canvas, subject, state, context.config.pose.min_part_confidence)

    faces = [s for s in detections.subjects if isinstance(s, FaceSnapshot)]
    if faces and state.render_point_cloud:
        if context.point_cloud is None:
            context.point_cloud = PointCloudView()
        context.point_cloud.update(np.concatenate([f.mesh for f in faces], axis=0))


def capture(context: FrameContext) -> str:
    return context.capture_log.capture(context.last_detections, context.classifier.consulted_paths)


def clear_captures(context: FrameContext) -> None:
    context.capture_log.clear()


def open_camera(config: DemoConfig) -> CameraStream:
    width, height = config.frame_size
    camera = CameraStream(
        camera_index=config.camera.index,
        width=width,
        height=height,
        target_fps=config.camera.target_fps,
    )
    if not camera.open():
        raise CameraUnavailableError(
            "This device does not have a camera, or it could not be opened (index %d)" % config.camera.index
        )
    return camera


def run_loop(
    context: FrameContext,
    camera: CameraStream,
    cancel_event: threading.Event,
    on_frame: Optional[Callable[[np.ndarray, FrameContext], None]] = None,
    max_frames: Optional[int] = None,
) -> int:
    """Process frames until ``cancel_event`` is set; returns the number processed.

    Iterations never overlap: the next frame is read only after the current
    one has been classified and rendered.
    """
    processed = 0
    while not cancel_event.is_set():
        if max_frames is not None and processed >= max_frames:
            break
        cam_frame = camera.read()
        if not cam_frame.ok:
            logger.warning("Camera frame unavailable, skipping")
            continue
        canvas = process_frame(context, cam_frame.frame, cam_frame.timestamp)
        processed += 1
        if on_frame is not None:
            on_frame(canvas, context)
    logger.info("Frame loop stopped after %d frames", processed)
    return processed


def close(context: FrameContext) -> None:
    if context.point_cloud is not None:
        context.point_cloud.close()
    closer = getattr(context.source, "close", None)
    if closer is not None:
        closer()
