import logging
import time
from dataclasses import dataclass
from typing import Optional, Tuple

import cv2
import numpy as np

logger = logging.getLogger(__name__)


class CameraUnavailableError(RuntimeError):
    pass


@dataclass
class CameraFrame:
    frame: Optional[np.ndarray]
    timestamp: float
    ok: bool


class CameraStream:
    """Webcam reader that hands out frames at the reference size, paced to target_fps."""

    def __init__(self, camera_index: int = 0, width: int = 600, height: int = 500, target_fps: int = 30):
        self.camera_index = camera_index
        self.width = width
        self.height = height
        self.target_fps = target_fps
        self.failed_reads = 0
        self._capture: Optional[cv2.VideoCapture] = None
        self._last_time = time.time()

    @property
    def reference_size(self) -> Tuple[int, int]:
        return self.width, self.height

    @property
    def is_open(self) -> bool:
        return self._capture is not None

    def open(self) -> bool:
        capture = cv2.VideoCapture(self.camera_index)
        if not capture.isOpened():
            logger.error("Could not open camera %d", self.camera_index)
            capture.release()
            return False
        capture.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        capture.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        self._capture = capture
        logger.info("Camera %d opened, frames fitted to %dx%d", self.camera_index, self.width, self.height)
        return True

    def read(self) -> CameraFrame:
        if self._capture is None:
            return CameraFrame(None, time.time(), False)

        ok, frame = self._capture.read()
        if not ok or frame is None:
            self.failed_reads += 1
            return CameraFrame(None, time.time(), False)

        return CameraFrame(self._fit(frame), self._pace(), True)

    def release(self) -> None:
        if self._capture is not None:
            self._capture.release()
            self._capture = None
            if self.failed_reads:
                logger.info("Camera %d released after %d failed reads", self.camera_index, self.failed_reads)

    def _fit(self, frame: np.ndarray) -> np.ndarray:
        # Rule thresholds are pixels of the reference size.
        if (frame.shape[1], frame.shape[0]) != self.reference_size:
            return cv2.resize(frame, self.reference_size)
        return frame

    def _pace(self) -> float:
        now = time.time()
        if self.target_fps > 0:
            wait = 1.0 / float(self.target_fps) - (now - self._last_time)
            if wait > 0:
                time.sleep(wait)
                now = time.time()
        self._last_time = now
        return now

    def __enter__(self):
        if not self.is_open and not self.open():
            raise CameraUnavailableError(f"Camera {self.camera_index} could not be opened")
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False
