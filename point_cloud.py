import logging
from typing import Optional

import matplotlib.pyplot as plt
import numpy as np

logger = logging.getLogger(__name__)


class PointCloudView:
    """3-D scatter of the face mesh, shown next to the camera feed.

    The figure is created on the first update; later updates only replace the
    plotted points.
    """

    def __init__(self, point_size: float = 1.0, interactive: bool = True):
        self.point_size = point_size
        self.interactive = interactive
        self._figure = None
        self._axes = None
        self._scatter = None

    @property
    def initialized(self) -> bool:
        return self._scatter is not None

    def update(self, points: np.ndarray) -> None:
        points = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        # Negate every axis so the cloud faces the viewer with y up.
        flipped = -points
        if self._scatter is None:
            self._initialize(flipped)
        else:
            self._scatter._offsets3d = (flipped[:, 0], flipped[:, 1], flipped[:, 2])
        if self.interactive:
            self._figure.canvas.draw_idle()
            self._figure.canvas.flush_events()

    def data(self) -> Optional[np.ndarray]:
        if self._scatter is None:
            return None
        xs, ys, zs = self._scatter._offsets3d
        return np.column_stack([np.asarray(xs), np.asarray(ys), np.asarray(zs)])

    def close(self) -> None:
        if self._figure is not None:
            plt.close(self._figure)
        self._figure = None
        self._axes = None
        self._scatter = None

    def _initialize(self, points: np.ndarray) -> None:
        logger.info("Opening point cloud view")
        if self.interactive:
            plt.ion()
        self._figure = plt.figure("Face mesh point cloud")
        self._axes = self._figure.add_subplot(projection="3d")
        self._axes.set_axis_off()
        self._scatter = self._axes.scatter(points[:, 0], points[:, 1], points[:, 2], s=self.point_size)
        if self.interactive:
            self._figure.show()
