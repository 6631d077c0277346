import sys
from typing import Optional

import cv2
from PySide6 import QtCore, QtGui, QtWidgets

import session
from app import build_parser, configure_logging, resolve_config
from camera import CameraStream, CameraUnavailableError
from classifier_registry import get_classifier_entries, get_entry
from config import MODES, ConfigError, DemoConfig

_TOGGLES = [
    ("Triangulate mesh", "triangulate_mesh"),
    ("Show points", "show_points"),
    ("Eye markers", "show_eye_markers"),
    ("Point cloud", "render_point_cloud"),
    ("Skeleton", "show_skeleton"),
    ("Bounding box", "show_bounding_box"),
]


class MonitorPage(QtWidgets.QWidget):
    def __init__(self, config: DemoConfig, parent=None):
        super().__init__(parent)
        self.config = config
        self._setup_ui()
        self._setup_runtime()

    def _setup_ui(self):
        self.setObjectName("MonitorPage")
        layout = QtWidgets.QHBoxLayout(self)
        layout.setContentsMargins(16, 16, 16, 16)
        layout.setSpacing(16)

        self.video_label = QtWidgets.QLabel("Camera feed")
        self.video_label.setAlignment(QtCore.Qt.AlignCenter)
        self.video_label.setMinimumSize(600, 500)
        self.video_label.setStyleSheet("background:#101214; border-radius:12px;")

        right_panel = QtWidgets.QVBoxLayout()
        right_panel.setSpacing(12)

        self.status_label = QtWidgets.QLabel("Waiting for subject...")
        self.status_label.setStyleSheet(
            "border:2px dotted #a2a2a2; padding:12px; border-radius:8px; font-size:16px; color:#e6e6e6;"
        )
        self.error_label = QtWidgets.QLabel("")
        self.error_label.setStyleSheet("color:#ff9b9b;")

        self.toggle_boxes = {}
        toggles_box = QtWidgets.QFrame()
        toggles_box.setStyleSheet(
            "QFrame{background:#15181b;border:1px solid #2b2f33;border-radius:10px;color:#e6e6e6;}"
        )
        toggles_layout = QtWidgets.QVBoxLayout(toggles_box)
        toggles_layout.setContentsMargins(12, 12, 12, 12)
        for text, flag in _TOGGLES:
            box = QtWidgets.QCheckBox(text)
            box.setChecked(getattr(self.config.render, flag))
            box.toggled.connect(lambda checked, f=flag: self._on_toggle(f, checked))
            toggles_layout.addWidget(box)
            self.toggle_boxes[flag] = box

        self.capture_list = QtWidgets.QListWidget()
        self.capture_list.setMinimumWidth(280)
        self.capture_list.setWordWrap(True)
        self.capture_list.setStyleSheet(
            "QListWidget{background:#15181b;border:1px solid #2b2f33;border-radius:10px;color:#e6e6e6;}"
            "QListWidget::item{padding:8px;border:2px dotted #a2a2a2;border-radius:8px;margin:4px;}"
        )

        buttons = QtWidgets.QHBoxLayout()
        self.capture_btn = QtWidgets.QPushButton("Capture")
        self.clear_btn = QtWidgets.QPushButton("Clear")
        for btn in [self.capture_btn, self.clear_btn]:
            btn.setStyleSheet(
                "QPushButton{background:#1f6f5f;color:white;padding:8px 16px;border-radius:8px;}"
                "QPushButton:hover{background:#249b84;}"
            )
            buttons.addWidget(btn)
        self.capture_btn.clicked.connect(self._on_capture)
        self.clear_btn.clicked.connect(self._on_clear)

        right_panel.addWidget(self.status_label)
        right_panel.addWidget(self.error_label)
        right_panel.addWidget(toggles_box)
        right_panel.addWidget(QtWidgets.QLabel("Captured landmarks"))
        right_panel.addWidget(self.capture_list, 1)
        right_panel.addLayout(buttons)

        layout.addWidget(self.video_label, 1)
        layout.addLayout(right_panel)

    def _setup_runtime(self):
        self.camera: Optional[CameraStream] = None
        self.context = session.init(self.config)

        self.timer = QtCore.QTimer(self)
        self.timer.timeout.connect(self._update_frame)

    def start_camera(self):
        if self.camera is not None:
            return
        try:
            self.camera = session.open_camera(self.config)
        except CameraUnavailableError as e:
            self.error_label.setText(str(e))
            self.camera = None
            return
        self.error_label.setText("")
        self.timer.start(max(1, int(1000 / max(1, self.config.camera.target_fps))))

    def stop_camera(self):
        self.timer.stop()
        if self.camera is not None:
            self.camera.release()
            self.camera = None

    def shutdown(self):
        self.stop_camera()
        session.close(self.context)

    def set_mode(self, mode: str):
        if mode == self.config.mode:
            return
        running = self.camera is not None
        self.stop_camera()
        session.close(self.context)
        self.config.mode = mode
        # A preset only fits the mode it was written for.
        if self.config.preset and get_entry(self.config.preset).mode != mode:
            self.config.preset = None
        self.context = session.init(self.config)
        for flag, box in self.toggle_boxes.items():
            setattr(self.context.render, flag, box.isChecked())
        self.status_label.setText("Waiting for subject...")
        self.capture_list.clear()
        if running:
            self.start_camera()

    def _on_toggle(self, flag: str, checked: bool):
        setattr(self.context.render, flag, checked)

    def _on_capture(self):
        entry = session.capture(self.context)
        item = QtWidgets.QListWidgetItem(entry)
        self.capture_list.addItem(item)
        self.capture_list.scrollToBottom()

    def _on_clear(self):
        session.clear_captures(self.context)
        self.capture_list.clear()

    def _update_frame(self):
        if self.camera is None:
            return

        cam_frame = self.camera.read()
        if not cam_frame.ok:
            self.error_label.setText("Camera error")
            return

        try:
            canvas = session.process_frame(self.context, cam_frame.frame, cam_frame.timestamp)
        except Exception:
            # Inference failures end monitoring for this session.
            self.stop_camera()
            self.error_label.setText("Landmark detection failed, monitoring stopped")
            raise
        if self.context.status is not None:
            self.status_label.setText(self.context.status)

        frame_rgb = cv2.cvtColor(canvas, cv2.COLOR_BGR2RGB)
        h, w, ch = frame_rgb.shape
        bytes_per_line = ch * w
        image = QtGui.QImage(frame_rgb.data, w, h, bytes_per_line, QtGui.QImage.Format_RGB888)
        pixmap = QtGui.QPixmap.fromImage(image)
        self.video_label.setPixmap(pixmap.scaled(self.video_label.size(), QtCore.Qt.KeepAspectRatio))


class HomePage(QtWidgets.QWidget):
    start_clicked = QtCore.Signal()

    def __init__(self, parent=None):
        super().__init__(parent)
        layout = QtWidgets.QVBoxLayout(self)
        layout.setContentsMargins(32, 32, 32, 32)
        layout.setSpacing(14)

        title = QtWidgets.QLabel("Focus Monitor")
        title.setStyleSheet("font-size:26px;font-weight:700;color:#f2f2f2;")
        layout.addWidget(title)

        # One line per registered rule table.
        for entry in get_classifier_entries():
            line = QtWidgets.QLabel(f"{entry.name} ({entry.mode}): {entry.description}")
            line.setStyleSheet("font-size:13px;color:#b9c0c5;")
            layout.addWidget(line)

        start = QtWidgets.QPushButton("Start Monitoring")
        start.setStyleSheet("QPushButton{background:#1f6f5f;color:white;padding:12px 24px;border-radius:10px;}")
        start.clicked.connect(self.start_clicked.emit)
        layout.addSpacing(12)
        layout.addWidget(start)
        layout.addStretch(1)


class MainWindow(QtWidgets.QMainWindow):
    HOME, MONITOR = 0, 1

    def __init__(self, config: DemoConfig):
        super().__init__()
        self.config = config
        self.setWindowTitle("Focus Monitor")
        self.resize(1100, 680)
        self.setStyleSheet("QMainWindow{background:#0f1113;}")

        self.home_page = HomePage()
        self.monitor_page = MonitorPage(config)
        self.stack = QtWidgets.QStackedWidget()
        self.stack.addWidget(self.home_page)
        self.stack.addWidget(self.monitor_page)
        self.setCentralWidget(self.stack)
        self.home_page.start_clicked.connect(lambda: self._show(self.MONITOR))

        toolbar = self.addToolBar("Monitor")
        toolbar.setMovable(False)
        toolbar.addAction("Home", lambda: self._show(self.HOME))
        toolbar.addAction("Monitor", lambda: self._show(self.MONITOR))
        toolbar.addSeparator()
        self.mode_box = QtWidgets.QComboBox()
        self.mode_box.addItems(list(MODES))
        self.mode_box.setCurrentText(config.mode)
        self.mode_box.currentTextChanged.connect(self.monitor_page.set_mode)
        toolbar.addWidget(QtWidgets.QLabel(" Mode "))
        toolbar.addWidget(self.mode_box)

    def _show(self, idx: int):
        self.stack.setCurrentIndex(idx)
        if idx == self.MONITOR:
            self.monitor_page.start_camera()
        else:
            self.monitor_page.stop_camera()

    def closeEvent(self, event):
        self.monitor_page.shutdown()
        super().closeEvent(event)


def main(argv=None):
    args = build_parser().parse_args(argv)
    try:
        config = resolve_config(args)
    except ConfigError as e:
        print(f"Configuration error: {e}")
        sys.exit(2)
    configure_logging(config.log_level)

    app = QtWidgets.QApplication(sys.argv[:1])
    try:
        window = MainWindow(config)
    except ConfigError as e:
        print(f"Configuration error: {e}")
        sys.exit(2)
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
