import argparse
import logging
import threading

import cv2

import session
from camera import CameraUnavailableError
from classifier_registry import get_classifier_entries
from config import ConfigError, DemoConfig, MODES, load_config
from rules import POLICIES
from ui import KEY_HINTS, draw_capture_panel, draw_status_panel, render_flags_line

logger = logging.getLogger(__name__)

WINDOW_NAME = "Focus Monitor"

_TOGGLE_KEYS = {
    ord("t"): "triangulate_mesh",
    ord("p"): "render_point_cloud",
    ord("k"): "show_skeleton",
    ord("b"): "show_bounding_box",
    ord("e"): "show_eye_markers",
}


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_parser() -> argparse.ArgumentParser:
    presets = [e.name for e in get_classifier_entries()]
    parser = argparse.ArgumentParser(description="Webcam focus and posture monitor")
    parser.add_argument("--config", help="YAML config file")
    parser.add_argument("--mode", choices=MODES, help="face mesh or body pose")
    parser.add_argument("--camera", type=int, help="camera index")
    parser.add_argument("--preset", choices=presets, help="classifier rule table")
    parser.add_argument("--policy", choices=POLICIES, help="override the rule table's policy")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING, ...")
    return parser


def resolve_config(args: argparse.Namespace) -> DemoConfig:
    config = load_config(args.config)
    if args.mode:
        config.mode = args.mode
    if args.camera is not None:
        config.camera.index = args.camera
    if args.preset:
        config.preset = args.preset
    if args.policy:
        config.policy = args.policy
    if args.log_level:
        config.log_level = args.log_level
    return config


def main(argv=None):
    args = build_parser().parse_args(argv)
    try:
        config = resolve_config(args)
        configure_logging(config.log_level)
        context = session.init(config)
    except ConfigError as e:
        print(f"Configuration error: {e}")
        return 2

    try:
        camera = session.open_camera(config)
    except CameraUnavailableError as e:
        logger.error("%s", e)
        session.close(context)
        return 1

    cancel = threading.Event()
    cv2.namedWindow(WINDOW_NAME, cv2.WINDOW_NORMAL)

    def on_frame(canvas, ctx):
        if ctx.status is None:
            status_line = "Waiting for subject..."
        else:
            status_line = f"Status: {ctx.status}"
        lines = [status_line, render_flags_line(ctx.render), KEY_HINTS]
        draw_status_panel(canvas, lines, origin=(10, 30))
        draw_capture_panel(canvas, ctx.capture_log.entries())
        cv2.imshow(WINDOW_NAME, canvas)

        key = cv2.waitKey(1) & 0xFF
        if key == ord("q") or cv2.getWindowProperty(WINDOW_NAME, cv2.WND_PROP_VISIBLE) < 1:
            cancel.set()
        elif key == ord("c"):
            session.capture(ctx)
        elif key == ord("x"):
            session.clear_captures(ctx)
        elif key in _TOGGLE_KEYS:
            flag = _TOGGLE_KEYS[key]
            setattr(ctx.render, flag, not getattr(ctx.render, flag))

    try:
        with camera:
            session.run_loop(context, camera, cancel, on_frame=on_frame)
    finally:
        session.close(context)
        cv2.destroyAllWindows()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
