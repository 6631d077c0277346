from typing import List

import cv2

from config import RenderState

KEY_HINTS = "Keys: C capture, X clear, T mesh, P cloud, K skeleton, B box, Q quit"


def draw_capture_panel(frame, entries: List[str], panel_width: int = 260, max_chars: int = 34) -> None:
    height, width = frame.shape[:2]
    x0 = max(0, width - panel_width)
    overlay = frame.copy()
    cv2.rectangle(overlay, (x0, 0), (width, height), (30, 30, 30), -1)
    cv2.addWeighted(overlay, 0.6, frame, 0.4, 0, frame)

    y = 24
    cv2.putText(frame, f"Captures ({len(entries)})", (x0 + 10, y), cv2.FONT_HERSHEY_SIMPLEX, 0.55, (255, 255, 255), 1)
    y += 22

    # Show the most recent entries that fit.
    line_height = 18
    visible = max(0, (height - y) // line_height)
    start = max(0, len(entries) - visible)
    for idx in range(start, len(entries)):
        text = entries[idx]
        if len(text) > max_chars:
            text = text[: max_chars - 3] + "..."
        cv2.putText(frame, f"{idx + 1}. {text}", (x0 + 10, y), cv2.FONT_HERSHEY_SIMPLEX, 0.4, (220, 220, 220), 1)
        y += line_height


def draw_status_panel(frame, lines, origin=(10, 30)) -> None:
    x, y = origin
    for line in lines:
        cv2.putText(frame, line, (x, y), cv2.FONT_HERSHEY_SIMPLEX, 0.7, (255, 255, 255), 2)
        y += 28


def render_flags_line(state: RenderState) -> str:
    flags = [
        ("mesh", state.triangulate_mesh),
        ("cloud", state.render_point_cloud),
        ("skeleton", state.show_skeleton),
        ("box", state.show_bounding_box),
    ]
    return " ".join(f"{name}:{'on' if on else 'off'}" for name, on in flags)
