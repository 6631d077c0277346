import logging
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Optional, Tuple

import yaml

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    pass


@dataclass
class CameraConfig:
    index: int = 0
    target_fps: int = 30


@dataclass
class FaceConfig:
    # Annotation thresholds are pixels of this frame.
    frame_width: int = 500
    frame_height: int = 500
    max_faces: int = 1
    min_detection_confidence: float = 0.5
    min_tracking_confidence: float = 0.5


@dataclass
class PoseConfig:
    frame_width: int = 600
    frame_height: int = 500
    min_pose_confidence: float = 0.15
    min_part_confidence: float = 0.1
    debounce_frames: int = 30
    flip_horizontal: bool = True


@dataclass
class RenderState:
    show_video: bool = True
    triangulate_mesh: bool = True
    show_points: bool = True
    show_skeleton: bool = True
    show_bounding_box: bool = False
    show_eye_markers: bool = False
    render_point_cloud: bool = False


@dataclass
class DemoConfig:
    mode: str = "face"
    preset: Optional[str] = None
    policy: Optional[str] = None
    log_level: str = "INFO"
    camera: CameraConfig = field(default_factory=CameraConfig)
    face: FaceConfig = field(default_factory=FaceConfig)
    pose: PoseConfig = field(default_factory=PoseConfig)
    render: RenderState = field(default_factory=RenderState)

    @property
    def frame_size(self) -> Tuple[int, int]:
        """Reference (width, height) camera frames are fitted to in the current mode."""
        section = self.pose if self.mode == "pose" else self.face
        return section.frame_width, section.frame_height


_SECTIONS = {
    "camera": CameraConfig,
    "face": FaceConfig,
    "pose": PoseConfig,
    "render": RenderState,
}

MODES = ("face", "pose")


def _build_section(cls, name: str, values: Any):
    if values is None:
        return cls()
    if not isinstance(values, dict):
        raise ConfigError(f"Section '{name}' must be a mapping")
    known = {f.name for f in fields(cls)}
    unknown = set(values) - known
    if unknown:
        raise ConfigError(f"Unknown keys in '{name}': {', '.join(sorted(unknown))}")
    return cls(**values)


def config_from_dict(data: Optional[Dict[str, Any]]) -> DemoConfig:
    data = dict(data or {})
    top_level = {f.name for f in fields(DemoConfig)} - set(_SECTIONS)
    unknown = set(data) - top_level - set(_SECTIONS)
    if unknown:
        raise ConfigError(f"Unknown config keys: {', '.join(sorted(unknown))}")

    kwargs = {k: v for k, v in data.items() if k in top_level}
    for name, cls in _SECTIONS.items():
        kwargs[name] = _build_section(cls, name, data.get(name))
    config = DemoConfig(**kwargs)
    if config.mode not in MODES:
        raise ConfigError(f"mode must be one of {MODES}, got {config.mode!r}")
    return config


def load_config(path: Optional[str]) -> DemoConfig:
    if path is None:
        return DemoConfig()
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Could not read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if data is not None and not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    logger.info("Loaded config from %s", path)
    return config_from_dict(data)
