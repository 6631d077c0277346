from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from classifiers.face import FOCUSED, NOT_FOCUSED, FaceFocusClassifier
from classifiers.pose import PoseActivityClassifier
from face_annotations import CHIN_INDEX, FOREHEAD_INDEX, LEFT_CHEEK_EDGE_INDEX, RIGHT_CHEEK_EDGE_INDEX
from rules import FIRST_MATCH, MAJORITY_VOTE, RuleTable, Threshold, any_rule, rule

# Face annotation thresholds, in pixels of the 500x500 face-mode frame. Each
# bound is independent even where two happen to share a value.
NOSE_TIP_X_LOWER = 200
NOSE_TIP_X_UPPER = 400
RIGHT_CHEEK_X_LOWER = 160
RIGHT_CHEEK_X_UPPER = 350
LIPS_UPPER_OUTER_X_LOWER = 230
LIPS_UPPER_OUTER_X_UPPER = 245
NOSE_TIP_Y_BAND_LOWER = 290
NOSE_TIP_Y_BAND_UPPER = 400
NOSE_TIP_Y_LOWER = 290
NOSE_TIP_Y_UPPER = 380
MIDWAY_EYES_Y_HIGH_BAND = (210, 250)
MIDWAY_EYES_Y_LOW_BAND = (340, 400)

# Mesh-bounds thresholds, in the 192-pixel face crop from build_local_mesh.
RIGHT_CHEEK_EDGE_X_MIN = 140
LEFT_CHEEK_EDGE_X_MAX = 50
FOREHEAD_Z_MAX = 30
CHIN_Z_MAX = 30

# Pose thresholds, in pixels of a mirrored 600x500 frame.
LOOKING_DOWN_EYE_Y = 280

BODY_BUILDING_LEFT_SHOULDER_Y = 450
BODY_BUILDING_LEFT_ELBOW_Y = 450
BODY_BUILDING_LEFT_WRIST_Y = 300
BODY_BUILDING_RIGHT_SHOULDER_Y = 450
BODY_BUILDING_RIGHT_ELBOW_Y = 500
BODY_BUILDING_RIGHT_WRIST_Y = 300

PHONE_LEFT_WRIST_X = (130, 200)
PHONE_LEFT_WRIST_Y = (240, 400)
PHONE_RIGHT_WRIST_X = (300, 400)
PHONE_RIGHT_WRIST_Y = (200, 400)

HEAD_LEFT_EAR_X_MAX = 170
HEAD_LEFT_EAR_Y_MIN = 250
HEAD_RIGHT_EAR_X_MIN = 360
HEAD_RIGHT_EAR_Y_MIN = 260

STRETCH_RIGHT_SHOULDER_Y_MAX = 420
STRETCH_RIGHT_SHOULDER_X_MAX = 420
STRETCH_LEFT_ELBOW_X_MIN = 400
STRETCH_LEFT_ELBOW_Y_MAX = 450
STRETCH_LEFT_SHOULDER_X_MIN = 120
STRETCH_LEFT_SHOULDER_Y_MAX = 450
STRETCH_RIGHT_ELBOW_X_MAX = 10
STRETCH_RIGHT_ELBOW_Y_MAX = 500

HOLDING_LEFT_WRIST_X_MIN = 100
HOLDING_RIGHT_WRIST_X_MAX = 400
HOLDING_RIGHT_WRIST_Y_MIN = 400

SCRATCHING_RIGHT_WRIST_X_MAX = 400
SCRATCHING_RIGHT_WRIST_Y_MAX = 250

NORMAL = "Normal"
TALKING_ON_PHONE = "Talking on Phone"


@dataclass
class ClassifierEntry:
    name: str
    mode: str
    build_table: Callable[[], RuleTable]
    description: str


def _kp(name: str, axis: str, comparator: str, *bounds) -> Threshold:
    return Threshold(f"keypoints.{name}.{axis}", comparator, tuple(bounds))


def face_five_point_vote() -> RuleTable:
    return RuleTable(
        [
            rule(FOCUSED, Threshold("annotations.noseTip.0.x", "between", (NOSE_TIP_X_LOWER, NOSE_TIP_X_UPPER)),
                 name="nose_tip_x"),
            rule(FOCUSED, Threshold("annotations.rightCheek.0.x", "between", (RIGHT_CHEEK_X_LOWER, RIGHT_CHEEK_X_UPPER)),
                 name="right_cheek_x"),
            rule(FOCUSED, Threshold("annotations.lipsUpperOuter.0.x", "between",
                                    (LIPS_UPPER_OUTER_X_LOWER, LIPS_UPPER_OUTER_X_UPPER)),
                 name="lips_upper_outer_x"),
            rule(FOCUSED, Threshold("annotations.noseTip.0.y", "outside", (NOSE_TIP_Y_BAND_LOWER, NOSE_TIP_Y_BAND_UPPER)),
                 name="nose_tip_y"),
            rule(
                FOCUSED,
                Threshold("annotations.midwayBetweenEyes.0.y", "outside", MIDWAY_EYES_Y_HIGH_BAND),
                Threshold("annotations.midwayBetweenEyes.0.y", "outside", MIDWAY_EYES_Y_LOW_BAND),
                name="midway_between_eyes_y",
            ),
        ],
        MAJORITY_VOTE,
        NOT_FOCUSED,
    )


def face_four_point_vote() -> RuleTable:
    return RuleTable(
        [
            rule(FOCUSED, Threshold("annotations.noseTip.0.x", "between", (NOSE_TIP_X_LOWER, NOSE_TIP_X_UPPER)),
                 name="nose_tip_x"),
            rule(FOCUSED, Threshold("annotations.rightCheek.0.x", "between", (RIGHT_CHEEK_X_LOWER, RIGHT_CHEEK_X_UPPER)),
                 name="right_cheek_x"),
            rule(FOCUSED, Threshold("annotations.lipsUpperOuter.0.x", "between",
                                    (LIPS_UPPER_OUTER_X_LOWER, LIPS_UPPER_OUTER_X_UPPER)),
                 name="lips_upper_outer_x"),
            rule(FOCUSED, Threshold("annotations.noseTip.0.y", "between", (NOSE_TIP_Y_LOWER, NOSE_TIP_Y_UPPER)),
                 name="nose_tip_y"),
        ],
        MAJORITY_VOTE,
        NOT_FOCUSED,
    )


def face_mesh_bounds() -> RuleTable:
    # Out-of-bounds checks: any hit means the head has turned away.
    return RuleTable(
        [
            rule(NOT_FOCUSED, Threshold(f"local_mesh.{RIGHT_CHEEK_EDGE_INDEX}.x", "lt", (RIGHT_CHEEK_EDGE_X_MIN,)),
                 name="turned_left"),
            rule(NOT_FOCUSED, Threshold(f"local_mesh.{LEFT_CHEEK_EDGE_INDEX}.x", "gt", (LEFT_CHEEK_EDGE_X_MAX,)),
                 name="turned_right"),
            rule(NOT_FOCUSED, Threshold(f"local_mesh.{FOREHEAD_INDEX}.z", "gt", (FOREHEAD_Z_MAX,)),
                 name="tilted_up"),
            rule(NOT_FOCUSED, Threshold(f"local_mesh.{CHIN_INDEX}.z", "gt", (CHIN_Z_MAX,)),
                 name="tilted_down"),
        ],
        FIRST_MATCH,
        FOCUSED,
    )


def pose_activity() -> RuleTable:
    return RuleTable(
        [
            rule("looking Down", _kp("left_eye", "y", "gt", LOOKING_DOWN_EYE_Y), name="looking_down"),
            rule(
                "Body Building",
                _kp("left_shoulder", "y", "lt", BODY_BUILDING_LEFT_SHOULDER_Y),
                _kp("left_elbow", "y", "lt", BODY_BUILDING_LEFT_ELBOW_Y),
                _kp("left_wrist", "y", "lt", BODY_BUILDING_LEFT_WRIST_Y),
                name="body_building_left",
            ),
            rule(
                TALKING_ON_PHONE,
                _kp("left_wrist", "x", "between", *PHONE_LEFT_WRIST_X),
                _kp("left_wrist", "y", "between", *PHONE_LEFT_WRIST_Y),
                name="phone_left",
                debounced=True,
            ),
            rule(
                "Body Building",
                _kp("right_shoulder", "y", "lt", BODY_BUILDING_RIGHT_SHOULDER_Y),
                _kp("right_elbow", "y", "lt", BODY_BUILDING_RIGHT_ELBOW_Y),
                _kp("right_wrist", "y", "lt", BODY_BUILDING_RIGHT_WRIST_Y),
                name="body_building_right",
            ),
            rule(
                f"{TALKING_ON_PHONE} Right",
                _kp("right_wrist", "x", "between", *PHONE_RIGHT_WRIST_X),
                _kp("right_wrist", "y", "between", *PHONE_RIGHT_WRIST_Y),
                name="phone_right",
                debounced=True,
            ),
            rule(
                "Moving head to left",
                _kp("left_ear", "x", "lt", HEAD_LEFT_EAR_X_MAX),
                _kp("left_ear", "y", "gt", HEAD_LEFT_EAR_Y_MIN),
                name="head_left",
            ),
            rule(
                "Moving head to right",
                _kp("right_ear", "x", "gt", HEAD_RIGHT_EAR_X_MIN),
                _kp("right_ear", "y", "gt", HEAD_RIGHT_EAR_Y_MIN),
                name="head_right",
            ),
            rule(
                "Moving left shoulder Stretching",
                _kp("right_shoulder", "y", "lt", STRETCH_RIGHT_SHOULDER_Y_MAX),
                _kp("right_shoulder", "x", "lt", STRETCH_RIGHT_SHOULDER_X_MAX),
                _kp("left_elbow", "x", "gt", STRETCH_LEFT_ELBOW_X_MIN),
                _kp("left_elbow", "y", "lt", STRETCH_LEFT_ELBOW_Y_MAX),
                name="stretch_left_shoulder",
            ),
            rule(
                "Moving right shoulder Stretching",
                _kp("left_shoulder", "x", "gt", STRETCH_LEFT_SHOULDER_X_MIN),
                _kp("left_shoulder", "y", "lt", STRETCH_LEFT_SHOULDER_Y_MAX),
                _kp("right_elbow", "x", "lt", STRETCH_RIGHT_ELBOW_X_MAX),
                _kp("right_elbow", "y", "lt", STRETCH_RIGHT_ELBOW_Y_MAX),
                name="stretch_right_shoulder",
            ),
            rule(
                "Moving both shoulder",
                _kp("right_shoulder", "y", "lt", STRETCH_RIGHT_SHOULDER_Y_MAX),
                _kp("right_shoulder", "x", "lt", STRETCH_RIGHT_SHOULDER_X_MAX),
                _kp("left_shoulder", "x", "gt", STRETCH_LEFT_SHOULDER_X_MIN),
                _kp("left_shoulder", "y", "lt", STRETCH_LEFT_SHOULDER_Y_MAX),
                name="stretch_both_shoulders",
            ),
            any_rule(
                "holding something",
                [_kp("left_wrist", "x", "gt", HOLDING_LEFT_WRIST_X_MIN)],
                [
                    _kp("right_wrist", "x", "lt", HOLDING_RIGHT_WRIST_X_MAX),
                    _kp("right_wrist", "y", "gt", HOLDING_RIGHT_WRIST_Y_MIN),
                ],
                name="holding_something",
            ),
            rule(
                "scratching head",
                _kp("right_wrist", "x", "lt", SCRATCHING_RIGHT_WRIST_X_MAX),
                _kp("right_wrist", "y", "lt", SCRATCHING_RIGHT_WRIST_Y_MAX),
                name="scratching_head",
            ),
        ],
        FIRST_MATCH,
        NORMAL,
    )


def get_classifier_entries() -> List[ClassifierEntry]:
    return [
        ClassifierEntry("face_mesh_bounds", "face", face_mesh_bounds,
                        "Cheek edges and forehead/chin depth, first out-of-bounds check wins"),
        ClassifierEntry("face_five_point_vote", "face", face_five_point_vote,
                        "Nose, cheek, lip and eye-midpoint checks, majority vote"),
        ClassifierEntry("face_four_point_vote", "face", face_four_point_vote,
                        "Nose, cheek and lip checks, majority vote"),
        ClassifierEntry("pose_activity", "pose", pose_activity,
                        "Upper-body activity cascade"),
    ]


def get_entry(name: str) -> ClassifierEntry:
    entries: Dict[str, ClassifierEntry] = {e.name: e for e in get_classifier_entries()}
    if name not in entries:
        raise KeyError(f"Unknown classifier preset: {name}")
    return entries[name]


def default_preset(mode: str) -> str:
    return "pose_activity" if mode == "pose" else "face_mesh_bounds"


def build_classifier(
    preset: str,
    policy: Optional[str] = None,
    debounce_frames: int = 30,
    min_part_confidence: float = 0.1,
):
    entry = get_entry(preset)
    table = entry.build_table()
    if policy is not None and policy != table.policy:
        table = table.with_policy(policy)
    if entry.mode == "pose":
        return PoseActivityClassifier(table, debounce_frames=debounce_frames, min_part_confidence=min_part_confidence)
    return FaceFocusClassifier(table)
