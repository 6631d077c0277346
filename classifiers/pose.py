import logging

from classifiers.base import ClassifierBase
from landmark_types import ClassificationResult, PoseSnapshot
from rules import RuleTable

logger = logging.getLogger(__name__)

PHONE_PENDING_LABEL = "Touching ears or Talking on phone"


class PoseActivityClassifier(ClassifierBase):
    name = "pose_activity"

    def __init__(self, table: RuleTable, debounce_frames: int = 30, min_part_confidence: float = 0.1):
        super().__init__(table)
        self.debounce_frames = debounce_frames
        self.min_part_confidence = min_part_confidence
        self.counter = 0

    def reset(self) -> None:
        self.counter = 0

    def classify(self, snapshot: PoseSnapshot) -> ClassificationResult:
        result, matched = self.table.evaluate(snapshot, min_score=self.min_part_confidence)

        if matched is None or not matched.debounced:
            if self.counter:
                logger.debug("Phone counter reset at %d", self.counter)
            self.counter = 0
            result.counter = 0
            return result

        # Count consecutive phone frames, holding once past the threshold.
        if self.counter <= self.debounce_frames:
            self.counter += 1
        result.counter = self.counter
        if self.counter > self.debounce_frames:
            result.label = f"{matched.label} {self.counter}"
        else:
            result.label = f"{PHONE_PENDING_LABEL} {self.counter}"
        return result
