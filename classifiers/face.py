import logging

from classifiers.base import ClassifierBase
from landmark_types import ClassificationResult, FaceSnapshot

logger = logging.getLogger(__name__)

FOCUSED = "Focused"
NOT_FOCUSED = "NotFocused"


class FaceFocusClassifier(ClassifierBase):
    """Decides Focused/NotFocused from one face mesh.

    Stateless between frames; the rule table's policy decides whether the
    checks are tallied or short-circuit on the first hit.
    """

    name = "face_focus"

    def reset(self) -> None:
        pass

    def classify(self, snapshot: FaceSnapshot) -> ClassificationResult:
        result, _ = self.table.evaluate(snapshot)
        if result.votes:
            logger.debug("Face votes: %s -> %s", result.votes, result.label)
        return result
