from classifiers.base import ClassifierBase
from classifiers.face import FOCUSED, NOT_FOCUSED, FaceFocusClassifier
from classifiers.pose import PHONE_PENDING_LABEL, PoseActivityClassifier

__all__ = [
    "ClassifierBase",
    "FaceFocusClassifier",
    "PoseActivityClassifier",
    "FOCUSED",
    "NOT_FOCUSED",
    "PHONE_PENDING_LABEL",
]
