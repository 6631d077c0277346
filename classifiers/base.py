from typing import List

from landmark_types import ClassificationResult, Snapshot
from rules import RuleTable


class ClassifierBase:
    name = "base"

    def __init__(self, table: RuleTable):
        self.table = table

    @property
    def consulted_paths(self) -> List[str]:
        return self.table.paths

    def classify(self, snapshot: Snapshot) -> ClassificationResult:
        raise NotImplementedError

    def reset(self) -> None:
        raise NotImplementedError
