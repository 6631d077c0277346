import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from geometry import resolve_coordinate
from landmark_types import ClassificationResult, Snapshot

FIRST_MATCH = "first_match"
MAJORITY_VOTE = "majority_vote"
POLICIES = (FIRST_MATCH, MAJORITY_VOTE)

_BOUND_COUNTS = {
    "lt": 1,
    "le": 1,
    "gt": 1,
    "ge": 1,
    "between": 2,
    "outside": 2,
}


@dataclass(frozen=True)
class Threshold:
    path: str
    comparator: str
    bounds: Tuple[float, ...]

    def __post_init__(self):
        expected = _BOUND_COUNTS.get(self.comparator)
        if expected is None:
            raise ValueError(f"Unknown comparator: {self.comparator}")
        if len(self.bounds) != expected:
            raise ValueError(f"{self.comparator} takes {expected} bound(s), got {len(self.bounds)}")

    def compare(self, value: float) -> bool:
        # Coordinates are compared as whole pixels.
        v = math.floor(value)
        if self.comparator == "lt":
            return v < self.bounds[0]
        if self.comparator == "le":
            return v <= self.bounds[0]
        if self.comparator == "gt":
            return v > self.bounds[0]
        if self.comparator == "ge":
            return v >= self.bounds[0]
        lower, upper = self.bounds
        inside = lower < v < upper
        if self.comparator == "between":
            return inside
        return not inside

    def check(self, snapshot: Snapshot, min_score: float = 0.0) -> Optional[bool]:
        value = resolve_coordinate(snapshot, self.path, min_score=min_score)
        if value is None:
            return None
        return self.compare(value)


@dataclass(frozen=True)
class ThresholdRule:
    """A labelled condition over one or more coordinates.

    ``clauses`` is in disjunctive normal form: the rule matches when every
    threshold of at least one clause holds. Evaluation is tri-state; None
    means the coordinates needed to decide were missing.
    """

    label: str
    clauses: Tuple[Tuple[Threshold, ...], ...]
    name: str = ""
    debounced: bool = False

    def evaluate(self, snapshot: Snapshot, min_score: float = 0.0) -> Optional[bool]:
        undecided = False
        for clause in self.clauses:
            results = [t.check(snapshot, min_score) for t in clause]
            if any(r is False for r in results):
                continue
            if any(r is None for r in results):
                undecided = True
                continue
            return True
        return None if undecided else False

    @property
    def paths(self) -> List[str]:
        return [t.path for clause in self.clauses for t in clause]

    @property
    def rule_name(self) -> str:
        return self.name or self.label


def rule(label: str, *thresholds: Threshold, name: str = "", debounced: bool = False) -> ThresholdRule:
    return ThresholdRule(label=label, clauses=(tuple(thresholds),), name=name, debounced=debounced)


def any_rule(label: str, *clauses: Sequence[Threshold], name: str = "") -> ThresholdRule:
    return ThresholdRule(label=label, clauses=tuple(tuple(c) for c in clauses), name=name)


class RuleTable:
    def __init__(self, rules: Sequence[ThresholdRule], policy: str, fallback_label: str):
        if policy not in POLICIES:
            raise ValueError(f"Unknown policy: {policy}")
        self.rules = list(rules)
        self.policy = policy
        self.fallback_label = fallback_label

    def with_policy(self, policy: str) -> "RuleTable":
        return RuleTable(self.rules, policy, self.fallback_label)

    @property
    def paths(self) -> List[str]:
        seen: List[str] = []
        for r in self.rules:
            for path in r.paths:
                if path not in seen:
                    seen.append(path)
        return seen

    def evaluate(self, snapshot: Snapshot, min_score: float = 0.0) -> Tuple[ClassificationResult, Optional[ThresholdRule]]:
        if self.policy == FIRST_MATCH:
            return self._first_match(snapshot, min_score)
        return self._majority_vote(snapshot, min_score)

    def _first_match(self, snapshot, min_score):
        for r in self.rules:
            if r.evaluate(snapshot, min_score) is True:
                return ClassificationResult(r.label, matched_rule=r.rule_name), r
        return ClassificationResult(self.fallback_label), None

    def _majority_vote(self, snapshot, min_score):
        votes: Dict[str, int] = {}
        for r in self.rules:
            outcome = r.evaluate(snapshot, min_score)
            if outcome is None:
                continue
            label = r.label if outcome else self.fallback_label
            votes[label] = votes.get(label, 0) + 1

        # Ties and empty ballots fall back.
        best = max(votes.values(), default=0)
        leaders = [label for label, count in votes.items() if count == best]
        winner = leaders[0] if best and len(leaders) == 1 else self.fallback_label
        return ClassificationResult(winner, votes=votes), None
