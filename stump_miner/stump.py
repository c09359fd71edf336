"""
Decision stumps keyed on subgraph patterns, the boosting gain they are
ranked by, and the bounded best-K structure used during the search
"""

import heapq
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from .dfs_code import DFSCode
from .graph import Graph
from .isomorphism import embeds, is_isomorphic


def stump_gain(pos_weight: float, neg_weight: float, total_margin: float,
               zero_one_representation: bool = False) -> Tuple[float, int]:
    """
    Gain and class value of the best stump for a support set

    pos_weight / neg_weight: summed weights of positive / negative
    graphs containing the pattern; total_margin: sum of u_i * y_i over
    all labeled graphs.

    h(x) = w if pattern in x else -w:   gain = |2 (pos - neg) - total|
    h(x) = w if pattern in x else 0:    gain = |pos - neg|
    """
    if zero_one_representation:
        margin = pos_weight - neg_weight
    else:
        margin = 2.0 * (pos_weight - neg_weight) - total_margin
    class_value = 1 if margin >= 0 else -1
    return abs(margin), class_value


def gain_upper_bound(pos_weight: float, neg_weight: float, total_margin: float,
                     zero_one_representation: bool = False) -> float:
    """
    Upper bound on the gain of any super-pattern

    Super-patterns are contained in a subset of the graphs, so the best
    case keeps only the positive (or only the negative) ones.
    """
    if zero_one_representation:
        return max(pos_weight, neg_weight)
    return max(2.0 * pos_weight - total_margin, 2.0 * neg_weight + total_margin)


@dataclass(frozen=True, eq=False)
class DecisionStump:
    """Weak classifier: presence of a subgraph pattern"""
    pattern: Graph
    code: DFSCode
    class_value: int
    gain: float
    support: int
    weighted_support: float = 0.0
    upper_bound: float = 0.0
    unlabeled_support: int = 0
    zero_one_representation: bool = False

    def classify(self, graph: Graph) -> int:
        if embeds(self.pattern, graph):
            return self.class_value
        if self.zero_one_representation:
            return 0
        return -self.class_value

    def same_pattern(self, other: 'DecisionStump') -> bool:
        if self.code == other.code:
            return True
        return is_isomorphic(self.pattern, other.pattern)

    def __repr__(self):
        return (f"DecisionStump(gain={self.gain:.4f}, class={self.class_value:+d}, "
                f"sup={self.support}, pattern={self.pattern.describe()})")


class TopKStumps:
    """
    Best-K stumps seen so far

    Ranked by gain, then support, then insertion order (earlier wins).
    The heap root is the current k-th best.
    """

    def __init__(self, k: int):
        self.k = k
        self._heap: List[Tuple[float, int, int, DecisionStump]] = []
        self._seq = 0

    def offer(self, stump: DecisionStump) -> bool:
        """Insert stump if it ranks among the best K"""
        entry = (stump.gain, stump.support, -self._seq, stump)
        self._seq += 1

        if len(self._heap) < self.k:
            heapq.heappush(self._heap, entry)
            return True
        if entry[:3] > self._heap[0][:3]:
            heapq.heapreplace(self._heap, entry)
            return True
        return False

    def is_full(self) -> bool:
        return len(self._heap) >= self.k

    def threshold(self) -> Tuple[float, int]:
        """(gain, support) of the k-th best stump"""
        worst = self._heap[0]
        return worst[0], worst[1]

    def can_improve(self, gain_bound: float, support: int) -> bool:
        """
        Whether a stump with gain <= gain_bound and support <= support,
        inserted later, could still enter the best K
        """
        if not self.is_full():
            return True
        return (gain_bound, support) > self.threshold()

    def ordered(self) -> List[DecisionStump]:
        """Stumps, best first"""
        return [entry[3] for entry in sorted(self._heap, key=lambda e: e[:3], reverse=True)]

    def __len__(self):
        return len(self._heap)


def merge_stump_sets(set1: Sequence[DecisionStump],
                     set2: Sequence[DecisionStump]) -> List[DecisionStump]:
    """Union of two stump sets without isomorphic duplicates"""
    merged = list(set1)
    for stump in set2:
        if not any(stump.same_pattern(existing) for existing in merged):
            merged.append(stump)
    return merged
