"""
Stump evaluation: classification, support re-verification and reports
"""

from dataclasses import dataclass
from typing import List, Sequence

import numpy as np
import pandas as pd

from .exceptions import ConsistencyViolation
from .graph import Graph, NamedGraph
from .isomorphism import embeds
from .stump import DecisionStump


@dataclass
class StumpEvaluation:
    stump: DecisionStump
    correct: int
    total: int
    observed_support: int

    @property
    def accuracy(self) -> float:
        return self.correct / self.total if self.total else 0.0

    @property
    def symmetric_accuracy(self) -> float:
        """Accuracy of the better of the stump and its negation"""
        return max(self.accuracy, 1.0 - self.accuracy) if self.total else 0.0


def classify(stump: DecisionStump, graph: Graph) -> int:
    """Stump output for one graph: class value, its negation, or 0"""
    return stump.classify(graph)


def classify_all(stumps: Sequence[DecisionStump], graphs: Sequence[Graph]) -> np.ndarray:
    """Feature matrix of stump outputs, one row per graph"""
    result = np.zeros((len(graphs), len(stumps)))
    for j, stump in enumerate(stumps):
        for i, graph in enumerate(graphs):
            result[i, j] = stump.classify(graph)
    return result


def observed_support(stump: DecisionStump, graphs: Sequence[Graph]) -> int:
    """Number of graphs the stump pattern embeds into"""
    return sum(1 for graph in graphs if embeds(stump.pattern, graph))


def verify_support(stump: DecisionStump, graphs: Sequence[Graph], reported: int = None) -> int:
    """
    Recount the support of a stump with the isomorphism oracle

    Raises ConsistencyViolation when the count differs from the reported
    support (stump.support unless given); returns the count otherwise.
    """
    if reported is None:
        reported = stump.support
    observed = observed_support(stump, graphs)
    if observed != reported:
        raise ConsistencyViolation(stump, reported, observed)
    return observed


def evaluate_stump(stump: DecisionStump, graphs: Sequence[NamedGraph],
                   check_support: bool = False) -> StumpEvaluation:
    """
    Accuracy of one stump on labeled graphs

    With check_support, graphs must be the training set the stump was
    mined from and the observed support must match.
    """
    correct = 0
    support = 0
    for graph in graphs:
        present = embeds(stump.pattern, graph)
        if present:
            support += 1
            predict = stump.class_value
        elif stump.zero_one_representation:
            predict = -1
        else:
            predict = -stump.class_value

        if predict == graph.value:
            correct += 1

    if check_support and support != stump.support:
        raise ConsistencyViolation(stump, stump.support, support)

    return StumpEvaluation(stump, correct, len(graphs), support)


def evaluate(stumps: Sequence[DecisionStump], graphs: Sequence[NamedGraph],
             check_support: bool = True, sort_by_accuracy: bool = False) -> pd.DataFrame:
    """
    Per-stump accuracy and re-verified support as a table

    Rows follow the stump order (Rank) unless sort_by_accuracy, which
    orders them by symmetric accuracy, best first.
    """
    rows: List[dict] = []
    for i, stump in enumerate(stumps, 1):
        result = evaluate_stump(stump, graphs, check_support=check_support)
        rows.append({
            'Rank': i,
            'Pattern': stump.pattern.describe(),
            'Edges': stump.pattern.edge_count,
            'Class': stump.class_value,
            'Gain': stump.gain,
            'Support': stump.support,
            'Observed Support': result.observed_support,
            'Correct': result.correct,
            'Total': result.total,
            'Accuracy': result.accuracy,
            'Symmetric Accuracy': result.symmetric_accuracy
        })

    columns = ['Rank', 'Pattern', 'Edges', 'Class', 'Gain', 'Support',
               'Observed Support', 'Correct', 'Total', 'Accuracy', 'Symmetric Accuracy']
    report = pd.DataFrame(rows, columns=columns)
    if sort_by_accuracy:
        report = report.sort_values('Symmetric Accuracy', ascending=False,
                                    kind='stable').reset_index(drop=True)
    return report
