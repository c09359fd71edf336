"""
Constraint definitions for stump mining
Checked against candidate DFS codes during the search
"""

from abc import ABC, abstractmethod
from typing import Hashable, Iterable, List

from .dfs_code import DFSCode, min_dfs_code
from .graph import Graph


class Constraint(ABC):
    """Base class for all constraints"""

    def __init__(self, name: str, constraint_type: str):
        self.name = name
        self.type = constraint_type  # antimonotone or loose
        self.check_count = 0
        self.prune_count = 0

    @abstractmethod
    def check(self, code: DFSCode) -> bool:
        """Check if pattern satisfies constraint"""
        pass

    def get_stats(self):
        return {
            'name': self.name,
            'checks': self.check_count,
            'prunes': self.prune_count,
            'prune_rate': self.prune_count / max(self.check_count, 1)
        }


class MaxEdgesConstraint(Constraint):
    """Anti-monotone: Maximum pattern size in edges"""

    def __init__(self, max_edges: int):
        super().__init__(f"MaxEdges({max_edges})", "antimonotone")
        self.max_edges = max_edges

    def check(self, code: DFSCode) -> bool:
        self.check_count += 1
        result = len(code) <= self.max_edges
        if not result:
            self.prune_count += 1
        return result

    def can_grow(self, code: DFSCode) -> bool:
        """Whether one more edge still fits"""
        return len(code) < self.max_edges


class ForbiddenLabelConstraint(Constraint):
    """Anti-monotone: Pattern must not contain specific vertex label"""

    def __init__(self, label: Hashable, label_name: str = None):
        name = f"Forbidden({label_name or label})"
        super().__init__(name, "antimonotone")
        self.label = label
        self.label_name = label_name

    def check(self, code: DFSCode) -> bool:
        self.check_count += 1
        result = self.label not in code.vertex_labels()
        if not result:
            self.prune_count += 1
        return result


class ExcludedPatternConstraint(Constraint):
    """
    Loose: Pattern must not be isomorphic to an excluded pattern

    Super-patterns of an excluded pattern stay reachable, so failing
    patterns are not reported but are still extended.
    """

    def __init__(self, patterns: Iterable[Graph]):
        patterns = list(patterns)
        super().__init__(f"Excluded({len(patterns)})", "loose")
        # Mined patterns are connected, a disconnected one can never match
        self.codes = {min_dfs_code(p) for p in patterns
                      if p.edge_count > 0 and p.is_connected()}

    def check(self, code: DFSCode) -> bool:
        self.check_count += 1
        result = code not in self.codes
        if not result:
            self.prune_count += 1
        return result


class ConstraintManager:
    """Manages multiple constraints and optimizes checking order"""

    def __init__(self, constraints: List[Constraint]):
        self.constraints = constraints
        self.antimonotone = [c for c in constraints if c.type == "antimonotone"]
        self.loose = [c for c in constraints if c.type == "loose"]

        # Order antimonotone by estimated cost
        self.antimonotone.sort(key=lambda c: self._estimate_cost(c))

    def _estimate_cost(self, constraint: Constraint) -> int:
        """Estimate computational cost"""
        cost_map = {
            'MaxEdges': 1,
            'Forbidden': 2
        }

        for key in cost_map:
            if constraint.name.startswith(key):
                return cost_map[key]
        return 100

    def check_antimonotone(self, code: DFSCode) -> bool:
        """Failing patterns and all their extensions are pruned"""
        for constraint in self.antimonotone:
            if not constraint.check(code):
                return False
        return True

    def check_reportable(self, code: DFSCode) -> bool:
        """Failing patterns are kept out of the results only"""
        for constraint in self.loose:
            if not constraint.check(code):
                return False
        return True

    def get_all_stats(self):
        """Get statistics for all constraints"""
        return [c.get_stats() for c in self.constraints]
