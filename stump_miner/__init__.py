"""
Discriminative Subgraph Stump Mining Package
Decision stumps for boosting-based graph classification
"""

__version__ = "1.0.0"

from .graph import Graph, NamedGraph, Vertex, Edge, Recoder, set_weights
from .dfs_code import DFSCode, DFSEdge, min_dfs_code
from .isomorphism import Embedding, embeds, count_embeddings, is_isomorphic, iter_embeddings
from .constraints import (
    Constraint, MaxEdgesConstraint, ForbiddenLabelConstraint,
    ExcludedPatternConstraint, ConstraintManager
)
from .stump import DecisionStump, TopKStumps, merge_stump_sets
from .evaluation import (
    StumpEvaluation, classify, classify_all, verify_support,
    evaluate_stump, evaluate
)
from .miner import StumpMiner, MinerPresets, mine_supervised, mine_semi_supervised
from .exceptions import MinerError, InvalidInputError, ConsistencyViolation

__all__ = [
    'Graph', 'NamedGraph', 'Vertex', 'Edge', 'Recoder', 'set_weights',
    'DFSCode', 'DFSEdge', 'min_dfs_code',
    'Embedding', 'embeds', 'count_embeddings', 'is_isomorphic', 'iter_embeddings',
    'Constraint', 'MaxEdgesConstraint', 'ForbiddenLabelConstraint',
    'ExcludedPatternConstraint', 'ConstraintManager',
    'DecisionStump', 'TopKStumps', 'merge_stump_sets',
    'StumpEvaluation', 'classify', 'classify_all', 'verify_support',
    'evaluate_stump', 'evaluate',
    'StumpMiner', 'MinerPresets', 'mine_supervised', 'mine_semi_supervised',
    'MinerError', 'InvalidInputError', 'ConsistencyViolation'
]
