"""
Max-gain decision stump mining
gSpan enumeration with branch-and-bound on the boosting gain
(gBoost-style), embedding reuse and remine checkpoints
"""

import time
from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from .constraints import (Constraint, ConstraintManager, ExcludedPatternConstraint,
                          MaxEdgesConstraint)
from .dfs_code import DFSCode, DFSEdge
from .evaluation import verify_support
from .exceptions import ConsistencyViolation, InvalidInputError
from .graph import Graph, NamedGraph
from .isomorphism import Embedding
from .stump import DecisionStump, TopKStumps, gain_upper_bound, stump_gain

DEFAULT_MAX_SIZE = 8


class SearchNode:
    """
    Node of the explored pattern tree

    `gids` are the database positions containing the pattern. Until a
    node is expanded it keeps its embeddings (`projected`), so a later
    remine can grow it without searching the graphs again.
    """
    __slots__ = ('code', 'gids', 'projected', 'children', 'terminal')

    def __init__(self, code: DFSCode, gids: Tuple[int, ...],
                 projected: List[Embedding], terminal: bool):
        self.code = code
        self.gids = gids
        self.projected = projected
        self.children: Optional[List['SearchNode']] = None
        self.terminal = terminal

    @property
    def expanded(self) -> bool:
        return self.children is not None

    def __repr__(self):
        return f"SearchNode({self.code}, sup={len(self.gids)})"


class SearchCheckpoint:
    """Explored search tree of the last run, keyed by its structural inputs"""

    def __init__(self, fingerprint: tuple, roots: List[SearchNode]):
        self.fingerprint = fingerprint
        self.roots = roots


class StumpMiner:
    """
    Finds the k decision stumps with the largest boosting gain

    gain(t) = |2 * sum_{i: t in x_i} u_i y_i - sum_i u_i y_i|
    Any super-pattern of t has gain at most
        max(2 * sum_{i: t in x_i, y_i=+1} u_i - sum_i u_i y_i,
            2 * sum_{i: t in x_i, y_i=-1} u_i + sum_i u_i y_i)
    and its subtree is skipped when that cannot beat the k-th best.
    """

    def __init__(self,
                 verbose: bool = False,
                 zero_one_representation: bool = False,
                 constraints: List[Constraint] = None,
                 verify_support: bool = True,
                 time_limit: float = None,
                 save_checkpoint: bool = True):

        self.verbose = verbose
        self.zero_one_representation = zero_one_representation
        self.constraints = list(constraints or [])
        self.verify_support = verify_support
        self.time_limit = time_limit
        self.save_checkpoint = save_checkpoint

        self.checkpoint: Optional[SearchCheckpoint] = None
        self.stats: Dict[str, float] = {}
        self._reset_stats()

    def _reset_stats(self):
        self.stats = {
            'candidates_generated': 0,
            'non_minimal_pruned': 0,
            'support_pruned': 0,
            'constraint_pruned': 0,
            'weighted_support_pruned': 0,
            'bound_pruned': 0,
            'excluded': 0,
            'stumps_recorded': 0,
            'runtime': 0,
            'timed_out': False,
            'remined': False
        }

    def mine(self,
             graphs: Sequence[NamedGraph],
             excluded_patterns: Sequence[Graph] = None,
             min_support: int = 0,
             min_weighted_support: float = 0.0,
             k: int = 1,
             max_size: int = DEFAULT_MAX_SIZE,
             remine: bool = False,
             unlabeled_graphs: Sequence[Graph] = None) -> List[DecisionStump]:
        """
        Mine the best k stumps, best first

        Args:
            graphs: labeled training graphs (value +1/-1, weight >= 0)
            excluded_patterns: patterns already in the ensemble
            min_support: minimum number of graphs (labeled + unlabeled)
            min_weighted_support: minimum summed weight of labeled graphs
            k: number of stumps to return
            max_size: maximum number of pattern edges
            remine: continue from the checkpoint of the previous run
            unlabeled_graphs: extra graphs counted for support only

        Raises:
            InvalidInputError: before searching, on bad parameters
            ConsistencyViolation: if a stump's support does not
                match independent isomorphism tests
        """
        graphs = list(graphs)
        unlabeled = list(unlabeled_graphs or [])
        self._validate(graphs, unlabeled, min_support, min_weighted_support, k, max_size)
        self._reset_stats()

        for g in graphs + unlabeled:
            g.freeze()

        self._database: List[Graph] = graphs + unlabeled
        self._n_labeled = len(graphs)
        self._labels = np.array([g.value for g in graphs], dtype=float)
        self._weights = np.array([g.weight for g in graphs], dtype=float)
        self._total_margin = float(np.dot(self._weights, self._labels))
        self._recoder = graphs[0].recoder
        self._min_support = min_support
        self._min_weighted_support = min_weighted_support
        self._max_edges = MaxEdgesConstraint(max_size)
        self._constraint_manager = ConstraintManager(
            self.constraints + [self._max_edges,
                                ExcludedPatternConstraint(excluded_patterns or [])])
        self._best = TopKStumps(k)

        if self.verbose:
            self._print_init(k, max_size, remine)

        start_time = time.time()
        self._deadline = start_time + self.time_limit if self.time_limit is not None else None

        fingerprint = (tuple(id(g) for g in self._database), self._n_labeled,
                       min_support, max_size, tuple(id(c) for c in self.constraints))
        if remine and self.checkpoint is not None and self.checkpoint.fingerprint == fingerprint:
            roots = self.checkpoint.roots
            self.stats['remined'] = True
        else:
            roots = self._find_frequent_1edge_patterns()

        if self.verbose:
            source = "checkpoint" if self.stats['remined'] else "database"
            print(f"Searching from {len(roots)} frequent 1-edge patterns ({source})\n")

        for root in roots:
            self._search(root)

        stumps = self._best.ordered()
        self.stats['runtime'] = time.time() - start_time

        if self.verify_support:
            try:
                for stump in stumps:
                    verify_support(stump, graphs)
                    if unlabeled:
                        verify_support(stump, unlabeled, reported=stump.unlabeled_support)
            except ConsistencyViolation:
                # The explored tree is as untrusted as the stumps
                self.checkpoint = None
                raise

        if self.save_checkpoint:
            self.checkpoint = SearchCheckpoint(fingerprint, roots)

        if self.verbose:
            self._print_results(stumps)

        return stumps

    def _validate(self, graphs, unlabeled, min_support, min_weighted_support, k, max_size):
        if not graphs:
            raise InvalidInputError("No training graphs given")
        if k < 1:
            raise InvalidInputError(f"k must be at least 1, got {k}")
        if min_support < 0:
            raise InvalidInputError(f"min_support must be non-negative, got {min_support}")
        if min_weighted_support < 0:
            raise InvalidInputError(
                f"min_weighted_support must be non-negative, got {min_weighted_support}")
        if max_size < 1:
            raise InvalidInputError(f"max_size must be at least 1, got {max_size}")

        for g in graphs:
            value = getattr(g, 'value', None)
            if value not in (1, -1):
                raise InvalidInputError(f"{g!r} needs a class value of +1 or -1, got {value}")
            if getattr(g, 'weight', -1.0) < 0:
                raise InvalidInputError(f"{g!r} needs a non-negative weight")

        recoder = graphs[0].recoder
        for g in graphs + unlabeled:
            if g.recoder is not recoder:
                raise InvalidInputError(f"{g!r} uses a different node type recoder")

    def _find_frequent_1edge_patterns(self) -> List[SearchNode]:
        """
        Find all frequent single-edge patterns
        This is the base case for gSpan
        """
        projected = defaultdict(list)  # DFSEdge -> embeddings

        for gid, graph in enumerate(self._database):
            for eidx, edge in enumerate(graph.edges):
                for u, v in ((edge.frm, edge.to), (edge.to, edge.frm)):
                    from_label = graph.vertices[u].label
                    to_label = graph.vertices[v].label
                    # Minimal codes start at the smaller label
                    if from_label > to_label:
                        continue
                    dfs_edge = DFSEdge(0, 1, from_label, edge.elabel, to_label)
                    projected[dfs_edge].append(Embedding(gid, (u, v), frozenset((eidx,))))

        roots = []
        for dfs_edge in sorted(projected, key=lambda e: (e.from_label, e.edge_label, e.to_label)):
            node = self._make_node(DFSCode([dfs_edge]), projected[dfs_edge])
            if node is not None:
                roots.append(node)

        return roots

    def _make_node(self, code: DFSCode, projected: List[Embedding],
                   check_min: bool = False) -> Optional[SearchNode]:
        """Child node if the pattern is frequent, allowed and canonical"""
        self.stats['candidates_generated'] += 1

        gids = self._project_support(projected)
        if len(gids) < self._min_support:
            self.stats['support_pruned'] += 1
            return None

        if not self._constraint_manager.check_antimonotone(code):
            self.stats['constraint_pruned'] += 1
            return None

        if check_min and not code.is_min():
            self.stats['non_minimal_pruned'] += 1
            return None

        return SearchNode(code, gids, projected, terminal=not self._max_edges.can_grow(code))

    def _project_support(self, projected: List[Embedding]) -> Tuple[int, ...]:
        """Database positions with at least one embedding"""
        return tuple(sorted({emb.gid for emb in projected}))

    def _search(self, node: SearchNode):
        """
        Score a pattern, then grow it unless its subtree is pruned
        """
        if self._deadline is not None and time.time() > self._deadline:
            self.stats['timed_out'] = True
            return

        labeled = [gid for gid in node.gids if gid < self._n_labeled]
        idx = np.array(labeled, dtype=int)
        weights = self._weights[idx]
        labels = self._labels[idx]
        pos_weight = float(weights[labels > 0].sum())
        neg_weight = float(weights[labels < 0].sum())
        weighted_support = pos_weight + neg_weight

        if weighted_support < self._min_weighted_support:
            self.stats['weighted_support_pruned'] += 1
            return

        gain, class_value = stump_gain(pos_weight, neg_weight, self._total_margin,
                                       self.zero_one_representation)
        bound = gain_upper_bound(pos_weight, neg_weight, self._total_margin,
                                 self.zero_one_representation)

        if labeled:
            if self._constraint_manager.check_reportable(node.code):
                stump = self._make_stump(node, class_value, gain, len(labeled),
                                         weighted_support, bound)
                if self._best.offer(stump):
                    self.stats['stumps_recorded'] += 1
            else:
                self.stats['excluded'] += 1

        if node.terminal:
            return

        if not self._best.can_improve(bound, len(labeled)):
            self.stats['bound_pruned'] += 1
            return

        for child in self._expand(node):
            self._search(child)

    def _make_stump(self, node: SearchNode, class_value: int, gain: float,
                    support: int, weighted_support: float, bound: float) -> DecisionStump:
        pattern = node.code.to_graph(recoder=self._recoder).freeze()
        assert pattern.is_connected(), f"disconnected candidate {node.code}"

        return DecisionStump(
            pattern=pattern,
            code=node.code,
            class_value=class_value,
            gain=gain,
            support=support,
            weighted_support=weighted_support,
            upper_bound=bound,
            unlabeled_support=len(node.gids) - support,
            zero_one_representation=self.zero_one_representation
        )

    def _expand(self, node: SearchNode) -> List[SearchNode]:
        """Children of node, from the checkpoint or by rightmost extension"""
        if node.expanded:
            return node.children

        children = []
        for dfs_edge, projected in self._generate_extensions(node.code, node.projected):
            child = self._make_node(node.code.extended(dfs_edge), projected, check_min=True)
            if child is not None:
                children.append(child)

        node.projected = None
        if self.save_checkpoint:
            node.children = children
        return children

    def _generate_extensions(self, code: DFSCode,
                             projected: List[Embedding]) -> List[Tuple[DFSEdge, List[Embedding]]]:
        """
        Grow every embedding by one edge on the rightmost path
        Backward edges from the rightmost vertex, forward edges from any
        rightmost-path vertex; returned in DFS code order
        """
        rmpath = code.rightmost_path()
        rightmost = rmpath[0]
        new_id = code.num_vertices()
        vlabels = code.vertex_labels()
        min_label = code[0].from_label

        backward = defaultdict(list)
        forward = defaultdict(list)

        for emb in projected:
            graph = self._database[emb.gid]
            rm_vertex = emb.nodes[rightmost]

            for target in rmpath[1:]:
                eidx = graph.edge_between(rm_vertex, emb.nodes[target])
                if eidx is None or eidx in emb.edges:
                    continue
                dfs_edge = DFSEdge(rightmost, target, vlabels[rightmost],
                                   graph.edges[eidx].elabel, vlabels[target])
                backward[dfs_edge].append(emb.extend_backward(eidx))

            mapped = set(emb.nodes)
            for src in rmpath:
                for nb, eidx in graph.neighbors(emb.nodes[src]):
                    if nb in mapped:
                        continue
                    nb_label = graph.vertices[nb].label
                    # A vertex below the first label makes the code non-minimal
                    if nb_label < min_label:
                        continue
                    dfs_edge = DFSEdge(src, new_id, vlabels[src],
                                       graph.edges[eidx].elabel, nb_label)
                    forward[dfs_edge].append(emb.extend_forward(nb, eidx))

        extensions = [(e, backward[e]) for e in
                      sorted(backward, key=lambda e: (e.to, e.edge_label))]
        extensions += [(e, forward[e]) for e in
                       sorted(forward, key=lambda e: (-e.frm, e.edge_label, e.to_label))]
        return extensions

    def _print_init(self, k: int, max_size: int, remine: bool):
        """Print initialization"""
        n_unlabeled = len(self._database) - self._n_labeled
        n_pos = int((self._labels > 0).sum())
        print(f"\n{'='*70}")
        print(f"{'MAX-GAIN STUMP MINING':^70}")
        print(f"{'='*70}")
        print(f"  Training graphs: {self._n_labeled} ({n_pos} positive)")
        if n_unlabeled:
            print(f"  Unlabeled graphs: {n_unlabeled}")
        print(f"  Min support: {self._min_support}")
        print(f"  Min weighted support: {self._min_weighted_support:.4f}")
        print(f"  Stumps (k): {k}")
        print(f"  Max pattern size: {max_size} edges")
        print(f"  Remine requested: {remine}")
        print(f"  Constraints: {len(self._constraint_manager.constraints)}")
        print(f"{'='*70}\n")

    def _print_results(self, stumps: List[DecisionStump]):
        """Print mining results"""
        print(f"\n{'='*70}")
        print(f"{'STUMP MINING COMPLETE':^70}")
        print(f"{'='*70}")

        print(f"\nResults:")
        print(f"  Stumps: {len(stumps)}")
        print(f"  Runtime: {self.stats['runtime']:.2f}s")
        if self.stats['timed_out']:
            print(f"  Time limit reached, results are best effort")

        print(f"\nStatistics:")
        print(f"  Candidates generated: {self.stats['candidates_generated']:,}")
        print(f"  Non-minimal pruned: {self.stats['non_minimal_pruned']:,}")
        print(f"  Support pruned: {self.stats['support_pruned']:,}")
        print(f"  Weighted support pruned: {self.stats['weighted_support_pruned']:,}")
        print(f"  Constraint pruned: {self.stats['constraint_pruned']:,}")
        print(f"  Gain bound pruned: {self.stats['bound_pruned']:,}")
        print(f"  Excluded patterns skipped: {self.stats['excluded']:,}")

        print(f"\nTop Stumps:")
        for i, stump in enumerate(stumps[:10], 1):
            print(f"  {i:2d}. Gain={stump.gain:.4f}, Class={stump.class_value:+d}, "
                  f"Support={stump.support}, Edges={stump.pattern.edge_count}, "
                  f"Pattern={stump.pattern.describe()}")

        print(f"\n{'='*70}\n")


def mine_supervised(graphs: Sequence[NamedGraph],
                    excluded_patterns: Sequence[Graph] = None,
                    min_support: int = 0,
                    min_weighted_support: float = 0.0,
                    k: int = 1,
                    max_size: int = DEFAULT_MAX_SIZE,
                    remine: bool = False,
                    miner: StumpMiner = None,
                    **miner_kwargs) -> List[DecisionStump]:
    """
    Best k stumps over labeled graphs

    Pass the same `miner` between boosting rounds to use `remine`.
    """
    miner = miner or StumpMiner(**miner_kwargs)
    return miner.mine(graphs, excluded_patterns, min_support, min_weighted_support,
                      k, max_size, remine)


def mine_semi_supervised(train_graphs: Sequence[NamedGraph],
                         unlabeled_graphs: Sequence[Graph],
                         excluded_patterns: Sequence[Graph] = None,
                         min_support: int = 0,
                         weighted_support_threshold: float = 0.0,
                         k: int = 1,
                         max_size: int = DEFAULT_MAX_SIZE,
                         remine: bool = False,
                         miner: StumpMiner = None,
                         **miner_kwargs) -> List[DecisionStump]:
    """
    Best k stumps where unlabeled graphs count towards min_support

    Gain and `stump.support` use the labeled graphs only; matches in
    unlabeled graphs are reported as `stump.unlabeled_support`.
    """
    miner = miner or StumpMiner(**miner_kwargs)
    return miner.mine(train_graphs, excluded_patterns, min_support, weighted_support_threshold,
                      k, max_size, remine, unlabeled_graphs=unlabeled_graphs)


class MinerPresets:
    """Predefined keyword sets for mine_supervised / mine_semi_supervised"""

    @staticmethod
    def quick() -> Dict:
        """Few small stumps, for boosting rounds on large datasets"""
        return {'k': 5, 'max_size': 4}

    @staticmethod
    def default() -> Dict:
        return {'k': 15, 'max_size': DEFAULT_MAX_SIZE}

    @staticmethod
    def exhaustive() -> Dict:
        return {'k': 50, 'max_size': 12}
