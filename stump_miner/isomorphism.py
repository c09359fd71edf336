"""
Subgraph isomorphism oracle
Backtracking search with label and degree pruning, plus the extendable
embeddings the pattern search grows one edge at a time
"""

from typing import Iterator, List, Optional, Tuple

from .graph import Graph


class Embedding:
    """
    Match of a pattern into one database graph

    `nodes[i]` is the graph vertex matched to DFS id i, `edges` the
    graph edges covered so far. Extending returns a new embedding; the
    parent is never modified, so sibling extensions can share it.
    """
    __slots__ = ('gid', 'nodes', 'edges')

    def __init__(self, gid: int, nodes: Tuple[int, ...], edges: frozenset):
        self.gid = gid
        self.nodes = nodes
        self.edges = edges

    def extend_forward(self, vertex: int, eidx: int) -> 'Embedding':
        return Embedding(self.gid, self.nodes + (vertex,), self.edges | {eidx})

    def extend_backward(self, eidx: int) -> 'Embedding':
        return Embedding(self.gid, self.nodes, self.edges | {eidx})

    def __repr__(self):
        return f"Embedding(g={self.gid}, nodes={self.nodes})"


def embeds(pattern: Graph, target: Graph) -> bool:
    """Check if pattern is a subgraph of target"""
    return next(iter_embeddings(pattern, target), None) is not None


def count_embeddings(pattern: Graph, target: Graph) -> int:
    return sum(1 for _ in iter_embeddings(pattern, target))


def is_isomorphic(a: Graph, b: Graph) -> bool:
    if a.node_count != b.node_count or a.edge_count != b.edge_count:
        return False
    return embeds(a, b)


def iter_embeddings(pattern: Graph, target: Graph) -> Iterator[List[int]]:
    """
    Yield every embedding of pattern into target as a list mapping
    pattern vertex -> target vertex. Vertex and edge labels must match
    and distinct pattern vertices map to distinct target vertices.
    """
    n = pattern.node_count
    if n == 0:
        yield []
        return

    if not _may_embed(pattern, target):
        return

    order, anchors, back_edges = _match_order(pattern)
    mapping = [-1] * n
    used = [False] * target.node_count

    def candidates(pos: int):
        anchor = anchors[pos]
        if anchor is None:
            return range(target.node_count)
        return (v for v, _ in target.neighbors(mapping[anchor]))

    def feasible(pv: int, tv: int, pos: int) -> bool:
        if used[tv]:
            return False
        if target.vertices[tv].label != pattern.vertices[pv].label:
            return False
        if target.degree(tv) < pattern.degree(pv):
            return False
        for other, elabel in back_edges[pos]:
            eidx = target.edge_between(tv, mapping[other])
            if eidx is None or target.edges[eidx].elabel != elabel:
                return False
        return True

    def backtrack(pos: int):
        if pos == n:
            yield list(mapping)
            return

        pv = order[pos]
        for tv in candidates(pos):
            if not feasible(pv, tv, pos):
                continue
            mapping[pv] = tv
            used[tv] = True
            yield from backtrack(pos + 1)
            used[tv] = False
            mapping[pv] = -1

    yield from backtrack(0)


def _may_embed(pattern: Graph, target: Graph) -> bool:
    """Quick count checks before backtracking"""
    if pattern.node_count > target.node_count or pattern.edge_count > target.edge_count:
        return False

    target_counts = target.label_counts()
    for label, count in pattern.label_counts().items():
        if target_counts.get(label, 0) < count:
            return False

    return True


def _match_order(pattern: Graph):
    """
    Order pattern vertices so that each one (after the first of its
    component) is adjacent to an earlier one. Most constrained first:
    more links into the ordered set, then higher degree, then lower id.

    Returns (order, anchors, back_edges) indexed by position: the
    earlier neighbor used to generate candidates and every edge
    (earlier vertex, edge label) that must be present in the target.
    """
    n = pattern.node_count
    placed = [False] * n
    links = [0] * n
    order: List[int] = []
    anchors: List[Optional[int]] = []
    back_edges: List[List[Tuple[int, object]]] = []

    while len(order) < n:
        best = None
        for v in range(n):
            if placed[v]:
                continue
            key = (links[v], pattern.degree(v), -v)
            if best is None or key > best[0]:
                best = (key, v)
        v = best[1]

        earlier = [(u, pattern.edges[eidx].elabel)
                   for u, eidx in pattern.neighbors(v) if placed[u]]
        order.append(v)
        anchors.append(earlier[0][0] if earlier else None)
        back_edges.append(earlier)

        placed[v] = True
        for u, _ in pattern.neighbors(v):
            links[u] += 1

    return order, anchors, back_edges
