"""
DFS Code Implementation for gSpan
Canonical representation of connected labeled graphs
"""

from dataclasses import dataclass
from typing import Hashable, List, Optional, Sequence, Tuple

from .graph import Graph


@dataclass(frozen=True)
class DFSEdge:
    """
    Single edge in DFS code
    Format: (i, j, label_i, edge_label, label_j)
    where i < j for forward edges, i > j for backward edges
    """
    frm: int                  # From vertex ID in DFS tree
    to: int                   # To vertex ID in DFS tree
    from_label: Hashable      # Label of from vertex
    edge_label: Hashable      # Label of edge
    to_label: Hashable        # Label of to vertex

    @property
    def is_forward(self) -> bool:
        return self.frm < self.to

    def __repr__(self):
        direction = "→" if self.frm < self.to else "←"
        return f"({self.frm}{direction}{self.to}, {self.from_label}-{self.edge_label}-{self.to_label})"


class DFSCode:
    """
    DFS Code: sequence of edges in DFS discovery order

    Vertex ids are DFS discovery indices, so the rightmost vertex is
    always the one with the largest id.
    """

    def __init__(self, edges: Sequence[DFSEdge] = ()):
        self.edges: List[DFSEdge] = list(edges)

    def append(self, edge: DFSEdge):
        self.edges.append(edge)

    def extended(self, edge: DFSEdge) -> 'DFSCode':
        """New code with one more edge; self is left unchanged"""
        return DFSCode(self.edges + [edge])

    def __len__(self):
        return len(self.edges)

    def __getitem__(self, idx):
        return self.edges[idx]

    def __iter__(self):
        return iter(self.edges)

    def __repr__(self):
        return f"DFSCode({self.edges})"

    def __eq__(self, other):
        if not isinstance(other, DFSCode):
            return NotImplemented
        return self.edges == other.edges

    def __hash__(self):
        return hash(tuple(self.edges))

    def num_vertices(self) -> int:
        if not self.edges:
            return 0
        return max(max(e.frm, e.to) for e in self.edges) + 1

    def vertex_labels(self) -> List[Hashable]:
        """Vertex labels indexed by DFS id"""
        labels = [None] * self.num_vertices()
        for edge in self.edges:
            labels[edge.frm] = edge.from_label
            labels[edge.to] = edge.to_label
        return labels

    def rightmost_path(self) -> List[int]:
        """
        Vertices on the rightmost path, rightmost vertex first, root last
        """
        if not self.edges:
            return []

        parent = {}
        for edge in self.edges:
            if edge.is_forward:
                parent[edge.to] = edge.frm

        current = self.num_vertices() - 1
        path = [current]
        while current in parent:
            current = parent[current]
            path.append(current)

        return path

    def to_graph(self, graph_cls=Graph, **kwargs) -> Graph:
        """Convert DFS code to a graph whose vertex ids are DFS ids"""
        g = graph_cls(**kwargs)
        for vlabel in self.vertex_labels():
            g.add_vertex(vlabel)
        for edge in self.edges:
            g.add_edge(edge.frm, edge.to, edge.edge_label)
        return g

    def is_min(self) -> bool:
        """
        Check if DFS code is minimal (canonical)
        Non-minimal codes are duplicate representations of a pattern
        reached through another branch of the search
        """
        if not self.edges:
            return True
        return _build_min_code(self.to_graph(), reference=self) is not None


def min_dfs_code(graph: Graph) -> DFSCode:
    """
    Minimum DFS code of a connected graph

    Two connected graphs are isomorphic iff their minimum codes are equal.
    """
    if not graph.is_connected():
        raise ValueError(f"{graph!r} is not connected")
    return _build_min_code(graph)


# A projection maps DFS ids to graph vertices and records the graph
# edges already covered by the code.
_Projection = Tuple[Tuple[int, ...], frozenset]


def _build_min_code(graph: Graph, reference: DFSCode = None) -> Optional[DFSCode]:
    """
    Greedily grow the minimum DFS code of graph, one rightmost extension
    at a time. With a reference code, stop and return None at the first
    position where the reference is not the minimal choice.
    """
    code = DFSCode()
    if graph.edge_count == 0:
        return code

    label = lambda v: graph.vertices[v].label

    # First edge: smallest (label_i, edge_label, label_j) in any orientation
    best_key = None
    projections: List[_Projection] = []
    for eidx, e in enumerate(graph.edges):
        for u, v in ((e.frm, e.to), (e.to, e.frm)):
            key = (label(u), e.elabel, label(v))
            if best_key is None or key < best_key:
                best_key = key
                projections = [((u, v), frozenset((eidx,)))]
            elif key == best_key:
                projections.append(((u, v), frozenset((eidx,))))

    first = DFSEdge(0, 1, *best_key)
    if reference is not None and reference[0] != first:
        return None
    code.append(first)

    while len(code) < graph.edge_count:
        rmpath = code.rightmost_path()
        edge, projections = _min_backward(graph, code, rmpath, projections)
        if edge is None:
            edge, projections = _min_forward(graph, code, rmpath, projections)
        if edge is None:
            break  # disconnected remainder; callers check connectivity first

        if reference is not None and reference[len(code)] != edge:
            return None
        code.append(edge)

    return code


def _min_backward(graph: Graph, code: DFSCode, rmpath: List[int],
                  projections: List[_Projection]):
    """Smallest backward edge from the rightmost vertex (smaller target first)"""
    rm = rmpath[0]
    vlabels = code.vertex_labels()

    for target in reversed(rmpath[1:]):
        best_label = None
        matched = []
        for nodes, used in projections:
            eidx = graph.edge_between(nodes[rm], nodes[target])
            if eidx is None or eidx in used:
                continue
            elabel = graph.edges[eidx].elabel
            if best_label is None or elabel < best_label:
                best_label = elabel
                matched = [(nodes, used | {eidx})]
            elif elabel == best_label:
                matched.append((nodes, used | {eidx}))

        if matched:
            edge = DFSEdge(rm, target, vlabels[rm], best_label, vlabels[target])
            return edge, matched

    return None, projections


def _min_forward(graph: Graph, code: DFSCode, rmpath: List[int],
                 projections: List[_Projection]):
    """Smallest forward edge, trying the deepest rightmost-path vertex first"""
    new_id = code.num_vertices()
    vlabels = code.vertex_labels()

    for src in rmpath:
        best_key = None
        matched = []
        for nodes, used in projections:
            mapped = set(nodes)
            for nb, eidx in graph.neighbors(nodes[src]):
                if nb in mapped:
                    continue
                key = (graph.edges[eidx].elabel, graph.vertices[nb].label)
                if best_key is None or key < best_key:
                    best_key = key
                    matched = [(nodes + (nb,), used | {eidx})]
                elif key == best_key:
                    matched.append((nodes + (nb,), used | {eidx}))

        if matched:
            edge = DFSEdge(src, new_id, vlabels[src], best_key[0], best_key[1])
            return edge, matched

    return None, projections
