"""
Graph data structures for labeled graph classification
Node type recoding for chemical and generic graph datasets
"""

from typing import Dict, Hashable, List, Optional, Sequence, Tuple

import numpy as np


class Vertex:
    """Graph vertex with label"""
    def __init__(self, vid: int, label: Hashable):
        self.vid = vid
        self.label = label

    def __repr__(self):
        return f"V({self.vid},{self.label})"

    def __hash__(self):
        return hash((self.vid, self.label))

    def __eq__(self, other):
        return self.vid == other.vid and self.label == other.label


class Edge:
    """Undirected graph edge with label"""
    def __init__(self, frm: int, to: int, elabel: Hashable = 0):
        self.frm = frm
        self.to = to
        self.elabel = elabel

    def __repr__(self):
        return f"E({self.frm}-{self.to},{self.elabel})"

    def __hash__(self):
        return hash((min(self.frm, self.to), max(self.frm, self.to), self.elabel))

    def __eq__(self, other):
        return ((self.frm == other.frm and self.to == other.to) or
                (self.frm == other.to and self.to == other.frm)) and \
               self.elabel == other.elabel


class Graph:
    """
    Simple labeled undirected graph

    Vertex ids are consecutive positions starting at 0. Once frozen
    (the miner freezes every input graph) the graph is read-only.
    """
    def __init__(self, gid: int = 0, recoder: 'Recoder' = None):
        self.gid = gid
        self.vertices: List[Vertex] = []
        self.edges: List[Edge] = []
        self.adj: List[List[Tuple[int, int]]] = []  # vid -> [(neighbor, edge index)]
        self.recoder = recoder
        self._edge_index: Dict[Tuple[int, int], int] = {}
        self._frozen = False

    def add_vertex(self, vlabel: Hashable) -> int:
        self._check_mutable()
        vid = len(self.vertices)
        self.vertices.append(Vertex(vid, vlabel))
        self.adj.append([])
        return vid

    def add_edge(self, frm: int, to: int, elabel: Hashable = 0) -> int:
        self._check_mutable()
        n = len(self.vertices)
        if not (0 <= frm < n and 0 <= to < n):
            raise ValueError(f"Edge ({frm}, {to}) references a missing vertex")
        if frm == to:
            raise ValueError(f"Self-loop on vertex {frm} not allowed")
        key = (min(frm, to), max(frm, to))
        if key in self._edge_index:
            raise ValueError(f"Duplicate edge ({frm}, {to})")

        eidx = len(self.edges)
        self.edges.append(Edge(frm, to, elabel))
        self.adj[frm].append((to, eidx))
        self.adj[to].append((frm, eidx))
        self._edge_index[key] = eidx
        return eidx

    def freeze(self):
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _check_mutable(self):
        if self._frozen:
            raise ValueError(f"{self!r} is frozen")

    @property
    def node_count(self) -> int:
        return len(self.vertices)

    @property
    def edge_count(self) -> int:
        return len(self.edges)

    def degree(self, vid: int) -> int:
        return len(self.adj[vid])

    def neighbors(self, vid: int) -> List[Tuple[int, int]]:
        return self.adj[vid]

    def edge_between(self, u: int, v: int) -> Optional[int]:
        """Index of the edge joining u and v, or None"""
        return self._edge_index.get((min(u, v), max(u, v)))

    def node_type(self, vid: int):
        """External node type (decoded through the recoder if any)"""
        label = self.vertices[vid].label
        if self.recoder is not None:
            return self.recoder.decode(label)
        return label

    def edge_type(self, eidx: int):
        return self.edges[eidx].elabel

    def get_vertex_labels(self) -> set:
        return set(v.label for v in self.vertices)

    def get_edge_labels(self) -> set:
        return set(e.elabel for e in self.edges)

    def label_counts(self) -> Dict[Hashable, int]:
        counts: Dict[Hashable, int] = {}
        for v in self.vertices:
            counts[v.label] = counts.get(v.label, 0) + 1
        return counts

    def is_connected(self) -> bool:
        if len(self.vertices) <= 1:
            return True

        visited = set()
        stack = [0]

        while stack:
            v = stack.pop()
            if v in visited:
                continue
            visited.add(v)
            stack.extend(u for u, _ in self.adj[v])

        return len(visited) == len(self.vertices)

    def copy(self) -> 'Graph':
        g = self._empty_like()
        for v in self.vertices:
            g.add_vertex(v.label)
        for e in self.edges:
            g.add_edge(e.frm, e.to, e.elabel)
        return g

    def _empty_like(self) -> 'Graph':
        return Graph(self.gid, self.recoder)

    def describe(self) -> str:
        """One-line connection table: node types, then frm-to:type edges"""
        nodes = " ".join(f"{self.node_type(v.vid)}{v.vid}" for v in self.vertices)
        edges = " ".join(f"{e.frm}-{e.to}:{e.elabel}" for e in self.edges)
        return f"[{nodes}] {edges}".rstrip()

    def __repr__(self):
        return f"Graph({self.gid}, V={len(self.vertices)}, E={len(self.edges)})"


class NamedGraph(Graph):
    """
    Training graph: class label (`value`), name and boosting weight

    `value` is fixed at construction (+1/-1 for labeled graphs, 0 for
    unlabeled ones). The weight is updated by the boosting loop.
    """
    def __init__(self, value: int = 0, name: str = "", weight: float = 1.0,
                 gid: int = 0, recoder: 'Recoder' = None):
        super().__init__(gid, recoder)
        self._value = value
        self.name = name
        self.weight = weight

    @property
    def value(self) -> int:
        return self._value

    @property
    def weight(self) -> float:
        return self._weight

    @weight.setter
    def weight(self, weight: float):
        weight = float(weight)
        if not weight >= 0.0:
            raise ValueError(f"Graph weight must be non-negative, got {weight}")
        self._weight = weight

    def _empty_like(self) -> 'NamedGraph':
        return NamedGraph(self._value, self.name, self._weight, self.gid, self.recoder)

    def __repr__(self):
        return (f"NamedGraph({self.name or self.gid}, value={self._value}, "
                f"V={len(self.vertices)}, E={len(self.edges)})")


def set_weights(graphs: Sequence[NamedGraph], weights) -> None:
    """Assign a weight vector to graphs, in order"""
    weights = np.asarray(weights, dtype=float)
    if weights.shape != (len(graphs),):
        raise ValueError(f"Expected {len(graphs)} weights, got shape {weights.shape}")
    for graph, weight in zip(graphs, weights):
        graph.weight = weight


class Recoder:
    """
    Maps external node types to compact integer codes

    Codes are assigned in increasing order of type support (number of
    graphs containing the type), ties broken by first appearance, so
    rare types sort first during the search.
    """
    def __init__(self):
        self.types: List[Hashable] = []      # code -> type
        self.codes: Dict[Hashable, int] = {}  # type -> code
        self.support: Dict[Hashable, int] = {}

    @classmethod
    def fit(cls, graphs: Sequence[Graph]) -> 'Recoder':
        support: Dict[Hashable, int] = {}
        first_seen: Dict[Hashable, int] = {}

        for graph in graphs:
            seen_in_graph = set()
            for v in graph.vertices:
                t = graph.node_type(v.vid)
                if t not in first_seen:
                    first_seen[t] = len(first_seen)
                if t not in seen_in_graph:
                    support[t] = support.get(t, 0) + 1
                    seen_in_graph.add(t)

        recoder = cls()
        for t in sorted(first_seen, key=lambda t: (support[t], first_seen[t])):
            recoder.codes[t] = len(recoder.types)
            recoder.types.append(t)
        recoder.support = support
        return recoder

    def encode(self, node_type: Hashable) -> int:
        return self.codes[node_type]

    def decode(self, code: int) -> Hashable:
        return self.types[code]

    def encode_graph(self, graph: Graph) -> Graph:
        """Copy of graph with node types replaced by their codes"""
        encoded = graph._empty_like()
        encoded.recoder = self
        for v in graph.vertices:
            encoded.add_vertex(self.encode(graph.node_type(v.vid)))
        for e in graph.edges:
            encoded.add_edge(e.frm, e.to, e.elabel)
        return encoded

    def __len__(self):
        return len(self.types)

    def __repr__(self):
        return f"Recoder({dict(self.codes)})"
