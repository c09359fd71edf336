import pytest

from stump_miner import Graph, NamedGraph

C, N, O = 0, 1, 2
SINGLE, DOUBLE = 1, 2


def build(labels, edges, value=None, name="", weight=1.0):
    """Graph from vertex labels and (frm, to[, elabel]) tuples"""
    if value is None:
        g = Graph()
    else:
        g = NamedGraph(value=value, name=name, weight=weight)
    for label in labels:
        g.add_vertex(label)
    for frm, to, *elabel in edges:
        g.add_edge(frm, to, elabel[0] if elabel else SINGLE)
    return g


def triangle(value=None, name="triangle"):
    return build([C, C, C], [(0, 1), (1, 2), (0, 2)], value, name)


def single_edge(value=None, name="edge"):
    return build([C, C], [(0, 1)], value, name)


@pytest.fixture
def graph_builder():
    return build


@pytest.fixture
def make_triangle():
    return triangle


@pytest.fixture
def make_edge():
    return single_edge


@pytest.fixture
def triangles_vs_edges():
    """Two triangles (+1) and two single-edge graphs (-1)"""
    return [
        triangle(1, "tri_a"),
        triangle(1, "tri_b"),
        single_edge(-1, "edge_a"),
        single_edge(-1, "edge_b"),
    ]


@pytest.fixture
def molecules():
    """
    Small molecule-like graphs: positives carry an N=O bond,
    negatives only single bonds
    """
    return [
        build([C, C, N, O, O], [(0, 1), (1, 2), (2, 3, DOUBLE), (2, 4)], 1, "nitro_ethane"),
        build([C, C, C, N, O], [(0, 1), (1, 2), (2, 0), (2, 3), (3, 4, DOUBLE)], 1, "nitroso_ring"),
        build([C, N, O, C], [(0, 1), (1, 2, DOUBLE), (0, 3)], 1, "nitroso_ethane"),
        build([C, C, O], [(0, 1), (1, 2)], -1, "ethanol"),
        build([C, C, N], [(0, 1), (1, 2)], -1, "ethylamine"),
        build([C, C, C, O], [(0, 1), (1, 2), (2, 0), (0, 3)], -1, "ring_ether"),
        build([C, N, O], [(0, 1), (1, 2)], -1, "hydroxylamine"),
    ]
