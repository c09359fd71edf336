import numpy as np
import pytest

from stump_miner import Graph, NamedGraph, Recoder, set_weights


class TestGraph:

    def test_construction_and_access(self, graph_builder):
        g = graph_builder([0, 0, 1], [(0, 1), (1, 2, 2)])
        assert g.node_count == 3
        assert g.edge_count == 2
        assert g.degree(1) == 2
        assert g.degree(2) == 1
        assert sorted(nb for nb, _ in g.neighbors(1)) == [0, 2]
        assert g.edge_between(2, 1) == 1
        assert g.edge_between(0, 2) is None
        assert g.edge_type(1) == 2
        assert g.node_type(2) == 1

    def test_add_edge_rejects_bad_edges(self):
        g = Graph()
        g.add_vertex('C')
        g.add_vertex('O')
        g.add_edge(0, 1)

        with pytest.raises(ValueError):
            g.add_edge(0, 5)
        with pytest.raises(ValueError):
            g.add_edge(1, 1)
        with pytest.raises(ValueError):
            g.add_edge(1, 0)

    def test_frozen_graph_is_read_only(self, make_triangle):
        g = make_triangle().freeze()
        assert g.frozen
        with pytest.raises(ValueError):
            g.add_vertex(0)
        with pytest.raises(ValueError):
            g.add_edge(0, 1)

    def test_is_connected(self, graph_builder):
        assert graph_builder([0, 0, 0], [(0, 1), (1, 2)]).is_connected()
        assert not graph_builder([0, 0, 0, 0], [(0, 1), (2, 3)]).is_connected()
        assert Graph().is_connected()

    def test_copy_keeps_structure(self, graph_builder):
        g = graph_builder([0, 1, 2], [(0, 1), (1, 2, 2)], value=1, name="g", weight=0.5)
        c = g.copy()
        assert isinstance(c, NamedGraph)
        assert c.value == 1 and c.name == "g" and c.weight == 0.5
        assert [v.label for v in c.vertices] == [0, 1, 2]
        assert c.edges == g.edges
        assert not c.frozen

    def test_describe(self, graph_builder):
        g = graph_builder(['C', 'O'], [(0, 1, 2)])
        assert g.describe() == "[C0 O1] 0-1:2"


class TestNamedGraph:

    def test_value_is_read_only(self):
        g = NamedGraph(value=-1, name="neg")
        with pytest.raises(AttributeError):
            g.value = 1

    def test_weight_must_be_non_negative(self):
        g = NamedGraph(value=1)
        assert g.weight == 1.0
        with pytest.raises(ValueError):
            g.weight = -0.1
        with pytest.raises(ValueError):
            NamedGraph(value=1, weight=float('nan'))

    def test_set_weights(self, triangles_vs_edges):
        set_weights(triangles_vs_edges, np.array([0.1, 0.2, 0.3, 0.4]))
        assert [g.weight for g in triangles_vs_edges] == pytest.approx([0.1, 0.2, 0.3, 0.4])

        with pytest.raises(ValueError):
            set_weights(triangles_vs_edges, [1.0, 1.0])


class TestRecoder:

    def _molecules(self, graph_builder):
        return [
            graph_builder(['C', 'C', 'O'], [(0, 1), (1, 2)], value=1),
            graph_builder(['C', 'N'], [(0, 1)], value=-1),
            graph_builder(['C', 'O', 'S'], [(0, 1), (1, 2)], value=1),
        ]

    def test_codes_follow_type_support(self, graph_builder):
        recoder = Recoder.fit(self._molecules(graph_builder))
        # N and S occur in one graph, O in two, C in three
        assert recoder.types == ['N', 'S', 'O', 'C']
        assert recoder.encode('C') == 3
        assert recoder.decode(0) == 'N'
        assert len(recoder) == 4

    def test_encode_graph_decodes_node_types(self, graph_builder):
        graphs = self._molecules(graph_builder)
        recoder = Recoder.fit(graphs)
        encoded = recoder.encode_graph(graphs[0])

        assert isinstance(encoded, NamedGraph)
        assert encoded.value == 1
        assert [v.label for v in encoded.vertices] == [3, 3, 2]
        assert [encoded.node_type(v) for v in range(3)] == ['C', 'C', 'O']
        assert encoded.edges == graphs[0].edges

    def test_unknown_type(self, graph_builder):
        recoder = Recoder.fit(self._molecules(graph_builder))
        with pytest.raises(KeyError):
            recoder.encode('Br')
