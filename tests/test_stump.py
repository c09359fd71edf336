import pytest

from stump_miner import DecisionStump, TopKStumps, merge_stump_sets, min_dfs_code
from stump_miner.stump import gain_upper_bound, stump_gain

C, N, O = 0, 1, 2


def stump_for(pattern, gain=1.0, support=1, class_value=1, zero_one=False):
    return DecisionStump(pattern=pattern, code=min_dfs_code(pattern), class_value=class_value,
                         gain=gain, support=support, zero_one_representation=zero_one)


class TestGain:

    def test_pure_support_sets(self):
        assert stump_gain(2.0, 0.0, 0.0) == (4.0, 1)
        assert stump_gain(0.0, 2.0, 0.0) == (4.0, -1)

    def test_balanced_support_set(self):
        gain, class_value = stump_gain(2.0, 2.0, 0.0)
        assert gain == 0.0
        assert class_value == 1

    def test_total_margin(self):
        # Absent pattern on a mostly negative set: predict -1 wherever it is missing
        gain, class_value = stump_gain(0.0, 0.0, -0.6)
        assert gain == pytest.approx(0.6)
        assert class_value == 1

    def test_zero_one(self):
        assert stump_gain(0.5, 0.2, 0.1, zero_one_representation=True) == (pytest.approx(0.3), 1)
        assert gain_upper_bound(0.5, 0.2, 0.1, zero_one_representation=True) == 0.5

    def test_bound_dominates_sub_supports(self):
        total = 0.2
        pos, neg = 0.5, 0.3
        bound = gain_upper_bound(pos, neg, total)
        for sub_pos in (0.0, 0.1, 0.5):
            for sub_neg in (0.0, 0.2, 0.3):
                assert stump_gain(sub_pos, sub_neg, total)[0] <= bound + 1e-12


class TestDecisionStump:

    def test_classify(self, make_triangle, make_edge):
        stump = stump_for(make_triangle(), class_value=1)
        assert stump.classify(make_triangle()) == 1
        assert stump.classify(make_edge()) == -1

        negative = stump_for(make_triangle(), class_value=-1)
        assert negative.classify(make_edge()) == 1

    def test_classify_zero_one(self, make_triangle, make_edge):
        stump = stump_for(make_triangle(), zero_one=True)
        assert stump.classify(make_edge()) == 0

    def test_same_pattern(self, graph_builder, make_triangle, make_edge):
        a = stump_for(make_triangle())
        b = stump_for(graph_builder([C, C, C], [(2, 0), (1, 2), (0, 1)]))
        assert a.same_pattern(b)
        assert not a.same_pattern(stump_for(make_edge()))


class TestTopKStumps:

    def test_keeps_best_k(self, make_edge):
        best = TopKStumps(2)
        for gain in (1.0, 3.0, 2.0, 0.5):
            best.offer(stump_for(make_edge(), gain=gain))
        assert len(best) == 2
        assert [s.gain for s in best.ordered()] == [3.0, 2.0]

    def test_ties_prefer_support_then_earlier(self, make_edge, make_triangle):
        best = TopKStumps(1)
        first = stump_for(make_edge(), gain=4.0, support=2)
        assert best.offer(first)
        assert not best.offer(stump_for(make_triangle(), gain=4.0, support=2))
        assert best.ordered() == [first]

        wider = stump_for(make_triangle(), gain=4.0, support=3)
        assert best.offer(wider)
        assert best.ordered() == [wider]

    def test_can_improve(self, make_edge):
        best = TopKStumps(1)
        assert best.can_improve(0.0, 0)
        best.offer(stump_for(make_edge(), gain=4.0, support=2))
        assert best.threshold() == (4.0, 2)
        assert not best.can_improve(4.0, 2)
        assert not best.can_improve(3.0, 10)
        assert best.can_improve(4.0, 3)
        assert best.can_improve(5.0, 0)


def test_merge_stump_sets(graph_builder, make_triangle, make_edge):
    set1 = [stump_for(make_triangle()), stump_for(make_edge())]
    set2 = [stump_for(graph_builder([C, C, C], [(1, 2), (2, 0), (0, 1)])),
            stump_for(graph_builder([C, O], [(0, 1)]))]

    merged = merge_stump_sets(set1, set2)
    assert len(merged) == 3
    assert merged[:2] == set1
