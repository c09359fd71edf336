import pytest

from run_experiments import make_synthetic_dataset, run_all_experiments
from stump_miner import Graph, embeds

SINGLE, DOUBLE = 1, 2


def nitro_group(recoder):
    g = Graph(recoder=recoder)
    n = g.add_vertex(recoder.encode('N'))
    o1 = g.add_vertex(recoder.encode('O'))
    o2 = g.add_vertex(recoder.encode('O'))
    g.add_edge(n, o1, DOUBLE)
    g.add_edge(n, o2, SINGLE)
    return g


def test_synthetic_dataset():
    graphs, recoder = make_synthetic_dataset(10, seed=3)

    assert len(graphs) == 10
    assert sum(g.weight for g in graphs) == pytest.approx(1.0)
    assert all(g.recoder is recoder for g in graphs)

    nitro = nitro_group(recoder)
    for g in graphs:
        assert g.is_connected()
        assert embeds(nitro, g) == (g.value == 1)


def test_synthetic_dataset_is_seeded():
    first, _ = make_synthetic_dataset(6, seed=1)
    second, _ = make_synthetic_dataset(6, seed=1)
    assert [g.describe() for g in first] == [g.describe() for g in second]


def test_run_all_experiments(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    df, all_stumps = run_all_experiments(dataset_size=12, supports=(2, 6), k=3, max_size=2,
                                         save_results=True)

    assert list(df['Min Support']) == [2, 6]
    assert df['Best Gain'].tolist() == pytest.approx([1.0, 1.0])
    assert df['Best Accuracy'].tolist() == pytest.approx([1.0, 1.0])
    assert set(all_stumps) == {2, 6}
    assert all(s.support >= 6 for s in all_stumps[6])

    assert (tmp_path / 'results' / 'comparison_results.csv').exists()
    assert (tmp_path / 'results' / 'stump_report.csv').exists()
