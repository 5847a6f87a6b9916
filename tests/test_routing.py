import io

import pytest

from netlab.routing import (
    INF,
    RouteEntry,
    dijkstra_tables,
    distance_vector,
    distance_vector_converged,
    link_state,
    main,
    render_tables,
    symmetric_matrix,
)

TRIANGLE = [[0, 1, 4], [1, 0, 2], [4, 2, 0]]
SQUARE = [
    [0, 2, INF, 7],
    [2, 0, 3, INF],
    [INF, 3, 0, 1],
    [7, INF, 1, 0],
]
ISOLATED = [[0, 3, INF], [3, 0, INF], [INF, INF, 0]]

ALL = [distance_vector, distance_vector_converged, dijkstra_tables, link_state]


def _distances(tables):
    return [[entry.distance for entry in table] for table in tables]


@pytest.mark.parametrize("graph", [TRIANGLE, SQUARE, ISOLATED])
def test_complete_algorithms_agree(graph):
    expected = _distances(link_state(graph))
    assert _distances(dijkstra_tables(graph)) == expected
    assert _distances(distance_vector_converged(graph)) == expected


def test_two_hop_route_is_preferred():
    results = [
        distance_vector(TRIANGLE),
        distance_vector_converged(TRIANGLE),
        dijkstra_tables(TRIANGLE),
        link_state(TRIANGLE),
    ]
    for tables in results:
        entry = tables[0][2]
        assert entry.distance == TRIANGLE[0][1] + TRIANGLE[1][2]
        assert entry.next_hop == 1
        assert entry.path == (0, 1, 2)


@pytest.mark.parametrize("graph", [TRIANGLE, SQUARE])
def test_paths_cost_their_distance(graph):
    results = [
        distance_vector(graph),
        distance_vector_converged(graph),
        dijkstra_tables(graph),
        link_state(graph),
    ]
    for tables in results:
        for source, table in enumerate(tables):
            for entry in table:
                assert entry.path[0] == source
                assert entry.path[-1] == entry.destination
                cost = sum(graph[a][b] for a, b in zip(entry.path, entry.path[1:]))
                assert cost == entry.distance
                if len(entry.path) > 1:
                    assert entry.next_hop == entry.path[1]


@pytest.mark.parametrize("algorithm", [distance_vector_converged, dijkstra_tables, link_state])
def test_triangle_inequality_holds(algorithm):
    dist = _distances(algorithm(SQUARE))
    size = len(SQUARE)
    for i in range(size):
        for j in range(size):
            for k in range(size):
                assert dist[i][j] <= dist[i][k] + dist[k][j]
            assert dist[i][j] == dist[j][i]


def test_unreachable_destination():
    results = [
        distance_vector(ISOLATED),
        distance_vector_converged(ISOLATED),
        dijkstra_tables(ISOLATED),
        link_state(ISOLATED),
    ]
    for tables in results:
        entry = tables[0][2]
        assert entry.distance >= INF
        assert not entry.reachable
        assert entry.next_hop is None
        assert entry.path is None


def test_self_entries_follow_each_table_style():
    assert [table[i].next_hop for i, table in enumerate(distance_vector(TRIANGLE))] == [0, 1, 2]
    assert [table[i].next_hop for i, table in enumerate(link_state(TRIANGLE))] == [0, 1, 2]
    assert all(table[i].next_hop is None for i, table in enumerate(dijkstra_tables(TRIANGLE)))
    assert all(table[i].distance == 0 for i, table in enumerate(distance_vector_converged(TRIANGLE)))


def test_symmetric_matrix_from_upper_triangle():
    assert symmetric_matrix(3, [1, 4, 2]) == TRIANGLE
    assert symmetric_matrix(0, []) == []


def test_symmetric_matrix_rejects_wrong_count():
    with pytest.raises(ValueError):
        symmetric_matrix(3, [1, 2])
    with pytest.raises(ValueError):
        symmetric_matrix(-1, [])


def test_non_square_matrix_rejected():
    ragged = [[0, 1], [1, 0, 5]]
    with pytest.raises(ValueError):
        distance_vector(ragged)
    with pytest.raises(ValueError):
        distance_vector_converged(ragged)
    with pytest.raises(ValueError):
        dijkstra_tables(ragged)
    with pytest.raises(ValueError):
        link_state(ragged)


def test_converged_rejects_negative_costs():
    with pytest.raises(ValueError):
        distance_vector_converged([[0, -1], [-1, 0]])


def test_render_with_paths():
    text = render_tables(link_state(TRIANGLE), show_path=True)
    assert "Routing table for router 0\nnode\tdistance\tnextnode\tpath\n" in text
    assert "0->1->2" in text


def test_render_without_paths_marks_infinity():
    text = render_tables(dijkstra_tables(ISOLATED), show_path=False)
    assert "Routing Table for Node 1:\nDestination\tCost\tNext Hop\n" in text
    assert "2\t\tINF\t-" in text


def test_render_entry_fields():
    table = [[RouteEntry(0, 0, 0, (0,)), RouteEntry(1, 5, 1, (0, 1))]]
    text = render_tables(table, show_path=True)
    assert "1\t5\t\t1\t\t0->1" in text


def test_main_reads_file(tmp_path, capsys):
    source = tmp_path / "costs.txt"
    source.write_text("3\n0 1 4\n1 0 2\n4 2 0\n")
    assert main(["dv", str(source)]) == 0
    out = capsys.readouterr().out
    assert "Routing table for router 2" in out
    assert "0->1->2" in out


def test_main_reads_upper_triangle_from_stdin(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("3\n1 4 2\n"))
    assert main(["dijkstra"]) == 0
    assert "Routing Table for Node 0:" in capsys.readouterr().out


def test_main_reports_short_input(tmp_path, capsys):
    source = tmp_path / "costs.txt"
    source.write_text("3\n0 1\n")
    assert main(["link-state", str(source)]) == 1
    assert "error" in capsys.readouterr().err