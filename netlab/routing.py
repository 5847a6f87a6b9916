"""Routing-table computation with distance-vector and link-state algorithms."""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass
from itertools import combinations, product
from typing import Iterable, Sequence

INF = 9999
"""Cost that marks the absence of a direct link."""


@dataclass(frozen=True)
class RouteEntry:
    """One row of a router's routing table."""

    destination: int
    distance: int
    next_hop: int | None
    path: tuple[int, ...] | None = None

    @property
    def reachable(self) -> bool:
        return self.distance < INF


Table = list[RouteEntry]


def _square(matrix: Iterable[Iterable[int]]) -> list[list[int]]:
    rows = [[int(value) for value in row] for row in matrix]
    size = len(rows)
    if any(len(row) != size for row in rows):
        raise ValueError("cost matrix must be square")
    return rows


def _follow_hops(hops: Sequence[Sequence[int | None]], source: int, destination: int) -> tuple[int, ...] | None:
    """Walk next-hop entries from source to destination; None if they never arrive."""
    path = [source]
    seen = {source}
    node = source
    while node != destination:
        node = hops[node][destination]
        if node is None or node in seen:
            return None
        path.append(node)
        seen.add(node)
    return tuple(path)


def _tables(dist: list[list[int]], hops: list[list[int | None]]) -> list[Table]:
    tables = []
    for source, (row, hop_row) in enumerate(zip(dist, hops)):
        table = []
        for destination, (distance, hop) in enumerate(zip(row, hop_row)):
            if distance >= INF:
                table.append(RouteEntry(destination, distance, None, None))
            else:
                table.append(RouteEntry(destination, distance, hop, _follow_hops(hops, source, destination)))
        tables.append(table)
    return tables


def distance_vector(cost: Iterable[Iterable[int]]) -> list[Table]:
    """One relaxation sweep over every (source, destination, via) triple."""
    cost = _square(cost)
    size = len(cost)
    dist = [row[:] for row in cost]
    hops: list[list[int | None]] = [
        [None if value == INF else dest for dest, value in enumerate(row)] for row in cost
    ]
    for i, j, k in product(range(size), repeat=3):
        via = dist[i][k] + dist[k][j]
        if dist[i][j] > via:
            dist[i][j] = via
            hops[i][j] = hops[i][k]
    return _tables(dist, hops)


def distance_vector_converged(cost: Iterable[Iterable[int]]) -> list[Table]:
    """Repeat distance-vector sweeps until no table changes."""
    cost = _square(cost)
    size = len(cost)
    dist = [[0 if i == j else value for j, value in enumerate(row)] for i, row in enumerate(cost)]
    if any(value < 0 for row in dist for value in row):
        raise ValueError("link costs must not be negative")
    hops: list[list[int | None]] = [[None if i == j else j for j in range(size)] for i in range(size)]
    changed = True
    while changed:
        changed = False
        for i, j, k in product(range(size), repeat=3):
            via = dist[i][k] + dist[k][j]
            if dist[i][j] > via:
                dist[i][j] = via
                hops[i][j] = hops[i][k]
                changed = True
    return _tables(dist, hops)


def _closest_unvisited(dist: list[int], visited: list[bool]) -> int | None:
    candidates = (node for node, done in enumerate(visited) if not done and dist[node] < INF)
    return min(candidates, key=dist.__getitem__, default=None)


def _dijkstra_row(cost: list[list[int]], source: int) -> tuple[list[int], list[int | None]]:
    size = len(cost)
    dist = cost[source][:]
    hops: list[int | None] = [
        node if value != INF and node != source else None for node, value in enumerate(dist)
    ]
    visited = [False] * size
    visited[source] = True
    for _ in range(size - 1):
        nearest = _closest_unvisited(dist, visited)
        if nearest is None:
            break
        visited[nearest] = True
        for node in range(size):
            via = dist[nearest] + cost[nearest][node]
            if not visited[node] and dist[node] > via:
                dist[node] = via
                hops[node] = hops[nearest]
    return dist, hops


def dijkstra_tables(cost: Iterable[Iterable[int]]) -> list[Table]:
    """Shortest-path tables for every router, tracking first hops."""
    cost = _square(cost)
    rows = [_dijkstra_row(cost, source) for source in range(len(cost))]
    return _tables([dist for dist, _ in rows], [hops for _, hops in rows])


def _link_state_table(adjacency: list[list[int]], source: int) -> Table:
    size = len(adjacency)
    dist = [INF] * size
    parent: list[int | None] = [None] * size
    visited = [False] * size
    dist[source] = 0
    for _ in range(size - 1):
        nearest = _closest_unvisited(dist, visited)
        if nearest is None:
            break
        visited[nearest] = True
        for node, link in enumerate(adjacency[nearest]):
            if not visited[node] and link != INF and dist[node] > dist[nearest] + link:
                dist[node] = dist[nearest] + link
                parent[node] = nearest
    table = []
    for destination, distance in enumerate(dist):
        if distance >= INF:
            table.append(RouteEntry(destination, distance, None, None))
            continue
        path = [destination]
        while parent[path[-1]] is not None:
            path.append(parent[path[-1]])
        path.reverse()
        hop = path[1] if len(path) > 1 else source
        table.append(RouteEntry(destination, distance, hop, tuple(path)))
    return table


def link_state(adjacency: Iterable[Iterable[int]]) -> list[Table]:
    """Per-router Dijkstra over the full adjacency matrix, with paths from parents."""
    adjacency = _square(adjacency)
    return [_link_state_table(adjacency, source) for source in range(len(adjacency))]


def symmetric_matrix(n: int, upper_costs: Iterable[int]) -> list[list[int]]:
    """Build a symmetric cost matrix from the costs above the diagonal, row by row."""
    if n < 0:
        raise ValueError("node count must not be negative")
    costs = [int(value) for value in upper_costs]
    pairs = list(combinations(range(n), 2))
    if len(costs) != len(pairs):
        raise ValueError(f"expected {len(pairs)} costs for {n} nodes, got {len(costs)}")
    matrix = [[0] * n for _ in range(n)]
    for (i, j), value in zip(pairs, costs):
        matrix[i][j] = matrix[j][i] = value
    return matrix


def _hop_text(hop: int | None) -> str:
    return "-" if hop is None else str(hop)


def render_tables(tables: Sequence[Table], show_path: bool = False) -> str:
    """Format routing tables as text, one block per router."""
    lines: list[str] = []
    for router, table in enumerate(tables):
        if show_path:
            lines.append(f"Routing table for router {router}")
            lines.append("node\tdistance\tnextnode\tpath")
            for entry in table:
                path = "->".join(map(str, entry.path)) if entry.path else "-"
                lines.append(f"{entry.destination}\t{entry.distance}\t\t{_hop_text(entry.next_hop)}\t\t{path}")
        else:
            lines.append("")
            lines.append(f"Routing Table for Node {router}:")
            lines.append("Destination\tCost\tNext Hop")
            for entry in table:
                cost = str(entry.distance) if entry.reachable else "INF"
                lines.append(f"{entry.destination}\t\t{cost}\t{_hop_text(entry.next_hop)}")
    return "\n".join(lines) + "\n"


# name -> (algorithm, input is upper triangle only, show paths)
_ALGORITHMS = {
    "dv": (distance_vector, False, True),
    "dv-converged": (distance_vector_converged, True, False),
    "dijkstra": (dijkstra_tables, True, False),
    "link-state": (link_state, False, True),
}


def _parse_matrix(text: str, upper: bool) -> list[list[int]]:
    values = [int(token) for token in text.split()]
    if not values:
        raise ValueError("missing router count")
    n, rest = values[0], values[1:]
    if n <= 0:
        raise ValueError("router count must be positive")
    expected = n * (n - 1) // 2 if upper else n * n
    if len(rest) < expected:
        raise ValueError(f"expected {expected} costs, got {len(rest)}")
    if upper:
        return symmetric_matrix(n, rest[:expected])
    return [rest[row * n:(row + 1) * n] for row in range(n)]


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="netlab-routing",
        description="Compute routing tables from a router count followed by link costs "
        f"({INF} for no direct link).",
    )
    parser.add_argument("algorithm", choices=sorted(_ALGORITHMS))
    parser.add_argument("input", nargs="?", help="file with the costs (default: standard input)")
    args = parser.parse_args(argv)

    algorithm, upper, show_path = _ALGORITHMS[args.algorithm]
    try:
        if args.input:
            with open(args.input, encoding="utf-8") as handle:
                text = handle.read()
        else:
            text = sys.stdin.read()
        tables = algorithm(_parse_matrix(text, upper))
    except (OSError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    sys.stdout.write(render_tables(tables, show_path))
    return 0


if __name__ == "__main__":
    sys.exit(main())