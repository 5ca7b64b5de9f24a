"""
DAG validation: cycle detection, reachability, and graph metrics.

Cycle detection is an explicit three-colour DFS so every cycle can be
reported with its members; reachability and metrics use ``networkx``.
"""

import logging
from typing import Iterator, List, Set

import networkx as nx

from lessongraph.graph_builder import CurriculumGraph
from lessongraph.models import Finding, GraphMetrics

logger = logging.getLogger(__name__)

_UNVISITED, _IN_PROGRESS, _DONE = 0, 1, 2


# =========================================================================
# Cycles
# =========================================================================


def find_cycles(graph: CurriculumGraph) -> List[Finding]:
    """Report every distinct prerequisite cycle.

    Walks the "requires" direction (document -> its prerequisites). An
    edge into an in-progress node closes a cycle made of the DFS stack
    from that node to the current one. Cycles with the same members are
    reported once.
    """
    color = {slug: _UNVISITED for slug in graph.slugs()}
    reported: Set[frozenset] = set()
    findings: List[Finding] = []

    def children(slug: str) -> Iterator[str]:
        return iter(sorted(graph.requires(slug)))

    for start in graph.slugs():
        if color[start] != _UNVISITED:
            continue

        color[start] = _IN_PROGRESS
        path = [start]
        stack = [(start, children(start))]

        while stack:
            node, pending = stack[-1]
            child = next(pending, None)

            if child is None:
                stack.pop()
                path.pop()
                color[node] = _DONE
                continue

            if color[child] == _IN_PROGRESS:
                cycle = path[path.index(child):]
                key = frozenset(cycle)
                if key not in reported:
                    reported.add(key)
                    chain = " -> ".join(cycle + [cycle[0]])
                    findings.append(Finding.of(
                        "PrerequisiteCycle",
                        cycle,
                        f"prerequisite cycle: {chain}",
                    ))
                    logger.debug("Cycle detected: %s", chain)
            elif color[child] == _UNVISITED:
                color[child] = _IN_PROGRESS
                path.append(child)
                stack.append((child, children(child)))

    logger.info("Cycle check complete: %d cycle(s).", len(findings))
    return findings


def validate_dag(graph: CurriculumGraph) -> bool:
    """Verify that the prerequisite edges form a DAG (topological sort succeeds)."""
    try:
        list(nx.topological_sort(graph.graph))
        return True
    except nx.NetworkXUnfeasible:
        return False


# =========================================================================
# Reachability
# =========================================================================


def find_unreachable(graph: CurriculumGraph, entry_phase: int = 1) -> List[Finding]:
    """Warn about published documents no entry-phase document leads to."""
    published = graph.published()
    G = graph.graph.subgraph(doc.slug for doc in published)
    entries = [doc.slug for doc in published if doc.phase == entry_phase]

    reachable: Set[str] = set(entries)
    for slug in entries:
        reachable |= nx.descendants(G, slug)

    findings = [
        Finding.of(
            "UnreachableContent",
            [doc.slug],
            f"phase {doc.phase} document is not reachable from any "
            f"phase {entry_phase} document via prerequisites",
        )
        for doc in published
        if doc.phase > entry_phase and doc.slug not in reachable
    ]
    logger.info(
        "Reachability check: %d entry point(s), %d unreachable document(s).",
        len(entries), len(findings),
    )
    return findings


# =========================================================================
# Metrics
# =========================================================================


def compute_metrics(graph: CurriculumGraph, entry_phase: int = 1) -> GraphMetrics:
    """Compute graph summary metrics."""
    G = graph.graph
    n_nodes = G.number_of_nodes()
    total_edges = G.number_of_edges()
    published = graph.published()

    avg_out = total_edges / n_nodes if n_nodes > 0 else 0.0

    # Longest prerequisite chain
    if total_edges > 0 and nx.is_directed_acyclic_graph(G):
        max_depth = nx.dag_longest_path_length(G)
    else:
        max_depth = 0

    return GraphMetrics(
        total_documents=n_nodes,
        published_documents=len(published),
        total_edges=total_edges,
        avg_out_degree=round(avg_out, 4),
        max_depth=max_depth,
        isolated_documents=sum(1 for _ in nx.isolates(G)),
        entry_points=sum(1 for doc in published if doc.phase == entry_phase),
    )
