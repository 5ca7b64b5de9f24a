"""
Learning-order resolution.

The order is a plain sort of published documents by
``(phase, lesson, weight, slug)``; prerequisites do not reorder anything.
Instead, every prerequisite edge is checked against the sorted positions
so that front matter contradicting its own prerequisites is reported.
"""

import logging
from collections import defaultdict
from typing import Dict, List, Tuple

from lessongraph.graph_builder import CurriculumGraph
from lessongraph.models import Finding

logger = logging.getLogger(__name__)


def sort_documents(graph: CurriculumGraph) -> List[str]:
    """Published slugs in learning order."""
    return [doc.slug for doc in sorted(graph.published(), key=lambda d: d.sort_key)]


def check_order(graph: CurriculumGraph, order: List[str]) -> List[Finding]:
    """``OrderingViolation`` for every prerequisite scheduled at or after
    its dependent."""
    position: Dict[str, int] = {slug: idx for idx, slug in enumerate(order)}
    findings: List[Finding] = []

    for slug in order:
        doc = graph.documents[slug]
        for prerequisite in graph.requires(slug):
            if prerequisite not in position:
                continue
            if position[prerequisite] >= position[slug]:
                pre = graph.documents[prerequisite]
                findings.append(Finding.of(
                    "OrderingViolation",
                    [slug, prerequisite],
                    f"requires '{prerequisite}' (phase {pre.phase}, lesson "
                    f"{pre.lesson}, weight {pre.weight}) which is ordered after "
                    f"it (phase {doc.phase}, lesson {doc.lesson}, weight {doc.weight})",
                ))
    return findings


def check_duplicate_lessons(graph: CurriculumGraph) -> List[Finding]:
    """Warn when published documents share a phase and lesson number."""
    by_position: Dict[Tuple[int, int], List[str]] = defaultdict(list)
    for doc in graph.published():
        by_position[(doc.phase, doc.lesson)].append(doc.slug)

    return [
        Finding.of(
            "DuplicateLesson",
            sorted(slugs),
            f"{len(slugs)} documents share phase {phase}, lesson {lesson}",
        )
        for (phase, lesson), slugs in sorted(by_position.items())
        if len(slugs) > 1
    ]


def check_draft_prerequisites(graph: CurriculumGraph) -> List[Finding]:
    """Warn when a published document requires a draft."""
    findings: List[Finding] = []
    for doc in graph.published():
        for prerequisite in graph.requires(doc.slug):
            if graph.documents[prerequisite].draft:
                findings.append(Finding.of(
                    "DraftPrerequisite",
                    [doc.slug, prerequisite],
                    f"requires draft document '{prerequisite}'",
                ))
    return findings


def resolve_order(graph: CurriculumGraph, has_cycles: bool = False) -> Tuple[List[str], List[Finding]]:
    """Produce the learning order and its consistency findings.

    With *has_cycles* no total order exists: the order is empty and the
    edge check is skipped. Lesson and draft warnings are reported either way.

    Returns:
        Tuple of ``(ordered_slugs, findings)``.
    """
    findings = check_duplicate_lessons(graph) + check_draft_prerequisites(graph)

    if has_cycles:
        logger.warning("Prerequisite graph has cycles; no learning order produced.")
        return [], findings

    order = sort_documents(graph)
    findings = check_order(graph, order) + findings
    logger.info(
        "Resolved learning order for %d document(s); %d finding(s).",
        len(order), len(findings),
    )
    return order, findings
