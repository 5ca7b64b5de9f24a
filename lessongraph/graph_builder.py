"""
Prerequisite graph construction.

Nodes are document slugs; each resolved prerequisite becomes an edge
``prerequisite -> dependent`` so that traversal follows the learning
direction. The resulting :class:`CurriculumGraph` is frozen.
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Mapping, Tuple

import networkx as nx

from lessongraph.models import Document, Finding
from lessongraph.utils import normalize_path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CurriculumGraph:
    """All documents plus the derived prerequisite edges.

    Built once per validation pass and never mutated.
    """

    documents: Mapping[str, Document]
    graph: nx.DiGraph
    prerequisites: Mapping[str, Tuple[str, ...]]

    def __contains__(self, slug: str) -> bool:
        return slug in self.documents

    def __len__(self) -> int:
        return len(self.documents)

    def slugs(self) -> List[str]:
        return sorted(self.documents)

    def published(self) -> List[Document]:
        """Non-draft documents, by slug."""
        return [self.documents[s] for s in self.slugs() if not self.documents[s].draft]

    def requires(self, slug: str) -> Tuple[str, ...]:
        """Resolved prerequisites of *slug*, in declared order."""
        return self.prerequisites.get(slug, ())

    def dependents(self, slug: str) -> List[str]:
        return sorted(self.graph.successors(slug))


def resolve_reference(reference: str, base: str, known: Mapping[str, Document]):
    """Return the slug *reference* points at, or ``None``.

    Relative references resolve against the directory of *base*: the
    document's source path when known (so ``basics/index.md`` resolves
    ``./intro`` inside ``basics/``), otherwise its slug.
    """
    target = normalize_path(reference, relative_to=base)
    if target and target in known:
        return target
    return None


def build_graph(documents: Mapping[str, Document]) -> Tuple[CurriculumGraph, List[Finding]]:
    """Resolve every prerequisite reference into an edge.

    Unresolvable references yield a ``DanglingPrerequisite`` finding and
    the edge is left out.

    Returns:
        Tuple of ``(graph, findings)``.
    """
    G = nx.DiGraph()
    findings: List[Finding] = []
    resolved: Dict[str, Tuple[str, ...]] = {}

    for slug in sorted(documents):
        doc = documents[slug]
        G.add_node(slug, phase=doc.phase, draft=doc.draft)

    for slug in sorted(documents):
        targets: List[str] = []
        doc = documents[slug]
        base = doc.source_path or slug
        for position, reference in enumerate(doc.prerequisites):
            target = resolve_reference(reference, base, documents)
            if target is None:
                findings.append(Finding.of(
                    "DanglingPrerequisite",
                    [slug],
                    f"prerequisite '{reference}' does not match any document",
                    reference=reference,
                ))
                logger.debug("Dangling prerequisite %s -> %s.", slug, reference)
                continue
            if target in targets:
                continue
            targets.append(target)
            G.add_edge(target, slug, position=position)
        resolved[slug] = tuple(targets)

    logger.info(
        "Built prerequisite graph: %d node(s), %d edge(s), %d dangling reference(s).",
        G.number_of_nodes(), G.number_of_edges(), len(findings),
    )

    graph = CurriculumGraph(
        documents=MappingProxyType(dict(documents)),
        graph=nx.freeze(G),
        prerequisites=MappingProxyType(resolved),
    )
    return graph, findings
