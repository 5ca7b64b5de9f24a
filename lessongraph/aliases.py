"""
Alias (redirect) resolution.

Aliases are grouped by their normalised path form, so ``/old/intro/`` and
``old/intro`` count as the same redirect when checking for collisions.
The resulting table is keyed by the alias exactly as declared.
"""

import logging
from collections import defaultdict
from collections.abc import Mapping
from typing import Dict, Iterator, List, Optional, Set, Tuple

from lessongraph.graph_builder import CurriculumGraph
from lessongraph.models import Finding
from lessongraph.utils import normalize_path

logger = logging.getLogger(__name__)


class AliasTable(Mapping):
    """Read-only alias -> canonical slug table."""

    def __init__(self, entries: Dict[str, str]):
        self._entries = dict(sorted(entries.items()))

    def __getitem__(self, alias: str) -> str:
        return self._entries[alias]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def resolve(self, alias: str) -> Optional[str]:
        """Exact, case-sensitive lookup."""
        return self._entries.get(alias)

    def as_dict(self) -> Dict[str, str]:
        return dict(self._entries)


def resolve_aliases(
    graph: CurriculumGraph,
    include_drafts: bool = False,
) -> Tuple[AliasTable, List[Finding]]:
    """Build the redirect table, reporting collisions and shadowed slugs.

    Collisions and shadowing are checked across every document; drafts
    only reach the table with *include_drafts*.

    Returns:
        Tuple of ``(alias_table, findings)``.
    """
    findings: List[Finding] = []
    claimants: Dict[str, Set[str]] = defaultdict(set)
    declared: Dict[str, List[Tuple[str, str]]] = defaultdict(list)

    for slug in graph.slugs():
        for alias in graph.documents[slug].aliases:
            target = normalize_path(alias)
            if target == slug:
                logger.debug("Alias %r of %s points at itself; ignored.", alias, slug)
                continue
            if target in graph:
                findings.append(Finding.of(
                    "AliasShadowsCanonical",
                    [slug, target],
                    f"alias '{alias}' is the canonical slug of '{target}'",
                    reference=alias,
                ))
                continue
            claimants[target].add(slug)
            declared[target].append((alias, slug))

    entries: Dict[str, str] = {}
    for target in sorted(claimants):
        owners = sorted(claimants[target])
        if len(owners) > 1:
            aliases = sorted({alias for alias, _ in declared[target]})
            findings.append(Finding.of(
                "AliasCollision",
                owners,
                f"alias '{aliases[0]}' is claimed by {len(owners)} documents",
                reference=aliases[0],
            ))
            continue
        for alias, slug in declared[target]:
            if graph.documents[slug].draft and not include_drafts:
                continue
            entries[alias] = slug

    table = AliasTable(entries)
    logger.info(
        "Resolved %d alias(es); %d alias finding(s).", len(table), len(findings)
    )
    return table, findings
