"""
Validation pass: loader -> graph -> cycles/reachability -> order -> aliases.

Every stage returns findings instead of raising; the pass/fail decision is
made once, on the assembled :class:`ValidationReport`.
"""

import json
import logging
import os
from typing import Any, Dict, List, Mapping, Optional

from lessongraph.aliases import resolve_aliases
from lessongraph.config import ValidatorConfig
from lessongraph.dag_validator import (
    compute_metrics,
    find_cycles,
    find_unreachable,
    validate_dag,
)
from lessongraph.graph_builder import build_graph
from lessongraph.loader import discover_documents, load_documents
from lessongraph.models import Finding, ValidationReport, sort_findings
from lessongraph.ordering import resolve_order
from lessongraph.utils import timed

logger = logging.getLogger(__name__)


def run_validation(
    raw_documents: Mapping[str, Mapping[str, Any]],
    config: Optional[ValidatorConfig] = None,
    sources: Optional[Mapping[str, str]] = None,
    prior_findings: Optional[List[Finding]] = None,
) -> ValidationReport:
    """Run the full pass over ``slug -> front matter`` input.

    *prior_findings* carries problems found before loading (content
    discovery) into the report.
    """
    config = config or ValidatorConfig()
    findings: List[Finding] = list(prior_findings or [])

    with timed("Load documents"):
        documents, load_findings = load_documents(raw_documents, sources)
    findings.extend(load_findings)

    with timed("Build graph"):
        graph, graph_findings = build_graph(documents)
    findings.extend(graph_findings)

    with timed("Cycle and reachability check"):
        cycle_findings = find_cycles(graph)
        findings.extend(cycle_findings)
        findings.extend(find_unreachable(graph, entry_phase=config.entry_phase))
        has_cycles = not validate_dag(graph)
        if has_cycles != bool(cycle_findings):
            logger.error(
                "Cycle check disagrees with topological sort (%d cycle finding(s), DAG=%s).",
                len(cycle_findings), not has_cycles,
            )
        has_cycles = has_cycles or bool(cycle_findings)

    with timed("Resolve order"):
        order, order_findings = resolve_order(graph, has_cycles=has_cycles)
    findings.extend(order_findings)

    with timed("Resolve aliases"):
        aliases, alias_findings = resolve_aliases(
            graph, include_drafts=config.include_drafts_in_aliases
        )
    findings.extend(alias_findings)

    report = ValidationReport(
        order=order,
        aliases=aliases.as_dict(),
        findings=sort_findings(findings),
        metrics=compute_metrics(graph, entry_phase=config.entry_phase),
        strict=config.strict,
    )
    logger.info(
        "Validation %s: %d document(s) ordered, %d fatal, %d warning(s).",
        "passed" if report.passed else "FAILED",
        len(report.order), report.fatal_count, report.warning_count,
    )
    return report


def validate_content_dir(
    content_dir: str,
    config: Optional[ValidatorConfig] = None,
) -> ValidationReport:
    """Discover the pages under *content_dir* and validate them."""
    config = config or ValidatorConfig()
    with timed("Discover content"):
        raw_documents, sources, findings = discover_documents(
            content_dir, extensions=config.extensions
        )
    return run_validation(
        raw_documents, config=config, sources=sources, prior_findings=findings
    )


def write_report(report: ValidationReport, path: str) -> None:
    """Write *report* as indented JSON."""
    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
    payload: Dict[str, Any] = report.model_dump(mode="json")
    with open(path, "w", encoding="utf-8") as fh:
        json.dump(payload, fh, indent=2)
    logger.info("Report -> %s", path)
