"""
Pydantic models for the curriculum content graph.

Documents: the strongly-typed record built from one page's front matter.
Findings: validation results, tagged with kind and severity.
Report: the aggregate output of one validation pass.
"""

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator


# =========================================================================
# Documents
# =========================================================================


class Document(BaseModel):
    """One lesson page, validated from its front matter.

    Strict mode: ``phase: "2"`` or ``draft: "no"`` are rejected rather
    than coerced.
    """

    model_config = ConfigDict(
        strict=True, frozen=True, extra="ignore", str_strip_whitespace=True
    )

    slug: str = Field(min_length=1)
    title: str = Field(min_length=1)
    phase: int = Field(gt=0)
    lesson: int = Field(gt=0)
    weight: int
    prerequisites: List[str] = Field(default_factory=list)
    aliases: List[str] = Field(default_factory=list)
    draft: bool = False
    source_path: Optional[str] = None

    @field_validator("prerequisites", "aliases")
    @classmethod
    def drop_blank_and_duplicates(cls, values: List[str]) -> List[str]:
        seen: List[str] = []
        for value in values:
            value = value.strip()
            if value and value not in seen:
                seen.append(value)
        return seen

    @property
    def sort_key(self):
        """Position in the learning order: phase, lesson, weight, slug."""
        return (self.phase, self.lesson, self.weight, self.slug)


# =========================================================================
# Findings
# =========================================================================

FindingKind = Literal[
    "MalformedFrontMatter",
    "DuplicateSlug",
    "DanglingPrerequisite",
    "PrerequisiteCycle",
    "OrderingViolation",
    "DuplicateLesson",
    "DraftPrerequisite",
    "AliasCollision",
    "AliasShadowsCanonical",
    "UnreachableContent",
]
Severity = Literal["fatal", "warning"]

# Pipeline order; also the primary sort key for reported findings.
KIND_ORDER: List[str] = [
    "MalformedFrontMatter",
    "DuplicateSlug",
    "DanglingPrerequisite",
    "PrerequisiteCycle",
    "UnreachableContent",
    "OrderingViolation",
    "DuplicateLesson",
    "DraftPrerequisite",
    "AliasCollision",
    "AliasShadowsCanonical",
]

SEVERITY_BY_KIND: Dict[str, Severity] = {
    "MalformedFrontMatter": "fatal",
    "DuplicateSlug": "fatal",
    "DanglingPrerequisite": "fatal",
    "PrerequisiteCycle": "fatal",
    "OrderingViolation": "fatal",
    "AliasCollision": "fatal",
    "AliasShadowsCanonical": "fatal",
    "UnreachableContent": "warning",
    "DuplicateLesson": "warning",
    "DraftPrerequisite": "warning",
}


class Finding(BaseModel):
    """A single validation result carrying the offending slug(s)."""

    model_config = ConfigDict(frozen=True)

    kind: FindingKind
    severity: Severity
    slugs: List[str]
    message: str
    reference: Optional[str] = None

    @classmethod
    def of(
        cls,
        kind: str,
        slugs: List[str],
        message: str,
        reference: Optional[str] = None,
    ) -> "Finding":
        """Build a finding whose severity follows from its kind."""
        return cls(
            kind=kind,
            severity=SEVERITY_BY_KIND[kind],
            slugs=list(slugs),
            message=message,
            reference=reference,
        )

    @property
    def is_fatal(self) -> bool:
        return self.severity == "fatal"

    def sort_key(self):
        return (
            KIND_ORDER.index(self.kind),
            self.slugs,
            self.reference or "",
            self.message,
        )

    def format(self) -> str:
        """One-line rendering used by the CLI."""
        return "%s %s [%s]: %s" % (
            self.severity.upper(),
            self.kind,
            ", ".join(self.slugs),
            self.message,
        )


def sort_findings(findings: List[Finding]) -> List[Finding]:
    """Deterministic ordering so repeated passes report identically."""
    return sorted(findings, key=lambda f: f.sort_key())


# =========================================================================
# Report
# =========================================================================


class GraphMetrics(BaseModel):
    """Summary numbers for the prerequisite graph."""

    total_documents: int = 0
    published_documents: int = 0
    total_edges: int = 0
    avg_out_degree: float = 0.0
    max_depth: int = 0
    isolated_documents: int = 0
    entry_points: int = 0


class ValidationReport(BaseModel):
    """Output of one validation pass; serialised to JSON by the CLI."""

    order: List[str] = Field(default_factory=list)
    aliases: Dict[str, str] = Field(default_factory=dict)
    findings: List[Finding] = Field(default_factory=list)
    metrics: GraphMetrics = Field(default_factory=GraphMetrics)
    strict: bool = False

    @computed_field
    @property
    def fatal_count(self) -> int:
        return sum(1 for f in self.findings if f.is_fatal)

    @computed_field
    @property
    def warning_count(self) -> int:
        return sum(1 for f in self.findings if not f.is_fatal)

    @computed_field
    @property
    def passed(self) -> bool:
        if self.strict:
            return not self.findings
        return self.fatal_count == 0

    def findings_of(self, kind: str) -> List[Finding]:
        return [f for f in self.findings if f.kind == kind]
