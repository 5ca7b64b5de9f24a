"""
Document loading: content discovery, YAML front matter, typed Documents.

Every per-file or per-document problem becomes a ``MalformedFrontMatter``
(or ``DuplicateSlug``) finding; loading always continues so one pass
reports every broken page.
"""

import logging
from collections import abc
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import yaml
from pydantic import ValidationError

from lessongraph.models import Document, Finding
from lessongraph.utils import normalize_path

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "phase", "lesson", "weight")
_DOCUMENT_FIELDS = REQUIRED_FIELDS + ("prerequisites", "aliases", "draft")
_DELIMITERS = ("---", "...")


class MalformedFrontMatter(ValueError):
    """Raised when one document's front matter cannot become a Document."""

    def __init__(self, slug: str, problems: Sequence[str]):
        self.slug = slug
        self.problems = list(problems)
        super().__init__(f"{slug}: " + "; ".join(self.problems))

    def to_finding(self) -> Finding:
        return Finding.of(
            "MalformedFrontMatter", [self.slug], "; ".join(self.problems)
        )


# =========================================================================
# Front matter
# =========================================================================


def split_front_matter(text: str, slug: str) -> Tuple[Dict[str, Any], str]:
    """Split *text* into its YAML front matter mapping and markdown body."""
    lines = text.splitlines(keepends=True)
    if not lines or lines[0].strip() != "---":
        raise MalformedFrontMatter(slug, ["no front matter block"])

    for idx in range(1, len(lines)):
        if lines[idx].strip() in _DELIMITERS:
            header = "".join(lines[1:idx])
            body = "".join(lines[idx + 1:])
            break
    else:
        raise MalformedFrontMatter(slug, ["front matter block is not closed"])

    try:
        data = yaml.safe_load(header)
    except yaml.YAMLError as exc:
        raise MalformedFrontMatter(slug, [f"invalid YAML: {exc}"]) from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise MalformedFrontMatter(
            slug, [f"front matter must be a mapping, got {type(data).__name__}"]
        )
    return data, body


def slug_from_path(relative: Path) -> str:
    """Derive a slug from a path relative to the content root."""
    return normalize_path(relative.with_suffix("").as_posix())


def _is_ignored(relative: Path) -> bool:
    # Hidden files and underscore directories (_includes, _data) are not pages.
    return any(part.startswith((".", "_")) for part in relative.parts)


def discover_documents(
    content_dir: str,
    extensions: Sequence[str] = (".md",),
) -> Tuple[Dict[str, Dict[str, Any]], Dict[str, str], List[Finding]]:
    """Read the front matter of every content file under *content_dir*.

    Returns:
        Tuple of ``(raw_documents, sources, findings)`` where
        ``raw_documents`` maps slug to front matter, ``sources`` maps slug
        to the file it came from.
    """
    root = Path(content_dir)
    if not root.is_dir():
        raise FileNotFoundError(f"Content directory not found: {content_dir}")

    wanted = {ext.lower() for ext in extensions}
    raw_documents: Dict[str, Dict[str, Any]] = {}
    sources: Dict[str, str] = {}
    findings: List[Finding] = []

    paths = sorted(
        p for p in root.rglob("*")
        if p.is_file() and p.suffix.lower() in wanted
        and not _is_ignored(p.relative_to(root))
    )
    for path in paths:
        relative = path.relative_to(root)
        slug = slug_from_path(relative)

        if slug in sources:
            findings.append(Finding.of(
                "DuplicateSlug",
                [slug],
                f"{relative.as_posix()} and {sources[slug]} both map to this slug",
            ))
            logger.debug("Duplicate slug %s from %s.", slug, relative)
            continue
        sources[slug] = relative.as_posix()

        try:
            text = path.read_text(encoding="utf-8-sig")
            front_matter, _body = split_front_matter(text, slug)
        except MalformedFrontMatter as exc:
            findings.append(exc.to_finding())
            continue
        except (OSError, UnicodeDecodeError) as exc:
            findings.append(Finding.of(
                "MalformedFrontMatter", [slug], f"cannot read file: {exc}"
            ))
            continue
        raw_documents[slug] = front_matter

    logger.info(
        "Discovered %d content file(s) under %s (%d with usable front matter).",
        len(paths), content_dir, len(raw_documents),
    )
    return raw_documents, sources, findings


# =========================================================================
# Document construction
# =========================================================================


def _as_list(value: Any) -> Any:
    """``None`` -> ``[]``, a bare string -> ``[value]``, any other sequence
    -> ``list``; anything else as-is for validation to reject."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, abc.Sequence) and not isinstance(value, bytes):
        return list(value)
    return value


def _describe(exc: ValidationError) -> List[str]:
    problems = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err["loc"])
        problems.append(f"{loc}: {err['msg']}")
    return problems


def load_document(
    slug: str,
    raw: Mapping[str, Any],
    source_path: Optional[str] = None,
) -> Document:
    """Build a :class:`Document` from raw front matter or raise
    :class:`MalformedFrontMatter`."""
    if not isinstance(raw, Mapping):
        raise MalformedFrontMatter(
            slug, [f"front matter must be a mapping, got {type(raw).__name__}"]
        )

    missing = [name for name in REQUIRED_FIELDS if raw.get(name) is None]
    if missing:
        raise MalformedFrontMatter(
            slug, [f"missing required field '{name}'" for name in missing]
        )

    fields = {key: raw[key] for key in _DOCUMENT_FIELDS if key in raw}
    fields["prerequisites"] = _as_list(raw.get("prerequisites"))
    fields["aliases"] = _as_list(raw.get("aliases"))
    if fields.get("draft") is None:
        fields.pop("draft", None)
    fields["slug"] = slug
    fields["source_path"] = source_path

    try:
        return Document.model_validate(fields)
    except ValidationError as exc:
        raise MalformedFrontMatter(slug, _describe(exc)) from exc


def load_documents(
    raw_documents: Mapping[str, Mapping[str, Any]],
    sources: Optional[Mapping[str, str]] = None,
) -> Tuple[Dict[str, Document], List[Finding]]:
    """Load every document, accumulating one finding per broken document.

    Returns:
        Tuple of ``(documents_by_slug, findings)``.
    """
    sources = sources or {}
    documents: Dict[str, Document] = {}
    findings: List[Finding] = []

    for slug in sorted(raw_documents):
        try:
            documents[slug] = load_document(
                slug, raw_documents[slug], sources.get(slug)
            )
        except MalformedFrontMatter as exc:
            logger.debug("Malformed front matter: %s", exc)
            findings.append(exc.to_finding())

    logger.info(
        "Loaded %d document(s); %d malformed.", len(documents), len(findings)
    )
    return documents, findings
