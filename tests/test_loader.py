"""
pytest suite for document loading: front matter parsing, content
discovery, and typed Document construction.
"""

import os
import sys
from pathlib import Path

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from lessongraph.loader import (
    MalformedFrontMatter,
    discover_documents,
    load_document,
    load_documents,
    slug_from_path,
    split_front_matter,
)


# =========================================================================
# Helpers
# =========================================================================


def _raw(title="Intro", phase=1, lesson=1, weight=0, **extra):
    data = {"title": title, "phase": phase, "lesson": lesson, "weight": weight}
    data.update(extra)
    return data


def _write(root, relative, text):
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


_PAGE = """\
---
title: {title}
phase: {phase}
lesson: {lesson}
weight: 10
prerequisites:
  - basics/intro
---
# Body

Some lesson prose.
"""


# =========================================================================
# Test: Front matter
# =========================================================================


class TestSplitFrontMatter:
    """Tests for YAML front matter extraction."""

    def test_mapping_and_body(self):
        meta, body = split_front_matter(
            _PAGE.format(title="Pattern Matching", phase=2, lesson=3), "x"
        )
        assert meta["title"] == "Pattern Matching"
        assert meta["phase"] == 2
        assert meta["prerequisites"] == ["basics/intro"]
        assert body.startswith("# Body")

    def test_missing_block(self):
        with pytest.raises(MalformedFrontMatter) as exc:
            split_front_matter("# Just markdown\n", "x")
        assert exc.value.slug == "x"
        assert "no front matter" in str(exc.value)

    def test_unclosed_block(self):
        with pytest.raises(MalformedFrontMatter, match="not closed"):
            split_front_matter("---\ntitle: A\n", "x")

    def test_invalid_yaml(self):
        with pytest.raises(MalformedFrontMatter, match="invalid YAML"):
            split_front_matter("---\ntitle: [unclosed\n---\n", "x")

    def test_non_mapping_yaml(self):
        with pytest.raises(MalformedFrontMatter, match="mapping"):
            split_front_matter("---\n- a\n- b\n---\n", "x")

    def test_empty_block_is_empty_mapping(self):
        meta, body = split_front_matter("---\n---\nbody\n", "x")
        assert meta == {}
        assert body == "body\n"


# =========================================================================
# Test: Slugs & discovery
# =========================================================================


class TestDiscovery:
    """Tests for content directory scanning."""

    def test_slug_from_path(self):
        assert slug_from_path(Path("basics/intro.md")) == "basics/intro"
        assert slug_from_path(Path("basics/index.md")) == "basics"
        assert slug_from_path(Path("index.md")) == "index"

    def test_discovers_pages(self, tmp_path):
        _write(tmp_path, "basics/intro.md", _PAGE.format(title="Intro", phase=1, lesson=1))
        _write(tmp_path, "advanced/otp.md", _PAGE.format(title="OTP", phase=3, lesson=1))
        _write(tmp_path, "notes.txt", "not content")

        raw, sources, findings = discover_documents(str(tmp_path))
        assert sorted(raw) == ["advanced/otp", "basics/intro"]
        assert sources["advanced/otp"] == "advanced/otp.md"
        assert raw["advanced/otp"]["phase"] == 3
        assert findings == []

    def test_ignores_hidden_and_underscore_dirs(self, tmp_path):
        _write(tmp_path, "_includes/partial.md", "no front matter")
        _write(tmp_path, ".drafts/x.md", "no front matter")
        _write(tmp_path, "a.md", _PAGE.format(title="A", phase=1, lesson=1))

        raw, _, findings = discover_documents(str(tmp_path))
        assert list(raw) == ["a"]
        assert findings == []

    def test_bad_file_does_not_stop_discovery(self, tmp_path):
        _write(tmp_path, "a.md", "# no front matter\n")
        _write(tmp_path, "b.md", _PAGE.format(title="B", phase=1, lesson=1))

        raw, _, findings = discover_documents(str(tmp_path))
        assert list(raw) == ["b"]
        assert len(findings) == 1
        assert findings[0].kind == "MalformedFrontMatter"
        assert findings[0].slugs == ["a"]

    def test_duplicate_slug(self, tmp_path):
        _write(tmp_path, "a.md", _PAGE.format(title="A", phase=1, lesson=1))
        _write(tmp_path, "a/index.md", _PAGE.format(title="A2", phase=1, lesson=2))

        raw, _, findings = discover_documents(str(tmp_path))
        assert list(raw) == ["a"]
        assert [f.kind for f in findings] == ["DuplicateSlug"]
        assert findings[0].severity == "fatal"

    def test_extensions(self, tmp_path):
        _write(tmp_path, "a.markdown", _PAGE.format(title="A", phase=1, lesson=1))
        raw, _, _ = discover_documents(str(tmp_path), extensions=[".markdown"])
        assert list(raw) == ["a"]

    def test_missing_dir(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            discover_documents(str(tmp_path / "nope"))


# =========================================================================
# Test: Document construction
# =========================================================================


class TestLoadDocument:
    """Tests for strict front matter -> Document mapping."""

    def test_minimal(self):
        doc = load_document("a", _raw())
        assert doc.slug == "a"
        assert doc.prerequisites == []
        assert doc.aliases == []
        assert doc.draft is False

    def test_string_prerequisite_becomes_list(self):
        doc = load_document("b", _raw(prerequisites="a", aliases="/old-b/"))
        assert doc.prerequisites == ["a"]
        assert doc.aliases == ["/old-b/"]

    def test_tuple_lists_accepted(self):
        doc = load_document("b", _raw(prerequisites=("a",), aliases=("/x/", "/y/")))
        assert doc.prerequisites == ["a"]
        assert doc.aliases == ["/x/", "/y/"]

    def test_null_lists_and_draft(self):
        doc = load_document("a", _raw(prerequisites=None, aliases=None, draft=None))
        assert doc.prerequisites == []
        assert doc.draft is False

    def test_duplicates_and_blanks_collapsed(self):
        doc = load_document("c", _raw(prerequisites=["a", " a ", "", "b"]))
        assert doc.prerequisites == ["a", "b"]

    def test_unknown_keys_ignored(self):
        doc = load_document("a", _raw(layout="lesson.njk", permalink="/a/"))
        assert doc.title == "Intro"

    def test_missing_required_fields(self):
        with pytest.raises(MalformedFrontMatter) as exc:
            load_document("a", {"title": "A"})
        assert exc.value.problems == [
            "missing required field 'phase'",
            "missing required field 'lesson'",
            "missing required field 'weight'",
        ]

    @pytest.mark.parametrize(
        "field,value",
        [
            ("phase", 0),
            ("phase", -1),
            ("phase", "2"),
            ("phase", True),
            ("lesson", 1.5),
            ("weight", "heavy"),
            ("title", "   "),
            ("draft", "no"),
            ("prerequisites", [1, 2]),
            ("aliases", {"a": 1}),
        ],
    )
    def test_wrong_types_rejected(self, field, value):
        with pytest.raises(MalformedFrontMatter) as exc:
            load_document("a", _raw(**{field: value}))
        assert any(p.startswith(field) for p in exc.value.problems)

    def test_non_mapping(self):
        with pytest.raises(MalformedFrontMatter, match="mapping"):
            load_document("a", ["title"])

    def test_finding(self):
        with pytest.raises(MalformedFrontMatter) as exc:
            load_document("a", _raw(phase=0))
        finding = exc.value.to_finding()
        assert finding.kind == "MalformedFrontMatter"
        assert finding.severity == "fatal"
        assert finding.slugs == ["a"]


class TestLoadDocuments:
    """Tests for accumulate-all-errors loading."""

    def test_accumulates(self):
        docs, findings = load_documents({
            "a": _raw(),
            "b": _raw(phase="one"),
            "c": {"title": "C"},
            "d": _raw(lesson=2),
        })
        assert sorted(docs) == ["a", "d"]
        assert [f.slugs for f in findings] == [["b"], ["c"]]

    def test_sources_attached(self):
        docs, _ = load_documents({"a": _raw()}, sources={"a": "a.md"})
        assert docs["a"].source_path == "a.md"
