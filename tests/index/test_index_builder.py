"""Tests for section extraction and index persistence."""

from __future__ import annotations

from vibeedit.index import IndexRepository, build_index, detect_style_system
from vibeedit.stores import MemoryRecordStore


def test_build_index_extracts_named_sections(sample_html: str) -> None:
    index = build_index(sample_html, "site")

    assert sorted(index.sections) == ["Footer", "Hero", "Navbar"]
    assert index.sections["Navbar"].content.startswith('<nav class="flex">')
    assert index.sections["Navbar"].content.endswith("</nav>")
    assert "<h1>Welcome</h1>" in index.sections["Hero"].content
    assert index.sections["Footer"].content.endswith("</footer>")
    assert index.document == sample_html
    assert index.style_system == "tailwind"


def test_build_index_allows_documents_without_sections() -> None:
    index = build_index("<main><p>Plain</p></main>", "bare")

    assert index.sections == {}
    assert index.style_system == "css"


def test_hero_requires_hero_class() -> None:
    index = build_index('<section class="pricing"><h2>Plans</h2></section>', "site")

    assert "Hero" not in index.sections


def test_section_matching_is_case_insensitive() -> None:
    index = build_index("<NAV><a>Home</a></NAV><FOOTER>bye</FOOTER>", "site")

    assert sorted(index.sections) == ["Footer", "Navbar"]


def test_only_first_match_per_section_is_kept() -> None:
    index = build_index("<nav>first</nav><nav>second</nav>", "site")

    assert index.sections["Navbar"].content == "<nav>first</nav>"


def test_detect_style_system_markers() -> None:
    assert detect_style_system('<link href="tailwindcss.css">') == "tailwind"
    assert detect_style_system('<div class="p-4"></div>') == "tailwind"
    assert detect_style_system("<div id='x'></div>") == "css"


def test_reindex_is_idempotent_apart_from_timestamp(sample_html: str) -> None:
    repository = IndexRepository(MemoryRecordStore())

    repository.save_index(build_index(sample_html, "site"))
    first = repository.load_index("site")
    repository.save_index(build_index(sample_html, "site"))
    second = repository.load_index("site")

    assert first is not None and second is not None
    assert first.sections == second.sections
    assert first.style_system == second.style_system
    assert first.document == second.document


def test_load_index_returns_none_for_unknown_project() -> None:
    assert IndexRepository(MemoryRecordStore()).load_index("missing") is None
