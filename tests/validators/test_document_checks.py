"""Tests for the candidate-document validator."""

from __future__ import annotations

from vibeedit.validators import (
    AccessibilityCheck,
    DocumentValidator,
    ScriptInjectionCheck,
    TagBalanceCheck,
    validate_document,
)


def _categories(findings) -> list[str]:
    return [finding.category for finding in findings]


def test_image_without_alt_is_one_accessibility_error() -> None:
    report = validate_document('<img src="a.png">')

    assert _categories(report.errors) == ["accessibility"]
    assert report.valid is False


def test_script_tag_is_one_security_error() -> None:
    report = validate_document("<div><script>alert(1)</script></div>")

    assert _categories(report.errors) == ["security"]
    assert report.errors[0].severity == "critical"
    assert report.valid is False


def test_clean_markup_has_no_findings() -> None:
    report = validate_document("<div><p>ok</p></div>")

    assert report.errors == []
    assert report.warnings == []
    assert report.valid is True


def test_inline_style_only_warns() -> None:
    report = validate_document('<div style="color:red"><p>ok</p></div>')

    assert report.errors == []
    assert _categories(report.warnings) == ["style"]
    assert report.valid is True


def test_security_findings_collapse_into_one_error() -> None:
    outcome = ScriptInjectionCheck().check(
        '<a href="javascript:void(0)" onclick="go()">x</a><script></script>'
    )

    assert len(outcome.errors) == 1
    assert "script tag" in outcome.errors[0].message
    assert "inline event handler" in outcome.errors[0].message


def test_content_attribute_is_not_an_event_handler() -> None:
    outcome = ScriptInjectionCheck().check('<meta name="description" content="Fast sites">')

    assert outcome.errors == []


def test_tag_balance_tolerates_small_drift_only() -> None:
    check = TagBalanceCheck()

    assert check.check("<div><p>unclosed<p>also</div>").errors == []
    broken = check.check("<div><div><div><div>")
    assert _categories(broken.errors) == ["syntax"]


def test_void_and_self_closing_tags_do_not_count_as_open() -> None:
    check = TagBalanceCheck(tolerance=0)

    assert check.check('<div><br><hr/><input type="text"><img alt="x"/></div>').errors == []


def test_buttons_need_text_or_accessible_name() -> None:
    outcome = AccessibilityCheck().check(
        "<button><svg></svg></button>"
        '<button aria-label="Close"><svg></svg></button>'
        "<button><span>Save</span></button>"
    )

    assert len(outcome.errors) == 1
    assert outcome.errors[0].message == "Button missing text content or aria-label"


def test_every_check_runs_after_earlier_failures() -> None:
    report = DocumentValidator().validate('<script>x()</script><img src="a.png" style="x">')

    assert _categories(report.errors) == ["security", "accessibility"]
    assert _categories(report.warnings) == ["style"]
