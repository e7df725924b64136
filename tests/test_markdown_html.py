"""Tests for markdown_html.py - lesson markdown to sanitized HTML.

Tests:
- Block rules (headings, rules, lists, paragraphs)
- Inline rules and their precedence
- Links and protocol filtering
- Sanitizer allow-list and idempotence
"""

from __future__ import annotations

import pytest

from coursecraft.lessons.markdown_html import sanitize_html, to_safe_html


# =============================================================================
# Block-level rules
# =============================================================================


class TestBlockRules:
    """Each source line becomes one block element."""

    def test_empty(self) -> None:
        assert to_safe_html("") == ""

    @pytest.mark.parametrize(
        ("markdown", "expected"),
        [
            ("# Title", "<h1>Title</h1>"),
            ("## Sub", "<h2>Sub</h2>"),
            ("### Small", "<h3>Small</h3>"),
        ],
    )
    def test_headings(self, markdown: str, expected: str) -> None:
        assert to_safe_html(markdown) == expected

    def test_h4_is_a_paragraph(self) -> None:
        assert to_safe_html("#### Deep") == "<p>#### Deep</p>"

    @pytest.mark.parametrize("rule", ["---", "***", "___"])
    def test_horizontal_rule(self, rule: str) -> None:
        assert to_safe_html(rule) == "<hr>"

    def test_unordered_list(self) -> None:
        assert to_safe_html("- a\n- b") == "<ul><li>a</li><li>b</li></ul>"

    def test_star_list(self) -> None:
        assert to_safe_html("* a\n* b") == "<ul><li>a</li><li>b</li></ul>"

    def test_ordered_list(self) -> None:
        assert to_safe_html("1. a\n2. b") == "<ol><li>a</li><li>b</li></ol>"

    def test_one_paragraph_per_line(self) -> None:
        assert to_safe_html("first\nsecond") == "<p>first</p>\n<p>second</p>"

    def test_blank_lines_dropped(self) -> None:
        assert to_safe_html("a\n\n\nb") == "<p>a</p>\n<p>b</p>"

    def test_list_then_paragraph(self) -> None:
        assert to_safe_html("- a\nafter") == "<ul><li>a</li></ul>\n<p>after</p>"


# =============================================================================
# Inline rules
# =============================================================================


class TestInlineRules:
    """Emphasis, code spans and links inside a line."""

    def test_bold(self) -> None:
        assert to_safe_html("**bold**") == "<p><strong>bold</strong></p>"

    def test_italic(self) -> None:
        assert to_safe_html("*it*") == "<p><em>it</em></p>"

    def test_bold_italic_before_bold(self) -> None:
        assert to_safe_html("***both***") == "<p><strong><em>both</em></strong></p>"

    def test_underscore_emphasis(self) -> None:
        assert to_safe_html("__b__ and _i_") == "<p><strong>b</strong> and <em>i</em></p>"

    def test_snake_case_is_not_emphasis(self) -> None:
        assert to_safe_html("use snake_case_name here") == "<p>use snake_case_name here</p>"

    def test_code_span_shields_emphasis(self) -> None:
        assert to_safe_html("`a*b*c`") == "<p><code>a*b*c</code></p>"

    def test_heading_with_inline(self) -> None:
        assert to_safe_html("## A **b**") == "<h2>A <strong>b</strong></h2>"

    def test_list_item_with_code(self) -> None:
        assert to_safe_html("- run `ls`") == "<ul><li>run <code>ls</code></li></ul>"


class TestLinks:
    def test_link_attributes(self) -> None:
        html = to_safe_html("[site](https://example.com)")
        assert 'href="https://example.com"' in html
        assert 'target="_blank"' in html
        assert 'rel="noopener noreferrer"' in html
        assert ">site</a>" in html

    def test_emphasis_in_label(self) -> None:
        html = to_safe_html("[**b**](http://x.com)")
        assert "<strong>b</strong></a>" in html

    def test_underscores_in_url_untouched(self) -> None:
        html = to_safe_html("[doc](https://x.com/a_b_c)")
        assert 'href="https://x.com/a_b_c"' in html

    def test_javascript_url_removed(self) -> None:
        html = to_safe_html("[x](javascript:alert(1))")
        assert "javascript" not in html
        assert "href" not in html

    def test_mailto_allowed(self) -> None:
        assert 'href="mailto:a@b.c"' in to_safe_html("[mail](mailto:a@b.c)")

    def test_unclosed_brackets_stay_text(self) -> None:
        assert to_safe_html("[[a] b") == "<p>[[a] b</p>"

    def test_outer_bracket_of_nested_label_stays_text(self) -> None:
        html = to_safe_html("[[x]](https://e.com)")
        assert html.startswith("<p>[<a ")
        assert html.endswith(">x</a>]</p>")


# =============================================================================
# Sanitization
# =============================================================================


class TestSanitization:
    """Raw HTML never reaches the output as markup."""

    def test_script_is_escaped(self) -> None:
        html = to_safe_html("<script>alert(1)</script>")
        assert "<script" not in html
        assert html == "<p>&lt;script&gt;alert(1)&lt;/script&gt;</p>"

    def test_ampersand(self) -> None:
        assert to_safe_html("a & b") == "<p>a &amp; b</p>"

    def test_sanitize_strips_disallowed_tags(self) -> None:
        assert sanitize_html('<div onclick="x()"><p>hi</p></div>') == "<p>hi</p>"

    def test_sanitize_strips_attributes(self) -> None:
        assert sanitize_html('<p style="color:red">x</p>') == "<p>x</p>"

    def test_sanitize_strips_comments(self) -> None:
        assert sanitize_html("<!-- note -->x") == "x"

    @pytest.mark.parametrize(
        "html",
        [
            '<div><img src="x" onerror="y"><p>hi</p></div>',
            '<a href="javascript:void(0)" onclick="z">x</a>',
            "<h1>t</h1><hr><ul><li>a</li></ul>",
        ],
    )
    def test_sanitize_idempotent(self, html: str) -> None:
        once = sanitize_html(html)
        assert sanitize_html(once) == once

    @pytest.mark.parametrize(
        "markdown",
        [
            "# T\n**b** _i_ `c`\n- x\n1. y\n---",
            "[l](https://e.com) <b>raw</b> & stuff",
        ],
    )
    def test_rendered_html_is_stable_under_sanitize(self, markdown: str) -> None:
        html = to_safe_html(markdown)
        assert sanitize_html(html) == html
