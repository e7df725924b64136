"""Render lesson markdown to sanitized HTML.

This is a deliberately small markdown dialect: headings h1-h3, emphasis,
inline code, links, horizontal rules, flat lists and paragraphs, one
paragraph per source line. The result always passes through an allow-list
sanitizer, whatever the earlier rules produced.
"""

from __future__ import annotations

import re

import bleach

ALLOWED_TAGS = frozenset({
    "h1", "h2", "h3", "p", "strong", "em", "code", "a", "ul", "ol", "li", "hr", "br",
})
ALLOWED_ATTRIBUTES = {"a": ["href", "target", "rel"]}
ALLOWED_PROTOCOLS = frozenset({"http", "https", "mailto"})

# Shielded fragments are swapped out for \x00<n>\x00 while later rules run
_SHIELD_RE = re.compile("\x00(\\d+)\x00")

_HEADING_RULES = (
    (re.compile(r"^### (.+)$"), "h3"),
    (re.compile(r"^## (.+)$"), "h2"),
    (re.compile(r"^# (.+)$"), "h1"),
)
_HR_RE = re.compile(r"^(?:---|\*\*\*|___)$")
_UL_ITEM_RE = re.compile(r"^[-*] (.+)$")
_OL_ITEM_RE = re.compile(r"^\d+\. (.+)$")

_EMPHASIS_RULES = (
    (re.compile(r"\*\*\*(.+?)\*\*\*"), r"<strong><em>\1</em></strong>"),
    (re.compile(r"(?<!\w)___(.+?)___(?!\w)"), r"<strong><em>\1</em></strong>"),
    (re.compile(r"\*\*(.+?)\*\*"), r"<strong>\1</strong>"),
    (re.compile(r"(?<!\w)__(.+?)__(?!\w)"), r"<strong>\1</strong>"),
    (re.compile(r"\*(.+?)\*"), r"<em>\1</em>"),
    (re.compile(r"(?<!\w)_(.+?)_(?!\w)"), r"<em>\1</em>"),
)
_INLINE_CODE_RE = re.compile(r"`([^`]+)`")
_LINK_RE = re.compile(r"\[([^\[\]]+)\]\(([^)\s]+)\)")


def to_safe_html(markdown: str) -> str:
    """Convert lesson markdown to allow-listed HTML.

    Args:
        markdown: Raw markdown authored in a text, explanation or practice
            block, or a text segment of a legacy lesson.

    Returns:
        HTML containing only ALLOWED_TAGS, one block element per line.
    """
    if not markdown:
        return ""

    text = _escape(markdown.replace("\x00", ""))
    lines = text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    return sanitize_html("\n".join(_render_lines(lines)))


def sanitize_html(html: str) -> str:
    """Strip everything outside the allow-list.

    Independent of the markdown rules; applying it to its own output
    returns that output unchanged.
    """
    return bleach.clean(
        html,
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRIBUTES,
        protocols=ALLOWED_PROTOCOLS,
        strip=True,
        strip_comments=True,
    )


def _escape(text: str) -> str:
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def _render_lines(lines: list[str]) -> list[str]:
    """Classify each line and merge consecutive list items."""
    out: list[str] = []
    list_tag: str | None = None
    items: list[str] = []

    def close_list() -> None:
        nonlocal list_tag, items
        if list_tag:
            out.append(f"<{list_tag}>{''.join(items)}</{list_tag}>")
        list_tag = None
        items = []

    for line in lines:
        stripped = line.strip()
        if not stripped:
            close_list()
            continue

        heading = _match_heading(stripped)
        if heading:
            close_list()
            tag, body = heading
            out.append(f"<{tag}>{_render_inline(body)}</{tag}>")
            continue

        if _HR_RE.match(stripped):
            close_list()
            out.append("<hr>")
            continue

        item_tag = None
        match = _UL_ITEM_RE.match(stripped)
        if match:
            item_tag = "ul"
        else:
            match = _OL_ITEM_RE.match(stripped)
            if match:
                item_tag = "ol"
        if item_tag and match:
            if list_tag != item_tag:
                close_list()
                list_tag = item_tag
            items.append(f"<li>{_render_inline(match.group(1))}</li>")
            continue

        close_list()
        out.append(f"<p>{_render_inline(stripped)}</p>")

    close_list()
    return out


def _match_heading(line: str) -> tuple[str, str] | None:
    # ### before ## before #
    for pattern, tag in _HEADING_RULES:
        match = pattern.match(line)
        if match:
            return tag, match.group(1)
    return None


def _render_inline(text: str) -> str:
    """Apply emphasis, inline code and links to one line of escaped text."""
    shielded: list[str] = []

    def shield(fragment: str) -> str:
        shielded.append(fragment)
        return f"\x00{len(shielded) - 1}\x00"

    # Code spans and link targets are taken out first so emphasis cannot
    # rewrite their contents.
    text = _INLINE_CODE_RE.sub(lambda m: shield(f"<code>{m.group(1)}</code>"), text)
    text = _LINK_RE.sub(lambda m: shield(_anchor(m.group(1), m.group(2))), text)
    text = _apply_emphasis(text)
    return _unshield(text, shielded)


def _apply_emphasis(text: str) -> str:
    for pattern, replacement in _EMPHASIS_RULES:
        text = pattern.sub(replacement, text)
    return text


def _anchor(label: str, href: str) -> str:
    href = href.replace('"', "&quot;")
    return (
        f'<a href="{href}" target="_blank" rel="noopener noreferrer">'
        f"{_apply_emphasis(label)}</a>"
    )


def _unshield(text: str, shielded: list[str]) -> str:
    # Link labels may themselves contain shielded code spans
    while _SHIELD_RE.search(text):
        text = _SHIELD_RE.sub(lambda m: shielded[int(m.group(1))], text)
    return text
