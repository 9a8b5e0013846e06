"""Markdown bridges used by the clipboard.

Plain-text pastes are rendered to HTML with Python-Markdown and then run
through the regular matcher pipeline. Copies serialise the semantic HTML of
the selection back to Markdown with :class:`MarkdownSerializer`, which
follows the conventions of Turndown (ATX headings, ``*`` bullets, fenced
code) plus checklist items written as ``[ ]`` / ``[x]``.
"""

from __future__ import annotations

from collections.abc import Iterable
import re
from typing import Any

from bs4.element import Tag
import markdown

from ..core.exceptions import ConversionError
from ..core.markup import child_nodes, is_element, is_text, markup_root, parse_markup, tag_name


def markdown_to_html(source: str, extensions: Iterable[str] = ()) -> str:
    """Render ``source`` to HTML with Python-Markdown."""
    try:
        md = markdown.Markdown(extensions=list(extensions))
    except Exception as exc:  # pragma: no cover - library-controlled
        raise ConversionError(f"Failed to initialize Markdown processor: {exc}") from exc
    try:
        return md.convert(source)
    except Exception as exc:  # pragma: no cover - library-controlled
        raise ConversionError(f"Failed to convert Markdown source: {exc}") from exc


_ESCAPES = (
    (re.compile(r"\\"), r"\\\\"),
    (re.compile(r"\*"), r"\*"),
    (re.compile(r"^-", re.MULTILINE), r"\-"),
    (re.compile(r"^\+ ", re.MULTILINE), r"\+ "),
    (re.compile(r"^(=+)", re.MULTILINE), r"\\\1"),
    (re.compile(r"^(#{1,6}) ", re.MULTILINE), r"\\\1 "),
    (re.compile(r"`"), r"\`"),
    (re.compile(r"^~~~", re.MULTILINE), r"\~~~"),
    (re.compile(r"\["), r"\["),
    (re.compile(r"\]"), r"\]"),
    (re.compile(r"^>", re.MULTILINE), r"\>"),
    (re.compile(r"_"), r"\_"),
    (re.compile(r"^(\d+)\. ", re.MULTILINE), r"\1\. "),
)

_WHITESPACE = re.compile(r"\s+")
_LEADING_NEWLINES = re.compile(r"^\n+")
_TRAILING_NEWLINES = re.compile(r"\n+$")
_HEADINGS = {f"h{level}": level for level in range(1, 7)}


def escape_markdown(text: str) -> str:
    for pattern, replacement in _ESCAPES:
        text = pattern.sub(replacement, text)
    return text


def join_blocks(output: str, addition: str) -> str:
    """Concatenate two chunks, merging the newlines that separate them."""
    head = _TRAILING_NEWLINES.sub("", output)
    tail = _LEADING_NEWLINES.sub("", addition)
    separator = max(len(output) - len(head), len(addition) - len(tail))
    return head + "\n\n"[: min(separator, 2)] + tail


class MarkdownSerializer:
    """Serialise semantic HTML to Markdown."""

    def __init__(self, *, bullet_marker: str = "*", parser: str = "html.parser") -> None:
        self.bullet_marker = bullet_marker
        self.parser = parser

    def convert(self, html: str) -> str:
        root = markup_root(parse_markup(html, self.parser))
        output = self._children(root, in_code=False)
        return output.lstrip("\t\r\n").rstrip()

    def _children(self, node: Any, *, in_code: bool) -> str:
        output = ""
        for child in child_nodes(node):
            output = join_blocks(output, self._node(child, in_code=in_code))
        return output

    def _node(self, node: Any, *, in_code: bool) -> str:
        if is_text(node):
            return self._text(node, in_code=in_code)
        if not is_element(node):
            return ""
        name = tag_name(node)
        if name == "pre":
            return self._pre(node)
        content = self._children(node, in_code=in_code or name == "code")
        return self._element(node, name, content)

    def _text(self, node: Any, *, in_code: bool) -> str:
        text = str(node)
        if not text.strip() and "\n" in text:
            return ""
        text = _WHITESPACE.sub(" ", text)
        return text if in_code else escape_markdown(text)

    def _pre(self, node: Tag) -> str:
        code = node.get_text()
        fence = "```"
        while fence in code:
            fence += "`"
        return f"\n\n{fence}\n{code.rstrip(chr(10))}\n{fence}\n\n"

    def _element(self, node: Tag, name: str, content: str) -> str:
        if name == "p":
            return f"{content}\n"
        if name in _HEADINGS:
            return f"\n\n{'#' * _HEADINGS[name]} {content}\n\n"
        if name == "br":
            return "  \n"
        if name in {"strong", "b"}:
            return f"**{content}**" if content.strip() else ""
        if name in {"em", "i"}:
            return f"_{content}_" if content.strip() else ""
        if name == "code":
            return self._code(content)
        if name == "a":
            href = node.get("href")
            return f"[{content}]({href})" if href else content
        if name == "img":
            alt = node.get("alt") or ""
            src = node.get("src") or ""
            return f"![{alt}]({src})" if src else ""
        if name == "blockquote":
            quoted = _TRAILING_NEWLINES.sub("", _LEADING_NEWLINES.sub("", content))
            quoted = re.sub(r"^", "> ", quoted, flags=re.MULTILINE)
            return f"\n\n{quoted}\n\n"
        if name in {"ul", "ol"}:
            parent = node.parent
            if tag_name(parent) == "li" and parent.find_all(True, recursive=False)[-1] is node:
                return f"\n{content}"
            return f"\n\n{content}\n\n"
        if name == "li":
            return self._list_item(node, content)
        if name == "hr":
            return "\n\n* * *\n\n"
        if name in {"td", "th"}:
            return f"{content} "
        if name == "tr":
            return f"{content.rstrip()}\n"
        return content

    def _code(self, content: str) -> str:
        if not content:
            return ""
        fence = "`"
        while fence in content:
            fence += "`"
        padding = " " if content.startswith("`") or content.endswith("`") else ""
        return f"{fence}{padding}{content}{padding}{fence}"

    def _list_item(self, node: Tag, content: str) -> str:
        kind = node.get("data-list")
        has_next = node.find_next_sibling(True) is not None
        if kind in {"checked", "unchecked"}:
            marker = "[x] " if kind == "checked" else "[ ] "
            body = content.strip("\n")
            return f"{marker}{body}" + ("\n" if has_next else "")
        content = _LEADING_NEWLINES.sub("", content)
        content = _TRAILING_NEWLINES.sub("\n", content)
        content = content.replace("\n", "\n    ")
        parent = node.parent
        if tag_name(parent) == "ol" or kind == "ordered":
            start = parent.get("start") if isinstance(parent, Tag) else None
            siblings = parent.find_all("li", recursive=False) if isinstance(parent, Tag) else [node]
            position = next((i for i, item in enumerate(siblings) if item is node), 0)
            number = int(start) + position if start and str(start).isdigit() else position + 1
            prefix = f"{number}.  "
        else:
            prefix = f"{self.bullet_marker}   "
        suffix = "\n" if has_next and not content.endswith("\n") else ""
        return f"{prefix}{content}{suffix}"


def html_to_markdown(html: str, *, parser: str = "html.parser") -> str:
    """Return the Markdown rendering of ``html``."""
    return MarkdownSerializer(parser=parser).convert(html)


__all__ = [
    "MarkdownSerializer",
    "escape_markdown",
    "html_to_markdown",
    "join_blocks",
    "markdown_to_html",
]
