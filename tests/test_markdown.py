from __future__ import annotations

import pytest

from deltasmith.clipboard.markdown import (
    MarkdownSerializer,
    escape_markdown,
    html_to_markdown,
    join_blocks,
    markdown_to_html,
)


@pytest.mark.parametrize(
    ("html", "expected"),
    [
        ("<p><strong>ab</strong>c</p>", "**ab**c"),
        ("<p><em>a</em></p>", "_a_"),
        ("<h2>Title</h2><p>x</p>", "## Title\n\nx"),
        ("<p>a</p><p>b</p>", "a\nb"),
        ('<p><a href="http://x.y">site</a></p>', "[site](http://x.y)"),
        ("<p>a*b_c</p>", r"a\*b\_c"),
        ("<p><code>x`y</code></p>", "``x`y``"),
        ('<p><img src="a.png" alt="A"></p>', "![A](a.png)"),
        ("<blockquote>quoted</blockquote>", "> quoted"),
    ],
)
def test_inline_and_block_elements(html: str, expected: str) -> None:
    assert html_to_markdown(html) == expected


def test_bullet_lists() -> None:
    html = '<ul><li data-list="bullet">a</li><li data-list="bullet">b</li></ul>'
    assert html_to_markdown(html) == "*   a\n*   b"


def test_ordered_lists_number_items() -> None:
    html = '<ol><li data-list="ordered">a</li><li data-list="ordered">b</li></ol>'
    assert html_to_markdown(html) == "1.  a\n2.  b"


def test_checklists() -> None:
    html = '<ul><li data-list="checked">done</li><li data-list="unchecked">todo</li></ul>'
    assert html_to_markdown(html) == "[x] done\n[ ] todo"


def test_code_blocks_are_fenced() -> None:
    assert html_to_markdown("<pre>x = 1\ny</pre>") == "```\nx = 1\ny\n```"
    assert html_to_markdown("<pre>a ``` b</pre>") == "````\na ``` b\n````"


def test_table_rows_become_lines() -> None:
    html = "<table><tbody><tr><td>a</td><td>b</td></tr><tr><td>c</td></tr></tbody></table>"
    assert html_to_markdown(html) == "a b\nc"


def test_custom_bullet_marker() -> None:
    serializer = MarkdownSerializer(bullet_marker="-")
    assert serializer.convert('<ul><li data-list="bullet">a</li></ul>') == "-   a"


def test_escape_markdown_line_starts() -> None:
    assert escape_markdown("# not a heading") == r"\# not a heading"
    assert escape_markdown("1. not a list") == r"1\. not a list"
    assert escape_markdown("> not a quote") == r"\> not a quote"


def test_join_blocks_merges_separating_newlines() -> None:
    assert join_blocks("a\n\n\n", "\n\nb") == "a\n\nb"
    assert join_blocks("a", "b") == "ab"
    assert join_blocks("a\n", "b") == "a\nb"


def test_markdown_to_html_uses_extensions() -> None:
    assert markdown_to_html("# T") == "<h1>T</h1>"
    assert markdown_to_html("```\ncode\n```", ["fenced_code"]) == "<pre><code>code\n</code></pre>"
