from __future__ import annotations

from delta import Delta

from deltasmith.core.html import delta_to_html
from deltasmith.core.registry import FormatRegistry


def render(registry: FormatRegistry, ops: list[dict]) -> str:
    return delta_to_html(Delta(ops), registry)


def test_paragraph_with_inline_formats(registry: FormatRegistry) -> None:
    html = render(registry, [{"insert": "Hello "}, {"insert": "World", "attributes": {"bold": True}}, {"insert": "\n"}])
    assert html == "<p>Hello <strong>World</strong></p>"


def test_inline_wrappers_nest_in_a_stable_order(registry: FormatRegistry) -> None:
    html = render(
        registry,
        [{"insert": "x", "attributes": {"bold": True, "link": "http://a.b", "italic": True}}, {"insert": "\n"}],
    )
    assert html == '<p><a href="http://a.b"><em><strong>x</strong></em></a></p>'


def test_unsafe_links_are_neutralised(registry: FormatRegistry) -> None:
    html = render(registry, [{"insert": "x", "attributes": {"link": "javascript:alert(1)"}}, {"insert": "\n"}])
    assert html == '<p><a href="about:blank">x</a></p>'


def test_text_is_escaped(registry: FormatRegistry) -> None:
    assert render(registry, [{"insert": "a<b&c\n"}]) == "<p>a&lt;b&amp;c</p>"


def test_headers_and_blockquotes(registry: FormatRegistry) -> None:
    html = render(
        registry,
        [
            {"insert": "T"},
            {"insert": "\n", "attributes": {"header": {"value": 2, "fold": "unfold"}}},
            {"insert": "q"},
            {"insert": "\n", "attributes": {"blockquote": True}},
        ],
    )
    assert html == "<h2>T</h2><blockquote>q</blockquote>"


def test_nested_lists(registry: FormatRegistry) -> None:
    bullet = {"value": "bullet", "fold": "unfold"}
    html = render(
        registry,
        [
            {"insert": "a"},
            {"insert": "\n", "attributes": {"list": bullet}},
            {"insert": "b"},
            {"insert": "\n", "attributes": {"list": bullet, "indent": 1}},
        ],
    )
    assert html == '<ul><li data-list="bullet">a<ul><li data-list="bullet">b</li></ul></li></ul>'


def test_list_kind_change_closes_the_list(registry: FormatRegistry) -> None:
    html = render(
        registry,
        [
            {"insert": "a"},
            {"insert": "\n", "attributes": {"list": {"value": "ordered"}}},
            {"insert": "b"},
            {"insert": "\n", "attributes": {"list": {"value": "bullet"}}},
        ],
    )
    assert html == '<ol><li data-list="ordered">a</li></ol><ul><li data-list="bullet">b</li></ul>'


def test_code_lines_share_one_pre(registry: FormatRegistry) -> None:
    code = {"code-block": "python"}
    html = render(
        registry,
        [{"insert": "x < 1"}, {"insert": "\n", "attributes": code}, {"insert": "y"}, {"insert": "\n", "attributes": code}],
    )
    assert html == "<pre>x &lt; 1\ny</pre>"


def test_table_rows_group_cells(registry: FormatRegistry) -> None:
    html = render(
        registry,
        [
            {"insert": "a"},
            {"insert": "\n", "attributes": {"table": "1"}},
            {"insert": "b"},
            {"insert": "\n", "attributes": {"table": "1"}},
            {"insert": "c"},
            {"insert": "\n", "attributes": {"table": "2"}},
        ],
    )
    assert html == (
        "<table><tbody>"
        '<tr><td data-row="1">a</td><td data-row="1">b</td></tr>'
        '<tr><td data-row="2">c</td></tr>'
        "</tbody></table>"
    )


def test_image_embeds(registry: FormatRegistry) -> None:
    html = render(registry, [{"insert": {"image": "a.png"}}, {"insert": {"image": "javascript:x"}}, {"insert": "\n"}])
    assert html == '<p><img src="a.png"><img src="//:0"></p>'
