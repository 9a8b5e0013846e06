from __future__ import annotations

from typing import Any

from delta import Delta
import pytest

from deltasmith.clipboard import MatcherPipeline, MatcherRegistry
from deltasmith.clipboard.rules import ELEMENT_NODE, TEXT_NODE, ConversionContext
from deltasmith.core.config import ClipboardConfig
from deltasmith.core.registry import FormatRegistry


def _nested_list(depth: int) -> str:
    markup = f"<ul><li>item{depth}</li></ul>"
    for level in range(depth - 1, 0, -1):
        markup = f"<ul><li>item{level}{markup}</li></ul>"
    return markup


def _op_for(delta: Delta, prefix: str) -> dict[str, Any]:
    return next(op for op in delta.ops if isinstance(op["insert"], str) and op["insert"].startswith(prefix))


def test_paragraph_with_bold_text(pipeline: MatcherPipeline) -> None:
    delta = pipeline.convert(html="<p>Hello <b>World</b></p>")
    assert delta.ops == [
        {"insert": "Hello "},
        {"insert": "World", "attributes": {"bold": True}},
    ]


def test_convert_markup_keeps_single_terminator(pipeline: MatcherPipeline) -> None:
    delta = pipeline.convert_markup("<p>Hello <b>World</b></p>")
    assert delta.ops[-1] == {"insert": "\n"}
    assert sum(op["insert"].count("\n") for op in delta.ops if isinstance(op["insert"], str)) == 1


@pytest.mark.parametrize("depth", range(1, 9))
def test_nested_list_depth_maps_to_indent(pipeline: MatcherPipeline, depth: int) -> None:
    delta = pipeline.convert(html=_nested_list(depth))
    op = _op_for(delta, f"item{depth}")
    attributes = op["attributes"]
    assert attributes["list"] == {"value": "bullet", "fold": "unfold"}
    if depth == 1:
        assert "indent" not in attributes
    else:
        assert attributes["indent"] == depth - 1


def test_ordered_list_items(pipeline: MatcherPipeline) -> None:
    delta = pipeline.convert(html="<ol><li>one</li><li>two</li></ol>")
    assert delta.ops == [
        {"insert": "one\ntwo\n", "attributes": {"list": {"value": "ordered", "fold": "unfold"}}},
    ]


def test_table_rows_are_numbered_from_one(pipeline: MatcherPipeline) -> None:
    html = "<table><tr><td>a</td><td>b</td></tr><tr><td>c</td></tr></table>"
    delta = pipeline.convert(html=html)
    assert delta.ops == [
        {"insert": "a\nb\n", "attributes": {"table": 1}},
        {"insert": "c\n", "attributes": {"table": 2}},
    ]


def test_table_rows_inside_tbody(pipeline: MatcherPipeline) -> None:
    html = "<table><tbody><tr><td>a</td></tr><tr><td>b</td></tr></tbody></table>"
    delta = pipeline.convert(html=html)
    assert _op_for(delta, "a")["attributes"] == {"table": 1}
    assert _op_for(delta, "b")["attributes"] == {"table": 2}


def test_cell_context_keeps_text_and_forces_empty_last_terminator(pipeline: MatcherPipeline) -> None:
    cell = {"row": "r1", "cell": "c1"}
    delta = pipeline.convert(text="a\nb", formats={"table-cell-line": cell})
    assert delta.ops == [
        {"insert": "a"},
        {"insert": "\n", "attributes": {"table-cell-line": cell}},
        {"insert": "b"},
        {"insert": "", "attributes": {"table-cell-line": cell}},
    ]


def test_code_block_context_inserts_plain_text(pipeline: MatcherPipeline) -> None:
    delta = pipeline.convert(html="<b>x = 1</b>", text="x = 1", formats={"code-block": "python"})
    assert delta.ops == [{"insert": "x = 1", "attributes": {"code-block": "python"}}]


def test_pre_uses_default_language(pipeline: MatcherPipeline) -> None:
    delta = pipeline.convert(html="<pre>let x = 1;\nlet y;</pre>")
    assert delta.ops == [
        {"insert": "let x = 1;\nlet y;\n", "attributes": {"code-block": "javascript"}},
    ]


def test_pre_keeps_declared_language(registry: FormatRegistry) -> None:
    pipeline = MatcherPipeline(registry, ClipboardConfig(default_code_language="python"))
    delta = pipeline.convert(html='<pre data-language="rust">fn main() {}</pre>')
    assert delta.ops[0]["attributes"] == {"code-block": "rust"}
    delta = pipeline.convert(html="<pre>pass</pre>")
    assert delta.ops[0]["attributes"] == {"code-block": "python"}


def test_line_breaks_and_whitespace(pipeline: MatcherPipeline) -> None:
    assert pipeline.convert(html="<p>a<br>b</p>").ops == [{"insert": "a\nb"}]
    assert pipeline.convert(html="<p>  spaced   out  </p>").ops == [{"insert": "spaced out"}]


def test_image_embed(pipeline: MatcherPipeline) -> None:
    delta = pipeline.convert(html='<p>see <img src="a.png" alt="A"></p>')
    assert delta.ops == [
        {"insert": "see "},
        {"insert": {"image": "a.png"}, "attributes": {"alt": "A"}},
    ]


def test_inline_styles_map_to_formats(pipeline: MatcherPipeline) -> None:
    delta = pipeline.convert(
        html='<p><span style="font-weight: 700; font-style: italic">x</span>'
        '<span style="text-decoration: line-through">y</span></p>'
    )
    assert delta.ops == [
        {"insert": "x", "attributes": {"bold": True, "italic": True}},
        {"insert": "y", "attributes": {"strike": True}},
    ]


def test_style_elements_are_dropped(pipeline: MatcherPipeline) -> None:
    delta = pipeline.convert(html="<style>p { color: red; }</style><p>a</p>")
    assert delta.ops == [{"insert": "a"}]


def test_header_and_alignment(pipeline: MatcherPipeline) -> None:
    delta = pipeline.convert(html='<h2 class="ql-align-center">Title</h2><p>body</p>')
    assert delta.ops[0] == {
        "insert": "Title\n",
        "attributes": {"header": {"value": 2, "fold": "unfold"}, "align": "center"},
    }
    assert delta.ops[1] == {"insert": "body"}


def test_converted_sequences_never_hold_two_bare_terminators(pipeline: MatcherPipeline) -> None:
    html = "<div><p>a</p></div><p></p><br><br><div>b</div><p>c</p>"
    delta = pipeline.convert(html=html)
    bare = [op.get("insert") == "\n" and not op.get("attributes") for op in delta.ops]
    assert not any(first and second for first, second in zip(bare, bare[1:]))


def test_plain_text_is_rendered_as_markdown(pipeline: MatcherPipeline) -> None:
    delta = pipeline.convert(text="**bold** text")
    assert delta.ops == [
        {"insert": "bold", "attributes": {"bold": True}},
        {"insert": " text"},
    ]


def test_plain_text_verbatim_without_markdown(registry: FormatRegistry) -> None:
    pipeline = MatcherPipeline(registry, ClipboardConfig(markdown_paste=False))
    assert pipeline.convert(text="**bold**").ops == [{"insert": "**bold**"}]


def test_empty_payload_yields_empty_delta(pipeline: MatcherPipeline) -> None:
    assert pipeline.convert(html="", text="").ops == []


def test_configured_matchers_run_after_builtins(registry: FormatRegistry) -> None:
    def mention(node: Any, delta: Delta, context: ConversionContext) -> Delta:
        return Delta().insert({"mention": node.get_text()})

    pipeline = MatcherPipeline(registry, ClipboardConfig(matchers=[("span.mention", mention)]))
    delta = pipeline.convert(html='<p>hi <span class="mention">bob</span></p>')
    assert delta.ops == [{"insert": "hi "}, {"insert": {"mention": "bob"}}]


def test_add_matcher_validates_selectors(pipeline: MatcherPipeline) -> None:
    with pytest.raises(ValueError):
        pipeline.add_matcher("p[", lambda node, delta, context: delta)


def test_matcher_must_return_a_delta(pipeline: MatcherPipeline) -> None:
    pipeline.add_matcher("p", lambda node, delta, context: "oops")
    with pytest.raises(TypeError):
        pipeline.convert(html="<p>a</p>")


def test_text_matchers_receive_text_nodes(registry: FormatRegistry) -> None:
    def shout(node: Any, delta: Delta, context: ConversionContext) -> Delta:
        return Delta().insert(str(node).upper())

    pipeline = MatcherPipeline(registry, matchers=[(TEXT_NODE, shout), (ELEMENT_NODE, lambda n, d, c: d)])
    assert pipeline.convert(html="<span>abc</span>").ops == [{"insert": "ABC"}]


def test_registry_keeps_registration_order() -> None:
    def emphasis(node: Any, delta: Delta, context: ConversionContext) -> Delta:
        return delta

    registry = MatcherRegistry()
    registry.add("p", lambda node, delta, context: delta, name="paragraph")
    registry.add("em", emphasis)
    assert [(rule.selector, rule.name) for rule in registry] == [("p", "paragraph"), ("em", "emphasis")]
    assert len(registry) == 2
