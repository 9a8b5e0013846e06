from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from deltasmith.core.config import KeyboardConfig
from deltasmith.core.document import EditorDocument, Range
from deltasmith.keyboard import HandlerResult, KeyEvent, Keyboard
from deltasmith.keyboard.defaults import autofill_kind


HEADER = {"value": 1, "fold": "unfold"}
BULLET = {"value": "bullet", "fold": "unfold"}

MakeKeyboard = Callable[..., Keyboard]
Press = Callable[..., KeyEvent]


@pytest.fixture
def bare_keyboard(make_document: Callable[..., EditorDocument]) -> Keyboard:
    document = make_document([{"insert": "abc\n"}], selection=1)
    return Keyboard(document, config=KeyboardConfig(platform="other"), install_defaults=False)


# Dispatch --------------------------------------------------------------------


def test_pass_falls_through_to_next_binding(bare_keyboard: Keyboard, press: Press) -> None:
    calls: list[str] = []

    def first(keyboard: Keyboard, range: Range, context: Any) -> bool:
        calls.append("first")
        return True

    def second(keyboard: Keyboard, range: Range, context: Any) -> None:
        calls.append("second")

    bare_keyboard.add_binding("x", first)
    bare_keyboard.add_binding("x", second)
    event = press(bare_keyboard, "x")
    assert calls == ["first", "second"]
    assert event.default_prevented


def test_allow_default_stops_without_preventing(bare_keyboard: Keyboard, press: Press) -> None:
    calls: list[str] = []
    bare_keyboard.add_binding("x", lambda keyboard, range, context: HandlerResult.ALLOW_DEFAULT)
    bare_keyboard.add_binding("x", lambda keyboard, range, context: calls.append("late"))
    event = press(bare_keyboard, "x")
    assert calls == []
    assert not event.default_prevented


def test_unmet_predicates_leave_default_alone(bare_keyboard: Keyboard, press: Press) -> None:
    calls: list[str] = []
    bare_keyboard.add_binding({"key": "y", "collapsed": False}, lambda k, r, c: calls.append("y"))
    bare_keyboard.add_binding({"key": "y", "format": ["bold"]}, lambda k, r, c: calls.append("bold"))
    event = press(bare_keyboard, "y")
    assert calls == []
    assert not event.default_prevented


def test_dont_care_shift_matches_both(bare_keyboard: Keyboard, press: Press) -> None:
    calls: list[bool] = []
    bare_keyboard.add_binding({"key": "z", "shiftKey": None}, lambda k, r, c: calls.append(c.event.shift_key))
    bare_keyboard.add_binding("w", lambda k, r, c: calls.append(True))
    assert press(bare_keyboard, "z").default_prevented
    assert press(bare_keyboard, "z", shift_key=True).default_prevented
    assert not press(bare_keyboard, "w", shift_key=True).default_prevented
    assert calls == [False, True]


def test_composition_events_are_ignored(bare_keyboard: Keyboard, press: Press) -> None:
    calls: list[str] = []
    bare_keyboard.add_binding("Enter", lambda k, r, c: calls.append("enter"))
    assert not press(bare_keyboard, "Enter", is_composing=True).default_prevented
    assert not press(bare_keyboard, "Enter", which=229).default_prevented
    assert calls == []


def test_dispatch_requires_focus(bare_keyboard: Keyboard, press: Press) -> None:
    calls: list[str] = []
    bare_keyboard.add_binding("x", lambda k, r, c: calls.append("x"))
    bare_keyboard.document.blur()
    assert not press(bare_keyboard, "x").default_prevented
    assert calls == []


def test_context_describes_the_caret(bare_keyboard: Keyboard, press: Press) -> None:
    contexts: list[Any] = []
    bare_keyboard.add_binding("x", lambda k, r, c: contexts.append(c))
    press(bare_keyboard, "x")
    (context,) = contexts
    assert context.collapsed
    assert not context.empty
    assert context.offset == 1
    assert context.prefix == "a"
    assert context.suffix == "bc"


# Formatting and tabs ---------------------------------------------------------


def test_short_key_toggles_bold(make_keyboard: MakeKeyboard, press: Press) -> None:
    keyboard = make_keyboard([{"insert": "abc\n"}], selection=Range(0, 3))
    assert press(keyboard, "b", ctrl_key=True).default_prevented
    assert keyboard.document.get_contents().ops == [
        {"insert": "abc", "attributes": {"bold": True}},
        {"insert": "\n"},
    ]
    press(keyboard, "b", ctrl_key=True)
    assert keyboard.document.get_contents().ops == [{"insert": "abc\n"}]


def test_tab_indents_list_items(make_keyboard: MakeKeyboard, press: Press) -> None:
    keyboard = make_keyboard([{"insert": "a"}, {"insert": "\n", "attributes": {"list": BULLET}}], selection=1)
    press(keyboard, "Tab")
    assert keyboard.document.lines()[0].formats == {"list": BULLET, "indent": 1}
    press(keyboard, "Tab", shift_key=True)
    assert keyboard.document.lines()[0].formats == {"list": BULLET}


def test_tab_inserts_a_tab_character(make_keyboard: MakeKeyboard, press: Press) -> None:
    keyboard = make_keyboard([{"insert": "ab\n"}], selection=1)
    assert press(keyboard, "Tab").default_prevented
    assert keyboard.document.get_text() == "a\tb\n"
    assert keyboard.document.get_selection() == Range(2)


def test_shift_tab_removes_a_preceding_tab(make_keyboard: MakeKeyboard, press: Press) -> None:
    keyboard = make_keyboard([{"insert": "a\tb\n"}], selection=2)
    press(keyboard, "Tab", shift_key=True)
    assert keyboard.document.get_text() == "ab\n"


def test_tab_in_code_block_indents_the_line(make_keyboard: MakeKeyboard, press: Press) -> None:
    code = {"code-block": "python"}
    keyboard = make_keyboard([{"insert": "x"}, {"insert": "\n", "attributes": code}], selection=1)
    press(keyboard, "Tab")
    assert keyboard.document.get_text() == "  x\n"
    assert keyboard.document.get_selection() == Range(3)
    press(keyboard, "Tab", shift_key=True)
    assert keyboard.document.get_text() == "x\n"
    assert keyboard.document.get_selection() == Range(1)


# Enter -----------------------------------------------------------------------


def test_enter_splits_and_carries_list_format(make_keyboard: MakeKeyboard, press: Press) -> None:
    keyboard = make_keyboard([{"insert": "ab"}, {"insert": "\n", "attributes": {"list": BULLET}}], selection=1)
    assert press(keyboard, "Enter").default_prevented
    document = keyboard.document
    assert document.get_text() == "a\nb\n"
    assert [line.formats for line in document.lines()] == [{"list": BULLET}, {"list": BULLET}]
    assert document.get_selection() == Range(2)


def test_enter_keeps_inline_formats_at_the_caret(make_keyboard: MakeKeyboard, press: Press) -> None:
    keyboard = make_keyboard([{"insert": "ab", "attributes": {"bold": True}}, {"insert": "\n"}], selection=2)
    press(keyboard, "Enter")
    assert keyboard.document.get_format(3) == {"bold": True}


def test_checklist_enter_starts_unchecked_item(make_keyboard: MakeKeyboard, press: Press) -> None:
    keyboard = make_keyboard(
        [{"insert": "todo"}, {"insert": "\n", "attributes": {"list": {"value": "checked"}}}],
        selection=2,
    )
    press(keyboard, "Enter")
    assert keyboard.document.get_contents().ops == [
        {"insert": "to"},
        {"insert": "\n", "attributes": {"list": {"value": "checked"}}},
        {"insert": "do"},
        {"insert": "\n", "attributes": {"list": {"value": "unchecked"}}},
    ]
    assert keyboard.document.get_selection() == Range(3)


def test_enter_on_empty_list_item_leaves_the_list(make_keyboard: MakeKeyboard, press: Press) -> None:
    keyboard = make_keyboard([{"insert": "\n", "attributes": {"list": BULLET, "indent": 2}}], selection=0)
    press(keyboard, "Enter")
    assert keyboard.document.get_contents().ops == [{"insert": "\n"}]


def test_enter_on_empty_blockquote_line_leaves_the_quote(make_keyboard: MakeKeyboard, press: Press) -> None:
    keyboard = make_keyboard([{"insert": "\n", "attributes": {"blockquote": True}}], selection=0)
    press(keyboard, "Enter")
    assert keyboard.document.get_contents().ops == [{"insert": "\n"}]


def test_enter_after_header_opens_plain_line(make_keyboard: MakeKeyboard, press: Press) -> None:
    keyboard = make_keyboard([{"insert": "Title"}, {"insert": "\n", "attributes": {"header": HEADER}}], selection=5)
    press(keyboard, "Enter")
    assert keyboard.document.get_contents().ops == [
        {"insert": "Title"},
        {"insert": "\n", "attributes": {"header": HEADER}},
        {"insert": "\n"},
    ]
    assert keyboard.document.get_selection() == Range(6)


def test_enter_on_folded_list_item_opens_after_its_children(
    make_keyboard: MakeKeyboard, press: Press
) -> None:
    folded = {"value": "bullet", "fold": "fold"}
    keyboard = make_keyboard(
        [
            {"insert": "a"},
            {"insert": "\n", "attributes": {"list": folded}},
            {"insert": "b"},
            {"insert": "\n", "attributes": {"list": BULLET, "indent": 1}},
            {"insert": "c"},
            {"insert": "\n", "attributes": {"list": BULLET, "indent": 1}},
        ],
        selection=1,
    )
    assert press(keyboard, "Enter").default_prevented
    document = keyboard.document
    assert document.get_text() == "a\nb\nc\n\n"
    assert document.lines()[0].formats == {"list": folded}
    assert document.lines()[3].formats == {"list": BULLET}
    assert document.get_selection() == Range(6)


def test_enter_on_folded_header_opens_after_hidden_lines(make_keyboard: MakeKeyboard, press: Press) -> None:
    folded = {"value": 1, "fold": "fold"}
    keyboard = make_keyboard(
        [
            {"insert": "Title"},
            {"insert": "\n", "attributes": {"header": folded}},
            {"insert": "body\nNext"},
            {"insert": "\n", "attributes": {"header": HEADER}},
        ],
        selection=5,
    )
    press(keyboard, "Enter")
    document = keyboard.document
    assert document.get_text() == "Title\nbody\n\nNext\n"
    assert document.lines()[2].formats == {"header": HEADER}
    assert document.get_selection() == Range(11)


def test_enter_leaves_code_block_after_blank_line(make_keyboard: MakeKeyboard, press: Press) -> None:
    code = {"code-block": "python"}
    keyboard = make_keyboard(
        [{"insert": "x"}, {"insert": "\n\n", "attributes": code}],
        selection=2,
    )
    press(keyboard, "Enter")
    assert [line.formats for line in keyboard.document.lines()] == [code, {}]


# Backspace and Delete --------------------------------------------------------


def test_backspace_merge_drops_lower_line_formats(make_keyboard: MakeKeyboard, press: Press) -> None:
    keyboard = make_keyboard(
        [{"insert": "ab\ncd"}, {"insert": "\n", "attributes": {"header": HEADER}}],
        selection=3,
    )
    assert press(keyboard, "Backspace").default_prevented
    assert keyboard.document.get_contents().ops == [{"insert": "abcd\n"}]
    assert keyboard.document.get_selection() == Range(2)


def test_backspace_and_delete_merge_the_same_way(make_keyboard: MakeKeyboard, press: Press) -> None:
    def contents() -> list[dict[str, Any]]:
        return [{"insert": "ab\ncd"}, {"insert": "\n", "attributes": {"header": dict(HEADER)}}]

    backspace = make_keyboard(contents(), selection=3)
    delete = make_keyboard(contents(), selection=2)
    press(backspace, "Backspace")
    press(delete, "Delete")
    assert backspace.document.get_contents().ops == delete.document.get_contents().ops == [{"insert": "abcd\n"}]


def test_backspace_merge_keeps_upper_line_formats(make_keyboard: MakeKeyboard, press: Press) -> None:
    keyboard = make_keyboard(
        [{"insert": "ab"}, {"insert": "\n", "attributes": {"header": HEADER}}, {"insert": "cd\n"}],
        selection=3,
    )
    press(keyboard, "Backspace")
    assert keyboard.document.get_contents().ops == [
        {"insert": "abcd"},
        {"insert": "\n", "attributes": {"header": HEADER}},
    ]


def test_backspace_at_document_start_is_swallowed(make_keyboard: MakeKeyboard, press: Press) -> None:
    keyboard = make_keyboard([{"insert": "ab\n"}], selection=0)
    assert press(keyboard, "Backspace").default_prevented
    assert keyboard.document.get_text() == "ab\n"


def test_backspace_at_list_start_removes_the_list(make_keyboard: MakeKeyboard, press: Press) -> None:
    keyboard = make_keyboard([{"insert": "a"}, {"insert": "\n", "attributes": {"list": BULLET}}], selection=0)
    press(keyboard, "Backspace")
    assert keyboard.document.get_contents().ops == [{"insert": "a\n"}]


def test_delete_at_line_end_keeps_upper_line_formats(make_keyboard: MakeKeyboard, press: Press) -> None:
    keyboard = make_keyboard(
        [{"insert": "ab"}, {"insert": "\n", "attributes": {"header": HEADER}}, {"insert": "cd\n"}],
        selection=2,
    )
    press(keyboard, "Delete")
    assert keyboard.document.get_contents().ops == [
        {"insert": "abcd"},
        {"insert": "\n", "attributes": {"header": HEADER}},
    ]


def test_range_delete_keeps_first_line_formats(make_keyboard: MakeKeyboard, press: Press) -> None:
    keyboard = make_keyboard(
        [
            {"insert": "ab"},
            {"insert": "\n", "attributes": {"header": HEADER}},
            {"insert": "cd"},
            {"insert": "\n", "attributes": {"list": BULLET}},
        ],
        selection=Range(1, 3),
    )
    press(keyboard, "Backspace")
    assert keyboard.document.get_contents().ops == [
        {"insert": "ad"},
        {"insert": "\n", "attributes": {"header": HEADER}},
    ]
    assert keyboard.document.get_selection() == Range(1)


# Lists, embeds and tables ----------------------------------------------------


@pytest.mark.parametrize(
    ("marker", "kind"),
    [("1.", "ordered"), ("-", "bullet"), ("*", "bullet"), ("[ ]", "unchecked"), ("[x]", "checked")],
)
def test_autofill_kind(marker: str, kind: str) -> None:
    assert autofill_kind(marker) == kind


def test_space_after_marker_starts_a_list(make_keyboard: MakeKeyboard, press: Press) -> None:
    keyboard = make_keyboard([{"insert": "-\n"}], selection=1)
    assert press(keyboard, " ").default_prevented
    assert keyboard.document.get_contents().ops == [
        {"insert": "\n", "attributes": {"list": {"value": "bullet"}}}
    ]
    assert keyboard.document.get_selection() == Range(0)


def test_arrow_moves_over_embeds(make_keyboard: MakeKeyboard, press: Press) -> None:
    keyboard = make_keyboard([{"insert": "a"}, {"insert": {"image": "x.png"}}, {"insert": "b\n"}], selection=2)
    assert press(keyboard, "ArrowLeft").default_prevented
    assert keyboard.document.get_selection() == Range(1)
    press(keyboard, "ArrowRight", shift_key=True)
    assert keyboard.document.get_selection() == Range(1, 1)


def _table(*rows: str) -> list[dict[str, Any]]:
    ops: list[dict[str, Any]] = []
    for number, text in enumerate(rows, start=1):
        ops += [{"insert": text}, {"insert": "\n", "attributes": {"table": str(number)}}]
    return [*ops, {"insert": "after\n"}]


def test_tab_moves_between_table_cells(make_keyboard: MakeKeyboard, press: Press) -> None:
    keyboard = make_keyboard(_table("a", "b"), selection=1)
    press(keyboard, "Tab")
    assert keyboard.document.get_selection() == Range(2)
    press(keyboard, "Tab", shift_key=True)
    assert keyboard.document.get_selection() == Range(1)


def test_backspace_at_cell_start_is_swallowed(make_keyboard: MakeKeyboard, press: Press) -> None:
    keyboard = make_keyboard(_table("a", "b"), selection=2)
    assert press(keyboard, "Backspace").default_prevented
    assert keyboard.document.get_text() == "a\nb\nafter\n"


def test_arrows_move_between_table_rows(make_keyboard: MakeKeyboard, press: Press) -> None:
    keyboard = make_keyboard(_table("a", "b"), selection=1)
    press(keyboard, "ArrowDown")
    assert keyboard.document.get_selection() == Range(3)
    press(keyboard, "ArrowDown")
    assert keyboard.document.get_selection() == Range(4)


def test_enter_in_last_row_opens_line_after_table(make_keyboard: MakeKeyboard, press: Press) -> None:
    keyboard = make_keyboard(_table("a", "b"), selection=3)
    assert press(keyboard, "Enter").default_prevented
    document = keyboard.document
    assert document.get_text() == "a\nb\n\nafter\n"
    assert document.lines()[2].formats == {}
    assert document.get_selection() == Range(4)


def test_enter_in_first_row_opens_line_before_table(make_keyboard: MakeKeyboard, press: Press) -> None:
    keyboard = make_keyboard(_table("a", "b"), selection=0)
    press(keyboard, "Enter")
    document = keyboard.document
    assert document.get_text() == "\na\nb\nafter\n"
    assert document.lines()[0].formats == {}
    assert document.get_selection() == Range(1)


def test_enter_in_middle_row_is_swallowed(make_keyboard: MakeKeyboard, press: Press) -> None:
    keyboard = make_keyboard(_table("a", "b", "c"), selection=3)
    assert press(keyboard, "Enter").default_prevented
    assert keyboard.document.get_text() == "a\nb\nc\nafter\n"


# Configuration ---------------------------------------------------------------


def test_defaults_can_be_disabled_by_name(make_keyboard: MakeKeyboard, press: Press) -> None:
    keyboard = make_keyboard([{"insert": "abc\n"}], selection=Range(0, 3), bindings={"bold": False})
    assert not press(keyboard, "b", ctrl_key=True).default_prevented
    assert keyboard.document.get_contents().ops == [{"insert": "abc\n"}]
    assert "bold" not in {binding.name for binding in keyboard.bindings}


def test_defaults_can_be_replaced_by_name(make_keyboard: MakeKeyboard, press: Press) -> None:
    calls: list[str] = []
    replacement = {"key": "b", "shortKey": True, "handler": lambda k, r, c: calls.append("custom")}
    keyboard = make_keyboard([{"insert": "abc\n"}], selection=Range(0, 3), bindings={"bold": replacement})
    press(keyboard, "b", ctrl_key=True)
    assert calls == ["custom"]
    assert keyboard.document.get_contents().ops == [{"insert": "abc\n"}]


def test_mac_short_key_uses_meta(make_keyboard: MakeKeyboard, press: Press) -> None:
    keyboard = make_keyboard([{"insert": "abc\n"}], selection=Range(0, 3), platform="mac")
    assert not press(keyboard, "b", ctrl_key=True).default_prevented
    assert press(keyboard, "b", meta_key=True).default_prevented
