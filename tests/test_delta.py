from __future__ import annotations

from delta import Delta
import pytest

from deltasmith.core.delta import (
    apply_format,
    attributes_diff,
    compose_changes,
    delta_ends_with,
    is_set,
    strip_empty_inserts,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, False),
        (False, False),
        ("", False),
        (0, False),
        (True, True),
        ("bold", True),
        (3, True),
        ({}, True),
        ({"value": "checked"}, True),
    ],
)
def test_is_set(value: object, expected: bool) -> None:
    assert is_set(value) is expected


def test_delta_ends_with_spans_several_inserts() -> None:
    delta = Delta().insert("ab").insert("c\n", bold=True).insert("\n")
    assert delta_ends_with(delta, "\n\n")
    assert delta_ends_with(delta, "c\n\n")
    assert not delta_ends_with(delta, "x\n")


def test_delta_ends_with_stops_at_embeds() -> None:
    delta = Delta().insert("\n").insert({"image": "a.png"})
    assert not delta_ends_with(delta, "\n")


def test_apply_format_keeps_existing_attributes() -> None:
    delta = Delta().insert("a").insert("b", list={"value": "ordered"})
    result = apply_format(delta, "list", {"value": "bullet"})
    assert result.ops == [
        {"insert": "a", "attributes": {"list": {"value": "bullet"}}},
        {"insert": "b", "attributes": {"list": {"value": "ordered"}}},
    ]


def test_apply_format_accepts_mapping_and_skips_unset_values() -> None:
    delta = Delta().insert("text")
    result = apply_format(delta, {"bold": True, "align": None})
    assert result.ops == [{"insert": "text", "attributes": {"bold": True}}]


def test_attributes_diff_reports_target_values() -> None:
    assert attributes_diff({"header": 1}, {"header": 2}) == {"header": 2}
    assert attributes_diff({"header": 1}, {}) == {"header": None}
    assert attributes_diff({}, {"list": "bullet"}) == {"list": "bullet"}
    assert attributes_diff({"bold": True}, {"bold": True}) == {}


def test_strip_empty_inserts() -> None:
    delta = Delta([{"insert": ""}, {"insert": "ab"}, {"retain": 2}])
    assert strip_empty_inserts(delta).ops == [{"insert": "ab"}, {"retain": 2}]


def test_compose_changes_keeps_explicit_clears() -> None:
    merge = Delta().retain(2).delete(1)
    clear = Delta().retain(4).retain(1, header=None)
    composed = compose_changes(merge, clear)
    assert composed.ops[-1] == {"retain": 1, "attributes": {"header": None}}
    document = Delta([{"insert": "ab\ncd"}, {"insert": "\n", "attributes": {"header": 1}}])
    assert document.compose(composed).ops == [{"insert": "abcd\n"}]


def test_compose_changes_without_padding() -> None:
    bold = Delta().retain(1, bold=True)
    composed = compose_changes(Delta().retain(3), bold)
    assert composed.ops == [{"retain": 1, "attributes": {"bold": True}}]
