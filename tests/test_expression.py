"""Unit tests for the partial-update expression builder."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from kols.expression import (
    EmptyUpdate,
    InvalidField,
    PlaceholderCollision,
    build_update,
    placeholder_key,
)
from kols.validation import DIGITS, FieldRule, RuleKind


def _identity(value: str) -> str:
    return value


class TestPlaceholderKey:
    @pytest.mark.parametrize(
        ("field", "expected"),
        [
            ("Photo Cost / Kols", "PhotoCostKols"),
            ("VDO Cost / Kols", "VDOCostKols"),
            ("ER%", "ER"),
            ("Followers", "Followers"),
        ],
    )
    def test_strips_spaces_slashes_and_percent(self, field: str, expected: str) -> None:
        assert placeholder_key(field) == expected


class TestBuildUpdate:
    def test_single_field_directive(self) -> None:
        directive = build_update("kol-1", {"Followers": "12000"}, sanitize=_identity)

        assert directive.record_id == "kol-1"
        assert directive.expression == "set #Followers = :Followers"
        assert directive.names == {"#Followers": "Followers"}
        assert directive.values == {":Followers": "12000"}

    def test_reserved_characters_only_appear_in_name_bindings(self) -> None:
        directive = build_update(
            "kol-1",
            {"Photo Cost / Kols": 800, "ER%": "2.5"},
            sanitize=_identity,
        )

        assert directive.expression == "set #PhotoCostKols = :PhotoCostKols, #ER = :ER"
        assert "/" not in directive.expression
        assert "%" not in directive.expression
        assert directive.names == {"#PhotoCostKols": "Photo Cost / Kols", "#ER": "ER%"}
        assert directive.values == {":PhotoCostKols": 800.0, ":ER": "2.5"}

    def test_one_clause_per_entry_in_caller_order(self) -> None:
        fields = {"Tel": "0998935365", "Name": "Ninejoe", "Categories": ["Lifestyle"]}
        directive = build_update("kol-1", fields, sanitize=_identity)

        assert len(directive.clauses) == len(fields)
        assert directive.clauses == ["#Tel = :Tel", "#Name = :Name", "#Categories = :Categories"]
        for clause in directive.clauses:
            name_ph = clause.split(" = ")[0]
            assert directive.names[name_ph] in fields

    def test_building_twice_gives_identical_directives(self) -> None:
        fields = {"Name": "Jane", "VDO Cost / Kols": 1000, "Link": "https://example.com/jane"}
        first = build_update("kol-1", fields, sanitize=_identity)
        second = build_update("kol-1", fields, sanitize=_identity)
        assert first == second

    def test_string_values_go_through_sanitizer(self) -> None:
        sanitize = MagicMock(side_effect=lambda s: s.replace("<b>", "").replace("</b>", ""))
        directive = build_update(
            "kol-1",
            {"Name": "<b>Jane</b>", "Categories": ["<b>Food</b>"], "Photo Cost / Kols": 5},
            sanitize=sanitize,
        )

        assert directive.values[":Name"] == "Jane"
        assert directive.values[":Categories"] == ["Food"]
        assert directive.values[":PhotoCostKols"] == 5.0
        assert sanitize.call_count == 2

    def test_default_sanitizer_strips_script(self) -> None:
        directive = build_update("kol-1", {"Name": "<script>alert(1)</script>Jane"})
        assert "<script" not in directive.values[":Name"]
        assert "Jane" in directive.values[":Name"]

    def test_empty_map_fails(self) -> None:
        with pytest.raises(EmptyUpdate) as exc_info:
            build_update("kol-1", {})
        assert str(exc_info.value) == "No data provided for update"

    def test_invalid_field_aborts_whole_build(self) -> None:
        sanitize = MagicMock(side_effect=_identity)
        with pytest.raises(InvalidField) as exc_info:
            build_update("kol-1", {"Name": "Jane", "Followers": "abcd"}, sanitize=sanitize)

        assert exc_info.value.field == "Followers"
        assert str(exc_info.value).startswith("Invalid data for Followers: ")
        assert '"abcd"' in str(exc_info.value)

    def test_unknown_field_is_invalid(self) -> None:
        with pytest.raises(InvalidField) as exc_info:
            build_update("kol-1", {"ID": "other"})
        assert exc_info.value.reason == '"ID" is not allowed'

    def test_colliding_placeholder_keys_are_rejected(self) -> None:
        rules = {
            "ER%": FieldRule(RuleKind.text, pattern=DIGITS),
            "ER": FieldRule(RuleKind.text, pattern=DIGITS),
        }
        with pytest.raises(PlaceholderCollision) as exc_info:
            build_update("kol-1", {"ER%": "1", "ER": "2"}, rules=rules, sanitize=_identity)

        assert exc_info.value.key == "ER"
        assert exc_info.value.other == "ER%"
        assert exc_info.value.field == "ER"

    def test_value_emptied_by_sanitizer_is_invalid(self) -> None:
        with pytest.raises(InvalidField) as exc_info:
            build_update("kol-1", {"Name": "<script>x</script>"})

        assert exc_info.value.field == "Name"
        assert exc_info.value.reason == '"Name" is not allowed to be empty'

    def test_category_emptied_by_sanitizer_is_invalid(self) -> None:
        with pytest.raises(InvalidField) as exc_info:
            build_update("kol-1", {"Categories": ["Food", "<script>x</script>"]})

        assert exc_info.value.reason == '"Categories[1]" is not allowed to be empty'

    def test_directive_carries_ordered_assignments(self) -> None:
        directive = build_update("kol-1", {"ER%": "2.5", "Name": "Jane"}, sanitize=_identity)

        assert directive.assignments == (("#ER", ":ER"), ("#Name", ":Name"))
        assert directive.clauses == ["#ER = :ER", "#Name = :Name"]
