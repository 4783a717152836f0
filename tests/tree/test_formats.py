"""Tests for format strategies and token helpers."""

from datetime import date

import pytest

from diffpane.tree.formats import (
    JsonFormat,
    YamlFormat,
    counter_tokens,
    get_format,
    value_tokens,
    yaml_scalar,
)
from diffpane.tree.models import (
    ChangeMeta,
    DiffAction,
    DiffType,
    DisplayCondition,
    TokenRole,
)


class TestYamlScalar:
    """Single-line YAML rendering of scalars."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("plain", "plain"),
            (1, "1"),
            (True, "true"),
            (None, "null"),
            ({}, "{}"),
            ([], "[]"),
        ],
    )
    def test_scalars(self, value: object, expected: str) -> None:
        assert yaml_scalar(value) == expected

    def test_ambiguous_string_is_quoted(self) -> None:
        assert yaml_scalar("1.0") == "'1.0'"

    def test_control_characters_use_double_quotes(self) -> None:
        text = yaml_scalar("line1\nline2")

        assert "\n" not in text
        assert text.startswith('"')


class TestJsonStringify:
    def test_non_ascii_kept(self) -> None:
        assert JsonFormat().stringify("héllo") == '"héllo"'

    def test_dates_use_isoformat(self) -> None:
        assert JsonFormat().stringify(date(2024, 1, 2)) == '"2024-01-02"'


class TestValueTokens:
    """Replaced values split into before/after/both tokens."""

    def test_given_unchanged_value_when_tokenized_then_single_token(self) -> None:
        tokens = value_tokens(yaml_scalar, TokenRole.VALUE, "x", None)

        assert [(t.text, t.condition) for t in tokens] == [("x", DisplayCondition.BOTH)]

    def test_given_replaced_string_when_tokenized_then_split_by_word(self) -> None:
        # Given
        diff = ChangeMeta(DiffAction.REPLACE, DiffType.ANNOTATION, replaced="Pet API")

        # When
        tokens = value_tokens(yaml_scalar, TokenRole.VALUE, "Pets API", diff)

        # Then
        assert [(t.text, t.condition) for t in tokens] == [
            ("Pet", DisplayCondition.BEFORE),
            ("Pets", DisplayCondition.AFTER),
            (" API", DisplayCondition.BOTH),
        ]

    def test_given_replaced_number_when_tokenized_then_old_then_new(self) -> None:
        diff = ChangeMeta(DiffAction.REPLACE, DiffType.BREAKING, replaced=1)

        tokens = value_tokens(yaml_scalar, TokenRole.VALUE, 2, diff)

        assert [(t.text, t.condition) for t in tokens] == [
            ("1", DisplayCondition.BEFORE),
            ("2", DisplayCondition.AFTER),
        ]


class TestCounterTokens:
    def test_one_token_per_nonzero_classification(self) -> None:
        tokens = counter_tokens((3, 2, 0, 0, 1))

        assert [(t.text, t.counter_type) for t in tokens] == [
            ("2", DiffType.BREAKING),
            ("1", DiffType.UNCLASSIFIED),
        ]
        assert all(t.condition is DisplayCondition.COLLAPSED for t in tokens)
        assert all(t.role is TokenRole.COUNTER for t in tokens)

    def test_no_changes_no_tokens(self) -> None:
        assert counter_tokens((0, 0, 0, 0, 0)) == []


class TestGetFormat:
    def test_by_name(self) -> None:
        assert isinstance(get_format("json"), JsonFormat)
        assert isinstance(get_format("yaml"), YamlFormat)

    def test_strategy_passthrough(self) -> None:
        strategy = YamlFormat()
        assert get_format(strategy) is strategy

    def test_unknown_format(self) -> None:
        with pytest.raises(ValueError, match="toml"):
            get_format("toml")
