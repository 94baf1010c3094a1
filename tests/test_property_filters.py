"""Property-based tests for the built-in filters.

Filters are pure functions of ``(value, kind, args)``, so their algebraic
properties can be checked directly without rendering.
"""

from __future__ import annotations

from hypothesis import given, settings
from hypothesis import strategies as st

from wispy import DEFAULT_FILTERS, Kind, kind_of

from .strategies import any_text, ascii_letters, split_delimiter, split_word


def call(name, value, *args):
    return DEFAULT_FILTERS[name](value, kind_of(value), args)


class TestCaseFilters:
    @given(text=ascii_letters)
    @settings(max_examples=200)
    def test_upcase_then_downcase_is_downcase(self, text: str) -> None:
        assert call("downcase", call("upcase", text)) == text.lower()

    @given(text=ascii_letters)
    @settings(max_examples=200)
    def test_downcase_then_upcase_is_upcase(self, text: str) -> None:
        assert call("upcase", call("downcase", text)) == text.upper()

    @given(text=any_text)
    @settings(max_examples=200)
    def test_case_filters_idempotent(self, text: str) -> None:
        once = call("downcase", text)
        assert call("downcase", once) == once
        upper = call("upcase", text)
        assert call("upcase", upper) == upper
        trimmed = call("trim", text)
        assert call("trim", trimmed) == trimmed

    @given(text=any_text)
    @settings(max_examples=200)
    def test_strip_leaves_no_tags(self, text: str) -> None:
        stripped = call("strip", text)
        assert call("strip", stripped) == stripped


class TestSplitJoin:
    @given(words=st.lists(split_word, min_size=1, max_size=8), delimiter=split_delimiter)
    @settings(max_examples=200)
    def test_roundtrip(self, words, delimiter) -> None:
        quoted = f'"{delimiter}"'
        joined = call("join", words, quoted)
        assert call("split", joined, quoted) == words

    @given(words=st.lists(split_word, max_size=8))
    def test_input_not_mutated(self, words) -> None:
        before = list(words)
        call("join", words, '"-"')
        call("slice", words, "1", "3")
        assert words == before


class TestTruncate:
    @given(text=any_text, length=st.integers(min_value=0, max_value=100))
    @settings(max_examples=200)
    def test_length_bound(self, text: str, length: int) -> None:
        result = call("truncate", text, str(length))
        if len(text) <= length:
            assert result == text
        else:
            assert result == text[:length] + "..."
            assert len(result) == length + 3


class TestSlice:
    @given(
        value=st.one_of(any_text, st.lists(st.integers(), max_size=10)),
        start=st.integers(min_value=-20, max_value=20),
        end=st.integers(min_value=-20, max_value=20),
    )
    @settings(max_examples=300)
    def test_result_is_contiguous_part(self, value, start, end) -> None:
        result = call("slice", value, str(start), str(end))
        assert kind_of(result) is kind_of(value)
        assert len(result) <= len(value)
        lo, hi = sorted((min(max(start, 0), len(value)), min(max(end, 0), len(value))))
        assert result == value[lo:hi]

    @given(value=st.one_of(st.none(), st.booleans(), st.integers(), st.dictionaries(st.text(), st.integers())))
    def test_other_kinds_pass_through(self, value) -> None:
        assert call("slice", value, "0", "1") == value
        assert kind_of(call("upcase", value)) is kind_of(value)


class TestDefault:
    @given(value=st.one_of(st.integers(), st.booleans(), any_text.filter(bool)))
    def test_non_empty_unchanged(self, value) -> None:
        assert call("default", value, '"fallback"') == value

    def test_kind_of_fallback(self) -> None:
        assert kind_of(call("default", None, '"x"')) is Kind.STRING
