"""Tests for text utilities."""

from __future__ import annotations

from postfinder.utils.text import collation_key, field_norm, is_blank, snippet


class TestCollationKey:
    """Tests for locale-aware sort keys."""

    def test_case_insensitive_primary_order(self) -> None:
        """Case does not decide order between different letters."""
        titles = ["banana", "Apple", "cherry"]

        assert sorted(titles, key=collation_key) == ["Apple", "banana", "cherry"]

    def test_lowercase_before_uppercase(self) -> None:
        """Equal letters put lowercase first."""
        assert sorted(["B", "b"], key=collation_key) == ["b", "B"]

    def test_accents_sort_with_base_letter(self) -> None:
        """Accented letters sort next to their base letter."""
        titles = ["zebra", "école", "eagle", "ezra"]

        assert sorted(titles, key=collation_key) == ["eagle", "école", "ezra", "zebra"]

    def test_unaccented_before_accented(self) -> None:
        """An accent only breaks ties."""
        assert sorted(["é", "e"], key=collation_key) == ["e", "é"]

    def test_empty_title_sorts_first(self) -> None:
        assert sorted(["a", ""], key=collation_key) == ["", "a"]


class TestSnippet:
    """Tests for snippet."""

    def test_prefix(self) -> None:
        assert snippet("abcdef", 3) == "abc"

    def test_short_text(self) -> None:
        assert snippet("abc", 100) == "abc"

    def test_default_length(self) -> None:
        assert len(snippet("x" * 500)) == 100

    def test_zero_length(self) -> None:
        assert snippet("abc", 0) == ""


class TestFieldNorm:
    """Tests for field_norm."""

    def test_single_token(self) -> None:
        assert field_norm("docker") == 1.0

    def test_four_tokens(self) -> None:
        assert field_norm("one two three four") == 0.5

    def test_rounded_to_three_decimals(self) -> None:
        assert field_norm("one two") == 0.707

    def test_repeated_spaces_ignored(self) -> None:
        assert field_norm("one   two") == 0.707

    def test_is_blank(self) -> None:
        assert is_blank("  \n")
        assert not is_blank(" a ")
