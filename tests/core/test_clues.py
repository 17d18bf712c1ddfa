"""
Unit Tests for Clue Records

Tests for the ClueRecord dataclass, round parsing and category keys.
"""

import pytest

from trivia_trainer.core.models import ClueRecord, Round, normalize_category_key


class TestRoundParse:
    """Tests for Round.parse()."""

    @pytest.mark.parametrize("raw", ["1", "J", "j", "Jeopardy", " jeopardy! ", "first"])
    def test_parse_when_first_round_spelling_then_first(self, raw):
        assert Round.parse(raw) is Round.FIRST

    @pytest.mark.parametrize("raw", ["2", "DJ", "Double Jeopardy", "double  jeopardy!"])
    def test_parse_when_second_round_spelling_then_second(self, raw):
        assert Round.parse(raw) is Round.SECOND

    @pytest.mark.parametrize("raw", ["3", "FJ", "Final Jeopardy"])
    def test_parse_when_final_round_spelling_then_final(self, raw):
        assert Round.parse(raw) is Round.FINAL

    @pytest.mark.parametrize("raw", ["", None, "Tiebreaker", "7"])
    def test_parse_when_unrecognized_then_unknown(self, raw):
        assert Round.parse(raw) is Round.UNKNOWN


class TestCategoryKey:
    """Tests for normalize_category_key()."""

    def test_key_when_case_and_spacing_differ_then_equal(self):
        assert normalize_category_key("World  History ") == normalize_category_key("WORLD HISTORY")

    def test_key_when_different_names_then_differ(self):
        assert normalize_category_key("Science") != normalize_category_key("Sciences")


class TestClueRecord:
    """Tests for ClueRecord dataclass."""

    # ─────────────────────────────────────────────────────────────────────────
    # Constructor Tests
    # ─────────────────────────────────────────────────────────────────────────

    def test_init_when_valid_values_then_creates_record(self):
        clue = ClueRecord("c1", Round.FIRST, "Science", 200, "H2O", "What is water?")
        assert clue.value == 200
        assert clue.tags == frozenset()
        assert clue.category_key == "science"

    def test_init_when_empty_clue_text_then_raises_error(self):
        with pytest.raises(ValueError, match="empty clue text"):
            ClueRecord("c1", Round.FIRST, "Science", 200, "   ", "What is water?")

    def test_init_when_empty_response_then_raises_error(self):
        with pytest.raises(ValueError, match="empty response text"):
            ClueRecord("c1", Round.FIRST, "Science", 200, "H2O", "")

    def test_init_when_category_untrimmed_then_raises_error(self):
        with pytest.raises(ValueError, match="trimmed"):
            ClueRecord("c1", Round.FIRST, " Science", 200, "H2O", "What is water?")

    def test_init_when_negative_value_then_raises_error(self):
        with pytest.raises(ValueError, match="negative value"):
            ClueRecord("c1", Round.FIRST, "Science", -200, "H2O", "What is water?")

    def test_init_when_frozen_then_immutable(self):
        clue = ClueRecord("c1", Round.FIRST, "Science", 200, "H2O", "What is water?")
        with pytest.raises(AttributeError):
            clue.value = 400  # type: ignore
