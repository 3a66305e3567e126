"""Unit tests for edit-distance similarity."""

import pytest

from tasksjasr.similarity import levenshtein_distance, similarity


class TestLevenshteinDistance:
    """Test cases for levenshtein_distance."""

    def test_kitten_sitting(self):
        assert levenshtein_distance("kitten", "sitting") == 3

    def test_empty_strings(self):
        assert levenshtein_distance("", "") == 0
        assert levenshtein_distance("", "abc") == 3
        assert levenshtein_distance("abc", "") == 3

    def test_single_operations(self):
        assert levenshtein_distance("casa", "casas") == 1
        assert levenshtein_distance("casa", "cas") == 1
        assert levenshtein_distance("casa", "cosa") == 1

    def test_symmetric(self):
        assert levenshtein_distance("flaw", "lawn") == levenshtein_distance("lawn", "flaw") == 2


class TestSimilarity:
    """Test cases for normalized similarity."""

    @pytest.mark.parametrize("text", ["", "a", "implementar backend api", "ñandú"])
    def test_identical_strings_score_one(self, text):
        assert similarity(text, text) == 1.0

    def test_both_empty_is_one(self):
        assert similarity("", "") == 1.0

    def test_one_empty_is_zero(self):
        assert similarity("abc", "") == 0.0

    @pytest.mark.parametrize("a,b", [
        ("kitten", "sitting"),
        ("crear archivo", "crear carpeta"),
        ("diseñar interfaz", "diseño de interfaz"),
    ])
    def test_symmetric(self, a, b):
        assert similarity(a, b) == pytest.approx(similarity(b, a))

    def test_normalized_by_longest(self):
        # distance 3 over 7 characters
        assert similarity("kitten", "sitting") == pytest.approx(4 / 7)

    def test_case_is_not_normalized(self):
        assert similarity("API", "api") == 0.0
