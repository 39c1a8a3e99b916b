"""
Tests for ingredient name standardization.
"""

import pytest

from foodiebuddy.ingredients.normalize import names_match, standardize_name


class TestStandardizeName:
    """Test the matching-key heuristic."""

    def test_plural_s_dropped(self):
        assert standardize_name("Tomates") == "tomate"
        assert standardize_name("eggs") == "egg"

    def test_lowercases(self):
        assert standardize_name("MILK") == "milk"

    def test_particle_keeps_next_word(self):
        assert standardize_name("Sauce de Tomates") == "sauce tomate"

    def test_qualifier_noun_keeps_next_word(self):
        assert standardize_name("vin blanc") == "vin blanc"
        assert standardize_name("wine vinegar") == "wine vinegar"

    def test_apostrophe_splits(self):
        assert standardize_name("Huile d'olive") == "huile olive"

    def test_english_particles(self):
        assert standardize_name("cream of mushroom") == "cream mushroom"

    def test_insignificant_words_dropped(self):
        assert standardize_name("Red onions") == "red"
        assert standardize_name("tomates cerises") == "tomate"

    def test_run_of_particles_keeps_first_real_word(self):
        # "sauce" and "de" both ask to keep the next word; only "tomate" is kept once
        assert standardize_name("sauce de tomates fraiches") == "sauce tomate"

    def test_trailing_whitespace_ignored(self):
        assert standardize_name("Tomates   ") == "tomate"

    def test_leading_whitespace_ignored(self):
        assert standardize_name("  milk") == "milk"

    def test_empty_gives_empty_key(self):
        assert standardize_name("") == ""
        assert standardize_name("   ") == ""

    def test_deterministic(self):
        names = ["Sauce de Tomates", "Huile d'olive", "Eggs", "vin rouge pour cuisiner"]
        assert [standardize_name(n) for n in names] == [standardize_name(n) for n in names]

    @pytest.mark.parametrize(
        "recipe_name,pantry_name",
        [
            ("Tomates", "tomate"),
            ("Carrots", "carrot"),
            ("Sauce de tomates", "sauce de tomate"),
        ],
    )
    def test_recipe_and_pantry_phrasings_agree(self, recipe_name, pantry_name):
        assert standardize_name(recipe_name) == standardize_name(pantry_name)


class TestNamesMatch:
    def test_equal_keys_match(self):
        assert names_match("tomate", "tomate")

    def test_different_keys_do_not_match(self):
        assert not names_match("tomate", "carrot")

    def test_empty_keys_never_match(self):
        assert not names_match("", "")
