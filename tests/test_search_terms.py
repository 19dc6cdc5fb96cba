"""Tests for lookup query cleaning."""

from recipe_nutrition.services.search_terms import (
    MAX_QUERY_LENGTH,
    MAX_VARIANTS,
    clean_search_term,
    search_variants,
)


def test_clean_search_term_strips_descriptors_and_symbols() -> None:
    assert clean_search_term("Fresh Basil (chopped)") == "basil"
    assert clean_search_term("Kraft® Cheddar, shredded") == "kraft cheddar"
    assert clean_search_term("salt & pepper") == "salt and pepper"
    assert clean_search_term("boneless/skinless chicken") == "boneless skinless chicken"


def test_clean_search_term_falls_back_to_original() -> None:
    assert clean_search_term("Fresh") == "fresh"


def test_clean_search_term_truncates() -> None:
    assert len(clean_search_term("tomato " * 100)) <= MAX_QUERY_LENGTH


def test_search_variants_progress_from_specific_to_simple() -> None:
    variants = search_variants("boneless skinless chicken breast")

    assert variants[0] == "boneless skinless chicken breast"
    assert "chicken breast" in variants
    assert "breast" in variants
    assert len(variants) == len(set(variants))
    assert len(variants) <= MAX_VARIANTS


def test_search_variants_singular_and_substitutions() -> None:
    variants = search_variants("eggs")
    assert variants[:2] == ["eggs", "egg"]

    assert "olive oil" in search_variants("extra virgin olive oil")


def test_search_variants_empty() -> None:
    assert search_variants("   ") == []
