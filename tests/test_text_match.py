import pytest

from apps.annonces.services.text_match import levenshtein, matches, normalize


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Café-Rémy!", "cafe remy"),
        ("  Développement   Durable ", "developpement durable"),
        ("gestion_de_patrimoine", "gestion de patrimoine"),
        ("Présentiel-ou-visioconférence", "presentiel ou visioconference"),
        ("L'ÉPARGNE, salariale.", "lepargne salariale"),
        ("", ""),
        (None, ""),
        ("  --  ", ""),
    ],
)
def test_normalize(raw, expected):
    assert normalize(raw) == expected


@pytest.mark.parametrize(
    "raw",
    ["Café-Rémy!", "Expert en fiscalité", "a__b--c", "ÉSG / ISR", "  x  y  ", "ℌeritage", "𝐏aris", "ﬁscalité"],
)
def test_normalize_is_idempotent(raw):
    once = normalize(raw)
    assert normalize(once) == once


def test_normalize_ignores_case_accents_and_punctuation():
    assert normalize("Café-Rémy!") == normalize("cafe remy")


def test_levenshtein_known_values():
    assert levenshtein("kitten", "sitting") == 3
    assert levenshtein("", "abc") == 3
    assert levenshtein("abc", "") == 3
    assert levenshtein("financier", "finansier") == 1


@pytest.mark.parametrize("a, b", [("kitten", "sitting"), ("fiscal", "fiscalite"), ("", "abc"), ("abc", "abc")])
def test_levenshtein_is_symmetric(a, b):
    assert levenshtein(a, b) == levenshtein(b, a)


def test_levenshtein_zero_only_for_equal_strings():
    assert levenshtein("retraite", "retraite") == 0
    assert levenshtein("retraite", "retraites") != 0


def test_matches_substring_after_normalization():
    assert matches("Développement Durable", "developpement")


def test_matches_fuzzy_within_two_edits():
    assert matches("Financier", "finansier")
    assert matches("Dupont", "duponf")


def test_matches_fuzzy_disabled_below_four_characters():
    # distance is 1 but both strings are shorter than 4
    assert levenshtein("abc", "abd") == 1
    assert not matches("abc", "abd")


def test_matches_fuzzy_at_four_characters():
    assert matches("abcd", "abce")


def test_matches_rejects_three_edits():
    assert not matches("conseil", "consxxx")


def test_matches_empty_field_never_matches():
    assert not matches("", "abc")
    assert not matches(None, "abc")
    assert not matches("!!!", "abc")


@pytest.mark.parametrize("raw, plain", [("ℌeritage", "heritage"), ("𝐏aris", "paris"), ("ＬＹＯＮ", "lyon")])
def test_normalize_lowercases_compatibility_characters(raw, plain):
    assert normalize(raw) == plain


def test_levenshtein_score_cutoff_caps_distance():
    assert levenshtein("kitten", "sitting", score_cutoff=2) == 3
    assert levenshtein("financier", "finansier", score_cutoff=2) == 1
