import pytest

from matching import (
    STANDARD_POLICY,
    STRICT_POLICY,
    SYNONYM_RELATIONS,
    SYNONYMS,
    AnswerQuality,
    MatchPolicy,
    build_synonym_index,
    classify,
    expand_with_synonyms,
    levenshtein,
    normalize,
    split_variants,
)


class TestNormalize:
    def test_strips_punctuation_and_case(self):
        assert normalize("  Hello,   World!! ") == "hello world"

    def test_removes_hebrew_article_and_plural(self):
        assert normalize("הכלבים") == "כלב"

    def test_removes_feminine_suffix(self):
        assert normalize("כלבה") == "כלב"

    def test_short_words_are_untouched(self):
        assert normalize("הם") == "הם"
        assert normalize("ים") == "ים"

    def test_empty_input(self):
        assert normalize("") == ""
        assert normalize("?!") == ""


class TestLevenshtein:
    @pytest.mark.parametrize(
        "a, b, expected",
        [
            ("", "", 0),
            ("abc", "", 3),
            ("", "abc", 3),
            ("kitten", "sitting", 3),
            ("שלום", "שלוס", 1),
        ],
    )
    def test_distance(self, a, b, expected):
        assert levenshtein(a, b) == expected


class TestSynonyms:
    def test_index_is_symmetric(self):
        for term, equivalents in SYNONYM_RELATIONS.items():
            key = normalize(term)
            for equivalent in equivalents:
                other = normalize(equivalent)
                if other == key:
                    continue
                assert other in SYNONYMS[key]
                assert key in SYNONYMS[other]

    def test_build_index_from_one_sided_relations(self):
        index = build_synonym_index({"big": ["large"]})
        assert index["big"] == frozenset({"large"})
        assert index["large"] == frozenset({"big"})

    def test_expand_includes_the_term_itself(self):
        expanded = expand_with_synonyms("שדה תעופה")
        assert normalize("שדה תעופה") in expanded
        assert normalize("נמל תעופה") in expanded

    def test_custom_table(self):
        table = build_synonym_index({"big": ["large"]})
        assert classify("large", "big", synonyms=table) == AnswerQuality.EXACT
        assert classify("large", "big", synonyms={}) == AnswerQuality.WRONG


class TestClassify:
    @pytest.mark.parametrize("text", ["כלב", "airport", "נשמע טוב", "Hello!"])
    def test_identical_answer_is_exact(self, text):
        assert classify(text, text) == AnswerQuality.EXACT

    @pytest.mark.parametrize("canonical", ["כלב", "", "אחרת"])
    def test_empty_answer_is_wrong(self, canonical):
        assert classify("", canonical) == AnswerQuality.WRONG
        assert classify("   ", canonical) == AnswerQuality.WRONG

    def test_every_variant_is_accepted(self):
        assert classify("כלב", "כלב / חתול") == AnswerQuality.EXACT
        assert classify("חתול", "כלב / חתול") == AnswerQuality.EXACT

    def test_split_variants(self):
        assert split_variants("למעשה / בעצם") == ["למעשה", "בעצם"]
        assert split_variants("a, b; c") == ["a", "b", "c"]
        assert split_variants("") == []

    def test_single_typo_is_exact(self):
        assert classify("שלוס", "שלום") == AnswerQuality.EXACT

    def test_global_tolerance_gives_close(self):
        assert classify("מכשג", "מחשב") == AnswerQuality.CLOSE

    def test_unrelated_answer_is_wrong(self):
        assert classify("חתול", "מחשב") == AnswerQuality.WRONG

    def test_plural_matches_base_variant(self):
        assert classify("כלבים", "כלב / כלבה") == AnswerQuality.EXACT

    def test_partial_answer_is_accepted(self):
        assert classify("נשמע", "נשמע מעניין") == AnswerQuality.EXACT

    def test_extended_answer_is_accepted(self):
        assert classify("זה נשמע מעניין", "מעניין") == AnswerQuality.EXACT

    def test_synonym_of_canonical(self):
        assert classify("נמל תעופה", "שדה תעופה") == AnswerQuality.EXACT

    def test_synonym_of_one_variant(self):
        assert classify("עצבני", "עצוב / כועס") == AnswerQuality.EXACT

    def test_delimiter_only_canonical_never_matches(self):
        assert classify("כלב", " / - ") == AnswerQuality.WRONG


class TestStrictPolicy:
    def test_partial_answer_is_rejected(self):
        assert classify("נשמע", "נשמע מעניין", policy=STRICT_POLICY) == AnswerQuality.WRONG

    def test_no_close_tier(self):
        assert classify("מכשג", "מחשב", policy=STRICT_POLICY) == AnswerQuality.WRONG

    def test_exact_and_typos_still_pass(self):
        assert classify("went", "went", policy=STRICT_POLICY) == AnswerQuality.EXACT
        assert classify("were playng", "were playing", policy=STRICT_POLICY) == AnswerQuality.EXACT

    def test_policy_flags(self):
        assert STANDARD_POLICY.containment and STANDARD_POLICY.allow_close
        assert not STRICT_POLICY.containment and not STRICT_POLICY.allow_close

    def test_typo_tolerance_can_be_disabled(self):
        policy = MatchPolicy(typo_tolerance=False, allow_close=False)
        assert classify("שלוס", "שלום", policy=policy) == AnswerQuality.WRONG
