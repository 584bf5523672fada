"""
Answer checking for the Hebrew/English vocabulary drill.

A free-text answer is graded against a canonical answer that may list several
accepted variants ("כלב / כלבה"). Grading walks a cascade of increasingly
tolerant rules: exact match, synonyms, small typos, partial/extended answers
and finally a looser whole-answer fuzzy check that only earns partial credit.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Set, Tuple


class AnswerQuality(str, Enum):
    EXACT = "exact"
    CLOSE = "close"
    WRONG = "wrong"


@dataclass(frozen=True)
class MatchPolicy:
    """Which rules of the cascade are active.

    The strict policy is used for grammar exercises where a partial answer or
    a spelling-level mistake must not pass.
    """

    synonyms: bool = True
    typo_tolerance: bool = True
    containment: bool = True
    allow_close: bool = True
    variant_error_ratio: float = 0.2
    global_error_ratio: float = 0.3


STANDARD_POLICY = MatchPolicy()
STRICT_POLICY = MatchPolicy(containment=False, allow_close=False)

VARIANT_SPLIT_RE = re.compile(r"[/,;\-]+")
_STRIP_RE = re.compile(r"[^0-9a-zA-Z\u0590-\u05FF\s]")
_SPACES_RE = re.compile(r"\s+")

HEBREW_ARTICLE = "ה"
PLURAL_SUFFIXES = ("ים", "ות")
FEMININE_SUFFIX = "ה"

# Hand-authored relations: each key is accepted wherever one of its listed
# terms is expected, and vice versa.
SYNONYM_RELATIONS: Dict[str, Tuple[str, ...]] = {
    "upset": ("עצוב", "עצבני"),
    "עצוב": ("עצבני", "ממורמר", "נעלב"),
    "עצבני": ("עצוב", "כועס"),
    "שדה תעופה": ("נמל תעופה",),
    "נמל תעופה": ("שדה תעופה",),
    "בריכה": ("בריכת שחייה",),
    "chat": (
        "לשוחח",
        "לשוחח בצ'אט",
        "לשוחח בצאט",
        "לצ'טט",
        "לטקסט",
        "לדבר בצ'אט",
        "להתכתב",
        "להתכתב בצאט",
    ),
    "לשוחח": ("לצ'טט", "לדבר בצ'אט", "להתכתב", "לשוחח בצ'אט"),
    "לצ'טט": ("לשוחח", "לדבר בצ'אט", "להתכתב"),
    "be crazy about": ("למות על", "להשתגע על", "משוגע על", "מאוד אוהב", "אוהב מאוד"),
    "למות על": ("להשתגע על", "משוגע על", "be crazy about", "love"),
    "להשתגע על": ("למות על", "משוגע על", "be crazy about"),
    "מת על": ("למות על", "להשתגע על", "be crazy about", "love"),
}


def normalize(value: str) -> str:
    if not value:
        return ""
    cleaned = value.strip().lower()
    cleaned = _STRIP_RE.sub("", cleaned)
    cleaned = _SPACES_RE.sub(" ", cleaned).strip()
    if len(cleaned) > 2 and cleaned[0] == HEBREW_ARTICLE:
        cleaned = cleaned[1:]
    if len(cleaned) > 3 and cleaned.endswith(PLURAL_SUFFIXES):
        cleaned = cleaned[:-2]
    elif len(cleaned) > 2 and cleaned.endswith(FEMININE_SUFFIX):
        cleaned = cleaned[:-1]
    return cleaned


def levenshtein(a: str, b: str) -> int:
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)
    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            cost = 0 if char_a == char_b else 1
            current.append(
                min(
                    previous[j] + 1,
                    current[j - 1] + 1,
                    previous[j - 1] + cost,
                )
            )
        previous = current
    return previous[-1]


def build_synonym_index(relations: Mapping[str, Iterable[str]]) -> Dict[str, FrozenSet[str]]:
    """Compile raw relations into a symmetric lookup keyed by normalized term."""
    index: Dict[str, Set[str]] = {}
    for term, equivalents in relations.items():
        key = normalize(term)
        if not key:
            continue
        for equivalent in equivalents:
            other = normalize(equivalent)
            if not other or other == key:
                continue
            index.setdefault(key, set()).add(other)
            index.setdefault(other, set()).add(key)
    return {key: frozenset(values) for key, values in index.items()}


SYNONYMS: Dict[str, FrozenSet[str]] = build_synonym_index(SYNONYM_RELATIONS)


def expand_with_synonyms(term: str, synonyms: Optional[Mapping[str, FrozenSet[str]]] = None) -> Set[str]:
    table = SYNONYMS if synonyms is None else synonyms
    key = normalize(term)
    expanded = {key}
    expanded.update(table.get(key, ()))
    return expanded


def split_variants(canonical_answer: str) -> List[str]:
    # Split before normalizing: normalize() strips the delimiters themselves.
    pieces = VARIANT_SPLIT_RE.split(canonical_answer or "")
    return [piece.strip() for piece in pieces if piece.strip()]


def _allowed_errors(length: int, ratio: float, minimum: int) -> int:
    return max(minimum, int(length * ratio))


def _matches_variant(
    clean_user: str,
    variant_raw: str,
    policy: MatchPolicy,
    synonyms: Optional[Mapping[str, FrozenSet[str]]],
) -> bool:
    variant = normalize(variant_raw)
    if not variant:
        return False
    if clean_user == variant:
        return True
    if policy.synonyms and clean_user in expand_with_synonyms(variant_raw, synonyms):
        return True
    if policy.typo_tolerance:
        allowed = _allowed_errors(len(variant), policy.variant_error_ratio, 1)
        if levenshtein(clean_user, variant) <= allowed:
            return True
    if policy.containment:
        if len(variant) >= 2 and variant in clean_user:
            return True
        if len(clean_user) >= 2 and clean_user in variant:
            return True
    if policy.synonyms and variant in expand_with_synonyms(clean_user, synonyms):
        return True
    return False


def classify(
    user_answer: str,
    canonical_answer: str,
    policy: MatchPolicy = STANDARD_POLICY,
    synonyms: Optional[Mapping[str, FrozenSet[str]]] = None,
) -> AnswerQuality:
    clean_user = normalize(user_answer)
    clean_correct = normalize(canonical_answer)

    if not clean_user:
        return AnswerQuality.WRONG

    if clean_user == clean_correct:
        return AnswerQuality.EXACT

    for variant_raw in split_variants(canonical_answer):
        if _matches_variant(clean_user, variant_raw, policy, synonyms):
            return AnswerQuality.EXACT

    if policy.allow_close:
        allowed = _allowed_errors(len(clean_correct), policy.global_error_ratio, 2)
        if levenshtein(clean_user, clean_correct) <= allowed:
            return AnswerQuality.CLOSE

    return AnswerQuality.WRONG
