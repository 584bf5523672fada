"""
Item selection for a drill session.

Items are drawn at random from the ones that still need practice, but an item
answered in the last few turns is held back so the student does not see the
same prompt twice in a row. When the pool is too small for that rule to leave
anything, every unfinished item stays eligible so the session never stalls.
"""
from __future__ import annotations

import random
from dataclasses import dataclass
from typing import List, Optional, Sequence

from config import REQUIRED_WINS, SPACING_BUFFER
from matching import AnswerQuality


@dataclass(frozen=True)
class SchedulerConfig:
    mastery_threshold: int = REQUIRED_WINS
    spacing_buffer: int = SPACING_BUFFER


DEFAULT_CONFIG = SchedulerConfig()


@dataclass
class PracticeItem:
    """A word pair or a fill-in-the-blank sentence with its mastery state."""
    id: str
    prompt: str
    answer: str
    mastery_count: int = 0
    last_asked_turn: Optional[int] = None
    choices: Optional[List[str]] = None
    correct_choice_index: Optional[int] = None
    explanation: Optional[str] = None

    @property
    def is_multiple_choice(self) -> bool:
        return bool(self.choices)

    def is_mastered(self, threshold: int = REQUIRED_WINS) -> bool:
        return self.mastery_count >= threshold


def incomplete_items(pool: Sequence[PracticeItem], config: Optional[SchedulerConfig] = None) -> List[PracticeItem]:
    cfg = config or DEFAULT_CONFIG
    return [item for item in pool if item.mastery_count < cfg.mastery_threshold]


def mastered_count(pool: Sequence[PracticeItem], config: Optional[SchedulerConfig] = None) -> int:
    return len(pool) - len(incomplete_items(pool, config))


def is_complete(pool: Sequence[PracticeItem], config: Optional[SchedulerConfig] = None) -> bool:
    return not incomplete_items(pool, config)


def pick_next(
    pool: Sequence[PracticeItem],
    current_turn: int,
    config: Optional[SchedulerConfig] = None,
    rng: Optional[random.Random] = None,
) -> Optional[PracticeItem]:
    """Return the next item to ask, or ``None`` once every item is mastered."""
    cfg = config or DEFAULT_CONFIG
    chooser = rng or random
    incomplete = incomplete_items(pool, cfg)
    if not incomplete:
        return None

    candidates = incomplete
    if len(incomplete) > cfg.spacing_buffer:
        spaced = [
            item
            for item in incomplete
            if current_turn - (item.last_asked_turn if item.last_asked_turn is not None else -1)
            > cfg.spacing_buffer
        ]
        if spaced:
            candidates = spaced

    return chooser.choice(candidates)


def record_answer(
    item: PracticeItem,
    quality: AnswerQuality,
    turn: int,
    config: Optional[SchedulerConfig] = None,
) -> None:
    cfg = config or DEFAULT_CONFIG
    if quality == AnswerQuality.EXACT:
        item.mastery_count = min(cfg.mastery_threshold, item.mastery_count + 1)
    item.last_asked_turn = turn


def reset_progress(pool: Sequence[PracticeItem]) -> None:
    for item in pool:
        item.mastery_count = 0
        item.last_asked_turn = None
