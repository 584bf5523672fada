import random

import pytest

import scheduler
from matching import AnswerQuality
from scheduler import PracticeItem, SchedulerConfig


def make_pool(size):
    return [PracticeItem(id=f"w-{i}", prompt=f"word {i}", answer=f"מילה {i}") for i in range(size)]


class TestPickNext:
    def test_never_returns_mastered_item(self):
        pool = make_pool(6)
        for item in pool[:4]:
            item.mastery_count = 3
        rng = random.Random(7)
        for turn in range(50):
            picked = scheduler.pick_next(pool, turn, rng=rng)
            assert picked is not None
            assert picked.mastery_count < 3

    def test_recent_items_are_held_back(self):
        pool = make_pool(5)
        pool[0].last_asked_turn = 10
        pool[1].last_asked_turn = 9
        pool[2].last_asked_turn = 8
        rng = random.Random(3)
        for _ in range(50):
            picked = scheduler.pick_next(pool, 10, rng=rng)
            assert picked.id in {"w-3", "w-4"}

    def test_small_pool_ignores_spacing(self):
        pool = make_pool(2)
        pool[0].last_asked_turn = 5
        pool[1].last_asked_turn = 5
        seen = set()
        rng = random.Random(11)
        for _ in range(50):
            seen.add(scheduler.pick_next(pool, 5, rng=rng).id)
        assert seen == {"w-0", "w-1"}

    def test_falls_back_when_everything_was_asked_recently(self):
        pool = make_pool(4)
        for idx, item in enumerate(pool):
            item.last_asked_turn = 10 - (idx % 2)
        picked = scheduler.pick_next(pool, 10, rng=random.Random(1))
        assert picked in pool

    def test_completion_is_idempotent(self):
        pool = make_pool(3)
        for item in pool:
            item.mastery_count = 3
        assert scheduler.pick_next(pool, 0) is None
        assert scheduler.pick_next(pool, 1) is None
        assert scheduler.pick_next(pool, 2) is None

    def test_empty_pool_is_complete(self):
        assert scheduler.pick_next([], 0) is None
        assert scheduler.is_complete([])

    def test_custom_config(self):
        cfg = SchedulerConfig(mastery_threshold=1, spacing_buffer=0)
        pool = make_pool(2)
        pool[0].mastery_count = 1
        assert scheduler.pick_next(pool, 0, cfg).id == "w-1"


class TestRecordAnswer:
    def test_exact_increments(self):
        item = make_pool(1)[0]
        scheduler.record_answer(item, AnswerQuality.EXACT, 1)
        assert item.mastery_count == 1
        assert item.last_asked_turn == 1

    @pytest.mark.parametrize("quality", [AnswerQuality.CLOSE, AnswerQuality.WRONG])
    def test_other_qualities_only_touch_the_turn(self, quality):
        item = make_pool(1)[0]
        item.mastery_count = 2
        scheduler.record_answer(item, quality, 4)
        assert item.mastery_count == 2
        assert item.last_asked_turn == 4

    def test_mastery_is_capped(self):
        item = make_pool(1)[0]
        for turn in range(10):
            scheduler.record_answer(item, AnswerQuality.EXACT, turn)
        assert item.mastery_count == 3

    def test_reset(self):
        pool = make_pool(2)
        for item in pool:
            scheduler.record_answer(item, AnswerQuality.EXACT, 1)
        scheduler.reset_progress(pool)
        assert all(item.mastery_count == 0 and item.last_asked_turn is None for item in pool)


class TestSessionFlow:
    def test_single_item_needs_three_exact_answers(self):
        pool = make_pool(1)
        item = scheduler.pick_next(pool, 0)
        counts = []
        picks = []
        for turn in range(1, 4):
            scheduler.record_answer(item, AnswerQuality.EXACT, turn)
            counts.append(item.mastery_count)
            picks.append(scheduler.pick_next(pool, turn))
        assert counts == [1, 2, 3]
        assert picks[0] is item
        assert picks[1] is item
        assert picks[2] is None

    def test_always_exact_run_terminates(self):
        pool = make_pool(5)
        rng = random.Random(42)
        turn = 0
        item = scheduler.pick_next(pool, turn, rng=rng)
        while item is not None:
            turn += 1
            scheduler.record_answer(item, AnswerQuality.EXACT, turn)
            item = scheduler.pick_next(pool, turn, rng=rng)
        assert turn == 15
        assert scheduler.mastered_count(pool) == 5
        assert not scheduler.incomplete_items(pool)
