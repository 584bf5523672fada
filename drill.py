#!/usr/bin/env python3
"""
Console drill for English vocabulary with Hebrew answers.

The program keeps users and per-practice-set progress in a small SQLite
database, picks items until each one has been answered correctly enough times,
and grades free-text answers with the tolerant matcher in ``matching``.
The same ``DrillSession`` object backs the web API in ``api.py``.
"""
from __future__ import annotations

import json
import logging
import random
import re
import sqlite3
import sys
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Sequence, Tuple

import config
import scheduler
from matching import STANDARD_POLICY, STRICT_POLICY, AnswerQuality, MatchPolicy, classify
from scheduler import PracticeItem, SchedulerConfig

logger = logging.getLogger(__name__)

QUIT_COMMANDS = {"q", "quit", "exit", "יציאה"}
HINT_COMMANDS = {"?", "hint", "רמז"}
STRICT_ID_PREFIX = "past_"

BLANK_RE = re.compile(r"_+")
BLANK_PLACEHOLDER = "___BLANK___"
LATIN_RE = re.compile(r"[a-zA-Z]")

USE_COLORS = sys.stdout.isatty() and config.USE_COLORS_DEFAULT
COLOR_RESET = "\033[0m"
COLOR_GOOD = "\033[92m"  # green
COLOR_CLOSE = "\033[93m"  # yellow
COLOR_BAD = "\033[91m"  # red
COLOR_TITLE = "\033[96m"  # cyan

POS_MAP = {
    "n": "noun",
    "noun": "noun",
    "v": "verb",
    "verb": "verb",
    "adj": "adjective",
    "adjective": "adjective",
    "adv": "adverb",
    "adverb": "adverb",
    "prep": "preposition",
    "conj": "conjunction",
    "pron": "pronoun",
    "phrasal": "phrasal verb",
    "expression": "expression",
}

# Used when the translation service is unreachable. Longer phrases first.
LOCAL_PHRASE_MAP: Tuple[Tuple[str, str], ...] = (
    ("has changed the way we communicate", "שינתה את הדרך שבה אנו מתקשרים"),
    ("modern", "מודרני"),
    ("has changed", "שינתה"),
    ("has", "יש"),
    ("changed", "שינה"),
    ("the way", "את הדרך"),
    ("we communicate", "אנו מתקשרים"),
    ("we", "אנו"),
    ("communicate", "מתקשרים"),
)

STORAGE_ERRORS = (sqlite3.Error, OSError, ValueError, TypeError)


class PresetNotFoundError(LookupError):
    pass


class InvalidSubmissionError(ValueError):
    pass


def color_text(content: str, color_code: str) -> str:
    if not USE_COLORS:
        return content
    return f"{color_code}{content}{COLOR_RESET}"


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def user_key_for(name: Optional[str]) -> str:
    cleaned = re.sub(r"\s+", "_", (name or "").strip())
    return cleaned or "anon"


# ---------------------------------------------------------------------------
# SQLite storage
# ---------------------------------------------------------------------------

def connect_db(db_path: Optional[Path] = None) -> sqlite3.Connection:
    conn = sqlite3.connect(str(db_path or config.DB_PATH), check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def ensure_schema(conn: sqlite3.Connection) -> None:
    conn.executescript(
        """
        CREATE TABLE IF NOT EXISTS users (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL UNIQUE,
            gender TEXT CHECK(gender IN ('male', 'female', 'other')),
            avatar TEXT,
            created_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS kv_store (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );
        """
    )
    conn.commit()


def get_or_create_user(
    conn: sqlite3.Connection,
    name: str,
    gender: Optional[str] = None,
    avatar: Optional[str] = None,
) -> int:
    row = conn.execute("SELECT id FROM users WHERE name = ?", (name,)).fetchone()
    if row:
        if gender or avatar:
            conn.execute(
                "UPDATE users SET gender = COALESCE(?, gender), avatar = COALESCE(?, avatar) WHERE id = ?",
                (gender, avatar, row[0]),
            )
            conn.commit()
        return int(row[0])
    cur = conn.execute(
        "INSERT INTO users (name, gender, avatar, created_at) VALUES (?, ?, ?, ?)",
        (name, gender, avatar, now_iso()),
    )
    conn.commit()
    logger.info("Created user %r (id=%s)", name, cur.lastrowid)
    return int(cur.lastrowid)


def fetch_user(conn: sqlite3.Connection, user_id: int) -> Optional[sqlite3.Row]:
    return conn.execute(
        "SELECT id, name, gender, avatar, created_at FROM users WHERE id = ?",
        (user_id,),
    ).fetchone()


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class MemoryKeyValueStore:
    def __init__(self) -> None:
        self.data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


class SQLiteKeyValueStore:
    """Key-value storage in the ``kv_store`` table; one connection per call."""

    def __init__(self, db_path: Optional[Path] = None) -> None:
        self.db_path = Path(db_path or config.DB_PATH)
        conn = connect_db(self.db_path)
        try:
            ensure_schema(conn)
        finally:
            conn.close()

    def get(self, key: str) -> Optional[str]:
        conn = connect_db(self.db_path)
        try:
            row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        finally:
            conn.close()
        return row["value"] if row else None

    def set(self, key: str, value: str) -> None:
        conn = connect_db(self.db_path)
        try:
            conn.execute(
                """
                INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (key, value, now_iso()),
            )
            conn.commit()
        finally:
            conn.close()


# ---------------------------------------------------------------------------
# Practice sets
# ---------------------------------------------------------------------------

def list_presets(bands_dir: Optional[Path] = None) -> List[Dict[str, str]]:
    index_path = Path(bands_dir or config.BANDS_DIR) / "index.json"
    if not index_path.exists():
        return []
    with index_path.open("r", encoding="utf-8") as handle:
        entries = json.load(handle)
    presets: List[Dict[str, str]] = []
    for entry in entries:
        filename = (entry.get("filename") or "").strip()
        if not filename:
            continue
        presets.append({"displayName": entry.get("displayName") or filename, "filename": filename})
    return presets


def _resolve_preset_path(filename: str, bands_dir: Optional[Path] = None) -> Path:
    base = Path(bands_dir or config.BANDS_DIR).resolve()
    name = filename if filename.endswith(".json") else f"{filename}.json"
    path = (base / name).resolve()
    if path.parent != base or path.name == "index.json" or not path.is_file():
        raise PresetNotFoundError(filename)
    return path


def _optional_int(value: object) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def items_from_records(records: Sequence[Dict], id_prefix: str) -> List[PracticeItem]:
    items: List[PracticeItem] = []
    seen_ids = set()
    for index, record in enumerate(records):
        prompt = (record.get("english") or record.get("en") or "").strip()
        answer = (record.get("hebrew") or record.get("he") or "").strip()
        if not prompt or not answer:
            logger.warning("Skipping record %s of %s: missing text", index, id_prefix)
            continue
        options = record.get("options")
        choices = [str(option) for option in options] if isinstance(options, list) and options else None
        correct_index = _optional_int(record.get("correctIndex"))
        if choices is not None and (correct_index is None or not 0 <= correct_index < len(choices)):
            logger.warning("Record %s of %s has no valid correctIndex, dropping choices", index, id_prefix)
            choices, correct_index = None, None

        item_id = str(record.get("id") or f"{id_prefix}-{index}")
        if item_id in seen_ids:
            logger.warning("Record %s of %s repeats id %r, renaming", index, id_prefix, item_id)
            item_id = f"{id_prefix}-{index}"
            suffix = 1
            while item_id in seen_ids:
                item_id = f"{id_prefix}-{index}-{suffix}"
                suffix += 1
        seen_ids.add(item_id)

        success_count = _optional_int(record.get("successCount")) or 0
        items.append(
            PracticeItem(
                id=item_id,
                prompt=prompt,
                answer=answer,
                mastery_count=max(0, min(config.REQUIRED_WINS, success_count)),
                choices=choices,
                correct_choice_index=correct_index if choices else None,
                explanation=record.get("explanation") or None,
            )
        )
    return items


def load_preset(filename: str, bands_dir: Optional[Path] = None) -> List[PracticeItem]:
    path = _resolve_preset_path(filename, bands_dir)
    with path.open("r", encoding="utf-8") as handle:
        records = json.load(handle)
    if not isinstance(records, list):
        raise PresetNotFoundError(filename)
    items = items_from_records(records, path.stem)
    logger.info("Loaded preset %s with %d items", path.name, len(items))
    return items


def items_from_pairs(pairs: Sequence[Dict[str, str]], source: str = "word") -> List[PracticeItem]:
    """Build a pool from ``{english, hebrew}`` pairs returned by the AI helper."""
    stamp = int(time.time() * 1000)
    records = [
        {"id": f"{source}-{stamp}-{index}", "english": pair.get("english"), "hebrew": pair.get("hebrew")}
        for index, pair in enumerate(pairs)
    ]
    return items_from_records(records, source)


# ---------------------------------------------------------------------------
# Display helpers
# ---------------------------------------------------------------------------

def parse_word_display(text: str) -> Tuple[str, Optional[str]]:
    """Split ``"run (v)"`` into ``("run", "verb")``; ``(s)`` markers move to the end."""
    if not text:
        return text, None

    suffix = ""

    def _move_marker(match: "re.Match[str]") -> str:
        nonlocal suffix
        suffix = f" ({match.group(1).upper()})"
        return ""

    cleaned = re.sub(r"\(\s*([sS])\s*\)", _move_marker, text)
    cleaned = re.sub(r"\s{2,}", " ", cleaned).strip()

    match = re.match(r"^(.*?)\s*[\(\[]([a-zA-Z/\s,|]+)[\)\]]\s*$", cleaned)
    if match:
        raw_word = match.group(1).strip()
        pieces = [p.strip() for p in re.split(r"[/|,]+", match.group(2).lower().strip()) if p.strip()]
        if pieces:
            pos = " or ".join(POS_MAP.get(piece, piece) for piece in pieces)
            return raw_word + suffix, pos

    return (cleaned + suffix).strip(), None


def is_sentence_item(item: PracticeItem) -> bool:
    return "_" in item.prompt or item.id.startswith("s")


def is_strict_item(item: PracticeItem) -> bool:
    return item.id.startswith(STRICT_ID_PREFIX)


def policy_for(item: PracticeItem) -> MatchPolicy:
    return STRICT_POLICY if is_strict_item(item) else STANDARD_POLICY


def fill_blanks(prompt: str, answer: str) -> str:
    return BLANK_RE.sub(f" {answer} ", prompt)


def gendered_text(gender: Optional[str], male_text: str, female_text: str, other_text: Optional[str] = None) -> str:
    if gender == "female":
        return female_text
    if gender == "other":
        return other_text or male_text
    return male_text


def local_translate(text: str) -> str:
    out = text
    for english, hebrew in LOCAL_PHRASE_MAP:
        out = re.sub(re.escape(english), hebrew, out, flags=re.IGNORECASE)
    return out


# ---------------------------------------------------------------------------
# Drill session
# ---------------------------------------------------------------------------

class Translator(Protocol):
    def translate(self, text: str) -> str:
        ...


@dataclass
class AnswerOutcome:
    item_id: str
    quality: AnswerQuality
    correct_answer: str
    mastery_count: int
    points: int
    score: int
    streak: int
    max_streak: int
    turn: int
    message: str
    explanation: Optional[str] = None
    revealed_sentence: Optional[str] = None
    revealed_translation: Optional[str] = None
    next_item: Optional[PracticeItem] = None

    @property
    def complete(self) -> bool:
        return self.next_item is None


class DrillSession:
    """State of one student working through one practice set."""

    def __init__(
        self,
        items: Sequence[PracticeItem],
        user_key: str = "anon",
        preset_id: Optional[str] = None,
        store: Optional[KeyValueStore] = None,
        translator: Optional[Translator] = None,
        scheduler_config: Optional[SchedulerConfig] = None,
        rng: Optional[random.Random] = None,
        gender: Optional[str] = None,
    ) -> None:
        self.pool: List[PracticeItem] = list(items)
        self.user_key = user_key
        self.preset_id = preset_id
        self.store = store
        self.translator = translator
        self.config = scheduler_config or scheduler.DEFAULT_CONFIG
        self.rng = rng or random.Random()
        self.gender = gender

        ids = [item.id for item in self.pool]
        if len(set(ids)) != len(ids):
            raise ValueError("practice item ids must be unique within a session")
        for item in self.pool:
            item.mastery_count = max(0, min(self.config.mastery_threshold, item.mastery_count))

        self.turn_count = 0
        self.score = 0
        self.streak = 0
        self.max_streak = 0
        self.current: Optional[PracticeItem] = None

    # -- persistence -------------------------------------------------------

    @property
    def progress_key(self) -> Optional[str]:
        if not self.preset_id:
            return None
        return f"progress:{self.user_key}:{self.preset_id}"

    @property
    def xp_key(self) -> str:
        return f"xp:{self.user_key}"

    def _read_json(self, key: str) -> Optional[Dict]:
        if self.store is None:
            return None
        try:
            raw = self.store.get(key)
            if not raw:
                return None
            data = json.loads(raw)
        except STORAGE_ERRORS as exc:
            logger.warning("Could not read %s: %s", key, exc)
            return None
        return data if isinstance(data, dict) else None

    def _write_json(self, key: str, payload: Dict) -> None:
        if self.store is None:
            return
        try:
            self.store.set(key, json.dumps(payload, ensure_ascii=False))
        except STORAGE_ERRORS as exc:
            logger.warning("Could not persist %s: %s", key, exc)

    def load(self) -> Optional[PracticeItem]:
        """Merge saved progress and XP, then pick the first item."""
        key = self.progress_key
        saved = self._read_json(key) if key else None
        if saved:
            for item in self.pool:
                entry = saved.get(item.id)
                if not isinstance(entry, dict):
                    continue
                count = _optional_int(entry.get("successCount"))
                if count is not None:
                    item.mastery_count = max(0, min(self.config.mastery_threshold, count))
                last_turn = _optional_int(entry.get("lastPlayedTurn"))
                if last_turn is not None:
                    item.last_asked_turn = last_turn
            # Resume the turn counter so saved spacing stays meaningful.
            turns = [item.last_asked_turn for item in self.pool if item.last_asked_turn is not None]
            self.turn_count = max(turns, default=0)

        xp = self._read_json(self.xp_key)
        if xp:
            self.score = _optional_int(xp.get("currentPoints")) or 0
            self.streak = _optional_int(xp.get("streak")) or 0
            self.max_streak = _optional_int(xp.get("maxStreak")) or 0

        logger.info(
            "Session for %s on %s: %d items, %d mastered",
            self.user_key,
            self.preset_id or "custom",
            len(self.pool),
            scheduler.mastered_count(self.pool, self.config),
        )
        return self.advance()

    def persist_progress(self) -> None:
        key = self.progress_key
        if key is None:
            return
        snapshot = {
            item.id: {"successCount": item.mastery_count, "lastPlayedTurn": item.last_asked_turn}
            for item in self.pool
        }
        self._write_json(key, snapshot)

    def persist_xp(self) -> None:
        self._write_json(
            self.xp_key,
            {"currentPoints": self.score, "streak": self.streak, "maxStreak": self.max_streak},
        )

    # -- flow ----------------------------------------------------------------

    @property
    def is_complete(self) -> bool:
        return scheduler.is_complete(self.pool, self.config)

    def advance(self) -> Optional[PracticeItem]:
        self.current = scheduler.pick_next(self.pool, self.turn_count, self.config, self.rng)
        return self.current

    def progress(self) -> Dict[str, int]:
        total = len(self.pool)
        done = scheduler.mastered_count(self.pool, self.config)
        percent = round(done * 100 / total) if total else 100
        return {"mastered": done, "total": total, "percent": percent}

    def _require_current(self, item_id: Optional[str]) -> PracticeItem:
        item = self.current
        if item is None:
            raise InvalidSubmissionError("התרגול הסתיים")
        if item_id is not None and item_id != item.id:
            raise InvalidSubmissionError(f"הפריט {item_id} אינו הפריט הנוכחי")
        return item

    def submit(self, answer: str, item_id: Optional[str] = None) -> AnswerOutcome:
        item = self._require_current(item_id)
        quality = classify(answer, item.answer, policy=policy_for(item))
        return self._apply(item, quality)

    def submit_choice(self, index: int, item_id: Optional[str] = None) -> AnswerOutcome:
        item = self._require_current(item_id)
        if not item.choices:
            raise InvalidSubmissionError("לפריט הזה אין תשובות לבחירה")
        if not 0 <= index < len(item.choices):
            raise InvalidSubmissionError("בחירה לא חוקית")
        quality = AnswerQuality.EXACT if index == item.correct_choice_index else AnswerQuality.WRONG
        return self._apply(item, quality)

    def _apply(self, item: PracticeItem, quality: AnswerQuality) -> AnswerOutcome:
        self.turn_count += 1
        scheduler.record_answer(item, quality, self.turn_count, self.config)

        points = 0
        if quality == AnswerQuality.EXACT:
            points = config.POINTS_PER_ANSWER
            self.streak += 1
            self.max_streak = max(self.max_streak, self.streak)
        elif quality == AnswerQuality.CLOSE:
            points = config.POINTS_PER_ANSWER
            self.streak = 0
        else:
            self.streak = 0
        self.score += points

        # Progress and XP are written independently and may drift apart.
        self.persist_progress()
        self.persist_xp()

        correct_answer = item.answer
        if item.choices and item.correct_choice_index is not None:
            correct_answer = item.choices[item.correct_choice_index]

        outcome = AnswerOutcome(
            item_id=item.id,
            quality=quality,
            correct_answer=correct_answer,
            mastery_count=item.mastery_count,
            points=points,
            score=self.score,
            streak=self.streak,
            max_streak=self.max_streak,
            turn=self.turn_count,
            message=self.feedback_message(quality),
            explanation=item.explanation,
        )
        if quality == AnswerQuality.WRONG and is_sentence_item(item) and not item.choices:
            outcome.revealed_sentence, outcome.revealed_translation = self.reveal(item)

        outcome.next_item = self.advance()
        logger.debug("Turn %d: %s -> %s", self.turn_count, item.id, quality.value)
        return outcome

    def feedback_message(self, quality: AnswerQuality) -> str:
        if quality == AnswerQuality.EXACT:
            return gendered_text(self.gender, "כל הכבוד! אתה אלוף", "כל הכבוד! את אלופה", "כל הכבוד!")
        if quality == AnswerQuality.CLOSE:
            return "כמעט! שים לב לאיות"
        return gendered_text(self.gender, "לא נורא, נסה שוב בפעם הבאה", "לא נורא, נסי שוב בפעם הבאה", "לא נורא, ננסה שוב")

    # -- translation collaborator ---------------------------------------------

    def _translate(self, text: str) -> str:
        if self.translator is None:
            raise RuntimeError("no translator configured")
        return self.translator.translate(text)

    def reveal(self, item: PracticeItem) -> Tuple[str, str]:
        """Fill the blank with the answer and translate the whole sentence."""
        filled = re.sub(r"\s{2,}", " ", fill_blanks(item.prompt, item.answer)).strip()
        try:
            translation = self._translate(filled) or ""
        except Exception as exc:
            logger.warning("Sentence translation failed for %s: %s", item.id, exc)
            return filled, config.TRANSLATION_FALLBACK

        if LATIN_RE.search(item.answer):
            try:
                word_translation = self._translate(item.answer)
            except Exception as exc:
                logger.warning("Word translation failed for %s: %s", item.id, exc)
            else:
                if word_translation:
                    translation = f"{word_translation} - {translation}"
        return filled, translation

    def translate_masked(self, prompt: str) -> str:
        with_placeholder = BLANK_RE.sub(BLANK_PLACEHOLDER, prompt)
        try:
            translated = self._translate(with_placeholder)
        except Exception as exc:
            logger.warning("Masked translation failed: %s", exc)
            translated = ""
        if not translated:
            translated = local_translate(with_placeholder)
        return translated.replace(BLANK_PLACEHOLDER, "___")

    def hint(self) -> Optional[str]:
        item = self.current
        if item is None:
            return None
        if item.choices:
            try:
                translated = self._translate(item.prompt)
            except Exception as exc:
                logger.warning("Hint translation failed for %s: %s", item.id, exc)
                translated = ""
            return translated or local_translate(item.prompt)
        if is_sentence_item(item):
            return self.translate_masked(item.prompt)
        return f"אות ראשונה: {item.answer[:1]}"

    def sentence_bank(self, item: PracticeItem) -> List[str]:
        if not is_sentence_item(item) or "-" not in item.id:
            return []
        prefix = item.id.split("-")[0]
        bank: List[str] = []
        for other in self.pool:
            if other.id.startswith(prefix) and other.answer not in bank:
                bank.append(other.answer)
        return bank

    def reset_progress(self) -> Optional[PracticeItem]:
        scheduler.reset_progress(self.pool)
        self.persist_progress()
        logger.info("Progress reset for %s on %s", self.user_key, self.preset_id or "custom")
        return self.advance()


# ---------------------------------------------------------------------------
# Console
# ---------------------------------------------------------------------------

def prompt_username() -> str:
    while True:
        name = input("מה השם שלך? ").strip()
        if name:
            return name
        print("צריך לכתוב לפחות אות אחת.")


def choose_preset(presets: Sequence[Dict[str, str]]) -> Optional[str]:
    print("\nמה נתרגל היום?")
    for idx, preset in enumerate(presets, start=1):
        print(f"  {idx}) {preset['displayName']}")
    print("  q) יציאה")
    while True:
        answer = input("בחירה: ").strip().lower()
        if answer in QUIT_COMMANDS:
            return None
        if answer.isdigit() and 1 <= int(answer) <= len(presets):
            return presets[int(answer) - 1]["filename"]
        print("בחירה לא מוכרת, נסה שוב.")


def show_item(session: DrillSession, item: PracticeItem) -> None:
    word, pos = parse_word_display(item.prompt)
    print("\n----------------------------------------")
    progress = session.progress()
    print(f"{progress['mastered']}/{progress['total']} מילים מוכרות | XP: {session.score} | רצף: {session.streak}")
    bank = session.sentence_bank(item)
    if bank:
        print("מחסן מילים: " + ", ".join(bank))
    print(color_text(word, COLOR_TITLE) + (f"  [{pos}]" if pos else ""))
    if item.choices:
        for idx, choice in enumerate(item.choices, start=1):
            print(f"  {idx}) {choice}")


def ask_item(session: DrillSession, item: PracticeItem) -> Optional[AnswerOutcome]:
    show_item(session, item)
    label = "מספר התשובה" if item.choices else ("המילה החסרה" if is_sentence_item(item) else "תרגום לעברית")
    while True:
        raw = input(f"  {label}: ").strip()
        lowered = raw.lower()
        if lowered in QUIT_COMMANDS:
            return None
        if lowered in HINT_COMMANDS:
            print(f"  רמז: {session.hint()}")
            continue
        if item.choices:
            if raw.isdigit() and 1 <= int(raw) <= len(item.choices):
                return session.submit_choice(int(raw) - 1, item.id)
            print("  יש לבחור מספר מהרשימה.")
            continue
        return session.submit(raw, item.id)


def print_outcome(outcome: AnswerOutcome) -> None:
    if outcome.quality == AnswerQuality.EXACT:
        print(color_text(f"✅ {outcome.message} (+{outcome.points})", COLOR_GOOD))
    elif outcome.quality == AnswerQuality.CLOSE:
        print(color_text(f"🟡 {outcome.message} (+{outcome.points})", COLOR_CLOSE))
        print(f"  התשובה המדויקת: {outcome.correct_answer}")
    else:
        print(color_text(f"❌ {outcome.message}", COLOR_BAD))
        print(f"  התשובה הנכונה: {outcome.correct_answer}")
        if outcome.revealed_sentence:
            print(f"  {outcome.revealed_sentence}")
        if outcome.revealed_translation:
            print(f"  {outcome.revealed_translation}")
    if outcome.explanation:
        print(f"  הסבר: {outcome.explanation}")


def session_loop(session: DrillSession) -> None:
    item = session.load()
    print("\nהוראות: הקלד '?' לרמז או 'q' ליציאה.")
    while item is not None:
        outcome = ask_item(session, item)
        if outcome is None:
            print("התרגול נשמר. להתראות!")
            return
        print_outcome(outcome)
        item = outcome.next_item
    print(color_text(f"\n🏆 ניצחון! סיימת את כל התרגול. XP: {session.score}, רצף שיא: {session.max_streak}", COLOR_GOOD))


def main() -> None:
    from logger import setup_logging

    setup_logging()
    random.seed()
    conn = connect_db()
    ensure_schema(conn)

    print("מאמן אוצר מילים באנגלית")
    username = prompt_username()
    get_or_create_user(conn, username)
    conn.close()
    store = SQLiteKeyValueStore()
    translator = None
    if config.GEMINI_API_KEY:
        from gemini_client import GeminiClient

        translator = GeminiClient()
    print(f"שלום {username}!")

    presets = list_presets()
    if not presets:
        print("לא נמצאו תרגולים. בדוק את תיקיית bands.")
        return

    try:
        while True:
            filename = choose_preset(presets)
            if filename is None:
                print("להתראות!")
                break
            session = DrillSession(
                load_preset(filename),
                user_key=user_key_for(username),
                preset_id=filename,
                store=store,
                translator=translator,
            )
            session_loop(session)
    except KeyboardInterrupt:
        print("\nהופסק. להתראות!")


if __name__ == "__main__":
    main()
