#!/usr/bin/env python3
"""
FastAPI service for the English vocabulary drill.

This API reuses the same SQLite database and drill logic as the console
program in drill.py. Clients create users, start practice sessions from a
preset or their own word list, and submit answers so that progress and XP stay
synchronized with the console.
"""
from __future__ import annotations

import logging
import secrets
import sqlite3
import threading
import time
from dataclasses import dataclass, field
from typing import Dict, Generator, List, Literal, Optional

from fastapi import Depends, FastAPI, File, HTTPException, Response, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from google.genai import errors as genai_errors
from pydantic import BaseModel, Field

import config
import drill
from drill import DrillSession, InvalidSubmissionError, PresetNotFoundError
from gemini_client import ExtractionError, GeminiClient
from logger import setup_logging
from matching import STANDARD_POLICY, STRICT_POLICY, AnswerQuality, classify
from scheduler import PracticeItem

logger = logging.getLogger(__name__)

Gender = Literal["male", "female", "other"]
Quality = Literal["exact", "close", "wrong"]

app = FastAPI(
    title="Vocabulary Drill API",
    description="API לתרגול אוצר מילים באנגלית עם תשובות בעברית.",
    version="0.1.0",
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


def _init_database() -> None:
    conn = drill.connect_db()
    drill.ensure_schema(conn)
    conn.close()


setup_logging()
_init_database()


@dataclass
class SessionEntry:
    """A live session and the lock that serializes requests against it."""

    session: DrillSession
    lock: threading.Lock = field(default_factory=threading.Lock)
    last_seen: float = field(default_factory=time.monotonic)


_sessions: Dict[str, SessionEntry] = {}
_sessions_lock = threading.Lock()
_store = drill.SQLiteKeyValueStore()
_gemini: Optional[GeminiClient] = None


def get_db() -> Generator[sqlite3.Connection, None, None]:
    conn = drill.connect_db()
    try:
        yield conn
    finally:
        conn.close()


def get_translator() -> Optional[GeminiClient]:
    """Shared Gemini client, or ``None`` when no API key is configured."""
    global _gemini
    if _gemini is None and config.GEMINI_API_KEY:
        try:
            _gemini = GeminiClient()
        except ValueError as exc:
            logger.warning("Gemini client unavailable: %s", exc)
    return _gemini


def require_gemini(client: Optional[GeminiClient] = Depends(get_translator)) -> GeminiClient:
    if client is None:
        raise HTTPException(status_code=503, detail="שירות התרגום אינו זמין כרגע.")
    return client


def get_session(session_id: str) -> SessionEntry:
    with _sessions_lock:
        entry = _sessions.get(session_id)
        if entry is not None:
            entry.last_seen = time.monotonic()
    if entry is None:
        raise HTTPException(status_code=404, detail="התרגול לא נמצא.")
    return entry


def expire_idle_sessions(now: Optional[float] = None) -> int:
    now = time.monotonic() if now is None else now
    with _sessions_lock:
        stale = [sid for sid, entry in _sessions.items() if now - entry.last_seen > config.SESSION_IDLE_SECONDS]
        for sid in stale:
            del _sessions[sid]
    if stale:
        logger.info("Expired %d idle sessions", len(stale))
    return len(stale)


def fetch_user_or_404(conn: sqlite3.Connection, user_id: int) -> sqlite3.Row:
    row = drill.fetch_user(conn, user_id)
    if not row:
        raise HTTPException(status_code=404, detail="המשתמש לא קיים.")
    return row


class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    gender: Optional[Gender] = None
    avatar: Optional[str] = Field(default=None, max_length=16)


class UserOut(BaseModel):
    id: int
    name: str
    gender: Optional[Gender] = None
    avatar: Optional[str] = None
    created_at: str


class PresetOut(BaseModel):
    display_name: str
    filename: str


class ItemIn(BaseModel):
    id: Optional[str] = None
    english: str = Field(..., min_length=1)
    hebrew: str = Field(..., min_length=1)
    options: Optional[List[str]] = None
    correct_index: Optional[int] = None
    explanation: Optional[str] = None


class ItemOut(BaseModel):
    id: str
    prompt: str
    display: str
    part_of_speech: Optional[str] = None
    is_sentence: bool
    strict: bool
    mastery_count: int
    choices: Optional[List[str]] = None
    word_bank: List[str] = Field(default_factory=list)
    answer: Optional[str] = None


class ProgressOut(BaseModel):
    mastered: int
    total: int
    percent: int


class SessionCreate(BaseModel):
    user_id: Optional[int] = None
    user_name: Optional[str] = Field(default=None, max_length=120)
    preset: Optional[str] = None
    items: Optional[List[ItemIn]] = None


class SessionOut(BaseModel):
    session_id: str
    user_key: str
    preset: Optional[str] = None
    score: int
    streak: int
    max_streak: int
    turn: int
    complete: bool
    progress: ProgressOut
    current: Optional[ItemOut] = None


class AnswerRequest(BaseModel):
    item_id: Optional[str] = None
    answer: Optional[str] = None
    choice_index: Optional[int] = None


class AnswerResponse(BaseModel):
    quality: Quality
    correct_answer: str
    mastery_count: int
    points: int
    message: str
    explanation: Optional[str] = None
    revealed_sentence: Optional[str] = None
    revealed_translation: Optional[str] = None
    session: SessionOut


class HintOut(BaseModel):
    hint: Optional[str] = None


class ClassifyRequest(BaseModel):
    user_answer: str
    canonical_answer: str
    strict: bool = False


class ClassifyResponse(BaseModel):
    quality: Quality


class ExtractTextRequest(BaseModel):
    content: str = Field(..., min_length=1)


class ExtractedItem(BaseModel):
    id: str
    english: str
    hebrew: str


class TranslateRequest(BaseModel):
    text: str = Field(..., min_length=1)


class TranslateResponse(BaseModel):
    translation: str


def _user_out(row: sqlite3.Row) -> UserOut:
    return UserOut(
        id=row["id"],
        name=row["name"],
        gender=row["gender"],
        avatar=row["avatar"],
        created_at=row["created_at"],
    )


def _item_out(item: PracticeItem, session: Optional[DrillSession] = None, include_answer: bool = False) -> ItemOut:
    display, pos = drill.parse_word_display(item.prompt)
    return ItemOut(
        id=item.id,
        prompt=item.prompt,
        display=display,
        part_of_speech=pos,
        is_sentence=drill.is_sentence_item(item),
        strict=drill.is_strict_item(item),
        mastery_count=item.mastery_count,
        choices=item.choices,
        word_bank=session.sentence_bank(item) if session else [],
        answer=item.answer if include_answer else None,
    )


def _session_out(session_id: str, session: DrillSession) -> SessionOut:
    current = session.current
    return SessionOut(
        session_id=session_id,
        user_key=session.user_key,
        preset=session.preset_id,
        score=session.score,
        streak=session.streak,
        max_streak=session.max_streak,
        turn=session.turn_count,
        complete=current is None,
        progress=ProgressOut(**session.progress()),
        current=_item_out(current, session) if current else None,
    )


@app.get("/")
def root() -> Dict[str, str]:
    return {"message": "שירות התרגול מוכן.", "db": str(config.DB_PATH)}


@app.get("/users", response_model=List[UserOut])
def list_users(conn: sqlite3.Connection = Depends(get_db)) -> List[UserOut]:
    rows = conn.execute("SELECT id, name, gender, avatar, created_at FROM users ORDER BY id").fetchall()
    return [_user_out(row) for row in rows]


@app.post("/users", response_model=UserOut, status_code=201)
def create_user(payload: UserCreate, conn: sqlite3.Connection = Depends(get_db)) -> UserOut:
    user_id = drill.get_or_create_user(conn, payload.name.strip(), payload.gender, payload.avatar)
    return _user_out(fetch_user_or_404(conn, user_id))


@app.get("/users/{user_id}", response_model=UserOut)
def get_user(user_id: int, conn: sqlite3.Connection = Depends(get_db)) -> UserOut:
    return _user_out(fetch_user_or_404(conn, user_id))


@app.get("/presets", response_model=List[PresetOut])
def list_presets() -> List[PresetOut]:
    return [PresetOut(display_name=p["displayName"], filename=p["filename"]) for p in drill.list_presets()]


@app.get("/presets/{filename}", response_model=List[ItemOut])
def preset_items(filename: str) -> List[ItemOut]:
    try:
        items = drill.load_preset(filename)
    except PresetNotFoundError:
        raise HTTPException(status_code=404, detail="התרגול המבוקש לא נמצא.")
    return [_item_out(item, include_answer=True) for item in items]


@app.post("/sessions", response_model=SessionOut, status_code=201)
def start_session(
    payload: SessionCreate,
    conn: sqlite3.Connection = Depends(get_db),
    translator: Optional[GeminiClient] = Depends(get_translator),
) -> SessionOut:
    gender = None
    if payload.user_id is not None:
        row = fetch_user_or_404(conn, payload.user_id)
        user_key = drill.user_key_for(row["name"])
        gender = row["gender"]
    else:
        user_key = drill.user_key_for(payload.user_name)

    if payload.preset:
        try:
            items = drill.load_preset(payload.preset)
        except PresetNotFoundError:
            raise HTTPException(status_code=404, detail="התרגול המבוקש לא נמצא.")
        preset_id: Optional[str] = payload.preset
    elif payload.items:
        records = [
            {
                "id": item.id,
                "english": item.english,
                "hebrew": item.hebrew,
                "options": item.options,
                "correctIndex": item.correct_index,
                "explanation": item.explanation,
            }
            for item in payload.items
        ]
        items = drill.items_from_records(records, "custom")
        preset_id = None
    else:
        raise HTTPException(status_code=400, detail="יש לבחור תרגול או לשלוח רשימת מילים.")

    if not items:
        raise HTTPException(status_code=400, detail="אין מילים לתרגול.")

    session = DrillSession(
        items,
        user_key=user_key,
        preset_id=preset_id,
        store=_store,
        translator=translator,
        gender=gender,
    )
    session.load()
    expire_idle_sessions()
    session_id = secrets.token_urlsafe(16)
    with _sessions_lock:
        _sessions[session_id] = SessionEntry(session)
    logger.info("Started session %s for %s (%d items)", session_id, user_key, len(items))
    return _session_out(session_id, session)


@app.get("/sessions/{session_id}", response_model=SessionOut)
def session_state(session_id: str) -> SessionOut:
    entry = get_session(session_id)
    with entry.lock:
        return _session_out(session_id, entry.session)


@app.post("/sessions/{session_id}/answers", response_model=AnswerResponse)
def submit_answer(session_id: str, payload: AnswerRequest) -> AnswerResponse:
    entry = get_session(session_id)
    session = entry.session
    try:
        with entry.lock:
            if payload.choice_index is not None:
                outcome = session.submit_choice(payload.choice_index, payload.item_id)
            elif payload.answer is not None:
                outcome = session.submit(payload.answer, payload.item_id)
            else:
                raise InvalidSubmissionError("חסרה תשובה.")
            state = _session_out(session_id, session)
    except InvalidSubmissionError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return AnswerResponse(
        quality=outcome.quality.value,
        correct_answer=outcome.correct_answer,
        mastery_count=outcome.mastery_count,
        points=outcome.points,
        message=outcome.message,
        explanation=outcome.explanation,
        revealed_sentence=outcome.revealed_sentence,
        revealed_translation=outcome.revealed_translation,
        session=state,
    )


@app.get("/sessions/{session_id}/hint", response_model=HintOut)
def session_hint(session_id: str) -> HintOut:
    entry = get_session(session_id)
    with entry.lock:
        return HintOut(hint=entry.session.hint())


@app.post("/sessions/{session_id}/reset", response_model=SessionOut)
def reset_session(session_id: str) -> SessionOut:
    entry = get_session(session_id)
    with entry.lock:
        entry.session.reset_progress()
        return _session_out(session_id, entry.session)


@app.delete("/sessions/{session_id}", status_code=204)
def delete_session(session_id: str) -> Response:
    with _sessions_lock:
        removed = _sessions.pop(session_id, None)
    if removed is None:
        raise HTTPException(status_code=404, detail="התרגול לא נמצא.")
    return Response(status_code=204)


@app.post("/classify", response_model=ClassifyResponse)
def classify_answer(payload: ClassifyRequest) -> ClassifyResponse:
    policy = STRICT_POLICY if payload.strict else STANDARD_POLICY
    quality: AnswerQuality = classify(payload.user_answer, payload.canonical_answer, policy=policy)
    return ClassifyResponse(quality=quality.value)


def _extracted(pairs: List[Dict[str, str]], source: str) -> List[ExtractedItem]:
    if not pairs:
        raise HTTPException(status_code=502, detail="לא נמצאו מילים בתוכן.")
    return [
        ExtractedItem(id=item.id, english=item.prompt, hebrew=item.answer)
        for item in drill.items_from_pairs(pairs, source)
    ]


@app.post("/extract/text", response_model=List[ExtractedItem])
def extract_text(payload: ExtractTextRequest, client: GeminiClient = Depends(require_gemini)) -> List[ExtractedItem]:
    try:
        pairs = client.extract_words_from_text(payload.content)
    except (ExtractionError, genai_errors.APIError) as exc:
        logger.error("Text extraction failed: %s", exc)
        raise HTTPException(status_code=502, detail="חילוץ המילים נכשל.")
    return _extracted(pairs, "word")


@app.post("/extract/image", response_model=List[ExtractedItem])
async def extract_image(
    file: UploadFile = File(...),
    client: GeminiClient = Depends(require_gemini),
) -> List[ExtractedItem]:
    if not (file.content_type or "").startswith("image/"):
        raise HTTPException(status_code=400, detail="יש להעלות קובץ תמונה.")
    raw = await file.read()
    if not raw:
        raise HTTPException(status_code=400, detail="הקובץ ריק.")
    try:
        pairs = client.extract_words_from_image(raw, file.content_type)
    except (ExtractionError, genai_errors.APIError) as exc:
        logger.error("Image extraction failed: %s", exc)
        raise HTTPException(status_code=502, detail="חילוץ המילים מהתמונה נכשל.")
    return _extracted(pairs, "img-word")


@app.post("/translate", response_model=TranslateResponse)
def translate(payload: TranslateRequest, client: GeminiClient = Depends(require_gemini)) -> TranslateResponse:
    try:
        translation = client.translate(payload.text)
    except genai_errors.APIError as exc:
        logger.error("Translation failed: %s", exc)
        raise HTTPException(status_code=502, detail=config.TRANSLATION_FALLBACK)
    if not translation:
        raise HTTPException(status_code=502, detail=config.TRANSLATION_FALLBACK)
    return TranslateResponse(translation=translation)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="127.0.0.1", port=8000)
