"""
Runtime configuration for the vocabulary drill.

Every value can be overridden from the environment so the console drill, the
API service and the tests can point at different databases and pacing rules.
"""
from __future__ import annotations

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent

DB_PATH = Path(os.environ.get("VOCAB_DRILL_DB", str(BASE_DIR / "drill.db")))
BANDS_DIR = Path(os.environ.get("VOCAB_DRILL_BANDS", str(BASE_DIR / "bands")))

REQUIRED_WINS = int(os.environ.get("VOCAB_DRILL_REQUIRED_WINS", "3"))
SPACING_BUFFER = int(os.environ.get("VOCAB_DRILL_SPACING_BUFFER", "2"))
POINTS_PER_ANSWER = 10

# API sessions untouched for this long are dropped when a new one starts.
SESSION_IDLE_SECONDS = int(os.environ.get("VOCAB_DRILL_SESSION_IDLE_SECONDS", str(6 * 60 * 60)))

LOG_FILE = os.environ.get("VOCAB_DRILL_LOG_FILE", "drill.log")
LOG_LEVEL = os.environ.get("VOCAB_DRILL_LOG_LEVEL", "INFO").upper()

GEMINI_API_KEY = os.environ.get("GEMINI_API_KEY")
GEMINI_MODEL = os.environ.get("GEMINI_MODEL", "gemini-2.5-flash")

USE_COLORS_DEFAULT = os.environ.get("NO_COLOR") is None

TRANSLATION_FALLBACK = "לא ניתן לתרגם כרגע"
