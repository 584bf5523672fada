"""
Google Gemini client for translation and vocabulary extraction
"""
import json
import logging
from typing import Dict, List, Optional

from google import genai
from google.genai import types

import config

logger = logging.getLogger(__name__)

WORD_PAIR_SCHEMA = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "english": {"type": "STRING"},
            "hebrew": {"type": "STRING"},
        },
        "required": ["english", "hebrew"],
    },
}

TEXT_EXTRACTION_PROMPT = """Extract a list of English vocabulary words and their Hebrew translations from the following text.

RULES:
1. If the English word has a part-of-speech tag (like "run (v)" or "blue (adj)"), keep it in the 'english' field.
2. If there are multiple Hebrew translations, separate them with " / ".
3. Ignore conversational text, return only the vocabulary.

Text to analyze:
{content}"""

IMAGE_EXTRACTION_PROMPT = """Analyze this image and extract English-Hebrew vocabulary pairs.

RULES:
1. Keep part-of-speech tags (e.g. 'word (n)', 'word [v]') in the 'english' output.
2. If a word has multiple meanings in the image, separate Hebrew translations with ' / '.
3. Return a raw JSON list."""

TRANSLATION_PROMPT = """Translate the following English text to Hebrew.
Keep any placeholder such as ___BLANK___ unchanged and in the matching position.
Reply with the translation only.

{content}"""


class ExtractionError(RuntimeError):
    """The model answered but the answer could not be used."""


class GeminiClient:
    """Wrapper for Google Gemini API calls used by the drill"""

    def __init__(self, api_key: Optional[str] = None, model_name: Optional[str] = None, client=None):
        """
        Initialize Gemini client

        Raises:
            ValueError: If no API key is given and GEMINI_API_KEY is not set
        """
        if client is None:
            api_key = api_key or config.GEMINI_API_KEY
            if not api_key:
                raise ValueError("GEMINI_API_KEY environment variable is required")
            client = genai.Client(api_key=api_key)

        self.client = client
        self.model_name = model_name or config.GEMINI_MODEL
        logger.info("Gemini client initialized with model %s", self.model_name)

    def translate(self, text: str) -> str:
        if not text or not text.strip():
            return ""
        response = self.client.models.generate_content(
            model=self.model_name,
            contents=TRANSLATION_PROMPT.format(content=text),
            config=types.GenerateContentConfig(temperature=0.2),
        )
        return (response.text or "").strip()

    def extract_words_from_text(self, content: str) -> List[Dict[str, str]]:
        if not content or not content.strip():
            raise ValueError("content is required")
        response = self.client.models.generate_content(
            model=self.model_name,
            contents=TEXT_EXTRACTION_PROMPT.format(content=content),
            config=self._json_config(),
        )
        return self._parse_pairs(response.text)

    def extract_words_from_image(self, data: bytes, mime_type: str = "image/jpeg") -> List[Dict[str, str]]:
        if not data:
            raise ValueError("image data is required")
        response = self.client.models.generate_content(
            model=self.model_name,
            contents=[
                types.Part.from_bytes(data=data, mime_type=mime_type),
                IMAGE_EXTRACTION_PROMPT,
            ],
            config=self._json_config(),
        )
        return self._parse_pairs(response.text)

    @staticmethod
    def _json_config() -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=WORD_PAIR_SCHEMA,
        )

    @staticmethod
    def _parse_pairs(raw: Optional[str]) -> List[Dict[str, str]]:
        try:
            data = json.loads(raw or "[]")
        except json.JSONDecodeError as exc:
            logger.error("Gemini returned invalid JSON: %s", exc)
            raise ExtractionError("invalid JSON from model") from exc
        if not isinstance(data, list):
            raise ExtractionError("expected a list of word pairs")

        pairs: List[Dict[str, str]] = []
        for entry in data:
            if not isinstance(entry, dict):
                continue
            english = str(entry.get("english") or "").strip()
            hebrew = str(entry.get("hebrew") or "").strip()
            if english and hebrew:
                pairs.append({"english": english, "hebrew": hebrew})
        logger.info("Extracted %d word pairs", len(pairs))
        return pairs
