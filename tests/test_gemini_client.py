import json

import pytest

import config
from gemini_client import ExtractionError, GeminiClient


class TestGeminiClient:
    def test_requires_api_key(self, monkeypatch):
        monkeypatch.setattr(config, "GEMINI_API_KEY", None)
        with pytest.raises(ValueError):
            GeminiClient()

    def test_default_model(self, fake_genai):
        client = GeminiClient(client=fake_genai())
        assert client.model_name == config.GEMINI_MODEL

    def test_translate(self, fake_genai):
        fake = fake_genai("  אנחנו מדברים  ")
        client = GeminiClient(client=fake, model_name="test-model")
        assert client.translate("We talk") == "אנחנו מדברים"
        call = fake.models.calls[0]
        assert call["model"] == "test-model"
        assert "We talk" in call["contents"]

    def test_translate_blank_text_skips_the_call(self, fake_genai):
        fake = fake_genai()
        assert GeminiClient(client=fake).translate("   ") == ""
        assert fake.models.calls == []

    def test_extract_from_text_filters_bad_entries(self, fake_genai):
        payload = json.dumps(
            [
                {"english": "run (v)", "hebrew": "לרוץ"},
                {"english": "", "hebrew": "ריק"},
                "junk",
                {"english": "stage", "hebrew": " במה "},
            ]
        )
        fake = fake_genai(payload)
        pairs = GeminiClient(client=fake).extract_words_from_text("run (v) - לרוץ, stage - במה")
        assert pairs == [{"english": "run (v)", "hebrew": "לרוץ"}, {"english": "stage", "hebrew": "במה"}]
        assert fake.models.calls[0]["config"].response_mime_type == "application/json"

    @pytest.mark.parametrize("raw", ["not json", '{"english": "a"}'])
    def test_extract_rejects_malformed_output(self, fake_genai, raw):
        with pytest.raises(ExtractionError):
            GeminiClient(client=fake_genai(raw)).extract_words_from_text("some words")

    def test_extract_requires_content(self, fake_genai):
        with pytest.raises(ValueError):
            GeminiClient(client=fake_genai()).extract_words_from_text("")

    def test_extract_from_image(self, fake_genai):
        fake = fake_genai('[{"english": "gloves", "hebrew": "כפפות"}]')
        pairs = GeminiClient(client=fake).extract_words_from_image(b"\x89PNG", "image/png")
        assert pairs == [{"english": "gloves", "hebrew": "כפפות"}]
        image_part = fake.models.calls[0]["contents"][0]
        assert image_part.inline_data.mime_type == "image/png"

    def test_extract_from_empty_image(self, fake_genai):
        with pytest.raises(ValueError):
            GeminiClient(client=fake_genai()).extract_words_from_image(b"")
