"""Tests for the verbal forecast generator."""

import asyncio
from datetime import datetime

import pytest

from conftest import FakeResponse, FakeSession
from weatherbot.errors import DataShapeError, TransportError
from weatherbot.summary import SummaryGenerator, build_prompt
from weatherbot.summary.generator import OPEN_METEO_ATTRIBUTION, OSM_ATTRIBUTION

GENERATED_AT = datetime(2024, 5, 1, 13, 12)


def _generator(*responses) -> SummaryGenerator:
    generator = SummaryGenerator(api_key="sk-test", model="test-model", base_url="https://llm.example/v1/")
    generator._session = FakeSession(*responses)
    return generator


def _completion(text):
    return {"choices": [{"message": {"role": "assistant", "content": text}}]}


class TestBuildPrompt:
    def test_prompt_embeds_time_place_and_payload(self, payload):
        prompt = build_prompt(payload, "Gohlis", GENERATED_AT)

        assert prompt.startswith("Zeit: 01.05.2024, 13:12 Uhr, Ort: Gohlis Wetterbericht: ")
        assert payload.to_json() in prompt
        assert "800 Zeichen" in prompt

    def test_prompt_is_deterministic(self, payload):
        assert build_prompt(payload, "Gohlis", GENERATED_AT) == build_prompt(payload, "Gohlis", GENERATED_AT)


class TestSummaryGenerator:
    def test_summarize_appends_attribution(self, payload):
        generator = _generator(FakeResponse(200, _completion("  Sonnig, später Regen.  ")))

        text = asyncio.run(generator.summarize(payload, "Gohlis", GENERATED_AT))

        assert text == f"Sonnig, später Regen.\n{OSM_ATTRIBUTION}\n{OPEN_METEO_ATTRIBUTION}"

    def test_request_shape(self, payload):
        generator = _generator(FakeResponse(200, _completion("ok")))

        asyncio.run(generator.summarize(payload, "Gohlis", GENERATED_AT))

        call = generator._session.calls[0]
        assert call["method"] == "POST"
        assert call["url"] == "https://llm.example/v1/chat/completions"
        assert call["headers"] == {"Authorization": "Bearer sk-test"}
        assert call["json"]["model"] == "test-model"
        assert call["json"]["messages"] == [
            {"role": "user", "content": build_prompt(payload, "Gohlis", GENERATED_AT)}
        ]

    def test_http_error_propagates(self, payload):
        generator = _generator(FakeResponse(429, text="rate limited"))

        with pytest.raises(TransportError) as exc_info:
            asyncio.run(generator.summarize(payload, "Gohlis", GENERATED_AT))

        assert exc_info.value.status == 429

    def test_timeout_is_transport_error(self, payload):
        generator = _generator(asyncio.TimeoutError())

        with pytest.raises(TransportError):
            asyncio.run(generator.summarize(payload, "Gohlis", GENERATED_AT))

    @pytest.mark.parametrize("body", [{}, {"choices": []}, _completion(""), _completion(None)])
    def test_missing_content_is_data_shape_error(self, payload, body):
        generator = _generator(FakeResponse(200, body))

        with pytest.raises(DataShapeError):
            asyncio.run(generator.summarize(payload, "Gohlis", GENERATED_AT))
