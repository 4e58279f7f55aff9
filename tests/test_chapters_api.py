"""API tests for chapter processing."""
from __future__ import annotations

import pytest

from xenolexia.config import settings
from xenolexia.schemas.chapter import ReplacementSettings


def chapter_request(**overrides) -> dict:
    payload = {
        "chapter": {
            "id": "ch1",
            "index": 0,
            "title": "The River",
            "content": "The house stood by the river.\n\nA cat watched the water all day.",
        },
        "config": {
            "source_language": "en",
            "target_language": "es",
            "proficiency_level": "intermediate",
            "density": 0.3,
            "min_word_spacing": 0,
        },
    }
    payload.update(overrides)
    return payload


@pytest.mark.asyncio
async def test_process_chapter_returns_markup_and_markers(async_client, spanish_word_list) -> None:
    response = await async_client.post("/api/v1/chapters/process", json=chapter_request())

    assert response.status_code == 200
    payload = response.json()
    assert payload["chapter_id"] == "ch1"
    assert payload["document"] is None
    assert [m["foreign_word"] for m in payload["markers"]] == ["casa", "gato"]
    assert payload["markers"][0]["pronunciation"] == "KAH-sah"
    assert payload["markers"][1]["context"] == "A gato watched the water all day"
    assert 'data-word-id="en_es_cat"' in payload["html"]
    assert payload["stats"]["replaced_words"] == 2


@pytest.mark.asyncio
async def test_process_chapter_with_style_returns_document(async_client, spanish_word_list) -> None:
    request = chapter_request(style={"theme": "sepia", "font_size": 21})

    response = await async_client.post("/api/v1/chapters/process", json=request)

    assert response.status_code == 200
    document = response.json()["document"]
    assert document.startswith("<!DOCTYPE html>")
    assert "--font-size: 21px;" in document


@pytest.mark.asyncio
async def test_invalid_density_is_rejected(async_client) -> None:
    request = chapter_request()
    request["config"]["density"] = 1.5

    response = await async_client.post("/api/v1/chapters/process", json=request)

    assert response.status_code == 422


def test_replacement_defaults_follow_settings(monkeypatch) -> None:
    monkeypatch.setattr(settings, "DEFAULT_DENSITY", 0.4)
    monkeypatch.setattr(settings, "DEFAULT_PROFICIENCY", "advanced")
    monkeypatch.setattr(settings, "MIN_WORD_SPACING", 0)

    config = ReplacementSettings(source_language="en", target_language="es")

    assert config.density == 0.4
    assert config.proficiency_level == "advanced"
    assert config.min_word_spacing == 0
