"""
Structured analysis orchestrator: success passthrough and total fallback.
"""
import os
import sys
import json
import asyncio
import pytest
from unittest.mock import MagicMock, patch

from google.genai import types

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from orchestrator.analysis import analyze_weather, fallback_analysis
from shared.config import Settings
from shared.protocol import AIConfig, Persona, Provider
from weather.data_models import WeatherSnapshot, CurrentWeather, DailyForecast


def jakarta_snapshot() -> WeatherSnapshot:
    return WeatherSnapshot(
        location_name="Jakarta",
        latitude=-6.2088,
        longitude=106.8456,
        current=CurrentWeather(temperature=30, humidity=70, wind_speed=10, wind_direction=90,
                               weather_code=0, is_day=1, time="2024-01-01T12:00"),
        daily=DailyForecast(time=("2024-01-01",), weather_code=(0,),
                            temperature_2m_max=(32,), temperature_2m_min=(25,)),
    )


def no_credentials() -> Settings:
    return Settings(default_credentials={}, llm_max_retries=0)


def completion(content):
    msg = MagicMock()
    msg.content = content
    msg.tool_calls = None
    return MagicMock(choices=[MagicMock(message=msg)])


VALID = {
    "summary": "Steamy and bright.",
    "outfitRecommendation": "Breathable linen.",
    "activitySuggestion": "Evening walk at Monas.",
}


@pytest.mark.parametrize("provider", list(Provider))
def test_missing_credential_falls_back_for_every_provider(provider):
    config = AIConfig(provider=provider, model_id="any-model", api_key="")
    with patch("orchestrator.providers.OpenAI") as mock_openai, \
            patch("orchestrator.providers.genai.Client") as mock_genai:
        result = asyncio.run(analyze_weather(jakarta_snapshot(), Persona.METEOROLOGIST, "en",
                                             config, settings=no_credentials()))

    assert result.summary
    assert provider.value in result.summary
    mock_openai.assert_not_called()
    mock_genai.assert_not_called()


def test_jakarta_gemini_without_process_credential():
    config = AIConfig(provider=Provider.GEMINI, model_id="gemini-2.5-flash", api_key="")

    result = asyncio.run(analyze_weather(jakarta_snapshot(), Persona.METEOROLOGIST, "en",
                                         config, settings=no_credentials()))

    assert "gemini" in result.summary
    assert "failed" in result.summary
    assert result.outfit_recommendation == "Wear standard clothing."
    assert result.activity_suggestion == "Check another weather app."
    assert result.hazards is None


def test_fallback_is_localized():
    result = fallback_analysis(Provider.MISTRAL, "id")
    assert result.summary == "Maaf, koneksi ke mistral gagal. Coba periksa API Key."
    assert result.outfit_recommendation == "Gunakan pakaian standar."
    assert result.activity_suggestion == "Cek aplikasi cuaca lain."


@pytest.mark.parametrize("payload", [
    VALID,
    dict(VALID, hazards="Heat index above 40°C."),
])
def test_valid_openai_compatible_response_is_returned_unchanged(payload):
    config = AIConfig(provider=Provider.OPENROUTER, model_id="openai/gpt-3.5-turbo", api_key="key")
    with patch("orchestrator.providers.OpenAI") as mock_openai:
        mock_openai.return_value.chat.completions.create.return_value = completion(json.dumps(payload))
        result = asyncio.run(analyze_weather(jakarta_snapshot(), Persona.COMEDIAN, "en",
                                             config, settings=no_credentials()))

    assert result.to_dict() == payload
    prompt = mock_openai.return_value.chat.completions.create.call_args.kwargs["messages"][1]["content"]
    assert "Sarcastic Comedian" in prompt
    assert "Jakarta" in prompt


def test_valid_gemini_response_with_process_credential():
    settings = Settings(default_credentials={Provider.GEMINI: "env-key"}, llm_max_retries=0)
    config = AIConfig(provider=Provider.GEMINI, model_id="gemini-2.5-flash")
    response = types.GenerateContentResponse(candidates=[types.Candidate(
        content=types.Content(role="model", parts=[types.Part(text=json.dumps(VALID))]))])
    with patch("orchestrator.providers.genai.Client") as mock_client:
        mock_client.return_value.models.generate_content.return_value = response
        result = asyncio.run(analyze_weather(jakarta_snapshot(), Persona.POET, "id", config, settings=settings))

    assert result.to_dict() == VALID
    assert mock_client.call_args.kwargs["api_key"] == "env-key"


def test_missing_content_falls_back():
    config = AIConfig(provider=Provider.GROQ, model_id="llama3-8b-8192", api_key="key")
    with patch("orchestrator.providers.OpenAI") as mock_openai:
        mock_openai.return_value.chat.completions.create.return_value = completion(None)
        result = asyncio.run(analyze_weather(jakarta_snapshot(), Persona.SCIENTIST, "id",
                                             config, settings=no_credentials()))

    assert result.summary == "Maaf, koneksi ke groq gagal. Coba periksa API Key."


def test_unexpected_exception_falls_back():
    config = AIConfig(provider=Provider.GROQ, model_id="llama3-8b-8192", api_key="key")
    with patch("orchestrator.providers.OpenAI") as mock_openai:
        mock_openai.return_value.chat.completions.create.side_effect = RuntimeError("boom")
        result = asyncio.run(analyze_weather(jakarta_snapshot(), Persona.SCIENTIST, "en",
                                             config, settings=no_credentials()))

    assert "groq" in result.summary
    assert result.activity_suggestion == "Check another weather app."


def test_unknown_persona_falls_back():
    config = AIConfig(provider=Provider.GROQ, model_id="llama3-8b-8192", api_key="key")
    with patch("orchestrator.providers.OpenAI") as mock_openai:
        result = asyncio.run(analyze_weather(jakarta_snapshot(), "Pirate", "en",
                                             config, settings=no_credentials()))
    mock_openai.assert_not_called()
    assert "groq" in result.summary


@pytest.mark.parametrize("provider_id", ["groq", "GEMINI"])
def test_plain_string_provider_falls_back(provider_id):
    config = AIConfig(provider=provider_id, model_id="m", api_key="")

    result = asyncio.run(analyze_weather(jakarta_snapshot(), Persona.METEOROLOGIST, "en",
                                         config, settings=no_credentials()))

    assert result.summary == f"Sorry, connection to {provider_id.lower()} failed. Please check API Key."


def test_unknown_provider_falls_back():
    config = AIConfig(provider="openai", model_id="gpt-4", api_key="key")
    with patch("orchestrator.providers.OpenAI") as mock_openai:
        result = asyncio.run(analyze_weather(jakarta_snapshot(), Persona.METEOROLOGIST, "id",
                                             config, settings=no_credentials()))

    mock_openai.assert_not_called()
    assert result.summary == "Maaf, koneksi ke openai gagal. Coba periksa API Key."
