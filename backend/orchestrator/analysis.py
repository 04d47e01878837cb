"""
Structured analysis: the AI insight card.

analyze_weather() always returns a displayable AnalysisResult: provider,
credential and parsing failures are logged and replaced by localized
fallback advice.
"""
import logging
from typing import Optional

from orchestrator.prompts import build_analysis_prompt
from orchestrator.providers import adapter_for, generate_structured
from shared.config import Settings, get_settings
from shared.protocol import AIConfig, AnalysisResult, Persona, Provider, parse_language
from weather.data_models import WeatherSnapshot

logger = logging.getLogger('AnalysisOrchestrator')


def fallback_analysis(provider: Provider, language: str) -> AnalysisResult:
    provider_name = Provider.name_of(provider)
    if language == "id":
        return AnalysisResult(
            summary=f"Maaf, koneksi ke {provider_name} gagal. Coba periksa API Key.",
            outfit_recommendation="Gunakan pakaian standar.",
            activity_suggestion="Cek aplikasi cuaca lain.",
        )
    return AnalysisResult(
        summary=f"Sorry, connection to {provider_name} failed. Please check API Key.",
        outfit_recommendation="Wear standard clothing.",
        activity_suggestion="Check another weather app.",
    )


async def analyze_weather(weather: WeatherSnapshot, persona: Persona, language: str,
                          config: AIConfig, settings: Optional[Settings] = None) -> AnalysisResult:
    """Persona-voiced analysis of a weather snapshot from the configured provider."""
    settings = settings or get_settings()
    provider_name = Provider.name_of(config.provider)
    try:
        persona = Persona.parse(persona)
        language = parse_language(language)
        prompt = build_analysis_prompt(weather, persona, language)
        adapter = adapter_for(config.provider, settings)
        return await generate_structured(adapter, prompt, config.model_id, config.api_key, settings)
    except Exception as e:
        logger.error(f"AI Service Error ({provider_name}): {e}", exc_info=True)
        return fallback_analysis(config.provider, language if language == "id" else "en")
