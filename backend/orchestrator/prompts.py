"""
Prompt and tool-declaration builders shared by every provider.
"""
from typing import Dict, Any, List

from google.genai import types

from shared.protocol import Persona, LANGUAGE_NAMES
from weather.data_models import WeatherSnapshot
from weather.lookup import describe_weather_code

WEATHER_TOOL_NAME = "get_current_weather"

# Single tool the chat model may call; rendered per vendor below
WEATHER_TOOL = {
    "name": WEATHER_TOOL_NAME,
    "description": "Get real-time weather data for a specific city name.",
    "input_schema": {
        "type": "object",
        "properties": {
            "city": {
                "type": "string",
                "description": "The name of the city (e.g. London, Tokyo, Jakarta)"
            }
        },
        "required": ["city"]
    }
}

ANALYSIS_SYSTEM_INSTRUCTION = "You are a helpful weather assistant that outputs strictly valid JSON."

ANALYSIS_RESPONSE_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "summary": types.Schema(
            type=types.Type.STRING,
            description="A general weather summary in the requested persona voice."),
        "outfitRecommendation": types.Schema(
            type=types.Type.STRING,
            description="Specific clothing advice based on temp and conditions."),
        "activitySuggestion": types.Schema(
            type=types.Type.STRING,
            description="Best things to do given the weather."),
        "hazards": types.Schema(
            type=types.Type.STRING,
            description="Any warnings like high UV, storm, or high wind. Leave empty if none."),
    },
    required=["summary", "outfitRecommendation", "activitySuggestion"],
)

ASSISTANT_NAME = "SkyMind Assistant"
ASSISTANT_CREATORS = "Rofikul Huda (Engineering) and Rizky Agil (Design)"


def openai_tools() -> List[Dict[str, Any]]:
    return [{
        "type": "function",
        "function": {
            "name": WEATHER_TOOL["name"],
            "description": WEATHER_TOOL["description"],
            "parameters": WEATHER_TOOL["input_schema"],
        }
    }]


def gemini_tools() -> List[types.Tool]:
    return [types.Tool(function_declarations=[
        types.FunctionDeclaration(
            name=WEATHER_TOOL["name"],
            description=WEATHER_TOOL["description"],
            parameters=types.Schema(
                type=types.Type.OBJECT,
                properties={
                    "city": types.Schema(
                        type=types.Type.STRING,
                        description=WEATHER_TOOL["input_schema"]["properties"]["city"]["description"]),
                },
                required=["city"],
            ),
        )
    ])]


def build_analysis_prompt(weather: WeatherSnapshot, persona: Persona, language: str) -> str:
    """Deterministic persona + weather prompt for the analysis card."""
    current = weather.current
    condition = describe_weather_code(current.weather_code, language)
    return f"""
You are a {persona.value}.
Analyze the following weather data for {weather.location_name}:
- Current Temp: {current.temperature}°C
- Humidity: {current.humidity}%
- Wind: {current.wind_speed} km/h
- Condition: {condition} (Code {current.weather_code})
- Daily Max/Min: {weather.daily.today_max()}°C / {weather.daily.today_min()}°C

Instructions:
1. Provide a valid JSON response ONLY. Do not add markdown code blocks.
2. Keep it short, engaging, and strictly adhering to the persona.
3. IMPORTANT: The output content MUST be in {LANGUAGE_NAMES[language]}.

JSON Structure:
{{
  "summary": "string",
  "outfitRecommendation": "string",
  "activitySuggestion": "string",
  "hazards": "string (optional)"
}}
"""


def build_chat_system_context(weather: WeatherSnapshot, persona: Persona, language: str) -> str:
    current = weather.current
    condition = describe_weather_code(current.weather_code, language)
    return f"""
You are {ASSISTANT_NAME}, a helpful AI weather assistant with the persona: {persona.value}.
You were created by the SkyMind Team, founded by {ASSISTANT_CREATORS}.

CURRENT CONTEXT (User's current location):
- Location: {weather.location_name}
- Temperature: {current.temperature}°C
- Condition: {condition} (Code {current.weather_code})

Guidelines:
1. Answer questions about the current location using the context above.
2. IF the user asks about a DIFFERENT city (e.g. "What's the weather in Tokyo?"), USE THE PROVIDED TOOL '{WEATHER_TOOL_NAME}' to fetch data. Do not guess.
3. Respond in {LANGUAGE_NAMES[language]}.
4. Be conversational and helpful.
5. If asked about your identity or creators, mention you are {ASSISTANT_NAME} created by Rofikul Huda and Rizky Agil.
"""
