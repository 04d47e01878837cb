"""
Core message and configuration types for the AI layer.

Defines:
- Enumerations: Persona, Provider, supported languages
- Configuration: AIConfig
- Results: AnalysisResult
- Conversation: ChatMessage, ToolCallRequest, ToolCallResult
"""
from dataclasses import dataclass, asdict, field
from enum import Enum
from typing import Optional, Dict, Any
import json

from shared.errors import ConfigurationError, MalformedJSON


class Persona(str, Enum):
    METEOROLOGIST = "Professional Meteorologist"
    COMEDIAN = "Sarcastic Comedian"
    POET = "Nature Poet"
    SCIENTIST = "Data Scientist"
    MOM = "Caring Mom"

    @classmethod
    def parse(cls, value: Any) -> 'Persona':
        """Accept a Persona, its label or its member name."""
        if isinstance(value, Persona):
            return value
        for persona in cls:
            if value == persona.value or (isinstance(value, str) and value.upper() == persona.name):
                return persona
        raise ConfigurationError(f"Unknown persona: {value!r}")


class Provider(str, Enum):
    GEMINI = "gemini"
    GROQ = "groq"
    MISTRAL = "mistral"
    OPENROUTER = "openrouter"

    @classmethod
    def parse(cls, value: Any) -> 'Provider':
        if isinstance(value, Provider):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ConfigurationError(f"Unknown provider: {value!r}")

    @staticmethod
    def name_of(value: Any) -> str:
        """Display name for a provider id, valid or not. Never raises."""
        return str(getattr(value, "value", value))


LANGUAGES = ("en", "id")
LANGUAGE_NAMES = {
    "en": "English",
    "id": "Indonesian (Bahasa Indonesia)",
}


def parse_language(value: Any) -> str:
    if value in LANGUAGES:
        return value
    raise ConfigurationError(f"Unsupported language: {value!r}")


# --- Configuration ---
@dataclass(frozen=True)
class AIConfig:
    provider: Provider
    model_id: str
    api_key: Optional[str] = None

    def __post_init__(self):
        # Known ids become Provider members; unknown ones are rejected by adapter_for
        if not isinstance(self.provider, Provider) and str(self.provider).lower() in {p.value for p in Provider}:
            object.__setattr__(self, "provider", Provider(str(self.provider).lower()))

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> 'AIConfig':
        return AIConfig(
            provider=Provider.parse(data.get("provider")),
            model_id=data.get("modelId") or data.get("model_id") or "",
            api_key=data.get("apiKey", data.get("api_key")),
        )

    def to_dict(self) -> Dict[str, Any]:
        # The key itself is never echoed back
        return {
            "provider": Provider.name_of(self.provider),
            "modelId": self.model_id,
            "hasApiKey": bool(self.api_key and self.api_key.strip()),
        }


# --- Analysis ---
@dataclass
class AnalysisResult:
    summary: str
    outfit_recommendation: str
    activity_suggestion: str
    hazards: Optional[str] = None

    REQUIRED_KEYS = ("summary", "outfitRecommendation", "activitySuggestion")

    @staticmethod
    def from_dict(data: Any) -> 'AnalysisResult':
        """Validate a parsed model reply against the analysis shape."""
        if not isinstance(data, dict):
            raise MalformedJSON(f"Expected a JSON object, got {type(data).__name__}")
        for key in AnalysisResult.REQUIRED_KEYS:
            if not isinstance(data.get(key), str):
                raise MalformedJSON(f"Missing or non-string field '{key}'")
        hazards = data.get("hazards")
        if hazards is not None and not isinstance(hazards, str):
            raise MalformedJSON("Field 'hazards' must be a string")
        return AnalysisResult(
            summary=data["summary"],
            outfit_recommendation=data["outfitRecommendation"],
            activity_suggestion=data["activitySuggestion"],
            hazards=hazards,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "summary": self.summary,
            "outfitRecommendation": self.outfit_recommendation,
            "activitySuggestion": self.activity_suggestion,
        }
        if self.hazards is not None:
            data["hazards"] = self.hazards
        return data


# --- Conversation ---
CHAT_ROLES = ("user", "assistant", "system")


@dataclass
class ChatMessage:
    role: str
    content: str

    def __post_init__(self):
        if self.role not in CHAT_ROLES:
            raise ValueError(f"Invalid chat role: {self.role}")

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> 'ChatMessage':
        return ChatMessage(role=data.get("role", ""), content=data.get("content") or "")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ToolCallRequest:
    name: str
    arguments: Dict[str, Any] = field(default_factory=dict)
    id: Optional[str] = None


@dataclass
class ToolCallResult:
    name: str
    content: Dict[str, Any]
    call_id: Optional[str] = None

    def to_json(self) -> str:
        return json.dumps(self.content)
