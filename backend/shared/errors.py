"""
Error taxonomy for the AI orchestration layer and the weather lookup service.

Orchestrator entry points catch every AIServiceError and convert it into a
localized, displayable result; nothing here crosses the HTTP boundary raw.
"""
from typing import Optional


class AIServiceError(Exception):
    """Base class for provider and orchestration failures."""


class ConfigurationError(AIServiceError):
    """Unknown persona, provider or language."""


class MissingCredential(AIServiceError):
    def __init__(self, provider: str):
        self.provider = provider
        super().__init__(f"API Key required for {provider}")


class HTTPError(AIServiceError):
    def __init__(self, status: int, body: str, provider: Optional[str] = None):
        self.status = status
        self.body = body
        self.provider = provider
        prefix = f"{provider} Error" if provider else "HTTP Error"
        super().__init__(f"{prefix} ({status}): {body}")


class EmptyResponse(AIServiceError):
    def __init__(self, provider: Optional[str] = None):
        self.provider = provider
        super().__init__(f"Empty response from {provider or 'provider'}")


class MalformedJSON(AIServiceError):
    def __init__(self, message: str = "Failed to parse provider response as JSON", raw: Optional[str] = None):
        self.raw = raw
        super().__init__(message)


class ToolExecutionFailure(AIServiceError):
    """A tool call could not be completed. Folded into the conversation, never surfaced."""

    def __init__(self, reason: str, tool_name: str = "get_current_weather"):
        self.reason = reason
        self.tool_name = tool_name
        super().__init__(f"{tool_name} failed: {reason}")


class LoopExceeded(AIServiceError):
    """The model kept requesting tools past the configured round bound."""

    def __init__(self, rounds: int, partial_text: str = ""):
        self.rounds = rounds
        self.partial_text = partial_text
        super().__init__(f"Tool loop stopped after {rounds} round(s)")


class WeatherLookupError(Exception):
    """Forecast or geocoding API failure."""
