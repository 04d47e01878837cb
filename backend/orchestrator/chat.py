"""
Tool-calling chat: the SkyMind Assistant.

Per invocation:
1. Build the system context from persona + current weather snapshot
2. Send the conversation to the configured provider
3. If the model asks for get_current_weather, run every requested lookup,
   feed the results back and go to 2
4. Stop on a plain-text answer, or after max_tool_rounds round-trips

Lookup failures are folded into the conversation as {"error": ...} results.
Every other failure becomes a localized assistant message.
"""
import asyncio
import functools
import logging
from typing import Callable, Dict, Any, List, Optional

from orchestrator.prompts import WEATHER_TOOL_NAME, build_chat_system_context
from orchestrator.providers import (
    Adapter, adapter_for, create_client, send_turn, start_chat, submit_tool_results
)
from shared.config import Settings, get_settings
from shared.errors import LoopExceeded, ToolExecutionFailure
from shared.protocol import (
    AIConfig, ChatMessage, Persona, Provider, ToolCallRequest, ToolCallResult, parse_language
)
from weather.data_models import WeatherSnapshot
from weather.lookup import get_weather_summary

logger = logging.getLogger('ChatOrchestrator')

Lookup = Callable[[str], Dict[str, Any]]


def chat_error_message(error: Exception, language: str) -> str:
    if language == "id":
        return f"Maaf, terjadi error: {error}. Coba periksa API Key di pengaturan."
    return f"I apologize, an error occurred: {error}. Please check your API Key in settings."


async def execute_tool_call(call: ToolCallRequest, lookup: Lookup) -> ToolCallResult:
    """Run one tool call. Never raises; failures become {"error": reason}."""
    try:
        if call.name != WEATHER_TOOL_NAME:
            raise ToolExecutionFailure(f"Unknown tool '{call.name}'", tool_name=call.name)
        city = call.arguments.get("city")
        if not isinstance(city, str) or not city.strip():
            raise ToolExecutionFailure("Missing required argument 'city'")

        logger.info(f"Tool Call: {WEATHER_TOOL_NAME}({city})")
        try:
            content = await asyncio.to_thread(lookup, city)
        except Exception as e:
            raise ToolExecutionFailure(str(e)) from e
        if not isinstance(content, dict):
            raise ToolExecutionFailure("Lookup returned no data")
        if "error" in content:
            logger.info(f"Lookup for '{city}' reported: {content['error']}")
    except ToolExecutionFailure as e:
        logger.warning(str(e))
        content = {"error": e.reason}

    return ToolCallResult(name=call.name, content=content, call_id=call.id)


async def run_tool_loop(adapter: Adapter, client: Any, history: List[ChatMessage],
                        system_context: str, model_id: str, settings: Settings,
                        lookup: Lookup) -> str:
    """
    Drive send_turn / submit_tool_results until the model answers in text.

    Every tool call in a batch is executed, in order, before resubmitting.

    Raises:
        LoopExceeded: the model still wanted tools after max_tool_rounds
            round-trips; carries the text available at that point.
    """
    state = start_chat(adapter, history, system_context)
    state = await send_turn(adapter, client, state, model_id, settings)

    while state.pending_tool_calls:
        if state.rounds >= settings.max_tool_rounds:
            raise LoopExceeded(state.rounds, partial_text=state.text)

        logger.info(f"--- Tool round {state.rounds + 1}/{settings.max_tool_rounds}: "
                    f"{len(state.pending_tool_calls)} call(s) ---")
        results = [await execute_tool_call(call, lookup) for call in state.pending_tool_calls]
        state = submit_tool_results(adapter, state, results)
        state = await send_turn(adapter, client, state, model_id, settings)

    return state.text


async def chat_with_ai(history: List[ChatMessage], weather: WeatherSnapshot, persona: Persona,
                       language: str, config: AIConfig, settings: Optional[Settings] = None,
                       lookup: Optional[Lookup] = None) -> str:
    """Answer the latest user turn; always returns displayable text."""
    settings = settings or get_settings()
    lookup = lookup or functools.partial(get_weather_summary, timeout=settings.weather_timeout)
    provider_name = Provider.name_of(config.provider)
    try:
        persona = Persona.parse(persona)
        language = parse_language(language)
        if not history:
            raise ValueError("Conversation history is empty")

        system_context = build_chat_system_context(weather, persona, language)
        adapter = adapter_for(config.provider, settings)
        client = create_client(adapter, config.api_key, settings)
        return await run_tool_loop(adapter, client, history, system_context,
                                   config.model_id, settings, lookup)
    except LoopExceeded as e:
        logger.warning(f"{e}; returning partial text ({len(e.partial_text)} chars)")
        return e.partial_text
    except Exception as e:
        logger.error(f"AI Chat Error ({provider_name}): {e}", exc_info=True)
        return chat_error_message(e, language if language == "id" else "en")
