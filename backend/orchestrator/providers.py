"""
Provider adapters: one code path per vendor family.

Two variants sit behind the same operations:
1. NativeSdk: Google Gemini through the google-genai SDK (schema-constrained
   generation, function-call parts).
2. OpenAiCompatible: Groq, Mistral and OpenRouter through the OpenAI SDK
   pointed at the vendor's base URL.

Structured generation is a single call. Chat is driven by the orchestrator
through three primitives over an explicit ChatState:
start_chat -> send_turn -> submit_tool_results -> send_turn ...
"""
import asyncio
import json
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import httpx
from httpx import Timeout
from openai import OpenAI, APIStatusError, APIConnectionError, RateLimitError, InternalServerError
from google import genai
from google.genai import types, errors as genai_errors

from orchestrator.prompts import (
    ANALYSIS_RESPONSE_SCHEMA, ANALYSIS_SYSTEM_INSTRUCTION, gemini_tools, openai_tools
)
from shared.config import Settings
from shared.errors import EmptyResponse, HTTPError, MalformedJSON, MissingCredential
from shared.protocol import AnalysisResult, ChatMessage, Provider, ToolCallRequest, ToolCallResult

logger = logging.getLogger('Providers')

TEMPERATURE = 0.7

OPENAI_COMPATIBLE_ENDPOINTS = {
    Provider.GROQ: "https://api.groq.com/openai/v1",
    Provider.MISTRAL: "https://api.mistral.ai/v1",
    Provider.OPENROUTER: "https://openrouter.ai/api/v1",
}

AI_PROVIDERS = [
    {"id": Provider.GEMINI.value, "name": "Google Gemini"},
    {"id": Provider.GROQ.value, "name": "Groq"},
    {"id": Provider.MISTRAL.value, "name": "Mistral AI"},
    {"id": Provider.OPENROUTER.value, "name": "OpenRouter"},
]

PROVIDER_MODELS = {
    Provider.GEMINI: [
        {"id": "gemini-2.5-flash", "name": "Gemini 2.5 Flash"},
        {"id": "gemini-3-pro-preview", "name": "Gemini 3 Pro"},
    ],
    Provider.GROQ: [
        {"id": "llama3-8b-8192", "name": "Llama 3 8B"},
        {"id": "llama3-70b-8192", "name": "Llama 3 70B"},
        {"id": "mixtral-8x7b-32768", "name": "Mixtral 8x7b"},
    ],
    Provider.MISTRAL: [
        {"id": "mistral-tiny", "name": "Mistral Tiny"},
        {"id": "mistral-small", "name": "Mistral Small"},
        {"id": "mistral-medium", "name": "Mistral Medium"},
    ],
    Provider.OPENROUTER: [
        {"id": "openai/gpt-3.5-turbo", "name": "GPT-3.5 Turbo (via OR)"},
        {"id": "anthropic/claude-3-haiku", "name": "Claude 3 Haiku (via OR)"},
        {"id": "google/gemini-flash-1.5", "name": "Gemini Flash 1.5 (via OR)"},
    ],
}


def default_model(provider: Provider) -> str:
    return PROVIDER_MODELS[provider][0]["id"]


# =========================================================================
# ADAPTER VARIANTS
# =========================================================================

@dataclass(frozen=True)
class NativeSdk:
    provider: Provider = Provider.GEMINI


@dataclass(frozen=True)
class OpenAiCompatible:
    provider: Provider
    base_url: str
    extra_headers: Tuple[Tuple[str, str], ...] = ()


Adapter = Union[NativeSdk, OpenAiCompatible]


def adapter_for(provider: Provider, settings: Optional[Settings] = None) -> Adapter:
    """Select the adapter variant for a provider id."""
    provider = Provider.parse(provider)
    if provider == Provider.GEMINI:
        return NativeSdk()

    settings = settings or Settings()
    headers: Tuple[Tuple[str, str], ...] = ()
    if provider == Provider.OPENROUTER:
        headers = (("HTTP-Referer", settings.openrouter_referer),
                   ("X-Title", settings.openrouter_title))
    return OpenAiCompatible(provider=provider,
                            base_url=OPENAI_COMPATIBLE_ENDPOINTS[provider],
                            extra_headers=headers)


def resolve_credential(explicit: Optional[str], default: Optional[str], provider: Provider) -> str:
    """Explicit key if non-blank, else the process-wide default, else MissingCredential."""
    if explicit and explicit.strip():
        return explicit.strip()
    if default and default.strip():
        return default.strip()
    raise MissingCredential(Provider.parse(provider).value)


def create_client(adapter: Adapter, api_key: Optional[str], settings: Settings) -> Any:
    """Build the vendor SDK client for an adapter, resolving its credential first."""
    key = resolve_credential(api_key, settings.default_credential(adapter.provider), adapter.provider)

    if isinstance(adapter, NativeSdk):
        return genai.Client(
            api_key=key,
            http_options=types.HttpOptions(timeout=int(settings.llm_timeout * 1000)),
        )

    return OpenAI(
        api_key=key,
        base_url=adapter.base_url,
        timeout=Timeout(settings.llm_timeout, connect=10.0),
        # Retries are handled by _call_with_retries
        max_retries=0,
        default_headers=dict(adapter.extra_headers) or None,
    )


# =========================================================================
# TRANSPORT HELPERS
# =========================================================================

def _is_transient(error: Exception) -> bool:
    if isinstance(error, (APIConnectionError, RateLimitError, InternalServerError)):
        return True
    if isinstance(error, genai_errors.ServerError):
        return True
    if isinstance(error, genai_errors.APIError) and error.code == 429:
        return True
    return isinstance(error, httpx.TransportError)


def _translate_error(error: Exception, provider: Provider) -> Exception:
    if isinstance(error, APIStatusError):
        try:
            body = error.response.text
        except Exception:
            body = str(error)
        return HTTPError(error.status_code, body, provider=provider.value)
    if isinstance(error, genai_errors.APIError):
        return HTTPError(error.code, error.message or str(error), provider=provider.value)
    return error


async def _call_with_retries(fn: Callable, provider: Provider, settings: Settings, **kwargs) -> Any:
    """Run a blocking SDK call in a worker thread, retrying transient failures.

    Authentication and other client errors fail fast.
    """
    attempts = settings.llm_max_retries + 1
    for attempt in range(1, attempts + 1):
        try:
            return await asyncio.to_thread(fn, **kwargs)
        except Exception as e:
            if _is_transient(e) and attempt < attempts:
                backoff = min(2 ** (attempt - 1), 8)
                logger.warning(f"{provider.value} attempt {attempt}/{attempts} failed: {e}. "
                               f"Retrying in {backoff}s...")
                await asyncio.sleep(backoff)
                continue
            translated = _translate_error(e, provider)
            if translated is e:
                raise
            raise translated from e


def _parse_json_object(text: str) -> AnalysisResult:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        logger.error(f"JSON parse error: {e}")
        raise MalformedJSON(raw=text) from e
    return AnalysisResult.from_dict(data)


# =========================================================================
# STRUCTURED GENERATION
# =========================================================================

async def generate_structured(adapter: Adapter, prompt: str, model_id: str,
                              api_key: Optional[str], settings: Settings) -> AnalysisResult:
    """One-shot JSON analysis through the adapter's schema/JSON mode."""
    client = create_client(adapter, api_key, settings)
    model = model_id or default_model(adapter.provider)
    logger.info(f"Structured generation via {adapter.provider.value} model={model}")

    if isinstance(adapter, NativeSdk):
        response = await _call_with_retries(
            client.models.generate_content, adapter.provider, settings,
            model=model,
            contents=prompt,
            config=types.GenerateContentConfig(
                response_mime_type="application/json",
                response_schema=ANALYSIS_RESPONSE_SCHEMA,
            ),
        )
        text = response.text
        if not text:
            raise EmptyResponse(adapter.provider.value)
        return _parse_json_object(text)

    response = await _call_with_retries(
        client.chat.completions.create, adapter.provider, settings,
        model=model,
        messages=[
            {"role": "system", "content": ANALYSIS_SYSTEM_INSTRUCTION},
            {"role": "user", "content": prompt},
        ],
        temperature=TEMPERATURE,
        response_format={"type": "json_object"},
    )
    message = _first_message(response)
    content = getattr(message, "content", None) if message is not None else None
    if not content:
        raise EmptyResponse(adapter.provider.value)
    return _parse_json_object(content)


def _first_message(response: Any) -> Any:
    choices = getattr(response, "choices", None) or []
    if not choices:
        return None
    return choices[0].message


# =========================================================================
# CHAT PRIMITIVES
# =========================================================================

@dataclass
class ChatState:
    """Conversation owned by the orchestrator; adapters return updated copies."""
    system_context: str
    transcript: List[Any] = field(default_factory=list)
    pending_tool_calls: List[ToolCallRequest] = field(default_factory=list)
    text: str = ""
    rounds: int = 0


def start_chat(adapter: Adapter, history: List[ChatMessage], system_context: str) -> ChatState:
    """Translate dashboard history into the adapter's transcript shape."""
    if isinstance(adapter, NativeSdk):
        # System context travels as system_instruction; system turns are dropped
        transcript = [
            types.Content(role="user" if m.role == "user" else "model",
                          parts=[types.Part(text=m.content)])
            for m in history if m.role != "system"
        ]
    else:
        transcript = [{"role": "system", "content": system_context}]
        transcript.extend(m.to_dict() for m in history)
    return ChatState(system_context=system_context, transcript=transcript)


async def send_turn(adapter: Adapter, client: Any, state: ChatState, model_id: str,
                    settings: Settings) -> ChatState:
    """Send the transcript and record either the reply text or pending tool calls."""
    model = model_id or default_model(adapter.provider)

    if isinstance(adapter, NativeSdk):
        response = await _call_with_retries(
            client.models.generate_content, adapter.provider, settings,
            model=model,
            contents=list(state.transcript),
            config=types.GenerateContentConfig(
                system_instruction=state.system_context,
                tools=gemini_tools(),
                automatic_function_calling=types.AutomaticFunctionCallingConfig(disable=True),
            ),
        )
        calls = response.function_calls or []
        text = response.text or ""
        turn = None
        if response.candidates and response.candidates[0].content:
            turn = response.candidates[0].content
        elif calls:
            turn = types.Content(role="model", parts=[types.Part(function_call=c) for c in calls])
        pending = [ToolCallRequest(name=c.name, arguments=dict(c.args or {}), id=c.id) for c in calls]
        transcript = list(state.transcript) + ([turn] if turn is not None else [])
        return replace(state, transcript=transcript, pending_tool_calls=pending, text=text)

    response = await _call_with_retries(
        client.chat.completions.create, adapter.provider, settings,
        model=model,
        messages=list(state.transcript),
        temperature=TEMPERATURE,
        tools=openai_tools(),
        tool_choice="auto",
    )
    message = _first_message(response)
    if message is None:
        logger.warning(f"{adapter.provider.value} returned no choices")
        return replace(state, pending_tool_calls=[], text="")

    text = message.content or ""
    tool_calls = message.tool_calls or []
    pending = []
    assistant_turn: Dict[str, Any] = {"role": "assistant", "content": message.content}
    if tool_calls:
        assistant_turn["tool_calls"] = [
            {"id": tc.id, "type": "function",
             "function": {"name": tc.function.name, "arguments": tc.function.arguments}}
            for tc in tool_calls
        ]
        for tc in tool_calls:
            try:
                arguments = json.loads(tc.function.arguments or "{}")
            except json.JSONDecodeError:
                logger.warning(f"Malformed tool arguments from {adapter.provider.value}: {tc.function.arguments!r}")
                arguments = {}
            if not isinstance(arguments, dict):
                arguments = {}
            pending.append(ToolCallRequest(name=tc.function.name, arguments=arguments, id=tc.id))

    transcript = list(state.transcript) + [assistant_turn]
    return replace(state, transcript=transcript, pending_tool_calls=pending, text=text)


def submit_tool_results(adapter: Adapter, state: ChatState, results: List[ToolCallResult]) -> ChatState:
    """Append tool results in the vendor's shape and count the round-trip."""
    transcript = list(state.transcript)
    if isinstance(adapter, NativeSdk):
        transcript.append(types.Content(role="user", parts=[
            types.Part(function_response=types.FunctionResponse(
                id=r.call_id, name=r.name, response={"result": r.content}))
            for r in results
        ]))
    else:
        for r in results:
            transcript.append({
                "role": "tool",
                "tool_call_id": r.call_id,
                "name": r.name,
                "content": r.to_json(),
            })
    return replace(state, transcript=transcript, pending_tool_calls=[], rounds=state.rounds + 1)
