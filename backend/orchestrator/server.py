"""
HTTP API consumed by the SkyMind dashboard.

Weather and geocoding endpoints wrap the lookup service; /api/analyze and
/api/chat wrap the AI orchestrators, which never fail; only malformed
requests (unknown persona, provider or language) are rejected.
"""
import logging
from typing import Any, Dict, List, Optional, Union

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from orchestrator.analysis import analyze_weather
from orchestrator.chat import chat_with_ai
from orchestrator.favorites import FavoritesStore
from orchestrator.providers import AI_PROVIDERS, PROVIDER_MODELS
from shared.config import Settings, get_settings
from shared.errors import ConfigurationError, WeatherLookupError
from shared.protocol import AIConfig, ChatMessage, LANGUAGES, Persona, parse_language
from weather.data_models import WeatherSnapshot
from weather.lookup import fetch_weather_data, reverse_geocode, search_location

logger = logging.getLogger('SkyMindAPI')

app = FastAPI(title="SkyMind Weather API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

_store: Optional[FavoritesStore] = None


def get_app_settings() -> Settings:
    return get_settings()


def get_store(settings: Settings = Depends(get_app_settings)) -> FavoritesStore:
    global _store
    if _store is None:
        _store = FavoritesStore(data_dir=settings.data_dir)
    return _store


class AnalyzeRequest(BaseModel):
    weather: Dict[str, Any]
    persona: str = Persona.METEOROLOGIST.value
    language: str = "en"
    config: Dict[str, Any]


class ChatRequest(BaseModel):
    messages: List[Dict[str, Any]]
    weather: Dict[str, Any]
    persona: str = Persona.METEOROLOGIST.value
    language: str = "en"
    config: Dict[str, Any]


class FavoriteRequest(BaseModel):
    id: Union[int, str]
    name: str
    latitude: float
    longitude: float
    country: Optional[str] = None
    admin1: Optional[str] = None


def _parse_common(weather: Dict[str, Any], persona: str, language: str, config: Dict[str, Any]):
    try:
        return (WeatherSnapshot.from_dict(weather), Persona.parse(persona),
                parse_language(language), AIConfig.from_dict(config))
    except (ConfigurationError, ValueError, TypeError) as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.get("/health")
async def health_check():
    return {"status": "ok", "service": "SkyMind Weather API"}


@app.get("/api/providers")
async def list_providers():
    return {
        "providers": AI_PROVIDERS,
        "models": {p.value: models for p, models in PROVIDER_MODELS.items()},
        "personas": [p.value for p in Persona],
        "languages": list(LANGUAGES),
    }


@app.get("/api/locations/search")
def locations_search(q: str = Query(""), lang: str = Query("en"),
                     settings: Settings = Depends(get_app_settings)):
    results = search_location(q, language=lang, timeout=settings.weather_timeout)
    return {"results": [r.to_dict() for r in results]}


@app.get("/api/locations/reverse")
def locations_reverse(lat: float, lon: float, settings: Settings = Depends(get_app_settings)):
    return {"name": reverse_geocode(lat, lon, timeout=settings.weather_timeout)}


@app.get("/api/weather")
def weather(lat: float, lon: float, name: str = Query("Unknown Location"),
            settings: Settings = Depends(get_app_settings)):
    try:
        snapshot = fetch_weather_data(lat, lon, name, timeout=settings.weather_timeout)
    except WeatherLookupError as e:
        logger.error(f"Weather fetch failed for {name}: {e}")
        raise HTTPException(status_code=502, detail="Unable to fetch weather data.")
    return snapshot.to_dict()


@app.post("/api/analyze")
async def analyze(request: AnalyzeRequest, settings: Settings = Depends(get_app_settings)):
    snapshot, persona, language, config = _parse_common(
        request.weather, request.persona, request.language, request.config)
    result = await analyze_weather(snapshot, persona, language, config, settings=settings)
    return result.to_dict()


@app.post("/api/chat")
async def chat(request: ChatRequest, settings: Settings = Depends(get_app_settings)):
    snapshot, persona, language, config = _parse_common(
        request.weather, request.persona, request.language, request.config)
    try:
        history = [ChatMessage.from_dict(m) for m in request.messages]
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    content = await chat_with_ai(history, snapshot, persona, language, config, settings=settings)
    return {"role": "assistant", "content": content}


@app.get("/api/favorites")
def favorites_list(store: FavoritesStore = Depends(get_store)):
    return {"favorites": store.list_favorites()}


@app.post("/api/favorites")
def favorites_add(location: FavoriteRequest, store: FavoritesStore = Depends(get_store)):
    return store.add_favorite(location.model_dump())


@app.delete("/api/favorites/{location_id}")
def favorites_remove(location_id: str, store: FavoritesStore = Depends(get_store)):
    if not store.remove_favorite(location_id):
        raise HTTPException(status_code=404, detail="Favorite not found")
    return {"removed": location_id}
