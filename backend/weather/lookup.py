#!/usr/bin/env python3
"""
Weather lookup service backed by Open-Meteo and Nominatim.

Includes:
- Geocoding: search_location, geocode_city, reverse_geocode
- Forecasts: fetch_weather_data (full snapshot for the dashboard)
- Tool capability: get_weather_summary (what the chat model calls mid-conversation)
"""
import logging
from typing import Dict, Any, List, Optional

import requests

from shared.errors import WeatherLookupError
from weather.data_models import WeatherSnapshot, GeocodingResult

logger = logging.getLogger('WeatherLookup')

# Weather code mapping (WMO codes): code -> (English, Indonesian)
WEATHER_CODES = {
    0: ("Clear sky", "Cerah"),
    1: ("Mainly clear", "Cerah berawan"),
    2: ("Partly cloudy", "Berawan sebagian"),
    3: ("Overcast", "Mendung"),
    45: ("Fog", "Berkabut"),
    48: ("Depositing rime fog", "Kabut beku"),
    51: ("Light drizzle", "Gerimis ringan"),
    53: ("Moderate drizzle", "Gerimis sedang"),
    55: ("Dense drizzle", "Gerimis lebat"),
    61: ("Slight rain", "Hujan ringan"),
    63: ("Moderate rain", "Hujan sedang"),
    65: ("Heavy rain", "Hujan lebat"),
    71: ("Slight snow", "Salju ringan"),
    73: ("Moderate snow", "Salju sedang"),
    75: ("Heavy snow", "Salju lebat"),
    77: ("Snow grains", "Butiran salju"),
    80: ("Slight rain showers", "Hujan lokal ringan"),
    81: ("Moderate rain showers", "Hujan lokal sedang"),
    82: ("Violent rain showers", "Hujan lokal sangat lebat"),
    85: ("Slight snow showers", "Hujan salju ringan"),
    86: ("Heavy snow showers", "Hujan salju lebat"),
    95: ("Thunderstorm", "Badai petir"),
    96: ("Thunderstorm with hail", "Badai petir dengan hujan es"),
    99: ("Thunderstorm with heavy hail", "Badai petir dengan hujan es lebat"),
}

# Open-Meteo / Nominatim configuration
FORECAST_URL = "https://api.open-meteo.com/v1/forecast"
GEOCODING_API_URL = "https://geocoding-api.open-meteo.com/v1/search"
REVERSE_GEOCODING_URL = "https://nominatim.openstreetmap.org/reverse"
USER_AGENT = "SkyMindWeather/1.0"

CURRENT_PARAMS = "temperature_2m,relative_humidity_2m,weather_code,wind_speed_10m,wind_direction_10m,is_day"
HOURLY_PARAMS = "temperature_2m,weather_code"
DAILY_PARAMS = "weather_code,temperature_2m_max,temperature_2m_min"
FORECAST_DAYS = 3

DEFAULT_TIMEOUT = 10

# Cache for geocoding results to reduce API calls
_geocoding_cache: Dict[str, List[GeocodingResult]] = {}


def describe_weather_code(code: Optional[int], language: str = "en") -> str:
    labels = WEATHER_CODES.get(code)
    if labels is None:
        return "Tidak diketahui" if language == "id" else "Unknown"
    return labels[1] if language == "id" else labels[0]


def _make_api_request(url: str, params: Dict, timeout: float = DEFAULT_TIMEOUT) -> Dict:
    """Make HTTP request to a weather/geocoding API with error handling."""
    response = None
    try:
        headers = {
            "User-Agent": USER_AGENT
        }
        response = requests.get(url, params=params, headers=headers, timeout=timeout)
        response.raise_for_status()
        return response.json()
    except requests.exceptions.Timeout:
        raise WeatherLookupError(f"API request timed out after {timeout} seconds")
    except requests.exceptions.HTTPError as e:
        if response is not None and response.status_code == 429:
            raise WeatherLookupError("Rate limit exceeded. Please try again later.")
        raise WeatherLookupError(f"API error: {e}")
    except requests.exceptions.RequestException as e:
        raise WeatherLookupError(f"Network error: {e}")
    except ValueError as e:
        raise WeatherLookupError(f"Invalid JSON from {url}: {e}")


def search_location(query: str, language: str = "en", count: int = 5,
                    timeout: float = DEFAULT_TIMEOUT) -> List[GeocodingResult]:
    """
    Search for locations matching a free-text query.

    Returns an empty list for queries shorter than two characters or when
    the geocoder is unreachable.
    """
    query = (query or "").strip()
    if len(query) < 2:
        return []

    cache_key = f"{query},{language},{count}".lower()
    if cache_key in _geocoding_cache:
        logger.info(f"Using cached geocoding result for {cache_key}")
        return _geocoding_cache[cache_key]

    params = {"name": query, "count": count, "language": language, "format": "json"}
    try:
        data = _make_api_request(GEOCODING_API_URL, params, timeout=timeout)
    except WeatherLookupError as e:
        logger.error(f"Geocoding error for '{query}': {e}")
        return []

    results = [GeocodingResult.from_api_response(r) for r in data.get("results") or []]
    _geocoding_cache[cache_key] = results
    return results


def geocode_city(city: str, timeout: float = DEFAULT_TIMEOUT) -> GeocodingResult:
    """Resolve a city name to its best geocoding match."""
    if not city or not city.strip():
        raise WeatherLookupError("City name is required")

    cache_key = f"{city.strip()},en,1".lower()
    if cache_key in _geocoding_cache and _geocoding_cache[cache_key]:
        return _geocoding_cache[cache_key][0]

    params = {"name": city.strip(), "count": 1, "language": "en", "format": "json"}
    data = _make_api_request(GEOCODING_API_URL, params, timeout=timeout)
    results = data.get("results") or []
    if not results:
        raise WeatherLookupError(f"City '{city}' not found")

    location = GeocodingResult.from_api_response(results[0])
    _geocoding_cache[cache_key] = [location]
    return location


def reverse_geocode(latitude: float, longitude: float, timeout: float = DEFAULT_TIMEOUT) -> str:
    """Name the place at the given coordinates (used for map clicks)."""
    params = {"lat": latitude, "lon": longitude, "format": "json", "zoom": 10}
    try:
        data = _make_api_request(REVERSE_GEOCODING_URL, params, timeout=timeout)
    except WeatherLookupError as e:
        logger.error(f"Reverse geocoding error: {e}")
        return f"{latitude:.2f}, {longitude:.2f}"

    address = data.get("address") or {}
    for key in ("city", "town", "village", "county"):
        if address.get(key):
            return address[key]
    return "Unknown Location"


def _build_forecast_params(latitude: float, longitude: float) -> Dict[str, Any]:
    return {
        "latitude": latitude,
        "longitude": longitude,
        "current": CURRENT_PARAMS,
        "hourly": HOURLY_PARAMS,
        "daily": DAILY_PARAMS,
        "timezone": "auto",
        "forecast_days": FORECAST_DAYS,
    }


def fetch_weather_data(latitude: float, longitude: float, name: str,
                       timeout: float = DEFAULT_TIMEOUT) -> WeatherSnapshot:
    """
    Fetch current, hourly and daily weather for a coordinate pair.

    Raises:
        WeatherLookupError: if the forecast API fails or returns no current block
    """
    logger.info(f"Fetching weather for {name} ({latitude}, {longitude})")
    data = _make_api_request(FORECAST_URL, _build_forecast_params(latitude, longitude), timeout=timeout)
    if "current" not in data:
        raise WeatherLookupError("Failed to fetch weather data")
    return WeatherSnapshot.from_api_response(data, latitude, longitude, name)


def get_weather_summary(city: str, timeout: float = DEFAULT_TIMEOUT) -> Dict[str, Any]:
    """
    Compact weather report for a city, shaped for an LLM tool result.

    Never raises: unknown cities and network failures come back as
    {"error": reason} so the model can react to them.
    """
    try:
        location = geocode_city(city, timeout=timeout)
        snapshot = fetch_weather_data(location.latitude, location.longitude, location.name, timeout=timeout)
    except WeatherLookupError as e:
        logger.warning(f"Weather summary for '{city}' failed: {e}")
        return {"error": str(e)}

    current = snapshot.current
    return {
        "location": location.name,
        "country": location.country,
        "coordinates": {"latitude": location.latitude, "longitude": location.longitude},
        "current": {
            "temperature": current.temperature,
            "humidity": current.humidity,
            "windSpeed": current.wind_speed,
            "conditionCode": current.weather_code,
            "condition": describe_weather_code(current.weather_code),
            "isDay": current.is_day,
            "time": current.time,
        },
        "dailyForecast": {
            "todayMax": snapshot.daily.today_max(),
            "todayMin": snapshot.daily.today_min(),
        },
    }
