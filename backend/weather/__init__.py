"""
Weather package for SkyMind.

Provides weather snapshots, geocoding and the city lookup capability the
chat model calls through tool-calling, using the Open-Meteo API.
"""

from weather.data_models import (
    WeatherSnapshot,
    CurrentWeather,
    HourlyForecast,
    DailyForecast,
    GeocodingResult,
)
from weather.lookup import (
    describe_weather_code,
    search_location,
    geocode_city,
    reverse_geocode,
    fetch_weather_data,
    get_weather_summary,
)

__all__ = [
    'WeatherSnapshot',
    'CurrentWeather',
    'HourlyForecast',
    'DailyForecast',
    'GeocodingResult',
    'describe_weather_code',
    'search_location',
    'geocode_city',
    'reverse_geocode',
    'fetch_weather_data',
    'get_weather_summary',
]

__version__ = '1.0.0'
