#!/usr/bin/env python3
"""
Tests for the weather lookup service.

All Open-Meteo / Nominatim traffic is mocked at _make_api_request.
"""
import pytest
import sys
import os
from unittest.mock import Mock, patch

import requests

# Add backend to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from shared.errors import WeatherLookupError
from weather import lookup
from weather.lookup import (
    describe_weather_code,
    fetch_weather_data,
    geocode_city,
    get_weather_summary,
    reverse_geocode,
    search_location,
    _make_api_request,
)


@pytest.fixture(autouse=True)
def clear_geocoding_cache():
    lookup._geocoding_cache.clear()
    yield
    lookup._geocoding_cache.clear()


class TestWeatherLookup:
    """Test suite for the lookup service."""

    @pytest.fixture
    def mock_geocode_response(self):
        """Mock response for geocoding API."""
        return {
            "results": [
                {
                    "id": 1850147,
                    "name": "Tokyo",
                    "latitude": 35.6895,
                    "longitude": 139.69171,
                    "country": "Japan",
                    "admin1": "Tokyo",
                }
            ]
        }

    @pytest.fixture
    def mock_forecast_response(self):
        """Mock response for forecast API."""
        return {
            "latitude": 35.69,
            "longitude": 139.69,
            "current": {
                "time": "2024-01-01T12:00",
                "temperature_2m": 18.2,
                "relative_humidity_2m": 55,
                "weather_code": 1,
                "wind_speed_10m": 8.5,
                "wind_direction_10m": 45,
                "is_day": 1,
            },
            "hourly": {
                "time": ["2024-01-01T12:00", "2024-01-01T13:00"],
                "temperature_2m": [18.2, 18.9],
                "weather_code": [1, 2],
            },
            "daily": {
                "time": ["2024-01-01", "2024-01-02", "2024-01-03"],
                "weather_code": [1, 3, 61],
                "temperature_2m_max": [20.1, 19.0, 15.5],
                "temperature_2m_min": [11.3, 10.2, 9.8],
            },
        }

    def test_weather_summary_success(self, mock_geocode_response, mock_forecast_response):
        with patch('weather.lookup._make_api_request') as mock_api:
            mock_api.side_effect = [mock_geocode_response, mock_forecast_response]

            summary = get_weather_summary("Tokyo")

            assert summary["location"] == "Tokyo"
            assert summary["country"] == "Japan"
            assert summary["coordinates"] == {"latitude": 35.6895, "longitude": 139.69171}
            assert summary["current"]["temperature"] == 18.2
            assert summary["current"]["conditionCode"] == 1
            assert summary["current"]["condition"] == "Mainly clear"
            assert summary["dailyForecast"] == {"todayMax": 20.1, "todayMin": 11.3}

    def test_weather_summary_unknown_city(self):
        with patch('weather.lookup._make_api_request') as mock_api:
            mock_api.return_value = {"results": []}

            summary = get_weather_summary("Atlantis")

            assert summary == {"error": "City 'Atlantis' not found"}

    def test_weather_summary_network_failure(self):
        with patch('weather.lookup._make_api_request') as mock_api:
            mock_api.side_effect = WeatherLookupError("Network error: unreachable")

            summary = get_weather_summary("Tokyo")

            assert "error" in summary
            assert "Network error" in summary["error"]

    def test_geocode_is_cached(self, mock_geocode_response):
        with patch('weather.lookup._make_api_request') as mock_api:
            mock_api.return_value = mock_geocode_response

            first = geocode_city("Tokyo")
            second = geocode_city("tokyo")

            assert first == second
            assert mock_api.call_count == 1

    def test_fetch_weather_data_builds_snapshot(self, mock_forecast_response):
        with patch('weather.lookup._make_api_request') as mock_api:
            mock_api.return_value = mock_forecast_response

            snapshot = fetch_weather_data(35.69, 139.69, "Tokyo")

            params = mock_api.call_args[0][1]
            assert params["forecast_days"] == 3
            assert params["timezone"] == "auto"
            assert snapshot.location_name == "Tokyo"
            assert snapshot.current.humidity == 55
            assert snapshot.daily.temperature_2m_max == (20.1, 19.0, 15.5)
            assert snapshot.to_dict()["current"]["windSpeed"] == 8.5

    def test_fetch_weather_data_without_current_block(self):
        with patch('weather.lookup._make_api_request') as mock_api:
            mock_api.return_value = {"latitude": 0}

            with pytest.raises(WeatherLookupError):
                fetch_weather_data(0, 0, "Nowhere")

    def test_search_location_short_query(self):
        with patch('weather.lookup._make_api_request') as mock_api:
            assert search_location("T") == []
            mock_api.assert_not_called()

    def test_search_location_results(self, mock_geocode_response):
        with patch('weather.lookup._make_api_request') as mock_api:
            mock_api.return_value = mock_geocode_response

            results = search_location("Tokyo", language="id")

            assert mock_api.call_args[0][1]["language"] == "id"
            assert results[0].to_dict() == {
                "id": 1850147, "name": "Tokyo", "latitude": 35.6895,
                "longitude": 139.69171, "country": "Japan", "admin1": "Tokyo",
            }

    def test_search_location_failure_returns_empty(self):
        with patch('weather.lookup._make_api_request') as mock_api:
            mock_api.side_effect = WeatherLookupError("down")
            assert search_location("Tokyo") == []

    def test_reverse_geocode_prefers_city(self):
        with patch('weather.lookup._make_api_request') as mock_api:
            mock_api.return_value = {"address": {"town": "Bogor", "county": "Jawa Barat"}}
            assert reverse_geocode(-6.6, 106.8) == "Bogor"

    def test_reverse_geocode_unknown_and_failure(self):
        with patch('weather.lookup._make_api_request') as mock_api:
            mock_api.return_value = {"address": {}}
            assert reverse_geocode(1.0, 2.0) == "Unknown Location"

            mock_api.side_effect = WeatherLookupError("down")
            assert reverse_geocode(-6.2088, 106.8456) == "-6.21, 106.85"

    def test_describe_weather_code(self):
        assert describe_weather_code(95) == "Thunderstorm"
        assert describe_weather_code(95, "id") == "Badai petir"
        assert describe_weather_code(1234) == "Unknown"


class TestMakeApiRequest:

    def test_timeout(self):
        with patch('weather.lookup.requests.get', side_effect=requests.exceptions.Timeout()):
            with pytest.raises(WeatherLookupError, match="timed out"):
                _make_api_request("https://example.test", {}, timeout=3)

    def test_rate_limited(self):
        response = Mock(status_code=429)
        response.raise_for_status.side_effect = requests.exceptions.HTTPError("429")
        with patch('weather.lookup.requests.get', return_value=response):
            with pytest.raises(WeatherLookupError, match="Rate limit"):
                _make_api_request("https://example.test", {})

    def test_sends_user_agent(self):
        response = Mock(status_code=200)
        response.json.return_value = {"ok": True}
        with patch('weather.lookup.requests.get', return_value=response) as mock_get:
            assert _make_api_request("https://example.test", {"a": 1}) == {"ok": True}
            assert mock_get.call_args.kwargs["headers"]["User-Agent"] == "SkyMindWeather/1.0"
