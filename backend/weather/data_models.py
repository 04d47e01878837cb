#!/usr/bin/env python3
"""
Data models for weather snapshots and geocoding results.
"""
from typing import Optional, Dict, Any, Tuple
from dataclasses import dataclass, field


def _section(data: Dict[str, Any], key: str, required: bool = False) -> Dict[str, Any]:
    """Nested block of a dashboard payload; an optional missing or null block is empty."""
    value = data.get(key)
    if value is None:
        if required:
            raise ValueError(f"Weather field '{key}' is required")
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"Weather field '{key}' must be an object")
    return value


@dataclass(frozen=True)
class CurrentWeather:
    temperature: float
    humidity: float
    wind_speed: float
    wind_direction: float
    weather_code: int
    is_day: int
    time: str

    @classmethod
    def from_api_response(cls, current: Dict[str, Any]) -> 'CurrentWeather':
        """Create instance from an Open-Meteo `current` block."""
        return cls(
            temperature=current.get('temperature_2m'),
            humidity=current.get('relative_humidity_2m'),
            wind_speed=current.get('wind_speed_10m'),
            wind_direction=current.get('wind_direction_10m'),
            weather_code=current.get('weather_code', 0),
            is_day=current.get('is_day', 1),
            time=current.get('time', ''),
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CurrentWeather':
        return cls(
            temperature=data.get('temperature'),
            humidity=data.get('humidity'),
            wind_speed=data.get('windSpeed'),
            wind_direction=data.get('windDirection'),
            weather_code=data.get('weatherCode', 0),
            is_day=data.get('isDay', 1),
            time=data.get('time', ''),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'temperature': self.temperature,
            'humidity': self.humidity,
            'windSpeed': self.wind_speed,
            'windDirection': self.wind_direction,
            'weatherCode': self.weather_code,
            'isDay': self.is_day,
            'time': self.time,
        }


@dataclass(frozen=True)
class HourlyForecast:
    time: Tuple[str, ...] = ()
    temperature_2m: Tuple[float, ...] = ()
    weather_code: Tuple[int, ...] = ()

    @classmethod
    def from_api_response(cls, hourly: Dict[str, Any]) -> 'HourlyForecast':
        return cls(
            time=tuple(hourly.get('time', [])),
            temperature_2m=tuple(hourly.get('temperature_2m', [])),
            weather_code=tuple(hourly.get('weather_code', [])),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'time': list(self.time),
            'temperature_2m': list(self.temperature_2m),
            'weather_code': list(self.weather_code),
        }


@dataclass(frozen=True)
class DailyForecast:
    time: Tuple[str, ...] = ()
    weather_code: Tuple[int, ...] = ()
    temperature_2m_max: Tuple[float, ...] = ()
    temperature_2m_min: Tuple[float, ...] = ()

    @classmethod
    def from_api_response(cls, daily: Dict[str, Any]) -> 'DailyForecast':
        return cls(
            time=tuple(daily.get('time', [])),
            weather_code=tuple(daily.get('weather_code', [])),
            temperature_2m_max=tuple(daily.get('temperature_2m_max', [])),
            temperature_2m_min=tuple(daily.get('temperature_2m_min', [])),
        )

    def today_max(self) -> Optional[float]:
        return self.temperature_2m_max[0] if self.temperature_2m_max else None

    def today_min(self) -> Optional[float]:
        return self.temperature_2m_min[0] if self.temperature_2m_min else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'time': list(self.time),
            'weather_code': list(self.weather_code),
            'temperature_2m_max': list(self.temperature_2m_max),
            'temperature_2m_min': list(self.temperature_2m_min),
        }


@dataclass(frozen=True)
class WeatherSnapshot:
    """Normalized weather bundle for one location. Replaced wholesale on each lookup."""
    location_name: str
    latitude: float
    longitude: float
    current: CurrentWeather
    hourly: HourlyForecast = field(default_factory=HourlyForecast)
    daily: DailyForecast = field(default_factory=DailyForecast)

    @classmethod
    def from_api_response(cls, data: Dict[str, Any], latitude: float, longitude: float, name: str) -> 'WeatherSnapshot':
        """Create instance from an Open-Meteo forecast response."""
        return cls(
            location_name=name,
            latitude=latitude,
            longitude=longitude,
            current=CurrentWeather.from_api_response(data.get('current', {})),
            hourly=HourlyForecast.from_api_response(data.get('hourly', {})),
            daily=DailyForecast.from_api_response(data.get('daily', {})),
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'WeatherSnapshot':
        """Create instance from the dashboard's camelCase representation."""
        if not isinstance(data, dict):
            raise ValueError("Weather payload must be an object")
        return cls(
            location_name=data.get('locationName', ''),
            latitude=data.get('latitude'),
            longitude=data.get('longitude'),
            current=CurrentWeather.from_dict(_section(data, 'current', required=True)),
            hourly=HourlyForecast.from_api_response(_section(data, 'hourly')),
            daily=DailyForecast.from_api_response(_section(data, 'daily')),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'locationName': self.location_name,
            'latitude': self.latitude,
            'longitude': self.longitude,
            'current': self.current.to_dict(),
            'hourly': self.hourly.to_dict(),
            'daily': self.daily.to_dict(),
        }


@dataclass(frozen=True)
class GeocodingResult:
    id: int
    name: str
    latitude: float
    longitude: float
    country: str = ''
    admin1: Optional[str] = None

    @classmethod
    def from_api_response(cls, result: Dict[str, Any]) -> 'GeocodingResult':
        return cls(
            id=result.get('id', 0),
            name=result.get('name', ''),
            latitude=result.get('latitude'),
            longitude=result.get('longitude'),
            country=result.get('country', ''),
            admin1=result.get('admin1'),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'id': self.id,
            'name': self.name,
            'latitude': self.latitude,
            'longitude': self.longitude,
            'country': self.country,
        }
        if self.admin1:
            data['admin1'] = self.admin1
        return data
