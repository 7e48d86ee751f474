"""Weather lookup endpoint."""
from fastapi import APIRouter, Depends, HTTPException, Query

from survey_fleet.api.deps import get_weather
from survey_fleet.config import get_settings
from survey_fleet.weather.weather_provider import WeatherProvider

router = APIRouter(prefix="/api/weather", tags=["weather"])


@router.get("", response_model=dict)
def current_weather(lat: float = Query(..., ge=-90, le=90), lng: float = Query(..., ge=-180, le=180),
                    provider: WeatherProvider = Depends(get_weather)):
    """Current conditions at a location, with the flight-safety verdict."""
    weather = provider.get_weather(lat, lng)
    if weather is None:
        raise HTTPException(status_code=503, detail="Weather data unavailable")
    settings = get_settings()
    return weather.to_dict(settings.max_wind_speed_kmh, settings.min_visibility_km)
