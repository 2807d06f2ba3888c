from dataclasses import dataclass


@dataclass(frozen=True)
class WeatherForecast:
    """Weather snapshot for one city. Temperature is in degrees Celsius."""

    city: str
    temperature: float
    condition: str
