"""Weather provider abstraction - allows swapping different weather APIs."""
from abc import ABC, abstractmethod
from typing import List

from weather_data import WeatherRecord


class WeatherProviderBase(ABC):
    """Abstract base class for weather data providers."""

    @abstractmethod
    def fetch(self) -> List[WeatherRecord]:
        """
        Fetch current weather records for the configured location.

        Returns:
            List[WeatherRecord]: Records in the order the upstream returned them

        Raises:
            WeatherProviderError: If the provider fails to produce usable data
        """


class WeatherProviderError(Exception):
    """Exception raised when a weather provider fails."""
