"""OpenWeather forecast API provider implementation."""
import logging
from typing import Any, List, Optional

import requests

from weather_data import WeatherRecord, records_from_payload
from weather_provider import WeatherProviderBase, WeatherProviderError


class OpenWeatherProvider(WeatherProviderBase):
    """
    Weather provider using the OpenWeather 5 day / 3 hour forecast API.

    See https://openweathermap.org/forecast5. The location is a zip code
    ("94040,us") and temperatures are left in the API's default unit (Kelvin).
    """

    BASE_URL = "http://api.openweathermap.org/data/2.5/forecast"

    def __init__(
        self,
        api_key: str,
        zip_code: str = "94040,us",
        base_url: Optional[str] = None,
        timeout: float = 10,
    ):
        """
        Initialize OpenWeather provider.

        Args:
            api_key: OpenWeather API key
            zip_code: Zip code and country code, e.g. "94040,us"
            base_url: Override for the forecast endpoint URL
            timeout: HTTP request timeout in seconds
        """
        self.api_key = api_key
        self.zip_code = zip_code
        self.base_url = base_url or self.BASE_URL
        self.timeout = timeout

    def __repr__(self) -> str:
        return f"OpenWeatherProvider(zip_code={self.zip_code!r}, base_url={self.base_url!r})"

    def fetch(self) -> List[WeatherRecord]:
        """
        Fetch forecast records from OpenWeather.

        Returns:
            List[WeatherRecord]: Records in response order

        Raises:
            WeatherProviderError: On transport failure, non-success status
                or an undecodable body
        """
        params = {
            "zip": self.zip_code,
            "appid": self.api_key,
        }

        try:
            logging.info(f"Making OpenWeather API request: {self.base_url}")
            logging.debug(f"Request parameters: zip={self.zip_code}, timeout={self.timeout}")

            response = requests.get(self.base_url, params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            # str(e) carries the full URL, appid included
            reason = type(e).__name__
            logging.error(f"Network error during API request to {self.base_url}: {reason}")
            raise WeatherProviderError(f"Network error: {reason}") from None

        logging.info(f"API response status: {response.status_code}")

        if not response.ok:
            logging.error(f"API request failed with status {response.status_code}")
            self._handle_error_response(response)

        try:
            data = response.json()
            records = self._parse(data)
        except (KeyError, IndexError, ValueError, TypeError) as e:
            logging.error(f"Failed to parse API response: {e}", exc_info=True)
            raise WeatherProviderError(f"Failed to parse response: {e}") from e

        logging.info(f"Successfully parsed {len(records)} weather record(s)")
        return records

    def _parse(self, data: Any) -> List[WeatherRecord]:
        """Accept either a bare record array or the forecast envelope."""
        if isinstance(data, dict) and "list" in data:
            logging.debug(f"Forecast envelope with {len(data['list'])} entries")
            return [self._parse_forecast_entry(entry) for entry in data["list"]]
        return records_from_payload(data)

    @staticmethod
    def _parse_forecast_entry(entry: dict) -> WeatherRecord:
        weather_array = entry["weather"]
        if not weather_array:
            raise ValueError("Forecast entry missing 'weather' array")
        return WeatherRecord.from_dict({
            "identifier": entry["dt"],
            "description": weather_array[0]["description"],
            "temperature": entry["main"]["temp"],
        })

    def _handle_error_response(self, response: requests.Response) -> None:
        """Parse and raise error from OpenWeather error response."""
        try:
            error_data = response.json()
            cod = error_data.get("cod", response.status_code)
            message = error_data.get("message", "Unknown error")
        except (ValueError, AttributeError):
            # Not a JSON object, use HTTP status
            logging.error(f"Non-JSON error response: HTTP {response.status_code}")
            raise WeatherProviderError(
                f"HTTP {response.status_code}: {response.text[:200]}"
            ) from None

        raise WeatherProviderError(f"OpenWeather API error {cod}: {message}")
