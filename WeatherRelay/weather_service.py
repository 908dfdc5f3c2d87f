"""Weather service: refresh the shared cache from a provider on demand."""
import logging
from typing import List, Optional

from weather_cache import WeatherCache
from weather_data import WeatherRecord
from weather_provider import WeatherProviderBase, WeatherProviderError


class WeatherService:
    """
    Service that wraps a weather provider with a shared cache.

    Every refresh hits the provider once. A successful fetch replaces the
    cache; a failed one leaves it alone and the error propagates.
    """

    def __init__(self, provider: WeatherProviderBase, cache: Optional[WeatherCache] = None):
        """
        Initialize weather service.

        Args:
            provider: Weather provider to use
            cache: Shared cache; a fresh empty one is created when omitted
        """
        self.provider = provider
        self.cache = cache if cache is not None else WeatherCache()

    def refresh(self) -> List[WeatherRecord]:
        """
        Fetch new records, store them, and return the cache contents.

        The returned list is read back from the cache rather than taken from
        this call's fetch, so under concurrent refreshes it may hold another
        request's newer records (last writer wins).

        Returns:
            List[WeatherRecord]: Snapshot of the cache after the update

        Raises:
            WeatherProviderError: If the provider fails; the cache is untouched
        """
        logging.info("Fetching weather data from provider...")
        try:
            records = self.provider.fetch()
        except WeatherProviderError as e:
            logging.warning(f"Weather fetch failed, keeping cached data: {e}")
            raise

        logging.info(f"Weather fetch successful: {len(records)} record(s)")
        self.cache.replace(records)
        snapshot = self.cache.snapshot()
        logging.debug(f"Cache updated at {self.cache.updated_at}, serving {len(snapshot)} record(s)")
        return snapshot
