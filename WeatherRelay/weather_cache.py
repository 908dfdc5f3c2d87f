"""Thread-safe in-memory holder for the latest weather records."""
import threading
import time
from typing import Iterable, List, Optional, Tuple

from weather_data import WeatherRecord


class WeatherCache:
    """
    Holds the most recently fetched record sequence.

    The sequence is replaced as a whole, never merged. Every read and write
    goes through a single lock, so a snapshot is always one complete
    sequence passed to ``replace`` (or the initial empty one).
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._records: Tuple[WeatherRecord, ...] = ()
        self._updated_at: Optional[float] = None

    def replace(self, records: Iterable[WeatherRecord]) -> None:
        new_records = tuple(records)
        with self._lock:
            self._records = new_records
            self._updated_at = time.time()

    def snapshot(self) -> List[WeatherRecord]:
        with self._lock:
            return list(self._records)

    @property
    def updated_at(self) -> Optional[float]:
        """Wall-clock time of the last replace, None if never filled."""
        with self._lock:
            return self._updated_at
