"""Weather domain model - the record cached and served by the relay."""
import math
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping


FIELDS = ("identifier", "description", "temperature")
MAX_IDENTIFIER = 2 ** 64 - 1


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a valid reading
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass(frozen=True)
class WeatherRecord:
    """A single weather entry as returned by the provider."""
    identifier: int  # unique within one fetch, not across fetches
    description: str  # e.g., "clear sky", "light rain"
    temperature: float  # provider's native unit, never converted

    def to_dict(self) -> dict:
        return {
            "identifier": self.identifier,
            "description": self.description,
            "temperature": self.temperature,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "WeatherRecord":
        """
        Build a record from its wire representation.

        Raises:
            ValueError: If a field is missing or a value is out of range
            TypeError: If a field has the wrong type
        """
        if not isinstance(data, Mapping):
            raise TypeError(f"Expected an object, got {type(data).__name__}")

        missing = [name for name in FIELDS if name not in data]
        if missing:
            raise ValueError(f"Missing field(s): {', '.join(missing)}")

        identifier = data["identifier"]
        if not isinstance(identifier, int) or isinstance(identifier, bool):
            raise TypeError(f"'identifier' must be an integer, got {identifier!r}")
        if not 0 <= identifier <= MAX_IDENTIFIER:
            raise ValueError(f"'identifier' must be an unsigned 64-bit integer, got {identifier}")

        description = data["description"]
        if not isinstance(description, str):
            raise TypeError(f"'description' must be a string, got {description!r}")

        temperature = data["temperature"]
        if not _is_number(temperature):
            raise TypeError(f"'temperature' must be a number, got {temperature!r}")
        try:
            temperature = float(temperature)
        except OverflowError:
            raise ValueError("'temperature' is too large for a float") from None
        # NaN and Infinity decode from lenient JSON but cannot be re-encoded
        if not math.isfinite(temperature):
            raise ValueError(f"'temperature' must be finite, got {temperature!r}")

        return cls(
            identifier=identifier,
            description=description,
            temperature=temperature,
        )


def records_to_payload(records: Iterable[WeatherRecord]) -> List[dict]:
    """Serialize records in order, ready for a JSON response body."""
    return [record.to_dict() for record in records]


def records_from_payload(payload: Any) -> List[WeatherRecord]:
    """Parse a decoded JSON array into records, preserving order."""
    if not isinstance(payload, list):
        raise TypeError(f"Expected an array of records, got {type(payload).__name__}")
    return [WeatherRecord.from_dict(item) for item in payload]
