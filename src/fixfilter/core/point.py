from dataclasses import dataclass


@dataclass(frozen=True)
class Point:
    """
    Represents a single location fix (lat, lon, accuracy, t, provider).
    frozen=True keeps fixes immutable once they leave the fix source.
    """
    lat: float
    lon: float
    accuracy: float
    timestamp: int
    provider: str
    obj_id: str | None = None
