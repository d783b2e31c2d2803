from .store import PointStore, InMemoryPointStore, KeyedPointStore

__all__ = ["PointStore", "InMemoryPointStore", "KeyedPointStore"]
