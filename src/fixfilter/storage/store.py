import abc
import threading
from typing import Dict, Optional

from fixfilter.core.point import Point


class PointStore(abc.ABC):
    """Holds the most recently accepted point of one track."""

    @abc.abstractmethod
    def retrieve_latest(self) -> Optional[Point]:
        """Returns the latest accepted point, or None if nothing was ever stored."""
        pass

    @abc.abstractmethod
    def store(self, point: Point) -> None:
        """Records point as the latest accepted point."""
        pass


class InMemoryPointStore(PointStore):
    """
    Single-track store kept in process memory.
    """

    def __init__(self, initial: Optional[Point] = None):
        self._latest = initial

    def retrieve_latest(self) -> Optional[Point]:
        return self._latest

    def store(self, point: Point) -> None:
        self._latest = point


class KeyedPointStore:
    """
    Latest accepted point per entity, so independent tracks never share a
    reference point. Use for_entity() to get a PointStore for one key.
    """

    def __init__(self):
        self._latest: Dict[str, Point] = {}
        self._lock = threading.Lock()

    def retrieve_latest(self, obj_id: str) -> Optional[Point]:
        with self._lock:
            return self._latest.get(obj_id)

    def store(self, obj_id: str, point: Point) -> None:
        with self._lock:
            self._latest[obj_id] = point

    def for_entity(self, obj_id: str) -> PointStore:
        if obj_id is None:
            raise ValueError("obj_id is required to select an entity track")
        return _EntityView(self, obj_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._latest)


class _EntityView(PointStore):
    def __init__(self, parent: KeyedPointStore, obj_id: str):
        self._parent = parent
        self._obj_id = obj_id

    def retrieve_latest(self) -> Optional[Point]:
        return self._parent.retrieve_latest(self._obj_id)

    def store(self, point: Point) -> None:
        self._parent.store(self._obj_id, point)
