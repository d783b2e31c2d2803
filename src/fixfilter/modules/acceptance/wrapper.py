from typing import Iterable, Iterator, Optional

from fixfilter.core.point import Point
from fixfilter.modules.acceptance.receiver import FilteringReceiver


class FilteredStreamWrapper:
    """
    Wraps an existing stream of fixes and yields only those the receiver accepts.
    Each accepted fix is already in the receiver's store when it is yielded.
    """

    def __init__(self, point_stream: Iterable[Point], receiver: Optional[FilteringReceiver] = None):
        """
        Args:
            point_stream: An iterator or generator that yields Point objects.
            receiver: The receiver to filter through. Defaults to a fresh one
                backed by an in-memory store.
        """
        self.point_stream = point_stream
        self.receiver = receiver or FilteringReceiver()

    def __iter__(self) -> Iterator[Point]:
        return self.stream()

    def stream(self) -> Iterator[Point]:
        for point in self.point_stream:
            if self.receiver.on_location_changed(point).accepted:
                yield point
