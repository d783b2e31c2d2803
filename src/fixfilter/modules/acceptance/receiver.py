import logging
import threading
from typing import Callable, Optional

from fixfilter.core.decision import Decision
from fixfilter.core.point import Point
from fixfilter.modules.acceptance.evaluator import Evaluation, PointAcceptanceFilter
from fixfilter.storage.store import InMemoryPointStore, PointStore

logger = logging.getLogger(__name__)


class FilteringReceiver:
    """
    Runs the retrieve -> evaluate -> store cycle for one track.

    The cycle is serialized with a lock: two fixes delivered concurrently are
    each evaluated against the point the other may have just stored, never
    against a stale reference.
    """

    def __init__(
        self,
        store: Optional[PointStore] = None,
        point_filter: Optional[PointAcceptanceFilter] = None,
        on_filtered_location_changed: Optional[Callable[[Point], None]] = None
    ):
        """
        Args:
            store: Where the latest accepted point lives. Defaults to an in-memory store.
            point_filter: The decision function. Defaults to the standard thresholds.
            on_filtered_location_changed: Called with each accepted point, after
                it has been written to the store.
        """
        self.store = store if store is not None else InMemoryPointStore()
        self.point_filter = point_filter or PointAcceptanceFilter()
        self.on_filtered_location_changed = on_filtered_location_changed
        self._lock = threading.Lock()

    def on_location_changed(self, point: Point) -> Decision:
        return self.process_point(point).decision

    def process_point(self, point: Point) -> Evaluation:
        """
        Ingests one fix. Accepted fixes become the new latest point before the
        callback runs.
        """
        with self._lock:
            last_point = self.store.retrieve_latest()
            evaluation = self.point_filter.explain(point, last_point)
            if evaluation.decision is Decision.ACCEPT:
                self.store.store(point)

        logger.debug(
            "%s point %s: distance=%sm elapsed=%sms velocity=%sm/s improved=%s tolerable=%s stale=%s",
            "Adding" if evaluation.decision is Decision.ACCEPT else "Ignoring",
            point, evaluation.distance_m, evaluation.elapsed_ms, evaluation.velocity_mps,
            evaluation.accuracy_improved, evaluation.lower_accuracy_tolerable, evaluation.stale
        )
        if evaluation.decision is Decision.ACCEPT and self.on_filtered_location_changed is not None:
            self.on_filtered_location_changed(point)

        return evaluation
