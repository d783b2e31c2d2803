import logging
import threading
import time
from unittest.mock import MagicMock

import pytest

from fixfilter.core.decision import Decision
from fixfilter.core.point import Point
from fixfilter.modules.acceptance import FilteredStreamWrapper, FilteringReceiver
from fixfilter.storage import InMemoryPointStore, KeyedPointStore


def make_point(lat, accuracy, timestamp, provider="gps", obj_id=None):
    return Point(lat=lat, lon=-122.0, accuracy=accuracy, timestamp=timestamp, provider=provider, obj_id=obj_id)


@pytest.fixture
def noisy_track():
    """
    Five fixes, one every 5 s, moving ~111 m per step with improving accuracy.
    The third fix jumps ~11 km and must be dropped.
    """
    return [
        make_point(37.000, 20.0, 0),
        make_point(37.001, 18.0, 5000),
        make_point(37.100, 5.0, 10000),
        make_point(37.002, 16.0, 15000),
        make_point(37.003, 14.0, 20000),
    ]


def test_first_point_stored_and_reported():
    callback = MagicMock()
    store = InMemoryPointStore()
    receiver = FilteringReceiver(store=store, on_filtered_location_changed=callback)

    p = make_point(37.0, 20.0, 1000)
    assert receiver.on_location_changed(p) is Decision.ACCEPT
    assert store.retrieve_latest() == p
    callback.assert_called_once_with(p)


def test_rejected_point_leaves_store_untouched():
    callback = MagicMock()
    first = make_point(37.0, 20.0, 1000)
    store = InMemoryPointStore(initial=first)
    receiver = FilteringReceiver(store=store, on_filtered_location_changed=callback)

    worse = make_point(37.0, 40.0, 2000, provider="network")
    assert receiver.on_location_changed(worse) is Decision.REJECT
    assert store.retrieve_latest() == first
    callback.assert_not_called()


def test_accepted_point_becomes_reference(noisy_track):
    receiver = FilteringReceiver()
    decisions = [receiver.on_location_changed(p) for p in noisy_track]

    assert decisions == [Decision.ACCEPT, Decision.ACCEPT, Decision.REJECT, Decision.ACCEPT, Decision.ACCEPT]
    assert receiver.store.retrieve_latest() == noisy_track[-1]


def test_process_point_returns_evaluation(noisy_track):
    receiver = FilteringReceiver()
    receiver.process_point(noisy_track[0])
    evaluation = receiver.process_point(noisy_track[1])
    assert evaluation.decision is Decision.ACCEPT
    assert evaluation.elapsed_ms == 5000
    assert evaluation.accuracy_improved


def test_wrapper_yields_only_accepted(noisy_track):
    wrapper = FilteredStreamWrapper(point_stream=iter(noisy_track))
    accepted = list(wrapper)
    assert accepted == [noisy_track[0], noisy_track[1], noisy_track[3], noisy_track[4]]


def test_keyed_store_isolates_tracks():
    keyed = KeyedPointStore()
    receiver_a = FilteringReceiver(store=keyed.for_entity("a"))
    receiver_b = FilteringReceiver(store=keyed.for_entity("b"))

    a0 = make_point(37.0, 20.0, 0, obj_id="a")
    b0 = make_point(10.0, 20.0, 500, obj_id="b")

    # b0 is thousands of km from a0 but has its own history
    assert receiver_a.on_location_changed(a0) is Decision.ACCEPT
    assert receiver_b.on_location_changed(b0) is Decision.ACCEPT
    assert keyed.retrieve_latest("a") == a0
    assert keyed.retrieve_latest("b") == b0
    assert len(keyed) == 2


def test_keyed_store_requires_id():
    with pytest.raises(ValueError, match="obj_id is required"):
        KeyedPointStore().for_entity(None)


class SlowFirstReadStore(InMemoryPointStore):
    """
    Stalls the first retrieve_latest() call so a second fix can arrive while
    the first is still between read and write. Records every store() call.
    """

    def __init__(self, initial, delay=0.3):
        super().__init__(initial=initial)
        self.delay = delay
        self.first_read = threading.Event()
        self.history = []

    def retrieve_latest(self):
        if not self.first_read.is_set():
            self.first_read.set()
            time.sleep(self.delay)
        return super().retrieve_latest()

    def store(self, point):
        self.history.append(point)
        super().store(point)


def test_concurrent_delivery_is_serialized():
    initial = make_point(37.0, 100.0, 1000, provider="p0")
    store = SlowFirstReadStore(initial)
    receiver = FilteringReceiver(store=store)

    slow = make_point(37.0, 90.0, 2000, provider="p1")
    fast = make_point(37.0, 80.0, 3000, provider="p2")

    t_slow = threading.Thread(target=receiver.on_location_changed, args=(slow,))
    t_slow.start()
    assert store.first_read.wait(timeout=5)

    # Arrives while the first fix is mid-cycle; must wait and then compare
    # against the slow fix rather than the initial point.
    t_fast = threading.Thread(target=receiver.on_location_changed, args=(fast,))
    t_fast.start()
    t_slow.join(timeout=5)
    t_fast.join(timeout=5)

    assert store.history == [slow, fast]
    for previous, current in zip(store.history, store.history[1:]):
        assert current.accuracy < previous.accuracy
    assert store.retrieve_latest() == fast


def test_one_log_line_per_decision(caplog, noisy_track):
    caplog.set_level(logging.DEBUG, logger="fixfilter")
    receiver = FilteringReceiver()
    for p in noisy_track:
        receiver.on_location_changed(p)

    messages = [r.getMessage() for r in caplog.records if r.name.startswith("fixfilter")]
    assert len(messages) == len(noisy_track)
    assert [m.split(" ", 1)[0] for m in messages] == ["Adding", "Adding", "Ignoring", "Adding", "Adding"]
