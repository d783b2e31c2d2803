import math
from dataclasses import dataclass
from typing import Callable, Optional

from fixfilter.core.decision import Decision
from fixfilter.core.geo import geodesic_distance
from fixfilter.core.point import Point
from fixfilter.modules.acceptance.thresholds import FilterThresholds


@dataclass(frozen=True)
class Evaluation:
    """
    A decision together with the quantities it was derived from.
    Numeric fields are None when there was no previous point to compare to.
    """
    decision: Decision
    distance_m: Optional[float] = None
    elapsed_ms: Optional[int] = None
    velocity_mps: Optional[float] = None
    accuracy_improved: bool = False
    lower_accuracy_tolerable: bool = False
    stale: bool = False
    velocity_exceeded: bool = False

    @property
    def rejection_reason(self) -> Optional[str]:
        """'velocity', 'accuracy' or None for accepted points."""
        if self.decision is Decision.ACCEPT:
            return None
        if self.velocity_exceeded:
            return 'velocity'
        return 'accuracy'


def truncated_seconds(elapsed_ms: int) -> int:
    """Whole seconds in elapsed_ms, truncating toward zero."""
    seconds = abs(elapsed_ms) // 1000
    return seconds if elapsed_ms >= 0 else -seconds


def implied_velocity(distance_m: float, elapsed_ms: int) -> float:
    """
    Speed in m/s over whole elapsed seconds.
    Sub-second gaps give +inf for any movement and 0.0 for none.
    """
    elapsed_s = truncated_seconds(elapsed_ms)
    if elapsed_s == 0:
        return 0.0 if distance_m == 0 else math.inf
    return distance_m / elapsed_s


class PointAcceptanceFilter:
    """
    Accept/reject heuristic for streaming location fixes.

    A candidate is accepted when its implied velocity from the last accepted
    point is plausible and at least one of the following holds:
      - its accuracy is better than the last accepted point's,
      - the last accepted point is older than the time threshold,
      - its accuracy is worse but within tolerance and from the same provider.

    The filter holds no state: the last accepted point is always an argument,
    so one instance can be shared across threads and tracks.
    """

    def __init__(
        self,
        thresholds: Optional[FilterThresholds] = None,
        distance_fn: Callable[[Point, Point], float] = geodesic_distance
    ):
        """
        Args:
            thresholds: Policy constants. Defaults to FilterThresholds().
            distance_fn: Meters between two fixes. Defaults to the WGS84
                geodesic; see fixfilter.core.geo.DISTANCE_FUNCTIONS.
        """
        self.thresholds = thresholds or FilterThresholds()
        self.distance_fn = distance_fn

    def evaluate(self, candidate: Point, last_accepted: Optional[Point]) -> Decision:
        return self.explain(candidate, last_accepted).decision

    def explain(self, candidate: Point, last_accepted: Optional[Point]) -> Evaluation:
        """
        Runs the heuristic and returns the decision with its intermediate values.

        Args:
            candidate: The incoming fix.
            last_accepted: The most recently accepted fix, or None if none yet.
        """
        if last_accepted is None:
            return Evaluation(decision=Decision.ACCEPT)

        t = self.thresholds
        current_accuracy = candidate.accuracy
        previous_accuracy = last_accepted.accuracy

        accuracy_improved = current_accuracy < previous_accuracy
        accuracy_delta = abs(previous_accuracy - current_accuracy)
        lower_accuracy_tolerable = (
            current_accuracy > previous_accuracy
            and candidate.provider == last_accepted.provider
            and accuracy_delta <= previous_accuracy / t.accuracy_tolerance_percent
        )

        elapsed_ms = candidate.timestamp - last_accepted.timestamp
        stale = elapsed_ms > t.time_threshold_ms

        distance_m = self.distance_fn(last_accepted, candidate)
        velocity = implied_velocity(distance_m, elapsed_ms)
        velocity_exceeded = not velocity <= t.velocity_threshold_mps

        if not velocity_exceeded and (accuracy_improved or stale or lower_accuracy_tolerable):
            decision = Decision.ACCEPT
        else:
            decision = Decision.REJECT

        return Evaluation(
            decision=decision,
            distance_m=distance_m,
            elapsed_ms=elapsed_ms,
            velocity_mps=velocity,
            accuracy_improved=accuracy_improved,
            lower_accuracy_tolerable=lower_accuracy_tolerable,
            stale=stale,
            velocity_exceeded=velocity_exceeded
        )
