from dataclasses import dataclass


@dataclass(frozen=True)
class FilterThresholds:
    """
    Policy constants for PointAcceptanceFilter.

    Args:
        time_threshold_ms: Past this gap since the last accepted point, a
            candidate passes the accuracy check unconditionally.
        accuracy_tolerance_percent: A worse fix from the same provider is
            tolerated when its degradation is at most
            previous_accuracy / accuracy_tolerance_percent.
        velocity_threshold_mps: Implied speeds above this are rejected.
    """
    time_threshold_ms: int = 30000
    accuracy_tolerance_percent: float = 10
    velocity_threshold_mps: float = 200

    def __post_init__(self):
        if self.time_threshold_ms < 0:
            raise ValueError(f"time_threshold_ms must be >= 0, got {self.time_threshold_ms}")
        if self.accuracy_tolerance_percent <= 0:
            raise ValueError(f"accuracy_tolerance_percent must be > 0, got {self.accuracy_tolerance_percent}")
        if self.velocity_threshold_mps <= 0:
            raise ValueError(f"velocity_threshold_mps must be > 0, got {self.velocity_threshold_mps}")
