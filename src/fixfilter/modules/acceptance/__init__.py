from .thresholds import FilterThresholds
from .evaluator import Evaluation, PointAcceptanceFilter
from .receiver import FilteringReceiver
from .wrapper import FilteredStreamWrapper

__all__ = [
    "FilterThresholds",
    "Evaluation",
    "PointAcceptanceFilter",
    "FilteringReceiver",
    "FilteredStreamWrapper",
]
