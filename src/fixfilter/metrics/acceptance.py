from typing import Dict, Iterable, List

import numpy as np

from fixfilter.core.decision import Decision
from fixfilter.modules.acceptance.evaluator import Evaluation


def calculate_acceptance_ratio(decisions: Iterable[Decision]) -> float:
    """
    Fraction of decisions that accepted the fix.

    Returns:
        Value in [0, 1]. Returns 1.0 for an empty sequence (nothing was dropped).
    """
    accepted = np.array([d is Decision.ACCEPT for d in decisions], dtype=bool)
    if accepted.size == 0:
        return 1.0
    return float(accepted.mean())


def summarize_evaluations(evaluations: List[Evaluation]) -> Dict[str, float | int]:
    """
    Summarizes a run of the filter.

    Returns:
        Dictionary with 'total', 'accepted', 'rejected', 'rejected_velocity',
        'rejected_accuracy', 'acceptance_ratio' and 'max_accepted_velocity'
        (0.0 when no accepted point had a finite velocity).
    """
    reasons = [e.rejection_reason for e in evaluations]
    velocities = np.array(
        [e.velocity_mps for e in evaluations
         if e.decision is Decision.ACCEPT and e.velocity_mps is not None],
        dtype=float
    )
    velocities = velocities[np.isfinite(velocities)]

    accepted = sum(1 for r in reasons if r is None)
    return {
        'total': len(evaluations),
        'accepted': accepted,
        'rejected': len(evaluations) - accepted,
        'rejected_velocity': sum(1 for r in reasons if r == 'velocity'),
        'rejected_accuracy': sum(1 for r in reasons if r == 'accuracy'),
        'acceptance_ratio': calculate_acceptance_ratio(e.decision for e in evaluations),
        'max_accepted_velocity': float(velocities.max()) if velocities.size else 0.0,
    }
