from .acceptance import calculate_acceptance_ratio, summarize_evaluations

__all__ = ["calculate_acceptance_ratio", "summarize_evaluations"]
