"""Evaluation metrics for rating runs."""

from .metrics import (
    accuracy,
    compare_runs,
    cumulative_error_rate,
    cumulative_errors,
    cumulative_negative_log_prob_of_truth,
    mean_negative_log_prob,
)

__all__ = [
    "accuracy",
    "compare_runs",
    "cumulative_error_rate",
    "cumulative_errors",
    "cumulative_negative_log_prob_of_truth",
    "mean_negative_log_prob",
]
