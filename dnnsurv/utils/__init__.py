"""Loss functions and Cox-model utilities used within the dnnsurv package."""

from .baseline import baseline_cumulative_hazard_at, compute_baseline_hazard, predict_survival
from .loss import (
    breslow_negative_log_likelihood_loss,
    compute_l1_penalty,
    cox_loss,
    negative_log_likelihood_loss,
)
from .risk_set import risk_set_mask, tied_event_mask
from .validation import check_eval_times, check_survival_arrays


__all__ = [
    "negative_log_likelihood_loss",
    "breslow_negative_log_likelihood_loss",
    "compute_l1_penalty",
    "cox_loss",
    "compute_baseline_hazard",
    "baseline_cumulative_hazard_at",
    "predict_survival",
    "risk_set_mask",
    "tied_event_mask",
    "check_survival_arrays",
    "check_eval_times",
]
