import numpy as np
import pandas as pd
from scipy.special import logsumexp

from .risk_set import risk_set_mask, tied_event_mask
from .validation import check_survival_arrays


def compute_baseline_hazard(t, e, risk_scores, method="breslow") -> pd.DataFrame:
    """
    Estimate the baseline hazard of a Cox model from fitted risk scores.

    Args:
        t: Observed times of the training subjects
        e: Event indicators (1=failure, 0=censored)
        risk_scores: Predicted log hazard ratios for the same subjects
        method: "breslow" (d / sum of exp(score) over the risk set) or
            "efron" (sum over k=0..d-1 of 1 / (risk-set sum - k/d tied sum))

    Returns
    -------
        DataFrame with one row per distinct failure time and columns
        time, hazard, cumulative_hazard
    """
    if method not in ("breslow", "efron"):
        raise ValueError(f"Unknown baseline hazard method {method!r}")
    t, e, risk = check_survival_arrays(t, e, risk_scores, names=["risk_scores"])

    event_times = np.unique(t[e == 1])
    if event_times.size == 0:
        return pd.DataFrame({"time": [], "hazard": [], "cumulative_hazard": []})

    log_risk_sum = logsumexp(risk[None, :], b=risk_set_mask(t, event_times).astype(float), axis=1)
    tied = tied_event_mask(t, e, event_times)
    n_tied = tied.sum(axis=1)

    if method == "breslow":
        hazard = n_tied * np.exp(-log_risk_sum)
    else:
        # 1 / (R - k/d * D) = exp(-log R) / (1 - k/d * D/R)
        tied_fraction = np.exp(logsumexp(risk[None, :], b=tied.astype(float), axis=1) - log_risk_sum)
        hazard = np.array([
            np.sum(1.0 / (1.0 - np.arange(d) / d * f)) for f, d in zip(tied_fraction, n_tied)
        ]) * np.exp(-log_risk_sum)

    return pd.DataFrame({
        "time": event_times,
        "hazard": hazard,
        "cumulative_hazard": np.cumsum(hazard),
    })


def baseline_cumulative_hazard_at(baseline: pd.DataFrame, times) -> np.ndarray:
    """Evaluate the step-function baseline cumulative hazard at the given times."""
    times = np.atleast_1d(np.asarray(times, dtype=float))
    if len(baseline) == 0:
        return np.zeros_like(times)
    idx = np.searchsorted(baseline["time"].to_numpy(), times, side="right") - 1
    cumhaz = baseline["cumulative_hazard"].to_numpy()[np.clip(idx, 0, None)]
    return np.where(idx >= 0, cumhaz, 0.0)


def predict_survival(baseline: pd.DataFrame, risk_scores, times) -> np.ndarray:
    """
    Predict survival probabilities S(t|x) = exp(-H0(t) * exp(score)).

    Args:
        baseline: Output of compute_baseline_hazard
        risk_scores: Predicted log hazard ratios, shape (n_samples,)
        times: Time points at which to evaluate survival

    Returns
    -------
        Array of shape (n_samples, n_times)
    """
    risk = np.asarray(risk_scores, dtype=float).reshape(-1)
    times = np.atleast_1d(np.asarray(times, dtype=float))
    cumhaz = baseline_cumulative_hazard_at(baseline, times)
    return np.exp(-np.outer(np.exp(risk), cumhaz))
