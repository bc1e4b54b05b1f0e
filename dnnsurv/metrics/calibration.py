import logging

import numpy as np
import pandas as pd
from scipy.integrate import trapezoid

from ..utils.baseline import compute_baseline_hazard, predict_survival
from ..utils.validation import check_eval_times, check_survival_arrays
from .ipcw import censoring_survival, estimate_ipcw

logger = logging.getLogger(__name__)


def brier_score_from_survival(e_test, t_test, surv_predicted_test, t, km=None):
    """
    Compute the IPCW-corrected Brier score at a single time from survival probabilities.

    This follows Graf et al. (1999): subjects who failed by time t are compared
    against 0, subjects still under observation after t against 1, and subjects
    censored before t only enter through the censoring weights. The weighted
    squared errors are divided by the sum of the weights, which keeps the
    score in [0, 1].

    Parameters:
        e_test (ndarray): Event indicators (1 = failure, 0 = censored).
        t_test (ndarray): Event/censoring times.
        surv_predicted_test (ndarray): Predicted probability of surviving past t, shape (n_samples,).
        t (float): Time at which to evaluate the Brier score.
        km (object, optional): KaplanMeierFitter of the censoring distribution, or
            a tuple (e_train, t_train) to fit one. None means no censoring correction.

    Returns:
        brier (float): The Brier score at time t, NaN if no subject can be scored.
        km (object): The fitted censoring estimator (if applicable).
    """
    e_test = np.asarray(e_test)
    t_test = np.asarray(t_test, dtype=float)
    surv = np.asarray(surv_predicted_test, dtype=float).reshape(-1)
    km = estimate_ipcw(km)

    failed = (e_test == 1) & (t_test <= t)
    survived = t_test > t
    if failed.sum() + survived.sum() == 0:
        return np.nan, km

    weights = np.zeros_like(surv)
    if km is None:
        weights[failed | survived] = 1.0
    else:
        if failed.any():
            weights[failed] = 1.0 / censoring_survival(km, t_test[failed])
        weights[survived] = 1.0 / censoring_survival(km, t)[0]

    truth = survived.astype(float)
    brier = np.sum(weights * (truth - surv) ** 2) / np.sum(weights)
    return brier, km


def brier_score(
    e_train,
    t_train,
    risk_train,
    e_test,
    t_test,
    risk_test,
    times,
    method="breslow",
) -> pd.DataFrame:
    """
    Compute the time-dependent Brier score of a Cox-type risk score.

    The baseline hazard and the censoring distribution are both estimated on
    the training data; the test subjects are scored at each evaluation time.

    Parameters:
        e_train, t_train (ndarray): Training events and times.
        risk_train (ndarray): Predicted log hazard ratios for the training subjects.
        e_test, t_test (ndarray): Evaluation events and times.
        risk_test (ndarray): Predicted log hazard ratios for the evaluation subjects.
        times (array-like): Evaluation time grid.
        method (str): Baseline hazard estimator, "breslow" or "efron".

    Returns:
        DataFrame with columns time, brier_score (NaN where undefined).
    """
    t_train, e_train, risk_train = check_survival_arrays(
        t_train, e_train, risk_train, names=["risk_train"]
    )
    t_test, e_test, risk_test = check_survival_arrays(
        t_test, e_test, risk_test, names=["risk_test"]
    )
    times = check_eval_times(times)

    baseline = compute_baseline_hazard(t_train, e_train, risk_train, method=method)
    surv = predict_survival(baseline, risk_test, times)
    km = estimate_ipcw((e_train, t_train))

    scores = []
    for i, t in enumerate(times):
        score, _ = brier_score_from_survival(e_test, t_test, surv[:, i], t, km)
        if np.isnan(score):
            logger.warning("Brier score undefined at t=%.4g: no subject can be scored", t)
        scores.append(score)

    return pd.DataFrame({"time": times, "brier_score": scores})


def integrated_brier_score(brier_table: pd.DataFrame) -> float:
    """
    Integrate a Brier score table over time.

    The score is integrated with the trapezoid rule and divided by the covered
    time span. Rows with undefined scores are dropped first.

    Parameters:
        brier_table (DataFrame): Output of brier_score.

    Returns:
        ibs (float): Integrated Brier score.
    """
    table = brier_table.dropna(subset=["brier_score"])
    if len(table) < 2:
        raise ValueError("At least two time points must be provided for integration.")
    t_eval = table["time"].to_numpy()
    ibs = trapezoid(table["brier_score"].to_numpy(), t_eval) / (t_eval[-1] - t_eval[0])
    return float(ibs)
