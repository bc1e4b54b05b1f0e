"""Discrimination metrics for right-censored survival models.

This module contains Harrell's concordance index and the time-dependent AUC
computed with the nearest-neighbour estimator of the bivariate distribution
of marker and survival time.
"""

import logging

import numpy as np
import pandas as pd
from scipy.integrate import trapezoid

from ..utils.risk_set import risk_set_mask, tied_event_mask
from ..utils.validation import check_eval_times, check_survival_arrays

logger = logging.getLogger(__name__)


def concordance_index(t_test, e_test, risk_predicted_test, tied_tol=1e-8):
    """
    Compute Harrell's concordance index.

    A pair (i, j) is usable when subject i failed strictly before subject j
    was last seen, or when i failed at the time j was censored. It is
    concordant when the earlier failure has the higher risk score; pairs whose
    scores differ by at most `tied_tol` count one half.

    Parameters
    ----------
        t_test : ndarray
            Time-to-event or censoring
        e_test : ndarray
            Event indicator (1=failure, 0=censored)
        risk_predicted_test : ndarray
            Predicted risk scores, higher meaning higher hazard
        tied_tol : float
            Tolerance to assign 0.5 score for ties

    Returns
    -------
        c_index : float
            Concordance in [0, 1], NaN if there is no usable pair
    """
    t_test, e_test, risk = check_survival_arrays(
        t_test, e_test, risk_predicted_test, names=["risk_predicted_test"]
    )

    nominator = 0.0
    denominator = 0

    for i in np.where(e_test == 1)[0]:
        t_i = t_test[i]
        r_i = risk[i]

        # Subjects known to outlive subject i
        comparable = (t_test > t_i) | ((t_test == t_i) & (e_test == 0))
        risks = risk[comparable]

        concordant = (risks < r_i).astype(float)
        concordant[np.abs(risks - r_i) <= tied_tol] = 0.5

        nominator += concordant.sum()
        denominator += comparable.sum()

    if denominator == 0:
        logger.warning("Concordance index undefined: no usable pairs")
        return np.nan

    return nominator / denominator


def _kaplan_meier_at(t, e, time):
    """Kaplan-Meier survival probability at `time` for a subset of subjects."""
    event_times = np.unique(t[(e == 1) & (t <= time)])
    if event_times.size == 0:
        return 1.0
    n_at_risk = risk_set_mask(t, event_times).sum(axis=1)
    n_failed = tied_event_mask(t, e, event_times).sum(axis=1)
    return float(np.prod(1.0 - n_failed / n_at_risk))


def _nne_conditional_survival(t, e, marker, time, span):
    """
    Nearest-neighbour estimate of S(time | marker = u) for each distinct marker value u.

    The neighbourhood of u holds every subject with marker u plus
    floor(n * span / 2) subjects on each side in marker order.
    """
    n = len(marker)
    order = np.argsort(marker, kind="mergesort")
    sorted_marker = marker[order]
    unique_marker = np.unique(marker)
    half_window = int(n * span / 2)

    surv = np.empty(len(unique_marker))
    for k, u in enumerate(unique_marker):
        lo = np.searchsorted(sorted_marker, u, side="left")
        hi = np.searchsorted(sorted_marker, u, side="right")
        idx = order[max(lo - half_window, 0):min(hi + half_window, n)]
        surv[k] = _kaplan_meier_at(t[idx], e[idx], time)
    return unique_marker, surv


def _nne_auc(t, e, marker, time, span):
    n = len(marker)
    unique_marker, surv_unique = _nne_conditional_survival(t, e, marker, time, span)
    counts = np.bincount(np.searchsorted(unique_marker, marker), minlength=len(unique_marker))

    surv_marginal = np.sum(counts * surv_unique) / n
    if surv_marginal <= 0.0 or surv_marginal >= 1.0:
        return np.nan

    # P(X > c) and P(X > c, T > time) for every cutoff c in unique_marker
    above_count = np.cumsum(counts[::-1])[::-1] - counts
    group_surv = counts * surv_unique
    above_surv = np.cumsum(group_surv[::-1])[::-1] - group_surv

    tp = (above_count - above_surv) / n / (1.0 - surv_marginal)
    fp = above_surv / n / surv_marginal

    # cutoffs in increasing order give decreasing rates; add the (1, 1) corner
    tp = np.clip(np.append(tp[::-1], 1.0), 0.0, 1.0)
    fp = np.clip(np.append(fp[::-1], 1.0), 0.0, 1.0)
    return float(trapezoid(tp, fp))


def auc_td(e_test, t_test, risk_predicted_test, times, span=None):
    """
    Compute the time-dependent (cumulative/dynamic) AUC of a risk score.

    Cases are subjects failing at or before t and controls are subjects
    surviving beyond t. Subjects censored before t are handled by the
    nearest-neighbour estimator of Heagerty, Lumley and Pepe (2000), which
    smooths the conditional survival over a marker window whose size is set
    by `span`.

    Parameters
    ----------
        e_test : ndarray of shape (n_samples,)
            Event indicator (0=censored, 1=failure)
        t_test : ndarray of shape (n_samples,)
            Observed time to event or censoring.
        risk_predicted_test : ndarray of shape (n_samples,)
            Predicted risk score used as the marker.
        times : array-like
            Evaluation time grid.
        span : float, optional
            Fraction of subjects in each nearest-neighbour window.
            Defaults to 0.25 * n ** (-0.2).

    Returns
    -------
        DataFrame with columns time, auc (NaN where there are no cases or no controls)
    """
    t_test, e_test, risk = check_survival_arrays(
        t_test, e_test, risk_predicted_test, names=["risk_predicted_test"]
    )
    times = check_eval_times(times)

    if span is None:
        span = 0.25 * len(t_test) ** (-0.2)
    if not 0.0 <= span <= 1.0:
        raise ValueError(f"span must be in [0, 1], got {span}")

    aucs = []
    for t in times:
        auc_value = _nne_auc(t_test, e_test, risk, t, span)
        if np.isnan(auc_value):
            logger.warning("AUC undefined at t=%.4g: no cases or no controls", t)
        aucs.append(auc_value)

    return pd.DataFrame({"time": times, "auc": aucs})
