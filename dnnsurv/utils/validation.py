"""Input checks for survival outcome arrays."""

import numpy as np


def check_survival_arrays(t, e, *scores, names=None):
    """
    Validate observed times, event indicators and any per-subject score arrays.

    Args:
        t: Observed times, shape (n_samples,)
        e: Event indicators (1=failure, 0=censored), shape (n_samples,)
        *scores: Additional per-subject arrays that must match t in length
        names: Optional names for the score arrays used in error messages

    Returns
    -------
        Tuple (t, e, *scores) as float, int and float NumPy arrays

    Raises
    ------
        ValueError: If shapes disagree, times are negative or non-finite,
        events are outside {0, 1} or scores contain NaNs.
    """
    t = np.asarray(t, dtype=float)
    e = np.asarray(e)

    if t.ndim != 1:
        raise ValueError(f"Times must be one-dimensional, got shape {t.shape}")
    if e.shape != t.shape:
        raise ValueError(
            f"Events and times must have the same shape, got {e.shape} and {t.shape}"
        )
    if not np.all(np.isfinite(t)):
        raise ValueError("Times must be finite")
    if np.any(t < 0):
        raise ValueError("Times must be non-negative")
    if not np.all(np.isin(e, (0, 1))):
        raise ValueError(f"Events must be 0 or 1, got values {np.unique(e)}")

    names = names or [f"scores_{i}" for i in range(len(scores))]
    checked = []
    for name, s in zip(names, scores):
        s = np.asarray(s, dtype=float).reshape(-1)
        if s.shape != t.shape:
            raise ValueError(
                f"{name} must have one value per subject, got {s.shape[0]} for {t.shape[0]} subjects"
            )
        if np.isnan(s).any():
            raise ValueError(f"{name} contains NaN values")
        checked.append(s)

    return (t, e.astype(int), *checked)


def check_eval_times(times):
    """Return evaluation times as a sorted 1-D float array without duplicates."""
    times = np.atleast_1d(np.asarray(times, dtype=float))
    if times.ndim != 1 or times.size == 0:
        raise ValueError("At least one evaluation time must be given")
    if not np.all(np.isfinite(times)) or np.any(times < 0):
        raise ValueError("Evaluation times must be finite and non-negative")
    return np.unique(times)
