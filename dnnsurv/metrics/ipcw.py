import numpy as np
from lifelines import KaplanMeierFitter

# Floor for the censoring survival probability before inversion
epsilon = 1e-4


def estimate_ipcw(km):
    """
    Estimate the censoring distribution used for inverse probability of censoring weights (IPCW).

    Parameters:
    -----------
    km : tuple or KaplanMeierFitter or None
        If `km` is a tuple, it should contain two elements:
        - e_train: array-like, event indicators (1 if the event occurred, 0 if censored).
        - t_train: array-like, corresponding event or censoring times.
        If `km` is already a fitted KaplanMeierFitter instance (or None), it is returned unchanged.

    Returns:
    --------
    kmf : KaplanMeierFitter
        A KaplanMeierFitter fitted to the censoring times, or the input itself.
    """
    if isinstance(km, tuple):
        kmf = KaplanMeierFitter()
        e_train, t_train = km
        # Censoring is the "event" of the censoring distribution
        c_train = (np.asarray(e_train) == 0).astype(int)
        kmf.fit(np.asarray(t_train, dtype=float), event_observed=c_train)
    else:
        kmf = km
    return kmf


def censoring_survival(kmf, times):
    """Censoring survival G(t) at the given times, floored at `epsilon`."""
    times = np.atleast_1d(np.asarray(times, dtype=float))
    g = kmf.survival_function_at_times(times).to_numpy()
    return np.clip(g, epsilon, None)
