"""Risk-set bookkeeping shared by the Cox loss and the baseline hazard estimator.

Both functions only use indexing and comparison operators, so they accept
NumPy arrays as well as torch tensors and return the same kind of object.
"""


def risk_set_mask(times, at):
    """
    Boolean matrix of risk-set membership.

    Args:
        times: Observed times of shape (n_subjects,)
        at: Time points of shape (n_points,) at which the risk sets are taken

    Returns
    -------
        Matrix of shape (n_points, n_subjects); entry [k, j] is True when
        subject j is still under observation at at[k] (times[j] >= at[k]).
    """
    return at[:, None] <= times[None, :]


def tied_event_mask(times, events, at):
    """
    Boolean matrix of failures observed exactly at each time point.

    Args:
        times: Observed times of shape (n_subjects,)
        events: Event indicators (1=failure, 0=censored) of shape (n_subjects,)
        at: Time points of shape (n_points,)

    Returns
    -------
        Matrix of shape (n_points, n_subjects); entry [k, j] is True when
        subject j failed at at[k].
    """
    return (at[:, None] == times[None, :]) & (events[None, :] > 0)
