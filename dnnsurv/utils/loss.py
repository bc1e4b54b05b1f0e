import torch

from .risk_set import risk_set_mask, tied_event_mask


def _masked_logsumexp(values, mask):
    """Row-wise log(sum(exp(values[mask[k]]))) for a (n_points, n) boolean mask."""
    masked = values[None, :].expand(mask.shape[0], -1).masked_fill(~mask, float("-inf"))
    return torch.logsumexp(masked, dim=1)


def negative_log_likelihood_loss(
    risk_scores, times, events, reduction="sum", ties="efron", eps=1e-8
):
    """
    Computes the negative Cox partial log-likelihood.

    Tied failure times are handled with Efron's approximation: for a group of
    d failures at the same time, the k-th tied failure (k = 0..d-1) sees the
    risk-set sum reduced by k/d of the summed hazard of the tied group.
    Censored subjects only enter the risk-set sums.

    Args:
        risk_scores: Tensor of shape (batch_size, 1) or (batch_size,) with the
            predicted log hazard ratios
        times: Event/censoring times (batch_size,)
        events: Event indicators (1=failure, 0=censored) (batch_size,)
        reduction: "sum" for the total, "mean" to divide by the number of failures
        ties: "efron" or "breslow"
        eps: Floor applied to the Efron-reduced risk-set fraction before the log

    Returns
    -------
        Negative log partial likelihood (scalar tensor)
    """
    if reduction not in ("sum", "mean"):
        raise ValueError(f"Unknown reduction {reduction!r}, expected 'sum' or 'mean'")
    if ties not in ("efron", "breslow"):
        raise ValueError(f"Unknown ties method {ties!r}, expected 'efron' or 'breslow'")

    risk = risk_scores.reshape(-1)
    times = times.reshape(-1).to(risk.device)
    events = events.reshape(-1).to(risk.device)
    if times.shape[0] != risk.shape[0] or events.shape[0] != risk.shape[0]:
        raise ValueError(
            f"Got {risk.shape[0]} risk scores for {times.shape[0]} times "
            f"and {events.shape[0]} events"
        )

    event_mask = events > 0
    n_events = int(event_mask.sum().item())
    if n_events == 0:
        # keep the graph attached so backward() still works on event-free batches
        return (risk * 0.0).sum()

    event_times = times[event_mask]
    log_risk_sum = _masked_logsumexp(risk, risk_set_mask(times, event_times))

    if ties == "efron":
        # log(R - k/d * D) = log(R) + log(1 - k/d * D/R)
        tied = tied_event_mask(times, events, event_times)
        n_tied = tied.sum(dim=1).to(risk.dtype)
        tied_fraction = torch.exp(_masked_logsumexp(risk, tied) - log_risk_sum)
        # position of each failure within its tied group, 0..d-1
        same_time = (event_times[:, None] == event_times[None, :]).to(risk.dtype)
        rank_in_group = torch.tril(same_time, diagonal=-1).sum(dim=1)
        log_risk_sum = log_risk_sum + torch.log(
            torch.clamp(1.0 - rank_in_group / n_tied * tied_fraction, min=eps)
        )

    loss = -(risk[event_mask] - log_risk_sum).sum()

    if reduction == "mean":
        loss = loss / n_events
    return loss


def breslow_negative_log_likelihood_loss(risk_scores, times, events, reduction="sum", eps=1e-8):
    """Classical Cox negative partial log-likelihood (Breslow handling of ties)."""
    return negative_log_likelihood_loss(
        risk_scores, times, events, reduction=reduction, ties="breslow", eps=eps
    )


def compute_l1_penalty(model, include_bias=False):
    """
    Compute L1 regularization penalty on model parameters

    Args:
        model: Neural network model
        include_bias: Whether to include bias terms in regularization

    Returns
    -------
        L1 penalty term
    """
    l1_reg = 0.0
    for name, param in model.named_parameters():
        if param.requires_grad:
            if not include_bias and "bias" in name:
                continue
            l1_reg += torch.sum(torch.abs(param))
    return l1_reg


def cox_loss(
    risk_scores,
    times,
    events,
    model=None,
    l1_reg=0.0,
    reduction="mean",
    ties="efron",
    eps=1e-8,
):
    """
    Training objective: Cox negative partial log-likelihood plus L1 penalty.

    Args:
        risk_scores: Predicted log hazard ratios (batch_size, 1)
        times: Event/censoring times (batch_size,)
        events: Event indicators (batch_size,)
        model: Model whose weights are penalized; required when l1_reg > 0
        l1_reg: L1 penalty coefficient
        reduction, ties, eps: Passed to negative_log_likelihood_loss

    Returns
    -------
        Scalar loss tensor
    """
    loss = negative_log_likelihood_loss(
        risk_scores, times, events, reduction=reduction, ties=ties, eps=eps
    )
    if l1_reg > 0:
        if model is None:
            raise ValueError("A model is required to compute the L1 penalty")
        loss = loss + l1_reg * compute_l1_penalty(model)
    return loss
