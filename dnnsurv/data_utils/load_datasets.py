import logging
from typing import List, Optional, Tuple

import numpy as np
import pandas as pd

from ..utils.validation import check_survival_arrays

logger = logging.getLogger(__name__)


def split_survival_frame(
    df: pd.DataFrame,
    id_col: Optional[str] = "ID",
    time_col: str = "time",
    event_col: str = "event",
) -> Tuple[np.ndarray, np.ndarray, np.ndarray, List[str], np.ndarray]:
    """
    Split a survival table into predictors and outcomes.

    The table holds one subject per row with an identifier, the observed time,
    the event indicator (1=failure, 0=censored) and the predictor columns.

    Returns:
        x (np.ndarray): Feature matrix of shape (n_samples, n_features).
        t (np.ndarray): Observed times of shape (n_samples,).
        e (np.ndarray): Event indicators of shape (n_samples,).
        feature_names (List[str]): Names of the predictor columns.
        ids (np.ndarray): Subject identifiers (row positions if id_col is None).
    """
    required = [c for c in (id_col, time_col, event_col) if c is not None]
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise ValueError(f"Missing required columns: {missing}")

    feature_names = [c for c in df.columns if c not in required]
    if not feature_names:
        raise ValueError("No predictor columns found")
    if df[feature_names + [time_col, event_col]].isna().any().any():
        raise ValueError("Missing values found in survival table")

    x = df[feature_names].to_numpy(dtype=np.float32)
    t, e = check_survival_arrays(df[time_col].to_numpy(), df[event_col].to_numpy())
    ids = df[id_col].to_numpy() if id_col is not None else np.arange(len(df))

    return x, t.astype(np.float32), e, feature_names, ids


def load_survival_csv(
    file_path: str,
    id_col: Optional[str] = "ID",
    time_col: str = "time",
    event_col: str = "event",
):
    """
    Load a survival dataset stored as CSV with columns
    identifier, time, event, predictor_1..predictor_D.

    Returns the same tuple as split_survival_frame.
    """
    df = pd.read_csv(file_path)
    x, t, e, feature_names, ids = split_survival_frame(df, id_col, time_col, event_col)
    logger.info(
        "Loaded %d subjects with %d predictors from %s (%.1f%% censored)",
        len(t), len(feature_names), file_path, 100.0 * np.mean(e == 0),
    )
    return x, t, e, feature_names, ids


def simulate_survival_data(
    n_samples: int = 1000,
    n_features: int = 10,
    censoring_rate: float = 0.1,
    baseline_hazard: float = 0.1,
    seed: Optional[int] = None,
) -> pd.DataFrame:
    """
    Simulate a proportional-hazards dataset with a nonlinear log hazard.

    Predictors are standard normal. The log hazard ratio is
    x1 + 0.5 * x2**2 - 0.5 * x3 * x4 + sin(x5) (terms dropped when fewer
    predictors are requested); the remaining predictors are noise. Event times
    are exponential with rate baseline_hazard * exp(log hazard) and censoring
    times are independent exponentials with rate censoring_rate.

    Returns:
        DataFrame with columns ID, time, event, x1..xD
    """
    if n_samples < 1 or n_features < 1:
        raise ValueError("n_samples and n_features must be positive")
    rng = np.random.default_rng(seed)
    x = rng.standard_normal((n_samples, n_features))

    log_hazard = x[:, 0].copy()
    if n_features >= 2:
        log_hazard += 0.5 * x[:, 1] ** 2
    if n_features >= 4:
        log_hazard -= 0.5 * x[:, 2] * x[:, 3]
    if n_features >= 5:
        log_hazard += np.sin(x[:, 4])

    event_time = rng.exponential(1.0 / (baseline_hazard * np.exp(log_hazard)))
    if censoring_rate > 0:
        censor_time = rng.exponential(1.0 / censoring_rate, size=n_samples)
    else:
        censor_time = np.full(n_samples, np.inf)

    df = pd.DataFrame(x, columns=[f"x{i + 1}" for i in range(n_features)])
    df.insert(0, "event", (event_time <= censor_time).astype(int))
    df.insert(0, "time", np.minimum(event_time, censor_time))
    df.insert(0, "ID", np.arange(1, n_samples + 1))
    return df
