"""Local explanations of individual risk predictions with LIME.

The network is treated as a black-box regression function returning the risk
score; LIME perturbs the subject of interest around the reference data and
fits a weighted linear surrogate whose coefficients are the feature weights.
"""

import logging
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd
from lime.lime_tabular import LimeTabularExplainer

logger = logging.getLogger(__name__)


def make_explainer(
    x_reference: np.ndarray,
    feature_names: Optional[Sequence[str]] = None,
    discretize_continuous: bool = True,
    random_state: Optional[int] = None,
) -> LimeTabularExplainer:
    """Build a LIME tabular explainer in regression mode around the reference data."""
    x_reference = np.asarray(x_reference, dtype=float)
    if x_reference.ndim != 2:
        raise ValueError(f"Reference data must be two-dimensional, got shape {x_reference.shape}")
    if feature_names is None:
        feature_names = [f"x{i + 1}" for i in range(x_reference.shape[1])]
    if len(feature_names) != x_reference.shape[1]:
        raise ValueError(
            f"Got {len(feature_names)} feature names for {x_reference.shape[1]} features"
        )

    return LimeTabularExplainer(
        x_reference,
        mode="regression",
        feature_names=list(feature_names),
        discretize_continuous=discretize_continuous,
        random_state=random_state,
    )


def risk_predict_fn(model, device="cpu"):
    """Wrap a trained model as the 2-D array -> 1-D risk score function LIME expects."""
    def predict(x):
        return model.predict_risk(np.asarray(x, dtype=np.float32), device=device)
    return predict


def explain_instance(
    model,
    x_instance: np.ndarray,
    explainer: LimeTabularExplainer,
    num_features: Optional[int] = None,
    num_samples: int = 5000,
    device: str = "cpu",
) -> pd.DataFrame:
    """
    Explain the risk score of one subject.

    Args:
        model: Trained model exposing predict_risk
        x_instance: Predictor vector of the subject, shape (n_features,)
        explainer: Output of make_explainer
        num_features: Number of features in the explanation (all by default)
        num_samples: Number of LIME perturbation samples
        device: Device on which the model runs

    Returns:
        DataFrame with columns feature, condition, weight sorted by
        decreasing absolute weight
    """
    x_instance = np.asarray(x_instance, dtype=float).reshape(-1)
    feature_names = explainer.feature_names
    if x_instance.shape[0] != len(feature_names):
        raise ValueError(
            f"Expected {len(feature_names)} features, got {x_instance.shape[0]}"
        )

    explanation = explainer.explain_instance(
        x_instance,
        risk_predict_fn(model, device),
        num_features=num_features or len(feature_names),
        num_samples=num_samples,
    )
    # label 1 holds the weights for the predicted value in regression mode
    weights = explanation.as_map()[1]
    conditions = explanation.as_list(label=1)

    result = pd.DataFrame({
        "feature": [feature_names[idx] for idx, _ in weights],
        "condition": [cond for cond, _ in conditions],
        "weight": [float(w) for _, w in weights],
    })
    order = result["weight"].abs().sort_values(ascending=False, kind="mergesort").index
    return result.loc[order].reset_index(drop=True)


def explain_instances(
    model,
    x: np.ndarray,
    x_reference: np.ndarray,
    feature_names: Optional[Sequence[str]] = None,
    subjects: Optional[List] = None,
    num_features: Optional[int] = None,
    num_samples: int = 5000,
    random_state: Optional[int] = None,
    device: str = "cpu",
) -> pd.DataFrame:
    """
    Explain the risk scores of several subjects.

    Args:
        model: Trained model exposing predict_risk
        x: Predictors of the subjects to explain, shape (n_subjects, n_features)
        x_reference: Reference data for the LIME sampling distribution
        feature_names: Predictor names
        subjects: Identifiers of the rows of x (row positions by default)

    Returns:
        Long DataFrame with columns subject, feature, condition, weight
    """
    x = np.atleast_2d(np.asarray(x, dtype=float))
    subjects = list(subjects) if subjects is not None else list(range(len(x)))
    if len(subjects) != len(x):
        raise ValueError(f"Got {len(subjects)} subject identifiers for {len(x)} rows")

    if len(x) == 0:
        return pd.DataFrame(columns=["subject", "feature", "condition", "weight"])

    explainer = make_explainer(x_reference, feature_names, random_state=random_state)
    frames = []
    for subject, row in zip(subjects, x):
        logger.debug("Explaining subject %s", subject)
        frame = explain_instance(model, row, explainer, num_features, num_samples, device)
        frame.insert(0, "subject", subject)
        frames.append(frame)

    return pd.concat(frames, ignore_index=True)
