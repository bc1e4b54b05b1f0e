"""Deep neural network survival analysis (DNNSurv) with a Cox partial-likelihood loss."""

from . import data_utils, metrics, models, utils
from .explain import explain_instance, explain_instances, make_explainer
from .training import EarlyStopping, set_seed, train_model

__version__ = "0.1.0"

__all__ = [
    "data_utils",
    "metrics",
    "models",
    "utils",
    "explain_instance",
    "explain_instances",
    "make_explainer",
    "EarlyStopping",
    "set_seed",
    "train_model",
]
