"""Dataset loading, simulation and torch wrappers used within dnnsurv package."""

from .load_datasets import load_survival_csv, simulate_survival_data, split_survival_frame
from .survival_datasets import SurvivalDataset


__all__ = [
    "load_survival_csv",
    "simulate_survival_data",
    "split_survival_frame",
    "SurvivalDataset",
]
