"""Evaluation metrics used within dnnsurv package."""

from .calibration import brier_score, brier_score_from_survival, integrated_brier_score
from .discrimination import auc_td, concordance_index
from .ipcw import censoring_survival, estimate_ipcw


__all__ = [
    "brier_score",
    "brier_score_from_survival",
    "integrated_brier_score",
    "auc_td",
    "concordance_index",
    "estimate_ipcw",
    "censoring_survival",
]
