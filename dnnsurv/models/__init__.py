"""Models available in the dnnsurv package."""

from .dnnsurv_model import DNNSurvModel, FCLayer, get_activation


__all__ = ["DNNSurvModel", "FCLayer", "get_activation"]
