import numpy as np
import pytest
import torch

from dnnsurv.explain import explain_instance, explain_instances, make_explainer
from dnnsurv.models import DNNSurvModel


@pytest.fixture
def model_and_data(rng):
    torch.manual_seed(0)
    x = rng.normal(size=(100, 4)).astype(np.float32)
    model = DNNSurvModel(num_features=4, hidden_sizes=[8])
    return model, x


def test_explain_instance_returns_sorted_weights(model_and_data):
    model, x = model_and_data
    explainer = make_explainer(x, ["age", "bmi", "sbp", "chol"], random_state=0)

    result = explain_instance(model, x[0], explainer, num_features=3, num_samples=300)

    assert list(result.columns) == ["feature", "condition", "weight"]
    assert len(result) == 3
    assert set(result["feature"]) <= {"age", "bmi", "sbp", "chol"}
    weights = result["weight"].abs().to_numpy()
    assert np.all(np.diff(weights) <= 0)


def test_explain_instances_long_format(model_and_data):
    model, x = model_and_data

    result = explain_instances(model, x[:2], x, subjects=["a", "b"], num_samples=300,
                               random_state=0)

    assert list(result.columns) == ["subject", "feature", "condition", "weight"]
    assert result["subject"].tolist() == ["a"] * 4 + ["b"] * 4
    assert set(result["feature"]) == {"x1", "x2", "x3", "x4"}


def test_explanation_input_checks(model_and_data):
    model, x = model_and_data
    with pytest.raises(ValueError):
        make_explainer(x, ["only", "three", "names"])
    with pytest.raises(ValueError):
        make_explainer(x[0])
    explainer = make_explainer(x)
    with pytest.raises(ValueError):
        explain_instance(model, x[0, :3], explainer)
    with pytest.raises(ValueError):
        explain_instances(model, x[:2], x, subjects=["a"])


def test_explain_no_subjects(model_and_data):
    model, x = model_and_data

    result = explain_instances(model, x[:0], x)

    assert list(result.columns) == ["subject", "feature", "condition", "weight"]
    assert result.empty
