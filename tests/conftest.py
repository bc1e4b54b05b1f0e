import numpy as np
import pytest

from dnnsurv.data_utils import simulate_survival_data, split_survival_frame


@pytest.fixture
def rng():
    return np.random.default_rng(0)


@pytest.fixture
def simulated():
    df = simulate_survival_data(n_samples=300, n_features=5, censoring_rate=0.05, seed=1)
    x, t, e, feature_names, ids = split_survival_frame(df)
    return x, t, e, feature_names, ids
