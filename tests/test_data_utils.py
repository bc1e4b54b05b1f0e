import numpy as np
import pandas as pd
import pytest

from dnnsurv.data_utils import (
    SurvivalDataset,
    load_survival_csv,
    simulate_survival_data,
    split_survival_frame,
)


def test_simulation_schema_and_reproducibility():
    df = simulate_survival_data(n_samples=50, n_features=4, seed=3)
    again = simulate_survival_data(n_samples=50, n_features=4, seed=3)

    assert list(df.columns) == ["ID", "time", "event", "x1", "x2", "x3", "x4"]
    assert (df["time"] >= 0).all()
    assert set(df["event"].unique()) <= {0, 1}
    pd.testing.assert_frame_equal(df, again)


def test_simulation_without_censoring():
    df = simulate_survival_data(n_samples=40, n_features=2, censoring_rate=0.0, seed=0)
    assert (df["event"] == 1).all()


def test_csv_round_trip(tmp_path):
    df = simulate_survival_data(n_samples=20, n_features=3, seed=0)
    path = tmp_path / "sim.csv"
    df.to_csv(path, index=False)

    x, t, e, feature_names, ids = load_survival_csv(str(path))

    assert x.shape == (20, 3)
    assert feature_names == ["x1", "x2", "x3"]
    np.testing.assert_array_equal(ids, df["ID"].to_numpy())
    np.testing.assert_allclose(t, df["time"].to_numpy(), rtol=1e-6)
    np.testing.assert_array_equal(e, df["event"].to_numpy())


def test_custom_column_names():
    df = pd.DataFrame({"futime": [1.0, 2.0], "status": [1, 0], "age": [50.0, 60.0]})
    x, t, e, feature_names, ids = split_survival_frame(df, id_col=None, time_col="futime",
                                                       event_col="status")
    assert feature_names == ["age"]
    np.testing.assert_array_equal(ids, [0, 1])


@pytest.mark.parametrize(
    "frame",
    [
        pd.DataFrame({"ID": [1], "time": [1.0], "x1": [0.0]}),
        pd.DataFrame({"ID": [1], "time": [1.0], "event": [1]}),
        pd.DataFrame({"ID": [1, 2], "time": [1.0, -1.0], "event": [1, 0], "x1": [0.0, 1.0]}),
        pd.DataFrame({"ID": [1, 2], "time": [1.0, 2.0], "event": [1, 3], "x1": [0.0, 1.0]}),
        pd.DataFrame({"ID": [1, 2], "time": [1.0, 2.0], "event": [1, 0], "x1": [0.0, np.nan]}),
    ],
)
def test_malformed_tables_rejected(frame):
    with pytest.raises(ValueError):
        split_survival_frame(frame)


def test_survival_dataset_items():
    ds = SurvivalDataset(np.zeros((3, 2)), [1.0, 2.0, 3.0], [1, 0, 1])
    x, t, e, idx = ds[1]

    assert len(ds) == 3
    assert x.shape == (2,)
    assert t.item() == 2.0
    assert e.item() == 0
    assert idx == 1

    with pytest.raises(ValueError):
        SurvivalDataset(np.zeros((3, 2)), [1.0, 2.0], [1, 0, 1])
