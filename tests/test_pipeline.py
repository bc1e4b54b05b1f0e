import argparse
import os

import numpy as np

from dnnsurv.pipeline import display_metrics_table, evaluate_model, run_pipeline


def make_args(**overrides):
    args = dict(
        data_path=None, id_col="ID", time_col="time", event_col="event",
        n_samples=200, n_features=5, censoring_rate=0.1, test_size=0.3, scaling="standard",
        hidden_dimensions="8,8", activation="relu", dropout_rate=0.0, batch_norm="False",
        num_epochs=5, batch_size=64, learning_rate=1e-2, l1_reg=1e-4,
        early_stopping=False, patience=3, val_size=0.2, cpu=True,
        eval_times=None, auc_span=None, baseline_method="breslow",
        n_explain=1, lime_num_features=3, lime_num_samples=200,
        output_dir=None, seed=0, log_level="INFO",
    )
    args.update(overrides)
    return argparse.Namespace(**args)


def test_evaluate_model_tables(simulated):
    x, t, e, _, _ = simulated
    risk = x[:, 0].astype(float)

    metrics = evaluate_model(t[:200], e[:200], risk[:200], t[200:], e[200:], risk[200:],
                             [1.0, 3.0, 5.0])

    assert list(metrics["by_time"].columns) == ["time", "brier_score", "auc", "uno_c_index"]
    assert 0.5 < metrics["c_index_test"] <= 1.0
    assert np.isfinite(metrics["ibs"])
    display_metrics_table(metrics)


def test_evaluate_model_repeated_times(simulated):
    x, t, e, _, _ = simulated
    risk = x[:, 0].astype(float)

    metrics = evaluate_model(t[:200], e[:200], risk[:200], t[200:], e[200:], risk[200:],
                             [3.0, 1.0, 1.0])

    assert metrics["by_time"]["time"].tolist() == [1.0, 3.0]
    assert len(metrics["by_time"]["uno_c_index"]) == 2


def test_run_pipeline_end_to_end(tmp_path, capsys):
    args = make_args(output_dir=str(tmp_path), eval_times="1.0,3.0")

    results = run_pipeline(args)
    display_metrics_table(results["metrics"], results["explanations"])

    assert len(results["history"]["train_loss"]) == 5
    assert results["metrics"]["by_time"]["time"].tolist() == [1.0, 3.0]
    assert len(results["explanations"]) == 3
    for name in ("metrics_by_time.csv", "test_risk_scores.csv", "lime_explanations.csv"):
        assert os.path.exists(tmp_path / name)
    assert "Summary Performance Metrics" in capsys.readouterr().out


def test_run_pipeline_from_csv(tmp_path):
    from dnnsurv.data_utils import simulate_survival_data

    path = tmp_path / "data.csv"
    simulate_survival_data(n_samples=150, n_features=3, seed=2).to_csv(path, index=False)

    results = run_pipeline(make_args(data_path=str(path), n_explain=0, scaling="minmax"))

    assert results["explanations"] is None
    assert results["model"].num_features == 3


def test_early_stopping_holds_out_training_subjects(monkeypatch):
    import dnnsurv.pipeline as pipeline

    seen = {}
    real_train_model = pipeline.train_model

    def recording_train_model(model, train_loader, val_loader=None, **kwargs):
        seen["n_fit"] = len(train_loader.dataset)
        seen["n_val"] = len(val_loader.dataset)
        return real_train_model(model, train_loader, val_loader, **kwargs)

    monkeypatch.setattr(pipeline, "train_model", recording_train_model)
    results = run_pipeline(make_args(early_stopping=True, n_explain=0, eval_times="1.0,3.0"))

    # 200 subjects: 140 for training, of which 28 monitor early stopping; 60 for testing
    assert seen == {"n_fit": 112, "n_val": 28}
    assert len(results["history"]["val_loss"]) > 0
