"""End-to-end DNNSurv workflow: data -> network -> risk scores -> metrics -> explanations."""

import logging
import os

import numpy as np
import pandas as pd
import torch
from sklearn.model_selection import train_test_split
from sklearn.preprocessing import MinMaxScaler, StandardScaler
from sksurv.metrics import concordance_index_ipcw
from sksurv.util import Surv
from tabulate import tabulate
from torch.utils.data import DataLoader

from .data_utils import SurvivalDataset, load_survival_csv, simulate_survival_data, split_survival_frame
from .explain import explain_instances
from .metrics import auc_td, brier_score, concordance_index, integrated_brier_score
from .models import DNNSurvModel
from .training import set_seed, train_model
from .utils.validation import check_eval_times

logger = logging.getLogger(__name__)


def evaluate_model(t_train, e_train, risk_train, t_test, e_test, risk_test, eval_times,
                   auc_span=None, baseline_method="breslow"):
    """
    Evaluate risk scores with the C-index, time-dependent Brier score and time-dependent AUC.

    Args:
        t_train, e_train: Training times and events.
        risk_train: Risk scores of the training subjects.
        t_test, e_test: Evaluation times and events.
        risk_test: Risk scores of the evaluation subjects.
        eval_times: Time points at which to evaluate.
        auc_span: Nearest-neighbour span of the AUC estimator.
        baseline_method: Baseline hazard estimator for the Brier score.

    Returns:
        metrics: dict with "c_index_train", "c_index_test", "ibs" and the
        per-time table "by_time" (time, brier_score, auc, uno_c_index).
    """
    eval_times = check_eval_times(eval_times)

    brier = brier_score(e_train, t_train, risk_train, e_test, t_test, risk_test,
                        eval_times, method=baseline_method)
    auc = auc_td(e_test, t_test, risk_test, eval_times, span=auc_span)
    by_time = brier.merge(auc, on="time")

    survival_train = Surv.from_arrays(np.asarray(e_train) == 1, t_train)
    survival_test = Surv.from_arrays(np.asarray(e_test) == 1, t_test)
    uno = []
    for time in eval_times:
        try:
            uno.append(float(concordance_index_ipcw(
                survival_train, survival_test, estimate=risk_test, tau=time
            )[0]))
        except ValueError as ex:
            logger.warning("Uno's C-index failed at t=%.4g: %s", time, ex)
            uno.append(np.nan)
    by_time["uno_c_index"] = uno

    try:
        ibs = integrated_brier_score(brier)
    except ValueError as ex:
        logger.warning("Integrated Brier score unavailable: %s", ex)
        ibs = np.nan

    return {
        "c_index_train": concordance_index(t_train, e_train, risk_train),
        "c_index_test": concordance_index(t_test, e_test, risk_test),
        "ibs": ibs,
        "by_time": by_time,
    }


def display_metrics_table(metrics, explanations=None):
    """Print the evaluation results as tables."""
    summary = pd.DataFrame([
        {"Metric": "C-index (train)", "Value": f"{metrics['c_index_train']:.3f}"},
        {"Metric": "C-index (test)", "Value": f"{metrics['c_index_test']:.3f}"},
        {"Metric": "Integrated Brier score", "Value": f"{metrics['ibs']:.3f}"},
    ])
    print("\nSummary Performance Metrics:")
    print(tabulate(summary, headers="keys", tablefmt="pretty", showindex=False))

    print("\nTime-dependent metrics (test set):")
    print(tabulate(metrics["by_time"], headers="keys", tablefmt="pretty",
                   showindex=False, floatfmt=".3f"))

    if explanations is not None and len(explanations):
        print("\nLIME feature weights:")
        print(tabulate(explanations, headers="keys", tablefmt="pretty",
                       showindex=False, floatfmt=".4f"))

    print("\nInterpretation:")
    print("- C-index / AUC: 0.5=random, >0.7=good, >0.8=excellent")
    print("- Brier Score: 0=perfect, <0.25=good, >0.25=poor")


def load_data(args):
    if args.data_path:
        return load_survival_csv(args.data_path, args.id_col, args.time_col, args.event_col)
    df = simulate_survival_data(
        n_samples=args.n_samples,
        n_features=args.n_features,
        censoring_rate=args.censoring_rate,
        seed=args.seed,
    )
    logger.info("Simulated %d subjects with %d predictors (%.1f%% censored)",
                len(df), args.n_features, 100.0 * np.mean(df["event"] == 0))
    return split_survival_frame(df)


def run_pipeline(args):
    """
    Run the full workflow described by a parsed configuration.

    Args:
        args: Namespace with the options of training_scripts/train.py

    Returns:
        results: dict with "model", "history", "metrics" and "explanations"
    """
    set_seed(args.seed)
    device = "cuda" if torch.cuda.is_available() and not args.cpu else "cpu"

    x, t, e, feature_names, ids = load_data(args)
    x_train, x_test, t_train, t_test, e_train, e_test, ids_train, ids_test = train_test_split(
        x, t, e, ids, test_size=args.test_size, random_state=args.seed, stratify=e
    )

    if args.scaling.lower() == "standard":
        scaler = StandardScaler()
    elif args.scaling.lower() == "minmax":
        scaler = MinMaxScaler()
    elif args.scaling.lower() == "none":
        scaler = None
    else:
        raise ValueError(f"Scaling method {args.scaling} not supported")
    if scaler is not None:
        x_train = scaler.fit_transform(x_train).astype(np.float32)
        x_test = scaler.transform(x_test).astype(np.float32)

    if args.early_stopping:
        # early stopping monitors a slice of the training data; the test split stays unseen
        x_fit, x_val, t_fit, t_val, e_fit, e_val = train_test_split(
            x_train, t_train, e_train, test_size=args.val_size, random_state=args.seed, stratify=e_train
        )
        val_loader = DataLoader(SurvivalDataset(x_val, t_val, e_val), batch_size=args.batch_size)
    else:
        x_fit, t_fit, e_fit = x_train, t_train, e_train
        val_loader = None
    train_loader = DataLoader(SurvivalDataset(x_fit, t_fit, e_fit),
                              batch_size=args.batch_size, shuffle=True)

    hidden_dimensions = [int(dim) for dim in str(args.hidden_dimensions).split(",") if dim]
    model = DNNSurvModel(
        num_features=x.shape[1],
        hidden_sizes=hidden_dimensions,
        activation=args.activation,
        dropout_rate=args.dropout_rate,
        batch_norm=str(args.batch_norm).lower() == "true",
    ).to(device)

    history = train_model(model, train_loader, val_loader,
                          num_epochs=args.num_epochs,
                          learning_rate=args.learning_rate,
                          l1_reg=args.l1_reg,
                          patience=args.patience,
                          verbose=True)

    risk_train = model.predict_risk(x_train, device=device)
    risk_test = model.predict_risk(x_test, device=device)

    if args.eval_times:
        eval_times = [float(v) for v in str(args.eval_times).split(",") if v]
    else:
        eval_times = np.quantile(t_test[e_test == 1], [0.25, 0.5, 0.75])
    logger.info("Evaluation times: %s", np.round(eval_times, 4))

    metrics = evaluate_model(t_train, e_train, risk_train, t_test, e_test, risk_test,
                             eval_times, auc_span=args.auc_span,
                             baseline_method=args.baseline_method)

    explanations = None
    if args.n_explain > 0:
        n_explain = min(args.n_explain, len(x_test))
        explanations = explain_instances(
            model, x_test[:n_explain], x_train,
            feature_names=feature_names,
            subjects=ids_test[:n_explain],
            num_features=args.lime_num_features,
            num_samples=args.lime_num_samples,
            random_state=args.seed,
            device=device,
        )

    if args.output_dir:
        os.makedirs(args.output_dir, exist_ok=True)
        metrics["by_time"].to_csv(os.path.join(args.output_dir, "metrics_by_time.csv"), index=False)
        pd.DataFrame({"ID": ids_test, "time": t_test, "event": e_test, "risk_score": risk_test}).to_csv(
            os.path.join(args.output_dir, "test_risk_scores.csv"), index=False)
        if explanations is not None:
            explanations.to_csv(os.path.join(args.output_dir, "lime_explanations.csv"), index=False)
        logger.info("Results written to %s", args.output_dir)

    return {"model": model, "history": history, "metrics": metrics, "explanations": explanations}
