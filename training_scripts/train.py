import logging

import configargparse

from dnnsurv.pipeline import display_metrics_table, run_pipeline


def parse_args(argv=None):
    parser = configargparse.ArgumentParser(
        description="Training script for the DNNSurv model",
        default_config_files=["config.yaml"],
        config_file_parser_class=configargparse.YAMLConfigFileParser
    )

    # Config file option
    parser.add_argument("-c", "--config", is_config_file=True,
                        help="Path to config file")

    # Data
    parser.add_argument("--data_path", type=str, default=None,
                        help="CSV with columns ID, time, event, predictors; simulated data if omitted")
    parser.add_argument("--id_col", type=str, default="ID",
                        help="Identifier column of the CSV")
    parser.add_argument("--time_col", type=str, default="time",
                        help="Observed time column of the CSV")
    parser.add_argument("--event_col", type=str, default="event",
                        help="Event indicator column of the CSV (1=failure, 0=censored)")
    parser.add_argument("--n_samples", type=int, default=1000,
                        help="Number of simulated subjects")
    parser.add_argument("--n_features", type=int, default=10,
                        help="Number of simulated predictors")
    parser.add_argument("--censoring_rate", type=float, default=0.1,
                        help="Rate of the simulated exponential censoring times")
    parser.add_argument("--test_size", type=float, default=0.3,
                        help="Fraction of subjects held out for evaluation")
    parser.add_argument("--scaling", type=str, default="standard", choices=["minmax", "standard", "none"],
                        help="Data scaling method for the predictors")

    # Network
    parser.add_argument("--hidden_dimensions", type=str, default="32,32",
                        help="Hidden layer dimensions (comma-separated)")
    parser.add_argument("--activation", type=str, default="relu",
                        choices=["relu", "elu", "selu", "tanh", "sigmoid"],
                        help="Activation function of the hidden layers")
    parser.add_argument("--dropout_rate", type=float, default=0.0,
                        help="Dropout rate for model")
    parser.add_argument("--batch_norm", type=str, default="False", choices=["True", "False"],
                        help="Whether to use batch normalization")

    # Training parameters
    parser.add_argument("--num_epochs", type=int, default=100,
                        help="Number of training epochs")
    parser.add_argument("--batch_size", type=int, default=64,
                        help="Batch size for training")
    parser.add_argument("--learning_rate", type=float, default=1e-3,
                        help="Learning rate for optimizer")
    parser.add_argument("--l1_reg", type=float, default=1e-4,
                        help="L1 regularization weight")
    parser.add_argument("--early_stopping", action="store_true",
                        help="Stop when the held-out loss stops improving")
    parser.add_argument("--patience", type=int, default=10,
                        help="Patience for early stopping")
    parser.add_argument("--val_size", type=float, default=0.1,
                        help="Fraction of the training subjects held out for early stopping")
    parser.add_argument("--cpu", action="store_true",
                        help="Train on CPU even when CUDA is available")

    # Evaluation
    parser.add_argument("--eval_times", type=str, default=None,
                        help="Evaluation times (comma-separated); event-time quartiles if omitted")
    parser.add_argument("--auc_span", type=float, default=None,
                        help="Span of the nearest-neighbour AUC estimator")
    parser.add_argument("--baseline_method", type=str, default="breslow", choices=["breslow", "efron"],
                        help="Baseline hazard estimator used for survival probabilities")

    # Explanations
    parser.add_argument("--n_explain", type=int, default=3,
                        help="Number of test subjects explained with LIME")
    parser.add_argument("--lime_num_features", type=int, default=5,
                        help="Number of features per LIME explanation")
    parser.add_argument("--lime_num_samples", type=int, default=5000,
                        help="Number of LIME perturbation samples")

    parser.add_argument("--output_dir", type=str, default=None,
                        help="Directory for CSV outputs")
    parser.add_argument("--seed", type=int, default=42,
                        help="Random seed for reproducibility")
    parser.add_argument("--log_level", type=str, default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Logging level")

    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger(__name__).info("Configuration: %s", vars(args))

    results = run_pipeline(args)
    display_metrics_table(results["metrics"], results["explanations"])


if __name__ == "__main__":
    main()
