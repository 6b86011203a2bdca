#!/usr/bin/env python
"""
Model Search Trainer - Main Entry Point
Trains a model with optional hyperparameter search and cross validation,
or predicts with a previously stored model.
"""
import sys
import logging
import argparse
import traceback
import random
from pathlib import Path

import numpy as np

# Core Infrastructure
from modules.config_manager import ConfigurationManager
from modules.logging_config import LoggingConfigurator
from modules.data_manager import DataManager
from modules.model_store import ModelStore
from modules.prediction_engine import PredictionEngine
from modules.training_engine import TrainingEngine
from utils.cancellation import CancellationToken
from utils.exceptions import ModelSearchException, SearchCancelledError
from utils.file_io import read_dataframe
from utils import constants

COMMANDS = ('train', 'predict')


def parse_arguments(argv=None):
    """
    Parse command-line arguments. ``train`` is assumed when no command is given.

    Returns:
        argparse.Namespace: Parsed command-line arguments.
    """
    argv = list(sys.argv[1:] if argv is None else argv)
    if not argv or argv[0] not in COMMANDS + ('-h', '--help'):
        argv.insert(0, 'train')

    parser = argparse.ArgumentParser(
        description="Model Search Trainer - hyperparameter search, cross validation and model storage",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    commands = parser.add_subparsers(dest='command', required=True)

    train = commands.add_parser('train', help="Train a model from a configuration file",
                                formatter_class=argparse.ArgumentDefaultsHelpFormatter)
    train.add_argument("--config", type=str, default="config/config.json",
                       help="Path to the configuration JSON file")
    train.add_argument("--schema", type=str, default="config/schema.json",
                       help="Path to the configuration JSON schema")
    train.add_argument("--run-id", type=str, default=None,
                       help="Optional run identifier appended to the results directory")
    train.add_argument("--verbose", action="store_true",
                       help="Enable verbose (DEBUG) logging")
    train.add_argument("--dry-run", action="store_true",
                       help="Validate configuration and setup without training")

    predict = commands.add_parser('predict', help="Predict with a stored model",
                                  formatter_class=argparse.ArgumentDefaultsHelpFormatter)
    predict.add_argument("--model-dir", type=str, required=True,
                         help=f"Directory holding stored models (a run's {constants.MODELS_DIR})")
    predict.add_argument("--model-id", type=str, required=True,
                         help="Identifier of the stored model")
    predict.add_argument("--input", type=str, required=True,
                         help="CSV / Parquet / Excel file with the feature columns")
    predict.add_argument("--verbose", action="store_true",
                         help="Enable verbose (DEBUG) logging")

    return parser.parse_args(argv)


def setup_global_determinism(config: dict, logger: logging.Logger):
    """
    Seed the global random generators. Component seeds are derived separately
    by the ConfigurationManager.
    """
    seed = config.get('data', {}).get('seed', ConfigurationManager.DEFAULT_SEED)
    logger.info(f"Setting Global Deterministic Seed: {seed}")
    random.seed(seed)
    np.random.seed(seed)


def setup_run_directory(config: dict, run_id: str = None, logger: logging.Logger = None):
    """
    Create the run directory and its top-level layout.

    Returns:
        tuple: (run_dir Path, run_id string)
    """
    base_results_dir = config.get('outputs', {}).get('base_results_dir', 'results')

    if run_id:
        run_dir = Path(f"{base_results_dir}_{run_id}").absolute()
    else:
        run_dir = Path(base_results_dir).absolute()
        run_id = run_dir.name

    for folder in constants.TOP_LEVEL_RESULT_DIRS:
        (run_dir / folder).mkdir(parents=True, exist_ok=True)
    if logger:
        logger.info(f"Run directory: {run_dir}")

    return run_dir, run_id


def run_train(args) -> int:
    config_manager = ConfigurationManager(config_path=args.config, schema_path=args.schema)
    config = config_manager.load_and_validate()

    if args.verbose:
        config.setdefault('logging', {})['level'] = 'DEBUG'

    logging_configurator = LoggingConfigurator(config)
    logging_configurator.setup()
    logger = logging_configurator.get_logger('trainer')
    logger.info(f"Configuration loaded from: {args.config}")

    run_dir, run_id = setup_run_directory(config, run_id=args.run_id, logger=logger)
    config_manager.run_id = run_id
    config['outputs']['base_results_dir'] = str(run_dir)
    config_manager.save_artifacts(str(run_dir))

    if args.dry_run:
        logger.info("Dry run mode: validation complete. Exiting without training.")
        print("\n[SUCCESS] Configuration validated successfully.")
        return 0

    setup_global_determinism(config, logger)

    data_manager = DataManager(config, logger)
    dataset = data_manager.execute()

    token = CancellationToken()
    training_engine = TrainingEngine(config, logger)
    model_id, outcome = training_engine.execute(
        dataset,
        token=token,
        columns={'features': data_manager.feature_columns, 'labels': data_manager.label_columns},
    )

    summary = {k: v for k, v in outcome.metrics.items() if k != constants.SEARCH_RESULTS_KEY}
    logger.info(f"Final metrics: {summary}")
    logger.info(f"Final hyperparameters: {outcome.hyperparams}")

    if model_id:
        print(f"\n[SUCCESS] Model {model_id} saved to: {training_engine.store.model_dir(model_id)}")
    else:
        print("\n[SUCCESS] Training completed (outputs.save_models is off, nothing stored).")
    return 0


def run_predict(args) -> int:
    model_dir = Path(args.model_dir).absolute()
    config = {
        'outputs': {'base_results_dir': str(model_dir.parent)},
        'logging': {'level': 'DEBUG' if args.verbose else 'INFO', 'log_to_file': False},
    }
    logging_configurator = LoggingConfigurator(config)
    logging_configurator.setup()
    logger = logging_configurator.get_logger('predictor')

    engine = PredictionEngine(config, logger, store=ModelStore(model_dir, logger))
    data_df = read_dataframe(Path(args.input))
    results_df = engine.predict_frame(args.model_id, data_df)

    print(f"\n[SUCCESS] {len(results_df)} predictions written to: {engine.output_dir}")
    return 0


def main(argv=None):
    """
    Parse arguments and dispatch the command.

    Returns:
        int: Exit code (0 success, 1 errors, 130 cancelled or interrupted)
    """
    logger = logging.getLogger('trainer')

    try:
        args = parse_arguments(argv)

        print("\n" + "=" * 80)
        print("    MODEL SEARCH TRAINER")
        print("=" * 80 + "\n")

        if args.command == 'predict':
            return run_predict(args)
        return run_train(args)

    except SearchCancelledError as e:
        print(f"\n[CANCELLED] {e}")
        logger.warning(f"Run cancelled: {e}")
        return 130

    except ModelSearchException as e:
        msg = f"Error: {str(e)}"
        print(f"\n[ERROR] {msg}")
        logger.critical(msg, exc_info=True)
        return 1

    except KeyboardInterrupt:
        print("\n[INTERRUPTED] Run interrupted by user.")
        logger.warning("Run interrupted by user (Ctrl+C)")
        return 130

    except Exception as e:
        msg = f"Unexpected Error: {str(e)}"
        print(f"\n[CRITICAL] {msg}")
        logger.critical(msg, exc_info=True)
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
