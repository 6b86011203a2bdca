# utils/constants.py

# --- Top-Level Result Directories ---
# Sequentially numbered for proper sorting with clear, self-explanatory names

CONFIG_DIR = "01_RunConfiguration"        # Run config, metadata, seeds
MODELS_DIR = "02_TrainedModels"           # One sub-directory per model record
PREDICTIONS_DIR = "03_ModelPredictions"   # Batch predictions from stored models

TOP_LEVEL_RESULT_DIRS = [
    CONFIG_DIR,
    MODELS_DIR,
    PREDICTIONS_DIR,
]

# --- File Names ---
CONFIG_USED_FILE = "config_used.json"
CONFIG_HASH_FILE = "config_hash.txt"
RUN_METADATA_FILE = "run_metadata.json"

MODEL_RECORD_FILE = "model.json"
ESTIMATOR_FILE = "estimator.bin"
METRICS_FILE = "metrics.json"
HYPERPARAMS_FILE = "hyperparams.json"
SEARCH_RESULTS_FILE = "search_results.parquet"

# --- Search Defaults ---
DEFAULT_N_ITER = 10
DEFAULT_CV_WITH_SEARCH = 5
DEFAULT_CV_WITHOUT_SEARCH = 1
SEARCH_ARG_KEYS = ("n_iter", "cv")

# Metric used to rank passes, per task
TARGET_METRICS = {
    "regression": "r2",
    "classification": "f1",
}

# Key under which the search report is nested in the metrics document
SEARCH_RESULTS_KEY = "search_results"

# --- Data Partitioning ---
TEST_SAMPLING_MODES = ("first", "last", "random")
DEFAULT_TEST_SIZE = 0.25
DEFAULT_TEST_SAMPLING = "last"
