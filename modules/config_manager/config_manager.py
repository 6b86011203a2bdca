import json
import os
import hashlib
import sys
import logging
import jsonschema
import psutil  # Required for memory awareness
from datetime import datetime
from pathlib import Path
from typing import Dict, Any, Optional

from modules.hpo_search_engine.model_spec import ModelSpec
from modules.hpo_search_engine.search_space import search_space_size
from modules.model_factory import ModelFactory
from utils.exceptions import ConfigurationError
from utils.file_io import write_json
from utils import constants

class ConfigurationManager:
    """
    Manages system configuration loading, validation, and access.
    Acts as the single source of truth and safety guard for a training run.

    Every rule that can be checked without touching data is checked here, so
    a bad configuration fails before any file is read or model fitted.
    """

    # Default Resource Limits (Safety Guardrails)
    DEFAULT_MAX_HPO_CONFIGS = 1000  # Prevent accidental combinatoric explosions
    DEFAULT_SEED = 42

    def __init__(self, config_path: str = "config/config.json",
                 schema_path: str = "config/schema.json"):
        """
        Initialize the ConfigurationManager.

        Args:
            config_path (str): Path to the user configuration JSON.
            schema_path (str): Path to the JSON schema definition.
        """
        self.config_path = config_path
        self.schema_path = schema_path
        self.config: Dict[str, Any] = {}
        self.schema: Dict[str, Any] = {}
        self.run_id: Optional[str] = None
        self.logger = logging.getLogger("config_manager")

    def load_and_validate(self) -> Dict[str, Any]:
        """
        Main entry point. Loads config, validates schema/logic/resources,
        applies defaults, and propagates seeds.

        Returns:
            Dict[str, Any]: The fully validated and hydrated configuration.

        Raises:
            ConfigurationError: If any validation step fails.
        """
        config = self._load_json(self.config_path)
        self.schema = self._load_json(self.schema_path)
        return self.validate(config)

    def validate(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Validate an in-memory configuration.

        The schema check runs only when a schema has been loaded.
        """
        self.config = config

        # 1. Structural Validation (Schema)
        if self.schema:
            self._validate_schema()

        # 2. Logical Validation (Business Rules & Bounds)
        self._validate_logic()

        # 3. Resource Validation (Prevent Exhaustion)
        self._validate_resources()

        # 4. Internal Seed Propagation (Reproducibility)
        self._propagate_seeds()

        return self.config

    def save_artifacts(self, output_dir: str) -> None:
        """
        Save configuration artifacts to the run directory for full reproducibility.

        Saves:
        1. config_used.json: The exact config object in memory.
        2. config_hash.txt: SHA256 hash for versioning.
        3. run_metadata.json: Environment details (Python version, Platform, etc.).
        """
        config_dir = Path(output_dir) / constants.CONFIG_DIR
        config_dir.mkdir(parents=True, exist_ok=True)

        write_json(self.config, config_dir / constants.CONFIG_USED_FILE)

        config_str = json.dumps(self.config, sort_keys=True)
        config_hash = hashlib.sha256(config_str.encode()).hexdigest()

        with open(config_dir / constants.CONFIG_HASH_FILE, 'w') as f:
            f.write(config_hash)

        metadata = {
            'run_id': self.run_id,
            'start_time': datetime.now().isoformat(),
            'python_version': sys.version,
            'platform': sys.platform,
            'config_hash': config_hash,
            'working_directory': os.getcwd()
        }
        write_json(metadata, config_dir / constants.RUN_METADATA_FILE)

    def _load_json(self, path: str) -> Dict[str, Any]:
        """Safely load a JSON file."""
        if not os.path.exists(path):
            raise ConfigurationError(f"File not found: {path}")
        try:
            with open(path, 'r') as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in {path}: {str(e)}")

    def _validate_schema(self) -> None:
        """Validate config structure against JSON schema."""
        try:
            jsonschema.validate(instance=self.config, schema=self.schema)
        except jsonschema.ValidationError as e:
            raise ConfigurationError(f"Schema validation failed: {e.message}")

    def _validate_logic(self) -> None:
        """Comprehensive logical validation."""
        # --- Data Section ---
        data = self.config.get('data', {})
        if not data.get('file_path'):
            raise ConfigurationError("Data 'file_path' must be specified and non-empty.")
        label_columns = data.get('label_columns')
        if not label_columns:
            raise ConfigurationError("Data 'label_columns' must list at least one column.")
        overlap = set(label_columns) & set(data.get('feature_columns') or [])
        if overlap:
            raise ConfigurationError(f"Columns cannot be both features and labels: {sorted(overlap)}")

        test_size = data.get('test_size', constants.DEFAULT_TEST_SIZE)
        if isinstance(test_size, bool) or not isinstance(test_size, (int, float)) or test_size < 0:
            raise ConfigurationError(f"test_size must be a non-negative number, got {test_size!r}")
        if test_size > 1 and test_size != int(test_size):
            raise ConfigurationError(f"test_size above 1 is a row count and must be whole, got {test_size}")

        sampling = data.get('test_sampling', constants.DEFAULT_TEST_SAMPLING)
        if sampling not in constants.TEST_SAMPLING_MODES:
            raise ConfigurationError(
                f"test_sampling must be one of {list(constants.TEST_SAMPLING_MODES)}, got {sampling!r}"
            )
        if data.get('seed', self.DEFAULT_SEED) < 0:
            raise ConfigurationError("Data seed must be non-negative.")

        # --- Model Section ---
        if not self.config.get('model', {}).get('algorithm'):
            raise ConfigurationError("Model configuration missing 'algorithm' name.")
        model_spec = ModelSpec.from_config(self.config)
        model_spec.resolve_search_args()
        # Raises UnsupportedAlgorithmError for unknown (runtime, task, algorithm) combinations
        ModelFactory.get_fit_function(model_spec.runtime, model_spec.task, model_spec.algorithm)

        # Execution validation
        execution = self.config.get('execution', {})
        for name in execution.get('cancel_signals', []):
            if not name.startswith('SIG'):
                raise ConfigurationError(f"execution.cancel_signals entries must be signal names, got {name!r}")

    def _validate_resources(self) -> None:
        """
        Validate against system resources.
        Calculates the number of configurations to train and ensures it fits within safe limits.
        The memory limit is stored back for the DataManager.
        """
        resources = self.config.get('resources', {})
        model_spec = ModelSpec.from_config(self.config)
        n_iter = model_spec.resolve_search_args()['n_iter']

        # 1. HPO Grid Explosion Check (also rejects hyperparams/search_params collisions).
        # Random search counts its sample, not the full grid.
        total_configs = search_space_size(
            model_spec.hyperparams, model_spec.search_params, model_spec.search, n_iter
        )
        max_configs = resources.get('max_hpo_configs', self.DEFAULT_MAX_HPO_CONFIGS)

        if total_configs > max_configs:
            raise ConfigurationError(
                f"HPO Grid Explosion Detected! Total configurations ({total_configs}) exceeds "
                f"safety limit ({max_configs}). Reduce search_params or increase 'resources.max_hpo_configs'."
            )
        self.logger.info(f"HPO Grid Size validated: {total_configs} combinations (Limit: {max_configs})")

        # 2. Memory Limits Check
        system_ram_mb = int(psutil.virtual_memory().total / (1024 * 1024))
        # Default safety buffer: 80% of system RAM
        safe_ram_limit = int(system_ram_mb * 0.8)

        config_max_ram = resources.get('max_memory_mb', safe_ram_limit)

        if config_max_ram > system_ram_mb:
            self.logger.warning(
                f"Configured max_memory_mb ({config_max_ram}MB) exceeds physical system RAM ({system_ram_mb}MB). "
                "This may lead to instability."
            )

        # Inject the safe limit back into config if not present, for other modules to use
        self.config.setdefault('resources', {})
        self.config['resources']['max_memory_mb'] = config_max_ram

    def _propagate_seeds(self) -> None:
        """
        Propagate the master seed to internal components for reproducible runs.
        Uses a large offset so the split and the random search draw from unrelated streams.
        """
        master_seed = self.config.get('data', {}).get('seed', self.DEFAULT_SEED)

        self.config['_internal_seeds'] = {
            'split': master_seed,
            'search': master_seed + 1000,
        }
        self.logger.debug(f"Seeds propagated from master ({master_seed}): {self.config['_internal_seeds']}")
