"""
Configuration loader for the QOF CVD Earnings Analysis project.
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Any

# Get project root directory
PROJECT_ROOT = Path(__file__).parent.parent

# Define paths
CONFIG_DIR = PROJECT_ROOT / "config"
DATA_DIR = PROJECT_ROOT / "data"
DATA_RAW_DIR = DATA_DIR / "raw"
DATA_OUTPUTS_DIR = DATA_DIR / "outputs"

# Valid prevalence scenario levels (0 = scenario disabled)
PREVALENCE_LEVEL_RANGE = (0, 3)


def load_config(config_file: str = "config.yaml") -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        config_file: Name of the configuration file

    Returns:
        Dictionary containing configuration parameters
    """
    config_path = CONFIG_DIR / config_file

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        config = yaml.safe_load(f)

    return config or {}


def get_dataset_path() -> Path:
    """
    Return the path of the practice dataset.

    The ``QOF_DATA_FILE`` environment variable takes precedence over
    ``data.practice_file`` in config. Relative paths resolve against the
    project root.
    """
    override = os.environ.get('QOF_DATA_FILE')
    if override:
        return Path(override)

    config = load_config()
    filename = config.get('data', {}).get('practice_file', 'data/raw/qof_data.csv')
    path = Path(filename)
    if not path.is_absolute():
        path = PROJECT_ROOT / path
    return path


def get_server_settings() -> Dict[str, Any]:
    """Get API server host/port settings from config (``PORT`` overrides)."""
    config = load_config()
    server = dict(config.get('server', {}))
    server.setdefault('host', '127.0.0.1')
    server.setdefault('port', 8080)

    port = os.environ.get('PORT')
    if port:
        try:
            server['port'] = int(port)
        except ValueError as exc:
            raise ValueError(f"PORT must be an integer, got '{port}'.") from exc

    return server


def get_search_params() -> Dict[str, int]:
    """Get practice search limits from config."""
    config = load_config()
    search = config.get('search', {})

    return {
        'max_results': int(search.get('max_results', 10)),
        'min_term_length': int(search.get('min_term_length', 2)),
    }


def get_prevalence_params() -> Dict[str, Any]:
    """Get validated prevalence scenario levels and the default level."""
    config = load_config()
    prevalence = config.get('prevalence', {})

    levels = prevalence.get('levels', [0, 1, 2, 3])
    try:
        levels = [int(level) for level in levels]
    except (TypeError, ValueError) as exc:
        raise ValueError("Prevalence levels must be integers.") from exc

    low, high = PREVALENCE_LEVEL_RANGE
    out_of_range = [level for level in levels if not low <= level <= high]
    if out_of_range:
        raise ValueError(
            f"Prevalence levels must be between {low} and {high}; got {out_of_range}."
        )

    default_level = int(prevalence.get('default_level', 1))
    if default_level not in levels:
        raise ValueError(
            f"Default prevalence level {default_level} is not one of {levels}."
        )

    return {
        'levels': levels,
        'default_level': default_level,
    }


def ensure_directories():
    """Create necessary directories if they don't exist."""
    directories = [
        DATA_RAW_DIR,
        DATA_OUTPUTS_DIR,
        DATA_OUTPUTS_DIR / "figures",
        DATA_OUTPUTS_DIR / "reports",
        DATA_OUTPUTS_DIR / "dashboard",
    ]

    for directory in directories:
        directory.mkdir(parents=True, exist_ok=True)


if __name__ == "__main__":
    # Test configuration loading
    config = load_config()
    print("Configuration loaded successfully!")
    print(f"Project: {config['project']['name']}")
    print(f"Dataset: {get_dataset_path()}")

    ensure_directories()
    print("Directory structure verified!")
