"""
Configuration for the command line tool.
"""

import json
from pathlib import Path

# Default paths (can be overridden)
_DATA_DIR = Path(__file__).parent.parent
CONFIG_FILE = _DATA_DIR / "config.json"

DEFAULT_CONFIG = {
    "fixtures_dir": "tests/fixtures/lodging",
    "tesseract_lang": "eng",
    "log_level": "WARNING",
    "indent": 2,
}


def load_config(config_file=None):
    """Load configuration from file, falling back to defaults.

    Args:
        config_file: Path to config file. Defaults to config.json.

    Returns:
        Config dict with every default key present.
    """
    if config_file is None:
        config_file = CONFIG_FILE

    config = dict(DEFAULT_CONFIG)
    config_path = Path(config_file)
    if not config_path.exists():
        return config

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        print(f"Warning: {config_path.name} is corrupted ({e}), using defaults")
        return config
    except (OSError, UnicodeDecodeError) as e:
        print(f"Warning: could not read {config_path.name} ({e}), using defaults")
        return config

    if not isinstance(data, dict):
        print(f"Warning: {config_path.name} has invalid format, using defaults")
        return config

    config.update({k: v for k, v in data.items() if k in DEFAULT_CONFIG})
    return config


def save_config(config, config_file=None):
    """Save configuration to file.

    Args:
        config: Config dict to save.
        config_file: Path to config file. Defaults to config.json.
    """
    if config_file is None:
        config_file = CONFIG_FILE

    with open(config_file, 'w', encoding='utf-8') as f:
        json.dump(config, f, indent=2)
