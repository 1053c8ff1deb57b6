import json
import os
from datetime import datetime

DEFAULT_CONFIG_PATH = "config/runtime_config.json"

DEFAULT_CONFIG = {
    "tape_size": 512,
    "head_position": 256,
    "max_steps": 1_000_000,
    "compact_fingerprints": False,
    "step_mode": "auto",
    "step_delay": 0.25,
    "trace_steps": False,
    "render_radius": 10,
    "states": 2,
    "symbols": 2,
    "batch_size": 4096,
    "output_directory": "logs/",
    "log_file_prefix": "turing_",
    "rulesets_directory": "rulesets/",
    "results_directory": "results/",
    "pools_directory": "pools/"
}

# Expected types for validation
CONFIG_SCHEMA = {
    "tape_size": int,
    "head_position": int,
    "max_steps": int,
    "compact_fingerprints": bool,
    "step_mode": str,
    "step_delay": (int, float),
    "trace_steps": bool,
    "render_radius": int,
    "states": int,
    "symbols": int,
    "batch_size": int,
    "output_directory": str,
    "log_file_prefix": str,
    "rulesets_directory": str,
    "results_directory": str,
    "pools_directory": str
}

STEP_MODES = ("auto", "manual")


def validate_config(config):
    for key, expected_type in CONFIG_SCHEMA.items():
        if key not in config:
            raise ValueError(f"Missing required configuration key: {key}")
        value = config[key]
        # bool is an int subclass, only accept it where a bool is expected
        if isinstance(value, bool) and expected_type is not bool:
            raise TypeError(f"Config key '{key}' expected {expected_type}, got {type(value)}.")
        if not isinstance(value, expected_type):
            raise TypeError(f"Config key '{key}' expected {expected_type}, got {type(value)}.")

    if config["tape_size"] < 1:
        raise ValueError("tape_size must be at least 1.")
    if not 0 <= config["head_position"] < config["tape_size"]:
        raise ValueError("head_position must lie inside the tape (0 <= head_position < tape_size).")
    if config["max_steps"] < 1:
        raise ValueError("max_steps must be positive.")
    if config["step_delay"] < 0:
        raise ValueError("step_delay may not be negative.")
    if config["step_mode"] not in STEP_MODES:
        raise ValueError(f"step_mode must be one of {STEP_MODES}, got '{config['step_mode']}'.")
    if config["states"] < 1 or config["symbols"] < 1:
        raise ValueError("states and symbols must be positive.")


def load_config(path=DEFAULT_CONFIG_PATH, verbose=True):
    if not os.path.exists(path):
        raise FileNotFoundError(f"Configuration file not found at: {path}")

    with open(path, "r", encoding="utf-8") as f:
        user_config = json.load(f)

    # Merge defaults with overrides
    config = DEFAULT_CONFIG.copy()
    config.update(user_config)

    validate_config(config)

    os.makedirs(config["output_directory"], exist_ok=True)

    if verbose:
        print(f"[{datetime.now()}] Loaded config:")
        for key, value in config.items():
            print(f"  {key}: {value}")

    return config


def save_config(config, path=DEFAULT_CONFIG_PATH):
    validate_config(config)
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(config, f, indent=4)
