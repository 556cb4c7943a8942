import json
import os

DEFAULT_SETTINGS = {
    "db_path": "hexapawn.db",
    "seed": None,
    "log_level": "INFO",
    "log_file": None,
    "think_time": 0.5,
    "node_limit": 400,
}


def settings_path():
    return os.environ.get("HEXAPAWN_SETTINGS", "settings.json")


def load_settings(path=None):
    """Load settings.json over the defaults. A missing file means defaults only."""
    path = path or settings_path()
    settings = dict(DEFAULT_SETTINGS)
    if os.path.exists(path):
        with open(path, "r") as f:
            overrides = json.load(f)
        unknown = set(overrides) - set(DEFAULT_SETTINGS)
        if unknown:
            raise ValueError(f"Unknown settings in {path}: {', '.join(sorted(unknown))}")
        settings.update(overrides)
    return settings


_settings = load_settings()
DB_PATH = _settings["db_path"]
SEED = _settings["seed"]
LOG_LEVEL = _settings["log_level"]
LOG_FILE = _settings["log_file"]
THINK_TIME = _settings["think_time"]
NODE_LIMIT = _settings["node_limit"]
