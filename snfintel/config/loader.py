import copy
from pathlib import Path
from typing import Optional

import yaml

from .defaults import DEFAULT_CONFIG
from .settings import NarrativeSettings


# -------------------------------------------------
# MAIN CONFIG LOADER
# -------------------------------------------------
def load_config(path: Optional[str]) -> dict:
    """
    Load and merge user config with framework defaults.

    Rules:
    - Defaults must ALWAYS win if user omits fields
    - Every section is OPTIONAL
    - Nested sections merge key by key, scalars replace
    """

    # -------------------------------------------------
    # 1️⃣ Load user config (if provided)
    # -------------------------------------------------
    user_config = {}

    if path:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            user_config = yaml.safe_load(f) or {}

        if not isinstance(user_config, dict):
            raise ValueError("Config file must contain a YAML dictionary")

    # -------------------------------------------------
    # 2️⃣ Merge with defaults (SAFE)
    # -------------------------------------------------
    config = copy.deepcopy(DEFAULT_CONFIG)

    for key, value in user_config.items():
        if isinstance(value, dict) and isinstance(config.get(key), dict):
            config[key].update(value)
        else:
            config[key] = value

    # -------------------------------------------------
    # 3️⃣ Enforce REQUIRED invariants
    # -------------------------------------------------
    config.setdefault("metadata", {})

    return config


def load_settings(path: Optional[str]) -> NarrativeSettings:
    return NarrativeSettings.from_config(load_config(path))
