from .loader import load_config, load_settings
from .defaults import DEFAULT_CONFIG
from .settings import AlertThresholds, Benchmarks, NarrativeSettings

__all__ = [
    "load_config",
    "load_settings",
    "DEFAULT_CONFIG",
    "AlertThresholds",
    "Benchmarks",
    "NarrativeSettings",
]
