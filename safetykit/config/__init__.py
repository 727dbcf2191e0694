"""Configuration snapshots: models, loading and the thread-safe store."""

from safetykit.config.loader import build_snapshot, configuration_from_mapping, load_config_file
from safetykit.config.models import Configuration, PolicySnapshot, RuleSet
from safetykit.config.store import ConfigStore

__all__ = [
    "ConfigStore",
    "Configuration",
    "PolicySnapshot",
    "RuleSet",
    "build_snapshot",
    "configuration_from_mapping",
    "load_config_file",
]
