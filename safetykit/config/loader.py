"""Build policy snapshots from raw configuration mappings or YAML files."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping

import yaml

from safetykit.config.models import HOST_FIELD_NAMES, Configuration, PolicySnapshot, RuleSet
from safetykit.errors import ConfigurationError, DurationParseError
from safetykit.moderation.durations import FOREVER, parse_duration
from safetykit.rules.domains import BUILTIN_DOMAINS_PATH, load_builtin_domains
from safetykit.rules.wordlist import SUBSTRING_TEMPLATE, WORD_TEMPLATE, compile_word_list

logger = logging.getLogger(__name__)

_TRUE_STRINGS = {"true", "1", "yes", "on"}
_FALSE_STRINGS = {"false", "0", "no", "off", ""}


def configuration_from_mapping(data: Mapping[str, Any]) -> Configuration:
    """Build a :class:`Configuration` from host field names or snake_case keys.

    Unknown keys are ignored. Every recognized value is type-checked before
    anything is built, so a malformed value fails the whole load.

    Raises:
        ConfigurationError: a value has the wrong type.
    """
    types = Configuration.field_types()
    values: dict[str, Any] = {}

    for key, raw in data.items():
        name = HOST_FIELD_NAMES.get(key, key)
        if name not in types:
            continue
        if raw is None:
            continue
        if types[name] is bool:
            values[name] = _coerce_bool(key, raw)
        elif isinstance(raw, str):
            values[name] = raw
        else:
            raise ConfigurationError(
                f"invalid value for {key}: expected a string, got {type(raw).__name__}"
            )

    return Configuration(**values)


def _coerce_bool(key: str, raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        lowered = raw.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    raise ConfigurationError(f"invalid value for {key}: expected a boolean, got {raw!r}")


def validate_duration_setting(value: str, field_name: str) -> None:
    """Accept empty (disabled), the forever flag, or a parseable duration."""
    if value in ("", FOREVER):
        return
    try:
        parse_duration(value)
    except DurationParseError as e:
        raise ConfigurationError(f"invalid duration format for {field_name}: {value!r}") from e


def compile_rules(
    config: Configuration, builtin_domains_path: Path = BUILTIN_DOMAINS_PATH
) -> RuleSet:
    """Compile the three word lists and load the builtin domain list."""
    builtin: frozenset[str] = frozenset()
    if config.builtin_bad_domains:
        builtin = load_builtin_domains(builtin_domains_path)

    return RuleSet(
        bad_words=compile_word_list(config.bad_words_list, WORD_TEMPLATE),
        bad_domains=compile_word_list(config.bad_domains_list, SUBSTRING_TEMPLATE),
        bad_usernames=compile_word_list(config.bad_usernames_list, SUBSTRING_TEMPLATE),
        builtin_domains=builtin,
        use_builtin_domains=config.builtin_bad_domains,
    )


def build_snapshot(
    data: Mapping[str, Any], builtin_domains_path: Path = BUILTIN_DOMAINS_PATH
) -> PolicySnapshot:
    """Validate *data* and compile it into a new :class:`PolicySnapshot`.

    Raises:
        ConfigurationError: any field is invalid; nothing is partially applied.
    """
    config = configuration_from_mapping(data)
    for field_name, value in config.durations().items():
        validate_duration_setting(value, field_name)

    try:
        rules = compile_rules(config, builtin_domains_path)
    except ConfigurationError as e:
        logger.error("Rejected configuration: %s", e)
        raise

    return PolicySnapshot(configuration=config, rules=rules)


def load_config_file(path: str | Path) -> PolicySnapshot:
    """Load a YAML configuration file and compile it."""
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"failed to load configuration file {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"configuration file {path} must contain a mapping")
    return build_snapshot(data)
