# zshstrap/core/config.py

import copy
import json
import logging
from importlib import resources
from pathlib import Path
from typing import Any, Dict

import jsonschema
from jsonschema import Draft7Validator

# Load our JSON Schema as a Python dict
SCHEMA: Dict[str, Any] = json.loads(
    resources.files("zshstrap.schema").joinpath("config.v1.schema.json").read_text(encoding="utf-8")
)

log = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "zshstrap" / "config.json"

# Shipped default; a real gist URL must be configured before syncing works
PLACEHOLDER_REMOTE_URL: str = SCHEMA["properties"]["remote_url"]["default"]

# grab the un-hooked "properties" validator
_default_properties = Draft7Validator.VALIDATORS["properties"]


def _set_defaults(validator, properties, instance, schema):
    """
    jsonschema hook: whenever a property has a 'default', insert a copy of it,
    then delegate to the stock Draft7 `properties` validator.
    """
    if not isinstance(instance, dict):
        return
    for prop, subschema in properties.items():
        if "default" in subschema:
            instance.setdefault(prop, copy.deepcopy(subschema["default"]))

    for error in _default_properties(validator, properties, instance, schema):
        yield error


_DefaultingValidator = jsonschema.validators.extend(
    Draft7Validator,
    {"properties": _set_defaults},
)


def _deep_update(base: dict, updates: dict):
    """
    Recursively update base with updates (mutates base).
    """
    for k, v in updates.items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            _deep_update(base[k], v)
        else:
            base[k] = v


def default_config() -> Dict[str, Any]:
    """Return a fresh dict holding every schema default."""
    config: Dict[str, Any] = {}
    for _ in _DefaultingValidator(SCHEMA).iter_errors(config):
        pass
    return config


def load_config(config_path: Path = DEFAULT_CONFIG_PATH) -> Dict[str, Any]:
    """
    Loads and validates configuration against our JSON Schema.
    Fills in any missing properties with the schema's own default values.

    A missing, unparsable or invalid user file never aborts startup: the
    schema defaults are returned instead and the problem is logged.
    """
    log.debug(f"Attempting to load configuration from: {config_path}")

    config = default_config()
    final_validator = Draft7Validator(SCHEMA)

    if not config_path.is_file():
        log.debug(f"No config at {config_path}; using schema defaults.")
        return config

    try:
        user_config = json.loads(config_path.read_text())
        final_validator.validate(user_config)
    except json.JSONDecodeError as e:
        log.error(f"Error parsing JSON in {config_path}: {e}")
        log.warning("Using schema defaults only.")
        return config
    except jsonschema.ValidationError as e:
        log.error(f"Configuration validation error: {e.message}")
        log.warning("Falling back to schema defaults.")
        return config

    # Merge user values onto our defaults, then fill defaults the user's
    # partial objects may have dropped (e.g. a replaced list of dicts)
    _deep_update(config, user_config)
    for _ in _DefaultingValidator(SCHEMA).iter_errors(config):
        pass
    final_validator.validate(config)

    log.debug("Configuration loaded and validated.")
    return config


def generate_default_config(config_path: Path = DEFAULT_CONFIG_PATH) -> bool:
    config_path.parent.mkdir(parents=True, exist_ok=True)
    try:
        config_path.write_text(json.dumps(default_config(), indent=4) + "\n")
        log.info(f"Default configuration file written to {config_path}.")
        return True
    except OSError as e:
        log.error(f"Failed to write default config: {e}")
        return False
