"""Application configuration: YAML file plus environment overrides."""

import logging
import os

import yaml

CONFIG_PATH = os.path.join(os.path.dirname(__file__), "config.yaml")

_DEFAULTS = {
    "database": {"url": "sqlite:///data/contentieux.db"},
    "logging": {
        "level": "INFO",
        "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
    },
}


def load_config(path: str | None = None) -> dict:
    """Load the YAML config, fill missing sections with defaults.

    DATABASE_URL and LOG_LEVEL environment variables override the file.
    """
    with open(path or CONFIG_PATH, encoding="utf-8") as f:
        loaded = yaml.safe_load(f) or {}

    config = {section: dict(values) for section, values in _DEFAULTS.items()}
    for section, values in loaded.items():
        if isinstance(values, dict):
            config.setdefault(section, {}).update(values)
        else:
            config[section] = values

    if os.environ.get("DATABASE_URL"):
        config["database"]["url"] = os.environ["DATABASE_URL"]
    if os.environ.get("LOG_LEVEL"):
        config["logging"]["level"] = os.environ["LOG_LEVEL"]
    return config


def configure_logging(config: dict) -> None:
    """Apply the logging section of the config to the root logger."""
    section = config.get("logging", {})
    level = getattr(logging, str(section.get("level", "INFO")).upper(), logging.INFO)
    logging.basicConfig(level=level, format=section.get("format"), force=True)
