#!/usr/bin/env python3

import os
import json
import tomllib
from pathlib import Path

import logging
import sys

import yaml

from .exit_codes import ConfigError

logger = logging.getLogger("gitpins")

DEFAULT_GITHUB_HOST = "https://github.com"
DEFAULT_GITHUB_API_HOST = "https://api.github.com"

# Environment variables consulted when the config leaves a value empty
ENV_FALLBACKS = {
    ("github", "host"): "GITPINS_GITHUB_HOST",
    ("github", "api_host"): "GITPINS_GITHUB_API_HOST",
    ("github", "token"): "GITHUB_TOKEN",
    ("gitlab", "token"): "GITLAB_TOKEN",
}


def configure_logging(level=None, config=None):
    """Configure root logging for command line use."""
    if config is None:
        config = get_default_config()
    log_config = config.get("logging", {})
    level = level or log_config.get("level", "WARNING")
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.WARNING),
        format=log_config.get("format", "%(levelname)s: %(message)s"),
        handlers=[
            logging.StreamHandler(sys.stderr) # Default to stderr
        ],
        force=True,
    )


def get_config_path():
    """Get the path to the configuration file.

    Checks in order:
    1. GITPINS_CONFIG environment variable
    2. ~/.gitpins/ directory
    """
    if 'GITPINS_CONFIG' in os.environ:
        return Path(os.environ['GITPINS_CONFIG'])

    gitpins_dir = Path.home() / '.gitpins'
    for filename in ['config.toml', 'config.yaml', 'config.yml', 'config.json']:
        path = gitpins_dir / filename
        if path.exists():
            return path

    return gitpins_dir / 'config.toml'


def load_config():
    """Load configuration from file, then fill empty values from the environment."""
    config_path = get_config_path()

    config = get_default_config()

    if config_path.exists():
        try:
            if config_path.suffix.lower() in ['.toml']:
                with open(config_path, 'rb') as f:
                    file_config = tomllib.load(f)
            elif config_path.suffix.lower() in ['.yaml', '.yml']:
                with open(config_path, 'r') as f:
                    file_config = yaml.safe_load(f) or {}
            else:
                with open(config_path, 'r') as f:
                    file_config = json.load(f)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ConfigError(f"Error loading config from {config_path}: {e}") from e

        if not isinstance(file_config, dict):
            raise ConfigError(f"Config file {config_path} must contain a mapping")
        config = merge_configs(config, file_config)

    return apply_env_fallbacks(config)


def get_default_config():
    """Get default configuration."""
    return {
        "github": {
            "host": "",
            "api_host": "",
            "token": "",
        },
        "gitlab": {
            "token": "",
        },
        "logging": {
            "level": "WARNING",
            "format": "%(levelname)s: %(message)s"
        },
    }


def merge_configs(base_config, override_config):
    """
    Recursively merge two configuration dictionaries.

    Args:
        base_config (dict): Base configuration
        override_config (dict): Configuration to merge/override with

    Returns:
        dict: Merged configuration
    """
    merged = base_config.copy()

    for key, value in override_config.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = value

    return merged


def apply_env_fallbacks(config):
    """
    Fill configuration values that are still empty from environment variables.

    Explicit configuration always wins; the environment is only a fallback.
    See ENV_FALLBACKS for the variable names.
    """
    for (section, key), env_key in ENV_FALLBACKS.items():
        current_level = config.setdefault(section, {})
        if current_level.get(key):
            continue
        value = os.environ.get(env_key)
        if value:
            current_level[key] = value

    return config


def get_github_url(config=None):
    """Web host used for GitHub clone and archive URLs."""
    config = config if config is not None else load_config()
    return (config["github"].get("host") or DEFAULT_GITHUB_HOST).rstrip("/")


def get_github_api_url(config=None):
    """API host used for GitHub release tarballs and commit lookups."""
    config = config if config is not None else load_config()
    return (config["github"].get("api_host") or DEFAULT_GITHUB_API_HOST).rstrip("/")


def get_github_token(config=None):
    config = config if config is not None else load_config()
    return config["github"].get("token") or None


def get_gitlab_token(config=None):
    config = config if config is not None else load_config()
    return config["gitlab"].get("token") or None
