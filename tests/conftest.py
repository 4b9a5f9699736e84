"""Shared fixtures for gitpins tests."""

import logging

import pytest

ENV_VARS = (
    'GITPINS_GITHUB_HOST',
    'GITPINS_GITHUB_API_HOST',
    'GITHUB_TOKEN',
    'GITLAB_TOKEN',
    'GITPINS_FORMAT',
)


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Keep the user's config file and host/token variables out of every test."""
    monkeypatch.setenv('GITPINS_CONFIG', str(tmp_path / 'missing-config.toml'))
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)

    # Commands reconfigure root logging onto the runner's stderr
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield tmp_path
    root.handlers[:] = handlers
    root.setLevel(level)
