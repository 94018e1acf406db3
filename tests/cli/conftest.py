# The MIT License (MIT)
# Copyright © 2025 Entrius

"""Shared fixtures for CLI tests."""

from unittest.mock import patch

import pytest
from click.testing import CliRunner

from prmirror.mirror.orchestrator import MirrorOrchestrator


@pytest.fixture
def cli_root():
    from prmirror.cli.main import cli

    return cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / '.prmirror' / 'config.json'
    with patch('prmirror.cli.main.CONFIG_FILE', path):
        yield path


@pytest.fixture
def wired(config, fake_git, fake_github, config_file):
    """Route CLI commands through an orchestrator backed by the in-memory fakes."""
    captured = {}

    def _load_config(cli_overrides=None, config_file=None):
        for key, value in (cli_overrides or {}).items():
            if value is not None and key != 'repo_path':
                setattr(config, key, value)
        captured['overrides'] = cli_overrides
        return config

    def _orchestrator(cfg):
        return MirrorOrchestrator(cfg, git=fake_git, github=fake_github)

    with (
        patch('prmirror.cli.main.load_config', side_effect=_load_config),
        patch('prmirror.cli.main.MirrorOrchestrator', side_effect=_orchestrator),
    ):
        yield captured
