# The MIT License (MIT)
# Copyright © 2025 Entrius

import json
import logging
import os
import subprocess
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

from prmirror.constants import (
    CONFIG_FILE,
    DEFAULT_LABEL_COLOR,
    DEFAULT_MAIN_BRANCH,
    DEFAULT_MARKER_COMMENT,
    DEFAULT_ORIGIN_REMOTE,
    DEFAULT_UPSTREAM_REMOTE,
    ENV_PREFIX,
)

logger = logging.getLogger(__name__)


@dataclass
class MirrorConfig:
    """Deployment-specific settings for a mirroring run."""

    repo_path: Optional[str] = None  # resolved to the enclosing git toplevel when unset
    upstream_remote: str = DEFAULT_UPSTREAM_REMOTE
    origin_remote: str = DEFAULT_ORIGIN_REMOTE
    main_branch: str = DEFAULT_MAIN_BRANCH
    marker_comment: str = DEFAULT_MARKER_COMMENT
    label_color: str = DEFAULT_LABEL_COLOR

    @classmethod
    def keys(cls) -> list:
        return [f.name for f in fields(cls)]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_config_file(config_file: Path = CONFIG_FILE) -> Dict[str, Any]:
    """
    Load settings from ~/.prmirror/config.json.

    Config file format:
        {
            "upstream_remote": "upstream",
            "origin_remote": "origin",
            "main_branch": "main",
            "marker_comment": "@violetnspct e2e-test",
            "label_color": "0052CC"
        }

    Manage via: prmirror config set <key> <value>

    Returns:
        Dict with the known keys found in the file (empty if missing or invalid)
    """
    if not config_file.exists():
        return {}
    try:
        with open(config_file, 'r') as f:
            data = json.load(f)
    except (json.JSONDecodeError, IOError) as e:
        logger.warning(f'Ignoring unreadable config file {config_file}: {e}')
        return {}
    if not isinstance(data, dict):
        logger.warning(f'Ignoring config file {config_file}: expected a JSON object')
        return {}
    known = set(MirrorConfig.keys())
    return {k: v for k, v in data.items() if k in known and v is not None}


def load_env_overrides(environ: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    """Collect PRMIRROR_<KEY> environment variables."""
    environ = os.environ if environ is None else environ
    overrides = {}
    for key in MirrorConfig.keys():
        value = environ.get(f'{ENV_PREFIX}{key.upper()}')
        if value:
            overrides[key] = value
    return overrides


def find_repo_root(start: Optional[str] = None) -> str:
    """Return the git toplevel enclosing `start`, or `start` itself outside a repository."""
    start = start or os.getcwd()
    try:
        result = subprocess.run(
            ['git', 'rev-parse', '--show-toplevel'],
            cwd=start,
            capture_output=True,
            text=True,
            check=True,
        )
        return result.stdout.strip()
    except (subprocess.CalledProcessError, OSError):
        return os.path.abspath(start)


def load_config(
    cli_overrides: Optional[Dict[str, Any]] = None,
    config_file: Path = CONFIG_FILE,
    environ: Optional[Dict[str, str]] = None,
) -> MirrorConfig:
    """
    Build the effective configuration.

    Priority:
    1. CLI options (highest)
    2. PRMIRROR_* environment variables
    3. ~/.prmirror/config.json
    4. Defaults
    """
    values: Dict[str, Any] = {}
    values.update(load_config_file(config_file))
    values.update(load_env_overrides(environ))
    values.update({k: v for k, v in (cli_overrides or {}).items() if v is not None})

    config = MirrorConfig(**values)
    config.repo_path = find_repo_root(config.repo_path)
    return config


def save_config_value(key: str, value: str, config_file: Path = CONFIG_FILE) -> Optional[Any]:
    """Persist one setting and return its previous value."""
    if key not in MirrorConfig.keys():
        raise KeyError(key)

    config_file.parent.mkdir(parents=True, exist_ok=True)
    data: Dict[str, Any] = {}
    if config_file.exists():
        try:
            data = json.loads(config_file.read_text())
        except json.JSONDecodeError:
            logger.warning('Existing config was invalid, starting fresh')
        if not isinstance(data, dict):
            data = {}

    old_value = data.get(key)
    data[key] = value
    config_file.write_text(json.dumps(data, indent=2))
    return old_value
