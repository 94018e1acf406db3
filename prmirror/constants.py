# The MIT License (MIT)
# Copyright © 2025 Entrius

import re
from pathlib import Path

# =============================================================================
# Remotes & branches
# =============================================================================
DEFAULT_UPSTREAM_REMOTE = 'upstream'
DEFAULT_ORIGIN_REMOTE = 'origin'
DEFAULT_MAIN_BRANCH = 'main'

BRANCH_PREFIX = 'pr-'
BASE_BRANCH_PREFIX = 'base-'
TEMP_FETCH_PREFIX = 'temp-pr-'

# =============================================================================
# Mirrored pull request
# =============================================================================
DEFAULT_MARKER_COMMENT = '@violetnspct e2e-test'
DEFAULT_LABEL_COLOR = '0052CC'
ORIGINAL_ISSUE_PREFIX = 'Original issue: '
GITHUB_HOST = 'github.com'

# gh pr view fields needed to mirror a pull request
PR_VIEW_FIELDS = 'commits,title,body,closingIssuesReferences'

# =============================================================================
# Parsing
# =============================================================================
# [scheme://]host/owner/repo/pull/<number>[/files|?query|#fragment]
PR_URL_PATTERN = re.compile(
    r'^(?:[a-zA-Z][a-zA-Z0-9+.-]*://)?'
    r'(?P<host>[^/\s]+)/(?P<owner>[^/\s]+)/(?P<repo>[^/\s]+)'
    r'/pull/(?P<number>[0-9]+)'
    r'(?:[/?#]\S*)?$'
)
# https://host/owner/repo(.git) or git@host:owner/repo(.git)
REMOTE_URL_PATTERN = re.compile(
    r'^(?:[^@/\s]+@|[a-z+]+://(?:[^@/\s]+@)?)(?P<host>[^/:\s]+)(?::\d+)?[:/](?P<repo>[^/\s]+/[^/\s]+?)(?:\.git)?/?$'
)
INVALID_BRANCH_CHARS = re.compile(r'[\s~^:?*\[\\]')

# =============================================================================
# Configuration
# =============================================================================
PRMIRROR_DIR = Path.home() / '.prmirror'
CONFIG_FILE = PRMIRROR_DIR / 'config.json'
ENV_PREFIX = 'PRMIRROR_'
DEFAULT_LOG_BACKUP_COUNT = 5
DEFAULT_LOG_MAX_BYTES = 1_000_000
