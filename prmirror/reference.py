# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Parsing of pull request URLs and derivation of session branch names.
"""

from typing import Optional

from prmirror.classes import PullRequestReference, ReplaySession
from prmirror.constants import (
    BASE_BRANCH_PREFIX,
    BRANCH_PREFIX,
    GITHUB_HOST,
    INVALID_BRANCH_CHARS,
    PR_URL_PATTERN,
    REMOTE_URL_PATTERN,
    TEMP_FETCH_PREFIX,
)
from prmirror.exceptions import InvalidReferenceFormat


def parse_pull_request_url(url: str) -> PullRequestReference:
    """Parse `[scheme://]host/owner/repo/pull/<number>` into a reference.

    Raises InvalidReferenceFormat for anything else.
    """
    match = PR_URL_PATTERN.match((url or '').strip())
    if not match:
        raise InvalidReferenceFormat(
            f"Invalid PR link format: '{url}'. Expected: https://github.com/owner/repo/pull/123"
        )

    number = int(match.group('number'))
    if number <= 0:
        raise InvalidReferenceFormat(f'Invalid pull request number in {url}')

    return PullRequestReference(
        host=match.group('host').lower(),
        repository=f"{match.group('owner')}/{match.group('repo')}",
        number=number,
    )


def validate_branch_name(name: str) -> str:
    """Reject names git would refuse as a branch (subset of git check-ref-format)."""
    name = name.strip()
    if (
        not name
        or name.startswith(('-', '/'))
        or name.endswith(('/', '.', '.lock'))
        or '..' in name
        or '@{' in name
        or INVALID_BRANCH_CHARS.search(name)
    ):
        raise InvalidReferenceFormat(f"Invalid branch name: '{name}'")
    return name


def build_session(reference: PullRequestReference, branch_name: Optional[str] = None) -> ReplaySession:
    """Derive the session branch names for a pull request.

    The feature branch defaults to `pr-<number>`; the base branch is always
    `base-<feature branch>`. The label follows the pull request number even
    when the branch name is overridden.
    """
    feature_branch = validate_branch_name(branch_name) if branch_name else f'{BRANCH_PREFIX}{reference.number}'
    return ReplaySession(
        feature_branch=feature_branch,
        base_branch=f'{BASE_BRANCH_PREFIX}{feature_branch}',
        temp_fetch_ref=f'{TEMP_FETCH_PREFIX}{reference.number}',
        label=f'{BRANCH_PREFIX}{reference.number}',
    )


def parse_remote_repository(remote_url: str) -> str:
    """Extract the `gh --repo` form of a remote URL.

    `owner/repo` for github.com, `host/owner/repo` for any other host, so the
    fork is addressed on the same host as its remote.
    """
    match = REMOTE_URL_PATTERN.match((remote_url or '').strip())
    if not match:
        raise InvalidReferenceFormat(f"Could not determine repository from remote URL '{remote_url}'")
    host = match.group('host').lower()
    if host == GITHUB_HOST:
        return match.group('repo')
    return f"{host}/{match.group('repo')}"
