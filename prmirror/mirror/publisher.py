# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Opening, verifying and closing the mirrored pull request, and removal of the
session branches afterward.
"""

import logging
from typing import List, Optional

from prmirror.classes import DiffVerification, PullRequestMetadata, PullRequestReference, ReplaySession
from prmirror.config import MirrorConfig
from prmirror.constants import ORIGINAL_ISSUE_PREFIX
from prmirror.mirror.gh_interface import GitHubInterface
from prmirror.mirror.git_interface import GitInterface


def build_pull_request_body(body: str, linked_issue_url: Optional[str] = None) -> str:
    """Original description, plus an `Original issue:` line when one is linked."""
    if linked_issue_url:
        return f'{body}\n\n{ORIGINAL_ISSUE_PREFIX}{linked_issue_url}'
    return body


class PullRequestPublisher:
    """Opens the mirrored pull request on the fork."""

    def __init__(self, github: GitHubInterface, config: MirrorConfig):
        self.github = github
        self.config = config
        self.logger = logging.getLogger(__name__)

    def publish(self, fork_repo: str, metadata: PullRequestMetadata, session: ReplaySession) -> str:
        if not self.github.create_label(fork_repo, session.label, self.config.label_color):
            self.logger.info(f"Label '{session.label}' already exists on {fork_repo}")

        url = self.github.create_pull_request(
            repo=fork_repo,
            base=session.base_branch,
            head=session.feature_branch,
            title=metadata.title,
            body=build_pull_request_body(metadata.body, metadata.linked_issue_url),
            label=session.label,
        )
        self.logger.info(f'Created pull request {url}')
        return url


class DiffVerifier:
    """Compares the diff of the original pull request with the mirrored one."""

    def __init__(self, github: GitHubInterface):
        self.github = github
        self.logger = logging.getLogger(__name__)

    def verify(self, original: PullRequestReference, mirrored_url: str) -> DiffVerification:
        verification = DiffVerification(
            original_diff=self.github.fetch_diff(original),
            mirrored_diff=self.github.fetch_diff(mirrored_url),
        )
        if verification.matches:
            self.logger.info(f'Diff of {mirrored_url} matches {original}')
        else:
            # Mismatch never aborts the session
            self.logger.warning(f'Diff mismatch between {original} and {mirrored_url}')
        return verification


class SessionFinalizer:
    """Closes the mirrored pull request and removes session branches."""

    def __init__(self, git: GitInterface, github: GitHubInterface, config: MirrorConfig):
        self.git = git
        self.github = github
        self.config = config
        self.logger = logging.getLogger(__name__)

    def close(self, url: str) -> None:
        """Close the pull request and post the marker comment that triggers e2e testing."""
        self.github.close_pull_request(url)
        self.github.comment_on_pull_request(url, self.config.marker_comment)

    def _leave_session_branches(self, session: ReplaySession, return_branch: Optional[str]) -> bool:
        """Check out a branch outside the session so every session branch can be deleted.

        Tries `return_branch`, then the configured main branch, then detaches HEAD.
        """
        for candidate in (return_branch, self.config.main_branch):
            if candidate and candidate not in session.branches and self.git.checkout(candidate, force=True):
                return True
        self.logger.warning(
            f"Could not check out '{return_branch or self.config.main_branch}'; detaching HEAD before cleanup"
        )
        return self.git.detach_head()

    def cleanup(self, session: ReplaySession, return_branch: Optional[str] = None) -> List[str]:
        """Delete local and remote session branches. Safe to repeat.

        Returns the local session branches that are still present afterward.
        """
        if not self._leave_session_branches(session, return_branch):
            self.logger.warning('Could not move HEAD off the session branches')

        remaining = []
        for branch in session.branches:
            if self.git.delete_branch(branch):
                continue
            if self.git.branch_exists(branch):
                self.logger.warning(f"Could not delete local branch '{branch}'")
                remaining.append(branch)
            else:
                self.logger.debug(f"Local branch '{branch}' already absent")
        for branch in session.remote_branches:
            if not self.git.delete_remote_branch(self.config.origin_remote, branch):
                self.logger.debug(f"Remote branch '{self.config.origin_remote}/{branch}' already absent")
        return remaining
