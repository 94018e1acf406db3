# The MIT License (MIT)
# Copyright © 2025 Entrius

import logging
from typing import Callable, Optional, Tuple

from prmirror.classes import MirrorResult, PullRequestReference, ReplaySession
from prmirror.config import MirrorConfig
from prmirror.exceptions import CleanupIncomplete, CommandError, ReplayConflict
from prmirror.mirror.gh_interface import GitHubInterface
from prmirror.mirror.git_interface import GitInterface
from prmirror.mirror.publisher import DiffVerifier, PullRequestPublisher, SessionFinalizer
from prmirror.mirror.replayer import BranchReplayer
from prmirror.reference import build_session, parse_pull_request_url, parse_remote_repository


class MirrorOrchestrator:
    """Orchestrates the complete mirroring workflow."""

    def __init__(
        self,
        config: MirrorConfig,
        git: Optional[GitInterface] = None,
        github: Optional[GitHubInterface] = None,
    ):
        self.config = config
        self.git = git or GitInterface(config.repo_path)
        self.github = github or GitHubInterface(config.repo_path)
        self.logger = logging.getLogger(__name__)

        self.publisher = PullRequestPublisher(self.github, config)
        self.verifier = DiffVerifier(self.github)
        self.finalizer = SessionFinalizer(self.git, self.github, config)

        # Callbacks
        self.on_step: Optional[Callable[[str], None]] = None
        self.on_warning: Optional[Callable[[str], None]] = None

    def _step(self, message: str) -> None:
        self.logger.info(message)
        if self.on_step:
            self.on_step(message)

    def _warn(self, message: str) -> None:
        self.logger.warning(message)
        if self.on_warning:
            self.on_warning(message)

    def prepare(self, pr_url: str, branch_name: Optional[str] = None) -> Tuple[PullRequestReference, ReplaySession]:
        """Parse the pull request URL and derive the session names."""
        reference = parse_pull_request_url(pr_url)
        return reference, build_session(reference, branch_name)

    def run(self, pr_url: str, branch_name: Optional[str] = None) -> MirrorResult:
        """Mirror one pull request into the fork.

        Nothing is stashed or created until the pull request is known to have
        commits and the fork repository has been resolved.
        """
        reference, session = self.prepare(pr_url, branch_name)
        self._step(f'Cloning PR #{reference.number} from {reference.repository}...')

        metadata = self.github.fetch_pull_request_metadata(reference)
        self._step(f'Title: {metadata.title}')
        self._step(f'Commits: {metadata.commit_count}')

        fork_repo = parse_remote_repository(self.git.get_remote_url(self.config.origin_remote))
        start_branch = self.git.current_branch()

        self._step('Stashing local changes...')
        stashed = self.git.stash_local_changes()

        replayer = BranchReplayer(self.git, self.config, on_step=self.on_step, return_branch=start_branch)
        try:
            replayed = replayer.replay(reference, metadata, session)

            url = self.publisher.publish(fork_repo, metadata, session)
            self._step(f'Created pull request: {url}')

            self._step('Verifying diff matches original PR...')
            verification = self.verifier.verify(reference, url)
            if verification.matches:
                self._step('✓ Diff verification passed - new PR matches original')
            else:
                self._warn('✗ Warning: Diff mismatch detected! This may indicate cherry-pick issues.')

            self.finalizer.close(url)

            self._step('Cleaning up session branches...')
            remaining = self.finalizer.cleanup(session, return_branch=start_branch)
            if remaining:
                self._warn(f"Could not remove local branches: {', '.join(remaining)}")
        except ReplayConflict:
            if stashed:
                self._step('Restoring local changes...')
                self.git.restore_local_changes()
            raise
        except CommandError:
            if stashed:
                self._warn('Local changes are still stashed; run `git stash pop` after `prmirror cleanup`')
            raise

        if stashed:
            self._step('Restoring local changes...')
            self.git.restore_local_changes()

        self._step(f'Done! Cloned {metadata.commit_count} commit(s).')
        self._step(f'PR created and closed: {url}')
        return MirrorResult(
            pull_request_url=url,
            commit_count=metadata.commit_count,
            diff_matches=verification.matches,
            replayed_commits=replayed,
        )

    def cleanup(self, pr_url: str, branch_name: Optional[str] = None) -> ReplaySession:
        """Remove the session branches of a pull request left behind by an aborted run.

        Raises CleanupIncomplete when a local session branch survives.
        """
        _, session = self.prepare(pr_url, branch_name)
        self._step(f"Removing session branches {', '.join(session.branches)}...")
        remaining = self.finalizer.cleanup(session, return_branch=self.git.current_branch())
        if remaining:
            raise CleanupIncomplete(remaining)
        return session
