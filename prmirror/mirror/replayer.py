# The MIT License (MIT)
# Copyright © 2025 Entrius

import logging
from enum import Enum
from typing import Callable, List, Optional

from prmirror.classes import PullRequestMetadata, PullRequestReference, ReplaySession
from prmirror.config import MirrorConfig
from prmirror.exceptions import ReplayConflict
from prmirror.mirror.git_interface import GitInterface
from prmirror.mirror.publisher import SessionFinalizer


class ReplayState(Enum):
    """Progress of a branch replay"""

    INIT = 'INIT'
    BASE_CREATED = 'BASE_CREATED'
    FEATURE_CREATED = 'FEATURE_CREATED'
    REPLAYING = 'REPLAYING'
    REPLAYED = 'REPLAYED'
    CONFLICTED = 'CONFLICTED'


class BranchReplayer:
    """Rebuilds a pull request's commits on top of its original base commit.

    The base branch is created at the first parent of the pull request's first
    commit, never at a branch tip, so the replayed diff does not depend on how
    far upstream has moved since the pull request was opened.
    """

    def __init__(
        self,
        git: GitInterface,
        config: MirrorConfig,
        on_step: Optional[Callable[[str], None]] = None,
        return_branch: Optional[str] = None,
    ):
        self.git = git
        self.config = config
        self.on_step = on_step
        # Branch checked out again after a rollback
        self.return_branch = return_branch
        self.logger = logging.getLogger(__name__)

        self.state = ReplayState.INIT
        self.base_commit: Optional[str] = None
        self.replayed: List[str] = []

    def _step(self, message: str) -> None:
        self.logger.info(message)
        if self.on_step:
            self.on_step(message)

    def fetch(self, reference: PullRequestReference, session: ReplaySession) -> None:
        """Fetch upstream history and the pull request head into the temporary ref."""
        self._step('Fetching upstream and PR commits...')
        self.git.fetch(self.config.upstream_remote)
        self.git.fetch(self.config.upstream_remote, f'+pull/{reference.number}/head:{session.temp_fetch_ref}')

    def resolve_base_commit(self, metadata: PullRequestMetadata) -> str:
        """First parent of the first commit in the pull request."""
        return self.git.rev_parse(f'{metadata.first_commit}^')

    def replay(self, reference: PullRequestReference, metadata: PullRequestMetadata, session: ReplaySession) -> List[str]:
        """Create the base and feature branches, cherry-pick every commit and push both.

        Returns the commits applied, in order. On the first failing
        cherry-pick the session branches are rolled back and ReplayConflict
        is raised.
        """
        if self.state != ReplayState.INIT:
            raise RuntimeError(f'Replay already ran (state={self.state.value})')

        self.fetch(reference, session)

        self.base_commit = self.resolve_base_commit(metadata)
        self._step(f'Base commit: {self.base_commit}')

        self._step(f"Creating base branch '{session.base_branch}' at {self.base_commit[:12]}...")
        self.git.checkout_new_branch(session.base_branch, self.base_commit)
        self.git.push(self.config.origin_remote, session.base_branch, force=True)
        self.state = ReplayState.BASE_CREATED

        self._step(f"Creating feature branch '{session.feature_branch}'...")
        self.git.checkout_new_branch(session.feature_branch)
        self.state = ReplayState.FEATURE_CREATED

        self.state = ReplayState.REPLAYING
        total = len(metadata.commit_ids)
        for position, commit in enumerate(metadata.commit_ids, start=1):
            self._step(f'Cherry-picking {commit}...')
            if not self.git.cherry_pick(commit):
                self.state = ReplayState.CONFLICTED
                self._step('Error: Merge conflict detected. Aborting and cleaning up...')
                remaining = self.rollback(session)
                raise ReplayConflict(commit, position, total, remaining)
            self.replayed.append(commit)

        self.git.push(self.config.origin_remote, session.feature_branch, force=True)
        self.state = ReplayState.REPLAYED
        return list(self.replayed)

    def rollback(self, session: ReplaySession) -> List[str]:
        """Abort the in-flight cherry-pick and discard every session branch.

        Returns the local session branches that could not be deleted.
        """
        self.git.abort_cherry_pick()
        return SessionFinalizer(self.git, None, self.config).cleanup(session, self.return_branch)
