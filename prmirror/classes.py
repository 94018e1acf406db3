# The MIT License (MIT)
# Copyright © 2025 Entrius

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from prmirror.constants import GITHUB_HOST


@dataclass(frozen=True)
class PullRequestReference:
    """Pull request identity parsed from its URL"""

    host: str
    repository: str  # owner/repo
    number: int

    @property
    def owner(self) -> str:
        return self.repository.split('/', 1)[0]

    @property
    def name(self) -> str:
        return self.repository.split('/', 1)[1]

    @property
    def gh_repo(self) -> str:
        """Repository in the [HOST/]OWNER/REPO form accepted by `gh --repo`."""
        if self.host == GITHUB_HOST:
            return self.repository
        return f'{self.host}/{self.repository}'

    @property
    def url(self) -> str:
        return f'https://{self.host}/{self.repository}/pull/{self.number}'

    def __str__(self) -> str:
        return f'{self.repository}#{self.number}'


@dataclass(frozen=True)
class PullRequestMetadata:
    """Mirrored fields of the original pull request"""

    title: str
    body: str
    commit_ids: Tuple[str, ...]
    linked_issue_url: Optional[str] = None

    @property
    def first_commit(self) -> str:
        return self.commit_ids[0]

    @property
    def commit_count(self) -> int:
        return len(self.commit_ids)


@dataclass(frozen=True)
class ReplaySession:
    """Names of every ref created for one mirroring run"""

    feature_branch: str
    base_branch: str
    temp_fetch_ref: str
    label: str

    @property
    def branches(self) -> List[str]:
        """Local branches in the order they are deleted."""
        return [self.temp_fetch_ref, self.feature_branch, self.base_branch]

    @property
    def remote_branches(self) -> List[str]:
        return [self.feature_branch, self.base_branch]


@dataclass
class DiffVerification:
    """Textual diffs of the original and the mirrored pull request"""

    original_diff: str
    mirrored_diff: str

    @property
    def matches(self) -> bool:
        return self.original_diff == self.mirrored_diff


@dataclass
class MirrorResult:
    """Outcome of a completed mirroring run"""

    pull_request_url: str
    commit_count: int
    diff_matches: bool
    replayed_commits: List[str] = field(default_factory=list)
