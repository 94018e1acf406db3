# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Errors raised while mirroring a pull request.

Everything derives from MirrorError so the CLI can turn any of them into a
diagnostic and a non-zero exit code. A diff mismatch is not an exception: it
is reported as a warning and via MirrorResult.diff_matches.
"""

from typing import List, Optional, Sequence


class MirrorError(Exception):
    """Base class for fatal mirroring errors."""


class InvalidReferenceFormat(MirrorError):
    """A pull request URL, branch name or remote URL could not be parsed."""


class EmptyPullRequest(MirrorError):
    """The pull request has no commits to replay."""

    def __init__(self, reference):
        self.reference = reference
        super().__init__(f'Pull request {reference} has no commits to cherry-pick')


class ReplayConflict(MirrorError):
    """A commit could not be cherry-picked onto the replay branch."""

    def __init__(self, commit: str, position: int, total: int, remaining: Sequence[str] = ()):
        self.commit = commit
        self.position = position
        self.total = total
        self.remaining = list(remaining)
        message = f'Merge conflict while cherry-picking {commit[:12]} ({position}/{total})'
        if self.remaining:
            message = f"{message}; could not remove local branches: {', '.join(self.remaining)}"
        else:
            message = f'{message}; session branches were removed'
        super().__init__(message)


class CleanupIncomplete(MirrorError):
    """Some session branches are still present after cleanup."""

    def __init__(self, remaining: Sequence[str]):
        self.remaining = list(remaining)
        super().__init__(f"Could not remove local branches: {', '.join(self.remaining)}")


class CommandError(MirrorError):
    """An external git or gh command failed."""

    def __init__(self, command: List[str], returncode: Optional[int], stderr: str = ''):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr.strip()
        message = f"Command failed ({returncode}): {' '.join(command)}"
        if self.stderr:
            message = f'{message}\n{self.stderr}'
        super().__init__(message)
